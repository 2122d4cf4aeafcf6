from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import URL, make_url


class Settings(BaseSettings):
    app_name: str = "PropDuel"
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/propduel"
    public_base_url: str = "http://localhost:8000"
    create_tables_on_startup: bool = False
    log_level: str = "INFO"

    projections_url: str = (
        "https://api.prizepicks.com/projections?league_id=9&in_game=true&single_stat=true&game_mode=pickem"
    )
    projections_cache_seconds: int = 300
    projections_timeout_seconds: float = 20.0

    leaderboard_default_limit: int = 50

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()


def get_database_url() -> str:
    return settings.database_url


def get_database_identity() -> tuple[str, str]:
    parsed: URL = make_url(get_database_url())
    return parsed.host or "<unknown>", parsed.database or "<unknown>"


def share_url_for(bet_id: object) -> str:
    return f"{settings.public_base_url.rstrip('/')}/custom-bets/{bet_id}"
