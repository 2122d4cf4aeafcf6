import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from propduel.api.v1.router import api_router
from propduel.config import get_database_identity, settings
from propduel.data_providers.prizepicks import PrizePicksClient
from propduel.database import create_tables
from propduel.errors import DomainError
from propduel.services.projection_cache import ProjectionCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    db_host, db_name = get_database_identity()
    logger.info("api startup: database_host=%s database_name=%s", db_host, db_name)
    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("database tables ensured")
    app.state.projection_cache = ProjectionCache(ttl_seconds=settings.projections_cache_seconds)
    app.state.projection_client = PrizePicksClient()
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("upstream failure: path=%s error=%s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error: path=%s", request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
