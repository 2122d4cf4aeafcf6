from pydantic import BaseModel


class ProjectionResponse(BaseModel):
    id: str
    player_id: str
    player_name: str
    player_image_url: str | None
    stat_type: str
    line_score: float
    pick: str | None = None


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class ProjectionPageResponse(BaseModel):
    projections: list[ProjectionResponse]
    pagination: PaginationResponse
