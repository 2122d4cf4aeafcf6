from fastapi import APIRouter

from propduel.api.v1.custom_bets import router as custom_bets_router
from propduel.api.v1.leaderboard import router as leaderboard_router
from propduel.api.v1.picks import router as picks_router
from propduel.api.v1.projections import router as projections_router
from propduel.api.v1.system import router as system_router
from propduel.api.v1.users import router as users_router

api_router = APIRouter()
api_router.include_router(users_router)
api_router.include_router(custom_bets_router)
api_router.include_router(picks_router)
api_router.include_router(leaderboard_router)
api_router.include_router(projections_router)
api_router.include_router(system_router)
