from fastapi import APIRouter

from app.api.v1.action_log import router as action_log_router
from app.api.v1.activity import router as activity_router
from app.api.v1.health import router as health_router
from app.api.v1.settings import router as settings_router

v1_router = APIRouter()

v1_router.include_router(health_router, tags=["Health"])
v1_router.include_router(activity_router, tags=["Activity"])
v1_router.include_router(settings_router, tags=["Settings"])
v1_router.include_router(action_log_router, tags=["Action Log"])
