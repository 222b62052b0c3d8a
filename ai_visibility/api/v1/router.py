from fastapi import APIRouter

from ai_visibility.api.v1.projects import router as projects_router
from ai_visibility.api.v1.settings import router as settings_router
from ai_visibility.api.v1.visibility import router as visibility_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(projects_router)
api_v1_router.include_router(settings_router)
api_v1_router.include_router(visibility_router)
