"""Top-level API router."""

from fastapi import APIRouter

from app.api.routes.costs import router as costs_router
from app.api.routes.health import router as health_router
from app.api.routes.line_items import router as line_items_router
from app.api.routes.projects import router as projects_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(projects_router)
api_router.include_router(line_items_router)
api_router.include_router(costs_router)
