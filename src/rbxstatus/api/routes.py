"""API route registration."""

from fastapi import APIRouter

from rbxstatus.api.handlers.health import router as health_router
from rbxstatus.api.handlers.status import router as status_router

# Main API router that aggregates all endpoint routers
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(status_router, tags=["status"])
