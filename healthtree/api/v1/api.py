"""API routes for the FastAPI application."""

from fastapi import APIRouter

from healthtree.api.v1.endpoints import health
from healthtree.core.config import settings

api_router = APIRouter()
api_router.include_router(health.router, prefix=settings.HEALTH_ROUTE_PREFIX, tags=["health"])
