"""API v1 router aggregation."""

from fastapi import APIRouter

from portfolio.api.v1.endpoints import health, initiatives, workflows

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
api_router.include_router(initiatives.router, prefix="/initiatives", tags=["initiatives"])
