"""Main API router."""

from fastapi import APIRouter

from api.routes import auth, health, permissions, pool_stats

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(permissions.router, tags=["permissions"])
api_router.include_router(pool_stats.router, tags=["admin"])
