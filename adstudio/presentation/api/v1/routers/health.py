"""
Health check API endpoints
"""

from fastapi import APIRouter, Request
from adstudio.core.monitoring import health_checker, SystemHealth

router = APIRouter(tags=["health"])


@router.get("/health", response_model=SystemHealth)
async def health_check(request: Request):
    """
    Health check endpoint that returns process status and cache metrics
    """
    cache = getattr(request.app.state, "product_cache", None)
    cache_stats = cache.stats().model_dump(mode="json") if cache is not None else None
    return health_checker.get_system_health(cache_stats)


@router.get("/")
async def root():
    """
    Root endpoint
    """
    return {"message": "AdStudio Media API is running", "status": "healthy"}
