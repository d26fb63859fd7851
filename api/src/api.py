import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from .dependencies import get_settings
from .settings import Settings

logger = logging.getLogger("api")

router = APIRouter(tags=["health"])

# Health check endpoint
@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint"""
    logger.info("Health check endpoint called")
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
    }
