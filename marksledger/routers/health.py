"""Health check endpoints."""
from fastapi import APIRouter
import logging

from ..core.config import settings
from ..core.database import health_check_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
async def health_check():
    """Service and database health"""
    db_ok = await health_check_db()
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": "marksledger",
        "version": settings.app_version,
        "database": "ok" if db_ok else "unavailable"
    }
