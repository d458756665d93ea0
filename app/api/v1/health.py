"""
Health check endpoint
"""

from fastapi import APIRouter
from app.core.config import settings
from app.services.notifications import NotificationService

router = APIRouter()


@router.get("")
async def health():
    """
    Health check endpoint.
    """
    notifier = NotificationService()

    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database_configured": bool(settings.DATABASE_URL),
        "sms_configured": notifier.is_configured(),
        "file_store": "local" if settings.FILE_STORE_BUCKET.lower() == "local" else "s3",
        "admin_password_configured": bool(settings.ADMIN_PASSWORD),
    }
