"""
Dispatcher authentication

The dispatcher UI shares a single password, sent on every request in the
X-Admin-Password header.
"""

import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from app.core.config import settings

logger = logging.getLogger(__name__)

admin_password_header = APIKeyHeader(name="X-Admin-Password", auto_error=False)


def check_admin_password(password: Optional[str]) -> bool:
    if not settings.ADMIN_PASSWORD or not password:
        return False
    return secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())


async def verify_admin_password(password: Optional[str] = Security(admin_password_header)) -> None:
    """Dependency for dispatcher-only routes"""
    if not settings.ADMIN_PASSWORD:
        logger.error("ADMIN_PASSWORD is not configured; rejecting dispatcher request")
        raise HTTPException(status_code=503, detail="Dispatcher access is not configured")
    if not check_admin_password(password):
        raise HTTPException(status_code=401, detail="Invalid password")
