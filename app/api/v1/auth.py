"""
Dispatcher login check
"""

from fastapi import APIRouter, HTTPException

from app.core.security import check_admin_password
from app.schemas.job import AuthRequest

router = APIRouter()


@router.post("")
async def authenticate(data: AuthRequest):
    """Validate the dispatcher password before the UI stores it."""
    if not check_admin_password(data.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    return {"success": True}
