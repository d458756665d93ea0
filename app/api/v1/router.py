"""
API router
"""

from fastapi import APIRouter
from app.api.v1 import auth
from app.api.v1 import jobs
from app.api.v1 import warranty
from app.api.v1 import sms
from app.api.v1 import upload
from app.api.v1 import status
from app.api.v1 import files
from app.api.v1 import health

api_router = APIRouter()

# Dispatcher endpoints (X-Admin-Password)
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(warranty.router, prefix="/warranty", tags=["documents"])
api_router.include_router(sms.router, prefix="/sms", tags=["notifications"])
api_router.include_router(upload.router, prefix="/upload", tags=["documents"])

# Customer-facing endpoints
api_router.include_router(status.router, prefix="/t", tags=["customer"])
api_router.include_router(files.router, prefix="/files", tags=["documents"])

api_router.include_router(health.router, prefix="/health", tags=["service"])
