"""
Shared route dependencies
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.db.job_store import JobStore
from app.services.job_service import JobService


def get_job_service() -> JobService:
    """Dependency to get job service instance"""
    return JobService()


def get_job_store(db: AsyncSession = Depends(get_db)) -> JobStore:
    """Dependency to get a job store bound to the request session"""
    return JobStore(db)
