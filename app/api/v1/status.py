"""
Customer status endpoint (no login; the token is the credential)
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.deps import get_job_service, get_job_store
from app.db.job_store import JobStore
from app.schemas.job import CustomerStatusResponse
from app.services.job_service import JobService
from app.services.projections import customer_status

router = APIRouter()


@router.get("/{token}", response_model=CustomerStatusResponse)
async def get_status(
    token: str,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    """
    Customer view of a job. Cancelled jobs return only the cancellation
    flag and company contact details.
    """
    job = await job_service.get_job_by_token(token, store)
    if job is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return customer_status(job)
