"""
Send a templated SMS to a job's customer
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.deps import get_job_service, get_job_store
from app.core.security import verify_admin_password
from app.db.job_store import JobStore
from app.schemas.job import NotificationRequest, NotificationResponse
from app.services.job_service import JobService

router = APIRouter(dependencies=[Depends(verify_admin_password)])


@router.post("", response_model=NotificationResponse)
async def send_sms(
    data: NotificationRequest,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    """
    Delivery problems (bad number, SMS not configured, provider error) come
    back as ``success: false`` rather than an error status.
    """
    result = await job_service.send_notification(data.job_id, data.trigger, store)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Job {data.job_id} not found")
    return NotificationResponse(success=result.success, message_id=result.message_id, error=result.error)
