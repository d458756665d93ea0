"""
Dispatcher job endpoints
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.deps import get_job_service, get_job_store
from app.core.security import verify_admin_password
from app.db.job_store import JobStore
from app.schemas.job import (
    CompleteInstallationRequest,
    DispatcherJobView,
    JobCreate,
    JobListResponse,
    JobUpdate,
    ToggleRequest,
    TransitionResponse,
)
from app.services.job_service import JobService, TransitionResult
from app.services.projections import dashboard_summary, dispatcher_view

router = APIRouter(dependencies=[Depends(verify_admin_password)])


def _not_found(job_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Job {job_id} not found")


def _transition_response(result: TransitionResult) -> TransitionResponse:
    return TransitionResponse(
        job=dispatcher_view(result.job),
        notification_trigger=result.notification_trigger,
        warranty_error=result.warranty_error,
    )


@router.get("", response_model=JobListResponse)
async def list_jobs(
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    """All jobs, newest first, with dashboard counters."""
    jobs = await job_service.list_jobs(store)
    return JobListResponse(
        jobs=[dispatcher_view(job) for job in jobs],
        summary=dashboard_summary(jobs),
    )


@router.post("", response_model=DispatcherJobView, status_code=201)
async def create_job(
    data: JobCreate,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    job = await job_service.create_job(data, store)
    return dispatcher_view(job)


@router.get("/{job_id}", response_model=DispatcherJobView)
async def get_job(
    job_id: str,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    job = await job_service.get_job(job_id, store)
    if job is None:
        raise _not_found(job_id)
    return dispatcher_view(job)


@router.put("/{job_id}", response_model=DispatcherJobView)
async def update_job(
    job_id: str,
    data: JobUpdate,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    try:
        job = await job_service.update_job(job_id, data, store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if job is None:
        raise _not_found(job_id)
    return dispatcher_view(job)


@router.post("/{job_id}/toggle", response_model=TransitionResponse)
async def toggle_step(
    job_id: str,
    data: ToggleRequest,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    """
    Turn a pipeline step on, or roll it back (with every later step) if it
    is already on.
    """
    try:
        result = await job_service.toggle_step(job_id, data.step, store, scheduled_date=data.scheduled_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise _not_found(job_id)
    return _transition_response(result)


@router.post("/{job_id}/complete-installation", response_model=TransitionResponse)
async def complete_installation(
    job_id: str,
    data: CompleteInstallationRequest,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    try:
        result = await job_service.complete_installation(job_id, data.payment_method, store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise _not_found(job_id)
    return _transition_response(result)


@router.post("/{job_id}/final-payment", response_model=TransitionResponse)
async def receive_final_payment(
    job_id: str,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    """
    Record final payment and issue the warranty. A warranty failure is
    reported in ``warranty_error``; the payment stays recorded.
    """
    try:
        result = await job_service.receive_final_payment(job_id, store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise _not_found(job_id)
    return _transition_response(result)


@router.post("/{job_id}/cancel", response_model=DispatcherJobView)
async def cancel_job(
    job_id: str,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    job = await job_service.set_cancelled(job_id, True, store)
    if job is None:
        raise _not_found(job_id)
    return dispatcher_view(job)


@router.post("/{job_id}/reinstate", response_model=DispatcherJobView)
async def reinstate_job(
    job_id: str,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    job = await job_service.set_cancelled(job_id, False, store)
    if job is None:
        raise _not_found(job_id)
    return dispatcher_view(job)
