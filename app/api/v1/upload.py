"""
Contract and photo uploads
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.api.v1.deps import get_job_service, get_job_store
from app.core.exceptions import CollaboratorError
from app.core.security import verify_admin_password
from app.db.job_store import JobStore
from app.schemas.job import UploadResponse
from app.services.job_service import JobService
from app.services.projections import dispatcher_view

router = APIRouter(dependencies=[Depends(verify_admin_password)])


@router.post("", response_model=UploadResponse)
async def upload_file(
    job_id: str = Form(...),
    type: str = Form(..., description="contract, delivery, install or completed"),
    file: UploadFile = File(...),
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        result = await job_service.upload_file(
            job_id,
            type,
            file.filename or "upload",
            data,
            file.content_type or "application/octet-stream",
            store,
        )
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

    job, stored, file_name = result
    return UploadResponse(file_id=stored.file_id, link=stored.link, file_name=file_name, job=dispatcher_view(job))
