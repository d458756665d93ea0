"""
Manual warranty generation (retry after a failed final-payment run)
"""

from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.deps import get_job_service, get_job_store
from app.core.exceptions import CollaboratorError
from app.core.security import verify_admin_password
from app.db.job_store import JobStore
from app.schemas.job import WarrantyRequest, WarrantyResponse
from app.services.job_service import JobService

router = APIRouter(dependencies=[Depends(verify_admin_password)])


@router.post("", response_model=WarrantyResponse)
async def generate_warranty(
    data: WarrantyRequest,
    job_service: JobService = Depends(get_job_service),
    store: JobStore = Depends(get_job_store),
):
    try:
        result = await job_service.generate_warranty(data.job_id, store)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail=f"Job {data.job_id} not found")

    _, stored = result
    return WarrantyResponse(
        file_id=stored.file_id,
        view_link=stored.link,
        download_link=job_service.files.download_link(stored.file_id),
    )
