"""
Stored file links

Links saved on job records point here; local files are served directly and
S3 objects are redirected to a short-lived presigned URL. Contracts live in a
dispatcher-only directory and need the admin password.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.responses import FileResponse, RedirectResponse

from app.api.v1.deps import get_job_service
from app.core.exceptions import CollaboratorError
from app.core.security import admin_password_header, check_admin_password
from app.services.file_store import is_private
from app.services.job_service import JobService

router = APIRouter()


@router.get("/{file_id:path}")
async def get_file(
    file_id: str,
    download: bool = False,
    password: Optional[str] = Security(admin_password_header),
    job_service: JobService = Depends(get_job_service),
):
    if is_private(file_id) and not check_admin_password(password):
        raise HTTPException(status_code=401, detail="Invalid password")

    files = job_service.files
    if files.is_local:
        path = files.local_path(file_id)
        if path is None:
            raise HTTPException(status_code=404, detail="File not found")
        if download:
            return FileResponse(path, filename=path.name)
        return FileResponse(path)

    try:
        url = files.presigned_url(file_id, download=download)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return RedirectResponse(url, status_code=307)
