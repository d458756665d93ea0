"""
File storage for job documents and photos

Stores objects in S3 under one prefix ("folder") per job. When
FILE_STORE_BUCKET is "local" the same layout is written to
LOCAL_STORAGE_PATH and served by the app under /files.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import uuid4

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import CollaboratorError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "heic"}
PRIVATE_DIR = "private"


@dataclass(frozen=True)
class StoredFile:
    file_id: str
    link: str


def sanitize_name(value: str) -> str:
    """Strip characters that are unsafe in object keys and folder names."""
    cleaned = re.sub(r'[<>:"/\\|?*]+', "", value).strip()
    cleaned = re.sub(r"\s+", "_", cleaned)
    return cleaned or "unnamed"


class FileStore:
    """S3-backed (or local directory) file store"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        prefix: Optional[str] = None,
        local_root: Optional[str] = None,
        client: Optional[BaseClient] = None,
    ):
        self.bucket = bucket or settings.FILE_STORE_BUCKET
        self.prefix = (prefix if prefix is not None else settings.FILE_STORE_PREFIX).strip("/")
        self.local_root = Path(local_root or settings.LOCAL_STORAGE_PATH)
        self._client = client

    @property
    def is_local(self) -> bool:
        return self.bucket.lower() == "local"

    def _s3(self) -> BaseClient:
        if self._client is None:
            client_kwargs = {"config": Config(signature_version="s3v4")}
            if settings.AWS_REGION:
                client_kwargs["region_name"] = settings.AWS_REGION
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            self._client = boto3.client("s3", **client_kwargs)
        return self._client

    def create_folder(self, name: str) -> str:
        """Reserve a folder for a job and return its reference."""
        folder = f"{sanitize_name(name)}-{uuid4().hex[:8]}"
        if self.prefix:
            folder = f"{self.prefix}/{folder}"
        if self.is_local:
            try:
                (self.local_root / folder).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Could not create folder {folder}: {e}")
                raise CollaboratorError(f"File store folder creation failed: {e}")
        logger.info(f"Created file folder {folder}")
        return folder

    def upload(
        self,
        folder: str,
        file_name: str,
        data: bytes,
        mime_type: str,
        private: bool = False,
    ) -> StoredFile:
        """
        Store ``data`` in ``folder`` and return its id and view link.

        Private files go under the folder's dispatcher-only subdirectory and
        are only served with the admin password.
        """
        if private:
            folder = f"{folder.strip('/')}/{PRIVATE_DIR}"
        key = f"{folder.strip('/')}/{sanitize_name(file_name)}"
        if self.is_local:
            target = self.local_root / key
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
            except OSError as e:
                logger.error(f"Upload of {key} failed: {e}")
                raise CollaboratorError(f"File upload failed: {e}")
        else:
            try:
                self._s3().put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=data,
                    ContentType=mime_type or "application/octet-stream",
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"Upload of {key} failed: {e}")
                raise CollaboratorError(f"File upload failed: {e}")
        logger.info(f"Stored {key} ({len(data)} bytes)")
        return StoredFile(file_id=key, link=self.view_link(key))

    def view_link(self, file_id: str) -> str:
        """Stable app URL for a stored file; resolved by the /files route."""
        return f"{settings.APP_URL.rstrip('/')}/files/{file_id}"

    def download_link(self, file_id: str) -> str:
        return f"{self.view_link(file_id)}?download=1"

    def local_path(self, file_id: str) -> Optional[Path]:
        """Path of a locally stored file, or None if it does not exist."""
        root = self.local_root.resolve()
        target = (root / file_id).resolve()
        if root not in target.parents or not target.is_file():
            return None
        return target

    def presigned_url(self, file_id: str, download: bool = False) -> str:
        """Short-lived S3 URL for a stored object."""
        params = {"Bucket": self.bucket, "Key": file_id}
        if download:
            file_name = file_id.rsplit("/", 1)[-1]
            params["ResponseContentDisposition"] = f'attachment; filename="{file_name}"'
        try:
            return self._s3().generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=settings.FILE_LINK_EXPIRY_SECONDS,
            )
        except (BotoCoreError, ClientError) as e:
            raise CollaboratorError(f"Could not create link for {file_id}: {e}")


def is_image(file_name: str) -> bool:
    return file_name.rsplit(".", 1)[-1].lower() in IMAGE_EXTENSIONS


def is_private(file_id: str) -> bool:
    """True for keys inside a dispatcher-only directory (or not normalized)."""
    parts = file_id.strip("/").split("/")
    if any(part in ("", ".", "..") for part in parts):
        return True
    return PRIVATE_DIR in parts[:-1]
