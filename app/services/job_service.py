"""
Job service for dispatcher and customer operations
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from app.core.exceptions import CollaboratorError, PreconditionError
from app.db.job_store import JobStore
from app.schemas.job import JobCreate, JobRecord, JobUpdate, PaymentMethod
from app.services import lifecycle
from app.services.file_store import FileStore, StoredFile, is_image
from app.services.lifecycle import StepKey
from app.services.notifications import NotificationService, SendResult, TRANSITION_TRIGGERS
from app.services.warranty import WarrantyData, WarrantyGenerator, warranty_file_name

logger = logging.getLogger(__name__)

UPLOAD_TYPES = ("contract", "delivery", "install", "completed")


@dataclass
class TransitionResult:
    job: JobRecord
    notification_trigger: Optional[str] = None
    warranty_error: Optional[str] = None


class JobService:
    """
    Service for job operations.

    Each operation loads the job, applies a lifecycle transition or edit,
    persists the full record, then talks to collaborators. A collaborator
    failure never undoes a write that already happened.
    """

    def __init__(
        self,
        notifier: Optional[NotificationService] = None,
        documents: Optional[WarrantyGenerator] = None,
        files: Optional[FileStore] = None,
    ):
        self.notifier = notifier or NotificationService()
        self.documents = documents or WarrantyGenerator()
        self.files = files or FileStore()

    async def list_jobs(self, store: JobStore) -> List[JobRecord]:
        return await store.list()

    async def get_job(self, job_id: str, store: JobStore) -> Optional[JobRecord]:
        return await store.get_by_id(job_id)

    async def get_job_by_token(self, token: str, store: JobStore) -> Optional[JobRecord]:
        return await store.get_by_token(token)

    async def create_job(self, data: JobCreate, store: JobStore) -> JobRecord:
        return await store.create(data.model_dump())

    async def update_job(self, job_id: str, data: JobUpdate, store: JobStore) -> Optional[JobRecord]:
        """Free-field edit; only fields present in the request are applied."""
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await store.get_by_id(job_id)
        job = await store.update(job_id, changes)
        if job:
            logger.info(f"Updated job {job_id}: {', '.join(sorted(changes))}")
        return job

    async def set_cancelled(self, job_id: str, cancelled: bool, store: JobStore) -> Optional[JobRecord]:
        job = await store.update(job_id, {"cancelled": cancelled})
        if job:
            logger.info(f"Job {job_id} {'cancelled' if cancelled else 'reinstated'}")
        return job

    async def toggle_step(
        self,
        job_id: str,
        step_key: str,
        store: JobStore,
        scheduled_date: Optional[date] = None,
    ) -> Optional[TransitionResult]:
        """
        Toggle a pipeline step on the stored job.

        Turning final payment on runs the final-payment operation; turning
        installation complete on requires a payment method and is rejected
        here.
        """
        step = lifecycle.get_step(step_key)
        job = await store.get_by_id(job_id)
        if job is None:
            return None

        turning_on = not step.is_set(job)
        if turning_on and step.key == StepKey.FINAL_PAYMENT:
            return await self.receive_final_payment(job_id, store)
        if turning_on and step.key == StepKey.INSTALL_COMPLETED:
            raise PreconditionError("A payment method is required to complete installation")

        saved = await store.save(lifecycle.toggle(job, step.key, scheduled_date=scheduled_date))
        logger.info(
            f"Job {job_id}: {step.key.value} {'on' if turning_on else 'rolled back'}, "
            f"status {saved.status.value}"
        )
        return TransitionResult(
            job=saved,
            notification_trigger=TRANSITION_TRIGGERS[step.key] if turning_on else None,
        )

    async def complete_installation(
        self, job_id: str, method: PaymentMethod, store: JobStore
    ) -> Optional[TransitionResult]:
        job = await store.get_by_id(job_id)
        if job is None:
            return None
        saved = await store.save(lifecycle.complete_installation(job, method))
        logger.info(f"Job {job_id}: installation completed, payment method {saved.payment_method.value}")
        return TransitionResult(
            job=saved,
            notification_trigger=TRANSITION_TRIGGERS[StepKey.INSTALL_COMPLETED],
        )

    async def receive_final_payment(self, job_id: str, store: JobStore) -> Optional[TransitionResult]:
        """
        Record final payment, then issue the warranty.

        The payment is persisted first. If the warranty cannot be produced the
        payment stays recorded and the error is returned for a manual retry.
        """
        job = await store.get_by_id(job_id)
        if job is None:
            return None
        if job.final_payment:
            raise PreconditionError("Final payment is already recorded")

        paid = await store.save(lifecycle.toggle(job, StepKey.FINAL_PAYMENT))
        logger.info(f"Job {job_id}: final payment received")

        try:
            paid, _ = await self._issue_warranty(paid, store)
        except CollaboratorError as e:
            logger.error(f"Warranty generation failed for job {job_id}: {e}")
            return TransitionResult(job=paid, warranty_error=str(e))

        return TransitionResult(
            job=paid,
            notification_trigger=TRANSITION_TRIGGERS[StepKey.FINAL_PAYMENT],
        )

    async def generate_warranty(
        self, job_id: str, store: JobStore
    ) -> Optional[Tuple[JobRecord, StoredFile]]:
        """Generate (or regenerate) the warranty for a paid job."""
        job = await store.get_by_id(job_id)
        if job is None:
            return None
        if not job.final_payment:
            raise PreconditionError("Final payment not received")
        return await self._issue_warranty(job, store)

    async def _issue_warranty(self, job: JobRecord, store: JobStore) -> Tuple[JobRecord, StoredFile]:
        data = WarrantyData(
            customer_name=job.customer_name,
            address=job.address,
            city=job.city,
            postal_code=job.postal_code,
            installation_date=job.install_completed_date or job.install_date or date.today(),
        )
        try:
            job, folder = await self._ensure_folder(job, store)
            pdf_bytes = await asyncio.to_thread(self.documents.generate_warranty, data)
            stored = await asyncio.to_thread(
                self.files.upload,
                folder,
                warranty_file_name(job.customer_name),
                pdf_bytes,
                "application/pdf",
            )
        except CollaboratorError:
            raise
        except Exception as e:
            raise CollaboratorError(f"Warranty generation failed: {e}") from e

        updated = await store.update(job.job_id, {
            "warranty_file_id": stored.file_id,
            "warranty_link": stored.link,
            "warranty_visible": True,
            "warranty_generated_date": lifecycle.utcnow(),
        })
        logger.info(f"Warranty {stored.file_id} issued for job {job.job_id}")
        return updated, stored

    async def _ensure_folder(self, job: JobRecord, store: JobStore) -> Tuple[JobRecord, str]:
        if job.drive_folder_id:
            return job, job.drive_folder_id
        folder = await asyncio.to_thread(
            self.files.create_folder, f"{job.customer_name} - {job.address}"
        )
        job = await store.update(job.job_id, {"drive_folder_id": folder})
        return job, folder

    async def send_notification(self, job_id: str, trigger: str, store: JobStore) -> Optional[SendResult]:
        job = await store.get_by_id(job_id)
        if job is None:
            return None
        return await self.notifier.send(trigger, job)

    async def upload_file(
        self,
        job_id: str,
        file_type: str,
        original_name: str,
        data: bytes,
        mime_type: str,
        store: JobStore,
    ) -> Optional[Tuple[JobRecord, StoredFile, str]]:
        """Store a contract or photo for a job and link it on the record."""
        if file_type not in UPLOAD_TYPES:
            raise ValueError(f"Unknown file type '{file_type}'. Expected one of: {', '.join(UPLOAD_TYPES)}")
        job = await store.get_by_id(job_id)
        if job is None:
            return None

        extension = original_name.rsplit(".", 1)[-1] if "." in original_name else "jpg"
        if file_type != "contract" and not is_image(f"x.{extension}"):
            raise ValueError("Photos must be image files")

        timestamp = int(time.time() * 1000)
        file_name = {
            "contract": f"Contract_{'_'.join(job.customer_name.split())}_{timestamp}.{extension}",
            "delivery": f"Delivery_Photo_{timestamp}.{extension}",
            "install": f"Installation_Photo_{timestamp}.{extension}",
            "completed": f"Completed_Roof_{timestamp}.{extension}",
        }[file_type]

        job, folder = await self._ensure_folder(job, store)
        stored = await asyncio.to_thread(
            self.files.upload, folder, file_name, data, mime_type, file_type == "contract"
        )

        if file_type == "contract":
            changes = {"contract_file_id": stored.file_id, "contract_file_name": file_name}
        else:
            changes = {f"{file_type}_photo": stored.link}
        job = await store.update(job_id, changes)
        logger.info(f"Uploaded {file_type} file {stored.file_id} for job {job_id}")
        return job, stored, file_name
