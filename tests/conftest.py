"""
Shared fixtures: job records, an in-memory job store and stand-in
collaborators for the job service.
"""

from typing import Any, Dict, List, Optional

import pytest

from app.core.config import settings
from app.db.job_store import new_job_id, new_token
from app.schemas.job import JobRecord
from app.services.file_store import FileStore
from app.services.job_service import JobService
from app.services.lifecycle import apply_changes, refresh_derived, utcnow
from app.services.notifications import SendResult

ADMIN_PASSWORD = "roof-admin-test"


class InMemoryJobStore:
    """Dict-backed store with the same merge-then-recompute semantics as JobStore"""

    def __init__(self):
        self.jobs: Dict[str, JobRecord] = {}

    async def list(self) -> List[JobRecord]:
        return sorted(self.jobs.values(), key=lambda job: job.created_at, reverse=True)

    async def get_by_id(self, job_id: str) -> Optional[JobRecord]:
        return self.jobs.get(job_id)

    async def get_by_token(self, token: str) -> Optional[JobRecord]:
        return next((job for job in self.jobs.values() if job.token == token), None)

    async def create(self, fields: Dict[str, Any]) -> JobRecord:
        now = utcnow()
        record = refresh_derived(JobRecord.model_validate({
            **fields,
            "job_id": new_job_id(),
            "token": new_token(),
            "created_at": now,
            "updated_at": now,
        }))
        self.jobs[record.job_id] = record
        return record

    async def update(self, job_id: str, changes: Dict[str, Any]) -> Optional[JobRecord]:
        current = self.jobs.get(job_id)
        if current is None:
            return None
        return await self.save(apply_changes(current, changes))

    async def save(self, record: JobRecord) -> JobRecord:
        if record.job_id not in self.jobs:
            raise ValueError(f"Job {record.job_id} not found")
        record = refresh_derived(record).model_copy(update={"updated_at": utcnow()})
        self.jobs[record.job_id] = record
        return record


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def is_configured(self) -> bool:
        return True

    async def send(self, trigger: str, job: JobRecord) -> SendResult:
        self.sent.append((trigger, job.job_id))
        if job.cancelled:
            return SendResult(success=False, error="Job is cancelled")
        return SendResult(success=True, message_id=f"SM{len(self.sent)}")


class StaticWarrantyGenerator:
    def __init__(self):
        self.requests = []

    def generate_warranty(self, data) -> bytes:
        self.requests.append(data)
        return b"%PDF-1.4 test warranty"


class BrokenWarrantyGenerator:
    def generate_warranty(self, data) -> bytes:
        raise RuntimeError("renderer unavailable")


@pytest.fixture
def make_job():
    def _make(**fields) -> JobRecord:
        values = {
            "job_id": "EMR-TEST00000001",
            "token": "customer-token",
            "customer_name": "Jane Doe",
            "customer_phone": "613-555-0142",
            "address": "12 Maple Street",
            "city": "Ottawa",
            "postal_code": "K1A 0B1",
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        values.update(fields)
        return refresh_derived(JobRecord.model_validate(values))
    return _make


@pytest.fixture
def job_store():
    return InMemoryJobStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def warranty_generator():
    return StaticWarrantyGenerator()


@pytest.fixture
def file_store(tmp_path):
    return FileStore(bucket="local", prefix="jobs", local_root=str(tmp_path / "storage"))


@pytest.fixture
def job_service(notifier, warranty_generator, file_store):
    return JobService(notifier=notifier, documents=warranty_generator, files=file_store)


@pytest.fixture
def admin_password(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    return ADMIN_PASSWORD


@pytest.fixture
def broken_generator():
    return BrokenWarrantyGenerator()
