"""
Job record store

Loads and saves whole JobRecord snapshots in the ``jobs`` table. Every write
rewrites the full row; there is no version column, so concurrent edits of
the same job resolve as last write wins.
"""

import logging
import secrets
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.job import Job
from app.schemas.job import JobRecord
from app.services.lifecycle import apply_changes, refresh_derived, utcnow

logger = logging.getLogger(__name__)

JOB_ID_PREFIX = "EMR-"


def new_job_id() -> str:
    return f"{JOB_ID_PREFIX}{uuid4().hex[:12].upper()}"


def new_token() -> str:
    """Unguessable customer token (~128 bits)"""
    return secrets.token_urlsafe(16)


def _to_row_values(record: JobRecord) -> Dict[str, Any]:
    values = record.model_dump()
    return {
        name: value.value if isinstance(value, Enum) else value
        for name, value in values.items()
    }


def _to_record(row: Job) -> JobRecord:
    return JobRecord.model_validate(row)


class JobStore:
    """Record store for jobs backed by an async SQLAlchemy session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, job_id: str) -> Optional[Job]:
        result = await self.db.execute(select(Job).where(Job.job_id == job_id))
        return result.scalar_one_or_none()

    async def list(self) -> List[JobRecord]:
        result = await self.db.execute(select(Job).order_by(Job.created_at.desc()))
        return [_to_record(row) for row in result.scalars().all()]

    async def get_by_id(self, job_id: str) -> Optional[JobRecord]:
        row = await self._get_row(job_id)
        return _to_record(row) if row else None

    async def get_by_token(self, token: str) -> Optional[JobRecord]:
        if not token:
            return None
        result = await self.db.execute(select(Job).where(Job.token == token))
        row = result.scalar_one_or_none()
        return _to_record(row) if row else None

    async def create(self, fields: Dict[str, Any]) -> JobRecord:
        """Insert a new job with a fresh id and token; flags start off."""
        now = utcnow()
        record = JobRecord.model_validate({
            **fields,
            "job_id": new_job_id(),
            "token": new_token(),
            "created_at": now,
            "updated_at": now,
        })
        record = refresh_derived(record)

        self.db.add(Job(**_to_row_values(record)))
        await self.db.commit()
        logger.info(f"Created job {record.job_id} with status {record.status.value}")
        return record

    async def update(self, job_id: str, changes: Dict[str, Any]) -> Optional[JobRecord]:
        """Merge ``changes`` into the stored job, recompute and save it."""
        current = await self.get_by_id(job_id)
        if current is None:
            return None
        return await self.save(apply_changes(current, changes))

    async def save(self, record: JobRecord) -> JobRecord:
        """Write a full snapshot (usually lifecycle engine output) back."""
        row = await self._get_row(record.job_id)
        if row is None:
            raise ValueError(f"Job {record.job_id} not found")

        record = refresh_derived(record).model_copy(update={"updated_at": utcnow()})
        for name, value in _to_row_values(record).items():
            if name in ("job_id", "token", "created_at"):
                continue
            setattr(row, name, value)
        await self.db.commit()
        logger.debug(f"Saved job {record.job_id} ({record.status.value})")
        return record
