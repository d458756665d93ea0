"""
Job lifecycle engine

Pure functions over a JobRecord snapshot: pipeline toggles, cascading
rollback, the payment-method gate and recomputation of the cached status and
next-step text. Nothing here talks to the store or to external services.

Out-of-order toggles (turning a step on while an earlier one is still off)
are permitted so that dispatchers can correct mistakes; they are logged and
the status is still derived from the flags as they are.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, date, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from app.core.exceptions import PreconditionError
from app.schemas.job import JobRecord, PaymentMethod, PaymentStatus
from app.services.status_rules import derive_next_step_text, derive_status

logger = logging.getLogger(__name__)


class StepKey(str, Enum):
    MATERIALS_ORDERED = "materials_ordered"
    DELIVERY_SCHEDULED = "delivery_scheduled"
    DELIVERY_COMPLETED = "delivery_completed"
    INSTALL_SCHEDULED = "install_scheduled"
    INSTALL_STARTED = "install_started"
    INSTALL_COMPLETED = "install_completed"
    FINAL_PAYMENT = "final_payment"


@dataclass(frozen=True)
class PipelineStep:
    """
    Descriptor for one pipeline step.

    ``flag`` is read to decide whether the step is on; ``write_flag`` is the
    stored boolean set and cleared by toggles (they differ only for final
    payment, whose flag is derived from the payment status). ``stamp`` holds
    the completion time, or the caller-supplied date for scheduled steps.
    """
    key: StepKey
    flag: str
    stamp: str
    scheduled: bool = False
    write_flag: Optional[str] = None
    on_extra: Dict[str, Any] = field(default_factory=dict)
    off_extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def stored_flag(self) -> str:
        return self.write_flag or self.flag

    def is_set(self, job: JobRecord) -> bool:
        return bool(getattr(job, self.flag))


PIPELINE: List[PipelineStep] = [
    PipelineStep(StepKey.MATERIALS_ORDERED, "materials_ordered", "materials_ordered_date"),
    PipelineStep(StepKey.DELIVERY_SCHEDULED, "delivery_scheduled", "delivery_date", scheduled=True),
    PipelineStep(StepKey.DELIVERY_COMPLETED, "delivery_completed", "delivery_completed_date"),
    PipelineStep(StepKey.INSTALL_SCHEDULED, "install_scheduled", "install_date", scheduled=True),
    PipelineStep(StepKey.INSTALL_STARTED, "install_started", "install_started_time"),
    PipelineStep(
        StepKey.INSTALL_COMPLETED,
        "install_completed",
        "install_completed_date",
        off_extra={"payment_method": PaymentMethod.UNSET},
    ),
    PipelineStep(
        StepKey.FINAL_PAYMENT,
        "final_payment",
        "final_payment_date",
        write_flag="final_payment_received",
        on_extra={"final_status": PaymentStatus.PAID},
        off_extra={"final_status": PaymentStatus.PENDING, "warranty_visible": False},
    ),
]

_STEP_INDEX = {step.key: index for index, step in enumerate(PIPELINE)}

IMMUTABLE_FIELDS = ("job_id", "token")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_step(step_key: Union[StepKey, str]) -> PipelineStep:
    """Look up a step descriptor; unknown keys raise ValueError."""
    try:
        key = StepKey(step_key)
    except ValueError:
        valid = ", ".join(step.key.value for step in PIPELINE)
        raise ValueError(f"Unknown pipeline step '{step_key}'. Expected one of: {valid}")
    return PIPELINE[_STEP_INDEX[key]]


def chain_gaps(job: JobRecord) -> List[StepKey]:
    """Steps that are off while some later step is on."""
    gaps: List[StepKey] = []
    later_set = False
    for step in reversed(PIPELINE):
        if step.is_set(job):
            later_set = True
        elif later_set:
            gaps.append(step.key)
    gaps.reverse()
    return gaps


def is_chain_consistent(job: JobRecord) -> bool:
    return not chain_gaps(job)


def refresh_derived(job: JobRecord) -> JobRecord:
    """
    Recompute cached display state. Every mutation path ends here.

    Also drops warranty visibility when final payment is not recorded.
    """
    if job.warranty_visible and not job.final_payment:
        job = job.model_copy(update={"warranty_visible": False})
    job = job.model_copy(update={"status": derive_status(job)})
    return job.model_copy(update={"next_step_text": derive_next_step_text(job)})


def rollback(job: JobRecord, from_step: Union[StepKey, str]) -> JobRecord:
    """Clear ``from_step`` and every step after it in chain order."""
    start = _STEP_INDEX[get_step(from_step).key]
    updates: Dict[str, Any] = {}
    for step in PIPELINE[start:]:
        updates[step.stored_flag] = False
        updates[step.stamp] = None
        updates.update(step.off_extra)
    logger.info(f"Rolling back job {job.job_id} from {PIPELINE[start].key.value}")
    return refresh_derived(job.model_copy(update=updates))


def toggle(
    job: JobRecord,
    step_key: Union[StepKey, str],
    scheduled_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> JobRecord:
    """
    Turn a pipeline step on, or roll it back if it is already on.

    Scheduled steps store ``scheduled_date`` (None when not supplied, shown as
    TBD); other steps are stamped with ``now``.
    """
    step = get_step(step_key)
    if step.is_set(job):
        return rollback(job, step.key)

    missing = [key.value for key in _earlier_unset(job, step)]
    if missing:
        logger.warning(
            f"Job {job.job_id}: turning on {step.key.value} before {', '.join(missing)}"
        )
    if step.scheduled and scheduled_date is None:
        logger.warning(f"Job {job.job_id}: {step.key.value} turned on without a date")

    updates: Dict[str, Any] = {
        step.stored_flag: True,
        step.stamp: scheduled_date if step.scheduled else (now or utcnow()),
    }
    updates.update(step.on_extra)
    return refresh_derived(job.model_copy(update=updates))


def _earlier_unset(job: JobRecord, step: PipelineStep) -> List[StepKey]:
    return [
        earlier.key
        for earlier in PIPELINE[:_STEP_INDEX[step.key]]
        if not earlier.is_set(job)
    ]


def complete_installation(
    job: JobRecord,
    method: Union[PaymentMethod, str],
    now: Optional[datetime] = None,
) -> JobRecord:
    """
    Mark installation complete together with the customer's payment method.

    Both fields land in the same returned record so they are persisted in one
    write.
    """
    try:
        payment_method = PaymentMethod(method)
    except ValueError:
        raise ValueError(f"Invalid payment method '{method}'. Expected online, etransfer or cash")
    if payment_method == PaymentMethod.UNSET:
        raise ValueError("A payment method is required to complete installation")
    if job.install_completed:
        raise PreconditionError("Installation is already marked complete")

    staged = job.model_copy(update={"payment_method": payment_method})
    return toggle(staged, StepKey.INSTALL_COMPLETED, now=now)


def apply_changes(
    job: JobRecord,
    changes: Dict[str, Any],
    now: Optional[datetime] = None,
) -> JobRecord:
    """
    Merge a partial update into the record and recompute derived fields.

    Keeps deposit_received in step with deposit_status and stamps the return
    sub-flow completion time.
    """
    for name in IMMUTABLE_FIELDS:
        if name in changes and changes[name] != getattr(job, name):
            raise ValueError(f"{name} cannot be changed")
    unknown = set(changes) - set(JobRecord.model_fields)
    if unknown:
        raise ValueError(f"Unknown job fields: {', '.join(sorted(unknown))}")

    now = now or utcnow()
    merged = dict(changes)

    if "deposit_status" in merged:
        deposit_status = PaymentStatus(merged["deposit_status"])
        merged["deposit_status"] = deposit_status
        if deposit_status == PaymentStatus.PAID and not job.deposit_received:
            merged.setdefault("deposit_received", True)
            merged.setdefault("deposit_date", now)
        elif deposit_status == PaymentStatus.PENDING and job.deposit_received:
            merged.setdefault("deposit_received", False)
            merged.setdefault("deposit_date", None)

    if "return_completed" in merged and merged["return_completed"] != job.return_completed:
        merged.setdefault("return_completed_date", now if merged["return_completed"] else None)
    if merged.get("return_scheduled") is False:
        merged.setdefault("return_date", None)

    updated = JobRecord.model_validate({**job.model_dump(), **merged})
    return refresh_derived(updated)
