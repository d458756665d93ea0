"""
Status rule table

One priority-ordered list of rules, furthest-along milestone first. Each
renderer (status enum, dispatcher label/badge, customer next-step text) walks
the same list and takes the first matching rule that carries a value for it,
so all of them share one priority order.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Union
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.schemas.job import JobRecord, JobStatus

DEFAULT_NEXT_STEP = "Your project has been created. We will contact you shortly."

DateLike = Union[date, datetime, str, None]


def _local_date(value: datetime) -> date:
    """Calendar date of a timestamp in the business time zone; naive means UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(settings.TIMEZONE)).date()


def _coerce_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return _local_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def format_date_long(value: DateLike) -> str:
    """'Friday, January 10, 2025'; empty dates render as 'TBD'."""
    if value is None or value == "":
        return "TBD"
    parsed = _coerce_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed:%A, %B} {parsed.day}, {parsed.year}"


def format_date_short(value: DateLike) -> str:
    """'Jan 10, 2025'; empty dates render as 'TBD'."""
    if value is None or value == "":
        return "TBD"
    parsed = _coerce_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


@dataclass(frozen=True)
class StatusRule:
    key: str
    matches: Callable[[JobRecord], bool]
    status: Optional[JobStatus] = None
    label: Optional[str] = None
    badge: Optional[str] = None
    next_step: Optional[Callable[[JobRecord], str]] = None


STATUS_RULES: List[StatusRule] = [
    StatusRule(
        key="cancelled",
        matches=lambda job: job.cancelled,
        status=JobStatus.CANCELLED,
        label="Cancelled",
        badge="red",
        next_step=lambda job: "This project has been cancelled. Please contact us with any questions.",
    ),
    StatusRule(
        key="warranty_available",
        matches=lambda job: job.final_payment and job.warranty_visible,
        status=JobStatus.WARRANTY_AVAILABLE,
        label="Complete",
        badge="green",
        next_step=lambda job: "Your project is complete! Warranty documents are available below.",
    ),
    StatusRule(
        key="return_completed",
        matches=lambda job: job.return_completed,
        status=JobStatus.RETURN_COMPLETED,
        label="Materials Returned",
        badge="green",
        next_step=lambda job: "Leftover materials have been picked up. Your project is nearly finished.",
    ),
    StatusRule(
        key="return_scheduled",
        matches=lambda job: job.return_scheduled,
        status=JobStatus.RETURN_SCHEDULED,
        label="Return Scheduled",
        badge="blue",
        next_step=lambda job: f"Pickup of leftover materials is scheduled for {format_date_long(job.return_date)}.",
    ),
    # Paid but warranty not generated yet: presentation only, no status of its own
    StatusRule(
        key="paid_warranty_pending",
        matches=lambda job: job.final_payment,
        label="Paid - Warranty Pending",
        badge="green",
        next_step=lambda job: "Thank you! Final payment received. Your warranty documents are being prepared.",
    ),
    StatusRule(
        key="install_completed",
        matches=lambda job: job.install_completed,
        status=JobStatus.INSTALL_COMPLETED,
        label="Awaiting Payment",
        badge="yellow",
        next_step=lambda job: "Installation complete. Awaiting final payment to release warranty.",
    ),
    StatusRule(
        key="install_started",
        matches=lambda job: job.install_started,
        status=JobStatus.INSTALL_STARTED,
        label="Installing",
        badge="orange",
        next_step=lambda job: "Installation is in progress.",
    ),
    StatusRule(
        key="install_scheduled",
        matches=lambda job: job.install_scheduled,
        status=JobStatus.INSTALL_SCHEDULED,
        label="Install Scheduled",
        badge="blue",
        next_step=lambda job: f"Your installation is scheduled for {format_date_long(job.install_date)}.",
    ),
    StatusRule(
        key="delivery_completed",
        matches=lambda job: job.delivery_completed,
        status=JobStatus.DELIVERY_COMPLETED,
        label="Ready for Install",
        badge="purple",
        next_step=lambda job: "Materials delivered. We will contact you to schedule installation.",
    ),
    StatusRule(
        key="delivery_scheduled",
        matches=lambda job: job.delivery_scheduled,
        status=JobStatus.DELIVERY_SCHEDULED,
        label="Delivery Scheduled",
        badge="blue",
        next_step=lambda job: f"Delivery scheduled for {format_date_long(job.delivery_date)}.",
    ),
    StatusRule(
        key="materials_ordered",
        matches=lambda job: job.materials_ordered,
        status=JobStatus.MATERIALS_ORDERED,
        label="Materials Ordered",
        badge="cyan",
        next_step=lambda job: "Your materials have been ordered. We will contact you to schedule delivery.",
    ),
    StatusRule(
        key="deposit_received",
        matches=lambda job: job.deposit_received,
        status=JobStatus.DEPOSIT_RECEIVED,
        label="Deposit Received",
        badge="green",
        next_step=lambda job: "Deposit received. Materials will be ordered shortly.",
    ),
    StatusRule(
        key="awaiting_deposit",
        matches=lambda job: job.contract_signed,
        status=JobStatus.AWAITING_DEPOSIT,
        label="Awaiting Deposit",
        badge="yellow",
    ),
    StatusRule(
        key="pending_approval",
        matches=lambda job: True,
        status=JobStatus.PENDING_APPROVAL,
        label="Pending Approval",
        badge="yellow",
        next_step=lambda job: DEFAULT_NEXT_STEP,
    ),
]


def _first_rule(job: JobRecord, attribute: str) -> Optional[StatusRule]:
    for rule in STATUS_RULES:
        if getattr(rule, attribute) is not None and rule.matches(job):
            return rule
    return None


def derive_status(job: JobRecord) -> JobStatus:
    """Composite status: the furthest-along matching milestone wins."""
    rule = _first_rule(job, "status")
    return rule.status if rule else JobStatus.PENDING_APPROVAL


def derive_next_step_text(job: JobRecord) -> str:
    """Customer-facing sentence for the banner on the status page."""
    rule = _first_rule(job, "next_step")
    return rule.next_step(job) if rule else DEFAULT_NEXT_STEP


def dispatcher_label(job: JobRecord) -> str:
    rule = _first_rule(job, "label")
    return rule.label if rule else "Pending Approval"


def dispatcher_badge(job: JobRecord) -> str:
    rule = _first_rule(job, "badge")
    return rule.badge if rule else "yellow"
