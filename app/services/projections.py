"""
Read-side projections of a job record

Dispatcher dashboard cards and counters, and the customer status page
(timeline, current-step card, visible documents). These only read the record;
the cached status and next-step text come from the lifecycle engine.
"""

from typing import Iterable, List

from app.core.config import settings
from app.schemas.job import (
    CustomerStatusResponse,
    DashboardSummary,
    DispatcherJobView,
    JobRecord,
    JobStatus,
    PaymentStatus,
    TimelineStep,
)
from app.services.status_rules import (
    derive_next_step_text,
    dispatcher_badge,
    dispatcher_label,
    format_date_short,
)


def dispatcher_view(job: JobRecord) -> DispatcherJobView:
    return DispatcherJobView(job=job, label=dispatcher_label(job), badge=dispatcher_badge(job))


def dashboard_summary(jobs: Iterable[JobRecord]) -> DashboardSummary:
    """Counters shown at the top of the dispatcher dashboard"""
    summary = DashboardSummary()
    for job in jobs:
        summary.total += 1
        if job.cancelled:
            summary.cancelled += 1
            continue
        if job.status == JobStatus.WARRANTY_AVAILABLE:
            summary.completed += 1
        else:
            summary.active += 1
        if job.deposit_status != PaymentStatus.PAID and not job.deposit_received:
            summary.awaiting_deposit += 1
        if job.delivery_completed and not job.install_scheduled:
            summary.ready_for_install += 1
        if job.install_completed and not job.final_payment:
            summary.awaiting_payment += 1
    return summary


def current_step(job: JobRecord) -> str:
    """Key of the card highlighted on the customer page"""
    if job.final_payment or job.final_payment_received:
        return "warranty"
    if job.install_completed:
        return "payment_pending"
    if job.install_started:
        return "install_started"
    if job.install_scheduled:
        return "install_scheduled"
    if job.delivery_completed:
        return "delivery_completed"
    if job.delivery_scheduled:
        return "delivery_scheduled"
    if job.materials_ordered:
        return "materials_ordered"
    return "awaiting_start"


def customer_timeline(job: JobRecord) -> List[TimelineStep]:
    """Five-step project timeline for the customer page"""
    deposit_paid = job.deposit_received or job.deposit_status == PaymentStatus.PAID
    paid = job.final_payment or job.final_payment_received

    if job.delivery_completed:
        delivery_date = f"Completed {format_date_short(job.delivery_completed_date)}"
        delivery_text = "Materials delivered to your property."
    elif job.delivery_scheduled:
        delivery_date = f"Scheduled for {format_date_short(job.delivery_date)}"
        delivery_text = "Delivery has been scheduled."
    else:
        delivery_date = None
        delivery_text = "Scheduling delivery."

    if job.install_completed:
        install_date = f"Completed {format_date_short(job.install_completed_date)}"
        install_text = "Your new roof is installed!"
    elif job.install_started:
        install_date = "In progress"
        install_text = "Our crew is working on your roof."
    elif job.install_scheduled:
        install_date = f"Scheduled for {format_date_short(job.install_date)}"
        install_text = "Installation has been scheduled."
    else:
        install_date = None
        install_text = "Scheduling installation."

    return [
        TimelineStep(
            id="materials",
            label="Materials Ordered",
            completed=job.materials_ordered,
            current=deposit_paid and not job.materials_ordered,
            date=format_date_short(job.materials_ordered_date) if job.materials_ordered_date else None,
            description=(
                "Your materials have been ordered."
                if job.materials_ordered
                else "Your materials are being prepared."
            ),
        ),
        TimelineStep(
            id="delivery",
            label="Delivery",
            completed=job.delivery_completed,
            current=job.materials_ordered and not job.delivery_completed,
            date=delivery_date,
            description=delivery_text,
        ),
        TimelineStep(
            id="installation",
            label="Installation",
            completed=job.install_completed,
            current=job.delivery_completed and not job.install_completed,
            date=install_date,
            description=install_text,
        ),
        TimelineStep(
            id="payment",
            label="Final Payment",
            completed=paid,
            current=job.install_completed and not paid,
            date=format_date_short(job.final_payment_date) if job.final_payment_date else None,
            description="Payment received. Thank you!" if paid else "Awaiting final payment.",
        ),
        TimelineStep(
            id="warranty",
            label="Warranty & Documents",
            completed=job.warranty_visible and bool(job.warranty_link),
            current=paid and not job.warranty_visible,
            description=(
                "Your warranty is available below."
                if job.warranty_visible
                else "Available after final payment."
            ),
        ),
    ]


def _contact() -> dict:
    return {
        "company": settings.COMPANY_NAME,
        "phone": settings.COMPANY_PHONE,
        "email": settings.COMPANY_EMAIL,
    }


def customer_status(job: JobRecord) -> CustomerStatusResponse:
    """
    Customer page data. Cancelled jobs expose nothing but the flag and
    contact details.
    """
    if job.cancelled:
        return CustomerStatusResponse(cancelled=True, contact=_contact())

    photos = {
        name: value
        for name, value in (
            ("delivery", job.delivery_photo),
            ("install", job.install_photo),
            ("completed", job.completed_photo),
        )
        if value
    }
    return CustomerStatusResponse(
        cancelled=False,
        customer_name=job.customer_name,
        address=job.address,
        city=job.city,
        postal_code=job.postal_code,
        updated_at=job.updated_at,
        status=job.status,
        next_step_text=job.next_step_text or derive_next_step_text(job),
        current_step=current_step(job),
        timeline=customer_timeline(job),
        deposit_status=job.deposit_status,
        final_status=job.final_status,
        material_style=job.material_style,
        material_colour=job.material_colour,
        supervisor_name=job.supervisor_name,
        photos=photos,
        warranty_link=job.warranty_link if job.warranty_visible and job.warranty_link else None,
        invoice_link=job.invoice_link if job.invoice_visible and job.invoice_link else None,
        contact=_contact(),
    )
