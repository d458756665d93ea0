"""
SMS notification service

Maps triggers to message templates and sends them through the Twilio
Messages REST API. Sending is never deduplicated: every call sends.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from app.core.config import settings
from app.schemas.job import JobRecord
from app.services.lifecycle import StepKey
from app.services.status_rules import format_date_long

logger = logging.getLogger(__name__)


def _track_link(job: JobRecord) -> str:
    return f"{settings.APP_URL.rstrip('/')}/t/{job.token}"


SMS_TEMPLATES: Dict[str, Callable[[JobRecord], str]] = {
    "job_approved": lambda job: (
        f"Hi {job.customer_name}, your roofing project with {settings.COMPANY_NAME} has been confirmed! "
        f"Track your project progress here: {_track_link(job)}\n\n"
        f"Questions? Call us at {settings.COMPANY_PHONE}"
    ),
    "deposit_received": lambda job: (
        f"Hi {job.customer_name}, we've received your deposit for your roofing project. Thank you! "
        f"We'll begin ordering your materials shortly. "
        f"Track progress: {_track_link(job)}"
    ),
    "materials_ordered": lambda job: (
        f"Hi {job.customer_name}, great news! Materials for your roofing project have been ordered. "
        f"We'll contact you soon to schedule delivery. "
        f"Track progress: {_track_link(job)}"
    ),
    "delivery_scheduled": lambda job: (
        f"Hi {job.customer_name}, your roofing materials are scheduled for delivery on "
        f"{format_date_long(job.delivery_date)}. "
        f"Placement: {job.delivery_placement or 'To be confirmed'}. "
        f"Track progress: {_track_link(job)}"
    ),
    "delivery_completed": lambda job: (
        f"Hi {job.customer_name}, your roofing materials have been delivered! "
        f"We'll be in touch soon to confirm your installation date. "
        f"Track progress: {_track_link(job)}"
    ),
    "install_scheduled": lambda job: (
        f"Hi {job.customer_name}, your roof installation is scheduled for "
        f"{format_date_long(job.install_date)}. "
        f"Our crew will arrive in the morning. "
        f"Track progress: {_track_link(job)}"
    ),
    "install_completed": lambda job: (
        f"Hi {job.customer_name}, great news! Your new metal roof installation is complete! "
        f"We'll schedule pickup of leftover materials soon. "
        f"Track progress: {_track_link(job)}"
    ),
    "return_scheduled": lambda job: (
        f"Hi {job.customer_name}, we'll be picking up leftover materials on "
        f"{format_date_long(job.return_date)}. "
        f"No action needed from you. "
        f"Track progress: {_track_link(job)}"
    ),
    "return_completed": lambda job: (
        f"Hi {job.customer_name}, material pickup is complete! Your project is nearly finished. "
        f"Once final payment is received, your warranty documents will be available. "
        f"Track progress: {_track_link(job)}"
    ),
    "warranty_available": lambda job: (
        f"Hi {job.customer_name}, thank you for choosing {settings.COMPANY_NAME}! "
        f"Your warranty documents are now available. View them here: {_track_link(job)}\n\n"
        f"Enjoy your new roof! Questions? Call {settings.COMPANY_PHONE}"
    ),
    "payment_reminder": lambda job: (
        f"Hi {job.customer_name}, this is a friendly reminder that final payment for your roofing project is due. "
        f"Once received, we'll unlock your warranty documents. "
        f"Questions? Call {settings.COMPANY_NAME} at {settings.COMPANY_PHONE}"
    ),
    "review_request": lambda job: (
        f"Hi {job.customer_name}, this is {settings.COMPANY_NAME}. We hope you're happy with your new roof!"
        f"\n\nIf you have a moment, please share your experience in a quick Google review:"
        f"\n{settings.GOOGLE_REVIEW_URL}\n\n"
        f"Thank you for choosing {settings.COMPANY_NAME}!"
    ),
}

# Trigger a dispatcher is offered after turning a pipeline step on
TRANSITION_TRIGGERS: Dict[StepKey, Optional[str]] = {
    StepKey.MATERIALS_ORDERED: "materials_ordered",
    StepKey.DELIVERY_SCHEDULED: "delivery_scheduled",
    StepKey.DELIVERY_COMPLETED: "delivery_completed",
    StepKey.INSTALL_SCHEDULED: "install_scheduled",
    StepKey.INSTALL_STARTED: None,
    StepKey.INSTALL_COMPLETED: "install_completed",
    StepKey.FINAL_PAYMENT: "warranty_available",
}


@dataclass
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


def normalize_phone(phone: str) -> Optional[str]:
    """E.164 form of a North American number, or None when it is not one."""
    if not phone:
        return None
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return None


def render_message(trigger: str, job: JobRecord) -> str:
    template = SMS_TEMPLATES.get(trigger)
    if template is None:
        raise ValueError(f"Unknown SMS trigger: {trigger}")
    return template(job)


class NotificationService:
    """Service for sending templated SMS messages via Twilio"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.account_sid = settings.TWILIO_ACCOUNT_SID
        self.auth_token = settings.TWILIO_AUTH_TOKEN
        self.from_number = settings.TWILIO_PHONE_NUMBER
        self.api_url = settings.TWILIO_API_URL
        self._client = client

    def is_configured(self) -> bool:
        """Check if Twilio credentials are present"""
        return bool(self.account_sid and self.auth_token and self.from_number)

    async def send(self, trigger: str, job: JobRecord) -> SendResult:
        """
        Send the message for ``trigger`` to the job's customer.

        Failures are returned, not raised; the job is never modified.
        """
        if job.cancelled:
            return SendResult(success=False, error="Job is cancelled")
        if trigger not in SMS_TEMPLATES:
            return SendResult(success=False, error=f"Unknown SMS trigger: {trigger}")

        to_number = normalize_phone(job.customer_phone)
        if not to_number:
            return SendResult(success=False, error="Invalid phone number")
        if not self.is_configured():
            return SendResult(success=False, error="SMS service not configured")

        body = render_message(trigger, job)
        try:
            message_id = await self._post_message(to_number, body)
        except httpx.HTTPError as e:
            logger.error(f"SMS send error for job {job.job_id} ({trigger}): {e}")
            return SendResult(success=False, error=str(e))

        logger.info(f"Sent {trigger} SMS for job {job.job_id}: {message_id}")
        return SendResult(success=True, message_id=message_id)

    async def _post_message(self, to_number: str, body: str) -> str:
        url = f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"
        data = {"To": to_number, "From": self.from_number, "Body": body}
        auth = (self.account_sid, self.auth_token)

        if self._client is not None:
            response = await self._client.post(url, data=data, auth=auth)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(url, data=data, auth=auth)
        response.raise_for_status()
        return response.json().get("sid", "")
