"""
Job-related Pydantic schemas
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Composite job status, recomputed after every mutation"""
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"  # legacy rows only, never derived
    AWAITING_DEPOSIT = "awaiting_deposit"
    DEPOSIT_RECEIVED = "deposit_received"
    MATERIALS_ORDERED = "materials_ordered"
    DELIVERY_SCHEDULED = "delivery_scheduled"
    DELIVERY_COMPLETED = "delivery_completed"
    INSTALL_SCHEDULED = "install_scheduled"
    INSTALL_STARTED = "install_started"
    INSTALL_COMPLETED = "install_completed"
    RETURN_SCHEDULED = "return_scheduled"
    RETURN_COMPLETED = "return_completed"
    WARRANTY_AVAILABLE = "warranty_available"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"


class PaymentMethod(str, Enum):
    ONLINE = "online"
    ETRANSFER = "etransfer"
    CASH = "cash"
    UNSET = ""


class JobRecord(BaseModel):
    """
    Full in-memory snapshot of one job.

    The lifecycle engine works on copies of this model; the store converts it
    to and from the ``jobs`` table row.
    """
    # Identity
    job_id: str
    token: str

    # Customer
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""

    # Contract
    contract_signed: bool = False
    contract_date: Optional[date] = None
    contract_file_id: str = ""
    contract_file_name: str = ""

    # Deposit
    deposit_amount: Optional[Decimal] = None
    deposit_status: PaymentStatus = PaymentStatus.PENDING
    deposit_received: bool = False
    deposit_date: Optional[datetime] = None

    # Pipeline
    materials_ordered: bool = False
    materials_ordered_date: Optional[datetime] = None
    materials_eta: str = ""
    supplier_notes: str = ""
    delivery_scheduled: bool = False
    delivery_date: Optional[date] = None
    delivery_placement: str = ""
    delivery_completed: bool = False
    delivery_completed_date: Optional[datetime] = None
    install_scheduled: bool = False
    install_date: Optional[date] = None
    install_started: bool = False
    install_started_time: Optional[datetime] = None
    install_completed: bool = False
    install_completed_date: Optional[datetime] = None

    # Return of leftover materials (legacy sub-flow)
    return_scheduled: bool = False
    return_date: Optional[date] = None
    return_completed: bool = False
    return_completed_date: Optional[datetime] = None

    # Final payment
    final_status: PaymentStatus = PaymentStatus.PENDING
    final_amount: Optional[Decimal] = None
    final_payment_received: bool = False
    final_payment_date: Optional[datetime] = None
    payment_method: PaymentMethod = PaymentMethod.UNSET

    # Documents
    warranty_visible: bool = False
    warranty_link: str = ""
    warranty_file_id: str = ""
    warranty_generated_date: Optional[datetime] = None
    invoice_visible: bool = False
    invoice_link: str = ""
    drive_folder_id: str = ""

    # Photos
    delivery_photo: str = ""
    install_photo: str = ""
    completed_photo: str = ""

    # Project details
    material_style: str = ""
    material_colour: str = ""
    supervisor_name: str = ""

    # Derived / display
    status: JobStatus = JobStatus.PENDING_APPROVAL
    next_step_text: str = ""
    cancelled: bool = False

    # Bookkeeping
    dispatcher_notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def final_payment(self) -> bool:
        """Final payment step flag, derived from the payment status"""
        return self.final_status == PaymentStatus.PAID


class JobCreate(BaseModel):
    """Fields accepted when creating a job"""
    customer_name: str = Field(..., min_length=1, description="Customer full name")
    customer_phone: str = Field(..., min_length=1, description="Customer phone number")
    customer_email: str = ""
    address: str = Field(..., min_length=1, description="Installation street address")
    city: str = ""
    postal_code: str = ""
    contract_signed: bool = False
    contract_date: Optional[date] = None
    deposit_amount: Optional[Decimal] = None
    final_amount: Optional[Decimal] = None
    material_style: str = ""
    material_colour: str = ""
    dispatcher_notes: str = ""


class JobUpdate(BaseModel):
    """
    Free-field edit of a job. Only fields sent by the client are applied.

    Pipeline flags are changed through transitions, not here.
    """
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    contract_signed: Optional[bool] = None
    contract_date: Optional[date] = None
    deposit_amount: Optional[Decimal] = None
    deposit_status: Optional[PaymentStatus] = None
    materials_eta: Optional[str] = None
    supplier_notes: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_placement: Optional[str] = None
    install_date: Optional[date] = None
    return_scheduled: Optional[bool] = None
    return_date: Optional[date] = None
    return_completed: Optional[bool] = None
    final_amount: Optional[Decimal] = None
    invoice_visible: Optional[bool] = None
    invoice_link: Optional[str] = None
    delivery_photo: Optional[str] = None
    install_photo: Optional[str] = None
    completed_photo: Optional[str] = None
    material_style: Optional[str] = None
    material_colour: Optional[str] = None
    supervisor_name: Optional[str] = None
    dispatcher_notes: Optional[str] = None


class ToggleRequest(BaseModel):
    """Toggle a pipeline step on (or roll it back if already on)"""
    step: str = Field(..., description="Pipeline step key, e.g. 'delivery_scheduled'")
    scheduled_date: Optional[date] = Field(None, description="Scheduled date for delivery/installation")


class CompleteInstallationRequest(BaseModel):
    payment_method: PaymentMethod = Field(..., description="online, etransfer or cash")


class DispatcherJobView(BaseModel):
    """Job as shown on the dispatcher dashboard"""
    job: JobRecord
    label: str
    badge: str


class DashboardSummary(BaseModel):
    total: int = 0
    active: int = 0
    completed: int = 0
    cancelled: int = 0
    awaiting_deposit: int = 0
    ready_for_install: int = 0
    awaiting_payment: int = 0


class JobListResponse(BaseModel):
    jobs: List[DispatcherJobView]
    summary: DashboardSummary


class TransitionResponse(BaseModel):
    """Result of a pipeline transition"""
    job: DispatcherJobView
    notification_trigger: Optional[str] = Field(
        None, description="SMS trigger the dispatcher may send for this transition"
    )
    warranty_error: Optional[str] = Field(
        None, description="Set when payment was recorded but the warranty could not be generated"
    )


class WarrantyRequest(BaseModel):
    job_id: str


class WarrantyResponse(BaseModel):
    success: bool = True
    file_id: str
    view_link: str
    download_link: str


class NotificationRequest(BaseModel):
    job_id: str
    trigger: str


class NotificationResponse(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class UploadResponse(BaseModel):
    success: bool = True
    file_id: str
    link: str
    file_name: str
    job: DispatcherJobView


class AuthRequest(BaseModel):
    password: str


class TimelineStep(BaseModel):
    """One step of the customer-facing project timeline"""
    id: str
    label: str
    completed: bool
    current: bool
    date: Optional[str] = None
    description: str


class CustomerStatusResponse(BaseModel):
    """Everything the customer status page renders, looked up by token"""
    cancelled: bool = False
    customer_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    updated_at: Optional[datetime] = None
    status: Optional[JobStatus] = None
    next_step_text: Optional[str] = None
    current_step: Optional[str] = None
    timeline: List[TimelineStep] = []
    deposit_status: Optional[PaymentStatus] = None
    final_status: Optional[PaymentStatus] = None
    material_style: Optional[str] = None
    material_colour: Optional[str] = None
    supervisor_name: Optional[str] = None
    photos: Dict[str, str] = {}
    warranty_link: Optional[str] = None
    invoice_link: Optional[str] = None
    contact: Dict[str, str] = {}
