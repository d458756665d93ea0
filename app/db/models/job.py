"""
Job database model
One row per roofing job, rewritten in full on every update
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Index, Numeric, String, Text
from sqlalchemy.sql import func
from app.db.base import Base


class Job(Base):
    """
    Model for storing a roofing job.

    Mirrors the fields of JobRecord; status and next_step_text are cached
    values written by the lifecycle engine.
    """
    __tablename__ = "jobs"

    # Identity
    job_id = Column(String(40), primary_key=True)
    token = Column(String(64), nullable=False)

    # Customer
    customer_name = Column(String(255), nullable=False, default="")
    customer_phone = Column(String(40), nullable=False, default="")
    customer_email = Column(String(255), nullable=False, default="")
    address = Column(String(255), nullable=False, default="")
    city = Column(String(120), nullable=False, default="")
    postal_code = Column(String(20), nullable=False, default="")

    # Contract
    contract_signed = Column(Boolean, nullable=False, default=False)
    contract_date = Column(Date, nullable=True)
    contract_file_id = Column(String(512), nullable=False, default="")
    contract_file_name = Column(String(255), nullable=False, default="")

    # Deposit
    deposit_amount = Column(Numeric(12, 2), nullable=True)
    deposit_status = Column(String(20), nullable=False, default="pending")
    deposit_received = Column(Boolean, nullable=False, default=False)
    deposit_date = Column(DateTime(timezone=True), nullable=True)

    # Pipeline
    materials_ordered = Column(Boolean, nullable=False, default=False)
    materials_ordered_date = Column(DateTime(timezone=True), nullable=True)
    materials_eta = Column(String(120), nullable=False, default="")
    supplier_notes = Column(Text, nullable=False, default="")
    delivery_scheduled = Column(Boolean, nullable=False, default=False)
    delivery_date = Column(Date, nullable=True)
    delivery_placement = Column(String(255), nullable=False, default="")
    delivery_completed = Column(Boolean, nullable=False, default=False)
    delivery_completed_date = Column(DateTime(timezone=True), nullable=True)
    install_scheduled = Column(Boolean, nullable=False, default=False)
    install_date = Column(Date, nullable=True)
    install_started = Column(Boolean, nullable=False, default=False)
    install_started_time = Column(DateTime(timezone=True), nullable=True)
    install_completed = Column(Boolean, nullable=False, default=False)
    install_completed_date = Column(DateTime(timezone=True), nullable=True)

    # Return of leftover materials
    return_scheduled = Column(Boolean, nullable=False, default=False)
    return_date = Column(Date, nullable=True)
    return_completed = Column(Boolean, nullable=False, default=False)
    return_completed_date = Column(DateTime(timezone=True), nullable=True)

    # Final payment
    final_status = Column(String(20), nullable=False, default="pending")
    final_amount = Column(Numeric(12, 2), nullable=True)
    final_payment_received = Column(Boolean, nullable=False, default=False)
    final_payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(String(20), nullable=False, default="")

    # Documents
    warranty_visible = Column(Boolean, nullable=False, default=False)
    warranty_link = Column(String(1024), nullable=False, default="")
    warranty_file_id = Column(String(512), nullable=False, default="")
    warranty_generated_date = Column(DateTime(timezone=True), nullable=True)
    invoice_visible = Column(Boolean, nullable=False, default=False)
    invoice_link = Column(String(1024), nullable=False, default="")
    drive_folder_id = Column(String(512), nullable=False, default="")

    # Photos
    delivery_photo = Column(String(1024), nullable=False, default="")
    install_photo = Column(String(1024), nullable=False, default="")
    completed_photo = Column(String(1024), nullable=False, default="")

    # Project details
    material_style = Column(String(120), nullable=False, default="")
    material_colour = Column(String(120), nullable=False, default="")
    supervisor_name = Column(String(255), nullable=False, default="")

    # Derived / display
    status = Column(String(30), nullable=False, default="pending_approval")
    next_step_text = Column(Text, nullable=False, default="")
    cancelled = Column(Boolean, nullable=False, default=False)

    # Bookkeeping
    dispatcher_notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Indexes
    __table_args__ = (
        Index('idx_jobs_token', 'token', unique=True),
        Index('idx_jobs_status', 'status'),
        Index('idx_jobs_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<Job(job_id='{self.job_id}', status='{self.status}')>"
