"""Create jobs table

Revision ID: create_jobs_table
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'create_jobs_table'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _text(name: str, length: int) -> sa.Column:
    return sa.Column(name, sa.String(length=length), nullable=False, server_default='')


def _flag(name: str) -> sa.Column:
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false())


def _stamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    op.create_table(
        'jobs',
        sa.Column('job_id', sa.String(length=40), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        _text('customer_name', 255),
        _text('customer_phone', 40),
        _text('customer_email', 255),
        _text('address', 255),
        _text('city', 120),
        _text('postal_code', 20),
        _flag('contract_signed'),
        sa.Column('contract_date', sa.Date(), nullable=True),
        _text('contract_file_id', 512),
        _text('contract_file_name', 255),
        sa.Column('deposit_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('deposit_status', sa.String(length=20), nullable=False, server_default='pending'),
        _flag('deposit_received'),
        _stamp('deposit_date'),
        _flag('materials_ordered'),
        _stamp('materials_ordered_date'),
        _text('materials_eta', 120),
        sa.Column('supplier_notes', sa.Text(), nullable=False, server_default=''),
        _flag('delivery_scheduled'),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        _text('delivery_placement', 255),
        _flag('delivery_completed'),
        _stamp('delivery_completed_date'),
        _flag('install_scheduled'),
        sa.Column('install_date', sa.Date(), nullable=True),
        _flag('install_started'),
        _stamp('install_started_time'),
        _flag('install_completed'),
        _stamp('install_completed_date'),
        _flag('return_scheduled'),
        sa.Column('return_date', sa.Date(), nullable=True),
        _flag('return_completed'),
        _stamp('return_completed_date'),
        sa.Column('final_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('final_amount', sa.Numeric(12, 2), nullable=True),
        _flag('final_payment_received'),
        _stamp('final_payment_date'),
        _text('payment_method', 20),
        _flag('warranty_visible'),
        _text('warranty_link', 1024),
        _text('warranty_file_id', 512),
        _stamp('warranty_generated_date'),
        _flag('invoice_visible'),
        _text('invoice_link', 1024),
        _text('drive_folder_id', 512),
        _text('delivery_photo', 1024),
        _text('install_photo', 1024),
        _text('completed_photo', 1024),
        _text('material_style', 120),
        _text('material_colour', 120),
        _text('supervisor_name', 255),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='pending_approval'),
        sa.Column('next_step_text', sa.Text(), nullable=False, server_default=''),
        _flag('cancelled'),
        sa.Column('dispatcher_notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('job_id')
    )
    op.create_index('idx_jobs_token', 'jobs', ['token'], unique=True)
    op.create_index('idx_jobs_status', 'jobs', ['status'], unique=False)
    op.create_index('idx_jobs_created_at', 'jobs', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_jobs_created_at', table_name='jobs')
    op.drop_index('idx_jobs_status', table_name='jobs')
    op.drop_index('idx_jobs_token', table_name='jobs')
    op.drop_table('jobs')
