"""initial

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # Properties
    op.create_table('properties',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('city', sa.Text(), nullable=False),
        sa.Column('state', sa.Text(), nullable=False),
        sa.Column('zipcode', sa.Text(), nullable=False),
        sa.Column('rent', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    # Tenants
    op.create_table('tenants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('property_id', sa.String(length=36), nullable=True),
        sa.Column('lease_start', sa.DATE(), nullable=True),
        sa.Column('lease_end', sa.DATE(), nullable=True),
        sa.Column('rent_amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('lease_type', sa.String(), nullable=True),
        sa.Column('lease_renewal', sa.DATE(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tenants_property_id'), 'tenants', ['property_id'], unique=False)

    # Payments
    op.create_table('payments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('property_id', sa.String(length=36), nullable=True),
        sa.Column('tenant_id', sa.String(length=36), nullable=True),
        sa.Column('rent_month', sa.Text(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_date', sa.DATE(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('method', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payments_property_id'), 'payments', ['property_id'], unique=False)
    op.create_index(op.f('ix_payments_tenant_id'), 'payments', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_payments_rent_month'), 'payments', ['rent_month'], unique=False)

    # Repair Requests
    op.create_table('repair_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=True),
        sa.Column('property_id', sa.String(length=36), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('date_submitted', sa.DATE(), nullable=True),
        sa.Column('date_resolved', sa.DATE(), nullable=True),
        sa.Column('category', sa.Text(), nullable=True),
        sa.Column('close_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_repair_requests_tenant_id'), 'repair_requests', ['tenant_id'], unique=False)
    op.create_index(op.f('ix_repair_requests_property_id'), 'repair_requests', ['property_id'], unique=False)
    op.create_index('idx_repair_requests_status', 'repair_requests', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_repair_requests_status', table_name='repair_requests')
    op.drop_index(op.f('ix_repair_requests_property_id'), table_name='repair_requests')
    op.drop_index(op.f('ix_repair_requests_tenant_id'), table_name='repair_requests')
    op.drop_table('repair_requests')
    op.drop_index(op.f('ix_payments_rent_month'), table_name='payments')
    op.drop_index(op.f('ix_payments_tenant_id'), table_name='payments')
    op.drop_index(op.f('ix_payments_property_id'), table_name='payments')
    op.drop_table('payments')
    op.drop_index(op.f('ix_tenants_property_id'), table_name='tenants')
    op.drop_table('tenants')
    op.drop_table('properties')
