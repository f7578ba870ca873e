import uuid
from datetime import datetime, date
from typing import Optional
from sqlalchemy import String, ForeignKey, Numeric, DateTime, Text, DATE, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from landlord.database.core import Base
from landlord.schemas.records import (
    PropertyStatus, PaymentStatus, RepairPriority, RepairStatus, EntityKind
)


def _new_id() -> str:
    return str(uuid.uuid4())


# 3.1 Property
class PropertyRow(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    address: Mapped[str] = mapped_column(Text)
    city: Mapped[str] = mapped_column(Text, default="")
    state: Mapped[str] = mapped_column(Text, default="")
    zipcode: Mapped[str] = mapped_column(Text, default="")
    rent: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    status: Mapped[str] = mapped_column(String, default=PropertyStatus.vacant.value)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# 3.2 Tenant
class TenantRow(Base):
    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    property_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), index=True, nullable=True
    )
    lease_start: Mapped[Optional[date]] = mapped_column(DATE)
    lease_end: Mapped[Optional[date]] = mapped_column(DATE)
    rent_amount: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    payment_method: Mapped[Optional[str]] = mapped_column(String)  # Zelle / Direct Deposit / Cash
    lease_type: Mapped[Optional[str]] = mapped_column(String)  # Yearly / Monthly
    lease_renewal: Mapped[Optional[date]] = mapped_column(DATE)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# 3.3 Payment
class PaymentRow(Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    property_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), index=True, nullable=True
    )
    tenant_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("tenants.id", ondelete="SET NULL"), index=True, nullable=True
    )
    rent_month: Mapped[str] = mapped_column(Text, index=True)  # "March 2024"
    amount: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    amount_paid: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    payment_date: Mapped[Optional[date]] = mapped_column(DATE)
    status: Mapped[str] = mapped_column(String, default=PaymentStatus.not_paid.value)
    method: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# 3.4 RepairRequest
class RepairRequestRow(Base):
    __tablename__ = "repair_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), index=True, nullable=True
    )
    property_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), index=True, nullable=True
    )
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    priority: Mapped[str] = mapped_column(String, default=RepairPriority.medium.value)
    status: Mapped[str] = mapped_column(String, default=RepairStatus.pending.value)
    date_submitted: Mapped[Optional[date]] = mapped_column(DATE)
    date_resolved: Mapped[Optional[date]] = mapped_column(DATE)
    category: Mapped[Optional[str]] = mapped_column(Text)
    close_notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_repair_requests_status", "status"),
    )


ROW_CLASSES = {
    EntityKind.properties: PropertyRow,
    EntityKind.tenants: TenantRow,
    EntityKind.payments: PaymentRow,
    EntityKind.repair_requests: RepairRequestRow,
}
