import enum
from datetime import date
from typing import Any, Dict, List, NamedTuple, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Enums
class PropertyStatus(str, enum.Enum):
    vacant = "vacant"
    occupied = "occupied"
    maintenance = "maintenance"


class PaymentStatus(str, enum.Enum):
    not_paid = "Not Paid Yet"
    partially_paid = "Partially Paid"
    paid = "Paid"


class PaymentMethod(str, enum.Enum):
    zelle = "Zelle"
    direct_deposit = "Direct Deposit"
    cash = "Cash"


class LeaseType(str, enum.Enum):
    yearly = "Yearly"
    monthly = "Monthly"


class RepairPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class RepairStatus(str, enum.Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


def payment_status_for(amount: float, amount_paid: float) -> PaymentStatus:
    """Status of a payment is fully determined by what was paid against what is due."""
    if amount_paid <= 0:
        return PaymentStatus.not_paid
    if amount_paid >= amount:
        return PaymentStatus.paid
    return PaymentStatus.partially_paid


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class Record(BaseModel):
    """Base for the four record shapes. Records are frozen: changes produce a new record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = ""

    def merge(self, updates: Dict[str, Any]) -> "Record":
        """Return a validated copy with ``updates`` applied."""
        data = self.model_dump()
        data.update(updates)
        return type(self).model_validate(data)


# 3.1 Property
class Property(Record):
    address: str = ""
    city: str = ""
    state: str = ""
    zipcode: str = ""
    rent: float = Field(default=0.0, ge=0)
    status: PropertyStatus = PropertyStatus.vacant


# 3.2 Tenant
class Tenant(Record):
    name: str = ""
    email: str = ""
    phone: str = ""
    property_id: str = ""
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: float = Field(default=0.0, ge=0)
    payment_method: Optional[PaymentMethod] = None
    lease_type: Optional[LeaseType] = None
    lease_renewal: Optional[date] = None

    @field_validator("lease_start", "lease_end", "lease_renewal", "payment_method", "lease_type", mode="before")
    @classmethod
    def empty_is_unset(cls, v):
        return _blank_to_none(v)


# 3.3 Payment
class Payment(Record):
    property_id: str = ""
    tenant_id: Optional[str] = None
    rent_month: str = ""
    amount: float = Field(default=0.0, ge=0)
    amount_paid: float = Field(default=0.0, ge=0)
    payment_date: Optional[date] = None
    status: PaymentStatus = PaymentStatus.not_paid
    method: str = ""

    @field_validator("tenant_id", "payment_date", mode="before")
    @classmethod
    def empty_is_unset(cls, v):
        return _blank_to_none(v)


# 3.4 RepairRequest
class RepairRequest(Record):
    tenant_id: str = ""
    property_id: str = ""
    title: str = ""
    description: str = ""
    priority: RepairPriority = RepairPriority.medium
    status: RepairStatus = RepairStatus.pending
    date_submitted: Optional[date] = None
    date_resolved: Optional[date] = None
    category: str = ""
    close_notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def legacy_submitted(cls, v):
        # Older sheets and the first dashboard version used "submitted"
        if v == "submitted":
            return RepairStatus.pending
        return v

    @field_validator("date_submitted", "date_resolved", mode="before")
    @classmethod
    def empty_is_unset(cls, v):
        return _blank_to_none(v)


class EntityKind(str, enum.Enum):
    """The four logical tables, named as the relational backend names them."""

    properties = "properties"
    tenants = "tenants"
    payments = "payments"
    repair_requests = "repair_requests"

    @property
    def sheet_title(self) -> str:
        return SHEET_TITLES[self]

    @property
    def record_class(self) -> Type[Record]:
        return RECORD_CLASSES[self]


SHEET_TITLES = {
    EntityKind.properties: "Properties",
    EntityKind.tenants: "Tenants",
    EntityKind.payments: "Payments",
    EntityKind.repair_requests: "Repairs",
}

RECORD_CLASSES: Dict[EntityKind, Type[Record]] = {
    EntityKind.properties: Property,
    EntityKind.tenants: Tenant,
    EntityKind.payments: Payment,
    EntityKind.repair_requests: RepairRequest,
}


class Snapshot(NamedTuple):
    properties: List[Property]
    tenants: List[Tenant]
    payments: List[Payment]
    repair_requests: List[RepairRequest]

    def for_kind(self, kind: EntityKind) -> list:
        return getattr(self, kind.value)
