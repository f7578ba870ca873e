from datetime import date
from typing import Iterable, List, NamedTuple, Optional

from landlord.schemas.records import (
    Payment, PaymentStatus, Property, PropertyStatus, RepairPriority, RepairStatus, Snapshot, Tenant,
)
from landlord.services.payment_generator import format_rent_month

LEASE_ALERT_DAYS = 60


class PortfolioStats:
    def __init__(self, total_properties, occupied, vacant, expected_revenue, active_repairs, urgent_repairs):
        self.total_properties = total_properties
        self.occupied = occupied
        self.vacant = vacant
        self.expected_revenue = float(expected_revenue or 0)
        self.active_repairs = active_repairs
        self.urgent_repairs = urgent_repairs

    @property
    def occupancy_rate(self) -> float:
        if not self.total_properties:
            return 0.0
        return self.occupied / self.total_properties


class PaymentTotals(NamedTuple):
    collected: float
    pending: float
    paid_this_month: float


class MonthSummary(NamedTuple):
    month: str
    expected: float
    received: float
    missing: float


class LeaseAlert(NamedTuple):
    tenant_id: str
    tenant_name: str
    property_address: str
    lease_end: date
    status: str  # "expiring" or "expired"


def get_portfolio_stats(snapshot: Snapshot) -> PortfolioStats:
    """
    Headline numbers: property counts, expected monthly revenue and open repairs.

    Expected revenue is the listed rent of occupied properties; a repair is
    active while pending or in progress.
    """
    occupied = [p for p in snapshot.properties if p.status == PropertyStatus.occupied]
    vacant = [p for p in snapshot.properties if p.status == PropertyStatus.vacant]
    active = [
        r for r in snapshot.repair_requests
        if r.status in (RepairStatus.pending, RepairStatus.in_progress)
    ]
    urgent = [r for r in active if r.priority == RepairPriority.urgent]

    return PortfolioStats(
        total_properties=len(snapshot.properties),
        occupied=len(occupied),
        vacant=len(vacant),
        expected_revenue=sum(p.rent for p in occupied),
        active_repairs=len(active),
        urgent_repairs=len(urgent),
    )


def get_lease_alerts(
    tenants: Iterable[Tenant],
    properties: Iterable[Property],
    today: date,
    window_days: int = LEASE_ALERT_DAYS,
) -> List[LeaseAlert]:
    """Tenants whose lease ends within ``window_days`` ("expiring") or already ended ("expired")."""
    addresses = {p.id: p.address for p in properties}
    alerts = []
    for tenant in tenants:
        if tenant.lease_end is None:
            continue
        days_left = (tenant.lease_end - today).days
        if days_left <= 0:
            status = "expired"
        elif days_left <= window_days:
            status = "expiring"
        else:
            continue
        alerts.append(LeaseAlert(
            tenant_id=tenant.id,
            tenant_name=tenant.name,
            property_address=addresses.get(tenant.property_id, "Unknown Property"),
            lease_end=tenant.lease_end,
            status=status,
        ))
    return sorted(alerts, key=lambda a: a.lease_end)


def get_payment_totals(payments: Iterable[Payment], today: date) -> PaymentTotals:
    collected = 0.0
    pending = 0.0
    this_month = 0.0
    for payment in payments:
        if payment.status == PaymentStatus.paid:
            collected += payment.amount_paid
        elif payment.status == PaymentStatus.not_paid:
            pending += payment.amount - payment.amount_paid
        # Counted by the day the money arrived, not by rent month
        paid_on = payment.payment_date
        if paid_on and paid_on.year == today.year and paid_on.month == today.month:
            this_month += payment.amount_paid
    return PaymentTotals(collected, pending, this_month)


def get_month_summary(snapshot: Snapshot, month: date, tenant_id: Optional[str] = None) -> MonthSummary:
    """
    Expected vs received rent for one rent month over occupied properties.
    With ``tenant_id`` only that tenant's property is considered.
    """
    relevant = [p for p in snapshot.properties if p.status == PropertyStatus.occupied]
    if tenant_id is not None:
        tenant = next((t for t in snapshot.tenants if t.id == tenant_id), None)
        relevant = [p for p in relevant if tenant is not None and p.id == tenant.property_id]

    label = format_rent_month(month)
    ids = {p.id for p in relevant}
    expected = sum(p.rent for p in relevant)
    received = sum(
        p.amount_paid for p in snapshot.payments
        if p.rent_month == label and p.property_id in ids
    )
    return MonthSummary(label, expected, received, max(expected - received, 0.0))
