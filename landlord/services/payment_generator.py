"""
Monthly rent payment generation.

Pure functions: they look at properties, tenants and existing payments and
return the Payment drafts a month still needs. Persisting the drafts is the
data service's job.

A payment is identified by (property_id, rent month label); a month label is
"<Month name> <year>", e.g. "March 2024".
"""
import calendar
from datetime import date
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from landlord.schemas.records import Payment, PaymentStatus, Property, PropertyStatus, Tenant

MONTH_NAMES = {name: number for number, name in enumerate(calendar.month_name) if name}


def month_start(value: date) -> date:
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` after (or before) ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def format_rent_month(value: date) -> str:
    return f"{calendar.month_name[value.month]} {value.year}"


def parse_rent_month(label: str) -> Optional[date]:
    """ "March 2024" -> date(2024, 3, 1); None when the label is not a month label."""
    parts = label.strip().split()
    if len(parts) != 2 or parts[0] not in MONTH_NAMES or not parts[1].isdigit():
        return None
    return date(int(parts[1]), MONTH_NAMES[parts[0]], 1)


def iter_months(start: date, end: date) -> Iterator[date]:
    """First days of every month from ``start`` to ``end``, both inclusive."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def existing_keys(payments: Iterable[Payment]) -> Set[Tuple[str, str]]:
    return {(p.property_id, p.rent_month) for p in payments}


def tenant_for_property(tenants: Iterable[Tenant], property_id: str) -> Optional[Tenant]:
    for tenant in tenants:
        if tenant.property_id == property_id:
            return tenant
    return None


def plan_payments_for_month(
    target: date,
    properties: Iterable[Property],
    tenants: Iterable[Tenant],
    existing: Iterable[Payment],
    force_create: bool = False,
) -> List[Payment]:
    """
    Payment drafts (no id yet) needed to cover ``target``'s month.

    Rules, per property:
    - skip when a payment for (property, month label) already exists
    - skip vacant / maintenance properties unless ``force_create``
    - amount is the attached tenant's rent, or the property's listed rent
      when no tenant is attached
    """
    label = format_rent_month(month_start(target))
    tenants = list(tenants)
    taken = existing_keys(existing)

    drafts = []
    for prop in properties:
        key = (prop.id, label)
        if key in taken:
            continue
        if prop.status != PropertyStatus.occupied and not force_create:
            continue

        tenant = tenant_for_property(tenants, prop.id)
        amount = tenant.rent_amount if tenant is not None else prop.rent

        drafts.append(Payment(
            property_id=prop.id,
            tenant_id=tenant.id if tenant is not None else None,
            rent_month=label,
            amount=amount,
            amount_paid=0,
            payment_date=None,
            status=PaymentStatus.not_paid,
            method="",
        ))
        # Guards against the same property listed twice in one call
        taken.add(key)

    return drafts
