from datetime import date

from landlord.schemas.records import Payment, PaymentStatus, Property, PropertyStatus, Tenant
from landlord.services.payment_generator import (
    add_months, format_rent_month, iter_months, parse_rent_month, plan_payments_for_month,
)


def _property(pid, status=PropertyStatus.occupied, rent=1000):
    return Property(id=pid, address=f"{pid} Main St", rent=rent, status=status)


def test_month_helpers():
    assert format_rent_month(date(2024, 3, 9)) == "March 2024"
    assert parse_rent_month("March 2024") == date(2024, 3, 1)
    assert parse_rent_month("Smarch 2024") is None
    assert parse_rent_month("2024-03") is None
    assert add_months(date(2024, 12, 31), 1) == date(2025, 1, 1)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 1)
    assert list(iter_months(date(2024, 11, 5), date(2025, 1, 20))) == [
        date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1),
    ]


def test_plan_for_occupied_property_with_tenant():
    tenant = Tenant(id="t1", name="Ann", property_id="p1", rent_amount=950)

    drafts = plan_payments_for_month(date(2024, 3, 1), [_property("p1")], [tenant], [])

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.id == ""
    assert draft.rent_month == "March 2024"
    assert draft.amount == 950
    assert draft.tenant_id == "t1"
    assert draft.amount_paid == 0
    assert draft.status == PaymentStatus.not_paid


def test_plan_skips_existing_month():
    existing = [Payment(id="x", property_id="p1", rent_month="March 2024", amount=1000)]

    assert plan_payments_for_month(date(2024, 3, 10), [_property("p1")], [], existing) == []
    assert len(plan_payments_for_month(date(2024, 4, 1), [_property("p1")], [], existing)) == 1


def test_plan_eligibility_and_force():
    properties = [
        _property("p1"),
        _property("p2", status=PropertyStatus.vacant, rent=700),
        _property("p3", status=PropertyStatus.maintenance),
    ]

    normal = plan_payments_for_month(date(2024, 3, 1), properties, [], [])
    forced = plan_payments_for_month(date(2024, 3, 1), properties, [], [], force_create=True)

    assert [d.property_id for d in normal] == ["p1"]
    assert [d.property_id for d in forced] == ["p1", "p2", "p3"]
    assert forced[1].amount == 700
    assert forced[1].tenant_id is None


def test_plan_does_not_duplicate_within_one_call():
    prop = _property("p1")

    drafts = plan_payments_for_month(date(2024, 3, 1), [prop, prop], [], [])

    assert len(drafts) == 1
