from datetime import date

from landlord.data.sample_data import sample_snapshot
from landlord.services.dashboard_service import (
    get_lease_alerts, get_month_summary, get_payment_totals, get_portfolio_stats,
)


def test_portfolio_stats():
    stats = get_portfolio_stats(sample_snapshot())

    assert stats.total_properties == 3
    assert stats.occupied == 2
    assert stats.vacant == 1
    assert stats.expected_revenue == 2600
    # faucet (in progress) and window lock (pending); the urgent HVAC job is completed
    assert stats.active_repairs == 2
    assert stats.urgent_repairs == 0
    assert abs(stats.occupancy_rate - 2 / 3) < 1e-9


def test_lease_alerts():
    snapshot = sample_snapshot()

    november = get_lease_alerts(snapshot.tenants, snapshot.properties, date(2024, 11, 15))
    january = get_lease_alerts(snapshot.tenants, snapshot.properties, date(2025, 1, 5))

    assert [(a.tenant_name, a.status) for a in november] == [("John Smith", "expiring")]
    assert november[0].property_address == "123 Oak Street, Unit A"
    assert [(a.tenant_name, a.status) for a in january] == [
        ("John Smith", "expired"),
        ("Sarah Johnson", "expiring"),
    ]


def test_payment_totals():
    totals = get_payment_totals(sample_snapshot().payments, date(2024, 2, 10))

    assert totals.collected == 3800
    assert totals.pending == 1200
    assert totals.paid_this_month == 2600


def test_month_summary():
    snapshot = sample_snapshot()

    february = get_month_summary(snapshot, date(2024, 2, 1))
    march = get_month_summary(snapshot, date(2024, 3, 1))
    one_tenant = get_month_summary(snapshot, date(2024, 3, 1), tenant_id="1")
    unknown = get_month_summary(snapshot, date(2024, 3, 1), tenant_id="nobody")

    assert february == ("February 2024", 2600, 2600, 0)
    assert march.received == 0
    assert march.missing == 2600
    assert one_tenant.expected == 1200
    assert unknown.expected == 0
