"""Illustrative portfolio loaded in development when no backend is reachable."""
from datetime import date

from landlord.schemas.records import (
    Property, Tenant, Payment, RepairRequest, Snapshot,
    PropertyStatus, PaymentStatus, PaymentMethod, LeaseType, RepairPriority, RepairStatus,
)


def sample_snapshot() -> Snapshot:
    properties = [
        Property(id="1", address="123 Oak Street, Unit A", city="Springfield", state="IL",
                 zipcode="62701", rent=1200, status=PropertyStatus.occupied),
        Property(id="2", address="456 Pine Avenue, Unit B", city="Springfield", state="IL",
                 zipcode="62702", rent=1400, status=PropertyStatus.occupied),
        Property(id="3", address="789 Maple Drive", city="Springfield", state="IL",
                 zipcode="62704", rent=2000, status=PropertyStatus.vacant),
    ]

    tenants = [
        Tenant(id="1", name="John Smith", email="john.smith@email.com", phone="(555) 123-4567",
               property_id="1", lease_start=date(2024, 1, 1), lease_end=date(2024, 12, 31),
               rent_amount=1200, payment_method=PaymentMethod.zelle, lease_type=LeaseType.yearly,
               lease_renewal=date(2024, 11, 1)),
        Tenant(id="2", name="Sarah Johnson", email="sarah.johnson@email.com", phone="(555) 987-6543",
               property_id="2", lease_start=date(2024, 2, 1), lease_end=date(2025, 1, 31),
               rent_amount=1400, payment_method=PaymentMethod.direct_deposit, lease_type=LeaseType.yearly,
               lease_renewal=date(2024, 12, 1)),
    ]

    payments = [
        Payment(id="1", property_id="1", tenant_id="1", rent_month="January 2024", amount=1200,
                amount_paid=1200, payment_date=date(2024, 1, 1), status=PaymentStatus.paid,
                method="Bank Transfer"),
        Payment(id="2", property_id="1", tenant_id="1", rent_month="February 2024", amount=1200,
                amount_paid=1200, payment_date=date(2024, 2, 1), status=PaymentStatus.paid,
                method="Credit Card"),
        Payment(id="3", property_id="2", tenant_id="2", rent_month="February 2024", amount=1400,
                amount_paid=1400, payment_date=date(2024, 2, 1), status=PaymentStatus.paid,
                method="Bank Transfer"),
        Payment(id="4", property_id="1", tenant_id="1", rent_month="March 2024", amount=1200,
                amount_paid=0, status=PaymentStatus.not_paid, method="Credit Card"),
    ]

    repair_requests = [
        RepairRequest(id="1", tenant_id="1", property_id="1", title="Leaking Faucet in Kitchen",
                      description="The kitchen faucet has been dripping constantly for the past week. "
                                  "Water is pooling around the base.",
                      priority=RepairPriority.medium, status=RepairStatus.in_progress,
                      date_submitted=date(2024, 2, 15), category="Plumbing"),
        RepairRequest(id="2", tenant_id="2", property_id="2", title="Broken Window Lock",
                      description="The lock on the bedroom window is broken and won't secure properly.",
                      priority=RepairPriority.high, status=RepairStatus.pending,
                      date_submitted=date(2024, 2, 20), category="Security"),
        RepairRequest(id="3", tenant_id="1", property_id="1", title="HVAC Not Working",
                      description="Heating system stopped working. Temperature is very low.",
                      priority=RepairPriority.urgent, status=RepairStatus.completed,
                      date_submitted=date(2024, 1, 30), date_resolved=date(2024, 2, 2), category="HVAC",
                      close_notes="Replaced heating unit filter and reset system. Working properly now."),
    ]

    return Snapshot(properties, tenants, payments, repair_requests)
