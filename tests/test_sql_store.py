import pytest
import pytest_asyncio
from datetime import date
from sqlalchemy import text

from landlord.errors import NotConnectedError, RecordNotFoundError
from landlord.schemas.records import (
    EntityKind, PaymentMethod, Property, PropertyStatus, RepairStatus,
)
from landlord.services.data_service import DataService
from landlord.services.store.sql_store import SqlStore, to_columns


@pytest_asyncio.fixture
async def store(tmp_path):
    store = SqlStore(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await store.provision_schema()
    yield store
    await store.close()


@pytest.mark.asyncio
async def test_create_and_fetch_property(store):
    created = await store.create(EntityKind.properties, {
        "address": "123 Oak Street", "city": "Springfield", "state": "IL",
        "zipcode": "62701", "rent": 1200, "status": PropertyStatus.occupied,
    })

    assert len(created.id) == 36
    assert created.rent == 1200
    assert created.status == PropertyStatus.occupied

    fetched = await store.fetch_all(EntityKind.properties)
    assert fetched == [created]


@pytest.mark.asyncio
async def test_tenant_empty_values_round_trip(store):
    created = await store.create(EntityKind.tenants, {
        "name": "Ann Lee", "email": "", "phone": "", "property_id": "",
        "lease_end": date(2024, 12, 31), "rent_amount": 1100,
        "payment_method": PaymentMethod.zelle,
    })

    assert created.email == ""
    assert created.property_id == ""
    assert created.lease_end == date(2024, 12, 31)
    assert created.payment_method == PaymentMethod.zelle
    assert created.lease_type is None


@pytest.mark.asyncio
async def test_update_and_delete(store):
    created = await store.create(EntityKind.repair_requests, {"title": "Leak", "tenant_id": "", "property_id": ""})

    updated = await store.update(EntityKind.repair_requests, created.id, {
        "status": RepairStatus.completed, "date_resolved": date(2024, 3, 1),
    })
    assert updated.status == RepairStatus.completed
    assert updated.date_resolved == date(2024, 3, 1)
    assert updated.title == "Leak"

    await store.delete(EntityKind.repair_requests, created.id)
    assert await store.fetch_all(EntityKind.repair_requests) == []


@pytest.mark.asyncio
async def test_missing_records_raise(store):
    with pytest.raises(RecordNotFoundError):
        await store.update(EntityKind.properties, "missing", {"rent": 10})
    with pytest.raises(RecordNotFoundError):
        await store.delete(EntityKind.properties, "missing")


@pytest.mark.asyncio
async def test_replace_all_overwrites_table(store):
    await store.create(EntityKind.properties, {"address": "old"})
    records = [
        Property(id="p1", address="1 Elm St", rent=900),
        Property(id="p2", address="2 Oak St", rent=1000, status=PropertyStatus.occupied),
    ]

    await store.replace_all(EntityKind.properties, records)

    fetched = await store.fetch_all(EntityKind.properties)
    assert sorted(p.id for p in fetched) == ["p1", "p2"]


@pytest.mark.asyncio
async def test_snapshot_reads_all_tables(store):
    await store.create(EntityKind.properties, {"address": "1 Elm St"})
    await store.create(EntityKind.payments, {"property_id": "", "rent_month": "March 2024", "amount": 500})

    snapshot = await store.fetch_snapshot()

    assert len(snapshot.properties) == 1
    assert len(snapshot.payments) == 1
    assert snapshot.payments[0].tenant_id is None
    assert snapshot.tenants == []


@pytest.mark.asyncio
async def test_requires_connection(tmp_path):
    store = SqlStore(f"sqlite+aiosqlite:///{tmp_path}/never.db")

    assert not store.is_connected()
    with pytest.raises(NotConnectedError):
        await store.fetch_all(EntityKind.properties)


@pytest.mark.asyncio
async def test_connection_probe_never_raises(tmp_path):
    store = SqlStore(f"sqlite+aiosqlite:///{tmp_path}/missing_dir/x.db")

    assert await store.test_connection() is False
    await store.close()


def test_to_columns_rejects_unknown_fields():
    with pytest.raises(ValueError):
        to_columns(EntityKind.properties, {"colour": "red"})

    assert to_columns(EntityKind.payments, {"id": "x", "method": "", "status": "Paid"}) == {
        "method": None, "status": "Paid",
    }


@pytest.mark.asyncio
async def test_data_service_over_sql(store):
    service = DataService(store)
    assert await service.load() == "store"

    prop = await service.add_property(address="1 Elm St", rent=1200)
    await service.add_tenant(name="Ann Lee", property_id=prop.id, lease_end="2024-12-31", rent_amount=1200)
    result = await service.generate_payments_for_specific_month(3, 2024)

    stored = await store.fetch_snapshot()
    assert stored.properties[0].status == PropertyStatus.occupied
    assert stored.tenants[0].lease_renewal == date(2024, 11, 1)
    assert result.generated == 1
    assert stored.payments[0].rent_month == "March 2024"


@pytest.mark.asyncio
async def test_invalid_row_is_skipped(store):
    good = await store.create(EntityKind.tenants, {"name": "Ann Lee", "rent_amount": 1000})
    async with store._engine.begin() as conn:
        await conn.execute(text(
            "INSERT INTO tenants (id, name, rent_amount, payment_method) "
            "VALUES ('t-bad', 'Bob Ray', 900, 'Check')"
        ))

    tenants = await store.fetch_all(EntityKind.tenants)
    assert [t.id for t in tenants] == [good.id]

    service = DataService(store)
    assert await service.load() == "store"
    assert [t.id for t in service.tenants] == [good.id]


@pytest.mark.asyncio
async def test_replaced_rows_come_back_in_stable_order(store):
    records = [Property(id=pid, address=f"{pid} Main St") for pid in ("p3", "p1", "p2")]

    await store.replace_all(EntityKind.properties, records)

    assert [p.id for p in await store.fetch_all(EntityKind.properties)] == ["p1", "p2", "p3"]
