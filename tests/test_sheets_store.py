import aiohttp
import asyncio
import pytest
from datetime import date, datetime, timedelta, timezone
from urllib.parse import unquote

from landlord.errors import ConfigurationError, ConnectivityError, NotConnectedError, RecordNotFoundError
from landlord.schemas.records import (
    EntityKind, Payment, PaymentStatus, Property, PropertyStatus, RepairStatus, Snapshot,
)
from landlord.services.data_service import DataService
from landlord.services.google_auth import GoogleTokenHolder
from landlord.services.sync_service import SyncCoordinator
from landlord.services.store.sheets_store import (
    HEADERS, SheetsStore, align_rows, last_column, parse_number, payment_to_row,
    row_to_property, row_to_repair_request, row_to_tenant, rows_to_records,
)


class FakeSheetsApi:
    """Stands in for SheetsStore._request; keeps the full grid (header first) per sheet title."""

    def __init__(self, sheets=None):
        self.sheets = sheets or {}
        self.calls = []
        self.existing_titles = ["Properties", "Tenants", "Payments", "Repairs"]

    async def __call__(self, method, url, *, params=None, json=None):
        self.calls.append((method, url, params, json))
        if "/values/" not in url:
            if method == "GET":
                return {"sheets": [{"properties": {"title": t}} for t in self.existing_titles]}
            return {}

        cell_range = unquote(url.split("/values/")[1])
        title = cell_range.split("!")[0]
        if method == "GET":
            return {"values": self.sheets.get(title, [])}
        if cell_range.endswith(":clear"):
            self.sheets[title] = []
        elif method == "PUT":
            self.sheets[title] = json["values"]
        return {}


@pytest.fixture
def api():
    return FakeSheetsApi({
        "Properties": [
            HEADERS[EntityKind.properties],
            ["p1", "123 Oak Street", "Springfield", "IL", "62701", "1,200", "occupied"],
            ["", "orphan row"],
            ["p2", "9 Birch Rd", "Springfield", "IL", "62704", "800", "vacant"],
        ],
    })


@pytest.fixture
def store(api, monkeypatch):
    auth = GoogleTokenHolder("client-id", access_token="token", refresh_token="refresh")
    store = SheetsStore(auth, "sheet-123")
    monkeypatch.setattr(store, "_request", api)
    return store


# --- Row parsing ---

def test_row_to_property_parses_cells():
    prop = row_to_property(["p1", "123 Oak Street", "Springfield", "IL", "62701", "1,200.50", "occupied"])

    assert prop.rent == 1200.5
    assert prop.status == PropertyStatus.occupied


def test_short_row_gets_defaults():
    tenant = row_to_tenant(["t1", "Ann Lee"])

    assert tenant.email == ""
    assert tenant.lease_start is None
    assert tenant.rent_amount == 0
    assert tenant.payment_method is None


def test_unknown_and_legacy_values():
    repair = row_to_repair_request(["r1", "t1", "p1", "Leak", "", "whenever", "submitted", "2024-02-15"])

    assert repair.status == RepairStatus.pending
    assert repair.priority.value == "medium"
    assert repair.date_submitted == date(2024, 2, 15)
    assert parse_number("n/a") == 0


def test_rows_without_identifier_are_dropped():
    rows = [["", "x"], [], ["p1", "1 Elm St"], ["  ", "y"]]

    records = rows_to_records(EntityKind.properties, rows)

    assert [r.id for r in records] == ["p1"]


def test_payment_row_layout():
    payment = Payment(id="pay1", property_id="p1", tenant_id=None, rent_month="March 2024",
                      amount=1200, amount_paid=600.5, payment_date=date(2024, 3, 2),
                      status=PaymentStatus.partially_paid, method="Zelle")

    row = payment_to_row(payment)

    assert row == ["pay1", "p1", "", "1200", "600.5", "2024-03-02", "Partially Paid", "Zelle", "March 2024"]
    assert len(row) == len(HEADERS[EntityKind.payments])
    assert last_column(EntityKind.payments) == "I"
    assert last_column(EntityKind.properties) == "G"


# --- Store operations ---

@pytest.mark.asyncio
async def test_fetch_all_reads_data_range(store, api):
    properties = await store.fetch_all(EntityKind.properties)

    assert [p.id for p in properties] == ["p1", "p2"]
    assert properties[0].rent == 1200
    method, url, _, _ = api.calls[0]
    assert method == "GET"
    assert url.endswith("/sheet-123/values/Properties%21A1%3AG")


@pytest.mark.asyncio
async def test_create_rewrites_sheet_with_header(store, api):
    created = await store.create(EntityKind.properties, {"address": "5 Cedar Ln", "rent": 950})

    put = [c for c in api.calls if c[0] == "PUT"][-1]
    _, url, params, body = put
    assert params == {"valueInputOption": "RAW"}
    assert body["values"][0] == HEADERS[EntityKind.properties]
    assert body["values"][-1][0] == created.id
    assert unquote(url).endswith("Properties!A1:G4")
    assert [p.id for p in await store.fetch_all(EntityKind.properties)] == ["p1", "p2", created.id]


@pytest.mark.asyncio
async def test_update_and_delete(store):
    updated = await store.update(EntityKind.properties, "p2", {"status": PropertyStatus.maintenance})
    assert updated.status == PropertyStatus.maintenance
    assert updated.address == "9 Birch Rd"

    await store.delete(EntityKind.properties, "p1")
    assert [p.id for p in await store.fetch_all(EntityKind.properties)] == ["p2"]

    with pytest.raises(RecordNotFoundError):
        await store.update(EntityKind.properties, "p1", {"rent": 1})
    with pytest.raises(RecordNotFoundError):
        await store.delete(EntityKind.properties, "p1")


@pytest.mark.asyncio
async def test_replace_all_writes_header_only_when_empty(store, api):
    await store.replace_all(EntityKind.payments, [])

    _, url, _, body = [c for c in api.calls if c[0] == "PUT"][-1]
    assert body["values"] == [HEADERS[EntityKind.payments]]
    assert unquote(url).endswith("Payments!A1:I1")


@pytest.mark.asyncio
async def test_provision_adds_missing_sheets(store, api):
    api.existing_titles = ["Properties", "Sheet1"]

    await store.provision_schema()

    method, url, _, body = api.calls[-1]
    assert method == "POST"
    assert url.endswith("/sheet-123:batchUpdate")
    titles = [r["addSheet"]["properties"]["title"] for r in body["requests"]]
    assert titles == ["Tenants", "Payments", "Repairs"]


@pytest.mark.asyncio
async def test_provision_skips_when_complete(store, api):
    await store.provision_schema()

    assert [c[0] for c in api.calls] == ["GET"]


@pytest.mark.asyncio
async def test_operations_need_auth_and_spreadsheet():
    signed_out = SheetsStore(GoogleTokenHolder("client-id"), "sheet-123")
    no_sheet = SheetsStore(GoogleTokenHolder("client-id", refresh_token="refresh"), None)

    assert not signed_out.is_connected()
    with pytest.raises(NotConnectedError):
        await signed_out.fetch_all(EntityKind.properties)
    with pytest.raises(ConfigurationError):
        await no_sheet.create(EntityKind.properties, {"address": "x"})
    assert await no_sheet.test_connection() is False


@pytest.mark.asyncio
async def test_connection_probe_reports_failure(store, monkeypatch):
    async def failing(method, url, *, params=None, json=None):
        raise ConnectivityError("Google Sheets error 403: forbidden", status=403)

    monkeypatch.setattr(store, "_request", failing)

    assert await store.test_connection() is False


# --- Older sheet layouts ---

OLD_PAYMENT_HEADER = ["ID", "Property ID", "Amount", "Amount Paid", "Date", "Status", "Method", "Rent Month"]


def test_align_rows_maps_columns_by_header():
    rows = [["pay1", "p1", "1,200", "600", "2024-03-02", "Partially Paid", "Zelle", "March 2024"]]

    aligned = align_rows(EntityKind.payments, OLD_PAYMENT_HEADER, rows)

    assert aligned == [["pay1", "p1", "", "1,200", "600", "2024-03-02", "Partially Paid", "Zelle", "March 2024"]]
    assert align_rows(EntityKind.payments, HEADERS[EntityKind.payments], rows) is rows
    assert align_rows(EntityKind.payments, ["", "junk"], rows) is rows


@pytest.mark.asyncio
async def test_payments_sheet_without_tenant_column(store, api):
    api.sheets["Payments"] = [
        OLD_PAYMENT_HEADER,
        ["pay1", "p1", "1,200", "600", "2024-03-02", "Partially Paid", "Zelle", "March 2024"],
        ["pay2", "p1", "1200", "0", "", "Not Paid Yet", "", "April 2024"],
    ]

    payments = await store.fetch_all(EntityKind.payments)

    assert [(p.id, p.rent_month) for p in payments] == [("pay1", "March 2024"), ("pay2", "April 2024")]
    assert payments[0].amount == 1200
    assert payments[0].amount_paid == 600
    assert payments[0].tenant_id is None
    assert payments[0].status == PaymentStatus.partially_paid


@pytest.mark.asyncio
async def test_generation_sees_months_from_older_payments_sheet(store, api):
    api.sheets["Payments"] = [
        OLD_PAYMENT_HEADER,
        ["pay1", "p1", "1200", "1200", "2024-03-02", "Paid", "Zelle", "March 2024"],
    ]
    service = DataService(store)
    assert await service.load() == "store"

    result = await service.generate_payments_for_month(date(2024, 3, 1))

    assert result.generated == 0
    assert [p.id for p in service.payments] == ["pay1"]


# --- Timeouts ---

class _Response:
    status = 200
    reason = "OK"

    def __init__(self, payload):
        self.payload = payload

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def _live_store():
    auth = GoogleTokenHolder("client-id", access_token="token",
                             expires_at=datetime.now(timezone.utc) + timedelta(hours=1))
    return SheetsStore(auth, "sheet-123")


@pytest.mark.asyncio
async def test_timeout_becomes_connectivity_error(monkeypatch):
    def timing_out(self, method, url, **kwargs):
        raise asyncio.TimeoutError()

    monkeypatch.setattr(aiohttp.ClientSession, "request", timing_out)
    store = _live_store()

    with pytest.raises(ConnectivityError):
        await store.fetch_all(EntityKind.properties)
    assert await store.test_connection() is False

    service = DataService(store, production=True)
    assert await service.load() == "empty"

    result = await SyncCoordinator(service, store).sync_now()
    assert result.success is False
    assert result.message.startswith("Sync failed")


@pytest.mark.asyncio
async def test_generation_continues_after_timeout(monkeypatch):
    calls = []

    def first_call_times_out(self, method, url, **kwargs):
        calls.append(method)
        if len(calls) == 1:
            raise asyncio.TimeoutError()
        return _Response({"values": []} if method == "GET" else {})

    monkeypatch.setattr(aiohttp.ClientSession, "request", first_call_times_out)
    service = DataService(_live_store())
    service.replace_collections(Snapshot(
        [
            Property(id="p1", address="1 Elm St", rent=1000, status=PropertyStatus.occupied),
            Property(id="p2", address="2 Oak St", rent=900, status=PropertyStatus.occupied),
        ],
        [], [], [],
    ))

    result = await service.generate_payments_for_month(date(2024, 3, 1))

    assert result.generated == 1
    assert result.payments[0].property_id == "p2"
    assert [p.property_id for p in service.payments] == ["p2"]
