"""
Google Sheets store.

One sheet per entity kind, first row is the header, every following row is a
record with the identifier in column A. Reads map columns by header name, so
sheets written in an older layout (Payments without "Tenant ID") still parse;
rows whose identifier cell is empty are skipped. Writes rewrite the whole used
range (clear + put) in the current layout.

API Docs: https://developers.google.com/sheets/api/reference/rest
"""
import aiohttp
import asyncio
import enum
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from pydantic import ValidationError

from landlord.errors import ConfigurationError, ConnectivityError, NotConnectedError, RecordNotFoundError
from landlord.schemas.records import (
    EntityKind, Record, Property, Tenant, Payment, RepairRequest,
    PropertyStatus, PaymentStatus, PaymentMethod, LeaseType, RepairPriority, RepairStatus,
)
from landlord.services.google_auth import GoogleTokenHolder
from landlord.services.store.base import StoreAdapter

BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

HEADERS: Dict[EntityKind, List[str]] = {
    EntityKind.properties: ["ID", "Address", "City", "State", "ZipCode", "Rent", "Status"],
    EntityKind.tenants: [
        "ID", "Name", "Email", "Phone", "Property ID", "Lease Start", "Lease End",
        "Rent Amount", "Payment Method", "Lease Type", "Lease Renewal",
    ],
    EntityKind.payments: [
        "ID", "Property ID", "Tenant ID", "Amount", "Amount Paid", "Date",
        "Status", "Method", "Rent Month",
    ],
    EntityKind.repair_requests: [
        "ID", "Tenant ID", "Property ID", "Title", "Description", "Priority", "Status",
        "Date Submitted", "Date Resolved", "Category", "Close Notes",
    ],
}


def last_column(kind: EntityKind) -> str:
    return chr(ord("A") + len(HEADERS[kind]) - 1)


# --- Cell parsing ---

def parse_number(value: Any) -> float:
    """Numeric cell to float: "1,200.50" -> 1200.5, blanks and junk -> 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = str(value).replace(",", "").strip()
    if cleaned == "":
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logging.warning(f"Unparsable date cell: {value!r}")
        return None


def parse_enum(enum_cls, value: Any, default):
    text = str(value).strip() if value is not None else ""
    if text == "":
        return default
    try:
        return enum_cls(text)
    except ValueError:
        logging.warning(f"Unknown {enum_cls.__name__} value {text!r}, using {default!r}")
        return default


def format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _cells(row: List[Any], width: int) -> List[str]:
    padded = [("" if cell is None else str(cell)) for cell in row]
    return padded + [""] * (width - len(padded))


# --- Row <-> record ---

def row_to_property(row: List[Any]) -> Property:
    c = _cells(row, 7)
    return Property(
        id=c[0].strip(),
        address=c[1],
        city=c[2],
        state=c[3],
        zipcode=c[4],
        rent=parse_number(c[5]),
        status=parse_enum(PropertyStatus, c[6], PropertyStatus.vacant),
    )


def row_to_tenant(row: List[Any]) -> Tenant:
    c = _cells(row, 11)
    return Tenant(
        id=c[0].strip(),
        name=c[1],
        email=c[2],
        phone=c[3],
        property_id=c[4],
        lease_start=parse_date(c[5]),
        lease_end=parse_date(c[6]),
        rent_amount=parse_number(c[7]),
        payment_method=parse_enum(PaymentMethod, c[8], None),
        lease_type=parse_enum(LeaseType, c[9], None),
        lease_renewal=parse_date(c[10]),
    )


def row_to_payment(row: List[Any]) -> Payment:
    c = _cells(row, 9)
    return Payment(
        id=c[0].strip(),
        property_id=c[1],
        tenant_id=c[2] or None,
        amount=parse_number(c[3]),
        amount_paid=parse_number(c[4]),
        payment_date=parse_date(c[5]),
        status=parse_enum(PaymentStatus, c[6], PaymentStatus.not_paid),
        method=c[7],
        rent_month=c[8],
    )


def row_to_repair_request(row: List[Any]) -> RepairRequest:
    c = _cells(row, 11)
    status = "pending" if c[6].strip() == "submitted" else c[6]
    return RepairRequest(
        id=c[0].strip(),
        tenant_id=c[1],
        property_id=c[2],
        title=c[3],
        description=c[4],
        priority=parse_enum(RepairPriority, c[5], RepairPriority.medium),
        status=parse_enum(RepairStatus, status, RepairStatus.pending),
        date_submitted=parse_date(c[7]),
        date_resolved=parse_date(c[8]),
        category=c[9],
        close_notes=c[10],
    )


def property_to_row(p: Property) -> List[str]:
    return [format_cell(v) for v in (p.id, p.address, p.city, p.state, p.zipcode, p.rent, p.status)]


def tenant_to_row(t: Tenant) -> List[str]:
    return [format_cell(v) for v in (
        t.id, t.name, t.email, t.phone, t.property_id, t.lease_start, t.lease_end,
        t.rent_amount, t.payment_method, t.lease_type, t.lease_renewal,
    )]


def payment_to_row(p: Payment) -> List[str]:
    return [format_cell(v) for v in (
        p.id, p.property_id, p.tenant_id, p.amount, p.amount_paid, p.payment_date,
        p.status, p.method, p.rent_month,
    )]


def repair_request_to_row(r: RepairRequest) -> List[str]:
    return [format_cell(v) for v in (
        r.id, r.tenant_id, r.property_id, r.title, r.description, r.priority, r.status,
        r.date_submitted, r.date_resolved, r.category, r.close_notes,
    )]


FROM_ROW = {
    EntityKind.properties: row_to_property,
    EntityKind.tenants: row_to_tenant,
    EntityKind.payments: row_to_payment,
    EntityKind.repair_requests: row_to_repair_request,
}

TO_ROW = {
    EntityKind.properties: property_to_row,
    EntityKind.tenants: tenant_to_row,
    EntityKind.payments: payment_to_row,
    EntityKind.repair_requests: repair_request_to_row,
}


def align_rows(kind: EntityKind, header: List[Any], rows: List[List[Any]]) -> List[List[Any]]:
    """
    Reorder data rows into HEADERS[kind] order using the sheet's own header row.

    Columns the sheet lacks come back empty. A header without an "ID" cell is
    not trusted and the rows are taken in the current layout.
    """
    expected = HEADERS[kind]
    names = [str(cell).strip() for cell in header]
    if names[:len(expected)] == expected or "ID" not in names:
        return rows

    positions = [names.index(title) if title in names else None for title in expected]
    return [
        ["" if pos is None or pos >= len(row) else row[pos] for pos in positions]
        for row in rows
    ]


def rows_to_records(kind: EntityKind, rows: List[List[Any]]) -> List[Record]:
    """Convert data rows (header excluded), dropping rows without an identifier."""
    convert = FROM_ROW[kind]
    records = []
    for index, row in enumerate(rows, start=2):
        if not row or not str(row[0]).strip():
            continue
        try:
            records.append(convert(row))
        except ValidationError as e:
            logging.warning(f"Skipping {kind.sheet_title} row {index}: {e.error_count()} invalid fields")
    return records


class SheetsStore(StoreAdapter):
    """Spreadsheet backend: four named sheets inside one spreadsheet."""

    def __init__(self, auth: GoogleTokenHolder, spreadsheet_id: Optional[str]):
        self.auth = auth
        self.spreadsheet_id = spreadsheet_id

    @property
    def name(self) -> str:
        return "sheets"

    def is_connected(self) -> bool:
        return self.auth.is_connected() and bool(self.spreadsheet_id)

    def _require_connection(self) -> None:
        if not self.auth.is_connected():
            raise NotConnectedError("Google Sheets not connected. Please reconnect your account.")
        if not self.spreadsheet_id:
            raise ConfigurationError("No spreadsheet selected. Please select a spreadsheet first.")

    def _values_url(self, kind: EntityKind, cell_range: str) -> str:
        return f"{BASE_URL}/{self.spreadsheet_id}/values/{quote(kind.sheet_title + '!' + cell_range, safe='')}"

    async def _request(self, method: str, url: str, *, params: Optional[dict] = None,
                       json: Optional[dict] = None) -> dict:
        token = await self.auth.get_valid_token()
        headers = {"Authorization": f"Bearer {token}"}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method, url,
                    headers=headers,
                    params=params,
                    json=json,
                    timeout=aiohttp.ClientTimeout(total=20)
                ) as resp:
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError:
                        data = {}
                    if resp.status >= 400:
                        reason = ((data or {}).get("error") or {}).get("message") or resp.reason
                        raise ConnectivityError(f"Google Sheets error {resp.status}: {reason}", status=resp.status)
                    return data or {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ConnectivityError(f"Google Sheets request failed: {e!r}") from e

    async def test_connection(self) -> bool:
        if not self.spreadsheet_id:
            logging.error("No spreadsheet ID provided for connection test")
            return False
        try:
            await self._request("GET", f"{BASE_URL}/{self.spreadsheet_id}")
        except Exception as e:
            logging.error(f"Google Sheets connection test failed: {e}")
            return False
        logging.info("Google Sheets connection test successful")
        return True

    async def provision_schema(self) -> None:
        self._require_connection()
        spreadsheet = await self._request("GET", f"{BASE_URL}/{self.spreadsheet_id}")
        existing = {
            (sheet.get("properties") or {}).get("title")
            for sheet in spreadsheet.get("sheets", [])
        }
        missing = [kind.sheet_title for kind in EntityKind if kind.sheet_title not in existing]

        if not missing:
            logging.info("All required sheets already exist")
            return

        logging.info(f"Creating missing sheets: {', '.join(missing)}")
        requests = [{"addSheet": {"properties": {"title": title}}} for title in missing]
        await self._request(
            "POST",
            f"{BASE_URL}/{self.spreadsheet_id}:batchUpdate",
            json={"requests": requests},
        )
        logging.info(f"Successfully created {len(missing)} sheets")

    async def _read_rows(self, kind: EntityKind) -> List[List[Any]]:
        data = await self._request("GET", self._values_url(kind, f"A1:{last_column(kind)}"))
        values = data.get("values", [])
        if not values:
            return []
        return align_rows(kind, values[0], values[1:])

    async def _write_records(self, kind: EntityKind, records: List[Record]) -> None:
        column = last_column(kind)
        to_row = TO_ROW[kind]
        values = [HEADERS[kind]] + [to_row(record) for record in records]

        await self._request("POST", self._values_url(kind, f"A:{column}") + ":clear", json={})
        await self._request(
            "PUT",
            self._values_url(kind, f"A1:{column}{len(values)}"),
            params={"valueInputOption": "RAW"},
            json={"majorDimension": "ROWS", "values": values},
        )

    async def fetch_all(self, kind: EntityKind) -> List[Record]:
        self._require_connection()
        records = rows_to_records(kind, await self._read_rows(kind))
        logging.info(f"Pulled {len(records)} {kind.value} from Google Sheets")
        return records

    async def create(self, kind: EntityKind, fields: Dict[str, Any]) -> Record:
        self._require_connection()
        data = dict(fields)
        data["id"] = str(uuid.uuid4())
        record = kind.record_class.model_validate(data)

        records = await self.fetch_all(kind)
        records.append(record)
        await self._write_records(kind, records)
        return record

    async def update(self, kind: EntityKind, record_id: str, updates: Dict[str, Any]) -> Record:
        self._require_connection()
        records = await self.fetch_all(kind)
        for index, record in enumerate(records):
            if record.id == record_id:
                updated = record.merge({k: v for k, v in updates.items() if k != "id"})
                records[index] = updated
                await self._write_records(kind, records)
                return updated
        raise RecordNotFoundError(kind.value, record_id)

    async def delete(self, kind: EntityKind, record_id: str) -> None:
        self._require_connection()
        records = await self.fetch_all(kind)
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            raise RecordNotFoundError(kind.value, record_id)
        await self._write_records(kind, remaining)

    async def replace_all(self, kind: EntityKind, records: List[Record]) -> None:
        self._require_connection()
        await self._write_records(kind, records)
        logging.info(f"Successfully synced {len(records)} {kind.value} to Google Sheets")
