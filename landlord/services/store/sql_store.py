"""
Relational store backed by SQLAlchemy (PostgreSQL via asyncpg in production,
SQLite via aiosqlite for local runs and tests).

Each domain field has an explicit column counterpart (FIELD_COLUMNS). Empty
strings are written as NULL for nullable text columns and NULLs are read
back as the domain default, so a round trip never changes a record.
"""
import enum
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError

from landlord.database.core import Base, build_engine
from landlord.database.models import (
    PropertyRow, TenantRow, PaymentRow, RepairRequestRow, ROW_CLASSES
)
from landlord.errors import ConnectivityError, NotConnectedError, RecordNotFoundError
from landlord.schemas.records import (
    EntityKind, Record, Property, Tenant, Payment, RepairRequest
)
from landlord.services.store.base import StoreAdapter


# domain field -> column
FIELD_COLUMNS: Dict[EntityKind, Dict[str, str]] = {
    EntityKind.properties: {
        "address": "address",
        "city": "city",
        "state": "state",
        "zipcode": "zipcode",
        "rent": "rent",
        "status": "status",
    },
    EntityKind.tenants: {
        "name": "name",
        "email": "email",
        "phone": "phone",
        "property_id": "property_id",
        "lease_start": "lease_start",
        "lease_end": "lease_end",
        "rent_amount": "rent_amount",
        "payment_method": "payment_method",
        "lease_type": "lease_type",
        "lease_renewal": "lease_renewal",
    },
    EntityKind.payments: {
        "property_id": "property_id",
        "tenant_id": "tenant_id",
        "rent_month": "rent_month",
        "amount": "amount",
        "amount_paid": "amount_paid",
        "payment_date": "payment_date",
        "status": "status",
        "method": "method",
    },
    EntityKind.repair_requests: {
        "tenant_id": "tenant_id",
        "property_id": "property_id",
        "title": "title",
        "description": "description",
        "priority": "priority",
        "status": "status",
        "date_submitted": "date_submitted",
        "date_resolved": "date_resolved",
        "category": "category",
        "close_notes": "close_notes",
    },
}

# Columns where "" is stored as NULL
NULLABLE_COLUMNS: Dict[EntityKind, frozenset] = {
    EntityKind.properties: frozenset(),
    EntityKind.tenants: frozenset({"email", "phone", "property_id", "payment_method", "lease_type", "lease_renewal"}),
    EntityKind.payments: frozenset({"property_id", "tenant_id", "payment_date", "method"}),
    EntityKind.repair_requests: frozenset({"tenant_id", "property_id", "description", "date_resolved", "category", "close_notes"}),
}


def to_columns(kind: EntityKind, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Translate domain fields into column values. ``id`` is never written."""
    mapping = FIELD_COLUMNS[kind]
    nullable = NULLABLE_COLUMNS[kind]
    values = {}
    for field, value in fields.items():
        if field == "id":
            continue
        if field not in mapping:
            raise ValueError(f"Unknown {kind.value} field: {field}")
        column = mapping[field]
        if isinstance(value, enum.Enum):
            value = value.value
        if column in nullable and value == "":
            value = None
        values[column] = value
    return values


def _money(value) -> float:
    return float(value) if value is not None else 0.0


def property_from_row(row: PropertyRow) -> Property:
    return Property(
        id=row.id,
        address=row.address or "",
        city=row.city or "",
        state=row.state or "",
        zipcode=row.zipcode or "",
        rent=_money(row.rent),
        status=row.status or "vacant",
    )


def tenant_from_row(row: TenantRow) -> Tenant:
    return Tenant(
        id=row.id,
        name=row.name or "",
        email=row.email or "",
        phone=row.phone or "",
        property_id=row.property_id or "",
        lease_start=row.lease_start,
        lease_end=row.lease_end,
        rent_amount=_money(row.rent_amount),
        payment_method=row.payment_method,
        lease_type=row.lease_type,
        lease_renewal=row.lease_renewal,
    )


def payment_from_row(row: PaymentRow) -> Payment:
    return Payment(
        id=row.id,
        property_id=row.property_id or "",
        tenant_id=row.tenant_id,
        rent_month=row.rent_month or "",
        amount=_money(row.amount),
        amount_paid=_money(row.amount_paid),
        payment_date=row.payment_date,
        status=row.status or "Not Paid Yet",
        method=row.method or "",
    )


def repair_request_from_row(row: RepairRequestRow) -> RepairRequest:
    return RepairRequest(
        id=row.id,
        tenant_id=row.tenant_id or "",
        property_id=row.property_id or "",
        title=row.title or "",
        description=row.description or "",
        priority=row.priority or "medium",
        status=row.status or "pending",
        date_submitted=row.date_submitted,
        date_resolved=row.date_resolved,
        category=row.category or "",
        close_notes=row.close_notes or "",
    )


FROM_ROW = {
    EntityKind.properties: property_from_row,
    EntityKind.tenants: tenant_from_row,
    EntityKind.payments: payment_from_row,
    EntityKind.repair_requests: repair_request_from_row,
}


class SqlStore(StoreAdapter):
    """Table-scoped select / insert / update / delete against the four tables."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine = None
        self._session_factory = None

    @property
    def name(self) -> str:
        return "sql"

    def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine, self._session_factory = build_engine(self.database_url, echo=self.echo)
        logging.info("Database engine created")

    def is_connected(self) -> bool:
        return self._engine is not None

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def _sessions(self):
        if self._session_factory is None:
            raise NotConnectedError("Database not connected. Call connect() first.")
        return self._session_factory

    async def test_connection(self) -> bool:
        try:
            self.connect()
            async with self._session_factory() as session:
                await session.execute(select(func.count()).select_from(PropertyRow))
            return True
        except Exception as e:
            logging.error(f"Database connection test failed: {e}")
            return False

    async def provision_schema(self) -> None:
        # Bootstrap step: connects on its own so a fresh database can be set up
        self.connect()
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise ConnectivityError(f"Schema creation failed: {e}") from e
        logging.info("Database schema provisioned")

    async def fetch_all(self, kind: EntityKind) -> List[Record]:
        sessions = self._sessions()
        row_cls = ROW_CLASSES[kind]
        stmt = select(row_cls).order_by(row_cls.created_at.desc(), row_cls.id)
        try:
            async with sessions() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching {kind.value}: {e}")
            raise ConnectivityError(f"Failed to fetch {kind.value}: {e}") from e

        convert = FROM_ROW[kind]
        records = []
        for row in rows:
            if not row.id:
                continue
            try:
                records.append(convert(row))
            except ValidationError as e:
                logging.warning(f"Skipping {kind.value} row {row.id}: {e.error_count()} invalid fields")
        return records

    async def create(self, kind: EntityKind, fields: Dict[str, Any]) -> Record:
        sessions = self._sessions()
        row_cls = ROW_CLASSES[kind]
        values = to_columns(kind, fields)
        try:
            async with sessions() as session:
                row = row_cls(**values)
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return FROM_ROW[kind](row)
        except SQLAlchemyError as e:
            logging.error(f"Error creating {kind.value}: {e}")
            raise ConnectivityError(f"Failed to create {kind.value}: {e}") from e

    async def update(self, kind: EntityKind, record_id: str, updates: Dict[str, Any]) -> Record:
        sessions = self._sessions()
        row_cls = ROW_CLASSES[kind]
        values = to_columns(kind, updates)
        try:
            async with sessions() as session:
                row = await session.get(row_cls, record_id)
                if row is None:
                    raise RecordNotFoundError(kind.value, record_id)
                for column, value in values.items():
                    setattr(row, column, value)
                await session.commit()
                await session.refresh(row)
                return FROM_ROW[kind](row)
        except SQLAlchemyError as e:
            logging.error(f"Error updating {kind.value} {record_id}: {e}")
            raise ConnectivityError(f"Failed to update {kind.value}: {e}") from e

    async def delete(self, kind: EntityKind, record_id: str) -> None:
        sessions = self._sessions()
        row_cls = ROW_CLASSES[kind]
        try:
            async with sessions() as session:
                result = await session.execute(delete(row_cls).where(row_cls.id == record_id))
                await session.commit()
        except SQLAlchemyError as e:
            logging.error(f"Error deleting {kind.value} {record_id}: {e}")
            raise ConnectivityError(f"Failed to delete {kind.value}: {e}") from e

        if result.rowcount == 0:
            raise RecordNotFoundError(kind.value, record_id)

    async def replace_all(self, kind: EntityKind, records: List[Record]) -> None:
        sessions = self._sessions()
        row_cls = ROW_CLASSES[kind]
        # One shared timestamp; fetch_all breaks the tie by id
        stamp = datetime.now(timezone.utc)
        try:
            async with sessions() as session:
                async with session.begin():
                    await session.execute(delete(row_cls))
                    for record in records:
                        values = to_columns(kind, record.model_dump())
                        session.add(row_cls(id=record.id, created_at=stamp, **values))
        except SQLAlchemyError as e:
            logging.error(f"Error replacing {kind.value}: {e}")
            raise ConnectivityError(f"Failed to replace {kind.value}: {e}") from e
        logging.info(f"Replaced {kind.value} with {len(records)} records")
