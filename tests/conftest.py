from datetime import date
from typing import Any, Dict, List

import pytest

from landlord.errors import ConnectivityError, RecordNotFoundError
from landlord.schemas.records import EntityKind, Record
from landlord.services.data_service import DataService
from landlord.services.store.base import StoreAdapter

TODAY = date(2024, 3, 15)


class MemoryStore(StoreAdapter):
    """Backend double: keeps records in dicts and logs every call."""

    def __init__(self):
        self.tables: Dict[EntityKind, Dict[str, Record]] = {kind: {} for kind in EntityKind}
        self.calls: List[tuple] = []
        self.fail_on = set()
        self.fail_for_property = set()
        self.reachable = True
        self.provisioned = False
        self._seq = 0

    @property
    def name(self) -> str:
        return "memory"

    def is_connected(self) -> bool:
        return self.reachable

    def seed(self, kind: EntityKind, *records: Record) -> None:
        for record in records:
            self.tables[kind][record.id] = record

    def _check(self, op: str, kind: EntityKind, record_id: str = None) -> None:
        self.calls.append((op, kind, record_id))
        if op in self.fail_on:
            raise ConnectivityError(f"{op} failed")

    async def test_connection(self) -> bool:
        return self.reachable

    async def fetch_all(self, kind: EntityKind) -> List[Record]:
        self._check("fetch_all", kind)
        return list(self.tables[kind].values())

    async def create(self, kind: EntityKind, fields: Dict[str, Any]) -> Record:
        self._check("create", kind)
        if fields.get("property_id") in self.fail_for_property:
            raise ConnectivityError(f"create rejected for {fields['property_id']}")
        self._seq += 1
        record = kind.record_class.model_validate({**fields, "id": f"srv-{self._seq}"})
        self.tables[kind][record.id] = record
        return record

    async def update(self, kind: EntityKind, record_id: str, updates: Dict[str, Any]) -> Record:
        self._check("update", kind, record_id)
        if record_id not in self.tables[kind]:
            raise RecordNotFoundError(kind.value, record_id)
        updated = self.tables[kind][record_id].merge(updates)
        self.tables[kind][record_id] = updated
        return updated

    async def delete(self, kind: EntityKind, record_id: str) -> None:
        self._check("delete", kind, record_id)
        if self.tables[kind].pop(record_id, None) is None:
            raise RecordNotFoundError(kind.value, record_id)

    async def replace_all(self, kind: EntityKind, records: List[Record]) -> None:
        self._check("replace_all", kind)
        self.tables[kind] = {record.id: record for record in records}

    async def provision_schema(self) -> None:
        self._check("provision_schema", None)
        self.provisioned = True


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def local_service():
    """In-memory service with empty collections and a fixed clock."""
    return DataService(None, today=lambda: TODAY)


@pytest.fixture
def remote_service(memory_store):
    return DataService(memory_store, today=lambda: TODAY)
