"""Base store adapter interface"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from landlord.schemas.records import EntityKind, Record, Snapshot


class StoreAdapter(ABC):
    """Durable copy of record for the four entity kinds.

    Adapters translate records to and from their backend representation
    and perform the network calls. They never cascade: deleting a property
    only deletes that property.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for logging"""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """True when write operations may be attempted"""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """Probe the backend. Never raises."""
        pass

    @abstractmethod
    async def fetch_all(self, kind: EntityKind) -> List[Record]:
        """All records of a kind. Rows without an identifier are skipped."""
        pass

    @abstractmethod
    async def create(self, kind: EntityKind, fields: Dict[str, Any]) -> Record:
        """Insert one record and return it with its assigned id"""
        pass

    @abstractmethod
    async def update(self, kind: EntityKind, record_id: str, updates: Dict[str, Any]) -> Record:
        """Apply changed fields to one record and return the stored result"""
        pass

    @abstractmethod
    async def delete(self, kind: EntityKind, record_id: str) -> None:
        pass

    @abstractmethod
    async def replace_all(self, kind: EntityKind, records: List[Record]) -> None:
        """Overwrite every stored record of a kind with ``records``"""
        pass

    async def provision_schema(self) -> None:
        """Make sure the four tables exist before the first write"""
        return None

    async def close(self) -> None:
        return None

    async def fetch_snapshot(self) -> Snapshot:
        properties, tenants, payments, repairs = await asyncio.gather(
            self.fetch_all(EntityKind.properties),
            self.fetch_all(EntityKind.tenants),
            self.fetch_all(EntityKind.payments),
            self.fetch_all(EntityKind.repair_requests),
        )
        return Snapshot(properties, tenants, payments, repairs)
