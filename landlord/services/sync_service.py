import logging
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from landlord.errors import LandlordError
from landlord.schemas.records import EntityKind
from landlord.services.data_service import DataService
from landlord.services.store.base import StoreAdapter

NOT_CONFIGURED = "No durable backend configured"
ALREADY_RUNNING = "A sync is already in progress"

# Parents before children so references resolve on the backend
PUSH_ORDER = (
    EntityKind.properties,
    EntityKind.tenants,
    EntityKind.payments,
    EntityKind.repair_requests,
)


class SyncResult(NamedTuple):
    success: bool
    message: str


class SyncStatus(NamedTuple):
    at: datetime
    success: bool
    message: str


class SyncCoordinator:
    """
    User-triggered reconciliation between memory and the durable backend.

    ``sync_now`` pulls and replaces memory wholesale; ``push_now`` writes
    memory over the backend. Both report through SyncResult and never raise
    for backend failures.
    """

    def __init__(self, data_service: DataService, store: Optional[StoreAdapter] = None):
        self.data_service = data_service
        self.store = store
        self.is_syncing = False
        self.last_sync: Optional[SyncStatus] = None

    def _record(self, success: bool, message: str) -> SyncResult:
        self.last_sync = SyncStatus(datetime.now(timezone.utc), success, message)
        return SyncResult(success, message)

    def _guard(self) -> Optional[SyncResult]:
        if self.store is None:
            return SyncResult(False, NOT_CONFIGURED)
        if self.is_syncing:
            return SyncResult(False, ALREADY_RUNNING)
        return None

    async def sync_now(self) -> SyncResult:
        blocked = self._guard()
        if blocked:
            return blocked

        self.is_syncing = True
        try:
            snapshot = await self.store.fetch_snapshot()
            self.data_service.replace_collections(snapshot)
            message = (
                f"Synced {len(snapshot.properties)} properties, {len(snapshot.tenants)} tenants, "
                f"{len(snapshot.payments)} payments and {len(snapshot.repair_requests)} repair requests"
            )
            logging.info(message)
            return self._record(True, message)
        except LandlordError as e:
            logging.error(f"Sync from {self.store.name} failed: {e}")
            return self._record(False, f"Sync failed: {e}")
        finally:
            self.is_syncing = False

    async def push_now(self) -> SyncResult:
        blocked = self._guard()
        if blocked:
            return blocked

        self.is_syncing = True
        try:
            snapshot = self.data_service.snapshot()
            for kind in PUSH_ORDER:
                await self.store.replace_all(kind, snapshot.for_kind(kind))
            message = f"Pushed all data to {self.store.name}"
            logging.info(message)
            return self._record(True, message)
        except LandlordError as e:
            logging.error(f"Push to {self.store.name} failed: {e}")
            return self._record(False, f"Push failed: {e}")
        finally:
            self.is_syncing = False

    async def provision(self) -> SyncResult:
        blocked = self._guard()
        if blocked:
            return blocked

        try:
            await self.store.provision_schema()
        except LandlordError as e:
            logging.error(f"Provisioning {self.store.name} failed: {e}")
            return SyncResult(False, f"Provisioning failed: {e}")
        return SyncResult(True, f"{self.store.name} is ready")
