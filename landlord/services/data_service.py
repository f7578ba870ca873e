"""
Data service: the single owner of the in-memory collections.

Every mutation goes through here. With a durable store the remote call runs
first and memory is only touched once it succeeds; without one, memory is
changed directly and records get locally generated ids. Cross-entity side
effects (property occupancy, cascades, renewal dates, payment status,
repair resolution date) are derived here and nowhere else.
"""
import logging
import uuid
from datetime import date
from typing import Any, Callable, Iterable, List, NamedTuple, Optional, Tuple

from landlord.data.sample_data import sample_snapshot
from landlord.errors import LandlordError, RecordNotFoundError
from landlord.schemas.records import (
    EntityKind, Record, Snapshot,
    Property, Tenant, Payment, RepairRequest,
    PropertyStatus, RepairStatus, payment_status_for,
)
from landlord.services.payment_generator import (
    add_months, format_rent_month, iter_months, month_start,
    parse_rent_month, plan_payments_for_month,
)
from landlord.services.store.base import StoreAdapter


class GenerationResult(NamedTuple):
    generated: int
    month: str
    payments: List[Payment]


class CurrentAndNextResult(NamedTuple):
    current: GenerationResult
    next: GenerationResult
    total_generated: int


def lease_renewal_for(lease_end: date) -> date:
    """Renewal reminder: the first day of the month before the lease ends."""
    return add_months(lease_end, -1)


def _local_id() -> str:
    return uuid.uuid4().hex


class DataService:
    def __init__(
        self,
        store: Optional[StoreAdapter] = None,
        *,
        production: bool = False,
        cascade_repairs: bool = True,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = _local_id,
    ):
        self.store = store
        self.production = production
        self.cascade_repairs = cascade_repairs
        self._today = today
        self._new_id = id_factory

        self._properties: List[Property] = []
        self._tenants: List[Tenant] = []
        self._payments: List[Payment] = []
        self._repair_requests: List[RepairRequest] = []
        self.is_loading = False

    @classmethod
    def from_config(cls, config, store: Optional[StoreAdapter] = None) -> "DataService":
        return cls(store, production=config.is_production, cascade_repairs=config.CASCADE_REPAIRS)

    # --- Read-only views ---

    @property
    def properties(self) -> Tuple[Property, ...]:
        return tuple(self._properties)

    @property
    def tenants(self) -> Tuple[Tenant, ...]:
        return tuple(self._tenants)

    @property
    def payments(self) -> Tuple[Payment, ...]:
        return tuple(self._payments)

    @property
    def repair_requests(self) -> Tuple[RepairRequest, ...]:
        return tuple(self._repair_requests)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            list(self._properties), list(self._tenants),
            list(self._payments), list(self._repair_requests),
        )

    def _collection(self, kind: EntityKind) -> list:
        return getattr(self, "_" + kind.value)

    def _find(self, kind: EntityKind, record_id: str) -> Optional[Record]:
        for record in self._collection(kind):
            if record.id == record_id:
                return record
        return None

    def _require(self, kind: EntityKind, record_id: str) -> Record:
        record = self._find(kind, record_id)
        if record is None:
            raise RecordNotFoundError(kind.value, record_id)
        return record

    def get_property(self, property_id: str) -> Optional[Property]:
        return self._find(EntityKind.properties, property_id)

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self._find(EntityKind.tenants, tenant_id)

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        return self._find(EntityKind.payments, payment_id)

    def get_repair_request(self, request_id: str) -> Optional[RepairRequest]:
        return self._find(EntityKind.repair_requests, request_id)

    def tenant_for_property(self, property_id: str) -> Optional[Tenant]:
        for tenant in self._tenants:
            if tenant.property_id == property_id:
                return tenant
        return None

    def payments_for_property(self, property_id: str) -> List[Payment]:
        """Payments of one property, oldest rent month first."""
        payments = [p for p in self._payments if p.property_id == property_id]
        return sorted(payments, key=lambda p: parse_rent_month(p.rent_month) or date.min)

    # --- Loading ---

    def replace_collections(self, snapshot: Snapshot) -> None:
        """Swap all four collections wholesale (no merge)."""
        self._properties = list(snapshot.properties)
        self._tenants = list(snapshot.tenants)
        self._payments = list(snapshot.payments)
        self._repair_requests = list(snapshot.repair_requests)

    def _load_fallback(self) -> None:
        if self.production:
            logging.info("Production mode: starting with empty collections")
            self.replace_collections(Snapshot([], [], [], []))
        else:
            logging.info("Loading illustrative sample data")
            self.replace_collections(sample_snapshot())

    async def load(self) -> str:
        """
        Initial load. Returns where the data came from: "store", "sample"
        or "empty".
        """
        self.is_loading = True
        try:
            if self.store is not None:
                try:
                    if await self.store.test_connection():
                        self.replace_collections(await self.store.fetch_snapshot())
                        logging.info(
                            f"Loaded {len(self._properties)} properties, {len(self._tenants)} tenants, "
                            f"{len(self._payments)} payments, {len(self._repair_requests)} repair requests "
                            f"from {self.store.name}"
                        )
                        return "store"
                    logging.warning(f"{self.store.name} connection failed, using fallback data")
                except LandlordError as e:
                    logging.error(f"Error loading data from {self.store.name}: {e}")

            self._load_fallback()
            return "empty" if self.production else "sample"
        finally:
            self.is_loading = False

    # --- Generic persistence ---

    async def _create(self, kind: EntityKind, draft: Record) -> Record:
        if self.store is not None:
            created = await self.store.create(kind, draft.model_dump(exclude={"id"}))
        else:
            created = draft.merge({"id": self._new_id()})
        self._collection(kind).append(created)
        return created

    async def _update(self, kind: EntityKind, record_id: str, updates: dict) -> Record:
        current = self._require(kind, record_id)
        # Validate before anything leaves the process
        candidate = current.merge(updates)
        changes = {field: getattr(candidate, field) for field in updates if field != "id"}

        if self.store is not None:
            updated = await self.store.update(kind, record_id, changes)
        else:
            updated = candidate

        collection = self._collection(kind)
        for index, record in enumerate(collection):
            if record.id == record_id:
                collection[index] = updated
        return updated

    async def _delete(self, kind: EntityKind, record_id: str) -> None:
        self._require(kind, record_id)
        if self.store is not None:
            await self.store.delete(kind, record_id)
        self._drop(kind, [record_id])

    def _drop(self, kind: EntityKind, record_ids: Iterable[str]) -> None:
        ids = set(record_ids)
        collection = self._collection(kind)
        collection[:] = [record for record in collection if record.id not in ids]

    async def _cascade(self, kind: EntityKind, records: List[Record]) -> None:
        """Remove dependent records, remote first, one by one."""
        for record in records:
            if self.store is not None:
                try:
                    await self.store.delete(kind, record.id)
                except RecordNotFoundError:
                    logging.info(f"{kind.value} {record.id} already gone from {self.store.name}")
            self._drop(kind, [record.id])

    # --- Properties ---

    async def add_property(self, **fields: Any) -> Property:
        draft = Property.model_validate(fields)
        created = await self._create(EntityKind.properties, draft)
        logging.info(f"Property {created.id} added: {created.address}")
        return created

    async def update_property(self, property_id: str, **updates: Any) -> Property:
        return await self._update(EntityKind.properties, property_id, updates)

    async def delete_property(self, property_id: str) -> None:
        """Delete a property together with its tenants and payments (and repairs when cascading)."""
        self._require(EntityKind.properties, property_id)

        payments = [p for p in self._payments if p.property_id == property_id]
        await self._cascade(EntityKind.payments, payments)

        if self.cascade_repairs:
            repairs = [r for r in self._repair_requests if r.property_id == property_id]
            await self._cascade(EntityKind.repair_requests, repairs)

        tenants = [t for t in self._tenants if t.property_id == property_id]
        await self._cascade(EntityKind.tenants, tenants)

        await self._delete(EntityKind.properties, property_id)
        logging.info(
            f"Property {property_id} deleted with {len(tenants)} tenants and {len(payments)} payments"
        )

    # --- Tenants ---

    async def add_tenant(self, **fields: Any) -> Tenant:
        draft = Tenant.model_validate(fields)
        if draft.lease_end is not None:
            draft = draft.merge({"lease_renewal": lease_renewal_for(draft.lease_end)})

        created = await self._create(EntityKind.tenants, draft)

        if self.get_property(created.property_id) is not None:
            await self.update_property(created.property_id, status=PropertyStatus.occupied)
        else:
            logging.warning(f"Tenant {created.id} references unknown property {created.property_id}")
        return created

    async def update_tenant(self, tenant_id: str, **updates: Any) -> Tenant:
        if "lease_end" in updates:
            candidate = self._require(EntityKind.tenants, tenant_id).merge(updates)
            end = candidate.lease_end
            updates["lease_renewal"] = lease_renewal_for(end) if end is not None else None
        return await self._update(EntityKind.tenants, tenant_id, updates)

    async def delete_tenant(self, tenant_id: str) -> None:
        tenant = self._require(EntityKind.tenants, tenant_id)

        payments = [p for p in self._payments if p.tenant_id == tenant_id]
        await self._cascade(EntityKind.payments, payments)

        if self.cascade_repairs:
            repairs = [r for r in self._repair_requests if r.tenant_id == tenant_id]
            await self._cascade(EntityKind.repair_requests, repairs)

        await self._delete(EntityKind.tenants, tenant_id)

        still_leased = self.tenant_for_property(tenant.property_id) is not None
        if self.get_property(tenant.property_id) is not None and not still_leased:
            await self.update_property(tenant.property_id, status=PropertyStatus.vacant)

    # --- Payments ---

    async def add_payment(self, **fields: Any) -> Payment:
        draft = Payment.model_validate(fields)
        for existing in self._payments:
            if existing.property_id == draft.property_id and existing.rent_month == draft.rent_month:
                raise ValueError(
                    f"Payment for property {draft.property_id} ({draft.rent_month}) already exists"
                )
        draft = draft.merge({"status": payment_status_for(draft.amount, draft.amount_paid)})
        return await self._create(EntityKind.payments, draft)

    async def update_payment(self, payment_id: str, **updates: Any) -> Payment:
        if "amount" in updates or "amount_paid" in updates:
            candidate = self._require(EntityKind.payments, payment_id).merge(updates)
            updates["status"] = payment_status_for(candidate.amount, candidate.amount_paid)
        return await self._update(EntityKind.payments, payment_id, updates)

    async def delete_payment(self, payment_id: str) -> None:
        await self._delete(EntityKind.payments, payment_id)

    # --- Repair requests ---

    async def add_repair_request(self, **fields: Any) -> RepairRequest:
        draft = RepairRequest.model_validate(fields)
        stamps = {}
        if draft.date_submitted is None:
            stamps["date_submitted"] = self._today()
        if draft.status == RepairStatus.completed and draft.date_resolved is None:
            stamps["date_resolved"] = self._today()
        if stamps:
            draft = draft.merge(stamps)
        return await self._create(EntityKind.repair_requests, draft)

    async def update_repair_request(self, request_id: str, **updates: Any) -> RepairRequest:
        current = self._require(EntityKind.repair_requests, request_id)
        completing = updates.get("status") in (RepairStatus.completed, RepairStatus.completed.value)
        if completing and not updates.get("date_resolved") and current.date_resolved is None:
            updates["date_resolved"] = self._today()
        return await self._update(EntityKind.repair_requests, request_id, updates)

    async def delete_repair_request(self, request_id: str) -> None:
        await self._delete(EntityKind.repair_requests, request_id)

    # --- Payment generation ---

    async def generate_payments_for_month(
        self,
        target: Optional[date] = None,
        properties: Optional[Iterable[Property]] = None,
        force_create: bool = False,
    ) -> GenerationResult:
        """
        Create the missing payments of one month.

        Only year and month of ``target`` matter (default: this month).
        ``properties`` defaults to every known property. A failed remote
        create is logged and skipped; the other properties still get theirs.
        """
        target = month_start(target or self._today())
        label = format_rent_month(target)
        candidates = list(self._properties) if properties is None else list(properties)

        drafts = plan_payments_for_month(target, candidates, self._tenants, self._payments, force_create)

        created = []
        for draft in drafts:
            if self.store is not None:
                try:
                    payment = await self.store.create(EntityKind.payments, draft.model_dump(exclude={"id"}))
                except LandlordError as e:
                    logging.error(f"Error creating payment for property {draft.property_id} ({label}): {e}")
                    continue
            else:
                payment = draft.merge({"id": self._new_id()})
            self._payments.append(payment)
            created.append(payment)

        logging.info(f"Generated {len(created)} payments for {label}")
        return GenerationResult(len(created), label, created)

    async def generate_current_and_next_month(self) -> CurrentAndNextResult:
        this_month = month_start(self._today())
        current = await self.generate_payments_for_month(this_month)
        following = await self.generate_payments_for_month(add_months(this_month, 1))
        return CurrentAndNextResult(current, following, current.generated + following.generated)

    async def generate_payments_for_specific_month(
        self, month: int, year: int, force_create: bool = False
    ) -> GenerationResult:
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")
        return await self.generate_payments_for_month(date(year, month, 1), force_create=force_create)

    async def generate_payments_for_range(
        self, start_month: int, start_year: int, end_month: int, end_year: int
    ) -> List[GenerationResult]:
        """Generate every month from start to end, both inclusive. An inverted range yields nothing."""
        for month in (start_month, end_month):
            if not 1 <= month <= 12:
                raise ValueError(f"Month must be between 1 and 12, got {month}")

        results = []
        for target in iter_months(date(start_year, start_month, 1), date(end_year, end_month, 1)):
            results.append(await self.generate_payments_for_month(target))
        return results

    async def generate_upcoming_months(self, months_ahead: int = 6) -> List[GenerationResult]:
        this_month = month_start(self._today())
        results = []
        for offset in range(months_ahead):
            results.append(await self.generate_payments_for_month(add_months(this_month, offset)))
        return results
