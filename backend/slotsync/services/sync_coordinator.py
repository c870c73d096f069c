"""
Sync Coordinator: bootstrap, cache fallback and the Command API.

BOOTSTRAP
=========
  1. Bulk load customers (newest first) and bookings (by date) from the
     remote store
  2. On success: replace the store contents, write both collections through
     to the local cache, clear `is_using_cache`
  3. On failure: read both collections from the cache. If both are present
     the store is populated from them and flagged `is_using_cache`;
     otherwise the store stays empty and the caller gets source=none

COMMANDS
========
Strict-confirm: nothing in the store changes until the remote call returns.
  - Rejected up front with `offline` while offline or showing cached data.
    No remote call is made and nothing is queued for later.
  - Inputs are validated before any remote call (`validation`).
  - On success the row returned by the remote store is folded into the store,
    then the statistics maintainer adjusts customer counters.
  - On failure the store is left as it was and the result carries the
    classified error. Commands never raise.

Connectivity changes only flip `is_offline`; reloading stays an explicit
call so data does not churn under the user mid-interaction.
"""

from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from slotsync.core.config import get_settings
from slotsync.core.errors import CommandRejected, ErrorKind, SyncError, classify_error
from slotsync.core.logging import get_logger
from slotsync.core.metrics import record_bootstrap, record_command
from slotsync.models.adapters import (
    booking_from_row,
    customer_from_row,
    customer_to_row,
    new_booking_row,
    slots_to_row,
)
from slotsync.models.booking import Booking
from slotsync.models.customer import Customer
from slotsync.schemas.booking import BookingCreate, CancelSlotsRequest
from slotsync.schemas.command import BootstrapResult, CommandResult, DataSource
from slotsync.schemas.customer import CustomerCreate, CustomerUpdate
from slotsync.services.interfaces.cache import LocalCache
from slotsync.services.interfaces.remote import RemoteSyncClient
from slotsync.services.notifications import (
    Notifier,
    error_notification,
    log_notifier,
    success_notification,
)
from slotsync.services.statistics_service import StatisticsMaintainer
from slotsync.store.actions import (
    BookingInserted,
    BookingUpdated,
    CachedDataLoaded,
    CustomerDeleted,
    CustomerInserted,
    CustomerUpdated,
    DataLoaded,
    LoadFinished,
    NetworkStatusChanged,
)
from slotsync.store.state_store import StateStore

logger = get_logger(__name__)

Payload = Union[Mapping[str, Any], Any]


class SyncCoordinator:
    def __init__(
        self,
        store: StateStore,
        remote: RemoteSyncClient,
        cache: LocalCache,
        statistics: Optional[StatisticsMaintainer] = None,
        notifier: Optional[Notifier] = None,
    ):
        settings = get_settings()
        self.store = store
        self.remote = remote
        self.cache = cache
        self.statistics = statistics or StatisticsMaintainer(remote, settings.CUSTOMERS_TABLE)
        self.notify = notifier or log_notifier
        self.customers_table = settings.CUSTOMERS_TABLE
        self.bookings_table = settings.BOOKINGS_TABLE

    # Loading

    async def bootstrap(self) -> BootstrapResult:
        try:
            customer_rows = await self.remote.fetch_all(
                self.customers_table, order_by="created_at", descending=True
            )
            booking_rows = await self.remote.fetch_all(self.bookings_table, order_by="date")
            customers = [customer_from_row(row) for row in customer_rows]
            bookings = [booking_from_row(row) for row in booking_rows]
        except Exception as e:
            kind = classify_error(e)
            logger.warning("bootstrap_remote_failed", error_kind=kind.value, error=str(e))
            return await self._load_from_cache(kind)

        self.store.apply(DataLoaded(customers=customers, bookings=bookings))
        await self._write_through(customers, bookings)

        record_bootstrap(DataSource.REMOTE.value)
        logger.info(
            "bootstrap_completed",
            source=DataSource.REMOTE.value,
            customers=len(customers),
            bookings=len(bookings),
        )
        return BootstrapResult(source=DataSource.REMOTE)

    async def _write_through(self, customers: list[Customer], bookings: list[Booking]) -> None:
        try:
            await self.cache.save(
                self.customers_table, [c.model_dump(mode="json") for c in customers]
            )
            await self.cache.save(
                self.bookings_table, [b.model_dump(mode="json") for b in bookings]
            )
        except Exception as e:
            logger.error("cache_write_through_failed", error=str(e))

    async def _load_from_cache(self, kind: ErrorKind) -> BootstrapResult:
        try:
            cached_customers = await self.cache.load(self.customers_table)
            cached_bookings = await self.cache.load(self.bookings_table)
        except Exception as e:
            logger.error("cache_read_failed", error=str(e))
            cached_customers = cached_bookings = None

        if cached_customers is not None and cached_bookings is not None:
            try:
                customers = [customer_from_row(row) for row in cached_customers]
                bookings = [booking_from_row(row) for row in cached_bookings]
            except ValidationError as e:
                logger.error("cache_snapshot_invalid", error=str(e))
            else:
                self.store.apply(CachedDataLoaded(customers=customers, bookings=bookings))
                record_bootstrap(DataSource.CACHE.value)
                logger.info(
                    "bootstrap_completed",
                    source=DataSource.CACHE.value,
                    customers=len(customers),
                    bookings=len(bookings),
                )
                return BootstrapResult(source=DataSource.CACHE, error=kind)

        self.store.apply(LoadFinished())
        record_bootstrap(DataSource.NONE.value)
        logger.error("bootstrap_no_data", error_kind=kind.value)
        return BootstrapResult(source=DataSource.NONE, error=kind)

    def set_connectivity(self, connected: bool) -> None:
        self.store.apply(NetworkStatusChanged(is_offline=not connected))
        logger.info("connectivity_changed", connected=connected)

    # Command API

    async def _run(
        self,
        command: str,
        operation: Callable[[], Awaitable[Any]],
        success_title: str,
    ) -> CommandResult:
        if self.store.state.commands_blocked:
            logger.info("command_rejected_offline", command=command)
            record_command(command, ErrorKind.OFFLINE.value)
            self.notify(error_notification(ErrorKind.OFFLINE))
            return CommandResult.fail(ErrorKind.OFFLINE)

        try:
            data = await operation()
        except Exception as e:
            kind = classify_error(e)
            message = e.message if isinstance(e, SyncError) else str(e)
            logger.warning("command_failed", command=command, error_kind=kind.value, error=message)
            record_command(command, kind.value)
            self.notify(error_notification(kind, message))
            return CommandResult.fail(kind, message)

        record_command(command, "success")
        self.notify(success_notification(success_title))
        return CommandResult.ok(data)

    async def create_customer(self, data: Payload) -> CommandResult:
        async def operation() -> Customer:
            payload = CustomerCreate.model_validate(data)
            row = await self.remote.insert(self.customers_table, customer_to_row(payload.model_dump()))
            customer = customer_from_row(row)
            self.store.apply(CustomerInserted(customer))
            logger.info("customer_created", customer_id=customer.id)
            return customer

        return await self._run("create_customer", operation, "Customer added successfully")

    async def update_customer(self, customer_id: str, updates: Payload) -> CommandResult:
        async def operation() -> Customer:
            patch = CustomerUpdate.model_validate(updates).patch()
            if not patch:
                raise CommandRejected("Nothing to update")
            row = await self.remote.update(self.customers_table, customer_id, patch)
            customer = customer_from_row(row)
            self.store.apply(CustomerUpdated(customer))
            logger.info("customer_updated", customer_id=customer.id, fields=sorted(patch))
            return customer

        return await self._run("update_customer", operation, "Customer updated successfully")

    async def delete_customer(self, customer_id: str) -> CommandResult:
        async def operation() -> None:
            await self.remote.delete(self.customers_table, customer_id)
            # The remote store cascades to the customer's bookings; mirror that.
            self.store.apply(CustomerDeleted(customer_id, cascade=True))
            logger.info("customer_deleted", customer_id=customer_id)

        return await self._run("delete_customer", operation, "Customer deleted successfully")

    async def create_booking(self, data: Payload) -> CommandResult:
        async def operation() -> Booking:
            payload = BookingCreate.model_validate(data)
            customer = self.store.find_customer(payload.customer_id)
            if customer is None:
                raise CommandRejected(f"Unknown customer {payload.customer_id}")
            taken = self.store.conflicting_slots(payload.date, payload.slots)
            if taken:
                raise CommandRejected(f"Slots already booked on {payload.date}: {', '.join(taken)}")

            row = await self.remote.insert(
                self.bookings_table,
                new_booking_row(
                    customer.id,
                    payload.customer_name or customer.name,
                    payload.date,
                    payload.slots,
                ),
            )
            booking = booking_from_row(row)
            self.store.apply(BookingInserted(booking))
            if self.store.find_booking(booking.id) is None:
                # Another booking for these slots arrived on the live channel meanwhile
                logger.warning("booking_not_admitted", booking_id=booking.id, slots=booking.times)
            logger.info(
                "booking_created",
                booking_id=booking.id,
                customer_id=customer.id,
                date=booking.date.isoformat(),
                slots=booking.times,
            )

            self._fold_customer(await self.statistics.record_booking_created(customer.id))
            return booking

        return await self._run("create_booking", operation, "Booking created successfully")

    async def cancel_slots(self, booking_id: str, slot_times: Iterable[str]) -> CommandResult:
        async def operation() -> Booking:
            request = CancelSlotsRequest(slots=list(slot_times))
            booking = self._require_booking(booking_id)
            cancelled, moved = booking.with_slots_cancelled(request.slots)
            if not moved:
                raise CommandRejected("No active slots to cancel")

            row = await self.remote.update(
                self.bookings_table,
                booking.id,
                {"slots": slots_to_row(cancelled.slots), "status": cancelled.status.value},
            )
            updated = booking_from_row(row)
            self.store.apply(BookingUpdated(updated))
            logger.info(
                "booking_slots_cancelled",
                booking_id=updated.id,
                slots=moved,
                status=updated.status.value,
            )

            self._fold_customer(
                await self.statistics.record_slots_cancelled(updated.customer_id, len(moved))
            )
            return updated

        return await self._run("cancel_slots", operation, "Booking cancelled successfully")

    async def complete_booking(self, booking_id: str) -> CommandResult:
        async def operation() -> Booking:
            booking = self._require_booking(booking_id)
            completed, moved = booking.with_slots_completed()
            if not moved:
                raise CommandRejected("Booking has no active slots")

            row = await self.remote.update(
                self.bookings_table,
                booking.id,
                {"slots": slots_to_row(completed.slots), "status": completed.status.value},
            )
            updated = booking_from_row(row)
            self.store.apply(BookingUpdated(updated))
            logger.info("booking_completed", booking_id=updated.id, slots=moved)
            return updated

        return await self._run("complete_booking", operation, "Booking completed successfully")

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self.store.find_booking(booking_id)
        if booking is None:
            raise CommandRejected(f"Unknown booking {booking_id}")
        return booking

    def _fold_customer(self, customer: Optional[Customer]) -> None:
        if customer is not None:
            self.store.apply(CustomerUpdated(customer))
