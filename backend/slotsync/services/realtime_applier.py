"""
Realtime Event Applier: folds live change events into the State Store.

  - insert: skipped when the id is already present. A local write folds its
    row in as soon as the remote call returns, and the server's echo of that
    same write arrives later on this channel.
  - update: replaces the record wholesale; the server copy wins.
  - a booking insert or update that would make a slot active under two
    bookings is refused by the store; the booking that got there first
    keeps the slot.
  - delete: removes the record by id only. Slot status and other derived
    views pick the change up on their next query.

Channel state drives `is_reconnecting`: the store is reconnecting while any
subscribed collection is not in the `subscribed` state. Missed events are
not replayed; a fresh bootstrap is the only recovery.
"""

from functools import partial

from pydantic import ValidationError

from slotsync.core.config import get_settings
from slotsync.core.logging import get_logger
from slotsync.core.metrics import record_realtime_event
from slotsync.models.adapters import booking_from_row, customer_from_row
from slotsync.schemas.event import ChangeEvent, ChangeType, ChannelStatus, EntityType
from slotsync.services.interfaces.remote import RemoteSyncClient, Unsubscribe
from slotsync.store.actions import (
    Action,
    BookingDeleted,
    BookingInserted,
    BookingUpdated,
    CustomerDeleted,
    CustomerInserted,
    CustomerUpdated,
    ReconnectingChanged,
)
from slotsync.store.reducer import active_conflicts
from slotsync.store.state_store import StateStore

logger = get_logger(__name__)


def event_to_action(event: ChangeEvent) -> Action:
    if event.entity == EntityType.CUSTOMER:
        if event.type == ChangeType.INSERT:
            return CustomerInserted(customer_from_row(event.record))
        if event.type == ChangeType.UPDATE:
            return CustomerUpdated(customer_from_row(event.record))
        return CustomerDeleted(event.old_id)

    if event.type == ChangeType.INSERT:
        return BookingInserted(booking_from_row(event.record))
    if event.type == ChangeType.UPDATE:
        return BookingUpdated(booking_from_row(event.record))
    return BookingDeleted(event.old_id)


class RealtimeApplier:
    def __init__(self, store: StateStore):
        self.store = store
        self.channels: dict[str, ChannelStatus] = {}

    def ingest(self, event: ChangeEvent) -> bool:
        """Apply one event. Returns True when the store changed."""
        try:
            action = event_to_action(event)
        except ValidationError as e:
            record_realtime_event(event.entity.value, event.type.value, "dropped")
            logger.warning(
                "realtime_event_malformed",
                entity=event.entity.value,
                type=event.type.value,
                error=str(e),
            )
            return False

        conflicts = []
        if isinstance(action, (BookingInserted, BookingUpdated)):
            conflicts = active_conflicts(self.store.bookings, action.booking)

        before = self.store.state
        changed = self.store.apply(action) is not before
        if conflicts:
            outcome = "conflict"
            logger.warning(
                "realtime_booking_conflict",
                booking_id=action.booking.id,
                date=action.booking.date.isoformat(),
                slots=conflicts,
            )
        else:
            outcome = "applied" if changed else "duplicate"
        record_realtime_event(event.entity.value, event.type.value, outcome)
        logger.debug("realtime_event", entity=event.entity.value, type=event.type.value, outcome=outcome)
        return changed

    def on_channel_status(self, status: ChannelStatus, channel: str = "default") -> None:
        self.channels[channel] = status
        reconnecting = any(s != ChannelStatus.SUBSCRIBED for s in self.channels.values())
        if status == ChannelStatus.SUBSCRIBED:
            logger.info("realtime_channel_subscribed", channel=channel)
        else:
            logger.warning("realtime_channel_lost", channel=channel, status=status.value)
        self.store.apply(ReconnectingChanged(is_reconnecting=reconnecting))

    async def attach(self, remote: RemoteSyncClient) -> Unsubscribe:
        """Subscribe to both collections; returns a coroutine function that detaches."""
        settings = get_settings()
        unsubscribers = []
        for collection in (settings.BOOKINGS_TABLE, settings.CUSTOMERS_TABLE):
            unsubscribers.append(
                await remote.subscribe(
                    collection,
                    self.ingest,
                    partial(self._status_for, collection),
                )
            )

        async def detach() -> None:
            for unsubscribe in unsubscribers:
                await unsubscribe()
            self.channels.clear()

        return detach

    def _status_for(self, collection: str, status: ChannelStatus) -> None:
        self.on_channel_status(status, channel=collection)
