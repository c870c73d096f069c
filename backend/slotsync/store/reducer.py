"""
Snapshot -> snapshot reducer.

Every store mutation is a pure function of the previous snapshot and one
action. Handlers return the input snapshot unchanged when the action has no
effect, so callers can detect no-ops by identity.

No snapshot ever holds two bookings with the same (date, time) slot active.
The booking already admitted owns the slot: an insert or update that would
claim it a second time is refused, and a bulk load admits bookings oldest
first and drops any later booking that collides.
"""

from dataclasses import dataclass, replace
from typing import Callable, Iterable

from slotsync.models.booking import Booking
from slotsync.models.customer import Customer
from slotsync.models.slot import SlotState
from slotsync.store.actions import (
    Action,
    BookingDeleted,
    BookingInserted,
    BookingUpdated,
    CachedDataLoaded,
    CustomerDeleted,
    CustomerInserted,
    CustomerUpdated,
    DataLoaded,
    LoadFinished,
    NetworkStatusChanged,
    ReconnectingChanged,
)


@dataclass(frozen=True)
class StoreState:
    customers: tuple[Customer, ...] = ()
    bookings: tuple[Booking, ...] = ()
    is_loading: bool = True
    is_offline: bool = False
    is_reconnecting: bool = False
    is_using_cache: bool = False

    @property
    def commands_blocked(self) -> bool:
        return self.is_offline or self.is_using_cache


def _contains(records, record_id: str) -> bool:
    return any(record.id == record_id for record in records)


def _insert(records, record):
    if _contains(records, record.id):
        return records
    return records + (record,)


def _replace(records, record):
    existing = next((r for r in records if r.id == record.id), None)
    if existing is None:
        return records + (record,)
    if existing == record:
        return records
    return tuple(record if r.id == record.id else r for r in records)


def _remove(records, record_id: str):
    if not _contains(records, record_id):
        return records
    return tuple(record for record in records if record.id != record_id)


def active_conflicts(bookings: Iterable[Booking], booking: Booking) -> list[str]:
    """Active times of `booking` that some other booking already holds active."""
    taken = set()
    for other in bookings:
        if other.id != booking.id and other.date == booking.date:
            taken.update(other.times_in_state(SlotState.ACTIVE))
    return [time for time in booking.times_in_state(SlotState.ACTIVE) if time in taken]


def _admission_order(booking: Booking):
    created = booking.created_at
    return (created is None, created.timestamp() if created else 0.0)


def _admit(bookings) -> tuple[Booking, ...]:
    """Drop bookings whose active slots collide with an older admitted booking."""
    claimed = set()
    admitted = set()
    for booking in sorted(bookings, key=_admission_order):
        claims = {(booking.date, time) for time in booking.times_in_state(SlotState.ACTIVE)}
        if claims & claimed:
            continue
        claimed |= claims
        admitted.add(id(booking))
    return tuple(booking for booking in bookings if id(booking) in admitted)


def _data_loaded(state: StoreState, action: DataLoaded) -> StoreState:
    return replace(
        state,
        customers=tuple(action.customers),
        bookings=_admit(action.bookings),
        is_loading=False,
        is_using_cache=False,
    )


def _cached_data_loaded(state: StoreState, action: CachedDataLoaded) -> StoreState:
    return replace(
        state,
        customers=tuple(action.customers),
        bookings=_admit(action.bookings),
        is_loading=False,
        is_using_cache=True,
    )


def _load_finished(state: StoreState, action: LoadFinished) -> StoreState:
    empty = not (state.customers or state.bookings or state.is_using_cache)
    if not state.is_loading and empty:
        return state
    return replace(state, customers=(), bookings=(), is_loading=False, is_using_cache=False)


def _network_status(state: StoreState, action: NetworkStatusChanged) -> StoreState:
    if state.is_offline == action.is_offline:
        return state
    return replace(state, is_offline=action.is_offline)


def _reconnecting(state: StoreState, action: ReconnectingChanged) -> StoreState:
    if state.is_reconnecting == action.is_reconnecting:
        return state
    return replace(state, is_reconnecting=action.is_reconnecting)


def _customer_inserted(state: StoreState, action: CustomerInserted) -> StoreState:
    customers = _insert(state.customers, action.customer)
    if customers is state.customers:
        return state
    return replace(state, customers=customers)


def _customer_updated(state: StoreState, action: CustomerUpdated) -> StoreState:
    customers = _replace(state.customers, action.customer)
    if customers is state.customers:
        return state
    return replace(state, customers=customers)


def _customer_deleted(state: StoreState, action: CustomerDeleted) -> StoreState:
    customers = _remove(state.customers, action.customer_id)
    bookings = state.bookings
    if action.cascade:
        bookings = tuple(b for b in bookings if b.customer_id != action.customer_id)
    if customers is state.customers and len(bookings) == len(state.bookings):
        return state
    return replace(state, customers=customers, bookings=bookings)


def _booking_inserted(state: StoreState, action: BookingInserted) -> StoreState:
    if active_conflicts(state.bookings, action.booking):
        return state
    bookings = _insert(state.bookings, action.booking)
    if bookings is state.bookings:
        return state
    return replace(state, bookings=bookings)


def _booking_updated(state: StoreState, action: BookingUpdated) -> StoreState:
    if active_conflicts(state.bookings, action.booking):
        return state
    bookings = _replace(state.bookings, action.booking)
    if bookings is state.bookings:
        return state
    return replace(state, bookings=bookings)


def _booking_deleted(state: StoreState, action: BookingDeleted) -> StoreState:
    bookings = _remove(state.bookings, action.booking_id)
    if bookings is state.bookings:
        return state
    return replace(state, bookings=bookings)


_HANDLERS: dict[type, Callable[[StoreState, Action], StoreState]] = {
    DataLoaded: _data_loaded,
    CachedDataLoaded: _cached_data_loaded,
    LoadFinished: _load_finished,
    NetworkStatusChanged: _network_status,
    ReconnectingChanged: _reconnecting,
    CustomerInserted: _customer_inserted,
    CustomerUpdated: _customer_updated,
    CustomerDeleted: _customer_deleted,
    BookingInserted: _booking_inserted,
    BookingUpdated: _booking_updated,
    BookingDeleted: _booking_deleted,
}


def reduce(state: StoreState, action: Action) -> StoreState:
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown store action: {type(action).__name__}")
    return handler(state, action)
