"""
In-memory State Store.

Holds the current snapshot and is the only place it changes. Commands, the
realtime channel and connectivity changes all arrive on the same event loop
and go through `apply`, which swaps in the reducer's output in one step, so
readers never see a half-applied change and no locking is needed.
"""

from datetime import date as Date
from typing import Callable, Iterable, Optional

from slotsync.core.logging import get_logger
from slotsync.core.metrics import realtime_reconnecting
from slotsync.models.booking import Booking
from slotsync.models.customer import Customer
from slotsync.models.slot import SlotView, TimeFilter
from slotsync.schemas.state import CustomerBookings, RosterEntry, StoreStatus
from slotsync.store import queries
from slotsync.store.actions import Action
from slotsync.store.reducer import StoreState, reduce

logger = get_logger(__name__)

Listener = Callable[[StoreState, StoreState], None]


class StateStore:
    def __init__(self, initial: Optional[StoreState] = None):
        self._state = initial or StoreState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> StoreState:
        return self._state

    def apply(self, action: Action) -> StoreState:
        previous = self._state
        current = reduce(previous, action)
        if current is previous:
            return current

        self._state = current
        if current.is_reconnecting != previous.is_reconnecting:
            realtime_reconnecting.set(1 if current.is_reconnecting else 0)
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception as e:
                logger.error("store_listener_failed", action=type(action).__name__, error=str(e))
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a read-only observer; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Queries

    @property
    def customers(self) -> tuple[Customer, ...]:
        return self._state.customers

    @property
    def bookings(self) -> tuple[Booking, ...]:
        return self._state.bookings

    def status(self) -> StoreStatus:
        state = self._state
        banner = None
        if state.is_offline:
            banner = "You are offline"
            if state.is_using_cache:
                banner += " - Viewing cached data"
        elif state.is_using_cache:
            banner = "Viewing cached data"
        elif state.is_reconnecting:
            banner = "Reconnecting..."
        return StoreStatus(
            is_loading=state.is_loading,
            is_offline=state.is_offline,
            is_reconnecting=state.is_reconnecting,
            is_using_cache=state.is_using_cache,
            customers=len(state.customers),
            bookings=len(state.bookings),
            banner=banner,
        )

    def find_customer(self, customer_id: str) -> Optional[Customer]:
        return queries.find_customer(self._state, customer_id)

    def find_booking(self, booking_id: str) -> Optional[Booking]:
        return queries.find_booking(self._state, booking_id)

    def search_customers(self, query: str = "") -> list[Customer]:
        return queries.search_customers(self._state, query)

    def slot_status(
        self,
        day: Date,
        time: str,
        pending_selection: Iterable[tuple[Date, str]] = (),
    ) -> SlotView:
        return queries.slot_status(self._state, day, time, pending_selection)

    def slot_grid(
        self,
        day: Date,
        pending_selection: Iterable[tuple[Date, str]] = (),
        time_filter: TimeFilter = TimeFilter.ALL,
    ) -> list[SlotView]:
        return queries.slot_grid(self._state, day, pending_selection, time_filter)

    def conflicting_slots(self, day: Date, times: Iterable[str]) -> list[str]:
        return queries.conflicting_slots(self._state, day, times)

    def customer_bookings(self, customer_id: str, today: Optional[Date] = None) -> CustomerBookings:
        return queries.customer_bookings(self._state, customer_id, today)

    def day_roster(self, day: Optional[Date] = None, include_completed: bool = False) -> list[RosterEntry]:
        return queries.day_roster(self._state, day, include_completed)

    def booked_slot_count(self, day: Optional[Date] = None) -> int:
        return queries.booked_slot_count(self._state, day)
