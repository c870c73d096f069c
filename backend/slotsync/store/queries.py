"""
Pure derivation queries over a store snapshot.

Nothing here mutates or caches; every answer is recomputed from the snapshot
passed in, so deletes and slot changes are reflected on the next call.
"""

from datetime import date as Date
from typing import Iterable, Optional

from slotsync.models.booking import Booking, BookingStatus
from slotsync.models.customer import Customer
from slotsync.models.slot import (
    SlotState,
    SlotView,
    TimeFilter,
    derive_slot_status,
    format_time_range,
    slots_for_filter,
    time_sort_key,
)
from slotsync.schemas.state import CustomerBookings, CustomerDetails, RosterEntry
from slotsync.store.reducer import StoreState

UNKNOWN_CUSTOMER = "Unknown Customer"
NOT_AVAILABLE = "N/A"


def find_customer(state: StoreState, customer_id: str) -> Optional[Customer]:
    return next((c for c in state.customers if c.id == customer_id), None)


def find_booking(state: StoreState, booking_id: str) -> Optional[Booking]:
    return next((b for b in state.bookings if b.id == booking_id), None)


def search_customers(state: StoreState, query: str = "") -> list[Customer]:
    return [customer for customer in state.customers if customer.matches(query)]


def bookings_on(state: StoreState, day: Date) -> list[Booking]:
    return [booking for booking in state.bookings if booking.date == day]


def slot_status(
    state: StoreState,
    day: Date,
    time: str,
    pending_selection: Iterable[tuple[Date, str]] = (),
) -> SlotView:
    return derive_slot_status(day, time, bookings_on(state, day), pending_selection)


def slot_grid(
    state: StoreState,
    day: Date,
    pending_selection: Iterable[tuple[Date, str]] = (),
    time_filter: TimeFilter = TimeFilter.ALL,
) -> list[SlotView]:
    """Status of every hourly slot on a date, in time order."""
    day_bookings = bookings_on(state, day)
    selection = set(pending_selection)
    return [
        derive_slot_status(day, time, day_bookings, selection)
        for time in slots_for_filter(time_filter)
    ]


def conflicting_slots(state: StoreState, day: Date, times: Iterable[str]) -> list[str]:
    """Requested times already held active or completed by some booking."""
    day_bookings = bookings_on(state, day)
    return [
        time for time in times
        if any(booking.holds(time) for booking in day_bookings)
    ]


def customer_bookings(
    state: StoreState,
    customer_id: str,
    today: Optional[Date] = None,
) -> CustomerBookings:
    """
    Disjoint partition of a customer's bookings:
    cancelled by status, upcoming when confirmed and not in the past,
    past for everything else.
    """
    today = today or Date.today()
    partitions = CustomerBookings()
    for booking in sorted(state.bookings, key=lambda b: b.date):
        if booking.customer_id != customer_id:
            continue
        if booking.status == BookingStatus.CANCELLED:
            partitions.cancelled.append(booking)
        elif booking.status == BookingStatus.CONFIRMED and booking.date >= today:
            partitions.upcoming.append(booking)
        else:
            partitions.past.append(booking)
    return partitions


def _customer_details(state: StoreState, booking: Booking) -> CustomerDetails:
    customer = find_customer(state, booking.customer_id)
    if customer is not None:
        return CustomerDetails(name=customer.name, mobile=customer.mobile, city=customer.city)
    return CustomerDetails(
        name=booking.customer_name or UNKNOWN_CUSTOMER,
        mobile=NOT_AVAILABLE,
        city=NOT_AVAILABLE,
    )


def day_roster(
    state: StoreState,
    day: Optional[Date] = None,
    include_completed: bool = False,
) -> list[RosterEntry]:
    """One entry per active slot on the day, sorted by time."""
    day = day or Date.today()
    wanted = {SlotState.ACTIVE}
    if include_completed:
        wanted.add(SlotState.COMPLETED)

    entries = []
    for booking in bookings_on(state, day):
        if booking.status == BookingStatus.CANCELLED:
            continue
        details = _customer_details(state, booking)
        for index, slot in enumerate(booking.slots):
            if slot.state not in wanted:
                continue
            entries.append(
                RosterEntry(
                    id=f"{booking.id}-{index}",
                    booking_id=booking.id,
                    customer_id=booking.customer_id,
                    customer_details=details,
                    time=slot.time,
                    time_range=format_time_range(slot.time),
                    slot_state=slot.state,
                    booking_status=booking.status,
                )
            )
    return sorted(entries, key=lambda entry: time_sort_key(entry.time))


def booked_slot_count(state: StoreState, day: Optional[Date] = None) -> int:
    day = day or Date.today()
    return sum(
        len(booking.times_in_state(SlotState.ACTIVE))
        for booking in bookings_on(state, day)
    )
