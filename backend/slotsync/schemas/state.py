"""
Response shapes for the State Store queries.
"""

from datetime import date as Date
from typing import Optional

from pydantic import BaseModel

from slotsync.models.booking import Booking, BookingStatus
from slotsync.models.slot import SlotState


class CustomerDetails(BaseModel):
    name: str
    mobile: str
    city: str


class RosterEntry(BaseModel):
    """One card in the same-day roster: a single slot of a booking."""

    id: str
    booking_id: str
    customer_id: str
    customer_details: CustomerDetails
    time: str
    time_range: str
    slot_state: SlotState
    booking_status: BookingStatus


class CustomerBookings(BaseModel):
    upcoming: list[Booking] = []
    past: list[Booking] = []
    cancelled: list[Booking] = []


class StoreStatus(BaseModel):
    is_loading: bool
    is_offline: bool
    is_reconnecting: bool
    is_using_cache: bool
    customers: int
    bookings: int
    banner: Optional[str] = None


class DayRoster(BaseModel):
    date: Date
    booked_slots: int
    entries: list[RosterEntry]
