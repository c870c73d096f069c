"""
Tagged actions accepted by the store reducer.
"""

from dataclasses import dataclass
from typing import Sequence

from slotsync.models.booking import Booking
from slotsync.models.customer import Customer


@dataclass(frozen=True)
class DataLoaded:
    customers: Sequence[Customer]
    bookings: Sequence[Booking]


@dataclass(frozen=True)
class CachedDataLoaded:
    customers: Sequence[Customer]
    bookings: Sequence[Booking]


@dataclass(frozen=True)
class LoadFinished:
    """Bootstrap ended with no data from either source."""


@dataclass(frozen=True)
class NetworkStatusChanged:
    is_offline: bool


@dataclass(frozen=True)
class ReconnectingChanged:
    is_reconnecting: bool


@dataclass(frozen=True)
class CustomerInserted:
    customer: Customer


@dataclass(frozen=True)
class CustomerUpdated:
    customer: Customer


@dataclass(frozen=True)
class CustomerDeleted:
    customer_id: str
    cascade: bool = False


@dataclass(frozen=True)
class BookingInserted:
    booking: Booking


@dataclass(frozen=True)
class BookingUpdated:
    booking: Booking


@dataclass(frozen=True)
class BookingDeleted:
    booking_id: str


Action = (
    DataLoaded | CachedDataLoaded | LoadFinished | NetworkStatusChanged | ReconnectingChanged
    | CustomerInserted | CustomerUpdated | CustomerDeleted
    | BookingInserted | BookingUpdated | BookingDeleted
)
