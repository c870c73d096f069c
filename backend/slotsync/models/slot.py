"""
Slot vocabulary and the slot status derivation.

A slot is one bookable hour on a given date. Each booking carries a list of
SlotRecord values; the calendar status of a (date, time) pair is derived by
scanning every booking on that date, never a single one, so a slot that was
cancelled under one booking and re-booked under another resolves to booked.
"""

from datetime import date as Date
from enum import Enum
from typing import Iterable, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from slotsync.models.booking import Booking


class SlotState(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SlotStatus(str, Enum):
    FREE = "free"
    SELECTED = "selected"
    BOOKED = "booked"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class TimeFilter(str, Enum):
    ALL = "all"
    EARLY_BIRD = "early-bird"
    DAY_SHIFT = "day-shift"
    PRIME_TIME = "prime-time"


HOURLY_SLOTS = tuple(f"{hour:02d}:00" for hour in range(24))

_FILTER_HOURS = {
    TimeFilter.ALL: range(0, 24),
    TimeFilter.EARLY_BIRD: range(0, 8),
    TimeFilter.DAY_SHIFT: range(8, 15),
    TimeFilter.PRIME_TIME: range(15, 24),
}


def parse_time(value: str) -> tuple[int, int]:
    """Parse an "HH:MM" label, raising ValueError when malformed."""
    try:
        hours_text, minutes_text = value.split(":")
        hours, minutes = int(hours_text), int(minutes_text)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time label: {value!r}")
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid time label: {value!r}")
    return hours, minutes


def time_sort_key(value: str) -> int:
    """Minutes since midnight; malformed labels sort last."""
    try:
        hours, minutes = parse_time(value)
    except ValueError:
        return 9999
    return hours * 60 + minutes


def next_hour(value: str) -> str:
    hours, minutes = parse_time(value)
    return f"{(hours + 1) % 24:02d}:{minutes:02d}"


def format_time_range(value: str) -> str:
    """"18:00" -> "18:00 - 19:00"."""
    return f"{value} - {next_hour(value)}"


def format_display_range(value: str) -> str:
    """"18:00" -> "6 PM - 7 PM"."""

    def _format_hour(hour: int) -> str:
        if hour == 0:
            return "12 AM"
        if hour < 12:
            return f"{hour} AM"
        if hour == 12:
            return "12 PM"
        return f"{hour - 12} PM"

    hours, _ = parse_time(value)
    return f"{_format_hour(hours)} - {_format_hour((hours + 1) % 24)}"


def slots_for_filter(time_filter: TimeFilter = TimeFilter.ALL) -> list[str]:
    hours = _FILTER_HOURS[TimeFilter(time_filter)]
    return [slot for slot in HOURLY_SLOTS if parse_time(slot)[0] in hours]


class SlotRecord(BaseModel):
    time: str
    state: SlotState = SlotState.ACTIVE

    model_config = {"frozen": True}

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        parse_time(value)
        return value


class SlotView(BaseModel):
    """Derived calendar status of one (date, time) pair."""

    date: Date
    time: str
    status: SlotStatus
    booking: Optional["Booking"] = Field(default=None)


def derive_slot_status(
    date: Date,
    time: str,
    bookings: Iterable["Booking"],
    pending_selection: Iterable[tuple[Date, str]] = (),
) -> SlotView:
    """
    Resolve the status of a slot. First match wins:
    selected, completed, booked, cancelled, free.
    """
    if (date, time) in set(pending_selection):
        return SlotView(date=date, time=time, status=SlotStatus.SELECTED)

    completed_by = None
    active_by = None
    cancelled_by = None
    for booking in bookings:
        if booking.date != date:
            continue
        for slot in booking.slots:
            if slot.time != time:
                continue
            if slot.state == SlotState.COMPLETED and completed_by is None:
                completed_by = booking
            elif slot.state == SlotState.ACTIVE and active_by is None:
                active_by = booking
            elif slot.state == SlotState.CANCELLED:
                # Latest cancellation is the one worth showing.
                if cancelled_by is None or _newer(booking, cancelled_by):
                    cancelled_by = booking

    if completed_by is not None:
        return SlotView(date=date, time=time, status=SlotStatus.COMPLETED, booking=completed_by)
    if active_by is not None:
        return SlotView(date=date, time=time, status=SlotStatus.BOOKED, booking=active_by)
    if cancelled_by is not None:
        return SlotView(date=date, time=time, status=SlotStatus.CANCELLED, booking=cancelled_by)
    return SlotView(date=date, time=time, status=SlotStatus.FREE)


def _newer(left: "Booking", right: "Booking") -> bool:
    left_at = left.updated_at or left.created_at
    right_at = right.updated_at or right.created_at
    if left_at is None or right_at is None:
        return False
    return left_at > right_at
