"""
Translate between remote rows and entity models.

Rows use the unified `slots` array. Rows written by older clients carry
parallel `time_slots` / `cancelled_slots` arrays instead; those are upgraded
on read so the rest of the code only ever sees SlotRecord lists.
"""

from typing import Any, Mapping

from slotsync.models.booking import Booking, BookingStatus
from slotsync.models.customer import Customer
from slotsync.models.slot import SlotRecord, SlotState

CUSTOMER_WRITABLE_FIELDS = ("name", "mobile", "city", "total_bookings", "total_cancellations")


def customer_from_row(row: Mapping[str, Any]) -> Customer:
    return Customer.model_validate(dict(row))


def customer_to_row(values: Mapping[str, Any]) -> dict:
    """Keep only writable columns; counters default to zero on insert."""
    row = {key: values[key] for key in CUSTOMER_WRITABLE_FIELDS if key in values}
    row.setdefault("total_bookings", 0)
    row.setdefault("total_cancellations", 0)
    return row


def _legacy_slots(row: Mapping[str, Any]) -> list[dict]:
    times = row.get("time_slots") or []
    cancelled = set(row.get("cancelled_slots") or [])
    completed = set(row.get("completed_slots") or [])
    whole_booking_completed = row.get("status") == BookingStatus.COMPLETED.value

    slots = []
    for time in times:
        if time in cancelled:
            state = SlotState.CANCELLED
        elif time in completed or whole_booking_completed:
            state = SlotState.COMPLETED
        else:
            state = SlotState.ACTIVE
        slots.append({"time": time, "state": state})
    return slots


def booking_from_row(row: Mapping[str, Any]) -> Booking:
    data = dict(row)
    if data.get("slots") is None:
        data["slots"] = _legacy_slots(row)
    for legacy_key in ("time_slots", "cancelled_slots", "completed_slots", "status"):
        data.pop(legacy_key, None)
    return Booking.model_validate(data)


def slots_to_row(slots: tuple[SlotRecord, ...]) -> list[dict]:
    return [{"time": slot.time, "state": slot.state.value} for slot in slots]


def booking_to_row(booking: Booking) -> dict:
    """Writable columns, with the derived status included for server-side filtering."""
    return {
        "customer_id": booking.customer_id,
        "customer_name": booking.customer_name,
        "date": booking.date.isoformat(),
        "slots": slots_to_row(booking.slots),
        "status": booking.status.value,
    }


def new_booking_row(customer_id: str, customer_name, date, times) -> dict:
    """Row for a freshly created booking: every requested slot starts active."""
    return {
        "customer_id": customer_id,
        "customer_name": customer_name,
        "date": date.isoformat(),
        "slots": [{"time": time, "state": SlotState.ACTIVE.value} for time in times],
        "status": BookingStatus.CONFIRMED.value,
    }
