"""
Booking entity with per-slot lifecycle.

Key design decisions:
- One list of {time, state} records instead of parallel time/cancelled/completed
  arrays, so a slot is never in two lifecycle states at once
- `status` is derived from the slots on every read and never taken from input
- Slot mutations return a new Booking, which recomputes the status
- Re-booking a cancelled slot creates a new booking; cancelled slots are never
  resurrected inside the booking that cancelled them
"""

from datetime import date as Date, datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, computed_field

from slotsync.models.slot import SlotRecord, SlotState, SlotView


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def status_for_slots(slots: Iterable[SlotRecord]) -> BookingStatus:
    states = [slot.state for slot in slots]
    if SlotState.ACTIVE in states:
        return BookingStatus.CONFIRMED
    if SlotState.COMPLETED in states:
        return BookingStatus.COMPLETED
    # All cancelled, or nothing held at all
    return BookingStatus.CANCELLED


class Booking(BaseModel):
    id: str
    customer_id: str
    customer_name: Optional[str] = None
    date: Date
    slots: tuple[SlotRecord, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True, "coerce_numbers_to_str": True}

    @computed_field
    @property
    def status(self) -> BookingStatus:
        return status_for_slots(self.slots)

    @property
    def times(self) -> list[str]:
        return [slot.time for slot in self.slots]

    def slot_state(self, time: str) -> Optional[SlotState]:
        for slot in self.slots:
            if slot.time == time:
                return slot.state
        return None

    def times_in_state(self, state: SlotState) -> list[str]:
        return [slot.time for slot in self.slots if slot.state == state]

    def holds(self, time: str) -> bool:
        """True when the slot is active or completed under this booking."""
        return self.slot_state(time) in (SlotState.ACTIVE, SlotState.COMPLETED)

    def with_slots_cancelled(self, times: Iterable[str]) -> tuple["Booking", list[str]]:
        """
        Cancel the given active slots.
        Returns the new booking and the times that actually moved to cancelled.
        """
        wanted = set(times)
        moved = []
        slots = []
        for slot in self.slots:
            if slot.time in wanted and slot.state == SlotState.ACTIVE:
                slots.append(SlotRecord(time=slot.time, state=SlotState.CANCELLED))
                moved.append(slot.time)
            else:
                slots.append(slot)
        return self.model_copy(update={"slots": tuple(slots)}), moved

    def with_slots_completed(self) -> tuple["Booking", list[str]]:
        """Complete every active slot; cancelled slots stay cancelled."""
        moved = []
        slots = []
        for slot in self.slots:
            if slot.state == SlotState.ACTIVE:
                slots.append(SlotRecord(time=slot.time, state=SlotState.COMPLETED))
                moved.append(slot.time)
            else:
                slots.append(slot)
        return self.model_copy(update={"slots": tuple(slots)}), moved

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, customer={self.customer_id}, date={self.date}, status={self.status.value})>"


SlotView.model_rebuild(_types_namespace={"Booking": Booking})
