from slotsync.models.slot import (
    HOURLY_SLOTS,
    SlotRecord,
    SlotState,
    SlotStatus,
    SlotView,
    TimeFilter,
    derive_slot_status,
)
from slotsync.models.customer import Customer
from slotsync.models.booking import Booking, BookingStatus, status_for_slots

__all__ = [
    "HOURLY_SLOTS", "SlotRecord", "SlotState", "SlotStatus", "SlotView", "TimeFilter",
    "derive_slot_status",
    "Customer",
    "Booking", "BookingStatus", "status_for_slots",
]
