"""
Tests for slot status derivation and the hourly slot vocabulary.
"""

from datetime import date

import pytest

from slotsync.models.slot import (
    HOURLY_SLOTS,
    SlotStatus,
    TimeFilter,
    derive_slot_status,
    format_display_range,
    format_time_range,
    slots_for_filter,
    time_sort_key,
)

DAY = date(2025, 3, 1)


def test_free_when_no_bookings():
    view = derive_slot_status(DAY, "10:00", [])
    assert view.status == SlotStatus.FREE
    assert view.booking is None


def test_pending_selection_wins(make_booking):
    booking = make_booking(["10:00"])
    view = derive_slot_status(DAY, "10:00", [booking], pending_selection={(DAY, "10:00")})
    assert view.status == SlotStatus.SELECTED


def test_selection_on_other_date_is_ignored(make_booking):
    booking = make_booking(["10:00"])
    view = derive_slot_status(DAY, "10:00", [booking], pending_selection={(date(2025, 3, 2), "10:00")})
    assert view.status == SlotStatus.BOOKED


def test_active_slot_is_booked_and_carries_booking(make_booking):
    booking = make_booking(["10:00", "11:00"], customer_name="Asha")
    view = derive_slot_status(DAY, "11:00", [booking])
    assert view.status == SlotStatus.BOOKED
    assert view.booking.id == booking.id


def test_bookings_on_other_dates_do_not_count(make_booking):
    booking = make_booking(["10:00"], day=date(2025, 3, 2))
    assert derive_slot_status(DAY, "10:00", [booking]).status == SlotStatus.FREE


def test_completed_beats_active(make_booking):
    completed = make_booking([("09:00", "completed")])
    active = make_booking(["09:00"])
    view = derive_slot_status(DAY, "09:00", [active, completed])
    assert view.status == SlotStatus.COMPLETED
    assert view.booking.id == completed.id


def test_cancelled_slot_shows_cancelled(make_booking):
    booking = make_booking([("14:00", "cancelled"), "15:00"])
    assert derive_slot_status(DAY, "14:00", [booking]).status == SlotStatus.CANCELLED
    assert derive_slot_status(DAY, "15:00", [booking]).status == SlotStatus.BOOKED


def test_rebooked_slot_resolves_to_booked(make_booking):
    """Booked, cancelled, then claimed by a new booking."""
    original = make_booking([("14:00", "cancelled")])
    assert derive_slot_status(DAY, "14:00", [original]).status == SlotStatus.CANCELLED

    rebooked = make_booking(["14:00"], created_offset_minutes=30)
    # Order of bookings must not matter
    for bookings in ([original, rebooked], [rebooked, original]):
        view = derive_slot_status(DAY, "14:00", bookings)
        assert view.status == SlotStatus.BOOKED
        assert view.booking.id == rebooked.id


def test_cancelled_view_carries_latest_cancellation(make_booking):
    older = make_booking([("14:00", "cancelled")], created_offset_minutes=0)
    newer = make_booking([("14:00", "cancelled")], created_offset_minutes=60)
    view = derive_slot_status(DAY, "14:00", [newer, older])
    assert view.booking.id == newer.id


def test_hourly_slots():
    assert len(HOURLY_SLOTS) == 24
    assert HOURLY_SLOTS[0] == "00:00"
    assert HOURLY_SLOTS[-1] == "23:00"


@pytest.mark.parametrize("time_filter, first, last, count", [
    (TimeFilter.ALL, "00:00", "23:00", 24),
    (TimeFilter.EARLY_BIRD, "00:00", "07:00", 8),
    (TimeFilter.DAY_SHIFT, "08:00", "14:00", 7),
    (TimeFilter.PRIME_TIME, "15:00", "23:00", 9),
])
def test_time_filters(time_filter, first, last, count):
    slots = slots_for_filter(time_filter)
    assert (slots[0], slots[-1], len(slots)) == (first, last, count)


def test_time_formatting():
    assert format_time_range("18:00") == "18:00 - 19:00"
    assert format_time_range("23:00") == "23:00 - 00:00"
    assert format_display_range("00:00") == "12 AM - 1 AM"
    assert format_display_range("11:00") == "11 AM - 12 PM"
    assert format_display_range("18:00") == "6 PM - 7 PM"


def test_time_sort_key_puts_malformed_last():
    assert sorted(["19:00", "bad", "09:00"], key=time_sort_key) == ["09:00", "19:00", "bad"]
