"""
Calendar endpoints: slot status grid and the same-day roster.
"""

from datetime import date as Date

from fastapi import APIRouter, Depends, Query

from slotsync.api.deps import get_store
from slotsync.models.slot import SlotView, TimeFilter
from slotsync.schemas.state import DayRoster
from slotsync.store.state_store import StateStore

router = APIRouter(tags=["Calendar"])


@router.get("/slots/{day}", response_model=list[SlotView])
async def get_slot_grid(
    day: Date,
    selected: list[str] = Query([]),
    time_filter: TimeFilter = Query(TimeFilter.ALL, alias="filter"),
    store: StateStore = Depends(get_store),
):
    """
    Status of every hourly slot on a date.
    `selected` marks the caller's pending (not yet booked) picks.
    """
    pending = {(day, time) for time in selected}
    return store.slot_grid(day, pending, time_filter)


@router.get("/slots/{day}/{time}", response_model=SlotView)
async def get_slot(day: Date, time: str, store: StateStore = Depends(get_store)):
    return store.slot_status(day, time)


@router.get("/roster/{day}", response_model=DayRoster)
async def get_roster(
    day: Date,
    include_completed: bool = Query(False),
    store: StateStore = Depends(get_store),
):
    """One entry per active slot on the day, in time order."""
    return DayRoster(
        date=day,
        booked_slots=store.booked_slot_count(day),
        entries=store.day_roster(day, include_completed),
    )
