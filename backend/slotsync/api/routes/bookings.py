"""
Booking endpoints.

Commands go through the sync coordinator: nothing changes locally until the
remote store has confirmed the write.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from slotsync.api.deps import command_response, get_coordinator, get_store
from slotsync.models.booking import Booking
from slotsync.schemas.command import CommandResult
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, store: StateStore = Depends(get_store)):
    booking = store.find_booking(booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found",
        )
    return booking


@router.post("/", response_model=CommandResult)
async def create_booking(
    response: Response,
    payload: dict[str, Any] = Body(...),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """
    Book one or more hourly slots on a date for a customer.

    Slots already held on that date are rejected with a validation error.
    A cancelled slot can be booked again; that creates a new booking.
    """
    result = await coordinator.create_booking(payload)
    return command_response(result, response, status.HTTP_201_CREATED)


@router.post("/{booking_id}/cancel", response_model=CommandResult)
async def cancel_slots(
    booking_id: str,
    response: Response,
    slots: list[str] = Body(..., embed=True),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """Cancel the given slots of a booking; the rest stay active."""
    result = await coordinator.cancel_slots(booking_id, slots)
    return command_response(result, response)


@router.post("/{booking_id}/complete", response_model=CommandResult)
async def complete_booking(
    booking_id: str,
    response: Response,
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    result = await coordinator.complete_booking(booking_id)
    return command_response(result, response)
