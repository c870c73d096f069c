"""
Customer endpoints: store queries and customer commands.
"""

from datetime import date as Date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from slotsync.api.deps import command_response, get_coordinator, get_store
from slotsync.models.customer import Customer
from slotsync.schemas.command import CommandResult
from slotsync.schemas.state import CustomerBookings
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/", response_model=list[Customer])
async def list_customers(
    q: str = Query("", max_length=100),
    store: StateStore = Depends(get_store),
):
    """Customers in the current snapshot, filtered by name, mobile or city."""
    return store.search_customers(q)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(customer_id: str, store: StateStore = Depends(get_store)):
    customer = store.find_customer(customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found",
        )
    return customer


@router.get("/{customer_id}/bookings", response_model=CustomerBookings)
async def get_customer_bookings(
    customer_id: str,
    today: Optional[Date] = Query(None),
    store: StateStore = Depends(get_store),
):
    """Upcoming, past and cancelled bookings of one customer."""
    return store.customer_bookings(customer_id, today)


@router.post("/", response_model=CommandResult)
async def create_customer(
    response: Response,
    payload: dict[str, Any] = Body(...),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    result = await coordinator.create_customer(payload)
    return command_response(result, response, status.HTTP_201_CREATED)


@router.patch("/{customer_id}", response_model=CommandResult)
async def update_customer(
    customer_id: str,
    response: Response,
    payload: dict[str, Any] = Body(...),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    result = await coordinator.update_customer(customer_id, payload)
    return command_response(result, response)


@router.delete("/{customer_id}", response_model=CommandResult)
async def delete_customer(
    customer_id: str,
    response: Response,
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """Delete a customer together with their bookings."""
    result = await coordinator.delete_customer(customer_id)
    return command_response(result, response)
