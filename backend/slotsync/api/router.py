"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from slotsync.api.routes import bookings, customers, slots, sync

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(sync.router)
api_router.include_router(customers.router)
api_router.include_router(bookings.router)
api_router.include_router(slots.router)
