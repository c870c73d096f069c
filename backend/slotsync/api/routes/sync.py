"""
Sync state endpoints: banner flags, explicit reload and the connectivity signal.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from slotsync.api.deps import get_coordinator, get_store
from slotsync.schemas.command import BootstrapResult
from slotsync.schemas.state import StoreStatus
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

router = APIRouter(tags=["Sync"])


class ConnectivitySignal(BaseModel):
    connected: bool


@router.get("/state", response_model=StoreStatus)
async def get_state(store: StateStore = Depends(get_store)):
    return store.status()


@router.post("/sync/reload", response_model=BootstrapResult)
async def reload(coordinator: SyncCoordinator = Depends(get_coordinator)):
    """Fresh bulk load; falls back to the cache when the remote store is down."""
    return await coordinator.bootstrap()


@router.post("/sync/connectivity", response_model=StoreStatus)
async def connectivity(
    signal: ConnectivitySignal,
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """Record a reachability change. Does not reload on its own."""
    coordinator.set_connectivity(signal.connected)
    return coordinator.store.status()
