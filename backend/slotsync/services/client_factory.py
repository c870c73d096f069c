"""
Remote client factory.
Configures which Remote Sync Client implementation to use.
"""

from slotsync.core.config import get_settings
from slotsync.services.interfaces.remote import RemoteSyncClient
from slotsync.services.memory_remote import InMemorySyncClient
from slotsync.services.rest_remote import RestSyncClient


def get_remote_client() -> RemoteSyncClient:
    """
    Get configured remote client.

    Selection via REMOTE_BACKEND:
    - memory: InMemorySyncClient (development, tests)
    - rest: RestSyncClient against REMOTE_URL, changes over Redis pub/sub
    """
    backend = get_settings().REMOTE_BACKEND

    if backend == 'rest':
        return RestSyncClient()
    if backend == 'memory':
        return InMemorySyncClient()
    raise ValueError(f"Unknown REMOTE_BACKEND: {backend}")
