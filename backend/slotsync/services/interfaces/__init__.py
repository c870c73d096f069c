"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing sync logic.
"""

from .cache import LocalCache
from .remote import RemoteSyncClient

__all__ = ['LocalCache', 'RemoteSyncClient']
