"""
State Store: immutable snapshots, the reducer that produces them and the
queries that read them.
"""

from .reducer import StoreState, reduce
from .state_store import StateStore

__all__ = ['StoreState', 'reduce', 'StateStore']
