"""
Adapters package for the pricing accessor.

Holds the remote store contract and the bundled in-memory store. Store
implementations stay thin: they run the query they are asked for and
raise on failure, leaving caching and error mapping to the accessor.
"""

from .store import RemoteStore
from .memory_store import InMemoryStore

__all__ = [
    "RemoteStore",
    "InMemoryStore",
]
