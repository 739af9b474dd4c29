"""
Remote store contract consumed by the pricing accessor.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


Filters = Dict[str, Any]
Record = Dict[str, Any]


class RemoteStore(ABC):
    """Handle to a remote table store.

    Filters are equality maps (column -> value); a row matches when every
    listed column equals the given value. Implementations raise whatever
    their transport raises; the accessor wraps those failures.
    """

    @abstractmethod
    async def select_where(self, collection: str, filters: Filters) -> List[Record]:
        """Return every row matching ``filters``."""

    @abstractmethod
    async def select_one(self, collection: str, filters: Filters) -> Optional[Record]:
        """Return the single matching row, or None."""

    @abstractmethod
    async def insert(self, collection: str, record: Record) -> Record:
        """Insert ``record`` and return the stored row."""

    @abstractmethod
    async def update_partial(self, collection: str, filters: Filters, patch: Record) -> Optional[Record]:
        """Apply ``patch`` to the matching row; None when nothing matched."""

    @abstractmethod
    async def delete_where(self, collection: str, filters: Filters) -> int:
        """Delete matching rows and return how many were removed."""
