"""
In-process RemoteStore used for local runs and tests.
"""

import asyncio
import copy
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from shared.logging import get_logger
from shared.errors import ValidationError
from .store import Filters, Record, RemoteStore


class InMemoryStore(RemoteStore):
    """Dict-backed table store.

    Rows get a generated ``id`` plus ``created_at``/``updated_at`` stamps,
    mirroring what the hosted store fills in. Every row handed out is a
    deep copy so callers never alias stored state.
    """

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self.logger = get_logger("pricing.store.memory")
        self._tables: Dict[str, List[Record]] = {}

    async def _tick(self):
        # Yield even with zero latency so callers interleave like real I/O.
        await asyncio.sleep(self.latency)

    @staticmethod
    def _matches(row: Record, filters: Filters) -> bool:
        return all(row.get(column) == value for column, value in filters.items())

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _rows(self, collection: str) -> List[Record]:
        return self._tables.setdefault(collection, [])

    async def select_where(self, collection: str, filters: Filters) -> List[Record]:
        await self._tick()
        return [copy.deepcopy(row) for row in self._rows(collection) if self._matches(row, filters)]

    async def select_one(self, collection: str, filters: Filters) -> Optional[Record]:
        await self._tick()
        matches = [row for row in self._rows(collection) if self._matches(row, filters)]
        if len(matches) > 1:
            raise ValidationError(
                "Filter matched more than one row",
                details={"collection": collection, "filters": filters, "count": len(matches)}
            )
        return copy.deepcopy(matches[0]) if matches else None

    async def insert(self, collection: str, record: Record) -> Record:
        await self._tick()
        row = copy.deepcopy(record)
        row.setdefault("id", str(uuid.uuid4()))
        if any(existing["id"] == row["id"] for existing in self._rows(collection)):
            raise ValidationError("Duplicate id", details={"collection": collection, "id": row["id"]})
        now = self._now()
        row.setdefault("created_at", now)
        row["updated_at"] = now
        self._rows(collection).append(row)
        self.logger.debug("Row inserted", collection=collection, id=row["id"])
        return copy.deepcopy(row)

    async def update_partial(self, collection: str, filters: Filters, patch: Record) -> Optional[Record]:
        await self._tick()
        for row in self._rows(collection):
            if self._matches(row, filters):
                row.update(copy.deepcopy(patch))
                row["updated_at"] = self._now()
                return copy.deepcopy(row)
        return None

    async def delete_where(self, collection: str, filters: Filters) -> int:
        await self._tick()
        rows = self._rows(collection)
        kept = [row for row in rows if not self._matches(row, filters)]
        removed = len(rows) - len(kept)
        self._tables[collection] = kept
        return removed
