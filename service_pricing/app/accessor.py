"""
Cached, pooled accessor for supplier pricing tables.
"""

from contextlib import nullcontext
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from shared.logging import get_logger, supplier_context
from shared.errors import AccessError, AccessLayerException, NotFoundError, ValidationError
from shared.metrics import MetricsCollector
from .adapters.memory_store import InMemoryStore
from .adapters.store import RemoteStore
from .caching.ttl_cache import CacheKey, TTLCache
from .config import PricingConfig, get_config
from .models import PricingTable, PricingTableCreate, PricingTableUpdate
from .pool.resource_pool import ResourcePool


CreatePayload = Union[PricingTableCreate, Mapping[str, Any]]
UpdatePayload = Union[PricingTableUpdate, Mapping[str, Any]]


class PricingAccessor:
    """Read/write access to one supplier-owned pricing collection.

    Reads are served from a TTL cache while fresh and otherwise fetched
    through a pool slot. Writes go through a pool slot and, once the store
    accepts them, drop the supplier's cached listing (and item entries for
    update/delete). Failed writes leave the cache as it was.
    """

    _instance: Optional["PricingAccessor"] = None

    def __init__(
        self,
        store: RemoteStore,
        *,
        config: Optional[PricingConfig] = None,
        cache: Optional[TTLCache] = None,
        pool: Optional[ResourcePool] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        # Explicit None checks: an empty TTLCache is falsy.
        self.config = config if config is not None else get_config()
        self.store = store
        self.collection = self.config.pricing_collection
        self.metrics = metrics
        self.logger = get_logger("pricing.accessor")

        if cache is None:
            cache = TTLCache(self.config.pricing_cache_ttl_seconds, metrics=metrics)
        self.cache = cache

        if pool is None:
            pool = ResourcePool(
                store,
                self.config.pricing_pool_max_size,
                acquire_timeout=self.config.pricing_pool_acquire_timeout_seconds,
                metrics=metrics
            )
        self.pool = pool

    @classmethod
    def get_instance(cls, store: Optional[RemoteStore] = None, **kwargs) -> "PricingAccessor":
        """Return the process-wide accessor, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls(store if store is not None else InMemoryStore(), **kwargs)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Close and forget the process-wide accessor."""
        if cls._instance is not None:
            cls._instance.close()
        cls._instance = None

    async def _call_store(self, operation: str, supplier_id: str, *args) -> Any:
        """Run one store operation for ``supplier_id`` while holding a pool slot."""
        with supplier_context(supplier_id):
            async with self.pool.slot() as slot:
                timer = (
                    self.metrics.time_operation("pricing_store_operation_duration_seconds", operation=operation)
                    if self.metrics is not None else nullcontext()
                )
                status = "error"
                try:
                    with timer:
                        result = await getattr(slot.handle, operation)(self.collection, *args)
                    status = "ok"
                    return result
                except AccessLayerException:
                    raise
                except Exception as exc:
                    self.logger.error(
                        "Pricing store call failed",
                        operation=operation,
                        collection=self.collection,
                        error=str(exc)
                    )
                    raise AccessError(
                        f"{operation} on {self.collection} failed: {exc}",
                        details={"operation": operation, "collection": self.collection, "error_type": type(exc).__name__}
                    ) from exc
                finally:
                    if self.metrics is not None:
                        self.metrics.increment_counter("pricing_store_operations_total", operation=operation, status=status)

    def _parse(self, row: Mapping[str, Any]) -> PricingTable:
        try:
            return PricingTable.model_validate(row)
        except PydanticValidationError as exc:
            raise AccessError(
                "Store returned a malformed pricing table",
                details={"collection": self.collection, "errors": exc.errors(include_url=False, include_context=False)}
            ) from exc

    @staticmethod
    def _scope(supplier_id: str, table_id: str) -> Dict[str, str]:
        return {"id": table_id, "supplier_id": supplier_id}

    async def list_pricing_tables(self, supplier_id: str) -> List[PricingTable]:
        """Get all pricing tables for a supplier."""
        cache_key = CacheKey.collection(supplier_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        rows = await self._call_store("select_where", supplier_id, {"supplier_id": supplier_id})
        tables = [self._parse(row) for row in rows]
        self.cache.set(cache_key, tables)
        return tables

    async def get_pricing_table(self, supplier_id: str, table_id: str) -> Optional[PricingTable]:
        """Get one pricing table, or None if the supplier has no such table."""
        cache_key = CacheKey.item(supplier_id, table_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        row = await self._call_store("select_one", supplier_id, self._scope(supplier_id, table_id))
        if row is None:
            self.logger.debug("Pricing table not found", supplier_id=supplier_id, table_id=table_id)
            return None

        table = self._parse(row)
        self.cache.set(cache_key, table)
        return table

    async def create_pricing_table(self, supplier_id: str, payload: CreatePayload) -> PricingTable:
        """Create a pricing table owned by ``supplier_id``."""
        record = self._validate_create(supplier_id, payload).to_record(supplier_id)

        row = await self._call_store("insert", supplier_id, record)
        # The write has landed; drop the listing before the row can fail to parse.
        self.cache.delete(CacheKey.collection(supplier_id))

        table = self._parse(row)
        self.logger.info("Pricing table created", supplier_id=supplier_id, table_id=table.id)
        return table

    async def update_pricing_table(self, supplier_id: str, table_id: str, patch: UpdatePayload) -> PricingTable:
        """Apply a partial update to a table owned by ``supplier_id``."""
        changes = self._validate_update(patch).to_patch()
        if not changes:
            raise ValidationError("Update contains no fields", details={"table_id": table_id})

        row = await self._call_store("update_partial", supplier_id, self._scope(supplier_id, table_id), changes)
        if row is None:
            raise NotFoundError(
                "Pricing table not found for supplier",
                details={"supplier_id": supplier_id, "table_id": table_id}
            )
        self.cache.invalidate_owner(supplier_id)

        table = self._parse(row)
        self.logger.info(
            "Pricing table updated",
            supplier_id=supplier_id,
            table_id=table_id,
            fields=sorted(changes)
        )
        return table

    async def delete_pricing_table(self, supplier_id: str, table_id: str) -> None:
        """Delete a table owned by ``supplier_id``."""
        deleted = await self._call_store("delete_where", supplier_id, self._scope(supplier_id, table_id))
        if not deleted:
            raise NotFoundError(
                "Pricing table not found for supplier",
                details={"supplier_id": supplier_id, "table_id": table_id}
            )

        self.cache.invalidate_owner(supplier_id)
        self.logger.info("Pricing table deleted", supplier_id=supplier_id, table_id=table_id)

    def _validate_create(self, supplier_id: str, payload: CreatePayload) -> PricingTableCreate:
        if isinstance(payload, PricingTableCreate):
            return payload
        if not isinstance(payload, Mapping):
            raise ValidationError("Payload must be a mapping", details={"type": type(payload).__name__})

        data = dict(payload)
        owner = data.pop("supplier_id", supplier_id)
        if owner != supplier_id:
            raise ValidationError(
                "Payload supplier does not match owner",
                details={"supplier_id": supplier_id, "payload_supplier_id": owner}
            )
        try:
            return PricingTableCreate.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid pricing table payload",
                details={"errors": exc.errors(include_url=False, include_context=False)}
            ) from exc

    def _validate_update(self, patch: UpdatePayload) -> PricingTableUpdate:
        if isinstance(patch, PricingTableUpdate):
            return patch
        if not isinstance(patch, Mapping):
            raise ValidationError("Patch must be a mapping", details={"type": type(patch).__name__})
        try:
            return PricingTableUpdate.model_validate(dict(patch))
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid pricing table patch",
                details={"errors": exc.errors(include_url=False, include_context=False)}
            ) from exc

    def clear_cache(self) -> int:
        """Drop every cached entry."""
        return self.cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache and pool statistics."""
        return {
            "collection": self.collection,
            "cache": self.cache.get_stats(),
            "pool": self.pool.get_stats(),
        }

    def close(self) -> None:
        """Close the pool; queued callers fail with PoolClosedError."""
        self.pool.close()
