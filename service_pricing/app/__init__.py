"""
Pricing accessor package for the Pricing Access Layer.

Serves supplier pricing tables to UI collaborators through one cached,
pooled accessor:
- Caching: short-lived TTL cache, dropped after successful writes
- Pooling: bounded slots with FIFO waiting and acquire timeouts
- Errors: store failures surface as shared AccessError

Structure:
- app.accessor: PricingAccessor, the five read/write operations.
- app.adapters: RemoteStore contract and the in-memory store.
- app.caching: TTLCache and cache keys.
- app.pool: ResourcePool and slots.
- app.models: Pricing table models and write payloads.
- app.config: Settings loaded from ACCESS_* environment variables.
"""

from .accessor import PricingAccessor

__all__ = ["PricingAccessor"]
