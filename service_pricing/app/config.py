"""
Configuration for the pricing accessor.
"""

from typing import Optional

from pydantic import Field

from shared.config import BaseConfig


DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_POOL_MAX_SIZE = 10
DEFAULT_ACQUIRE_TIMEOUT_SECONDS = 30.0


class PricingConfig(BaseConfig):
    """Pricing accessor settings (env prefix ``ACCESS_``)."""

    pricing_collection: str = Field(default="pricing_tables")
    pricing_cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0)
    pricing_pool_max_size: int = Field(default=DEFAULT_POOL_MAX_SIZE, ge=1)
    # None waits for a slot indefinitely.
    pricing_pool_acquire_timeout_seconds: Optional[float] = Field(default=DEFAULT_ACQUIRE_TIMEOUT_SECONDS, gt=0)


def get_config(**overrides) -> PricingConfig:
    """Get pricing accessor configuration."""
    return PricingConfig(**overrides)
