"""
Slot pool bounding concurrent remote store access.
"""

from .resource_pool import PoolSlot, ResourcePool

__all__ = ["PoolSlot", "ResourcePool"]
