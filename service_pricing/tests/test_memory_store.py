"""
Unit tests for the in-memory RemoteStore.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_pricing.app.adapters.memory_store import InMemoryStore
from shared.errors import ValidationError
from shared.test_helpers import TestDataFactory


class TestInMemoryStore:
    """Test cases for InMemoryStore."""

    @pytest.fixture
    def store(self):
        return InMemoryStore()

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_timestamps(self, store):
        row = await store.insert("pricing_tables", {"supplier_id": "s1", "service_name": "Desks"})

        assert row["id"]
        assert row["created_at"]
        assert row["updated_at"] == row["created_at"]

    @pytest.mark.asyncio
    async def test_insert_rejects_duplicate_id(self, store):
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))

        with pytest.raises(ValidationError):
            await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))

    @pytest.mark.asyncio
    async def test_select_where_filters_on_every_column(self, store):
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s2", "t2"))

        rows = await store.select_where("pricing_tables", {"supplier_id": "s1"})
        scoped = await store.select_one("pricing_tables", {"id": "t2", "supplier_id": "s1"})

        assert [row["id"] for row in rows] == ["t1"]
        assert scoped is None

    @pytest.mark.asyncio
    async def test_rows_are_copies(self, store):
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))

        row = await store.select_one("pricing_tables", {"id": "t1"})
        row["features"].clear()

        fresh = await store.select_one("pricing_tables", {"id": "t1"})
        assert len(fresh["features"]) == 3

    @pytest.mark.asyncio
    async def test_update_partial_and_delete(self, store):
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))

        updated = await store.update_partial("pricing_tables", {"id": "t1", "supplier_id": "s1"}, {"price_unit": "per set"})
        missed = await store.update_partial("pricing_tables", {"id": "t1", "supplier_id": "s2"}, {"price_unit": "x"})

        assert updated["price_unit"] == "per set"
        assert missed is None
        assert await store.delete_where("pricing_tables", {"id": "t1", "supplier_id": "s2"}) == 0
        assert await store.delete_where("pricing_tables", {"id": "t1", "supplier_id": "s1"}) == 1
        assert await store.select_where("pricing_tables", {}) == []

    @pytest.mark.asyncio
    async def test_select_one_rejects_ambiguous_filter(self, store):
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t1"))
        await store.insert("pricing_tables", TestDataFactory.create_pricing_row("s1", "t2"))

        with pytest.raises(ValidationError):
            await store.select_one("pricing_tables", {"supplier_id": "s1"})
