"""Tests for ViewRegistry."""

from datetime import datetime

import pytest

from mvlite.core.errors import StoreError
from mvlite.managers.registry import ViewRegistry
from mvlite.models import ViewDefinition
from mvlite.utils import InvalidNameError


class TestViewRegistry:
    """Test view definition storage."""

    def test_ensure_schema_creates_table(self, conn):
        """Test that ensure_schema creates the registry table."""
        registry = ViewRegistry(conn)
        assert not conn.table_exists("materialized_views")

        registry.ensure_schema()

        assert conn.table_exists("materialized_views")
        columns = [
            row["name"]
            for row in conn.execute("PRAGMA table_info(materialized_views)").fetchall()
        ]
        assert columns == ["id", "name", "query", "created_at", "updated_at", "deleted_at"]

    def test_ensure_schema_idempotent(self, registry):
        """Test that ensure_schema is safe to call repeatedly."""
        registry.register("events_sample", "SELECT 1")

        registry.ensure_schema()
        registry.ensure_schema()

        assert registry.lookup_query("events_sample") == "SELECT 1"

    def test_ensure_schema_failure_raises_store_error(self, conn):
        """Test that a DDL failure surfaces as StoreError."""
        # A view of the same name satisfies IF NOT EXISTS but cannot be indexed
        conn.execute("CREATE VIEW materialized_views AS SELECT 1 AS name, 2 AS id")

        with pytest.raises(StoreError, match="materialized_views"):
            ViewRegistry(conn).ensure_schema()

    def test_custom_table_name(self, conn):
        """Test using a non-default registry table."""
        registry = ViewRegistry(conn, "mv_registry")
        registry.ensure_schema()
        registry.register("events_sample", "SELECT 1")

        assert conn.table_exists("mv_registry")
        assert registry.lookup_query("events_sample") == "SELECT 1"

    def test_invalid_table_name(self, conn):
        """Test that the registry table name is validated."""
        with pytest.raises(InvalidNameError):
            ViewRegistry(conn, "registry; DROP TABLE x")

    def test_register_returns_definition(self, registry):
        """Test that register returns the stored row."""
        definition = registry.register("events_sample", "SELECT 1")

        assert isinstance(definition, ViewDefinition)
        assert definition.name == "events_sample"
        assert definition.query == "SELECT 1"
        assert isinstance(definition.created_at, datetime)
        assert definition.deleted_at is None
        assert definition.is_active

    def test_register_appends(self, registry):
        """Test that registration is append-only."""
        first = registry.register("events_sample", "SELECT 1")
        second = registry.register("events_sample", "SELECT 2")

        assert second.id > first.id
        assert [d.query for d in registry.history("events_sample")] == [
            "SELECT 1",
            "SELECT 2",
        ]

    def test_lookup_latest_wins(self, registry):
        """Test that lookup resolves to the most recent registration."""
        registry.register("events_sample", "SELECT 1")
        registry.register("events_sample", "SELECT 2")
        registry.register("other", "SELECT 3")

        assert registry.lookup_query("events_sample") == "SELECT 2"
        assert registry.get("events_sample").query == "SELECT 2"

    def test_lookup_not_found(self, registry):
        """Test that a missing view is a normal None outcome."""
        assert registry.lookup_query("nonexistent") is None
        assert registry.get("nonexistent") is None
        assert registry.history("nonexistent") == []

    def test_lookup_without_schema_raises_store_error(self, conn):
        """Test that reading a missing registry table is a store error."""
        with pytest.raises(StoreError):
            ViewRegistry(conn).lookup_query("events_sample")

    def test_record_same_query_does_not_append(self, registry):
        """Test that recording an unchanged query keeps a single version."""
        first = registry.record("events_sample", "SELECT 1")
        again = registry.record("events_sample", "SELECT 1")

        assert again.id == first.id
        assert len(registry.history("events_sample")) == 1

    def test_record_changed_query_appends(self, registry):
        """Test that recording a new query creates a new current version."""
        registry.record("events_sample", "SELECT 1")
        current = registry.record("events_sample", "SELECT 2")

        assert current.query == "SELECT 2"
        assert registry.lookup_query("events_sample") == "SELECT 2"
        assert len(registry.history("events_sample")) == 2

    def test_list_views_latest_per_name(self, registry):
        """Test that list_views shows one current definition per name."""
        registry.register("zeta", "SELECT 1")
        registry.register("alpha", "SELECT 2")
        registry.register("zeta", "SELECT 3")

        views = registry.list_views()

        assert [(v.name, v.query) for v in views] == [
            ("alpha", "SELECT 2"),
            ("zeta", "SELECT 3"),
        ]

    def test_soft_delete(self, registry, conn):
        """Test that soft-deleted registrations are ignored."""
        registry.register("events_sample", "SELECT 1")
        registry.register("events_sample", "SELECT 2")

        assert registry.soft_delete("events_sample") == 2

        assert registry.lookup_query("events_sample") is None
        assert registry.list_views() == []
        # Rows stay in the table with deleted_at set
        count = conn.execute(
            "SELECT COUNT(*) FROM materialized_views WHERE deleted_at IS NOT NULL"
        ).fetchone()[0]
        assert count == 2

    def test_register_after_soft_delete(self, registry):
        """Test that a dropped name can be registered again."""
        registry.register("events_sample", "SELECT 1")
        registry.soft_delete("events_sample")
        registry.register("events_sample", "SELECT 2")

        assert registry.lookup_query("events_sample") == "SELECT 2"
        assert len(registry.history("events_sample")) == 1

    def test_writes_join_caller_transaction(self, registry, conn):
        """Test that registry writes roll back with the caller's transaction."""
        with pytest.raises(RuntimeError):
            with conn.transaction():
                registry.register("events_sample", "SELECT 1")
                raise RuntimeError("abort")

        assert registry.lookup_query("events_sample") is None
