"""Unit tests for the in-memory record store."""

import pytest

from uiruntime.core.exceptions import InvalidSeedDataError, TableNotFoundError
from uiruntime.services.record_store import RecordStore


@pytest.fixture
def store():
    return RecordStore(
        {
            "tasks": [
                {"id": "1", "title": "Write docs", "priority": 2, "owner": "ada"},
                {"id": "2", "title": "Fix bug", "priority": 5, "owner": "bob"},
                {"id": "3", "title": "Review", "priority": 1, "owner": None},
            ]
        }
    )


class TestSeeding:
    """Test construction from a snapshot"""

    def test_seed_is_copied(self):
        seed = {"tasks": [{"id": "1", "title": "A"}]}
        store = RecordStore(seed)
        seed["tasks"][0]["title"] = "changed"
        assert store.get("tasks", "1")["title"] == "A"

    def test_missing_ids_are_generated(self):
        store = RecordStore({"tasks": [{"title": "A"}, {"title": "B"}]})
        ids = [row["id"] for row in store.rows("tasks")]
        assert all(ids)
        assert len(set(ids)) == 2

    def test_duplicate_ids_are_reassigned(self, caplog):
        with caplog.at_level("WARNING"):
            store = RecordStore({"tasks": [{"id": "1"}, {"id": "1"}]})
        ids = [row["id"] for row in store.rows("tasks")]
        assert ids[0] == "1"
        assert ids[1] != "1"
        assert "Duplicate id" in caplog.text

    @pytest.mark.parametrize("seed", [{"users": 5}, {"users": "abc"}, {"users": [5]}])
    def test_malformed_seed(self, seed):
        with pytest.raises(InvalidSeedDataError) as exc_info:
            RecordStore(seed)
        assert exc_info.value.table == "users"

    def test_null_table_is_empty(self):
        assert RecordStore({"users": None}).rows("users") == []

    def test_ensure_tables(self, store):
        assert store.ensure_tables(["tasks", "notes"]) == ["notes"]
        assert store.has_table("notes")
        assert store.rows("notes") == []


class TestWrites:
    """Test insert and delete"""

    def test_insert_generates_id(self, store):
        created = store.insert("tasks", {"title": "New", "id": "1"})
        assert created["id"] != "1"
        assert store.get("tasks", created["id"])["title"] == "New"
        assert len(store.rows("tasks")) == 4

    def test_insert_unknown_table(self, store):
        with pytest.raises(TableNotFoundError):
            store.insert("notes", {"title": "x"})

    def test_delete(self, store):
        assert store.delete("tasks", "2") is True
        assert [row["id"] for row in store.rows("tasks")] == ["1", "3"]

    def test_delete_absent_id_is_noop(self, store):
        before = store.snapshot()
        assert store.delete("tasks", "99") is False
        assert store.delete("tasks", "99") is False
        assert store.snapshot() == before

    def test_delete_compares_ids_as_text(self):
        store = RecordStore({"tasks": [{"id": 7, "title": "A"}]})
        assert store.delete("tasks", "7") is True
        assert store.rows("tasks") == []

    def test_snapshot_is_detached(self, store):
        snapshot = store.snapshot()
        snapshot["tasks"].clear()
        assert len(store.rows("tasks")) == 3


class TestQuery:
    """Test filtered and ordered queries"""

    def test_simple_equality(self, store):
        assert [row["id"] for row in store.query("tasks", {"owner": "ada"})] == ["1"]

    def test_comparison_operators(self, store):
        rows = store.query("tasks", {"priority": {"gte": 2, "lt": 5}})
        assert [row["id"] for row in rows] == ["1"]

    def test_contains_is_case_insensitive(self, store):
        assert [row["id"] for row in store.query("tasks", {"title": {"contains": "BUG"}})] == ["2"]

    def test_in_and_ne(self, store):
        rows = store.query("tasks", {"owner": {"in": ["ada", "bob"], "ne": "bob"}})
        assert [row["id"] for row in rows] == ["1"]

    def test_is_null(self, store):
        assert [row["id"] for row in store.query("tasks", {"owner": {"is_null": True}})] == ["3"]

    def test_order_and_limit(self, store):
        rows = store.query("tasks", order_by="-priority", limit=2)
        assert [row["id"] for row in rows] == ["2", "1"]
        assert [row["id"] for row in store.query("tasks", order_by="priority")] == ["3", "1", "2"]

    def test_unknown_table_is_empty(self, store):
        assert store.query("notes") == []

    def test_unknown_operator_is_ignored(self, store, caplog):
        with caplog.at_level("WARNING"):
            rows = store.query("tasks", {"priority": {"between": [1, 3]}})
        assert len(rows) == 3
        assert "Unknown filter operator" in caplog.text

    def test_find_first(self, store):
        row = store.find_first("tasks", lambda r: r["priority"] > 1)
        assert row["id"] == "1"
        assert store.find_first("tasks", lambda r: False) is None
