"""
Record Store

In-memory stand-in for the app's database: table name -> ordered list of
records. Seeded from a snapshot supplied by the host and mutated in place;
writing it back to durable storage is the host's job (see ``snapshot``).

Every record carries an ``id`` that is unique within its table.
"""

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from uuid import uuid4

from uiruntime.core.exceptions import InvalidSeedDataError, TableNotFoundError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class RecordStore:
    """
    Simulated relational store.

    Provides:
    - Insert with generated ids
    - Idempotent delete by id
    - Filtered/ordered queries for list data sources
    - Deep-copied snapshots for persistence and read-only access
    """

    def __init__(self, snapshot: Mapping[str, Iterable[Mapping[str, Any]]] | None = None):
        """
        Seed the store from a table -> records snapshot.

        Raises:
            InvalidSeedDataError: If a table is not a list of objects
        """
        self._tables: dict[str, list[Record]] = {}
        for table, records in (snapshot or {}).items():
            if records is None:
                records = []
            if not isinstance(records, (list, tuple)):
                raise InvalidSeedDataError(table, "must be a list of records")
            self._tables[table] = []
            for record in records:
                if not isinstance(record, Mapping):
                    raise InvalidSeedDataError(table, "must only contain objects")
                self._append_seed(table, record)

    def _append_seed(self, table: str, record: Mapping[str, Any]) -> None:
        row = copy.deepcopy(dict(record))
        record_id = row.get("id")
        if record_id is None or self._id_exists(table, record_id):
            if record_id is not None:
                logger.warning(f"Duplicate id '{record_id}' in seed data for table '{table}'; reassigning")
            row["id"] = self.generate_id(table)
        self._tables[table].append(row)

    # =========================================================================
    # Tables
    # =========================================================================

    def tables(self) -> list[str]:
        return list(self._tables)

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def ensure_tables(self, tables: Iterable[str]) -> list[str]:
        """
        Create empty tables for any names not present yet.

        Returns:
            Names of the tables that were created
        """
        created = []
        for table in tables:
            if table not in self._tables:
                self._tables[table] = []
                created.append(table)
        if created:
            logger.debug(f"Created tables from schema: {created}")
        return created

    # =========================================================================
    # Reads
    # =========================================================================

    def rows(self, table: str) -> list[Record]:
        """Copies of all records in a table (empty for unknown tables)."""
        return [copy.deepcopy(row) for row in self._tables.get(table, [])]

    def get(self, table: str, record_id: Any) -> Record | None:
        for row in self._tables.get(table, []):
            if _same_id(row.get("id"), record_id):
                return copy.deepcopy(row)
        return None

    def find_first(self, table: str, predicate: Callable[[Record], bool]) -> Record | None:
        """First record matching ``predicate``, as a copy."""
        for row in self._tables.get(table, []):
            if predicate(row):
                return copy.deepcopy(row)
        return None

    def query(
        self,
        table: str,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """
        Query records with JSON-native operators.

        Supports:
        - Simple equality: {"status": "active"}
        - Comparison operators: {"amount": {"gt": 100, "lte": 1000}}
        - Contains: {"name": {"contains": "acme"}} (case-insensitive substring)
        - Starts/ends with: {"name": {"starts_with": "a"}}
        - IN lists: {"category": {"in": ["a", "b"]}}
        - NULL checks: {"deleted_at": {"is_null": true}}
        - Has key: {"field": {"has_key": true}}

        ``order_by`` names a field; prefix with "-" for descending order.
        """
        rows = [row for row in self._tables.get(table, []) if _matches(row, where or {})]

        if order_by:
            descending = order_by.startswith("-")
            field = order_by.lstrip("-").strip()
            rows = sorted(rows, key=lambda row: _sort_key(row.get(field)), reverse=descending)

        if limit is not None:
            rows = rows[:limit]

        return [copy.deepcopy(row) for row in rows]

    def snapshot(self) -> dict[str, list[Record]]:
        """Deep copy of every table, safe to hand to the host."""
        return copy.deepcopy(self._tables)

    # =========================================================================
    # Writes
    # =========================================================================

    def generate_id(self, table: str) -> str:
        """Generate an id not yet used in ``table``."""
        while True:
            record_id = uuid4().hex
            if not self._id_exists(table, record_id):
                return record_id

    def insert(self, table: str, record: Mapping[str, Any]) -> Record:
        """
        Append a record with a freshly generated id.

        A caller-supplied ``id`` is replaced so ids stay unique.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        if table not in self._tables:
            raise TableNotFoundError(table)

        row = copy.deepcopy(dict(record))
        row["id"] = self.generate_id(table)
        self._tables[table].append(row)
        logger.debug(f"Inserted record {row['id']} into '{table}'")
        return copy.deepcopy(row)

    def delete(self, table: str, record_id: Any) -> bool:
        """
        Remove the record with ``record_id``.

        Returns:
            True if a record was removed, False if none matched (no-op)
        """
        rows = self._tables.get(table)
        if rows is None:
            return False
        remaining = [row for row in rows if not _same_id(row.get("id"), record_id)]
        removed = len(remaining) != len(rows)
        self._tables[table] = remaining
        if removed:
            logger.debug(f"Deleted record {record_id} from '{table}'")
        return removed

    def _id_exists(self, table: str, record_id: Any) -> bool:
        return any(_same_id(row.get("id"), record_id) for row in self._tables.get(table, []))


# =============================================================================
# Helpers
# =============================================================================


def _same_id(left: Any, right: Any) -> bool:
    """Ids compare as text: templated ids arrive as strings."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _sort_key(value: Any) -> tuple:
    if value is None:
        return (2, "")
    if _is_number(value):
        return (0, value)
    return (1, str(value))


def _compare(left: Any, right: Any) -> int:
    """Numeric comparison when both sides are numbers, text otherwise."""
    if _is_number(left) and _is_number(right):
        a, b = left, right
    else:
        a, b = str(left), str(right)
    return (a > b) - (a < b)


def _matches(row: Record, where: Mapping[str, Any]) -> bool:
    for field, value in where.items():
        present = field in row
        field_value = row.get(field)

        if not isinstance(value, Mapping):
            # Simple equality
            if not present or str(field_value) != str(value):
                return False
            continue

        # Operator-based filter
        for op, op_value in value.items():
            if op == "is_null":
                if (field_value is None) != bool(op_value):
                    return False
            elif op == "has_key":
                if present != bool(op_value):
                    return False
            elif field_value is None:
                return False
            elif op == "eq":
                if str(field_value) != str(op_value):
                    return False
            elif op == "ne":
                if str(field_value) == str(op_value):
                    return False
            elif op == "contains":
                if str(op_value).lower() not in str(field_value).lower():
                    return False
            elif op == "starts_with":
                if not str(field_value).lower().startswith(str(op_value).lower()):
                    return False
            elif op == "ends_with":
                if not str(field_value).lower().endswith(str(op_value).lower()):
                    return False
            elif op == "gt":
                if _compare(field_value, op_value) <= 0:
                    return False
            elif op == "gte":
                if _compare(field_value, op_value) < 0:
                    return False
            elif op == "lt":
                if _compare(field_value, op_value) >= 0:
                    return False
            elif op == "lte":
                if _compare(field_value, op_value) > 0:
                    return False
            elif op in ("in", "in_"):
                if not isinstance(op_value, list) or str(field_value) not in [str(v) for v in op_value]:
                    return False
            else:
                logger.warning(f"Unknown filter operator '{op}' on field '{field}'; ignoring")
    return True
