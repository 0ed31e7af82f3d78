"""
Generic table repository behind ``SqliteRecordStore``.

One ``RecordRepository`` serves every entity kind: table and column names
come from ``store.base.ENTITY_FIELDS`` (a fixed whitelist), so identifiers
interpolated into SQL are never caller-controlled. Values always travel as
bound parameters.

Value encoding (dict ↔ row):
  - ``downloadable`` / ``accepted``: Python bool ↔ INTEGER 0/1 (NULL kept).
  - ``milestones``: list[str] ↔ JSON TEXT.
  - Everything else is stored as-is (dates are already ISO strings).
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Optional

from wellness_coach.store.base import ENTITY_FIELDS, ListQuery

logger = logging.getLogger(__name__)

KIND_TABLES: dict[str, str] = {
    "client": "clients",
    "resource": "resources",
    "goal": "goals",
    "interaction": "interactions",
    "recommendation": "recommendations",
}

_BOOL_COLUMNS = frozenset({"downloadable", "accepted"})
_JSON_COLUMNS = frozenset({"milestones"})


class RecordRepository:
    """Read/write access to one entity table.

    Args:
        conn: Open connection with the schema applied.
        kind: Entity kind (key of ``KIND_TABLES``).
    """

    def __init__(self, conn: sqlite3.Connection, kind: str) -> None:
        self.conn = conn
        self.kind = kind
        self.table = KIND_TABLES[kind]
        self.columns = ["id", *ENTITY_FIELDS[kind]]

    def insert(self, data: dict[str, Any]) -> int:
        """Insert a row and return its new ``id``.

        ``None`` values are omitted so column defaults apply.
        """
        values = {k: v for k, v in _encode(data).items() if v is not None}
        if values:
            names = ", ".join(values)
            marks = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {self.table} ({names}) VALUES ({marks});"
        else:
            sql = f"INSERT INTO {self.table} DEFAULT VALUES;"
        cursor = self.execute(sql, tuple(values.values()))
        return int(cursor.lastrowid)

    def get_by_id(self, record_id: int) -> Optional[dict[str, Any]]:
        row = self.fetchone(
            f"SELECT {', '.join(self.columns)} FROM {self.table} WHERE id = ?;",
            (record_id,),
        )
        return _decode(row) if row else None

    def select(self, query: ListQuery | None = None) -> list[dict[str, Any]]:
        """Return rows matching ``query``; unordered queries follow ``id``."""
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}"
        params: tuple[Any, ...] = ()
        if query is not None and query.field is not None:
            if query.is_null:
                sql += f" WHERE {query.field} IS NULL"
            else:
                sql += f" WHERE {query.field} = ?"
                params = (_encode_value(query.field, query.value),)
        if query is not None and query.order_by:
            direction = "DESC" if query.descending else "ASC"
            # NULLs last in both directions; id keeps ties in insertion order.
            sql += (
                f" ORDER BY ({query.order_by} IS NULL), {query.order_by} {direction}, id ASC"
            )
        else:
            sql += " ORDER BY id ASC"
        return [_decode(r) for r in self.fetchall(sql + ";", params)]

    def update_fields(self, record_id: int, changes: dict[str, Any]) -> bool:
        """Update the given columns. Returns ``False`` if no row matched."""
        if not changes:
            return self.get_by_id(record_id) is not None
        encoded = _encode(changes)
        assignments = ", ".join(f"{name} = ?" for name in encoded)
        cursor = self.execute(
            f"UPDATE {self.table} SET {assignments} WHERE id = ?;",
            (*encoded.values(), record_id),
        )
        return cursor.rowcount > 0

    def delete_by_id(self, record_id: int) -> bool:
        """Delete one row. Returns ``False`` if no row matched."""
        cursor = self.execute(f"DELETE FROM {self.table} WHERE id = ?;", (record_id,))
        return cursor.rowcount > 0

    def count(self) -> int:
        (n,) = self.execute(f"SELECT COUNT(*) FROM {self.table};").fetchone()
        return int(n)

    def commit(self) -> None:
        self.conn.commit()

    # ── SQL execution ──────────────────────────────────────────────────────────

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        logger.debug("%s %s", self.table, sql, extra={"params": params})
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()


# ── Private helpers ────────────────────────────────────────────────────────────

def _encode_value(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in _BOOL_COLUMNS:
        return int(bool(value))
    if column in _JSON_COLUMNS:
        return json.dumps(list(value))
    return value


def _encode(data: dict[str, Any]) -> dict[str, Any]:
    return {k: _encode_value(k, v) for k, v in data.items()}


def _decode(row: sqlite3.Row) -> dict[str, Any]:
    record = dict(row)
    for column in _BOOL_COLUMNS & record.keys():
        if record[column] is not None:
            record[column] = bool(record[column])
    for column in _JSON_COLUMNS & record.keys():
        record[column] = json.loads(record[column]) if record[column] else []
    return record
