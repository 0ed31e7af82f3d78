"""
In-memory record store — static mock data and tests.

Records live in a dict per kind keyed by id; ids auto-increment per kind.
Every record is deep-copied on the way in and out so callers can never mutate
stored state by accident. Referential checks and delete cascades mirror the
SQLite schema so both local backends behave the same.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from wellness_coach.errors import NotFoundError, ValidationError
from wellness_coach.store.base import (
    CASCADES,
    ENTITY_KINDS,
    REFERENCES,
    ListQuery,
    RecordStore,
    check_kind,
    check_payload,
    check_query,
)

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Dict-backed ``RecordStore``."""

    def __init__(self, records: dict[str, Iterable[dict[str, Any]]] | None = None) -> None:
        self._tables: dict[str, dict[int, dict[str, Any]]] = {k: {} for k in ENTITY_KINDS}
        self._next_id: dict[str, int] = {k: 1 for k in ENTITY_KINDS}
        self._failures: list[_InjectedFailure] = []
        if records:
            self.seed(records)

    # ── Seeding / test hooks ──────────────────────────────────────────────────

    def seed(self, records: dict[str, Iterable[dict[str, Any]]]) -> None:
        """Load records synchronously, keeping any ``id`` they carry.

        Records without an ``id`` get the next auto-increment value. Kinds
        are loaded parents-first so references resolve.
        """
        for kind in ("client", "resource", "goal", "interaction", "recommendation"):
            for raw in records.get(kind, []):
                data = dict(raw)
                record_id = data.pop("id", None)
                check_payload(kind, data)
                self._check_references(kind, data)
                if record_id is None:
                    record_id = self._next_id[kind]
                row = {field: None for field in check_kind(kind)}
                row.update(copy.deepcopy(data))
                self._tables[kind][int(record_id)] = {"id": int(record_id), **row}
                self._next_id[kind] = max(self._next_id[kind], int(record_id) + 1)

    def inject_failure(
        self,
        operation: str,
        kind: str,
        error: Exception,
        record_id: int | None = None,
        when: Callable[[dict[str, Any]], bool] | None = None,
    ) -> None:
        """Make matching ``operation`` calls on ``kind`` raise ``error``.

        ``record_id=None`` matches any id. ``when`` is an optional predicate on
        the create/update payload. Used by tests to simulate the backend
        rejecting a single write.
        """
        self._failures.append(_InjectedFailure(operation, kind, record_id, when, error))

    def _maybe_fail(
        self,
        operation: str,
        kind: str,
        record_id: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        for failure in self._failures:
            if failure.operation != operation or failure.kind != kind:
                continue
            if failure.record_id is not None and failure.record_id != record_id:
                continue
            if failure.when is not None and not failure.when(payload or {}):
                continue
            raise failure.error

    # ── RecordStore ───────────────────────────────────────────────────────────

    async def list(self, kind: str, query: ListQuery | None = None) -> list[dict[str, Any]]:
        check_kind(kind)
        check_query(kind, query)
        self._maybe_fail("list", kind)
        rows = [r for r in self._tables[kind].values() if query is None or query.matches(r)]
        if query is not None and query.order_by:
            rows = sort_records(rows, query.order_by, query.descending)
        return copy.deepcopy(rows)

    async def get(self, kind: str, record_id: int) -> dict[str, Any]:
        check_kind(kind)
        self._maybe_fail("get", kind, record_id)
        row = self._tables[kind].get(record_id)
        if row is None:
            raise NotFoundError(kind, record_id)
        return copy.deepcopy(row)

    async def create(self, kind: str, data: dict[str, Any]) -> dict[str, Any]:
        payload = check_payload(kind, data)
        self._check_references(kind, payload)
        self._maybe_fail("create", kind, payload=payload)
        record_id = self._next_id[kind]
        self._next_id[kind] += 1
        row = {"id": record_id, **copy.deepcopy(payload)}
        for field in check_kind(kind):
            row.setdefault(field, None)
        self._tables[kind][record_id] = row
        logger.debug("Created %s id=%d", kind, record_id)
        return copy.deepcopy(row)

    async def update(self, kind: str, record_id: int, patch: dict[str, Any]) -> dict[str, Any]:
        changes = check_payload(kind, patch, partial=True)
        row = self._tables[kind].get(record_id)
        if row is None:
            raise NotFoundError(kind, record_id)
        self._check_references(kind, changes)
        self._maybe_fail("update", kind, record_id, payload=changes)
        row.update(copy.deepcopy(changes))
        logger.debug("Updated %s id=%d fields=%s", kind, record_id, sorted(changes))
        return copy.deepcopy(row)

    async def delete(self, kind: str, record_id: int) -> bool:
        check_kind(kind)
        if record_id not in self._tables[kind]:
            raise NotFoundError(kind, record_id)
        self._maybe_fail("delete", kind, record_id)
        del self._tables[kind][record_id]
        self._cascade(kind, record_id)
        logger.debug("Deleted %s id=%d", kind, record_id)
        return True

    # ── Internals ─────────────────────────────────────────────────────────────

    def _check_references(self, kind: str, data: dict[str, Any]) -> None:
        for field, target in REFERENCES.get(kind, {}).items():
            value = data.get(field)
            if value is not None and value not in self._tables[target]:
                raise ValidationError(
                    f"{kind}.{field} references missing {target} id {value}."
                )

    def _cascade(self, kind: str, record_id: int) -> None:
        for child_kind, field, action in CASCADES.get(kind, []):
            children = [r for r in self._tables[child_kind].values() if r.get(field) == record_id]
            for child in children:
                if action == "delete":
                    del self._tables[child_kind][child["id"]]
                    self._cascade(child_kind, child["id"])
                else:
                    child[field] = None


def sort_records(
    rows: list[dict[str, Any]], order_by: str, descending: bool = False
) -> list[dict[str, Any]]:
    """Stable sort on one field; records whose value is ``None`` always go last."""
    present = [r for r in rows if r.get(order_by) is not None]
    missing = [r for r in rows if r.get(order_by) is None]
    present.sort(key=lambda r: r[order_by], reverse=descending)
    return present + missing


@dataclass(frozen=True)
class _InjectedFailure:
    operation: str
    kind: str
    record_id: int | None
    when: Callable[[dict[str, Any]], bool] | None
    error: Exception
