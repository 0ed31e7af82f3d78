"""
SQLite-backed record store.

The store owns one connection for its lifetime. Blocking sqlite3 calls run in
a worker thread via ``asyncio.to_thread`` so the event loop is never blocked,
and an ``asyncio.Lock`` serializes them so the single connection is only ever
used by one thread at a time. Each write commits immediately: there are no
multi-record transactions.

``sqlite3.IntegrityError`` (missing FK target, CHECK violation, NOT NULL)
surfaces as ``ValidationError``; any other ``sqlite3.Error`` as
``UpstreamError``.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, Callable, TypeVar

from wellness_coach.db.connection import open_connection
from wellness_coach.db.repositories.record_repo import RecordRepository
from wellness_coach.db.schema import apply_schema
from wellness_coach.errors import NotFoundError, UpstreamError, ValidationError
from wellness_coach.store.base import (
    ListQuery,
    RecordStore,
    check_kind,
    check_payload,
    check_query,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqliteRecordStore(RecordStore):
    """``RecordStore`` over a local SQLite file.

    Args:
        db_path: Database file path, or ``":memory:"``.
        wal_mode: Enable WAL journal mode (file databases only).
        busy_timeout_ms: Lock wait before ``OperationalError``.
        apply_ddl: Apply the schema on open (idempotent).
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        apply_ddl: bool = True,
    ) -> None:
        self.db_path = db_path
        self._conn = open_connection(
            db_path,
            wal_mode=wal_mode,
            busy_timeout_ms=busy_timeout_ms,
            check_same_thread=False,
        )
        if apply_ddl:
            apply_schema(self._conn)
        self._lock = asyncio.Lock()

    async def _run(self, fn: Callable[[], T]) -> T:
        async with self._lock:
            try:
                return await asyncio.to_thread(fn)
            except sqlite3.IntegrityError as exc:
                self._conn.rollback()
                raise ValidationError(str(exc)) from exc
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise UpstreamError(f"SQLite error: {exc}") from exc

    def _repo(self, kind: str) -> RecordRepository:
        check_kind(kind)
        return RecordRepository(self._conn, kind)

    # ── RecordStore ───────────────────────────────────────────────────────────

    async def list(self, kind: str, query: ListQuery | None = None) -> list[dict[str, Any]]:
        repo = self._repo(kind)
        check_query(kind, query)
        return await self._run(lambda: repo.select(query))

    async def get(self, kind: str, record_id: int) -> dict[str, Any]:
        repo = self._repo(kind)
        row = await self._run(lambda: repo.get_by_id(record_id))
        if row is None:
            raise NotFoundError(kind, record_id)
        return row

    async def create(self, kind: str, data: dict[str, Any]) -> dict[str, Any]:
        payload = check_payload(kind, data)
        repo = self._repo(kind)

        def _insert() -> dict[str, Any] | None:
            new_id = repo.insert(payload)
            repo.commit()
            return repo.get_by_id(new_id)

        row = await self._run(_insert)
        if row is None:
            raise UpstreamError(f"Inserted {kind} could not be read back.")
        logger.debug("Created %s id=%d", kind, row["id"])
        return row

    async def update(self, kind: str, record_id: int, patch: dict[str, Any]) -> dict[str, Any]:
        changes = check_payload(kind, patch, partial=True)
        repo = self._repo(kind)

        def _update() -> dict[str, Any] | None:
            if not repo.update_fields(record_id, changes):
                return None
            repo.commit()
            return repo.get_by_id(record_id)

        row = await self._run(_update)
        if row is None:
            raise NotFoundError(kind, record_id)
        return row

    async def delete(self, kind: str, record_id: int) -> bool:
        repo = self._repo(kind)

        def _delete() -> bool:
            deleted = repo.delete_by_id(record_id)
            repo.commit()
            return deleted

        if not await self._run(_delete):
            raise NotFoundError(kind, record_id)
        return True

    async def close(self) -> None:
        async with self._lock:
            self._conn.close()
