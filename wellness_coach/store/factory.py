"""
Backend selection from configuration.

``build_store(config)`` is the only place that maps ``[store] backend`` to a
concrete ``RecordStore``; the CLI and any embedding application call it once
and pass the store to the components that need it.
"""

from __future__ import annotations

import logging

from wellness_coach.config import AppConfig
from wellness_coach.store.base import RecordStore
from wellness_coach.store.memory import InMemoryRecordStore
from wellness_coach.store.remote import RemoteRecordStore
from wellness_coach.store.sqlite import SqliteRecordStore

logger = logging.getLogger(__name__)


def build_store(config: AppConfig, db_path: str | None = None) -> RecordStore:
    """Construct the record store selected by ``config.store.backend``.

    Args:
        config: Application configuration.
        db_path: Override for ``config.database.db_path`` (sqlite backend only).

    Returns:
        A ready-to-use ``RecordStore``. The caller owns it and must ``close()`` it.
    """
    backend = config.store.backend
    if backend == "memory":
        logger.info("Using in-memory record store (data is not persisted).")
        return InMemoryRecordStore()
    if backend == "remote":
        if not config.store.project_id or not config.store.public_key:
            logger.warning(
                "Remote store selected without project_id/public_key; "
                "requests will likely be rejected."
            )
        logger.info("Using remote record store at %s", config.store.api_url)
        return RemoteRecordStore(
            api_url=config.store.api_url,
            project_id=config.store.project_id,
            public_key=config.store.public_key,
            timeout_seconds=config.store.timeout_seconds,
        )
    path = db_path or config.database.db_path
    logger.info("Using SQLite record store at %s", path)
    return SqliteRecordStore(
        path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )
