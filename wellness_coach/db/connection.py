"""
SQLite connections for the record store and the CLI.

``open_connection()`` returns a long-lived connection that ``SqliteRecordStore``
owns until ``close()``. ``get_connection()`` wraps it for one-shot CLI work:
commit when the block exits cleanly, roll back when it raises, close either way.

Each connection turns on foreign keys, applies the busy timeout, switches file
databases to WAL when asked, and returns ``sqlite3.Row`` rows.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

_IN_MEMORY = ":memory:"


def open_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    check_same_thread: bool = True,
) -> sqlite3.Connection:
    """Connect to ``db_path``, creating its parent directory if needed.

    ``check_same_thread=False`` is for connections handed to worker threads
    under a lock, as ``SqliteRecordStore`` does.
    """
    file_backed = db_path != _IN_MEMORY
    if file_backed:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        db_path, timeout=busy_timeout_ms / 1000, check_same_thread=check_same_thread
    )
    conn.row_factory = sqlite3.Row

    pragmas = [("foreign_keys", "ON"), ("busy_timeout", str(int(busy_timeout_ms)))]
    if wal_mode and file_backed:
        pragmas.append(("journal_mode", "WAL"))
    for name, value in pragmas:
        conn.execute(f"PRAGMA {name} = {value};")

    logger.debug("SQLite connection open: %s (wal=%s)", db_path, wal_mode and file_backed)
    return conn


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Iterator[sqlite3.Connection]:
    """Yield an ``open_connection()`` result inside a single transaction."""
    conn = open_connection(db_path, wal_mode=wal_mode, busy_timeout_ms=busy_timeout_ms)
    try:
        with conn:
            yield conn
    finally:
        conn.close()
