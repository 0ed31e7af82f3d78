"""
DDL for the five entity tables of the SQLite record store.

Every statement is ``CREATE ... IF NOT EXISTS``, so ``apply_schema()`` can run
against a fresh file or one that already holds data.

Foreign keys:
  goals.client_id, interactions.client_id      → clients   (ON DELETE CASCADE)
  interactions.resource_id                     → resources (ON DELETE CASCADE)
  recommendations.client_id / resource_id      → clients / resources (CASCADE)
  recommendations.goal_id                      → goals     (ON DELETE SET NULL)

Nothing references ``recommendations``, so deleting one never touches other rows.

Column names match ``store.base.ENTITY_FIELDS``. Booleans are INTEGER 0/1
(``accepted`` is NULL while pending) and ``goals.milestones`` is JSON TEXT.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_CLIENTS = """
CREATE TABLE IF NOT EXISTS clients (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT    NOT NULL,
    email           TEXT,
    avatar          TEXT,
    join_date       TEXT,
    progress        INTEGER NOT NULL DEFAULT 0,
    status          TEXT,
    practitioner    TEXT,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_RESOURCES = """
CREATE TABLE IF NOT EXISTS resources (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT    NOT NULL,
    category        TEXT    NOT NULL,
    type            TEXT    NOT NULL
                            CHECK (type IN ('video', 'article', 'audio', 'worksheet')),
    difficulty      TEXT    CHECK (difficulty IN ('Beginner', 'Intermediate', 'Advanced')),
    description     TEXT,
    content         TEXT,
    media_url       TEXT,
    duration        TEXT,
    read_time       TEXT,
    downloadable    INTEGER NOT NULL DEFAULT 0,
    created_by      TEXT,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
CREATE INDEX IF NOT EXISTS idx_resources_category ON resources (category);
"""

_DDL_GOALS = """
CREATE TABLE IF NOT EXISTS goals (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    client_id       INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    title           TEXT    NOT NULL,
    description     TEXT,
    category        TEXT    NOT NULL,
    status          TEXT,
    progress        INTEGER NOT NULL DEFAULT 0 CHECK (progress BETWEEN 0 AND 100),
    target_date     TEXT,
    milestones      TEXT,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
CREATE INDEX IF NOT EXISTS idx_goals_client ON goals (client_id);
"""

_DDL_INTERACTIONS = """
CREATE TABLE IF NOT EXISTS interactions (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    client_id       INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    resource_id     INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    type            TEXT    NOT NULL DEFAULT 'view',
    timestamp       TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_interactions_client_time
    ON interactions (client_id, timestamp);
CREATE INDEX IF NOT EXISTS idx_interactions_resource ON interactions (resource_id);
"""

_DDL_RECOMMENDATIONS = """
CREATE TABLE IF NOT EXISTS recommendations (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    client_id           INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    resource_id         INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    goal_id             INTEGER REFERENCES goals(id) ON DELETE SET NULL,
    score               INTEGER NOT NULL,
    recommendation_date TEXT    NOT NULL,
    accepted            INTEGER CHECK (accepted IN (0, 1))
);
CREATE INDEX IF NOT EXISTS idx_recommendations_client_date
    ON recommendations (client_id, recommendation_date);
CREATE INDEX IF NOT EXISTS idx_recommendations_pending_score
    ON recommendations (accepted, score);
"""

# Creation order; each table only references tables listed before it.
_TABLE_DDL: dict[str, str] = {
    "clients": _DDL_CLIENTS,
    "resources": _DDL_RESOURCES,
    "goals": _DDL_GOALS,
    "interactions": _DDL_INTERACTIONS,
    "recommendations": _DDL_RECOMMENDATIONS,
}

ALL_TABLE_NAMES: list[str] = list(_TABLE_DDL)


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create any missing tables and indexes, then commit.

    Expects a connection from ``open_connection()`` (foreign keys ON).
    """
    for table, ddl in _TABLE_DDL.items():
        logger.debug("Ensuring table %s", table)
        conn.executescript(ddl)
    conn.commit()
    logger.info("Schema ready: %d tables.", len(ALL_TABLE_NAMES))


def _master_names(conn: sqlite3.Connection, object_type: str) -> list[str]:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = ? ORDER BY name;", (object_type,)
    )
    return [name for (name,) in cursor]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    return _master_names(conn, "table")


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    return _master_names(conn, "index")
