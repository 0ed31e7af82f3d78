"""
Shared pytest fixtures for the Wellness Coach test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``memory_store`` / ``sqlite_store``: empty record stores (one per test).
  - ``practice_store``: an ``InMemoryRecordStore`` holding a small practice
    (two clients, four resources, goals and interactions).
  - Sample domain object factories for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Generator

import pytest

from wellness_coach.db.schema import apply_schema
from wellness_coach.models.client import Client
from wellness_coach.models.goal import Goal
from wellness_coach.models.interaction import Interaction
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.store.memory import InMemoryRecordStore
from wellness_coach.store.sqlite import SqliteRecordStore
from wellness_coach.taxonomy.content_taxonomy import (
    Difficulty,
    GoalStatus,
    InteractionType,
    ResourceType,
)

FIXED_NOW = datetime(2024, 6, 10, 12, 0, 0, tzinfo=timezone.utc)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


# ── Store fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
async def sqlite_store() -> AsyncGenerator[SqliteRecordStore, None]:
    store = SqliteRecordStore(":memory:")
    yield store
    await store.close()


PRACTICE_RECORDS: dict[str, list[dict]] = {
    "client": [
        {"id": 1, "name": "Sarah Mitchell", "progress": 60, "status": "active"},
        {"id": 2, "name": "James Okafor", "progress": 10, "status": "active"},
    ],
    "resource": [
        # Stress / Beginner / article: matches Sarah's Stress goal at 20%.
        {"id": 1, "title": "Understanding Stress", "category": "Stress",
         "type": "article", "difficulty": "Beginner"},
        # Sleep / Advanced / video: matches Sarah's Sleep goal at 80%.
        {"id": 2, "title": "Sleep Restriction", "category": "Sleep",
         "type": "video", "difficulty": "Advanced"},
        # Unrelated worksheet with no difficulty: scores 15 for a new client.
        {"id": 3, "title": "Meal Planner", "category": "Nutrition",
         "type": "worksheet", "difficulty": None},
        # Stress / Intermediate / audio.
        {"id": 4, "title": "Reframing Pressure", "category": "Stress",
         "type": "audio", "difficulty": "Intermediate"},
    ],
    "goal": [
        {"id": 1, "client_id": 1, "title": "Reduce stress", "category": "Stress",
         "status": "in-progress", "progress": 20},
        {"id": 2, "client_id": 1, "title": "Sleep better", "category": "Sleep",
         "status": "in-progress", "progress": 80},
        {"id": 3, "client_id": 2, "title": "Eat breakfast", "category": "Nutrition",
         "status": "completed", "progress": 100},
    ],
    "interaction": [
        {"id": 1, "client_id": 1, "resource_id": 2, "type": "view",
         "timestamp": "2024-06-01T08:00:00Z"},
        {"id": 2, "client_id": 1, "resource_id": 2, "type": "complete",
         "timestamp": "2024-06-02T08:00:00Z"},
        {"id": 3, "client_id": 2, "resource_id": 1, "type": "view",
         "timestamp": "2024-06-03T08:00:00Z"},
    ],
}


@pytest.fixture
def practice_store() -> InMemoryRecordStore:
    """In-memory store holding ``PRACTICE_RECORDS``.

    Expected scores for client 1 (Sarah):
      resource 1: 10 + 25 + 15 + 5 + 2  = 57
      resource 2: 10 + 25 + 15 − 4 + 3  = 49
      resource 3: 10 + 5                = 15  (not above threshold)
      resource 4: 10 + 25 + 5           = 40
    Expected scores for client 2 (James, only a completed goal):
      resource 1: 10 − 2 + 2 = 10; resource 2: 10 + 5 + 3 = 18;
      resource 3: 15; resource 4: 15
    """
    return InMemoryRecordStore(PRACTICE_RECORDS)


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def sample_client() -> Client:
    """A valid ``Client`` for testing."""
    return Client(
        name="Sarah Mitchell",
        email="sarah.mitchell@example.com",
        join_date=date(2024, 1, 15),
        progress=65,
        status="active",
        practitioner="Dr. Emily Carter",
    )


@pytest.fixture
def sample_goal() -> Goal:
    """A valid in-progress ``Goal`` (Stress, 20%)."""
    return Goal(
        id=1,
        client_id=1,
        title="Reduce work-related stress",
        category="Stress",
        status=GoalStatus.IN_PROGRESS,
        progress=20,
        milestones=["Identify stressors", "Daily breathing"],
    )


@pytest.fixture
def sample_resource() -> Resource:
    """A valid ``Resource`` (Stress / Beginner / article)."""
    return Resource(
        id=1,
        title="Understanding Your Stress Response",
        category="Stress",
        type=ResourceType.ARTICLE,
        difficulty=Difficulty.BEGINNER,
        read_time="6 min",
    )


@pytest.fixture
def sample_interaction() -> Interaction:
    """A valid ``Interaction`` on resource 1."""
    return Interaction(
        id=1,
        client_id=1,
        resource_id=1,
        type=InteractionType.VIEW,
        timestamp=datetime(2024, 6, 1, 8, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_recommendation() -> Recommendation:
    """A pending, unsaved ``Recommendation``."""
    return Recommendation(
        client_id=1,
        resource_id=1,
        goal_id=1,
        score=57,
        recommendation_date=FIXED_NOW,
    )
