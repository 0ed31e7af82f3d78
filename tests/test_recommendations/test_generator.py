"""
Tests for wellness_coach/recommendations/generator.py.

Uses the ``practice_store`` fixture (see conftest.py for expected scores).

What we test
------------
generate():
  - Client 1 → resources ranked by score: [1 (57), 2 (49), 4 (40)].
  - Resource 3 (score 15, equal to the threshold) is never recommended.
  - Records are persisted pending, with goal_id = first goal, date = clock().
  - Client with only a completed goal: goal_id is still that goal.
  - limit truncates; config threshold / max_score are honoured.
  - Unknown client → NotFoundError, nothing written.
  - A single failed write is skipped; the rest are still created.
  - Goals with a missing or unrecognised status earn no goal bonuses;
    interactions of any type count toward the repeat penalty.

preview():
  - Same ranking as generate(), nothing persisted.

generate_for_all_clients():
  - Every client processed with all_clients_limit.
  - A failure for one client is recorded and does not stop the others.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from wellness_coach.config import RecommendationConfig
from wellness_coach.errors import NotFoundError, UpstreamError
from wellness_coach.recommendations.generator import GenerationSummary, RecommendationGenerator
from wellness_coach.store.memory import InMemoryRecordStore

_NOW = datetime(2024, 6, 10, 12, 0, 0, tzinfo=timezone.utc)


def _generator(store, **config) -> RecommendationGenerator:
    return RecommendationGenerator(store, RecommendationConfig(**config), clock=lambda: _NOW)


# ── generate ──────────────────────────────────────────────────────────────────

class TestGenerate:
    async def test_ranked_and_thresholded(self, practice_store):
        created = await _generator(practice_store).generate(1)
        assert [(r.resource_id, r.score) for r in created] == [(1, 57), (2, 49), (4, 40)]

    async def test_records_persisted_pending(self, practice_store):
        created = await _generator(practice_store).generate(1)
        stored = await practice_store.list("recommendation")
        assert len(stored) == 3
        for rec in created:
            assert rec.id is not None
            assert rec.accepted is None
            assert rec.goal_id == 1
            assert rec.recommendation_date == _NOW

    async def test_goal_id_is_first_goal_even_if_not_in_progress(self, practice_store):
        created = await _generator(practice_store).generate(2)
        assert [(r.resource_id, r.score, r.goal_id) for r in created] == [(2, 18, 3)]

    async def test_client_without_goals_gets_null_goal(self, practice_store):
        await practice_store.create("client", {"name": "New Client"})
        created = await _generator(practice_store).generate(3)
        # No goals, no interactions: video 18, article 17, audio and worksheet 15.
        assert [(r.resource_id, r.score) for r in created] == [(2, 18), (1, 17)]
        assert all(r.goal_id is None for r in created)

    async def test_limit_truncates(self, practice_store):
        created = await _generator(practice_store).generate(1, limit=2)
        assert [r.resource_id for r in created] == [1, 2]

    async def test_config_threshold(self, practice_store):
        created = await _generator(practice_store, threshold=45).generate(1)
        assert [r.resource_id for r in created] == [1, 2]

    async def test_config_cap(self, practice_store):
        created = await _generator(practice_store, max_score=50).generate(1)
        assert [r.score for r in created] == [50, 49, 40]

    async def test_unknown_client_raises(self, practice_store):
        with pytest.raises(NotFoundError):
            await _generator(practice_store).generate(999)
        assert await practice_store.list("recommendation") == []

    async def test_failed_write_skipped(self, practice_store):
        practice_store.inject_failure(
            "create", "recommendation", UpstreamError("write rejected"),
            when=lambda payload: payload.get("resource_id") == 2,
        )
        created = await _generator(practice_store).generate(1)
        assert [r.resource_id for r in created] == [1, 4]
        assert len(await practice_store.list("recommendation")) == 2

    async def test_repeat_generation_adds_new_records(self, practice_store):
        gen = _generator(practice_store)
        await gen.generate(1)
        await gen.generate(1)
        assert len(await practice_store.list("recommendation")) == 6



# ── Stored goal and interaction values ────────────────────────────────────────

async def _single_client(store, goal_status: str | None, interaction_type: str) -> None:
    client = await store.create("client", {"name": "Ada"})
    stress = await store.create(
        "resource",
        {"title": "Box Breathing", "category": "Stress", "type": "article", "difficulty": "Beginner"},
    )
    await store.create(
        "resource", {"title": "Wind Down", "category": "Sleep", "type": "video"}
    )
    await store.create(
        "goal",
        {"client_id": client["id"], "title": "Calm", "category": "Stress",
         "status": goal_status, "progress": 20},
    )
    await store.create(
        "interaction",
        {"client_id": client["id"], "resource_id": stress["id"], "type": interaction_type,
         "timestamp": "2024-06-01T08:00:00Z"},
    )


class TestStoredValues:
    """Goal status and interaction type are open strings in stored records."""

    @pytest.mark.parametrize("goal_status", [None, "on-hold", "completed"])
    async def test_goal_not_in_progress_earns_no_goal_bonus_memory(self, memory_store, goal_status):
        await _single_client(memory_store, goal_status, "view")
        created = await _generator(memory_store).generate(1)
        # Stress article: 10 − 2 + 2 = 10. Sleep video: 10 + 5 + 3 = 18.
        assert [(r.resource_id, r.score) for r in created] == [(2, 18)]
        assert len(await memory_store.list("recommendation")) == 1

    async def test_missing_goal_status_sqlite(self, sqlite_store):
        await _single_client(sqlite_store, None, "view")
        assert (await sqlite_store.list("goal"))[0]["status"] is None
        created = await _generator(sqlite_store).generate(1)
        assert [(r.resource_id, r.score) for r in created] == [(2, 18)]

    async def test_unknown_interaction_type_still_counts(self, memory_store):
        await _single_client(memory_store, "in-progress", "like")
        created = await _generator(memory_store).generate(1)
        # Stress article: 10 + 25 + 15 − 2 + 2 = 50.
        assert [(r.resource_id, r.score) for r in created] == [(1, 50), (2, 18)]

# ── preview ───────────────────────────────────────────────────────────────────

class TestPreview:
    async def test_matches_generate_without_persisting(self, practice_store):
        ranked = await _generator(practice_store).preview(1)
        assert [(r.resource.id, r.score) for r in ranked] == [(1, 57), (2, 49), (4, 40)]
        assert await practice_store.list("recommendation") == []

    async def test_reasoning_included(self, practice_store):
        ranked = await _generator(practice_store).preview(1)
        assert "Seen 2x before (-4)" in ranked[1].reasoning


# ── generate_for_all_clients ─────────────────────────────────────────────────

class TestGenerateForAllClients:
    async def test_every_client_processed(self, practice_store):
        summary = await _generator(practice_store).generate_for_all_clients()
        assert isinstance(summary, GenerationSummary)
        assert sorted(summary.created) == [1, 2]
        assert summary.total_created == 4
        assert summary.clients_processed == 2
        assert summary.failures == {}

    async def test_all_clients_limit(self, practice_store):
        summary = await _generator(practice_store, all_clients_limit=1).generate_for_all_clients()
        assert [len(recs) for _, recs in sorted(summary.created.items())] == [1, 1]

    async def test_explicit_limit_overrides_config(self, practice_store):
        summary = await _generator(practice_store).generate_for_all_clients(limit=2)
        assert len(summary.created[1]) == 2

    async def test_failure_isolated_per_client(self, practice_store):
        practice_store.inject_failure("get", "client", UpstreamError("timeout"), record_id=1)
        summary = await _generator(practice_store).generate_for_all_clients()
        assert summary.failures == {1: "timeout"}
        assert [r.resource_id for r in summary.created[2]] == [2]
        assert summary.clients_processed == 2

    async def test_client_without_id_is_an_upstream_error(self):
        class _IdlessClients(InMemoryRecordStore):
            async def list(self, kind, query=None):
                records = await super().list(kind, query)
                if kind == "client":
                    for record in records:
                        record.pop("id")
                return records

        store = _IdlessClients({"client": [{"id": 1, "name": "Ada"}]})
        with pytest.raises(UpstreamError, match="without an id"):
            await _generator(store).generate_for_all_clients()
