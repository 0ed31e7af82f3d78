"""
Tests for wellness_coach/recommendations/formatters.py.

Formatters are plain string builders, so these are smoke checks on titles,
empty-state messages and the values that must appear.
"""

from __future__ import annotations

from datetime import datetime, timezone

from wellness_coach.models.client import Client
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.recommendations.formatters import (
    format_bulk_result,
    format_generation_summary,
    format_ranked_preview,
    format_recommendation_table,
)
from wellness_coach.recommendations.generator import GenerationSummary
from wellness_coach.recommendations.lifecycle import BulkResult
from wellness_coach.recommendations.query import build_views
from wellness_coach.recommendations.ranker import rank_resources, score_catalog
from wellness_coach.taxonomy.content_taxonomy import ResourceType

_RESOURCE = Resource(id=1, title="Box Breathing", category="Stress", type=ResourceType.VIDEO)
_REC = Recommendation(
    id=12, client_id=1, resource_id=1, score=57,
    recommendation_date=datetime(2024, 6, 10, tzinfo=timezone.utc),
)


class TestRecommendationTable:
    def test_rows(self):
        views = build_views([_REC], [Client(id=1, name="Sarah Mitchell")], [_RESOURCE])
        out = format_recommendation_table(views)
        assert "=== Recommendations (1) ===" in out
        assert "Sarah Mitchell" in out
        assert "Box Breathing" in out
        assert "pending" in out
        assert "2024-06-10" in out

    def test_empty(self):
        out = format_recommendation_table([], title="Pending")
        assert "=== Pending (0) ===" in out
        assert "no recommendations match" in out


class TestRankedPreview:
    def test_preview_lists_reasoning(self):
        ranked = rank_resources(score_catalog([], [], [_RESOURCE]))
        out = format_ranked_preview(3, ranked)
        assert "Preview for client 3 (not saved)" in out
        assert "Video format" in out

    def test_empty(self):
        assert "no resource scores above the threshold" in format_ranked_preview(3, [])


class TestSummaries:
    def test_generation_summary(self):
        summary = GenerationSummary(created={1: [_REC]}, failures={2: "timeout"})
        out = format_generation_summary(summary)
        assert "1 created" in out
        assert "FAILED: timeout" in out
        assert "Total: 1 recommendation(s) for 2 client(s), 1 failed." in out

    def test_bulk_result(self):
        out = format_bulk_result("bulk-accept", BulkResult(succeeded=[_REC], failures={7: "gone"}))
        assert "bulk-accept: 1 succeeded, 1 failed." in out
        assert "id 7: gone" in out
