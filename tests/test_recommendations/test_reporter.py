"""
Tests for wellness_coach/recommendations/reporter.py.

What we test
------------
  - view_to_row(): every FIELDNAMES key present, status label, ISO "Z" date.
  - write_recommendations_csv(): header + one row per view, filename carries
    the run date, output directory created if missing.
  - write_recommendations_json(): total and by_status counts, rows match.
  - Empty input still writes a valid file.
"""

from __future__ import annotations

import csv
import json
from datetime import date, datetime, timezone

from wellness_coach.models.client import Client
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.recommendations.query import build_views
from wellness_coach.recommendations.reporter import (
    FIELDNAMES,
    view_to_row,
    write_recommendations_csv,
    write_recommendations_json,
)
from wellness_coach.taxonomy.content_taxonomy import ResourceType

_RUN_DATE = date(2024, 6, 10)


def _views():
    recs = [
        Recommendation(
            id=i, client_id=1, resource_id=1, goal_id=1, score=60 - i,
            recommendation_date=datetime(2024, 6, 10, 12, tzinfo=timezone.utc),
            accepted=accepted,
        )
        for i, accepted in enumerate([None, True, None, False], start=1)
    ]
    return build_views(
        recs,
        [Client(id=1, name="Sarah Mitchell")],
        [Resource(id=1, title="Box Breathing", category="Stress", type=ResourceType.VIDEO)],
    )


class TestViewToRow:
    def test_all_fields(self):
        row = view_to_row(_views()[0])
        assert list(row) == FIELDNAMES
        assert row["status"] == "pending"
        assert row["client_name"] == "Sarah Mitchell"
        assert row["recommendation_date"] == "2024-06-10T12:00:00Z"


class TestCsv:
    def test_rows_written(self, tmp_path):
        path = write_recommendations_csv(_views(), tmp_path / "out", run_date=_RUN_DATE)
        assert path.name == "recommendations_2024-06-10.csv"
        with path.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 4
        assert rows[1]["status"] == "accepted"
        assert rows[3]["status"] == "declined"
        assert rows[0]["score"] == "59"

    def test_empty(self, tmp_path):
        path = write_recommendations_csv([], tmp_path, run_date=_RUN_DATE)
        assert path.read_text(encoding="utf-8").strip() == ",".join(FIELDNAMES)


class TestJson:
    def test_summary_counts(self, tmp_path):
        path = write_recommendations_json(_views(), tmp_path, run_date=_RUN_DATE)
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["generated_at"] == "2024-06-10"
        assert payload["total"] == 4
        assert payload["by_status"] == {"pending": 2, "accepted": 1, "declined": 1}
        assert [r["id"] for r in payload["recommendations"]] == [1, 2, 3, 4]

    def test_empty(self, tmp_path):
        path = write_recommendations_json([], tmp_path, run_date=_RUN_DATE)
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["total"] == 0
        assert payload["recommendations"] == []
