"""
Recommendation report writer: CSV and JSON export of stored recommendations.

All functions are pure I/O: no store access. They consume in-memory
``RecommendationView`` lists (see ``recommendations.query``) and write
human-readable + machine-readable files.

Output files (written by the ``export`` CLI command)
----------------------------------------------------
  data/outputs/recommendations/
    recommendations_{date}.csv   -- one row per recommendation
    recommendations_{date}.json  -- same data, structured JSON with summary counts
"""

from __future__ import annotations

import csv
import json
import logging
from collections import Counter
from datetime import date
from pathlib import Path
from typing import Any

from wellness_coach.recommendations.query import RecommendationView
from wellness_coach.utils.time_utils import to_iso

logger = logging.getLogger(__name__)

FIELDNAMES: list[str] = [
    "id", "client_id", "client_name", "resource_id", "resource_title",
    "resource_type", "category", "goal_id", "score", "status",
    "recommendation_date",
]


def view_to_row(view: RecommendationView) -> dict[str, Any]:
    """Flatten one view into a CSV/JSON row keyed by ``FIELDNAMES``."""
    rec = view.recommendation
    return {
        "id":                  rec.id,
        "client_id":           rec.client_id,
        "client_name":         view.client_name,
        "resource_id":         rec.resource_id,
        "resource_title":      view.resource_title,
        "resource_type":       view.resource_type,
        "category":            view.category,
        "goal_id":             rec.goal_id,
        "score":               rec.score,
        "status":              view.disposition.value,
        "recommendation_date": to_iso(rec.recommendation_date),
    }


def write_recommendations_csv(
    views: list[RecommendationView],
    output_dir: Path,
    run_date: date | None = None,
) -> Path:
    """Write recommendations to a CSV file.

    Args:
        views:      Recommendations to export, in display order.
        output_dir: Directory to write the file (created if missing).
        run_date:   Date label for the filename. Defaults to today.

    Returns:
        Path to the written CSV file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"recommendations_{run_date}.csv"

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for view in views:
            writer.writerow(view_to_row(view))

    logger.info("Recommendation CSV written: %s (%d rows)", csv_path, len(views))
    return csv_path


def write_recommendations_json(
    views: list[RecommendationView],
    output_dir: Path,
    run_date: date | None = None,
) -> Path:
    """Write recommendations to a structured JSON file.

    The payload carries per-status counts alongside the rows so a reader can
    check totals without re-counting.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"recommendations_{run_date}.json"

    counts = Counter(view.disposition.value for view in views)
    payload: dict[str, Any] = {
        "generated_at": run_date.isoformat(),
        "total":        len(views),
        "by_status": {
            "pending":  counts.get("pending", 0),
            "accepted": counts.get("accepted", 0),
            "declined": counts.get("declined", 0),
        },
        "recommendations": [view_to_row(view) for view in views],
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path
