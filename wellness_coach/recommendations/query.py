"""
Read-side helpers for listing recommendations: join display names, filter,
search and sort. Nothing here writes to the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from wellness_coach.models.client import Client
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.taxonomy.content_taxonomy import Disposition

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_RESOURCE = "Unknown Resource"

STATUS_FILTERS: frozenset[str] = frozenset({"all", *(d.value for d in Disposition)})
SORT_KEYS: frozenset[str] = frozenset({"date", "score", "client", "resource"})


@dataclass(frozen=True)
class RecommendationView:
    """A recommendation joined with the names shown next to it."""

    recommendation: Recommendation
    client_name:    str
    resource_title: str
    resource_type:  Optional[str] = None
    category:       Optional[str] = None

    @property
    def disposition(self) -> Disposition:
        return self.recommendation.disposition


def build_views(
    recommendations: Iterable[Recommendation],
    clients:         Iterable[Client],
    resources:       Iterable[Resource],
) -> list[RecommendationView]:
    """Join each recommendation with its client and resource, keeping order."""
    client_names = {c.id: c.name for c in clients}
    resource_by_id = {r.id: r for r in resources}
    views: list[RecommendationView] = []
    for rec in recommendations:
        resource = resource_by_id.get(rec.resource_id)
        views.append(
            RecommendationView(
                recommendation=rec,
                client_name=client_names.get(rec.client_id, UNKNOWN_CLIENT),
                resource_title=resource.title if resource else UNKNOWN_RESOURCE,
                resource_type=resource.type.value if resource else None,
                category=resource.category if resource else None,
            )
        )
    return views


def filter_recommendations(
    views:     Sequence[RecommendationView],
    client_id: Optional[int] = None,
    status:    str = "all",
    search:    Optional[str] = None,
) -> list[RecommendationView]:
    """Return the views matching every given condition.

    Args:
        views:     Candidate views.
        client_id: Keep only this client's recommendations.
        status:    ``"all"`` or a ``Disposition`` value.
        search:    Case-insensitive substring of client name or resource title.

    Raises:
        ValueError: If ``status`` is not a known filter.
    """
    if status not in STATUS_FILTERS:
        raise ValueError(f"status must be one of {sorted(STATUS_FILTERS)}, got '{status}'.")
    needle = search.strip().lower() if search else ""

    out: list[RecommendationView] = []
    for view in views:
        if client_id is not None and view.recommendation.client_id != client_id:
            continue
        if status != "all" and view.disposition != status:
            continue
        if needle and needle not in view.client_name.lower() and needle not in view.resource_title.lower():
            continue
        out.append(view)
    return out


def sort_recommendations(
    views:   Sequence[RecommendationView],
    sort_by: str = "date",
) -> list[RecommendationView]:
    """Sort views for display.

    ``date``: newest first. ``score``: highest first. ``client`` /
    ``resource``: case-insensitive alphabetical.

    Raises:
        ValueError: If ``sort_by`` is not a known key.
    """
    if sort_by == "date":
        return sorted(views, key=lambda v: v.recommendation.recommendation_date, reverse=True)
    if sort_by == "score":
        return sorted(views, key=lambda v: v.recommendation.score, reverse=True)
    if sort_by == "client":
        return sorted(views, key=lambda v: v.client_name.lower())
    if sort_by == "resource":
        return sorted(views, key=lambda v: v.resource_title.lower())
    raise ValueError(f"sort_by must be one of {sorted(SORT_KEYS)}, got '{sort_by}'.")


def pending_ids(views: Iterable[RecommendationView]) -> list[int]:
    """Ids of the pending recommendations among ``views``, in order."""
    return [
        v.recommendation.id
        for v in views
        if v.recommendation.is_pending and v.recommendation.id is not None
    ]
