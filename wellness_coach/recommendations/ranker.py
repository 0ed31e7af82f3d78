"""
Recommendation ranker: scores the whole catalog for one client, applies the
threshold filter and the upper cap, ranks, truncates, and builds unsaved
``Recommendation`` drafts.

Usage flow
----------
1. score_catalog(goals, interactions, resources)
   -> list[RankedResource]  (one per resource, catalog order, uncapped)

2. rank_resources(scored, threshold=15, max_score=100, limit=10)
   -> list[RankedResource]  (score > threshold, capped, best first, ≤ limit)

3. build_recommendation_drafts(client_id, goals, ranked, now)
   -> list[Recommendation]  (id=None, accepted=None; ready for persistence)

Ranking is stable: resources with equal capped scores keep catalog order.
Scores are capped but never floored; anything at or below the threshold is
already gone by the time capping happens.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Sequence

from wellness_coach.models.goal import Goal
from wellness_coach.models.interaction import Interaction
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.recommendations.scorer import (
    ScoreComponents,
    build_reasoning,
    compute_components,
)


@dataclass
class RankedResource:
    """Intermediate object coupling a catalog resource with its score.

    Attributes:
        resource:   The scored catalog resource.
        score:      Score after capping (equals ``raw_score`` until ranked).
        raw_score:  Uncapped score from the scorer (may be negative).
        components: Detailed score breakdown.
        reasoning:  Human-readable explanation string.
    """

    resource:   Resource
    score:      int
    raw_score:  int
    components: ScoreComponents
    reasoning:  str


def score_catalog(
    goals:        Sequence[Goal],
    interactions: Sequence[Interaction],
    resources:    Sequence[Resource],
) -> list[RankedResource]:
    """Score every resource in catalog order. Pure; no filtering."""
    scored: list[RankedResource] = []
    for resource in resources:
        components = compute_components(goals, interactions, resource)
        scored.append(
            RankedResource(
                resource=resource,
                score=components.total,
                raw_score=components.total,
                components=components,
                reasoning=build_reasoning(components, resource.category),
            )
        )
    return scored


def rank_resources(
    scored:    list[RankedResource],
    threshold: int = 15,
    max_score: int = 100,
    limit:     int = 10,
) -> list[RankedResource]:
    """Filter, cap, rank and truncate scored resources.

    Args:
        scored:    Output of ``score_catalog()``.
        threshold: Exclusive lower bound on the uncapped score.
        max_score: Upper cap applied to surviving scores.
        limit:     Maximum number of results.

    Returns:
        At most ``limit`` entries, highest capped score first.
    """
    kept = [
        replace(item, score=min(item.raw_score, max_score))
        for item in scored
        if item.raw_score > threshold
    ]
    # sorted() is stable, so equal scores keep catalog order.
    kept = sorted(kept, key=lambda item: -item.score)
    return kept[:limit]


def build_recommendation_drafts(
    client_id: int,
    goals:     Sequence[Goal],
    ranked:    list[RankedResource],
    now:       datetime,
) -> list[Recommendation]:
    """Convert ranked resources into pending, unsaved ``Recommendation`` records.

    ``goal_id`` is the client's first goal in listing order (not necessarily
    the goal the resource matched), or ``None`` when the client has no goals.
    Resources without an ``id`` are skipped: a recommendation must reference a
    stored resource.
    """
    goal_id = goals[0].id if goals else None
    drafts: list[Recommendation] = []
    for item in ranked:
        if item.resource.id is None:
            continue
        drafts.append(
            Recommendation(
                client_id=client_id,
                resource_id=item.resource.id,
                goal_id=goal_id,
                score=item.score,
                recommendation_date=now,
                accepted=None,
            )
        )
    return drafts
