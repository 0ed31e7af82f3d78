"""
RecommendationGenerator — fetch client context, score the catalog, persist
the top-ranked resources as pending recommendations.

Generation flow (one client)
----------------------------
  1. Resolve the client (``NotFoundError`` if absent).
  2. Load the client's goals (listing order), the client's interactions and
     the entire resource catalog.
  3. Score every resource (``scorer.compute_components``).
  4. Keep scores strictly above ``threshold``, cap at ``max_score``, rank
     best first (catalog order breaks ties), truncate to ``limit``.
  5. Create one recommendation per surviving resource with
     ``recommendation_date = now`` and ``accepted = None``.

Persistence is best-effort, not transactional: a failed single write is
logged and skipped, and the remaining writes still happen. The returned
list holds only the records that were actually created, in ranked order.

``generate_for_all_clients()`` runs the same flow for every client, one
client at a time, with the smaller ``all_clients_limit``. A failure for one
client is logged, recorded in the ``GenerationSummary`` and does not stop
the loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from wellness_coach.config import RecommendationConfig
from wellness_coach.errors import CoachError, UpstreamError
from wellness_coach.models.goal import Goal
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.recommendations.ranker import (
    RankedResource,
    build_recommendation_drafts,
    rank_resources,
    score_catalog,
)
from wellness_coach.services.registries import (
    ClientRegistry,
    GoalRegistry,
    InteractionLog,
    RecommendationRepository,
    ResourceCatalog,
)
from wellness_coach.store.base import RecordStore
from wellness_coach.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class GenerationSummary:
    """Outcome of ``generate_for_all_clients()``.

    Attributes:
        created:  client id → recommendations created for that client.
        failures: client id → error message for clients whose run failed.
    """

    created:  dict[int, list[Recommendation]] = field(default_factory=dict)
    failures: dict[int, str] = field(default_factory=dict)

    @property
    def total_created(self) -> int:
        return sum(len(recs) for recs in self.created.values())

    @property
    def clients_processed(self) -> int:
        return len(self.created) + len(self.failures)


class RecommendationGenerator:
    """Generate and persist ranked recommendations.

    Args:
        store:  Record store to read context from and write recommendations to.
        config: Threshold, cap and default limits.
        clock:  Returns the timestamp stamped on new recommendations.
    """

    def __init__(
        self,
        store: RecordStore,
        config: RecommendationConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or RecommendationConfig()
        self.clock = clock
        self.clients = ClientRegistry(store)
        self.goals = GoalRegistry(store)
        self.resources = ResourceCatalog(store)
        self.interactions = InteractionLog(store)
        self.recommendations = RecommendationRepository(store)

    async def preview(
        self, client_id: int, limit: Optional[int] = None
    ) -> list[RankedResource]:
        """Run the scoring pipeline for one client without persisting anything."""
        _, ranked = await self._rank(client_id, limit or self.config.default_limit)
        return ranked

    async def generate(
        self, client_id: int, limit: Optional[int] = None
    ) -> list[Recommendation]:
        """Generate and persist recommendations for one client.

        Args:
            client_id: Client to generate for.
            limit:     Maximum recommendations; defaults to ``config.default_limit``.

        Returns:
            Successfully created recommendations, best first.

        Raises:
            NotFoundError: If ``client_id`` does not resolve to a client.
        """
        n = limit or self.config.default_limit
        goals, ranked = await self._rank(client_id, n)
        drafts = build_recommendation_drafts(client_id, goals, ranked, self.clock())

        created: list[Recommendation] = []
        for draft in drafts:
            try:
                created.append(await self.recommendations.create(draft))
            except CoachError as exc:
                logger.warning(
                    "Failed to persist recommendation client=%d resource=%d: %s",
                    client_id, draft.resource_id, exc,
                )

        logger.info(
            "client=%d: %d recommendation(s) created (%d ranked, limit=%d).",
            client_id, len(created), len(drafts), n,
        )
        return created

    async def generate_for_all_clients(
        self, limit: Optional[int] = None
    ) -> GenerationSummary:
        """Generate for every client sequentially, isolating per-client failures."""
        n = limit or self.config.all_clients_limit
        summary = GenerationSummary()
        clients = await self.clients.list()
        logger.info("Generating recommendations for %d client(s), limit=%d.", len(clients), n)

        for client in clients:
            if client.id is None:
                raise UpstreamError("Client listing returned a record without an id.")
            try:
                summary.created[client.id] = await self.generate(client.id, limit=n)
            except CoachError as exc:
                logger.error("Generation failed for client=%d: %s", client.id, exc)
                summary.failures[client.id] = str(exc)

        logger.info(
            "Generation complete: %d recommendation(s) across %d client(s), %d failed.",
            summary.total_created, summary.clients_processed, len(summary.failures),
        )
        return summary

    async def _rank(
        self, client_id: int, limit: int
    ) -> tuple[list[Goal], list[RankedResource]]:
        await self.clients.get(client_id)
        goals = await self.goals.list_for_client(client_id)
        interactions = await self.interactions.list_for_client(client_id)
        catalog = await self.resources.list()

        logger.debug(
            "client=%d: scoring %d resource(s) against %d goal(s), %d interaction(s).",
            client_id, len(catalog), len(goals), len(interactions),
        )
        ranked = rank_resources(
            score_catalog(goals, interactions, catalog),
            threshold=self.config.threshold,
            max_score=self.config.max_score,
            limit=limit,
        )
        return goals, ranked
