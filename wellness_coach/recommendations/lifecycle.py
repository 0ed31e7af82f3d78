"""
Recommendation lifecycle: disposition changes, patches and deletion.

States
------
    pending  (accepted = None)
       ├── accept()  → accepted (accepted = True)
       └── decline() → declined (accepted = False)

``accept`` and ``decline`` may be called again on a reviewed record; the last
call wins and no history is kept. Nothing here moves a record back to
pending. ``delete`` is terminal: the record is gone and later lookups raise
``NotFoundError``. No cascade reaches goals, resources or interactions.

Single-item operations propagate every error to the caller. Bulk operations
apply the single-item operation to each id in turn and collect failures per
id in a ``BulkResult``; successes already written stay written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, Optional

from wellness_coach.errors import CoachError, ValidationError
from wellness_coach.models.patch import apply_patch, patch_changes
from wellness_coach.models.recommendation import Recommendation, RecommendationPatch
from wellness_coach.services.registries import GoalRegistry, RecommendationRepository
from wellness_coach.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    """Outcome of a bulk accept/decline.

    Attributes:
        succeeded: Records updated successfully, in request order.
        failures:  recommendation id → error message.
    """

    succeeded: list[Recommendation] = field(default_factory=list)
    failures:  dict[int, str] = field(default_factory=dict)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class RecommendationLifecycle:
    """Mutates persisted recommendations.

    Args:
        store: Record store holding the recommendations.
    """

    def __init__(self, store: RecordStore) -> None:
        self.recommendations = RecommendationRepository(store)
        self.goals = GoalRegistry(store)

    async def accept(self, recommendation_id: int) -> Recommendation:
        """Mark a recommendation accepted. Raises ``NotFoundError`` if absent."""
        return await self._set_disposition(recommendation_id, True)

    async def decline(self, recommendation_id: int) -> Recommendation:
        """Mark a recommendation declined. Raises ``NotFoundError`` if absent."""
        return await self._set_disposition(recommendation_id, False)

    async def update(
        self, recommendation_id: int, patch: RecommendationPatch
    ) -> Recommendation:
        """Apply ``patch`` to a recommendation and return the stored result.

        The merged record is validated before anything is written. Whenever
        ``goal_id`` or ``client_id`` changes, a non-null ``goal_id`` must name a
        goal of the (new) client. A reviewed recommendation cannot be patched
        back to pending with ``accepted=None``.

        Raises:
            NotFoundError:   If the recommendation (or the patched goal) is absent.
            ValidationError: If the merged record is invalid.
        """
        current = await self.recommendations.get(recommendation_id)
        changes = patch_changes(patch)
        if "accepted" in changes and changes["accepted"] is None and not current.is_pending:
            raise ValidationError(
                f"recommendation {recommendation_id} is already {current.disposition}; "
                "it cannot return to pending."
            )
        merged = _merge(current, patch)
        if merged.goal_id is not None and changes.keys() & {"goal_id", "client_id"}:
            goal = await self.goals.get(merged.goal_id)
            if goal.client_id != merged.client_id:
                raise ValidationError(
                    f"goal {goal.id} belongs to client {goal.client_id}, "
                    f"not client {merged.client_id}."
                )
        updated = await self.recommendations.update(recommendation_id, patch)
        logger.info("Updated recommendation id=%d", recommendation_id)
        return updated

    async def delete(self, recommendation_id: int) -> bool:
        """Delete a recommendation permanently. Raises ``NotFoundError`` if absent."""
        deleted = await self.recommendations.delete(recommendation_id)
        logger.info("Deleted recommendation id=%d", recommendation_id)
        return deleted

    async def bulk_accept(self, recommendation_ids: Iterable[int]) -> BulkResult:
        """Accept each id in turn; failures are collected, not raised."""
        return await self._bulk(recommendation_ids, self.accept, "accept")

    async def bulk_decline(self, recommendation_ids: Iterable[int]) -> BulkResult:
        """Decline each id in turn; failures are collected, not raised."""
        return await self._bulk(recommendation_ids, self.decline, "decline")

    async def pending(self, client_id: Optional[int] = None) -> list[Recommendation]:
        """Return pending recommendations, highest score first.

        Args:
            client_id: Restrict to one client's recommendations.
        """
        pending = await self.recommendations.list_pending()
        if client_id is None:
            return pending
        return [r for r in pending if r.client_id == client_id]

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _set_disposition(self, recommendation_id: int, accepted: bool) -> Recommendation:
        updated = await self.recommendations.update(
            recommendation_id, RecommendationPatch(accepted=accepted)
        )
        logger.info("Recommendation id=%d -> %s", recommendation_id, updated.disposition)
        return updated

    async def _bulk(
        self,
        recommendation_ids: Iterable[int],
        operation: Callable[[int], Awaitable[Recommendation]],
        label: str,
    ) -> BulkResult:
        result = BulkResult()
        for rec_id in recommendation_ids:
            try:
                result.succeeded.append(await operation(rec_id))
            except CoachError as exc:
                logger.warning("Bulk %s failed for recommendation id=%d: %s", label, rec_id, exc)
                result.failures[rec_id] = str(exc)

        logger.info(
            "Bulk %s: %d succeeded, %d failed.",
            label, result.succeeded_count, result.failed_count,
        )
        return result


def _merge(current: Recommendation, patch: RecommendationPatch) -> Recommendation:
    try:
        return apply_patch(current, patch)
    except ValueError as exc:
        raise ValidationError(f"Invalid recommendation patch: {exc}") from exc

