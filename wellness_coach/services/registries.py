"""
Typed registries over a ``RecordStore``.

Each registry wraps one entity kind and converts between the store's plain
dicts and the pydantic models in ``wellness_coach.models``:

  - ``ClientRegistry``            — clients.
  - ``GoalRegistry``              — goals, plus ``list_for_client``.
  - ``ResourceCatalog``           — the content catalog.
  - ``InteractionLog``            — append-only interaction records.
  - ``RecommendationRepository``  — recommendations, plus pending/per-client views.

Registries are constructed with the store they read from; nothing here is a
module-level singleton. ``pydantic.ValidationError`` raised while building a
model is re-raised as ``wellness_coach.errors.ValidationError``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

import pydantic
from pydantic import BaseModel

from wellness_coach.errors import ValidationError
from wellness_coach.models.client import Client
from wellness_coach.models.goal import Goal
from wellness_coach.models.interaction import Interaction
from wellness_coach.models.patch import patch_changes
from wellness_coach.models.recommendation import Recommendation
from wellness_coach.models.resource import Resource
from wellness_coach.store.base import ListQuery, RecordStore
from wellness_coach.taxonomy.content_taxonomy import InteractionType
from wellness_coach.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Registry(Generic[ModelT]):
    """Shared CRUD plumbing for one entity kind.

    Subclasses set ``kind`` and ``model``.
    """

    kind: str
    model: type[ModelT]

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def list(self, query: ListQuery | None = None) -> list[ModelT]:
        return [self._to_model(r) for r in await self.store.list(self.kind, query)]

    async def get(self, record_id: int) -> ModelT:
        return self._to_model(await self.store.get(self.kind, record_id))

    async def create(self, record: ModelT) -> ModelT:
        """Persist ``record`` (its ``id`` is ignored) and return the stored copy."""
        data = record.model_dump(mode="json", exclude={"id"})
        return self._to_model(await self.store.create(self.kind, data))

    async def update(self, record_id: int, patch: BaseModel) -> ModelT:
        """Apply the fields explicitly set on ``patch`` and return the stored copy."""
        changes = _json_changes(patch)
        return self._to_model(await self.store.update(self.kind, record_id, changes))

    async def delete(self, record_id: int) -> bool:
        return await self.store.delete(self.kind, record_id)

    def _to_model(self, record: dict[str, Any]) -> ModelT:
        # None means "not set" in every backend; let model defaults apply.
        data = {k: v for k, v in record.items() if v is not None}
        try:
            return self.model.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Stored {self.kind} id={record.get('id')} is malformed: {exc}"
            ) from exc


class ClientRegistry(_Registry[Client]):
    kind = "client"
    model = Client


class GoalRegistry(_Registry[Goal]):
    kind = "goal"
    model = Goal

    async def list_for_client(self, client_id: int) -> list[Goal]:
        """Return the client's goals in listing (insertion) order."""
        return await self.list(ListQuery.where("client_id", client_id, order_by="id"))


class ResourceCatalog(_Registry[Resource]):
    kind = "resource"
    model = Resource

    async def list_by_category(self, category: str) -> list[Resource]:
        return await self.list(ListQuery.where("category", category, order_by="id"))


class InteractionLog(_Registry[Interaction]):
    """Append-only: interactions are recorded, never edited by this package."""

    kind = "interaction"
    model = Interaction

    async def list_for_client(self, client_id: int) -> list[Interaction]:
        """Return the client's interactions, newest first."""
        return await self.list(
            ListQuery.where("client_id", client_id, order_by="timestamp", descending=True)
        )

    async def list_for_resource(self, resource_id: int) -> list[Interaction]:
        return await self.list(
            ListQuery.where("resource_id", resource_id, order_by="timestamp", descending=True)
        )

    async def record(
        self,
        client_id: int,
        resource_id: int,
        interaction_type: str = InteractionType.VIEW,
        timestamp: Optional[datetime] = None,
    ) -> Interaction:
        """Append one interaction stamped ``timestamp`` (default: now)."""
        interaction = _build(
            Interaction,
            client_id=client_id,
            resource_id=resource_id,
            type=interaction_type,
            timestamp=timestamp or utcnow(),
        )
        created = await self.create(interaction)
        logger.debug(
            "Recorded %s: client=%d resource=%d", created.type, client_id, resource_id
        )
        return created


class RecommendationRepository(_Registry[Recommendation]):
    kind = "recommendation"
    model = Recommendation

    async def list_all(self) -> list[Recommendation]:
        """Return every recommendation, newest first."""
        return await self.list(ListQuery.ordered("recommendation_date", descending=True))

    async def list_for_client(self, client_id: int) -> list[Recommendation]:
        """Return one client's recommendations, newest first."""
        return await self.list(
            ListQuery.where(
                "client_id", client_id, order_by="recommendation_date", descending=True
            )
        )

    async def list_pending(self) -> list[Recommendation]:
        """Return every pending recommendation, highest score first."""
        return await self.list(
            ListQuery.where_null("accepted", order_by="score", descending=True)
        )


# ── Private helpers ────────────────────────────────────────────────────────────

def _json_changes(patch: BaseModel) -> dict[str, Any]:
    """``patch_changes`` with values converted to JSON-compatible types."""
    changes = patch_changes(patch)
    dumped = patch.model_dump(mode="json", include=set(changes))
    return {k: dumped[k] for k in changes}


def _build(model: type[ModelT], **fields: Any) -> ModelT:
    try:
        return model(**fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(str(exc)) from exc
