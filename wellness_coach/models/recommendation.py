"""
Recommendation model — the one record shape the rest of the application
depends on: ``id, client_id, resource_id, goal_id, score,
recommendation_date, accepted``.

``accepted`` is a nullable boolean encoding the tri-state disposition:

    None  → pending   (initial state, set by the generator)
    True  → accepted
    False → declined

Recommendations are created only by ``RecommendationGenerator`` and mutated
only by ``RecommendationLifecycle``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from wellness_coach.taxonomy.content_taxonomy import Disposition
from wellness_coach.utils.time_utils import ensure_utc


class Recommendation(BaseModel):
    """A resource recommended to a client.

    Attributes:
        id: Record id; ``None`` for a draft not yet persisted.
        client_id: FK to the client the recommendation is for.
        resource_id: FK to the recommended resource.
        goal_id: FK to one of the client's goals, or ``None``.
        score: Integer affinity score (capped at generation time).
        recommendation_date: UTC time the recommendation was generated.
        accepted: Disposition as nullable boolean (see module docstring).
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    client_id: int
    resource_id: int
    goal_id: Optional[int] = None
    score: int
    recommendation_date: datetime
    accepted: Optional[bool] = None

    @field_validator("recommendation_date")
    @classmethod
    def validate_recommendation_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def disposition(self) -> Disposition:
        return Disposition.from_accepted(self.accepted)

    @property
    def is_pending(self) -> bool:
        return self.accepted is None


class RecommendationPatch(BaseModel):
    """Optional-field update for a ``Recommendation``.

    Setting a field to ``None`` explicitly (e.g. ``goal_id=None``) clears it;
    fields left unset are not touched.
    """

    client_id: Optional[int] = None
    resource_id: Optional[int] = None
    goal_id: Optional[int] = None
    score: Optional[int] = None
    recommendation_date: Optional[datetime] = None
    accepted: Optional[bool] = None
