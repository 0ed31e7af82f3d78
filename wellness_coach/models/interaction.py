"""
Interaction model — append-only log of what a client did with a resource.

The recommendation core never mutates or deletes interactions; it only counts
them per resource to apply the novelty bonus / repeat-view penalty.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from wellness_coach.taxonomy.content_taxonomy import InteractionType
from wellness_coach.utils.time_utils import ensure_utc


class Interaction(BaseModel):
    """One client ↔ resource interaction.

    Attributes:
        id: Record id; ``None`` before insertion.
        client_id: Client who interacted.
        resource_id: Resource interacted with.
        type: What the client did; usually an ``InteractionType`` value,
            but any string is kept. Every type counts toward scoring.
        timestamp: UTC time of the interaction.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    client_id: int
    resource_id: int
    type: str = InteractionType.VIEW.value
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)
