"""
Goal model.

Goals belong to exactly one client and are mutated externally over the
client's lifetime (progress updates, status changes). The scorer reads
``category``, ``status`` and ``progress``; everything else is display data.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from wellness_coach.taxonomy.content_taxonomy import GoalStatus


class Goal(BaseModel):
    """A client's coaching goal.

    Attributes:
        id: Record id; ``None`` before insertion.
        client_id: Owning client.
        title: Short goal title.
        description: Longer free-form description.
        category: Category tag matched against ``Resource.category``.
        status: Free-form status string, usually a ``GoalStatus`` value.
            Only ``"in-progress"`` goals affect scoring; any other value,
            including ``None``, contributes nothing.
        progress: Completion percentage, 0–100.
        target_date: Optional target completion date.
        milestones: Ordered milestone labels.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    client_id: int
    title: str
    description: Optional[str] = None
    category: str
    status: Optional[str] = None
    progress: int = 0
    target_date: Optional[date] = None
    milestones: list[str] = []

    @field_validator("progress")
    @classmethod
    def validate_progress(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"progress must be in [0, 100], got {v}.")
        return v

    @property
    def is_in_progress(self) -> bool:
        return self.status == GoalStatus.IN_PROGRESS


class GoalPatch(BaseModel):
    """Optional-field update for a ``Goal``."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = None
    target_date: Optional[date] = None
    milestones: Optional[list[str]] = None
