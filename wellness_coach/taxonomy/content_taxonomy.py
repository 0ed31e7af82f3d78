"""
Content taxonomy for coaching resources, goals, and interactions.

The enumerations here are the vocabulary shared by the record store, the
scorer, and the CLI:
  - ``ResourceType``     — the *form* of a resource (video, article, ...).
  - ``Difficulty``       — the *level* a resource is pitched at.
  - ``GoalStatus``       — where a client's goal currently stands.
  - ``InteractionType``  — what a client did with a resource.
  - ``Disposition``      — tri-state review status of a recommendation.

Values match the strings stored by the hosted record service so that records
round-trip without translation. Goal status and interaction type are stored as
open strings on the models; ``GoalStatus`` and ``InteractionType`` name the
well-known values and anything else is kept as-is.

This module has NO imports from any other ``wellness_coach`` package.
"""

from enum import StrEnum


class ResourceType(StrEnum):
    """Format of a catalog resource."""

    VIDEO = "video"
    ARTICLE = "article"
    AUDIO = "audio"
    WORKSHEET = "worksheet"


class Difficulty(StrEnum):
    """Level a resource is pitched at; matched against goal progress bands."""

    BEGINNER = "Beginner"
    """Suited to goals under 30% progress."""

    INTERMEDIATE = "Intermediate"
    """Suited to goals between 30% and 70% progress."""

    ADVANCED = "Advanced"
    """Suited to goals at or above 70% progress."""


class GoalStatus(StrEnum):
    """Lifecycle status of a client goal.

    Only ``IN_PROGRESS`` goals contribute to recommendation scores.
    """

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class InteractionType(StrEnum):
    """Kind of client interaction logged against a resource."""

    VIEW = "view"
    DOWNLOAD = "download"
    COMPLETE = "complete"
    BOOKMARK = "bookmark"
    SHARE = "share"


class Disposition(StrEnum):
    """Review status of a recommendation.

    Stored as a nullable boolean ``accepted`` column:
    ``None`` → pending, ``True`` → accepted, ``False`` → declined.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @classmethod
    def from_accepted(cls, accepted: bool | None) -> "Disposition":
        if accepted is None:
            return cls.PENDING
        return cls.ACCEPTED if accepted else cls.DECLINED
