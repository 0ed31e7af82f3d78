"""
Resource model — one entry of the content catalog.

Resources are immutable for scoring purposes. ``difficulty`` is optional;
resources without one never receive the progress-band bonus.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from wellness_coach.taxonomy.content_taxonomy import Difficulty, ResourceType


class Resource(BaseModel):
    """A catalog item recommended to clients.

    Attributes:
        id: Record id; ``None`` before insertion.
        title: Display title.
        category: Category tag (e.g. ``"Stress"``, ``"Sleep"``).
        type: ``ResourceType`` of the content.
        difficulty: Optional ``Difficulty`` level.
        description: Short summary.
        content: Body text for articles / worksheets.
        media_url: Link to hosted media for video / audio.
        duration: Human-readable duration for media (``"12:30"``).
        read_time: Human-readable reading time for articles (``"5 min"``).
        downloadable: Whether the resource can be downloaded.
        created_by: Author or practitioner name.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    title: str
    category: str
    type: ResourceType
    difficulty: Optional[Difficulty] = None
    description: Optional[str] = None
    content: Optional[str] = None
    media_url: Optional[str] = None
    duration: Optional[str] = None
    read_time: Optional[str] = None
    downloadable: bool = False
    created_by: Optional[str] = None


class ResourcePatch(BaseModel):
    """Optional-field update for a ``Resource``."""

    title: Optional[str] = None
    category: Optional[str] = None
    type: Optional[ResourceType] = None
    difficulty: Optional[Difficulty] = None
    description: Optional[str] = None
    content: Optional[str] = None
    media_url: Optional[str] = None
    duration: Optional[str] = None
    read_time: Optional[str] = None
    downloadable: Optional[bool] = None
    created_by: Optional[str] = None
