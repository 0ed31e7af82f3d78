"""
Client model.

A ``Client`` is the end recipient of coaching (not a software client). Clients
are owned by the client registry; the recommendation core only reads them to
resolve ``client_id`` and to label recommendations for display.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Client(BaseModel):
    """A coaching client.

    Attributes:
        id: Record id; ``None`` before the record store assigns one.
        name: Display name.
        email: Contact address, if known.
        avatar: Avatar image URL.
        join_date: Date the client joined the practice.
        progress: Overall programme progress percentage (0–100).
        status: Free-form engagement status (e.g. ``"active"``).
        practitioner: Name of the assigned practitioner.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    join_date: Optional[date] = None
    progress: int = 0
    status: Optional[str] = None
    practitioner: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Client name must be non-empty.")
        return v

    @field_validator("progress")
    @classmethod
    def validate_progress(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"progress must be in [0, 100], got {v}.")
        return v


class ClientPatch(BaseModel):
    """Optional-field update for a ``Client``; see ``models.patch.apply_patch``."""

    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    join_date: Optional[date] = None
    progress: Optional[int] = None
    status: Optional[str] = None
    practitioner: Optional[str] = None
