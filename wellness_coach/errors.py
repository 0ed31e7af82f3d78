"""
Error taxonomy shared by the record store, registries, and recommendation core.

  - ``NotFoundError``   — a referenced record does not exist.
  - ``ValidationError`` — a create/update payload is malformed.
  - ``UpstreamError``   — the storage backend failed for infrastructure reasons
                          (transport error, non-2xx response, ``success=false``).

All three derive from ``CoachError`` so callers that only need to know
"the operation failed" (the CLI, bulk operations) can catch one type.

Note: ``ValidationError`` here is distinct from ``pydantic.ValidationError``.
Registries translate the latter into the former at the store boundary.
"""

from __future__ import annotations


class CoachError(Exception):
    """Base class for all wellness_coach errors."""


class NotFoundError(CoachError):
    """Raised when a record of ``kind`` with ``record_id`` does not exist."""

    def __init__(self, kind: str, record_id: int) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} with id {record_id} not found.")


class ValidationError(CoachError):
    """Raised when a payload cannot be stored as the requested entity."""


class UpstreamError(CoachError):
    """Raised when the storage backend fails for reasons outside the payload."""
