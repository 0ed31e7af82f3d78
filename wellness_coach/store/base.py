"""
Record store contract shared by every storage backend.

The recommendation core talks to storage only through ``RecordStore``: five
coroutines over a small, fixed set of entity kinds. Records cross this
boundary as plain dicts with the canonical snake_case field names listed in
``ENTITY_FIELDS`` and JSON-compatible values (ISO-8601 strings for dates,
lists for ``milestones``). The typed registries in
``wellness_coach.services.registries`` turn them into pydantic models.

Backends
--------
memory : ``InMemoryRecordStore``  — mock data, tests.
sqlite : ``SqliteRecordStore``    — local single-file database.
remote : ``RemoteRecordStore``    — hosted table API over HTTPS.

Filtering is intentionally minimal: one equality **or** is-null condition on
one field, plus ordering by one field (``ListQuery``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from wellness_coach.errors import ValidationError

# kind → {field: required}
ENTITY_FIELDS: dict[str, dict[str, bool]] = {
    "client": {
        "name": True,
        "email": False,
        "avatar": False,
        "join_date": False,
        "progress": False,
        "status": False,
        "practitioner": False,
    },
    "goal": {
        "client_id": True,
        "title": True,
        "description": False,
        "category": True,
        "status": False,
        "progress": False,
        "target_date": False,
        "milestones": False,
    },
    "resource": {
        "title": True,
        "category": True,
        "type": True,
        "difficulty": False,
        "description": False,
        "content": False,
        "media_url": False,
        "duration": False,
        "read_time": False,
        "downloadable": False,
        "created_by": False,
    },
    "interaction": {
        "client_id": True,
        "resource_id": True,
        "type": False,
        "timestamp": True,
    },
    "recommendation": {
        "client_id": True,
        "resource_id": True,
        "goal_id": False,
        "score": True,
        "recommendation_date": True,
        "accepted": False,
    },
}

ENTITY_KINDS: frozenset[str] = frozenset(ENTITY_FIELDS)

# kind → {fk_field: referenced kind}
REFERENCES: dict[str, dict[str, str]] = {
    "goal": {"client_id": "client"},
    "interaction": {"client_id": "client", "resource_id": "resource"},
    "recommendation": {
        "client_id": "client",
        "resource_id": "resource",
        "goal_id": "goal",
    },
}

# parent kind → [(child kind, fk field, "delete" | "nullify")]
# Recommendations never cascade back to their parents.
CASCADES: dict[str, list[tuple[str, str, str]]] = {
    "client": [
        ("goal", "client_id", "delete"),
        ("interaction", "client_id", "delete"),
        ("recommendation", "client_id", "delete"),
    ],
    "resource": [
        ("interaction", "resource_id", "delete"),
        ("recommendation", "resource_id", "delete"),
    ],
    "goal": [("recommendation", "goal_id", "nullify")],
}


@dataclass(frozen=True)
class ListQuery:
    """A single-field filter plus single-field ordering.

    Build with the ``where`` / ``where_null`` / ``ordered`` constructors::

        ListQuery.where("client_id", 3, order_by="timestamp", descending=True)
        ListQuery.where_null("accepted", order_by="score", descending=True)

    Attributes:
        field: Field the filter applies to, or ``None`` for no filter.
        value: Value ``field`` must equal (ignored when ``is_null``).
        is_null: If ``True`` match records whose ``field`` is ``None``.
        order_by: Field to sort by, or ``None`` to keep storage order.
        descending: Sort direction.
    """

    field: Optional[str] = None
    value: Any = None
    is_null: bool = False
    order_by: Optional[str] = None
    descending: bool = False

    @classmethod
    def where(
        cls, field: str, value: Any, order_by: str | None = None, descending: bool = False
    ) -> "ListQuery":
        return cls(field=field, value=value, order_by=order_by, descending=descending)

    @classmethod
    def where_null(
        cls, field: str, order_by: str | None = None, descending: bool = False
    ) -> "ListQuery":
        return cls(field=field, is_null=True, order_by=order_by, descending=descending)

    @classmethod
    def ordered(cls, order_by: str, descending: bool = False) -> "ListQuery":
        return cls(order_by=order_by, descending=descending)

    def matches(self, record: dict[str, Any]) -> bool:
        """Return ``True`` if ``record`` satisfies the filter condition."""
        if self.field is None:
            return True
        current = record.get(self.field)
        if self.is_null:
            return current is None
        return current == self.value


class RecordStore(ABC):
    """Asynchronous CRUD over named entity kinds.

    Every method is a coroutine; callers ``await`` each operation and no
    method blocks the event loop. Implementations serialize writes per record
    at their own boundary; the core adds no locking of its own.
    """

    @abstractmethod
    async def list(self, kind: str, query: ListQuery | None = None) -> list[dict[str, Any]]:
        """Return all records of ``kind`` matching ``query``."""

    @abstractmethod
    async def get(self, kind: str, record_id: int) -> dict[str, Any]:
        """Return one record. Raises ``NotFoundError`` if absent."""

    @abstractmethod
    async def create(self, kind: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it with its assigned ``id``.

        Raises ``ValidationError`` on a malformed payload.
        """

    @abstractmethod
    async def update(self, kind: str, record_id: int, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply ``patch`` to a record and return the updated record.

        Raises ``NotFoundError`` if absent, ``ValidationError`` on unknown fields.
        """

    @abstractmethod
    async def delete(self, kind: str, record_id: int) -> bool:
        """Delete a record permanently. Raises ``NotFoundError`` if absent."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing to release."""

    async def __aenter__(self) -> "RecordStore":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


# ── Validation helpers (shared by the local backends) ─────────────────────────

def check_kind(kind: str) -> dict[str, bool]:
    """Return the field map for ``kind``; raise ``ValidationError`` if unknown."""
    fields = ENTITY_FIELDS.get(kind)
    if fields is None:
        raise ValidationError(
            f"Unknown entity kind '{kind}'. Must be one of {sorted(ENTITY_KINDS)}."
        )
    return fields


def check_payload(kind: str, data: dict[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate a create (``partial=False``) or update (``partial=True``) payload.

    Rejects unknown fields, an ``id`` key and (on create) missing or
    ``None`` required fields.

    Returns:
        A shallow copy of ``data``.
    """
    fields = check_kind(kind)
    unknown = sorted(set(data) - set(fields))
    if unknown:
        raise ValidationError(f"Unknown field(s) for {kind}: {', '.join(unknown)}.")
    if not partial:
        missing = sorted(f for f, required in fields.items() if required and data.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required field(s) for {kind}: {', '.join(missing)}.")
    else:
        cleared = sorted(f for f, required in fields.items() if required and f in data and data[f] is None)
        if cleared:
            raise ValidationError(f"Required field(s) for {kind} cannot be null: {', '.join(cleared)}.")
    return dict(data)


def check_query(kind: str, query: ListQuery | None) -> None:
    """Reject queries that filter or sort on a field ``kind`` does not have."""
    if query is None:
        return
    fields = set(check_kind(kind)) | {"id"}
    for name in (query.field, query.order_by):
        if name is not None and name not in fields:
            raise ValidationError(f"Unknown field '{name}' for {kind} query.")
