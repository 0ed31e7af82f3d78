"""
Field translation between the canonical record schema and the hosted table API.

This is the only place that knows the hosted service's naming quirks:
  - primary keys are ``Id`` (canonical: ``id``);
  - every table has a ``Name`` display column; for clients it *is* the
    client's name, for other tables it is a generated label;
  - reference columns may come back expanded as ``{"Id": 3, "Name": "..."}``
    and are collapsed to the bare id;
  - ``goal.milestones`` is a newline-separated text column.

Everything past this module sees canonical snake_case dicts only.
"""

from __future__ import annotations

from typing import Any

from wellness_coach.store.base import ENTITY_FIELDS, REFERENCES, check_kind

# Hosted table names are the singular entity kinds.
REMOTE_TABLES: dict[str, str] = {kind: kind for kind in ENTITY_FIELDS}

_NAME_FIELDS: dict[str, str] = {"client": "name"}


def remote_field(kind: str, field: str) -> str:
    """Return the hosted column name for a canonical ``field`` of ``kind``."""
    if field == "id":
        return "Id"
    if _NAME_FIELDS.get(kind) == field:
        return "Name"
    return field


def to_remote(kind: str, data: dict[str, Any], partial: bool = False) -> dict[str, Any]:
    """Translate a canonical create (or, with ``partial``, update) payload."""
    check_kind(kind)
    out: dict[str, Any] = {}
    for field, value in data.items():
        if field == "milestones" and value is not None:
            value = "\n".join(value)
        out[remote_field(kind, field)] = value
    if "Name" not in out:
        label = _display_label(kind, data, partial)
        if label is not None:
            out["Name"] = label
    return out


def from_remote(kind: str, record: dict[str, Any]) -> dict[str, Any]:
    """Translate one hosted record into a canonical record dict.

    System columns the canonical schema does not know (``CreatedOn``,
    ``Owner``, ...) are dropped.
    """
    fields = check_kind(kind)
    out: dict[str, Any] = {"id": _collapse(record.get("Id", record.get("id")))}
    references = REFERENCES.get(kind, {})
    for field in fields:
        value = record.get(remote_field(kind, field))
        if field in references:
            value = _collapse(value)
        if field == "milestones" and isinstance(value, str):
            value = [line.strip() for line in value.splitlines() if line.strip()]
        out[field] = value
    return out


def _collapse(value: Any) -> Any:
    if isinstance(value, dict):
        value = value.get("Id")
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def _display_label(kind: str, data: dict[str, Any], partial: bool) -> str | None:
    if kind in ("goal", "resource"):
        return data.get("title")
    if partial:
        return None
    if kind == "recommendation":
        return f"Recommendation for client {data.get('client_id')}"
    if kind == "interaction":
        return f"{data.get('type') or 'view'} of resource {data.get('resource_id')}"
    return None
