"""
Mock data loader: JSON → any ``RecordStore``.

Responsibilities
----------------
1. Load ``config/seed/mock_data.json`` (or any file of the same shape).
2. Validate every record against its pydantic model and check that local
   references (``client_id``, ``resource_id``) point at records in the file.
3. Create the records through the store's async API, parents first, mapping
   the file's local ids to the ids the store assigns.

File shape
----------
    {
      "clients":      [{"id": 1, "name": "...", ...}, ...],
      "resources":    [{"id": 1, "title": "...", "category": "...", "type": "video", ...}, ...],
      "goals":        [{"id": 1, "client_id": 1, "category": "...", ...}, ...],
      "interactions": [{"id": 1, "client_id": 1, "resource_id": 1, "timestamp": "..."}, ...]
    }

Keys starting with ``_`` (e.g. ``_comment``) are ignored. Recommendations are
never seeded: they are produced by the generator.

Validation rules
----------------
- Each section must be a list of objects, each with an integer ``id``.
- Duplicate ids within a section are rejected.
- References must name an id present in the referenced section.
- Each record must validate as its model (``Client``, ``Resource``, ...).

Usage
-----
    from wellness_coach.seed.seed_loader import load_seed_file, seed_store

    data = load_seed_file(Path("config/seed/mock_data.json"))
    counts = await seed_store(store, data)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel

from wellness_coach.errors import ValidationError
from wellness_coach.models.client import Client
from wellness_coach.models.goal import Goal
from wellness_coach.models.interaction import Interaction
from wellness_coach.models.resource import Resource
from wellness_coach.store.base import RecordStore

log = logging.getLogger(__name__)

# Section name → (entity kind, model), in creation order.
SECTIONS: dict[str, tuple[str, type[BaseModel]]] = {
    "clients":      ("client", Client),
    "resources":    ("resource", Resource),
    "goals":        ("goal", Goal),
    "interactions": ("interaction", Interaction),
}

# Reference field → section it points into.
_REFERENCE_SECTIONS: dict[str, str] = {
    "client_id":   "clients",
    "resource_id": "resources",
}


# ── Validation ────────────────────────────────────────────────────────────────

def validate_seed_data(data: dict[str, Any]) -> None:
    """Raise ``ValidationError`` for any schema violation in ``data``."""
    unknown = sorted(k for k in data if not k.startswith("_") and k not in SECTIONS)
    if unknown:
        raise ValidationError(f"Unknown seed section(s): {', '.join(unknown)}.")

    known_ids: dict[str, set[int]] = {}
    for section, (_, model) in SECTIONS.items():
        records = data.get(section, [])
        if not isinstance(records, list):
            raise ValidationError(f"Seed section '{section}' must be a list.")
        seen: set[int] = set()
        for i, rec in enumerate(records):
            if not isinstance(rec, dict):
                raise ValidationError(f"{section}[{i}] must be an object.")
            local_id = rec.get("id")
            if not isinstance(local_id, int):
                raise ValidationError(f"{section}[{i}] is missing an integer 'id'.")
            if local_id in seen:
                raise ValidationError(f"Duplicate id {local_id} in '{section}' at index {i}.")
            seen.add(local_id)

            for field, target in _REFERENCE_SECTIONS.items():
                if field in rec and rec[field] not in known_ids.get(target, set()):
                    raise ValidationError(
                        f"{section}[{i}] references unknown {field} {rec[field]}."
                    )
            try:
                model.model_validate(rec)
            except pydantic.ValidationError as exc:
                raise ValidationError(f"{section}[{i}] is invalid: {exc}") from exc
        known_ids[section] = seen


def load_seed_file(path: Path) -> dict[str, Any]:
    """Read and validate a seed file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValidationError:   If the JSON is malformed or fails validation.
    """
    log.info("Loading seed data from %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Seed file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"Seed file {path} must contain a JSON object.")
    validate_seed_data(data)
    return data


# ── Store population ──────────────────────────────────────────────────────────

async def seed_store(store: RecordStore, data: dict[str, Any]) -> dict[str, int]:
    """Create every record in ``data`` through ``store``.

    Args:
        store: Target record store (any backend).
        data:  Output of ``load_seed_file()`` (or an equivalent validated dict).

    Returns:
        Dict mapping entity kind → number of records created.
    """
    validate_seed_data(data)
    id_maps: dict[str, dict[int, int]] = {}
    counts: dict[str, int] = {}

    for section, (kind, model) in SECTIONS.items():
        id_map: dict[int, int] = {}
        for rec in data.get(section, []):
            payload = model.model_validate(rec).model_dump(mode="json", exclude={"id"})
            for field, target in _REFERENCE_SECTIONS.items():
                if field in payload:
                    payload[field] = id_maps[target][payload[field]]
            created = await store.create(kind, payload)
            id_map[rec["id"]] = created["id"]
        id_maps[section] = id_map
        counts[kind] = len(id_map)
        log.info("Seeded %d %s record(s).", len(id_map), kind)

    return counts
