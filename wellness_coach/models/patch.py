"""
Single merge function for the ``*Patch`` models.

Precedence: a field explicitly set on the patch (including an explicit
``None``) replaces the record's value; fields the caller never set are left
untouched. The merged dict is re-validated through the record's model, so a
patch cannot produce a record the model would reject. ``id`` is never
patchable.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


def patch_changes(patch: BaseModel) -> dict[str, Any]:
    """Return only the fields the caller explicitly set on ``patch``."""
    changes = patch.model_dump(exclude_unset=True)
    changes.pop("id", None)
    return changes


def apply_patch(record: RecordT, patch: BaseModel) -> RecordT:
    """Merge ``patch`` into ``record`` and return a new, validated record.

    Raises:
        pydantic.ValidationError: If the merged values fail validation.
    """
    merged = record.model_dump()
    merged.update(patch_changes(patch))
    return type(record).model_validate(merged)
