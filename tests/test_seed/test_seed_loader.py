"""
Tests for wellness_coach/seed/seed_loader.py.

Covers:
  - Validation: unknown section, non-list section, missing/duplicate ids,
    dangling references, model validation failures, "_" keys ignored.
  - load_seed_file(): missing file, malformed JSON, the shipped mock data.
  - seed_store(): parents first, local ids remapped to store ids, counts.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from wellness_coach.errors import ValidationError
from wellness_coach.seed.seed_loader import load_seed_file, seed_store, validate_seed_data
from wellness_coach.store.memory import InMemoryRecordStore

_MOCK_DATA = Path(__file__).resolve().parents[2] / "config" / "seed" / "mock_data.json"


def _minimal(**overrides) -> dict:
    base = {
        "_comment": "ignored",
        "clients": [{"id": 10, "name": "Sarah"}],
        "resources": [{"id": 20, "title": "Box", "category": "Stress", "type": "video"}],
        "goals": [{"id": 30, "client_id": 10, "title": "Calm", "category": "Stress"}],
        "interactions": [
            {"id": 40, "client_id": 10, "resource_id": 20, "timestamp": "2024-06-01T08:00:00Z"}
        ],
    }
    base.update(overrides)
    return base


# ── Validation ────────────────────────────────────────────────────────────────

class TestValidateSeedData:
    def test_minimal_is_valid(self):
        validate_seed_data(_minimal())

    def test_unknown_section(self):
        with pytest.raises(ValidationError, match="Unknown seed section"):
            validate_seed_data(_minimal(recommendations=[]))

    def test_section_not_list(self):
        with pytest.raises(ValidationError, match="must be a list"):
            validate_seed_data(_minimal(clients={"id": 1}))

    def test_missing_id(self):
        with pytest.raises(ValidationError, match="integer 'id'"):
            validate_seed_data(_minimal(clients=[{"name": "Sarah"}]))

    def test_duplicate_id(self):
        with pytest.raises(ValidationError, match="Duplicate id 10"):
            validate_seed_data(_minimal(clients=[{"id": 10, "name": "A"}, {"id": 10, "name": "B"}]))

    def test_dangling_reference(self):
        goals = [{"id": 30, "client_id": 99, "title": "Calm", "category": "Stress"}]
        with pytest.raises(ValidationError, match="unknown client_id 99"):
            validate_seed_data(_minimal(goals=goals))

    def test_model_validation(self):
        resources = [{"id": 20, "title": "Box", "category": "Stress", "type": "podcast"}]
        with pytest.raises(ValidationError, match=r"resources\[0\] is invalid"):
            validate_seed_data(_minimal(resources=resources))


# ── File loading ──────────────────────────────────────────────────────────────

class TestLoadSeedFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_seed_file(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError, match="not valid JSON"):
            load_seed_file(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValidationError, match="JSON object"):
            load_seed_file(path)

    def test_shipped_mock_data_is_valid(self):
        data = load_seed_file(_MOCK_DATA)
        assert len(data["clients"]) == 4
        assert len(data["resources"]) == 11


# ── Store population ──────────────────────────────────────────────────────────

class TestSeedStore:
    async def test_ids_remapped(self):
        store = InMemoryRecordStore()
        counts = await seed_store(store, _minimal())
        assert counts == {"client": 1, "resource": 1, "goal": 1, "interaction": 1}

        goal = (await store.list("goal"))[0]
        interaction = (await store.list("interaction"))[0]
        assert goal["client_id"] == 1
        assert interaction["client_id"] == 1
        assert interaction["resource_id"] == 1

    async def test_seeds_onto_existing_records(self):
        store = InMemoryRecordStore({"client": [{"id": 1, "name": "Existing"}]})
        await seed_store(store, _minimal())
        goal = (await store.list("goal"))[0]
        assert (await store.get("client", goal["client_id"]))["name"] == "Sarah"

    async def test_shipped_mock_data(self, sqlite_store):
        counts = await seed_store(sqlite_store, load_seed_file(_MOCK_DATA))
        assert counts == {"client": 4, "resource": 11, "goal": 6, "interaction": 8}

    async def test_invalid_data_writes_nothing(self):
        store = InMemoryRecordStore()
        with pytest.raises(ValidationError):
            await seed_store(store, _minimal(goals=[{"id": 1, "client_id": 5, "title": "t", "category": "x"}]))
        assert await store.list("client") == []

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(_minimal()), encoding="utf-8")
        assert load_seed_file(path)["clients"][0]["name"] == "Sarah"
