"""
Tests for wellness_coach/store/mapping.py.

What we test
------------
  - remote_field(): id → Id, client.name → Name, everything else unchanged.
  - to_remote(): display Name label per kind; partial updates only relabel
    goals/resources whose title changed; milestones joined by newlines.
  - from_remote(): system columns dropped, references collapsed (dict or
    digit string), milestones split, missing fields → None.
"""

from __future__ import annotations

import pytest

from wellness_coach.errors import ValidationError
from wellness_coach.store.mapping import from_remote, remote_field, to_remote


class TestRemoteField:
    @pytest.mark.parametrize(
        "kind, field, expected",
        [
            ("client", "id", "Id"),
            ("client", "name", "Name"),
            ("goal", "title", "title"),
            ("recommendation", "goal_id", "goal_id"),
        ],
    )
    def test_names(self, kind, field, expected):
        assert remote_field(kind, field) == expected


class TestToRemote:
    def test_client_name(self):
        assert to_remote("client", {"name": "Sarah"}) == {"Name": "Sarah"}

    def test_recommendation_label(self):
        out = to_remote("recommendation", {"client_id": 3, "resource_id": 1, "score": 20})
        assert out["Name"] == "Recommendation for client 3"

    def test_interaction_label_defaults_to_view(self):
        out = to_remote("interaction", {"client_id": 3, "resource_id": 8})
        assert out["Name"] == "view of resource 8"

    def test_partial_recommendation_has_no_label(self):
        assert to_remote("recommendation", {"accepted": True}, partial=True) == {"accepted": True}

    def test_partial_goal_title_relabels(self):
        out = to_remote("goal", {"title": "Sleep 8h"}, partial=True)
        assert out == {"title": "Sleep 8h", "Name": "Sleep 8h"}

    def test_milestones_joined(self):
        out = to_remote("goal", {"title": "t", "milestones": ["one", "two"]})
        assert out["milestones"] == "one\ntwo"

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            to_remote("coach", {})


class TestFromRemote:
    def test_system_columns_dropped(self):
        out = from_remote("client", {"Id": 1, "Name": "Sarah", "Owner": "x", "CreatedOn": "y"})
        assert out["id"] == 1
        assert out["name"] == "Sarah"
        assert "Owner" not in out
        assert "CreatedOn" not in out
        assert out["email"] is None

    def test_references_collapsed(self):
        out = from_remote(
            "recommendation",
            {"Id": "4", "client_id": {"Id": 2, "Name": "S"}, "resource_id": "7",
             "goal_id": None, "score": 30},
        )
        assert out["id"] == 4
        assert out["client_id"] == 2
        assert out["resource_id"] == 7
        assert out["goal_id"] is None

    def test_milestones_split(self):
        out = from_remote("goal", {"Id": 1, "milestones": " a \n\nb\n"})
        assert out["milestones"] == ["a", "b"]
