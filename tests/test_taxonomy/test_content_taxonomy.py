"""Tests for wellness_coach/taxonomy/content_taxonomy.py."""

from __future__ import annotations

import pytest

from wellness_coach.taxonomy.content_taxonomy import (
    Difficulty,
    Disposition,
    GoalStatus,
    InteractionType,
    ResourceType,
)


class TestEnumValues:
    def test_resource_types(self):
        assert {t.value for t in ResourceType} == {"video", "article", "audio", "worksheet"}

    def test_difficulty_values_are_title_case(self):
        assert [d.value for d in Difficulty] == ["Beginner", "Intermediate", "Advanced"]

    def test_goal_status_hyphenated(self):
        assert GoalStatus("in-progress") is GoalStatus.IN_PROGRESS
        assert GoalStatus("not-started") is GoalStatus.NOT_STARTED

    def test_interaction_default_is_view(self):
        assert InteractionType("view") is InteractionType.VIEW

    def test_unknown_value_rejected(self):
        with pytest.raises(ValueError):
            ResourceType("podcast")


class TestDisposition:
    @pytest.mark.parametrize(
        "accepted, expected",
        [(None, Disposition.PENDING), (True, Disposition.ACCEPTED), (False, Disposition.DECLINED)],
    )
    def test_from_accepted(self, accepted, expected):
        assert Disposition.from_accepted(accepted) is expected

    def test_compares_equal_to_string(self):
        assert Disposition.PENDING == "pending"
