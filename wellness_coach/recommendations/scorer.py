"""
Recommendation scoring: converts one client's goals + interaction history and
one catalog resource into an integer affinity score with a component
breakdown.

Score formula (integer sum, no clamping)
----------------------------------------
    total = (
        base                        # 10 for every resource
        + goal_alignment            # +25 per in-progress goal in the same category
        + difficulty_match          # +15 per in-progress goal whose progress band
                                    #     matches the resource difficulty
        + interaction_adjustment    # +5 if never interacted with, else −2 per interaction
        + type_bonus                # video +3, article +2, otherwise 0
    )

Component explanations
----------------------
goal_alignment:
    Only goals with status ``in-progress`` count. Category comparison is exact
    string equality. Several matching goals each add 25.

difficulty_match:
    Progress bands are mutually exclusive:
        progress <  30  → Beginner
        30 ≤ progress < 70 → Intermediate
        progress ≥  70  → Advanced
    A resource without a difficulty never earns the band bonus.

interaction_adjustment:
    ``k`` counts the client's interactions on this resource, of any type.
    ``k == 0`` earns the novelty bonus (+5); otherwise the score drops by
    ``2 * k`` with no floor, so heavily revisited resources can go negative.

The result is NOT clamped here; the threshold filter and the upper cap are
applied by the ranker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from wellness_coach.models.goal import Goal
from wellness_coach.models.interaction import Interaction
from wellness_coach.models.resource import Resource
from wellness_coach.taxonomy.content_taxonomy import Difficulty, ResourceType

BASE_SCORE = 10
GOAL_CATEGORY_BONUS = 25
DIFFICULTY_BAND_BONUS = 15
NOVELTY_BONUS = 5
REPEAT_PENALTY = 2

_TYPE_BONUS: dict[ResourceType, int] = {
    ResourceType.VIDEO:   3,
    ResourceType.ARTICLE: 2,
}


@dataclass
class ScoreComponents:
    """All components of a resource score.

    Attributes:
        base:                   Constant starting score.
        goal_alignment:         Sum of category-match bonuses.
        difficulty_match:       Sum of progress-band bonuses.
        interaction_adjustment: Novelty bonus (positive) or repeat penalty (negative).
        type_bonus:             Content-type preference bonus.
        interaction_count:      ``k``: prior interactions on this resource.
        matched_goal_ids:       Ids of in-progress goals sharing the resource's category.
    """

    base:                   int
    goal_alignment:         int
    difficulty_match:       int
    interaction_adjustment: int
    type_bonus:             int
    interaction_count:      int
    matched_goal_ids:       list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Uncapped integer score; may be negative."""
        return (
            self.base
            + self.goal_alignment
            + self.difficulty_match
            + self.interaction_adjustment
            + self.type_bonus
        )


def band_for_progress(progress: int) -> Difficulty:
    """Return the difficulty level suited to a goal at ``progress`` percent."""
    if progress < 30:
        return Difficulty.BEGINNER
    if progress < 70:
        return Difficulty.INTERMEDIATE
    return Difficulty.ADVANCED


def compute_components(
    goals:        Iterable[Goal],
    interactions: Iterable[Interaction],
    resource:     Resource,
) -> ScoreComponents:
    """Compute every score component for one resource.

    Args:
        goals:        The client's goals (any status; may be empty).
        interactions: The client's interactions (all resources, any type).
        resource:     Candidate catalog resource.

    Returns:
        ScoreComponents with all fields populated.
    """
    # ── Goals ─────────────────────────────────────────────────────────────────
    goal_alignment = 0
    difficulty_match = 0
    matched: list[int] = []
    for goal in goals:
        if not goal.is_in_progress:
            continue
        if goal.category == resource.category:
            goal_alignment += GOAL_CATEGORY_BONUS
            if goal.id is not None:
                matched.append(goal.id)
        if resource.difficulty is not None and band_for_progress(goal.progress) == resource.difficulty:
            difficulty_match += DIFFICULTY_BAND_BONUS

    # ── Interactions ──────────────────────────────────────────────────────────
    k = sum(1 for i in interactions if i.resource_id == resource.id)
    adjustment = NOVELTY_BONUS if k == 0 else -REPEAT_PENALTY * k

    return ScoreComponents(
        base=BASE_SCORE,
        goal_alignment=goal_alignment,
        difficulty_match=difficulty_match,
        interaction_adjustment=adjustment,
        type_bonus=_TYPE_BONUS.get(resource.type, 0),
        interaction_count=k,
        matched_goal_ids=matched,
    )


def score_resource(
    goals:        Iterable[Goal],
    interactions: Iterable[Interaction],
    resource:     Resource,
) -> int:
    """Return the uncapped integer affinity score of ``resource`` for one client."""
    return compute_components(goals, interactions, resource).total


def build_reasoning(
    components: ScoreComponents,
    category:   Optional[str] = None,
) -> str:
    """Assemble a human-readable reasoning string from score components.

    Returns a semicolon-separated list of explanation tokens such as:
        "Matches 1 active goal (Stress); Difficulty suits goal progress;
        New to client; Video format"

    Args:
        components: ScoreComponents from compute_components().
        category:   Resource category, shown next to the goal match.

    Returns:
        Non-empty reasoning string.
    """
    reasons: list[str] = []

    if components.goal_alignment:
        n = components.goal_alignment // GOAL_CATEGORY_BONUS
        label = f" ({category})" if category else ""
        reasons.append(f"Matches {n} active goal{'s' if n != 1 else ''}{label}")

    if components.difficulty_match:
        reasons.append("Difficulty suits goal progress")

    if components.interaction_count == 0:
        reasons.append("New to client")
    else:
        reasons.append(
            f"Seen {components.interaction_count}x before "
            f"({components.interaction_adjustment:+d})"
        )

    if components.type_bonus == _TYPE_BONUS[ResourceType.VIDEO]:
        reasons.append("Video format")
    elif components.type_bonus == _TYPE_BONUS[ResourceType.ARTICLE]:
        reasons.append("Article format")

    return "; ".join(reasons)
