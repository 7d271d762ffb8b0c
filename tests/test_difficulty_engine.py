"""Tests for the difficulty adjustment rules."""

import pytest

from adaptive_lessons.models.performance import UserPerformance
from adaptive_lessons.services.difficulty_engine import DifficultyAdjustment, get_difficulty_adjustment

IMPROVING = [50, 50, 50, 90, 90, 90]
DECLINING = [90, 90, 90, 50, 50, 50]
STABLE = [80, 80, 80, 80, 80, 80]


def _performance(average: float, recent: list[float], completed: int = 6) -> UserPerformance:
    return UserPerformance(average_score=average, completed_lessons=completed, recent_scores=recent)


class TestDifficultyAdjustment:
    def test_no_performance_is_no_history(self):
        assert get_difficulty_adjustment(None) is DifficultyAdjustment.NO_HISTORY

    def test_zero_completed_is_no_history(self):
        performance = _performance(95, IMPROVING, completed=0)
        assert get_difficulty_adjustment(performance) is DifficultyAdjustment.NO_HISTORY

    @pytest.mark.parametrize(
        "average, recent, expected",
        [
            (90, IMPROVING, DifficultyAdjustment.INCREASE),
            (85, IMPROVING, DifficultyAdjustment.INCREASE),
            # high average without an improving trend only keeps it engaging
            (90, STABLE, DifficultyAdjustment.ENGAGE),
            (60, STABLE, DifficultyAdjustment.DECREASE),
            (40, IMPROVING, DifficultyAdjustment.DECREASE),
            (80, DECLINING, DifficultyAdjustment.DECREASE),
            (90, DECLINING, DifficultyAdjustment.DECREASE),
            (75, STABLE, DifficultyAdjustment.ENGAGE),
            (74.9, STABLE, DifficultyAdjustment.STANDARD),
            (65, [65, 65], DifficultyAdjustment.STANDARD),
        ],
    )
    def test_rules_first_match_wins(self, average, recent, expected):
        assert get_difficulty_adjustment(_performance(average, recent)) is expected

    def test_every_adjustment_has_an_instruction(self):
        for adjustment in DifficultyAdjustment:
            assert adjustment.instruction.endswith(".")

    def test_instructions_differ_for_increase_and_decrease(self):
        assert "Increase" in DifficultyAdjustment.INCREASE.instruction
        assert "Decrease" in DifficultyAdjustment.DECREASE.instruction
        assert DifficultyAdjustment.NO_HISTORY.instruction == DifficultyAdjustment.STANDARD.instruction
