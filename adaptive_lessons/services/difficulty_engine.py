"""Adaptive difficulty engine based on recent lesson performance.

Maps a learner's performance summary to one qualitative instruction that the
lesson prompt carries to the model.
"""

from enum import Enum

from adaptive_lessons.models.performance import Trend, UserPerformance


class DifficultyAdjustment(str, Enum):
    NO_HISTORY = "no_history"
    INCREASE = "increase"
    DECREASE = "decrease"
    ENGAGE = "engage"
    STANDARD = "standard"

    @property
    def instruction(self) -> str:
        return _INSTRUCTIONS[self]


_INSTRUCTIONS = {
    DifficultyAdjustment.NO_HISTORY: "Use standard difficulty for this level.",
    DifficultyAdjustment.INCREASE: (
        "Increase difficulty slightly. Add more complex vocabulary and sentence structures."
    ),
    DifficultyAdjustment.DECREASE: (
        "Decrease difficulty slightly. Use simpler vocabulary and clearer explanations."
    ),
    DifficultyAdjustment.ENGAGE: (
        "Maintain current difficulty with slight variation to keep it engaging."
    ),
    DifficultyAdjustment.STANDARD: "Use standard difficulty for this level.",
}


def get_difficulty_adjustment(performance: UserPerformance | None) -> DifficultyAdjustment:
    """Return the difficulty adjustment for the next lesson.

    no history                          → NO_HISTORY
    average ≥ 85 and trend improving    → INCREASE
    average ≤ 60 or trend declining     → DECREASE
    average ≥ 75                        → ENGAGE
    otherwise                           → STANDARD

    Rules are checked in this order; the first match wins.
    """
    if performance is None or performance.completed_lessons == 0:
        return DifficultyAdjustment.NO_HISTORY

    avg_score = performance.average_score
    trend = performance.trend

    if avg_score >= 85 and trend is Trend.IMPROVING:
        return DifficultyAdjustment.INCREASE
    if avg_score <= 60 or trend is Trend.DECLINING:
        return DifficultyAdjustment.DECREASE
    if avg_score >= 75:
        return DifficultyAdjustment.ENGAGE
    return DifficultyAdjustment.STANDARD
