from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field, computed_field, field_validator, model_validator

from adaptive_lessons.models.lesson import CamelModel


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class QuestionResult(CamelModel):
    question_id: str
    type: str
    correct: bool
    score: float = Field(ge=0)
    max_score: float = Field(gt=0)
    topic: Optional[str] = None

    @property
    def topic_tag(self) -> str:
        return self.topic or self.type

    @property
    def score_percentage(self) -> float:
        return self.score * 100 / self.max_score


class LessonResult(CamelModel):
    lesson_id: str
    skill: str
    level: str
    score: float = Field(ge=0)
    max_score: float = Field(gt=0)
    completed_at: datetime
    # seconds
    time_spent: float = Field(default=0, ge=0)
    question_results: list[QuestionResult] = Field(default_factory=list)

    @field_validator("completed_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Mixed naive/aware timestamps cannot be compared
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_score(self) -> "LessonResult":
        if self.score > self.max_score:
            raise ValueError(f"score {self.score} exceeds maxScore {self.max_score}")
        return self

    @property
    def score_percentage(self) -> float:
        return self.score * 100 / self.max_score


class SkillPerformance(CamelModel):
    average_score: float
    completed_lessons: int
    last_lesson_date: datetime
    # topic -> per-question score percentages, in log order
    topic_scores: dict[str, list[float]] = Field(default_factory=dict)


class UserPerformance(CamelModel):
    """Summary of a learner's results. Recomputed per query, never stored."""

    average_score: float = Field(default=0.0, ge=0)
    completed_lessons: int = 0
    weak_areas: list[str] = Field(default_factory=list)
    strong_areas: list[str] = Field(default_factory=list)
    recent_scores: list[float] = Field(default_factory=list)
    skill_performance: dict[str, SkillPerformance] = Field(default_factory=dict)

    @computed_field
    @property
    def trend(self) -> Trend:
        from adaptive_lessons.services.performance_analyzer import classify_trend

        return classify_trend(self.recent_scores)
