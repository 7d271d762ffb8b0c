"""Sequential batch lesson generation.

Two policies share the same per-lesson primitive (generate_lesson):
- BEST_EFFORT: a failed lesson is logged and skipped
- STRICT: the first failure aborts the batch and propagates

Lessons are requested one at a time in index order, with a pacing delay
between calls to stay under upstream rate limits.
"""

import asyncio
import logging
from enum import Enum

from adaptive_lessons.config import settings
from adaptive_lessons.db.performance_store import PerformanceStore
from adaptive_lessons.exceptions import LessonGenerationError
from adaptive_lessons.models.lesson import GeneratedLesson
from adaptive_lessons.models.performance import UserPerformance
from adaptive_lessons.services.lesson_generator import ChatFn, generate_lesson
from adaptive_lessons.services.performance_analyzer import compute_performance, next_lesson_index

logger = logging.getLogger(__name__)


class SequencePolicy(str, Enum):
    BEST_EFFORT = "best-effort"
    STRICT = "strict"


def default_delay_seconds(policy: SequencePolicy) -> float:
    if policy is SequencePolicy.STRICT:
        return settings.strict_delay_ms / 1000
    return settings.best_effort_delay_ms / 1000


async def generate_lessons(
    skill: str,
    level: str,
    start_index: int = 1,
    count: int = 1,
    performance: UserPerformance | None = None,
    *,
    policy: SequencePolicy = SequencePolicy.BEST_EFFORT,
    delay_seconds: float | None = None,
    chat: ChatFn | None = None,
    unique_id: bool = True,
) -> list[GeneratedLesson]:
    policy = SequencePolicy(policy)
    if count < 1:
        return []
    if delay_seconds is None:
        delay_seconds = default_delay_seconds(policy)

    lessons: list[GeneratedLesson] = []
    for offset in range(count):
        lesson_number = start_index + offset
        try:
            lesson = await generate_lesson(
                skill, level, lesson_number, performance, chat=chat, unique_id=unique_id,
            )
        except LessonGenerationError as exc:
            if policy is SequencePolicy.STRICT:
                logger.error("Failed to generate lesson %d, aborting sequence: %s", lesson_number, exc)
                raise
            logger.error("Failed to generate lesson %d, skipping: %s", lesson_number, exc)
        else:
            lessons.append(lesson)

        if offset < count - 1 and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

    logger.info(
        "Generated %d/%d %s-%s lessons starting at %d (%s)",
        len(lessons), count, getattr(skill, "value", skill), getattr(level, "value", level),
        start_index, policy.value,
    )
    return lessons


async def load_next_lessons(
    store: PerformanceStore,
    completed_ids: list[str],
    skill: str,
    level: str,
    count: int = 3,
    *,
    policy: SequencePolicy = SequencePolicy.STRICT,
    delay_seconds: float | None = None,
    chat: ChatFn | None = None,
) -> list[GeneratedLesson]:
    """Generate the learner's next lessons in a skill/level series.

    Difficulty adapts to the learner's results for this skill, and numbering
    continues after the lessons they already completed.
    """
    results = await store.get_results()
    performance = compute_performance(results, skill)
    start_index = next_lesson_index(completed_ids, skill, level)
    return await generate_lessons(
        skill, level, start_index, count, performance,
        policy=policy, delay_seconds=delay_seconds, chat=chat,
    )
