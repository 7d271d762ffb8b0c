"""Performance analytics over the lesson-result log.

Provides:
- compute_performance(results, skill) - Averages, weak/strong topics, per-skill breakdown
- classify_trend(recent_scores) - improving / declining / stable
- next_lesson_index(completed_ids, skill, level) - Lesson number to generate next

All functions are pure; callers pass in a snapshot of the log (oldest first).
"""

import logging
from collections.abc import Sequence

from adaptive_lessons.models.lesson import Skill
from adaptive_lessons.models.performance import (
    LessonResult,
    SkillPerformance,
    Trend,
    UserPerformance,
)

logger = logging.getLogger(__name__)

WEAK_AREA_THRESHOLD = 70.0
STRONG_AREA_THRESHOLD = 85.0
MAX_AREAS = 3
RECENT_WINDOW = 10
TREND_WINDOW = 3
TREND_MARGIN = 10.0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _topic_scores(results: Sequence[LessonResult]) -> list[tuple[str, float]]:
    """Aggregate correct/total per topic, in first-seen order."""
    counts: dict[str, list[int]] = {}
    for result in results:
        for qr in result.question_results:
            correct_total = counts.setdefault(qr.topic_tag, [0, 0])
            correct_total[1] += 1
            if qr.correct:
                correct_total[0] += 1
    return [(topic, correct * 100 / total) for topic, (correct, total) in counts.items()]


def _skill_breakdown(results: Sequence[LessonResult]) -> dict[str, SkillPerformance]:
    breakdown: dict[str, SkillPerformance] = {}
    for skill in Skill:
        skill_results = [r for r in results if r.skill == skill.value]
        if not skill_results:
            continue

        topic_scores: dict[str, list[float]] = {}
        for result in skill_results:
            for qr in result.question_results:
                topic_scores.setdefault(qr.topic_tag, []).append(qr.score_percentage)

        breakdown[skill.value] = SkillPerformance(
            average_score=_mean([r.score_percentage for r in skill_results]),
            completed_lessons=len(skill_results),
            last_lesson_date=max(r.completed_at for r in skill_results),
            topic_scores=topic_scores,
        )
    return breakdown


def compute_performance(results: Sequence[LessonResult], skill: str | None = None) -> UserPerformance:
    """Summarize the result log, optionally restricted to one skill.

    The skill filter applies to the averages, recent scores and weak/strong
    areas. The per-skill breakdown always covers the whole log.
    """
    relevant = [r for r in results if r.skill == skill] if skill else list(results)
    if not relevant:
        return UserPerformance()

    scores = [r.score_percentage for r in relevant]

    topics = _topic_scores(relevant)
    # sorted() is stable, so ties keep first-seen order
    weak_areas = [
        topic for topic, score in sorted(
            (t for t in topics if t[1] < WEAK_AREA_THRESHOLD), key=lambda t: t[1]
        )
    ][:MAX_AREAS]
    strong_areas = [
        topic for topic, score in sorted(
            (t for t in topics if t[1] >= STRONG_AREA_THRESHOLD), key=lambda t: t[1], reverse=True
        )
    ][:MAX_AREAS]

    performance = UserPerformance(
        average_score=_mean(scores),
        completed_lessons=len(relevant),
        weak_areas=weak_areas,
        strong_areas=strong_areas,
        recent_scores=scores[-RECENT_WINDOW:],
        skill_performance=_skill_breakdown(results),
    )
    logger.debug(
        "Performance for skill=%s: avg=%.1f over %d lessons, weak=%s strong=%s",
        skill or "all", performance.average_score, performance.completed_lessons,
        weak_areas, strong_areas,
    )
    return performance


def classify_trend(recent_scores: Sequence[float]) -> Trend:
    """Compare the last three scores with the three before them.

    More than 10 points up is improving, more than 10 down is declining.
    Fewer than three scores, or nothing before them, counts as stable.
    """
    if len(recent_scores) < TREND_WINDOW:
        return Trend.STABLE

    recent = list(recent_scores[-TREND_WINDOW:])
    older = list(recent_scores[-2 * TREND_WINDOW:-TREND_WINDOW])
    if not older:
        return Trend.STABLE

    recent_avg = _mean(recent)
    older_avg = _mean(older)
    if recent_avg > older_avg + TREND_MARGIN:
        return Trend.IMPROVING
    if recent_avg < older_avg - TREND_MARGIN:
        return Trend.DECLINING
    return Trend.STABLE


def next_lesson_index(completed_ids: Sequence[str], skill: str, level: str) -> int:
    """Number of completed lessons in the skill/level series, plus one."""
    prefix = f"{getattr(skill, 'value', skill)}-{getattr(level, 'value', level)}"
    return sum(1 for lesson_id in completed_ids if prefix in lesson_id) + 1
