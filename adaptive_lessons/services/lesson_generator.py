import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from adaptive_lessons.exceptions import InvalidResponseFormat, LessonGenerationError, MalformedPayload
from adaptive_lessons.models.lesson import GeneratedLesson, Skill, points_per_question
from adaptive_lessons.models.performance import UserPerformance
from adaptive_lessons.services.ai_client import ai_chat
from adaptive_lessons.services.difficulty_engine import get_difficulty_adjustment
from adaptive_lessons.services.lesson_prompt import build_lesson_prompt, level_tag, resolve_skill
from adaptive_lessons.services.response_parser import parse_lesson_payload

logger = logging.getLogger(__name__)

ChatFn = Callable[..., Awaitable[str]]


def calculate_lesson_points(level: str, question_count: int) -> int:
    return points_per_question(level) * question_count


def lesson_id(skill: Skill, level: str, lesson_number: int, generated_at: datetime | None = None) -> str:
    """``{skill}-{level}-{n}``, suffixed with epoch milliseconds when a timestamp is given."""
    base = f"{skill.value}-{level}-{lesson_number}"
    if generated_at is None:
        return base
    return f"{base}-{int(generated_at.timestamp() * 1000)}"


async def generate_lesson(
    skill: str,
    level: str,
    lesson_number: int,
    performance: UserPerformance | None = None,
    *,
    chat: ChatFn | None = None,
    unique_id: bool = True,
) -> GeneratedLesson:
    """Generate one lesson for (skill, level, lesson_number).

    Any transport, format or shape failure is logged and raised as
    LessonGenerationError; the call itself is never retried here.
    """
    chat = chat or ai_chat
    resolved = resolve_skill(skill)
    level_name = level_tag(level)

    adjustment = get_difficulty_adjustment(performance)
    prompt = build_lesson_prompt(resolved, level_name, lesson_number, adjustment, performance)
    logger.info(
        "Generating %s-%s lesson %d (difficulty: %s)",
        resolved.value, level_name, lesson_number, adjustment.value,
    )

    try:
        result_text = await chat(
            messages=[{"role": "user", "content": prompt}],
            use_case="lesson",
            json_mode=True,
        )
    except Exception as exc:
        logger.error("AI call failed during lesson generation: %s", exc)
        raise LessonGenerationError() from exc

    try:
        payload, body = parse_lesson_payload(result_text, resolved)
    except (InvalidResponseFormat, MalformedPayload) as exc:
        logger.error("AI returned an unusable lesson: %s", exc)
        raise LessonGenerationError() from exc

    generated_at = datetime.now(timezone.utc)
    return GeneratedLesson(
        id=lesson_id(resolved, level_name, lesson_number, generated_at if unique_id else None),
        skill=resolved,
        level=level_name,
        lesson_number=lesson_number,
        title=payload.title,
        content=payload.content,
        body=body,
        questions=payload.questions,
        points=calculate_lesson_points(level_name, len(payload.questions)),
        generated_at=generated_at,
    )
