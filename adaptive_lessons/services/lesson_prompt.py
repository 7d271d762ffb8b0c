"""Lesson prompt construction.

The only place that knows what each skill's lesson looks like: the YAML
templates describe the content requirements and this module renders the
matching output contract for the model.
"""

import json
import logging

from adaptive_lessons.models.lesson import Level, Skill, points_per_question
from adaptive_lessons.models.performance import UserPerformance
from adaptive_lessons.services.difficulty_engine import DifficultyAdjustment
from adaptive_lessons.services.prompts import load_prompt

logger = logging.getLogger(__name__)

PROMPT_FILE = "lesson_generator.yaml"


def resolve_skill(skill: str) -> Skill:
    """Map a skill tag to a Skill, falling back to reading for unknown tags."""
    try:
        return Skill(skill)
    except ValueError:
        logger.warning("Unknown skill %r, using the reading template", skill)
        return Skill.READING


def level_tag(level: str) -> str:
    return level.value if isinstance(level, Level) else str(level)


def _level_ranges(level: str) -> dict[str, list[int]]:
    levels = load_prompt(PROMPT_FILE)["levels"]
    return levels.get(level_tag(level), levels[Level.BEGINNER.value])


def _template_fields(level: str, adjustment: DifficultyAdjustment) -> dict[str, str]:
    fields = {name: f"{lo}-{hi}" for name, (lo, hi) in _level_ranges(level).items()}
    fields["level"] = level_tag(level)
    fields["difficulty"] = adjustment.instruction
    return fields


def _output_example(skill: Skill, level: str, fields: dict[str, str]) -> dict:
    """Example JSON object shown to the model for this skill."""
    ranges = _level_ranges(level)
    extra = {}
    for key, value in load_prompt(PROMPT_FILE)["output_fields"][skill.value].items():
        extra[key] = value.format(**fields) if isinstance(value, str) else value

    if skill is Skill.WRITING:
        extra["minWords"], extra["maxWords"] = ranges["writing_words"]
    elif skill is Skill.SPEAKING:
        lo, hi = ranges["speaking_seconds"]
        extra["expectedDuration"] = (lo + hi) // 2

    return {
        "title": "Lesson Title Here",
        **extra,
        "questions": [
            {
                "id": "q1",
                "type": "mcq",
                "question": "Question text here",
                "options": ["Option A", "Option B", "Option C", "Option D"],
                "correctAnswer": 0,
                "points": points_per_question(level_tag(level)),
                "explanation": "Why this answer is correct",
            }
        ],
    }


def build_lesson_prompt(
    skill: str,
    level: str,
    lesson_number: int,
    adjustment: DifficultyAdjustment,
    performance: UserPerformance | None = None,
) -> str:
    prompt = load_prompt(PROMPT_FILE)
    resolved = resolve_skill(skill)
    fields = _template_fields(level, adjustment)

    text = prompt["skills"][resolved.value].format(**fields).rstrip("\n")

    if performance is not None and performance.completed_lessons > 0:
        text += prompt["performance_context"].format(
            average_score=round(performance.average_score, 1),
            completed_lessons=performance.completed_lessons,
            trend=performance.trend.value,
            weak_areas=", ".join(performance.weak_areas) or "General practice",
        ).rstrip("\n")

    text += prompt["series_line"].format(
        lesson_number=lesson_number,
        level=level_tag(level),
        skill=resolved.value,
    ).rstrip("\n")

    example_json = json.dumps(_output_example(resolved, level, fields), indent=2)
    text += prompt["output_contract"].format(example_json=example_json).rstrip("\n")
    return text
