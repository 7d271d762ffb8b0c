"""Isolate and validate the lesson JSON embedded in a model response.

Models often wrap the object in prose or markdown fences, so the first
decodable object literal in the text is taken as the payload.
"""

import json
import logging

from pydantic import BaseModel, ValidationError

from adaptive_lessons.exceptions import InvalidResponseFormat, MalformedPayload
from adaptive_lessons.models.lesson import BODY_MODELS, LessonPayload, Skill

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> str:
    """Return the earliest balanced ``{...}`` span in text.

    Braces inside JSON string literals are ignored. Raises
    InvalidResponseFormat when no balanced span exists.
    """
    start = text.find("{") if text else -1
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        start = text.find("{", start + 1)
    raise InvalidResponseFormat("Invalid response format from AI: no JSON object found")


def parse_json_object(text: str) -> dict:
    """Decode the first well-formed JSON object in text."""
    decoder = json.JSONDecoder()
    start = text.find("{") if text else -1
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except (json.JSONDecodeError, RecursionError):
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)

    # Nothing decoded: distinguish "no object at all" from "broken object"
    span = extract_json_object(text)
    try:
        json.loads(span)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise MalformedPayload(f"Lesson JSON does not parse: {exc}") from exc
    raise MalformedPayload("Lesson JSON is not an object")


def validate_lesson_payload(data: dict, skill: Skill) -> tuple[LessonPayload, BaseModel]:
    """Check the decoded object against the common fields and the skill's body."""
    fields = {k: v for k, v in data.items() if k != "skill"}
    try:
        payload = LessonPayload.model_validate(fields)
        body = BODY_MODELS[skill].model_validate(fields)
    except ValidationError as exc:
        logger.warning("Lesson payload for %s failed validation: %s", skill.value, exc)
        raise MalformedPayload(
            f"Lesson payload has the wrong shape for {skill.value} ({exc.error_count()} errors)"
        ) from exc
    return payload, body


def parse_lesson_payload(text: str, skill: Skill) -> tuple[LessonPayload, BaseModel]:
    return validate_lesson_payload(parse_json_object(text), skill)
