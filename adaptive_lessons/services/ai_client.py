"""Model client for lesson generation, backed by OpenAI or Anthropic.

Usage:
    from adaptive_lessons.services.ai_client import ai_chat

    text = await ai_chat(messages=[{"role": "user", "content": prompt}])
    # text is the raw assistant reply; the lesson JSON is parsed by the caller

The model comes from LESSON_MODEL (falling back to MODEL_NAME). Names
starting with "claude-" go to Anthropic, anything else follows AI_PROVIDER.

SDK, network and non-success errors all surface as TransportFailure.
AI_MAX_ATTEMPTS > 1 turns on tenacity retries for those failures only.
"""

import logging
from enum import Enum

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from adaptive_lessons.config import settings
from adaptive_lessons.exceptions import TransportFailure

logger = logging.getLogger(__name__)

_JSON_ONLY_SYSTEM = "You MUST respond with valid JSON only. No other text."


class AIProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def _resolve_model(use_case: str | None) -> str:
    if use_case == "lesson" and settings.lesson_model:
        return settings.lesson_model
    return settings.model_name


def _detect_provider(model: str) -> AIProvider:
    """Claude model names always route to Anthropic; the rest follow ai_provider."""
    if model.lower().startswith("claude-"):
        return AIProvider.ANTHROPIC
    try:
        return AIProvider(settings.ai_provider.lower())
    except ValueError:
        logger.warning("Unknown AI_PROVIDER %r, using openai", settings.ai_provider)
        return AIProvider.OPENAI


def _transport_retry(label: str):
    """Retry decorator for one provider call, re-raising the last TransportFailure."""
    return retry(
        stop=stop_after_attempt(max(1, settings.ai_max_attempts)),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(TransportFailure),
        before_sleep=lambda retry_state: logger.warning(
            "%s call failed (attempt %d), retrying: %s",
            label,
            retry_state.attempt_number,
            retry_state.outcome.exception(),
        ),
        reraise=True,
    )


async def ai_chat(
    messages: list[dict],
    *,
    use_case: str | None = "lesson",
    temperature: float | None = None,
    json_mode: bool = False,
    max_tokens: int | None = None,
) -> str:
    """Send the messages to the configured model and return the reply text."""
    model = _resolve_model(use_case)
    provider = _detect_provider(model)
    options = {
        "temperature": settings.ai_temperature if temperature is None else temperature,
        "max_tokens": max_tokens or settings.ai_max_tokens,
        "json_mode": json_mode,
    }

    logger.debug("AI call: provider=%s model=%s messages=%d", provider.value, model, len(messages))
    if provider is AIProvider.ANTHROPIC:
        return await _anthropic_chat(messages, model, **options)
    return await _openai_chat(messages, model, **options)


@_transport_retry("OpenAI")
async def _openai_chat(
    messages: list[dict],
    model: str,
    *,
    temperature: float,
    max_tokens: int,
    json_mode: bool,
) -> str:
    import openai

    request: dict = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        request["response_format"] = {"type": "json_object"}

    try:
        client = openai.AsyncOpenAI(api_key=settings.api_key)
        response = await client.chat.completions.create(**request)
    except openai.OpenAIError as exc:
        raise TransportFailure(f"OpenAI request failed: {exc}") from exc

    if not response.choices:
        raise TransportFailure("OpenAI returned no choices")
    return response.choices[0].message.content or ""


def _split_system(messages: list[dict], json_mode: bool) -> tuple[str, list[dict]]:
    """Anthropic takes system text as a parameter rather than a message."""
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    if json_mode:
        system_parts.append(_JSON_ONLY_SYSTEM)
    turns = [{"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"]
    return "\n".join(system_parts).strip(), turns


@_transport_retry("Anthropic")
async def _anthropic_chat(
    messages: list[dict],
    model: str,
    *,
    temperature: float,
    max_tokens: int,
    json_mode: bool,
) -> str:
    import anthropic

    system, turns = _split_system(messages, json_mode)
    request: dict = {
        "model": model,
        "messages": turns,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if system:
        request["system"] = system

    try:
        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        response = await client.messages.create(**request)
    except anthropic.AnthropicError as exc:
        raise TransportFailure(f"Anthropic request failed: {exc}") from exc

    return "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
