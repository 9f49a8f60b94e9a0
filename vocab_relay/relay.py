"""Render prompts, call the completion provider, decode what comes back."""
from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from vocab_relay.errors import MalformedProviderResponse, UpstreamFailure
from vocab_relay.models import Decoded, GeneratedQuestion, ScoreResult
from vocab_relay.prompts import (
    GENERATE_QUESTION_PROMPT,
    GENERATE_QUESTION_TOOL,
    GENERATE_QUESTION_TOOLS,
    QUESTION_FIELDS,
    SCORE_USER_ANSWER_PROMPT,
    render_template,
)

if TYPE_CHECKING:
    from vocab_relay.providers.base import LLMProvider

_log = logging.getLogger("vocab_relay.relay")

EXPECTED_USAGES = 3
SCORE_KEYS = ("similarityScore", "score")


def _extract_json(text: str | None) -> Decoded:
    """Decode a model reply that is supposed to be pure JSON.

    ``<think>`` blocks and a single surrounding code fence are tolerated;
    anything else around the JSON is not.
    """
    if text is None:
        return Decoded.failure("provider returned no message content")
    text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()
    m = re.fullmatch(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL)
    if m:
        text = m.group(1)
    try:
        return Decoded.success(json.loads(text))
    except json.JSONDecodeError as e:
        return Decoded.failure(f"response is not valid JSON ({e.msg}): {text[:80]!r}")


def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _validate_question(data) -> str | None:
    """Return ``None`` if *data* carries all four question fields, else a reason."""
    if not isinstance(data, dict):
        return f"tool arguments must be an object, got {type(data).__name__}"
    missing = [f for f in QUESTION_FIELDS if f not in data]
    if missing:
        return f"missing fields: {', '.join(missing)}"
    for key in ("word", "definition"):
        if not isinstance(data[key], str) or not data[key].strip():
            return f"{key} must be a non-empty string"
    for key in ("multipleChoiceSiblingDefinitions", "exampleUsages"):
        if not _is_str_list(data[key]):
            return f"{key} must be a list of strings"
    return None


def decode_question(arguments: str) -> Decoded:
    parsed = _extract_json(arguments)
    if not parsed.ok:
        return parsed
    reason = _validate_question(parsed.value)
    if reason:
        return Decoded.failure(reason)
    data = parsed.value
    return Decoded.success(GeneratedQuestion(
        word=data["word"],
        definition=data["definition"],
        distractor_definitions=data["multipleChoiceSiblingDefinitions"],
        example_usages=data["exampleUsages"],
    ))


def decode_score(text: str | None) -> Decoded:
    parsed = _extract_json(text)
    if not parsed.ok:
        return parsed
    data = parsed.value
    if not isinstance(data, dict):
        return Decoded.failure(f"expected a JSON object, got {type(data).__name__}")
    key = next((k for k in SCORE_KEYS if k in data), None)
    if key is None:
        return Decoded.failure(f"missing fields: {' or '.join(SCORE_KEYS)}")
    score = data[key]
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return Decoded.failure(f"{key} must be a number (got {score!r})")
    if not 0 <= score <= 1:
        return Decoded.failure(f"{key} out of range [0, 1]: {score}")
    return Decoded.success(ScoreResult(score=score))


async def generate_question(
    llm: LLMProvider,
    domain: str | None,
    seen_words: list[str] | None = None,
) -> GeneratedQuestion:
    """Ask the model for one new word in *domain*, avoiding *seen_words*.

    The model is required to answer through the ``generate_vocabulary_word``
    tool; the first call's arguments are decoded and validated.
    """
    seen_words = list(seen_words or [])
    prompt = render_template(GENERATE_QUESTION_PROMPT, {
        "domain": domain,
        "seenWords": json.dumps(seen_words),
    })

    _log.info("Generate question (domain=%r, %d seen words)", domain, len(seen_words))
    try:
        completion = await llm.complete(
            prompt, tools=GENERATE_QUESTION_TOOLS, tool_name=GENERATE_QUESTION_TOOL,
        )
    except Exception as e:
        raise UpstreamFailure(str(e) or type(e).__name__) from e

    if not completion.tool_calls:
        raise MalformedProviderResponse("provider did not call the question tool")

    decoded = decode_question(completion.tool_calls[0].arguments)
    if not decoded.ok:
        raise MalformedProviderResponse(decoded.error)

    question: GeneratedQuestion = decoded.value
    if len(question.example_usages) != EXPECTED_USAGES:
        _log.warning("  Expected %d example usages, got %d",
                     EXPECTED_USAGES, len(question.example_usages))
    if question.word.lower() in {w.lower() for w in seen_words if isinstance(w, str)}:
        _log.warning("  Model repeated an excluded word: %r", question.word)
    _log.info("  Generated %r", question.word)
    return question


async def score_user_answer(
    llm: LLMProvider,
    domain: str | None,
    word: str | None,
    user_answer: str | None,
) -> ScoreResult:
    """Have the model grade *user_answer* as a definition of *word*."""
    prompt = render_template(SCORE_USER_ANSWER_PROMPT, {
        "domain": domain,
        "word": word,
        "userAnswer": user_answer,
    })

    _log.info("Score answer for %r", word)
    try:
        completion = await llm.complete(prompt)
    except Exception as e:
        raise UpstreamFailure(str(e) or type(e).__name__) from e

    decoded = decode_score(completion.text)
    if not decoded.ok:
        raise MalformedProviderResponse(decoded.error)
    _log.info("  Score %.2f", decoded.value.score)
    return decoded.value
