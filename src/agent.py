"""
Architecture FMEA Agent — uses the Anthropic Python SDK to run the AI-backed analysis.

The architecture description is sent to Claude, which returns a JSON object of
failure modes and recommendations. Scores are validated and RPN / priority are
derived locally; nothing in the reply is trusted for those two fields.
There is no retry and no local fallback: API and parsing failures propagate.
"""

from __future__ import annotations

import json
import logging
import re

import anthropic
from pydantic import ValidationError

from config import AgentConfig
from fmea_schema import AnalysisResult, ArchitectureInput, FailureMode, risk_id
from prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("component", "failureMode", "effect", "cause", "category")
_SCORE_FIELDS = ("severity", "occurrence", "detection")
_INTEGER_RE = re.compile(r"[+-]?\d+")


class AnalysisError(ValueError):
    """Raised when the model reply is empty or does not match the expected JSON shape."""


def run_fmea_agent(input_data: ArchitectureInput, config: AgentConfig) -> AnalysisResult:
    """
    Execute an architecture FMEA with Claude.

    Args:
        input_data: Validated ArchitectureInput (architecture, context, depth).
        config: AgentConfig carrying the API key, model and token budget.

    Returns:
        AnalysisResult sorted by RPN; the reply is not truncated to the depth.

    Raises:
        AnalysisError: If Claude returns an empty, unparseable or malformed reply.
        InvalidScoreError: If a failure mode carries a score outside 1–10.
        anthropic.APIError: On API communication failures.
    """
    client = anthropic.Anthropic(api_key=config.api_key)

    logger.info("Calling %s (depth=%s)...", config.model, input_data.depth)

    message = client.messages.create(
        model=config.model,
        max_tokens=config.max_tokens,
        system=SYSTEM_PROMPT,
        messages=[
            {"role": "user", "content": build_user_prompt(input_data)},
        ],
    )

    if not message.content or not getattr(message.content[0], "text", None):
        raise AnalysisError("No content in API response")

    raw_content = message.content[0].text.strip()
    logger.info("Received response (%d chars). Parsing...", len(raw_content))

    failure_modes, recommendations = parse_analysis_response(raw_content)

    logger.info("Validated %d failure modes.", len(failure_modes))

    return AnalysisResult.from_failure_modes(failure_modes, recommendations, input_data.depth)


def parse_analysis_response(raw: str) -> tuple[list[FailureMode], list[str]]:
    """
    Extract the JSON object from Claude's reply and build scored failure modes.

    Claude is instructed to return only JSON, but may occasionally wrap it in
    markdown fences; those are stripped before parsing.
    """
    cleaned = re.sub(r"^```(?:json)?\s*", "", raw, flags=re.MULTILINE)
    cleaned = re.sub(r"\s*```$", "", cleaned, flags=re.MULTILINE)
    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1:
        raise AnalysisError(
            f"Claude response does not contain a JSON object.\n"
            f"Response (first 500 chars): {raw[:500]}"
        )

    json_str = cleaned[start : end + 1]

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Failed to parse JSON from Claude response: {e}\nJSON: {json_str[:500]}") from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("failureModes"), list):
        raise AnalysisError("Expected a JSON object with a 'failureModes' array")

    recommendations = parsed.get("recommendations") or []
    if not isinstance(recommendations, list):
        raise AnalysisError("'recommendations' must be an array of strings")

    failure_modes = [
        _build_failure_mode(index, raw_entry)
        for index, raw_entry in enumerate(parsed["failureModes"], start=1)
    ]
    return failure_modes, [str(r) for r in recommendations]


def _score(index: int, name: str, value: object) -> int:
    """Exact integers only; whole-number floats and digit strings are accepted as such."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise AnalysisError(f"Failure mode {index}: scores must be integers, got {name}={value!r}")


def _build_failure_mode(index: int, raw_entry: object) -> FailureMode:
    if not isinstance(raw_entry, dict):
        raise AnalysisError(f"Failure mode {index}: expected an object, got {type(raw_entry).__name__}")

    try:
        fields = {name: raw_entry[name] for name in _REQUIRED_FIELDS}
        scores = {name: _score(index, name, raw_entry[name]) for name in _SCORE_FIELDS}
    except KeyError as e:
        raise AnalysisError(f"Failure mode {index}: missing field {e}") from e

    mitigations = {}
    for key in ("tacticalMitigation", "strategicMitigation"):
        value = raw_entry.get(key) or []
        if not isinstance(value, list):
            raise AnalysisError(f"Failure mode {index}: '{key}' must be an array of strings")
        mitigations[key] = value

    try:
        # InvalidScoreError from calculate_rpn is not caught here.
        return FailureMode.create(
            id=raw_entry.get("id") or risk_id(index),
            component=fields["component"],
            failure_mode=fields["failureMode"],
            effect=fields["effect"],
            cause=fields["cause"],
            category=fields["category"],
            tactical_mitigation=mitigations["tacticalMitigation"],
            strategic_mitigation=mitigations["strategicMitigation"],
            **scores,
        )
    except ValidationError as e:
        raise AnalysisError(f"Failure mode {index}: {e}") from e
