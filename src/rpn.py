"""
RPN (Risk Priority Number) Calculator.

RPN = Severity × Occurrence × Detection, each axis scored 1–10.
Priority bands used to rank failure modes:
  - Critical: RPN ≥ 200   (fix this sprint, escalate to leadership)
  - Medium:   RPN 100–199 (plan within quarter)
  - Low:      RPN 50–99   (add to backlog)
  - Minimal:  RPN < 50    (document and monitor)
"""

from __future__ import annotations

import math
from typing import Literal, NamedTuple, Optional

MIN_SCORE = 1
MAX_SCORE = 10

PriorityLevel = Literal["Critical", "Medium", "Low", "Minimal"]


class InvalidScoreError(ValueError):
    """Raised when a Severity, Occurrence or Detection score is outside 1–10."""


class MissingBaselineError(ValueError):
    """Raised when a mitigated RPN is requested without the current scores."""


class PriorityBand(NamedTuple):
    level: PriorityLevel
    action: str
    color: str


class MitigatedRPN(NamedTuple):
    new_rpn: int
    reduction: int
    reduction_percent: int


# (lower bound, band) pairs, highest first.
PRIORITY_BANDS: tuple[tuple[int, PriorityBand], ...] = (
    (200, PriorityBand("Critical", "Fix this sprint, escalate to leadership", "red")),
    (100, PriorityBand("Medium", "Plan within quarter", "orange")),
    (50, PriorityBand("Low", "Add to backlog", "yellow")),
    (0, PriorityBand("Minimal", "Document and monitor", "green")),
)

# Phrases for the ≥10, ≥7, ≥4 and remaining tiers of each axis.
SEVERITY_SCALE = (
    "Catastrophic - complete service failure",
    "Major - significant customer impact",
    "Moderate - degraded experience",
    "Minor - barely noticeable",
)
OCCURRENCE_SCALE = (
    "Constant - happens daily",
    "Frequent - weekly",
    "Occasional - monthly",
    "Rare - annually or never",
)
DETECTION_SCALE = (
    "No detection - customers report it",
    "Poor - usually miss it",
    "Moderate - sometimes catch it",
    "Good - almost always catch it first",
)
SCALE_TIERS = ("10", "7-9", "4-6", "1-3")


def _validate_score(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScoreError(f"{name} must be an integer between 1 and 10, got {value!r}")
    if value < MIN_SCORE or value > MAX_SCORE:
        raise InvalidScoreError(f"{name} must be between 1 and 10, got {value}")


def calculate_rpn(severity: int, occurrence: int, detection: int) -> int:
    """RPN = S × O × D. Raises InvalidScoreError for any score outside 1–10."""
    _validate_score("Severity", severity)
    _validate_score("Occurrence", occurrence)
    _validate_score("Detection", detection)
    return severity * occurrence * detection


def priority_band(rpn: int) -> PriorityBand:
    """Map an RPN to its priority band and recommended action."""
    for lower_bound, band in PRIORITY_BANDS:
        if rpn >= lower_bound:
            return band
    return PRIORITY_BANDS[-1][1]


def _describe(score: int, scale: tuple[str, str, str, str]) -> str:
    if score >= 10:
        return scale[0]
    if score >= 7:
        return scale[1]
    if score >= 4:
        return scale[2]
    return scale[3]


def severity_description(score: int) -> str:
    return _describe(score, SEVERITY_SCALE)


def occurrence_description(score: int) -> str:
    return _describe(score, OCCURRENCE_SCALE)


def detection_description(score: int) -> str:
    return _describe(score, DETECTION_SCALE)


def mitigated_rpn(
    current_rpn: int,
    current_scores,
    severity: Optional[int] = None,
    occurrence: Optional[int] = None,
    detection: Optional[int] = None,
) -> MitigatedRPN:
    """
    Recompute the RPN after mitigations change one or more axes.

    Args:
        current_rpn: RPN before mitigation, used as the reduction baseline.
        current_scores: ScoreTriple (or anything with severity/occurrence/detection
            attributes) holding the scores before mitigation.
        severity, occurrence, detection: Optional replacement scores.

    Raises:
        MissingBaselineError: If current_scores is None.
        InvalidScoreError: If current_rpn is outside 1–1000 or any resulting
            score is outside 1–10.
    """
    if current_scores is None:
        raise MissingBaselineError("Current scores required to calculate mitigated RPN")
    max_rpn = MAX_SCORE ** 3
    if isinstance(current_rpn, bool) or not isinstance(current_rpn, int) or not 1 <= current_rpn <= max_rpn:
        raise InvalidScoreError(f"Current RPN must be between 1 and {max_rpn}, got {current_rpn!r}")

    s = severity if severity is not None else current_scores.severity
    o = occurrence if occurrence is not None else current_scores.occurrence
    d = detection if detection is not None else current_scores.detection

    new_rpn = calculate_rpn(s, o, d)
    reduction = current_rpn - new_rpn
    # Half-up rounding, so 12.5% reports as 13%.
    reduction_percent = int(math.floor(reduction / current_rpn * 100 + 0.5))
    return MitigatedRPN(new_rpn=new_rpn, reduction=reduction, reduction_percent=reduction_percent)


def rpn_report(
    severity: int,
    occurrence: int,
    detection: int,
    failure_mode: Optional[str] = None,
) -> dict:
    """Score a single failure mode and explain the result."""
    rpn = calculate_rpn(severity, occurrence, detection)
    band = priority_band(rpn)
    return {
        "failure_mode": failure_mode or "Unspecified",
        "scores": {
            "severity": severity,
            "occurrence": occurrence,
            "detection": detection,
        },
        "rpn": rpn,
        "priority": band.level,
        "action": band.action,
        "rpn_breakdown": f"{severity} × {occurrence} × {detection} = {rpn}",
        "descriptions": {
            "severity": severity_description(severity),
            "occurrence": occurrence_description(occurrence),
            "detection": detection_description(detection),
        },
    }
