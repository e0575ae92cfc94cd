"""
FMEA Data Models — Pydantic schemas for input, failure modes, and analysis output.

Attributes are snake_case; JSON uses camelCase aliases (failureMode,
tacticalMitigation, totalRisks, ...) so the worksheet output and the AI reply
schema share one shape. Models accept either spelling on input.

RPN and priority are always derived:
  rpn      = severity × occurrence × detection
  priority = priority_band(rpn).level
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from rpn import PriorityLevel, calculate_rpn, priority_band

Depth = Literal["quick", "standard", "deep"]
WorksheetFormat = Literal["json", "markdown", "csv"]

RiskCategory = Literal[
    "Availability",
    "Security",
    "Data Integrity",
    "Performance",
    "Scalability",
    "Observability",
    "Configuration",
    "Dependencies",
    "Networking",
    "Authentication",
]

RISK_CATEGORIES: tuple[str, ...] = get_args(RiskCategory)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ArchitectureInput(_FrozenModel):
    """Input contract for an architecture analysis."""
    architecture: str = Field(..., min_length=1, description="Free-text architecture description")
    context: Optional[str] = Field(
        default=None,
        description="Business criticality, compliance needs or areas of concern",
    )
    depth: Depth = Field(default="standard", description="Analysis depth")


class ScoreTriple(_FrozenModel):
    """Severity, Occurrence and Detection ratings, each 1–10."""
    severity: int = Field(..., ge=1, le=10)
    occurrence: int = Field(..., ge=1, le=10)
    detection: int = Field(..., ge=1, le=10)


class FailureMode(_FrozenModel):
    """A single row in the FMEA worksheet."""
    id: str = Field(..., description="Identifier unique within a result, e.g. RISK-001")
    component: str
    failure_mode: str = Field(..., description="How the component could fail")
    effect: str = Field(..., description="Impact on the system or its users")
    cause: str = Field(..., description="Root cause of the failure")
    severity: int = Field(..., ge=1, le=10)
    occurrence: int = Field(..., ge=1, le=10)
    detection: int = Field(..., ge=1, le=10)
    rpn: int = Field(..., ge=1, le=1000, description="Risk Priority Number = S × O × D")
    priority: PriorityLevel
    category: RiskCategory
    tactical_mitigation: list[str] = Field(default_factory=list, description="Do now")
    strategic_mitigation: list[str] = Field(default_factory=list, description="Plan for later")

    @model_validator(mode="after")
    def validate_rpn_consistency(self) -> "FailureMode":
        expected_rpn = self.severity * self.occurrence * self.detection
        if self.rpn != expected_rpn:
            raise ValueError(
                f"RPN {self.rpn} does not match S×O×D = "
                f"{self.severity}×{self.occurrence}×{self.detection} = {expected_rpn}"
            )
        expected_priority = priority_band(self.rpn).level
        if self.priority != expected_priority:
            raise ValueError(
                f"priority '{self.priority}' does not match expected '{expected_priority}' for RPN={self.rpn}"
            )
        return self

    @property
    def scores(self) -> ScoreTriple:
        return ScoreTriple(
            severity=self.severity,
            occurrence=self.occurrence,
            detection=self.detection,
        )

    @classmethod
    def create(
        cls,
        id: str,
        component: str,
        failure_mode: str,
        effect: str,
        cause: str,
        severity: int,
        occurrence: int,
        detection: int,
        category: str,
        tactical_mitigation: Optional[list[str]] = None,
        strategic_mitigation: Optional[list[str]] = None,
    ) -> "FailureMode":
        """Factory method that derives RPN and priority (raises InvalidScoreError on bad scores)."""
        rpn = calculate_rpn(severity, occurrence, detection)
        return cls(
            id=id,
            component=component,
            failure_mode=failure_mode,
            effect=effect,
            cause=cause,
            severity=severity,
            occurrence=occurrence,
            detection=detection,
            rpn=rpn,
            priority=priority_band(rpn).level,
            category=category,
            tactical_mitigation=list(tactical_mitigation or []),
            strategic_mitigation=list(strategic_mitigation or []),
        )


class AnalysisSummary(_FrozenModel):
    """Aggregate statistics over the failure modes of one analysis."""
    total_risks: int
    critical_risks: int
    medium_risks: int
    low_risks: int
    minimal_risks: int
    top_risk_areas: list[str]

    @classmethod
    def from_failure_modes(cls, failure_modes: list[FailureMode]) -> "AnalysisSummary":
        counts = {"Critical": 0, "Medium": 0, "Low": 0, "Minimal": 0}
        for fm in failure_modes:
            counts[priority_band(fm.rpn).level] += 1
        # Unique categories of the five highest-ranked entries, first-seen order.
        top_areas = list(dict.fromkeys(fm.category for fm in failure_modes[:5]))
        return cls(
            total_risks=len(failure_modes),
            critical_risks=counts["Critical"],
            medium_risks=counts["Medium"],
            low_risks=counts["Low"],
            minimal_risks=counts["Minimal"],
            top_risk_areas=top_areas,
        )


class AnalysisResult(_FrozenModel):
    """Full output of one architecture analysis."""
    summary: AnalysisSummary
    failure_modes: list[FailureMode]
    recommendations: list[str]
    analysis_depth: Depth
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp, e.g. 2026-10-19T08:30:00.000Z")

    @classmethod
    def from_failure_modes(
        cls,
        failure_modes: list[FailureMode],
        recommendations: list[str],
        depth: Depth,
        limit: Optional[int] = None,
    ) -> "AnalysisResult":
        """Rank by RPN (descending, ties keep input order), cap at limit, and summarize."""
        ranked = sorted(failure_modes, key=lambda fm: fm.rpn, reverse=True)
        if limit is not None:
            ranked = ranked[:limit]
        return cls(
            summary=AnalysisSummary.from_failure_modes(ranked),
            failure_modes=ranked,
            recommendations=list(recommendations),
            analysis_depth=depth,
            timestamp=utc_timestamp(),
        )


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def risk_id(index: int) -> str:
    """1-based sequence id: 7 -> 'RISK-007'."""
    return f"RISK-{index:03d}"
