"""
Unit tests for the FMEA data model.

Tests cover:
  - FailureMode construction, derived RPN / priority and their consistency checks
  - ScoreTriple range validation
  - AnalysisSummary statistics
  - AnalysisResult ranking and depth capping
  - camelCase JSON aliases

Run with:
  pytest tests/
  pytest tests/ -v
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fmea_schema import (
    RISK_CATEGORIES,
    AnalysisResult,
    AnalysisSummary,
    ArchitectureInput,
    FailureMode,
    ScoreTriple,
    risk_id,
)
from rpn import InvalidScoreError


def make_failure_mode(s=5, o=3, d=4, index=1, category="Availability", **kwargs) -> FailureMode:
    defaults = dict(
        id=risk_id(index),
        component="API",
        failure_mode="Rate limiting not implemented",
        effect="API overwhelmed",
        cause="Missing rate limiting middleware",
        severity=s,
        occurrence=o,
        detection=d,
        category=category,
        tactical_mitigation=["Add basic IP-based rate limiting"],
        strategic_mitigation=["Add API gateway with throttling"],
    )
    defaults.update(kwargs)
    return FailureMode.create(**defaults)


# ── ScoreTriple ───────────────────────────────────────────────────────────────

class TestScoreTriple:
    def test_valid_triple(self):
        triple = ScoreTriple(severity=9, occurrence=4, detection=7)
        assert (triple.severity, triple.occurrence, triple.detection) == (9, 4, 7)

    @pytest.mark.parametrize("field", ["severity", "occurrence", "detection"])
    @pytest.mark.parametrize("value", [0, 11, -1])
    def test_out_of_range_rejected(self, field, value):
        scores = {"severity": 5, "occurrence": 5, "detection": 5, field: value}
        with pytest.raises(ValidationError):
            ScoreTriple(**scores)

    def test_immutable(self):
        triple = ScoreTriple(severity=1, occurrence=2, detection=3)
        with pytest.raises(ValidationError):
            triple.severity = 4


# ── FailureMode ───────────────────────────────────────────────────────────────

class TestFailureMode:
    def test_create_derives_rpn_and_priority(self):
        fm = make_failure_mode(s=9, o=4, d=7)
        assert fm.rpn == 252
        assert fm.priority == "Critical"

    def test_create_low_band(self):
        fm = make_failure_mode(s=5, o=3, d=4)
        assert fm.rpn == 60
        assert fm.priority == "Low"

    def test_scores_property(self):
        fm = make_failure_mode(s=6, o=5, d=4)
        assert fm.scores == ScoreTriple(severity=6, occurrence=5, detection=4)

    def test_create_rejects_out_of_range_score(self):
        with pytest.raises(InvalidScoreError, match="Severity"):
            make_failure_mode(s=11)

    def test_create_rejects_zero_detection(self):
        with pytest.raises(InvalidScoreError, match="Detection"):
            make_failure_mode(d=0)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            make_failure_mode(category="Reliability")

    def test_all_categories_accepted(self):
        assert len(RISK_CATEGORIES) == 10
        for category in RISK_CATEGORIES:
            assert make_failure_mode(category=category).category == category

    def test_mitigations_default_to_empty(self):
        fm = make_failure_mode(tactical_mitigation=None, strategic_mitigation=None)
        assert fm.tactical_mitigation == []
        assert fm.strategic_mitigation == []

    def test_rpn_inconsistency_raises(self):
        with pytest.raises(ValidationError):
            FailureMode(
                id="RISK-001",
                component="X",
                failure_mode="Z",
                effect="E",
                cause="C",
                severity=5,
                occurrence=3,
                detection=4,
                rpn=99,  # should be 60
                priority="Low",
                category="Security",
            )

    def test_priority_inconsistency_raises(self):
        with pytest.raises(ValidationError):
            FailureMode(
                id="RISK-001",
                component="X",
                failure_mode="Z",
                effect="E",
                cause="C",
                severity=9,
                occurrence=9,
                detection=9,
                rpn=729,  # correct
                priority="Low",  # should be Critical
                category="Security",
            )

    def test_immutable(self):
        fm = make_failure_mode()
        with pytest.raises(ValidationError):
            fm.rpn = 1

    def test_dump_uses_camel_case_aliases(self):
        data = make_failure_mode().model_dump(by_alias=True)
        assert "failureMode" in data
        assert "tacticalMitigation" in data
        assert "strategicMitigation" in data
        assert "failure_mode" not in data

    def test_accepts_camel_case_input(self):
        fm = make_failure_mode()
        assert FailureMode.model_validate(fm.model_dump(by_alias=True)) == fm


# ── ArchitectureInput ─────────────────────────────────────────────────────────

class TestArchitectureInput:
    def test_default_depth(self):
        assert ArchitectureInput(architecture="API and database").depth == "standard"

    def test_invalid_depth(self):
        with pytest.raises(ValidationError):
            ArchitectureInput(architecture="API", depth="exhaustive")

    def test_empty_architecture_rejected(self):
        with pytest.raises(ValidationError):
            ArchitectureInput(architecture="")


# ── AnalysisSummary ───────────────────────────────────────────────────────────

class TestAnalysisSummary:
    def _make(self, triples, categories=None):
        categories = categories or ["Availability"] * len(triples)
        return [
            make_failure_mode(s, o, d, index=i + 1, category=categories[i])
            for i, (s, o, d) in enumerate(triples)
        ]

    def test_empty(self):
        summary = AnalysisSummary.from_failure_modes([])
        assert summary.total_risks == 0
        assert summary.top_risk_areas == []

    def test_counts_by_band(self):
        # 252 critical, 150 medium, 75 low, 24 minimal
        fms = self._make([(9, 4, 7), (5, 5, 6), (5, 5, 3), (2, 3, 4)])
        summary = AnalysisSummary.from_failure_modes(fms)
        assert summary.total_risks == 4
        assert summary.critical_risks == 1
        assert summary.medium_risks == 1
        assert summary.low_risks == 1
        assert summary.minimal_risks == 1

    def test_band_counts_partition_total(self):
        fms = self._make([(10, 10, 10), (1, 1, 1), (5, 5, 4), (5, 5, 2), (4, 4, 3), (10, 5, 4)])
        s = AnalysisSummary.from_failure_modes(fms)
        assert s.critical_risks + s.medium_risks + s.low_risks + s.minimal_risks == s.total_risks

    def test_top_risk_areas_from_first_five_unique(self):
        categories = ["Security", "Availability", "Security", "Performance", "Availability", "Networking"]
        fms = self._make([(5, 5, 5)] * 6, categories)
        summary = AnalysisSummary.from_failure_modes(fms)
        assert summary.top_risk_areas == ["Security", "Availability", "Performance"]


# ── AnalysisResult ────────────────────────────────────────────────────────────

class TestAnalysisResult:
    def test_ranked_by_rpn_descending_with_stable_ties(self):
        fms = [
            make_failure_mode(2, 2, 2, index=1),
            make_failure_mode(10, 2, 8, index=2),
            make_failure_mode(8, 4, 5, index=3),
            make_failure_mode(9, 4, 7, index=4),
        ]
        result = AnalysisResult.from_failure_modes(fms, ["Fix it"], "standard")
        assert [fm.id for fm in result.failure_modes] == ["RISK-004", "RISK-002", "RISK-003", "RISK-001"]

    def test_limit_applied_after_sorting(self):
        fms = [make_failure_mode(1, 1, i, index=i) for i in range(1, 11)]
        result = AnalysisResult.from_failure_modes(fms, [], "quick", limit=3)
        assert [fm.rpn for fm in result.failure_modes] == [10, 9, 8]
        assert result.summary.total_risks == 3

    def test_timestamp_is_utc_iso(self):
        result = AnalysisResult.from_failure_modes([], [], "deep")
        assert result.timestamp.endswith("Z")
        assert "T" in result.timestamp

    def test_dump_keys(self):
        result = AnalysisResult.from_failure_modes([make_failure_mode()], ["Fix it"], "quick")
        data = result.model_dump(by_alias=True)
        assert set(data) == {"summary", "failureModes", "recommendations", "analysisDepth", "timestamp"}
        assert data["summary"]["totalRisks"] == 1
        assert data["analysisDepth"] == "quick"


def test_risk_id_zero_padded():
    assert risk_id(1) == "RISK-001"
    assert risk_id(42) == "RISK-042"
    assert risk_id(123) == "RISK-123"
