"""
Tests for the command-line entrypoint and AgentConfig.

Every invocation passes a file, '-' with a patched stdin, or --example so the
real terminal is never read.
"""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, AgentConfig
from main import EXAMPLE_ARCHITECTURE, build_parser, main


@pytest.fixture
def arch_file(tmp_path) -> Path:
    path = tmp_path / "arch.txt"
    path.write_text("Web app with a REST API, Redis cache and MongoDB\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


# ── AgentConfig ───────────────────────────────────────────────────────────────

class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()
        assert config.model == DEFAULT_MODEL
        assert config.max_tokens == DEFAULT_MAX_TOKENS
        assert not config.has_credentials

    def test_from_env(self):
        config = AgentConfig.from_env(
            {"ANTHROPIC_API_KEY": "sk-abc", "PRISMO_MODEL": "claude-x", "PRISMO_MAX_TOKENS": "2048"}
        )
        assert config.has_credentials
        assert config.model == "claude-x"
        assert config.max_tokens == 2048

    def test_empty_env_selects_demo(self):
        config = AgentConfig.from_env({"ANTHROPIC_API_KEY": ""})
        assert config.api_key is None
        assert not config.has_credentials

    def test_without_credentials(self):
        config = AgentConfig(api_key="sk-abc", model="claude-x").without_credentials()
        assert config.api_key is None
        assert config.model == "claude-x"

    def test_non_numeric_max_tokens(self):
        with pytest.raises(ValidationError):
            AgentConfig.from_env({"PRISMO_MAX_TOKENS": "lots"})

    def test_key_hidden_from_repr(self):
        assert "sk-secret" not in repr(AgentConfig(api_key="sk-secret"))

    def test_invalid_max_tokens(self):
        with pytest.raises(ValidationError):
            AgentConfig(max_tokens=0)


# ── rpn ───────────────────────────────────────────────────────────────────────

class TestRPNCommand:
    def test_reference_scores(self, capsys):
        assert main(["rpn", "9", "4", "7", "--failure-mode", "Secret expiration not monitored"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["rpn"] == 252
        assert report["priority"] == "Critical"
        assert report["rpn_breakdown"] == "9 × 4 × 7 = 252"
        assert report["failure_mode"] == "Secret expiration not monitored"
        assert "mitigation" not in report

    def test_mitigation_targets(self, capsys):
        assert main(["rpn", "9", "4", "7", "--target-detection", "3"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["mitigation"] == {
            "new_rpn": 108,
            "new_priority": "Medium",
            "reduction": 144,
            "reduction_percent": 57,
        }

    def test_out_of_range_score(self, capsys):
        assert main(["rpn", "11", "4", "7"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ERROR: Severity must be between 1 and 10" in captured.err

    def test_out_of_range_target(self, capsys):
        assert main(["rpn", "9", "4", "7", "--target-occurrence", "0"]) == 1
        assert "Occurrence" in capsys.readouterr().err

    def test_non_integer_score_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            main(["rpn", "high", "4", "7"])
        assert exc.value.code == 2


# ── analyze ───────────────────────────────────────────────────────────────────

class TestAnalyzeCommand:
    def test_example_quick(self, capsys):
        assert main(["--demo", "analyze", "--example", "--depth", "quick"]) == 0
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert data["analysisDepth"] == "quick"
        assert len(data["failureModes"]) == 8
        rpns = [fm["rpn"] for fm in data["failureModes"]]
        assert rpns == sorted(rpns, reverse=True)
        assert "PRE-MORTEM COMPLETE (quick)" in captured.err

    def test_from_file(self, capsys, arch_file):
        assert main(["analyze", str(arch_file), "--context", "Customer-facing"]) == 0
        data = json.loads(capsys.readouterr().out)
        components = {fm["component"] for fm in data["failureModes"]}
        assert {"REST-API", "REDIS", "MONGODB"} <= components

    def test_from_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("Kafka queue feeding a Postgres database"))
        assert main(["--demo", "analyze", "-"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert "KAFKA" in {fm["component"] for fm in data["failureModes"]}

    def test_missing_file(self, capsys, tmp_path):
        assert main(["analyze", str(tmp_path / "missing.txt")]) == 1
        assert "ERROR:" in capsys.readouterr().err

    def test_bad_environment_reported_as_error(self, capsys, monkeypatch):
        monkeypatch.setenv("PRISMO_MAX_TOKENS", "lots")
        assert main(["--demo", "analyze", "--example"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "ERROR:" in captured.err
        assert "max_tokens" in captured.err

    def test_example_lists_each_risk_once(self, capsys):
        assert main(["--demo", "analyze", "--example", "--depth", "deep"]) == 0
        modes = [fm["failureMode"] for fm in json.loads(capsys.readouterr().out)["failureModes"]]
        assert len(modes) == len(set(modes))

    def test_output_file(self, capsys, tmp_path):
        out = tmp_path / "reports" / "analysis.json"
        assert main(["--demo", "--output", str(out), "analyze", "--example"]) == 0
        printed = capsys.readouterr().out
        assert out.read_text(encoding="utf-8") == printed
        assert json.loads(printed)["analysisDepth"] == "standard"


# ── fmea ──────────────────────────────────────────────────────────────────────

class TestFMEACommand:
    def test_csv_from_file(self, capsys, arch_file):
        assert main(["fmea", str(arch_file), "--format", "csv"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("ID,Component,Failure Mode")
        assert out.splitlines()[0].endswith("Tactical Mitigations,Strategic Mitigations")

    def test_csv_without_mitigations(self, capsys, arch_file):
        assert main(["fmea", str(arch_file), "--format", "csv", "--no-mitigations"]) == 0
        assert capsys.readouterr().out.splitlines()[0].endswith("Priority,Category")

    def test_markdown_default(self, capsys):
        assert main(["--demo", "fmea", "--example"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("# FMEA Worksheet - Prismo Analysis")
        assert "**Analysis Depth:** standard" in out
        assert "## Mitigation Details" in out

    def test_json_without_mitigations(self, capsys, arch_file):
        assert main(["fmea", str(arch_file), "--format", "json", "--no-mitigations"]) == 0
        out = capsys.readouterr().out
        assert "tacticalMitigation" not in out
        assert json.loads(out)["summary"]["totalRisks"] > 0

    def test_unknown_format_is_usage_error(self, arch_file):
        with pytest.raises(SystemExit):
            main(["fmea", str(arch_file), "--format", "xlsx"])


# ── methodology ───────────────────────────────────────────────────────────────

def test_methodology_command(capsys):
    assert main(["methodology"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("# Prismo Pre-Mortem Methodology")
    assert "| 100-199 | Medium | Plan within quarter |" in out


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_example_architecture_mentions_every_demo_component():
    for keyword in ("Web App", "REST API", "Redis", "MongoDB", "Key Vault"):
        assert keyword in EXAMPLE_ARCHITECTURE
