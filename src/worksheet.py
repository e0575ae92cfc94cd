"""
FMEA Worksheet Generator — serializes an AnalysisResult as JSON, CSV or Markdown.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Optional, get_args

from analyzer import analyze_architecture
from config import AgentConfig
from fmea_schema import AnalysisResult, ArchitectureInput, WorksheetFormat
from ui.renderer import render_markdown_worksheet

WORKSHEET_FORMATS: tuple[str, ...] = get_args(WorksheetFormat)
MITIGATION_FIELDS = {"tactical_mitigation", "strategic_mitigation"}

CSV_HEADERS = [
    "ID",
    "Component",
    "Failure Mode",
    "Effect",
    "Cause",
    "Severity",
    "Occurrence",
    "Detection",
    "RPN",
    "Priority",
    "Category",
]
CSV_MITIGATION_HEADERS = ["Tactical Mitigations", "Strategic Mitigations"]
MITIGATION_SEPARATOR = "; "


def format_as_json(result: AnalysisResult, include_mitigations: bool = True) -> str:
    exclude = None
    if not include_mitigations:
        exclude = {"failure_modes": {"__all__": MITIGATION_FIELDS}}
    return json.dumps(result.model_dump(by_alias=True, exclude=exclude), indent=2)


def format_as_csv(result: AnalysisResult, include_mitigations: bool = True) -> str:
    """One row per failure mode; fields with commas, quotes or newlines are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)

    headers = list(CSV_HEADERS)
    if include_mitigations:
        headers.extend(CSV_MITIGATION_HEADERS)
    writer.writerow(headers)

    for fm in result.failure_modes:
        row = [
            fm.id,
            fm.component,
            fm.failure_mode,
            fm.effect,
            fm.cause,
            fm.severity,
            fm.occurrence,
            fm.detection,
            fm.rpn,
            fm.priority,
            fm.category,
        ]
        if include_mitigations:
            row.append(MITIGATION_SEPARATOR.join(fm.tactical_mitigation))
            row.append(MITIGATION_SEPARATOR.join(fm.strategic_mitigation))
        writer.writerow(row)

    return buffer.getvalue()[: -len("\n")]


def render_worksheet(result: AnalysisResult, fmt: str = "markdown", include_mitigations: bool = True) -> str:
    if fmt == "json":
        return format_as_json(result, include_mitigations)
    if fmt == "csv":
        return format_as_csv(result, include_mitigations)
    if fmt == "markdown":
        return render_markdown_worksheet(result, include_mitigations)
    raise ValueError(f"Unsupported worksheet format '{fmt}' (expected json, markdown or csv)")


def generate_worksheet(
    architecture: str,
    fmt: str = "markdown",
    include_mitigations: bool = True,
    config: Optional[AgentConfig] = None,
) -> str:
    """Analyze an architecture at standard depth and render the worksheet."""
    if fmt not in WORKSHEET_FORMATS:
        raise ValueError(f"Unsupported worksheet format '{fmt}' (expected json, markdown or csv)")
    result = analyze_architecture(
        ArchitectureInput(architecture=architecture, depth="standard"),
        config,
    )
    return render_worksheet(result, fmt, include_mitigations)
