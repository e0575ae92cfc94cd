"""
Markdown Renderer — converts an AnalysisResult into a Markdown FMEA worksheet.

Uses Jinja2 templating with the fmea_worksheet.md.j2 template. The ASCII risk
heatmap is built here and passed to the template as a preformatted block.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader

import rpn
from fmea_schema import AnalysisResult, FailureMode

_TEMPLATE_DIR = Path(__file__).parent
_WORKSHEET_TEMPLATE = "fmea_worksheet.md.j2"
_METHODOLOGY_TEMPLATE = "methodology.md.j2"

# (label, range, low, high), top row / left column first.
SEVERITY_ROWS = (
    ("HIGH", "(7-10)", 7, 10),
    ("MEDIUM", "(4-6)", 4, 6),
    ("LOW", "(1-3)", 1, 3),
)
OCCURRENCE_COLUMNS = (
    ("Unlikely", "(1-3)", 1, 3),
    ("Likely", "(4-6)", 4, 6),
    ("Certain", "(7-10)", 7, 10),
)
MAX_IDS_PER_CELL = 3
MIN_CELL_WIDTH = 10
_LABEL_WIDTH = 10
_AXIS_TITLE = "SEVERITY"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _severity_row(severity: int) -> int:
    if severity >= 7:
        return 0
    if severity >= 4:
        return 1
    return 2


def heatmap_cells(failure_modes: list[FailureMode]) -> list[list[list[str]]]:
    """Ids per (severity row, occurrence column), at most three per cell, in list order."""
    cells: list[list[list[str]]] = [[[] for _ in OCCURRENCE_COLUMNS] for _ in SEVERITY_ROWS]
    for fm in failure_modes:
        row = cells[_severity_row(fm.severity)]
        for col, (_, _, low, high) in enumerate(OCCURRENCE_COLUMNS):
            if low <= fm.occurrence <= high and len(row[col]) < MAX_IDS_PER_CELL:
                row[col].append(fm.id)
    return cells


def render_heatmap(failure_modes: list[FailureMode]) -> str:
    """Render the 3×3 severity/occurrence grid as a fenced text block."""
    text = [[", ".join(ids) for ids in row] for row in heatmap_cells(failure_modes)]
    width = max([MIN_CELL_WIDTH] + [len(cell) for row in text for cell in row])

    def columns(values) -> str:
        return "|" + "|".join(f" {value} " for value in values) + "|"

    gutter = " " * (_LABEL_WIDTH + 2)
    rule = "+" + "+".join("-" * (width + 2) for _ in OCCURRENCE_COLUMNS) + "+"
    blank = columns(" " * width for _ in OCCURRENCE_COLUMNS)

    lines = [
        "```",
        gutter + "PROBABILITY".center(len(rule)).rstrip(),
        gutter + rule,
        gutter + columns(name.center(width) for name, _, _, _ in OCCURRENCE_COLUMNS),
        gutter + columns(span.center(width) for _, span, _, _ in OCCURRENCE_COLUMNS),
        " +" + "-" * _LABEL_WIDTH + rule,
    ]

    body: list[str] = []
    for (label, span, _, _), row in zip(SEVERITY_ROWS, text):
        body.append("|" + " " * _LABEL_WIDTH + blank)
        body.append("|" + label.center(_LABEL_WIDTH) + columns(cell.ljust(width) for cell in row))
        body.append("|" + span.center(_LABEL_WIDTH) + blank)
        body.append("+" + "-" * _LABEL_WIDTH + rule)

    # Vertical axis title in the left margin, starting on the second row.
    margin = " " * (len(body) - len(_AXIS_TITLE)) + _AXIS_TITLE
    lines.extend(m + line for m, line in zip(margin, body))
    lines.append("```")
    return "\n".join(lines)


def render_markdown_worksheet(result: AnalysisResult, include_mitigations: bool = True) -> str:
    """
    Render a Markdown FMEA worksheet.

    Args:
        result: Completed AnalysisResult.
        include_mitigations: Add the per-risk tactical/strategic mitigation sections.

    Returns:
        Markdown document: summary, heatmap, failure-mode table, optional
        mitigation details, recommendations and footer.
    """
    template = _environment().get_template(_WORKSHEET_TEMPLATE)
    return template.render(
        result=result,
        summary=result.summary,
        heatmap=render_heatmap(result.failure_modes),
        include_mitigations=include_mitigations,
    )


def render_methodology() -> str:
    """Render the scoring methodology guide (rating scales and priority bands)."""
    template = _environment().get_template(_METHODOLOGY_TEMPLATE)
    scales = [
        ("Severity (S) - Business Impact", rpn.SEVERITY_SCALE),
        ("Occurrence (O) - Frequency", rpn.OCCURRENCE_SCALE),
        ("Detection (D) - Monitoring", rpn.DETECTION_SCALE),
    ]
    bands = []
    upper = rpn.MAX_SCORE ** 3
    for lower, band in rpn.PRIORITY_BANDS:
        bands.append({"range": f"{max(lower, 1)}-{upper}", "level": band.level, "action": band.action})
        upper = lower - 1
    return template.render(scales=scales, tiers=rpn.SCALE_TIERS, bands=bands)
