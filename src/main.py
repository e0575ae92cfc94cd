#!/usr/bin/env python3
"""
Prismo — pre-mortem FMEA for software architectures. CLI entrypoint.

Usage:
  python src/main.py analyze arch.txt                  # Ranked failure modes as JSON
  python src/main.py analyze arch.txt --depth deep     # quick | standard | deep
  python src/main.py fmea arch.txt --format csv        # Worksheet: markdown | json | csv
  python src/main.py fmea - --no-mitigations < arch.txt
  python src/main.py rpn 9 4 7                         # Score a single failure mode
  python src/main.py rpn 9 4 7 --target-detection 3    # ...and the RPN after mitigation
  python src/main.py methodology                       # Rating scales and priority bands
  python src/main.py --demo analyze --example          # Built-in architecture, no API call

Set ANTHROPIC_API_KEY to run the AI-backed analysis; without it (or with
--demo) the deterministic demo analysis is used.

Output:
  - Payload printed to stdout (and written to --output FILE when given)
  - Progress logging and the analysis summary on stderr
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Allow running from the repository root as well as src/
sys.path.insert(0, str(Path(__file__).parent))

import anthropic
from pydantic import ValidationError

from agent import AnalysisError
from analyzer import analyze_architecture
from config import AgentConfig
from fmea_schema import AnalysisResult, ArchitectureInput, ScoreTriple
from rpn import InvalidScoreError, MissingBaselineError, mitigated_rpn, priority_band, rpn_report
from ui.renderer import render_methodology
from worksheet import WORKSHEET_FORMATS, generate_worksheet

logger = logging.getLogger("prismo")


# ── Built-in example: Library Management System ──────────────────────────────
EXAMPLE_ARCHITECTURE = """\
Library Management System:
- Web App (React frontend) for patrons and librarians
- REST API (Express backend) handling loans, holds and search
- Redis Cache for session and search caching
- MongoDB Database for the book catalog and user records
- Key Vault for API keys and database credentials
"""


def _score(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid score {value!r}: expected an integer 1-10")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prismo",
        description="Prismo — pre-mortem FMEA for software architectures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Force the deterministic demo analysis even if ANTHROPIC_API_KEY is set",
    )
    parser.add_argument(
        "--output",
        metavar="FILE",
        help="Also write the payload to FILE",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_source(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "input_file",
            nargs="?",
            help="Architecture description file ('-' for stdin; omit to read piped stdin)",
        )
        p.add_argument(
            "--example",
            action="store_true",
            help="Analyze the built-in library management system example",
        )

    analyze = sub.add_parser("analyze", help="Identify and rank failure modes (JSON)")
    add_source(analyze)
    analyze.add_argument("--context", help="Business criticality, compliance needs or areas of concern")
    analyze.add_argument("--depth", choices=["quick", "standard", "deep"], default="standard")

    fmea = sub.add_parser("fmea", help="Generate an FMEA worksheet")
    add_source(fmea)
    fmea.add_argument("--format", dest="fmt", choices=list(WORKSHEET_FORMATS), default="markdown")
    fmea.add_argument(
        "--no-mitigations",
        dest="include_mitigations",
        action="store_false",
        help="Omit tactical and strategic mitigations",
    )

    rpn = sub.add_parser("rpn", help="Calculate the Risk Priority Number of one failure mode")
    rpn.add_argument("severity", type=_score, help="Severity 1-10 (10 = catastrophic)")
    rpn.add_argument("occurrence", type=_score, help="Occurrence 1-10 (10 = constant)")
    rpn.add_argument("detection", type=_score, help="Detection 1-10 (10 = customers report it)")
    rpn.add_argument("--failure-mode", help="Description of the failure mode")
    rpn.add_argument("--target-severity", type=_score, help="Severity after mitigation")
    rpn.add_argument("--target-occurrence", type=_score, help="Occurrence after mitigation")
    rpn.add_argument("--target-detection", type=_score, help="Detection after mitigation")

    sub.add_parser("methodology", help="Print the scoring methodology guide")
    return parser


def read_architecture(args: argparse.Namespace) -> str:
    if args.example:
        logger.info("Using built-in example: Library Management System")
        return EXAMPLE_ARCHITECTURE
    if args.input_file == "-" or (args.input_file is None and not sys.stdin.isatty()):
        logger.info("Loaded architecture from stdin")
        return sys.stdin.read()
    if args.input_file:
        path = Path(args.input_file)
        text = path.read_text(encoding="utf-8")
        logger.info("Loaded architecture from %s", path)
        return text
    logger.info("No input given, using built-in example: Library Management System")
    return EXAMPLE_ARCHITECTURE


def run_rpn(args: argparse.Namespace) -> dict:
    report = rpn_report(args.severity, args.occurrence, args.detection, args.failure_mode)
    targets = (args.target_severity, args.target_occurrence, args.target_detection)
    if any(t is not None for t in targets):
        mitigation = mitigated_rpn(
            report["rpn"],
            ScoreTriple(severity=args.severity, occurrence=args.occurrence, detection=args.detection),
            *targets,
        )
        report["mitigation"] = {
            "new_rpn": mitigation.new_rpn,
            "new_priority": priority_band(mitigation.new_rpn).level,
            "reduction": mitigation.reduction,
            "reduction_percent": mitigation.reduction_percent,
        }
    return report


def print_summary(result: AnalysisResult) -> None:
    s = result.summary
    print("\n" + "=" * 60, file=sys.stderr)
    print(f"  PRE-MORTEM COMPLETE ({result.analysis_depth})", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"  Total risks      : {s.total_risks}", file=sys.stderr)
    print(f"  Critical (≥200)  : {s.critical_risks}", file=sys.stderr)
    print(f"  Medium (100–199) : {s.medium_risks}", file=sys.stderr)
    print(f"  Low (50–99)      : {s.low_risks}", file=sys.stderr)
    print(f"  Minimal (<50)    : {s.minimal_risks}", file=sys.stderr)
    print(f"  Top risk areas   : {', '.join(s.top_risk_areas)}", file=sys.stderr)
    print("=" * 60, file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[Prismo] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = AgentConfig.from_env()
        if args.demo:
            config = config.without_credentials()

        if args.command == "analyze":
            input_data = ArchitectureInput(
                architecture=read_architecture(args),
                context=args.context,
                depth=args.depth,
            )
            result = analyze_architecture(input_data, config)
            payload = json.dumps(result.model_dump(by_alias=True), indent=2)
            print_summary(result)
        elif args.command == "fmea":
            payload = generate_worksheet(
                read_architecture(args),
                fmt=args.fmt,
                include_mitigations=args.include_mitigations,
                config=config,
            )
        elif args.command == "rpn":
            payload = json.dumps(run_rpn(args), indent=2, ensure_ascii=False)
        else:
            payload = render_methodology()
    except (InvalidScoreError, MissingBaselineError, AnalysisError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except anthropic.APIError as e:
        print(f"ERROR: Anthropic API request failed: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(payload)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload + "\n", encoding="utf-8")
        logger.info("Saved: %s", output_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
