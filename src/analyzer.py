"""
Architecture Analyzer — turns an architecture description into scored failure modes.

Two paths share the same scoring, sorting and summary logic:
  - AI path: delegated to agent.run_fmea_agent() when an Anthropic credential
    is configured.
  - Demo path: keyword-matched components looked up in demo_risks, plus the
    general risks every system carries. Fully deterministic apart from the
    timestamp.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from agent import run_fmea_agent
from config import AgentConfig
from demo_risks import COMPONENT_RISKS, DEMO_RECOMMENDATIONS, GENERAL_RISKS, RiskTemplate
from fmea_schema import AnalysisResult, ArchitectureInput, FailureMode, risk_id

logger = logging.getLogger(__name__)

COMPONENT_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\b(?:web\s*app|frontend|ui)\b",
        r"\b(?:api|backend|rest\s*api|graphql)\b",
        r"\b(?:database|db|postgres|mysql|mongodb|documentdb)\b",
        r"\b(?:cache|redis|memcached)\b",
        r"\b(?:queue|rabbitmq|kafka|sqs)\b",
        r"\b(?:key\s*vault|secrets|hsm)\b",
        r"\b(?:load\s*balancer|lb|nginx|haproxy)\b",
        r"\b(?:storage|blob|s3)\b",
    )
)

DEFAULT_COMPONENTS: tuple[str, ...] = ("web app", "api", "database")

DEPTH_LIMITS = {"quick": 8, "standard": 15, "deep": 25}


def extract_components(architecture: str) -> tuple[str, ...]:
    """
    Find known component keywords in an architecture description.

    Returns unique lower-cased labels in detection order (pattern order, then
    position in the text). Falls back to DEFAULT_COMPONENTS when nothing matches.
    """
    found: list[str] = []
    for pattern in COMPONENT_PATTERNS:
        for match in pattern.finditer(architecture):
            found.append(" ".join(match.group(0).lower().split()))
    if not found:
        return DEFAULT_COMPONENTS
    return tuple(dict.fromkeys(found))


def component_label(keyword: str) -> str:
    """'key vault' -> 'KEY-VAULT'"""
    return re.sub(r"\s+", "-", keyword.upper())


def _from_template(index: int, component: str, template: RiskTemplate) -> FailureMode:
    return FailureMode.create(
        id=risk_id(index),
        component=component,
        failure_mode=template.failure_mode,
        effect=template.effect,
        cause=template.cause,
        severity=template.severity,
        occurrence=template.occurrence,
        detection=template.detection,
        category=template.category,
        tactical_mitigation=list(template.tactical_mitigation),
        strategic_mitigation=list(template.strategic_mitigation),
    )


def assemble_failure_modes(components: Iterable[str]) -> list[FailureMode]:
    """
    Build failure modes for each component, then the general risks, numbering them in that order.

    Aliases that share a template group ('mongodb' and 'database') contribute it
    once, labelled with the first keyword detected.
    """
    failure_modes: list[FailureMode] = []
    seen_groups: set[int] = set()
    for component in dict.fromkeys(components):
        templates = COMPONENT_RISKS.get(component, ())
        if id(templates) in seen_groups:
            continue
        seen_groups.add(id(templates))
        for template in templates:
            failure_modes.append(
                _from_template(len(failure_modes) + 1, component_label(component), template)
            )
    for template in GENERAL_RISKS:
        failure_modes.append(_from_template(len(failure_modes) + 1, template.component, template))
    return failure_modes


def generate_demo_analysis(input_data: ArchitectureInput) -> AnalysisResult:
    """Deterministic analysis from the static demo risk table."""
    components = extract_components(input_data.architecture)
    logger.debug("Detected components: %s", ", ".join(components))

    failure_modes = assemble_failure_modes(components)
    result = AnalysisResult.from_failure_modes(
        failure_modes,
        list(DEMO_RECOMMENDATIONS),
        input_data.depth,
        limit=DEPTH_LIMITS[input_data.depth],
    )
    logger.info(
        "Demo analysis produced %d failure modes (%d before %s depth limit)",
        len(result.failure_modes),
        len(failure_modes),
        input_data.depth,
    )
    return result


def analyze_architecture(
    input_data: ArchitectureInput,
    config: Optional[AgentConfig] = None,
) -> AnalysisResult:
    """
    Analyze an architecture description and return ranked failure modes.

    Args:
        input_data: Architecture text, optional context and depth.
        config: Agent configuration; read from the environment when omitted.
            Without an API key the demo analysis is returned.

    Raises:
        InvalidScoreError: If the AI reply carries an out-of-range score.
        AnalysisError: If the AI reply is empty or malformed.
        anthropic.APIError: On API communication failures.
    """
    if config is None:
        config = AgentConfig.from_env()

    if not config.has_credentials:
        logger.warning("No Anthropic credential configured, returning demo analysis")
        return generate_demo_analysis(input_data)

    return run_fmea_agent(input_data, config)
