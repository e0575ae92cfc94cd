"""
Prompts for the architecture FMEA agent.

The system prompt fixes the task, the SOD rating scales and the closed set of
risk categories; the user prompt embeds the architecture, optional context and
the requested number of failure modes for the chosen depth.
"""

from __future__ import annotations

from fmea_schema import RISK_CATEGORIES, ArchitectureInput

# Requested failure-mode count per depth. The reply is not truncated locally.
DEPTH_RANGES = {
    "quick": (5, 10),
    "standard": (15, 25),
    "deep": (30, 50),
}

SYSTEM_PROMPT = f"""You are Prismo, an expert SRE and reliability engineer specializing in pre-mortem analysis and FMEA (Failure Mode and Effects Analysis). Your task is to analyze system architectures and identify potential failure modes.

For each failure mode, you MUST provide:
1. A unique ID (format: COMPONENT-NNN)
2. The component/service affected
3. The specific failure mode
4. The effect on the system/users
5. The root cause
6. Severity score (1-10): How bad is the impact?
7. Occurrence score (1-10): How often might it happen?
8. Detection score (1-10): How hard is it to detect before customers notice?
9. Category from: {", ".join(RISK_CATEGORIES)}
10. Tactical mitigations (do now)
11. Strategic mitigations (plan for later)

## Rating Scales
| Score | Severity | Occurrence | Detection |
|-------|----------|------------|-----------|
| 10 | Catastrophic - complete service failure | Constant - happens daily | No detection - customers report it |
| 7-9 | Major - significant customer impact | Frequent - weekly | Poor - usually miss it |
| 4-6 | Moderate - degraded experience | Occasional - monthly | Moderate - sometimes catch it |
| 1-3 | Minor - barely noticeable | Rare - annually or never | Good - almost always catch it first |

Be thorough and realistic. Consider:
- Single points of failure
- Missing monitoring/observability
- Security vulnerabilities
- Data integrity risks
- Cascading failures
- External dependency failures
- Configuration drift
- Capacity/scaling issues
- Authentication/authorization gaps
- Network partitions"""

RESPONSE_SCHEMA = """{
  "failureModes": [
    {
      "id": "COMPONENT-001",
      "component": "Component Name",
      "failureMode": "What can fail",
      "effect": "Impact on system/users",
      "cause": "Root cause",
      "severity": 8,
      "occurrence": 4,
      "detection": 6,
      "category": "Availability",
      "tacticalMitigation": ["Action 1", "Action 2"],
      "strategicMitigation": ["Long-term fix 1", "Long-term fix 2"]
    }
  ],
  "recommendations": ["Top recommendation 1", "Top recommendation 2"]
}"""


def build_user_prompt(input_data: ArchitectureInput) -> str:
    min_risks, max_risks = DEPTH_RANGES[input_data.depth]
    context = f"ADDITIONAL CONTEXT:\n{input_data.context}\n\n" if input_data.context else ""
    return f"""Analyze this architecture and identify {min_risks}-{max_risks} potential failure modes:

ARCHITECTURE:
{input_data.architecture}

{context}Return your analysis as a JSON object with this exact structure:
{RESPONSE_SCHEMA}

Respond ONLY with valid JSON, no markdown or explanation."""
