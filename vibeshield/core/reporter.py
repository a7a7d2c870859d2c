#!/usr/bin/env python3
"""
Vibe Shield Report Formatters
Pure functions turning an issue list into the agent transcript or JSON report

The transcript framing ([TASK n], [FOUND], [INSTRUCTION]) and the JSON field
names are parsed by downstream agents and CI jobs. Keep them stable.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from vibeshield.core.aggregator import Issue, ScanResult, summarize_by_name, summarize_by_severity

RULE_LINE = "═" * 63
AGENT_HEADER = "  HEY AGENT, PLEASE FIX THE FOLLOWING SECURITY ISSUES:"

# Longest [FOUND] text shown in the transcript
MAX_FOUND_LENGTH = 120


def _truncate(text: str, limit: int = MAX_FOUND_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def format_agent_prompt(issues: Sequence[Issue], warnings: Optional[Sequence[str]] = None) -> str:
    """
    Format issues into an "Agent Protocol" string that AI agents can read and act on.

    Args:
        issues: Ordered issue list
        warnings: Non-fatal collection warnings, listed after the total

    Returns:
        The framed task list, or an empty string when there is nothing to report
    """
    warnings = list(warnings or [])
    if not issues and not warnings:
        return ""

    lines: List[str] = [RULE_LINE, AGENT_HEADER, RULE_LINE, ""]

    for index, issue in enumerate(issues, 1):
        lines.append(
            f"[TASK {index}] [{issue.severity.value.upper()}] Fix {issue.rule_name} "
            f"in {issue.file} at line {issue.line}"
        )
        lines.append(f"[FOUND]: {_truncate(issue.matched_text)}")
        lines.append(f"[INSTRUCTION]: {issue.fix_prompt}")
        lines.append("")

    lines.append(RULE_LINE)
    lines.append(f"  Total issues: {len(issues)}")
    lines.append(RULE_LINE)

    for warning in warnings:
        lines.append(f"[WARNING]: {warning}")

    return "\n".join(lines)


def build_json_report(issues: Sequence[Issue], warnings: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Structured report; summaries are derived from the issue list only"""
    return {
        'summary': {
            'total': len(issues),
            'bySeverity': summarize_by_severity(issues),
            'byType': summarize_by_name(issues),
        },
        'issues': [issue.to_dict() for issue in issues],
        'warnings': list(warnings or []),
    }


def format_json(issues: Sequence[Issue], warnings: Optional[Sequence[str]] = None) -> str:
    """Serialize the structured report"""
    return json.dumps(build_json_report(issues, warnings), indent=2, ensure_ascii=False)


def write_json_report(result: ScanResult, output_path: Path) -> Path:
    """Write the structured report for a scan result to disk"""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(format_json(result.issues, result.warnings) + "\n", encoding='utf-8')
    return output_path
