"""
Vibe Shield Core Module
Matcher engine, issue aggregation, file discovery, and report formatting
"""

from vibeshield.core.aggregator import (
    Issue,
    ScanResult,
    build_issues,
    summarize_by_name,
    summarize_by_severity,
)
from vibeshield.core.discovery import FileCollector
from vibeshield.core.matcher import MatcherEngine, RawMatch
from vibeshield.core.parallel import VibeShieldScanner
from vibeshield.core.reporter import build_json_report, format_agent_prompt, format_json

__all__ = [
    "FileCollector",
    "Issue",
    "MatcherEngine",
    "RawMatch",
    "ScanResult",
    "VibeShieldScanner",
    "build_issues",
    "build_json_report",
    "format_agent_prompt",
    "format_json",
    "summarize_by_name",
    "summarize_by_severity",
]
