#!/usr/bin/env python3
"""
Vibe Shield Issue Aggregator
Turns raw matches into ordered Issue records and summary views
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from vibeshield.core.matcher import RawMatch
from vibeshield.rules import Severity


@dataclass(frozen=True)
class Issue:
    """Reportable form of one match"""
    file: str
    line: int
    rule_id: str
    rule_name: str
    severity: Severity
    fix_prompt: str
    matched_text: str
    column: int = 1

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization"""
        return {
            'severity': self.severity.value,
            'type': self.rule_name,
            'file': self.file,
            'line': self.line,
            'match': self.matched_text,
            'fix': self.fix_prompt,
        }


def _sort_key(match: RawMatch):
    return (match.file, match.line, match.rule_index, match.column)


def build_issues(matches: Iterable[RawMatch]) -> List[Issue]:
    """
    Normalize raw matches into issues.

    Sorting by file, line, registry order and column makes the result
    independent of how per-file work was scheduled. Identical matches in
    different files stay separate issues.
    """
    return [
        Issue(
            file=match.file,
            line=match.line,
            rule_id=match.rule.id,
            rule_name=match.rule.name,
            severity=match.rule.severity,
            fix_prompt=match.rule.fix,
            matched_text=match.matched_text,
            column=match.column,
        )
        for match in sorted(matches, key=_sort_key)
    ]


def summarize_by_name(issues: Iterable[Issue]) -> Dict[str, int]:
    """Occurrence count per rule display name, in first-seen order"""
    summary: Dict[str, int] = {}
    for issue in issues:
        summary[issue.rule_name] = summary.get(issue.rule_name, 0) + 1
    return summary


def summarize_by_severity(issues: Iterable[Issue]) -> Dict[str, int]:
    """Occurrence count per severity; all levels present, most severe first"""
    summary = {severity.value: 0 for severity in Severity.ordered()}
    for issue in issues:
        summary[issue.severity.value] += 1
    return summary


@dataclass
class ScanResult:
    """Issues and non-fatal warnings from one scan"""
    issues: List[Issue] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def total(self) -> int:
        return len(self.issues)

    @property
    def by_name(self) -> Dict[str, int]:
        return summarize_by_name(self.issues)

    @property
    def by_severity(self) -> Dict[str, int]:
        return summarize_by_severity(self.issues)

    def issues_at_or_above(self, threshold: Severity) -> List[Issue]:
        return [i for i in self.issues if i.severity.rank >= threshold.rank]

    def exit_code(self, fail_on: Severity = Severity.LOW) -> int:
        """1 if any issue reaches the threshold, else 0"""
        return 1 if self.issues_at_or_above(fail_on) else 0
