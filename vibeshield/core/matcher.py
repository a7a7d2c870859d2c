#!/usr/bin/env python3
"""
Vibe Shield Matcher Engine
Applies every registry rule to every line of a file's content
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

from vibeshield.rules import PatternRegistry, Rule

# Only these terminators count as line breaks; str.splitlines() would also
# split on form feeds and unicode separators and shift line numbers.
LINE_BREAK = re.compile(r'\r\n|\r|\n')


@dataclass(frozen=True)
class RawMatch:
    """A single rule hit at a file location"""
    file: str
    line: int
    column: int
    rule_index: int
    rule: Rule
    matched_text: str


class MatcherEngine:
    """
    Line-oriented matcher over an injected PatternRegistry.

    Holds no mutable state, so one instance can be shared by (or pickled
    into) any number of workers.
    """

    def __init__(self, registry: PatternRegistry):
        self.registry = registry

    def scan_content(self, file_path: str, content: str) -> List[RawMatch]:
        """
        Scan one file's text.

        Args:
            file_path: Path reported on each match
            content: Full text of the file

        Returns:
            Matches ordered by line, then registry order, then column
        """
        if not content:
            return []

        matches = []
        for line_number, line in enumerate(LINE_BREAK.split(content), 1):
            for rule_index, rule in enumerate(self.registry):
                for match in rule.regex.finditer(line):
                    matches.append(RawMatch(
                        file=file_path,
                        line=line_number,
                        column=match.start() + 1,
                        rule_index=rule_index,
                        rule=rule,
                        matched_text=self._matched_text(match),
                    ))
        return matches

    def scan_source(self, source: Tuple[str, str]) -> List[RawMatch]:
        """Pool-friendly wrapper taking a (path, content) pair"""
        file_path, content = source
        return self.scan_content(file_path, content)

    @staticmethod
    def _matched_text(match: re.Match) -> str:
        # First capture group excludes framing quotes; fall back to the span
        if match.re.groups:
            group = match.group(1)
            if group is not None:
                return group
        return match.group(0)
