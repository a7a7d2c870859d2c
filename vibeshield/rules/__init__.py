#!/usr/bin/env python3
"""
Vibe Shield Pattern Registry

Rules are defined declaratively in YAML (see security_patterns.yaml) and
loaded once into an immutable PatternRegistry. The registry is passed to the
matcher engine explicitly, so tests can swap in a reduced rule set.

A rule that cannot be loaded is a programming error in the rule table:
RuleLoadError is raised before any file is scanned.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

import yaml


class RuleLoadError(ValueError):
    """Raised when a rule descriptor is invalid"""


class Severity(Enum):
    """Issue severity levels, most severe first"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Higher rank means more severe"""
        ordering = {
            Severity.CRITICAL: 3,
            Severity.HIGH: 2,
            Severity.MEDIUM: 1,
            Severity.LOW: 0,
        }
        return ordering[self]

    @classmethod
    def ordered(cls) -> List['Severity']:
        """Severities sorted from critical down to low"""
        return sorted(cls, key=lambda s: s.rank, reverse=True)


@dataclass(frozen=True)
class Rule:
    """A single detection rule"""
    id: str
    name: str
    severity: Severity
    pattern: str
    fix: str
    category: str = "general"
    ignore_case: bool = False

    # Compiled once at construction
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        flags = re.IGNORECASE if self.ignore_case else 0
        try:
            compiled = re.compile(self.pattern, flags)
        except re.error as e:
            raise RuleLoadError(f"Invalid pattern in rule {self.id}: {self.pattern!r} - {e}") from e
        object.__setattr__(self, 'regex', compiled)

    @property
    def has_capture_group(self) -> bool:
        return self.regex.groups > 0


class PatternRegistry:
    """
    Ordered, read-only collection of rules.

    Order is fixed at construction and only used to break ties when
    sorting issues; every rule is evaluated against every line.
    """

    def __init__(self, rules: Iterable[Rule]):
        self._rules = tuple(rules)

        seen = set()
        for rule in self._rules:
            if rule.id in seen:
                raise RuleLoadError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)

        self._index = {rule.id: i for i, rule in enumerate(self._rules)}

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._index

    @property
    def rules(self) -> Sequence[Rule]:
        return self._rules

    def get(self, rule_id: str) -> Optional[Rule]:
        """Get a specific rule by ID"""
        index = self._index.get(rule_id)
        return self._rules[index] if index is not None else None

    def index_of(self, rule_id: str) -> int:
        """Registry position of a rule (tie-break order)"""
        return self._index[rule_id]

    def by_severity(self, severity: Severity) -> List[Rule]:
        return [r for r in self._rules if r.severity == severity]

    def with_rules(self, extra: Iterable[Rule]) -> 'PatternRegistry':
        """New registry with extra rules appended"""
        return PatternRegistry(list(self._rules) + list(extra))


class RuleLoader:
    """
    Loads rule descriptors from YAML files.

    Supports two layouts:
    1. Standard: rules: [...]
    2. Root list: - id: ... (rules at document root)

    Usage:
        loader = RuleLoader()
        registry = PatternRegistry(loader.load_rules_from_file(path))
    """

    RULES_DIR = Path(__file__).parent
    DEFAULT_RULES_FILE = RULES_DIR / "security_patterns.yaml"

    REQUIRED_KEYS = ('id', 'name', 'severity', 'pattern', 'fix')

    def load_rules_from_file(self, filepath: Path) -> List[Rule]:
        """
        Load rules from a single YAML file.

        Args:
            filepath: Path to YAML file

        Returns:
            Rules in file order

        Raises:
            RuleLoadError: file is unreadable, malformed, or holds an invalid rule
        """
        filepath = Path(filepath)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise RuleLoadError(f"Failed to load rules from {filepath}: {e}") from e

        if isinstance(data, dict):
            rules_data = data.get('rules')
        else:
            rules_data = data

        if not isinstance(rules_data, list) or not rules_data:
            raise RuleLoadError(f"No rules found in {filepath}")

        return [self.parse_rule(item, source=filepath) for item in rules_data]

    def parse_rule(self, data: Dict[str, Any], source: Optional[Path] = None) -> Rule:
        """Parse a single rule from dictionary data"""
        where = f" in {source}" if source else ""
        if not isinstance(data, dict):
            raise RuleLoadError(f"Rule entries must be mappings{where}, got {type(data).__name__}")

        missing = [key for key in self.REQUIRED_KEYS if not data.get(key)]
        if missing:
            rule_id = data.get('id', '<unknown>')
            raise RuleLoadError(f"Rule {rule_id}{where} is missing: {', '.join(missing)}")

        severity_str = str(data['severity']).lower()
        try:
            severity = Severity(severity_str)
        except ValueError:
            raise RuleLoadError(
                f"Rule {data['id']}{where} has unknown severity {data['severity']!r}"
            ) from None

        ignore_case = data.get('ignore_case', False)
        if not isinstance(ignore_case, bool):
            raise RuleLoadError(
                f"Rule {data['id']}{where} has non-boolean ignore_case {ignore_case!r}"
            )

        return Rule(
            id=str(data['id']),
            name=str(data['name']),
            severity=severity,
            pattern=str(data['pattern']),
            fix=str(data['fix']).strip(),
            category=str(data.get('category', 'general')),
            ignore_case=ignore_case,
        )


def load_default_registry(extra_files: Iterable[Path] = ()) -> PatternRegistry:
    """
    Build the built-in registry, optionally extended with user rule files.

    Args:
        extra_files: YAML rule files appended after the built-in rules

    Returns:
        PatternRegistry ready to be handed to the matcher engine
    """
    loader = RuleLoader()
    registry = PatternRegistry(loader.load_rules_from_file(RuleLoader.DEFAULT_RULES_FILE))
    for extra in extra_files:
        registry = registry.with_rules(loader.load_rules_from_file(Path(extra)))
    return registry


__all__ = [
    'PatternRegistry',
    'Rule',
    'RuleLoadError',
    'RuleLoader',
    'Severity',
    'load_default_registry',
]
