"""
Tests for the Vibe Shield pattern registry and rule loader
"""
import re

import pytest

from vibeshield.rules import (
    PatternRegistry,
    Rule,
    RuleLoadError,
    RuleLoader,
    Severity,
    load_default_registry,
)


def _rule(rule_id="test-rule", pattern=r"secret", severity=Severity.HIGH, **kwargs):
    return Rule(id=rule_id, name="Test Rule", severity=severity, pattern=pattern,
                fix="Remove it.", **kwargs)


class TestSeverity:

    def test_rank_order(self):
        assert Severity.CRITICAL.rank > Severity.HIGH.rank > Severity.MEDIUM.rank > Severity.LOW.rank

    def test_ordered_most_severe_first(self):
        assert Severity.ordered() == [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]

    def test_values_are_lowercase(self):
        assert [s.value for s in Severity] == ["critical", "high", "medium", "low"]


class TestRule:

    def test_pattern_compiled_once(self):
        rule = _rule()
        assert isinstance(rule.regex, re.Pattern)
        assert rule.regex.search("my secret")

    def test_ignore_case_flag(self):
        assert _rule(ignore_case=True).regex.search("SECRET")
        assert not _rule(ignore_case=False).regex.search("SECRET")

    def test_invalid_pattern_fails_fast(self):
        with pytest.raises(RuleLoadError, match="bad-rule"):
            _rule(rule_id="bad-rule", pattern=r"(unclosed")

    def test_capture_group_detection(self):
        assert _rule(pattern=r"'([a-z]+)'").has_capture_group
        assert not _rule(pattern=r"'(?:[a-z]+)'").has_capture_group

    def test_rules_are_immutable(self):
        rule = _rule()
        with pytest.raises(AttributeError):
            rule.severity = Severity.LOW


class TestPatternRegistry:

    def test_preserves_order(self):
        registry = PatternRegistry([_rule("b"), _rule("a"), _rule("c")])
        assert [r.id for r in registry] == ["b", "a", "c"]
        assert registry.index_of("a") == 1

    def test_duplicate_id_rejected(self):
        with pytest.raises(RuleLoadError, match="Duplicate"):
            PatternRegistry([_rule("same"), _rule("same")])

    def test_lookup(self):
        registry = PatternRegistry([_rule("one"), _rule("two")])
        assert "two" in registry
        assert registry.get("two").id == "two"
        assert registry.get("missing") is None
        assert registry[0].id == "one"
        assert len(registry) == 2

    def test_by_severity(self):
        registry = PatternRegistry([
            _rule("crit", severity=Severity.CRITICAL),
            _rule("low", severity=Severity.LOW),
        ])
        assert [r.id for r in registry.by_severity(Severity.LOW)] == ["low"]

    def test_with_rules_returns_new_registry(self):
        base = PatternRegistry([_rule("one")])
        extended = base.with_rules([_rule("two")])
        assert len(base) == 1
        assert [r.id for r in extended] == ["one", "two"]


class TestDefaultRegistry:

    def test_loads_all_builtin_rules(self, registry):
        assert len(registry) == 31

    def test_ids_unique_and_rules_complete(self, registry):
        ids = [r.id for r in registry]
        assert len(ids) == len(set(ids))
        for rule in registry:
            assert rule.name
            assert rule.fix
            assert isinstance(rule.severity, Severity)

    def test_first_and_last_rule(self, registry):
        assert registry[0].id == "aws-access-key"
        assert registry[len(registry) - 1].id == "python-shell"

    def test_known_severities(self, registry):
        assert registry.get("private-key").severity == Severity.CRITICAL
        assert registry.get("hardcoded-password").severity == Severity.HIGH
        assert registry.get("weak-hash-md5").severity == Severity.MEDIUM

    def test_display_names_can_repeat(self, registry):
        assert registry.get("sql-injection-template").name == registry.get("sql-injection-concat").name


class TestRuleLoader:

    def test_extra_rule_file_appended(self, tmp_path):
        extra = tmp_path / "extra.yaml"
        extra.write_text(
            "rules:\n"
            "  - id: internal-host\n"
            "    name: Internal Hostname\n"
            "    severity: low\n"
            "    pattern: 'corp\\.internal'\n"
            "    fix: Use configuration for hostnames.\n",
            encoding='utf-8',
        )
        registry = load_default_registry([extra])
        assert len(registry) == 32
        assert registry[31].id == "internal-host"
        assert registry[31].category == "general"

    def test_root_list_layout(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text(
            "- id: only\n"
            "  name: Only\n"
            "  severity: medium\n"
            "  pattern: only\n"
            "  fix: Fix it.\n",
            encoding='utf-8',
        )
        rules = RuleLoader().load_rules_from_file(path)
        assert [r.id for r in rules] == ["only"]
        assert rules[0].severity == Severity.MEDIUM

    def test_missing_key(self):
        with pytest.raises(RuleLoadError, match="fix"):
            RuleLoader().parse_rule({"id": "x", "name": "X", "severity": "high", "pattern": "x"})

    def test_unknown_severity(self):
        with pytest.raises(RuleLoadError, match="severity"):
            RuleLoader().parse_rule({
                "id": "x", "name": "X", "severity": "urgent", "pattern": "x", "fix": "f",
            })

    def test_severity_case_insensitive(self):
        rule = RuleLoader().parse_rule({
            "id": "x", "name": "X", "severity": "HIGH", "pattern": "x", "fix": "f",
        })
        assert rule.severity == Severity.HIGH

    def test_invalid_regex_in_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "rules:\n"
            "  - id: broken\n"
            "    name: Broken\n"
            "    severity: low\n"
            "    pattern: '[unterminated'\n"
            "    fix: f\n",
            encoding='utf-8',
        )
        with pytest.raises(RuleLoadError, match="broken"):
            load_default_registry([path])

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("rules: [\n", encoding='utf-8')
        with pytest.raises(RuleLoadError):
            RuleLoader().load_rules_from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleLoadError):
            RuleLoader().load_rules_from_file(tmp_path / "nope.yaml")

    def test_empty_rules(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("rules: []\n", encoding='utf-8')
        with pytest.raises(RuleLoadError, match="No rules"):
            RuleLoader().load_rules_from_file(path)

    def test_extra_rule_cannot_reuse_builtin_id(self, tmp_path):
        path = tmp_path / "dup.yaml"
        path.write_text(
            "rules:\n"
            "  - id: private-key\n"
            "    name: Shadow\n"
            "    severity: low\n"
            "    pattern: shadow\n"
            "    fix: f\n",
            encoding='utf-8',
        )
        with pytest.raises(RuleLoadError, match="Duplicate rule id: private-key"):
            load_default_registry([path])

    def test_ignore_case_boolean(self):
        rule = RuleLoader().parse_rule({
            "id": "x", "name": "X", "severity": "low", "pattern": "x", "fix": "f",
            "ignore_case": True,
        })
        assert rule.ignore_case is True

    def test_ignore_case_string_rejected(self, tmp_path):
        path = tmp_path / "quoted.yaml"
        path.write_text(
            "rules:\n"
            "  - id: quoted-flag\n"
            "    name: Quoted Flag\n"
            "    severity: low\n"
            "    pattern: x\n"
            "    fix: f\n"
            "    ignore_case: \"false\"\n",
            encoding='utf-8',
        )
        with pytest.raises(RuleLoadError, match="ignore_case"):
            RuleLoader().load_rules_from_file(path)

    def test_rule_load_error_is_value_error(self):
        assert issubclass(RuleLoadError, ValueError)
