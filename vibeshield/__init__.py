"""
Vibe Shield - Security Scanner for AI-Generated Code
Finds hardcoded secrets and injection-prone code, and tells the coding agent how to fix them.
"""

from pathlib import Path
from typing import Iterable, Optional, Tuple

__version__ = "1.0.0"

from vibeshield.config import ConfigManager, VibeShieldConfig
from vibeshield.core.aggregator import Issue, ScanResult, summarize_by_name, summarize_by_severity
from vibeshield.core.discovery import FileCollector
from vibeshield.core.parallel import VibeShieldScanner
from vibeshield.core.reporter import format_agent_prompt, format_json
from vibeshield.ide import init_cursor_rules
from vibeshield.rules import PatternRegistry, Rule, RuleLoadError, Severity, load_default_registry


def scan_sources(sources: Iterable[Tuple[str, str]],
                 registry: Optional[PatternRegistry] = None,
                 workers: Optional[int] = 1) -> ScanResult:
    """
    Scan in-memory (file_path, content) pairs.

    Args:
        sources: Pairs of reported path and file text
        registry: Rule set to apply (default: built-in rules)
        workers: Worker processes; None means one per CPU

    Returns:
        ScanResult with ordered issues and no warnings
    """
    if registry is None:
        registry = load_default_registry()
    return VibeShieldScanner(registry, workers=workers).scan(list(sources))


def scan_directory(path: Path,
                   config: Optional[VibeShieldConfig] = None,
                   registry: Optional[PatternRegistry] = None,
                   workers: Optional[int] = None,
                   show_progress: bool = False) -> ScanResult:
    """
    Discover, read and scan every candidate file under path.

    Args:
        path: Project directory or single file
        config: Scan configuration (default: nearest .vibeshield.yml, else defaults)
        registry: Rule set (default: built-in rules plus config extra_rule_files)
        workers: Overrides config.workers when given
        show_progress: Show a tqdm progress bar

    Returns:
        ScanResult including per-file warnings from discovery
    """
    path = Path(path)
    if config is None:
        config = ConfigManager.load_config(start_path=path)
    if registry is None:
        registry = load_default_registry(config.extra_rule_files)
    if workers is None:
        workers = config.workers

    sources, warnings = FileCollector(path, config).collect()
    scanner = VibeShieldScanner(registry, workers=workers, show_progress=show_progress)
    return scanner.scan(sources, warnings)


__all__ = [
    "__version__",
    "Issue",
    "PatternRegistry",
    "Rule",
    "RuleLoadError",
    "ScanResult",
    "Severity",
    "format_agent_prompt",
    "format_json",
    "init_cursor_rules",
    "load_default_registry",
    "scan_directory",
    "scan_sources",
    "summarize_by_name",
    "summarize_by_severity",
]
