"""
Shared fixtures for Vibe Shield tests
"""
import pytest

from vibeshield.core.matcher import MatcherEngine
from vibeshield.rules import load_default_registry


@pytest.fixture(scope="session")
def registry():
    """Built-in rule registry, loaded once"""
    return load_default_registry()


@pytest.fixture
def engine(registry):
    return MatcherEngine(registry)


@pytest.fixture
def make_project(tmp_path):
    """Create files under a temporary project root from a {relative_path: content} mapping"""
    def _create(files: dict):
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding='utf-8')
        return tmp_path
    return _create
