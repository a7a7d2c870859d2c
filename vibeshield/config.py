#!/usr/bin/env python3
"""
Vibe Shield Configuration Management
Handles .vibeshield.yml configuration files
"""

import sys
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field


# Paths that are never worth scanning: third-party code and tool output
MANDATORY_EXCLUDES = {
    'node_modules/', 'bower_components/', 'site-packages/', 'dist-packages/',
    '__pycache__/', '.git/', '.svn/', '.hg/',
}


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Nested mapping under key, or an empty one if missing or not a mapping"""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


@dataclass
class VibeShieldConfig:
    """Vibe Shield configuration structure"""

    # Exit with failure when an issue at this level or above is found
    fail_on: str = "low"  # critical, high, medium, low

    # None = one worker per CPU
    workers: Optional[int] = 1

    # Files larger than this are skipped with a warning
    max_file_size: int = 1024 * 1024

    include_extensions: List[str] = field(default_factory=lambda: [
        # JavaScript / TypeScript
        ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".mts", ".cts",
        ".vue", ".svelte", ".astro",
        # Other backends
        ".py", ".rb", ".php", ".go", ".java", ".kt", ".cs", ".rs",
        # Markup, config, scripts
        ".html", ".htm", ".json", ".yml", ".yaml", ".toml", ".ini",
        ".cfg", ".conf", ".sql", ".sh", ".bash", ".zsh",
    ])

    # Extension-less files and dotfiles matched by name
    include_files: List[str] = field(default_factory=lambda: [
        ".env",
        ".env.*",
        "*.env",
    ])

    exclude_paths: List[str] = field(default_factory=lambda: [
        # === JavaScript/Node.js ===
        "node_modules/",
        "bower_components/",
        ".next/",
        ".nuxt/",
        ".svelte-kit/",
        ".turbo/",
        "coverage/",

        # === Python ===
        "venv/",
        ".venv/",
        "env/",
        "*-env/",
        "*_env/",
        "site-packages/",
        "dist-packages/",
        "__pycache__/",
        ".tox/",
        ".pytest_cache/",
        ".mypy_cache/",
        "*.egg-info/",

        # === Other dependency trees ===
        "vendor/",
        "target/",

        # === Version control ===
        ".git/",
        ".svn/",
        ".hg/",

        # === Build output ===
        "dist/",
        "build/",
        "out/",

        # === IDE/Editor directories ===
        ".idea/",
        ".vscode/",
    ])

    exclude_files: List[str] = field(default_factory=lambda: [
        "*.min.js",
        "*.min.css",
        "*.bundle.js",
        "*.map",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
    ])

    # Additional YAML rule files appended to the built-in registry
    extra_rule_files: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VibeShieldConfig':
        """Create config from dictionary; malformed values keep their defaults"""
        config = cls()

        config.fail_on = str(data.get('fail_on', config.fail_on)).lower()

        workers = data.get('workers', config.workers)
        if workers is None:
            config.workers = None
        else:
            try:
                config.workers = max(int(workers), 0)
            except (TypeError, ValueError):
                pass

        try:
            config.max_file_size = int(data.get('max_file_size', config.max_file_size))
        except (TypeError, ValueError):
            pass

        include = _section(data, 'include')
        if isinstance(include.get('extensions'), list):
            config.include_extensions = [
                ext if ext.startswith('.') else f'.{ext}'
                for ext in (str(e).lower() for e in include['extensions'])
            ]
        if isinstance(include.get('files'), list):
            config.include_files = [str(f) for f in include['files']]

        # Exclusions - MERGE user paths with mandatory exclusions (don't replace)
        exclude = _section(data, 'exclude')
        if isinstance(exclude.get('paths'), list):
            user_paths = [str(p) for p in exclude['paths']]
            config.exclude_paths = user_paths + sorted(MANDATORY_EXCLUDES - set(user_paths))
        if isinstance(exclude.get('files'), list):
            config.exclude_files = [str(f) for f in exclude['files']]

        rules = _section(data, 'rules')
        if isinstance(rules.get('extra_files'), list):
            config.extra_rule_files = [str(f) for f in rules['extra_files']]

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for YAML export"""
        return {
            'fail_on': self.fail_on,
            'workers': self.workers,
            'max_file_size': self.max_file_size,
            'include': {
                'extensions': self.include_extensions,
                'files': self.include_files,
            },
            'exclude': {
                'paths': self.exclude_paths,
                'files': self.exclude_files,
            },
            'rules': {
                'extra_files': self.extra_rule_files,
            },
        }


class ConfigManager:
    """Manage Vibe Shield configuration files"""

    DEFAULT_CONFIG_NAME = ".vibeshield.yml"

    @staticmethod
    def find_config(start_path: Path = None) -> Optional[Path]:
        """
        Find .vibeshield.yml by walking up directory tree

        Args:
            start_path: Starting directory (default: current directory)

        Returns:
            Path to .vibeshield.yml or None if not found
        """
        current = (start_path or Path.cwd()).resolve()
        if current.is_file():
            current = current.parent

        while True:
            config_file = current / ConfigManager.DEFAULT_CONFIG_NAME
            if config_file.is_file():
                return config_file
            if current == current.parent:
                return None
            current = current.parent

    @staticmethod
    def load_config(config_path: Path = None, start_path: Path = None) -> VibeShieldConfig:
        """
        Load configuration from .vibeshield.yml

        Args:
            config_path: Path to config file (default: search upward from start_path)
            start_path: Where the upward search begins (default: current directory)

        Returns:
            VibeShieldConfig object
        """
        if config_path is None:
            config_path = ConfigManager.find_config(start_path)

        # Return default config if no file found
        if config_path is None or not Path(config_path).exists():
            return VibeShieldConfig()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            print(f"Warning: Failed to load config from {config_path}: {e}", file=sys.stderr)
            return VibeShieldConfig()

        if not isinstance(data, dict):
            return VibeShieldConfig()

        config = VibeShieldConfig.from_dict(data)

        # Rule files are relative to the config file that names them
        base = Path(config_path).resolve().parent
        config.extra_rule_files = [
            str(p if Path(p).is_absolute() else base / p) for p in config.extra_rule_files
        ]
        return config

    @staticmethod
    def save_config(config: VibeShieldConfig, config_path: Path) -> bool:
        """
        Save configuration to .vibeshield.yml

        Args:
            config: VibeShieldConfig object
            config_path: Path where to save

        Returns:
            True if successful
        """
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(
                    config.to_dict(),
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    indent=2
                )

            return True

        except OSError as e:
            print(f"Error: Failed to save config to {config_path}: {e}", file=sys.stderr)
            return False

    @staticmethod
    def create_default_config(project_root: Path) -> Path:
        """Create default .vibeshield.yml in project root"""
        config_path = project_root / ConfigManager.DEFAULT_CONFIG_NAME
        ConfigManager.save_config(VibeShieldConfig(), config_path)
        return config_path
