#!/usr/bin/env python3
"""
Vibe Shield File Discovery
Walks a project and turns candidate files into (path, content) pairs

Everything that touches the filesystem lives here; the matcher engine only
ever sees text. Files that cannot be used are reported as warnings, never
dropped silently (binary files excepted, which are not source code).
"""

import fnmatch
import os
from pathlib import Path
from typing import List, Optional, Tuple

from vibeshield.config import VibeShieldConfig

# How much of a file is sniffed for NUL bytes
BINARY_SNIFF_BYTES = 8192


class FileCollector:
    """Collect scannable sources under a project root"""

    def __init__(self, root: Path, config: Optional[VibeShieldConfig] = None):
        self.root = Path(root).resolve()
        self.config = config or VibeShieldConfig()
        self._extensions = {ext.lower() for ext in self.config.include_extensions}
        self._dir_patterns = [p.rstrip('/') for p in self.config.exclude_paths]

    def _display_path(self, file_path: Path) -> str:
        if self.root.is_file():
            return file_path.name
        return file_path.relative_to(self.root).as_posix()

    def _is_dir_excluded(self, dir_path: Path) -> bool:
        name = dir_path.name
        relative_path = dir_path.relative_to(self.root).as_posix()
        for pattern in self._dir_patterns:
            if '/' in pattern:
                # Multi-segment patterns match the path from the root or any deeper start
                if (fnmatch.fnmatch(relative_path, pattern)
                        or fnmatch.fnmatch(relative_path, f"*/{pattern}")):
                    return True
            elif name == pattern or fnmatch.fnmatch(name, pattern):
                return True
        return False

    def _is_candidate(self, file_path: Path) -> bool:
        name = file_path.name
        if any(fnmatch.fnmatch(name, pattern) for pattern in self.config.exclude_files):
            return False
        if file_path.suffix.lower() in self._extensions:
            return True
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.config.include_files)

    def find_scannable_files(self) -> List[Path]:
        """All candidate files under the root, sorted by relative path"""
        if self.root.is_file():
            return [self.root]

        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            # Prune in place so excluded trees are never entered
            dirnames[:] = sorted(
                d for d in dirnames if not self._is_dir_excluded(Path(dirpath) / d)
            )
            for filename in filenames:
                file_path = Path(dirpath) / filename
                if file_path.is_file() and self._is_candidate(file_path):
                    files.append(file_path)

        return sorted(files, key=self._display_path)

    def read_source(self, file_path: Path) -> Tuple[Optional[str], Optional[str]]:
        """
        Read one file as UTF-8 text.

        Returns:
            (content, None) on success, (None, warning) when the file is
            skipped with a reason, (None, None) for binary files
        """
        display = self._display_path(file_path)
        try:
            size = file_path.stat().st_size
            if size > self.config.max_file_size:
                return None, (
                    f"{display}: skipped, {size} bytes exceeds the "
                    f"{self.config.max_file_size} byte limit"
                )
            data = file_path.read_bytes()
        except OSError as e:
            return None, f"{display}: unreadable, skipped ({e.strerror or e})"

        if b'\x00' in data[:BINARY_SNIFF_BYTES]:
            return None, None

        try:
            # utf-8-sig drops a leading BOM so columns line up with editors
            text = data.decode('utf-8-sig')
        except UnicodeDecodeError:
            return None, f"{display}: not valid UTF-8, skipped"

        return text, None

    def collect(self) -> Tuple[List[Tuple[str, str]], List[str]]:
        """
        Read every scannable file.

        Returns:
            (sources, warnings) where sources are (relative_path, content)
        """
        sources = []
        warnings = []
        for file_path in self.find_scannable_files():
            content, warning = self.read_source(file_path)
            if warning:
                warnings.append(warning)
            if content is not None:
                sources.append((self._display_path(file_path), content))
        return sources, warnings
