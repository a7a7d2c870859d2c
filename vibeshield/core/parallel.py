#!/usr/bin/env python3
"""
Vibe Shield Scanner
Runs the matcher engine over (path, content) pairs, optionally in parallel

Features:
- Sequential or process-pool execution (files are independent)
- Sequential fallback when multiprocessing is unavailable
- Progress tracking with tqdm
- Deterministic merge: results never depend on worker scheduling
"""

from multiprocessing import Pool, cpu_count
from typing import Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from vibeshield.core.aggregator import ScanResult, build_issues
from vibeshield.core.matcher import MatcherEngine, RawMatch
from vibeshield.rules import PatternRegistry

Source = Tuple[str, str]


class VibeShieldScanner:
    """Scan file contents against a pattern registry"""

    def __init__(self,
                 registry: PatternRegistry,
                 workers: Optional[int] = 1,
                 show_progress: bool = False):
        self.engine = MatcherEngine(registry)
        self.workers = workers or cpu_count()
        self.show_progress = show_progress

    def scan(self, sources: Sequence[Source], warnings: Iterable[str] = ()) -> ScanResult:
        """
        Scan every source and aggregate the results.

        Args:
            sources: (file_path, content) pairs
            warnings: Non-fatal collection warnings to carry into the result

        Returns:
            ScanResult with issues sorted by file, line and registry order
        """
        sources = list(sources)

        if self.workers > 1 and len(sources) > 1:
            per_file = self.scan_parallel(sources)
        else:
            per_file = self._scan_sequential(sources)

        matches: List[RawMatch] = []
        for file_matches in per_file:
            matches.extend(file_matches)

        return ScanResult(
            issues=build_issues(matches),
            warnings=list(warnings),
            files_scanned=len(sources),
        )

    def scan_parallel(self, sources: List[Source]) -> List[List[RawMatch]]:
        """Scan on a process pool, with fallback to sequential if it cannot start"""
        workers = min(self.workers, len(sources))
        try:
            with Pool(processes=workers) as pool:
                return list(tqdm(
                    pool.imap(self.engine.scan_source, sources),
                    total=len(sources),
                    desc="Scanning files",
                    unit="file",
                    disable=not self.show_progress,
                ))
        except (PermissionError, OSError):
            # Sandboxed environments (containers, CI runners) may forbid
            # the semaphores a pool needs
            return self._scan_sequential(sources)

    def _scan_sequential(self, sources: List[Source]) -> List[List[RawMatch]]:
        return [
            self.engine.scan_source(source)
            for source in tqdm(sources, desc="Scanning files", unit="file",
                               disable=not self.show_progress)
        ]
