"""Configuration for the file watcher package."""

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class WatcherConfig:
    """
    Configuration options for the file watcher.

    Attributes:
        debounce_ms: Milliseconds a path must stay quiet before its change is emitted
        flush_interval_ms: Interval for flushing settled changes
        ignore_patterns: Glob patterns for files to ignore
        recursive: Whether to watch directories recursively
    """
    debounce_ms: int = 50
    flush_interval_ms: int = 25
    ignore_patterns: List[str] = field(default_factory=lambda: [
        "*.tmp",
        "*.swp",
        "*.swo",
        "*~",
        ".#*",
        ".*.tmp*",
        ".git/*",
        ".git",
        "elm-stuff/*",
        "elm-stuff",
        "node_modules/*",
        ".DS_Store",
        "Thumbs.db",
    ])
    recursive: bool = True

    def should_ignore(self, path: Path) -> bool:
        """
        Check if a path should be ignored based on ignore patterns.

        Args:
            path: Path to check

        Returns:
            True if the path should be ignored
        """
        path_str = path.as_posix()
        name = path.name

        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(name, pattern):
                return True
            if fnmatch.fnmatch(path_str, f"*/{pattern}"):
                return True
            if fnmatch.fnmatch(path_str, pattern):
                return True

        return False
