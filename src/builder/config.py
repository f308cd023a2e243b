"""
Configuration for the builder package.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class CompilerConfig:
    """Configuration for the Elm compiler invocation."""
    binary: str = "elm"
    make_args: List[str] = field(default_factory=lambda: ["make"])
    source_glob: str = "src/**/*.elm"
    json_report: bool = True
    timeout_seconds: Optional[float] = None  # None waits for the compiler indefinitely
    version_args: List[str] = field(default_factory=lambda: ["--version"])
