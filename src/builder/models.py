"""
Data models for the builder package.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import time


@dataclass(frozen=True)
class Diagnostic:
    """One problem reported by the compiler."""
    title: str
    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def location(self) -> str:
        if self.path is None:
            return ""
        if self.line is None:
            return self.path
        return f"{self.path}:{self.line}:{self.column or 1}"

    def render(self) -> str:
        """Format like the compiler's own terminal output."""
        header = f"-- {self.title} "
        if self.location:
            header += f"--- {self.location}"
        return f"{header}\n\n{self.message.rstrip()}\n"


@dataclass(frozen=True)
class Artifact:
    """
    The bundled output of a successful build.

    Attributes:
        path: Path the bundle was written to
        sources: Source files that were compiled
        duration: Wall-clock seconds the compiler ran
        built_at: Unix timestamp when the artifact was moved into place
    """
    path: Path
    sources: List[Path] = field(default_factory=list)
    duration: float = 0.0
    built_at: float = field(default_factory=time.time)
