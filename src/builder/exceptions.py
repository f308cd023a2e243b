"""
Custom exceptions for the builder package.
"""

from typing import List, Optional


class BuildError(Exception):
    """Base exception for builder errors."""
    pass


class CompilerNotFoundError(BuildError):
    """The compiler binary is not installed or not on PATH."""
    pass


class CompileError(BuildError):
    """
    A build did not produce an artifact.

    Carries the compiler diagnostics so the message names every failing
    source file.
    """
    def __init__(self, message: str, diagnostics: Optional[List] = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])

    def __str__(self) -> str:
        if not self.diagnostics:
            return self.args[0]
        lines = [self.args[0]]
        for diagnostic in self.diagnostics:
            lines.append(diagnostic.render())
        return "\n".join(lines)
