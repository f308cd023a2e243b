"""
Builder Package

Invokes the Elm compiler to bundle the application sources into one
JavaScript artifact, replacing the previous artifact atomically.
"""

from .config import CompilerConfig
from .exceptions import BuildError, CompileError, CompilerNotFoundError
from .models import Artifact, Diagnostic
from .report import parse_report
from .compiler import ElmCompiler

__all__ = [
    "CompilerConfig",
    "BuildError",
    "CompileError",
    "CompilerNotFoundError",
    "Artifact",
    "Diagnostic",
    "parse_report",
    "ElmCompiler",
]
