"""Parsing of the compiler's ``--report=json`` output."""

import json
import logging
from typing import Any, List

from .models import Diagnostic

logger = logging.getLogger(__name__)


def _flatten_message(chunks: Any) -> str:
    """Join a styled message (strings and ``{"string": ...}`` chunks) into text."""
    if isinstance(chunks, str):
        return chunks
    parts = []
    for chunk in chunks or []:
        if isinstance(chunk, str):
            parts.append(chunk)
        elif isinstance(chunk, dict):
            parts.append(str(chunk.get("string", "")))
    return "".join(parts)


def _region_start(problem: dict) -> tuple:
    start = (problem.get("region") or {}).get("start") or {}
    return start.get("line"), start.get("column")


def parse_report(output: str) -> List[Diagnostic]:
    """
    Parse compiler stderr into diagnostics.

    Understands both report shapes: ``compile-errors`` (problems grouped
    per module) and a single top-level ``error``. Anything that is not a
    JSON report becomes one diagnostic holding the raw text.

    Args:
        output: Text the compiler wrote to stderr

    Returns:
        Diagnostics in the order the compiler reported them
    """
    text = output.strip()
    if not text:
        return []

    try:
        report = json.loads(text)
    except ValueError:
        return [Diagnostic(title="COMPILER OUTPUT", message=text)]

    if not isinstance(report, dict):
        return [Diagnostic(title="COMPILER OUTPUT", message=text)]

    kind = report.get("type")
    if kind == "compile-errors":
        diagnostics = []
        for error in report.get("errors", []):
            path = error.get("path")
            for problem in error.get("problems", []):
                line, column = _region_start(problem)
                diagnostics.append(Diagnostic(
                    title=problem.get("title", "ERROR"),
                    message=_flatten_message(problem.get("message")),
                    path=path,
                    line=line,
                    column=column,
                ))
        return diagnostics

    if kind == "error":
        return [Diagnostic(
            title=report.get("title", "ERROR"),
            message=_flatten_message(report.get("message")),
            path=report.get("path"),
        )]

    logger.debug(f"Unknown report type: {kind!r}")
    return [Diagnostic(title="COMPILER OUTPUT", message=text)]


def failing_paths(diagnostics: List[Diagnostic]) -> List[str]:
    """Distinct source paths named by the diagnostics, in order."""
    seen: List[str] = []
    for diagnostic in diagnostics:
        if diagnostic.path and diagnostic.path not in seen:
            seen.append(diagnostic.path)
    return seen
