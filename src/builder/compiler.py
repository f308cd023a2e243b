"""Elm compiler invocation with atomic artifact replacement."""

import logging
import os
import shutil
import subprocess
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from .config import CompilerConfig
from .exceptions import CompileError, CompilerNotFoundError
from .models import Artifact
from .report import failing_paths, parse_report

logger = logging.getLogger(__name__)


class ElmCompiler:
    """
    Bundles Elm sources into a single JavaScript artifact.

    The compiler always writes to a hidden temporary file next to the
    output, which is renamed over the output only when the build succeeds,
    so the file server never sees a half-written bundle.
    """

    def __init__(self, config: Optional[CompilerConfig] = None, cwd: Optional[Path] = None):
        """
        Initialize the compiler invoker.

        Args:
            config: Compiler configuration
            cwd: Project directory; globs and relative outputs resolve here
        """
        self.config = config or CompilerConfig()
        self.cwd = (cwd or Path.cwd()).resolve()

    def init(self) -> str:
        """
        Check that the compiler is installed and return its version.

        Raises:
            CompilerNotFoundError: If the binary is not on PATH
        """
        binary = shutil.which(self.config.binary)
        if binary is None:
            raise CompilerNotFoundError(f"Compiler not found on PATH: {self.config.binary}")

        try:
            result = subprocess.run(
                [binary, *self.config.version_args],
                capture_output=True,
                text=True,
                cwd=self.cwd,
                timeout=30,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CompilerNotFoundError(f"Cannot run {binary}: {e}") from e

        version = (result.stdout or result.stderr).strip()
        logger.info(f"Using {self.config.binary} {version}")
        return version

    def resolve_sources(self, source_glob: str) -> List[Path]:
        """Readable files matching the glob, sorted for a stable command line."""
        return sorted(
            p for p in self.cwd.glob(source_glob)
            if p.is_file() and os.access(p, os.R_OK)
        )

    def command(self, sources: List[Path], output: Path, debug: bool) -> List[str]:
        """Build the compiler command line."""
        cmd = [self.config.binary, *self.config.make_args]
        cmd.extend(str(self._relative(s)) for s in sources)
        cmd.extend(["--output", str(output)])
        if debug:
            cmd.append("--debug")
        if self.config.json_report:
            cmd.append("--report=json")
        return cmd

    def build(self, source_glob: str, output_path: Path, debug: bool = False) -> Artifact:
        """
        Compile every source matching ``source_glob`` into ``output_path``.

        Args:
            source_glob: Glob of source files, relative to the project directory
            output_path: Where the bundled artifact is written
            debug: Build with the time-travelling debugger

        Returns:
            The written artifact

        Raises:
            CompileError: If there is nothing to compile or the compiler fails
        """
        sources = self.resolve_sources(source_glob)
        if not sources:
            raise CompileError(f"No source files match {source_glob}")

        output = Path(output_path)
        if not output.is_absolute():
            output = self.cwd / output
        output.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output.stem}.",
            suffix=f".tmp{output.suffix}",
            dir=output.parent,
        )
        os.close(fd)
        tmp_path = Path(tmp_name)

        cmd = self.command(sources, tmp_path, debug)
        logger.debug(f"$ {' '.join(cmd)}")
        started = time.time()
        try:
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    cwd=self.cwd,
                    timeout=self.config.timeout_seconds,
                )
            except FileNotFoundError as e:
                raise CompileError(f"Compiler not found: {self.config.binary}") from e
            except subprocess.TimeoutExpired as e:
                raise CompileError(
                    f"Compiler timed out after {self.config.timeout_seconds}s"
                ) from e

            if result.returncode != 0:
                diagnostics = parse_report(result.stderr)
                paths = failing_paths(diagnostics)
                summary = f"Build failed in {', '.join(paths)}" if paths else "Build failed"
                raise CompileError(summary, diagnostics)

            if tmp_path.stat().st_size == 0:
                raise CompileError(f"Compiler produced no output for {self._relative(output)}")

            os.replace(tmp_path, output)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        duration = time.time() - started
        logger.info(f"Built {self._relative(output)} from {len(sources)} source(s) in {duration:.2f}s")
        return Artifact(path=output, sources=sources, duration=duration)

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.cwd)
        except ValueError:
            return path
