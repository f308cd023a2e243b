"""Command-line options of the dev server."""

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "sample/app.js"
DEFAULT_DIR = "sample"


@dataclass(frozen=True)
class Options:
    """
    Options resolved from the command line once at startup.

    Attributes:
        output_path: Where the bundled application is written
        source_dir: Directory served over HTTP
        debug: Whether to build with the Elm debugger
    """
    output_path: Path = Path(DEFAULT_OUTPUT)
    source_dir: Path = Path(DEFAULT_DIR)
    debug: bool = False


class _OptionParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message):
        raise InvalidArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _OptionParser(
        prog="elm-devserver",
        description="Serve an Elm application, rebuild it on change and live-reload the browser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve ./sample and build to sample/app.js
  python -m src.cli

  # Custom output and served directory, with the Elm debugger
  python -m src.cli --output build/app.js --dir public --debug
        """,
    )
    parser.add_argument("--output", metavar="PATH", default=DEFAULT_OUTPUT, help="path to built application")
    parser.add_argument("--dir", metavar="PATH", default=DEFAULT_DIR, help="path to sources of blog")
    parser.add_argument("--debug", action="store_true", help="pass --debug to elm make")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging and log every request")
    return parser


def options_from_args(args: argparse.Namespace) -> Options:
    return Options(
        output_path=Path(args.output),
        source_dir=Path(args.dir),
        debug=bool(args.debug),
    )


def parse_options(argv: Optional[List[str]] = None) -> Options:
    """
    Parse command-line arguments into Options.

    Raises:
        InvalidArgumentError: On unknown flags or missing flag values
    """
    return options_from_args(build_parser().parse_args(argv))


def log_options(options: Options) -> None:
    """Write the resolved configuration to the log."""
    logger.info(f"output = {options.output_path}")
    logger.info(f"dir = {options.source_dir}")
    logger.info(f"debug = {str(options.debug).lower()}")
