#!/usr/bin/env python3
"""
CLI for the Elm dev server.

Usage:
    python -m src.cli
    python -m src.cli --output build/app.js --dir public --debug
"""

import logging
import signal
import sys
import time
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.builder import CompilerNotFoundError
from src.devserver import (
    DevServerConfig,
    DevServerProcess,
    InvalidArgumentError,
    build_parser,
    log_options,
    options_from_args,
)
from src.server import PortUnavailableError, ServerError
from src.watcher import WatcherError


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        self._previous = {
            signal.SIGINT: signal.signal(signal.SIGINT, self._handler),
            signal.SIGTERM: signal.signal(signal.SIGTERM, self._handler),
        }

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)


def main(argv: Optional[List[str]] = None, config: Optional[DevServerConfig] = None) -> int:
    """Run the dev server until interrupted. Returns the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except InvalidArgumentError as e:
        logger.error(f"Invalid arguments: {e}")
        parser.print_usage(sys.stderr)
        return 2

    config = config or DevServerConfig()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        config.server.access_log = True
        config.server.log_level = "info"

    options = options_from_args(args)
    log_options(options)

    process = DevServerProcess(options, config=config)
    try:
        process.compiler.init()
    except CompilerNotFoundError as e:
        logger.warning(f"{e}; builds will fail until it is installed")

    shutdown = GracefulShutdown()
    try:
        try:
            process.start_async()
        except PortUnavailableError as e:
            logger.error(f"Port unavailable: {e}")
            return 1
        except (ServerError, WatcherError) as e:
            logger.error(f"Startup failed: {e}")
            return 1

        logger.info("Press Ctrl+C to stop")
        while not shutdown.should_exit:
            time.sleep(0.5)
    finally:
        process.stop()
        shutdown.restore()

    logger.info("Dev server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
