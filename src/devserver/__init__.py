"""
Dev Server Package

Ties the compiler, the static file server and the file watcher into one
process: source change, rebuild, browser reload.
"""

from .options import Options, build_parser, parse_options, options_from_args, log_options
from .config import DevServerConfig
from .exceptions import DevServerError, InvalidArgumentError, DevServerAlreadyRunningError
from .orchestrator import BuildState, WatchOrchestrator
from .process import DevServerProcess

__all__ = [
    "Options",
    "build_parser",
    "parse_options",
    "options_from_args",
    "log_options",
    "DevServerConfig",
    "DevServerError",
    "InvalidArgumentError",
    "DevServerAlreadyRunningError",
    "BuildState",
    "WatchOrchestrator",
    "DevServerProcess",
]
