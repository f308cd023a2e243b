"""
File Watcher Package

Watches the source and asset globs of a dev server and delivers settled,
classified change events to a single consumer.

Features:
- Watch set with compile and reload roles
- Recursive watchdog observers over the minimal set of roots
- Ignore patterns for editor and build noise
- Per-path debouncing of bursts of raw events
"""

from .models import (
    Role,
    ChangeKind,
    ChangeEvent,
    RawFSEvent,
)

from .config import WatcherConfig

from .exceptions import (
    WatcherError,
    WatchRootError,
    WatcherAlreadyRunningError,
)

from .watch_set import WatchSet, glob_to_regex
from .fs_watcher import FSWatcherPool, FSEventHandler
from .event_processor import EventProcessor, ChangeDebouncer
from .process import WatcherProcess


__all__ = [
    # Models
    "Role",
    "ChangeKind",
    "ChangeEvent",
    "RawFSEvent",
    # Config
    "WatcherConfig",
    # Exceptions
    "WatcherError",
    "WatchRootError",
    "WatcherAlreadyRunningError",
    # Components
    "WatchSet",
    "glob_to_regex",
    "FSWatcherPool",
    "FSEventHandler",
    "EventProcessor",
    "ChangeDebouncer",
    # Main Process
    "WatcherProcess",
]

__version__ = "0.1.0"
