"""File system watcher using watchdog library."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEvent, FileSystemEventHandler

from .config import WatcherConfig
from .exceptions import WatchRootError
from .models import RawFSEvent

logger = logging.getLogger(__name__)


class FSEventHandler(FileSystemEventHandler):
    """Handler that converts watchdog file events to RawFSEvent."""

    def __init__(
        self,
        callback: Callable[[RawFSEvent], None],
        config: WatcherConfig,
        root: Path,
    ):
        super().__init__()
        self.callback = callback
        self.config = config
        self.root = root

    def _emit(self, event: FileSystemEvent, event_type: str) -> None:
        # Directory events carry no content of their own.
        if event.is_directory:
            return

        src_path = Path(_as_str(event.src_path))
        dest_path = None
        if event_type == "moved":
            dest_path = Path(_as_str(event.dest_path))
            if self.config.should_ignore(dest_path):
                return
        elif self.config.should_ignore(src_path):
            return

        self.callback(RawFSEvent(
            event_type=event_type,
            src_path=src_path,
            dest_path=dest_path,
            timestamp=time.time(),
        ))

    def on_created(self, event):
        self._emit(event, "created")

    def on_deleted(self, event):
        self._emit(event, "deleted")

    def on_modified(self, event):
        self._emit(event, "modified")

    def on_moved(self, event):
        self._emit(event, "moved")


def _as_str(path) -> str:
    if isinstance(path, bytes):
        return path.decode()
    return path


class FSWatcherPool:
    """
    Manages multiple watchdog observers, one per watch root.

    Provides a unified interface for starting and stopping
    watchers for multiple root directories.
    """

    def __init__(
        self,
        event_callback: Callable[[RawFSEvent], None],
        config: Optional[WatcherConfig] = None,
    ):
        """
        Initialize the watcher pool.

        Args:
            event_callback: Callback function for raw filesystem events
            config: Watcher configuration
        """
        self.event_callback = event_callback
        self.config = config or WatcherConfig()
        self._observers: Dict[Path, Observer] = {}
        self._lock = threading.Lock()

    def start_watching(self, root: Path) -> bool:
        """
        Start watching a root directory.

        Args:
            root: Path to the root directory

        Returns:
            True if watching started, False if already watching

        Raises:
            WatchRootError: If the directory cannot be observed
        """
        root = root.resolve()

        with self._lock:
            if root in self._observers:
                return False

            observer = Observer()
            handler = FSEventHandler(self.event_callback, self.config, root)
            try:
                observer.schedule(handler, str(root), recursive=self.config.recursive)
                observer.start()
            except OSError as e:
                raise WatchRootError(f"Cannot watch {root}: {e}") from e

            self._observers[root] = observer
            logger.debug(f"Watching {root}")
            return True

    def stop_watching(self, root: Path) -> bool:
        """
        Stop watching a root directory.

        Returns:
            True if watching stopped, False if not watching
        """
        root = root.resolve()

        with self._lock:
            observer = self._observers.pop(root, None)

        if observer is None:
            return False
        observer.stop()
        observer.join(timeout=5.0)
        return True

    def stop_all(self) -> int:
        """
        Stop all watchers.

        Returns:
            Number of watchers stopped
        """
        with self._lock:
            observers = list(self._observers.values())
            self._observers.clear()

        for observer in observers:
            observer.stop()
        for observer in observers:
            observer.join(timeout=5.0)
        return len(observers)

    def is_watching(self, root: Path) -> bool:
        root = root.resolve()
        with self._lock:
            return root in self._observers

    def get_watched_roots(self) -> List[Path]:
        with self._lock:
            return list(self._observers.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
