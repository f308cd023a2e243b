"""Watcher process: observers, debouncing and delivery of settled changes."""

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

from .config import WatcherConfig
from .event_processor import EventProcessor
from .exceptions import WatcherAlreadyRunningError, WatchRootError
from .fs_watcher import FSWatcherPool
from .models import ChangeEvent
from .watch_set import WatchSet

logger = logging.getLogger(__name__)


class WatcherProcess:
    """
    Watches the roots of a watch set and delivers settled changes.

    watchdog callbacks only feed the debouncer; a single flush thread hands
    settled ChangeEvents to ``sink`` in timestamp order.
    """

    def __init__(
        self,
        watch_set: WatchSet,
        sink: Callable[[ChangeEvent], None],
        config: Optional[WatcherConfig] = None,
    ):
        """
        Initialize the watcher process.

        Args:
            watch_set: Globs to watch and their roles
            sink: Receives each settled change, typically a queue put
            config: Watcher configuration
        """
        self.config = config or WatcherConfig()
        self.watch_set = watch_set
        self.sink = sink

        self._event_processor = EventProcessor(watch_set, self.config)
        self._fs_watcher_pool = FSWatcherPool(self._event_processor.process, self.config)

        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def start_async(self) -> None:
        """
        Start observers and the flush thread, then return.

        Raises:
            WatcherAlreadyRunningError: If already running
            WatchRootError: If a root cannot be observed
        """
        with self._lock:
            if self._running:
                raise WatcherAlreadyRunningError("Watcher is already running")
            self._running = True
            self._stop_event.clear()

        roots = self.watch_set.watch_roots()
        if not roots:
            logger.warning("No existing directory to watch")
        try:
            for root in roots:
                self._fs_watcher_pool.start_watching(root)
        except WatchRootError:
            self._fs_watcher_pool.stop_all()
            with self._lock:
                self._running = False
            raise

        for entry in self.watch_set:
            logger.info(f"Watching {entry.pattern} ({entry.role.value})")

        self._thread = threading.Thread(target=self._flush_loop, name="WatcherFlush", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop observers and the flush thread. Pending changes are dropped."""
        with self._lock:
            if not self._running:
                return
            self._running = False

        self._stop_event.set()
        self._fs_watcher_pool.stop_all()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None

    def _flush_loop(self) -> None:
        """Worker loop that periodically delivers settled changes."""
        interval = self.config.flush_interval_ms / 1000.0
        logger.debug(f"Flush loop started, interval={interval}s")

        while not self._stop_event.is_set():
            try:
                for event in self._event_processor.flush():
                    logger.debug(f"Change settled: {event.kind.value} {event.path}")
                    self.sink(event)
            except Exception as e:
                logger.error(f"Flush loop error: {e}")

            self._stop_event.wait(timeout=interval)

    def get_watched_roots(self) -> List[Path]:
        return self._fs_watcher_pool.get_watched_roots()

    @property
    def is_running(self) -> bool:
        return self._running

    def close(self) -> None:
        self.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
