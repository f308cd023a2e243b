"""Event processing: watch set classification and per-path debouncing."""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import WatcherConfig
from .models import ChangeEvent, ChangeKind, RawFSEvent, Role
from .watch_set import WatchSet

logger = logging.getLogger(__name__)


@dataclass
class PendingChange:
    """A change waiting for its path to settle."""
    path: Path
    role: Role
    kind: ChangeKind
    timestamp: float = field(default_factory=time.time)

    def to_event(self) -> ChangeEvent:
        return ChangeEvent(path=self.path, role=self.role, kind=self.kind, timestamp=self.timestamp)


class ChangeDebouncer:
    """
    Debounces rapid file change events.

    Editors and compilers usually touch a file several times per save, so
    changes on the same path are held until the path has been quiet for
    the debounce window and then emitted once.
    """

    def __init__(self, debounce_ms: int = 50):
        """
        Initialize the debouncer.

        Args:
            debounce_ms: Debounce window in milliseconds
        """
        self.debounce_ms = debounce_ms
        self._pending: Dict[Path, PendingChange] = {}
        self._lock = threading.Lock()

    def add(self, change: PendingChange) -> None:
        """
        Add a change to the debouncer.

        Coalescing rules:
        - Repeated changes on a path keep a single entry with the latest timestamp
        - CREATED followed by MODIFIED stays CREATED
        - Any other later kind replaces the earlier one
        """
        with self._lock:
            existing = self._pending.get(change.path)
            if existing is None:
                self._pending[change.path] = change
                return

            existing.timestamp = change.timestamp
            existing.role = change.role
            if not (existing.kind is ChangeKind.CREATED and change.kind is ChangeKind.MODIFIED):
                existing.kind = change.kind

    def flush(self, current_time: float) -> List[PendingChange]:
        """
        Flush changes whose path has been quiet for the debounce window.

        Returns:
            Settled changes, oldest first
        """
        window_sec = self.debounce_ms / 1000.0

        with self._lock:
            ready = [c for c in self._pending.values() if (current_time - c.timestamp) >= window_sec]
            for change in ready:
                del self._pending[change.path]

        return sorted(ready, key=lambda c: c.timestamp)

    def flush_all(self) -> List[PendingChange]:
        """Flush every pending change regardless of time."""
        with self._lock:
            changes = sorted(self._pending.values(), key=lambda c: c.timestamp)
            self._pending.clear()
        return changes

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()


_KINDS = {
    "created": ChangeKind.CREATED,
    "modified": ChangeKind.MODIFIED,
    "deleted": ChangeKind.DELETED,
    "moved": ChangeKind.MOVED,
}


class EventProcessor:
    """
    Turns raw watchdog events into debounced ChangeEvents.

    Only paths that belong to the watch set survive; everything else the
    recursive observers report is dropped here.
    """

    def __init__(self, watch_set: WatchSet, config: Optional[WatcherConfig] = None):
        self.watch_set = watch_set
        self.config = config or WatcherConfig()
        self._debouncer = ChangeDebouncer(self.config.debounce_ms)

    def process(self, raw_event: RawFSEvent) -> Optional[PendingChange]:
        """
        Process a raw filesystem event.

        Args:
            raw_event: The raw event from the filesystem watcher

        Returns:
            The pending change recorded, or None if the path is not watched
        """
        kind = _KINDS.get(raw_event.event_type)
        if kind is None or raw_event.is_directory:
            return None

        path = raw_event.effective_path.resolve()
        role = self.watch_set.classify(path)
        if role is None:
            logger.debug(f"Ignoring {raw_event.event_type}: {path}")
            return None

        change = PendingChange(path=path, role=role, kind=kind, timestamp=raw_event.timestamp)
        self._debouncer.add(change)
        return change

    def flush(self, current_time: Optional[float] = None) -> List[ChangeEvent]:
        """Return the changes that have settled, as events."""
        now = time.time() if current_time is None else current_time
        return [c.to_event() for c in self._debouncer.flush(now)]

    def flush_all(self) -> List[ChangeEvent]:
        return [c.to_event() for c in self._debouncer.flush_all()]

    def pending_count(self) -> int:
        return self._debouncer.pending_count()
