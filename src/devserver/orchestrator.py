"""Watch orchestrator: serializes rebuilds and forwards reloads."""

import logging
import queue
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from src.builder import CompileError
from src.watcher import ChangeEvent, Role, WatcherAlreadyRunningError
from src.watcher.watch_set import DEFAULT_SOURCE_GLOB

from .options import Options

logger = logging.getLogger(__name__)


class BuildState(Enum):
    """States of the rebuild state machine."""
    IDLE = "idle"
    BUILDING = "building"
    ERROR = "error"


def _stamp(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


class WatchOrchestrator:
    """
    Drives the source change -> rebuild -> reload loop.

    Change events from the watcher are funneled through one queue and
    consumed by a single thread, so at most one build is ever in flight.
    Compile changes that pile up while a build runs are coalesced into a
    single follow-up build. Reload changes go straight to the reload sink.

    A build failure moves the machine to ERROR and is logged; the next
    source change starts a new build as usual.
    """

    def __init__(
        self,
        options: Options,
        compiler: Any,
        reload_sink: Callable[[str], Any],
        source_glob: str = DEFAULT_SOURCE_GLOB,
        base_dir: Optional[Path] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            options: Resolved CLI options
            compiler: Object with ``build(source_glob, output_path, debug)``
            reload_sink: Called with the path of every reload to push
            source_glob: Sources handed to the compiler
            base_dir: Project directory; pushed paths are relative to it
        """
        self.options = options
        self.compiler = compiler
        self.reload_sink = reload_sink
        self.source_glob = source_glob
        self.base_dir = (base_dir or Path.cwd()).resolve()

        self._queue: "queue.Queue[Optional[ChangeEvent]]" = queue.Queue()
        self._state = BuildState.IDLE
        self._thread: Optional[threading.Thread] = None
        self._idle = threading.Condition()
        self._unfinished = 0
        self._artifact: Optional[Tuple[Path, Optional[int]]] = None

        self.build_count = 0
        self.failure_count = 0
        self.reload_count = 0

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, event: ChangeEvent) -> None:
        """Queue a change event. Safe to call from any thread."""
        with self._idle:
            self._unfinished += 1
        self._queue.put(event)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every submitted event has been handled.

        Returns:
            False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._unfinished == 0, timeout)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Start the consumer thread.

        Raises:
            WatcherAlreadyRunningError: If already running
        """
        if self.is_running:
            raise WatcherAlreadyRunningError("Orchestrator is already running")
        self._thread = threading.Thread(target=self._run, name="WatchOrchestrator", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop after the in-flight build, dropping events still queued."""
        if not self.is_running:
            return
        self._queue.put(None)
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            # Still building; keep the handle so start() cannot add a second consumer.
            logger.warning("Orchestrator did not stop in time; build still running")
            return
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def state(self) -> BuildState:
        return self._state

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def _run(self) -> None:
        logger.debug("Orchestrator loop started")
        while True:
            event = self._queue.get()
            if event is None:
                break
            handled = 1
            stop = False
            try:
                if event.role is Role.COMPILE:
                    coalesced, deferred, stop = self._drain()
                    handled += len(coalesced) + len(deferred)
                    self._rebuild([event] + coalesced)
                    for other in deferred:
                        self._reload(other)
                else:
                    self._reload(event)
            except Exception as e:
                logger.error(f"Error handling {event.path}: {e}")
            finally:
                self._done(handled)
            if stop:
                break
        self._discard_pending()
        logger.debug("Orchestrator loop stopped")

    def _drain(self) -> Tuple[List[ChangeEvent], List[ChangeEvent], bool]:
        """Take everything queued: compile changes, other changes, stop flag."""
        compiles: List[ChangeEvent] = []
        others: List[ChangeEvent] = []
        stop = False
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is None:
                stop = True
            elif item.role is Role.COMPILE:
                compiles.append(item)
            else:
                others.append(item)
        return compiles, others, stop

    def _discard_pending(self) -> None:
        dropped = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not None:
                dropped += 1
        self._done(dropped)

    def _done(self, count: int) -> None:
        with self._idle:
            self._unfinished -= count
            self._idle.notify_all()

    def _rebuild(self, events: List[ChangeEvent]) -> None:
        changed = ", ".join(self._display(e.path) for e in events)
        self._state = BuildState.BUILDING
        self.build_count += 1
        logger.info(f"Rebuilding after change to {changed}")

        try:
            artifact = self.compiler.build(
                self.source_glob,
                self.options.output_path,
                self.options.debug,
            )
        except CompileError as e:
            self._state = BuildState.ERROR
            self.failure_count += 1
            logger.error(f"{e}")
            return
        except Exception as e:
            self._state = BuildState.ERROR
            self.failure_count += 1
            logger.error(f"Build crashed: {e}")
            return

        self._state = BuildState.IDLE
        path = Path(artifact.path)
        if not path.is_absolute():
            path = self.base_dir / path
        path = path.resolve()
        self._artifact = (path, _stamp(path))
        self._push(path)

    def _reload(self, event: ChangeEvent) -> None:
        path = event.path.resolve()
        if self._artifact is not None and path == self._artifact[0]:
            stamp = self._artifact[1]
            if stamp is not None and stamp == _stamp(path):
                logger.debug(f"Reload for {self._display(path)} already pushed after build")
                return
        self._push(path)

    def _push(self, path: Path) -> None:
        try:
            self.reload_sink(self._display(path))
            self.reload_count += 1
        except Exception as e:
            logger.error(f"Reload push failed for {self._display(path)}: {e}")

    def _display(self, path: Path) -> str:
        try:
            return Path(path).resolve().relative_to(self.base_dir).as_posix()
        except ValueError:
            return str(path)
