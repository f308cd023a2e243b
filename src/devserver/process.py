"""Dev server process: wires the server, the orchestrator and the watcher."""

import logging
import threading
from pathlib import Path
from typing import Optional

from src.builder import ElmCompiler
from src.server import StaticServer
from src.watcher import WatcherProcess, WatchSet

from .config import DevServerConfig
from .exceptions import DevServerAlreadyRunningError
from .options import Options
from .orchestrator import WatchOrchestrator

logger = logging.getLogger(__name__)


class DevServerProcess:
    """
    Main orchestrator for the dev server.

    Every component is built from the same immutable Options. Startup
    order is server, orchestrator, watcher so that a taken port aborts
    before anything is watched.
    """

    def __init__(
        self,
        options: Options,
        config: Optional[DevServerConfig] = None,
        base_dir: Optional[Path] = None,
    ):
        """
        Initialize the dev server.

        Args:
            options: Resolved CLI options
            config: Component tunables
            base_dir: Project directory (defaults to the working directory)
        """
        self.options = options
        self.config = config or DevServerConfig()
        self.base_dir = (base_dir or Path.cwd()).resolve()

        self.watch_set = WatchSet.from_options(
            options,
            source_glob=self.config.compiler.source_glob,
            base_dir=self.base_dir,
        )
        self.compiler = ElmCompiler(self.config.compiler, cwd=self.base_dir)
        self.server = StaticServer(self.base_dir / options.source_dir, self.config.server)
        self.orchestrator = WatchOrchestrator(
            options,
            self.compiler,
            self.server.push_reload,
            source_glob=self.config.compiler.source_glob,
            base_dir=self.base_dir,
        )
        self.watcher = WatcherProcess(self.watch_set, self.orchestrator.submit, self.config.watcher)

        self._running = False
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    def start_async(self) -> None:
        """
        Start serving and watching, then return.

        Raises:
            DevServerAlreadyRunningError: If already running
            PortUnavailableError: If the HTTP port is taken
            WatcherError: If the watch roots cannot be observed
        """
        with self._lock:
            if self._running:
                raise DevServerAlreadyRunningError("Dev server is already running")
            self._running = True
            self._stop_event.clear()

        try:
            self.server.start()
            self.orchestrator.start()
            self.watcher.start_async()
        except Exception:
            self._shutdown()
            raise

    def start(self) -> None:
        """
        Start the dev server (blocking) until stop() or Ctrl+C.
        """
        self.start_async()
        try:
            while not self._stop_event.is_set():
                self._stop_event.wait(timeout=0.5)
        except KeyboardInterrupt:
            pass
        finally:
            self._shutdown()

    def stop(self) -> None:
        self._stop_event.set()
        self._shutdown()

    def _shutdown(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False

        self.watcher.stop()
        self.orchestrator.stop(timeout=self.config.stop_timeout)
        self.server.stop()
        logger.debug("Dev server stopped")

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
