"""Run the static file server via uvicorn in a background thread."""

import logging
import socket
import threading
import time
from pathlib import Path
from typing import Any, Optional, Union

from .app import create_app
from .config import ServerConfig
from .exceptions import PortUnavailableError, ServerError
from .reload import ReloadChannel

logger = logging.getLogger(__name__)


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Bind the listening socket up front so a taken port fails fast.

    Raises:
        PortUnavailableError: If the address cannot be bound
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise PortUnavailableError(
            f"Cannot bind {host}:{port}: {e.strerror or e}", host=host, port=port
        ) from e
    sock.set_inheritable(True)
    return sock


class StaticServer:
    """
    Serves a directory over HTTP with a live-reload side channel.

    Owns the ReloadChannel; the watch loop pushes reloads through
    ``push_reload`` from its own thread.
    """

    def __init__(
        self,
        root_dir: Path,
        config: Optional[ServerConfig] = None,
        channel: Optional[ReloadChannel] = None,
    ):
        self.root_dir = Path(root_dir)
        self.config = config or ServerConfig()
        self.channel = channel or ReloadChannel()
        self._thread: Optional[threading.Thread] = None
        self._server: Any = None
        self._socket: Optional[socket.socket] = None

    def start(self) -> None:
        """
        Bind the port and start uvicorn in a daemon thread.

        Raises:
            PortUnavailableError: If the port is taken
            ServerError: If uvicorn does not come up in time
        """
        import uvicorn

        if not self.root_dir.is_dir():
            logger.warning(f"Served directory does not exist yet: {self.root_dir}")

        self._socket = bind_socket(self.config.host, self.config.port)

        app = create_app(self.root_dir, self.channel, self.config)
        config = uvicorn.Config(
            app,
            log_level=self.config.log_level,
            access_log=self.config.access_log,
        )
        self._server = uvicorn.Server(config)

        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [self._socket]},
            name="StaticServer",
            daemon=True,
        )
        self._thread.start()

        port = self.port
        deadline = time.time() + self.config.startup_timeout
        while not self._server.started:
            if not self._thread.is_alive() or time.time() > deadline:
                self.stop()
                raise ServerError(f"Server failed to start on port {port}")
            time.sleep(0.02)

        logger.info(f"Serving {self.root_dir} at {self.url}")

    def push_reload(self, path: Union[str, Path]):
        """Forward a reload to every connected browser."""
        return self.channel.push_reload(path)

    @property
    def port(self) -> int:
        if self._socket is None:
            return self.config.port
        return self._socket.getsockname()[1]

    @property
    def url(self) -> str:
        host = self.config.host
        if host in ("0.0.0.0", "::"):
            host = "localhost"
        return f"http://{host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None


def serve(root_dir: Path, port: int = 8000, host: str = "0.0.0.0") -> StaticServer:
    """Start serving ``root_dir`` on ``port`` and return the running server."""
    server = StaticServer(root_dir, ServerConfig(host=host, port=port))
    server.start()
    return server
