"""Live-reload channel: pushes reload commands to connected browsers."""

import asyncio
import concurrent.futures
import logging
import threading
from pathlib import Path
from typing import List, Optional, Set, Union

from fastapi import WebSocket

from .models import ReloadEvent, hello_message

logger = logging.getLogger(__name__)


class ReloadChannel:
    """
    Set of connected live-reload clients on the server's event loop.

    ``push_reload`` may be called from any thread; the broadcast itself
    runs on the loop that owns the WebSockets. Only clients connected at
    the time of the push are notified and nothing is replayed later.
    """

    def __init__(self):
        self._clients: Set[WebSocket] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a client, greet it and start sending it reloads."""
        await websocket.accept()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._clients.add(websocket)
        await websocket.send_json(hello_message())
        logger.debug(f"Live-reload client connected ({self.client_count()} total)")

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            self._clients.discard(websocket)
        logger.debug(f"Live-reload client disconnected ({self.client_count()} total)")

    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    def push_reload(self, path: Union[str, Path]) -> Optional[concurrent.futures.Future]:
        """
        Notify every currently connected client that ``path`` changed.

        Args:
            path: The changed file

        Returns:
            A future resolving to the number of clients reached, or None
            when nobody is connected
        """
        event = ReloadEvent(path=str(path))
        with self._lock:
            clients = list(self._clients)
            loop = self._loop

        if not clients or loop is None or loop.is_closed():
            logger.debug(f"No live-reload clients for {event.path}")
            return None

        logger.info(f"LiveReload {event.path}")
        return asyncio.run_coroutine_threadsafe(self._broadcast(clients, event), loop)

    async def _broadcast(self, clients: List[WebSocket], event: ReloadEvent) -> int:
        message = event.to_message()
        sent = 0
        for websocket in clients:
            try:
                await websocket.send_json(message)
                sent += 1
            except Exception as e:
                logger.debug(f"Dropping live-reload client: {e}")
                self.disconnect(websocket)
        return sent
