"""
Static File Server Package

Serves the application directory over HTTP and keeps a LiveReload
WebSocket channel to connected browsers.
"""

from .config import ServerConfig
from .exceptions import ServerError, PortUnavailableError
from .models import ReloadEvent, hello_message
from .reload import ReloadChannel
from .app import create_app, inject_script, resolve_static
from .service import StaticServer, bind_socket, serve

__all__ = [
    "ServerConfig",
    "ServerError",
    "PortUnavailableError",
    "ReloadEvent",
    "hello_message",
    "ReloadChannel",
    "create_app",
    "inject_script",
    "resolve_static",
    "StaticServer",
    "bind_socket",
    "serve",
]
