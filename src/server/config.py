"""Configuration for the static file server package."""

from dataclasses import dataclass


@dataclass
class ServerConfig:
    """
    Configuration options for the static file server.

    Attributes:
        host: Interface to bind
        port: TCP port to bind; 0 picks a free port
        livereload_path: WebSocket path of the reload channel
        inject_script: Whether HTML pages get the live-reload client injected
        log_level: uvicorn log level
        access_log: Whether uvicorn logs every request (shown at log level info)
        startup_timeout: Seconds to wait for uvicorn to report it started
    """
    host: str = "0.0.0.0"
    port: int = 8000
    livereload_path: str = "/livereload"
    inject_script: bool = True
    log_level: str = "warning"
    access_log: bool = False
    startup_timeout: float = 5.0
