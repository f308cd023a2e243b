"""Configuration for the dev server package."""

from dataclasses import dataclass, field

from src.builder import CompilerConfig
from src.server import ServerConfig
from src.watcher import WatcherConfig


@dataclass
class DevServerConfig:
    """
    Tunables of every component, kept apart from the CLI options.

    Attributes:
        compiler: Compiler invocation settings
        server: Static file server settings
        watcher: File watcher settings
        stop_timeout: Seconds to wait for an in-flight build on shutdown
    """
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    stop_timeout: float = 30.0
