"""Data models for the static file server package."""

from dataclasses import dataclass, field
import time

LIVERELOAD_PROTOCOL = "http://livereload.com/protocols/official-7"
SERVER_NAME = "elm-devserver"


@dataclass(frozen=True)
class ReloadEvent:
    """
    A request to reload browsers after a file changed.

    Attributes:
        path: Path of the changed file, as given by the caller
        timestamp: Unix timestamp when the reload was requested
    """
    path: str
    timestamp: float = field(default_factory=time.time)

    def to_message(self) -> dict:
        """LiveReload protocol ``reload`` command."""
        return {
            "command": "reload",
            "path": self.path,
            "liveCSS": True,
        }


def hello_message() -> dict:
    """LiveReload protocol handshake sent to each new client."""
    return {
        "command": "hello",
        "protocols": [LIVERELOAD_PROTOCOL],
        "serverName": SERVER_NAME,
    }
