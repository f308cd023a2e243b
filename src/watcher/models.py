"""Data models for the file watcher package."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional
import time


class Role(Enum):
    """What a change to a watched file should trigger."""
    COMPILE = "compile"
    RELOAD = "reload"


class ChangeKind(Enum):
    """Types of file system changes."""
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True)
class ChangeEvent:
    """
    A settled change to a file in the watch set.

    Attributes:
        path: Absolute path of the changed file (destination for moves)
        role: Whether the change triggers a rebuild or a reload
        kind: The kind of change reported by the file system
        timestamp: Unix timestamp of the last raw event for this path
    """
    path: Path
    role: Role
    kind: ChangeKind = ChangeKind.MODIFIED
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self):
        if not self.path.is_absolute():
            raise ValueError(f"path must be absolute: {self.path}")

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and serialization."""
        return {
            "path": str(self.path),
            "role": self.role.value,
            "kind": self.kind.value,
            "timestamp": self.timestamp,
        }


@dataclass
class RawFSEvent:
    """
    Raw event from the filesystem watcher before processing.

    Attributes:
        event_type: Raw event type string (created, deleted, modified, moved)
        src_path: Source path of the event
        dest_path: Destination path (for move events)
        is_directory: Whether this is a directory event
        timestamp: Unix timestamp when the event occurred
    """
    event_type: str
    src_path: Path
    dest_path: Optional[Path] = None
    is_directory: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def effective_path(self) -> Path:
        """The path whose content changed: the destination of a move."""
        return self.dest_path if self.dest_path is not None else self.src_path
