"""Custom exceptions for the file watcher package."""


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class WatchRootError(WatcherError):
    """A watch root could not be observed."""
    pass


class WatcherAlreadyRunningError(WatcherError):
    """Watcher is already running."""
    pass
