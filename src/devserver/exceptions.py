"""Custom exceptions for the dev server package."""


class DevServerError(Exception):
    """Base exception for dev server errors."""
    pass


class InvalidArgumentError(DevServerError):
    """Command-line arguments do not follow the option grammar."""
    pass


class DevServerAlreadyRunningError(DevServerError):
    """The dev server is already running."""
    pass
