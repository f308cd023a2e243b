"""Custom exceptions for the static file server package."""


class ServerError(Exception):
    """Base exception for static file server errors."""
    pass


class PortUnavailableError(ServerError):
    """The configured port could not be bound."""
    def __init__(self, message: str, host: str = None, port: int = None):
        super().__init__(message)
        self.host = host
        self.port = port

