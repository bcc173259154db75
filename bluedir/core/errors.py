"""Domain-specific errors for bluedir."""

from __future__ import annotations


class BluedirError(Exception):
    """Base error for bluedir.

    ``errno`` carries the underlying OS error code when one exists, so the
    session can render it next to the message.
    """

    def __init__(self, message: str, *, errno: int = 0) -> None:
        super().__init__(message)
        self.errno = errno


class ConfigError(BluedirError):
    """Raised when the settings file is unreadable or violates its schema."""


class BackendOpenError(BluedirError):
    """Raised when a backend cannot be opened."""


class BackendNotFoundError(BackendOpenError):
    """Raised when no registered backend matches an identifier."""


class TransportError(BluedirError):
    """Base transport error (subprocess or bus)."""


class TransportConnectError(TransportError):
    """Raised when the system bus connection cannot be established."""


class TransportTimeoutError(TransportError):
    """Raised when a bus call gets no reply in time."""


class RemoteCallError(BluedirError):
    """Raised when the remote service answered a call with an error reply."""

    def __init__(self, name: str, message: str = "") -> None:
        super().__init__(f"{name}: {message}" if message else name)
        self.name = name


class DecodeError(BluedirError):
    """Raised when a bus reply does not follow the expected object tree schema."""


class AdapterNotFoundError(BluedirError):
    """Raised when no controlling adapter can be resolved."""
