"""Exception taxonomy for the observer client.

Every failure surfaces to the immediate caller of the operation that
triggered it. Nothing here is retried and nothing is fatal to the process.
"""

from __future__ import annotations


class ObserverError(Exception):
    """Base class for all observer client errors."""


class AuthenticationError(ObserverError):
    """The supervising server rejected the credential handshake.

    The connection stays open; a later command re-attempts authentication.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CommandError(ObserverError):
    """A command acknowledgment carried a non-empty error.

    ``str(exc)`` is the raw error string supplied by the server.
    """

    def __init__(self, command: str, error: str) -> None:
        super().__init__(error)
        self.command = command
        self.error = error


class NotConnectedError(ObserverError, ConnectionError):
    """A command was issued while the transport connection is not open."""


class TransportError(ObserverError, ConnectionError):
    """The underlying transport could not be opened."""


class ProtocolError(ObserverError):
    """An acknowledgment or payload had an unexpected shape."""


class ConfigError(ObserverError, ValueError):
    """Client configuration is missing or invalid."""
