"""Connection state machine.

    DISCONNECTED --connect()--> CONNECTING --transport connect--> AUTHENTICATING
    AUTHENTICATING --auth settled--> READY | AUTH_FAILED
    READY <--auth settled--> AUTH_FAILED     (per-command re-authentication)
    CONNECTING --open failed--> DISCONNECTED
    any --transport disconnect--> DISCONNECTED

AUTH_FAILED keeps the transport open; only a disconnect signal closes it.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from .errors import ObserverError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Overall readiness of the client."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    AUTH_FAILED = "auth_failed"


# States in which the transport connection is open.
OPEN_STATES = frozenset(
    {ConnectionState.AUTHENTICATING, ConnectionState.READY, ConnectionState.AUTH_FAILED}
)

# States a connect attempt can settle into.
SETTLED_STATES = frozenset(
    {ConnectionState.READY, ConnectionState.AUTH_FAILED, ConnectionState.DISCONNECTED}
)


class ConnectionStateMachine:
    """Single owner of the client's ConnectionState.

    Driven by transport lifecycle signals and authentication outcomes; read
    by every outward-facing operation as a precondition.
    """

    def __init__(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._last_error: ObserverError | None = None
        self._waiters: list[asyncio.Future[ConnectionState]] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ConnectionState.READY

    @property
    def is_open(self) -> bool:
        """Whether the transport connection is open."""
        return self._state in OPEN_STATES

    @property
    def last_error(self) -> ObserverError | None:
        """Why the most recent connect or authentication attempt failed, if it did."""
        return self._last_error

    def request_connect(self) -> bool:
        """Record a connect request.

        Returns:
            True if the transport should be opened, False if a connection is
            already open or being opened.
        """
        if self._state is not ConnectionState.DISCONNECTED:
            logger.debug(f"Connect ignored in state {self._state.value}")
            return False
        self._last_error = None
        self._set(ConnectionState.CONNECTING)
        return True

    def connect_failed(self, error: ObserverError) -> None:
        """The transport could not be opened."""
        self._last_error = error
        self._set(ConnectionState.DISCONNECTED)

    def transport_connected(self) -> None:
        """The transport reported an open connection; authentication follows."""
        self._set(ConnectionState.AUTHENTICATING)

    def auth_settled(self, error: ObserverError | None) -> bool:
        """Apply an authentication outcome.

        Args:
            error: None on success, the failure otherwise

        Returns:
            False if the outcome arrived after the connection closed and was
            ignored.
        """
        if not self.is_open:
            logger.debug(f"Ignoring stale authentication outcome in state {self._state.value}")
            return False
        self._last_error = error
        self._set(ConnectionState.READY if error is None else ConnectionState.AUTH_FAILED)
        return True

    def transport_disconnected(self) -> None:
        self._set(ConnectionState.DISCONNECTED)

    async def wait_settled(self) -> ConnectionState:
        """Wait for the next transition into READY, AUTH_FAILED or DISCONNECTED."""
        future: asyncio.Future[ConnectionState] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    def _set(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.debug(f"Connection state {self._state.value} -> {state.value}")
        self._state = state

        if state in SETTLED_STATES and self._waiters:
            waiters, self._waiters = self._waiters, []
            for future in waiters:
                if not future.done():
                    future.set_result(state)
