"""Credential handshake with the supervising server."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from .config import ClientConfig
from .errors import AuthenticationError, NotConnectedError
from .protocol.commands import AUTH_SUCCESS, Command
from .state import ConnectionState, ConnectionStateMachine
from .transport import Transport

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_REASON = "authentication rejected"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of one authentication round trip."""

    state: ConnectionState
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is ConnectionState.READY


def failure_reason(ack: tuple[Any, ...]) -> str:
    """Extract the raw rejection reason from an authentication acknowledgment.

    Prefers an explicit error argument, then the rejected value itself.
    """
    if len(ack) > 1 and ack[1]:
        return str(ack[1])
    if ack and ack[0] is not None and ack[0] is not False and ack[0] != "":
        return str(ack[0])
    return DEFAULT_FAILURE_REASON


class Authenticator:
    """Performs the credential handshake and records the outcome.

    Safe to call repeatedly and concurrently: every call gets its own
    acknowledgment, and the readiness flag reflects whichever settles last.
    """

    def __init__(
        self,
        transport: Transport,
        config: ClientConfig,
        state: ConnectionStateMachine,
    ) -> None:
        self._transport = transport
        self._config = config
        self._state = state

    async def authenticate(self) -> AuthResult:
        """Send the display name and credential; await one acknowledgment.

        Only an acknowledgment equal to ``"authenticated"`` counts as
        success. Anything else, including ``True``, is a rejection.

        Raises:
            NotConnectedError: If the transport connection is not open, or
                closed before the acknowledgment arrived
        """
        if not self._state.is_open:
            raise NotConnectedError(f"Client is not connected (state: {self._state.state.value})")

        command = Command.authenticate(self._config.name, self._config.api_key.get_secret_value())
        future: asyncio.Future[tuple[Any, ...]] = asyncio.get_running_loop().create_future()

        def on_ack(*ack: Any) -> None:
            if not future.done():
                future.set_result(ack)

        logger.debug(f"Authenticating as {self._config.name} ({command.id})")
        await self._transport.emit(command.cmd, *command.args, callback=on_ack)
        ack = await future

        if ack and ack[0] == AUTH_SUCCESS:
            self._settle(None)
            logger.info(f"Client authenticated as {self._config.name}")
            return AuthResult(ConnectionState.READY)

        reason = failure_reason(ack)
        logger.error(f"Socket authentication error: {reason}")
        self._settle(AuthenticationError(reason))
        return AuthResult(ConnectionState.AUTH_FAILED, reason)

    def _settle(self, error: AuthenticationError | None) -> None:
        if not self._state.auth_settled(error):
            raise NotConnectedError("Connection closed before authentication settled")
