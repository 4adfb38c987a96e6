"""Request correlation.

Every outward command is gated on a fresh authentication round trip, then
emitted with a one-shot acknowledgment callback. The callback settles a
PendingRequest whose future the caller awaits.

There is no retry, timeout or cancellation. A request that is never
acknowledged (for example because the connection dropped) stays pending
forever.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .auth import Authenticator
from .errors import AuthenticationError, CommandError
from .protocol.commands import Command
from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """One in-flight command awaiting its acknowledgment."""

    command: Command
    future: asyncio.Future[Any] = field(
        default_factory=lambda: asyncio.get_running_loop().create_future()
    )

    @property
    def request_id(self) -> str:
        return self.command.id

    def settle(self, result: Any = None, error: Any = None, *_: Any) -> None:
        """Acknowledgment callback: ``(result)`` or ``(result, error)``.

        A non-empty error rejects and discards the result. Only the first
        call has any effect.
        """
        if self.future.done():
            logger.debug(f"Ignoring repeated acknowledgment for {self.request_id}")
            return
        if error:
            self.future.set_exception(CommandError(self.command.cmd, str(error)))
        else:
            self.future.set_result(result)


class RequestCorrelator:
    """Wraps commands in an authentication gate and awaits their acknowledgment."""

    def __init__(self, transport: Transport, authenticator: Authenticator) -> None:
        self._transport = transport
        self._authenticator = authenticator
        self._pending: dict[str, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        """Number of commands emitted but not yet acknowledged."""
        return len(self._pending)

    async def request(self, command: Command) -> Any:
        """Authenticate, emit the command and await its acknowledgment.

        Returns:
            The acknowledged result, unmodified

        Raises:
            NotConnectedError: If the transport connection is not open
            AuthenticationError: If re-authentication is rejected; the
                command is not emitted
            CommandError: If the acknowledgment carries an error
        """
        auth = await self._authenticator.authenticate()
        if not auth.ok:
            raise AuthenticationError(auth.reason or "authentication rejected")

        pending = PendingRequest(command)
        self._pending[pending.request_id] = pending
        pending.future.add_done_callback(lambda _: self._pending.pop(pending.request_id, None))

        logger.debug(f"Emitting {command.cmd} ({pending.request_id})")
        try:
            await self._transport.emit(command.cmd, *command.args, callback=pending.settle)
        except Exception:
            self._pending.pop(pending.request_id, None)
            raise

        result = await pending.future
        logger.debug(f"Settled {command.cmd} ({pending.request_id})")
        return result
