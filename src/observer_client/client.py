"""Observer client - manage remote game servers through a supervising server.

Usage:
    config = ClientConfig(name="srv-a", url="http://localhost:3000", api_key="...")

    async with ObserverClient(config) as client:
        client.on("line", lambda server, line: print(f"[{server}] {line}"))
        await client.start("mc1")
        print(await client.get_status("mc1"))

    # Testing
    transport = MockTransport()
    transport.set_response("authenticate", "authenticated")
    client = ObserverClient(config, transport=transport)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Mapping
from typing import Any, Literal, overload

from .auth import Authenticator
from .config import ClientConfig
from .correlator import RequestCorrelator
from .dispatcher import (
    AnyCallback,
    ConnectCallback,
    DisconnectCallback,
    EventDispatcher,
    LineCallback,
    LoginCallback,
    LogoutCallback,
    OfflineCallback,
    OnlineCallback,
    RconRunningCallback,
    StartingCallback,
    StatusCallback,
    StoppingCallback,
)
from .errors import AuthenticationError, NotConnectedError, ProtocolError, TransportError
from .protocol.commands import Command, WhitelistAction
from .protocol.events import EventName, Status, WhitelistEntry
from .state import ConnectionState, ConnectionStateMachine
from .transport import SocketIOTransport, Transport

logger = logging.getLogger(__name__)


class ObserverClient:
    """Client for a supervising server that runs game-server processes.

    Every command re-authenticates before it is sent and resolves with the
    server's acknowledgment. Commands have no timeout: one that is never
    acknowledged, e.g. because the connection dropped, never settles.
    """

    def __init__(self, config: ClientConfig, transport: Transport | None = None) -> None:
        self._config = config
        self._transport = transport or SocketIOTransport(
            reconnect=config.reconnect,
            connect_timeout=config.connect_timeout,
        )
        self._state = ConnectionStateMachine()
        self._authenticator = Authenticator(self._transport, config, self._state)
        self._correlator = RequestCorrelator(self._transport, self._authenticator)
        self._events = EventDispatcher(self._transport)
        self._tasks: set[asyncio.Task[None]] = set()

        self._transport.on(EventName.CONNECT.channel, self._on_transport_connect)
        self._transport.on(EventName.DISCONNECT.channel, self._on_transport_disconnect)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        transport: Transport | None = None,
    ) -> ObserverClient:
        """Create a client configured from ``OBSERVER_*`` environment variables."""
        return cls(ClientConfig.from_env(environ), transport=transport)

    @property
    def name(self) -> str:
        """Display name presented during authentication."""
        return self._config.name

    @property
    def is_ready(self) -> bool:
        """True while the client holds a valid authenticated session."""
        return self._state.is_ready

    @property
    def state(self) -> ConnectionState:
        return self._state.state

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def pending_requests(self) -> int:
        """Commands emitted but not yet acknowledged."""
        return self._correlator.pending_count

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def connect(self) -> None:
        """Start connecting to the supervising server.

        Returns immediately; authentication follows automatically and its
        outcome is reported through the ``connect`` event. Does nothing if a
        connection is already open or being opened. Must be called from a
        running event loop.
        """
        # Raises RuntimeError outside a running event loop.
        asyncio.get_running_loop()
        if not self._state.request_connect():
            return
        logger.info(f"Connecting to {self._config.url}")
        self._spawn(self._open())

    async def disconnect(self) -> None:
        """Close the connection. Pending commands are left unsettled."""
        await self._transport.disconnect()
        # Transports that do not signal a client-initiated close.
        await self._on_transport_disconnect()

    async def wait_ready(self, timeout: float | None = None) -> None:
        """Wait until a connect attempt settles.

        Raises:
            AuthenticationError: If the server rejected the credentials
            TransportError: If the connection could not be opened or the
                handshake could not be sent
            NotConnectedError: If the client is disconnected
            TimeoutError: If ``timeout`` elapses first
        """
        state = self._state.state
        if state in (ConnectionState.CONNECTING, ConnectionState.AUTHENTICATING):
            state = await asyncio.wait_for(self._state.wait_settled(), timeout)

        if state is ConnectionState.READY:
            return

        error = self._state.last_error
        if isinstance(error, TransportError):
            raise TransportError(str(error)) from error
        if state is ConnectionState.AUTH_FAILED:
            reason = error.reason if isinstance(error, AuthenticationError) else None
            raise AuthenticationError(reason or "authentication rejected")
        raise NotConnectedError("Client is not connected")

    async def __aenter__(self) -> ObserverClient:
        self.connect()
        try:
            await self.wait_ready()
        except BaseException:
            # __aexit__ does not run when entering fails.
            await self.disconnect()
            raise
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    @overload
    def on(self, event: Literal["any", EventName.ANY], callback: AnyCallback) -> None: ...
    @overload
    def on(self, event: Literal["line", EventName.LINE], callback: LineCallback) -> None: ...
    @overload
    def on(self, event: Literal["status", EventName.STATUS], callback: StatusCallback) -> None: ...
    @overload
    def on(
        self, event: Literal["starting", EventName.STARTING], callback: StartingCallback
    ) -> None: ...
    @overload
    def on(self, event: Literal["online", EventName.ONLINE], callback: OnlineCallback) -> None: ...
    @overload
    def on(
        self, event: Literal["stopping", EventName.STOPPING], callback: StoppingCallback
    ) -> None: ...
    @overload
    def on(
        self, event: Literal["offline", EventName.OFFLINE], callback: OfflineCallback
    ) -> None: ...
    @overload
    def on(self, event: Literal["login", EventName.LOGIN], callback: LoginCallback) -> None: ...
    @overload
    def on(self, event: Literal["logout", EventName.LOGOUT], callback: LogoutCallback) -> None: ...
    @overload
    def on(
        self,
        event: Literal["rconRunning", EventName.RCON_RUNNING],
        callback: RconRunningCallback,
    ) -> None: ...
    @overload
    def on(
        self, event: Literal["connect", EventName.CONNECT], callback: ConnectCallback
    ) -> None: ...
    @overload
    def on(
        self, event: Literal["disconnect", EventName.DISCONNECT], callback: DisconnectCallback
    ) -> None: ...

    def on(self, event: Any, callback: Any) -> None:
        """Set the callback for an event; replaces any previous callback for it."""
        self._events.on(event, callback)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def start(self, server: str) -> bool:
        """Start a server."""
        return await self._correlator.request(Command.start(server))

    async def stop(self, server: str) -> bool:
        """Stop a server."""
        return await self._correlator.request(Command.stop(server))

    async def console(self, server: str, command: str) -> bool:
        """Send a console command to a server."""
        return await self._correlator.request(Command.console(server, command))

    async def get_online_players(self, server: str) -> list[str]:
        """Get the names of the players online on a server."""
        return await self._correlator.request(Command.online_players(server))

    async def get_status(self, server: str) -> Status:
        """Get a server's lifecycle status.

        Raises:
            ProtocolError: If the server reports a value outside Status
        """
        value = await self._correlator.request(Command.status(server))
        try:
            return Status(value)
        except ValueError:
            raise ProtocolError(f"Unknown status {value!r} for server {server}") from None

    @overload
    async def whitelist(
        self,
        server: str,
        action: Literal["list", WhitelistAction.LIST],
        username: None = None,
    ) -> list[WhitelistEntry]: ...
    @overload
    async def whitelist(
        self,
        server: str,
        action: Literal["add", "remove", WhitelistAction.ADD, WhitelistAction.REMOVE],
        username: str | None = None,
    ) -> bool: ...

    async def whitelist(
        self,
        server: str,
        action: str | WhitelistAction,
        username: str | None = None,
    ) -> list[WhitelistEntry] | bool:
        """Control a server's whitelist.

        ``list`` resolves to the entries; ``add``/``remove`` resolve to
        whether the change was applied.

        Raises:
            ValueError: If the action is unknown
        """
        return await self._correlator.request(Command.whitelist(server, action, username))

    # -------------------------------------------------------------------------
    # Transport signals
    # -------------------------------------------------------------------------

    async def _open(self) -> None:
        try:
            await self._transport.connect(self._config.url)
        except Exception as e:
            error = e if isinstance(e, TransportError) else TransportError(f"Failed to connect: {e}")
            logger.error(f"Could not connect to {self._config.url}: {error}")
            self._state.connect_failed(error)
            await self._events.fire_connect(error)

    def _on_transport_connect(self, *_: Any) -> None:
        # The handshake must not block the transport's connect handler.
        self._state.transport_connected()
        self._spawn(self._authenticate_on_connect())

    async def _authenticate_on_connect(self) -> None:
        try:
            result = await self._authenticator.authenticate()
        except Exception as e:
            if not self._state.is_open:
                logger.debug(f"Connection closed during authentication: {e}")
                return
            error = TransportError(f"Authentication handshake failed: {e}")
            logger.error(f"Could not authenticate with {self._config.url}: {error}")
            self._state.auth_settled(error)
            await self._events.fire_connect(error)
            return
        await self._events.fire_connect(
            None if result.ok else AuthenticationError(result.reason or "authentication rejected")
        )

    async def _on_transport_disconnect(self, *_: Any) -> None:
        if self._state.state is ConnectionState.DISCONNECTED:
            return
        self._state.transport_disconnected()
        logger.info(f"Disconnected from {self._config.url}")
        await self._events.fire_disconnect()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
