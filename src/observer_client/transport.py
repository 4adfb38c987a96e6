"""Client-side transport binding.

The client never speaks the wire format itself. It consumes a narrow
duplex interface: open/close the connection, emit a named message with an
optional one-shot acknowledgment callback, and bind a handler to a named
inbound message.

Architecture:
- Transport is the PROTOCOL (interface) the client depends on
- SocketIOTransport binds it to python-socketio, which the supervising
  server speaks
- MockTransport is fully in-memory for tests

Handlers bound with ``on`` replace any previous handler for that name.
The transport raises unprefixed ``connect``/``disconnect`` signals on the
corresponding handlers.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import socketio
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from .config import ReconnectPolicy
from .errors import NotConnectedError, TransportError
from .protocol.events import EventName

logger = logging.getLogger(__name__)

# Receives the acknowledgment arguments, e.g. ``(result, error)``.
AckCallback = Callable[..., Any]

# Receives the arguments of an inbound message. May be a coroutine function.
MessageHandler = Callable[..., Any]


@runtime_checkable
class Transport(Protocol):
    """Protocol for client transports.

    All transports must implement:
    - connect/disconnect: Lifecycle management
    - emit: Send a named message, optionally expecting one acknowledgment
    - on: Bind the single handler for a named inbound message
    """

    @property
    def is_connected(self) -> bool:
        """Check if the connection is open."""
        ...

    async def connect(self, url: str) -> None:
        """Open the connection.

        Raises:
            TransportError: If the connection cannot be opened
        """
        ...

    async def disconnect(self) -> None:
        """Close the connection."""
        ...

    async def emit(self, event: str, *args: Any, callback: AckCallback | None = None) -> None:
        """Emit a named message.

        Args:
            event: Message name
            *args: Message arguments, delivered separately
            callback: Called once with the acknowledgment arguments

        Raises:
            NotConnectedError: If the connection is not open
        """
        ...

    def on(self, event: str, handler: MessageHandler) -> None:
        """Bind the handler for a named inbound message, replacing any previous one."""
        ...


class SocketIOTransport:
    """Transport over Socket.IO via python-socketio's asyncio client.

    Reconnection is off unless the policy enables it. When enabled, every
    successful reconnect raises a fresh ``connect`` signal.
    """

    def __init__(
        self,
        reconnect: ReconnectPolicy | None = None,
        connect_timeout: float = 10.0,
    ) -> None:
        policy = reconnect or ReconnectPolicy()
        self._connect_timeout = connect_timeout
        self._sio = socketio.AsyncClient(
            reconnection=policy.enabled,
            reconnection_attempts=policy.max_attempts,
            reconnection_delay=policy.delay,
            reconnection_delay_max=policy.max_delay,
            logger=False,
        )

    @property
    def is_connected(self) -> bool:
        return self._sio.connected

    async def connect(self, url: str) -> None:
        """Connect to the Socket.IO server."""
        try:
            await self._sio.connect(url, wait_timeout=self._connect_timeout)
        except SocketIOConnectionError as e:
            raise TransportError(f"Failed to connect: {e}") from e
        logger.info(f"{self.__class__.__name__} connected to {url}")

    async def disconnect(self) -> None:
        await self._sio.disconnect()

    async def emit(self, event: str, *args: Any, callback: AckCallback | None = None) -> None:
        """Emit a message; a tuple payload is spread into separate arguments."""
        try:
            await self._sio.emit(event, data=tuple(args), callback=callback)
        except BadNamespaceError as e:
            raise NotConnectedError(f"Transport not connected: {e}") from e

    def on(self, event: str, handler: MessageHandler) -> None:
        self._sio.on(event, handler)


@dataclass
class EmittedMessage:
    """A message recorded by MockTransport."""

    event: str
    args: tuple[Any, ...]
    callback: AckCallback | None = None
    acked: bool = False


class MockTransport:
    """Mock transport for testing.

    Records emitted messages, answers them with canned acknowledgments and
    simulates server pushes. No actual I/O - everything is in-memory.

    Usage:
        transport = MockTransport()
        transport.set_response("authenticate", "authenticated")
        transport.set_response("start", True, None)

        client = ObserverClient(config, transport=transport)
        client.connect()
        await client.wait_ready()
        assert await client.start("mc1") is True

        assert transport.emitted_names() == ["authenticate", "authenticate", "start"]
    """

    def __init__(self) -> None:
        self._connected = False
        self._handlers: dict[str, MessageHandler] = {}
        self._responses: dict[str, tuple[Any, ...]] = {}
        self._emitted: list[EmittedMessage] = []
        self.connect_urls: list[str] = []
        self.connect_error: Exception | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def emitted(self) -> list[EmittedMessage]:
        """All messages emitted through this transport."""
        return self._emitted.copy()

    def emitted_names(self) -> list[str]:
        return [message.event for message in self._emitted]

    def handler(self, event: str) -> MessageHandler | None:
        """The handler currently bound for an inbound message name."""
        return self._handlers.get(event)

    def set_response(self, event: str, *ack: Any) -> None:
        """Acknowledge every future emit of ``event`` immediately with ``ack``."""
        self._responses[event] = ack

    def clear_response(self, event: str) -> None:
        """Stop auto-acknowledging ``event``; later emits stay pending."""
        self._responses.pop(event, None)

    def ack(self, event: str, *args: Any) -> EmittedMessage:
        """Acknowledge the oldest still-pending emit of ``event``.

        Raises:
            LookupError: If no emit of ``event`` is awaiting an acknowledgment
        """
        for message in self._emitted:
            if message.event == event and message.callback and not message.acked:
                message.acked = True
                message.callback(*args)
                return message
        raise LookupError(f"No pending '{event}' message to acknowledge")

    async def push(self, event: str | EventName, *args: Any) -> None:
        """Simulate a server-pushed message.

        An EventName is mapped to its channel; a plain string is used as is.
        """
        channel = event.channel if isinstance(event, EventName) else event
        await self._fire(channel, *args)

    async def drop(self) -> None:
        """Simulate the server closing the connection."""
        self._connected = False
        await self._fire("disconnect")

    async def connect(self, url: str) -> None:
        self.connect_urls.append(url)
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True
        await self._fire("connect")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        await self._fire("disconnect")

    async def emit(self, event: str, *args: Any, callback: AckCallback | None = None) -> None:
        """Record the message and answer it if a canned response is set."""
        if not self._connected:
            raise NotConnectedError("Transport not connected")

        message = EmittedMessage(event=event, args=args, callback=callback)
        self._emitted.append(message)

        if callback is not None and event in self._responses:
            message.acked = True
            callback(*self._responses[event])

    def on(self, event: str, handler: MessageHandler) -> None:
        self._handlers[event] = handler

    async def _fire(self, event: str, *args: Any) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            return
        result = handler(*args)
        if inspect.isawaitable(result):
            await result
