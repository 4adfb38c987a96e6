"""Event dispatcher - routes pushed notifications to subscriber callbacks.

Each event name maps to exactly one callback. Subscribing again replaces the
previous callback (last writer wins); there is no fan-out. Callbacks may be
plain functions or coroutine functions.

Payloads are converted to typed models before delivery:

    on("line",     cb)  ->  cb(server: str, line: str)
    on("status",   cb)  ->  cb(server: str, status: Status)
    on("login",    cb)  ->  cb(server: str, data: LoginData)
    on("connect",  cb)  ->  cb(error: ObserverError | None)
    on("disconnect", cb) -> cb()
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, Literal, overload

from pydantic import ValidationError

from .errors import ObserverError, ProtocolError
from .protocol.events import (
    PAYLOAD_MODELS,
    AnyEventData,
    EventName,
    LoginData,
    LogoutData,
    OfflineData,
    OnlineData,
    RconRunningData,
    StartingData,
    Status,
    StoppingData,
)
from .transport import Transport

logger = logging.getLogger(__name__)

AnyCallback = Callable[[str, AnyEventData], Any]
LineCallback = Callable[[str, str], Any]
StatusCallback = Callable[[str, Status], Any]
StartingCallback = Callable[[str, StartingData], Any]
OnlineCallback = Callable[[str, OnlineData], Any]
StoppingCallback = Callable[[str, StoppingData], Any]
OfflineCallback = Callable[[str, OfflineData], Any]
LoginCallback = Callable[[str, LoginData], Any]
LogoutCallback = Callable[[str, LogoutData], Any]
RconRunningCallback = Callable[[str, RconRunningData], Any]
ConnectCallback = Callable[[ObserverError | None], Any]
DisconnectCallback = Callable[[], Any]


def _noop(*_: Any) -> None:
    return None


def _log_connected(error: ObserverError | None = None) -> None:
    if error is None:
        logger.info("Connected to wrapper!")
    else:
        logger.error(f"Connection to wrapper failed: {error}")


def _log_disconnected() -> None:
    logger.error("Disconnected from wrapper!")


class SubscriberTable:
    """One callback per event name, pre-filled with built-in defaults."""

    def __init__(self) -> None:
        self._callbacks: dict[EventName, Callable[..., Any]] = {name: _noop for name in EventName}
        self._callbacks[EventName.CONNECT] = _log_connected
        self._callbacks[EventName.DISCONNECT] = _log_disconnected

    def get(self, event: EventName) -> Callable[..., Any]:
        return self._callbacks[event]

    def set(self, event: EventName, callback: Callable[..., Any]) -> None:
        self._callbacks[event] = callback


class EventDispatcher:
    """Routes inbound notifications and lifecycle signals to subscribers."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._table = SubscriberTable()

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

    def on(self, event: str | EventName, callback: Callable[..., Any]) -> None:
        """Set the callback for an event, replacing any previous one.

        Raises:
            ValueError: If the event name is not in the closed event set
            TypeError: If the callback is not callable
        """
        try:
            name = EventName(event)
        except ValueError:
            raise ValueError(
                f"Unknown event '{event}'. Expected one of: {', '.join(e.value for e in EventName)}"
            ) from None
        if not callable(callback):
            raise TypeError(f"Callback for '{name.value}' must be callable")

        self._table.set(name, callback)
        if not name.is_lifecycle:
            self._transport.on(name.channel, self._relay(name))

    async def fire_connect(self, error: ObserverError | None) -> None:
        await self._deliver(EventName.CONNECT, error)

    async def fire_disconnect(self) -> None:
        await self._deliver(EventName.DISCONNECT)

    def _relay(self, name: EventName) -> Callable[..., Any]:
        async def relay(*args: Any) -> None:
            try:
                payload = self._convert(name, args)
            except (ProtocolError, ValidationError, ValueError) as e:
                logger.warning(f"Dropping malformed '{name.value}' event: {e}")
                return
            await self._deliver(name, *payload)

        return relay

    @staticmethod
    def _convert(name: EventName, args: tuple[Any, ...]) -> tuple[Any, ...]:
        if len(args) < 2:
            raise ProtocolError(f"expected (server, payload), got {len(args)} argument(s)")
        server, data = str(args[0]), args[1]

        if name is EventName.LINE:
            return server, str(data)
        if name is EventName.STATUS:
            return server, Status(data)
        return server, PAYLOAD_MODELS[name].model_validate(data)

    async def _deliver(self, name: EventName, *args: Any) -> None:
        # Subscriber errors never propagate into the transport.
        callback = self._table.get(name)
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(f"Error in subscriber for {name.value}")
