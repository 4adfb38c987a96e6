"""Event definitions for the protocol layer.

Events are server-pushed notifications. Each one arrives on a channel
prefixed with ``event:`` to keep it apart from the direct request channels,
and carries the originating server's identifier as its first argument.

The ``connect`` and ``disconnect`` lifecycle events are not forwarded from the
server; the client synthesizes them from transport signals.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict

EVENT_PREFIX = "event:"


class EventName(str, Enum):
    """The closed set of events a caller can subscribe to."""

    # Catch-all relay
    ANY = "any"

    # Console output
    LINE = "line"

    # Process lifecycle
    STATUS = "status"
    STARTING = "starting"
    ONLINE = "online"
    STOPPING = "stopping"
    OFFLINE = "offline"

    # Players
    LOGIN = "login"
    LOGOUT = "logout"

    # Remote console
    RCON_RUNNING = "rconRunning"

    # Client lifecycle (synthesized locally)
    CONNECT = "connect"
    DISCONNECT = "disconnect"

    @property
    def is_lifecycle(self) -> bool:
        return self in (EventName.CONNECT, EventName.DISCONNECT)

    @property
    def channel(self) -> str:
        """Transport channel this event arrives on."""
        if self.is_lifecycle:
            return self.value
        return f"{EVENT_PREFIX}{self.value}"


class Status(str, Enum):
    """Lifecycle stage of a managed server process."""

    OFFLINE = "offline"
    STARTING = "starting"
    ONLINE = "online"
    STOPPING = "stopping"


# =============================================================================
# Payloads
# =============================================================================


class EventData(BaseModel):
    """Base for pushed payloads.

    The server formats most fields as strings; numbers are accepted and
    coerced. Unknown fields are kept so newer servers do not break older
    clients.
    """

    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)


class AnyEventData(EventData):
    """Raw event name and payload relayed on the catch-all channel."""

    event: str
    data: Any = None


class StartingData(EventData):
    time: str
    version: str


class OnlineData(EventData):
    time: str
    run: str


class StoppingData(EventData):
    time: str


class OfflineData(EventData):
    time: str


class LoginData(EventData):
    """A player joined, with where they spawned."""

    time: str
    user: str
    ip: str
    port: str
    entity: str
    world: str
    x: str
    y: str
    z: str


class LogoutData(EventData):
    time: str
    user: str


class RconRunningData(EventData):
    time: str
    ip: str
    port: str


PAYLOAD_MODELS: dict[EventName, type[EventData]] = {
    EventName.ANY: AnyEventData,
    EventName.STARTING: StartingData,
    EventName.ONLINE: OnlineData,
    EventName.STOPPING: StoppingData,
    EventName.OFFLINE: OfflineData,
    EventName.LOGIN: LoginData,
    EventName.LOGOUT: LogoutData,
    EventName.RCON_RUNNING: RconRunningData,
}


class WhitelistEntry(TypedDict):
    """One whitelist entry as acknowledged by the server."""

    uuid: str
    name: str
