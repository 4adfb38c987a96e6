"""Wire protocol between the client and the supervising server.

Key concepts:
- Commands: client -> server named messages, each with one acknowledgment
- Events: server -> client pushed notifications on ``event:``-prefixed channels
- Lifecycle: ``connect``/``disconnect`` come from the transport, unprefixed
"""

from .commands import AUTH_SUCCESS, Command, CommandType, WhitelistAction
from .events import (
    EVENT_PREFIX,
    PAYLOAD_MODELS,
    AnyEventData,
    EventData,
    EventName,
    LoginData,
    LogoutData,
    OfflineData,
    OnlineData,
    RconRunningData,
    StartingData,
    Status,
    StoppingData,
    WhitelistEntry,
)

__all__ = [
    "AUTH_SUCCESS",
    "Command",
    "CommandType",
    "WhitelistAction",
    "EVENT_PREFIX",
    "PAYLOAD_MODELS",
    "EventName",
    "Status",
    "EventData",
    "AnyEventData",
    "StartingData",
    "OnlineData",
    "StoppingData",
    "OfflineData",
    "LoginData",
    "LogoutData",
    "RconRunningData",
    "WhitelistEntry",
]
