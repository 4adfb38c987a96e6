"""Observer client - manage remote game servers over one authenticated connection.

One persistent Socket.IO connection to a supervising server carries:
- Commands: start/stop/console/players/status/whitelist, each re-authenticated
  and resolved from a single acknowledgment
- Events: pushed notifications routed to one callback per event name
"""

from .client import ObserverClient
from .config import ClientConfig, ReconnectPolicy
from .errors import (
    AuthenticationError,
    CommandError,
    ConfigError,
    NotConnectedError,
    ObserverError,
    ProtocolError,
    TransportError,
)
from .protocol import (
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
    WhitelistAction,
    WhitelistEntry,
)
from .state import ConnectionState
from .transport import MockTransport, SocketIOTransport, Transport

__all__ = [
    # Client
    "ObserverClient",
    "ClientConfig",
    "ReconnectPolicy",
    "ConnectionState",
    # Transports
    "Transport",
    "SocketIOTransport",
    "MockTransport",
    # Protocol types
    "EventName",
    "Status",
    "WhitelistAction",
    "WhitelistEntry",
    "AnyEventData",
    "StartingData",
    "OnlineData",
    "StoppingData",
    "OfflineData",
    "LoginData",
    "LogoutData",
    "RconRunningData",
    # Errors
    "ObserverError",
    "AuthenticationError",
    "CommandError",
    "NotConnectedError",
    "TransportError",
    "ProtocolError",
    "ConfigError",
]
