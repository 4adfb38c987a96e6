"""Command definitions for the protocol layer.

Commands are server-bound named messages that expect exactly one
acknowledgment. Each command carries a unique ID used to correlate the
pending request with its acknowledgment in logs and in the in-flight table.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Acknowledgment value that marks a successful credential handshake.
AUTH_SUCCESS = "authenticated"


class CommandType(str, Enum):
    """All server-bound message names."""

    # Session
    AUTHENTICATE = "authenticate"

    # Process lifecycle
    START = "start"
    STOP = "stop"

    # Interaction
    CONSOLE = "console"
    ONLINE_PLAYERS = "onlinePlayers"
    STATUS = "status"
    WHITELIST = "whitelist"


class WhitelistAction(str, Enum):
    """Actions accepted by the whitelist command."""

    LIST = "list"
    ADD = "add"
    REMOVE = "remove"


class Command(BaseModel):
    """A command from client to supervising server.

    Each command:
    - Has a unique `id` for correlation with its acknowledgment
    - Has a `cmd` naming the server-bound message
    - Has positional `args` emitted as separate message arguments

    Example:
        {
            "id": "cmd_abc123def456",
            "cmd": "console",
            "args": ["mc1", "say hi"]
        }
    """

    id: str = Field(default_factory=lambda: f"cmd_{uuid.uuid4().hex[:12]}")
    cmd: str
    args: list[Any] = Field(default_factory=list)

    @classmethod
    def create(cls, cmd: str | CommandType, *args: Any) -> Command:
        """Factory method for creating commands."""
        return cls(
            cmd=cmd.value if isinstance(cmd, CommandType) else cmd,
            args=list(args),
        )

    # Convenience factories for each server-bound message
    @classmethod
    def authenticate(cls, name: str, api_key: str) -> Command:
        return cls.create(CommandType.AUTHENTICATE, name, api_key)

    @classmethod
    def start(cls, server: str) -> Command:
        return cls.create(CommandType.START, server)

    @classmethod
    def stop(cls, server: str) -> Command:
        return cls.create(CommandType.STOP, server)

    @classmethod
    def console(cls, server: str, text: str) -> Command:
        return cls.create(CommandType.CONSOLE, server, text)

    @classmethod
    def online_players(cls, server: str) -> Command:
        return cls.create(CommandType.ONLINE_PLAYERS, server)

    @classmethod
    def status(cls, server: str) -> Command:
        return cls.create(CommandType.STATUS, server)

    @classmethod
    def whitelist(
        cls,
        server: str,
        action: str | WhitelistAction,
        username: str | None = None,
    ) -> Command:
        """Create a whitelist command.

        ``username`` is omitted from the payload when None. The server decides
        whether add/remove without a username is acceptable.

        Raises:
            ValueError: If the action is unknown
        """
        action = WhitelistAction(action)
        payload: dict[str, Any] = {"action": action.value}
        if username is not None:
            payload["username"] = username
        return cls.create(CommandType.WHITELIST, server, payload)
