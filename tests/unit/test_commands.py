"""Unit tests for Command protocol type."""

import pytest

from observer_client.protocol.commands import AUTH_SUCCESS, Command, CommandType, WhitelistAction


class TestCommandCreation:
    """Test Command creation and basic properties."""

    def test_create_with_defaults(self):
        """Command should generate ID automatically."""
        cmd = Command(cmd="start")

        assert cmd.cmd == "start"
        assert cmd.id.startswith("cmd_")
        assert len(cmd.id) == 16  # "cmd_" + 12 hex chars
        assert cmd.args == []

    def test_ids_are_unique(self):
        """Each command gets its own correlation ID."""
        assert Command(cmd="start").id != Command(cmd="start").id

    def test_create_factory_method(self):
        """Command.create() should accept a CommandType and positional args."""
        cmd = Command.create(CommandType.CONSOLE, "mc1", "say hi")

        assert cmd.cmd == "console"
        assert cmd.args == ["mc1", "say hi"]

    def test_create_factory_with_string_cmd(self):
        """Command.create() should accept a string command."""
        cmd = Command.create("custom", 1, 2)

        assert cmd.cmd == "custom"
        assert cmd.args == [1, 2]


class TestCommandFactoryMethods:
    """Test convenience factory methods."""

    def test_authenticate(self):
        cmd = Command.authenticate("srv-a", "secret")

        assert cmd.cmd == "authenticate"
        assert cmd.args == ["srv-a", "secret"]

    @pytest.mark.parametrize(
        ("factory", "wire_name"),
        [
            (Command.start, "start"),
            (Command.stop, "stop"),
            (Command.online_players, "onlinePlayers"),
            (Command.status, "status"),
        ],
    )
    def test_server_only_commands(self, factory, wire_name):
        """Single-argument commands carry only the server id."""
        cmd = factory("mc1")

        assert cmd.cmd == wire_name
        assert cmd.args == ["mc1"]

    def test_console(self):
        cmd = Command.console("mc1", "say hi")

        assert cmd.cmd == "console"
        assert cmd.args == ["mc1", "say hi"]


class TestWhitelistCommand:
    """Test whitelist payload construction."""

    def test_list_omits_username(self):
        """list sends only the action."""
        cmd = Command.whitelist("mc1", "list")

        assert cmd.cmd == "whitelist"
        assert cmd.args == ["mc1", {"action": "list"}]

    def test_add_includes_username(self):
        cmd = Command.whitelist("mc1", WhitelistAction.ADD, "Steve")

        assert cmd.args == ["mc1", {"action": "add", "username": "Steve"}]

    def test_remove_includes_username(self):
        cmd = Command.whitelist("mc1", "remove", "Alex")

        assert cmd.args == ["mc1", {"action": "remove", "username": "Alex"}]

    @pytest.mark.parametrize("action", ["add", "remove"])
    def test_change_without_username_is_forwarded(self, action):
        """The server, not the client, decides whether a username is needed."""
        cmd = Command.whitelist("mc1", action)

        assert cmd.args == ["mc1", {"action": action}]

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            Command.whitelist("mc1", "ban", "Steve")


def test_auth_success_sentinel():
    """Only this exact string marks a successful handshake."""
    assert AUTH_SUCCESS == "authenticated"
