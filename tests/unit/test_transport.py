"""Unit tests for transports."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from socketio.exceptions import BadNamespaceError
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from observer_client.config import ReconnectPolicy
from observer_client.errors import NotConnectedError, TransportError
from observer_client.protocol.events import EventName
from observer_client.transport import MockTransport, SocketIOTransport, Transport


@pytest.fixture
def sio():
    """Patched python-socketio client instance."""
    with patch("observer_client.transport.socketio.AsyncClient") as client_class:
        instance = client_class.return_value
        instance.connect = AsyncMock()
        instance.disconnect = AsyncMock()
        instance.emit = AsyncMock()
        instance.on = MagicMock()
        instance.connected = False
        instance.client_class = client_class
        yield instance


class TestSocketIOTransport:
    def test_implements_protocol(self, sio):
        assert isinstance(SocketIOTransport(), Transport)

    def test_reconnection_disabled_by_default(self, sio):
        SocketIOTransport()

        kwargs = sio.client_class.call_args.kwargs
        assert kwargs["reconnection"] is False
        assert kwargs["logger"] is False

    def test_reconnection_policy_passed_through(self, sio):
        SocketIOTransport(ReconnectPolicy(enabled=True, max_attempts=5, delay=0.5, max_delay=4))

        kwargs = sio.client_class.call_args.kwargs
        assert kwargs["reconnection"] is True
        assert kwargs["reconnection_attempts"] == 5
        assert kwargs["reconnection_delay"] == 0.5
        assert kwargs["reconnection_delay_max"] == 4

    @pytest.mark.asyncio
    async def test_connect(self, sio):
        transport = SocketIOTransport(connect_timeout=3.0)

        await transport.connect("http://wrapper.test:3000")

        sio.connect.assert_awaited_once_with("http://wrapper.test:3000", wait_timeout=3.0)

    @pytest.mark.asyncio
    async def test_connect_failure(self, sio):
        sio.connect.side_effect = SocketIOConnectionError("Connection refused by the server")
        transport = SocketIOTransport()

        with pytest.raises(TransportError, match="Failed to connect"):
            await transport.connect("http://wrapper.test:3000")

    @pytest.mark.asyncio
    async def test_emit_spreads_arguments(self, sio):
        transport = SocketIOTransport()
        callback = MagicMock()

        await transport.emit("console", "mc1", "say hi", callback=callback)

        sio.emit.assert_awaited_once_with("console", data=("mc1", "say hi"), callback=callback)

    @pytest.mark.asyncio
    async def test_emit_when_not_connected(self, sio):
        sio.emit.side_effect = BadNamespaceError("/ is not a connected namespace.")
        transport = SocketIOTransport()

        with pytest.raises(NotConnectedError):
            await transport.emit("start", "mc1")

    @pytest.mark.asyncio
    async def test_disconnect(self, sio):
        await SocketIOTransport().disconnect()

        sio.disconnect.assert_awaited_once()

    def test_on_delegates(self, sio):
        handler = MagicMock()

        SocketIOTransport().on("event:line", handler)

        sio.on.assert_called_once_with("event:line", handler)

    def test_is_connected(self, sio):
        transport = SocketIOTransport()
        assert transport.is_connected is False

        sio.connected = True
        assert transport.is_connected is True


class TestMockTransport:
    def test_implements_protocol(self):
        assert isinstance(MockTransport(), Transport)

    @pytest.mark.asyncio
    async def test_connect_fires_handler(self):
        transport = MockTransport()
        calls = []
        transport.on("connect", lambda: calls.append("connect"))

        await transport.connect("http://wrapper.test:3000")

        assert transport.is_connected is True
        assert transport.connect_urls == ["http://wrapper.test:3000"]
        assert calls == ["connect"]

    @pytest.mark.asyncio
    async def test_connect_error(self):
        transport = MockTransport()
        transport.connect_error = TransportError("refused")

        with pytest.raises(TransportError):
            await transport.connect("http://wrapper.test:3000")
        assert transport.is_connected is False

    @pytest.mark.asyncio
    async def test_emit_requires_connection(self):
        with pytest.raises(NotConnectedError):
            await MockTransport().emit("start", "mc1")

    @pytest.mark.asyncio
    async def test_canned_response(self):
        transport = MockTransport()
        transport.set_response("status", "online", None)
        await transport.connect("http://wrapper.test:3000")
        acks = []

        await transport.emit("status", "mc1", callback=lambda *ack: acks.append(ack))

        assert acks == [("online", None)]
        assert transport.emitted[0].acked is True

    @pytest.mark.asyncio
    async def test_manual_ack_oldest_first(self):
        transport = MockTransport()
        await transport.connect("http://wrapper.test:3000")
        acks = []
        await transport.emit("start", "mc1", callback=lambda *ack: acks.append(("mc1", ack)))
        await transport.emit("start", "mc2", callback=lambda *ack: acks.append(("mc2", ack)))

        transport.ack("start", True, None)

        assert acks == [("mc1", (True, None))]

    @pytest.mark.asyncio
    async def test_ack_without_pending_message(self):
        transport = MockTransport()

        with pytest.raises(LookupError):
            transport.ack("start", True)

    @pytest.mark.asyncio
    async def test_push_maps_event_name_to_channel(self):
        transport = MockTransport()
        received = []

        async def handler(server, line):
            received.append((server, line))

        transport.on("event:line", handler)

        await transport.push(EventName.LINE, "mc1", "hello")

        assert received == [("mc1", "hello")]

    @pytest.mark.asyncio
    async def test_drop_and_disconnect(self):
        transport = MockTransport()
        calls = []
        transport.on("disconnect", lambda: calls.append("disconnect"))
        await transport.connect("http://wrapper.test:3000")

        await transport.drop()
        await transport.disconnect()

        assert transport.is_connected is False
        assert calls == ["disconnect"]
