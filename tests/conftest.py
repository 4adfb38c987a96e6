"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

from observer_client import ClientConfig, MockTransport, ObserverClient


@pytest.fixture
def config() -> ClientConfig:
    """Client configuration for a wrapper that does not exist."""
    return ClientConfig(name="srv-a", url="http://wrapper.test:3000", api_key="secret-key")


@pytest.fixture
def transport() -> MockTransport:
    """Mock transport that accepts the credential handshake."""
    transport = MockTransport()
    transport.set_response("authenticate", "authenticated")
    return transport


@pytest.fixture
def client(config: ClientConfig, transport: MockTransport) -> ObserverClient:
    """Client bound to the mock transport, not yet connected."""
    return ObserverClient(config, transport=transport)


@pytest.fixture
def drain():
    """Let background tasks on the running loop advance."""

    async def _drain(iterations: int = 5) -> None:
        for _ in range(iterations):
            await asyncio.sleep(0)

    return _drain
