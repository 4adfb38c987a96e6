"""Unit tests for client configuration."""

import pytest
from pydantic import ValidationError

from observer_client.config import ClientConfig, ReconnectPolicy
from observer_client.errors import ConfigError, ObserverError

ENV = {
    "OBSERVER_NAME": "srv-a",
    "OBSERVER_URL": "http://wrapper.test:3000",
    "OBSERVER_API_KEY": "secret-key",
}


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig(name="srv-a", url="http://localhost:3000", api_key="k")

        assert config.reconnect == ReconnectPolicy()
        assert config.reconnect.enabled is False
        assert config.connect_timeout == 10.0

    def test_api_key_hidden(self):
        """The credential never appears in reprs or logs."""
        config = ClientConfig(name="srv-a", url="http://localhost:3000", api_key="secret-key")

        assert "secret-key" not in repr(config)
        assert "secret-key" not in str(config)
        assert config.api_key.get_secret_value() == "secret-key"

    def test_frozen(self):
        config = ClientConfig(name="srv-a", url="http://localhost:3000", api_key="k")

        with pytest.raises(ValidationError):
            config.name = "srv-b"

    @pytest.mark.parametrize(
        "url",
        ["http://h:1", "https://h", "ws://h:3000", "wss://h/socket"],
    )
    def test_accepted_urls(self, url):
        assert ClientConfig(name="a", url=url, api_key="k").url == url

    def test_rejects_url_without_scheme(self):
        with pytest.raises(ValidationError, match="url must start with"):
            ClientConfig(name="a", url="localhost:3000", api_key="k")

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            ClientConfig(name="", url="http://h", api_key="k")


class TestReconnectPolicy:
    def test_rejects_negative_attempts(self):
        with pytest.raises(ValidationError):
            ReconnectPolicy(enabled=True, max_attempts=-1)

    def test_rejects_zero_delay(self):
        with pytest.raises(ValidationError):
            ReconnectPolicy(delay=0)


class TestFromEnv:
    """Test loading configuration from OBSERVER_* variables."""

    def test_loads_required_values(self):
        config = ClientConfig.from_env(ENV)

        assert config.name == "srv-a"
        assert config.url == "http://wrapper.test:3000"
        assert config.api_key.get_secret_value() == "secret-key"
        assert config.reconnect.enabled is False

    def test_missing_variables_listed(self):
        with pytest.raises(ConfigError) as exc_info:
            ClientConfig.from_env({"OBSERVER_NAME": "srv-a"})

        message = str(exc_info.value)
        assert "OBSERVER_URL" in message
        assert "OBSERVER_API_KEY" in message
        assert "OBSERVER_NAME" not in message

    def test_empty_value_counts_as_missing(self):
        with pytest.raises(ConfigError, match="OBSERVER_API_KEY"):
            ClientConfig.from_env({**ENV, "OBSERVER_API_KEY": ""})

    @pytest.mark.parametrize("flag", ["1", "true", "TRUE", "yes"])
    def test_reconnect_flag(self, flag):
        config = ClientConfig.from_env({**ENV, "OBSERVER_RECONNECT": flag})

        assert config.reconnect.enabled is True

    def test_reconnect_flag_off(self):
        config = ClientConfig.from_env({**ENV, "OBSERVER_RECONNECT": "0"})

        assert config.reconnect.enabled is False

    def test_connect_timeout(self):
        config = ClientConfig.from_env({**ENV, "OBSERVER_CONNECT_TIMEOUT": "2.5"})

        assert config.connect_timeout == 2.5

    def test_invalid_value_wrapped(self):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ClientConfig.from_env({**ENV, "OBSERVER_CONNECT_TIMEOUT": "soon"})

    def test_reads_process_environment(self, monkeypatch):
        for key, value in ENV.items():
            monkeypatch.setenv(key, value)

        assert ClientConfig.from_env().name == "srv-a"

    def test_config_error_is_value_error(self):
        """ConfigError belongs to both the client and builtin hierarchies."""
        assert issubclass(ConfigError, ObserverError)
        assert issubclass(ConfigError, ValueError)
