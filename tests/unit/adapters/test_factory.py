"""Unit tests for the factory module.

Tests the factory classes that centralize adapter instantiation,
keeping the CLI free of direct adapter imports.
"""

from unittest.mock import MagicMock, patch

from mup.adapters.config.toml_config_provider import TomlConfigProvider
from mup.adapters.factory import ClientFactory, ConfigFactory
from mup.adapters.worker.supervisor import ProcessSupervisor
from mup.domain.config import MupConfig, ProtocolConfig, WorkerConfig
from mup.domain.values import WorkerState


class TestConfigFactory:
    """Tests for ConfigFactory class."""

    def test_create_config_provider(self):
        assert isinstance(ConfigFactory().create_config_provider(), TomlConfigProvider)


class TestClientFactory:
    """Tests for ClientFactory class."""

    def test_supervisor_uses_config(self):
        """Worker and protocol settings reach the supervisor without starting it."""
        config = MupConfig(
            worker=WorkerConfig(mu_bin="/opt/mu"),
            protocol=ProtocolConfig(timeout=1.5, bufsiz=512),
        )

        supervisor = ClientFactory(config).create_supervisor()

        assert isinstance(supervisor, ProcessSupervisor)
        assert supervisor.config.mu_bin == "/opt/mu"
        assert supervisor.bufsiz == 512
        assert supervisor.banner_timeout == 1.5
        assert supervisor.state is WorkerState.DEAD

    def test_create_client_passes_progress_handler(self):
        config = MupConfig.default()
        on_progress = MagicMock()

        with patch("mup.core.engine.MuClient") as mock_client_cls:
            client = ClientFactory(config).create_client(on_progress=on_progress)

        assert client is mock_client_cls.return_value
        args, kwargs = mock_client_cls.call_args
        assert args == (config,)
        assert isinstance(kwargs["worker"], ProcessSupervisor)
        assert kwargs["on_progress"] is on_progress
