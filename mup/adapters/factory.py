"""Factory classes for client and adapter instantiation.

This module centralizes the creation of the client and its dependencies,
keeping the CLI layer free from direct adapter imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mup.adapters.worker.supervisor import ProcessSupervisor
    from mup.core.engine import MuClient, ProgressHandler
    from mup.domain.config import MupConfig
    from mup.ports.config import ConfigProvider


class ConfigFactory:
    """Factory for creating configuration providers."""

    def create_config_provider(self) -> ConfigProvider:
        """Create the TOML config provider."""
        from mup.adapters.config.toml_config_provider import TomlConfigProvider

        return TomlConfigProvider()


class ClientFactory:
    """Factory for creating mu server clients.

    Args:
        config: MupConfig with worker and protocol settings.
    """

    def __init__(self, config: MupConfig) -> None:
        self._config = config

    def create_supervisor(self) -> ProcessSupervisor:
        """Create an unstarted supervisor for the configured worker."""
        from mup.adapters.worker.supervisor import ProcessSupervisor

        return ProcessSupervisor(
            self._config.worker,
            bufsiz=self._config.protocol.bufsiz,
            banner_timeout=self._config.protocol.timeout,
        )

    def create_client(self, on_progress: ProgressHandler | None = None) -> MuClient:
        """Create a client; this starts the mu server.

        Args:
            on_progress: Callback for non-terminal frames of streaming commands

        Raises:
            WorkerStartError: If mu server cannot be started
        """
        from mup.core.engine import MuClient

        return MuClient(
            self._config,
            worker=self.create_supervisor(),
            on_progress=on_progress,
        )
