"""Configuration provider port.

Defines the interface for loading and accessing application configuration.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from mup.domain.config import MupConfig


class ConfigProvider(Protocol):
    """Protocol for loading and providing configuration."""

    def load(
        self,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> MupConfig:
        """Load configuration.

        Args:
            config_path: Optional explicit config.toml to apply after the global one
            environ: Environment to read MAILDIR / MUP_MU_HOME from

        Returns:
            MupConfig instance with loaded or default values

        Raises:
            FileNotFoundError: If config_path does not exist
            ValueError: If config_path is malformed
        """
        ...
