"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. Environment: MAILDIR, MUP_MU_HOME
2. Explicit: --config PATH
3. Global: ~/.config/mup/config.toml (user defaults)
4. Built-in defaults
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from mup.domain.config import MupConfig
from mup.shared.config_io import (
    apply_environment,
    get_global_config_path,
    load_config_data,
)

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    A broken global config is logged and ignored; a broken explicit config
    is an error, since the user asked for that file by name.
    """

    def load(
        self,
        config_path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> MupConfig:
        """Load configuration with global fallback.

        Args:
            config_path: Optional explicit config.toml applied over the global one
            environ: Environment to read MAILDIR / MUP_MU_HOME from
                (default: os.environ)

        Returns:
            MupConfig instance with merged values or defaults

        Raises:
            FileNotFoundError: If config_path does not exist
            ValueError: If config_path is malformed or has invalid values
        """
        config = MupConfig.default()

        global_path = get_global_config_path()
        if global_path.exists():
            try:
                global_data = load_config_data(global_path)
                config = MupConfig.from_partial(config, global_data)
                logger.debug("Loaded global config from %s", global_path)
            except (FileNotFoundError, ValueError) as e:
                logger.warning(
                    "Failed to parse global config at %s: %s. Ignoring global config.",
                    global_path,
                    e,
                )

        if config_path is not None:
            config = MupConfig.from_partial(config, load_config_data(config_path))
            logger.debug("Loaded config from %s", config_path)

        return apply_environment(config, os.environ if environ is None else environ)
