"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of MupConfig to/from TOML
format, and the environment variables that the front end forwards to the
engine as explicit configuration.
"""

import os
import platform
import tomllib  # Built-in Python 3.11+
from collections.abc import Mapping
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import tomli_w

from mup.domain.config import MupConfig

MAILDIR_ENV = "MAILDIR"
MU_HOME_ENV = "MUP_MU_HOME"


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/mup/config.toml or ~/.config/mup/config.toml
    - Windows: %APPDATA%/mup/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "mup" / "config.toml"
        return Path.home() / ".config" / "mup" / "config.toml"
    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "mup" / "config.toml"
    return Path.home() / ".config" / "mup" / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def apply_environment(config: MupConfig, environ: Mapping[str, str]) -> MupConfig:
    """Overlay MAILDIR and MUP_MU_HOME from the environment.

    The engine never reads the environment itself; the front end calls
    this and hands the result to the client.

    Args:
        config: Config loaded from files
        environ: Environment mapping (usually os.environ)

    Returns:
        Config with worker.maildir / worker.mu_home replaced when set
    """
    overrides: dict[str, str] = {}
    if environ.get(MAILDIR_ENV):
        overrides["maildir"] = environ[MAILDIR_ENV]
    if environ.get(MU_HOME_ENV):
        overrides["mu_home"] = environ[MU_HOME_ENV]
    if not overrides:
        return config
    return replace(config, worker=replace(config.worker, **overrides))


def config_to_data(config: MupConfig) -> dict[str, Any]:
    """Convert a config to TOML-ready data (unset values are omitted)."""
    return {
        section: {key: value for key, value in values.items() if value is not None}
        for section, values in asdict(config).items()
    }


def dump_config(config: MupConfig) -> str:
    """Render a config as TOML text."""
    return tomli_w.dumps(config_to_data(config))


def create_default_config_file(path: Path) -> None:
    """Create a default config.toml file with sensible defaults and comments.

    Args:
        path: Destination path for config.toml
    """
    template = """\
# mup configuration
# Created by: mup config init

[worker]
# mu binary and the subcommand that starts its server
mu_bin = "mu"
server_cmd = "server"

# Alternate mu database directory (passed as --muhome=...)
# Can also be set with the MUP_MU_HOME environment variable
# mu_home = "~/.cache/mu"

# Mail store location, exported to mu as MAILDIR
# maildir = "~/Maildir"

[protocol]
# Seconds to wait for mu server output on each read
timeout = 0.5

# Maximum bytes per read from the server pipe
bufsiz = 2048

# Extra reads allowed to complete one response frame (0 = no limit)
max_tries = 0
"""

    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        f.write(template)
