"""Config domain models for mup.

Configuration is stored in config.toml and describes how to launch the mu
server and how patiently to read its output. This module defines the domain
models that represent validated configuration state.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any


@dataclass(frozen=True)
class WorkerConfig:
    """Configuration for launching the mu server process.

    Attributes:
        mu_bin: Name or path of the mu binary
        server_cmd: mu subcommand that starts the server
        mu_home: Alternate mu database directory, passed with home_flag
        maildir: Mail store location, exported to the worker as MAILDIR
        home_flag: Command-line flag used to pass mu_home

    Raises:
        ValueError: If mu_bin or server_cmd is empty.
    """

    mu_bin: str = "mu"
    server_cmd: str = "server"
    mu_home: str | None = None
    maildir: str | None = None
    home_flag: str = "--muhome"

    def __post_init__(self) -> None:
        """Validate worker config after initialization."""
        if not self.mu_bin:
            raise ValueError("mu_bin must not be empty")
        if not self.server_cmd:
            raise ValueError("server_cmd must not be empty")

    def command(self) -> list[str]:
        """Build the argv used to spawn the worker."""
        argv = [self.mu_bin, self.server_cmd]
        if self.mu_home:
            argv.append(f"{self.home_flag}={self.mu_home}")
        return argv


@dataclass(frozen=True)
class ProtocolConfig:
    """Configuration for reading frames from the worker.

    Attributes:
        timeout: Seconds to wait for worker output per read (default: 0.5)
        bufsiz: Maximum bytes per read from the worker pipe (default: 2048)
        max_tries: Extra reads allowed to complete one frame, 0 means no limit

    Raises:
        ValueError: If timeout or bufsiz is not positive, or max_tries is negative.
    """

    timeout: float = 0.5
    bufsiz: int = 2048
    max_tries: int = 0

    def __post_init__(self) -> None:
        """Validate protocol config after initialization."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.bufsiz <= 0:
            raise ValueError(f"bufsiz must be positive, got {self.bufsiz}")
        if self.max_tries < 0:
            raise ValueError(f"max_tries cannot be negative, got {self.max_tries}")


@dataclass(frozen=True)
class MupConfig:
    """Complete mup configuration.

    Attributes:
        worker: Worker process configuration
        protocol: Frame reading configuration
    """

    worker: WorkerConfig = field(default_factory=WorkerConfig)
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)

    @staticmethod
    def default() -> "MupConfig":
        """Create a config with all default values."""
        return MupConfig(worker=WorkerConfig(), protocol=ProtocolConfig())

    @staticmethod
    def from_partial(base: "MupConfig", data: dict[str, Any]) -> "MupConfig":
        """Overlay raw config data onto an existing config.

        Only keys present in `data` are replaced; each section is rebuilt so
        its validation runs again.

        Args:
            base: Config to start from
            data: Parsed TOML data with optional [worker] and [protocol] sections

        Returns:
            New MupConfig with the overrides applied

        Raises:
            ValueError: If a section is not a table, a key is unknown, or a
                value fails validation.
        """
        return MupConfig(
            worker=_overlay(base.worker, data.get("worker", {}), "worker"),
            protocol=_overlay(base.protocol, data.get("protocol", {}), "protocol"),
        )


def _overlay(section, overrides: Any, name: str):
    if not isinstance(overrides, dict):
        raise ValueError(f"[{name}] must be a table")
    known = {f.name for f in fields(section)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown keys in [{name}]: {', '.join(sorted(unknown))}")
    try:
        return replace(section, **overrides)
    except TypeError as e:
        raise ValueError(f"Invalid value in [{name}]: {e}") from e
