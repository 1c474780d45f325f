"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from mup.core.commands import CommandRegistry
from mup.domain.config import MupConfig, ProtocolConfig
from tests.helpers import fake_registry, fake_worker_config

# ============================================================================
# Environment Isolation
# ============================================================================
# The provider reads the user's global config and MAILDIR / MUP_MU_HOME.
# Tests must not depend on whatever the developer machine has set.


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    """Hide the real global config file and mail environment variables."""
    monkeypatch.delenv("MAILDIR", raising=False)
    monkeypatch.delenv("MUP_MU_HOME", raising=False)
    nonexistent_global = tmp_path / "nonexistent_global" / "config.toml"
    with patch(
        "mup.adapters.config.toml_config_provider.get_global_config_path",
        return_value=nonexistent_global,
    ):
        yield nonexistent_global


# ============================================================================
# Fake mu server
# ============================================================================


@pytest.fixture
def fake_config() -> MupConfig:
    """Config for the fake mu server.

    The read timeout is generous because reads return as soon as data
    arrives; only deliberately incomplete frames wait it out.
    """
    return MupConfig(worker=fake_worker_config(), protocol=ProtocolConfig(timeout=5.0))


@pytest.fixture
def registry() -> CommandRegistry:
    """Command registry including the fake server's extra commands."""
    return fake_registry()
