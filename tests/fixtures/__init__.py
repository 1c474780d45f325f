"""Test fixtures module."""

from pathlib import Path

FAKE_MU_SERVER = Path(__file__).parent / "fake_mu_server.py"

__all__ = ["FAKE_MU_SERVER"]
