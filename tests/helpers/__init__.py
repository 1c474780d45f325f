"""Test helper utilities for the mup test suite."""

from tests.helpers.cli_assertions import (
    assert_command_failed,
    assert_command_success,
    assert_error_message,
    assert_output_contains,
    json_output,
)
from tests.helpers.fake_server import fake_registry, fake_worker_config
from tests.helpers.fake_worker import DEATH, FakeWorker, frame

__all__ = [
    "DEATH",
    "FakeWorker",
    "assert_command_failed",
    "assert_command_success",
    "assert_error_message",
    "assert_output_contains",
    "fake_registry",
    "fake_worker_config",
    "frame",
    "json_output",
]
