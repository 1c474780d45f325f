"""Unit tests for worker timeout configuration."""

from mup.adapters.worker.timeouts import WorkerTimeouts
from mup.domain.config import ProtocolConfig


class TestWorkerTimeoutsValues:
    """Tests for WorkerTimeouts configuration values."""

    def test_read_default_is_positive(self) -> None:
        """Read timeout must be positive."""
        assert WorkerTimeouts.READ_DEFAULT > 0

    def test_read_default_matches_protocol_default(self) -> None:
        """The config default and the supervisor's banner default agree."""
        assert ProtocolConfig().timeout == WorkerTimeouts.READ_DEFAULT

    def test_quit_wait_is_longer_than_a_read(self) -> None:
        """Draining after quit must allow at least one full read."""
        assert WorkerTimeouts.QUIT_WAIT > WorkerTimeouts.READ_DEFAULT

    def test_reap_and_signal_waits_are_positive(self) -> None:
        assert WorkerTimeouts.REAP_WAIT > 0
        assert WorkerTimeouts.SIGTERM_WAIT > 0
        assert WorkerTimeouts.SIGKILL_WAIT > 0


class TestWorkerTimeoutsDocumentation:
    """Tests to verify timeout values are documented."""

    def test_class_has_substantial_documentation(self) -> None:
        class_doc = WorkerTimeouts.__doc__
        assert class_doc is not None
        assert len(class_doc) > 100
