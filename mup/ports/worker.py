"""Port interface for the supervised mu server worker.

Defines the protocol the command engine uses to talk to a worker process,
so the engine can be driven by a real subprocess or by a test double.
"""

from typing import Protocol

from mup.domain.values import Frame, WorkerState


class FrameSource(Protocol):
    """Protocol for the buffered output side of a worker."""

    def take_frame(self) -> Frame | None:
        """Consume one complete frame from the buffer.

        Returns:
            The frame, or None if the buffer holds only part of one

        Raises:
            ProtocolError: If the buffer does not start with a frame header
        """
        ...

    def pending(self) -> tuple[int | None, int]:
        """Declared length (None if the header is incomplete) and bytes available."""
        ...

    def discard(self) -> bytes:
        """Drop and return any unconsumed bytes."""
        ...


class Worker(Protocol):
    """Protocol for managing the worker process lifecycle.

    This protocol defines the interface the command engine needs from a
    process supervisor: sending command lines, reading output, and
    shutting down.
    """

    @property
    def reader(self) -> FrameSource:
        """Frame source for the current worker incarnation."""
        ...

    @property
    def pid(self) -> int | None:
        """PID of the running worker, if any."""
        ...

    @property
    def state(self) -> WorkerState:
        """Current lifecycle state."""
        ...

    def is_running(self) -> bool:
        """Check if the worker process exists and has not exited."""
        ...

    def ensure_running(self) -> None:
        """Start the worker if no process is attached."""
        ...

    def send_line(self, line: str, shutting_down: bool = False) -> None:
        """Write one command line to the worker.

        Args:
            line: Command line without trailing newline
            shutting_down: Suppress the relaunch if the pipe is broken

        Raises:
            WorkerDied: If the worker's input pipe is closed
        """
        ...

    def read(self, timeout: float, shutting_down: bool = False) -> bytes:
        """Read whatever output is ready within `timeout` seconds.

        Args:
            timeout: Seconds to wait for output
            shutting_down: Suppress the automatic relaunch on death

        Returns:
            Current buffer contents

        Raises:
            WorkerDied: If the worker exited (it has been relaunched unless
                shutting_down was set)
        """
        ...

    def restart(self) -> None:
        """Stop the current worker (if any) and start a fresh one."""
        ...

    def stop(self) -> bool:
        """Stop the worker process. Safe to call when nothing is running."""
        ...
