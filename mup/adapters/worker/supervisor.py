"""Process supervision for the mu server worker.

Spawns `mu server`, wires its stdin/stdout to the engine, notices when it
dies, reaps it, and relaunches it so that later calls keep working.

State machine:

    ALIVE --(zero-byte read)--> DEAD --(not shutting down)--> RESTARTING --> ALIVE
                                 |
                                 +--(shutting down)--> stays DEAD
"""

import contextlib
import logging
import os
import subprocess

from mup.adapters.worker.frames import FrameReader
from mup.adapters.worker.timeouts import WorkerTimeouts
from mup.domain.config import WorkerConfig
from mup.domain.exceptions import MupError, WorkerDied, WorkerStartError
from mup.domain.values import WorkerState

logger = logging.getLogger(__name__)


class ProcessSupervisor:
    """Owns the mu server process and its pipes."""

    def __init__(
        self,
        config: WorkerConfig | None = None,
        bufsiz: int = 2048,
        banner_timeout: float = WorkerTimeouts.READ_DEFAULT,
    ):
        """Initialize supervisor. Does not start the worker.

        Args:
            config: How to launch mu server (default: `mu server`)
            bufsiz: Maximum bytes per read from the worker
            banner_timeout: Seconds to wait for startup output to discard
        """
        self.config = config or WorkerConfig()
        self.bufsiz = bufsiz
        self.banner_timeout = banner_timeout
        self._process: subprocess.Popen | None = None
        self._reader: FrameReader | None = None
        self._state = WorkerState.DEAD

    @property
    def state(self) -> WorkerState:
        """Current lifecycle state."""
        return self._state

    @property
    def pid(self) -> int | None:
        """PID of the running worker, if any."""
        return self._process.pid if self._process else None

    @property
    def reader(self) -> FrameReader:
        """Frame reader for the current worker incarnation.

        Raises:
            MupError: If no worker is running
        """
        if self._reader is None:
            raise MupError("mu server is not running", hint="Call restart() first")
        return self._reader

    def is_running(self) -> bool:
        """Check if the worker process exists and has not exited."""
        return self._process is not None and self._process.poll() is None

    def _environment(self) -> dict[str, str]:
        env = os.environ.copy()
        if self.config.maildir:
            env["MAILDIR"] = self.config.maildir
            logger.debug(f"Setting MAILDIR={self.config.maildir} for mu server")
        return env

    def spawn(self) -> subprocess.Popen:
        """Start the worker and discard its startup banner.

        Returns:
            The spawned process

        Raises:
            WorkerStartError: If the process cannot be launched or exits
                during startup
        """
        cmd = self.config.command()
        logger.info(f"Starting mu server: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=self._environment(),
            )
        except OSError as e:
            self._state = WorkerState.DEAD
            raise WorkerStartError(
                f"Failed to start mu server: {e}",
                hint=f"Check that '{self.config.mu_bin}' is installed and on PATH",
            ) from e

        self._process = process
        self._reader = FrameReader(process.stdout, bufsiz=self.bufsiz)
        try:
            self._reader.fill(self.banner_timeout)
        except WorkerDied as e:
            self._state = WorkerState.DEAD
            code = self._reap()
            raise WorkerStartError(
                f"mu server exited during startup (exit code: {code})",
                hint="Run the mu server command by hand to see its error output",
            ) from e

        junk = self._reader.discard()
        if junk:
            logger.debug(f"Discarded startup banner: {junk!r}")
        self._state = WorkerState.ALIVE
        logger.info(f"mu server started with PID {process.pid}")
        return process

    def ensure_running(self) -> None:
        """Start the worker if no process is attached."""
        if self._process is None:
            self.spawn()

    def send_line(self, line: str, shutting_down: bool = False) -> None:
        """Write one command line to the worker.

        Args:
            line: Command line without trailing newline
            shutting_down: Suppress the relaunch if the pipe is broken

        Raises:
            WorkerDied: If the worker's stdin is closed
        """
        if self._process is None or self._process.stdin is None:
            raise WorkerDied("mu server is not running")
        logger.debug(f">>> {line}")
        try:
            self._process.stdin.write(f"{line}\n".encode("utf-8"))
            self._process.stdin.flush()
        except BrokenPipeError as e:
            self._handle_death(restart=not shutting_down)
            raise WorkerDied("mu server closed its input") from e

    def read(self, timeout: float, shutting_down: bool = False) -> bytes:
        """Read whatever output is ready within `timeout` seconds.

        Args:
            timeout: Seconds to wait for output
            shutting_down: Suppress the automatic relaunch on death

        Returns:
            Current buffer contents

        Raises:
            WorkerDied: If the worker exited; it has already been reaped
                and, unless shutting_down, relaunched
        """
        try:
            return self.reader.fill(timeout)
        except WorkerDied:
            self._handle_death(restart=not shutting_down)
            raise

    def _handle_death(self, restart: bool) -> None:
        pid = self.pid
        self._state = WorkerState.DEAD
        if restart:
            logger.warning(f"mu server (PID {pid}) died, restarting")
        else:
            logger.info(f"mu server (PID {pid}) exited")
        self._reap()
        if restart:
            self._state = WorkerState.RESTARTING
            self.spawn()

    def _reap(self) -> int | None:
        """Discard buffered output, close pipes and collect the exit status.

        Returns:
            Exit code, or None if there was no process
        """
        process = self._process
        if process is None:
            return None

        if self._reader is not None:
            junk = self._reader.discard()
            if junk:
                logger.debug(f"Pitching {len(junk)} unread bytes from dead worker: {junk!r}")

        if process.stdin:
            with contextlib.suppress(OSError):
                process.stdin.close()

        try:
            code = process.wait(timeout=WorkerTimeouts.REAP_WAIT)
        except subprocess.TimeoutExpired:
            code = self._terminate(process)

        if process.stdout:
            with contextlib.suppress(OSError):
                process.stdout.close()

        self._process = None
        self._reader = None
        logger.info(f"Reaped mu server PID {process.pid} (exit code: {code})")
        return code

    def _terminate(self, process: subprocess.Popen) -> int | None:
        logger.warning(f"mu server (PID {process.pid}) still running, sending SIGTERM")
        process.terminate()
        try:
            return process.wait(timeout=WorkerTimeouts.SIGTERM_WAIT)
        except subprocess.TimeoutExpired:
            logger.warning("mu server did not stop gracefully, sending SIGKILL")
            process.kill()
            try:
                return process.wait(timeout=WorkerTimeouts.SIGKILL_WAIT)
            except subprocess.TimeoutExpired:
                logger.error(f"mu server (PID {process.pid}) survived SIGKILL")
                return None

    def stop(self) -> bool:
        """Stop the worker without the quit handshake.

        Closing stdin lets a well-behaved mu server exit on its own; a
        worker that does not is terminated, then killed. Safe to call when
        nothing is running.

        Returns:
            True once no worker process is attached
        """
        if self._process is None:
            return True
        logger.info(f"Stopping mu server (PID {self._process.pid})")
        self._state = WorkerState.DEAD
        self._reap()
        return True

    def restart(self) -> None:
        """Stop the current worker (if any) and start a fresh one."""
        logger.info("Restarting mu server...")
        self.stop()
        self.spawn()
