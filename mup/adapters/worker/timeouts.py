"""Centralized timeout configuration for the mu server worker.

All worker-related timeout values are defined here to:
1. Provide a single source of truth for tuning
2. Document the purpose of each timeout value
3. Enable easy adjustment for different environments (e.g., slower systems)
"""


class WorkerTimeouts:
    """Centralized timeout configuration for worker operations.

    All values are in seconds.

    Groups:
        READ_*: Waiting for worker output
        QUIT_*: Graceful shutdown via cmd:quit
        REAP_*: Collecting the exit status of a dead worker
        SIGTERM_* / SIGKILL_*: Forced shutdown
    """

    # =========================================================================
    # Read Timeouts
    # =========================================================================

    READ_DEFAULT: float = 0.5
    """Default wait for the worker's output to become readable.

    Used for every read unless the client is configured otherwise or a
    single call overrides it with the `timeout` argument. Also bounds the
    initial read that discards the startup banner.
    """

    # =========================================================================
    # Graceful Shutdown
    # =========================================================================

    QUIT_WAIT: float = 5.0
    """Maximum time to drain output after sending cmd:quit.

    The worker normally closes its output right after acknowledging quit.
    If it is still talking after this long it is terminated.
    """

    # =========================================================================
    # Reaping
    # =========================================================================

    REAP_WAIT: float = 2.0
    """Time to wait for a worker whose output hit EOF to exit.

    EOF on stdout almost always means the process is gone or about to be,
    so this is only a guard against a worker that closed stdout but kept
    running.
    """

    SIGTERM_WAIT: float = 2.0
    """Time to wait for exit after SIGTERM before escalating to SIGKILL."""

    SIGKILL_WAIT: float = 1.0
    """Time to wait after SIGKILL.

    SIGKILL cannot be caught or ignored, so this only gives the OS time to
    clean up the process.
    """
