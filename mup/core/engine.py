"""Command engine: the client side of the mu server protocol.

MuClient serializes a command, sends it to the supervised worker, reads
frames until one is complete, decodes and canonicalizes it, and applies the
command's response policy (one frame, or frames until `status` is
`complete`). Worker death is recovered by the supervisor; the call that was
in flight still fails.
"""

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mup.adapters.sexp import decode, hashify
from mup.adapters.worker.timeouts import WorkerTimeouts
from mup.core.commands import (
    QUIT,
    TIMEOUT_ARG,
    CommandRegistry,
    ResponsePolicy,
    build_command_line,
    default_registry,
)
from mup.domain.config import MupConfig
from mup.domain.exceptions import (
    IncompleteFrameError,
    IncompleteStreamError,
    ProtocolError,
    WorkerDied,
)
from mup.domain.values import CallContext, CanonicalValue, Frame

if TYPE_CHECKING:
    from mup.ports.worker import Worker

logger = logging.getLogger(__name__)

STATUS_COMPLETE = "complete"
PROGRESS_FIELDS = ("processed", "updated", "cleaned_up")

ProgressHandler = Callable[[dict[str, CanonicalValue]], None]


def describe_progress(value: dict[str, CanonicalValue]) -> str:
    """Summarize the counters of a progress frame, e.g. "500 processed, 20 updated"."""
    return ", ".join(
        f"{value[field]} {field.replace('_', ' ')}"
        for field in PROGRESS_FIELDS
        if field in value
    )


def is_progress(value: CanonicalValue) -> bool:
    """True for a non-terminal frame of a streaming command."""
    return (
        isinstance(value, dict)
        and "status" in value
        and value["status"] != STATUS_COMPLETE
    )


class MuClient:
    """Client for a long-lived `mu server` process.

    Not reentrant: one call at a time per instance. Use one client per
    thread, or serialize access externally.

    Example:
        with MuClient() as mu:
            hits = mu.find(query="subject:something", maxnum=10)
    """

    def __init__(
        self,
        config: MupConfig | None = None,
        worker: "Worker | None" = None,
        registry: CommandRegistry | None = None,
        on_progress: ProgressHandler | None = None,
    ):
        """Initialize client and start the worker.

        Args:
            config: Worker and protocol settings (default: MupConfig.default())
            worker: Process supervisor to use instead of spawning `mu server`
            registry: Command table (default: the standard mu commands)
            on_progress: Called with each non-terminal frame of a streaming
                command
        """
        config = config or MupConfig.default()
        self.timeout = config.protocol.timeout
        self.max_tries = config.protocol.max_tries
        self.registry = registry or default_registry()
        self.on_progress = on_progress

        if worker is None:
            from mup.adapters.worker.supervisor import ProcessSupervisor

            worker = ProcessSupervisor(
                config.worker,
                bufsiz=config.protocol.bufsiz,
                banner_timeout=config.protocol.timeout,
            )
        self._worker = worker
        self._worker.ensure_running()

    @property
    def pid(self) -> int | None:
        """PID of the mu server process."""
        return self._worker.pid

    def __enter__(self) -> "MuClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finish()

    # ------------------------------------------------------------------
    # Generic call path
    # ------------------------------------------------------------------

    def call(self, name: str, **kwargs: Any) -> CanonicalValue:
        """Issue a registered command and return its canonical result.

        The pseudo-argument `timeout` sets the read timeout for this call
        only and is not sent to the server.

        Args:
            name: Command name (see CommandRegistry)
            **kwargs: Command arguments, snake_case names

        Returns:
            Canonical value of the response (the final frame for streaming
            commands)

        Raises:
            UnknownCommandError: If the command is not registered
            ProtocolError: If the response is malformed
            IncompleteFrameError: If a frame stays short after max_tries reads
            IncompleteStreamError: If the worker dies mid-stream
            WorkerDied: If the worker dies before answering (it is restarted)
        """
        spec = self.registry.get(name)
        timeout = kwargs.pop(TIMEOUT_ARG, None)
        ctx = CallContext(
            command=name,
            timeout=self.timeout if timeout is None else float(timeout),
            max_tries=self.max_tries,
        )
        if timeout is not None:
            logger.debug(f"timeout {self.timeout} => {ctx.timeout} for {name}")

        line = build_command_line(spec.wire, kwargs)
        self._worker.ensure_running()
        junk = self._worker.reader.discard()
        if junk:
            logger.debug(f"Pitching {len(junk)} leftover bytes: {junk!r}")
        self._worker.send_line(line)

        if spec.policy is ResponsePolicy.STREAMING:
            return self._stream(ctx)
        return self._next_value(ctx)

    def _read(self, ctx: CallContext) -> bytes:
        return self._worker.read(ctx.timeout, shutting_down=ctx.shutting_down)

    def _next_frame(self, ctx: CallContext) -> Frame:
        reader = self._worker.reader
        frame = reader.take_frame()
        if frame is None:
            self._read(ctx)
            frame = reader.take_frame()

        tries = 0
        while frame is None:
            if ctx.max_tries and tries >= ctx.max_tries:
                expected, received = reader.pending()
                raise IncompleteFrameError(expected, received, tries)
            tries += 1
            logger.debug(f"Short buffer for {ctx.command}, reading more ({tries})")
            self._read(ctx)
            frame = reader.take_frame()
        return frame

    def _next_value(self, ctx: CallContext) -> CanonicalValue:
        frame = self._next_frame(ctx)
        try:
            text = frame.text()
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Payload is not valid UTF-8: {e}") from e
        return hashify(decode(text))

    def _stream(self, ctx: CallContext) -> CanonicalValue:
        while True:
            try:
                value = self._next_value(ctx)
            except WorkerDied as e:
                raise IncompleteStreamError(
                    f"mu server exited before '{ctx.command}' completed",
                    hint="The server has been restarted; retry the command",
                ) from e
            if not is_progress(value):
                return value
            self._report_progress(ctx, value)

    def _report_progress(self, ctx: CallContext, value: dict[str, CanonicalValue]) -> None:
        logger.info(f"{ctx.command} {value['status']}: {describe_progress(value)}")
        if self.on_progress is not None:
            self.on_progress(value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def restart(self) -> None:
        """Replace the worker with a fresh process."""
        self._worker.restart()

    def finish(self) -> bool:
        """Shut down the mu server and clean up.

        Sends `cmd:quit` and drains output until the server closes it. A
        server that keeps running past WorkerTimeouts.QUIT_WAIT is stopped
        by force. Safe to call more than once.

        Returns:
            True once the server is gone
        """
        if not self._worker.is_running():
            return self._worker.stop()

        ctx = CallContext(command=QUIT, timeout=self.timeout, shutting_down=True)
        junk = self._worker.reader.discard()
        if junk:
            logger.debug(f"Pitching {len(junk)} leftover bytes: {junk!r}")
        deadline = time.monotonic() + WorkerTimeouts.QUIT_WAIT
        try:
            self._worker.send_line(build_command_line(QUIT), shutting_down=True)
            while time.monotonic() < deadline:
                self._read(ctx)
        except WorkerDied:
            logger.debug("mu server exited after quit")
            return True

        trailing = self._worker.reader.discard()
        logger.warning(f"mu server still running after quit, trailing output: {trailing!r}")
        return self._worker.stop()

    # ------------------------------------------------------------------
    # mu server commands
    # ------------------------------------------------------------------

    def add(self, **kwargs: Any) -> CanonicalValue:
        """Add a message to the database (path, maildir)."""
        return self.call("add", **kwargs)

    def compose(self, **kwargs: Any) -> CanonicalValue:
        """Compose a message (type: reply|forward|edit|new, docid)."""
        return self.call("compose", **kwargs)

    def contacts(self, **kwargs: Any) -> CanonicalValue:
        """Search contacts (personal, after)."""
        return self.call("contacts", **kwargs)

    def extract(self, **kwargs: Any) -> CanonicalValue:
        """Save or open a message part (action, index, path, what, param)."""
        return self.call("extract", **kwargs)

    def find(self, **kwargs: Any) -> CanonicalValue:
        """Search the database (query, threads, sortfield, reverse, maxnum)."""
        return self.call("find", **kwargs)

    def index(self, **kwargs: Any) -> CanonicalValue:
        """(Re)index the message store (path, my_addresses).

        mu answers with a progress frame every few hundred messages; only
        the final frame, with status `complete`, is returned.
        """
        return self.call("index", **kwargs)

    def mkdir(self, **kwargs: Any) -> CanonicalValue:
        """Make a new maildir (path)."""
        return self.call("mkdir", **kwargs)

    def move(self, **kwargs: Any) -> CanonicalValue:
        """Move a message or change its flags (docid|msgid, maildir, flags)."""
        return self.call("move", **kwargs)

    def ping(self, **kwargs: Any) -> CanonicalValue:
        """Check that the server is alive."""
        return self.call("ping", **kwargs)

    def remove(self, **kwargs: Any) -> CanonicalValue:
        """Remove a message (docid)."""
        return self.call("remove", **kwargs)

    def view(self, **kwargs: Any) -> CanonicalValue:
        """View a message (docid|msgid|path, extract_images, use_agent, ...)."""
        return self.call("view", **kwargs)
