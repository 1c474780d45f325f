"""Domain exceptions for the mu protocol engine.

Every error raised by the engine derives from MupError so callers can catch
the whole family at their boundary (CLI, application code) and present the
message together with its optional hint.
"""


class MupError(Exception):
    """Base exception for all mup errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class ProtocolError(MupError):
    """Raised for a malformed frame header or an unparseable payload."""

    pass


class IncompleteFrameError(MupError):
    """Raised when a frame payload is still short after max_tries reads."""

    def __init__(self, expected: int | None, received: int, tries: int) -> None:
        if expected is None:
            detail = f"Frame header still incomplete ({received} bytes buffered)"
        else:
            detail = f"Waiting for {expected} payload bytes, only got {received}"
        super().__init__(
            f"{detail} after {tries} extra reads",
            hint="Restart the client before issuing further commands",
        )
        self.expected = expected
        self.received = received
        self.tries = tries


class WorkerDied(MupError):
    """Raised when a read from the worker returns zero bytes (EOF)."""

    pass


class IncompleteStreamError(MupError):
    """Raised when the worker dies before a streaming command completes."""

    pass


class WorkerStartError(MupError):
    """Raised when the mu server process cannot be launched."""

    pass


class UnknownCommandError(MupError):
    """Raised when a command name is not in the command table."""

    pass
