"""Value objects shared across the protocol engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Union

CanonicalValue = Union[
    None, bool, int, float, str, list["CanonicalValue"], dict[str, "CanonicalValue"]
]
"""A decoded, normalized result: null, boolean, number, string, list or mapping."""


@dataclass(frozen=True)
class Frame:
    """One length-prefixed unit of worker output.

    Attributes:
        length: Payload length declared in the frame header.
        payload: Exactly `length` bytes of symbolic-expression text.
    """

    length: int
    payload: bytes

    def text(self) -> str:
        """Payload decoded as UTF-8, with one trailing newline removed."""
        text = self.payload.decode("utf-8")
        if text.endswith("\n"):
            text = text[:-1]
        return text


@dataclass(frozen=True)
class CallContext:
    """Per-call state threaded through the engine.

    Built fresh for every call, so a per-call timeout override can never
    leak into the next call.

    Attributes:
        command: Name of the command in flight.
        timeout: Read timeout in seconds for this call.
        max_tries: Extra reads allowed to complete one frame (0 = unbounded).
        shutting_down: True while finish() is draining the worker.
    """

    command: str
    timeout: float
    max_tries: int = 0
    shutting_down: bool = False


class WorkerState(Enum):
    """Lifecycle states of the supervised worker process."""

    ALIVE = "alive"
    DEAD = "dead"
    RESTARTING = "restarting"
