"""Frame reading for the mu server protocol.

Every response from mu server is a frame:

    0xFE <length in hex> 0xFF <payload of length bytes> [newline]

The reader accumulates raw bytes from the worker's stdout with
timeout-bounded reads; frames are cut from the front of that buffer on
demand. Buffering and parsing are separate steps so the caller controls
how many times to read before giving up on an incomplete frame.
"""

import logging
import os
import select
from typing import IO

from mup.domain.exceptions import ProtocolError, WorkerDied
from mup.domain.values import Frame

logger = logging.getLogger(__name__)

FRAME_START = 0xFE
LENGTH_END = 0xFF
TERMINATORS = b"\r\n"
HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


def _skip_terminators(data: bytes | bytearray) -> int:
    # Only CR/LF is skipped: the previous frame's terminator can arrive after
    # its payload was consumed. Any other byte before a header is a ProtocolError.
    start = 0
    while start < len(data) and data[start] in TERMINATORS:
        start += 1
    return start


def parse_header(data: bytes | bytearray, start: int = 0) -> tuple[int, int] | None:
    """Parse a frame header at `start`.

    Args:
        data: Buffered worker output
        start: Offset where the header should begin

    Returns:
        (payload length, payload offset), or None if the header is not
        complete yet

    Raises:
        ProtocolError: If the bytes at `start` cannot begin a frame header
    """
    if start >= len(data):
        return None
    if data[start] != FRAME_START:
        raise ProtocolError(
            f"Expected frame header, got {bytes(data[start:start + 16])!r}"
        )
    end = data.find(LENGTH_END, start + 1)
    digits = data[start + 1 : end] if end != -1 else data[start + 1 :]
    if any(byte not in HEX_DIGITS for byte in digits):
        raise ProtocolError(f"Invalid frame length {bytes(digits)!r}")
    if end == -1:
        return None
    if not digits:
        raise ProtocolError("Frame header has no length")
    return int(bytes(digits).decode("ascii"), 16), end + 1


def parse_frame(data: bytes | bytearray) -> tuple[Frame, int] | None:
    """Cut one frame from the front of `data`.

    Args:
        data: Buffered worker output

    Returns:
        (frame, number of bytes consumed), or None if the buffer holds only
        part of a frame

    Raises:
        ProtocolError: If the buffer does not start with a frame header
    """
    start = _skip_terminators(data)
    header = parse_header(data, start)
    if header is None:
        return None
    length, offset = header
    if len(data) - offset < length:
        return None
    payload = bytes(data[offset : offset + length])
    consumed = offset + length
    if data[consumed : consumed + 2] == b"\r\n":
        consumed += 2
    elif data[consumed : consumed + 1] == b"\n":
        consumed += 1
    return Frame(length=length, payload=payload), consumed


class FrameReader:
    """Buffered, timeout-bounded reader over the worker's stdout.

    The reader works on the raw file descriptor (select + os.read) so a
    read never blocks once select reports data is ready.
    """

    def __init__(self, stream: IO[bytes] | int, bufsiz: int = 2048):
        """Initialize frame reader.

        Args:
            stream: Worker stdout, as a file object or file descriptor
            bufsiz: Maximum bytes per os.read call
        """
        self._fd = stream if isinstance(stream, int) else stream.fileno()
        self.bufsiz = bufsiz
        self._buffer = bytearray()

    @property
    def buffer(self) -> bytes:
        """Copy of the unconsumed bytes."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def _wait(self, timeout: float) -> bool:
        readable, _, _ = select.select([self._fd], [], [], timeout)
        return bool(readable)

    def fill(self, timeout: float) -> bytes:
        """Read everything the worker has ready.

        Waits up to `timeout` seconds for the first byte, then keeps reading
        without waiting while more data is immediately available.

        Args:
            timeout: Seconds to wait for output to become readable

        Returns:
            Buffer contents after reading (unchanged if nothing arrived)

        Raises:
            WorkerDied: If a read returns zero bytes
        """
        ready = self._wait(timeout)
        while ready:
            chunk = os.read(self._fd, self.bufsiz)
            if not chunk:
                raise WorkerDied("mu server closed its output")
            self._buffer += chunk
            logger.debug(f"<<< {chunk!r}")
            ready = self._wait(0)
        return bytes(self._buffer)

    def take_frame(self) -> Frame | None:
        """Consume one complete frame from the buffer.

        Returns:
            The frame, or None if the buffer holds only part of one

        Raises:
            ProtocolError: If the buffer does not start with a frame header
        """
        parsed = parse_frame(self._buffer)
        if parsed is None:
            return None
        frame, consumed = parsed
        del self._buffer[:consumed]
        return frame

    def pending(self) -> tuple[int | None, int]:
        """Describe the incomplete frame at the front of the buffer.

        Returns:
            (declared payload length or None if the header is incomplete,
            payload bytes available)
        """
        start = _skip_terminators(self._buffer)
        header = parse_header(self._buffer, start)
        if header is None:
            return None, len(self._buffer) - start
        length, offset = header
        return length, len(self._buffer) - offset

    def discard(self) -> bytes:
        """Drop and return any unconsumed bytes."""
        junk = bytes(self._buffer)
        self._buffer.clear()
        return junk
