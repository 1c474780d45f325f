"""Supervised mu server worker.

This package owns the child process and the byte stream it produces:
- frames.py: timeout-bounded buffered reads and frame extraction
- supervisor.py: spawn, death detection, reaping and relaunch
- timeouts.py: timeout constants
"""

from mup.adapters.worker.frames import FrameReader, parse_frame
from mup.adapters.worker.supervisor import ProcessSupervisor

__all__ = ["FrameReader", "ProcessSupervisor", "parse_frame"]
