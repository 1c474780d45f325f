"""Progress reporting utilities for CLI commands.

Provides a Rich-based progress display fed by the non-terminal frames of a
streaming command such as `index`.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

from mup.core.engine import describe_progress


class RichProgressCallback:
    """Rich-based progress callback for streaming commands.

    Passed to MuClient as `on_progress`. The task is only created when the
    first progress frame arrives, so single-frame commands show nothing.
    """

    def __init__(self, progress: Progress, description: str) -> None:
        """Initialize with a Rich Progress instance.

        Args:
            progress: Rich Progress instance to use for display.
            description: Label shown next to the spinner.
        """
        self.progress = progress
        self.description = description
        self.task_id: TaskID | None = None

    def __call__(self, value: dict[str, Any]) -> None:
        """Show the counters of one progress frame."""
        if self.task_id is None:
            self.task_id = self.progress.add_task(self.description, total=None, counts="")
        self.progress.update(self.task_id, counts=describe_progress(value))

    def on_complete(self) -> None:
        """Remove the task once the command has finished."""
        if self.task_id is not None:
            self.progress.remove_task(self.task_id)
            self.task_id = None


@contextmanager
def progress_context(
    quiet_mode: bool = False,
    description: str = "Working",
) -> Generator[RichProgressCallback | None, None, None]:
    """Context manager for a transient progress display on stderr.

    Args:
        quiet_mode: If True, yields None (no progress reporting).
        description: Label for the progress task, usually the command name.

    Yields:
        RichProgressCallback if not quiet, None otherwise.

    Example:
        with progress_context(description="index") as progress:
            client = MuClient(on_progress=progress)
            client.index()
    """
    if quiet_mode:
        yield None
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("[cyan]{task.fields[counts]}"),
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        callback = RichProgressCallback(progress, description)
        try:
            yield callback
        finally:
            callback.on_complete()
