"""Unit tests for the Rich progress display."""

from rich.progress import Progress, TextColumn

from mup.core.engine import describe_progress
from mup.core.progress import RichProgressCallback, progress_context


def make_progress() -> Progress:
    return Progress(TextColumn("{task.description} {task.fields[counts]}"), auto_refresh=False)


class TestRichProgressCallback:
    """Tests for RichProgressCallback."""

    def test_no_task_until_first_frame(self) -> None:
        callback = RichProgressCallback(make_progress(), "index")

        assert callback.progress.tasks == []
        assert callback.task_id is None

    def test_frames_update_one_task(self) -> None:
        callback = RichProgressCallback(make_progress(), "index")

        callback({"status": "running", "processed": 500, "updated": 20, "cleaned_up": 0})
        callback({"status": "running", "processed": 1000, "updated": 45, "cleaned_up": 0})

        tasks = callback.progress.tasks
        assert len(tasks) == 1
        assert tasks[0].description == "index"
        assert tasks[0].fields["counts"] == "1000 processed, 45 updated, 0 cleaned up"

    def test_on_complete_removes_task(self) -> None:
        callback = RichProgressCallback(make_progress(), "index")
        callback({"status": "running", "processed": 1})

        callback.on_complete()

        assert callback.progress.tasks == []
        assert callback.task_id is None

    def test_on_complete_without_frames(self) -> None:
        callback = RichProgressCallback(make_progress(), "ping")

        callback.on_complete()

        assert callback.progress.tasks == []


class TestProgressContext:
    """Tests for progress_context()."""

    def test_quiet_mode_yields_none(self) -> None:
        with progress_context(quiet_mode=True) as progress:
            assert progress is None

    def test_yields_callback_and_cleans_up(self) -> None:
        with progress_context(description="index") as callback:
            assert isinstance(callback, RichProgressCallback)
            callback({"status": "running", "processed": 5})
            progress = callback.progress

        assert progress.tasks == []


class TestDescribeProgress:
    """Tests for describe_progress()."""

    def test_only_known_counters(self) -> None:
        value = {"info": "index", "status": "running", "processed": 3, "cleaned_up": 1}

        assert describe_progress(value) == "3 processed, 1 cleaned up"

    def test_no_counters(self) -> None:
        assert describe_progress({"status": "running"}) == ""
