"""Tests for the filesystem watcher and change descriptions."""

import threading
from pathlib import Path
from unittest.mock import MagicMock

from watchdog.events import (
    DirCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from git_autocommit.constants import WATCH_EVENT_KINDS
from git_autocommit.watcher import ChangeWatcher, FileChange


def _watcher(on_change: MagicMock, events=WATCH_EVENT_KINDS) -> ChangeWatcher:
    return ChangeWatcher(Path("/w"), on_change, events=events)


def test_file_event_is_forwarded() -> None:
    on_change = MagicMock()

    _watcher(on_change).handler.dispatch(FileModifiedEvent("/w/a.txt"))

    on_change.assert_called_once_with(
        FileChange(kind="modified", path="/w/a.txt", is_directory=False)
    )


def test_moved_event_keeps_destination() -> None:
    on_change = MagicMock()

    _watcher(on_change).handler.dispatch(FileMovedEvent("/w/a.txt", "/w/b.txt"))

    change = on_change.call_args.args[0]
    assert change.dest_path == "/w/b.txt"
    assert change.describe() == "File changed (moved): /w/a.txt -> /w/b.txt"


def test_directory_event_description() -> None:
    on_change = MagicMock()

    _watcher(on_change).handler.dispatch(DirCreatedEvent("/w/sub"))

    change = on_change.call_args.args[0]
    assert change.is_directory is True
    assert change.describe() == "Directory changed: /w/sub"


def test_unsubscribed_kinds_are_ignored() -> None:
    """Verifies that the configured event set decides what gets forwarded."""
    on_change = MagicMock()
    watcher = _watcher(on_change, events={"modified", "moved"})

    watcher.handler.dispatch(FileDeletedEvent("/w/a.txt"))

    on_change.assert_not_called()


def test_real_observer_reports_new_file(tmp_path: Path) -> None:
    """Runs a real observer against a temporary directory."""
    seen = threading.Event()
    changes: list[FileChange] = []

    def on_change(change: FileChange) -> None:
        changes.append(change)
        seen.set()

    watcher = ChangeWatcher(tmp_path, on_change)
    watcher.start()
    try:
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "note.md").write_text("hello")
        assert seen.wait(5)
    finally:
        watcher.stop()

    assert any(str(tmp_path) in c.path for c in changes)
