"""Recursive filesystem watcher that reports changes as messages."""

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .constants import APP_NAME, WATCH_EVENT_KINDS

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class FileChange:
    """A single filesystem notification.

    Attributes:
        kind (str): The watchdog event type ('created', 'modified', ...).
        path (str): The affected path.
        is_directory (bool): Whether the path is a directory.
        dest_path (str | None): The new path for 'moved' events.
    """

    kind: str
    path: str
    is_directory: bool = False
    dest_path: str | None = None

    def describe(self) -> str:
        """Returns a one-line, human-readable description of the change."""
        target = f"{self.path} -> {self.dest_path}" if self.dest_path else self.path
        if self.is_directory:
            return f"Directory changed: {target}"
        return f"File changed ({self.kind}): {target}"


class _ChangeEventHandler(FileSystemEventHandler):
    """Forwards subscribed watchdog events to a callback as FileChange values."""

    def __init__(
        self, on_change: Callable[[FileChange], object], events: Iterable[str]
    ):
        self.on_change = on_change
        self.events = frozenset(events)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in self.events:
            return
        dest = getattr(event, "dest_path", None)
        self.on_change(
            FileChange(
                kind=event.event_type,
                path=os.fsdecode(event.src_path),
                is_directory=event.is_directory,
                dest_path=os.fsdecode(dest) if dest else None,
            )
        )


class ChangeWatcher:
    """Watches a directory tree and posts every subscribed change to a callback.

    The callback runs on the observer's notification thread and is expected to
    return quickly (it usually just enqueues the change).
    """

    def __init__(
        self,
        watch_path: Path,
        on_change: Callable[[FileChange], object],
        events: Iterable[str] = WATCH_EVENT_KINDS,
    ):
        """Initialize the watcher.

        Args:
            watch_path: Directory to watch recursively.
            on_change: Called with a FileChange for each subscribed event.
            events: Event kinds to forward; everything else is ignored.
        """
        self.watch_path = watch_path
        self.handler = _ChangeEventHandler(on_change, events)
        self._observer: BaseObserver | None = None

    def start(self) -> None:
        """Start watching the filesystem."""
        self._observer = Observer()
        self._observer.schedule(self.handler, str(self.watch_path), recursive=True)
        self._observer.start()
        logger.info(
            f"Started watching {self.watch_path} "
            f"({', '.join(sorted(self.handler.events))})"
        )

    def stop(self) -> None:
        """Stop watching and wait for the observer thread to exit."""
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("Stopped watching")
