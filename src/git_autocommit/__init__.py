"""git-autocommit: Periodically commit a watched directory tree to git.

This package provides the command-line interface, the filesystem watcher, and
the coalescing commit scheduler that turns bursts of filesystem events into a
single `git add` / `git commit` / `git push` cycle per interval.
"""

from . import (
    cli,
    config,
    constants,
    cycle,
    daemon,
    git_wrapper,
    prompt,
    scheduler,
    watcher,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "cycle",
    "daemon",
    "git_wrapper",
    "prompt",
    "scheduler",
    "watcher",
]
