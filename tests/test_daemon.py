"""Tests for the daemon wiring and logging setup."""

import logging
import shutil
import subprocess
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from git_autocommit import daemon
from git_autocommit.config import Config
from git_autocommit.constants import EXIT_OK
from git_autocommit.git_wrapper import GitRepo
from git_autocommit.watcher import FileChange


def test_run_requires_existing_watch_path(tmp_path: Path) -> None:
    conf = Config(watch_path=tmp_path / "missing", project_path=tmp_path)

    with pytest.raises(FileNotFoundError, match="Watch path does not exist"):
        daemon.run(conf)


def test_run_wires_and_shuts_down(tmp_path: Path, mocker: MagicMock) -> None:
    """Verifies watcher and scheduler start, and are stopped on exit."""
    watcher_cls = mocker.patch("git_autocommit.daemon.ChangeWatcher")
    scheduler = MagicMock()
    mocker.patch("git_autocommit.daemon.build_scheduler", return_value=scheduler)
    mocker.patch("git_autocommit.daemon.MessagePrompt")
    conf = Config(
        watch_path=tmp_path, project_path=tmp_path, watch_events=frozenset({"moved"})
    )
    stop = threading.Event()
    stop.set()

    assert daemon.run(conf, stop) == EXIT_OK

    watcher_cls.assert_called_once_with(
        tmp_path, scheduler.post_change, events=frozenset({"moved"})
    )
    watcher = watcher_cls.return_value
    watcher.start.assert_called_once()
    watcher.stop.assert_called_once()
    scheduler.start.assert_called_once()
    scheduler.stop.assert_called_once()


def test_non_interactive_run_builds_no_prompt(
    tmp_path: Path, mocker: MagicMock
) -> None:
    mocker.patch("git_autocommit.daemon.ChangeWatcher")
    build = mocker.patch("git_autocommit.daemon.build_scheduler")
    prompt_cls = mocker.patch("git_autocommit.daemon.MessagePrompt")
    conf = Config(watch_path=tmp_path, project_path=tmp_path, auto_commit=True)
    stop = threading.Event()
    stop.set()

    daemon.run(conf, stop)

    prompt_cls.assert_not_called()
    build.assert_called_once_with(conf, None)


def test_built_scheduler_commits_on_tick(tmp_path: Path, mocker: MagicMock) -> None:
    """Verifies the full tick path down to the git subprocess calls."""
    mock_run = mocker.patch("subprocess.run", return_value=MagicMock(returncode=1))
    conf = Config(
        watch_path=tmp_path, project_path=tmp_path, auto_commit=True, do_push=True
    )
    scheduler = daemon.build_scheduler(conf)

    scheduler.handle(FileChange(kind="created", path=str(tmp_path / "x")))
    assert scheduler.tick() is True

    commands = [c.args[0][1] for c in mock_run.call_args_list]
    assert commands == ["add", "commit", "push"]
    assert scheduler.dirty is False


def test_setup_logging_is_idempotent() -> None:
    daemon.setup_logging(verbose=True)
    daemon.setup_logging(verbose=True)

    assert len(daemon.logger.handlers) == 1
    assert daemon.logger.level == logging.DEBUG

    daemon.setup_logging()
    assert daemon.logger.level == logging.INFO


def test_add_file_logging_writes_log(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "autocommit.log"
    daemon.setup_logging()
    daemon.add_file_logging(log_file)
    try:
        daemon.logger.info("hello from the test")
    finally:
        daemon.setup_logging()

    assert "INFO: hello from the test" in log_file.read_text()


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_repo_inside_watch_path_commits_once(
    tmp_path: Path, mocker: MagicMock
) -> None:
    """Verifies that git's own writes under the watch path start no new cycle.

    The watch path is the repository itself, so every `git add`/`git commit`
    touches `.git/` inside the watched tree.
    """
    for args in (
        ["init", "-q"],
        ["config", "user.name", "Test"],
        ["config", "user.email", "test@example.com"],
    ):
        subprocess.run(["git", *args], cwd=tmp_path, check=True)

    commit = mocker.spy(GitRepo, "commit")
    conf = Config(
        watch_path=tmp_path, project_path=tmp_path, auto_commit=True, commit_interval=1
    )
    stop = threading.Event()
    runner = threading.Thread(target=daemon.run, args=(conf, stop), daemon=True)
    runner.start()
    try:
        time.sleep(0.5)
        (tmp_path / "notes.md").write_text("first draft\n")

        deadline = time.monotonic() + 10
        while commit.call_count == 0 and time.monotonic() < deadline:
            time.sleep(0.1)
        # Give several more ticks the chance to pick up late notifications.
        time.sleep(4)
    finally:
        stop.set()
        runner.join(10)

    assert commit.call_count == 1
    log = subprocess.run(
        ["git", "rev-list", "--count", "HEAD"],
        cwd=tmp_path,
        capture_output=True,
        text=True,
        check=True,
    )
    assert log.stdout.strip() == "1"
