import logging
import signal
import sys
import threading
from functools import partial
from logging.handlers import RotatingFileHandler
from pathlib import Path
from types import FrameType
from typing import Any

from rich.console import Console

from .config import Config
from .constants import APP_NAME, EXIT_OK, LOG_BACKUP_COUNT, MAX_LOG_SIZE
from .cycle import run_commit_cycle
from .git_wrapper import GitRepo
from .prompt import MessagePrompt
from .scheduler import CommitScheduler
from .watcher import ChangeWatcher

logger = logging.getLogger(APP_NAME)
logger.setLevel(logging.INFO)

console = Console()

_FORMATTER = logging.Formatter(
    "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
)


def setup_logging(verbose: bool = False) -> None:
    """Configures console logging.

    Args:
        verbose (bool): If True, DEBUG messages are emitted as well.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(_FORMATTER)
    logger.addHandler(stream_handler)


def add_file_logging(log_file: Path) -> None:
    """Additionally logs to `log_file`, rotating it once it grows too large."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_SIZE,
        backupCount=LOG_BACKUP_COUNT,
    )
    file_handler.setFormatter(_FORMATTER)
    logger.addHandler(file_handler)


def _install_signal_handler(stop: threading.Event) -> Any:
    """Makes SIGTERM set `stop`. Returns the previous handler, if one was replaced."""

    def handler(signum: int, _frame: FrameType | None) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}. Shutting down.")
        stop.set()

    # Signal handlers can only be installed from the main thread.
    if threading.current_thread() is not threading.main_thread():
        return None
    return signal.signal(signal.SIGTERM, handler)


def build_scheduler(
    config: Config, prompt: MessagePrompt | None = None
) -> CommitScheduler:
    """Wires the commit cycle for `config` into a new CommitScheduler."""
    repo = GitRepo(config.project_path)
    cycle = partial(run_commit_cycle, config, repo, prompt)
    return CommitScheduler(cycle, interval=config.commit_interval)


def run(config: Config, stop: threading.Event | None = None) -> int:
    """Watches `config.watch_path` and commits on every interval until stopped.

    Runs until `stop` is set, SIGTERM arrives, or the user presses Ctrl+C.

    Args:
        config (Config): The resolved configuration.
        stop (threading.Event | None): Optional event that ends the loop when set.

    Returns:
        int: The process exit code.

    Raises:
        FileNotFoundError: If the watch path is not an existing directory.
    """
    if not config.watch_path.is_dir():
        raise FileNotFoundError(f"Watch path does not exist: {config.watch_path}")

    stop = stop or threading.Event()
    previous_handler = _install_signal_handler(stop)

    prompt = None
    if not config.auto_commit:
        prompt = MessagePrompt(console, timeout=config.prompt_timeout)

    scheduler = build_scheduler(config, prompt)
    watcher = ChangeWatcher(
        config.watch_path, scheduler.post_change, events=config.watch_events
    )

    watcher.start()
    scheduler.start()
    logger.info("Waiting for manual exit...")
    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted. Shutting down.")
    finally:
        if prompt is not None:
            prompt.cancel()
        watcher.stop()
        scheduler.stop()
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)

    return EXIT_OK
