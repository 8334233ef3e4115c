import logging
import queue
import threading
import time
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from .constants import APP_NAME, BELL_COUNT

logger = logging.getLogger(APP_NAME)

_POLL_INTERVAL = 0.2


class MessagePrompt:
    """Asks the operator for a commit message on the console.

    Lines are read by a single background reader thread, one line per request,
    so that waiting for an answer can time out or be cancelled without leaving
    the caller blocked in `input()`. A line typed after a prompt has already
    given up is discarded rather than answering the next prompt.

    Attributes:
        timeout (float | None): Seconds to wait for an answer, or None to wait
            indefinitely.
    """

    def __init__(
        self,
        console: Console | None = None,
        timeout: float | None = None,
        reader: Callable[[], str] | None = None,
    ):
        """Initializes the prompt.

        Args:
            console (Console | None): Console used for the bell and the prompt.
            timeout (float | None): Seconds to wait for an answer.
            reader (Callable[[], str] | None): Reads one line of operator input.
                Defaults to `console.input`.
        """
        self._console = console or Console()
        self.timeout = timeout
        self._reader = reader or self._console.input
        self._requests: queue.Queue[None] = queue.Queue()
        self._answers: queue.Queue[str | None] = queue.Queue()
        self._cancelled = threading.Event()
        self._outstanding = False
        self._thread: threading.Thread | None = None

    def alert(self) -> None:
        """Rings the console bell to get the operator's attention."""
        for _ in range(BELL_COUNT):
            self._console.bell()

    def ask(self, default: str) -> str | None:
        """Prompts for a commit message and waits for one line of input.

        Args:
            default (str): The message shown as the fallback.

        Returns:
            str | None: The line entered by the operator, or None if the wait
            timed out, was cancelled, or the input stream is closed.
        """
        if self._cancelled.is_set():
            return None

        self._discard_stale()
        self.alert()
        self._console.print(
            f"Please input a commit message [dim](empty for '{escape(default)}')[/dim]:"
        )

        if not self._outstanding:
            self._ensure_reader()
            self._outstanding = True
            self._requests.put(None)

        deadline = time.monotonic() + self.timeout if self.timeout else None
        while not self._cancelled.is_set():
            wait = _POLL_INTERVAL
            if deadline is not None:
                wait = min(wait, deadline - time.monotonic())
                if wait <= 0:
                    logger.warning(
                        f"No commit message entered within {self.timeout}s."
                    )
                    return None
            try:
                answer = self._answers.get(timeout=wait)
            except queue.Empty:
                continue
            self._outstanding = False
            return answer

        logger.info("Commit message prompt cancelled.")
        return None

    def cancel(self) -> None:
        """Releases any caller waiting in `ask` and makes later asks return None."""
        self._cancelled.set()

    def _discard_stale(self) -> None:
        while True:
            try:
                line = self._answers.get_nowait()
            except queue.Empty:
                return
            self._outstanding = False
            logger.debug(f"Discarding late input: {line!r}")

    def _ensure_reader(self) -> None:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._read_lines, name=f"{APP_NAME}-input", daemon=True
            )
            self._thread.start()

    def _read_lines(self) -> None:
        while True:
            self._requests.get()
            try:
                line: str | None = self._reader()
            except EOFError:
                line = None
            except OSError as e:
                logger.error(f"Could not read operator input: {e}")
                line = None
            self._answers.put(line)
