"""Coalescing commit timer.

Filesystem changes and timer ticks are posted as messages onto a queue that a
single worker thread consumes. A burst of changes only sets the dirty flag; the
next tick that sees the flag set runs exactly one commit cycle.

The scheduler is in one of two states:

* ``IDLE``: the timer runs and changes are accepted.
* ``COMMITTING``: the timer is paused and changes are dropped, so the cycle's
  own writes (staging, committing) never mark the tree dirty again. The state
  is held for a short settle delay after the cycle, because watchdog delivers
  notifications with a small buffering lag.
"""

import enum
import logging
import queue
import threading
import time
from collections.abc import Callable

from .constants import APP_NAME, SETTLE_DELAY
from .watcher import FileChange

logger = logging.getLogger(APP_NAME)


class CycleState(enum.Enum):
    IDLE = "idle"
    COMMITTING = "committing"


_TICK = object()
_STOP = object()


class IntervalTimer:
    """Calls `callback` on a fixed period from a background thread.

    The first call happens as soon as the timer starts. While paused the timer
    never fires; `resume` restarts the period so the next call comes one full
    interval later.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval = interval
        self._callback = callback
        self._clock = clock
        self._cond = threading.Condition()
        self._paused = False
        self._stopped = False
        self._deadline = 0.0
        self._thread: threading.Thread | None = None

    @property
    def paused(self) -> bool:
        return self._paused

    def start(self) -> None:
        with self._cond:
            self._deadline = self._clock()
        self._thread = threading.Thread(
            target=self._run, name=f"{APP_NAME}-timer", daemon=True
        )
        self._thread.start()

    def pause(self) -> None:
        with self._cond:
            self._paused = True
            self._cond.notify_all()

    def resume(self) -> None:
        with self._cond:
            self._paused = False
            self._deadline = self._clock() + self.interval
            self._cond.notify_all()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

    def _run(self) -> None:
        while True:
            with self._cond:
                if self._stopped:
                    return
                if self._paused:
                    self._cond.wait()
                    continue
                remaining = self._deadline - self._clock()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                self._deadline = self._clock() + self.interval
            self._callback()


class CommitScheduler:
    """Turns a stream of filesystem changes into periodic commit cycles.

    `post_change` and `request_tick` are safe to call from any thread; they only
    enqueue a message. `handle` and `tick` run on the worker thread (or directly,
    when driving the scheduler synchronously).

    Attributes:
        interval (float): Seconds between ticks.
        settle_delay (float): Seconds the scheduler keeps dropping changes after a
            cycle before it goes back to idle.
    """

    def __init__(
        self,
        cycle: Callable[[], object],
        interval: float,
        timer_factory: Callable[..., IntervalTimer] = IntervalTimer,
        settle_delay: float = SETTLE_DELAY,
    ):
        """Initializes the scheduler.

        Args:
            cycle (Callable[[], object]): Runs one commit cycle.
            interval (float): Seconds between ticks.
            timer_factory (Callable[..., IntervalTimer]): Builds the tick timer
                from `(interval, callback)`.
            settle_delay (float): Seconds to keep ignoring changes after a cycle.
        """
        self.interval = interval
        self.settle_delay = settle_delay
        self._cycle = cycle
        self._lock = threading.Lock()
        self._queue: queue.Queue[object] = queue.Queue()
        self._dirty = False
        self._state = CycleState.IDLE
        self._tick_pending = False
        self._timer = timer_factory(interval, self.request_tick)
        self._worker: threading.Thread | None = None
        self._stopping = threading.Event()

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    @property
    def state(self) -> CycleState:
        with self._lock:
            return self._state

    def post_change(self, change: FileChange) -> bool:
        """Queues a filesystem change unless a commit cycle is running.

        Returns:
            bool: True if the change was accepted, False if it was dropped.
        """
        with self._lock:
            if self._state is CycleState.COMMITTING:
                logger.debug(f"Ignoring change during commit: {change.describe()}")
                return False
        self._queue.put(change)
        return True

    def request_tick(self) -> None:
        """Queues a tick, coalescing with one that is already waiting."""
        with self._lock:
            if self._tick_pending:
                return
            self._tick_pending = True
        self._queue.put(_TICK)

    def handle(self, message: object) -> None:
        """Processes one message taken off the queue."""
        if message is _TICK:
            self.tick()
        elif isinstance(message, FileChange):
            self.mark_dirty(message)
        else:
            logger.warning(f"Unknown scheduler message: {message!r}")

    def mark_dirty(self, change: FileChange) -> None:
        logger.info(change.describe())
        with self._lock:
            self._dirty = True

    def tick(self) -> bool:
        """Runs a commit cycle if changes are pending.

        Returns:
            bool: True if a cycle ran, False for a no-op tick.
        """
        with self._lock:
            self._tick_pending = False
            if self._state is CycleState.COMMITTING or not self._dirty:
                return False
            self._state = CycleState.COMMITTING
            self._dirty = False

        self._timer.pause()
        logger.info("Changes detected. Starting commit cycle.")
        try:
            self._cycle()
        except Exception:
            logger.exception("Commit cycle failed")
        finally:
            # Late notifications of the cycle's own writes are still dropped here.
            if self.settle_delay > 0:
                self._stopping.wait(self.settle_delay)
            with self._lock:
                self._state = CycleState.IDLE
            self._timer.resume()
        return True

    def start(self) -> None:
        """Starts the worker thread and the tick timer."""
        self._worker = threading.Thread(
            target=self._work, name=f"{APP_NAME}-worker", daemon=True
        )
        self._worker.start()
        self._timer.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stops the timer and lets the worker finish its current message."""
        self._stopping.set()
        self._timer.stop()
        self._queue.put(_STOP)
        if self._worker is not None:
            self._worker.join(timeout)

    def _work(self) -> None:
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            try:
                self.handle(message)
            except Exception:
                logger.exception("Failed to handle scheduler message")
