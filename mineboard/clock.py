"""Play clock scheduling.

A ticker calls `tick()` once per interval until `tick()` returns False or the
ticker is stopped. The board decides when ticking ends; tickers only decide how
ticks get scheduled.
"""
import abc
import asyncio
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Tick = Callable[[], bool]


class Ticker(abc.ABC):
    """Periodic tick scheduling primitive."""

    @abc.abstractmethod
    def start(self, tick: Tick) -> None:
        ...

    @abc.abstractmethod
    def stop(self) -> None:
        ...

    @property
    @abc.abstractmethod
    def active(self) -> bool:
        ...


class AsyncioTicker(Ticker):
    """Cooperative ticker driven by an asyncio task.

    Must be started from code running inside an event loop.
    """

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, tick: Tick) -> None:
        self.stop()
        self._task = asyncio.create_task(self._run(tick))

    async def _run(self, tick: Tick) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not tick():
                logger.debug("clock stopped by board")
                return

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


class ThreadTicker(Ticker):
    """Platform-timer ticker built on chained `threading.Timer`s."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def active(self) -> bool:
        with self._lock:
            return self._timer is not None

    def start(self, tick: Tick) -> None:
        with self._lock:
            self._cancel_locked()
            self._schedule_locked(tick, self._generation)

    def _schedule_locked(self, tick: Tick, generation: int) -> None:
        timer = threading.Timer(self.interval, self._fire, args=(tick, generation))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self, tick: Tick, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
        keep_going = tick()
        with self._lock:
            if generation != self._generation:
                return
            if keep_going:
                self._schedule_locked(tick, generation)
            else:
                self._timer = None

    def _cancel_locked(self) -> None:
        # a timer that already fired checks the generation and drops out
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def stop(self) -> None:
        with self._lock:
            self._cancel_locked()


class ElapsedTicker(Ticker):
    """Ticker that derives ticks from clock readings instead of scheduling them.

    Nothing runs between calls: the owner calls `catch_up()` before it acts on
    the board, which delivers every whole interval that has passed since the
    last delivery. Inside a Temporal workflow, `now` is `workflow.time`, so a
    running game adds no timers to the workflow history.
    """

    def __init__(self, now: Callable[[], float], interval: float = 1.0):
        self.now = now
        self.interval = interval
        self._tick: Optional[Tick] = None
        self._started_at = 0.0
        self._delivered = 0

    @property
    def active(self) -> bool:
        return self._tick is not None

    def start(self, tick: Tick) -> None:
        self._tick = tick
        self._started_at = self.now()
        self._delivered = 0

    def pending(self) -> int:
        """Whole intervals elapsed but not yet delivered."""
        if self._tick is None:
            return 0
        due = int((self.now() - self._started_at) // self.interval)
        return max(0, due - self._delivered)

    def catch_up(self) -> None:
        for _ in range(self.pending()):
            self._delivered += 1
            if not self._tick():
                logger.debug("clock stopped by board")
                self._tick = None
                return

    def stop(self) -> None:
        self._tick = None
