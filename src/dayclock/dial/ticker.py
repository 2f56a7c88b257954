"""Recurring wall-clock tick owned by a view's mount/unmount lifecycle."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from threading import RLock, Timer

from dayclock import log

Clock = Callable[[], datetime]
TickCallback = Callable[[datetime], None]


class MinuteTicker:
    """Calls *callback* with the current time every *interval* seconds.

    The timer is re-armed after each tick and cancelled by :meth:`stop`, so a
    stopped ticker never fires again. Usable as a context manager.
    """

    __slots__ = ("_callback", "_clock", "_interval", "_timer", "_running", "_lock")

    def __init__(
        self,
        callback: TickCallback,
        *,
        interval: float = 60.0,
        clock: Clock = datetime.now,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self._callback = callback
        self._clock = clock
        self._interval = interval
        self._timer: Timer | None = None
        self._running = False
        self._lock = RLock()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        return self._interval

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm()
            log.debug(f"Ticker started ({self._interval:g}s)")

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._cancel()
            log.debug("Ticker stopped")

    def fire(self) -> datetime:
        """Run one tick immediately and return the time it reported."""
        now = self._clock()
        self._callback(now)
        return now

    def _arm(self) -> None:
        self._cancel()
        self._timer = Timer(self._interval, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        with self._lock:
            if not self._running:
                return
        # Callback runs unlocked; owners call stop() while holding their own lock.
        try:
            self.fire()
        finally:
            with self._lock:
                if self._running:
                    self._arm()

    def __enter__(self) -> MinuteTicker:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
