"""Debounce gate in front of job submission.

Once acquired, the guard stays busy until a release scheduled with
``release(after_delay)`` fires. It does not track the submitted job: the
executor may run many jobs at once, the guard only throttles submission.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 3.0

TimerFactory = Callable[[float, Callable[[], None]], Any]


class Acquisition(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


@dataclass
class GuardState:
    busy: bool = False
    cooldown_until: float = 0.0
    release_pending: bool = False


def _thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ExecutionGuard:
    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.cooldown_seconds = float(cooldown_seconds)
        self.state = GuardState()
        self._clock = clock
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        with self._lock:
            self._expire_locked()
            return self.state.busy

    def try_acquire(self) -> Acquisition:
        with self._lock:
            self._expire_locked()
            if self.state.busy:
                logger.debug("Submission denied; guard busy until %.3f", self.state.cooldown_until)
                return Acquisition.DENIED
            self.state.busy = True
            return Acquisition.GRANTED

    def release(self, after_delay: Optional[float] = None) -> None:
        delay = self.cooldown_seconds if after_delay is None else float(after_delay)
        with self._lock:
            self._cancel_timer_locked()
            if delay <= 0:
                self._clear_locked()
                return
            self.state.cooldown_until = self._clock() + delay
            self.state.release_pending = True
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(delay, lambda: self._on_timer(generation))

    def shutdown(self) -> None:
        with self._lock:
            self._cancel_timer_locked()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if self.state.release_pending and generation == self._generation:
                self._clear_locked()

    def _expire_locked(self) -> None:
        # A pending release counts as fired once the clock passes its deadline.
        if self.state.release_pending and self._clock() >= self.state.cooldown_until:
            self._cancel_timer_locked()
            self._clear_locked()

    def _clear_locked(self) -> None:
        self.state.busy = False
        self.state.release_pending = False

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
