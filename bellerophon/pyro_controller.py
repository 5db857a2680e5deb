"""Timed firing of a pyro charge through an output pin."""

from __future__ import annotations

import time
from typing import Callable, Optional

Clock = Callable[[], float]
PinOutput = Callable[[int, bool], None]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class _Timer:
    """One-shot timer: start is ignored while running; reset stops it."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._started_at: Optional[float] = None
        self._duration = 0.0

    def start(self, duration: float) -> None:
        if self._started_at is None:
            self._started_at = self._clock()
            self._duration = duration

    def has_elapsed(self) -> bool:
        if self._started_at is None:
            return False
        return self._clock() - self._started_at >= self._duration

    def reset(self) -> None:
        self._started_at = None


class PyroController:
    """Fires a pyro pin after a delay and holds it high for a fixed duration.

    ``trigger`` is called repeatedly; it returns True once the sequence
    has completed and the pin has been released again.
    """

    def __init__(
        self,
        pin: int,
        trigger_delay: float,
        *,
        output: Optional[PinOutput] = None,
        clock: Optional[Clock] = None,
        hold_duration: float = 2000,
    ) -> None:
        self.pin = pin
        self.trigger_delay = trigger_delay
        self.hold_duration = hold_duration
        self._output: PinOutput = output if output is not None else (lambda _pin, _level: None)
        clock = clock if clock is not None else _monotonic_ms
        self._trigger_timer = _Timer(clock)
        self._hold_timer = _Timer(clock)
        self._is_triggered = False
        self._has_ever_triggered = False
        self._write(False)

    def _write(self, high: bool) -> None:
        self._output(self.pin, high)

    def trigger(self) -> bool:
        """Advance the firing sequence; True when it has just completed."""
        if not self._is_triggered:
            self._trigger_timer.start(self.trigger_delay)
            self._is_triggered = True
        return self._handle_sequence()

    def cancel_trigger(self) -> bool:
        """Abort a sequence in progress; False if none was in progress."""
        if not self._is_triggered:
            return False
        self._write(False)
        self._trigger_timer.reset()
        self._hold_timer.reset()
        self._is_triggered = False
        return True

    def has_ever_triggered(self) -> bool:
        """Whether a firing sequence has ever completed."""
        return self._has_ever_triggered

    def is_triggered(self) -> bool:
        """Whether a firing sequence is in progress."""
        return self._is_triggered

    def _handle_sequence(self) -> bool:
        if not self._is_triggered:
            return False
        if self._trigger_timer.has_elapsed() and not self._hold_timer.has_elapsed():
            self._write(True)
            self._hold_timer.start(self.hold_duration)
        elif self._hold_timer.has_elapsed():
            self.cancel_trigger()
            self._has_ever_triggered = True
            return True
        return False