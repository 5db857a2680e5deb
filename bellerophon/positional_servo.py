"""Fin servos driven relative to per-servo centre positions, with safety limits."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol

from .config_keys import default_registry
from .constants import SERVO_PIN_A, SERVO_PIN_B, SERVO_PIN_C, SERVO_PIN_D
from .pyro_controller import _Timer

Clock = Callable[[], float]

MIN_POSITION = 0
MAX_POSITION = 180
MAX_DEFLECTION = 30

SERVO_PINS: dict[str, int] = {
    "A": SERVO_PIN_A,
    "B": SERVO_PIN_B,
    "C": SERVO_PIN_C,
    "D": SERVO_PIN_D,
}

# Servos whose deflection runs opposite to the others in a continuous sweep.
_INVERTED_SERVOS = frozenset("AD")

_log = logging.getLogger(__name__)


class ServoDriver(Protocol):
    """Hardware side of a servo: attach to a pin and write an angle to it."""

    def attach(self, pin: int) -> None: ...

    def detach(self, pin: int) -> None: ...

    def write(self, pin: int, angle: int) -> None: ...


@dataclass
class ServoChannel:
    """One servo: its pin, its centre angle and the last angle written to it."""

    pin: int
    center: int
    position: Optional[int] = None


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _default_centers() -> dict[str, int]:
    registry = default_registry()
    return {sid: int(registry.get(f"SERVO_{sid}_CENTER_POSITION")) for sid in SERVO_PINS}


class PositionalServo:
    """Moves servos A-D within 0-180 degrees and at most 30 degrees from centre.

    Without a driver the angles are only tracked on the channels.
    """

    def __init__(
        self,
        driver: Optional[ServoDriver] = None,
        centers: Optional[Mapping[str, int]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.driver: Optional[ServoDriver] = driver
        centers = dict(centers) if centers is not None else _default_centers()
        self.channels: dict[str, ServoChannel] = {
            sid: ServoChannel(pin=pin, center=int(centers.get(sid, 90)))
            for sid, pin in SERVO_PINS.items()
        }
        self._clock: Clock = clock if clock is not None else (lambda: time.monotonic() * 1000.0)
        self._deflect_timer = _Timer(self._clock)
        self._deflect_forward = True

    def initialize(self) -> None:
        """Attach every servo and move it to its centre."""
        if self.driver is not None:
            for channel in self.channels.values():
                self.driver.attach(channel.pin)
        self.center_all()

    def _find(self, servo_id: str) -> Optional[ServoChannel]:
        channel = self.channels.get(servo_id)
        if channel is None:
            _log.debug("Invalid servo ID: %s", servo_id)
        return channel

    def _move(self, channel: ServoChannel, position: int) -> int:
        position = _clamp(int(position), MIN_POSITION, MAX_POSITION)
        if self.driver is not None:
            self.driver.write(channel.pin, position)
        channel.position = position
        return position

    def move_relative_to_center(self, servo_id: str, relative: int) -> Optional[int]:
        """Deflect a servo from its centre; return the angle written, or None if unknown."""
        relative = _clamp(int(relative), -MAX_DEFLECTION, MAX_DEFLECTION)
        channel = self._find(servo_id)
        if channel is None:
            return None
        return self._move(channel, channel.center + relative)

    def stop(self, servo_id: str) -> Optional[int]:
        """Return a servo to its centre; the angle written, or None if unknown."""
        channel = self._find(servo_id)
        if channel is None:
            return None
        return self._move(channel, channel.center)

    def center_all(self) -> None:
        """Move every servo to its centre."""
        for channel in self.channels.values():
            self._move(channel, channel.center)

    def update_center_position(self, servo_id: str, position: int) -> int:
        """Set a new centre, limited so full deflection stays in range; return it."""
        position = _clamp(
            int(position), MIN_POSITION + MAX_DEFLECTION, MAX_POSITION - MAX_DEFLECTION
        )
        channel = self._find(servo_id)
        if channel is not None:
            channel.center = position
            self._move(channel, channel.center)
        return position

    def is_valid_servo_id(self, servo_id: str) -> bool:
        """Whether a servo of this id exists."""
        return servo_id in self.channels

    def continuous_deflect(self, deflect_time: float, deflect_angle: int) -> bool:
        """Sweep the fins back and forth every ``deflect_time`` ms; True when they moved."""
        self._deflect_timer.start(deflect_time)
        if not self._deflect_timer.has_elapsed():
            return False
        multiplier = 1 if self._deflect_forward else -1
        for servo_id in self.channels:
            angle = deflect_angle * multiplier
            if servo_id in _INVERTED_SERVOS:
                angle = -angle
            self.move_relative_to_center(servo_id, angle)
        self._deflect_forward = not self._deflect_forward
        self._deflect_timer.reset()
        return True