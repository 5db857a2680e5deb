"""Flight phase detection and parachute deployment from fused sensor readings."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Protocol

from .config_keys import ConfigRegistry, default_registry
from .constants import PYRO_DROGUE, PYRO_MAIN
from .pyro_controller import PyroController, _Timer

Clock = Callable[[], float]

APOGEE_VELOCITY_THRESHOLD = 0.5
LANDING_VEL_THRESHOLD = 1.0
DESCENT_LOG_INTERVAL_MS = 500
_LOG_MESSAGE_LIMIT = 39


class FlightState(Enum):
    """Phases of a flight."""

    PRE_LAUNCH = auto()
    ASCENT = auto()
    APOGEE = auto()
    DESCENT_DROGUE = auto()
    LOW_ALTITUDE_DETECTION = auto()
    DESCENT_MAIN = auto()
    LANDING = auto()
    STAGE_SEPARATION = auto()
    FAILURE = auto()


@dataclass(frozen=True)
class SensorReadings:
    """Fused readings the state machine decides on."""

    altitude: float = 0.0
    velocity: float = 0.0
    ground_altitude: float = 0.0
    max_altitude: float = 0.0
    max_velocity: float = 0.0


class SensorSource(Protocol):
    """Fused sensors: refresh and return readings, and log raw data."""

    def update(self) -> SensorReadings: ...

    def log_data(self) -> None: ...


class EventLogger(Protocol):
    def log_event(self, message: str) -> None: ...


class Buzzer(Protocol):
    def pre_launch_tone(self) -> None: ...

    def landing_tone(self) -> None: ...


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FlightStateMachine:
    """Advances through flight phases and fires drogue and main pyros."""

    def __init__(
        self,
        sensors: SensorSource,
        logger: EventLogger,
        buzzer: Optional[Buzzer] = None,
        config: Optional[ConfigRegistry] = None,
        drogue: Optional[PyroController] = None,
        main: Optional[PyroController] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.sensors = sensors
        self.logger = logger
        self.buzzer = buzzer
        self.config = config if config is not None else default_registry()
        clock = clock if clock is not None else _monotonic_ms
        self.drogue = (
            drogue
            if drogue is not None
            else PyroController(PYRO_DROGUE, self.config.get("DROGUE_DELAY"), clock=clock)
        )
        self.main = (
            main
            if main is not None
            else PyroController(PYRO_MAIN, self.config.get("MAIN_DELAY"), clock=clock)
        )
        self.readings = SensorReadings()
        self._state = FlightState.PRE_LAUNCH
        self._logging_timer = _Timer(clock)
        self._handlers: dict[FlightState, Callable[[], None]] = {
            FlightState.PRE_LAUNCH: self._handle_pre_launch,
            FlightState.ASCENT: self._handle_ascent,
            FlightState.APOGEE: self._handle_apogee,
            FlightState.DESCENT_DROGUE: self._handle_descent_drogue,
            FlightState.LOW_ALTITUDE_DETECTION: self._handle_low_altitude,
            FlightState.DESCENT_MAIN: self._handle_descent_main,
            FlightState.LANDING: self._handle_landing,
            FlightState.STAGE_SEPARATION: lambda: None,
            FlightState.FAILURE: lambda: None,
        }

    def update(self) -> FlightState:
        """Refresh sensor readings, act on the current state; return the new state."""
        self.readings = self.sensors.update()
        self._handlers[self._state]()
        return self._state

    def current_state(self) -> FlightState:
        """The state the machine is in."""
        return self._state

    def transition_to(self, state: FlightState) -> None:
        """Move to another state."""
        self._state = state

    def log_sensor_data(self, delay: float = 0) -> bool:
        """Log sensor data now, or at most once per ``delay`` ms; True if logged."""
        if delay == 0:
            self.sensors.log_data()
            return True
        self._logging_timer.start(delay)
        if not self._logging_timer.has_elapsed():
            return False
        self.sensors.log_data()
        self._logging_timer.reset()
        return True

    def _log(self, message: str) -> None:
        self.logger.log_event(message[:_LOG_MESSAGE_LIMIT])

    def _handle_pre_launch(self) -> None:
        if not self.config.get("DEBUG") and self.buzzer is not None:
            self.buzzer.pre_launch_tone()
        if self.readings.velocity > self.config.get("LAUNCH_VEL_THRESHOLD"):
            self.transition_to(FlightState.ASCENT)
            self._log(f"Launch detected for velocity = {self.readings.velocity:.2f}")
            return
        if self.readings.altitude > self.config.get("LAUNCH_ALTITUDE_THRESHOLD"):
            self.transition_to(FlightState.ASCENT)
            self._log(f"Launch detected for altitude = {self.readings.altitude:.2f}")

    def _handle_ascent(self) -> None:
        self.log_sensor_data()
        if self.readings.velocity <= APOGEE_VELOCITY_THRESHOLD:
            self.transition_to(FlightState.APOGEE)
            self._log(f"APOGEE DETECTED = {self.readings.altitude:.2f} METERS")

    def _handle_apogee(self) -> None:
        self.log_sensor_data()
        if self.readings.max_altitude < self.config.get("MINIMUM_APOGEE"):
            return
        if self.drogue.trigger():
            self.transition_to(FlightState.DESCENT_DROGUE)
            self._log("DROGUE DEPLOYED")

    def _handle_descent_drogue(self) -> None:
        self.log_sensor_data(DESCENT_LOG_INTERVAL_MS)
        if self.readings.altitude <= self.config.get("MAIN_DEPLOYMENT_ALT"):
            self.transition_to(FlightState.LOW_ALTITUDE_DETECTION)

    def _handle_low_altitude(self) -> None:
        self.log_sensor_data(DESCENT_LOG_INTERVAL_MS)
        if self.main.trigger():
            self.transition_to(FlightState.DESCENT_MAIN)
            self._log("MAIN DEPLOYED")

    def _handle_descent_main(self) -> None:
        self.log_sensor_data(DESCENT_LOG_INTERVAL_MS)
        if self.readings.velocity <= LANDING_VEL_THRESHOLD:
            self.transition_to(FlightState.LANDING)
            self._log("LANDING DETECTED")

    def _handle_landing(self) -> None:
        if self.buzzer is not None:
            self.buzzer.landing_tone()