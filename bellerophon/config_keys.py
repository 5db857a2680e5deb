"""Registry of configuration variables, their numeric keys and defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

UNKNOWN_KEY_NAME = "UNKNOWN_KEY"

DEFAULT_CONFIG: tuple[tuple[str, float], ...] = (
    # Height above ground level to trigger launch detection (m)
    ("LAUNCH_ALTITUDE_THRESHOLD", 30.0),
    # 1G offset for the accelerometer
    ("G_OFFSET", 9.81),
    # Launch detect threshold for velocity (m/s)
    ("LAUNCH_VEL_THRESHOLD", 15.0),
    # Launch detect threshold for acceleration (m/s^2)
    ("LAUNCH_ACC_THRESHOLD", 60.0),
    # Time spent with negative velocity before apogee is decided (ms)
    ("APOGEE_TIMER", 100.0),
    # Mode that activates on reset
    ("BOOTUP_MODE", 0.0),
    # Dual deploy flag (0: off, 1: on)
    ("DUAL_DEPLOY", 1.0),
    # Delay to deploy drogue parachute (ms)
    ("DROGUE_DELAY", 5.0),
    # Delay to deploy main parachute (ms)
    ("MAIN_DELAY", 15.0),
    # Altitude to deploy main parachute (m)
    ("MAIN_DEPLOYMENT_ALT", 120.0),
    # Debug flag (0: disabled, 1: enabled)
    ("DEBUG", 0.0),
    # Zero-deflection angles of the fin servos
    ("SERVO_A_CENTER_POSITION", 90.0),
    ("SERVO_B_CENTER_POSITION", 90.0),
    ("SERVO_C_CENTER_POSITION", 90.0),
    ("SERVO_D_CENTER_POSITION", 90.0),
    # Sea level pressure for barometric altitude estimation
    ("REFERENCE_PRESSURE", 101325.0),
    # Minimum height above ground before pyros may be armed (m)
    ("MINIMUM_APOGEE", 100.0),
)


@dataclass
class ConfigKey:
    """One configuration variable: its key, name, default and current value."""

    key: int
    name: str
    default: float
    value: float = field(default=0.0)


class ConfigRegistry:
    """Ordered set of configuration variables addressed by name or numeric key."""

    def __init__(self, keys: Iterable[tuple[str, float]]) -> None:
        self._keys: list[ConfigKey] = []
        self._by_name: dict[str, ConfigKey] = {}
        for index, (name, default) in enumerate(keys):
            if name in self._by_name:
                raise ValueError(f"duplicate config key name: {name}")
            entry = ConfigKey(key=index, name=name, default=float(default), value=float(default))
            self._keys.append(entry)
            self._by_name[name] = entry
        if len(self._keys) > 0xFF:
            raise ValueError("too many config keys for a one-byte key")

    def by_name(self, name: str) -> ConfigKey:
        """Return the entry for a name, raising KeyError if unknown."""
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"unknown config key: {name}") from None

    def by_key(self, key: int) -> ConfigKey:
        """Return the entry for a numeric key, raising KeyError if invalid."""
        if not 0 <= key < len(self._keys):
            raise KeyError(f"invalid config key: {key:#x}")
        return self._keys[key]

    def key_to_name(self, key: int) -> str:
        """Return the name of a key, or UNKNOWN_KEY if there is none."""
        try:
            return self.by_key(key).name
        except KeyError:
            return UNKNOWN_KEY_NAME

    def name_to_key(self, name: str) -> int:
        """Return the numeric key for a name, raising KeyError if unknown."""
        return self.by_name(name).key

    def get(self, name: str) -> float:
        """Return the current value of a named variable."""
        return self.by_name(name).value

    def assign(self, key: int, value: float) -> None:
        """Set the current value of the variable with the given key."""
        self.by_key(key).value = float(value)

    def reset_to_defaults(self) -> None:
        """Set every variable back to its default value."""
        for entry in self._keys:
            entry.value = entry.default

    def describe(self) -> list[str]:
        """Return one human-readable line per variable."""
        return [
            f"Key: {entry.key:X}, Name: {entry.name}, "
            f"Default Value: {entry.default:.2f}, Variable Value: {entry.value:.2f}"
            for entry in self._keys
        ]

    def __iter__(self) -> Iterator[ConfigKey]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def default_registry() -> ConfigRegistry:
    """Return a fresh registry holding the flight computer's variables at their defaults."""
    return ConfigRegistry(DEFAULT_CONFIG)