"""Operator commands received over the serial link: modes, config, servos and files."""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Protocol

from .config_file_manager import ConfigFileManager, UnknownConfigKeyError
from .constants import (
    ALL_FILES_SENT,
    ALL_FILES_SENT_ACK,
    CANCEL_MSG_REQUEST,
    CHANGE_SETTINGS_MESSAGE,
    DELETE_FILE_MESSAGE,
    FLASH_LED,
    G_LED,
    MANUAL_SERVO_CONTROL_MESSAGE,
    NUM_MODES,
    R_LED,
    REQUEST_FILE_DOWNLOAD,
    REQUEST_SETTINGS_INFO_MESSAGE,
    RESET_CONFIG_MESSAGE,
    Mode,
)
from .data_logger import DataLogger
from .file_manager import FileManagerError
from .positional_servo import SERVO_PINS, PositionalServo
from .serial_communicator import SerialCommunicator

MODE_COMMAND_PREFIX = "mode:"
# Time to wait for a confirming message before a mode operation is abandoned (ms).
MODE_ACTIVATION_WAIT_PERIOD = 1000 * 60 * 3

_DIGITS = "0123456789"
_C_WHITESPACE = " \t\n\v\f\r"
_FLOAT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

_log = logging.getLogger(__name__)


class Buzzer(Protocol):
    def update(self) -> None: ...

    def success(self) -> None: ...

    def failure(self) -> None: ...


class Leds(Protocol):
    def blink(self, pin: int, duration: int) -> None: ...

    def update_all(self) -> None: ...


def _atof(text: str) -> float:
    """Parse the leading number of a string, or 0.0 if there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _parse(text: str, is_valid: Callable[[str], bool]) -> list[tuple[str, int]]:
    commands: list[tuple[str, int]] = []
    i = 0
    length = len(text)
    while i < length:
        servo_id = text[i]
        i += 1
        if not is_valid(servo_id):
            continue
        start = i
        if i < length and text[i] == "-":
            i += 1
        while i < length and text[i] in _DIGITS:
            i += 1
        number = text[start:i]
        position = int(number) if number not in ("", "-") else 0
        commands.append((servo_id, position))
        while i < length and text[i] in _C_WHITESPACE:
            i += 1
    return commands


def parse_servo_commands(text: str) -> list[tuple[str, int]]:
    """Split text such as "A90 C-20" into (servo id, offset) pairs.

    Characters that are not servo ids are skipped; an id with no number
    after it gives an offset of 0.
    """
    return _parse(text, SERVO_PINS.__contains__)


class SerialAction:
    """Carries out the operating modes that are driven from a serial host.

    The buzzer and LEDs are optional; without them no feedback is given.
    """

    def __init__(
        self,
        communicator: SerialCommunicator,
        config: ConfigFileManager,
        logger: DataLogger,
        servo: PositionalServo,
        buzzer: Optional[Buzzer] = None,
        leds: Optional[Leds] = None,
        wait_period: float = MODE_ACTIVATION_WAIT_PERIOD,
    ) -> None:
        self.communicator = communicator
        self.config = config
        self.logger = logger
        self.servo = servo
        self.buzzer: Optional[Buzzer] = buzzer
        self.leds: Optional[Leds] = leds
        self.wait_period = wait_period
        self.mode = Mode.STANDBY

    def _println(self, text: str) -> None:
        self.communicator.port.write((text + "\r\n").encode("latin-1"))

    def _blink(self, pin: int, duration: int) -> None:
        if self.leds is not None:
            self.leds.blink(pin, duration)

    def _success(self) -> None:
        if self.buzzer is not None:
            self.buzzer.success()

    def _failure(self) -> None:
        if self.buzzer is not None:
            self.buzzer.failure()

    def _idle(self) -> None:
        if self.buzzer is not None:
            self.buzzer.update()
        if self.leds is not None:
            self.leds.update_all()

    def check_serial_for_mode(self) -> Optional[Mode]:
        """Read the link once; on a "mode:N" command switch mode and return it."""
        message = self.communicator.read_message()
        if SerialCommunicator.is_null_or_empty(message):
            return None
        if not message.startswith(MODE_COMMAND_PREFIX):
            return None
        digit = message[len(MODE_COMMAND_PREFIX) : len(MODE_COMMAND_PREFIX) + 1]
        if digit and "0" <= digit < chr(ord("0") + NUM_MODES):
            self.mode = Mode(int(digit))
            self._println(f"Mode changed to: {int(self.mode)}")
            return self.mode
        self._println("Invalid mode.")
        return None

    def process_and_change_config(self) -> None:
        """After confirmation, apply "NAME:VALUE" commands until a cancel request."""
        if not self._confirm_action(CHANGE_SETTINGS_MESSAGE):
            return
        while True:
            self._idle()
            command = self.communicator.read_message()
            if SerialCommunicator.is_null_or_empty(command):
                continue
            if self._check_for_cancel_request(command):
                return
            if command == REQUEST_SETTINGS_INFO_MESSAGE:
                for line in self.config.registry.describe():
                    self._println(line)
                continue
            if command == RESET_CONFIG_MESSAGE:
                self.config.restore_defaults()
                continue
            if self.change_config_value(command):
                self._blink(G_LED, 1000)
                self._success()
            else:
                self._blink(R_LED, 1000)

    def move_servos_from_serial(self) -> None:
        """After confirmation, shift servo centres from commands until a cancel request."""
        if not self._confirm_action(MANUAL_SERVO_CONTROL_MESSAGE):
            return
        self._blink(G_LED, 500)
        while True:
            self._idle()
            command = self.communicator.read_message()
            if SerialCommunicator.is_null_or_empty(command):
                continue
            if self._check_for_cancel_request(command):
                return
            self.process_servo_command(command)

    def serial_file_transfer(self) -> bool:
        """After confirmation, send all files; True if the host acknowledged them."""
        if not self._confirm_action(REQUEST_FILE_DOWNLOAD):
            return False
        self._blink(G_LED, 500)
        self.logger.send_all_files()
        self._println(ALL_FILES_SENT)
        acknowledged = self.communicator.wait_for_message(ALL_FILES_SENT_ACK, self.wait_period)
        if acknowledged:
            self._success()
            self._blink(G_LED, 1000)
        else:
            self._failure()
        self.mode = Mode.STANDBY
        return acknowledged

    def purge_data_from_serial(self) -> bool:
        """After confirmation, delete all log and data files; True if deleted."""
        if not self._confirm_action(DELETE_FILE_MESSAGE):
            return False
        self.logger.delete_all_files()
        self._success()
        self._blink(FLASH_LED, 1000)
        self.mode = Mode.STANDBY
        return True

    def change_config_value(self, command: str) -> bool:
        """Apply a "NAME:VALUE" command; False if malformed, unknown or not stored."""
        name, colon, rest = command.partition(":")
        if not colon:
            return False
        value = _atof(rest)
        try:
            self.config.write_value_by_name(name, value)
        except (UnknownConfigKeyError, FileManagerError) as exc:
            _log.info("Config change rejected: %s", exc)
            return False
        self._println(f"Successfully set {name} to {value:.2f}")
        return True

    def process_servo_command(self, text: str) -> list[tuple[str, int]]:
        """Shift each named servo's centre by its offset; return the new centres."""
        moved: list[tuple[str, int]] = []
        for servo_id, offset in _parse(text, self.servo.is_valid_servo_id):
            moved.append((servo_id, self._move_servo_and_update_config(servo_id, offset)))
        return moved

    def _move_servo_and_update_config(self, servo_id: str, offset: int) -> int:
        key = f"SERVO_{servo_id}_CENTER_POSITION"
        old_center = int(self.config.get_value(key))
        new_center = self.servo.update_center_position(servo_id, old_center + offset)
        self.config.write_value_by_name(key, new_center)
        self._println(f"Moving {new_center - old_center} degrees")
        return new_center

    def _confirm_action(self, message: str) -> bool:
        if not self.communicator.wait_for_message(message, self.wait_period):
            self._blink(R_LED, 1000)
            self.mode = Mode.STANDBY
            return False
        self._blink(G_LED, 1000)
        return True

    def _check_for_cancel_request(self, command: str) -> bool:
        if command != CANCEL_MSG_REQUEST:
            return False
        self._blink(R_LED, 1000)
        self.mode = Mode.STANDBY
        return True