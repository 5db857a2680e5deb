"""Framed text messages over a serial port: prefix, body, suffix."""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from .constants import CANCEL_MSG_REQUEST, PREFIX, SUFFIX

Clock = Callable[[], float]

# The characters C's isspace() accepts in the default locale.
_C_WHITESPACE = " \t\n\v\f\r"
_LINE_END = "\r\n"
_ENCODING = "latin-1"


class SerialPort(Protocol):
    """What the communicator needs from a port: non-blocking read and write."""

    def read(self, size: int = 1) -> bytes: ...

    def write(self, data: bytes) -> Optional[int]: ...


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SerialCommunicator:
    """Sends and receives messages framed by a one-character prefix and suffix.

    Incoming bytes are consumed one per call to ``read_message``; characters
    before a prefix are ignored, and a body longer than ``buffer_size - 1``
    characters is dropped.
    """

    def __init__(
        self,
        port: SerialPort,
        prefix: str = PREFIX,
        suffix: str = SUFFIX,
        clock: Optional[Clock] = None,
        on_idle: Optional[Callable[[], None]] = None,
        buffer_size: int = 100,
    ) -> None:
        if len(prefix) != 1 or len(suffix) != 1:
            raise ValueError("prefix and suffix must be single characters")
        if prefix == suffix:
            raise ValueError("prefix and suffix must differ")
        if "\0" in (prefix, suffix):
            raise ValueError("prefix and suffix must not be NUL")
        if buffer_size < 2:
            raise ValueError("buffer_size must be at least 2")
        self.port = port
        self.prefix = prefix
        self.suffix = suffix
        self.buffer_size = buffer_size
        self._clock: Clock = clock if clock is not None else _monotonic_ms
        self._on_idle = on_idle
        self._chars: list[str] = []
        self._prefix_found = False

    def _println(self, text: str) -> None:
        self.port.write((text + _LINE_END).encode(_ENCODING))

    def format_message(self, message: str) -> str:
        """Return the message wrapped in prefix and suffix."""
        return f"{self.prefix}{message}{self.suffix}"

    def send_message(self, message: str) -> None:
        """Send a framed message followed by a line end."""
        self._println(self.format_message(message))

    def read_message(self) -> str:
        """Consume at most one byte; return a completed message or an empty string."""
        chunk = self.port.read(1)
        if not chunk:
            return ""
        char = chunk.decode(_ENCODING)

        if not self._prefix_found:
            if char == self.prefix:
                self._prefix_found = True
                self._chars.clear()
            return ""

        if char == self.suffix:
            message = "".join(self._chars)
            self._chars.clear()
            self._prefix_found = False
            self._println(message)
            return message

        if len(self._chars) < self.buffer_size - 1:
            self._chars.append(char)
        else:
            self._println("Buffer overflow")
            self._prefix_found = False
            self._chars.clear()
        return ""

    def wait_for_message(self, expected: str, timeout: float) -> bool:
        """Wait up to ``timeout`` ms for a message; False on timeout or cancel request."""
        start = self._clock()
        while self._clock() - start < timeout:
            if self._on_idle is not None:
                self._on_idle()
            message = self.read_message()
            if message == expected:
                return True
            if message == CANCEL_MSG_REQUEST:
                return False
        return False

    @staticmethod
    def trim_whitespace(text: Optional[str]) -> Optional[str]:
        """Strip leading and trailing whitespace; None stays None."""
        if text is None:
            return None
        return text.strip(_C_WHITESPACE)

    @staticmethod
    def contains_whitespace(text: str) -> bool:
        """Whether the text holds any whitespace character."""
        return any(char in _C_WHITESPACE for char in text)

    @staticmethod
    def is_null_or_empty(message: Optional[str]) -> bool:
        """Whether the message is None or empty."""
        return not message