"""Event and sensor logging to files, and file transfer over the serial link."""

from __future__ import annotations

import os
import time
import zlib
from typing import Callable, Optional, Sequence

from .constants import END_OF_TRANSMISSION_ACK, END_OF_TRANSMISSION_MESSAGE, FILE_COPY_MESSAGE
from .file_manager import FileManager
from .serial_communicator import SerialCommunicator

Clock = Callable[[], float]

LOG_BUFFER = 100
MAX_DECIMAL_PLACES = 10
FILE_COPY_WAIT_MS = 100
END_OF_TRANSMISSION_WAIT_MS = 1000


def crc32_of_file(path: str | os.PathLike[str]) -> int:
    """Return the CRC-32 checksum of a file's contents."""
    checksum = 0
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            checksum = zlib.crc32(chunk, checksum)
    return checksum & 0xFFFFFFFF


class DataLogger:
    """Writes log events and CSV data rows, and sends stored files to a host."""

    def __init__(
        self,
        serial: SerialCommunicator,
        files: FileManager,
        clock: Optional[Clock] = None,
        debug: Optional[bool] = None,
    ) -> None:
        self.serial = serial
        self.files = files
        if clock is None:
            start = time.monotonic()
            clock = lambda: (time.monotonic() - start) * 1000.0  # noqa: E731
        self._clock = clock
        self.debug = files.debug if debug is None else debug
        self._heading_set = False

    def _now(self) -> int:
        return int(self._clock())

    def _println(self, text: str) -> None:
        self.serial.port.write((text + "\r\n").encode("latin-1"))

    def initialize(self) -> None:
        """Create fresh log and data files and write the opening log line."""
        self.files.create_new_log_file()
        self.files.create_new_data_file()
        if self.debug:
            self.log_event("Warning! DEBUG Enabled.\n")
        else:
            self.log_event("Start LOG FILE")

    def log_event(self, message: str) -> None:
        """Append a timestamped line to the log file."""
        line = f"{self._now()}: {message}\n"[: LOG_BUFFER - 1]
        self.files.append(self.files.log_file_name, line)

    def add_data_file_heading(self, title: str) -> None:
        """Write a heading line to the data file once, or again after it was deleted."""
        if not self.files.file_exists(self.files.data_file_name):
            self._heading_set = False
        if self._heading_set:
            return
        self.files.append(self.files.data_file_name, title)
        self.files.append(self.files.data_file_name, "\n")
        self._heading_set = True

    def log_data(self, data: Sequence[float], decimal_places: int = 2) -> None:
        """Append a timestamped CSV row of values to the data file."""
        places = max(0, min(decimal_places, MAX_DECIMAL_PLACES))
        fields = [str(self._now())] + [f"{value:.{places}f}" for value in data]
        self.files.append(self.files.data_file_name, ",".join(fields) + "\n")

    def send_file(self, name: str) -> bool:
        """Send one file to the host; True if it was sent and acknowledged."""
        if not self.files.file_exists(name):
            self._println("Data file not found.")
            return False

        path = self.files.root / name
        checksum = crc32_of_file(path)
        self._println(f"FILE_NAME:{name}")
        self._println(f"CHECKSUM:{checksum}")

        if self.serial.wait_for_message(FILE_COPY_MESSAGE, FILE_COPY_WAIT_MS):
            return False

        self.serial.port.write(path.read_bytes())
        self._println(END_OF_TRANSMISSION_MESSAGE)
        return self.serial.wait_for_message(END_OF_TRANSMISSION_ACK, END_OF_TRANSMISSION_WAIT_MS)

    def _user_files(self) -> list[str]:
        excluded = {self.files.index_file_name, self.files.config_file_name}
        return [name for name in self.files.update_file_list() if name not in excluded]

    def send_all_files(self) -> list[str]:
        """Send every file except the index and config files; return their names."""
        names = self._user_files()
        for name in names:
            self.send_file(name)
        return names

    def delete_all_files(self) -> list[str]:
        """Delete every file except the index and config files; return their names."""
        names = self._user_files()
        for name in names:
            self.files.delete_file(name)
        self._println("All files deleted.")
        self.files.update_file_list()
        return names