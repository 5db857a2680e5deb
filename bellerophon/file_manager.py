"""Storage of log, data, index and config files in a directory."""

from __future__ import annotations

import logging
import os
import struct
from pathlib import Path

from .constants import (
    DATA_FILE_PREFIX,
    DATA_FILE_SUFFIX,
    DEBUG_PREFIX,
    LOG_FILE_PREFIX,
    LOG_FILE_SUFFIX,
    ZERO_PADDING,
)

INDEX_FILE_NAME = "index.dat"
CONFIG_FILE_NAME = "config.dat"
MAX_FILE_NAME_LENGTH = 30

_FLOAT = struct.Struct("<f")
_COUNTERS = struct.Struct("<II")

_log = logging.getLogger(__name__)


class FileManagerError(OSError):
    """Raised when a storage operation cannot be carried out."""


class FileManager:
    """Manages the files of the flight computer inside one root directory.

    An index file keeps the counters used to give each new log and data
    file a unique, zero-padded name.
    """

    index_file_name = INDEX_FILE_NAME
    config_file_name = CONFIG_FILE_NAME

    def __init__(self, root: str | os.PathLike[str], debug: bool = False) -> None:
        self.root = Path(root)
        self.debug = debug
        self.log_file_name = ""
        self.data_file_name = ""
        self.file_names: list[str] = []
        self.log_counter = 0
        self.data_counter = 0

    def _path(self, name: str) -> Path:
        return self.root / name

    def initialize(self) -> None:
        """Prepare the storage directory and load the file counters."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileManagerError(f"storage initialization failed: {exc}") from exc
        if not self.root.is_dir():
            raise FileManagerError(f"storage root is not a directory: {self.root}")
        self._load_index_file()

    def _load_index_file(self) -> None:
        path = self._path(self.index_file_name)
        if not path.is_file():
            self._update_index_file()
            return
        raw = path.read_bytes()
        if len(raw) < _COUNTERS.size:
            raise FileManagerError(f"index file is too short: {path}")
        self.log_counter, self.data_counter = _COUNTERS.unpack_from(raw)

    def _update_index_file(self) -> None:
        if self.create_file(self.index_file_name):
            self.log_counter = 0
            self.data_counter = 0
        try:
            with self._path(self.index_file_name).open("r+b") as handle:
                handle.write(_COUNTERS.pack(self.log_counter, self.data_counter))
        except OSError as exc:
            raise FileManagerError(f"cannot write index file: {exc}") from exc

    def _new_name(self, prefix: str, counter: int, suffix: str) -> str:
        name = f"{prefix}{counter:0{ZERO_PADDING}d}{suffix}"
        if self.debug:
            name = DEBUG_PREFIX + name
        return name[: MAX_FILE_NAME_LENGTH - 1]

    def create_new_log_file(self) -> str:
        """Create the next numbered log file and return its name."""
        self.log_file_name = self._new_name(LOG_FILE_PREFIX, self.log_counter, LOG_FILE_SUFFIX)
        if self.debug:
            _log.info("New log file created: %s", self.log_file_name)
        self.create_file(self.log_file_name)
        self.log_counter += 1
        self._update_index_file()
        return self.log_file_name

    def create_new_data_file(self) -> str:
        """Create the next numbered data file and return its name."""
        self.data_file_name = self._new_name(DATA_FILE_PREFIX, self.data_counter, DATA_FILE_SUFFIX)
        if self.debug:
            _log.info("New data file created: %s", self.data_file_name)
        self.create_file(self.data_file_name)
        self.data_counter += 1
        self._update_index_file()
        return self.data_file_name

    def update_file_list(self) -> list[str]:
        """Refresh and return the sorted names of the files in storage."""
        try:
            self.file_names = sorted(p.name for p in self.root.iterdir() if p.is_file())
        except OSError as exc:
            self.file_names = []
            raise FileManagerError(f"failed to open root directory: {exc}") from exc
        return list(self.file_names)

    def file_exists(self, name: str) -> bool:
        """Whether a file of this name exists in storage."""
        return self._path(name).is_file()

    def delete_file(self, name: str) -> bool:
        """Delete a file; False if there was no such file."""
        path = self._path(name)
        if not path.is_file():
            _log.info("File not found, nothing deleted: %s", name)
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise FileManagerError(f"cannot delete {name}: {exc}") from exc
        return True

    def create_file(self, name: str) -> bool:
        """Create an empty file; False if it already exists."""
        if self.file_exists(name):
            return False
        try:
            with self._path(name).open("xb"):
                pass
        except FileExistsError:
            return False
        except OSError as exc:
            raise FileManagerError(f"error creating file {name}: {exc}") from exc
        return True

    def read_float(self, name: str, position: int) -> float:
        """Read a 32-bit float stored at a byte offset of a file."""
        try:
            with self._path(name).open("rb") as handle:
                handle.seek(position)
                raw = handle.read(_FLOAT.size)
        except OSError as exc:
            raise FileManagerError(f"opening {name} for read failed: {exc}") from exc
        if len(raw) != _FLOAT.size:
            raise FileManagerError(f"failed to read the full float value from {name}")
        return _FLOAT.unpack(raw)[0]

    def write_float(self, name: str, position: int, value: float) -> None:
        """Write a 32-bit float at a byte offset no further than the file's end."""
        try:
            with self._path(name).open("r+b") as handle:
                size = handle.seek(0, os.SEEK_END)
                if position < 0 or position > size:
                    raise FileManagerError(f"failed to seek to position {position} in {name}")
                handle.seek(position)
                handle.write(_FLOAT.pack(value))
        except FileManagerError:
            raise
        except (OSError, struct.error) as exc:
            raise FileManagerError(f"failed to write float to {name}: {exc}") from exc

    def append(self, name: str, message: str) -> None:
        """Append text to a file, creating it if needed."""
        if self.debug:
            _log.info("%s", message)
        try:
            with self._path(name).open("a", encoding="utf-8", newline="") as handle:
                handle.write(message)
        except OSError as exc:
            raise FileManagerError(f"cannot write to {name}: {exc}") from exc