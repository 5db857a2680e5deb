"""Persistent configuration values stored as 32-bit floats in one file."""

from __future__ import annotations

import logging
import struct
from typing import Optional

from .config_keys import ConfigRegistry, default_registry
from .file_manager import FileManager, FileManagerError

_FLOAT_SIZE = 4

_log = logging.getLogger(__name__)


class UnknownConfigKeyError(KeyError):
    """Raised for a configuration name or key that does not exist."""


def _as_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


class ConfigFileManager:
    """Reads and writes configuration values, one float per key, in the config file.

    Each key's value sits at byte offset ``key * 4``; written values are
    mirrored into the registry so the running program sees them at once.
    """

    def __init__(self, files: FileManager, registry: Optional[ConfigRegistry] = None) -> None:
        self.files = files
        self.registry = registry if registry is not None else default_registry()

    @property
    def file_name(self) -> str:
        return self.files.config_file_name

    def initialize(self) -> None:
        """Create the config file with defaults if needed, then load it."""
        self.initialize_with_defaults()
        self.load_values()

    def initialize_with_defaults(self) -> bool:
        """Write every default to a new config file; False if the file already existed."""
        if not self.files.create_file(self.file_name):
            return False
        for entry in self.registry:
            self.write_value(entry.key, entry.default)
        return True

    def restore_defaults(self) -> None:
        """Delete the config file and write it again from the defaults."""
        self.files.delete_file(self.file_name)
        self.initialize_with_defaults()

    def _check_key(self, key: int) -> None:
        try:
            self.registry.by_key(key)
        except KeyError:
            raise UnknownConfigKeyError(f"invalid config key: {key}") from None

    def _key_for(self, name: str) -> int:
        try:
            return self.registry.name_to_key(name)
        except KeyError:
            raise UnknownConfigKeyError(f"unknown config key: {name}") from None

    def read_value(self, key: int) -> float:
        """Read the stored value of a key from the config file."""
        self._check_key(key)
        value = self.files.read_float(self.file_name, key * _FLOAT_SIZE)
        _log.debug("Read value for key %s: %s", self.key_to_name(key), value)
        return value

    def write_value(self, key: int, value: float) -> None:
        """Store a value for a key and update the registry."""
        self._check_key(key)
        self.files.write_float(self.file_name, key * _FLOAT_SIZE, value)
        _log.debug("Wrote value %s to key %s", value, self.key_to_name(key))
        self.registry.assign(key, _as_float32(value))

    def write_value_by_name(self, name: str, value: float) -> None:
        """Store a value for a named variable."""
        self.write_value(self._key_for(name), value)

    def get_value(self, name: str) -> float:
        """Return the stored value of a variable, or its default if it cannot be read."""
        key = self._key_for(name)
        try:
            return self.read_value(key)
        except FileManagerError:
            return self.registry.by_key(key).default

    def all_values(self) -> dict[str, float]:
        """Return every variable's stored value, falling back to defaults."""
        values: dict[str, float] = {}
        for entry in self.registry:
            try:
                values[entry.name] = self.read_value(entry.key)
            except FileManagerError:
                values[entry.name] = entry.default
        return values

    def load_values(self) -> None:
        """Copy every readable stored value into the registry."""
        for entry in self.registry:
            try:
                value = self.read_value(entry.key)
            except FileManagerError:
                continue
            self.registry.assign(entry.key, value)

    def key_to_name(self, key: int) -> str:
        """Return the name of a key, or UNKNOWN_KEY."""
        return self.registry.key_to_name(key)