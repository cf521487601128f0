"""Protocols for config readers and writers."""

from pathlib import Path
from typing import Protocol, Union

from pyqt_displays.core import ConfigStore


class ConfigReader(Protocol):
    """Reads a text file into a ConfigStore. Raises ConfigReadError."""

    def read_file(self, path: Union[str, Path]) -> ConfigStore:
        ...

    def read_string(self, text: str, source: str = "<string>") -> ConfigStore:
        ...


class ConfigWriter(Protocol):
    """Writes a ConfigStore to a text file. Raises ConfigWriteError."""

    def write_file(self, store: ConfigStore, path: Union[str, Path]) -> None:
        ...

    def write_string(self, store: ConfigStore) -> str:
        ...
