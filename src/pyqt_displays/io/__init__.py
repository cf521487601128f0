"""
Group file IO.

YAML is the text medium; ConfigStore is the in-memory form.
"""

from .base import ConfigReader, ConfigWriter
from .exceptions import ConfigIOError, ConfigReadError, ConfigWriteError
from .yaml_config import YamlConfigReader, YamlConfigWriter

__all__ = [
    "ConfigReader",
    "ConfigWriter",
    "ConfigIOError",
    "ConfigReadError",
    "ConfigWriteError",
    "YamlConfigReader",
    "YamlConfigWriter",
]
