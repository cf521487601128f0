"""
YAML reader and writer for ConfigStore trees.

Both log the failure before raising, so callers that only need to abort
can catch ConfigIOError without reporting it again.
"""

import logging
from pathlib import Path
from typing import Union

import yaml

from pyqt_displays.core import ConfigStore, ConfigStoreError
from pyqt_displays.io.exceptions import ConfigReadError, ConfigWriteError

logger = logging.getLogger(__name__)


class YamlConfigReader:
    """Parse YAML text into a ConfigStore."""

    def read_file(self, path: Union[str, Path]) -> ConfigStore:
        """
        Read ``path`` into a new ConfigStore.

        Raises:
            ConfigReadError: If the file cannot be opened or is not valid YAML
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to open {path}: {e}", exc_info=True)
            raise ConfigReadError(f"Failed to open {path}: {e.strerror or e}", path) from e
        except UnicodeDecodeError as e:
            logger.error(f"{path} is not UTF-8 text: {e}")
            raise ConfigReadError(f"{path} is not UTF-8 text: {e.reason}", path) from e
        return self.read_string(text, source=str(path))

    def read_string(self, text: str, source: str = "<string>") -> ConfigStore:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing {source}: {e}")
            raise ConfigReadError(f"Error parsing {source}: {e}", source) from e

        try:
            return ConfigStore.from_data(data)
        except ConfigStoreError as e:
            logger.error(f"Unsupported content in {source}: {e}")
            raise ConfigReadError(f"Unsupported content in {source}: {e}", source) from e


class YamlConfigWriter:
    """Serialize a ConfigStore as block-style YAML, keeping key order."""

    def write_string(self, store: ConfigStore) -> str:
        try:
            return yaml.safe_dump(
                store.to_data(),
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            logger.error(f"Failed to serialize config: {e}")
            raise ConfigWriteError(f"Failed to serialize config: {e}") from e

    def write_file(self, store: ConfigStore, path: Union[str, Path]) -> None:
        """
        Write ``store`` to ``path``, replacing any existing file.

        Raises:
            ConfigWriteError: If serialization or the write fails. The file
                may be left incomplete in that case.
        """
        path = Path(path)
        text = self.write_string(store)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}", exc_info=True)
            raise ConfigWriteError(f"Failed to write {path}: {e.strerror or e}", path) from e
        logger.debug(f"Wrote config to {path}")
