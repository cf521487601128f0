"""Contract between the displays panel and the application that owns the displays."""

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from pyqt_displays.core import ConfigStore
    from pyqt_displays.model.display import Display
    from pyqt_displays.model.display_factory import DisplayFactory
    from pyqt_displays.model.display_tree import DisplayTree


class VisualizationHost(ABC):
    """
    The owning application as seen by the command controller.

    The host runs the periodic update cycle, owns the display tree and
    decides how a loaded group is attached.
    """

    @property
    @abstractmethod
    def display_tree(self) -> "DisplayTree":
        ...

    @property
    @abstractmethod
    def display_factory(self) -> "DisplayFactory":
        ...

    @abstractmethod
    def create_display(self, class_id: str, name: str, enabled: bool = True) -> Optional["Display"]:
        """Create a display and append it at top level. None if the class is unknown."""
        ...

    @abstractmethod
    def start_update(self) -> None:
        ...

    @abstractmethod
    def stop_update(self) -> None:
        ...

    @abstractmethod
    def load_group(self, store: "ConfigStore") -> Optional["Display"]:
        """Instantiate the group persisted in ``store`` and attach it."""
        ...

    @abstractmethod
    def notify_config_changed(self) -> None:
        """Mark the application's overall configuration dirty."""
        ...
