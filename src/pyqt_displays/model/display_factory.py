"""
Display factory: class identifier -> new default-initialized display.

Host applications register their display types once; the add dialog lists
what is registered and group loading looks child classes up here.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Type
import logging

from pyqt_displays.model.display import Display, DisplayGroup
from pyqt_displays.protocols.panel_config import PanelConfig, get_panel_config

logger = logging.getLogger(__name__)


class DisplayConstructionError(Exception):
    """Raised when a display could not be constructed for a class identifier."""

    def __init__(self, class_id: str, name: str = "", reason: str = ""):
        self.class_id = class_id
        self.name = name
        detail = reason or f"no display class registered as '{class_id}'"
        super().__init__(f"Could not create display '{name}': {detail}")


@dataclass(frozen=True)
class DisplayClassInfo:
    """Registry entry for one display type."""
    class_id: str
    display_type: Type[Display]
    description: str = ""

    @property
    def short_name(self) -> str:
        """``displays/Grid`` -> ``Grid``."""
        return self.class_id.rsplit("/", 1)[-1]


class DisplayFactory:
    """
    Registry of display types keyed by class identifier.

    Example:
        factory = DisplayFactory()
        factory.register("displays/Grid", GridDisplay, "Displays a grid on a plane.")
        grid = factory.create("displays/Grid", "Grid")
    """

    def __init__(self):
        self._classes: Dict[str, DisplayClassInfo] = {}

    def register(self, class_id: str, display_type: Type[Display], description: str = "") -> None:
        if class_id in self._classes:
            existing = self._classes[class_id].display_type
            logger.warning(
                f"Display class '{class_id}' already registered to {existing.__name__}. "
                f"Overwriting with {display_type.__name__}."
            )
        self._classes[class_id] = DisplayClassInfo(class_id, display_type, description)

    def unregister(self, class_id: str) -> None:
        self._classes.pop(class_id, None)

    def has_class(self, class_id: str) -> bool:
        return class_id in self._classes

    def class_ids(self) -> List[str]:
        return list(self._classes)

    def class_info(self, class_id: str) -> Optional[DisplayClassInfo]:
        return self._classes.get(class_id)

    def description(self, class_id: str) -> str:
        info = self._classes.get(class_id)
        return info.description if info else ""

    def create(self, class_id: str, name: str, enabled: bool = True) -> Optional[Display]:
        """Build a default display of ``class_id``.

        Returns None when the class is unknown or its constructor fails;
        callers must check.
        """
        info = self._classes.get(class_id)
        if info is None:
            logger.warning(f"Unknown display class '{class_id}'")
            return None

        display_type = info.display_type
        try:
            if display_type.is_group:
                return display_type(class_id, name, enabled, factory=self)
            return display_type(class_id, name, enabled)
        except Exception as e:
            logger.error(f"Constructor of display class '{class_id}' failed: {e}", exc_info=True)
            return None


def default_display_factory(config: Optional[PanelConfig] = None) -> DisplayFactory:
    """Factory with the group type and the built-in displays registered."""
    from pyqt_displays.model.builtin_displays import AxesDisplay, GridDisplay

    config = config or get_panel_config()
    factory = DisplayFactory()
    factory.register(config.group_class_id, DisplayGroup, "A container for displays.")
    factory.register("displays/Grid", GridDisplay, "Displays a grid on a plane.")
    factory.register("displays/Axes", AxesDisplay, "Displays a set of axes at a reference frame.")
    return factory
