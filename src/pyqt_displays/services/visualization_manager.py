"""
Default visualization host.

Owns the display factory, the display tree and its lifecycle guard, and
drives the periodic update cycle with a QTimer on the GUI thread.
"""

from abc import ABCMeta
from typing import Optional
import logging
import time

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from pyqt_displays.core import ConfigStore
from pyqt_displays.model.display import Display
from pyqt_displays.model.display_factory import DisplayFactory, default_display_factory
from pyqt_displays.model.display_tree import DisplayTree
from pyqt_displays.model.lifecycle import LifecycleGuard
from pyqt_displays.protocols.panel_config import PanelConfig, get_panel_config
from pyqt_displays.protocols.visualization_host import VisualizationHost

logger = logging.getLogger(__name__)


# Combined metaclass for ABC + PyQt6 QObject
class _CombinedMeta(ABCMeta, type(QObject)):
    """Combined metaclass for ABC + PyQt6 QObject."""
    pass


class VisualizationManager(QObject, VisualizationHost, metaclass=_CombinedMeta):
    """
    Owner of the live displays.

    Usage:
        manager = VisualizationManager()
        manager.create_display("displays/Grid", "Grid")
        manager.start_update()
    """

    config_changed = pyqtSignal()

    def __init__(self, factory: Optional[DisplayFactory] = None,
                 config: Optional[PanelConfig] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._config = config or get_panel_config()
        self._factory = factory or default_display_factory(self._config)
        self._lifecycle = LifecycleGuard(self)
        self._tree = DisplayTree(self._factory, self._lifecycle, self._config, parent=self)

        self._timer = QTimer(self)
        self._timer.setInterval(self._config.update_interval_ms)
        self._timer.timeout.connect(self._on_update)
        self._last_update = time.monotonic()
        self.frame_count = 0

    # ========== VisualizationHost ==========

    @property
    def display_tree(self) -> DisplayTree:
        return self._tree

    @property
    def display_factory(self) -> DisplayFactory:
        return self._factory

    @property
    def lifecycle(self) -> LifecycleGuard:
        return self._lifecycle

    def create_display(self, class_id: str, name: str, enabled: bool = True) -> Optional[Display]:
        display = self._tree.create_display(class_id, name, enabled)
        if display is not None:
            self.notify_config_changed()
        return display

    def start_update(self) -> None:
        self._last_update = time.monotonic()
        self._timer.start()

    def stop_update(self) -> None:
        self._timer.stop()

    @property
    def is_updating(self) -> bool:
        return self._timer.isActive()

    def load_group(self, store: ConfigStore) -> Optional[Display]:
        """Create the group described by ``store`` and append it at top level."""
        class_id = str(store.map_get_value("Class", self._config.group_class_id))
        name = str(store.map_get_value("Name", "Group"))
        enabled = bool(store.map_get_value("Enabled", True))

        group = self._factory.create(class_id, name, enabled)
        if group is None or not group.is_group:
            logger.error(f"Cannot load group: '{class_id}' is not a registered group class")
            return None

        group.load(store)
        self._tree.add_display(group)
        logger.info(f"Loaded {group!r} with {sum(1 for _ in group.iter_descendants())} descendant(s)")
        self.notify_config_changed()
        return group

    def notify_config_changed(self) -> None:
        self.config_changed.emit()

    # ========== Update cycle ==========

    def _on_update(self) -> None:
        now = time.monotonic()
        dt = now - self._last_update
        self._last_update = now
        self.frame_count += 1
        self._tree.root.update(dt)
