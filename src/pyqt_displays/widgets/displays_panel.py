"""
Displays panel: the display tree plus the command buttons.

Button enablement is driven entirely by CommandController's
availability_changed signal; the panel only lays out widgets and forwards
clicks.
"""

from typing import Dict, List, Optional, Tuple
import logging

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QKeySequence
from PyQt6.QtWidgets import QGridLayout, QPushButton, QVBoxLayout, QWidget

from pyqt_displays.core import ConfigStore
from pyqt_displays.protocols.dialog_provider import DialogProvider, get_dialog_provider
from pyqt_displays.protocols.panel_config import PanelConfig, get_panel_config
from pyqt_displays.protocols.visualization_host import VisualizationHost
from pyqt_displays.services.command_availability import Command, CommandAvailability
from pyqt_displays.services.command_controller import CommandController
from pyqt_displays.widgets.dialogs import QtDialogProvider
from pyqt_displays.widgets.display_tree_widget import DisplayTreeWidget

logger = logging.getLogger(__name__)


class DisplaysPanel(QWidget):
    """
    Panel managing the displays of a VisualizationHost.

    Usage:
        manager = VisualizationManager()
        panel = DisplaysPanel(manager)
        manager.start_update()
    """

    # (label, command, tooltip, shortcut)
    BUTTON_CONFIGS: List[Tuple[str, Command, str, Optional[str]]] = [
        ("Add", Command.ADD, "Add a new display, Ctrl+N", "Ctrl+N"),
        ("Duplicate", Command.DUPLICATE, "Duplicate a display, Ctrl+D", "Ctrl+D"),
        ("Remove", Command.REMOVE, "Remove displays, Ctrl+X", "Ctrl+X"),
        ("Rename", Command.RENAME, "Rename a display, Ctrl+R", "Ctrl+R"),
        ("Load Group", Command.LOAD_GROUP, "Load a group display", None),
        ("Save Group", Command.SAVE_GROUP, "Save a group display", None),
    ]
    BUTTON_GRID_COLUMNS: int = 4

    status_message = pyqtSignal(str)

    def __init__(self, host: VisualizationHost, dialogs: Optional[DialogProvider] = None,
                 config: Optional[PanelConfig] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._host = host
        self._config = config or get_panel_config()
        self.buttons: Dict[Command, QPushButton] = {}

        self.tree_widget = DisplayTreeWidget(host.display_tree, parent=self)
        dialogs = dialogs or get_dialog_provider() or QtDialogProvider(self)
        self.controller = CommandController(host, self.tree_widget, dialogs, config=self._config, parent=self)

        self.setup_ui()
        self._setup_connections()
        self.controller.on_selection_changed()

    # ========== UI ==========

    def setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 2)
        layout.addWidget(self.tree_widget)
        layout.addWidget(self._create_button_panel())

    def _create_button_panel(self) -> QWidget:
        panel = QWidget()
        layout = QGridLayout(panel)
        layout.setContentsMargins(2, 0, 2, 2)

        for i, (label, command, tooltip, shortcut) in enumerate(self.BUTTON_CONFIGS):
            button = QPushButton(label)
            button.setToolTip(tooltip)
            if shortcut:
                button.setShortcut(QKeySequence(shortcut))
            button.clicked.connect(lambda checked, c=command: self.handle_button_action(c))
            self.buttons[command] = button
            layout.addWidget(button, i // self.BUTTON_GRID_COLUMNS, i % self.BUTTON_GRID_COLUMNS)

        return panel

    def _setup_connections(self) -> None:
        self.tree_widget.selection_changed.connect(self.controller.on_selection_changed)
        self.controller.availability_changed.connect(self.update_button_states)
        self.controller.status_message.connect(self.status_message)

    # ========== Actions ==========

    def handle_button_action(self, command: Command) -> None:
        self.controller.execute(command)
        if command in (Command.ADD, Command.DUPLICATE):
            # Keyboard focus back on the main window after the dialog.
            self.activateWindow()

    def update_button_states(self, availability: CommandAvailability) -> None:
        for command, button in self.buttons.items():
            button.setEnabled(availability.is_enabled(command))

    # ========== Panel state ==========

    def save(self, store: ConfigStore) -> None:
        """Persist view state (expanded groups) under ``Tree``."""
        tree = store.map_make_child("Tree")
        tree.map_set_value("Expanded", self.tree_widget.expanded_paths())

    def load(self, store: ConfigStore) -> None:
        tree = store.map_get_child("Tree")
        if tree is None:
            return
        expanded = tree.map_get_child("Expanded")
        if expanded is None:
            return
        paths = [child.value for child in expanded.list_children() if isinstance(child.value, str)]
        self.tree_widget.set_expanded_paths(paths)
