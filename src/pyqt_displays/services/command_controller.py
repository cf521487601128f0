"""
Command controller for the displays panel.

Sits between the selection, the dialogs and the display tree:

    selection changed -> on_selection_changed() -> availability_changed
    button / shortcut -> execute(command)       -> tree mutation

Copying and persisting displays both go through ConfigStore: a duplicate
is a fresh display of the same class loaded from the source's saved state,
and a group file is the group's saved state written as YAML.
"""

from pathlib import Path
from typing import Dict, List, Optional
import logging

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_displays.core import ConfigStore, ConfigStoreError
from pyqt_displays.io import ConfigReader, ConfigWriter, YamlConfigReader, YamlConfigWriter
from pyqt_displays.io.exceptions import ConfigReadError, ConfigWriteError
from pyqt_displays.model.display import Display
from pyqt_displays.model.display_factory import DisplayConstructionError
from pyqt_displays.protocols.dialog_provider import DialogProvider, get_dialog_provider
from pyqt_displays.protocols.panel_config import PanelConfig, get_panel_config
from pyqt_displays.protocols.selection import SelectionModel
from pyqt_displays.protocols.visualization_host import VisualizationHost
from pyqt_displays.services.command_availability import (
    Command,
    CommandAvailability,
    compute_availability,
)
from pyqt_displays.services.update_suspension import UpdateSuspension

logger = logging.getLogger(__name__)


class CommandController(QObject):
    """
    Executes display commands against a host's display tree.

    Args:
        host: Owning application (update cycle, tree, group insertion)
        selection: Source of the current selection
        dialogs: Prompt provider; falls back to the registered global one
        reader: Group file reader (default YamlConfigReader)
        writer: Group file writer (default YamlConfigWriter)
        config: Panel configuration (default: global PanelConfig)
    """

    ACTION_REGISTRY: Dict[Command, str] = {
        Command.ADD: "add_display",
        Command.DUPLICATE: "duplicate_displays",
        Command.REMOVE: "remove_displays",
        Command.RENAME: "rename_display",
        Command.SAVE_GROUP: "save_group",
        Command.LOAD_GROUP: "load_group",
    }
    ITEM_NAME_SINGULAR = "display"
    ITEM_NAME_PLURAL = "displays"

    availability_changed = pyqtSignal(object)  # CommandAvailability
    status_message = pyqtSignal(str)

    def __init__(self, host: VisualizationHost, selection: SelectionModel,
                 dialogs: Optional[DialogProvider] = None,
                 reader: Optional[ConfigReader] = None,
                 writer: Optional[ConfigWriter] = None,
                 config: Optional[PanelConfig] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._host = host
        self._selection = selection
        self._dialogs = dialogs
        self._reader = reader or YamlConfigReader()
        self._writer = writer or YamlConfigWriter()
        self._config = config or get_panel_config()
        self._availability = compute_availability([])

    @property
    def dialogs(self) -> DialogProvider:
        provider = self._dialogs or get_dialog_provider()
        if provider is None:
            raise RuntimeError(
                "No dialog provider available. Pass dialogs=... or call register_dialog_provider()."
            )
        return provider

    @property
    def availability(self) -> CommandAvailability:
        return self._availability

    # ========== Selection ==========

    def on_selection_changed(self) -> None:
        """Recompute availability from the selection model, synchronously."""
        self._availability = compute_availability(self._selection.selected_displays())
        logger.debug(f"Command availability: {[c.value for c in self._availability.enabled_commands()]}")
        self.availability_changed.emit(self._availability)

    # ========== Dispatch ==========

    def execute(self, command: Command):
        """Run ``command`` if it is enabled for the current selection."""
        if not self._availability.is_enabled(command):
            logger.debug(f"Ignoring disabled command {command.value}")
            return None
        action = getattr(self, self.ACTION_REGISTRY[command])
        return action()

    # ========== Add ==========

    def add_display(self) -> Optional[Display]:
        """Prompt for a class and name, then create the display at top level."""
        with UpdateSuspension.suspended(self._host):
            request = self.dialogs.ask_new_display(self._host.display_factory)
            if request is None:
                return None

            name = request.name or self._config.default_display_name
            display = self._host.create_display(request.class_id, name, True)
            if display is None:
                self.dialogs.show_error(
                    "Failed to add display",
                    f"No display class is registered as '{request.class_id}'.",
                )
                return None
            if request.has_topic:
                display.set_topic(request.topic, request.datatype)

        logger.info(f"Added {display!r}")
        self.status_message.emit(f"Added {self.ITEM_NAME_SINGULAR} '{display.name}'")
        return display

    # ========== Duplicate ==========

    def duplicate_displays(self) -> List[Display]:
        """
        Duplicate every selected display through a save/load round trip.

        Best effort: a display that cannot be duplicated is reported and
        skipped, the others are still created. New displays are appended at
        top level and become the selection.
        """
        sources = self._selection.selected_displays()
        tree = self._host.display_tree

        duplicates: List[Display] = []
        failures: List[str] = []
        for source in sources:
            try:
                duplicate = self._duplicate(source)
            except (DisplayConstructionError, ConfigStoreError) as e:
                logger.error(f"Failed to duplicate {source!r}: {e}")
                failures.append(str(e))
                continue
            tree.add_display(duplicate)
            duplicates.append(duplicate)

        if duplicates:
            self._selection.select_range(duplicates[0], duplicates[-1])
            self._host.notify_config_changed()
            self.status_message.emit(f"Duplicated {self._count(len(duplicates))}")
        if failures:
            self.dialogs.show_error("Failed to duplicate", "\n".join(failures))
        return duplicates

    def _duplicate(self, source: Display) -> Display:
        display = self._host.display_factory.create(source.class_id, source.name, True)
        if display is None:
            raise DisplayConstructionError(source.class_id, source.name)
        store = ConfigStore()
        source.save(store)
        display.load(store)
        return display

    # ========== Remove ==========

    def remove_displays(self) -> int:
        """
        Retire every selected display.

        Listeners are detached and the display is taken out of the tree
        right away; destruction happens later through the lifecycle guard.
        Selection moves to the display just above the first removed one.
        """
        tree = self._host.display_tree
        selected_ids = {id(display) for display in self._selection.selected_displays()}
        if not selected_ids:
            return 0

        # Row order, and skip displays whose ancestor is removed with them.
        batch = [d for d in tree.iter_displays() if id(d) in selected_ids]
        batch = [d for d in batch if not any(id(a) in selected_ids for a in d.ancestors())]
        batch = [d for d in batch if tree.is_removable(d)]
        if not batch:
            return 0

        new_selection = tree.previous_sibling(batch[0])
        for display in batch:
            tree.remove_display(display)
            logger.debug(f"Scheduled {display!r} for removal")

        self._selection.set_selected_displays([new_selection] if new_selection is not None else [])
        self._host.notify_config_changed()
        logger.info(f"Removed {self._count(len(batch))}")
        self.status_message.emit(f"Removed {self._count(len(batch))}")
        return len(batch)

    # ========== Rename ==========

    def rename_display(self) -> bool:
        selected = self._selection.selected_displays()
        if len(selected) != 1:
            return False
        display = selected[0]

        old_name = display.name
        new_name = self.dialogs.ask_text("Rename Display", "New Name?", old_name)
        if not new_name or new_name == old_name:
            return False

        display.set_name(new_name)
        self.status_message.emit(f"Renamed '{old_name}' to '{new_name}'")
        return True

    # ========== Group files ==========

    def save_group(self) -> Optional[Path]:
        """Write the selected group (with all descendants) to a group file."""
        selected = self._selection.selected_displays()
        if len(selected) != 1 or not selected[0].is_group:
            return None
        group = selected[0]

        with UpdateSuspension.suspended(self._host):
            filename = self.dialogs.ask_save_path("Choose a file to save to", self._config.group_file_filter)
        if not filename:
            return None

        path = self._with_group_extension(filename)
        store = ConfigStore()
        try:
            group.save(store)
            self._writer.write_file(store, path)
        except ConfigStoreError as e:
            logger.error(f"Cannot save {group!r}: {e}")
            self.dialogs.show_error("Failed to save.", str(e))
            return None
        except ConfigWriteError as e:
            self.dialogs.show_error("Failed to save.", str(e))
            return None

        logger.info(f"Saved {group!r} to {path}")
        self.status_message.emit(f"Saved group '{group.name}' to {path}")
        return path

    def load_group(self) -> Optional[Display]:
        """Read a group file and hand it to the host for insertion."""
        with UpdateSuspension.suspended(self._host):
            filename = self.dialogs.ask_open_path("Choose a file to open", self._config.group_file_filter)
        if not filename:
            return None

        path = Path(filename)
        if not path.exists():
            self.dialogs.show_error("Config file does not exist", f"{filename} does not exist!")
            return None

        try:
            store = self._reader.read_file(path)
        except ConfigReadError as e:
            # Already logged by the reader.
            logger.debug(f"Load group aborted: {e}")
            return None

        group = self._host.load_group(store)
        if group is not None:
            self.status_message.emit(f"Loaded group '{group.name}' from {path}")
        return group

    # ========== Helpers ==========

    def _with_group_extension(self, filename: str) -> Path:
        path = Path(filename)
        suffix = f".{self._config.group_file_extension}"
        if path.suffix != suffix:
            path = path.with_name(path.name + suffix)
        return path

    def _count(self, n: int) -> str:
        return f"{n} {self.ITEM_NAME_SINGULAR if n == 1 else self.ITEM_NAME_PLURAL}"
