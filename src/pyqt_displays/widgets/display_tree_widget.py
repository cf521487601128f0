"""
Tree widget mirroring a DisplayTree, and the panel's selection model.

Items store the display's lifecycle handle rather than the display itself,
so a retired display can never be returned from the selection even if a
stale item is still on screen.
"""

from abc import ABCMeta
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from PyQt6.QtCore import Qt, QItemSelection, QItemSelectionModel, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QFont
from PyQt6.QtWidgets import QAbstractItemView, QTreeWidget, QTreeWidgetItem, QWidget

from pyqt_displays.model.display import Display, DisplayEvent, DisplayEventKind, FailedDisplay
from pyqt_displays.model.display_tree import DisplayTree
from pyqt_displays.protocols.selection import SelectionModel

logger = logging.getLogger(__name__)

HANDLE_ROLE = Qt.ItemDataRole.UserRole + 1
PATH_SEPARATOR = "/"
DISABLED_COLOR = QColor(128, 128, 128)
FAILED_COLOR = QColor(200, 60, 60)


# Combined metaclass for ABC + PyQt6 QTreeWidget
class _CombinedMeta(ABCMeta, type(QTreeWidget)):
    """Combined metaclass for ABC + PyQt6 QTreeWidget."""
    pass


class DisplayTreeWidget(QTreeWidget, SelectionModel, metaclass=_CombinedMeta):
    """
    Shows fixture rows followed by the display tree.

    Rebuilt on every structural change of the model; selection and expanded
    groups survive rebuilds as long as their displays are still live.
    """

    selection_changed = pyqtSignal()

    def __init__(self, tree: DisplayTree, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._tree = tree
        self._items: Dict[int, QTreeWidgetItem] = {}
        self._selection_snapshot: List[int] = []

        self.setColumnCount(2)
        self.setHeaderLabels(["Display", "Class"])
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)

        tree.structure_changed.connect(self.rebuild)
        tree.display_changed.connect(self._on_display_changed)
        self.itemSelectionChanged.connect(self._on_item_selection_changed)

        self.rebuild()

    @property
    def display_tree(self) -> DisplayTree:
        return self._tree

    # ========== Building ==========

    def rebuild(self) -> None:
        """Recreate all items from the model."""
        previous = self.selected_displays()
        expanded = self.expanded_paths()

        self.blockSignals(True)
        try:
            self.clear()
            self._items.clear()

            fixture_font = QFont()
            fixture_font.setItalic(True)
            for label in self._tree.fixture_rows:
                item = QTreeWidgetItem([label, ""])
                item.setFont(0, fixture_font)
                self.addTopLevelItem(item)

            for display in self._tree.displays:
                self.addTopLevelItem(self._build_item(display))

            self.set_expanded_paths(expanded)
            for display in previous:
                item = self._items.get(display.handle)
                if item is not None:
                    item.setSelected(True)
        finally:
            self.blockSignals(False)

        if self._current_handles() != self._selection_snapshot:
            self._on_item_selection_changed()

    def _build_item(self, display: Display) -> QTreeWidgetItem:
        item = QTreeWidgetItem()
        item.setData(0, HANDLE_ROLE, display.handle)
        self._apply_item_style(item, display)
        self._items[display.handle] = item
        if display.is_group:
            for child in display.children:
                item.addChild(self._build_item(child))
        return item

    def _apply_item_style(self, item: QTreeWidgetItem, display: Display) -> None:
        item.setText(0, display.name)
        item.setText(1, display.class_id)
        if isinstance(display, FailedDisplay):
            brush = QBrush(FAILED_COLOR)
            item.setToolTip(0, display.error_message)
        elif not display.enabled:
            brush = QBrush(DISABLED_COLOR)
        else:
            brush = QBrush()
        item.setForeground(0, brush)

    def item_for(self, display: Display) -> Optional[QTreeWidgetItem]:
        return self._items.get(display.handle) if display.handle is not None else None

    # ========== SelectionModel ==========

    def selected_displays(self) -> List[Display]:
        displays = []
        for item in self.selectedItems():
            display = self._tree.lifecycle.resolve(item.data(0, HANDLE_ROLE))
            if display is not None:
                displays.append(display)
        return displays

    def set_selected_displays(self, displays: Sequence[Display]) -> None:
        selection = QItemSelection()
        for display in displays:
            item = self.item_for(display)
            if item is None:
                logger.debug(f"Cannot select {display!r}: not in the tree")
                continue
            index = self.indexFromItem(item)
            selection.select(index, index)
        self._apply_selection(selection)

    def select_range(self, first: Display, last: Display) -> None:
        first_item, last_item = self.item_for(first), self.item_for(last)
        if first_item is None or last_item is None or first.parent is not last.parent:
            self.set_selected_displays([d for d in (first, last) if d is not None])
            return
        self._apply_selection(QItemSelection(self.indexFromItem(first_item), self.indexFromItem(last_item)))

    def _apply_selection(self, selection: QItemSelection) -> None:
        flags = (QItemSelectionModel.SelectionFlag.ClearAndSelect
                 | QItemSelectionModel.SelectionFlag.Rows)
        self.selectionModel().select(selection, flags)

    def _current_handles(self) -> List[int]:
        return [display.handle for display in self.selected_displays()]

    def _on_item_selection_changed(self) -> None:
        self._selection_snapshot = self._current_handles()
        self.selection_changed.emit()

    # ========== Model events ==========

    def _on_display_changed(self, event: DisplayEvent) -> None:
        if event.kind not in (DisplayEventKind.NAME_CHANGED, DisplayEventKind.ENABLED_CHANGED):
            return
        item = self.item_for(event.display)
        if item is not None:
            self._apply_item_style(item, event.display)

    # ========== Expanded state ==========

    def expanded_paths(self) -> List[str]:
        """Name paths (``Group/Subgroup``) of every expanded display row."""
        paths = []
        for path, item in self._walk_items():
            if item.isExpanded():
                paths.append(path)
        return paths

    def set_expanded_paths(self, paths: Iterable[str]) -> None:
        wanted = set(paths)
        for path, item in self._walk_items():
            item.setExpanded(path in wanted)

    def _walk_items(self):
        """Yield (path, item) for every display row.

        Names are not unique, so the n-th repeat of a name among its
        siblings gets an ``[n]`` suffix: ``Sensors``, ``Sensors[1]``.
        """
        def walk(siblings: List[QTreeWidgetItem], prefix: str):
            seen: Dict[str, int] = {}
            for item in siblings:
                name = item.text(0)
                repeat = seen.get(name, 0)
                seen[name] = repeat + 1
                segment = f"{name}[{repeat}]" if repeat else name
                path = f"{prefix}{PATH_SEPARATOR}{segment}" if prefix else segment
                yield path, item
                yield from walk([item.child(i) for i in range(item.childCount())], path)

        top_level = [self.topLevelItem(i) for i in range(self.topLevelItemCount())]
        yield from walk([item for item in top_level if item.data(0, HANDLE_ROLE) is not None], "")
