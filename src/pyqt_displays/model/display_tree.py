"""
Live display tree.

Owns the root group (a placeholder that is never shown, removed or
duplicated) and the fixture rows that sit above the displays. Structural
changes anywhere below the root are re-emitted as Qt signals for the tree
widget.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
import logging

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_displays.model.display import Display, DisplayEvent, DisplayEventKind, DisplayGroup
from pyqt_displays.model.display_factory import DisplayFactory
from pyqt_displays.model.lifecycle import LifecycleGuard
from pyqt_displays.protocols.panel_config import PanelConfig, get_panel_config

logger = logging.getLogger(__name__)

ROOT_CLASS_ID = "displays/Root"


@dataclass(frozen=True)
class TreeRow:
    """One row of the flattened tree: a fixture label or a display."""
    label: str
    depth: int = 0
    display: Optional[Display] = None

    @property
    def is_fixture(self) -> bool:
        return self.display is None


class DisplayTree(QObject):
    """Root group + fixtures + lifecycle guard."""

    structure_changed = pyqtSignal()
    display_changed = pyqtSignal(object)  # DisplayEvent

    def __init__(self, factory: DisplayFactory, lifecycle: Optional[LifecycleGuard] = None,
                 config: Optional[PanelConfig] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._config = config or get_panel_config()
        self.factory = factory
        self.lifecycle = lifecycle or LifecycleGuard(self)
        self.root = DisplayGroup(ROOT_CLASS_ID, "Displays", factory=factory)
        self.lifecycle.register(self.root)
        self.root.add_listener(self._on_display_event)

    @property
    def fixture_rows(self) -> Tuple[str, ...]:
        return tuple(self._config.fixture_rows)

    # ========== Queries ==========

    @property
    def displays(self) -> Tuple[Display, ...]:
        """Top-level displays."""
        return self.root.children

    def iter_displays(self) -> Iterator[Display]:
        """Every display below the root, in row order."""
        return self.root.iter_descendants()

    def display_count(self) -> int:
        return sum(1 for _ in self.iter_displays())

    def contains(self, display: Display) -> bool:
        return display is not self.root and any(a is self.root for a in display.ancestors())

    def rows(self) -> List[TreeRow]:
        """Fixture rows followed by displays, flattened in pre-order."""
        rows = [TreeRow(label) for label in self.fixture_rows]

        def walk(group: DisplayGroup, depth: int) -> None:
            for child in group.children:
                rows.append(TreeRow(child.name, depth, child))
                if child.is_group:
                    walk(child, depth + 1)

        walk(self.root, 0)
        return rows

    def row_of(self, display: Display) -> int:
        for index, row in enumerate(self.rows()):
            if row.display is display:
                return index
        return -1

    def is_removable(self, display: Display) -> bool:
        """Root and fixtures are not displays in the tree; retired ones are gone."""
        return self.contains(display) and self.lifecycle.is_live(display)

    def previous_sibling(self, display: Display) -> Optional[Display]:
        """Display in the row just above ``display`` under the same parent."""
        parent = display.parent
        if parent is None:
            return None
        index = parent.index_of(display)
        return parent.children[index - 1] if index > 0 else None

    # ========== Mutation ==========

    def add_display(self, display: Display, parent: Optional[DisplayGroup] = None) -> Display:
        (parent or self.root).add_display(display)
        return display

    def create_display(self, class_id: str, name: str, enabled: bool = True) -> Optional[Display]:
        """Create a display through the factory and append it at top level."""
        display = self.factory.create(class_id, name, enabled)
        if display is None:
            return None
        self.add_display(display)
        logger.debug(f"Created {display!r}")
        return display

    def remove_display(self, display: Display) -> None:
        """Detach ``display``, take it out of the tree and queue its destruction."""
        if not self.is_removable(display):
            raise ValueError(f"{display!r} cannot be removed")
        parent = display.parent
        self.lifecycle.retire(display)
        parent.take_display(display)

    # ========== Notifications ==========

    def _on_display_event(self, event: DisplayEvent) -> None:
        if event.kind is DisplayEventKind.CHILDREN_CHANGED:
            self.structure_changed.emit()
        self.display_changed.emit(event)
