"""Selection model contract used by the command controller."""

from abc import ABC, abstractmethod
from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from pyqt_displays.model.display import Display


class SelectionModel(ABC):
    """Read and replace the set of selected displays.

    Implementations only ever return live displays, and emit their own
    "selection changed" notification when the selection changes.
    """

    @abstractmethod
    def selected_displays(self) -> List["Display"]:
        """Selected displays in selection order. Fixture rows are never included."""
        ...

    @abstractmethod
    def set_selected_displays(self, displays: Sequence["Display"]) -> None:
        """Replace the selection (an empty sequence clears it)."""
        ...

    @abstractmethod
    def select_range(self, first: "Display", last: "Display") -> None:
        """Replace the selection with the contiguous rows from ``first`` to ``last``."""
        ...
