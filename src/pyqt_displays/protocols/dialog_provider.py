"""Dialog provider protocol and ABC for interactive prompts.

Commands never open dialogs directly; they ask the registered provider.
Every ``ask_*`` method returns None when the user cancels.

Example:
    class MyDialogs(DialogProviderABC):
        def ask_text(self, title, label, text=""):
            value, ok = QInputDialog.getText(self.parent, title, label, text=text)
            return value if ok else None
        ...

    register_dialog_provider(MyDialogs())
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pyqt_displays.model.display_factory import DisplayFactory


@dataclass(frozen=True)
class NewDisplayRequest:
    """Answer of the add-display prompt."""
    class_id: str
    name: str
    topic: str = ""
    datatype: str = ""

    @property
    def has_topic(self) -> bool:
        return bool(self.topic) and bool(self.datatype)


class DialogProvider(Protocol):
    """Protocol for the prompts used by display commands.

    Use this for duck-typed checking. For implementation, prefer DialogProviderABC.
    """

    def ask_new_display(self, factory: "DisplayFactory") -> Optional[NewDisplayRequest]:
        ...

    def ask_text(self, title: str, label: str, text: str = "") -> Optional[str]:
        ...

    def ask_save_path(self, title: str, file_filter: str) -> Optional[str]:
        ...

    def ask_open_path(self, title: str, file_filter: str) -> Optional[str]:
        ...

    def show_error(self, title: str, message: str) -> None:
        ...


class DialogProviderABC(ABC):
    """Abstract base class for dialog providers."""

    @abstractmethod
    def ask_new_display(self, factory: "DisplayFactory") -> Optional[NewDisplayRequest]:
        """Ask for a class id, a name and optionally a topic/datatype pair."""
        ...

    @abstractmethod
    def ask_text(self, title: str, label: str, text: str = "") -> Optional[str]:
        """Ask for one line of text, prefilled with ``text``."""
        ...

    @abstractmethod
    def ask_save_path(self, title: str, file_filter: str) -> Optional[str]:
        ...

    @abstractmethod
    def ask_open_path(self, title: str, file_filter: str) -> Optional[str]:
        ...

    @abstractmethod
    def show_error(self, title: str, message: str) -> None:
        """Blocking error report."""
        ...


_dialog_provider: Optional[DialogProvider] = None


def register_dialog_provider(provider: Optional[DialogProvider]) -> None:
    """Register a global dialog provider.

    Args:
        provider: Instance implementing DialogProvider or DialogProviderABC
    """
    global _dialog_provider
    _dialog_provider = provider


def get_dialog_provider() -> Optional[DialogProvider]:
    """Get the registered dialog provider."""
    return _dialog_provider
