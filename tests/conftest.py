"""pytest configuration and fixtures for pyqt-displays tests."""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pyqt_displays.protocols import DialogProviderABC


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class FakeDialogs(DialogProviderABC):
    """Scripted answers for every prompt; records errors instead of showing them."""

    def __init__(self):
        self.new_display = None
        self.text = None
        self.save_path = None
        self.open_path = None
        self.errors = []
        self.prompts = []
        # Called while a prompt is "open"
        self.on_prompt = None

    def _prompt(self, kind):
        self.prompts.append(kind)
        if self.on_prompt is not None:
            self.on_prompt()

    def ask_new_display(self, factory):
        self._prompt("new_display")
        return self.new_display

    def ask_text(self, title, label, text=""):
        self._prompt("text")
        return self.text

    def ask_save_path(self, title, file_filter):
        self._prompt("save_path")
        return self.save_path

    def ask_open_path(self, title, file_filter):
        self._prompt("open_path")
        return self.open_path

    def show_error(self, title, message):
        self.errors.append((title, message))


@pytest.fixture
def dialogs():
    return FakeDialogs()


@pytest.fixture
def manager(qapp):
    from pyqt_displays.services import VisualizationManager

    manager = VisualizationManager()
    yield manager
    manager.stop_update()


@pytest.fixture
def panel(qapp, manager, dialogs):
    from pyqt_displays.widgets import DisplaysPanel

    return DisplaysPanel(manager, dialogs=dialogs)
