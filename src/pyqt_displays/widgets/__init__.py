"""
Widgets.

The display tree view, the Qt dialog provider and the displays panel.
"""

from .display_tree_widget import DisplayTreeWidget, HANDLE_ROLE
from .dialogs import AddDisplayDialog, QtDialogProvider
from .displays_panel import DisplaysPanel

__all__ = [
    "DisplayTreeWidget",
    "HANDLE_ROLE",
    "AddDisplayDialog",
    "QtDialogProvider",
    "DisplaysPanel",
]
