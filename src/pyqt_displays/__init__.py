"""
pyqt-displays: display tree management panel for PyQt6 visualization apps.

Manages a tree of displays (leaf displays and display groups) with
selection-driven commands: add, duplicate, rename, remove, save group and
load group.

Architecture:
- core: ConfigStore, the ordered hierarchical config container
- model: displays, display factory, display tree, lifecycle guard
- io: YAML reader/writer for group files
- protocols: dialog provider, selection model, visualization host, PanelConfig
- services: command availability, command controller, update suspension,
  default VisualizationManager host
- widgets: DisplayTreeWidget, Qt dialogs, DisplaysPanel

Key Features:
- Duplication and group files through one save/load round trip
- Availability of every command derived from the selection alone
- Listener detach before deferred destruction, safe against notifications
  from worker threads
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
