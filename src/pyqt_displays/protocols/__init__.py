"""
Protocol definitions and global registries.

ABC-based contracts between the command controller and the pieces a host
application supplies: dialogs, selection, and the owning visualization.
"""

from .panel_config import PanelConfig, set_panel_config, get_panel_config
from .dialog_provider import (
    NewDisplayRequest,
    DialogProvider,
    DialogProviderABC,
    register_dialog_provider,
    get_dialog_provider,
)
from .selection import SelectionModel
from .visualization_host import VisualizationHost

__all__ = [
    "PanelConfig",
    "set_panel_config",
    "get_panel_config",
    "NewDisplayRequest",
    "DialogProvider",
    "DialogProviderABC",
    "register_dialog_provider",
    "get_dialog_provider",
    "SelectionModel",
    "VisualizationHost",
]
