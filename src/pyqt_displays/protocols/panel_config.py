"""Base configuration for the displays panel.

Provides hooks for host applications to customize panel behavior.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class PanelConfig:
    """Configuration for display management behavior.

    Applications can subclass this or construct it with overrides.

    Attributes:
        group_file_extension: Canonical extension for saved group files (no dot)
        group_file_description: Label used in file dialog filters
        update_interval_ms: Period of the host's update cycle
        fixture_rows: Non-removable rows shown above the displays
        group_class_id: Class identifier used for display groups
        default_display_name: Fallback name when the add dialog leaves it blank
    """

    group_file_extension: str = "rviz"
    group_file_description: str = "Display group files"
    update_interval_ms: int = 33
    fixture_rows: Tuple[str, ...] = field(default_factory=lambda: ("Global Options", "Global Status"))
    group_class_id: str = "displays/Group"
    default_display_name: str = "Display"

    @property
    def group_file_filter(self) -> str:
        """File dialog filter, e.g. ``Display group files (*.rviz)``."""
        return f"{self.group_file_description} (*.{self.group_file_extension})"


# Global config instance (set by application)
_panel_config: Optional[PanelConfig] = None


def set_panel_config(config: Optional[PanelConfig]) -> None:
    """Set the global panel configuration.

    Args:
        config: PanelConfig instance, or None to restore defaults
    """
    global _panel_config
    _panel_config = config


def get_panel_config() -> PanelConfig:
    """Get the current panel configuration.

    Returns:
        Current PanelConfig or default if not set
    """
    if _panel_config is None:
        return PanelConfig()
    return _panel_config
