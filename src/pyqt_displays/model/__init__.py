"""
Display model.

Entities, their factory, the live tree and the teardown guard.
"""

from .display import (
    Display,
    DisplayGroup,
    FailedDisplay,
    DisplayEvent,
    DisplayEventKind,
    DisplayListener,
)
from .display_factory import (
    DisplayFactory,
    DisplayClassInfo,
    DisplayConstructionError,
    default_display_factory,
)
from .builtin_displays import GridDisplay, AxesDisplay
from .lifecycle import LifecycleGuard
from .display_tree import DisplayTree, TreeRow, ROOT_CLASS_ID

__all__ = [
    "Display",
    "DisplayGroup",
    "FailedDisplay",
    "DisplayEvent",
    "DisplayEventKind",
    "DisplayListener",
    "DisplayFactory",
    "DisplayClassInfo",
    "DisplayConstructionError",
    "default_display_factory",
    "GridDisplay",
    "AxesDisplay",
    "LifecycleGuard",
    "DisplayTree",
    "TreeRow",
    "ROOT_CLASS_ID",
]
