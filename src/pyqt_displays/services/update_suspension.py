"""
Scoped suspension of the host's periodic update cycle.

Blocking prompts must not run while the update cycle mutates the tree.
Instead of pairing ``stop_update()``/``start_update()`` by hand:

    host.stop_update()
    path = dialogs.ask_open_path(...)
    host.start_update()          # skipped if ask_open_path raises

use:

    with UpdateSuspension.suspended(host):
        path = dialogs.ask_open_path(...)

The cycle is restarted on every exit path. Nested suspensions of the same
host only restart it when the outermost one exits.
"""

from contextlib import contextmanager
from typing import Dict, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from pyqt_displays.protocols.visualization_host import VisualizationHost

logger = logging.getLogger(__name__)


class UpdateSuspension:
    """Context manager factory for suspending a host's update cycle."""

    # id(host) -> nesting depth
    _depths: Dict[int, int] = {}

    @staticmethod
    @contextmanager
    def suspended(host: "VisualizationHost"):
        """
        Stop updates on entry and restart them on exit (guaranteed).

        Args:
            host: Object with stop_update()/start_update()
        """
        key = id(host)
        depth = UpdateSuspension._depths.get(key, 0)
        if depth == 0:
            host.stop_update()
            logger.debug(f"Suspended updates on {type(host).__name__}")
        # Counted only once stop_update() has succeeded.
        UpdateSuspension._depths[key] = depth + 1

        try:
            yield
        finally:
            remaining = UpdateSuspension._depths[key] - 1
            if remaining:
                UpdateSuspension._depths[key] = remaining
            else:
                del UpdateSuspension._depths[key]
                host.start_update()
                logger.debug(f"Resumed updates on {type(host).__name__}")

    @staticmethod
    def is_suspended(host: "VisualizationHost") -> bool:
        return UpdateSuspension._depths.get(id(host), 0) > 0
