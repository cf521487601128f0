"""
Deferred teardown for displays that may still be notifying.

Displays can emit from worker threads. Removing one therefore happens in
two steps:

1. ``retire()`` runs on the removal call itself: listeners are detached on
   the whole subtree and the handles are tombstoned, so nothing can reach
   the display through the arena or through notification dispatch.
2. Destruction is queued and performed by ``drain()``, which runs from a
   queued signal once control returns to the owning thread's event loop,
   and only when no dispatch is in flight. A notification that was already
   running when ``retire()`` was called finishes against intact state.
"""

from contextlib import contextmanager
from typing import Dict, List, Optional, TYPE_CHECKING
import logging
import threading

from PyQt6.QtCore import QObject, Qt, pyqtSignal

if TYPE_CHECKING:
    from pyqt_displays.model.display import Display

logger = logging.getLogger(__name__)


class LifecycleGuard(QObject):
    """
    Arena of live displays addressed by stable integer handles.

    Usage:
        guard = LifecycleGuard()
        handle = guard.register(display)

        # in Display.notify():
        with guard.dispatching():
            ...deliver to listeners...

        guard.retire(display)      # detach + tombstone, returns immediately
        guard.resolve(handle)      # -> None from now on
        # display.destroy() runs later, from the event loop
    """

    # Emitted from any thread; delivered on the guard's thread.
    drain_requested = pyqtSignal()
    displays_destroyed = pyqtSignal(int)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._lock = threading.Lock()
        self._arena: Dict[int, "Display"] = {}
        self._next_handle = 1
        self._in_flight = 0
        self._pending: List["Display"] = []
        self.drain_requested.connect(self.drain, Qt.ConnectionType.QueuedConnection)

    # ========== Arena ==========

    def register(self, display: "Display") -> int:
        """Give ``display`` a handle (idempotent for a live display)."""
        with self._lock:
            handle = display._handle
            if handle is not None and self._arena.get(handle) is display:
                return handle
            handle = self._next_handle
            self._next_handle += 1
            self._arena[handle] = display
            display._handle = handle
            display._lifecycle = self
        logger.debug(f"Registered {display!r} as handle {handle}")
        return handle

    def register_subtree(self, display: "Display") -> None:
        self.register(display)
        if display.is_group:
            for child in display.iter_descendants():
                self.register(child)

    def resolve(self, handle: Optional[int]) -> Optional["Display"]:
        """Display for ``handle``, or None once it has been retired."""
        if handle is None:
            return None
        with self._lock:
            return self._arena.get(handle)

    def is_live(self, display: "Display") -> bool:
        return display._handle is not None and self.resolve(display._handle) is display

    @property
    def live_count(self) -> int:
        with self._lock:
            return len(self._arena)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    # ========== Dispatch accounting ==========

    @contextmanager
    def dispatching(self):
        """Mark a notification delivery as in progress (any thread)."""
        with self._lock:
            self._in_flight += 1
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= 1
                ready = self._in_flight == 0 and bool(self._pending)
            if ready:
                self.drain_requested.emit()

    # ========== Teardown ==========

    def retire(self, display: "Display") -> None:
        """Detach listeners, tombstone the subtree and queue destruction.

        Does not touch the parent; the caller takes ``display`` out of the
        tree afterwards.
        """
        subtree = [display]
        if display.is_group:
            subtree.extend(display.iter_descendants())

        # Listeners first: this is the only interlock with notifying threads.
        for member in subtree:
            member.detach_listeners()

        with self._lock:
            for member in subtree:
                if member._handle is not None and self._arena.get(member._handle) is member:
                    del self._arena[member._handle]
            self._pending.append(display)

        logger.debug(f"Retired {display!r} ({len(subtree)} display(s)), destruction deferred")
        self.drain_requested.emit()

    def drain(self) -> bool:
        """Destroy queued displays. Returns False if a dispatch is still running."""
        with self._lock:
            if self._in_flight:
                logger.debug(f"Deferring destruction, {self._in_flight} dispatch(es) in flight")
                return False
            batch, self._pending = self._pending, []

        for display in batch:
            display.destroy()
        if batch:
            logger.debug(f"Destroyed {len(batch)} retired display(s)")
            self.displays_destroyed.emit(len(batch))
        return True
