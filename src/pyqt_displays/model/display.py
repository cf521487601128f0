"""
Display entities: leaf displays, display groups and failed placeholders.

Every display persists itself into a ConfigStore map and restores itself
from one. Duplication and group files both go through that round trip, so
a new display type only has to get ``save()``/``load()`` right.

Persisted layout (insertion ordered):
    Class: displays/Grid
    Name: Grid
    Enabled: true
    <parameter>: <value>      # one entry per parameter
    Displays: [...]           # groups only, one map per child

Listeners may be notified from worker threads. Each display keeps its
listener list behind a small lock and re-checks its detached flag before
every delivery, so once ``detach_listeners()`` returns no further listener
call starts for that display.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING
import copy
import logging
import threading

from pyqt_displays.core import ConfigStore

if TYPE_CHECKING:
    from pyqt_displays.model.display_factory import DisplayFactory
    from pyqt_displays.model.lifecycle import LifecycleGuard

logger = logging.getLogger(__name__)


class DisplayEventKind(Enum):
    """What changed on a display."""
    NAME_CHANGED = "name_changed"
    ENABLED_CHANGED = "enabled_changed"
    PARAMETER_CHANGED = "parameter_changed"
    TOPIC_CHANGED = "topic_changed"
    CHILDREN_CHANGED = "children_changed"


@dataclass(frozen=True)
class DisplayEvent:
    """Notification delivered to display listeners.

    ``display`` is the display the change happened on. Events bubble up to
    ancestor groups unchanged, so a listener on a group sees its
    descendants' events too.
    """
    kind: DisplayEventKind
    display: "Display"
    value: Any = None


DisplayListener = Callable[[DisplayEvent], None]


class Display:
    """
    Leaf display.

    Subclasses declare their parameters in DEFAULT_PARAMETERS; every
    instance gets its own deep copy.
    """

    is_group: bool = False
    DEFAULT_PARAMETERS: Dict[str, Any] = {}
    RESERVED_KEYS: Tuple[str, ...] = ("Class", "Name", "Enabled")

    def __init__(self, class_id: str, name: str = "", enabled: bool = True):
        self._class_id = class_id
        self._name = name
        self._enabled = enabled
        self._parameters: Dict[str, Any] = copy.deepcopy(self.DEFAULT_PARAMETERS)
        self._parent: Optional["DisplayGroup"] = None
        self._listeners: List[DisplayListener] = []
        self._listener_lock = threading.Lock()
        self._detached = False
        self._destroyed = False
        # Assigned by LifecycleGuard.register()
        self._lifecycle: Optional["LifecycleGuard"] = None
        self._handle: Optional[int] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._class_id!r}, {self._name!r})"

    # ========== Identity ==========

    @property
    def class_id(self) -> str:
        return self._class_id

    @property
    def handle(self) -> Optional[int]:
        return self._handle

    @property
    def parent(self) -> Optional["DisplayGroup"]:
        return self._parent

    def ancestors(self) -> Iterator["DisplayGroup"]:
        parent = self._parent
        while parent is not None:
            yield parent
            parent = parent.parent

    @property
    def is_alive(self) -> bool:
        """False once the display has been retired (detached or destroyed)."""
        return not self._detached and not self._destroyed

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    # ========== Name / enabled ==========

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        if name == self._name:
            return
        self._name = name
        self.notify(DisplayEventKind.NAME_CHANGED, name)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        self.notify(DisplayEventKind.ENABLED_CHANGED, enabled)

    # ========== Parameters ==========

    @property
    def parameters(self) -> Dict[str, Any]:
        """Independent copy of the parameter sub-tree."""
        return copy.deepcopy(self._parameters)

    def get_parameter(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._parameters.get(key, default))

    def set_parameter(self, key: str, value: Any) -> None:
        """Set ``key`` to plain data (scalars, lists, string-keyed maps).

        Raises:
            ValueError: If ``key`` is reserved
            ConfigStoreError: If ``value`` cannot be saved
        """
        if key in self.RESERVED_KEYS:
            raise ValueError(f"'{key}' is reserved and cannot be used as a parameter name")
        self._parameters[key] = ConfigStore.from_data(value).to_data()
        self.notify(DisplayEventKind.PARAMETER_CHANGED, key)

    def set_topic(self, topic: str, datatype: str) -> None:
        """Point the display at a data source before its first update."""
        self._parameters["Topic"] = topic
        self._parameters["Datatype"] = datatype
        self.notify(DisplayEventKind.TOPIC_CHANGED, (topic, datatype))

    # ========== Persistence ==========

    def save(self, store: ConfigStore) -> None:
        """Write the full state of this display into ``store`` (a map)."""
        store.map_set_value("Class", self._class_id)
        store.map_set_value("Name", self._name)
        store.map_set_value("Enabled", self._enabled)
        for key, value in self._parameters.items():
            store.map_set_value(key, value)

    def load(self, store: ConfigStore) -> None:
        """Restore state from ``store``. ``Class`` is not read back."""
        name = store.map_get_value("Name")
        if name is not None:
            self.set_name(str(name))
        enabled = store.map_get_value("Enabled")
        if isinstance(enabled, bool):
            self.set_enabled(enabled)

        loaded = []
        for key, child in store.map_items():
            if key in self.RESERVED_KEYS:
                continue
            self._parameters[key] = child.to_data()
            loaded.append(key)
        if loaded:
            self.notify(DisplayEventKind.PARAMETER_CHANGED, tuple(loaded))

    # ========== Update cycle ==========

    def update(self, dt: float) -> None:
        """Called once per host update cycle while enabled. Default: no-op."""

    # ========== Listeners ==========

    def add_listener(self, listener: DisplayListener) -> None:
        with self._listener_lock:
            if self._detached:
                logger.debug(f"Ignoring listener on retired display {self!r}")
                return
            self._listeners.append(listener)

    def remove_listener(self, listener: DisplayListener) -> None:
        with self._listener_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def listener_count(self) -> int:
        with self._listener_lock:
            return len(self._listeners)

    def detach_listeners(self) -> None:
        """Drop every listener and refuse new ones. Safe from any thread."""
        with self._listener_lock:
            self._detached = True
            self._listeners.clear()
        logger.debug(f"Detached listeners from {self!r}")

    def notify(self, kind: DisplayEventKind, value: Any = None) -> None:
        """Deliver an event to listeners here and on every ancestor group.

        May be called from any thread. Delivery is counted by the lifecycle
        guard so destruction never runs while it is in progress.
        """
        event = DisplayEvent(kind, self, value)
        guard = self._lifecycle
        if guard is None:
            self._dispatch(event)
            return
        with guard.dispatching():
            self._dispatch(event)

    def _dispatch(self, event: DisplayEvent) -> None:
        with self._listener_lock:
            if self._detached:
                return
            listeners = list(self._listeners)

        for listener in listeners:
            # A listener earlier in this loop (or another thread) may have
            # retired the display or removed the next listener.
            if self._detached:
                return
            with self._listener_lock:
                still_registered = listener in self._listeners
            if still_registered:
                listener(event)

        parent = self._parent
        if parent is not None and not self._detached:
            parent._dispatch(event)

    # ========== Teardown ==========

    def destroy(self) -> None:
        """Release state. Only the lifecycle guard calls this, after retirement."""
        if self._destroyed:
            return
        self._destroyed = True
        self._parameters.clear()
        self._parent = None
        logger.debug(f"Destroyed {self!r}")


class DisplayGroup(Display):
    """Display that owns an ordered list of child displays."""

    is_group = True
    RESERVED_KEYS = Display.RESERVED_KEYS + ("Displays",)

    def __init__(self, class_id: str, name: str = "", enabled: bool = True,
                 factory: Optional["DisplayFactory"] = None):
        super().__init__(class_id, name, enabled)
        self._children: List[Display] = []
        self.factory = factory

    # ========== Children ==========

    @property
    def children(self) -> Tuple[Display, ...]:
        return tuple(self._children)

    def child_count(self) -> int:
        return len(self._children)

    def index_of(self, display: Display) -> int:
        for index, child in enumerate(self._children):
            if child is display:
                return index
        return -1

    def iter_descendants(self) -> Iterator[Display]:
        """All descendants in tree row order (pre-order)."""
        for child in self._children:
            yield child
            if child.is_group:
                yield from child.iter_descendants()

    def add_display(self, display: Display, index: Optional[int] = None) -> None:
        """Append (or insert at ``index``) a display as a child of this group."""
        if display is self or any(ancestor is display for ancestor in self.ancestors()):
            raise ValueError(f"Cannot add {display!r} beneath itself")
        if display.parent is not None:
            display.parent.take_display(display)

        display._parent = self
        if index is None:
            self._children.append(display)
        else:
            self._children.insert(index, display)
        if self._lifecycle is not None:
            self._lifecycle.register_subtree(display)
        self.notify(DisplayEventKind.CHILDREN_CHANGED, display)

    def take_display(self, display: Display) -> Display:
        """Remove ``display`` from this group without destroying it."""
        index = self.index_of(display)
        if index < 0:
            raise ValueError(f"{display!r} is not a child of {self!r}")
        del self._children[index]
        display._parent = None
        self.notify(DisplayEventKind.CHILDREN_CHANGED, display)
        return display

    def remove_all_displays(self) -> None:
        """Take every child out and retire it."""
        for child in list(self._children):
            if child._lifecycle is not None:
                child._lifecycle.retire(child)
                self.take_display(child)
            else:
                for display in [child, *_descendants_of(child)]:
                    display.detach_listeners()
                self.take_display(child)
                child.destroy()

    # ========== Persistence ==========

    def save(self, store: ConfigStore) -> None:
        super().save(store)
        displays = store.map_set_value("Displays", [])
        for child in self._children:
            child.save(displays.list_append_new())

    def load(self, store: ConfigStore) -> None:
        super().load(store)
        self.remove_all_displays()
        displays = store.map_get_child("Displays")
        if displays is None:
            return
        for child_store in displays.list_children():
            class_id = str(child_store.map_get_value("Class", ""))
            name = str(child_store.map_get_value("Name", ""))
            enabled = child_store.map_get_value("Enabled", True)
            display = self._create_child(class_id, name, bool(enabled))
            self.add_display(display)
            display.load(child_store)

    def _create_child(self, class_id: str, name: str, enabled: bool) -> Display:
        display = None
        if self.factory is not None:
            display = self.factory.create(class_id, name, enabled)
        if display is None:
            message = f"The class required for this display, '{class_id}', could not be loaded."
            logger.warning(f"{message} Keeping its configuration in a placeholder.")
            display = FailedDisplay(class_id, name, enabled=False, error_message=message)
        return display

    # ========== Update / teardown ==========

    def update(self, dt: float) -> None:
        for child in list(self._children):
            if child.enabled:
                child.update(dt)

    def destroy(self) -> None:
        if self._destroyed:
            return
        children, self._children = self._children, []
        for child in children:
            child.destroy()
        super().destroy()


class FailedDisplay(Display):
    """
    Placeholder for a display whose class could not be created.

    Keeps the persisted form it was loaded from, so saving the enclosing
    group writes it back unchanged (apart from a rename).
    """

    def __init__(self, class_id: str, name: str = "", enabled: bool = False,
                 error_message: str = ""):
        super().__init__(class_id, name, enabled)
        self.error_message = error_message
        self._saved = ConfigStore()

    def load(self, store: ConfigStore) -> None:
        self._saved = store.copy()
        name = store.map_get_value("Name")
        if name is not None:
            self.set_name(str(name))

    def save(self, store: ConfigStore) -> None:
        if not self._saved.is_valid():
            super().save(store)
            return
        store.set_value(self._saved.to_data())
        store.map_set_value("Name", self.name)

    def set_enabled(self, enabled: bool) -> None:
        # Nothing can run without the real class.
        if enabled:
            logger.warning(f"Cannot enable {self!r}: {self.error_message}")
            return
        super().set_enabled(enabled)


def _descendants_of(display: Display) -> List[Display]:
    return list(display.iter_descendants()) if display.is_group else []
