"""
Ordered hierarchical configuration container.

A ConfigStore node is one of four kinds:
- EMPTY: freshly created, no value yet
- VALUE: a scalar (str, int, float, bool or None)
- LIST: ordered sequence of child nodes
- MAP: ordered mapping of name -> child node

Nodes become LIST or MAP lazily on the first list/map operation, so a
display's ``save()`` can be handed an empty store and fill it in place.
``to_data()``/``from_data()`` convert to and from plain Python containers,
which is what the YAML reader/writer work with.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, int, float, bool, type(None))


class NodeKind(Enum):
    """Kind of a ConfigStore node."""
    EMPTY = "empty"
    VALUE = "value"
    LIST = "list"
    MAP = "map"


class ConfigStoreError(ValueError):
    """Raised when a node is used as a kind it is not."""


class ConfigStore:
    """
    One node of a configuration tree.

    Examples:
        store = ConfigStore()
        store.map_set_value("Class", "displays/Grid")
        child = store.map_make_child("Color")
        child.set_value("160; 160; 164")

        items = store.map_make_child("Displays")
        items.list_append_new().map_set_value("Name", "Axes")
    """

    def __init__(self, value: Any = None):
        self._kind = NodeKind.EMPTY
        self._value: Any = None
        self._children: List["ConfigStore"] = []
        self._map: Dict[str, "ConfigStore"] = {}
        if value is not None:
            self._assign(value)

    # ========== Construction ==========

    @classmethod
    def from_data(cls, data: Any) -> "ConfigStore":
        """Build a node tree from plain dicts, lists and scalars."""
        store = cls()
        if data is not None:
            store._assign(data)
        return store

    @classmethod
    def _from_nested(cls, data: Any, containers: Tuple[int, ...]) -> "ConfigStore":
        store = cls()
        if data is not None:
            store._assign(data, containers)
        return store

    def _assign(self, data: Any, containers: Tuple[int, ...] = ()) -> None:
        if isinstance(data, ConfigStore):
            data = data.to_data()
        self._reset()
        if isinstance(data, (dict, list, tuple)):
            # containers: ids of the dicts/lists on the path from the top
            if id(data) in containers:
                raise ConfigStoreError("Self-referencing data cannot be stored in a ConfigStore")
            containers = containers + (id(data),)
        if isinstance(data, dict):
            self._kind = NodeKind.MAP
            for key, child in data.items():
                self._map[str(key)] = ConfigStore._from_nested(child, containers)
        elif isinstance(data, (list, tuple)):
            self._kind = NodeKind.LIST
            self._children = [ConfigStore._from_nested(child, containers) for child in data]
        elif isinstance(data, SCALAR_TYPES):
            self._kind = NodeKind.VALUE
            self._value = data
        else:
            raise ConfigStoreError(
                f"Unsupported value type {type(data).__name__} for ConfigStore node"
            )

    def _reset(self) -> None:
        self._kind = NodeKind.EMPTY
        self._value = None
        self._children = []
        self._map = {}

    # ========== Kind ==========

    @property
    def kind(self) -> NodeKind:
        return self._kind

    def is_valid(self) -> bool:
        """True when the node holds something (any kind but EMPTY)."""
        return self._kind is not NodeKind.EMPTY

    def _require(self, kind: NodeKind) -> None:
        if self._kind is NodeKind.EMPTY:
            self._kind = kind
        elif self._kind is not kind:
            raise ConfigStoreError(f"ConfigStore node is {self._kind.value}, not {kind.value}")

    # ========== Scalar ==========

    @property
    def value(self) -> Any:
        """Scalar value, or None for non-VALUE nodes."""
        return self._value if self._kind is NodeKind.VALUE else None

    def set_value(self, value: Any) -> None:
        """Replace this node with a scalar (or, for containers, a subtree)."""
        self._assign(value)

    # ========== Map ==========

    def map_set_value(self, key: str, value: Any) -> "ConfigStore":
        """Set ``key`` to a scalar or plain-data subtree. Returns the child node."""
        self._require(NodeKind.MAP)
        child = ConfigStore.from_data(value)
        self._map[key] = child
        return child

    def map_make_child(self, key: str) -> "ConfigStore":
        """Create (or replace) an empty child under ``key``."""
        self._require(NodeKind.MAP)
        child = ConfigStore()
        self._map[key] = child
        return child

    def map_get_child(self, key: str) -> Optional["ConfigStore"]:
        if self._kind is not NodeKind.MAP:
            return None
        return self._map.get(key)

    def map_get_value(self, key: str, default: Any = None) -> Any:
        """Scalar stored under ``key``, or ``default`` when absent or not a scalar."""
        child = self.map_get_child(key)
        if child is None or child.kind is not NodeKind.VALUE:
            return default
        return child.value

    def map_keys(self) -> List[str]:
        return list(self._map) if self._kind is NodeKind.MAP else []

    def map_items(self) -> Iterator[Tuple[str, "ConfigStore"]]:
        if self._kind is not NodeKind.MAP:
            return iter(())
        return iter(list(self._map.items()))

    def __contains__(self, key: str) -> bool:
        return self._kind is NodeKind.MAP and key in self._map

    # ========== List ==========

    def list_append_new(self) -> "ConfigStore":
        """Append an empty child and return it."""
        self._require(NodeKind.LIST)
        child = ConfigStore()
        self._children.append(child)
        return child

    def list_length(self) -> int:
        return len(self._children) if self._kind is NodeKind.LIST else 0

    def list_child_at(self, index: int) -> Optional["ConfigStore"]:
        if self._kind is not NodeKind.LIST or not 0 <= index < len(self._children):
            return None
        return self._children[index]

    def list_children(self) -> List["ConfigStore"]:
        return list(self._children) if self._kind is NodeKind.LIST else []

    # ========== Conversion ==========

    def to_data(self) -> Any:
        """Return an independent plain-Python copy of this subtree."""
        if self._kind is NodeKind.MAP:
            return {key: child.to_data() for key, child in self._map.items()}
        if self._kind is NodeKind.LIST:
            return [child.to_data() for child in self._children]
        return self._value

    def copy(self) -> "ConfigStore":
        return ConfigStore.from_data(self.to_data())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigStore):
            return NotImplemented
        return self._kind is other._kind and self.to_data() == other.to_data()

    def __repr__(self) -> str:
        return f"ConfigStore({self._kind.value}: {self.to_data()!r})"
