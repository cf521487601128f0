"""
Core containers.

Pure-Python building blocks with no Qt dependency.
"""

from .config_store import ConfigStore, ConfigStoreError, NodeKind

__all__ = [
    "ConfigStore",
    "ConfigStoreError",
    "NodeKind",
]
