"""
Service layer for display management.

Command enablement, command execution, update suspension and the default
visualization host.
"""

from .command_availability import Command, CommandAvailability, compute_availability
from .update_suspension import UpdateSuspension
from .command_controller import CommandController
from .visualization_manager import VisualizationManager

__all__ = [
    "Command",
    "CommandAvailability",
    "compute_availability",
    "UpdateSuspension",
    "CommandController",
    "VisualizationManager",
]
