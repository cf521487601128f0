"""
Selection-driven command enablement.

Availability is a pure function of the current selection; nothing is
cached between selection changes.

    count = len(selection)
    duplicate, remove  ⇔ count > 0
    rename             ⇔ count == 1
    save group         ⇔ count == 1 and selection[0].is_group
    add, load group    always
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from pyqt_displays.model.display import Display


class Command(Enum):
    """Commands offered by the displays panel."""
    ADD = "add"
    DUPLICATE = "duplicate"
    REMOVE = "remove"
    RENAME = "rename"
    SAVE_GROUP = "save_group"
    LOAD_GROUP = "load_group"


@dataclass(frozen=True)
class CommandAvailability:
    """Which commands are enabled for one selection."""
    add: bool = True
    duplicate: bool = False
    remove: bool = False
    rename: bool = False
    save_group: bool = False
    load_group: bool = True

    def is_enabled(self, command: Command) -> bool:
        return getattr(self, command.value)

    def enabled_commands(self) -> Sequence[Command]:
        return tuple(command for command in Command if self.is_enabled(command))


def compute_availability(selection: Sequence["Display"]) -> CommandAvailability:
    count = len(selection)
    is_single_group = count == 1 and selection[0].is_group
    return CommandAvailability(
        duplicate=count > 0,
        remove=count > 0,
        rename=count == 1,
        save_group=is_single_group,
    )
