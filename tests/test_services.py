"""Tests for command availability and update suspension."""

import pytest


class _StubDisplay:
    def __init__(self, is_group=False):
        self.is_group = is_group


class _RecordingHost:
    def __init__(self):
        self.calls = []

    def stop_update(self):
        self.calls.append("stop")

    def start_update(self):
        self.calls.append("start")


def test_empty_selection_only_allows_add_and_load():
    """Test nothing but Add and Load Group is enabled with no selection."""
    from pyqt_displays.services import Command, compute_availability

    availability = compute_availability([])
    assert availability.enabled_commands() == (Command.ADD, Command.LOAD_GROUP)


def test_single_leaf_selection():
    """Test a single leaf enables everything except Save Group."""
    from pyqt_displays.services import compute_availability

    availability = compute_availability([_StubDisplay()])
    assert availability.duplicate and availability.remove and availability.rename
    assert not availability.save_group


def test_single_group_selection_enables_save_group():
    """Test Save Group needs exactly one selected group."""
    from pyqt_displays.services import compute_availability

    assert compute_availability([_StubDisplay(is_group=True)]).save_group
    assert not compute_availability([_StubDisplay(is_group=True), _StubDisplay()]).save_group


def test_multi_selection_disables_rename():
    """Test Rename is single-selection only."""
    from pyqt_displays.services import Command, compute_availability

    availability = compute_availability([_StubDisplay(), _StubDisplay()])
    assert not availability.is_enabled(Command.RENAME)
    assert availability.is_enabled(Command.DUPLICATE)
    assert availability.is_enabled(Command.REMOVE)
    assert availability.is_enabled(Command.ADD)


def test_suspension_stops_and_restarts():
    """Test the update cycle is stopped inside the block and restarted after."""
    from pyqt_displays.services import UpdateSuspension

    host = _RecordingHost()
    with UpdateSuspension.suspended(host):
        assert host.calls == ["stop"]
        assert UpdateSuspension.is_suspended(host)

    assert host.calls == ["stop", "start"]
    assert not UpdateSuspension.is_suspended(host)


def test_suspension_restarts_after_exception():
    """Test updates resume when the prompt raises."""
    from pyqt_displays.services import UpdateSuspension

    host = _RecordingHost()
    with pytest.raises(RuntimeError):
        with UpdateSuspension.suspended(host):
            raise RuntimeError("dialog failed")

    assert host.calls == ["stop", "start"]
    assert not UpdateSuspension.is_suspended(host)


def test_nested_suspension_restarts_once():
    """Test only the outermost suspension restarts updates."""
    from pyqt_displays.services import UpdateSuspension

    host = _RecordingHost()
    with UpdateSuspension.suspended(host):
        with UpdateSuspension.suspended(host):
            pass
        assert host.calls == ["stop"]

    assert host.calls == ["stop", "start"]


def test_failed_stop_does_not_leave_host_suspended():
    """Test a host whose stop_update() raises is not counted as suspended."""
    from pyqt_displays.services import UpdateSuspension

    class BrokenHost(_RecordingHost):
        def stop_update(self):
            raise RuntimeError("timer gone")

    host = BrokenHost()
    with pytest.raises(RuntimeError):
        with UpdateSuspension.suspended(host):
            pass

    assert not UpdateSuspension.is_suspended(host)
    assert host.calls == []


def test_manager_update_cycle_reaches_enabled_displays(qapp, manager):
    """Test the manager's timer drives update() through the tree."""
    from pyqt_displays.model import Display

    class CountingDisplay(Display):
        updates = 0

        def update(self, dt):
            CountingDisplay.updates += 1

    manager.display_factory.register("test/Counting", CountingDisplay)
    manager.create_display("test/Counting", "Counter")

    manager.start_update()
    assert manager.is_updating
    manager._on_update()
    manager.stop_update()

    assert not manager.is_updating
    assert CountingDisplay.updates == 1
    assert manager.frame_count == 1


def test_manager_load_group_rejects_non_group_class(manager):
    """Test a group file whose root is a leaf class is refused."""
    from pyqt_displays.core import ConfigStore

    store = ConfigStore.from_data({"Class": "displays/Grid", "Name": "Grid"})
    assert manager.load_group(store) is None
    assert manager.display_tree.displays == ()
