"""Tests for the display commands run through the panel's controller."""

import pytest


@pytest.fixture
def scene(manager):
    """leafA, groupB(leafC) at top level."""
    tree = manager.display_tree
    leaf_a = manager.create_display("displays/Grid", "leafA")
    group_b = manager.create_display("displays/Group", "groupB")
    leaf_c = manager.display_factory.create("displays/Axes", "leafC")
    tree.add_display(leaf_c, parent=group_b)
    return leaf_a, group_b, leaf_c


def _selected_in_row_order(panel):
    tree = panel.tree_widget.display_tree
    return sorted(panel.tree_widget.selected_displays(), key=tree.row_of)


def _config_changes(manager):
    changes = []
    manager.config_changed.connect(lambda: changes.append(1))
    return changes


# ========== Duplicate ==========

def test_duplicate_appends_copies_and_selects_them(panel, manager, scene):
    """Test duplicates land at top level in selection order and become the selection."""
    from pyqt_displays.services import Command

    leaf_a, group_b, leaf_c = scene
    changes = _config_changes(manager)
    panel.tree_widget.set_selected_displays([leaf_a, group_b])

    duplicates = panel.controller.execute(Command.DUPLICATE)

    tree = manager.display_tree
    assert [d.name for d in tree.iter_displays()] == [
        "leafA", "groupB", "leafC", "leafA", "groupB", "leafC",
    ]
    assert len(duplicates) == 2
    assert duplicates[0] is not leaf_a and duplicates[1] is not group_b
    assert duplicates[1].children[0] is not leaf_c
    assert _selected_in_row_order(panel) == duplicates
    assert len(changes) == 1


def test_duplicate_copies_parameters(panel, manager, scene):
    """Test a duplicate carries the source's state but not its identity."""
    from pyqt_displays.services import Command

    leaf_a, _, _ = scene
    leaf_a.set_parameter("Cell Size", 0.1)
    leaf_a.set_enabled(False)
    panel.tree_widget.set_selected_displays([leaf_a])

    (duplicate,) = panel.controller.execute(Command.DUPLICATE)

    assert duplicate.parameters == leaf_a.parameters
    assert duplicate.enabled is False
    assert duplicate.handle != leaf_a.handle
    duplicate.set_parameter("Cell Size", 2.0)
    assert leaf_a.get_parameter("Cell Size") == 0.1


def test_duplicate_is_best_effort(panel, manager, dialogs, scene):
    """Test one failing display is reported and the rest are still duplicated."""
    from pyqt_displays.model import FailedDisplay
    from pyqt_displays.services import Command

    leaf_a, group_b, _ = scene
    failed = FailedDisplay("plugins/Lidar", "Lidar", error_message="missing plugin")
    manager.display_tree.add_display(failed)
    panel.tree_widget.set_selected_displays([leaf_a, group_b, failed])

    duplicates = panel.controller.execute(Command.DUPLICATE)

    assert [d.name for d in duplicates] == ["leafA", "groupB"]
    assert len(dialogs.errors) == 1
    title, message = dialogs.errors[0]
    assert title == "Failed to duplicate"
    assert "plugins/Lidar" in message


# ========== Remove ==========

def test_remove_selects_previous_sibling(qapp, panel, manager, scene):
    """Test removing a group also covers its selected child and moves selection up."""
    from pyqt_displays.services import Command

    leaf_a, group_b, leaf_c = scene
    leaf_c.add_listener(lambda event: None)
    changes = _config_changes(manager)
    panel.tree_widget.set_selected_displays([group_b, leaf_c])

    removed = panel.controller.execute(Command.REMOVE)

    assert removed == 1
    assert manager.display_tree.displays == (leaf_a,)
    assert leaf_c.listener_count() == 0
    assert panel.tree_widget.selected_displays() == [leaf_a]
    assert len(changes) == 1
    assert not group_b.is_destroyed

    qapp.processEvents()
    assert group_b.is_destroyed and leaf_c.is_destroyed


def test_remove_first_display_clears_selection(panel, manager, scene):
    """Test selection becomes empty when nothing sits above the removed display."""
    from pyqt_displays.services import Command

    leaf_a, group_b, _ = scene
    panel.tree_widget.set_selected_displays([leaf_a])

    panel.controller.execute(Command.REMOVE)

    assert manager.display_tree.displays == (group_b,)
    assert panel.tree_widget.selected_displays() == []
    assert not panel.controller.availability.remove


def test_remove_child_selects_sibling_in_same_group(panel, manager, scene):
    """Test the previous sibling is looked up under the removed display's parent."""
    from pyqt_displays.services import Command

    _, group_b, leaf_c = scene
    second = manager.display_factory.create("displays/Grid", "second")
    manager.display_tree.add_display(second, parent=group_b)
    panel.tree_widget.set_selected_displays([second])

    panel.controller.execute(Command.REMOVE)

    assert group_b.children == (leaf_c,)
    assert panel.tree_widget.selected_displays() == [leaf_c]


# ========== Rename ==========

def test_rename_updates_tree_item(panel, dialogs, scene):
    """Test a new name is applied and shown."""
    from pyqt_displays.services import Command

    leaf_a, _, _ = scene
    panel.tree_widget.set_selected_displays([leaf_a])
    dialogs.text = "Floor"

    assert panel.controller.execute(Command.RENAME) is True
    assert leaf_a.name == "Floor"
    assert panel.tree_widget.item_for(leaf_a).text(0) == "Floor"


@pytest.mark.parametrize("answer", ["", None, "leafA"])
def test_rename_without_new_name_is_noop(panel, dialogs, scene, answer):
    """Test cancel, empty text and the unchanged name leave the display alone."""
    from pyqt_displays.services import Command

    leaf_a, _, _ = scene
    events = []
    leaf_a.add_listener(events.append)
    panel.tree_widget.set_selected_displays([leaf_a])
    dialogs.text = answer

    assert panel.controller.execute(Command.RENAME) is False
    assert leaf_a.name == "leafA"
    assert events == []


# ========== Group files ==========

def test_save_and_load_group_round_trip(panel, manager, dialogs, scene, tmp_path):
    """Test a saved group file loads back as an equivalent new group."""
    from pyqt_displays.core import ConfigStore
    from pyqt_displays.services import Command

    _, group_b, _ = scene
    group_b.children[0].set_parameter("Length", 3.0)
    panel.tree_widget.set_selected_displays([group_b])
    dialogs.save_path = str(tmp_path / "sensors")

    path = panel.controller.execute(Command.SAVE_GROUP)
    assert path == tmp_path / "sensors.rviz"
    assert path.exists()

    dialogs.open_path = str(path)
    loaded = panel.controller.execute(Command.LOAD_GROUP)

    assert loaded is not group_b
    assert manager.display_tree.displays[-1] is loaded
    original, copy = ConfigStore(), ConfigStore()
    group_b.save(original)
    loaded.save(copy)
    assert copy == original
    assert dialogs.errors == []


def test_save_group_keeps_existing_extension(panel, dialogs, scene, tmp_path):
    """Test the extension is not appended twice."""
    from pyqt_displays.services import Command

    _, group_b, _ = scene
    panel.tree_widget.set_selected_displays([group_b])
    dialogs.save_path = str(tmp_path / "sensors.rviz")

    assert panel.controller.execute(Command.SAVE_GROUP) == tmp_path / "sensors.rviz"


def test_save_group_write_failure_is_reported(panel, dialogs, scene, tmp_path):
    """Test a failed write shows the writer's message."""
    from pyqt_displays.services import Command

    _, group_b, _ = scene
    panel.tree_widget.set_selected_displays([group_b])
    dialogs.save_path = str(tmp_path / "no-such-dir" / "sensors")

    assert panel.controller.execute(Command.SAVE_GROUP) is None
    assert len(dialogs.errors) == 1
    assert dialogs.errors[0][0] == "Failed to save."


def test_save_group_requires_group_selection(panel, dialogs, scene):
    """Test Save Group does nothing for a leaf."""
    from pyqt_displays.services import Command

    leaf_a, _, _ = scene
    panel.tree_widget.set_selected_displays([leaf_a])

    assert panel.controller.execute(Command.SAVE_GROUP) is None
    assert dialogs.prompts == []


def test_load_group_missing_file(panel, manager, dialogs, scene, tmp_path):
    """Test a missing file is reported and the tree is unchanged."""
    from pyqt_displays.services import Command

    before = manager.display_tree.displays
    filename = str(tmp_path / "missing.cfg")
    dialogs.open_path = filename

    assert panel.controller.execute(Command.LOAD_GROUP) is None
    assert dialogs.errors == [("Config file does not exist", f"{filename} does not exist!")]
    assert manager.display_tree.displays == before


def test_load_group_unparsable_file_is_silent(panel, manager, dialogs, scene, tmp_path):
    """Test a read failure aborts without an error dialog."""
    from pyqt_displays.services import Command

    path = tmp_path / "broken.rviz"
    path.write_text("Name: [unclosed", encoding="utf-8")
    before = manager.display_tree.displays
    dialogs.open_path = str(path)

    assert panel.controller.execute(Command.LOAD_GROUP) is None
    assert dialogs.errors == []
    assert manager.display_tree.displays == before


@pytest.mark.parametrize("content", [
    b"\xff\xfe\x00Name: x\n",
    b"Displays: &a [*a]\n",
], ids=["not-utf8", "self-referencing-anchor"])
def test_load_group_unreadable_content_is_silent(panel, manager, dialogs, tmp_path, content):
    """Test undecodable or cyclic files abort the load without raising."""
    from pyqt_displays.services import Command

    path = tmp_path / "bad.rviz"
    path.write_bytes(content)
    dialogs.open_path = str(path)

    assert panel.controller.execute(Command.LOAD_GROUP) is None
    assert dialogs.errors == []
    assert manager.display_tree.displays == ()


def test_save_group_unsaveable_child_is_reported(panel, manager, dialogs, scene, tmp_path):
    """Test a child whose state cannot be stored fails the save with a dialog."""
    from pyqt_displays.model import Display
    from pyqt_displays.services import Command

    class SetSavingDisplay(Display):
        def save(self, store):
            super().save(store)
            store.map_set_value("Frames", {"map", "odom"})

    _, group_b, _ = scene
    manager.display_factory.register("test/SetSaving", SetSavingDisplay)
    manager.display_tree.add_display(
        manager.display_factory.create("test/SetSaving", "Frames"), parent=group_b)
    panel.tree_widget.set_selected_displays([group_b])
    dialogs.save_path = str(tmp_path / "sensors")

    assert panel.controller.execute(Command.SAVE_GROUP) is None
    assert [title for title, _ in dialogs.errors] == ["Failed to save."]
    assert not (tmp_path / "sensors.rviz").exists()


def test_load_group_cancelled(panel, manager, dialogs):
    """Test cancelling the open prompt does nothing."""
    from pyqt_displays.services import Command

    manager.start_update()
    assert panel.controller.execute(Command.LOAD_GROUP) is None
    assert dialogs.prompts == ["open_path"]
    assert manager.is_updating


# ========== Add ==========

def test_add_display_with_topic_suspends_updates(panel, manager, dialogs):
    """Test the add prompt runs with updates stopped and the topic is applied."""
    from pyqt_displays.protocols import NewDisplayRequest
    from pyqt_displays.services import Command

    manager.start_update()
    updating_during_prompt = []
    dialogs.on_prompt = lambda: updating_during_prompt.append(manager.is_updating)
    dialogs.new_display = NewDisplayRequest("displays/Grid", "Floor", "/grid", "nav/Grid")

    display = panel.controller.execute(Command.ADD)

    assert updating_during_prompt == [False]
    assert manager.is_updating
    assert display.name == "Floor"
    assert display.get_parameter("Topic") == "/grid"
    assert display.get_parameter("Datatype") == "nav/Grid"
    assert manager.display_tree.displays == (display,)


def test_add_display_cancel_resumes_updates(panel, manager, dialogs):
    """Test cancelling the add prompt creates nothing and restarts updates."""
    from pyqt_displays.services import Command

    manager.start_update()
    assert panel.controller.execute(Command.ADD) is None
    assert manager.is_updating
    assert manager.display_tree.displays == ()


def test_add_display_default_name(panel, dialogs):
    """Test a blank name falls back to the configured default."""
    from pyqt_displays.protocols import NewDisplayRequest
    from pyqt_displays.services import Command

    dialogs.new_display = NewDisplayRequest("displays/Axes", "")
    display = panel.controller.execute(Command.ADD)

    assert display.name == "Display"
    assert display.get_parameter("Topic") is None


def test_add_unknown_class_reports_error(panel, manager, dialogs):
    """Test an unregistered class shows an error and adds nothing."""
    from pyqt_displays.protocols import NewDisplayRequest
    from pyqt_displays.services import Command

    dialogs.new_display = NewDisplayRequest("plugins/Missing", "Missing")

    assert panel.controller.execute(Command.ADD) is None
    assert dialogs.errors[0][0] == "Failed to add display"
    assert manager.display_tree.displays == ()


# ========== Dispatch ==========

def test_disabled_commands_do_nothing(panel, dialogs, scene):
    """Test commands that need a selection are ignored without one."""
    from pyqt_displays.services import Command

    for command in (Command.DUPLICATE, Command.REMOVE, Command.RENAME, Command.SAVE_GROUP):
        assert panel.controller.execute(command) is None
    assert dialogs.prompts == []


def test_controller_without_dialog_provider_raises(manager, qapp):
    """Test a missing dialog provider is reported clearly."""
    from pyqt_displays.services import CommandController
    from pyqt_displays.widgets import DisplayTreeWidget

    controller = CommandController(manager, DisplayTreeWidget(manager.display_tree))
    with pytest.raises(RuntimeError):
        controller.add_display()
