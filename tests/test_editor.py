"""Tests for the editor command facade."""

import random

import pytest

from mindcore import MindMapEditor, EditorSettings, MalformedDocument, NodeColor
from mindcore.history import Snapshot


def test_starts_with_selected_root(editor):
    assert len(editor.store) == 1
    assert editor.store.selected_id == editor.store.root_id
    assert editor.store.root.text == "Center"
    assert not editor.can_undo


def test_add_child_uses_selection(editor):
    first = editor.add_child()
    assert first.parent == editor.store.root_id
    # the new child becomes the selection
    second = editor.add_child()
    assert second.parent == first.id
    assert editor.store.selected_id == second.id


def test_add_child_without_selection(editor):
    editor.deselect()
    assert editor.add_child() is None
    assert len(editor.store) == 1


def test_one_snapshot_per_command(editor):
    start = len(editor.history)
    child = editor.add_child(text="A")
    editor.set_text(child.id, "B")
    editor.set_color(child.id, "red")
    editor.set_position(child.id, 5, 5)
    editor.delete_subtree(child.id)
    assert len(editor.history) == start + 5


def test_state_published_after_each_command(editor):
    states = []
    editor.on_state_changed = states.append
    child = editor.add_child(text="A")
    editor.undo()
    editor.redo()
    assert len(states) == 3
    assert states[0].node(child.id) is not None
    assert states[0].can_undo and not states[0].can_redo
    assert states[1].node(child.id) is None
    assert states[1].can_redo
    assert states[2].node(child.id) is not None


def test_state_is_detached_copy(editor):
    state = editor.state
    state.nodes[0].children.append("bogus")
    state.nodes[0].text = "bogus"
    assert editor.store.root.children == []
    assert editor.store.root.text == "Center"


def test_state_visibility(sample_editor):
    a = sample_editor.store.root.children[0]
    sample_editor.toggle_collapse(a)
    state = sample_editor.state
    hidden = [n.text for n in state.nodes if not state.node_visibility[n.id]]
    assert sorted(hidden) == ["A1", "A2"]
    assert state.connection_visibility[(sample_editor.store.root_id, a)] is True


def test_collapse_is_undoable(sample_editor):
    a = sample_editor.store.root.children[0]
    sample_editor.toggle_collapse(a)
    sample_editor.undo()
    assert sample_editor.store.get(a).collapsed is False


def test_select_after_undo_keeps_redo(sample_editor):
    count = len(sample_editor.history)
    sample_editor.undo()
    sample_editor.select(sample_editor.store.root_id)
    assert sample_editor.can_redo
    assert len(sample_editor.history) == count
    assert sample_editor.redo()


def test_select_publishes_state(editor):
    child = editor.add_child()
    states = []
    editor.on_state_changed = states.append
    editor.select(editor.store.root_id)
    assert len(states) == 1
    assert states[0].selected_id == editor.store.root_id
    assert states[0].can_undo
    editor.select(child.id)
    assert len(editor.history) == 2


def test_delete_root_is_noop(editor):
    assert editor.delete_subtree() is False
    assert len(editor.store) == 1


def test_undo_never_empties(editor):
    for _ in range(5):
        editor.undo()
    assert len(editor.store) == 1


def test_invariants_hold_for_random_commands():
    rng = random.Random(1234)
    editor = MindMapEditor()
    for _ in range(300):
        ids = list(editor.store.nodes)
        target = rng.choice(ids)
        command = rng.choice(["add", "add", "delete", "text", "color", "move",
                              "collapse", "undo", "redo"])
        if command == "add":
            editor.add_child(target)
        elif command == "delete":
            editor.delete_subtree(target)
        elif command == "text":
            editor.set_text(target, rng.choice(["", "x", "y"]))
        elif command == "color":
            editor.set_color(target, rng.choice(list(NodeColor)))
        elif command == "move":
            editor.set_position(target, rng.random() * 800, rng.random() * 600)
        elif command == "collapse":
            editor.toggle_collapse(target)
        elif command == "undo":
            editor.undo()
        else:
            editor.redo()
        editor.store.validate()
        assert len(editor.history) <= 50


def test_undo_redo_symmetry_through_editor(sample_editor):
    final = Snapshot.capture(sample_editor.store)
    steps = 0
    while sample_editor.undo():
        steps += 1
    for _ in range(steps):
        sample_editor.redo()
    assert Snapshot.capture(sample_editor.store) == final


def test_sixty_commits_keep_fifty_snapshots(editor):
    for i in range(60):
        editor.set_position(editor.store.root_id, float(i), 0.0)
    assert len(editor.history) == 50
    while editor.undo():
        pass
    assert editor.store.root.x == 10.0


def test_document_round_trip(sample_editor):
    sample_editor.zoom(2.0)
    sample_editor.set_theme("dark")
    text = sample_editor.export_document()
    before = Snapshot.capture(sample_editor.store)

    other = MindMapEditor()
    other.import_document(text)
    after = Snapshot.capture(other.store)
    assert after.nodes == before.nodes
    assert after.connections == before.connections
    assert other.view.scale == 2.0
    assert other.view.theme == "dark"
    # import is a single undoable step
    other.undo()
    assert len(other.store) == 1


def test_import_document_failure_keeps_state(sample_editor):
    before = Snapshot.capture(sample_editor.store)
    history_len = len(sample_editor.history)
    with pytest.raises(MalformedDocument):
        sample_editor.import_document('{"nodes": "nope"}')
    assert Snapshot.capture(sample_editor.store) == before
    assert len(sample_editor.history) == history_len


def test_import_outline(editor):
    assert editor.import_outline("# A\n## B\n## C\n### D") is True
    assert [n.text for n in editor.store.walk()] == ["A", "B", "C", "D"]
    assert editor.store.selected_id == editor.store.root_id
    editor.undo()
    assert editor.store.root.text == "Center"


def test_import_empty_outline_falls_back(sample_editor):
    assert sample_editor.import_outline("nothing to see here") is False
    assert len(sample_editor.store) == 1
    assert sample_editor.store.root.text == "Central Topic"


def test_new_document_clears_history(sample_editor):
    sample_editor.new_document()
    assert len(sample_editor.store) == 1
    assert not sample_editor.can_undo
    assert not sample_editor.can_redo


def test_zoom_is_clamped(editor):
    for _ in range(20):
        editor.zoom(1.5)
    assert editor.view.scale == 3.0
    for _ in range(40):
        editor.zoom(0.5)
    assert editor.view.scale == pytest.approx(0.1)
    editor.pan_by(10, -5)
    editor.reset_view()
    assert (editor.view.scale, editor.view.pan_x, editor.view.pan_y) == (1.0, 0.0, 0.0)


def test_view_changes_are_not_history(editor):
    start = len(editor.history)
    editor.zoom(2.0)
    editor.set_theme("dark")
    assert len(editor.history) == start


def test_settings_are_used():
    settings = EditorSettings(max_history_size=5, placeholder_text="Idea", root_text="Hub")
    editor = MindMapEditor(settings)
    assert editor.store.root.text == "Hub"
    child = editor.add_child()
    assert child.text == "Idea"
    for i in range(10):
        editor.set_position(child.id, float(i), 0.0)
    assert len(editor.history) == 5


def test_auto_layout(sample_editor):
    sample_editor.auto_layout()
    root = sample_editor.store.root
    assert (root.x, root.y) == (400.0, 300.0)
