import pytest

from mindcore import MindMapEditor, NodeStore


@pytest.fixture
def store():
    s = NodeStore()
    s.create_root("Center")
    return s


@pytest.fixture
def editor():
    return MindMapEditor(root_text="Center")


@pytest.fixture
def sample_editor():
    """Center -> (A -> (A1, A2), B)"""
    ed = MindMapEditor(root_text="Center")
    root_id = ed.store.root_id
    a = ed.add_child(root_id, "A")
    ed.add_child(a.id, "A1")
    ed.add_child(a.id, "A2")
    ed.add_child(root_id, "B")
    return ed
