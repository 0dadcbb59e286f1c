"""Tests for the structured JSON document format."""

import json

import pytest

from mindcore import MalformedDocument, NodeStore, ViewState
from mindcore.document import export_document, import_document, parse_document
from mindcore.history import Snapshot


def _tree_signature(store):
    return [
        (n.id, n.text, n.parent, tuple(n.children), n.color, n.collapsed, n.x, n.y)
        for n in store.nodes.values()
    ]


def test_export_schema(store):
    store.add_child(store.root_id, "A")
    data = json.loads(export_document(store, ViewState(scale=1.5, pan_x=3, pan_y=4, theme="dark")))

    assert set(data) == {"nodes", "connections", "scale", "panX", "panY", "theme"}
    node = data["nodes"][1]
    assert set(node) == {"id", "x", "y", "text", "children", "parent", "color", "collapsed"}
    assert node["parent"] == store.root_id
    assert node["color"] == "blue"
    assert data["connections"][0]["parent"] == store.root_id
    assert data["scale"] == 1.5
    assert data["theme"] == "dark"


def test_round_trip(store):
    root_id = store.root_id
    a = store.add_child(root_id, "A")
    store.add_child(a.id, "A1")
    store.add_child(root_id, "B", color="red")
    store.set_collapsed(a.id, True)
    before = _tree_signature(store)
    text = export_document(store)

    other = NodeStore()
    other.create_root("Something else")
    view = import_document(other, text)

    assert _tree_signature(other) == before
    assert [c.as_tuple() for c in other.connections] == [c.as_tuple() for c in store.connections]
    assert view.scale == 1.0
    other.validate()


def test_import_replaces_existing_state(sample_editor):
    text = sample_editor.export_document()
    store = NodeStore()
    store.create_root("Old")
    store.add_child(store.root_id, "Old child")
    import_document(store, text)
    assert [n.text for n in store.walk()] == ["Center", "A", "A1", "A2", "B"]


def test_theme_is_optional(store):
    data = json.loads(export_document(store))
    del data["theme"]
    parsed = parse_document(json.dumps(data))
    assert parsed.view.theme == "mac-light"


@pytest.mark.parametrize("text", [
    "not json",
    "[]",
    '{"nodes": []}',
    '{"nodes": [], "connections": [], "scale": 1, "panX": 0, "panY": 0}',
])
def test_malformed_documents(store, text):
    before = Snapshot.capture(store)
    with pytest.raises(MalformedDocument):
        import_document(store, text)
    assert Snapshot.capture(store) == before


@pytest.mark.parametrize("scale", [0, -5])
def test_non_positive_scale_rejected(store, scale):
    data = json.loads(export_document(store))
    data["scale"] = scale
    before = Snapshot.capture(store)
    with pytest.raises(MalformedDocument):
        import_document(store, json.dumps(data))
    assert Snapshot.capture(store) == before


@pytest.mark.parametrize("scale, expected", [(50, 3.0), (0.01, 0.1), (1.5, 1.5)])
def test_scale_clamped_to_zoom_range(store, scale, expected):
    data = json.loads(export_document(store))
    data["scale"] = scale
    assert parse_document(json.dumps(data)).view.scale == pytest.approx(expected)


def test_missing_node_field(store):
    data = json.loads(export_document(store))
    del data["nodes"][0]["collapsed"]
    with pytest.raises(MalformedDocument):
        parse_document(json.dumps(data))


def test_unknown_color(store):
    data = json.loads(export_document(store))
    data["nodes"][0]["color"] = "chartreuse"
    with pytest.raises(MalformedDocument):
        parse_document(json.dumps(data))


def test_dangling_connection(store):
    data = json.loads(export_document(store))
    data["connections"].append({"parent": store.root_id, "child": "node-42"})
    with pytest.raises(MalformedDocument):
        parse_document(json.dumps(data))


def test_two_roots(store):
    data = json.loads(export_document(store))
    extra = dict(data["nodes"][0], id="node-9")
    data["nodes"].append(extra)
    before = Snapshot.capture(store)
    with pytest.raises(MalformedDocument):
        import_document(store, json.dumps(data))
    assert Snapshot.capture(store) == before
