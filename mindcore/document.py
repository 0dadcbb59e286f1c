"""Structured (JSON) documents: lossless export and import of a whole map."""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mindcore.config import DEFAULT_THEME, MIN_SCALE, MAX_SCALE
from mindcore.errors import MalformedDocument, InvariantViolation
from mindcore.models import Node, Connection, NodeColor, ViewState
from mindcore.store import NodeStore

logger = logging.getLogger(__name__)


# ── Wire schema ──────────────────────────────────────────────────────────────

class NodeSchema(BaseModel):
    """A single node as stored in a document."""
    model_config = ConfigDict(extra="ignore")

    id: str
    x: float
    y: float
    text: str
    children: List[str]
    parent: Optional[str]
    color: NodeColor
    collapsed: bool


class ConnectionSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parent: str
    child: str


class DocumentSchema(BaseModel):
    """Top-level structured document."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    nodes: List[NodeSchema]
    connections: List[ConnectionSchema]
    scale: float = Field(gt=0, allow_inf_nan=False)
    pan_x: float = Field(alias="panX")
    pan_y: float = Field(alias="panY")
    theme: str = DEFAULT_THEME


@dataclass
class ParsedDocument:
    """A validated document, ready to be loaded into a store."""
    nodes: List[Node]
    connections: List[Connection]
    view: ViewState


# ── Export ───────────────────────────────────────────────────────────────────

def document_dict(store: NodeStore, view: Optional[ViewState] = None) -> dict:
    """Build the plain-dict form of a structured document."""
    view = view or ViewState()
    return {
        "nodes": [
            {
                "id": node.id,
                "x": node.x,
                "y": node.y,
                "text": node.text,
                "children": list(node.children),
                "parent": node.parent,
                "color": node.color.value,
                "collapsed": node.collapsed,
            }
            for node in store.nodes.values()
        ],
        "connections": [
            {"id": c.id, "parent": c.parent, "child": c.child}
            for c in store.connections
        ],
        "scale": view.scale,
        "panX": view.pan_x,
        "panY": view.pan_y,
        "theme": view.theme,
    }


def export_document(store: NodeStore, view: Optional[ViewState] = None) -> str:
    """Serialize the whole map and view state to JSON text."""
    return json.dumps(document_dict(store, view), indent=2, ensure_ascii=False)


# ── Import ───────────────────────────────────────────────────────────────────

def parse_document(text: str) -> ParsedDocument:
    """Parse and validate a document without touching any store.

    Raises MalformedDocument if the text is not JSON, does not match the
    schema, or does not describe a single well-formed tree.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedDocument(f"Document is not valid JSON: {exc}") from exc

    try:
        schema = DocumentSchema.model_validate(data)
    except ValidationError as exc:
        raise MalformedDocument(f"Document does not match the schema: {exc}") from exc

    nodes = [
        Node(
            id=n.id,
            text=n.text,
            x=n.x,
            y=n.y,
            color=n.color,
            children=list(n.children),
            parent=n.parent,
            collapsed=n.collapsed,
        )
        for n in schema.nodes
    ]
    connections = [Connection(c.parent, c.child) for c in schema.connections]
    view = ViewState(
        scale=max(MIN_SCALE, min(MAX_SCALE, schema.scale)),
        pan_x=schema.pan_x,
        pan_y=schema.pan_y,
        theme=schema.theme,
    )

    # Check the tree shape in a scratch store so the caller's is untouched
    scratch = NodeStore()
    try:
        scratch.load(nodes, connections)
    except InvariantViolation as exc:
        raise MalformedDocument(f"Document is not a valid tree: {exc}") from exc

    return ParsedDocument(nodes=nodes, connections=connections, view=view)


def import_document(store: NodeStore, text: str) -> ViewState:
    """Replace the store's contents with a parsed document.

    Either the whole document is loaded or the store is left as it was.
    Returns the document's view state for the caller to apply.
    """
    try:
        parsed = parse_document(text)
    except MalformedDocument:
        logger.warning("Rejected malformed document")
        raise

    store.load(parsed.nodes, parsed.connections, reason="import_document")
    logger.debug("Imported document with %d nodes", len(parsed.nodes))
    return parsed.view
