"""mindcore - the document model behind an interactive mind map editor.

Usage:
    from mindcore import MindMapEditor

    editor = MindMapEditor(root_text="Center")
    child = editor.add_child()          # child of the selected node
    editor.set_text(child.id, "Idea")
    editor.undo()

    text = editor.export_document()     # lossless JSON
    md = editor.export_outline()        # Markdown outline
"""

__version__ = "1.0.0"

from mindcore.config import EditorSettings
from mindcore.editor import MindMapEditor, EditorState
from mindcore.errors import (
    MindMapError,
    NotFound,
    InvariantViolation,
    MalformedDocument,
    EmptyOutline,
)
from mindcore.history import HistoryManager, Snapshot
from mindcore.models import Node, Connection, NodeColor, ViewState
from mindcore.store import NodeStore
from mindcore.visibility import VisibilityEngine, VisibilityMap

__all__ = [
    "EditorSettings",
    "MindMapEditor",
    "EditorState",
    "MindMapError",
    "NotFound",
    "InvariantViolation",
    "MalformedDocument",
    "EmptyOutline",
    "HistoryManager",
    "Snapshot",
    "Node",
    "Connection",
    "NodeColor",
    "ViewState",
    "NodeStore",
    "VisibilityEngine",
    "VisibilityMap",
]
