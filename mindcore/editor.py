"""Command facade used by a UI layer to drive a mind map document."""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, List, Dict, Tuple, Callable, Union

from mindcore import document, outline
from mindcore.config import EditorSettings
from mindcore.errors import EmptyOutline
from mindcore.history import HistoryManager
from mindcore.layout import apply_radial_layout
from mindcore.models import Node, Connection, NodeColor, ViewState
from mindcore.store import NodeStore
from mindcore.visibility import VisibilityEngine

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    """Everything a UI layer needs to draw the current document."""
    nodes: List[Node] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)
    node_visibility: Dict[str, bool] = field(default_factory=dict)
    connection_visibility: Dict[Tuple[str, str], bool] = field(default_factory=dict)
    selected_id: Optional[str] = None
    can_undo: bool = False
    can_redo: bool = False
    view: ViewState = field(default_factory=ViewState)

    def node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class MindMapEditor:
    """Wires the store, history, visibility and serializers together.

    Every command that changes the tree produces exactly one history
    snapshot and one ``on_state_changed`` call.
    """

    def __init__(self, settings: Optional[EditorSettings] = None,
                 root_text: Optional[str] = None, create_root: bool = True):
        self.settings = settings or EditorSettings()
        self.store = NodeStore(
            placeholder_text=self.settings.placeholder_text,
            child_radius=self.settings.child_radius,
        )
        self.history = HistoryManager(self.store, self.settings.max_history_size)
        self.visibility = VisibilityEngine(self.store)
        self.view = ViewState(theme=self.settings.default_theme)

        # Callbacks
        self.on_state_changed: Optional[Callable[[EditorState], None]] = None

        # History first, so published state already reflects the commit
        self.history.attach()
        self.store.add_listener(self._on_store_changed)

        if create_root:
            self.create_root(root_text if root_text is not None else self.settings.root_text)

    # ==================== State ====================

    @property
    def state(self) -> EditorState:
        """Build a detached copy of the current document state."""
        visibility = self.visibility.recompute()
        return EditorState(
            nodes=[replace(n, children=list(n.children)) for n in self.store.nodes.values()],
            connections=self.store.connections,
            node_visibility=visibility.nodes,
            connection_visibility=visibility.connections,
            selected_id=self.store.selected_id,
            can_undo=self.history.can_undo,
            can_redo=self.history.can_redo,
            view=replace(self.view),
        )

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def _on_store_changed(self, reason: str):
        self._publish()

    def _publish(self):
        if self.on_state_changed:
            self.on_state_changed(self.state)

    # ==================== Node Commands ====================

    def create_root(self, text: Optional[str] = None) -> Node:
        """Create the root of an empty document and select it."""
        return self.store.create_root(text or self.settings.root_text, select=True)

    def add_child(self, parent_id: Optional[str] = None, text: Optional[str] = None,
                  color: Optional[Union[NodeColor, str]] = None) -> Optional[Node]:
        """Add a child to ``parent_id`` (or the selected node) and select it."""
        target = parent_id if parent_id is not None else self.store.selected_id
        if target is None:
            return None
        return self.store.add_child(
            target,
            text if text is not None else self.settings.placeholder_text,
            color=color,
            select=True,
        )

    def delete_subtree(self, node_id: Optional[str] = None) -> bool:
        """Delete ``node_id`` (or the selected node) with its descendants."""
        target = node_id if node_id is not None else self.store.selected_id
        if target is None:
            return False
        return self.store.delete_subtree(target)

    def set_text(self, node_id: str, text: str):
        self.store.set_text(node_id, text)

    def set_color(self, node_id: str, color: Union[NodeColor, str]):
        self.store.set_color(node_id, color)

    def set_position(self, node_id: str, x: float, y: float):
        self.store.set_position(node_id, x, y)

    def toggle_collapse(self, node_id: Optional[str] = None) -> bool:
        target = node_id if node_id is not None else self.store.selected_id
        if target is None:
            return False
        return self.visibility.toggle_collapse(target)

    def select(self, node_id: Optional[str]):
        self.store.select(node_id)

    def deselect(self):
        self.store.deselect()

    def auto_layout(self):
        """Re-place every node with the radial layout."""
        apply_radial_layout(self.store, radius_step=self.settings.layout_radius_step)

    def new_document(self, text: Optional[str] = None):
        """Start over with a single root and an empty history."""
        self.store.reset(text or self.settings.root_text)
        self.history.reset()
        self.view = ViewState(theme=self.view.theme)
        self._publish()

    # ==================== Undo/Redo ====================

    def undo(self) -> bool:
        """Undo the last change."""
        return self.history.undo()

    def redo(self) -> bool:
        """Redo the last undone change."""
        return self.history.redo()

    # ==================== View ====================

    def zoom(self, factor: float):
        self.view.zoom(factor)
        self._publish()

    def pan_by(self, dx: float, dy: float):
        self.view.pan_x += dx
        self.view.pan_y += dy
        self._publish()

    def reset_view(self):
        self.view.reset()
        self._publish()

    def set_theme(self, theme: str):
        self.view.theme = theme
        self._publish()

    # ==================== Import/Export ====================

    def export_document(self) -> str:
        return document.export_document(self.store, self.view)

    def import_document(self, text: str):
        """Load a structured document; raises MalformedDocument on bad input."""
        self.view = document.import_document(self.store, text)
        self._publish()

    def export_outline(self) -> str:
        return outline.export_outline(self.store)

    def import_outline(self, text: str) -> bool:
        """Load an outline.

        If the text has no usable lines the document is reset to a single
        default root and False is returned.
        """
        try:
            outline.import_outline(self.store, text, self.settings.layout_radius_step)
        except EmptyOutline:
            logger.warning("Outline had no headings or list items, starting a new map")
            self.store.reset(self.settings.root_text)
            return False
        return True
