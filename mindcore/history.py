"""Snapshot-based undo/redo for a NodeStore."""

import logging
from dataclasses import dataclass
from typing import Optional, List, Tuple, Callable

from mindcore.config import MAX_HISTORY_SIZE, ROOT_TEXT
from mindcore.models import Node, Connection, NodeColor
from mindcore.store import NodeStore, SELECT_REASON

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeRecord:
    """Immutable copy of the structural fields of one node."""
    id: str
    x: float
    y: float
    text: str
    color: str
    children: Tuple[str, ...]
    parent: Optional[str]
    collapsed: bool

    @classmethod
    def from_node(cls, node: Node) -> "NodeRecord":
        return cls(
            id=node.id,
            x=node.x,
            y=node.y,
            text=node.text,
            color=node.color.value,
            children=tuple(node.children),
            parent=node.parent,
            collapsed=node.collapsed,
        )

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            text=self.text,
            x=self.x,
            y=self.y,
            color=NodeColor(self.color),
            children=list(self.children),
            parent=self.parent,
            collapsed=self.collapsed,
        )


@dataclass(frozen=True)
class Snapshot:
    """A fully owned copy of a store's nodes, connections and selection.

    Snapshots share nothing mutable with the live store, so two of them
    compare equal exactly when the captured states are the same.
    """
    nodes: Tuple[NodeRecord, ...]
    connections: Tuple[Tuple[str, str], ...]
    selected_id: Optional[str] = None

    @classmethod
    def capture(cls, store: NodeStore) -> "Snapshot":
        return cls(
            nodes=tuple(NodeRecord.from_node(n) for n in store.nodes.values()),
            connections=tuple(c.as_tuple() for c in store.connections),
            selected_id=store.selected_id,
        )

    @property
    def node_count(self) -> int:
        return len(self.nodes)


class HistoryManager:
    """Manages undo/redo history as a list of whole-tree snapshots."""

    def __init__(self, store: NodeStore, max_history_size: int = MAX_HISTORY_SIZE):
        self.store = store
        self.max_history_size = max_history_size
        self._snapshots: List[Snapshot] = []
        self._index = -1
        self._restoring = False

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    @property
    def index(self) -> int:
        return self._index

    @property
    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshots)

    @property
    def current(self) -> Optional[Snapshot]:
        if 0 <= self._index < len(self._snapshots):
            return self._snapshots[self._index]
        return None

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self._index < len(self._snapshots) - 1

    def attach(self):
        """Commit automatically after every store mutation."""
        self.store.add_listener(self._on_store_changed)

    def detach(self):
        self.store.remove_listener(self._on_store_changed)

    def _on_store_changed(self, reason: str):
        # Selection rides along in the next snapshot
        if reason == SELECT_REASON:
            return
        self.commit()

    def commit(self) -> bool:
        """Record the current store state. Returns True if a snapshot was added."""
        if self._restoring:
            return False

        snapshot = Snapshot.capture(self.store)
        if self.current == snapshot:
            return False

        # Drop the redo branch
        del self._snapshots[self._index + 1:]
        self._snapshots.append(snapshot)
        self._index += 1

        # Trim history if needed
        while len(self._snapshots) > self.max_history_size:
            self._snapshots.pop(0)
            self._index -= 1
            logger.debug("History full, evicted oldest snapshot")

        logger.debug("Committed snapshot %d (%d nodes)", self._index, snapshot.node_count)
        self._notify_changed()
        return True

    def undo(self) -> bool:
        """Step back one snapshot. Returns True if the store changed."""
        if self._index <= 0:
            return False

        previous = self._snapshots[self._index - 1]
        if previous.node_count == 0:
            logger.warning("Refusing to undo into a snapshot with no nodes")
            return False

        self._index -= 1
        self.restore(previous)
        self._notify_changed()
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns True if the store changed."""
        if self._index >= len(self._snapshots) - 1:
            return False

        self._index += 1
        self.restore(self._snapshots[self._index])
        self._notify_changed()
        return True

    def restore(self, snapshot: Snapshot):
        """Rebuild the store from a snapshot without recording new history."""
        self._restoring = True
        try:
            if snapshot.node_count == 0:
                logger.warning("Snapshot has no nodes, creating a default root")
                self.store.reset(ROOT_TEXT)
                return

            nodes = [record.to_node() for record in snapshot.nodes]
            connections = [Connection(p, c) for p, c in snapshot.connections]
            ids = {record.id for record in snapshot.nodes}
            selected = snapshot.selected_id if snapshot.selected_id in ids else None
            self.store.load(nodes, connections, selected, reason="restore")
        finally:
            self._restoring = False

    def reset(self):
        """Forget all history and take a new baseline snapshot."""
        self._snapshots.clear()
        self._index = -1
        self.commit()

    def _notify_changed(self):
        """Notify that undo/redo state changed."""
        if self.on_state_changed:
            self.on_state_changed()
