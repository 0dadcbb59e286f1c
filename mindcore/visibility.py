"""Derived visibility of nodes and connections under collapse flags."""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from mindcore.models import Connection
from mindcore.store import NodeStore


@dataclass
class VisibilityMap:
    """Visibility of every node and connection at one point in time."""
    nodes: Dict[str, bool] = field(default_factory=dict)
    connections: Dict[Tuple[str, str], bool] = field(default_factory=dict)

    @property
    def hidden_count(self) -> int:
        return sum(1 for visible in self.nodes.values() if not visible)


class VisibilityEngine:
    """Answers which nodes and connections are shown, given collapse flags."""

    def __init__(self, store: NodeStore):
        self.store = store

    def is_visible(self, node_id: str) -> bool:
        """True iff no ancestor of the node is collapsed."""
        node = self.store.get(node_id)
        while node.parent is not None:
            node = self.store.get(node.parent)
            if node.collapsed:
                return False
        return True

    def connection_visible(self, connection: Connection) -> bool:
        parent = self.store.get(connection.parent)
        if parent.collapsed:
            return False
        return self.is_visible(connection.parent) and self.is_visible(connection.child)

    def toggle_collapse(self, node_id: str) -> bool:
        """Flip the collapse flag of a node; leaves are left alone.

        Returns True if the flag changed. Callers should run recompute()
        afterwards.
        """
        node = self.store.get(node_id)
        if node.is_leaf:
            return False
        return self.store.set_collapsed(node_id, not node.collapsed)

    def recompute(self) -> VisibilityMap:
        """Compute visibility for the whole tree in one pre-order pass."""
        result = VisibilityMap()
        root_id = self.store.root_id
        if root_id is None:
            return result

        # (node id, whether the node itself is shown)
        stack = [(root_id, True)]
        while stack:
            node_id, visible = stack.pop()
            node = self.store.get(node_id)
            result.nodes[node_id] = visible
            children_visible = visible and not node.collapsed
            for child_id in node.children:
                stack.append((child_id, children_visible))

        for connection in self.store.connections:
            parent_visible = result.nodes.get(connection.parent, False)
            child_visible = result.nodes.get(connection.child, False)
            parent_collapsed = self.store.get(connection.parent).collapsed
            result.connections[connection.as_tuple()] = (
                parent_visible and child_visible and not parent_collapsed
            )
        return result
