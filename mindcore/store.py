"""Canonical node/connection tree for a mind map document."""

import logging
import math
import re
from typing import Optional, List, Dict, Tuple, Callable, Iterator, Iterable, Union

from mindcore.config import (
    ROOT_TEXT,
    PLACEHOLDER_TEXT,
    ROOT_CENTER,
    CHILD_RADIUS,
    CHILD_ANGLE_STEP,
    size_for_depth,
)
from mindcore.errors import NotFound, InvariantViolation
from mindcore.models import Node, Connection, NodeColor

logger = logging.getLogger(__name__)

_NODE_ID_RE = re.compile(r"^node-(\d+)$")

Listener = Callable[[str], None]

# Notification reason for selection changes; not an undoable edit
SELECT_REASON = "select"


def coerce_color(color: Union[NodeColor, str]) -> NodeColor:
    """Accept a NodeColor or its tag string."""
    if isinstance(color, NodeColor):
        return color
    try:
        return NodeColor(color)
    except ValueError:
        raise ValueError(f"Unknown node color: {color!r}") from None


class NodeStore:
    """Owns every node and connection of one document.

    Nodes live in an id-keyed mapping; parent and children links are ids.
    Each public mutation notifies the registered listeners exactly once,
    after the tree and the derived node sizes are consistent again.
    """

    def __init__(self, placeholder_text: str = PLACEHOLDER_TEXT,
                 child_radius: float = CHILD_RADIUS):
        self.placeholder_text = placeholder_text
        self.child_radius = child_radius
        self._nodes: Dict[str, Node] = {}
        self._connections: List[Connection] = []
        self._selected_id: Optional[str] = None
        self._next_id = 0
        self._listeners: List[Listener] = []

    # ==================== Listeners ====================

    def add_listener(self, callback: Listener):
        """Register a callback invoked with a reason after each mutation."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, reason: str):
        for callback in list(self._listeners):
            callback(reason)

    # ==================== Queries ====================

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> Dict[str, Node]:
        """Read-only view: a shallow copy of the id -> node mapping."""
        return dict(self._nodes)

    @property
    def connections(self) -> List[Connection]:
        return list(self._connections)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def root_id(self) -> Optional[str]:
        for node in self._nodes.values():
            if node.parent is None:
                return node.id
        return None

    @property
    def root(self) -> Optional[Node]:
        root_id = self.root_id
        return self._nodes[root_id] if root_id is not None else None

    def get(self, node_id: str) -> Node:
        """Return the live node with ``node_id`` or raise NotFound."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFound(node_id) from None

    def children_of(self, node_id: str) -> List[Node]:
        return [self._nodes[c] for c in self.get(node_id).children]

    def depth_of(self, node_id: str) -> int:
        """Distance from the root (root = 0)."""
        depth = 0
        node = self.get(node_id)
        seen = {node.id}
        while node.parent is not None:
            node = self.get(node.parent)
            if node.id in seen:
                raise InvariantViolation(f"Cycle through node {node.id!r}")
            seen.add(node.id)
            depth += 1
        return depth

    def is_leaf(self, node_id: str) -> bool:
        return len(self.get(node_id).children) == 0

    def walk(self, node_id: Optional[str] = None) -> Iterator[Node]:
        """Yield a node and all its descendants depth-first (pre-order)."""
        start = node_id if node_id is not None else self.root_id
        if start is None:
            return
        stack = [start]
        while stack:
            node = self.get(stack.pop())
            yield node
            stack.extend(reversed(node.children))

    # ==================== Node Operations ====================

    def create_root(self, text: str = ROOT_TEXT,
                    x: Optional[float] = None, y: Optional[float] = None,
                    select: bool = False) -> Node:
        """Create the single root node of an empty store."""
        if self._nodes:
            raise InvariantViolation("Store already has a root node")
        cx, cy = ROOT_CENTER
        node = Node(
            id=self._allocate_id(),
            text=self._clean_text(text),
            x=cx if x is None else float(x),
            y=cy if y is None else float(y),
            color=NodeColor.DEFAULT,
        )
        self._nodes[node.id] = node
        if select:
            self._selected_id = node.id
        self._refresh_styles()
        self._notify("create_root")
        return node

    def add_child(self, parent_id: str, text: str = PLACEHOLDER_TEXT,
                  color: Optional[Union[NodeColor, str]] = None,
                  x: Optional[float] = None, y: Optional[float] = None,
                  select: bool = False) -> Node:
        """Create a new child at the end of ``parent_id``'s children."""
        parent = self.get(parent_id)
        child_index = len(parent.children)

        if x is None or y is None:
            angle = child_index * CHILD_ANGLE_STEP
            x = parent.x + math.cos(angle) * self.child_radius
            y = parent.y + math.sin(angle) * self.child_radius

        if color is None:
            # Next palette step after the parent, one more per existing sibling
            node_color = parent.color.next_in_palette(1 + child_index)
        else:
            node_color = coerce_color(color)

        child = Node(
            id=self._allocate_id(),
            text=self._clean_text(text),
            x=float(x),
            y=float(y),
            color=node_color,
            parent=parent.id,
        )
        self._nodes[child.id] = child
        parent.children.append(child.id)
        self._connections.append(Connection(parent.id, child.id))
        if select:
            self._selected_id = child.id

        self._refresh_styles()
        self._notify("add_child")
        return child

    def delete_subtree(self, node_id: str) -> bool:
        """Delete a node with all its descendants and their connections.

        Returns False (and changes nothing) when deleting would leave the
        store empty: the node is the only one, or it is the root.
        """
        node = self.get(node_id)
        if len(self._nodes) == 1 or node.parent is None:
            logger.debug("Ignoring delete of %s: it would empty the map", node_id)
            return False

        removed = set()
        self._delete_recursive(node_id, removed)

        self._connections = [
            c for c in self._connections
            if c.parent not in removed and c.child not in removed
        ]

        parent = self._nodes.get(node.parent)
        if parent is not None:
            parent.children = [c for c in parent.children if c != node_id]
            if not parent.children:
                parent.collapsed = False

        if self._selected_id in removed:
            self._selected_id = None

        self._refresh_styles()
        self._notify("delete_subtree")
        return True

    def _delete_recursive(self, node_id: str, removed: set):
        node = self._nodes.get(node_id)
        if node is None:
            return
        for child_id in list(node.children):
            self._delete_recursive(child_id, removed)
        del self._nodes[node_id]
        removed.add(node_id)

    def set_text(self, node_id: str, text: str):
        """Set a node's label, falling back to the placeholder for blank input."""
        node = self.get(node_id)
        new_text = self._clean_text(text)
        if new_text == node.text:
            return
        node.text = new_text
        self._notify("set_text")

    def set_color(self, node_id: str, color: Union[NodeColor, str]):
        node = self.get(node_id)
        new_color = coerce_color(color)
        if new_color is node.color:
            return
        node.color = new_color
        self._notify("set_color")

    def set_position(self, node_id: str, x: float, y: float):
        node = self.get(node_id)
        if (node.x, node.y) == (x, y):
            return
        node.x = float(x)
        node.y = float(y)
        self._notify("set_position")

    def set_positions(self, positions: Dict[str, Tuple[float, float]]):
        """Move many nodes at once, with a single notification."""
        for node_id in positions:
            self.get(node_id)
        changed = False
        for node_id, (x, y) in positions.items():
            node = self._nodes[node_id]
            if (node.x, node.y) != (x, y):
                node.x = float(x)
                node.y = float(y)
                changed = True
        if changed:
            self._notify("set_positions")

    def set_collapsed(self, node_id: str, collapsed: bool) -> bool:
        """Set the collapse flag; ignored for nodes without children."""
        node = self.get(node_id)
        if not node.children:
            return False
        if node.collapsed == bool(collapsed):
            return False
        node.collapsed = bool(collapsed)
        self._notify("set_collapsed")
        return True

    # ==================== Selection ====================

    def select(self, node_id: Optional[str]):
        if node_id is not None:
            self.get(node_id)
        if node_id == self._selected_id:
            return
        self._selected_id = node_id
        self._notify(SELECT_REASON)

    def deselect(self):
        self.select(None)

    # ==================== Bulk Operations ====================

    def reset(self, text: str = ROOT_TEXT) -> Node:
        """Throw away the whole tree and start over with a single root."""
        self._nodes = {}
        self._connections = []
        self._next_id = 0
        root = Node(
            id=self._allocate_id(),
            text=self._clean_text(text),
            x=ROOT_CENTER[0],
            y=ROOT_CENTER[1],
        )
        self._nodes[root.id] = root
        self._selected_id = root.id
        self._refresh_styles()
        self._notify("reset")
        return root

    def load(self, nodes: Iterable[Node], connections: Iterable[Connection],
             selected_id: Optional[str] = None, reason: str = "load"):
        """Replace the whole tree with the given nodes and connections.

        The store takes ownership of the node objects. If the result breaks
        an invariant, the previous state is put back and InvariantViolation
        is raised.
        """
        previous = (self._nodes, self._connections, self._selected_id, self._next_id)

        self._nodes = {}
        for node in nodes:
            if node.id in self._nodes:
                self._nodes, self._connections, self._selected_id, self._next_id = previous
                raise InvariantViolation(f"Duplicate node id {node.id!r}")
            self._nodes[node.id] = node
        self._connections = list(connections)
        self._selected_id = selected_id if selected_id in self._nodes else None

        try:
            self.validate()
        except InvariantViolation:
            self._nodes, self._connections, self._selected_id, self._next_id = previous
            raise

        self._sync_id_counter()
        self._refresh_styles()
        self._notify(reason)

    # ==================== Integrity ====================

    def validate(self):
        """Raise InvariantViolation if the tree breaks any model invariant."""
        if not self._nodes:
            raise InvariantViolation("The map has no nodes")

        roots = [n.id for n in self._nodes.values() if n.parent is None]
        if len(roots) != 1:
            raise InvariantViolation(f"Expected exactly one root, found {len(roots)}")

        listed_by: Dict[str, str] = {}
        for node in self._nodes.values():
            if node.parent is not None and node.parent not in self._nodes:
                raise InvariantViolation(
                    f"Node {node.id!r} has missing parent {node.parent!r}")
            for child_id in node.children:
                if child_id not in self._nodes:
                    raise InvariantViolation(
                        f"Node {node.id!r} lists missing child {child_id!r}")
                if child_id in listed_by:
                    raise InvariantViolation(
                        f"Node {child_id!r} is listed by more than one parent")
                listed_by[child_id] = node.id
                if self._nodes[child_id].parent != node.id:
                    raise InvariantViolation(
                        f"Node {child_id!r} does not point back to parent {node.id!r}")
            if node.collapsed and not node.children:
                raise InvariantViolation(f"Leaf node {node.id!r} is collapsed")

        for node in self._nodes.values():
            if node.parent is not None and listed_by.get(node.id) != node.parent:
                raise InvariantViolation(
                    f"Node {node.id!r} is missing from its parent's children")

        reachable = sum(1 for _ in self.walk(roots[0]))
        if reachable != len(self._nodes):
            raise InvariantViolation("Parent links contain a cycle")

        expected = {(n.parent, n.id) for n in self._nodes.values() if n.parent is not None}
        actual = [c.as_tuple() for c in self._connections]
        if len(actual) != len(set(actual)) or set(actual) != expected:
            raise InvariantViolation("Connections do not match parent/child links")

    # ==================== Helpers ====================

    def _clean_text(self, text: Optional[str]) -> str:
        text = (text or "").strip()
        return text or self.placeholder_text

    def _allocate_id(self) -> str:
        while True:
            node_id = f"node-{self._next_id}"
            self._next_id += 1
            if node_id not in self._nodes:
                return node_id

    def _sync_id_counter(self):
        highest = -1
        for node_id in self._nodes:
            match = _NODE_ID_RE.match(node_id)
            if match:
                highest = max(highest, int(match.group(1)))
        self._next_id = max(self._next_id, highest + 1)

    def _refresh_styles(self):
        """Re-derive node sizes from depth."""
        root_id = self.root_id
        if root_id is None:
            return
        stack = [(root_id, 0)]
        while stack:
            node_id, depth = stack.pop()
            node = self._nodes[node_id]
            node.width, node.height = size_for_depth(depth)
            stack.extend((c, depth + 1) for c in node.children)
