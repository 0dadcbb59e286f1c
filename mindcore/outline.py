"""Export/import between a NodeStore and Markdown outlines.

Outline format:
- The root is a top-level ``#`` heading
- Nodes at outline depth 1-6 (the root's children are depth 1) are headings
  with one ``#`` per level
- Deeper nodes are ``-`` list items, indented two spaces per level beyond 6

Only the tree shape and the labels survive a trip through an outline;
positions, colours and collapse flags are rebuilt on import.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, List, Tuple

from mindcore.config import (
    ROOT_CENTER,
    RADIAL_RADIUS_STEP,
    SPIRAL_RADIUS_BASE,
    SPIRAL_RADIUS_INCREMENT,
    SPIRAL_ANGLE_STEP,
)
from mindcore.errors import EmptyOutline
from mindcore.layout import apply_radial_layout
from mindcore.models import Node, Connection, NodeColor
from mindcore.store import NodeStore

logger = logging.getLogger(__name__)

MAX_HEADING_LEVEL = 6
LIST_INDENT = 2

LEVEL_COLORS = {
    1: NodeColor.BLUE,
    2: NodeColor.GREEN,
    3: NodeColor.ORANGE,
    4: NodeColor.PURPLE,
    5: NodeColor.RED,
    6: NodeColor.TEAL,
}

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(.*?)\s*$")
_NUMBERED_RE = re.compile(r"^(\s*)\d+[.)]\s+(.*?)\s*$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_CHECKBOX_RE = re.compile(r"^\[[ xX]\]\s+")


@dataclass
class OutlineItem:
    """One classified line of an outline."""
    level: int
    text: str
    kind: str  # heading, bullet, numbered
    line_no: int = 0


def color_for_level(level: int) -> NodeColor:
    return LEVEL_COLORS.get(level, NodeColor.DEFAULT)


# ==================== Export ====================

def export_outline(store: NodeStore) -> str:
    """Export the tree as a Markdown outline."""
    root = store.root
    if root is None:
        return ""

    lines = [f"# {_one_line(root.text)}", ""]

    def add_node(node_id: str, depth: int):
        node = store.get(node_id)
        if depth <= MAX_HEADING_LEVEL:
            lines.append(f"{'#' * depth} {_one_line(node.text)}")
            for child_id in node.children:
                add_node(child_id, depth + 1)
            lines.append("")
        else:
            indent = " " * (LIST_INDENT * (depth - MAX_HEADING_LEVEL - 1))
            lines.append(f"{indent}- {_one_line(node.text)}")
            for child_id in node.children:
                add_node(child_id, depth + 1)

    for child_id in root.children:
        add_node(child_id, 1)

    return "\n".join(lines)


def _one_line(text: str) -> str:
    return " ".join(text.split())


# ==================== Import ====================

def parse_outline(text: str) -> List[OutlineItem]:
    """Classify each line of an outline; unrecognised lines are dropped."""
    items = []
    in_fence = False

    for line_no, raw in enumerate(text.splitlines(), start=1):
        if _FENCE_RE.match(raw):
            in_fence = not in_fence
            continue
        if in_fence or not raw.strip():
            continue

        line = raw.expandtabs(LIST_INDENT)

        match = _HEADING_RE.match(line)
        if match and match.group(2):
            items.append(OutlineItem(len(match.group(1)), match.group(2), "heading", line_no))
            continue

        for kind, pattern in (("bullet", _BULLET_RE), ("numbered", _NUMBERED_RE)):
            match = pattern.match(line)
            if match and match.group(2):
                indent = len(match.group(1))
                item_text = _CHECKBOX_RE.sub("", match.group(2)).strip()
                if item_text:
                    level = MAX_HEADING_LEVEL + 1 + indent // LIST_INDENT
                    items.append(OutlineItem(level, item_text, kind, line_no))
                break

    return items


def build_outline_store(text: str, placeholder_text: Optional[str] = None,
                        radius_step: float = RADIAL_RADIUS_STEP) -> NodeStore:
    """Build a new, laid-out store from outline text.

    Raises EmptyOutline if no line could be classified.
    """
    items = parse_outline(text)
    if not items:
        raise EmptyOutline("Outline contains no headings or list items")

    cx, cy = ROOT_CENTER
    root = Node(id="node-0", text=items[0].text, x=cx, y=cy)
    nodes = {root.id: root}
    connections: List[Connection] = []

    # Open ancestors as (level, node id)
    stack: List[Tuple[int, str]] = [(items[0].level, root.id)]

    for i, item in enumerate(items[1:], start=1):
        while stack and stack[-1][0] >= item.level:
            stack.pop()
        parent = nodes[stack[-1][1] if stack else root.id]

        # Provisional spiral; replaced by the radial layout below
        radius = SPIRAL_RADIUS_BASE + SPIRAL_RADIUS_INCREMENT * i
        angle = SPIRAL_ANGLE_STEP * i
        node = Node(
            id=f"node-{i}",
            text=item.text,
            x=cx + radius * math.cos(angle),
            y=cy + radius * math.sin(angle),
            color=color_for_level(item.level),
            parent=parent.id,
        )
        nodes[node.id] = node
        parent.children.append(node.id)
        connections.append(Connection(parent.id, node.id))
        stack.append((item.level, node.id))

    store = NodeStore() if placeholder_text is None else NodeStore(placeholder_text)
    store.load(list(nodes.values()), connections)
    apply_radial_layout(store, radius_step=radius_step)
    return store


def import_outline(store: NodeStore, text: str,
                   radius_step: float = RADIAL_RADIUS_STEP) -> str:
    """Replace the store's contents with a tree built from outline text.

    Returns the new root id. On EmptyOutline the store is left untouched.
    """
    built = build_outline_store(text, store.placeholder_text, radius_step)
    store.load(
        list(built.nodes.values()),
        built.connections,
        selected_id=built.root_id,
        reason="import_outline",
    )
    logger.debug("Imported outline with %d nodes", len(store))
    return store.root_id
