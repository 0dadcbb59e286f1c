"""Data models for mindcore."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from mindcore.config import (
    PALETTE,
    DEFAULT_COLOR,
    DEFAULT_THEME,
    MIN_SCALE,
    MAX_SCALE,
)


class NodeColor(str, Enum):
    """Colour tag of a node."""
    DEFAULT = DEFAULT_COLOR
    BLUE = "blue"
    GREEN = "green"
    ORANGE = "orange"
    PURPLE = "purple"
    RED = "red"
    TEAL = "teal"
    YELLOW = "yellow"
    PINK = "pink"

    @classmethod
    def palette(cls) -> List["NodeColor"]:
        """The cyclic palette, without the default sentinel."""
        return [cls(name) for name in PALETTE]

    def next_in_palette(self, steps: int = 1) -> "NodeColor":
        """Return the palette colour ``steps`` after this one.

        The default sentinel is not in the cycle: it maps to the first
        palette entry for one step and counts on from there.
        """
        colors = self.palette()
        if self is NodeColor.DEFAULT:
            return colors[(steps - 1) % len(colors)]
        return colors[(colors.index(self) + steps) % len(colors)]


@dataclass
class Node:
    """A node in the mind map tree.

    ``children`` and ``parent`` hold ids, never node objects; every
    traversal goes back through the owning store.
    """
    id: str
    text: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    color: NodeColor = NodeColor.DEFAULT
    children: List[str] = field(default_factory=list)
    parent: Optional[str] = None
    collapsed: bool = False

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    @property
    def size(self):
        return (self.width, self.height)

    def __repr__(self) -> str:
        child_count = len(self.children)
        suffix = f" ({child_count} children)" if child_count else ""
        return f"Node({self.id!r}, {self.text!r}{suffix})"


@dataclass(frozen=True)
class Connection:
    """The edge between a parent node and one of its children."""
    parent: str
    child: str

    @property
    def id(self) -> str:
        return f"connection-{self.parent}-{self.child}"

    def as_tuple(self):
        return (self.parent, self.child)


@dataclass
class ViewState:
    """Zoom, pan and theme of the current document view."""
    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    theme: str = DEFAULT_THEME

    def zoom(self, factor: float):
        """Multiply the scale by ``factor``, clamped to the allowed range."""
        self.scale = max(MIN_SCALE, min(MAX_SCALE, self.scale * factor))

    def reset(self):
        self.scale = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
