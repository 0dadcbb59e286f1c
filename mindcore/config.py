"""Configuration constants and editor settings for mindcore."""

import json
import math
from dataclasses import dataclass, asdict
from typing import Optional, Tuple


# Colour palette, in cycle order. "default" is the sentinel outside the cycle.
PALETTE = ("blue", "green", "orange", "purple", "red", "teal", "yellow", "pink")
DEFAULT_COLOR = "default"

# Node size by depth: root, then progressively smaller, then uniform.
NODE_SIZES = (
    (160.0, 56.0),
    (140.0, 48.0),
    (130.0, 44.0),
    (120.0, 40.0),
)
LEAF_NODE_SIZE = (110.0, 36.0)

# Text defaults
ROOT_TEXT = "Central Topic"
PLACEHOLDER_TEXT = "New Topic"

# Geometry
ROOT_CENTER = (400.0, 300.0)
CHILD_RADIUS = 200.0
CHILD_ANGLE_STEP = math.pi / 4
RADIAL_RADIUS_STEP = 180.0
RADIAL_START_ANGLE = -math.pi / 2
RADIAL_SPAN_FACTOR = 0.8

# Provisional spiral used while an outline import is being built
SPIRAL_RADIUS_BASE = 150.0
SPIRAL_RADIUS_INCREMENT = 20.0
SPIRAL_ANGLE_STEP = 0.5

# View
MIN_SCALE = 0.1
MAX_SCALE = 3.0
DEFAULT_THEME = "mac-light"

MAX_HISTORY_SIZE = 50


def size_for_depth(depth: int) -> Tuple[float, float]:
    """Return the (width, height) used for a node at the given depth."""
    if depth < len(NODE_SIZES):
        return NODE_SIZES[depth]
    return LEAF_NODE_SIZE


@dataclass
class EditorSettings:
    """Tunable settings for an editor session."""
    max_history_size: int = MAX_HISTORY_SIZE
    child_radius: float = CHILD_RADIUS
    layout_radius_step: float = RADIAL_RADIUS_STEP
    default_theme: str = DEFAULT_THEME
    placeholder_text: str = PLACEHOLDER_TEXT
    root_text: str = ROOT_TEXT

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "EditorSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
            # Filter to only known fields to handle schema evolution
            known = {f.name for f in cls.__dataclass_fields__.values()}
            return cls(**{k: v for k, v in d.items() if k in known})
        except (json.JSONDecodeError, TypeError, AttributeError):
            return cls()
