"""Radial layout for freshly built or imported trees."""

import logging
import math
from typing import Optional, Dict, Tuple

from mindcore.config import (
    ROOT_CENTER,
    RADIAL_RADIUS_STEP,
    RADIAL_START_ANGLE,
    RADIAL_SPAN_FACTOR,
)
from mindcore.store import NodeStore

logger = logging.getLogger(__name__)


def layout_radial(store: NodeStore, root_id: Optional[str] = None,
                  center: Tuple[float, float] = ROOT_CENTER,
                  radius_step: float = RADIAL_RADIUS_STEP) -> Dict[str, Tuple[float, float]]:
    """Calculate radial positions for every node under ``root_id``.

    Children evenly split their parent's angular span and sit one
    ``radius_step`` further out, at the middle of their share. Each child
    passes on only 80% of its share to its own children, which leaves a gap
    between neighbouring branches.
    """
    root_id = root_id if root_id is not None else store.root_id
    if root_id is None:
        return {}

    positions: Dict[str, Tuple[float, float]] = {}
    cx, cy = center

    def layout_tree(node_id: str, radius: float, start_angle: float, angle_span: float):
        children = store.get(node_id).children
        if not children:
            return
        share = angle_span / len(children)
        child_radius = radius + radius_step
        for i, child_id in enumerate(children):
            mid_angle = start_angle + share * (i + 0.5)
            positions[child_id] = (
                cx + child_radius * math.cos(mid_angle),
                cy + child_radius * math.sin(mid_angle),
            )
            child_span = share * RADIAL_SPAN_FACTOR
            layout_tree(child_id, child_radius, mid_angle - child_span / 2, child_span)

    positions[root_id] = (cx, cy)
    layout_tree(root_id, 0.0, RADIAL_START_ANGLE, 2 * math.pi)
    return positions


def apply_radial_layout(store: NodeStore, root_id: Optional[str] = None,
                        center: Tuple[float, float] = ROOT_CENTER,
                        radius_step: float = RADIAL_RADIUS_STEP) -> Dict[str, Tuple[float, float]]:
    """Lay the tree out radially and write the positions to the store."""
    positions = layout_radial(store, root_id, center, radius_step)
    if positions:
        store.set_positions(positions)
        logger.debug("Radial layout placed %d nodes", len(positions))
    return positions
