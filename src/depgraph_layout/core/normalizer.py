"""Post-simulation normalization: landscape orientation and viewport centering."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from .exceptions import DegenerateInputError
from .models import WorkingNode

Extent = tuple[float, float]


def compute_extent(nodes: Sequence[WorkingNode]) -> tuple[Extent, Extent]:
    """Axis-aligned bounding box of the node coordinates.

    Returns:
        ``((min_x, max_x), (min_y, max_y))``

    Raises:
        DegenerateInputError: If there are no nodes
    """
    if not nodes:
        raise DegenerateInputError("Cannot compute the extent of an empty node set")

    xs = [node.x for node in nodes]
    ys = [node.y for node in nodes]
    return (min(xs), max(xs)), (min(ys), max(ys))


def normalize_layout(
    nodes: Sequence[WorkingNode], width: float, height: float
) -> Sequence[WorkingNode]:
    """Orient the layout landscape and center it in the viewport.

    1. If the layout is taller than wide, every point is reflected across the
       diagonal (``x`` and ``y`` swapped). Equal extents are left unrotated.
    2. The bounding box is translated so its center lands on
       ``(width / 2, height / 2)``.

    Args:
        nodes: Positioned working nodes, mutated in place
        width: Viewport width
        height: Viewport height

    Returns:
        The same node sequence

    Raises:
        DegenerateInputError: If there are no nodes
    """
    x_extent, y_extent = compute_extent(nodes)

    x_range = x_extent[1] - x_extent[0]
    y_range = y_extent[1] - y_extent[0]

    if y_range > x_range:
        for node in nodes:
            node.x, node.y = node.y, node.x
        x_extent, y_extent = y_extent, x_extent
        logger.debug(f"Rotated layout to landscape ({y_range:.1f} > {x_range:.1f})")

    x_center = (x_extent[1] - x_extent[0]) / 2 + x_extent[0]
    y_center = (y_extent[1] - y_extent[0]) / 2 + y_extent[0]

    dx = width / 2 - x_center
    dy = height / 2 - y_center

    for node in nodes:
        node.x += dx
        node.y += dy

    logger.debug(f"Centered layout: translated by ({dx:.1f}, {dy:.1f})")
    return nodes
