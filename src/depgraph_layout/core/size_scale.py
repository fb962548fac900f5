"""Square-root scale mapping module weight to rendered radius.

Radius grows with the square root of the weight so circle *area* grows
roughly linearly with it. The input domain is ``[domain_min, max_weight]``
with ``domain_min`` fixed at 1; outputs are clamped to ``[range_min,
range_max]`` so zero weights land on the minimum radius.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import overload

import numpy as np
from loguru import logger

from ..config.defaults import SCALE_DOMAIN_MIN, SCALE_RANGE_MAX, SCALE_RANGE_MIN
from ..config.layout_config import ScaleConfig
from .models import WorkingNode


@dataclass(frozen=True)
class SizeScale:
    """Continuous, monotonically non-decreasing ``weight -> radius`` function."""

    domain_min: float = SCALE_DOMAIN_MIN
    domain_max: float = SCALE_DOMAIN_MIN
    range_min: float = SCALE_RANGE_MIN
    range_max: float = SCALE_RANGE_MAX

    @overload
    def __call__(self, weight: float) -> float: ...

    @overload
    def __call__(self, weight: np.ndarray) -> np.ndarray: ...

    def __call__(self, weight):
        """Map a weight (or an array of weights) to a radius."""
        values = np.asarray(weight, dtype=float)
        low = np.sqrt(self.domain_min)
        span = np.sqrt(self.domain_max) - low
        if span > 0:
            # Negative weights are treated as zero before the root
            t = (np.sqrt(np.clip(values, 0.0, None)) - low) / span
        else:
            # Degenerate domain: every weight maps to the minimum radius
            t = np.zeros_like(values)
        radius = np.clip(
            self.range_min + t * (self.range_max - self.range_min),
            self.range_min,
            self.range_max,
        )
        if radius.ndim == 0:
            return float(radius)
        return radius


def make_size_scale(
    nodes: Iterable[WorkingNode], config: ScaleConfig | None = None
) -> SizeScale:
    """Derive the size scale from the heaviest node.

    Args:
        nodes: Working nodes (only ``rendered_length`` is read)
        config: Scale bounds (defaults: domain min 1, range ``[5, 30]``)

    Returns:
        SizeScale whose domain upper bound is ``max(rendered_length)``, raised
        to ``domain_min`` when there are no nodes or every weight is 0
    """
    config = config or ScaleConfig()
    max_weight = max((node.rendered_length for node in nodes), default=0.0)
    domain_max = max(float(max_weight), config.domain_min)

    logger.debug(
        f"Size scale: domain=[{config.domain_min}, {domain_max}], "
        f"range=[{config.range_min}, {config.range_max}]"
    )

    return SizeScale(
        domain_min=config.domain_min,
        domain_max=domain_max,
        range_min=config.range_min,
        range_max=config.range_max,
    )
