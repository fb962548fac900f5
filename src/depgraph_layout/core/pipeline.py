"""End-to-end layout pipeline for a module dependency graph.

raw graph -> build_graph -> {nodes, links}
          -> make_size_scale(nodes)
          -> layout(nodes, links, ...) -> normalize_layout(nodes, ...)
          -> frozen NetworkLayout (+ adjacency indexes built from raw edges)

The index build reads only the raw input and may run on a worker thread
while the simulation runs (``parallel=True``); the result is joined before
anything is returned, so callers never see partial output.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ..config.layout_config import LayoutConfig
from .adjacency import AdjacencyIndexes, build_adjacency_indexes
from .exceptions import DegenerateInputError
from .graph_builder import build_graph
from .metrics import LayoutMetrics
from .models import AdjacencyEntry, PositionedLink, PositionedNode, RawGraph
from .normalizer import normalize_layout
from .simulation import layout
from .size_scale import SizeScale, make_size_scale


@dataclass(frozen=True)
class NetworkLayout:
    """Everything a renderer needs to draw the dependency network."""

    nodes: tuple[PositionedNode, ...]
    links: tuple[PositionedLink, ...]
    size: SizeScale
    indexes: AdjacencyIndexes
    width: float
    height: float
    metrics: LayoutMetrics | None = field(default=None, compare=False, repr=False)

    @property
    def imported_by(self) -> dict[str, list[AdjacencyEntry]]:
        return self.indexes.imported_by

    @property
    def imports(self) -> dict[str, list[AdjacencyEntry]]:
        return self.indexes.imports

    def radius(self, node: PositionedNode) -> float:
        """Rendered circle radius of a node."""
        return self.size(node.rendered_length)

    def node(self, uid: str) -> PositionedNode:
        """Look up a positioned node by uid."""
        for candidate in self.nodes:
            if candidate.uid == uid:
                return candidate
        raise KeyError(uid)


def _clamp_viewport(width: float, height: float) -> tuple[float, float]:
    if width >= 0 and height >= 0:
        return float(width), float(height)
    logger.warning(f"Negative viewport {width}x{height} clamped to zero")
    return float(max(width, 0)), float(max(height, 0))


def compute_network_layout(
    graph: RawGraph | Mapping[str, Any],
    width: float,
    height: float,
    config: LayoutConfig | None = None,
    parallel: bool = False,
) -> NetworkLayout:
    """Lay out a module dependency graph inside a ``width x height`` viewport.

    Args:
        graph: Raw graph (``{"nodes": {uid: node}, "links": [edge]}``)
        width: Viewport width
        height: Viewport height
        config: Layout configuration (defaults when omitted)
        parallel: Build the adjacency indexes on a worker thread

    Returns:
        NetworkLayout with positioned nodes and links, the size scale and the
        adjacency indexes. An empty graph yields an empty layout.

    Raises:
        MalformedGraphError: If the graph is invalid or an edge cites an
            unknown uid (no partial result)
        SimulationError: If the simulation diverges

    Example:
        >>> result = compute_network_layout(
        ...     {
        ...         "nodes": {"a": {"id": "a.js", "renderedLength": 100},
        ...                   "b": {"id": "b.js", "renderedLength": 0}},
        ...         "links": [{"source": "a", "target": "b"}],
        ...     },
        ...     800,
        ...     600,
        ... )
        >>> [entry.uid for entry in result.imported_by["b"]]
        ['a']
    """
    config = config or LayoutConfig()
    width, height = _clamp_viewport(width, height)
    raw = graph if isinstance(graph, RawGraph) else RawGraph.from_dict(graph)
    metrics = LayoutMetrics()

    with metrics.phase("build", len(raw.nodes)):
        nodes, links = build_graph(raw.nodes, raw.links)
    size = make_size_scale(nodes, config.scale)

    def index() -> AdjacencyIndexes:
        with metrics.phase("index", len(raw.links)):
            return build_adjacency_indexes(raw.nodes, raw.links)

    executor = ThreadPoolExecutor(max_workers=1) if parallel else None
    try:
        pending = executor.submit(index) if executor else None

        try:
            with metrics.phase("simulate", len(nodes)):
                layout(
                    nodes,
                    links,
                    width,
                    height,
                    size,
                    forces=config.forces,
                    simulation=config.simulation,
                )
            with metrics.phase("normalize", len(nodes)):
                normalize_layout(nodes, width, height)
        except DegenerateInputError:
            logger.debug("Empty graph, returning empty layout")

        indexes = pending.result() if pending else index()
    finally:
        if executor:
            executor.shutdown(wait=True)

    snapshots = {node.uid: node.snapshot() for node in nodes}
    positioned_links = tuple(
        PositionedLink(
            source=snapshots[link.source.uid],
            target=snapshots[link.target.uid],
            value=link.value,
        )
        for link in links
    )

    metrics.finalize()
    logger.info(
        f"Laid out {len(snapshots)} nodes and {len(positioned_links)} links "
        f"in {metrics.total_duration_seconds * 1000:.1f}ms"
    )

    return NetworkLayout(
        nodes=tuple(snapshots.values()),
        links=positioned_links,
        size=size,
        indexes=indexes,
        width=width,
        height=height,
        metrics=metrics,
    )


async def compute_network_layout_async(
    graph: RawGraph | Mapping[str, Any],
    width: float,
    height: float,
    config: LayoutConfig | None = None,
) -> NetworkLayout:
    """Run the whole pipeline on a worker thread as one unit of work.

    Cancelling the awaiting task discards the result; the simulation itself
    is not interrupted mid-way.
    """
    return await asyncio.to_thread(compute_network_layout, graph, width, height, config)
