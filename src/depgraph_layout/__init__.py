"""depgraph-layout - force-directed layout for module dependency networks.

Public API:

Pipeline:
    compute_network_layout: Lay out a raw graph in a viewport and build the
        imported-by / imports indexes.
    compute_network_layout_async: Same, run on a worker thread.
    NetworkLayout: Frozen result handed to a renderer.

Building blocks:
    build_graph: Raw graph -> working nodes and links.
    make_size_scale / SizeScale: Square-root weight -> radius scale.
    layout / ForceSimulation: Force simulation engine.
    normalize_layout: Landscape rotation and viewport centering.
    build_adjacency_indexes / AdjacencyIndexes: Lookup indexes keyed by uid.
    classify_node: Display category (empty / vendor / own) of a module.

Configuration:
    LayoutConfig: Simulation, force and scale parameters (YAML loadable).

Example::

    from depgraph_layout import compute_network_layout

    result = compute_network_layout(stats, width=800, height=600)
    for node in result.nodes:
        draw_circle(node.x, node.y, result.radius(node))
"""

__version__ = "0.3.0"

from .config.layout_config import ForceConfig, LayoutConfig, ScaleConfig, SimulationConfig
from .core.adjacency import AdjacencyIndexes, build_adjacency_indexes
from .core.exceptions import (
    ConfigError,
    DegenerateInputError,
    MalformedGraphError,
    NetworkLayoutError,
    SimulationError,
)
from .core.graph_builder import build_graph, classify_node
from .core.models import (
    AdjacencyEntry,
    PositionedLink,
    PositionedNode,
    RawEdge,
    RawGraph,
    RawNode,
)
from .core.normalizer import normalize_layout
from .core.pipeline import (
    NetworkLayout,
    compute_network_layout,
    compute_network_layout_async,
)
from .core.simulation import ForceSimulation, layout
from .core.size_scale import SizeScale, make_size_scale

__all__ = [
    "__version__",
    # Pipeline
    "NetworkLayout",
    "compute_network_layout",
    "compute_network_layout_async",
    # Building blocks
    "build_graph",
    "classify_node",
    "make_size_scale",
    "SizeScale",
    "layout",
    "ForceSimulation",
    "normalize_layout",
    "build_adjacency_indexes",
    "AdjacencyIndexes",
    # Models
    "AdjacencyEntry",
    "PositionedLink",
    "PositionedNode",
    "RawEdge",
    "RawGraph",
    "RawNode",
    # Configuration
    "LayoutConfig",
    "SimulationConfig",
    "ForceConfig",
    "ScaleConfig",
    # Exceptions
    "NetworkLayoutError",
    "MalformedGraphError",
    "DegenerateInputError",
    "SimulationError",
    "ConfigError",
]
