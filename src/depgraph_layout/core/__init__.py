"""Core functionality for depgraph-layout."""

from .exceptions import (
    ConfigError,
    DegenerateInputError,
    GraphError,
    MalformedGraphError,
    NetworkLayoutError,
    SimulationError,
)
from .models import (
    AdjacencyEntry,
    PositionedLink,
    PositionedNode,
    RawEdge,
    RawGraph,
    RawNode,
    WorkingLink,
    WorkingNode,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "DegenerateInputError",
    "GraphError",
    "MalformedGraphError",
    "NetworkLayoutError",
    "SimulationError",
    # Models
    "AdjacencyEntry",
    "PositionedLink",
    "PositionedNode",
    "RawEdge",
    "RawGraph",
    "RawNode",
    "WorkingLink",
    "WorkingNode",
]
