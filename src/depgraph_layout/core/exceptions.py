"""Typed exception hierarchy for depgraph-layout.

Hierarchy
---------
NetworkLayoutError (base)
├── GraphError             – raw graph input errors
│   ├── MalformedGraphError  – edge cites an unknown uid / node fails validation
│   └── DegenerateInputError – empty node set (handled, never surfaced by the pipeline)
├── SimulationError        – force simulation failures (non-finite coordinates)
└── ConfigError            – configuration / validation errors

``DegenerateInputError`` is raised by ``layout`` and the extent helpers. The
public pipeline catches it and returns an empty ``NetworkLayout`` because an
empty graph is a valid, trivial input.
"""

from typing import Any


class NetworkLayoutError(Exception):
    """Base exception for depgraph-layout."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Graph input ─────────────────────────────────────────────────────────


class GraphError(NetworkLayoutError):
    """Raw graph input errors."""

    pass


class MalformedGraphError(GraphError):
    """An edge references a uid absent from the node mapping.

    Fatal to the layout call. No partial result is returned.
    """

    pass


class DegenerateInputError(GraphError):
    """The node set is empty, so no extent can be computed."""

    pass


# ── Simulation ──────────────────────────────────────────────────────────


class SimulationError(NetworkLayoutError):
    """Force simulation produced unusable state."""

    pass


# ── Configuration layer ─────────────────────────────────────────────────


class ConfigError(NetworkLayoutError):
    """Configuration / validation errors."""

    pass
