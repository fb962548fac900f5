"""Data models for module dependency graph layout.

Raw input is validated with pydantic (``RawNode``, ``RawEdge``, ``RawGraph``).
Simulation state uses plain mutable dataclasses (``WorkingNode``,
``WorkingLink``) owned exclusively by one layout call. Everything handed to a
consumer is a frozen snapshot (``PositionedNode``, ``PositionedLink``,
``AdjacencyEntry``).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MalformedGraphError

# --- Raw input models ---


class RawNode(BaseModel):
    """A module as supplied by the bundler stats: identifier plus weight."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique module identifier, e.g. a file path")
    rendered_length: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        alias="renderedLength",
        description="Bytes/lines the module contributes to the output",
    )

    @property
    def attributes(self) -> dict[str, Any]:
        """Extra attributes carried alongside ``id`` and ``renderedLength``."""
        return dict(self.model_extra or {})


class RawEdge(BaseModel):
    """A directed dependency: ``source`` imports ``target`` (both uids)."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str


class RawGraph(BaseModel):
    """A complete raw graph document: ``{nodes: {uid: node}, links: [edge]}``."""

    nodes: dict[str, RawNode] = Field(default_factory=dict)
    links: list[RawEdge] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawGraph:
        """Validate a raw graph document.

        Args:
            data: Mapping with ``nodes`` and ``links`` keys (``links`` may be None)

        Returns:
            Validated RawGraph

        Raises:
            MalformedGraphError: If the document does not match the schema
        """
        try:
            return cls.model_validate(
                {"nodes": data.get("nodes") or {}, "links": data.get("links") or []}
            )
        except ValidationError as e:
            raise MalformedGraphError(
                f"Invalid graph document: {e.error_count()} validation error(s)",
                context={"errors": e.errors(include_url=False)},
            ) from e


def parse_raw_nodes(raw_nodes: Mapping[str, RawNode | Mapping[str, Any]]) -> dict[str, RawNode]:
    """Coerce a uid -> node mapping into validated ``RawNode`` models.

    Mapping iteration order is preserved.

    Raises:
        MalformedGraphError: If any node fails validation
    """
    parsed: dict[str, RawNode] = {}
    for uid, node in raw_nodes.items():
        if isinstance(node, RawNode):
            parsed[uid] = node
            continue
        try:
            parsed[uid] = RawNode.model_validate(node)
        except ValidationError as e:
            raise MalformedGraphError(
                f"Node '{uid}' is invalid",
                context={"uid": uid, "errors": e.errors(include_url=False)},
            ) from e
    return parsed


def parse_raw_edges(raw_edges: Iterable[RawEdge | Mapping[str, Any]] | None) -> list[RawEdge]:
    """Coerce an edge sequence into validated ``RawEdge`` models.

    A missing edge list is treated as empty.

    Raises:
        MalformedGraphError: If any edge fails validation
    """
    parsed: list[RawEdge] = []
    for position, edge in enumerate(raw_edges or []):
        if isinstance(edge, RawEdge):
            parsed.append(edge)
            continue
        try:
            parsed.append(RawEdge.model_validate(edge))
        except ValidationError as e:
            raise MalformedGraphError(
                f"Edge #{position} is invalid",
                context={"position": position, "errors": e.errors(include_url=False)},
            ) from e
    return parsed


# --- Simulation state ---


@dataclass(eq=False)
class WorkingNode:
    """Mutable simulation state for one module.

    Identity is by object (and by ``uid``); coordinates are NaN until the
    simulation places the node.
    """

    uid: str
    id: str
    rendered_length: float
    index: int = 0
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0

    def snapshot(self) -> PositionedNode:
        """Freeze the current position into a read-only value copy."""
        return PositionedNode(
            uid=self.uid,
            id=self.id,
            rendered_length=self.rendered_length,
            x=self.x,
            y=self.y,
        )


@dataclass(eq=False)
class WorkingLink:
    """A dependency edge whose endpoints are the node objects themselves."""

    source: WorkingNode
    target: WorkingNode
    value: int = 1
    index: int = 0


# --- Consumer snapshots ---


@dataclass(frozen=True)
class PositionedNode:
    """Final position of a module, detached from simulation state."""

    uid: str
    id: str
    rendered_length: float
    x: float
    y: float


@dataclass(frozen=True)
class PositionedLink:
    """Final edge with endpoints resolved to positioned snapshots."""

    source: PositionedNode
    target: PositionedNode
    value: int = 1


@dataclass(frozen=True)
class AdjacencyEntry:
    """Snapshot of a node's identifying attributes at index-build time."""

    uid: str
    id: str
    rendered_length: float
    attributes: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_raw(cls, uid: str, node: RawNode) -> AdjacencyEntry:
        """Copy ``uid`` and the raw node's attributes into a new entry."""
        return cls(
            uid=uid,
            id=node.id,
            rendered_length=node.rendered_length,
            attributes=node.attributes,
        )
