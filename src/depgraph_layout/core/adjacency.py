"""Imported-by / imports lookup indexes built from the raw edge list.

For every edge ``source -> target`` a snapshot of ``source`` is appended to
``imported_by[target]`` and a snapshot of ``target`` to ``imports[source]``.
Entries keep edge-list order and duplicate edges produce duplicate entries;
consumers that show unique lists deduplicate by ``id`` (see
``AdjacencyIndexes.importer_ids``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .exceptions import MalformedGraphError
from .models import AdjacencyEntry, RawEdge, RawNode, parse_raw_edges, parse_raw_nodes


@dataclass
class AdjacencyIndexes:
    """The two one-to-many lookups keyed by uid."""

    imported_by: dict[str, list[AdjacencyEntry]] = field(default_factory=dict)
    imports: dict[str, list[AdjacencyEntry]] = field(default_factory=dict)

    def importer_ids(self, uid: str) -> list[str]:
        """Unique ids of the modules importing ``uid``, first-seen order."""
        return _unique_ids(self.imported_by.get(uid, ()))

    def imported_ids(self, uid: str) -> list[str]:
        """Unique ids of the modules ``uid`` imports, first-seen order."""
        return _unique_ids(self.imports.get(uid, ()))


def _unique_ids(entries: Iterable[AdjacencyEntry]) -> list[str]:
    return list(dict.fromkeys(entry.id for entry in entries))


def build_adjacency_indexes(
    raw_nodes: Mapping[str, RawNode | Mapping[str, Any]],
    raw_edges: Iterable[RawEdge | Mapping[str, Any]] | None,
) -> AdjacencyIndexes:
    """Build the imported-by and imports indexes.

    Only uids that take part in at least one edge in the respective direction
    get a key.

    Args:
        raw_nodes: Mapping of uid to raw node
        raw_edges: Sequence of ``{source, target}`` uid pairs

    Returns:
        AdjacencyIndexes with snapshot entries

    Raises:
        MalformedGraphError: If an edge cites an unknown uid
    """
    nodes = parse_raw_nodes(raw_nodes)
    indexes = AdjacencyIndexes()

    for position, edge in enumerate(parse_raw_edges(raw_edges)):
        for end, uid in (("source", edge.source), ("target", edge.target)):
            if uid not in nodes:
                raise MalformedGraphError(
                    f"Edge #{position} {end} references unknown uid '{uid}'",
                    context={"position": position, "end": end, "uid": uid},
                )

        indexes.imported_by.setdefault(edge.target, []).append(
            AdjacencyEntry.from_raw(edge.source, nodes[edge.source])
        )
        indexes.imports.setdefault(edge.source, []).append(
            AdjacencyEntry.from_raw(edge.target, nodes[edge.target])
        )

    logger.debug(
        f"Adjacency: {len(indexes.imported_by)} imported nodes, "
        f"{len(indexes.imports)} importing nodes"
    )
    return indexes
