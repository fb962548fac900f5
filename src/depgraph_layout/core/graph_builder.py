"""Working graph construction for the force simulation.

Converts the raw ``uid -> node`` mapping and the raw edge list into a node
sequence and a link sequence whose endpoints are the node objects themselves.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from ..config.defaults import VENDOR_DIRECTORY
from .exceptions import MalformedGraphError
from .models import (
    RawEdge,
    RawNode,
    WorkingLink,
    WorkingNode,
    parse_raw_edges,
    parse_raw_nodes,
)

# <vendor dir>/<package>/<at least one more character>, either separator
VENDOR_PATTERN = re.compile(
    rf"{re.escape(VENDOR_DIRECTORY)}[/\\]([^/\\]+)[/\\].+"
)


def build_graph(
    raw_nodes: Mapping[str, RawNode | Mapping[str, Any]],
    raw_edges: Iterable[RawEdge | Mapping[str, Any]] | None,
) -> tuple[list[WorkingNode], list[WorkingLink]]:
    """Build simulation nodes and links from raw input.

    Produces one ``WorkingNode`` per mapping entry, in mapping iteration
    order, and one ``WorkingLink`` per edge (duplicates are kept).

    Args:
        raw_nodes: Mapping of uid to raw node (model or plain dict)
        raw_edges: Sequence of ``{source, target}`` uid pairs

    Returns:
        Tuple of (nodes, links)

    Raises:
        MalformedGraphError: If a node is invalid or an edge cites an unknown uid

    Example:
        >>> nodes, links = build_graph(
        ...     {"a": {"id": "a.js", "renderedLength": 10}, "b": {"id": "b.js"}},
        ...     [{"source": "a", "target": "b"}],
        ... )
        >>> links[0].target is nodes[1]
        True
    """
    parsed_nodes = parse_raw_nodes(raw_nodes)
    parsed_edges = parse_raw_edges(raw_edges)

    nodes: list[WorkingNode] = []
    nodes_by_uid: dict[str, WorkingNode] = {}
    for index, (uid, raw) in enumerate(parsed_nodes.items()):
        node = WorkingNode(
            uid=uid,
            id=raw.id,
            rendered_length=raw.rendered_length,
            index=index,
        )
        nodes.append(node)
        nodes_by_uid[uid] = node

    links: list[WorkingLink] = []
    for index, edge in enumerate(parsed_edges):
        links.append(
            WorkingLink(
                source=_resolve(nodes_by_uid, edge.source, index, "source"),
                target=_resolve(nodes_by_uid, edge.target, index, "target"),
                index=index,
            )
        )

    logger.debug(f"Built working graph: {len(nodes)} nodes, {len(links)} links")
    return nodes, links


def _resolve(
    nodes_by_uid: Mapping[str, WorkingNode], uid: str, position: int, end: str
) -> WorkingNode:
    node = nodes_by_uid.get(uid)
    if node is None:
        raise MalformedGraphError(
            f"Edge #{position} {end} references unknown uid '{uid}'",
            context={"position": position, "end": end, "uid": uid},
        )
    return node


def classify_node(node: WorkingNode | RawNode) -> str:
    """Return the display category a renderer maps to a color.

    - ``"empty"``: the module contributes nothing (``rendered_length == 0``)
    - ``"vendor"``: the module lives under a ``node_modules`` directory
    - ``"own"``: everything else

    Args:
        node: Working or raw node

    Returns:
        One of ``"empty"``, ``"vendor"``, ``"own"``
    """
    if node.rendered_length == 0:
        return "empty"

    if VENDOR_PATTERN.search(node.id):
        return "vendor"
    return "own"
