"""Shared fixtures for depgraph-layout tests."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def scenario_graph() -> dict[str, Any]:
    """Two modules, ``a`` imports ``b``."""
    return {
        "nodes": {
            "a": {"id": "a", "renderedLength": 100},
            "b": {"id": "b", "renderedLength": 0},
        },
        "links": [{"source": "a", "target": "b"}],
    }


@pytest.fixture
def bundle_graph() -> dict[str, Any]:
    """A small bundle: an entry point, own modules and vendored modules.

    ``src/index.js`` imports ``src/util.js`` twice (duplicate edge).
    """
    return {
        "nodes": {
            "u1": {"id": "src/index.js", "renderedLength": 1200},
            "u2": {"id": "src/util.js", "renderedLength": 300},
            "u3": {"id": "src/view.js", "renderedLength": 800},
            "u4": {"id": "node_modules/preact/dist/preact.js", "renderedLength": 9000},
            "u5": {"id": "node_modules/bytes/index.js", "renderedLength": 450},
            "u6": {"id": "\u0000commonjsHelpers.js", "renderedLength": 0},
        },
        "links": [
            {"source": "u1", "target": "u2"},
            {"source": "u1", "target": "u2"},
            {"source": "u1", "target": "u3"},
            {"source": "u3", "target": "u4"},
            {"source": "u3", "target": "u2"},
            {"source": "u2", "target": "u5"},
            {"source": "u5", "target": "u6"},
        ],
    }


def chain_graph(length: int, weight: float = 10) -> dict[str, Any]:
    """Linear chain ``m0 -> m1 -> ... -> m{length-1}``."""
    return {
        "nodes": {
            f"m{i}": {"id": f"src/m{i}.js", "renderedLength": weight * (i + 1)}
            for i in range(length)
        },
        "links": [
            {"source": f"m{i}", "target": f"m{i + 1}"} for i in range(length - 1)
        ],
    }


@pytest.fixture
def long_chain_graph() -> dict[str, Any]:
    """A 24-module import chain (taller than wide before rotation is likely)."""
    return chain_graph(24)
