"""Linear quadtree used to accelerate the collision and many-body forces.

The tree is stored level by level as numpy arrays rather than as linked quad
objects, so a force can walk it for every node at once: one step of the walk
handles all open (node, cell) pairs of a depth in a few array operations.

A cell whose points all share the exact same coordinates is a leaf, as is
every cell at ``MAX_DEPTH``; coincident points share one leaf instead of
splitting forever.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

# Deepest subdivision; points still together below this share a leaf
MAX_DEPTH = 32


@dataclass
class QuadLevel:
    """Every cell at one depth of the tree."""

    depth: int
    width: float
    col: np.ndarray  # cell column / row in units of ``width``
    row: np.ndarray
    start: np.ndarray  # offset of each cell's first point in ``members``
    count: np.ndarray
    members: np.ndarray  # point indices grouped by cell
    member_cell: np.ndarray
    is_leaf: np.ndarray
    cell_of: np.ndarray  # cell of every point at this depth, -1 when absent
    child_start: np.ndarray | None = None
    child_count: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.start)

    @property
    def first(self) -> np.ndarray:
        """Index of the first point in each cell."""
        return self.members[self.start]

    def sum(self, values: np.ndarray) -> np.ndarray:
        """Per-cell sum of a per-point quantity."""
        return np.bincount(
            self.member_cell, weights=values[self.members], minlength=len(self)
        )

    def max(self, values: np.ndarray) -> np.ndarray:
        """Per-cell maximum of a per-point quantity."""
        return np.maximum.reduceat(values[self.members], self.start)

    def expand(self, cells: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Expand cells into ``(position in cells, member point)`` pairs."""
        counts = self.count[cells]
        owner = np.repeat(np.arange(cells.size), counts)
        offsets = np.repeat(self.start[cells] - (np.cumsum(counts) - counts), counts)
        return owner, self.members[offsets + np.arange(owner.size)]


Visit = Callable[[QuadLevel, np.ndarray, np.ndarray], np.ndarray]


class Quadtree:
    """Quadtree over a fixed point set, rebuilt every tick by its users."""

    def __init__(self, x: np.ndarray, y: np.ndarray, max_depth: int = MAX_DEPTH) -> None:
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        self.size = len(x)
        self.levels: list[QuadLevel] = []
        self.x0 = self.y0 = 0.0
        self.extent = 1.0
        if not self.size:
            return

        self.x0 = float(x.min())
        self.y0 = float(y.min())
        extent = float(max(x.max() - self.x0, y.max() - self.y0))
        if extent > 0:
            self.extent = extent

        u = (x - self.x0) / self.extent
        v = (y - self.y0) / self.extent
        members = np.arange(self.size)
        parents = np.zeros(self.size, dtype=np.int64)
        depth = 0

        while members.size:
            scale = float(2**depth)
            col = np.minimum(np.floor(u[members] * scale), scale - 1).astype(np.int64)
            row = np.minimum(np.floor(v[members] * scale), scale - 1).astype(np.int64)
            # Children of one parent get adjacent keys, ordered by quadrant
            keys = parents * 4 + (row & 1) * 2 + (col & 1)

            cell_keys, member_cell = np.unique(keys, return_inverse=True)
            member_cell = member_cell.reshape(-1)
            order = np.argsort(member_cell, kind="stable")
            members, member_cell = members[order], member_cell[order]
            col, row = col[order], row[order]

            count = np.bincount(member_cell)
            start = np.cumsum(count) - count
            xs, ys = x[members], y[members]
            coincident = (
                np.minimum.reduceat(xs, start) == np.maximum.reduceat(xs, start)
            ) & (np.minimum.reduceat(ys, start) == np.maximum.reduceat(ys, start))
            is_leaf = coincident | (depth >= max_depth)

            cell_of = np.full(self.size, -1, dtype=np.int64)
            cell_of[members] = member_cell

            if self.levels:
                self._link(self.levels[-1], cell_keys // 4)

            self.levels.append(
                QuadLevel(
                    depth=depth,
                    width=self.extent / scale,
                    col=col[start],
                    row=row[start],
                    start=start,
                    count=count,
                    members=members,
                    member_cell=member_cell,
                    is_leaf=is_leaf,
                    cell_of=cell_of,
                )
            )

            inner = ~is_leaf[member_cell]
            members, parents = members[inner], member_cell[inner]
            depth += 1

        self._link(self.levels[-1], np.empty(0, dtype=np.int64))

    @staticmethod
    def _link(level: QuadLevel, child_parents: np.ndarray) -> None:
        cells = np.arange(len(level))
        level.child_start = np.searchsorted(child_parents, cells, side="left")
        level.child_count = (
            np.searchsorted(child_parents, cells, side="right") - level.child_start
        )

    @property
    def root(self) -> QuadLevel | None:
        return self.levels[0] if self.levels else None

    def bounds(
        self, level: QuadLevel, cells: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """``(x0, y0, x1, y1)`` of the given cells."""
        x0 = self.x0 + level.col[cells] * level.width
        y0 = self.y0 + level.row[cells] * level.width
        return x0, y0, x0 + level.width, y0 + level.width

    def descend(self, queries: np.ndarray, visit: Visit) -> None:
        """Walk the tree top-down for many query points at once.

        ``visit(level, points, cells)`` is called once per depth with every
        (query point, cell) pair still open at that depth, and returns a mask
        of the pairs to open further. Leaves are never opened.
        """
        points = np.asarray(queries, dtype=np.int64)
        cells = np.zeros(points.size, dtype=np.int64)
        for level in self.levels:
            if not points.size:
                break
            opened = np.asarray(visit(level, points, cells), dtype=bool)
            opened &= ~level.is_leaf[cells]
            points, cells = points[opened], cells[opened]

            counts = level.child_count[cells]
            offsets = level.child_start[cells] - (np.cumsum(counts) - counts)
            points = np.repeat(points, counts)
            cells = np.repeat(offsets, counts) + np.arange(points.size)
