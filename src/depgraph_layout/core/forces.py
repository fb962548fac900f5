"""Forces composed by the layout simulation.

Each force is initialized once with the node sequence and the simulation's
random source, then applied once per tick with the current ``alpha``. Forces
write to node velocities (``vx``/``vy``), except ``CenterForce`` which shifts
positions directly.

Forces, in the order the layout registers them:
    - LinkForce: springs toward a target separation along every link
    - CollideForce: pushes overlapping disks apart
    - AxisForce: weak pull of one coordinate toward a fixed value
    - ManyBodyForce: pairwise repulsion with Barnes-Hut approximation
    - CenterForce: translates the centroid onto a fixed point
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

import numpy as np

from .models import WorkingLink, WorkingNode
from .quadtree import QuadLevel, Quadtree

RandomSource = Callable[[], float]


def jiggle(random: RandomSource) -> float:
    """Tiny non-zero offset used to separate coincident points."""
    return (random() - 0.5) * 1e-6


class Force(ABC):
    """A force acting on the simulation's nodes."""

    def __init__(self) -> None:
        self.nodes: Sequence[WorkingNode] = ()
        self.random: RandomSource = lambda: 0.5

    def initialize(self, nodes: Sequence[WorkingNode], random: RandomSource) -> None:
        """Bind the force to a node sequence before the first tick."""
        self.nodes = nodes
        self.random = random

    @abstractmethod
    def apply(self, alpha: float) -> None:
        """Apply one tick of the force at the given alpha."""


class LinkForce(Force):
    """Pulls each linked pair toward ``distance``.

    The correction is split between the endpoints according to their degree:
    the lower-degree endpoint moves more. ``iterations`` relaxation passes run
    per tick so chains settle before the other forces act.
    """

    def __init__(
        self,
        links: Sequence[WorkingLink],
        distance: float = 50.0,
        strength: float = 1.0,
        iterations: int = 10,
    ) -> None:
        super().__init__()
        self.links = links
        self.distance = distance
        self.strength = strength
        self.iterations = iterations
        self._bias: list[float] = []

    def initialize(self, nodes: Sequence[WorkingNode], random: RandomSource) -> None:
        super().initialize(nodes, random)
        degree = [0] * len(nodes)
        for link in self.links:
            degree[link.source.index] += 1
            degree[link.target.index] += 1
        self._bias = [
            degree[link.source.index]
            / (degree[link.source.index] + degree[link.target.index])
            for link in self.links
        ]

    def apply(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for link, bias in zip(self.links, self._bias):
                source, target = link.source, link.target
                x = target.x + target.vx - source.x - source.vx or jiggle(self.random)
                y = target.y + target.vy - source.y - source.vy or jiggle(self.random)
                length = math.sqrt(x * x + y * y)
                length = (length - self.distance) / length * alpha * self.strength
                x *= length
                y *= length
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1 - bias)
                source.vy += y * (1 - bias)


class CollideForce(Force):
    """Treats nodes as disks of ``radius(node)`` and resolves overlaps.

    Candidate pairs come from a quadtree of predicted positions
    (``x + vx``) walked for all nodes at once; each overlapping pair is then
    pushed apart in node order, the smaller disk taking the larger share of
    the displacement.
    """

    def __init__(
        self,
        radius: Callable[[WorkingNode], float],
        strength: float = 1.0,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self.radius = radius
        self.strength = strength
        self.iterations = iterations
        self._radii = np.zeros(0)

    def initialize(self, nodes: Sequence[WorkingNode], random: RandomSource) -> None:
        super().initialize(nodes, random)
        self._radii = np.array([float(self.radius(node)) for node in nodes], dtype=float)

    def apply(self, alpha: float) -> None:
        count = len(self.nodes)
        if count < 2:
            return
        for _ in range(self.iterations):
            px = np.fromiter((node.x + node.vx for node in self.nodes), float, count)
            py = np.fromiter((node.y + node.vy for node in self.nodes), float, count)
            first, second = self._candidates(px, py)
            self._resolve(first, second, px, py)

    def _candidates(self, px: np.ndarray, py: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        radii = self._radii
        tree = Quadtree(px, py)
        reach = [level.max(radii) for level in tree.levels]
        firsts: list[np.ndarray] = []
        seconds: list[np.ndarray] = []

        def visit(level: QuadLevel, points: np.ndarray, cells: np.ndarray) -> np.ndarray:
            leaf = level.is_leaf[cells]
            owner, other = level.expand(cells[leaf])
            first = points[leaf][owner]
            later = other > first
            firsts.append(first[later])
            seconds.append(other[later])

            r = radii[points] + reach[level.depth][cells]
            x0, y0, x1, y1 = tree.bounds(level, cells)
            xi, yi = px[points], py[points]
            return ~((x0 > xi + r) | (x1 < xi - r) | (y0 > yi + r) | (y1 < yi - r))

        tree.descend(np.arange(len(px)), visit)
        return np.concatenate(firsts), np.concatenate(seconds)

    def _resolve(
        self, first: np.ndarray, second: np.ndarray, px: np.ndarray, py: np.ndarray
    ) -> None:
        radii = self._radii
        dx = px[first] - px[second]
        dy = py[first] - py[second]
        reach = radii[first] + radii[second]
        overlap = dx * dx + dy * dy < reach * reach
        first, second = first[overlap], second[overlap]
        order = np.lexsort((second, first))

        radius = radii.tolist()
        current = -1
        xi = yi = 0.0
        for i, j in zip(first[order].tolist(), second[order].tolist()):
            node = self.nodes[i]
            if i != current:
                current = i
                xi = node.x + node.vx
                yi = node.y + node.vy
            self._separate(node, self.nodes[j], radius[i], radius[j], xi, yi)

    def _separate(
        self,
        node: WorkingNode,
        other: WorkingNode,
        ri: float,
        rj: float,
        xi: float,
        yi: float,
    ) -> None:
        reach = ri + rj
        x = xi - other.x - other.vx
        y = yi - other.y - other.vy
        length = x * x + y * y
        if length >= reach * reach:
            return
        if x == 0:
            x = jiggle(self.random)
            length += x * x
        if y == 0:
            y = jiggle(self.random)
            length += y * y
        length = math.sqrt(length)
        length = (reach - length) / length * self.strength
        x *= length
        y *= length
        share = rj * rj / (ri * ri + rj * rj) if ri or rj else 0.5
        node.vx += x * share
        node.vy += y * share
        other.vx -= x * (1 - share)
        other.vy -= y * (1 - share)


class AxisForce(Force):
    """Weakly pulls one coordinate of every node toward ``target``."""

    def __init__(self, axis: str, target: float, strength: float = 0.1) -> None:
        super().__init__()
        self.axis = axis
        self.target = target
        self.strength = strength

    def apply(self, alpha: float) -> None:
        pull = self.strength * alpha
        if self.axis == "x":
            for node in self.nodes:
                node.vx += (self.target - node.x) * pull
        else:
            for node in self.nodes:
                node.vy += (self.target - node.y) * pull


class ManyBodyForce(Force):
    """Pairwise charge between all nodes (negative strength repels).

    Distant groups of nodes are approximated by their charge-weighted
    centroid when ``cell width / distance < theta`` (Barnes-Hut).
    Distances are floored at ``distance_min`` and interactions beyond
    ``distance_max`` are ignored.
    """

    def __init__(
        self,
        strength: float = -30.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        super().__init__()
        self.strength = strength
        self.theta2 = theta * theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max
        self._strengths = np.zeros(0)

    def initialize(self, nodes: Sequence[WorkingNode], random: RandomSource) -> None:
        super().initialize(nodes, random)
        self._strengths = np.full(len(nodes), float(self.strength))

    def apply(self, alpha: float) -> None:
        count = len(self.nodes)
        if not count:
            return
        x = np.fromiter((node.x for node in self.nodes), float, count)
        y = np.fromiter((node.y for node in self.nodes), float, count)
        strengths = self._strengths
        tree = Quadtree(x, y)
        charges = [self._accumulate(level, x, y) for level in tree.levels]
        vx = np.zeros(count)
        vy = np.zeros(count)

        def visit(level: QuadLevel, points: np.ndarray, cells: np.ndarray) -> np.ndarray:
            value, cx, cy = charges[level.depth]
            charge = value[cells]
            dx = cx[cells] - x[points]
            dy = cy[cells] - y[points]
            distance2 = dx * dx + dy * dy
            active = charge != 0
            in_range = distance2 < self.distance_max2

            # Far enough: treat the whole cell as a single body
            far = active & (level.width * level.width / self.theta2 < distance2)

            # Close leaves act point by point, minus the node's own charge
            own = level.cell_of[points] == cells
            alone = own & (level.count[cells] == 1)
            near = active & ~far & level.is_leaf[cells] & in_range & ~alone
            charge = np.where(far | ~own, charge, charge - strengths[points])

            self._push(
                vx, vy, points, dx, dy, distance2, charge * alpha, in_range & (far | near)
            )
            return active & ~far

        tree.descend(np.arange(count), visit)

        for node, dvx, dvy in zip(self.nodes, vx.tolist(), vy.tolist()):
            node.vx += dvx
            node.vy += dvy

    def _accumulate(
        self, level: QuadLevel, x: np.ndarray, y: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        magnitude = np.abs(self._strengths)
        weight = level.sum(magnitude)
        weight = np.where(weight > 0, weight, 1.0)
        first = level.first
        cx = np.where(level.is_leaf, x[first], level.sum(magnitude * x) / weight)
        cy = np.where(level.is_leaf, y[first], level.sum(magnitude * y) / weight)
        return level.sum(self._strengths), cx, cy

    def _push(
        self,
        vx: np.ndarray,
        vy: np.ndarray,
        points: np.ndarray,
        dx: np.ndarray,
        dy: np.ndarray,
        distance2: np.ndarray,
        charge: np.ndarray,
        mask: np.ndarray,
    ) -> None:
        selected = np.flatnonzero(mask)
        if not selected.size:
            return
        points, dx, dy = points[selected], dx[selected], dy[selected]
        distance2, charge = distance2[selected], charge[selected]

        for k in np.flatnonzero((dx == 0) | (dy == 0)).tolist():
            if dx[k] == 0:
                dx[k] = jiggle(self.random)
                distance2[k] += dx[k] * dx[k]
            if dy[k] == 0:
                dy[k] = jiggle(self.random)
                distance2[k] += dy[k] * dy[k]

        distance2 = np.where(
            distance2 < self.distance_min2,
            np.sqrt(self.distance_min2 * distance2),
            distance2,
        )
        np.add.at(vx, points, dx * charge / distance2)
        np.add.at(vy, points, dy * charge / distance2)


class CenterForce(Force):
    """Translates all nodes so their centroid sits on ``(x, y)``."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        super().__init__()
        self.x = x
        self.y = y
        self.strength = strength

    def apply(self, alpha: float) -> None:
        if not self.nodes:
            return
        count = len(self.nodes)
        shift_x = (sum(node.x for node in self.nodes) / count - self.x) * self.strength
        shift_y = (sum(node.y for node in self.nodes) / count - self.y) * self.strength
        for node in self.nodes:
            node.x -= shift_x
            node.y -= shift_y
