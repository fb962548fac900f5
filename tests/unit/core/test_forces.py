"""Unit tests for the individual simulation forces."""

import math

import pytest

from depgraph_layout.core.forces import (
    AxisForce,
    CenterForce,
    CollideForce,
    LinkForce,
    ManyBodyForce,
    jiggle,
)
from depgraph_layout.core.models import WorkingLink, WorkingNode
from depgraph_layout.core.simulation import lcg


def _node(index: int, x: float, y: float) -> WorkingNode:
    return WorkingNode(uid=f"n{index}", id=f"n{index}.js", rendered_length=1, index=index, x=x, y=y)


class TestJiggle:
    """Test the coincidence-breaking offset."""

    def test_tiny_and_deterministic(self):
        """Offsets are sub-micro and reproducible for a given seed."""
        first = [jiggle(lcg(7)) for _ in range(3)]
        second = [jiggle(lcg(7)) for _ in range(3)]

        assert first == second
        assert all(abs(value) <= 0.5e-6 for value in first)


class TestLinkForce:
    """Test link attraction."""

    def test_pulls_distant_pair_together(self):
        """Nodes further apart than the link distance move toward each other."""
        a, b = _node(0, 0, 0), _node(1, 100, 0)
        force = LinkForce([WorkingLink(a, b)], distance=50, strength=1, iterations=1)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        # (100 - 50) / 100 of the gap, split evenly between equal-degree ends
        assert a.vx == pytest.approx(25)
        assert b.vx == pytest.approx(-25)

    def test_pushes_close_pair_apart(self):
        """Nodes closer than the link distance are pushed apart."""
        a, b = _node(0, 0, 0), _node(1, 10, 0)
        force = LinkForce([WorkingLink(a, b)], distance=50, strength=1, iterations=1)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx < 0 < b.vx

    def test_bias_favours_low_degree_endpoint(self):
        """The hub moves less than the leaf it is linked to."""
        hub = _node(0, 0, 0)
        leaves = [_node(1, 100, 0), _node(2, -100, 0), _node(3, 0, 100)]
        links = [WorkingLink(hub, leaf) for leaf in leaves]
        force = LinkForce(links, distance=50, strength=1, iterations=1)
        force.initialize([hub, *leaves], lcg())

        force.apply(0.1)

        assert abs(leaves[0].vx) > abs(hub.vx)

    def test_scales_with_alpha(self):
        """A cold simulation barely moves the nodes."""
        a, b = _node(0, 0, 0), _node(1, 100, 0)
        force = LinkForce([WorkingLink(a, b)], distance=50, strength=1, iterations=1)
        force.initialize([a, b], lcg())

        force.apply(0.01)

        assert a.vx == pytest.approx(0.25)


class TestCollideForce:
    """Test collision resolution."""

    def test_separates_overlapping_disks(self):
        """Overlapping equal disks are pushed to touching, half each."""
        a, b = _node(0, 0, 0), _node(1, 4, 0)
        force = CollideForce(lambda node: 5.0)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx == pytest.approx(-3)
        assert b.vx == pytest.approx(3)
        assert (b.x + b.vx) - (a.x + a.vx) == pytest.approx(10)

    def test_ignores_separated_disks(self):
        """Disks that do not overlap are left alone."""
        a, b = _node(0, 0, 0), _node(1, 20, 0)
        force = CollideForce(lambda node: 5.0)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx == b.vx == 0

    def test_smaller_disk_moves_more(self):
        """Displacement is shared in proportion to the other disk's area."""
        small, large = _node(0, 0, 0), _node(1, 10, 0)
        radii = {0: 2.0, 1: 12.0}
        force = CollideForce(lambda node: radii[node.index])
        force.initialize([small, large], lcg())

        force.apply(1.0)

        assert abs(small.vx) > abs(large.vx)

    def test_overlaps_found_across_the_tree(self):
        """Every overlapping pair is resolved, wherever it sits in the tree."""
        nodes = []
        for k in range(10):
            x, y = k * 100.0, (k % 3) * 50.0
            nodes += [_node(2 * k, x, y), _node(2 * k + 1, x + 4, y)]
        force = CollideForce(lambda node: 5.0)
        force.initialize(nodes, lcg())

        force.apply(1.0)

        for left, right in zip(nodes[::2], nodes[1::2]):
            gap = (right.x + right.vx) - (left.x + left.vx)
            assert gap == pytest.approx(10)

    def test_coincident_nodes_are_separated(self):
        """Nodes at the same spot get a non-zero push."""
        a, b = _node(0, 5, 5), _node(1, 5, 5)
        force = CollideForce(lambda node: 3.0)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert (a.vx, a.vy) != (0, 0)
        assert math.isfinite(a.vx) and math.isfinite(b.vy)


class TestAxisForce:
    """Test the one-axis centering bias."""

    def test_pulls_x_toward_target(self):
        """The x velocity moves toward the target, y is untouched."""
        node = _node(0, 100, 7)
        force = AxisForce("x", 300, strength=0.05)
        force.initialize([node], lcg())

        force.apply(1.0)

        assert node.vx == pytest.approx(10)
        assert node.vy == 0

    def test_y_axis(self):
        """The y axis variant pulls y only."""
        node = _node(0, 100, 0)
        force = AxisForce("y", 300, strength=0.05)
        force.initialize([node], lcg())

        force.apply(0.5)

        assert node.vx == 0
        assert node.vy == pytest.approx(7.5)


class TestManyBodyForce:
    """Test pairwise repulsion."""

    def test_negative_strength_repels(self):
        """Two nodes push each other apart along the line joining them."""
        a, b = _node(0, 0, 0), _node(1, 10, 0)
        force = ManyBodyForce(strength=-100)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx == pytest.approx(-10)
        assert b.vx == pytest.approx(10)

    def test_positive_strength_attracts(self):
        """Positive charge pulls nodes together."""
        a, b = _node(0, 0, 0), _node(1, 10, 0)
        force = ManyBodyForce(strength=30)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx > 0 > b.vx

    def test_distance_max_cuts_off(self):
        """Nodes beyond distance_max do not interact."""
        a, b = _node(0, 0, 0), _node(1, 100, 0)
        force = ManyBodyForce(strength=-100, distance_max=50)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert a.vx == b.vx == 0

    def test_approximation_matches_direction(self):
        """A far cluster repels a lone node away from it."""
        lone = _node(0, -500, 0)
        cluster = [_node(i, 100 + i, float(i % 3)) for i in range(1, 8)]
        force = ManyBodyForce(strength=-100, theta=0.9)
        force.initialize([lone, *cluster], lcg())

        force.apply(1.0)

        assert lone.vx < 0
        assert abs(lone.vy) < abs(lone.vx)

    def test_tight_theta_matches_exact_sum(self):
        """With theta near zero the tree walk gives the exact all-pairs sum."""
        random = lcg(11)
        nodes = [_node(i, random() * 200, random() * 200) for i in range(40)]
        expected = []
        for node in nodes:
            fx = fy = 0.0
            for other in nodes:
                if other is node:
                    continue
                dx, dy = other.x - node.x, other.y - node.y
                l2 = dx * dx + dy * dy
                if l2 < 1:
                    l2 = math.sqrt(l2)
                fx += dx * -100 * 0.5 / l2
                fy += dy * -100 * 0.5 / l2
            expected.append((fx, fy))
        force = ManyBodyForce(strength=-100, theta=1e-6)
        force.initialize(nodes, lcg())

        force.apply(0.5)

        for node, (fx, fy) in zip(nodes, expected):
            assert node.vx == pytest.approx(fx, rel=1e-9, abs=1e-12)
            assert node.vy == pytest.approx(fy, rel=1e-9, abs=1e-12)

    def test_default_theta_stays_close_to_exact(self):
        """Barnes-Hut stays close to the exact forces overall."""
        random = lcg(5)
        nodes = [_node(i, random() * 500, random() * 500) for i in range(120)]
        exact = [_node(i, n.x, n.y) for i, n in enumerate(nodes)]
        approx = ManyBodyForce(strength=-100, theta=0.9)
        reference = ManyBodyForce(strength=-100, theta=1e-6)
        approx.initialize(nodes, lcg())
        reference.initialize(exact, lcg())

        approx.apply(1.0)
        reference.apply(1.0)

        error = sum(math.hypot(a.vx - b.vx, a.vy - b.vy) for a, b in zip(nodes, exact))
        total = sum(math.hypot(b.vx, b.vy) for b in exact)
        assert error < 0.25 * total

    def test_coincident_nodes_are_separated(self):
        """Nodes at the same spot get a finite, non-zero push."""
        a, b = _node(0, 5, 5), _node(1, 5, 5)
        force = ManyBodyForce(strength=-100)
        force.initialize([a, b], lcg())

        force.apply(1.0)

        assert (a.vx, a.vy) != (0, 0)
        assert all(math.isfinite(v) for v in (a.vx, a.vy, b.vx, b.vy))


class TestCenterForce:
    """Test centroid translation."""

    def test_moves_centroid_onto_target(self):
        """After one application the centroid is exactly the target."""
        nodes = [_node(0, 0, 0), _node(1, 10, 0), _node(2, 5, 30)]
        force = CenterForce(400, 300)
        force.initialize(nodes, lcg())

        force.apply(1.0)

        assert sum(n.x for n in nodes) / 3 == pytest.approx(400)
        assert sum(n.y for n in nodes) / 3 == pytest.approx(300)
        assert nodes[1].x - nodes[0].x == pytest.approx(10)

    def test_no_nodes(self):
        """An empty node set is a no-op."""
        force = CenterForce(1, 1)
        force.initialize([], lcg())
        force.apply(1.0)
