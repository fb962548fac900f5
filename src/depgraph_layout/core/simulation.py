"""Force simulation engine.

Discrete-time relaxation: every tick cools ``alpha`` toward ``alpha_target``,
applies each registered force, then integrates velocities into positions with
velocity decay. Nothing is rendered and nothing is observable until the
caller reads the nodes back after the last tick.

Seeding is explicit and deterministic:
    - Nodes without a position are placed on a phyllotaxis spiral by index
      (radius ``initial_radius * sqrt(0.5 + i)``, angle ``i * golden angle``).
    - Coincident points are separated with offsets drawn from a linear
      congruential generator seeded from the configuration.

The same input and configuration therefore always produce the same layout.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from loguru import logger

from ..config.defaults import INITIAL_ANGLE
from ..config.layout_config import ForceConfig, SimulationConfig
from .exceptions import DegenerateInputError, SimulationError
from .forces import (
    AxisForce,
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
    RandomSource,
)
from .models import WorkingLink, WorkingNode

# Linear congruential generator constants (Numerical Recipes)
_LCG_A = 1664525
_LCG_C = 1013904223
_LCG_M = 2**32


def lcg(seed: int = 1) -> RandomSource:
    """Return a deterministic ``[0, 1)`` random source."""
    state = seed % _LCG_M

    def random() -> float:
        nonlocal state
        state = (_LCG_A * state + _LCG_C) % _LCG_M
        return state / _LCG_M

    return random


class ForceSimulation:
    """Owns the node state and the registered forces for one layout call."""

    def __init__(
        self, nodes: Sequence[WorkingNode], config: SimulationConfig | None = None
    ) -> None:
        config = config or SimulationConfig()
        self.nodes = nodes
        self.config = config
        self.alpha = config.alpha
        self.alpha_min = config.alpha_min
        self.alpha_decay = config.alpha_decay
        self.alpha_target = config.alpha_target
        self.velocity_decay = 1 - config.velocity_decay
        self.ticks = 0
        self._random = lcg(config.seed)
        self._forces: dict[str, Force] = {}
        self._initialize_nodes()

    def _initialize_nodes(self) -> None:
        for index, node in enumerate(self.nodes):
            node.index = index
            if math.isnan(node.x) or math.isnan(node.y):
                radius = self.config.initial_radius * math.sqrt(0.5 + index)
                angle = index * INITIAL_ANGLE
                node.x = radius * math.cos(angle)
                node.y = radius * math.sin(angle)
            if math.isnan(node.vx) or math.isnan(node.vy):
                node.vx = node.vy = 0.0

    def force(self, name: str, force: Force) -> ForceSimulation:
        """Register (or replace) a named force and bind it to the nodes."""
        force.initialize(self.nodes, self._random)
        self._forces[name] = force
        return self

    @property
    def forces(self) -> dict[str, Force]:
        return dict(self._forces)

    def tick(self, iterations: int = 1) -> ForceSimulation:
        """Advance the simulation by ``iterations`` steps."""
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

            for force in self._forces.values():
                force.apply(self.alpha)

            for node in self.nodes:
                node.vx *= self.velocity_decay
                node.x += node.vx
                node.vy *= self.velocity_decay
                node.y += node.vy

            self.ticks += 1
        return self

    def run(self, iterations: int | None = None) -> ForceSimulation:
        """Run the configured tick budget.

        With ``stop_when_cooled`` the loop exits early once alpha falls below
        ``alpha_min``; otherwise every tick runs.
        """
        budget = self.config.iterations if iterations is None else iterations
        for _ in range(budget):
            if self.config.stop_when_cooled and self.alpha < self.alpha_min:
                break
            self.tick()
        return self


def layout(
    nodes: Sequence[WorkingNode],
    links: Sequence[WorkingLink],
    width: float,
    height: float,
    size_fn: Callable[[float], float],
    forces: ForceConfig | None = None,
    simulation: SimulationConfig | None = None,
) -> Sequence[WorkingNode]:
    """Relax node positions under the five layout forces.

    Args:
        nodes: Working nodes; mutated in place (``x``, ``y``, ``vx``, ``vy``)
        links: Working links referencing the same node objects
        width: Viewport width
        height: Viewport height
        size_fn: Weight to rendered radius (collision radius adds padding)
        forces: Force parameters (defaults match the chart)
        simulation: Loop parameters (default: 300 ticks, no early exit)

    Returns:
        The same node sequence, now positioned

    Raises:
        DegenerateInputError: If there are no nodes
        SimulationError: If the simulation produced non-finite coordinates
    """
    if not nodes:
        raise DegenerateInputError("Cannot lay out an empty node set")

    forces = forces or ForceConfig()
    sim = ForceSimulation(nodes, simulation)

    padding = forces.collide_padding
    sim.force(
        "link",
        LinkForce(
            links,
            distance=forces.link_distance,
            strength=forces.link_strength,
            iterations=forces.link_iterations,
        ),
    )
    sim.force(
        "collide",
        CollideForce(
            lambda node: size_fn(node.rendered_length) + padding,
            strength=forces.collide_strength,
            iterations=forces.collide_iterations,
        ),
    )
    # The chart biases the x coordinate toward height / 2; the result is
    # rotated into landscape afterwards by the normalizer.
    sim.force(
        "bias",
        AxisForce(forces.bias_axis, height / 2, strength=forces.bias_strength),
    )
    sim.force(
        "charge",
        ManyBodyForce(
            strength=forces.charge_strength,
            theta=forces.charge_theta,
            distance_min=forces.charge_distance_min,
            distance_max=forces.charge_distance_max,
        ),
    )
    sim.force(
        "center",
        CenterForce(width / 2, height / 2, strength=forces.center_strength),
    )

    sim.run()

    for node in nodes:
        if not (math.isfinite(node.x) and math.isfinite(node.y)):
            raise SimulationError(
                f"Node '{node.uid}' ended with non-finite coordinates",
                context={"uid": node.uid, "x": node.x, "y": node.y, "ticks": sim.ticks},
            )

    logger.debug(
        f"Simulation: {len(nodes)} nodes, {len(links)} links, "
        f"{sim.ticks} ticks, final alpha={sim.alpha:.4f}"
    )
    return nodes
