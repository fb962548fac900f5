"""Layout configuration for the force simulation and size scale."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import ConfigError
from . import defaults


@dataclass
class SimulationConfig:
    """Simulation loop parameters."""

    iterations: int = defaults.DEFAULT_ITERATIONS
    alpha: float = defaults.DEFAULT_ALPHA
    alpha_min: float = defaults.DEFAULT_ALPHA_MIN
    alpha_target: float = defaults.DEFAULT_ALPHA_TARGET
    velocity_decay: float = defaults.DEFAULT_VELOCITY_DECAY
    seed: int = defaults.DEFAULT_SEED
    initial_radius: float = defaults.INITIAL_RADIUS

    # Stop as soon as alpha drops below alpha_min instead of running every tick
    stop_when_cooled: bool = False

    @property
    def alpha_decay(self) -> float:
        """Per-tick decay that takes alpha from 1 to alpha_min over the budget."""
        if self.iterations <= 0:
            return 1.0
        return 1 - self.alpha_min ** (1 / self.iterations)


@dataclass
class ForceConfig:
    """Parameters of the five composed forces."""

    link_distance: float = defaults.LINK_DISTANCE
    link_strength: float = defaults.LINK_STRENGTH
    link_iterations: int = defaults.LINK_ITERATIONS

    collide_padding: float = defaults.COLLIDE_PADDING
    collide_strength: float = defaults.COLLIDE_STRENGTH
    collide_iterations: int = defaults.COLLIDE_ITERATIONS

    bias_axis: str = defaults.BIAS_AXIS
    bias_strength: float = defaults.BIAS_STRENGTH

    charge_strength: float = defaults.CHARGE_STRENGTH
    charge_theta: float = defaults.CHARGE_THETA
    charge_distance_min: float = defaults.CHARGE_DISTANCE_MIN
    charge_distance_max: float = defaults.CHARGE_DISTANCE_MAX

    center_strength: float = defaults.CENTER_STRENGTH


@dataclass
class ScaleConfig:
    """Weight-to-radius scale bounds."""

    domain_min: float = defaults.SCALE_DOMAIN_MIN
    range_min: float = defaults.SCALE_RANGE_MIN
    range_max: float = defaults.SCALE_RANGE_MAX


@dataclass
class LayoutConfig:
    """Complete layout configuration."""

    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    forces: ForceConfig = field(default_factory=ForceConfig)
    scale: ScaleConfig = field(default_factory=ScaleConfig)

    @classmethod
    def load(cls, path: str | Path) -> LayoutConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            LayoutConfig instance (defaults when the file does not exist)
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary with optional ``simulation``,
                ``forces`` and ``scale`` sections

        Returns:
            Validated LayoutConfig instance

        Raises:
            ConfigError: If a section has unknown keys or impossible values
        """
        sections = {
            "simulation": SimulationConfig,
            "forces": ForceConfig,
            "scale": ScaleConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(
                f"Unknown configuration sections: {sorted(unknown)}",
                context={"sections": sorted(unknown)},
            )

        kwargs: dict[str, Any] = {}
        for name, section_cls in sections.items():
            section_data = data.get(name) or {}
            try:
                kwargs[name] = section_cls(**section_data)
            except TypeError as e:
                raise ConfigError(
                    f"Invalid '{name}' configuration: {e}",
                    context={"section": name, "data": section_data},
                ) from e

        config = cls(**kwargs)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "simulation": asdict(self.simulation),
            "forces": asdict(self.forces),
            "scale": asdict(self.scale),
        }

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Path to save configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """Reject values the simulation cannot run with.

        Raises:
            ConfigError: On the first impossible value found
        """
        sim, forces, scale = self.simulation, self.forces, self.scale

        if sim.iterations < 0:
            raise ConfigError(
                "simulation.iterations must be >= 0",
                context={"iterations": sim.iterations},
            )
        if not 0 < sim.alpha_min <= 1:
            raise ConfigError(
                "simulation.alpha_min must be in (0, 1]",
                context={"alpha_min": sim.alpha_min},
            )
        if not 0 <= sim.velocity_decay <= 1:
            raise ConfigError(
                "simulation.velocity_decay must be in [0, 1]",
                context={"velocity_decay": sim.velocity_decay},
            )
        if forces.link_distance <= 0:
            raise ConfigError(
                "forces.link_distance must be positive",
                context={"link_distance": forces.link_distance},
            )
        if forces.link_iterations < 1 or forces.collide_iterations < 1:
            raise ConfigError(
                "forces.link_iterations and forces.collide_iterations must be >= 1",
                context={
                    "link_iterations": forces.link_iterations,
                    "collide_iterations": forces.collide_iterations,
                },
            )
        if forces.bias_axis not in defaults.BIAS_AXES:
            raise ConfigError(
                f"forces.bias_axis must be one of {defaults.BIAS_AXES}",
                context={"bias_axis": forces.bias_axis},
            )
        if forces.charge_theta <= 0:
            raise ConfigError(
                "forces.charge_theta must be positive",
                context={"charge_theta": forces.charge_theta},
            )
        if forces.charge_distance_min <= 0 or (
            not math.isinf(forces.charge_distance_max)
            and forces.charge_distance_max <= forces.charge_distance_min
        ):
            raise ConfigError(
                "forces.charge_distance_min must be positive and below charge_distance_max",
                context={
                    "charge_distance_min": forces.charge_distance_min,
                    "charge_distance_max": forces.charge_distance_max,
                },
            )
        if scale.domain_min <= 0:
            raise ConfigError(
                "scale.domain_min must be positive",
                context={"domain_min": scale.domain_min},
            )
        if scale.range_min < 0 or scale.range_min > scale.range_max:
            raise ConfigError(
                "scale range must satisfy 0 <= range_min <= range_max",
                context={"range_min": scale.range_min, "range_max": scale.range_max},
            )
