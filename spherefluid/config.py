"""
Simulation configuration.

All physical constants are fixed when the simulation is created. The
defaults reproduce the reference fluid: 1000 unit-mass particles in a
sphere of radius 40, support radius 12, stepped at dt = 0.04.
"""

import json
import math
import numbers
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .core.errors import ConfigurationError
from .core.kernels import self_density


_REAL_FIELDS = (
    "sphere_size", "sample_radius", "rest_density", "gas_constant", "viscosity",
    "surface_tension", "particle_mass", "boundary_margin", "restitution", "time_step",
    "initial_position_mean", "initial_position_std", "density_epsilon",
)


@dataclass(frozen=True)
class SimulationConfig:
    """Physical and numerical parameters of a simulation.

    Attributes:
        num_particles: Particle count N, fixed for the simulation lifetime
        sphere_size: Radius of the containment sphere centred at the origin
        sample_radius: Kernel support radius h
        rest_density: Rest density ρ₀ of the equation of state
        gas_constant: Stiffness k of the equation of state
        viscosity: Viscosity coefficient μ
        surface_tension: Surface tension coefficient σ
        particle_mass: Mass of every particle
        external_acceleration: Uniform external field; "down" is -y
        boundary_margin: Reflection starts at sphere_size - boundary_margin
        restitution: Velocity scale applied on boundary reflection
        time_step: Step used when the caller does not pass one
        initial_position_mean: Mean of the initial Gaussian cloud (each axis)
        initial_position_std: Standard deviation of the initial cloud (each axis)
        seed: Random seed for the initial cloud, None for nondeterministic
        density_epsilon: Densities at or below this abort the simulation
        backend: 'cpu' (NumPy) or 'numba'
    """
    num_particles: int = 1000
    sphere_size: float = 40.0
    sample_radius: float = 12.0
    rest_density: float = 0.0001
    gas_constant: float = 100.0
    viscosity: float = 0.01
    surface_tension: float = 50.0
    particle_mass: float = 1.0
    external_acceleration: Tuple[float, float, float] = (0.0, -0.1, 0.0)
    boundary_margin: float = 1.0
    restitution: float = 0.8
    time_step: float = 0.04
    initial_position_mean: float = 0.0
    initial_position_std: float = 5.0
    seed: Optional[int] = None
    density_epsilon: float = 1e-12
    backend: str = "cpu"

    def __post_init__(self):
        # JSON gives lists; keep the field hashable
        try:
            accel = tuple(float(g) for g in self.external_acceleration)
        except (TypeError, ValueError):
            accel = None
        if accel is None or isinstance(self.external_acceleration, str):
            raise ConfigurationError(
                f"external_acceleration must be 3 numbers, got {self.external_acceleration!r}")
        object.__setattr__(self, "external_acceleration", accel)

    def validate(self) -> 'SimulationConfig':
        """Reject configurations that cannot produce a finite simulation.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: On the first invalid parameter found
        """
        for name in _REAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        if self.seed is not None and (isinstance(self.seed, bool)
                                      or not isinstance(self.seed, numbers.Integral)):
            raise ConfigurationError(f"seed must be an integer or null, got {self.seed!r}")

        if (isinstance(self.num_particles, bool) or not isinstance(self.num_particles, numbers.Integral)
                or self.num_particles < 1):
            raise ConfigurationError(f"num_particles must be a positive integer, got {self.num_particles!r}")

        for name in ("sphere_size", "sample_radius", "particle_mass", "time_step",
                     "density_epsilon"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")

        for name in ("rest_density", "gas_constant", "viscosity", "surface_tension",
                     "boundary_margin", "initial_position_mean", "initial_position_std"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")

        if self.viscosity < 0.0 or self.surface_tension < 0.0:
            raise ConfigurationError("viscosity and surface_tension must be non-negative")
        if self.initial_position_std < 0.0:
            raise ConfigurationError("initial_position_std must be non-negative")
        if not 0.0 <= self.restitution <= 1.0:
            raise ConfigurationError(f"restitution must lie in [0, 1], got {self.restitution!r}")
        if len(self.external_acceleration) != 3 or not all(
                math.isfinite(g) for g in self.external_acceleration):
            raise ConfigurationError(
                f"external_acceleration must be 3 finite components, got {self.external_acceleration!r}")
        if self.backend not in ("cpu", "numba"):
            raise ConfigurationError(f"Unknown backend {self.backend!r}; choose 'cpu' or 'numba'")

        # Every particle contributes m * poly6(0, h) to its own density
        rho_self = self_density(self.particle_mass, self.sample_radius)
        if rho_self <= self.density_epsilon:
            raise ConfigurationError(
                f"Self density {rho_self:.3e} <= density_epsilon {self.density_epsilon:.3e}; "
                "increase particle_mass or reduce sample_radius")
        return self

    def replace(self, **changes) -> 'SimulationConfig':
        """Copy with selected fields changed."""
        data = self.to_dict()
        data.update(changes)
        return SimulationConfig.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["external_acceleration"] = list(self.external_acceleration)
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'SimulationConfig':
        """Build a config from a mapping; unknown keys are rejected."""
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(SimulationConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")
        return SimulationConfig(**data)

    @staticmethod
    def from_json(path: Union[str, Path]) -> 'SimulationConfig':
        """Load a config from a JSON file.

        The parameters may sit at the top level or under a
        "Configuration" section.
        """
        with open(path, "r") as f:
            try:
                data = json.load(f)
            except ValueError as e:  # JSONDecodeError, UnicodeDecodeError
                raise ConfigurationError(f"{path}: invalid JSON ({e})") from e
        if isinstance(data, dict) and "Configuration" in data:
            data = data["Configuration"]
        return SimulationConfig.from_dict(data)

    def to_json(self, path: Union[str, Path]):
        with open(path, "w") as f:
            json.dump({"Configuration": self.to_dict()}, f, indent=2)
