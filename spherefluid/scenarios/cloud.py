"""
Particle cloud initialization.

The default scene is a Gaussian blob of fluid released at rest around
the origin inside the containment sphere.
"""

import numpy as np
from typing import Optional, Sequence
from ..core.particles import ParticleArrays
from ..config import SimulationConfig


def create_gaussian_cloud(n_particles: int, mean: float = 0.0, std: float = 5.0,
                          mass: float = 1.0, seed: Optional[int] = None,
                          rng: Optional[np.random.Generator] = None) -> ParticleArrays:
    """Sample particle positions from an isotropic 3D normal distribution.

    Velocities start at zero; every particle gets the same mass.

    Args:
        n_particles: Number of particles
        mean: Mean of each coordinate
        std: Standard deviation of each coordinate
        mass: Mass of every particle
        seed: Seed for a fresh generator (ignored when rng is given)
        rng: Generator to draw from

    Returns:
        Initialized ParticleArrays
    """
    if rng is None:
        rng = np.random.default_rng(seed)

    positions = rng.normal(mean, std, size=(n_particles, 3))
    return ParticleArrays.from_positions(positions, mass=mass)


def create_particle_set(positions: Sequence[Sequence[float]],
                        velocities: Optional[Sequence[Sequence[float]]] = None,
                        mass: float = 1.0) -> ParticleArrays:
    """Particles at explicit positions, e.g. small hand-built test scenes."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if velocities is not None:
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 3)
        if velocities.shape != positions.shape:
            raise ValueError(f"velocities shape {velocities.shape} does not match "
                             f"positions shape {positions.shape}")
    return ParticleArrays.from_positions(positions, velocities, mass=mass)


def create_from_config(config: SimulationConfig) -> ParticleArrays:
    """Gaussian cloud sized and seeded from a configuration."""
    return create_gaussian_cloud(
        config.num_particles,
        mean=config.initial_position_mean,
        std=config.initial_position_std,
        mass=config.particle_mass,
        seed=config.seed,
    )
