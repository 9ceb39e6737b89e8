"""Core SPH components: particles, kernels, neighborhood, integration, boundary."""

from .particles import ParticleArrays
from .kernels import (
    poly6,
    poly6_gradient,
    poly6_laplacian,
    viscosity_laplacian,
    spiky,
    spiky_gradient,
    safe_normalize,
    self_density
)
from .neighbors import AllPairsNeighborhood
from .integrator import integrate_semi_implicit_euler_vectorized
from .boundary import apply_spherical_boundary_vectorized, radial_velocity
from .errors import SimulationError, ConfigurationError, DensityDegeneracyError

__all__ = [
    'ParticleArrays',
    'poly6',
    'poly6_gradient',
    'poly6_laplacian',
    'viscosity_laplacian',
    'spiky',
    'spiky_gradient',
    'safe_normalize',
    'self_density',
    'AllPairsNeighborhood',
    'integrate_semi_implicit_euler_vectorized',
    'apply_spherical_boundary_vectorized',
    'radial_velocity',
    'SimulationError',
    'ConfigurationError',
    'DensityDegeneracyError'
]
