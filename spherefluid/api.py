"""
Unified API for SPH with automatic backend dispatch.

This module provides a clean interface that dispatches each simulation
phase to the NumPy or Numba implementation based on the current backend.
"""

import numpy as np
from typing import Optional, Sequence
from .core.backend import (
    Backend,
    backend_function,
    for_backend,
    dispatch,
    set_backend,
    get_backend,
    list_backends,
    print_backend_info,
)
from .core.particles import ParticleArrays
from .core.neighbors import AllPairsNeighborhood
from .core.integrator import integrate_semi_implicit_euler_vectorized

# CPU implementations
from .physics.fields_vectorized import (
    compute_density_vectorized,
    compute_pressure_vectorized,
    compute_color_gradient_vectorized,
    compute_color_field_vectorized,
)
from .physics.forces_vectorized import (
    compute_forces_vectorized,
    compute_pressure_force_vectorized,
    compute_viscosity_force_vectorized,
    compute_surface_tension_force_vectorized,
    compute_external_force_vectorized,
)

# Numba implementations
from .physics.sph_numba import (
    compute_density_numba_wrapper,
    compute_color_gradient_numba_wrapper,
    compute_color_field_numba_wrapper,
    compute_forces_numba_wrapper,
)


def _table(particles: ParticleArrays, neighborhood: Optional[AllPairsNeighborhood],
           n_active: int, h: float) -> AllPairsNeighborhood:
    """The caller's pair table, or a fresh one for the current positions."""
    if neighborhood is None:
        neighborhood = AllPairsNeighborhood(h).build(particles, n_active)
    return neighborhood


# Register CPU implementations
@backend_function("compute_density")
@for_backend(Backend.CPU)
def _compute_density_cpu(particles: ParticleArrays,
                         neighborhood: Optional[AllPairsNeighborhood], n_active: int, h: float):
    compute_density_vectorized(particles, _table(particles, neighborhood, n_active, h),
                               n_active, h)


@backend_function("compute_pressure")
@for_backend(Backend.CPU)
def _compute_pressure_cpu(particles: ParticleArrays, n_active: int,
                          rest_density: float, gas_constant: float):
    compute_pressure_vectorized(particles, n_active, rest_density, gas_constant)


@backend_function("compute_color_gradient")
@for_backend(Backend.CPU)
def _compute_color_gradient_cpu(particles: ParticleArrays,
                                neighborhood: Optional[AllPairsNeighborhood],
                                n_active: int, h: float):
    compute_color_gradient_vectorized(particles, _table(particles, neighborhood, n_active, h),
                                      n_active, h)


@backend_function("compute_color_field")
@for_backend(Backend.CPU)
def _compute_color_field_cpu(particles: ParticleArrays,
                             neighborhood: Optional[AllPairsNeighborhood],
                             n_active: int, h: float) -> np.ndarray:
    return compute_color_field_vectorized(particles, _table(particles, neighborhood, n_active, h),
                                          n_active, h)


@backend_function("compute_forces")
@for_backend(Backend.CPU)
def _compute_forces_cpu(particles: ParticleArrays, neighborhood: Optional[AllPairsNeighborhood],
                        n_active: int, h: float, viscosity: float, surface_tension: float,
                        external_acceleration: Sequence[float]):
    compute_forces_vectorized(particles, _table(particles, neighborhood, n_active, h),
                              n_active, h, viscosity, surface_tension, external_acceleration)


# Register Numba implementations; the compiled loops visit every pair
# directly, so any pair table passed in is ignored
@backend_function("compute_density")
@for_backend(Backend.NUMBA)
def _compute_density_numba(particles: ParticleArrays,
                           neighborhood: Optional[AllPairsNeighborhood], n_active: int, h: float):
    compute_density_numba_wrapper(particles, n_active, h)


@backend_function("compute_pressure")
@for_backend(Backend.NUMBA)
def _compute_pressure_numba(particles: ParticleArrays, n_active: int,
                            rest_density: float, gas_constant: float):
    # Elementwise; the NumPy expression is already optimal
    compute_pressure_vectorized(particles, n_active, rest_density, gas_constant)


@backend_function("compute_color_gradient")
@for_backend(Backend.NUMBA)
def _compute_color_gradient_numba(particles: ParticleArrays,
                                  neighborhood: Optional[AllPairsNeighborhood],
                                  n_active: int, h: float):
    compute_color_gradient_numba_wrapper(particles, n_active, h)


@backend_function("compute_color_field")
@for_backend(Backend.NUMBA)
def _compute_color_field_numba(particles: ParticleArrays,
                               neighborhood: Optional[AllPairsNeighborhood],
                               n_active: int, h: float) -> np.ndarray:
    return compute_color_field_numba_wrapper(particles, n_active, h)


@backend_function("compute_forces")
@for_backend(Backend.NUMBA)
def _compute_forces_numba(particles: ParticleArrays, neighborhood: Optional[AllPairsNeighborhood],
                          n_active: int, h: float, viscosity: float, surface_tension: float,
                          external_acceleration: Sequence[float]):
    compute_forces_numba_wrapper(particles, n_active, h, viscosity, surface_tension,
                                 external_acceleration)


def uses_pair_table(backend: Optional[str] = None) -> bool:
    """True if the backend's passes read an AllPairsNeighborhood."""
    return (backend or get_backend()) == Backend.CPU.value


# Public API functions that dispatch to appropriate backend
def compute_density(particles: ParticleArrays, h: float,
                    neighborhood: Optional[AllPairsNeighborhood] = None,
                    n_active: Optional[int] = None, backend: Optional[str] = None):
    """Compute SPH density using current or specified backend.

    Args:
        particles: Particle arrays
        h: Support radius
        neighborhood: Built pair table for the CPU backend (built there if None;
            the Numba backend ignores it)
        n_active: Number of active particles
        backend: Override backend ('cpu', 'numba', or None for current)
    """
    if n_active is None:
        n_active = particles.n_particles
    dispatch("compute_density", particles, neighborhood, n_active, h, backend=backend)


def compute_pressure(particles: ParticleArrays, rest_density: float = 0.0001,
                     gas_constant: float = 100.0, n_active: Optional[int] = None,
                     backend: Optional[str] = None):
    """Compute pressure using the linear equation of state.

    Args:
        particles: Particle arrays with density computed
        rest_density: Rest density ρ₀
        gas_constant: Stiffness k
        n_active: Number of active particles
        backend: Override backend
    """
    if n_active is None:
        n_active = particles.n_particles
    dispatch("compute_pressure", particles, n_active, rest_density, gas_constant,
             backend=backend)


def compute_color_gradient(particles: ParticleArrays, h: float,
                           neighborhood: Optional[AllPairsNeighborhood] = None,
                           n_active: Optional[int] = None, backend: Optional[str] = None):
    """Compute the color-field gradient (free-surface normal estimate)."""
    if n_active is None:
        n_active = particles.n_particles
    dispatch("compute_color_gradient", particles, neighborhood, n_active, h, backend=backend)


def compute_color_field(particles: ParticleArrays, h: float,
                        neighborhood: Optional[AllPairsNeighborhood] = None,
                        n_active: Optional[int] = None,
                        backend: Optional[str] = None) -> np.ndarray:
    """Scalar color field per particle, for debug overlays."""
    if n_active is None:
        n_active = particles.n_particles
    return dispatch("compute_color_field", particles, neighborhood, n_active, h,
                    backend=backend)


def compute_forces(particles: ParticleArrays, h: float, viscosity: float = 0.01,
                   surface_tension: float = 50.0,
                   external_acceleration: Sequence[float] = (0.0, -0.1, 0.0),
                   neighborhood: Optional[AllPairsNeighborhood] = None,
                   n_active: Optional[int] = None, backend: Optional[str] = None):
    """Compute net force and acceleration using current or specified backend.

    Args:
        particles: Particle arrays with density, pressure and color gradient computed
        h: Support radius
        viscosity: Viscosity coefficient
        surface_tension: Surface tension coefficient
        external_acceleration: Uniform external field
        neighborhood: Built pair table for the CPU backend (built there if None;
            the Numba backend ignores it)
        n_active: Number of active particles
        backend: Override backend
    """
    if n_active is None:
        n_active = particles.n_particles
    dispatch("compute_forces", particles, neighborhood, n_active, h, viscosity,
             surface_tension, tuple(external_acceleration), backend=backend)


def integrate(particles: ParticleArrays, dt: float = 0.04,
              sphere_size: Optional[float] = None, boundary_margin: float = 1.0,
              restitution: float = 0.8, n_active: Optional[int] = None) -> Optional[np.ndarray]:
    """Semi-implicit Euler step with optional spherical boundary.

    Returns:
        Boolean mask of reflected particles, or None without a boundary
    """
    if n_active is None:
        n_active = particles.n_particles
    return integrate_semi_implicit_euler_vectorized(particles, n_active, dt, sphere_size,
                                                    boundary_margin, restitution)


# Individual force terms (NumPy only), for diagnostics and tests
def compute_pressure_force(particles: ParticleArrays, h: float,
                           neighborhood: Optional[AllPairsNeighborhood] = None,
                           n_active: Optional[int] = None) -> np.ndarray:
    if n_active is None:
        n_active = particles.n_particles
    neighborhood = _table(particles, neighborhood, n_active, h)
    return compute_pressure_force_vectorized(particles, neighborhood, n_active, h)


def compute_viscosity_force(particles: ParticleArrays, h: float, viscosity: float = 0.01,
                            neighborhood: Optional[AllPairsNeighborhood] = None,
                            n_active: Optional[int] = None) -> np.ndarray:
    if n_active is None:
        n_active = particles.n_particles
    neighborhood = _table(particles, neighborhood, n_active, h)
    return compute_viscosity_force_vectorized(particles, neighborhood, n_active, h, viscosity)


def compute_surface_tension_force(particles: ParticleArrays, h: float,
                                  surface_tension: float = 50.0,
                                  neighborhood: Optional[AllPairsNeighborhood] = None,
                                  n_active: Optional[int] = None) -> np.ndarray:
    if n_active is None:
        n_active = particles.n_particles
    neighborhood = _table(particles, neighborhood, n_active, h)
    return compute_surface_tension_force_vectorized(particles, neighborhood, n_active, h,
                                                    surface_tension)


def compute_external_force(particles: ParticleArrays,
                           external_acceleration: Sequence[float] = (0.0, -0.1, 0.0),
                           n_active: Optional[int] = None) -> np.ndarray:
    if n_active is None:
        n_active = particles.n_particles
    return compute_external_force_vectorized(particles, n_active, external_acceleration)


__all__ = [
    # Phase functions
    'compute_density',
    'compute_pressure',
    'compute_color_gradient',
    'compute_color_field',
    'compute_forces',
    'integrate',

    # Individual force terms
    'compute_pressure_force',
    'compute_viscosity_force',
    'compute_surface_tension_force',
    'compute_external_force',

    # Backend management
    'set_backend',
    'get_backend',
    'list_backends',
    'print_backend_info',
    'uses_pair_table',
]
