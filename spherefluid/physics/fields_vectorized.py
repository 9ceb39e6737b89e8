"""
Vectorized field estimation for SPH.

Three full passes, each finished for every particle before the next:
- Density:        ρᵢ = Σⱼ mⱼ W_poly6(|xᵢ - xⱼ|, h)
- Pressure:       pᵢ = k (ρᵢ - ρ₀)
- Color gradient: cᵢ = Σⱼ n̂(xⱼ - xᵢ) mⱼ/ρⱼ ∇W_poly6(|xⱼ - xᵢ|, h)

Sums run over all j including i. The i == j term always adds mᵢ W(0, h)
to the density, and adds nothing to the color gradient because the zero
displacement normalizes to the zero vector.
"""

import numpy as np
from typing import Optional
from ..core.particles import ParticleArrays
from ..core.neighbors import AllPairsNeighborhood
from ..core.kernels import poly6, poly6_gradient, safe_normalize
from ..core.errors import DensityDegeneracyError


def compute_density_vectorized(particles: ParticleArrays, neighborhood: AllPairsNeighborhood,
                               n_active: int, h: float):
    """Density by direct summation over every pair.

    Args:
        particles: Particle arrays
        neighborhood: Built all-pairs neighborhood for the current positions
        n_active: Number of active particles
        h: Support radius
    """
    W = poly6(neighborhood.distances, h)
    mass = particles.mass[:n_active]
    particles.density[:n_active] = np.sum(mass[np.newaxis, :] * W, axis=1)


def check_density(particles: ParticleArrays, n_active: int, epsilon: float):
    """Raise DensityDegeneracyError if any density is <= epsilon or not finite."""
    density = particles.density[:n_active]
    bad = ~(density > epsilon) | ~np.isfinite(density)
    if np.any(bad):
        raise DensityDegeneracyError(np.flatnonzero(bad), epsilon)


def linear_equation_of_state(density: np.ndarray, rest_density: float,
                             gas_constant: float) -> np.ndarray:
    """Linear equation of state.

    P = k(ρ - ρ₀)

    Negative pressure (ρ < ρ₀) is kept: it pulls under-dense regions together.
    """
    return gas_constant * (density - rest_density)


def compute_pressure_vectorized(particles: ParticleArrays, n_active: int,
                                rest_density: float, gas_constant: float):
    """Pressure pass using the linear equation of state."""
    particles.pressure[:n_active] = linear_equation_of_state(
        particles.density[:n_active], rest_density, gas_constant
    )


def compute_color_gradient_vectorized(particles: ParticleArrays,
                                      neighborhood: AllPairsNeighborhood,
                                      n_active: int, h: float):
    """Smoothed color-field gradient, the free-surface normal estimate.

    Requires density from the current step for every particle.
    """
    distances = neighborhood.distances
    # Direction from i to j is -(xᵢ - xⱼ)
    ux, uy, uz = safe_normalize(-neighborhood.dx, -neighborhood.dy, -neighborhood.dz,
                                distances)

    volume = particles.mass[:n_active] / particles.density[:n_active]
    coeff = volume[np.newaxis, :] * poly6_gradient(distances, h)

    particles.color_gradient_x[:n_active] = np.sum(ux * coeff, axis=1)
    particles.color_gradient_y[:n_active] = np.sum(uy * coeff, axis=1)
    particles.color_gradient_z[:n_active] = np.sum(uz * coeff, axis=1)


def compute_color_field_vectorized(particles: ParticleArrays, neighborhood: AllPairsNeighborhood,
                                   n_active: int, h: float,
                                   out: Optional[np.ndarray] = None) -> np.ndarray:
    """Scalar color field Cᵢ = Σⱼ mⱼ/ρⱼ W_poly6(|xᵢ - xⱼ|, h).

    Diagnostic only; the step uses the gradient. Close to 1 inside the
    fluid and dropping toward the free surface.
    """
    volume = particles.mass[:n_active] / particles.density[:n_active]
    color = np.sum(volume[np.newaxis, :] * poly6(neighborhood.distances, h), axis=1)
    if out is not None:
        out[:n_active] = color
        return out
    return color
