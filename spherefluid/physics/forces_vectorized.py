"""
Fully vectorized force computation for SPH.

Includes:
- Pressure forces (spiky gradient, symmetric pressure average)
- Viscous forces (viscosity kernel laplacian)
- Surface tension (color-field curvature)
- External forces (uniform gravity-like field)

Every term reads the density, pressure and color gradient of the whole
particle set, so the field passes must be complete before any of these
run. Each term returns an (N, 3) force array.
"""

import numpy as np
from typing import Sequence, Tuple
from ..core.particles import ParticleArrays
from ..core.neighbors import AllPairsNeighborhood
from ..core.kernels import (
    poly6_laplacian,
    spiky_gradient,
    viscosity_laplacian,
    safe_normalize,
)


def compute_pressure_force_vectorized(particles: ParticleArrays,
                                      neighborhood: AllPairsNeighborhood,
                                      n_active: int, h: float) -> np.ndarray:
    """Pressure force.

    Fᵢ = -Σⱼ n̂(xᵢ - xⱼ) mⱼ (pᵢ + pⱼ)/(2ρⱼ) ∇W_spiky(|xᵢ - xⱼ|, h)

    Args:
        particles: Particle arrays with density and pressure computed
        neighborhood: Built all-pairs neighborhood
        n_active: Number of active particles
        h: Support radius

    Returns:
        (n_active, 3) force array
    """
    ux, uy, uz = safe_normalize(neighborhood.dx, neighborhood.dy, neighborhood.dz,
                                neighborhood.distances)

    pressure = particles.pressure[:n_active]
    density = particles.density[:n_active]
    mass = particles.mass[:n_active]

    pressure_sum = pressure[:, np.newaxis] + pressure[np.newaxis, :]
    coeff = (mass[np.newaxis, :] * pressure_sum / (2.0 * density[np.newaxis, :])
             * spiky_gradient(neighborhood.distances, h))

    return -np.column_stack((
        np.sum(ux * coeff, axis=1),
        np.sum(uy * coeff, axis=1),
        np.sum(uz * coeff, axis=1),
    ))


def compute_viscosity_force_vectorized(particles: ParticleArrays,
                                       neighborhood: AllPairsNeighborhood,
                                       n_active: int, h: float,
                                       viscosity: float) -> np.ndarray:
    """Viscous force, damping velocity toward the neighborhood average.

    Fᵢ = μ Σⱼ mⱼ/ρⱼ (vⱼ - vᵢ) ∇²W_visc(|xᵢ - xⱼ|, h)
    """
    volume = particles.mass[:n_active] / particles.density[:n_active]
    coeff = viscosity * volume[np.newaxis, :] * viscosity_laplacian(neighborhood.distances, h)

    vx = particles.velocity_x[:n_active]
    vy = particles.velocity_y[:n_active]
    vz = particles.velocity_z[:n_active]

    return np.column_stack((
        np.sum(coeff * (vx[np.newaxis, :] - vx[:, np.newaxis]), axis=1),
        np.sum(coeff * (vy[np.newaxis, :] - vy[:, np.newaxis]), axis=1),
        np.sum(coeff * (vz[np.newaxis, :] - vz[:, np.newaxis]), axis=1),
    ))


def compute_color_divergence_vectorized(particles: ParticleArrays,
                                        neighborhood: AllPairsNeighborhood,
                                        n_active: int, h: float) -> np.ndarray:
    """Curvature vector Σⱼ cⱼ mⱼ/ρⱼ ∇²W_poly6(|xᵢ - xⱼ|, h), shape (n_active, 3)."""
    volume = particles.mass[:n_active] / particles.density[:n_active]
    coeff = volume[np.newaxis, :] * poly6_laplacian(neighborhood.distances, h)

    cgx = particles.color_gradient_x[:n_active]
    cgy = particles.color_gradient_y[:n_active]
    cgz = particles.color_gradient_z[:n_active]

    return np.column_stack((
        np.sum(coeff * cgx[np.newaxis, :], axis=1),
        np.sum(coeff * cgy[np.newaxis, :], axis=1),
        np.sum(coeff * cgz[np.newaxis, :], axis=1),
    ))


def compute_surface_tension_force_vectorized(particles: ParticleArrays,
                                             neighborhood: AllPairsNeighborhood,
                                             n_active: int, h: float,
                                             surface_tension: float) -> np.ndarray:
    """Surface tension pulling free-surface particles inward.

    Fᵢ = -σ |Σⱼ cⱼ mⱼ/ρⱼ ∇²W_poly6| n̂(cᵢ)

    Zero for particles whose own color gradient is the zero vector.
    """
    divergence = compute_color_divergence_vectorized(particles, neighborhood, n_active, h)
    magnitude = np.sqrt(np.sum(divergence**2, axis=1))

    nx, ny, nz = safe_normalize(particles.color_gradient_x[:n_active],
                                particles.color_gradient_y[:n_active],
                                particles.color_gradient_z[:n_active])

    scale = -surface_tension * magnitude
    return np.column_stack((nx * scale, ny * scale, nz * scale))


def compute_external_force_vectorized(particles: ParticleArrays, n_active: int,
                                      external_acceleration: Sequence[float]) -> np.ndarray:
    """Uniform external force F = m g."""
    g = np.asarray(external_acceleration, dtype=np.float64)
    return particles.mass[:n_active, np.newaxis] * g[np.newaxis, :]


def compute_forces_vectorized(particles: ParticleArrays, neighborhood: AllPairsNeighborhood,
                              n_active: int, h: float, viscosity: float,
                              surface_tension: float,
                              external_acceleration: Sequence[float] = (0.0, -0.1, 0.0)):
    """Net force and acceleration for every particle.

    Writes force_* with the sum of pressure, viscosity, surface tension and
    external forces, and acceleration_* = force / density.

    Args:
        particles: Particle arrays with density, pressure and color gradient computed
        neighborhood: Built all-pairs neighborhood
        n_active: Number of active particles
        h: Support radius
        viscosity: Viscosity coefficient μ
        surface_tension: Surface tension coefficient σ
        external_acceleration: Uniform external field g, default (0, -0.1, 0)
    """
    total = compute_pressure_force_vectorized(particles, neighborhood, n_active, h)
    total += compute_viscosity_force_vectorized(particles, neighborhood, n_active, h, viscosity)
    total += compute_surface_tension_force_vectorized(particles, neighborhood, n_active, h,
                                                      surface_tension)
    total += compute_external_force_vectorized(particles, n_active, external_acceleration)

    particles.force_x[:n_active] = total[:, 0]
    particles.force_y[:n_active] = total[:, 1]
    particles.force_z[:n_active] = total[:, 2]

    compute_acceleration(particles, n_active)


def compute_acceleration(particles: ParticleArrays, n_active: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Acceleration from net force, a = F / ρ.

    Returns:
        (ax, ay, az) acceleration arrays
    """
    density = particles.density[:n_active]
    particles.acceleration_x[:n_active] = particles.force_x[:n_active] / density
    particles.acceleration_y[:n_active] = particles.force_y[:n_active] / density
    particles.acceleration_z[:n_active] = particles.force_z[:n_active] / density
    return (particles.acceleration_x[:n_active],
            particles.acceleration_y[:n_active],
            particles.acceleration_z[:n_active])
