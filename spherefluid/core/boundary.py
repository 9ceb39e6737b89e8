"""
Spherical containment boundary.

Velocity-only ("soft") boundary: outward-moving particles near the wall
have their velocity reflected about the inward normal and damped. No
positional correction is applied, so slight overshoot past the wall is
possible.
"""

import numpy as np
from typing import Optional
from .particles import ParticleArrays


def apply_spherical_boundary_vectorized(particles: ParticleArrays, n_active: int,
                                        sphere_size: float,
                                        margin: float = 1.0,
                                        restitution: float = 0.8) -> np.ndarray:
    """Reflect the velocity of particles leaving a sphere centred at the origin.

    A particle is reflected when |x| >= sphere_size - margin and x·v > 0.
    Its velocity becomes restitution * (v - 2(v·n)n) with n = x/|x|, so the
    radial component flips sign and shrinks while the tangential part is
    only scaled.

    Args:
        particles: Particle arrays (velocities are modified in place)
        n_active: Number of active particles
        sphere_size: Containment sphere radius
        margin: Distance inside the wall where reflection starts
        restitution: Velocity scale applied on reflection

    Returns:
        Boolean mask (n_active,) of particles that were reflected
    """
    px = particles.position_x[:n_active]
    py = particles.position_y[:n_active]
    pz = particles.position_z[:n_active]
    vx = particles.velocity_x[:n_active]
    vy = particles.velocity_y[:n_active]
    vz = particles.velocity_z[:n_active]

    radius = np.sqrt(px**2 + py**2 + pz**2)
    outward = (px * vx + py * vy + pz * vz) > 0.0
    mask = (radius >= sphere_size - margin) & outward

    if not np.any(mask):
        return mask

    # x·v > 0 implies |x| > 0 for every masked particle
    nx = px[mask] / radius[mask]
    ny = py[mask] / radius[mask]
    nz = pz[mask] / radius[mask]

    v_dot_n = vx[mask] * nx + vy[mask] * ny + vz[mask] * nz
    vx[mask] = (vx[mask] - 2.0 * v_dot_n * nx) * restitution
    vy[mask] = (vy[mask] - 2.0 * v_dot_n * ny) * restitution
    vz[mask] = (vz[mask] - 2.0 * v_dot_n * nz) * restitution

    return mask


def radial_velocity(particles: ParticleArrays, n_active: Optional[int] = None) -> np.ndarray:
    """Velocity component along the outward radial direction (0 at the origin)."""
    n = particles.n_particles if n_active is None else n_active
    px = particles.position_x[:n]
    py = particles.position_y[:n]
    pz = particles.position_z[:n]
    radius = np.sqrt(px**2 + py**2 + pz**2)
    v_dot_x = (px * particles.velocity_x[:n] + py * particles.velocity_y[:n]
               + pz * particles.velocity_z[:n])
    return np.divide(v_dot_x, radius, out=np.zeros(n), where=radius > 0.0)
