"""
Vectorized time integration for SPH particles.

Semi-implicit (symplectic) Euler: velocity is advanced from the current
acceleration first, the boundary acts on the new velocity, and position
is then advanced with that velocity.
"""

import numpy as np
from typing import Optional
from .particles import ParticleArrays
from .boundary import apply_spherical_boundary_vectorized


def integrate_semi_implicit_euler_vectorized(particles: ParticleArrays, n_active: int,
                                             dt: float,
                                             sphere_size: Optional[float] = None,
                                             boundary_margin: float = 1.0,
                                             restitution: float = 0.8) -> Optional[np.ndarray]:
    """Advance velocity and position by one step.

    v += a·dt, then spherical boundary reflection (if sphere_size is given),
    then x += v·dt.

    Args:
        particles: Particle arrays with acceleration computed
        n_active: Number of active particles
        dt: Time step
        sphere_size: Containment radius, or None for an unbounded domain
        boundary_margin: Reflection starts at sphere_size - boundary_margin
        restitution: Velocity scale on reflection

    Returns:
        Boolean mask of reflected particles, or None without a boundary
    """
    # Update velocities
    particles.velocity_x[:n_active] += particles.acceleration_x[:n_active] * dt
    particles.velocity_y[:n_active] += particles.acceleration_y[:n_active] * dt
    particles.velocity_z[:n_active] += particles.acceleration_z[:n_active] * dt

    reflected = None
    if sphere_size is not None:
        reflected = apply_spherical_boundary_vectorized(
            particles, n_active, sphere_size, boundary_margin, restitution
        )

    # Update positions with the post-boundary velocity
    particles.position_x[:n_active] += particles.velocity_x[:n_active] * dt
    particles.position_y[:n_active] += particles.velocity_y[:n_active] * dt
    particles.position_z[:n_active] += particles.velocity_z[:n_active] * dt

    return reflected
