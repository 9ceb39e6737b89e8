"""
All-pairs neighborhood for the vectorized passes.

The NumPy field and force passes read pair displacements only from this
table; the kernels zero every pair beyond the support radius. The Numba
loops visit pairs directly and never build it.
"""

import numpy as np
from typing import Optional
from .particles import ParticleArrays


class AllPairsNeighborhood:
    """Dense pairwise displacement table.

    After build(), entry [i, j] of dx/dy/dz holds position[i] - position[j]
    and distances[i, j] its length. The diagonal (i == j) is included, so
    each particle sees itself as a neighbor at distance 0.
    """

    def __init__(self, support_radius: float):
        """Initialize the neighborhood.

        Args:
            support_radius: Kernel support radius h; pairs farther apart
                than this contribute nothing
        """
        self.support_radius = support_radius
        self.n_active = 0
        self.dx: Optional[np.ndarray] = None
        self.dy: Optional[np.ndarray] = None
        self.dz: Optional[np.ndarray] = None
        self.distances: Optional[np.ndarray] = None

    def build(self, particles: ParticleArrays, n_active: Optional[int] = None):
        """Recompute the displacement table from current positions.

        Args:
            particles: Particle arrays
            n_active: Number of active particles (default: all)
        """
        n = particles.n_particles if n_active is None else n_active
        px = particles.position_x[:n]
        py = particles.position_y[:n]
        pz = particles.position_z[:n]

        self.dx = px[:, np.newaxis] - px[np.newaxis, :]
        self.dy = py[:, np.newaxis] - py[np.newaxis, :]
        self.dz = pz[:, np.newaxis] - pz[np.newaxis, :]
        self.distances = np.sqrt(self.dx**2 + self.dy**2 + self.dz**2)
        self.n_active = n
        return self
