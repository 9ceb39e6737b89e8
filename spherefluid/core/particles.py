"""
Particle state using the Structure-of-Arrays (SoA) pattern.

Each particle field is its own contiguous array, sized once at
allocation. The particle count never changes afterwards.
"""

import numpy as np
from dataclasses import dataclass, fields
from typing import Optional


@dataclass
class ParticleArrays:
    """Structure of Arrays holding the full simulation state.

    Primary state (position, velocity, mass) is set by the caller.
    Everything else is derived each step by the field and force passes.
    """
    # Primary state (N particles)
    position_x: np.ndarray      # shape: (N,)
    position_y: np.ndarray      # shape: (N,)
    position_z: np.ndarray      # shape: (N,)
    velocity_x: np.ndarray      # shape: (N,)
    velocity_y: np.ndarray      # shape: (N,)
    velocity_z: np.ndarray      # shape: (N,)

    # Particle properties
    mass: np.ndarray            # shape: (N,)

    # Derived fields
    density: np.ndarray         # shape: (N,)
    pressure: np.ndarray        # shape: (N,)
    color_gradient_x: np.ndarray  # shape: (N,)
    color_gradient_y: np.ndarray  # shape: (N,)
    color_gradient_z: np.ndarray  # shape: (N,)

    # Force accumulators
    force_x: np.ndarray         # shape: (N,)
    force_y: np.ndarray         # shape: (N,)
    force_z: np.ndarray         # shape: (N,)

    # Acceleration (force / density)
    acceleration_x: np.ndarray  # shape: (N,)
    acceleration_y: np.ndarray  # shape: (N,)
    acceleration_z: np.ndarray  # shape: (N,)

    @staticmethod
    def allocate(n_particles: int, dtype=np.float64) -> 'ParticleArrays':
        """Pre-allocate zeroed arrays for a fixed particle count.

        Args:
            n_particles: Number of particles (fixed for the simulation lifetime)
            dtype: Floating point type for every field

        Returns:
            Zero-initialized ParticleArrays instance
        """
        if n_particles < 0:
            raise ValueError(f"n_particles must be non-negative, got {n_particles}")

        kwargs = {f.name: np.zeros(n_particles, dtype=dtype) for f in fields(ParticleArrays)}
        return ParticleArrays(**kwargs)

    @staticmethod
    def from_positions(positions: np.ndarray, velocities: Optional[np.ndarray] = None,
                       mass: float = 1.0, dtype=np.float64) -> 'ParticleArrays':
        """Build particle arrays from (N, 3) position (and velocity) data."""
        positions = np.asarray(positions, dtype=dtype)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"positions must have shape (N, 3), got {positions.shape}")

        particles = ParticleArrays.allocate(positions.shape[0], dtype=dtype)
        particles.set_positions(positions)
        if velocities is not None:
            particles.set_velocities(velocities)
        particles.mass[:] = mass
        return particles

    def __len__(self) -> int:
        return len(self.position_x)

    @property
    def n_particles(self) -> int:
        return len(self.position_x)

    def get_positions(self, indices: Optional[np.ndarray] = None) -> np.ndarray:
        """Get particle positions as (N, 3) array for renderers."""
        if indices is None:
            return np.column_stack((self.position_x, self.position_y, self.position_z))
        return np.column_stack((self.position_x[indices], self.position_y[indices],
                                self.position_z[indices]))

    def get_velocities(self, indices: Optional[np.ndarray] = None) -> np.ndarray:
        """Get particle velocities as (N, 3) array."""
        if indices is None:
            return np.column_stack((self.velocity_x, self.velocity_y, self.velocity_z))
        return np.column_stack((self.velocity_x[indices], self.velocity_y[indices],
                                self.velocity_z[indices]))

    def get_accelerations(self) -> np.ndarray:
        return np.column_stack((self.acceleration_x, self.acceleration_y, self.acceleration_z))

    def get_forces(self) -> np.ndarray:
        return np.column_stack((self.force_x, self.force_y, self.force_z))

    def get_color_gradients(self) -> np.ndarray:
        return np.column_stack((self.color_gradient_x, self.color_gradient_y,
                                self.color_gradient_z))

    def set_positions(self, positions: np.ndarray):
        """Copy an (N, 3) array into the position components."""
        positions = np.asarray(positions)
        self.position_x[:] = positions[:, 0]
        self.position_y[:] = positions[:, 1]
        self.position_z[:] = positions[:, 2]

    def set_velocities(self, velocities: np.ndarray):
        """Copy an (N, 3) array into the velocity components."""
        velocities = np.asarray(velocities)
        self.velocity_x[:] = velocities[:, 0]
        self.velocity_y[:] = velocities[:, 1]
        self.velocity_z[:] = velocities[:, 2]

    def reset_forces(self, n_active: Optional[int] = None):
        """Reset force accumulators to zero."""
        n = self.n_particles if n_active is None else n_active
        self.force_x[:n] = 0.0
        self.force_y[:n] = 0.0
        self.force_z[:n] = 0.0

    def copy(self) -> 'ParticleArrays':
        """Deep copy of every array."""
        return ParticleArrays(**{f.name: getattr(self, f.name).copy()
                                 for f in fields(self)})

    def equals(self, other: 'ParticleArrays') -> bool:
        """Bit-for-bit equality of every field.

        Stricter than ==: -0.0 and 0.0 differ, and NaNs with the same bits match.
        """
        return all(_same_bits(getattr(self, f.name), getattr(other, f.name))
                   for f in fields(self))


def _same_bits(a: np.ndarray, b: np.ndarray) -> bool:
    return a.dtype == b.dtype and a.shape == b.shape and a.tobytes() == b.tobytes()
