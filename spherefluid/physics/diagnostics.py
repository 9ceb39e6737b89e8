"""
Summary quantities of the particle state.

Read-only helpers used for logging and tests. None of these feed back
into the simulation step.
"""

import numpy as np
from dataclasses import dataclass, asdict
from typing import Optional, Tuple
from ..core.particles import ParticleArrays


def compute_kinetic_energy(particles: ParticleArrays, n_active: Optional[int] = None) -> float:
    """Total kinetic energy ½ Σ m |v|²."""
    n = particles.n_particles if n_active is None else n_active
    speed2 = (particles.velocity_x[:n]**2 + particles.velocity_y[:n]**2
              + particles.velocity_z[:n]**2)
    return float(0.5 * np.sum(particles.mass[:n] * speed2))


def compute_momentum(particles: ParticleArrays, n_active: Optional[int] = None) -> Tuple[float, float, float]:
    """Total linear momentum Σ m v."""
    n = particles.n_particles if n_active is None else n_active
    mass = particles.mass[:n]
    return (float(np.sum(mass * particles.velocity_x[:n])),
            float(np.sum(mass * particles.velocity_y[:n])),
            float(np.sum(mass * particles.velocity_z[:n])))


def compute_center_of_mass(particles: ParticleArrays, n_active: Optional[int] = None) -> Tuple[float, float, float, float]:
    """Compute center of mass of particle system.

    Returns:
        (x_cm, y_cm, z_cm, total_mass)
    """
    n = particles.n_particles if n_active is None else n_active
    total_mass = np.sum(particles.mass[:n])

    if total_mass > 0:
        x_cm = np.sum(particles.mass[:n] * particles.position_x[:n]) / total_mass
        y_cm = np.sum(particles.mass[:n] * particles.position_y[:n]) / total_mass
        z_cm = np.sum(particles.mass[:n] * particles.position_z[:n]) / total_mass
    else:
        x_cm = y_cm = z_cm = 0.0

    return float(x_cm), float(y_cm), float(z_cm), float(total_mass)


def compute_max_radius(particles: ParticleArrays, n_active: Optional[int] = None) -> float:
    """Largest distance of any particle from the origin."""
    n = particles.n_particles if n_active is None else n_active
    if n == 0:
        return 0.0
    radius = np.sqrt(particles.position_x[:n]**2 + particles.position_y[:n]**2
                     + particles.position_z[:n]**2)
    return float(np.max(radius))


@dataclass
class SimulationDiagnostics:
    """Snapshot of aggregate simulation quantities after a step."""
    step: int
    time: float
    density_min: float
    density_mean: float
    density_max: float
    pressure_min: float
    pressure_max: float
    kinetic_energy: float
    momentum: Tuple[float, float, float]
    center_of_mass: Tuple[float, float, float]
    max_radius: float

    @staticmethod
    def collect(particles: ParticleArrays, step: int = 0, time: float = 0.0) -> 'SimulationDiagnostics':
        density = particles.density
        pressure = particles.pressure
        x_cm, y_cm, z_cm, _ = compute_center_of_mass(particles)
        return SimulationDiagnostics(
            step=step,
            time=time,
            density_min=float(np.min(density)),
            density_mean=float(np.mean(density)),
            density_max=float(np.max(density)),
            pressure_min=float(np.min(pressure)),
            pressure_max=float(np.max(pressure)),
            kinetic_energy=compute_kinetic_energy(particles),
            momentum=compute_momentum(particles),
            center_of_mass=(x_cm, y_cm, z_cm),
            max_radius=compute_max_radius(particles),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def summary(self) -> str:
        return (f"step {self.step:5d}  t={self.time:8.3f}  "
                f"rho=[{self.density_min:.3e}, {self.density_mean:.3e}, {self.density_max:.3e}]  "
                f"KE={self.kinetic_energy:.4e}  r_max={self.max_radius:.2f}")
