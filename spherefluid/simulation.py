"""
Simulation driver.

FluidSimulation owns the particle arrays and runs the phases of one step
in a fixed order:

    neighborhood -> density -> pressure -> color gradient   (fields)
    -> pressure/viscosity/surface tension/external forces   (forces)
    -> velocity, boundary reflection, position              (integration)

Each phase finishes for every particle before the next one starts. The
rendering/frame layer only calls step() and reads the exposed arrays.
"""

import logging
import math
import time as time_module
from typing import Callable, Optional

import numpy as np

from . import api
from .config import SimulationConfig
from .core.errors import ConfigurationError
from .core.kernels import self_density
from .core.neighbors import AllPairsNeighborhood
from .core.particles import ParticleArrays
from .physics.diagnostics import SimulationDiagnostics
from .physics.fields_vectorized import check_density
from .scenarios.cloud import create_from_config

logger = logging.getLogger(__name__)


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class FluidSimulation:
    """SPH fluid in a spherical container.

    Args:
        config: Simulation parameters (defaults reproduce the reference scene)
        particles: Initial particle state. When omitted, a Gaussian cloud is
            sampled from the config. When given, its length defines N.

    Raises:
        ConfigurationError: If the config or the particle set is invalid
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 particles: Optional[ParticleArrays] = None):
        config = config or SimulationConfig()
        if particles is not None and len(particles) != config.num_particles:
            logger.debug("Particle set has %d particles, overriding num_particles=%d",
                         len(particles), config.num_particles)
            config = config.replace(num_particles=len(particles))
        self.config = config.validate()

        if particles is None:
            particles = create_from_config(self.config)
        self._validate_particles(particles)

        self._particles = particles
        self._neighborhood = (AllPairsNeighborhood(self.config.sample_radius)
                              if api.uses_pair_table(self.config.backend) else None)
        self.step_count = 0
        self.time = 0.0
        self.last_reflected_count = 0

        logger.info("Initialized SPH simulation: %d particles, h=%.3g, sphere=%.3g, backend=%s",
                    self.n_particles, self.config.sample_radius, self.config.sphere_size,
                    self.config.backend)

    def _validate_particles(self, particles: ParticleArrays):
        n = len(particles)
        if n < 1:
            raise ConfigurationError("Simulation needs at least one particle")

        for name in ("position_x", "position_y", "position_z",
                     "velocity_x", "velocity_y", "velocity_z", "mass"):
            if not np.all(np.isfinite(getattr(particles, name))):
                raise ConfigurationError(f"Non-finite values in {name}")

        if np.any(particles.mass <= 0.0):
            raise ConfigurationError("Particle masses must be positive")

        # Lower bound on any density: the particle's own kernel contribution
        rho_min = self_density(float(np.min(particles.mass)), self.config.sample_radius)
        if rho_min <= self.config.density_epsilon:
            raise ConfigurationError(
                f"Self density {rho_min:.3e} <= density_epsilon {self.config.density_epsilon:.3e}")

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def update_fields(self):
        """Density, pressure and color gradient passes for the current positions."""
        cfg = self.config
        n = self.n_particles
        h = cfg.sample_radius

        if self._neighborhood is not None:
            self._neighborhood.build(self._particles, n)
        api.compute_density(self._particles, h, self._neighborhood, n, backend=cfg.backend)
        check_density(self._particles, n, cfg.density_epsilon)
        api.compute_pressure(self._particles, cfg.rest_density, cfg.gas_constant, n,
                             backend=cfg.backend)
        api.compute_color_gradient(self._particles, h, self._neighborhood, n,
                                   backend=cfg.backend)

    def update_forces(self):
        """Force and acceleration pass; requires update_fields() first."""
        cfg = self.config
        api.compute_forces(self._particles, cfg.sample_radius, cfg.viscosity,
                           cfg.surface_tension, cfg.external_acceleration,
                           self._neighborhood, self.n_particles, backend=cfg.backend)

    def integrate(self, dt: float) -> np.ndarray:
        cfg = self.config
        reflected = api.integrate(self._particles, dt, cfg.sphere_size, cfg.boundary_margin,
                                  cfg.restitution, self.n_particles)
        self.last_reflected_count = int(np.count_nonzero(reflected))
        return reflected

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def step(self, dt: Optional[float] = None) -> ParticleArrays:
        """Advance the simulation by one time step.

        Args:
            dt: Time step; defaults to config.time_step (0.04) regardless of
                wall-clock time between calls

        Returns:
            The particle arrays after the step
        """
        if dt is None:
            dt = self.config.time_step
        if not math.isfinite(dt) or dt <= 0.0:
            raise ValueError(f"dt must be positive and finite, got {dt!r}")

        t0 = time_module.perf_counter()
        self.update_fields()
        self.update_forces()
        self.integrate(dt)

        self.step_count += 1
        self.time += dt

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("step %d: t=%.3f, mean density=%.4e, reflected=%d, %.1f ms",
                         self.step_count, self.time, float(np.mean(self._particles.density)),
                         self.last_reflected_count, (time_module.perf_counter() - t0) * 1000)
        return self._particles

    def run(self, n_steps: int, dt: Optional[float] = None,
            callback: Optional[Callable[['FluidSimulation'], None]] = None) -> SimulationDiagnostics:
        """Run several steps, calling callback(self) after each one.

        Returns:
            Diagnostics after the last step
        """
        for _ in range(n_steps):
            self.step(dt)
            if callback is not None:
                callback(self)
        return self.diagnostics()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def particles(self) -> ParticleArrays:
        return self._particles

    @property
    def n_particles(self) -> int:
        return len(self._particles)

    @property
    def positions(self) -> np.ndarray:
        """(N, 3) copy of the particle positions, for renderers."""
        return self._particles.get_positions()

    @property
    def velocities(self) -> np.ndarray:
        return self._particles.get_velocities()

    @property
    def densities(self) -> np.ndarray:
        return _read_only(self._particles.density)

    @property
    def pressures(self) -> np.ndarray:
        return _read_only(self._particles.pressure)

    def color_field(self) -> np.ndarray:
        """Scalar color field of the current positions.

        Evaluated on a copy so the simulation state is left untouched.
        """
        scratch = self._particles.copy()
        cfg = self.config
        neighborhood = None
        if api.uses_pair_table(cfg.backend):
            neighborhood = AllPairsNeighborhood(cfg.sample_radius).build(scratch)
        api.compute_density(scratch, cfg.sample_radius, neighborhood, backend=cfg.backend)
        check_density(scratch, len(scratch), cfg.density_epsilon)
        return api.compute_color_field(scratch, cfg.sample_radius, neighborhood,
                                       backend=cfg.backend)

    def diagnostics(self) -> SimulationDiagnostics:
        return SimulationDiagnostics.collect(self._particles, self.step_count, self.time)
