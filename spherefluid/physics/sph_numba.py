"""
Numba-compiled field and force passes.

Same formulas as the vectorized NumPy versions, written as explicit
loops over all particle pairs. Compiled without parallel=True: each
pass runs serially, one particle after another.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleArrays


@nb.njit(cache=True)
def poly6_scalar(r: float, h: float) -> float:
    if 0.0 <= r <= h:
        return (315.0 / (64.0 * np.pi * h**9)) * (h * h - r * r)**3
    return 0.0


@nb.njit(cache=True)
def poly6_gradient_scalar(r: float, h: float) -> float:
    if 0.0 <= r <= h:
        return (315.0 / (64.0 * np.pi * h**9)) * (-2.0 * r) * 3.0 * (h * h - r * r)**2
    return 0.0


@nb.njit(cache=True)
def poly6_laplacian_scalar(r: float, h: float) -> float:
    if 0.0 <= r <= h:
        return (315.0 / (64.0 * np.pi * h**9)) * 6.0 * (h * h - r * r) * (5.0 * r * r - h * h)
    return 0.0


@nb.njit(cache=True)
def viscosity_laplacian_scalar(r: float, h: float) -> float:
    if 0.0 <= r <= h:
        return (45.0 / (np.pi * h**6)) * (h - r)
    return 0.0


@nb.njit(cache=True)
def spiky_gradient_scalar(r: float, h: float) -> float:
    if 0.0 <= r <= h:
        return (15.0 / (np.pi * h**6)) * (-1.0) * 3.0 * (h - r)**2
    return 0.0


@nb.njit(cache=True)
def compute_density_numba(position_x, position_y, position_z, mass, density,
                          n_active, h):
    """Density by direct summation, self term included."""
    for i in range(n_active):
        total = 0.0
        for j in range(n_active):
            dx = position_x[i] - position_x[j]
            dy = position_y[i] - position_y[j]
            dz = position_z[i] - position_z[j]
            r = np.sqrt(dx * dx + dy * dy + dz * dz)
            total += mass[j] * poly6_scalar(r, h)
        density[i] = total


@nb.njit(cache=True)
def compute_color_gradient_numba(position_x, position_y, position_z, mass, density,
                                 color_gradient_x, color_gradient_y, color_gradient_z,
                                 n_active, h):
    """Color-field gradient; the zero displacement contributes nothing."""
    for i in range(n_active):
        gx = 0.0
        gy = 0.0
        gz = 0.0
        for j in range(n_active):
            dx = position_x[j] - position_x[i]
            dy = position_y[j] - position_y[i]
            dz = position_z[j] - position_z[i]
            r = np.sqrt(dx * dx + dy * dy + dz * dz)
            if r == 0.0:
                continue
            coeff = mass[j] / density[j] * poly6_gradient_scalar(r, h) / r
            gx += dx * coeff
            gy += dy * coeff
            gz += dz * coeff
        color_gradient_x[i] = gx
        color_gradient_y[i] = gy
        color_gradient_z[i] = gz


@nb.njit(cache=True)
def compute_color_field_numba(position_x, position_y, position_z, mass, density,
                              color, n_active, h):
    for i in range(n_active):
        total = 0.0
        for j in range(n_active):
            dx = position_x[i] - position_x[j]
            dy = position_y[i] - position_y[j]
            dz = position_z[i] - position_z[j]
            r = np.sqrt(dx * dx + dy * dy + dz * dz)
            total += mass[j] / density[j] * poly6_scalar(r, h)
        color[i] = total


@nb.njit(cache=True)
def compute_forces_numba(position_x, position_y, position_z,
                         velocity_x, velocity_y, velocity_z,
                         mass, density, pressure,
                         color_gradient_x, color_gradient_y, color_gradient_z,
                         force_x, force_y, force_z,
                         acceleration_x, acceleration_y, acceleration_z,
                         n_active, h, viscosity, surface_tension, gx, gy, gz):
    """Net force (pressure + viscosity + surface tension + external) and acceleration."""
    for i in range(n_active):
        fx = 0.0
        fy = 0.0
        fz = 0.0
        div_x = 0.0
        div_y = 0.0
        div_z = 0.0
        for j in range(n_active):
            dx = position_x[i] - position_x[j]
            dy = position_y[i] - position_y[j]
            dz = position_z[i] - position_z[j]
            r = np.sqrt(dx * dx + dy * dy + dz * dz)
            if r > h:
                continue
            volume_j = mass[j] / density[j]

            # Pressure
            if r > 0.0:
                p = (mass[j] * (pressure[i] + pressure[j]) / (2.0 * density[j])
                     * spiky_gradient_scalar(r, h) / r)
                fx -= dx * p
                fy -= dy * p
                fz -= dz * p

            # Viscosity
            v = viscosity * volume_j * viscosity_laplacian_scalar(r, h)
            fx += v * (velocity_x[j] - velocity_x[i])
            fy += v * (velocity_y[j] - velocity_y[i])
            fz += v * (velocity_z[j] - velocity_z[i])

            # Color divergence for surface tension
            lap = volume_j * poly6_laplacian_scalar(r, h)
            div_x += color_gradient_x[j] * lap
            div_y += color_gradient_y[j] * lap
            div_z += color_gradient_z[j] * lap

        # Surface tension
        c_len = np.sqrt(color_gradient_x[i]**2 + color_gradient_y[i]**2
                        + color_gradient_z[i]**2)
        if c_len > 0.0:
            div_len = np.sqrt(div_x * div_x + div_y * div_y + div_z * div_z)
            s = -surface_tension * div_len / c_len
            fx += color_gradient_x[i] * s
            fy += color_gradient_y[i] * s
            fz += color_gradient_z[i] * s

        # External
        fx += mass[i] * gx
        fy += mass[i] * gy
        fz += mass[i] * gz

        force_x[i] = fx
        force_y[i] = fy
        force_z[i] = fz
        acceleration_x[i] = fx / density[i]
        acceleration_y[i] = fy / density[i]
        acceleration_z[i] = fz / density[i]


def compute_density_numba_wrapper(particles: ParticleArrays, n_active: int, h: float):
    """Wrapper for Numba density computation that matches standard interface."""
    compute_density_numba(
        particles.position_x, particles.position_y, particles.position_z,
        particles.mass, particles.density, n_active, h
    )


def compute_color_gradient_numba_wrapper(particles: ParticleArrays, n_active: int, h: float):
    compute_color_gradient_numba(
        particles.position_x, particles.position_y, particles.position_z,
        particles.mass, particles.density,
        particles.color_gradient_x, particles.color_gradient_y, particles.color_gradient_z,
        n_active, h
    )


def compute_color_field_numba_wrapper(particles: ParticleArrays, n_active: int,
                                      h: float) -> np.ndarray:
    color = np.zeros(n_active, dtype=particles.density.dtype)
    compute_color_field_numba(
        particles.position_x, particles.position_y, particles.position_z,
        particles.mass, particles.density, color, n_active, h
    )
    return color


def compute_forces_numba_wrapper(particles: ParticleArrays, n_active: int, h: float,
                                 viscosity: float, surface_tension: float,
                                 external_acceleration=(0.0, -0.1, 0.0)):
    gx, gy, gz = (float(g) for g in external_acceleration)
    compute_forces_numba(
        particles.position_x, particles.position_y, particles.position_z,
        particles.velocity_x, particles.velocity_y, particles.velocity_z,
        particles.mass, particles.density, particles.pressure,
        particles.color_gradient_x, particles.color_gradient_y, particles.color_gradient_z,
        particles.force_x, particles.force_y, particles.force_z,
        particles.acceleration_x, particles.acceleration_y, particles.acceleration_z,
        n_active, h, viscosity, surface_tension, gx, gy, gz
    )
