"""
Vectorized SPH smoothing kernels (Müller et al. 2003).

All kernels take the distance |r| (array or scalar) and the support
radius h, and evaluate to exactly 0 for |r| > h:

    poly6(r, h)               = 315/(64π h⁹) (h² - r²)³
    poly6_gradient(r, h)      = 315/(64π h⁹) (-2r) 3(h² - r²)²
    poly6_laplacian(r, h)     = 315/(64π h⁹) 6(h² - r²)(5r² - h²)
    viscosity_laplacian(r, h) = 45/(π h⁶) (h - r)
    spiky(r, h)               = 15/(π h⁶) (h - r)³
    spiky_gradient(r, h)      = 15/(π h⁶) (-3)(h - r)²

Gradients are returned as scalars along |r|; callers apply the direction.
poly6 is used for density and the color field, spiky for pressure,
the viscosity laplacian for viscous damping.
"""

import numpy as np
from typing import Tuple


def poly6_normalization(h: float) -> float:
    """315 / (64 π h⁹)."""
    return 315.0 / (64.0 * np.pi * h**9)


def spiky_normalization(h: float) -> float:
    """15 / (π h⁶), shared by spiky and its gradient."""
    return 15.0 / (np.pi * h**6)


def viscosity_normalization(h: float) -> float:
    """45 / (π h⁶)."""
    return 45.0 / (np.pi * h**6)


def _support(r, h: float) -> Tuple[np.ndarray, np.ndarray]:
    r = np.asarray(r, dtype=np.float64)
    return r, r <= h


def poly6(r, h: float) -> np.ndarray:
    """Poly6 kernel value, used for density estimation."""
    r, inside = _support(r, h)
    diff = np.where(inside, h * h - r * r, 0.0)
    return poly6_normalization(h) * diff**3


def poly6_gradient(r, h: float) -> np.ndarray:
    """dW_poly6/d|r|. Vanishes at r = 0."""
    r, inside = _support(r, h)
    diff = np.where(inside, h * h - r * r, 0.0)
    return poly6_normalization(h) * (-2.0 * r) * 3.0 * diff**2


def poly6_laplacian(r, h: float) -> np.ndarray:
    """Laplacian form of poly6, used for the color field curvature."""
    r, inside = _support(r, h)
    diff = np.where(inside, h * h - r * r, 0.0)
    return poly6_normalization(h) * 6.0 * diff * (5.0 * r * r - h * h)


def viscosity_laplacian(r, h: float) -> np.ndarray:
    """Viscosity kernel laplacian, non-negative across the support."""
    r, inside = _support(r, h)
    diff = np.where(inside, h - r, 0.0)
    return viscosity_normalization(h) * diff


def spiky(r, h: float) -> np.ndarray:
    """Spiky kernel value."""
    r, inside = _support(r, h)
    diff = np.where(inside, h - r, 0.0)
    return spiky_normalization(h) * diff**3


def spiky_gradient(r, h: float) -> np.ndarray:
    """dW_spiky/d|r|. Steepest at r = 0, which keeps particles from clustering."""
    r, inside = _support(r, h)
    diff = np.where(inside, h - r, 0.0)
    return spiky_normalization(h) * (-1.0) * 3.0 * diff**2


def displacement_length(dx, dy, dz) -> np.ndarray:
    """|r| for displacement components of any matching shape."""
    return np.sqrt(np.asarray(dx)**2 + np.asarray(dy)**2 + np.asarray(dz)**2)


def safe_normalize(dx, dy, dz, length=None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Unit vector components; the zero vector normalizes to the zero vector.

    This is the fixed convention for degenerate normalization: the i == j
    displacement and an empty color gradient both contribute nothing.
    """
    dx = np.asarray(dx, dtype=np.float64)
    dy = np.asarray(dy, dtype=np.float64)
    dz = np.asarray(dz, dtype=np.float64)
    if length is None:
        length = displacement_length(dx, dy, dz)
    length = np.asarray(length, dtype=np.float64)

    nonzero = length > 0.0
    ux = np.divide(dx, length, out=np.zeros(np.broadcast(dx, length).shape), where=nonzero)
    uy = np.divide(dy, length, out=np.zeros(np.broadcast(dy, length).shape), where=nonzero)
    uz = np.divide(dz, length, out=np.zeros(np.broadcast(dz, length).shape), where=nonzero)
    return ux, uy, uz


def self_density(mass: float, h: float) -> float:
    """Density a lone particle contributes to itself: m * poly6(0, h)."""
    return float(mass * poly6_normalization(h) * h**6)
