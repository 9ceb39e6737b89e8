"""
Tests for the smoothing kernel library.

Checks compact support, continuity at the support radius, the exact
normalization constants, and the zero-vector normalization convention.
"""

import warnings

import numpy as np
import pytest

from spherefluid.core.kernels import (
    poly6,
    poly6_gradient,
    poly6_laplacian,
    viscosity_laplacian,
    spiky,
    spiky_gradient,
    safe_normalize,
    self_density,
    displacement_length,
)

ALL_KERNELS = [poly6, poly6_gradient, poly6_laplacian, viscosity_laplacian, spiky, spiky_gradient]


class TestSupport:
    """Kernels vanish outside the support radius."""

    @pytest.mark.parametrize("kernel", ALL_KERNELS)
    @pytest.mark.parametrize("scale", [1.000001, 1.5, 2.0, 100.0])
    def test_zero_outside_support(self, kernel, scale, h):
        assert kernel(h * scale, h) == 0.0

    @pytest.mark.parametrize("kernel", ALL_KERNELS)
    def test_zero_at_support_radius(self, kernel, h):
        assert kernel(h, h) == 0.0

    @pytest.mark.parametrize("kernel", ALL_KERNELS)
    def test_continuous_at_support_radius(self, kernel, h):
        """Value just inside h is negligible compared to the interior."""
        interior = abs(float(kernel(0.5 * h, h)))
        edge = abs(float(kernel(h * (1.0 - 1e-6), h)))
        assert interior > 0.0
        assert edge < 1e-4 * interior

    @pytest.mark.parametrize("kernel", ALL_KERNELS)
    def test_vectorized_shape(self, kernel, h):
        r = np.array([[0.0, 1.0], [5.0, 13.0]])
        values = kernel(r, h)
        assert values.shape == (2, 2)
        assert values[1, 1] == 0.0


class TestExactForms:
    """Normalization constants and polynomial forms at known points."""

    def test_poly6_at_origin(self, h):
        assert poly6(0.0, h) == pytest.approx(315.0 / (64.0 * np.pi * h**3), rel=1e-12)

    def test_poly6_interior(self):
        h, r = 2.0, 1.0
        expected = 315.0 / (64.0 * np.pi * h**9) * (h * h - r * r)**3
        assert poly6(r, h) == pytest.approx(expected, rel=1e-12)

    def test_poly6_gradient_vanishes_at_origin(self, h):
        assert poly6_gradient(0.0, h) == 0.0

    def test_poly6_gradient_interior(self):
        h, r = 2.0, 1.0
        expected = 315.0 / (64.0 * np.pi * h**9) * (-2.0 * r) * 3.0 * (h * h - r * r)**2
        assert poly6_gradient(r, h) == pytest.approx(expected, rel=1e-12)
        assert poly6_gradient(r, h) < 0.0

    def test_poly6_gradient_matches_finite_difference(self):
        h, r, eps = 3.0, 1.2, 1e-6
        numeric = (poly6(r + eps, h) - poly6(r - eps, h)) / (2 * eps)
        assert poly6_gradient(r, h) == pytest.approx(numeric, rel=1e-6)

    def test_poly6_laplacian_at_origin(self, h):
        expected = -945.0 / (32.0 * np.pi * h**5)
        assert poly6_laplacian(0.0, h) == pytest.approx(expected, rel=1e-12)

    def test_poly6_laplacian_sign_change(self, h):
        """Negative near the center, positive beyond r = h/sqrt(5)."""
        assert poly6_laplacian(0.1 * h, h) < 0.0
        assert poly6_laplacian(0.9 * h, h) > 0.0

    def test_viscosity_laplacian_at_origin(self, h):
        assert viscosity_laplacian(0.0, h) == pytest.approx(45.0 / (np.pi * h**5), rel=1e-12)

    def test_viscosity_laplacian_non_negative(self, h):
        r = np.linspace(0.0, 1.5 * h, 301)
        assert np.all(viscosity_laplacian(r, h) >= 0.0)

    def test_spiky_at_origin(self, h):
        assert spiky(0.0, h) == pytest.approx(15.0 / (np.pi * h**3), rel=1e-12)

    def test_spiky_gradient_at_origin(self, h):
        """Steepest at the center, unlike poly6."""
        assert spiky_gradient(0.0, h) == pytest.approx(-45.0 / (np.pi * h**4), rel=1e-12)

    def test_spiky_gradient_matches_finite_difference(self):
        h, r, eps = 3.0, 1.2, 1e-6
        numeric = (spiky(r + eps, h) - spiky(r - eps, h)) / (2 * eps)
        assert spiky_gradient(r, h) == pytest.approx(numeric, rel=1e-6)

    def test_self_density(self, h):
        assert self_density(2.0, h) == pytest.approx(2.0 * float(poly6(0.0, h)), rel=1e-12)


class TestNormalize:
    """Degenerate normalization yields the zero vector without warnings."""

    def test_zero_vector(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            ux, uy, uz = safe_normalize(0.0, 0.0, 0.0)
        assert (float(ux), float(uy), float(uz)) == (0.0, 0.0, 0.0)

    def test_unit_length(self):
        ux, uy, uz = safe_normalize(3.0, 0.0, 4.0)
        assert float(ux) == pytest.approx(0.6)
        assert float(uy) == 0.0
        assert float(uz) == pytest.approx(0.8)

    def test_mixed_array(self):
        dx = np.array([[0.0, 2.0], [-2.0, 0.0]])
        zeros = np.zeros_like(dx)
        length = displacement_length(dx, zeros, zeros)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            ux, uy, uz = safe_normalize(dx, zeros, zeros, length)
        np.testing.assert_array_equal(ux, [[0.0, 1.0], [-1.0, 0.0]])
        assert np.all(uy == 0.0) and np.all(uz == 0.0)
        assert np.all(np.isfinite(ux))
