"""
Tests for the field estimation passes: density, pressure, color gradient.
"""

import numpy as np
import pytest

from spherefluid.core.errors import DensityDegeneracyError
from spherefluid.core.kernels import poly6, poly6_gradient
from spherefluid.core.neighbors import AllPairsNeighborhood
from spherefluid.physics.fields_vectorized import (
    check_density,
    compute_color_field_vectorized,
    compute_color_gradient_vectorized,
    compute_density_vectorized,
    compute_pressure_vectorized,
    linear_equation_of_state,
)
from spherefluid.scenarios import create_particle_set


def run_fields(particles, h, rest_density=0.0001, gas_constant=100.0):
    neighborhood = AllPairsNeighborhood(h).build(particles)
    n = len(particles)
    compute_density_vectorized(particles, neighborhood, n, h)
    compute_pressure_vectorized(particles, n, rest_density, gas_constant)
    compute_color_gradient_vectorized(particles, neighborhood, n, h)
    return neighborhood


class TestSingleParticle:
    """A lone particle only sees its own contribution."""

    def test_density_is_self_contribution(self, h):
        particles = create_particle_set([[3.0, -2.0, 1.0]], mass=2.0)
        run_fields(particles, h)
        assert particles.density[0] == pytest.approx(2.0 * float(poly6(0.0, h)), rel=1e-12)

    def test_pressure_follows_density(self, h):
        particles = create_particle_set([[0.0, 0.0, 0.0]])
        run_fields(particles, h, rest_density=0.5, gas_constant=7.0)
        expected = 7.0 * (particles.density[0] - 0.5)
        assert particles.pressure[0] == pytest.approx(expected, rel=1e-12)

    def test_color_gradient_is_zero(self, h):
        particles = create_particle_set([[1.0, 1.0, 1.0]])
        run_fields(particles, h)
        np.testing.assert_array_equal(particles.get_color_gradients(), np.zeros((1, 3)))

    def test_color_field_is_one(self, h):
        particles = create_particle_set([[0.0, 0.0, 0.0]])
        neighborhood = run_fields(particles, h)
        color = compute_color_field_vectorized(particles, neighborhood, 1, h)
        assert color[0] == pytest.approx(1.0, rel=1e-12)

    def test_isolated_particles_do_not_interact(self, h):
        particles = create_particle_set([[0.0, 0.0, 0.0], [3 * h, 0.0, 0.0]])
        run_fields(particles, h)
        np.testing.assert_allclose(particles.density, float(poly6(0.0, h)), rtol=1e-12)
        np.testing.assert_array_equal(particles.get_color_gradients(), np.zeros((2, 3)))


class TestDensity:

    def test_self_inclusion(self, small_cluster, h):
        run_fields(small_cluster, h)
        assert np.all(small_cluster.density > float(poly6(0.0, h)))

    def test_pair_density(self, particle_pair, h):
        run_fields(particle_pair, h)
        expected = float(poly6(0.0, h) + poly6(1.0, h))
        np.testing.assert_allclose(particle_pair.density, expected, rtol=1e-12)
        assert particle_pair.density[0] == particle_pair.density[1]

    def test_density_scales_with_mass(self, h):
        light = create_particle_set([[0.0, 0.0, 0.0], [2.0, 1.0, 0.0]], mass=1.0)
        heavy = create_particle_set([[0.0, 0.0, 0.0], [2.0, 1.0, 0.0]], mass=3.0)
        run_fields(light, h)
        run_fields(heavy, h)
        np.testing.assert_allclose(heavy.density, 3.0 * light.density, rtol=1e-12)


class TestPressure:

    def test_linear_equation_of_state(self):
        density = np.array([0.5, 1.0, 2.0])
        np.testing.assert_allclose(linear_equation_of_state(density, 1.0, 10.0),
                                   [-5.0, 0.0, 10.0])

    def test_negative_when_under_dense(self, particle_pair, h):
        run_fields(particle_pair, h, rest_density=1.0)
        assert np.all(particle_pair.pressure < 0.0)


class TestColorGradient:

    def test_pair_is_antisymmetric(self, particle_pair, h):
        run_fields(particle_pair, h)
        grads = particle_pair.get_color_gradients()
        np.testing.assert_allclose(grads[0], -grads[1], rtol=1e-12)

    def test_pair_value(self, particle_pair, h):
        """Direction x_j - x_i times a negative kernel slope."""
        run_fields(particle_pair, h)
        volume = 1.0 / particle_pair.density[1]
        expected_x = 1.0 * volume * float(poly6_gradient(1.0, h))
        assert particle_pair.color_gradient_x[0] == pytest.approx(expected_x, rel=1e-12)
        assert particle_pair.color_gradient_y[0] == 0.0
        assert particle_pair.color_gradient_z[0] == 0.0

    def test_finite_for_coincident_particles(self, h):
        """Coincident particles hit the zero-displacement convention, not NaN."""
        particles = create_particle_set([[1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
        run_fields(particles, h)
        assert np.all(np.isfinite(particles.get_color_gradients()))
        np.testing.assert_array_equal(particles.get_color_gradients(), np.zeros((2, 3)))


class TestDensityCheck:

    def test_accepts_positive(self, particle_pair, h):
        run_fields(particle_pair, h)
        check_density(particle_pair, 2, 1e-12)

    def test_rejects_zero(self, particle_pair):
        particle_pair.density[:] = [1.0, 0.0]
        with pytest.raises(DensityDegeneracyError) as excinfo:
            check_density(particle_pair, 2, 1e-12)
        assert excinfo.value.indices == [1]

    def test_rejects_nan(self, particle_pair):
        particle_pair.density[:] = [np.nan, 1.0]
        with pytest.raises(DensityDegeneracyError):
            check_density(particle_pair, 2, 1e-12)
