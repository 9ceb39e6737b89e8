"""
Tests for the spherical containment boundary and the semi-implicit Euler step.
"""

import numpy as np
import pytest

from spherefluid.core.boundary import apply_spherical_boundary_vectorized, radial_velocity
from spherefluid.core.integrator import integrate_semi_implicit_euler_vectorized
from spherefluid.scenarios import create_particle_set

SPHERE = 40.0


def reflect(position, velocity, **kwargs):
    particles = create_particle_set([position], velocities=[velocity])
    mask = apply_spherical_boundary_vectorized(particles, 1, SPHERE, **kwargs)
    return particles.get_velocities()[0], bool(mask[0])


class TestSphericalBoundary:

    def test_outward_particle_reflected_and_damped(self):
        v, hit = reflect([40.0, 0.0, 0.0], [5.0, 0.0, 0.0])
        assert hit
        np.testing.assert_allclose(v, [-4.0, 0.0, 0.0])

    def test_inward_particle_untouched(self):
        v, hit = reflect([40.0, 0.0, 0.0], [-5.0, 0.0, 0.0])
        assert not hit
        np.testing.assert_array_equal(v, [-5.0, 0.0, 0.0])

    def test_inside_threshold_untouched(self):
        v, hit = reflect([38.9, 0.0, 0.0], [5.0, 0.0, 0.0])
        assert not hit
        np.testing.assert_array_equal(v, [5.0, 0.0, 0.0])

    def test_threshold_is_inclusive(self):
        v, hit = reflect([39.0, 0.0, 0.0], [1.0, 0.0, 0.0])
        assert hit
        np.testing.assert_allclose(v, [-0.8, 0.0, 0.0])

    def test_tangential_component_only_scaled(self):
        v, hit = reflect([39.5, 0.0, 0.0], [3.0, 4.0, 0.0])
        assert hit
        np.testing.assert_allclose(v, [-2.4, 3.2, 0.0])

    def test_purely_tangential_motion_untouched(self):
        v, hit = reflect([0.0, 0.0, 45.0], [1.0, 1.0, 0.0])
        assert not hit
        np.testing.assert_array_equal(v, [1.0, 1.0, 0.0])

    def test_oblique_wall_point(self):
        position = np.array([30.0, 0.0, 30.0])
        n = position / np.linalg.norm(position)
        v, hit = reflect(position, [2.0, 0.0, 2.0])
        assert hit
        np.testing.assert_allclose(v, -0.8 * np.array([2.0, 0.0, 2.0]))
        assert np.dot(v, n) < 0.0

    def test_custom_restitution_and_margin(self):
        v, hit = reflect([36.0, 0.0, 0.0], [1.0, 0.0, 0.0], margin=5.0, restitution=0.5)
        assert hit
        np.testing.assert_allclose(v, [-0.5, 0.0, 0.0])

    def test_radial_velocity(self):
        particles = create_particle_set([[3.0, 4.0, 0.0], [0.0, 0.0, 0.0]],
                                        velocities=[[3.0, 4.0, 0.0], [1.0, 0.0, 0.0]])
        np.testing.assert_allclose(radial_velocity(particles), [5.0, 0.0])


class TestSemiImplicitEuler:

    def test_velocity_updated_before_position(self):
        particles = create_particle_set([[0.0, 0.0, 0.0]], velocities=[[1.0, 0.0, 0.0]])
        particles.acceleration_x[:] = 2.0
        dt = 0.5
        reflected = integrate_semi_implicit_euler_vectorized(particles, 1, dt)
        assert reflected is None
        assert particles.velocity_x[0] == pytest.approx(2.0)
        # Position uses the updated velocity
        assert particles.position_x[0] == pytest.approx(1.0)

    def test_boundary_acts_before_position_update(self):
        particles = create_particle_set([[40.0, 0.0, 0.0]], velocities=[[5.0, 0.0, 0.0]])
        reflected = integrate_semi_implicit_euler_vectorized(particles, 1, 0.04, sphere_size=SPHERE)
        assert reflected.tolist() == [True]
        assert particles.velocity_x[0] == pytest.approx(-4.0)
        assert particles.position_x[0] == pytest.approx(40.0 - 4.0 * 0.04)

    def test_acceleration_can_trigger_reflection(self):
        """Boundary sees the post-acceleration velocity."""
        particles = create_particle_set([[39.5, 0.0, 0.0]], velocities=[[-1.0, 0.0, 0.0]])
        particles.acceleration_x[:] = 100.0
        reflected = integrate_semi_implicit_euler_vectorized(particles, 1, 0.04, sphere_size=SPHERE)
        assert reflected[0]
        # v = -1 + 4 = 3 outward, reflected to -2.4
        assert particles.velocity_x[0] == pytest.approx(-2.4)

    def test_inactive_particles_untouched(self):
        particles = create_particle_set([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]],
                                        velocities=[[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        integrate_semi_implicit_euler_vectorized(particles, 1, 1.0)
        assert particles.position_x[0] == pytest.approx(1.0)
        assert particles.position_x[1] == 1.0
