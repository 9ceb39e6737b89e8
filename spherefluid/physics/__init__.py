"""Physics modules for SPH: field estimation, forces, and diagnostics."""

from .fields_vectorized import (
    compute_density_vectorized,
    check_density,
    linear_equation_of_state,
    compute_pressure_vectorized,
    compute_color_gradient_vectorized,
    compute_color_field_vectorized
)
from .forces_vectorized import (
    compute_forces_vectorized,
    compute_pressure_force_vectorized,
    compute_viscosity_force_vectorized,
    compute_color_divergence_vectorized,
    compute_surface_tension_force_vectorized,
    compute_external_force_vectorized,
    compute_acceleration
)
from .diagnostics import (
    compute_kinetic_energy,
    compute_momentum,
    compute_center_of_mass,
    compute_max_radius,
    SimulationDiagnostics
)

__all__ = [
    # Fields
    'compute_density_vectorized',
    'check_density',
    'linear_equation_of_state',
    'compute_pressure_vectorized',
    'compute_color_gradient_vectorized',
    'compute_color_field_vectorized',
    # Forces
    'compute_forces_vectorized',
    'compute_pressure_force_vectorized',
    'compute_viscosity_force_vectorized',
    'compute_color_divergence_vectorized',
    'compute_surface_tension_force_vectorized',
    'compute_external_force_vectorized',
    'compute_acceleration',
    # Diagnostics
    'compute_kinetic_energy',
    'compute_momentum',
    'compute_center_of_mass',
    'compute_max_radius',
    'SimulationDiagnostics'
]
