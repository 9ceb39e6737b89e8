"""SPH (Smoothed Particle Hydrodynamics) fluid in a spherical container."""

from . import core
from . import physics
from . import scenarios

# Import API to trigger backend registration
from . import api

from .api import (
    # Phase functions
    compute_density,
    compute_pressure,
    compute_color_gradient,
    compute_color_field,
    compute_forces,
    integrate,

    # Backend management
    set_backend,
    get_backend,
    list_backends,
    print_backend_info
)
from .config import SimulationConfig
from .simulation import FluidSimulation
from .core.particles import ParticleArrays
from .core.errors import SimulationError, ConfigurationError, DensityDegeneracyError

__version__ = "0.1.0"

__all__ = [
    # Modules
    'core',
    'physics',
    'scenarios',

    # API functions
    'compute_density',
    'compute_pressure',
    'compute_color_gradient',
    'compute_color_field',
    'compute_forces',
    'integrate',

    # Backend management
    'set_backend',
    'get_backend',
    'list_backends',
    'print_backend_info',

    # Core classes
    'SimulationConfig',
    'FluidSimulation',
    'ParticleArrays',
    'SimulationError',
    'ConfigurationError',
    'DensityDegeneracyError'
]
