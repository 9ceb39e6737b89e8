"""Initial particle layouts."""

from .cloud import (
    create_gaussian_cloud,
    create_particle_set,
    create_from_config
)

__all__ = [
    'create_gaussian_cloud',
    'create_particle_set',
    'create_from_config'
]
