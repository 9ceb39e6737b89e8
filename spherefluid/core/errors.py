"""Exceptions raised by the SPH core.

The pipeline is deterministic, so every error here is a configuration or
invariant violation. Nothing is retried; errors propagate to the caller.
"""


class SimulationError(Exception):
    """Base class for all spherefluid errors."""


class ConfigurationError(SimulationError, ValueError):
    """Invalid configuration or initial particle set, rejected before stepping."""


class DensityDegeneracyError(SimulationError, FloatingPointError):
    """A particle density fell to or below the configured epsilon.

    Density is the divisor of every force term, so continuing would
    propagate NaN/inf into velocity and position.
    """

    def __init__(self, indices, epsilon: float):
        self.indices = list(indices)
        self.epsilon = epsilon
        preview = self.indices[:10]
        more = "" if len(self.indices) <= 10 else f" (+{len(self.indices) - 10} more)"
        super().__init__(
            f"Density <= {epsilon:g} for {len(self.indices)} particle(s): {preview}{more}"
        )
