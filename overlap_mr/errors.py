"""Exceptions raised by the simulation and estimation code."""


class OverlapMRError(Exception):
    pass


class InvalidParameterError(OverlapMRError, ValueError):
    """Malformed simulation or estimation inputs."""
    pass


class InsufficientDataError(OverlapMRError):
    """Regression inputs are too small or degenerate to estimate from."""
    pass


class NumericalInstabilityError(OverlapMRError):
    pass


class EmptyInstrumentSetError(OverlapMRError):
    """No variant is available to combine into a causal estimate."""
    pass
