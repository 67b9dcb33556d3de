from .errors import (
    OverlapMRError,
    InvalidParameterError,
    InsufficientDataError,
    NumericalInstabilityError,
    EmptyInstrumentSetError
)
