"""
Summary statistics based Mendelian randomization estimators.
"""

from typing import NamedTuple

import numpy as np
import pandas as pd

from ..errors import EmptyInstrumentSetError, InvalidParameterError
from ..harmonise import harmonised_arrays


class MREstimate(NamedTuple):
    estimate: float
    se: float
    n_instruments: int
    method: str


def _check_arrays(*arrays):
    arrays = [np.atleast_1d(np.asarray(a, dtype=float)) for a in arrays]
    n = arrays[0].shape[0]
    if any(a.shape != (n, ) for a in arrays):
        raise InvalidParameterError(
            "Effect and standard error vectors must have the same length."
        )

    if n == 0:
        raise EmptyInstrumentSetError("No instruments.")

    return arrays


def wald_ratio(bx, by, se_x, se_y) -> MREstimate:
    """Ratio estimate from a single instrument.

    The standard error is the first order approximation se_y / |bx|.

    """
    bx, by, se_x, se_y = _check_arrays(bx, by, se_x, se_y)
    if bx.shape[0] != 1:
        raise InvalidParameterError(
            f"The Wald ratio uses exactly one instrument (got {bx.shape[0]})."
        )

    if bx[0] == 0:
        raise InvalidParameterError("Instrument has no effect on exposure.")

    return MREstimate(
        estimate=(by[0] / bx[0]).item(),
        se=(se_y[0] / np.abs(bx[0])).item(),
        n_instruments=1,
        method="wald_ratio"
    )


def ivw(bx, by, se_x, se_y, random_effects: bool = True) -> MREstimate:
    """Inverse variance weighted estimate.

    Weighted regression of by on bx through the origin with weights
    1 / se_y ** 2. With random_effects, the standard error is scaled by the
    residual standard error when it is larger than 1 (multiplicative random
    effects). With one instrument, the residual standard error is undefined
    and the fixed effect standard error is used.

    """
    bx, by, se_x, se_y = _check_arrays(bx, by, se_x, se_y)
    n = bx.shape[0]

    if np.any(se_y <= 0):
        raise InvalidParameterError("Outcome standard errors must be > 0.")

    w = 1 / se_y ** 2
    sxx = np.sum(w * bx ** 2)
    if sxx == 0:
        raise InvalidParameterError("Instruments have no effect on exposure.")

    estimate = np.sum(w * bx * by) / sxx
    se = np.sqrt(1 / sxx)

    if random_effects and n > 1:
        sigma = np.sqrt(np.sum(w * (by - estimate * bx) ** 2) / (n - 1))
        se *= max(1.0, sigma)

    return MREstimate(
        estimate=float(estimate),
        se=float(se),
        n_instruments=n,
        method="ivw"
    )


def mr(harmonised: pd.DataFrame) -> MREstimate:
    """Causal estimate from a harmonised exposure and outcome table.

    Uses the Wald ratio with one instrument and IVW otherwise.

    """
    if harmonised.shape[0] == 0:
        raise EmptyInstrumentSetError("No instruments available for MR.")

    bx, by, se_x, se_y = harmonised_arrays(harmonised)

    if bx.shape[0] == 1:
        return wald_ratio(bx, by, se_x, se_y)

    return ivw(bx, by, se_x, se_y)


def f_statistic(beta, se) -> np.ndarray:
    """Instrument strength of individual variants."""
    return (np.asarray(beta, dtype=float) / np.asarray(se, dtype=float)) ** 2
