"""
Instrument selection and winner's curse correction.
"""

from typing import Union

import numpy as np
import pandas as pd
import scipy.stats

from .errors import InvalidParameterError, NumericalInstabilityError


GENOME_WIDE_SIGNIFICANCE = 5e-8


def _check_threshold(threshold: float) -> None:
    if not 0 < threshold < 1:
        raise InvalidParameterError(
            f"Significance threshold must be in (0, 1) (got {threshold})."
        )


def select_instruments(
    discovery: pd.DataFrame,
    threshold: float = GENOME_WIDE_SIGNIFICANCE
) -> pd.DataFrame:
    """Keep the variants with a discovery p-value below the threshold.

    Only the p-values of the discovery GWAS are used. Records with a missing
    p-value are never selected.

    """
    _check_threshold(threshold)
    selected = discovery.loc[discovery["p"] < threshold]
    return selected.drop_duplicates("variant").reset_index(drop=True)


def critical_value(threshold: float = GENOME_WIDE_SIGNIFICANCE) -> float:
    """Two-sided standard normal critical value for the threshold."""
    _check_threshold(threshold)
    return float(scipy.stats.norm.isf(threshold / 2))


def _inverse_mills(z: np.ndarray) -> np.ndarray:
    # phi(z) / Phi(z) in log space, stable for very negative z.
    return np.exp(scipy.stats.norm.logpdf(z) - scipy.stats.norm.logcdf(z))


def umvcue(
    discovery_beta,
    discovery_se,
    replication_beta,
    replication_se,
    threshold: float = GENOME_WIDE_SIGNIFICANCE
) -> Union[float, np.ndarray]:
    """Uniformly minimum variance conditionally unbiased estimator.

    Corrects the winner's curse of effects selected because their discovery
    p-value was below the threshold, using an independent replication
    estimate (Bowden and Dudbridge, 2009). Works on scalars or arrays.

    Negative discovery effects are corrected on the mirrored scale. The
    discovery estimates must be significant at the threshold. No standard
    error is provided for the corrected estimate.

    """
    b_d, se_d, b_r, se_r = np.broadcast_arrays(
        *[np.asarray(v, dtype=float) for v in (
            discovery_beta, discovery_se, replication_beta, replication_se
        )]
    )
    scalar = b_d.ndim == 0

    if np.any(se_d <= 0) or np.any(se_r <= 0):
        raise InvalidParameterError("Standard errors must be positive.")

    t = critical_value(threshold)
    z_d = np.abs(b_d) / se_d
    if np.any((z_d < t) & ~np.isclose(z_d, t)):
        raise InvalidParameterError(
            "The winner's curse correction only applies to estimates that "
            f"pass the selection threshold ({threshold:g})."
        )

    sign = np.where(b_d < 0, -1.0, 1.0)
    b_d = sign * b_d
    b_r = sign * b_r

    var_d = se_d ** 2
    var_r = se_r ** 2
    var_sum = var_d + var_r

    mle = (var_r * b_d + var_d * b_r) / var_sum
    standardized = np.sqrt(var_sum) / var_d * (mle - t * se_d)
    corrected = (
        mle - var_r / np.sqrt(var_sum) * _inverse_mills(standardized)
    )

    if not np.all(np.isfinite(corrected)):
        raise NumericalInstabilityError(
            "Non-finite winner's curse corrected estimate."
        )

    corrected = sign * corrected
    if scalar:
        return corrected.item()

    return corrected
