from typing import Iterable, Tuple

import numpy as np
import pandas as pd
from linearmodels.iv.model import IV2SLS
from linearmodels.iv.results import IVResults

from ..errors import EmptyInstrumentSetError, InsufficientDataError
from .core import MREstimate


def twosls(
    df: pd.DataFrame,
    y_col: str,
    x_col: str,
    z_cols: Iterable[str]
) -> Tuple[pd.Series, pd.Series]:
    z_cols = list(z_cols)
    if len(z_cols) == 0:
        raise EmptyInstrumentSetError("2SLS needs at least one instrument.")

    df = df.copy()
    df["const"] = 1

    try:
        model = IV2SLS(
            df[y_col],
            df[["const"]],
            df[x_col],
            df[z_cols]
        ).fit(cov_type="robust")

    except (ValueError, np.linalg.LinAlgError) as e:
        # Rank deficient instruments or too few observations.
        raise InsufficientDataError(f"2SLS could not be fitted: {e}") from e

    assert isinstance(model, IVResults)

    return model.params, model.std_errors


def one_sample_mr(
    df: pd.DataFrame,
    y_col: str,
    x_col: str,
    z_cols: Iterable[str]
) -> MREstimate:
    """Individual-level 2SLS estimate of the effect of x on y."""
    z_cols = list(z_cols)
    params, std_errors = twosls(df, y_col, x_col, z_cols)

    return MREstimate(
        estimate=float(params[x_col]),
        se=float(std_errors[x_col]),
        n_instruments=len(z_cols),
        method="2sls"
    )
