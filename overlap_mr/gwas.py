"""
Marginal (one variant at a time) association tests.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import scipy.stats

from .errors import InsufficientDataError
from .logging import debug


GWAS_COLUMNS = [
    "variant", "effect_allele", "other_allele", "beta", "se", "p", "n"
]


def _univariate_ols(
    x: np.ndarray,
    y: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Regress y on every column of x separately (with an intercept).

    Columns without variance get NaN estimates.

    """
    n = y.shape[0]
    if n < 3:
        raise InsufficientDataError(
            f"At least 3 individuals are needed for regression (got {n})."
        )

    x_c = x - x.mean(axis=0)
    y_c = y - y.mean()

    sxx = np.sum(x_c ** 2, axis=0)
    sxy = x_c.T @ y_c
    syy = y_c @ y_c

    degenerate = sxx <= np.finfo(float).eps * n
    sxx = np.where(degenerate, np.nan, sxx)

    beta = sxy / sxx
    rss = np.maximum(syy - beta * sxy, 0)
    se = np.sqrt(rss / (n - 2) / sxx)

    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.abs(beta) / se

    p = 2 * scipy.stats.t.sf(t, df=n - 2)

    # Perfect fits.
    perfect = (se == 0) & ~degenerate
    p = np.where(perfect, np.where(beta == 0, 1.0, 0.0), p)

    return beta, se, np.clip(p, 0, 1)


def regress(
    predictor: np.ndarray,
    response: np.ndarray
) -> Tuple[float, float, float]:
    """Simple linear regression of response on predictor.

    Returns the slope, its standard error and the two-sided p-value (Student
    t with n - 2 degrees of freedom). The three values are NaN if the
    predictor is constant.

    """
    predictor = np.asarray(predictor, dtype=float).reshape(-1, 1)
    response = np.asarray(response, dtype=float).reshape(-1)

    if predictor.shape[0] != response.shape[0]:
        raise ValueError("Predictor and response have different lengths.")

    beta, se, p = _univariate_ols(predictor, response)
    return beta.item(), se.item(), p.item()


def gwas(
    genotypes: np.ndarray,
    phenotype: np.ndarray,
    indices: Optional[np.ndarray] = None,
    variants: Optional[Sequence[str]] = None,
    effect_allele: Union[str, Sequence[str]] = "A",
    other_allele: Union[str, Sequence[str]] = "G"
) -> pd.DataFrame:
    """Marginal association of every variant with the phenotype.

    Args:
        genotypes: Allele dosage matrix (individuals x variants).
        phenotype: Phenotype vector.
        indices: Individuals included in the analysis (all by default).
        variants: Variant names (v0, v1, ... by default).
        effect_allele: Allele counted by the dosage.
        other_allele: Reference allele.

    Variants without genotype variance in the sample are reported with NaN
    beta, se and p.

    """
    genotypes = np.asarray(genotypes, dtype=float)
    if genotypes.ndim == 1:
        genotypes = genotypes.reshape(-1, 1)

    phenotype = np.asarray(phenotype, dtype=float)

    if indices is not None:
        genotypes = genotypes[indices, :]
        phenotype = phenotype[indices]

    n, n_variants = genotypes.shape

    if variants is None:
        variants = [f"v{j}" for j in range(n_variants)]

    beta, se, p = _univariate_ols(genotypes, phenotype)

    n_degenerate = int(np.isnan(beta).sum())
    if n_degenerate > 0:
        debug(f"{n_degenerate} monomorphic variant(s) in GWAS sample.")

    return pd.DataFrame({
        "variant": list(variants),
        "effect_allele": effect_allele,
        "other_allele": other_allele,
        "beta": beta,
        "se": se,
        "p": p,
        "n": n
    }, columns=GWAS_COLUMNS)
