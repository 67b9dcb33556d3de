"""
Alignment of exposure and outcome association results to the same allele.
"""

import numpy as np
import pandas as pd

from .logging import warn


HARMONISED_COLUMNS = [
    "variant", "effect_allele", "other_allele",
    "beta_exposure", "se_exposure", "beta_outcome", "se_outcome"
]


def harmonise(exposure: pd.DataFrame, outcome: pd.DataFrame) -> pd.DataFrame:
    """Pair exposure and outcome effects of the same variants.

    Outcome effects reported for the other allele are flipped. Variants whose
    alleles don't match or with missing estimates are dropped. The result is
    oriented so that the effect allele increases the exposure.

    """
    df = pd.merge(
        exposure[["variant", "effect_allele", "other_allele", "beta", "se"]],
        outcome[["variant", "effect_allele", "other_allele", "beta", "se"]],
        on="variant",
        suffixes=("_exposure", "_outcome")
    )

    same = (
        (df["effect_allele_exposure"] == df["effect_allele_outcome"]) &
        (df["other_allele_exposure"] == df["other_allele_outcome"])
    )
    swapped = (
        (df["effect_allele_exposure"] == df["other_allele_outcome"]) &
        (df["other_allele_exposure"] == df["effect_allele_outcome"])
    )

    n_mismatch = int((~(same | swapped)).sum())
    if n_mismatch > 0:
        warn(f"Dropping {n_mismatch} variant(s) with incompatible alleles.")

    keep = same | swapped
    df = df.loc[keep].copy()
    df.loc[swapped[keep], "beta_outcome"] *= -1

    df = df.rename(columns={
        "effect_allele_exposure": "effect_allele",
        "other_allele_exposure": "other_allele",
    })

    df = df.dropna(
        subset=["beta_exposure", "se_exposure", "beta_outcome", "se_outcome"]
    )

    # Orient to the exposure increasing allele.
    negative = df["beta_exposure"] < 0
    df.loc[negative, ["beta_exposure", "beta_outcome"]] *= -1
    df.loc[negative, ["effect_allele", "other_allele"]] = (
        df.loc[negative, ["other_allele", "effect_allele"]].values
    )

    df = df.drop_duplicates("variant")

    return df[HARMONISED_COLUMNS].reset_index(drop=True)


def harmonised_arrays(harmonised: pd.DataFrame):
    """Return the (bx, by, se_x, se_y) arrays of a harmonised table."""
    return tuple(
        np.asarray(harmonised[col], dtype=float)
        for col in ("beta_exposure", "beta_outcome",
                    "se_exposure", "se_outcome")
    )
