"""
Reporting tables built from the summary of a sweep.

These functions only consume the summary table written by the driver.

"""

from typing import List

import pandas as pd

from ..sweep.config import CELL_COLUMNS, REFERENCE_ESTIMATORS


def _estimators(summary: pd.DataFrame) -> List[str]:
    return [e for e in REFERENCE_ESTIMATORS if e in summary.columns]


def bias_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Long format table of the estimates and their bias.

    There is one row per cell and estimator ("mr" for the summary statistics
    based estimate, and any reference estimator present in the summary).

    """
    missing = [c for c in CELL_COLUMNS + ["mean", "se"]
               if c not in summary.columns]
    if missing:
        raise ValueError(f"Summary table is missing column(s): {missing}")

    frames = []
    mr = summary[CELL_COLUMNS].copy()
    mr["estimator"] = "mr"
    mr["estimate"] = summary["mean"]
    mr["se"] = summary["se"]
    frames.append(mr)

    for name in _estimators(summary):
        ref = summary[CELL_COLUMNS].copy()
        ref["estimator"] = name
        ref["estimate"] = summary[name]
        ref["se"] = summary.get(f"{name}_se")
        frames.append(ref)

    df = pd.concat(frames, ignore_index=True)
    df["bias"] = df["estimate"] - df["causal_effect"]

    return df


def bias_by_overlap(
    summary: pd.DataFrame,
    estimator: str = "mr"
) -> pd.DataFrame:
    """Bias of an estimator with one row per overlap proportion and one
    column per selection mode.

    Cells that differ in other parameters are kept apart in the index.

    """
    df = bias_table(summary)
    df = df.loc[df["estimator"] == estimator]

    index = [c for c in CELL_COLUMNS
             if c != "selection" and df[c].nunique() > 1]
    if "overlap" not in index:
        index.append("overlap")

    return df.pivot_table(
        index=index, columns="selection", values="bias", aggfunc="mean"
    )
