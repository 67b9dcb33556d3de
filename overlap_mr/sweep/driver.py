"""
Monte Carlo driver.

Every replicate simulates one population, runs the exposure (discovery),
outcome and replication GWAS, and derives one causal estimate for each
instrument selection mode of its configuration cell.

Random streams: replicate r of every cell uses the seed sequence
SeedSequence(entropy, spawn_key=(r, )). Replicates within a cell are
independent and cells use common random numbers, which makes comparisons
between cells less noisy. Results don't depend on the number of workers.

"""

import os
import multiprocessing
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple, Iterable

import numpy as np
import pandas as pd

from ..errors import (
    EmptyInstrumentSetError,
    InsufficientDataError,
    InvalidParameterError,
    NumericalInstabilityError
)
from ..estimation import mr, f_statistic, one_sample_mr
from ..gwas import gwas, regress
from ..harmonise import harmonise
from ..instruments import select_instruments, umvcue
from ..logging import debug, info, warn
from ..simulation import simulate_population
from .aggregate import CellAggregate
from .config import SweepConfig, CELL_COLUMNS, validate_config


# Errors that invalidate a single replicate but not the sweep.
REPLICATE_ERRORS = (
    InvalidParameterError,
    InsufficientDataError,
    NumericalInstabilityError
)


@dataclass
class ReplicateResult:
    selection: str
    status: str = "ok"
    estimate: Optional[float] = None
    se: Optional[float] = None
    n_instruments: int = 0
    mean_f_statistic: Optional[float] = None
    references: Dict[str, float] = field(default_factory=dict)


@dataclass
class GwasResults:
    discovery: pd.DataFrame
    outcome: pd.DataFrame
    replication: Optional[pd.DataFrame]
    individuals: pd.DataFrame  # Individual-level data of the outcome sample.


def cell_key(cell: Dict[str, Any]) -> Tuple:
    return tuple(cell[c] for c in CELL_COLUMNS)


def _data_key(cell: Dict[str, Any]) -> Tuple:
    return tuple(cell[c] for c in CELL_COLUMNS if c != "selection")


def exposure_effects(
    selection: str,
    discovery: pd.DataFrame,
    replication: Optional[pd.DataFrame] = None,
    threshold: float = 5e-8
) -> pd.DataFrame:
    """Exposure association results of the instruments for a selection mode.

    - all: every variant with discovery estimates.
    - significant: discovery estimates of variants with p < threshold.
    - replication: replication estimates of the significant variants.
    - umvcue: winner's curse corrected discovery estimates of the significant
      variants (standard errors from the discovery GWAS).

    """
    if selection == "all":
        return discovery

    selected = select_instruments(discovery, threshold)
    if selection == "significant" or selected.shape[0] == 0:
        return selected

    if replication is None:
        raise InvalidParameterError(
            f"Selection mode '{selection}' requires replication estimates."
        )

    if selection == "replication":
        return replication.loc[
            replication["variant"].isin(selected["variant"])
        ].reset_index(drop=True)

    elif selection == "umvcue":
        df = pd.merge(
            selected,
            replication[["variant", "beta", "se"]],
            on="variant",
            suffixes=("", "_replication")
        ).dropna(subset=["beta_replication", "se_replication"])

        df["beta"] = umvcue(
            df["beta"].values,
            df["se"].values,
            df["beta_replication"].values,
            df["se_replication"].values,
            threshold
        )

        return df.drop(columns=["beta_replication", "se_replication"])

    raise InvalidParameterError(f"Unknown selection mode '{selection}'.")


def run_gwas(
    conf: SweepConfig,
    cell: Dict[str, Any],
    rng: np.random.Generator,
    need_replication: bool = False
) -> GwasResults:
    model = conf.causal_model(cell)
    design = conf.sample_design(cell)

    sim = simulate_population(design.n_total, model, rng)

    g = sim.get_variable_data("g")
    x = sim.get_variable_data("x")
    y = sim.get_variable_data("y")
    variants = sim.get_variable("g").column_names()

    discovery = gwas(g, x, design.exposure_indices(), variants=variants)
    outcome = gwas(g, y, design.outcome_indices(), variants=variants)

    replication = None
    if need_replication:
        replication = gwas(
            g, x, design.replication_indices(), variants=variants
        )

    return GwasResults(
        discovery=discovery,
        outcome=outcome,
        replication=replication,
        individuals=sim.data.iloc[design.outcome_indices()],
    )


def _estimate(
    selection: str,
    results: GwasResults,
    threshold: float,
    reference_estimators: Iterable[str],
    references: Dict[str, float]
) -> ReplicateResult:
    out = ReplicateResult(selection, references=dict(references))

    try:
        exposure = exposure_effects(
            selection, results.discovery, results.replication, threshold
        )
        harmonised = harmonise(exposure, results.outcome)
        estimate = mr(harmonised)

        if "2sls" in reference_estimators:
            out.references["2sls"] = one_sample_mr(
                results.individuals, "y", "x", harmonised["variant"]
            ).estimate

    except EmptyInstrumentSetError:
        out.status = "empty"
        return out

    except REPLICATE_ERRORS as e:
        warn(f"Replicate failed for selection '{selection}': {e}")
        out.status = "failed"
        return out

    out.estimate = estimate.estimate
    out.se = estimate.se
    out.n_instruments = estimate.n_instruments
    out.mean_f_statistic = float(np.mean(f_statistic(
        harmonised["beta_exposure"], harmonised["se_exposure"]
    )))

    return out


def run_replicate(
    conf: SweepConfig,
    cell: Dict[str, Any],
    selections: List[str],
    rng: np.random.Generator
) -> List[ReplicateResult]:
    """Simulate one population and estimate the causal effect for every
    selection mode.

    """
    need_replication = any(s in ("replication", "umvcue") for s in selections)

    try:
        results = run_gwas(conf, cell, rng, need_replication)

        references = {}
        if "observational" in conf.reference_estimators:
            references["observational"], _, _ = regress(
                results.individuals["x"].values,
                results.individuals["y"].values
            )

    except REPLICATE_ERRORS as e:
        warn(f"Replicate failed: {e}")
        return [ReplicateResult(s, status="failed") for s in selections]

    return [
        _estimate(
            selection, results, conf.threshold, conf.reference_estimators,
            references
        )
        for selection in selections
    ]


@dataclass
class _Task:
    conf: SweepConfig
    cells: List[Dict[str, Any]]  # Cells that only differ by selection.
    replicates: range
    entropy: int


def replicate_rng(entropy: int, replicate: int) -> np.random.Generator:
    return np.random.default_rng(
        np.random.SeedSequence(entropy, spawn_key=(replicate, ))
    )


def _run_task(task: _Task) -> Dict[Tuple, CellAggregate]:
    selections = [cell["selection"] for cell in task.cells]
    aggregates = {cell_key(cell): CellAggregate() for cell in task.cells}

    for replicate in task.replicates:
        rng = replicate_rng(task.entropy, replicate)
        results = run_replicate(task.conf, task.cells[0], selections, rng)

        for cell, result in zip(task.cells, results):
            agg = aggregates[cell_key(cell)]

            if result.status == "failed":
                agg.n_failed += 1
                continue

            for name, value in result.references.items():
                agg.add(name, value)

            if result.status == "empty":
                agg.n_empty += 1
                continue

            agg.add("estimate", result.estimate)
            agg.add("se", result.se)
            agg.add("n_instruments", result.n_instruments)
            agg.add("f_statistic", result.mean_f_statistic)

    return aggregates


def make_tasks(
    conf: SweepConfig,
    entropy: int,
    chunk_size: int = 10
) -> List[_Task]:
    groups: Dict[Tuple, List[Dict[str, Any]]] = {}
    for cell in conf.cells():
        groups.setdefault(_data_key(cell), []).append(cell)

    tasks = []
    for cells in groups.values():
        for start in range(0, conf.n_replicates, chunk_size):
            stop = min(start + chunk_size, conf.n_replicates)
            tasks.append(_Task(conf, cells, range(start, stop), entropy))

    return tasks


def _init_worker():
    os.environ["OVERLAP_MR_QUIET"] = "1"


def run_sweep(
    conf: SweepConfig,
    n_workers: int = 1,
    chunk_size: int = 10
) -> pd.DataFrame:
    """Run all the replicates of all the cells of the sweep.

    Returns the summary table with one row per cell.

    """
    validate_config(conf)

    entropy = np.random.SeedSequence(conf.seed).entropy
    debug(f"Seed sequence entropy: {entropy}")

    tasks = make_tasks(conf, entropy, chunk_size)
    info(
        f"Running {conf.n_replicates} replicate(s) for "
        f"{len(conf.cells())} cell(s) ({len(tasks)} task(s))."
    )

    totals: Dict[Tuple, CellAggregate] = {}

    def _merge(partial: Dict[Tuple, CellAggregate]) -> None:
        for key, agg in partial.items():
            totals[key] = totals.get(key, CellAggregate()).merge(agg)

    if n_workers <= 1:
        for i, task in enumerate(tasks):
            _merge(_run_task(task))
            debug(f"Task {i + 1}/{len(tasks)} done.")

    else:
        proc_ctx = multiprocessing.get_context("spawn")
        with proc_ctx.Pool(n_workers, initializer=_init_worker) as pool:
            for i, partial in enumerate(pool.imap_unordered(_run_task, tasks)):
                _merge(partial)
                debug(f"Task {i + 1}/{len(tasks)} done.")

    return summary_table(conf, totals)


def summary_table(
    conf: SweepConfig,
    totals: Dict[Tuple, CellAggregate]
) -> pd.DataFrame:
    rows = []
    for cell in conf.cells():
        agg = totals.get(cell_key(cell), CellAggregate())
        estimate = agg.get("estimate")

        row = dict(cell)
        row.update({
            "mean": estimate.get_mean(),
            "se": estimate.se,
            "sd": estimate.sd,
            "n": estimate.n,
            "n_empty": agg.n_empty,
            "n_failed": agg.n_failed,
            "mean_se": agg.get("se").get_mean(),
            "mean_n_instruments": agg.get("n_instruments").get_mean(),
            "mean_f_statistic": agg.get("f_statistic").get_mean(),
        })

        for name in conf.reference_estimators:
            row[name] = agg.get(name).get_mean()
            row[f"{name}_se"] = agg.get(name).se

        rows.append(row)

    df = pd.DataFrame(rows)
    if df.shape[0] > 0 and df["mean"].isna().all():
        warn("No replicate produced a causal estimate.")

    return df
