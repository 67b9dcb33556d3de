import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

from ...errors import (
    InsufficientDataError,
    InvalidParameterError,
    NumericalInstabilityError
)
from ...instruments import umvcue
from ...sweep import driver, run_sweep, run_replicate, exposure_effects
from ...sweep.driver import replicate_rng

from .fixtures import *  # noqa: F401, F403


@pytest.fixture
def discovery():
    return pd.DataFrame({
        "variant": ["g_0", "g_1", "g_2"],
        "effect_allele": "A",
        "other_allele": "G",
        "beta": [0.1, 0.01, -0.09],
        "se": [0.01, 0.01, 0.01],
        "p": [1e-20, 0.3, 1e-15],
        "n": 1000,
    })


@pytest.fixture
def replication(discovery):
    df = discovery.copy()
    df["beta"] = [0.08, 0.02, -0.07]
    df["p"] = [1e-13, 0.05, 1e-10]
    return df


def test_exposure_effects_all(discovery, replication):
    df = exposure_effects("all", discovery, replication, 5e-8)
    assert list(df["variant"]) == ["g_0", "g_1", "g_2"]


def test_exposure_effects_significant(discovery, replication):
    df = exposure_effects("significant", discovery, replication, 5e-8)
    assert list(df["variant"]) == ["g_0", "g_2"]
    assert list(df["beta"]) == [0.1, -0.09]


def test_exposure_effects_replication(discovery, replication):
    df = exposure_effects("replication", discovery, replication, 5e-8)
    assert list(df["variant"]) == ["g_0", "g_2"]
    assert list(df["beta"]) == [0.08, -0.07]


def test_exposure_effects_umvcue(discovery, replication):
    df = exposure_effects("umvcue", discovery, replication, 5e-8)

    assert list(df["variant"]) == ["g_0", "g_2"]
    assert list(df["se"]) == [0.01, 0.01]
    assert df["beta"].values[0] == pytest.approx(
        umvcue(0.1, 0.01, 0.08, 0.01)
    )
    # Corrected towards zero.
    assert 0 < df["beta"].values[0] < 0.1
    assert -0.09 < df["beta"].values[1] < 0


def test_exposure_effects_needs_replication(discovery):
    with pytest.raises(InvalidParameterError):
        exposure_effects("umvcue", discovery, None, 5e-8)


def test_run_replicate(small_config):
    cell = small_config.cells()[0]
    selections = ["all", "significant", "replication", "umvcue"]

    results = run_replicate(
        small_config, cell, selections, replicate_rng(1, 0)
    )

    assert [r.selection for r in results] == selections
    for r in results:
        assert r.status in ("ok", "empty")
        assert "observational" in r.references

    assert results[0].status == "ok"
    assert results[0].n_instruments == 5


def test_run_replicate_is_reproducible(small_config):
    cell = small_config.cells()[0]

    a = run_replicate(small_config, cell, ["all"], replicate_rng(1, 3))
    b = run_replicate(small_config, cell, ["all"], replicate_rng(1, 3))
    c = run_replicate(small_config, cell, ["all"], replicate_rng(1, 4))

    assert a[0].estimate == b[0].estimate
    assert a[0].estimate != c[0].estimate


def test_empty_instrument_set(small_config):
    small_config.threshold = 1e-300
    cell = small_config.cells()[0]

    results = run_replicate(
        small_config, cell, ["all", "significant"], replicate_rng(1, 0)
    )

    assert results[0].status == "ok"
    assert results[1].status == "empty"
    assert results[1].estimate is None


def test_run_sweep(small_config):
    summary = run_sweep(small_config, chunk_size=4)

    assert summary.shape[0] == 8
    for col in ("mean", "se", "n", "n_empty", "n_failed",
                "mean_f_statistic", "observational"):
        assert col in summary.columns

    assert (
        summary["n"] + summary["n_empty"] + summary["n_failed"] == 6
    ).all()

    all_rows = summary.loc[summary["selection"] == "all"]
    assert (all_rows["n"] == 6).all()


def test_run_sweep_does_not_depend_on_chunks(small_config):
    a = run_sweep(small_config, chunk_size=1)
    b = run_sweep(small_config, chunk_size=6)

    assert_allclose(a["mean"], b["mean"])
    assert_allclose(a["se"], b["se"])
    assert (a["n"] == b["n"]).all()


def test_run_sweep_parallel(small_config):
    a = run_sweep(small_config, n_workers=1, chunk_size=2)
    b = run_sweep(small_config, n_workers=2, chunk_size=2)

    assert_allclose(a["mean"], b["mean"])
    assert_allclose(a["observational"], b["observational"])


def test_run_sweep_validates_first(small_config):
    small_config.threshold = 2
    with pytest.raises(InvalidParameterError):
        run_sweep(small_config)


def test_two_stage_reference(small_config):
    small_config.reference_estimators = ["observational", "2sls"]
    summary = run_sweep(small_config)

    assert "2sls" in summary.columns
    assert np.isfinite(summary["2sls"]).all()


def test_failed_correction_only_affects_its_cells(small_config, monkeypatch):
    expected = run_sweep(small_config).set_index(["overlap", "selection"])

    def unstable(*args, **kwargs):
        raise NumericalInstabilityError("Inverse Mills ratio overflow.")

    monkeypatch.setattr(driver, "umvcue", unstable)
    summary = run_sweep(small_config).set_index(["overlap", "selection"])

    for (overlap, selection), row in summary.iterrows():
        if selection == "umvcue":
            assert row["n"] == 0
            assert row["n_failed"] == 6
            assert np.isnan(row["mean"])
        else:
            assert row["n_failed"] == 0
            assert row["n"] == expected.loc[(overlap, selection), "n"]
            assert row["mean"] == pytest.approx(
                expected.loc[(overlap, selection), "mean"], nan_ok=True
            )


def test_failed_simulation_counts_every_selection(small_config, monkeypatch):
    def degenerate(*args, **kwargs):
        raise InsufficientDataError("Too few individuals.")

    monkeypatch.setattr(driver, "run_gwas", degenerate)
    summary = run_sweep(small_config)

    assert (summary["n"] == 0).all()
    assert (summary["n_empty"] == 0).all()
    assert (summary["n_failed"] == 6).all()
    assert summary["observational"].isna().all()


def test_failed_two_stage_reference(small_config, monkeypatch):
    small_config.reference_estimators = ["observational", "2sls"]

    def rank_deficient(*args, **kwargs):
        raise InsufficientDataError("2SLS could not be fitted.")

    monkeypatch.setattr(driver, "one_sample_mr", rank_deficient)
    summary = run_sweep(small_config)

    all_rows = summary.loc[summary["selection"] == "all"]
    assert (all_rows["n_failed"] == 6).all()
    assert (all_rows["n"] == 0).all()
