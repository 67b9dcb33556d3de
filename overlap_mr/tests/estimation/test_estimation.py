import numpy as np
import pandas as pd
import pytest

from ...errors import (
    EmptyInstrumentSetError,
    InsufficientDataError,
    InvalidParameterError
)
from ...estimation import wald_ratio, ivw, mr, f_statistic, one_sample_mr
from ...estimation import two_stage
from ...simulation import CausalModel, simulate_population


def _harmonised(bx, by, se_x, se_y):
    return pd.DataFrame({
        "variant": [f"v{i}" for i in range(len(bx))],
        "effect_allele": "A",
        "other_allele": "G",
        "beta_exposure": bx,
        "se_exposure": se_x,
        "beta_outcome": by,
        "se_outcome": se_y,
    })


def test_wald_ratio():
    estimate = wald_ratio([0.1], [0.03], [0.01], [0.02])

    assert estimate.estimate == pytest.approx(0.3)
    assert estimate.se == pytest.approx(0.2)
    assert estimate.n_instruments == 1


def test_wald_ratio_single_instrument_only():
    with pytest.raises(InvalidParameterError):
        wald_ratio([0.1, 0.2], [0.1, 0.2], [0.01, 0.01], [0.01, 0.01])


def test_ivw_equals_wald_ratio_with_one_instrument():
    args = ([-0.07], [0.021], [0.01], [0.015])

    ratio = wald_ratio(*args)
    weighted = ivw(*args)

    assert weighted.estimate == pytest.approx(ratio.estimate)
    assert weighted.se == pytest.approx(ratio.se)


def test_ivw_noiseless():
    bx = np.array([0.1, 0.2, 0.05, 0.3])
    se_y = np.array([0.01, 0.02, 0.01, 0.03])
    estimate = ivw(bx, 0.4 * bx, np.full(4, 0.01), se_y)

    assert estimate.estimate == pytest.approx(0.4)
    assert estimate.se == pytest.approx(
        np.sqrt(1 / np.sum(bx ** 2 / se_y ** 2))
    )


def test_ivw_is_weighted_regression_through_origin():
    rng = np.random.default_rng(3)
    bx = rng.uniform(0.05, 0.2, size=20)
    se_y = rng.uniform(0.01, 0.03, size=20)
    by = 0.3 * bx + rng.normal(0, se_y)

    w = 1 / se_y ** 2
    expected = np.linalg.lstsq(
        (np.sqrt(w) * bx).reshape(-1, 1), np.sqrt(w) * by, rcond=None
    )[0][0]

    assert ivw(bx, by, se_y, se_y).estimate == pytest.approx(expected)


def test_ivw_random_effects_se_not_smaller():
    rng = np.random.default_rng(4)
    bx = rng.uniform(0.05, 0.2, size=20)
    se_y = np.full(20, 0.01)
    # Heterogeneous ratios.
    by = 0.3 * bx + rng.normal(0, 0.05, size=20)

    fixed = ivw(bx, by, se_y, se_y, random_effects=False)
    random = ivw(bx, by, se_y, se_y)

    assert fixed.estimate == pytest.approx(random.estimate)
    assert random.se > fixed.se


def test_mr_dispatch():
    one = mr(_harmonised([0.1], [0.03], [0.01], [0.02]))
    assert one.method == "wald_ratio"

    many = mr(_harmonised([0.1, 0.2], [0.03, 0.06], [0.01] * 2, [0.02] * 2))
    assert many.method == "ivw"
    assert many.estimate == pytest.approx(0.3)


def test_mr_no_instruments():
    with pytest.raises(EmptyInstrumentSetError):
        mr(_harmonised([], [], [], []))

    with pytest.raises(EmptyInstrumentSetError):
        ivw([], [], [], [])


def test_f_statistic():
    np.testing.assert_allclose(
        f_statistic([0.1, -0.05], [0.01, 0.01]), [100, 25]
    )


def test_one_sample_mr():
    model = CausalModel(
        n_variants=10,
        variant_effect=0.1,
        confounder_exposure_effect=0.5,
        confounder_outcome_effect=0.5,
        causal_effect=0.2
    )
    sim = simulate_population(20_000, model, np.random.default_rng(11))
    instruments = sim.get_variable("g").column_names()

    estimate = one_sample_mr(sim.data, "y", "x", instruments)

    assert estimate.method == "2sls"
    assert estimate.n_instruments == 10
    assert estimate.estimate == pytest.approx(0.2, abs=0.12)
    assert estimate.se > 0


def test_one_sample_mr_without_instruments():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [1.0, 2.0, 3.0]})
    with pytest.raises(EmptyInstrumentSetError):
        one_sample_mr(df, "y", "x", [])


def test_one_sample_mr_degenerate_instruments(monkeypatch):
    def singular(*args, **kwargs):
        raise np.linalg.LinAlgError("Singular matrix")

    monkeypatch.setattr(two_stage, "IV2SLS", singular)

    df = pd.DataFrame({
        "x": [1.0, 2.0, 3.0, 4.0],
        "y": [1.0, 2.0, 3.0, 5.0],
        "g_0": [0.0, 1.0, 2.0, 1.0],
    })
    with pytest.raises(InsufficientDataError):
        one_sample_mr(df, "y", "x", ["g_0"])


def test_one_sample_mr_collinear_instruments():
    rng = np.random.default_rng(5)
    g = rng.binomial(2, 0.5, size=200).astype(float)
    x = 0.5 * g + rng.normal(size=200)
    df = pd.DataFrame({
        "x": x,
        "y": 0.2 * x + rng.normal(size=200),
        "g_0": g,
        "g_1": g,
    })

    with pytest.raises(InsufficientDataError):
        one_sample_mr(df, "y", "x", ["g_0", "g_1"])
