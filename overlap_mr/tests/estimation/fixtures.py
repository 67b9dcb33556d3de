import pytest
import pandas as pd


@pytest.fixture
def discovery_table():
    return pd.DataFrame({
        "variant": ["v0", "v1", "v2", "v3", "v4"],
        "effect_allele": "A",
        "other_allele": "G",
        "beta": [0.10, -0.08, 0.02, 0.05, float("nan")],
        "se": [0.01, 0.01, 0.01, 0.01, float("nan")],
        "p": [1e-20, 1e-12, 0.04, 1e-6, float("nan")],
        "n": 10_000,
    })


@pytest.fixture
def outcome_table():
    return pd.DataFrame({
        "variant": ["v0", "v1", "v2", "v3", "v4"],
        "effect_allele": ["A", "G", "A", "C", "A"],
        "other_allele": ["G", "A", "G", "T", "G"],
        "beta": [0.02, 0.016, 0.004, 0.01, 0.0],
        "se": [0.01, 0.01, 0.01, 0.01, 0.01],
        "p": [0.05, 0.1, 0.7, 0.3, 1.0],
        "n": 10_000,
    })
