import pytest
import pandas as pd


@pytest.fixture
def summary():
    rows = []
    for overlap, shift in ((0.0, -0.1), (0.5, 0.0), (1.0, 0.1)):
        for selection, extra in (("all", 0.0), ("significant", -0.05)):
            rows.append({
                "overlap": overlap,
                "variant_effect": 0.05,
                "confounder_exposure_effect": 0.3,
                "confounder_outcome_effect": 0.3,
                "causal_effect": 0.2,
                "selection": selection,
                "mean": 0.2 + shift + extra,
                "se": 0.01,
                "n": 100,
                "n_empty": 0,
                "n_failed": 0,
                "observational": 0.29,
                "observational_se": 0.001,
            })

    return pd.DataFrame(rows)
