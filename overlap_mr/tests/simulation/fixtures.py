import pytest
import numpy as np

from ...simulation import CausalModel, SampleDesign


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def confounded_model():
    return CausalModel(
        n_variants=5,
        allele_frequency=0.3,
        variant_effect=0.1,
        confounder_exposure_effect=0.5,
        confounder_outcome_effect=0.4,
        causal_effect=0.2
    )


@pytest.fixture
def balanced_design():
    return SampleDesign(n_exposure=100, n_outcome=100, n_replication=50)
