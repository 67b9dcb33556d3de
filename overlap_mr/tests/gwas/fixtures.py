import pytest
import numpy as np


@pytest.fixture
def genotypes_phenotype():
    """1000 individuals, 4 variants, the phenotype depends on the first two.

    The last variant is monomorphic.

    """
    rng = np.random.default_rng(42)
    n = 1000
    g = rng.binomial(2, [0.2, 0.5, 0.4, 0.3], size=(n, 4)).astype(float)
    g[:, 3] = 1

    y = 0.5 * g[:, 0] - 0.2 * g[:, 1] + rng.normal(size=n)

    return g, y
