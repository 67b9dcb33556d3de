import pytest

from ...sweep import config_from_dict


@pytest.fixture
def small_config_dict():
    return {
        "simulation": {
            "n_exposure": 400,
            "n_outcome": 400,
            "n_replication": 400,
            "n_variants": 5,
        },
        "sweep": {
            "n_replicates": 6,
            "seed": 123,
            "threshold": 1e-3,
        },
        "parameters": [
            {"name": "overlap", "sampler": "list", "values": [0, 1]},
            {"name": "variant_effect", "sampler": "literal", "value": 0.3},
            {"name": "selection", "sampler": "list",
             "values": ["all", "significant", "replication", "umvcue"]},
        ]
    }


@pytest.fixture
def small_config(small_config_dict):
    return config_from_dict(small_config_dict)
