"""
Configuration of a simulation sweep.

A sweep is the full grid of the values of the swept parameters. Parameters
that are not swept take their default value.

"""

import json
import itertools
from typing import List, Dict, Any, Optional

from ..errors import InvalidParameterError
from ..instruments import GENOME_WIDE_SIGNIFICANCE
from ..simulation import CausalModel, SampleDesign
from .samplers import SAMPLERS, SweepParameter


SELECTION_MODES = ("all", "significant", "replication", "umvcue")

REFERENCE_ESTIMATORS = ("observational", "2sls")

# Parameters that can vary between the cells of a sweep.
PARAMETER_DEFAULTS: Dict[str, Any] = {
    "overlap": 0.0,
    "variant_effect": 0.05,
    "confounder_exposure_effect": 0.3,
    "confounder_outcome_effect": 0.3,
    "causal_effect": 0.2,
    "selection": "significant",
}

SIMULATION_DEFAULTS: Dict[str, Any] = {
    "n_exposure": 20_000,
    "n_outcome": 20_000,
    "n_replication": 20_000,
    "n_variants": 50,
    "allele_frequency": 0.5,
}

CELL_COLUMNS = list(PARAMETER_DEFAULTS.keys())


class SweepConfig:
    def __init__(
        self,
        simulation: Optional[Dict[str, Any]] = None,
        parameters: Optional[List[SweepParameter]] = None,
        n_replicates: int = 100,
        seed: Optional[int] = None,
        threshold: float = GENOME_WIDE_SIGNIFICANCE,
        reference_estimators: Optional[List[str]] = None,
    ):
        self.simulation = dict(SIMULATION_DEFAULTS)
        if simulation is not None:
            self.simulation.update(simulation)

        self.parameters = parameters if parameters is not None else []
        self.n_replicates = n_replicates
        self.seed = seed
        self.threshold = threshold

        if reference_estimators is None:
            reference_estimators = ["observational"]
        self.reference_estimators = list(reference_estimators)

    def cells(self) -> List[Dict[str, Any]]:
        """All the parameter combinations of the sweep."""
        names = [p.name for p in self.parameters]
        values = [p.get_instances() for p in self.parameters]

        cells = []
        for combination in itertools.product(*values):
            cell = dict(PARAMETER_DEFAULTS)
            cell.update(zip(names, combination))
            cells.append(cell)

        return cells

    def causal_model(self, cell: Dict[str, Any]) -> CausalModel:
        return CausalModel(
            n_variants=self.simulation["n_variants"],
            allele_frequency=self.simulation["allele_frequency"],
            variant_effect=cell["variant_effect"],
            confounder_exposure_effect=cell["confounder_exposure_effect"],
            confounder_outcome_effect=cell["confounder_outcome_effect"],
            causal_effect=cell["causal_effect"],
        )

    def sample_design(self, cell: Dict[str, Any]) -> SampleDesign:
        return SampleDesign(
            n_exposure=self.simulation["n_exposure"],
            n_outcome=self.simulation["n_outcome"],
            n_replication=self.simulation["n_replication"],
            overlap=cell["overlap"],
        )

    def print(self):
        print("*** Sweep configuration ***")
        print("[simulation]")
        print(self.simulation)
        print()

        print("[sweep]")
        print(f"=> Replicates per cell: '{self.n_replicates}'")
        print(f"=> Seed: '{self.seed}'")
        print(f"=> Selection threshold: '{self.threshold:g}'")
        print(f"=> Reference estimators: {self.reference_estimators}")
        print()

        print("[parameters]")
        for parameter in self.parameters:
            print(parameter)


def parse_parameter(parameter: dict) -> SweepParameter:
    parameter = dict(parameter)

    if "name" not in parameter:
        raise InvalidParameterError("Parameter missing a 'name'.")

    if "sampler" not in parameter:
        raise InvalidParameterError("Parameter missing a 'sampler'.")

    name = parameter.pop("name")
    if name not in PARAMETER_DEFAULTS:
        raise InvalidParameterError(
            f"Unknown parameter '{name}'. Accepted values: {CELL_COLUMNS}"
        )

    # Get the sampler.
    sampler = parameter.pop("sampler")
    if sampler not in SAMPLERS:
        raise InvalidParameterError(
            f"Unknown sampler '{sampler}'. Accepted values: "
            f"{list(SAMPLERS.keys())}"
        )

    try:
        return SweepParameter(name, SAMPLERS[sampler](**parameter))
    except TypeError as e:
        raise InvalidParameterError(
            f"Invalid arguments for parameter '{name}': {e}"
        ) from e


def config_from_dict(config: dict) -> SweepConfig:
    sweep_conf = config.get("sweep", {})

    simulation = config.get("simulation", {})
    unknown = set(simulation) - set(SIMULATION_DEFAULTS)
    if unknown:
        raise InvalidParameterError(
            f"Unknown simulation setting(s): {sorted(unknown)}"
        )

    parameters = []
    for parameter in config.get("parameters", []):
        parameters.append(parse_parameter(parameter))

    names = [p.name for p in parameters]
    if len(set(names)) != len(names):
        raise InvalidParameterError("Parameters can only be swept once.")

    conf = SweepConfig(
        simulation=simulation,
        parameters=parameters,
        n_replicates=sweep_conf.get("n_replicates", 100),
        seed=sweep_conf.get("seed"),
        threshold=sweep_conf.get("threshold", GENOME_WIDE_SIGNIFICANCE),
        reference_estimators=sweep_conf.get("reference_estimators"),
    )
    validate_config(conf)

    return conf


def parse_config(filename: str) -> SweepConfig:
    with open(filename, "rt") as f:
        config = json.load(f)

    return config_from_dict(config)


def validate_config(conf: SweepConfig) -> None:
    """Check every cell of the sweep before running any replicate."""
    if not 0 < conf.threshold < 1:
        raise InvalidParameterError(
            f"Significance threshold must be in (0, 1) "
            f"(got {conf.threshold})."
        )

    if not isinstance(conf.n_replicates, int) or conf.n_replicates < 1:
        raise InvalidParameterError(
            "The number of replicates must be a positive integer."
        )

    for estimator in conf.reference_estimators:
        if estimator not in REFERENCE_ESTIMATORS:
            raise InvalidParameterError(
                f"Unknown reference estimator '{estimator}'. Accepted "
                f"values: {list(REFERENCE_ESTIMATORS)}"
            )

    for cell in conf.cells():
        if cell["selection"] not in SELECTION_MODES:
            raise InvalidParameterError(
                f"Unknown selection mode '{cell['selection']}'. Accepted "
                f"values: {list(SELECTION_MODES)}"
            )

        if (
            cell["selection"] in ("replication", "umvcue") and
            conf.simulation["n_replication"] < 3
        ):
            raise InvalidParameterError(
                f"Selection mode '{cell['selection']}' requires a "
                f"replication sample (n_replication >= 3)."
            )

        conf.causal_model(cell).validate()
        conf.sample_design(cell).validate()
