"""
Linear causal model with a confounder used to simulate GWAS samples.

The exposure and outcome both have unit variance:

    X = G @ beta_gx + beta_ux * U + e_x
    Y = beta_xy * X + beta_uy * U + e_y

with U ~ N(0, 1) and G the allele dosages of independent variants.

"""

from dataclasses import dataclass, asdict
from typing import Optional, Union, Sequence, Dict, Any

import numpy as np

from ..errors import InvalidParameterError
from .simulation import Simulation, Genotypes, Normal
from .decorators import variable


ArrayLike = Union[float, Sequence[float], np.ndarray]


@dataclass
class CausalModel:
    n_variants: int
    allele_frequency: ArrayLike = 0.5
    variant_effect: ArrayLike = 0.05
    confounder_exposure_effect: float = 0.3
    confounder_outcome_effect: float = 0.3
    causal_effect: float = 0.2

    def allele_frequencies(self) -> np.ndarray:
        return self._broadcast(self.allele_frequency, "allele_frequency")

    def variant_effects(self) -> np.ndarray:
        return self._broadcast(self.variant_effect, "variant_effect")

    def _broadcast(self, value: ArrayLike, name: str) -> np.ndarray:
        arr = np.asarray(value, dtype=float)
        if arr.ndim == 0:
            return np.full(self.n_variants, float(arr))

        if arr.shape != (self.n_variants, ):
            raise InvalidParameterError(
                f"Expected a scalar or {self.n_variants} values for '{name}' "
                f"(got shape {arr.shape})."
            )

        return arr

    def genetic_variance(self) -> float:
        p = self.allele_frequencies()
        return float(np.sum(self.variant_effects() ** 2 * 2 * p * (1 - p)))

    def exposure_residual_variance(self) -> float:
        return (
            1 - self.genetic_variance() -
            self.confounder_exposure_effect ** 2
        )

    def outcome_residual_variance(self) -> float:
        b_xy = self.causal_effect
        b_uy = self.confounder_outcome_effect
        b_ux = self.confounder_exposure_effect
        return 1 - b_xy ** 2 - b_uy ** 2 - 2 * b_xy * b_uy * b_ux

    def observational_association(self) -> float:
        """Slope of the outcome on the exposure in the population."""
        return (
            self.causal_effect +
            self.confounder_outcome_effect * self.confounder_exposure_effect
        )

    def validate(self) -> None:
        if self.n_variants < 1:
            raise InvalidParameterError("At least one variant is required.")

        p = self.allele_frequencies()
        if np.any((p <= 0) | (p >= 1)):
            raise InvalidParameterError(
                "Allele frequencies must be in the open interval (0, 1)."
            )

        if self.exposure_residual_variance() < 0:
            raise InvalidParameterError(
                "The genetic and confounder effects explain more than the "
                "total exposure variance "
                f"(residual variance {self.exposure_residual_variance():.4f})."
            )

        if self.outcome_residual_variance() < 0:
            raise InvalidParameterError(
                "The causal and confounder effects explain more than the "
                "total outcome variance "
                f"(residual variance {self.outcome_residual_variance():.4f})."
            )

    def get_parameters_dict(self) -> Dict[str, Any]:
        return {
            k: v.tolist() if isinstance(v, np.ndarray) else v
            for k, v in asdict(self).items()
        }


@dataclass
class SampleDesign:
    """Layout of the exposure, outcome and replication samples.

    The exposure (discovery) sample is [0, n_exposure). The outcome sample
    starts so that its first m individuals are the last m individuals of the
    exposure sample, with m = round(overlap * min(n_exposure, n_outcome)).
    The replication sample comes after all the individuals that could be in
    the outcome sample, so that the simulated population has the same size
    whatever the overlap.

    """
    n_exposure: int
    n_outcome: int
    n_replication: int = 0
    overlap: float = 0.0

    def validate(self) -> None:
        if self.n_exposure < 3 or self.n_outcome < 3:
            raise InvalidParameterError(
                "Exposure and outcome samples need at least 3 individuals."
            )

        if self.n_replication < 0:
            raise InvalidParameterError(
                "The replication sample size can't be negative."
            )

        if not 0 <= self.overlap <= 1:
            raise InvalidParameterError(
                f"Overlap should be between 0 and 1 (got {self.overlap})."
            )

    @property
    def n_overlapping(self) -> int:
        return int(round(self.overlap * min(self.n_exposure, self.n_outcome)))

    @property
    def n_total(self) -> int:
        return self.n_exposure + self.n_outcome + self.n_replication

    def exposure_indices(self) -> np.ndarray:
        return np.arange(self.n_exposure)

    def outcome_indices(self) -> np.ndarray:
        start = self.n_exposure - self.n_overlapping
        return np.arange(start, start + self.n_outcome)

    def replication_indices(self) -> np.ndarray:
        start = self.n_exposure + self.n_outcome
        return np.arange(start, start + self.n_replication)


def simulate_population(
    n: int,
    model: CausalModel,
    rng: Optional[np.random.Generator] = None,
    prefix: str = "overlap_mr_simulation"
) -> Simulation:
    """Simulate genotypes (g), confounder (u), exposure (x) and outcome (y)
    for n individuals.

    """
    model.validate()

    if n < 1:
        raise InvalidParameterError("Can't simulate an empty population.")

    sim = Simulation(n, rng=rng, prefix=prefix)
    for name, value in model.get_parameters_dict().items():
        sim.parameters[name] = value

    beta_gx = model.variant_effects()
    sigma_x = np.sqrt(model.exposure_residual_variance())
    sigma_y = np.sqrt(model.outcome_residual_variance())

    sim.add_variable(Genotypes("g", model.allele_frequencies()))
    sim.add_variable(Normal("u", 0, 1))

    @variable
    def x(sim: Simulation):
        return (
            sim.get_variable_data("g") @ beta_gx +
            model.confounder_exposure_effect * sim.get_variable_data("u") +
            sim.rng.normal(0, sigma_x, size=sim.n)
        )

    @variable
    def y(sim: Simulation):
        return (
            model.causal_effect * sim.get_variable_data("x") +
            model.confounder_outcome_effect * sim.get_variable_data("u") +
            sim.rng.normal(0, sigma_y, size=sim.n)
        )

    sim.add_variable(x)
    sim.add_variable(y)

    return sim
