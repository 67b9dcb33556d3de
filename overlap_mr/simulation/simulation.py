"""
Utilities to create simulated individual-level datasets.

Every stochastic variable draws from the random generator bound to the
simulation so that a simulation is a pure function of its parameters and of
the generator it was given.

rng = np.random.default_rng(42)
sim = Simulation(n=100, rng=rng)

sim.add_variable(Genotypes("g", frequencies=np.full(10, 0.3)))
sim.add_variable(Normal("u", 0, 1))

@variable
def x(sim):
    return (
        sim.get_variable_data("g") @ effects +
        sim.get_variable_data("u") +
        sim.rng.normal(size=sim.n)
    )

sim.add_variable(x)

"""

from collections import OrderedDict
from typing import Optional, Dict, Any

import pandas as pd
import numpy as np

from .. import logging


class Simulation:
    def __init__(
        self,
        n: int,
        rng: Optional[np.random.Generator] = None,
        prefix: str = "overlap_mr_simulation"
    ):
        self.n = n
        self.prefix = prefix

        if rng is None:
            rng = np.random.default_rng()
        self.rng = rng

        # Individual-level simulated data.
        self._data = pd.DataFrame(index=range(n))

        # Simulation parameters are recorded for bookkeeping and can be
        # retrieved from functional variables.
        self._sim_parameters_values: Dict[str, Any] = OrderedDict()

        # Realizations of the variables are stored in _data.
        self._sim_variables: Dict[str, Variable] = OrderedDict()

    @property
    def parameters(self):
        class _ParameterDict:
            def __getitem__(self2, name: str) -> Any:
                return self.get_sim_parameter(name)

            def __setitem__(self2, name: str, value: Any) -> None:
                self.add_sim_parameter(name, value)

            def __repr__(self2):
                return self._sim_parameters_values.__repr__()

        return _ParameterDict()

    @property
    def data(self) -> pd.DataFrame:
        return self._data

    def _check_var_name(self, name):
        if name in self._sim_variables:
            logging.warn(
                f"Variable named '{name}' already exists (overwriting)."
            )

    def add_variable(self, variable: "Variable") -> None:
        """Add a variable to the simulation model and sample its data."""
        self._check_var_name(variable.name)
        self._sim_variables[variable.name] = variable
        self.sample_variable_data(variable.name)

    def add_sim_parameter(self, name: str, value: Any) -> None:
        self._sim_parameters_values[name] = value

    def get_sim_parameter(self, name):
        return self._sim_parameters_values[name]

    def get_variable(self, name):
        return self._sim_variables[name]

    def get_variable_data(self, name) -> np.ndarray:
        variable = self.get_variable(name)
        if isinstance(variable, MVVariable):
            return self._data[variable.column_names()].values

        return self._data[name].values

    def sample_variable_data(self, variable_name):
        variable = self.get_variable(variable_name)
        cur_data = np.asarray(variable(self))
        if isinstance(variable, MVVariable):
            add_df = pd.DataFrame(cur_data, columns=variable.column_names())
            self._data = pd.concat([self._data, add_df], axis=1)
        else:
            self._data[variable.name] = cur_data

    def get_parameters_dict(self) -> Dict[str, Any]:
        return {
            k: v.tolist() if isinstance(v, np.ndarray) else v
            for k, v in self._sim_parameters_values.items()
        }


class Variable:
    def __init__(self, name):
        self.name = name

    def __call__(self, sim: Simulation):
        raise NotImplementedError()


class MVVariable(Variable):
    """Multidimensional variable."""
    def __init__(self, name_prefix, ndim):
        super().__init__(name_prefix)
        self.ndim = ndim

    def column_names(self):
        return [f"{self.name}_{j}" for j in range(self.ndim)]


class Genotypes(MVVariable):
    """Independent biallelic variants coded as allele dosage (0, 1, 2)."""
    def __init__(self, name_prefix: str, frequencies: np.ndarray):
        frequencies = np.atleast_1d(np.asarray(frequencies, dtype=float))
        super().__init__(name_prefix, frequencies.shape[0])
        self.frequencies = frequencies

    def __call__(self, sim: Simulation):
        return sim.rng.binomial(2, self.frequencies, size=(sim.n, self.ndim))


class Normal(Variable):
    def __init__(
        self,
        name: str,
        mu: float,
        sigma: float
    ):
        super().__init__(name)
        self.mu = mu
        self.sigma = sigma

    def __call__(self, sim: Simulation):
        return sim.rng.normal(self.mu, self.sigma, size=sim.n)
