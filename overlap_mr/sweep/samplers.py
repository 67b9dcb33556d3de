import itertools

import numpy as np

from ..errors import InvalidParameterError


SAMPLERS = {}


class sampler_mode:
    def __init__(self, mode_name):
        self.mode_name = mode_name

    def __call__(self, cls):
        global SAMPLERS
        SAMPLERS[self.mode_name] = cls
        return cls


class Sampler:
    def __init__(self, n_elements: int):
        self.n_elements = n_elements

    def values(self) -> list:
        return list(itertools.islice(iter(self), self.n_elements))

    def __iter__(self):
        # Should be an infinite generator.
        raise NotImplementedError()


class SweepParameter:
    def __init__(self, name: str, sampler: Sampler):
        self.name = name
        self.sampler = sampler

    def __repr__(self):
        return f"<Parameter: {self.name} - {self.sampler.values()}>"

    def get_instances(self):
        return self.sampler.values()


@sampler_mode("grid")
class GridSampler(Sampler):
    def __init__(self, start, stop, n_values=None, step=None,
                 log: bool = False):
        if n_values is not None and step is not None:
            raise InvalidParameterError("Provide step OR n_values.")

        if n_values is not None:
            if log:
                self._values = np.geomspace(start, stop, n_values).tolist()
            else:
                self._values = np.linspace(start, stop, n_values).tolist()

        elif step is not None:
            if log:
                raise InvalidParameterError(
                    "Step not implemented in log space."
                )
            self._values = np.arange(start, stop, step).tolist()

        else:
            raise InvalidParameterError("Provide either step or n_values.")

        super().__init__(len(self._values))

    def __iter__(self):
        for v in itertools.cycle(self._values):
            yield v


@sampler_mode("list")
class ListSampler(Sampler):
    def __init__(self, values: list):
        if len(values) == 0:
            raise InvalidParameterError("List sampler needs values.")

        if len(set(values)) != len(values):
            raise InvalidParameterError(
                f"Duplicated values in list sampler: {values}"
            )

        super().__init__(len(values))
        self._values = list(values)

    def __iter__(self):
        for v in itertools.cycle(self._values):
            yield v


@sampler_mode("literal")
class LiteralSampler(ListSampler):
    def __init__(self, value):
        if type(value) not in {int, float, str, bool}:
            raise InvalidParameterError(
                "Literal sampler only supported for int, float, bool and str."
            )
        super().__init__([value])
