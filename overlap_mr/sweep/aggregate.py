"""
Mergeable summaries of replicate estimates.

Partial summaries computed by different workers can be merged in any order
(Chan, Golub and LeVeque parallel variance update).

"""

import math
from typing import Dict, Optional


class Aggregate:
    def __init__(self, n: int = 0, mean: float = 0.0, m2: float = 0.0):
        self.n = n
        self.mean = mean

        # Sum of squared deviations from the mean.
        self.m2 = m2

    def __repr__(self):
        return f"<Aggregate n={self.n} mean={self.mean} se={self.se}>"

    def add(self, value: float) -> None:
        self.n += 1
        delta = value - self.mean
        self.mean += delta / self.n
        self.m2 += delta * (value - self.mean)

    def merge(self, other: "Aggregate") -> "Aggregate":
        if self.n == 0:
            return Aggregate(other.n, other.mean, other.m2)
        if other.n == 0:
            return Aggregate(self.n, self.mean, self.m2)

        n = self.n + other.n
        delta = other.mean - self.mean
        mean = self.mean + delta * other.n / n
        m2 = self.m2 + other.m2 + delta ** 2 * self.n * other.n / n

        return Aggregate(n, mean, m2)

    @property
    def sd(self) -> float:
        if self.n < 2:
            return math.nan
        return math.sqrt(self.m2 / (self.n - 1))

    @property
    def se(self) -> float:
        """Standard error of the mean."""
        if self.n < 2:
            return math.nan
        return self.sd / math.sqrt(self.n)

    def get_mean(self) -> float:
        return self.mean if self.n > 0 else math.nan


class CellAggregate:
    """Summary of the replicates of one configuration cell.

    Replicates without an estimate (empty instrument set or failure) are
    counted but excluded from the mean and its standard error.

    """
    def __init__(self):
        self.metrics: Dict[str, Aggregate] = {}
        self.n_empty = 0
        self.n_failed = 0

    def add(self, name: str, value: Optional[float]) -> None:
        if value is None or math.isnan(value):
            return

        self.metrics.setdefault(name, Aggregate()).add(value)

    def get(self, name: str) -> Aggregate:
        return self.metrics.get(name, Aggregate())

    def merge(self, other: "CellAggregate") -> "CellAggregate":
        merged = CellAggregate()
        for name in set(self.metrics) | set(other.metrics):
            merged.metrics[name] = self.get(name).merge(other.get(name))

        merged.n_empty = self.n_empty + other.n_empty
        merged.n_failed = self.n_failed + other.n_failed

        return merged
