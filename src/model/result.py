"""Cost snapshot data structure."""

from dataclasses import dataclass, asdict
from typing import Dict


@dataclass(frozen=True)
class CostSnapshot:
    """
    Cost statistics of an assignment, as of the last recomputation.

    Attributes:
        mean_utilization: Arithmetic mean of load / capacity over generators
            (a generator with zero capacity counts as 0.0)
        dispersion: Sum over generators of |utilization - mean_utilization|
        overload: Sum over generators of max(0, utilization - 1)
        penalty: Penalty coefficient applied to the overload
        total_cost: dispersion + penalty * overload

    A snapshot is only meaningful until the next mutation of the assignment;
    callers must recompute after every move before reading it again.
    """
    mean_utilization: float
    dispersion: float
    overload: float
    penalty: float
    total_cost: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

