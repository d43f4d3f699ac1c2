"""Tuning parameters of the optimization pipeline."""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class OptimizerConfig:
    """
    Parameters of greedy construction, adaptive SA, local descent and ILS.

    Defaults are the tuned values used by the CLI; every field can be overridden
    from a JSON file with `load_config`.
    """

    # ILS
    restarts: int = 5  # total phases, the initial construction included
    perturbation_ratio: float = 0.3

    # Adaptive simulated annealing
    t0: float = 1000.0
    t_min: float = 0.001
    max_iterations: int = 50000  # safety cap per annealing call
    window: int = 100  # iterations between temperature adaptations
    high_acceptance: float = 0.85
    low_acceptance: float = 0.15
    fast_cooling: float = 0.95  # acceptance rate above high_acceptance
    slow_cooling: float = 0.985  # acceptance rate below low_acceptance
    normal_cooling: float = 0.97
    reheat_threshold: int = 800  # iterations without improvement
    max_reheats: int = 3
    reheat_factor: float = 15.0
    reheat_cap_ratio: float = 0.4  # reheated T never exceeds t0 * ratio
    swap_probability: float = 0.3

    # Selection heuristics
    imbalance_threshold: float = 0.15
    priority_house_probability: float = 0.7
    top_generators: int = 3
    top_generator_probability: float = 0.8
    under_mean_bonus: float = 0.5
    overload_malus: float = 10.0

    # Greedy construction
    greedy_overload_malus: float = 100000.0

    # Local descent
    max_descent_passes: int = 1000

    seed: Optional[int] = None
    verbose: bool = False

    def validate(self) -> None:
        """Raise ValueError if the parameters are inconsistent."""
        if self.restarts < 1:
            raise ValueError("restarts must be >= 1")
        if not 0.0 <= self.perturbation_ratio <= 1.0:
            raise ValueError("perturbation_ratio must be in [0, 1]")
        if self.t0 <= 0 or self.t_min <= 0:
            raise ValueError("t0 and t_min must be positive")
        if self.t_min >= self.t0:
            raise ValueError("t_min must be lower than t0")
        if self.max_iterations < 0 or self.window < 1:
            raise ValueError("max_iterations must be >= 0 and window >= 1")
        if not 0.0 <= self.low_acceptance <= self.high_acceptance <= 1.0:
            raise ValueError("acceptance bounds must satisfy 0 <= low <= high <= 1")
        for name in ('fast_cooling', 'slow_cooling', 'normal_cooling'):
            factor = getattr(self, name)
            if not 0.0 < factor < 1.0:
                raise ValueError(f"{name} must be in (0, 1), got {factor}")
        if self.reheat_threshold < 0 or self.max_reheats < 0:
            raise ValueError("reheat_threshold and max_reheats must be >= 0")
        if self.reheat_factor < 1.0 or self.reheat_cap_ratio <= 0.0:
            raise ValueError("reheat_factor must be >= 1 and reheat_cap_ratio > 0")
        for name in ('swap_probability', 'priority_house_probability', 'top_generator_probability'):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ValueError(f"{name} must be a probability, got {p}")
        if self.top_generators < 1:
            raise ValueError("top_generators must be >= 1")
        if self.max_descent_passes < 0:
            raise ValueError("max_descent_passes must be >= 0")

    def replace(self, **changes: Any) -> "OptimizerConfig":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def config_from_dict(data: Dict[str, Any], base: Optional[OptimizerConfig] = None) -> OptimizerConfig:
    """Apply overrides from a plain dict; unknown keys raise ValueError."""
    base = base or OptimizerConfig()
    known = {f.name for f in fields(OptimizerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown optimizer parameter(s): {', '.join(unknown)}")
    config = replace(base, **data)
    config.validate()
    return config


def load_config(path: Union[str, Path], base: Optional[OptimizerConfig] = None) -> OptimizerConfig:
    """
    Load optimizer overrides from a JSON object.

    Example file::

        {"restarts": 8, "t0": 500.0, "seed": 7}
    """
    with Path(path).open("r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of parameters")
    return config_from_dict(data, base)
