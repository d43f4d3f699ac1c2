"""Iterated Local Search driver: construction, annealing, descent, then perturb-and-reoptimize rounds."""

import random
import time
from typing import List, Optional, Tuple

import numpy as np

from ..model.errors import StructuralError
from ..model.network import Network
from .config import OptimizerConfig
from .construction import greedy_constructor
from .descent import local_descent
from .neighborhoods import perturb
from .sa import adaptive_simulated_annealing


def _reoptimize(network: Network, rng: random.Random, config: OptimizerConfig) -> float:
    """Anneal then descend; returns the recomputed cost."""
    stats = adaptive_simulated_annealing(network, rng, config)
    if config.verbose:
        print(f"After annealing    : {stats.final_cost:.3f}")
    local_descent(network, rng, config.max_descent_passes, verbose=config.verbose)
    return network.recompute_cost().total_cost


def iterated_local_search(
    network: Network,
    config: Optional[OptimizerConfig] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[float, np.ndarray, List[float]]:
    """
    Hybrid ILS over the assignment of `network`.

    1. Greedy construction, adaptive annealing and local descent give the
       first global best.
    2. For each of the remaining `restarts - 1` rounds: restore the global
       best, perturb it, anneal, descend, and keep the result only if it is
       strictly better.
    3. Restore the global best.

    The network is left holding the best assignment found, with its cost
    snapshot recomputed.

    Args:
        network: Network to optimize in place (must have a generator)
        config: Parameters (default: OptimizerConfig())
        rng: Random stream (default: random.Random(config.seed))

    Returns:
        Tuple of (best_cost, best_assignment, cost_log)
        cost_log holds the global best cost after each phase, so it is
        non-increasing and has `restarts` entries

    Raises:
        StructuralError: if the network has no generator
    """
    config = config or OptimizerConfig()
    config.validate()
    if network.generator_count == 0:
        raise StructuralError("cannot optimize a network without generators")
    if rng is None:
        rng = random.Random(config.seed)

    start_time = time.perf_counter()
    if config.verbose:
        print("\n=== ILS + adaptive annealing + reheating ===")
        print("--- Initialisation ---")

    greedy_constructor(network, config.greedy_overload_malus)
    if config.verbose:
        print(f"Greedy construction: {network.cost():.3f}")

    best_cost = _reoptimize(network, rng, config)
    best_assignment = network.assignment_copy()
    cost_log = [best_cost]
    if config.verbose:
        print(f"Initial solution   : {best_cost:.3f}\n")

    for round_index in range(1, config.restarts):
        if config.verbose:
            print(f"--- ILS round {round_index + 1}/{config.restarts} ---")

        network.restore_assignment(best_assignment)
        perturb(network, rng, config.perturbation_ratio)
        if config.verbose:
            print(f"After perturbation : {network.cost():.3f}")

        cost = _reoptimize(network, rng, config)
        if config.verbose:
            print(f"After descent      : {cost:.3f}")

        if cost < best_cost:
            best_cost = cost
            best_assignment = network.assignment_copy()
            if config.verbose:
                print("New best solution")
        elif config.verbose:
            print("No improvement, back to the best solution")

        cost_log.append(best_cost)

    network.restore_assignment(best_assignment)
    network.recompute_cost()

    if config.verbose:
        elapsed = time.perf_counter() - start_time
        print("\n=== Final result ===")
        print(f"Best cost : {best_cost:.3f}")
        print(f"Total time: {elapsed * 1000:.0f}ms\n")

    return best_cost, best_assignment, cost_log


def optimize(network: Network, config: Optional[OptimizerConfig] = None) -> float:
    """
    Optimize `network` in place and return the final (best) cost.

    Single entry point for front ends; see `iterated_local_search`.
    """
    best_cost, _, _ = iterated_local_search(network, config)
    return best_cost
