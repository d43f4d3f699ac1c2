"""Local descent: strict-improvement hill climbing over Move."""

import random
from dataclasses import dataclass, field
from typing import List

from ..model.network import Network
from .neighborhoods import move


@dataclass
class DescentStats:
    passes: int = 0
    improvements: int = 0
    cost_log: List[float] = field(default_factory=list)  # start cost, then each accepted move


def local_descent(
    network: Network,
    rng: random.Random,
    max_passes: int = 1000,
    verbose: bool = False,
) -> DescentStats:
    """
    First-improvement descent to a local optimum of the Move neighborhood.

    Each pass visits the houses in shuffled order and, for each house, the
    generators in shuffled order. A move is kept only if it strictly lowers
    the cost, and the scan of that house continues from its new generator;
    otherwise it is undone. Stops after a pass without improvement or after
    `max_passes` passes.
    """
    stats = DescentStats()
    stats.cost_log.append(network.recompute_cost().total_cost)

    improved = True
    while improved and stats.passes < max_passes:
        improved = False
        stats.passes += 1

        houses = list(range(network.house_count))
        rng.shuffle(houses)

        for h in houses:
            current = network.current_generator(h)
            if current is None:
                continue

            generators = list(range(network.generator_count))
            rng.shuffle(generators)

            for g in generators:
                if g == current:
                    continue
                cost_before = network.cost()
                move(network, h, current, g)
                cost_after = network.recompute_cost().total_cost

                if cost_after < cost_before:
                    improved = True
                    stats.improvements += 1
                    stats.cost_log.append(cost_after)
                    current = g
                else:
                    move(network, h, g, current)
                    network.recompute_cost()

    if verbose:
        print(f"  Descent: {stats.passes} passes | {stats.improvements} improvements")

    return stats
