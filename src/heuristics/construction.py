"""Construction heuristic: greedy assignment of the largest houses first."""

from typing import Optional

from ..model.network import Network


def best_generator_for(network: Network, h: int, overload_malus: float = 100000.0) -> Optional[int]:
    """
    Generator with the strictly highest greedy score for house h.

    score = remaining_capacity * (1 - utilization), minus `overload_malus`
    when the remaining capacity cannot hold the house. The first generator in
    registration order wins ties.

    Returns:
        Generator index, or None if the network has no generator
    """
    demand = network.demand(h)
    best = None
    best_score = float('-inf')

    for g in range(network.generator_count):
        remaining = network.capacity(g) - network.load(g)
        score = remaining * (1.0 - network.utilization(g))
        if remaining < demand:
            score -= overload_malus
        if score > best_score:
            best_score = score
            best = g

    return best


def greedy_constructor(network: Network, overload_malus: float = 100000.0) -> None:
    """
    Greedy constructor: build a full assignment from scratch.

    Houses are taken by descending demand (registration order breaks ties)
    and each is connected to `best_generator_for` it. Any previous assignment
    is cleared first. Deterministic; recomputes the cost at the end.

    Args:
        network: Network to (re)assign in place
        overload_malus: Score malus for a generator the house would overload
    """
    order = sorted(range(network.house_count), key=lambda h: -network.demand(h))

    network.clear_assignment()

    for h in order:
        g = best_generator_for(network, h, overload_malus)
        if g is not None:
            network.assign(h, g)

    network.recompute_cost()
