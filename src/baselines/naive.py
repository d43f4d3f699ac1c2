"""Naive random-descent baseline."""

import random
from typing import Tuple

import numpy as np

from ..model.network import Network


def naive_solver(network: Network, rng: random.Random, iterations: int = 10000) -> Tuple[float, np.ndarray]:
    """
    Naive baseline: random single-house moves, kept only when strictly improving.

    Each iteration draws a random house and a random generator. An assigned
    house is moved there, an unassigned one is connected to it; the change is
    undone unless the cost strictly decreases. Works on the current
    assignment, which may be empty.

    Args:
        network: Network to improve in place
        rng: Random stream
        iterations: Number of proposals

    Returns:
        Tuple of (total_cost, assignment)
    """
    if network.house_count == 0 or network.generator_count == 0:
        return network.recompute_cost().total_cost, network.assignment_copy()

    for _ in range(iterations):
        h = rng.randrange(network.house_count)
        g_new = rng.randrange(network.generator_count)
        g_old = network.current_generator(h)

        old_cost = network.recompute_cost().total_cost
        if g_old is not None:
            network.reassign(h, g_old, g_new)
        else:
            network.assign(h, g_new)
        new_cost = network.recompute_cost().total_cost

        if new_cost >= old_cost:
            if g_old is not None:
                network.reassign(h, g_new, g_old)
            else:
                network.unassign(h, g_new)

    cost = network.recompute_cost().total_cost
    return cost, network.assignment_copy()
