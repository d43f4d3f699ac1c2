"""Random assignment baseline."""

import random
from typing import Tuple

import numpy as np

from ..model.network import Network


def random_assignment(network: Network, rng: random.Random) -> Tuple[float, np.ndarray]:
    """
    Random baseline: connect every house to a uniformly random generator.

    Any previous assignment is cleared first. Capacity is ignored, so the
    result may be overloaded.

    Args:
        network: Network to assign in place
        rng: Random stream

    Returns:
        Tuple of (total_cost, assignment)
    """
    network.clear_assignment()
    if network.generator_count > 0:
        for h in range(network.house_count):
            network.assign(h, rng.randrange(network.generator_count))

    cost = network.recompute_cost().total_cost
    return cost, network.assignment_copy()
