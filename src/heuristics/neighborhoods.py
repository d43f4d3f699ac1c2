"""Neighborhood move operators and selection heuristics for local search."""

import random
from typing import List, Optional, Tuple

import numpy as np

from ..model.network import Network, UNASSIGNED
from .config import OptimizerConfig


def move(network: Network, h: int, g_from: int, g_to: int) -> None:
    """
    Move: reconnect house h from generator g_from to generator g_to.

    Its own inverse: move(network, h, g_to, g_from) undoes it exactly.
    Does not recompute the cost.

    Raises:
        StructuralError: if h is not currently connected to g_from
    """
    network.reassign(h, g_from, g_to)


def swap(network: Network, h_a: int, h_b: int) -> bool:
    """
    Swap: exchange the generators of houses h_a and h_b.

    Equivalent to move(h_a, g_a, g_b) followed by move(h_b, g_b, g_a), and its
    own inverse. Does not recompute the cost.

    Returns:
        True if the swap was applied; False (no-op) when either house is
        unassigned or both share a generator.
    """
    g_a = network.current_generator(h_a)
    g_b = network.current_generator(h_b)
    if g_a is None or g_b is None or g_a == g_b:
        return False
    network.reassign(h_a, g_a, g_b)
    network.reassign(h_b, g_b, g_a)
    return True


def choose_house(
    network: Network,
    rng: random.Random,
    config: OptimizerConfig = OptimizerConfig(),
) -> Optional[int]:
    """
    Pick a house to move, biased towards imbalanced generators.

    A house is imbalanced when its generator's utilization deviates from the
    mean by more than `imbalance_threshold`, or exceeds 1.0. With probability
    `priority_house_probability` one of them is picked (when any exist),
    otherwise any house.

    Reads the mean utilization from the network's last cost snapshot.
    """
    if network.house_count == 0:
        return None

    assignment = network.assignment
    util = network.utilizations()
    mean = network.mean_utilization()

    flagged = (np.abs(util - mean) > config.imbalance_threshold) | (util > 1.0)
    assigned = assignment != UNASSIGNED
    imbalanced = np.zeros(len(assignment), dtype=bool)
    imbalanced[assigned] = flagged[assignment[assigned]]
    candidates = np.flatnonzero(imbalanced)

    if len(candidates) > 0 and rng.random() < config.priority_house_probability:
        return int(candidates[rng.randrange(len(candidates))])
    return rng.randrange(network.house_count)


def rank_generators(network: Network, h: int, config: OptimizerConfig = OptimizerConfig()) -> List[int]:
    """
    Generator indices sorted by descending attractiveness for house h.

    score = -|u - mean| (+ under_mean_bonus if u < mean)
            (- overload_malus if the house would push load above capacity)

    The sort is stable, so equal scores keep registration order.
    """
    util = network.utilizations()
    mean = network.mean_utilization()
    loads = network.loads()
    demand = network.demand(h)

    scores: List[Tuple[int, float]] = []
    for g in range(network.generator_count):
        score = -abs(util[g] - mean)
        if util[g] < mean:
            score += config.under_mean_bonus
        if loads[g] + demand > network.capacity(g):
            score -= config.overload_malus
        scores.append((g, float(score)))

    scores.sort(key=lambda item: item[1], reverse=True)
    return [g for g, _ in scores]


def choose_generator(
    network: Network,
    h: int,
    rng: random.Random,
    config: OptimizerConfig = OptimizerConfig(),
) -> Optional[int]:
    """
    Pick a target generator for house h.

    With probability `top_generator_probability`, uniformly among the
    `top_generators` best ranked generators; otherwise uniformly among all.
    """
    if network.generator_count == 0:
        return None
    ranked = rank_generators(network, h, config)
    if rng.random() < config.top_generator_probability:
        return ranked[rng.randrange(min(config.top_generators, len(ranked)))]
    return rng.randrange(network.generator_count)


def choose_swap_pair(network: Network, rng: random.Random) -> Optional[Tuple[int, int]]:
    """Two distinct houses drawn uniformly at random, or None if fewer than two exist."""
    if network.house_count < 2:
        return None
    h_a, h_b = rng.sample(range(network.house_count), 2)
    return h_a, h_b


def perturb(network: Network, rng: random.Random, ratio: float = 0.3) -> int:
    """
    Strong perturbation used between ILS rounds.

    Shuffles the houses, takes max(1, floor(ratio * house_count)) of them and
    moves each one to a uniformly random different generator. Unassigned
    houses are skipped. Recomputes the cost at the end.

    Returns:
        Number of houses actually moved
    """
    houses = list(range(network.house_count))
    rng.shuffle(houses)
    n_moves = min(len(houses), max(1, int(len(houses) * ratio)))

    moved = 0
    for h in houses[:n_moves]:
        current = network.current_generator(h)
        if current is None:
            continue
        others = [g for g in range(network.generator_count) if g != current]
        if others:
            move(network, h, current, others[rng.randrange(len(others))])
            moved += 1

    network.recompute_cost()
    return moved
