"""Adaptive Simulated Annealing with reheating over Move and Swap neighborhoods."""

import math
import random
from dataclasses import dataclass
from typing import List, Optional

from ..model.network import Network
from .config import OptimizerConfig
from .neighborhoods import choose_generator, choose_house, choose_swap_pair, move, swap


@dataclass
class AnnealingStats:
    """
    Summary of one annealing call.

    Attributes:
        iterations: Iterations performed (each one proposes one move or swap)
        acceptations: Proposals kept
        improvements: Acceptations that improved the best cost seen in the call
        reheats: Number of reheats triggered by stagnation
        final_temperature: Temperature at loop exit
        best_cost: Best cost value observed during the call (the state at
            exit may be worse; the best state itself is not kept)
        final_cost: Cost of the state left in the network
        trace: Accept/reject decision per iteration, when recorded
    """
    iterations: int = 0
    acceptations: int = 0
    improvements: int = 0
    reheats: int = 0
    final_temperature: float = 0.0
    best_cost: float = math.inf
    final_cost: float = math.inf
    trace: Optional[List[bool]] = None

    @property
    def acceptance_rate(self) -> float:
        return self.acceptations / self.iterations if self.iterations else 0.0


def metropolis_accept(delta: float, temperature: float, rng: random.Random) -> bool:
    """Accept improvements, and deteriorations with probability exp(-delta / T)."""
    return delta < 0 or math.exp(-delta / temperature) > rng.random()


def _attempt_move(
    network: Network,
    rng: random.Random,
    config: OptimizerConfig,
    temperature: float,
) -> bool:
    h = choose_house(network, rng, config)
    if h is None:
        return False
    g_new = choose_generator(network, h, rng, config)
    g_current = network.current_generator(h)
    if g_new is None or g_current is None or g_current == g_new:
        return False

    cost_before = network.cost()
    move(network, h, g_current, g_new)
    cost_after = network.recompute_cost().total_cost

    if metropolis_accept(cost_after - cost_before, temperature, rng):
        return True
    move(network, h, g_new, g_current)
    network.recompute_cost()
    return False


def _attempt_swap(network: Network, rng: random.Random, temperature: float) -> bool:
    pair = choose_swap_pair(network, rng)
    if pair is None:
        return False
    h_a, h_b = pair

    cost_before = network.cost()
    if not swap(network, h_a, h_b):
        return False
    cost_after = network.recompute_cost().total_cost

    if metropolis_accept(cost_after - cost_before, temperature, rng):
        return True
    swap(network, h_a, h_b)
    network.recompute_cost()
    return False


def _cool(temperature: float, acceptance_rate: float, config: OptimizerConfig) -> float:
    if acceptance_rate > config.high_acceptance:
        return temperature * config.fast_cooling
    if acceptance_rate < config.low_acceptance:
        return temperature * config.slow_cooling
    return temperature * config.normal_cooling


def adaptive_simulated_annealing(
    network: Network,
    rng: random.Random,
    config: OptimizerConfig = OptimizerConfig(),
    record_trace: bool = False,
) -> AnnealingStats:
    """
    Adaptive Simulated Annealing over the live assignment of `network`.

    Each iteration proposes a Swap (probability `swap_probability`) or a
    Move chosen by the selection heuristics, recomputes the cost and applies
    the Metropolis criterion; rejected proposals are undone with the inverse
    operator.

    Every `window` iterations the temperature is cooled according to the
    window's acceptance rate (fast above `high_acceptance`, slow below
    `low_acceptance`, normal otherwise). After more than `reheat_threshold`
    iterations without improving the best cost seen, the temperature is
    raised to min(T * reheat_factor, t0 * reheat_cap_ratio), at most
    `max_reheats` times per call.

    Stops when T <= t_min or after `max_iterations` iterations. The best
    state is not restored at exit; callers that need it keep a copy.

    Args:
        network: Network whose assignment is optimized in place
        rng: Random stream; a fixed seed reproduces the whole trace
        config: Annealing parameters
        record_trace: Keep the accept/reject decision of every iteration

    Returns:
        AnnealingStats
    """
    stats = AnnealingStats(trace=[] if record_trace else None)
    temperature = config.t0
    stats.best_cost = network.recompute_cost().total_cost

    if network.house_count == 0 or network.generator_count == 0:
        stats.final_temperature = temperature
        stats.final_cost = stats.best_cost
        return stats

    window_acceptations = 0
    since_improvement = 0

    while temperature > config.t_min and stats.iterations < config.max_iterations:
        stats.iterations += 1

        if rng.random() < config.swap_probability and network.house_count > 1:
            accepted = _attempt_swap(network, rng, temperature)
        else:
            accepted = _attempt_move(network, rng, config, temperature)

        if accepted:
            stats.acceptations += 1
            window_acceptations += 1
            current_cost = network.cost()
            if current_cost < stats.best_cost:
                stats.best_cost = current_cost
                stats.improvements += 1
                since_improvement = 0
            else:
                since_improvement += 1
        else:
            since_improvement += 1

        if stats.trace is not None:
            stats.trace.append(accepted)

        # Adapt the cooling speed to the acceptance rate of the last window
        if stats.iterations % config.window == 0:
            temperature = _cool(temperature, window_acceptations / config.window, config)
            window_acceptations = 0

        if since_improvement > config.reheat_threshold and stats.reheats < config.max_reheats:
            temperature = min(temperature * config.reheat_factor, config.t0 * config.reheat_cap_ratio)
            since_improvement = 0
            stats.reheats += 1

    stats.final_temperature = temperature
    stats.final_cost = network.cost()

    if config.verbose:
        if stats.iterations >= config.max_iterations:
            print("  (iteration limit reached)")
        print(
            f"  Annealing: {stats.iterations} iterations | {stats.acceptations} accepted "
            f"({100.0 * stats.acceptance_rate:.1f}%) | {stats.improvements} improvements | "
            f"{stats.reheats} reheats"
        )

    return stats
