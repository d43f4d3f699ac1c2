"""Heuristic algorithms: greedy construction, adaptive SA, local descent, ILS"""

from .config import OptimizerConfig, load_config, config_from_dict
from .construction import greedy_constructor, best_generator_for
from .neighborhoods import (move, swap, choose_house, choose_generator, rank_generators,
                            choose_swap_pair, perturb)
from .sa import adaptive_simulated_annealing, AnnealingStats, metropolis_accept
from .descent import local_descent, DescentStats
from .ils import iterated_local_search, optimize

__all__ = [
    'OptimizerConfig', 'load_config', 'config_from_dict',
    'greedy_constructor', 'best_generator_for',
    'move', 'swap', 'choose_house', 'choose_generator', 'rank_generators',
    'choose_swap_pair', 'perturb',
    'adaptive_simulated_annealing', 'AnnealingStats', 'metropolis_accept',
    'local_descent', 'DescentStats',
    'iterated_local_search', 'optimize'
]
