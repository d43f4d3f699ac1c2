"""Baseline algorithms for comparison"""

from .naive import naive_solver
from .random_assignment import random_assignment

__all__ = ['naive_solver', 'random_assignment']
