"""
Genetic algorithm for the travelling-salesperson problem: tours evolved by
roulette-wheel selection, swap mutation and ordered crossover.
"""

from .cities import Cities, random_permutation
from .evolutionary import GAConfig, GeneticSearch, SearchResult
from .individual import Individual, InvalidTourError
from .population import Population

__all__ = [
    "Cities",
    "random_permutation",
    "Individual",
    "InvalidTourError",
    "Population",
    "GAConfig",
    "GeneticSearch",
    "SearchResult",
]
