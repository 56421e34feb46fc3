import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from .population import Population


@dataclass
class GAConfig:
    population_size: int = 100
    mutation_rate: float = 0.05
    generations: int = 1000
    random_seed: int = 123


@dataclass
class SearchResult:
    order: List[int]
    length: float
    generation: int
    optimum: Optional[float] = None

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0):
            return float("inf")
        return (self.length - self.optimum) / self.optimum


class GeneticSearch:
    """
    Drives a population generation by generation and remembers the shortest
    tour seen so far, since full replacement can lose it.
    """

    def __init__(self, config: GAConfig, cities, population: Optional[Population] = None):
        self.cfg = config
        self.cities = cities
        if population is None:
            population = Population(cities, config.population_size, config.mutation_rate, seed=config.random_seed)
        self.population = population
        best = self.population.get_best()
        self.best_order: List[int] = list(best.order)
        self.best_length: float = best.get_distance()
        self.best_generation = self.population.generation

    @property
    def generation(self) -> int:
        return self.population.generation

    def step(self) -> bool:
        self.population.compute_next_generation()
        best = self.population.get_best()
        length = best.get_distance()
        if length < self.best_length:
            self.best_order = list(best.order)
            self.best_length = length
            self.best_generation = self.generation
            return True
        return False

    def run(
        self,
        generations: Optional[int] = None,
        on_improve: Optional[Callable[[int, float], None]] = None,
    ) -> SearchResult:
        if generations is None:
            generations = self.cfg.generations
        for _ in range(generations):
            if self.step() and on_improve is not None:
                on_improve(self.generation, self.best_length)
        return self.result()

    def result(self, optimum: Optional[float] = None) -> SearchResult:
        return SearchResult(
            order=list(self.best_order),
            length=self.best_length,
            generation=self.best_generation,
            optimum=optimum,
        )
