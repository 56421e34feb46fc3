import random
from typing import Dict, List, Optional

from .individual import Individual


class Population:
    """
    A fixed-size set of tours evolved by roulette-wheel selection, swap
    mutation and ordered crossover. Every generation replaces the whole set.
    """

    def __init__(self, cities, pop_size: int, mutation_rate: float, seed: Optional[int] = None):
        if pop_size < 2 or pop_size % 2:
            raise ValueError(f"Population size must be an even number >= 2, got {pop_size}.")
        if not 0.0 <= mutation_rate <= 1.0:
            raise ValueError(f"Mutation rate must be in [0, 1], got {mutation_rate}.")
        self.cities = cities
        self.pop_size = pop_size
        self.mutation_rate = mutation_rate
        self.rng = random.Random(seed)
        self.generation = 0
        self.individuals: List[Individual] = [
            Individual(cities, seed=self.rng.getrandbits(64)) for _ in range(pop_size)
        ]

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    def select_parent(self) -> Individual:
        total = sum(ind.get_fitness() for ind in self.individuals)
        # Start the running sum at a random offset; the individual that pushes
        # it past the total is the one whose slice of the wheel holds the offset.
        running = self.rng.random() * total
        for ind in self.individuals:
            running += ind.get_fitness()
            if running > total:
                return ind
        return self.individuals[-1]

    def compute_next_generation(self) -> None:
        children: List[Individual] = []
        for _ in range(len(self.individuals) // 2):
            parent1 = self.select_parent()
            parent2 = self.select_parent()
            while parent2 is parent1:
                parent2 = self.select_parent()
            if self.rng.random() < self.mutation_rate:
                parent1.mutate()
            if self.rng.random() < self.mutation_rate:
                parent2.mutate()
            children.extend(parent1.recombine(parent2))
        self.individuals = children
        self.generation += 1

    def get_best(self) -> Individual:
        return max(self.individuals, key=lambda ind: ind.get_fitness())

    def to_state(self) -> Dict:
        return {
            "mutation_rate": self.mutation_rate,
            "generation": self.generation,
            "population": [ind.order for ind in self.individuals],
        }

    @classmethod
    def from_state(cls, state: Dict, cities, seed: Optional[int] = None) -> "Population":
        orders = state["population"]
        pop = cls(cities, len(orders), state["mutation_rate"], seed=seed)
        pop.generation = state.get("generation", 0)
        pop.individuals = [
            Individual(cities, seed=pop.rng.getrandbits(64), order=order) for order in orders
        ]
        return pop
