import random
from typing import List, Optional, Sequence, Tuple

from .cities import Permutation, random_permutation


class InvalidTourError(RuntimeError):
    """Raised when a tour stops being a permutation of the city indices."""


class Individual:
    """
    One candidate tour: a permutation of city indices over a shared city set.

    Each individual owns its random generator, so operator outcomes are
    reproducible when the individual is seeded deterministically.
    """

    def __init__(self, cities, seed: Optional[int] = None, order: Optional[Sequence[int]] = None):
        self.cities = cities
        self.rng = random.Random(seed)
        if order is None:
            self.order: Permutation = random_permutation(cities.size(), self.rng)
        else:
            self.order = list(order)
        self._fitness: Optional[float] = None
        self._check()

    def __len__(self) -> int:
        return len(self.order)

    def __repr__(self) -> str:
        return f"Individual(order={self.order})"

    def _check(self) -> None:
        if not self.is_valid():
            raise InvalidTourError(f"Not a permutation of 0..{self.cities.size() - 1}: {self.order}")

    def clone(self) -> "Individual":
        return Individual(self.cities, seed=self.rng.getrandbits(64), order=self.order)

    def mutate(self) -> None:
        n = len(self.order)
        if n < 2:
            return
        i = self.rng.randrange(n)
        j = self.rng.randrange(n)
        while j == i:
            j = self.rng.randrange(n)
        self.order[i], self.order[j] = self.order[j], self.order[i]
        self._fitness = None
        self._check()

    def crossover_window(self) -> Tuple[int, int]:
        """Draw the ``[start, finish)`` range kept from the primary parent."""
        finish = self.rng.randrange(len(self.order))
        start = 0 if finish == 0 else self.rng.randrange(finish)
        return start, finish

    def recombine(self, other: "Individual") -> Tuple["Individual", "Individual"]:
        self._check()
        other._check()
        start, finish = self.crossover_window()
        return (
            Individual.crossover_child(self, other, start, finish),
            Individual.crossover_child(other, self, start, finish),
        )

    @staticmethod
    def crossover_child(primary: "Individual", secondary: "Individual", start: int, finish: int) -> "Individual":
        """
        Ordered crossover: the child keeps ``primary`` in ``[start, finish)``
        and takes every other value in the order it appears in ``secondary``.
        """
        if len(primary.order) != len(secondary.order):
            raise InvalidTourError(
                f"Cannot cross tours of different lengths ({len(primary.order)} and {len(secondary.order)})."
            )
        child = primary.clone()
        kept = set(primary.order[start:finish])
        filler = iter([v for v in secondary.order if v not in kept])
        order: List[int] = []
        for i, value in enumerate(primary.order):
            if start <= i < finish:
                order.append(value)
            else:
                order.append(next(filler))
        child.order = order
        child._fitness = None
        child._check()
        return child

    def get_distance(self) -> float:
        return self.cities.total_path_distance(self.order)

    def get_fitness(self) -> float:
        # Shorter tours are fitter.
        if self._fitness is None:
            self._fitness = 1.0 / self.get_distance()
        return self._fitness

    def is_valid(self) -> bool:
        return sorted(self.order) == list(range(self.cities.size()))
