import math

import pytest

from deme_tsp.cities import Cities


SQUARE = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]


class TableCities:
    """City set whose tour lengths come from a lookup table keyed by order."""

    def __init__(self, n, lengths, default=10.0):
        self.n = n
        self.lengths = {tuple(k): v for k, v in lengths.items()}
        self.default = default

    def size(self):
        return self.n

    def total_path_distance(self, order):
        return self.lengths.get(tuple(order), self.default)


@pytest.fixture
def square():
    return Cities(SQUARE)


@pytest.fixture
def ring():
    # Eight points on a circle; the optimal tour walks them in index order.
    pts = [[math.cos(2 * math.pi * k / 8), math.sin(2 * math.pi * k / 8)] for k in range(8)]
    return Cities(pts)
