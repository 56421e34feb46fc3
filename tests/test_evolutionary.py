import math

import pytest

from deme_tsp.evolutionary import GAConfig, GeneticSearch, SearchResult
from deme_tsp.population import Population


def test_best_length_never_increases(ring):
    search = GeneticSearch(GAConfig(population_size=10, mutation_rate=0.2, random_seed=1), ring)
    lengths = [search.best_length]
    for _ in range(30):
        search.step()
        lengths.append(search.best_length)
    assert lengths == sorted(lengths, reverse=True)
    assert ring.total_path_distance(search.best_order) == pytest.approx(search.best_length)


def test_run_reports_improvements(ring):
    seen = []
    search = GeneticSearch(GAConfig(population_size=12, mutation_rate=0.1, random_seed=7), ring)
    start = search.best_length
    result = search.run(40, on_improve=lambda gen, length: seen.append((gen, length)))
    assert search.generation == 40
    assert result.length <= start
    assert [g for g, _ in seen] == sorted(g for g, _ in seen)
    assert [l for _, l in seen] == sorted((l for _, l in seen), reverse=True)
    if seen:
        assert seen[-1] == (result.generation, result.length)


def test_run_uses_configured_generations(square):
    search = GeneticSearch(GAConfig(population_size=4, generations=3, random_seed=0), square)
    search.run()
    assert search.generation == 3


def test_ring_optimum_found(ring):
    search = GeneticSearch(GAConfig(population_size=40, mutation_rate=0.1, random_seed=3), ring)
    result = search.run(1000)
    optimum = 8 * 2 * math.sin(math.pi / 8)
    assert result.length == pytest.approx(optimum)
    assert sorted(result.order) == list(range(8))


def test_gap():
    assert SearchResult([0, 1], 110.0, 3, optimum=100.0).gap == pytest.approx(0.1)
    assert SearchResult([0, 1], 110.0, 3).gap == float("inf")


def test_given_population_is_used(ring):
    pop = Population(ring, 6, 0.1, seed=8)
    search = GeneticSearch(GAConfig(population_size=50, random_seed=1), ring, population=pop)
    assert search.population is pop
    search.step()
    assert len(search.population) == 6
