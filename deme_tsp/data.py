from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import numpy as np
import tsplib95

from .cities import Cities


@dataclass
class Instance:
    name: str
    path: Path
    cities: Cities
    optimum: Optional[float]


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _read_dimension(path: Path) -> Optional[int]:
    with path.open("r") as f:
        for line in f:
            if "DIMENSION" in line.upper():
                parts = line.replace(":", " ").split()
                for token in parts:
                    if token.isdigit():
                        return int(token)
    return None


def _load_optimum(problem, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        tour_file = tsplib95.load(candidate)
        if not tour_file.tours:
            continue
        nodes = list(tour_file.tours[0])
        dist = 0.0
        for i in range(len(nodes)):
            a = nodes[i]
            b = nodes[(i + 1) % len(nodes)]
            dist += problem.get_weight(a, b)
        return float(dist)
    return None


def load_coordinates(path: Path) -> Cities:
    """Read a whitespace-separated ``x y`` table, one city per line."""
    coords = np.loadtxt(path, ndmin=2, comments="#")
    if coords.size == 0:
        raise ValueError(f"No cities found in {path}.")
    if coords.shape[1] != 2:
        raise ValueError(f"Expected two columns (x y) in {path}, got {coords.shape[1]}.")
    return Cities(coords)


def _problem_cities(problem) -> Cities:
    nodes = list(problem.get_nodes())
    coords = None
    if problem.node_coords:
        coords = [problem.node_coords[n][:2] for n in nodes]
    return Cities.from_graph(problem.get_graph(), coords=coords)


def load_instance(path: Path) -> Instance:
    path = Path(path)
    if path.suffix.lower() != ".tsp":
        return Instance(name=path.stem, path=path, cities=load_coordinates(path), optimum=None)
    problem = tsplib95.load(path)
    return Instance(
        name=problem.name or path.stem,
        path=path,
        cities=_problem_cities(problem),
        optimum=_load_optimum(problem, path),
    )


def load_cities(path: Path) -> Cities:
    return load_instance(path).cities


def load_instances(
    root: Path, max_nodes: Optional[int] = None, max_instances: Optional[int] = None
) -> List[Instance]:
    tsp_files = sorted(Path(root).glob("*.tsp"))
    instances: List[Instance] = []
    for p in tsp_files:
        if max_nodes is not None:
            dim = _read_dimension(p)
            if dim is not None and dim > max_nodes:
                continue
        instances.append(load_instance(p))
        if max_instances is not None and len(instances) >= max_instances:
            break
    return instances
