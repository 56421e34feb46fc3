import random
from pathlib import Path
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np
import torch


Permutation = List[int]


def random_permutation(n: int, rng: Optional[random.Random] = None) -> Permutation:
    rng = rng or random.Random()
    order = list(range(n))
    rng.shuffle(order)
    return order


def _build_dist_mat(graph: nx.Graph, nodes: Sequence, device: torch.device) -> torch.Tensor:
    idx_map = {n: i for i, n in enumerate(nodes)}
    mat = torch.zeros((len(nodes), len(nodes)), dtype=torch.float64, device=device)
    edges = list(graph.edges(data="weight", default=1.0))
    if not edges:
        return mat
    rows = []
    cols = []
    vals = []
    for u, v, w in edges:
        if u == v:
            continue
        rows.extend([idx_map[u], idx_map[v]])
        cols.extend([idx_map[v], idx_map[u]])
        vals.extend([w, w])
    if rows:
        mat[rows, cols] = torch.tensor(vals, dtype=torch.float64, device=device)
    return mat


class Cities:
    """
    An immutable set of cities and the distances between them.

    Built either from planar coordinates (Euclidean metric) or from a weighted
    graph, where the ``weight`` edge attribute is the metric.
    """

    def __init__(self, coords=None, device=None, dist: Optional[torch.Tensor] = None):
        self.device = torch.device(device or "cpu")
        self.coords: Optional[np.ndarray] = None
        if coords is not None:
            coords = np.asarray(coords, dtype=np.float64)
            if coords.ndim != 2 or coords.shape[1] != 2:
                raise ValueError(f"Expected an (n, 2) coordinate array, got shape {coords.shape}.")
            self.coords = coords
        if dist is None:
            if self.coords is None:
                raise ValueError("A city set needs coordinates or a distance matrix.")
            pts = torch.as_tensor(self.coords, device=self.device)
            dist = torch.cdist(pts, pts, compute_mode="donot_use_mm_for_euclid_dist")
        if dist.ndim != 2 or dist.shape[0] != dist.shape[1]:
            raise ValueError(f"Expected a square distance matrix, got shape {tuple(dist.shape)}.")
        if dist.shape[0] == 0:
            raise ValueError("A city set needs at least one city.")
        if self.coords is not None and self.coords.shape[0] != dist.shape[0]:
            raise ValueError(f"{self.coords.shape[0]} coordinates for {dist.shape[0]} cities.")
        self.dist = dist.to(self.device)

    @classmethod
    def from_graph(cls, graph: nx.Graph, coords=None, device=None) -> "Cities":
        nodes = list(graph.nodes())
        if not nodes:
            raise ValueError("A city set needs at least one city.")
        device = torch.device(device or "cpu")
        return cls(coords, device=device, dist=_build_dist_mat(graph, nodes, device))

    @classmethod
    def random(cls, n: int, rng: Optional[random.Random] = None, scale: float = 1.0) -> "Cities":
        rng = rng or random.Random()
        return cls([[rng.uniform(0, scale), rng.uniform(0, scale)] for _ in range(n)])

    def size(self) -> int:
        return self.dist.shape[0]

    def __len__(self) -> int:
        return self.size()

    def total_path_distance(self, order: Sequence[int]) -> float:
        # Closed tour: the last leg returns to the starting city.
        idx = torch.as_tensor(list(order), dtype=torch.long, device=self.device)
        return self.dist[idx, idx.roll(-1)].sum().item()

    def reorder(self, order: Sequence[int]) -> "Cities":
        if self.coords is None:
            raise ValueError("Cannot reorder a city set without coordinates.")
        return Cities(self.coords[list(order)], device=self.device)

    def save(self, path: Path) -> None:
        if self.coords is None:
            raise ValueError("Cannot save a city set without coordinates.")
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savetxt(path, self.coords, delimiter="\t", fmt="%.10g")

