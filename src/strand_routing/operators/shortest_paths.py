"""
Shortest Paths
==============

Dijkstra over the vertex graph with geometric edge lengths as weights.

The multigraph is collapsed to a simple weighted graph (shortest parallel
edge wins) and handed to scipy.sparse.csgraph.dijkstra, which returns both
distances and predecessor rows.
"""

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra
from typing import List, Sequence, Tuple

from ..contract.constants import EPS_ZERO
from ..contract.errors import DisconnectedGraphError
from ..graph.structures import Graph


def length_matrix(graph: Graph) -> csr_matrix:
    """
    Symmetric (V, V) sparse matrix of edge lengths.

    Zero-length edges are clamped to EPS_ZERO, since csgraph treats stored
    zeros as missing edges.
    """
    weights = {}
    for e in graph.edges:
        a, b = e.vertices
        key = (min(a, b), max(a, b))
        w = max(graph.edge_length(e.id), EPS_ZERO)
        if key not in weights or w < weights[key]:
            weights[key] = w

    V = len(graph.vertices)
    if not weights:
        return csr_matrix((V, V))
    rows, cols, data = [], [], []
    for (a, b), w in weights.items():
        rows += [a, b]
        cols += [b, a]
        data += [w, w]
    return csr_matrix((data, (rows, cols)), shape=(V, V))


def shortest_paths(graph: Graph,
                   sources: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Single-source Dijkstra from every vertex in `sources`.

    Returns:
        dist: (len(sources), V) distances, np.inf where unreachable
        pred: (len(sources), V) predecessors, -9999 at the source/unreachable
    """
    W = length_matrix(graph)
    dist, pred = dijkstra(W, directed=False, indices=list(sources), return_predecessors=True)
    return np.atleast_2d(dist), np.atleast_2d(pred)


def path_vertices(pred_row: np.ndarray, source: int, target: int) -> List[int]:
    """
    Vertex sequence source -> target from one predecessor row.

    FAIL-FAST:
        Raises DisconnectedGraphError if target is not reachable from source.
    """
    path = [target]
    cur = target
    while cur != source:
        cur = int(pred_row[cur])
        if cur < 0:
            raise DisconnectedGraphError(f"Vertex {target} is not reachable from vertex {source}")
        path.append(cur)
    path.reverse()
    return path
