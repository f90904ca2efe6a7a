"""
Graph Augmentation
==================

Edge duplication that prepares a mesh graph for a routing strategy.

EULERIZATION (T-join):
    1. Collect odd-degree vertices
    2. Dijkstra distances between all of them
    3. Minimum-weight perfect matching on those distances
    4. Split every edge on the shortest path of every matched pair

    Splitting edge (a, b) raises deg(a) and deg(b) by one. Along a path the
    interior vertices gain two, the two ends gain one: exactly the matched
    odd vertices flip to even.

CHECKERBOARD:
    Colour faces by BFS depth parity from face 0 (even -> "r", odd -> "l").
    Split every edge whose two faces share a colour, and every boundary
    edge whose single face is an "l" face. Afterwards the face adjacency
    (split faces included) is bipartite and every edge bounds exactly one
    face of the class of face 0.
"""

import logging
import numpy as np
from collections import deque
from typing import List, Optional

from ..contract.constants import DEFAULT_SEED
from ..contract.errors import EulerizationError, NonManifoldError
from ..operators.matching import min_weight_perfect_matching
from ..operators.shortest_paths import shortest_paths, path_vertices
from .structures import Graph

logger = logging.getLogger(__name__)


def make_eulerian(graph: Graph, rng: Optional[np.random.Generator] = None) -> List[int]:
    """
    Make every vertex degree even by splitting edges along shortest paths.

    Args:
        graph: mutated in place
        rng: tie-break noise for the matching (default: DEFAULT_SEED)

    Returns:
        ids of the new edges (empty if the graph was already Eulerian)

    Raises:
        EulerizationError: an odd vertex cannot reach its partner, or no
            perfect matching exists
    """
    if graph.is_eulerian():
        return []
    if rng is None:
        rng = np.random.default_rng(DEFAULT_SEED)

    odd = graph.odd_vertices()
    dist, pred = shortest_paths(graph, odd)
    pair_dist = dist[:, odd]

    try:
        pairs = min_weight_perfect_matching(list(range(len(odd))), pair_dist, rng)
    except ValueError as err:
        raise EulerizationError(
            f"Cannot pair {len(odd)} odd-degree vertices: {err}") from err

    new_edges = []
    for i, j in pairs:
        source, target = odd[i], odd[j]
        if not np.isfinite(dist[i, target]):
            raise EulerizationError(
                f"Odd-degree vertices {source} and {target} are not connected")
        path = path_vertices(pred[i], source, target)
        for a, b in zip(path[:-1], path[1:]):
            e = graph.common_edges(a, b)[0]
            new_edges.append(graph.split_edge(e))

    logger.info("Eulerized: %d odd vertices, %d pairs, %d edges split",
                len(odd), len(pairs), len(new_edges))
    return new_edges


def face_depth_classes(graph: Graph):
    """
    BFS over face adjacency from face 0.

    Returns:
        (r, l): face ids at even depth, face ids at odd depth
    """
    r, l = set(), set()
    if not graph.faces:
        return r, l
    visited = {0}
    queue = deque([(0, 0)])
    while queue:
        f, depth = queue.popleft()
        (l if depth % 2 else r).add(f)
        for g in graph.face_neighbours(f):
            if g not in visited:
                visited.add(g)
                queue.append((g, depth + 1))
    return r, l


def make_checkerboard(graph: Graph) -> List[int]:
    """
    Split edges until the faces can be two-coloured.

    Returns:
        ids of the new edges

    Raises:
        NonManifoldError: an edge has more than two incident faces
    """
    r, l = face_depth_classes(graph)
    new_edges = []
    for e in range(len(graph.edges)):
        faces = graph.edges[e].faces
        if len(faces) > 2:
            raise NonManifoldError(
                f"Unable to checkerboard recondition a non-surface mesh: "
                f"edge {e} has {len(faces)} faces")
        if len(faces) == 2:
            f1, f2 = faces
            if (f1 in r and f2 in r) or (f1 in l and f2 in l):
                new_edges.append(graph.split_edge(e))
        elif len(faces) == 1 and faces[0] in l:
            new_edges.append(graph.split_edge(e))

    logger.info("Checkerboard: %d edges split", len(new_edges))
    return new_edges
