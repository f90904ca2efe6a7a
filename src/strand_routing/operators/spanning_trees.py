"""
Spanning Trees
==============

Four ways to pick V-1 edges touching every vertex of a connected graph.
Every builder returns the tree as an ordered list of edge ids; routers
start their walk at the first tree edge.

    minimum_spanning_tree  - shortest total edge length (scipy csgraph)
    bfs_tree               - breadth-first from the max-degree vertex
    random_spanning_tree   - random edge growth (seeded)
    dfs_tree               - depth-first, optionally shuffled
"""

import numpy as np
from collections import deque
from scipy.sparse.csgraph import minimum_spanning_tree as _csgraph_mst
from typing import List, Optional

from ..contract.errors import DisconnectedGraphError
from ..graph.structures import Graph
from .shortest_paths import length_matrix


def require_connected(graph: Graph) -> None:
    """
    Tree routers need at least one edge and a single component.

    Raises:
        DisconnectedGraphError: no edges, or the graph is not connected
    """
    if not graph.edges:
        raise DisconnectedGraphError("Graph has no edges to route")
    if not graph.is_connected():
        raise DisconnectedGraphError("Graph is not connected; no spanning tree exists")


def _check_spanning(graph: Graph, tree: List[int], kind: str) -> List[int]:
    if len(graph.vertices) > 0 and len(tree) != len(graph.vertices) - 1:
        raise DisconnectedGraphError(f"{kind} spanning tree has {len(tree)} edges, expected "
                                     f"{len(graph.vertices) - 1}. Is the graph connected?")
    return tree


def minimum_spanning_tree(graph: Graph) -> List[int]:
    """Minimum spanning tree by geometric edge length."""
    T = _csgraph_mst(length_matrix(graph)).tocoo()
    tree = []
    for a, b in zip(T.row, T.col):
        candidates = graph.common_edges(int(a), int(b))
        tree.append(min(candidates, key=graph.edge_length))
    tree.sort()
    return _check_spanning(graph, tree, "Minimum")


def bfs_tree(graph: Graph) -> List[int]:
    """Breadth-first tree rooted at the vertex of maximum degree."""
    if not graph.vertices:
        return []
    root = max(range(len(graph.vertices)), key=graph.degree)
    visited = {root}
    queue = deque([root])
    tree = []
    while queue:
        v = queue.popleft()
        for e in graph.vertices[v].edges:
            w = graph.other_vertex(e, v)
            if w not in visited:
                visited.add(w)
                tree.append(e)
                queue.append(w)
    return _check_spanning(graph, tree, "BFS")


def random_spanning_tree(graph: Graph, rng: np.random.Generator) -> List[int]:
    """
    Random spanning tree grown from edge 0.

    Repeatedly draw a random edge from the frontier; keep it if it reaches
    a new vertex, then add the edges around it that still touch an
    unvisited vertex.
    """
    if not graph.edges:
        return _check_spanning(graph, [], "Random")
    visited = set()
    tree = []
    in_tree = set()
    stack = [0]
    while stack:
        e = stack.pop(int(rng.integers(len(stack))))
        a, b = graph.edges[e].vertices
        if (a not in visited or b not in visited) and e not in in_tree:
            tree.append(e)
            in_tree.add(e)
        visited.add(a)
        visited.add(b)
        for e2 in graph.vertices[a].edges + graph.vertices[b].edges:
            a2, b2 = graph.edges[e2].vertices
            if a2 not in visited or b2 not in visited:
                stack.append(e2)
    return _check_spanning(graph, tree, "Random")


def dfs_tree(graph: Graph, rng: Optional[np.random.Generator] = None, root: int = 0) -> List[int]:
    """Depth-first tree from `root`; neighbour order shuffled when rng is given."""
    if not graph.vertices:
        return []
    visited = set()
    tree = []
    stack = [(None, root)]
    while stack:
        e, v = stack.pop()
        if v in visited:
            continue
        visited.add(v)
        if e is not None:
            tree.append(e)
        incident = list(graph.vertices[v].edges)
        if rng is not None:
            rng.shuffle(incident)
        for e2 in reversed(incident):
            w = graph.other_vertex(e2, v)
            if w not in visited:
                stack.append((e2, w))
    return _check_spanning(graph, tree, "DFS")
