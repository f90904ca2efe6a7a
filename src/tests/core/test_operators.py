"""
Graph Operator Tests
====================

Tests for shortest paths, perfect matching and spanning trees.

Run: python -m pytest tests/core/test_operators.py -v
"""

import pytest
import numpy as np
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from strand_routing.builders import (
    build_tetrahedron,
    build_octahedron,
    build_edge_grid,
    build_quad_grid,
    graph_from_builder,
)
from strand_routing.graph import Graph
from strand_routing.operators import (
    length_matrix,
    shortest_paths,
    path_vertices,
    min_weight_perfect_matching,
    minimum_spanning_tree,
    bfs_tree,
    random_spanning_tree,
    dfs_tree,
)


def _spans(g, tree):
    """Tree edges connect every vertex without a cycle."""
    if len(tree) != len(g.vertices) - 1:
        return False
    parent = list(range(len(g.vertices)))

    def find(x):
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    for e in tree:
        a, b = (find(x) for x in g.edges[e].vertices)
        if a == b:
            return False
        parent[a] = b
    return len({find(v.id) for v in g.vertices}) == 1


# =============================================================================
# TEST A: Shortest paths
# =============================================================================

def test_length_matrix_symmetric():
    """Length matrix is symmetric with unit entries on the grid."""
    g = graph_from_builder(build_quad_grid, 2)
    W = length_matrix(g).toarray()
    assert np.allclose(W, W.T)
    assert np.allclose(W[W > 0], 1.0)


def test_parallel_edges_use_shortest():
    """Split copies do not double-count in the length matrix."""
    g = graph_from_builder(build_tetrahedron)
    g.split_edge(0)
    W = length_matrix(g)
    a, b = g.edges[0].vertices
    assert np.isclose(W[a, b], g.edge_length(0))


def test_grid_corner_to_corner():
    """Manhattan distance across a 4x4 quad grid is 8."""
    g = graph_from_builder(build_quad_grid, 4)
    dist, pred = shortest_paths(g, [0])
    assert np.isclose(dist[0, 24], 8.0)
    path = path_vertices(pred[0], 0, 24)
    assert path[0] == 0 and path[-1] == 24 and len(path) == 9
    assert all(g.common_edges(a, b) for a, b in zip(path[:-1], path[1:]))


def test_unreachable_path_raises():
    """Disconnected target has no path."""
    g = Graph()
    for c in ([0, 0, 0], [1, 0, 0], [5, 0, 0], [6, 0, 0]):
        g.add_vertex(c)
    g.add_edge(0, 1)
    g.add_edge(2, 3)
    dist, pred = shortest_paths(g, [0])
    assert np.isinf(dist[0, 3])
    with pytest.raises(ValueError, match="not reachable"):
        path_vertices(pred[0], 0, 3)


# =============================================================================
# TEST B: Matching
# =============================================================================

def test_matching_pairs_neighbours():
    """Points on a line pair up with their neighbours."""
    x = np.array([0.0, 1.0, 10.0, 11.0])
    dist = np.abs(x[:, None] - x[None, :])
    pairs = min_weight_perfect_matching([0, 1, 2, 3], dist, np.random.default_rng(0))
    assert pairs == [(0, 1), (2, 3)]


def test_matching_keeps_labels():
    """Returned pairs use the given node labels."""
    dist = np.array([[0.0, 1.0], [1.0, 0.0]])
    assert min_weight_perfect_matching([7, 9], dist, np.random.default_rng(0)) == [(7, 9)]


def test_matching_odd_count_raises():
    """Odd node counts have no perfect matching."""
    with pytest.raises(ValueError, match="even node count"):
        min_weight_perfect_matching([0, 1, 2], np.zeros((3, 3)), np.random.default_rng(0))


def test_matching_disconnected_raises():
    """Infinite distances are not matchable."""
    dist = np.full((4, 4), np.inf)
    dist[0, 1] = dist[1, 0] = 1.0
    with pytest.raises(ValueError, match="No perfect matching"):
        min_weight_perfect_matching([0, 1, 2, 3], dist, np.random.default_rng(0))


# =============================================================================
# TEST C: Spanning trees
# =============================================================================

def test_all_tree_kinds_span():
    """Every tree kind spans every test mesh."""
    rng = np.random.default_rng(1)
    for builder, args in [(build_tetrahedron, ()), (build_octahedron, ()),
                          (build_edge_grid, (3,)), (build_quad_grid, (4,))]:
        g = graph_from_builder(builder, *args)
        assert _spans(g, minimum_spanning_tree(g))
        assert _spans(g, bfs_tree(g))
        assert _spans(g, random_spanning_tree(g, rng))
        assert _spans(g, dfs_tree(g, rng))
        assert _spans(g, dfs_tree(g))


def test_minimum_tree_length():
    """Unit grid: the minimum tree has total length V - 1."""
    g = graph_from_builder(build_quad_grid, 4)
    tree = minimum_spanning_tree(g)
    assert np.isclose(sum(g.edge_length(e) for e in tree), len(g.vertices) - 1)


def test_bfs_tree_root_is_max_degree():
    """BFS tree starts at the highest-degree vertex."""
    g = graph_from_builder(build_quad_grid, 2)
    tree = bfs_tree(g)
    assert 4 in g.edges[tree[0]].vertices  # centre of the 3x3 lattice


def test_random_tree_seeded():
    """Same seed, same tree; it starts on edge 0."""
    g = graph_from_builder(build_quad_grid, 4)
    a = random_spanning_tree(g, np.random.default_rng(5))
    b = random_spanning_tree(g, np.random.default_rng(5))
    assert a == b
    assert a[0] == 0


def test_disconnected_tree_raises():
    """Spanning trees need a connected graph."""
    g = Graph()
    for c in ([0, 0, 0], [1, 0, 0], [5, 0, 0], [6, 0, 0]):
        g.add_vertex(c)
    g.add_edge(0, 1)
    g.add_edge(2, 3)
    with pytest.raises(ValueError, match="Is the graph connected"):
        bfs_tree(g)
