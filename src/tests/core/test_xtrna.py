"""
Rotation-System Router (XT) Tests
=================================

Run: python -m pytest tests/core/test_xtrna.py -v
"""

import pytest
import numpy as np
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from strand_routing.builders import (
    build_tetrahedron,
    build_cube,
    build_octahedron,
    build_hexagonal_bipyramid,
    build_edge_grid,
    build_quad_grid,
    graph_from_builder,
)
from strand_routing.contract import STRATEGY_XTRNA
from strand_routing.graph import Graph
from strand_routing.operators import random_spanning_tree
from strand_routing.routing import (
    XtrnaParameters,
    find_xtrna_route,
    embedding_genus,
    kissing_loop_count,
    validate_double_cover,
)
from strand_routing.routing.xtrna import (
    co_tree_components,
    pair_co_tree,
    vertex_rotations,
    augment_rotations,
    route_from_tree,
)


MESHES = [
    ("tetrahedron", build_tetrahedron, ()),
    ("cube", build_cube, ()),
    ("octahedron", build_octahedron, ()),
    ("bipyramid", build_hexagonal_bipyramid, ()),
    ("3x3", build_edge_grid, (3,)),
    ("4x4", build_quad_grid, (4,)),
]


# =============================================================================
# TEST A: Route properties
# =============================================================================

def test_xtrna_is_closed():
    """Should start where it ends."""
    for name, builder, args in MESHES:
        route = find_xtrna_route(graph_from_builder(builder, *args), XtrnaParameters(max_tries=50))
        assert route.is_continuous(), name
        assert route.is_closed(), name
        assert route.is_directed(), name
        assert route.strategy == STRATEGY_XTRNA


def test_xtrna_spans_edges_twice():
    """Should span all edges twice."""
    for name, builder, args in MESHES:
        g = graph_from_builder(builder, *args)
        route = find_xtrna_route(g, XtrnaParameters(max_tries=50))
        validate_double_cover(route.graph, route.trail)
        assert len(route) == 2 * len(g.edges), name


def test_every_random_tree_routes():
    """Any spanning tree gives a valid walk, not only the best one."""
    g = graph_from_builder(build_cube)
    rng = np.random.default_rng(2)
    for _ in range(20):
        route = route_from_tree(g, random_spanning_tree(g, rng))
        validate_double_cover(g, route.trail)
        assert route.is_closed()


def test_kissing_loops_are_whole_edges():
    """Both halves of an unpaired co-tree edge are stubs."""
    for name, builder, args in MESHES:
        route = find_xtrna_route(graph_from_builder(builder, *args), XtrnaParameters(max_tries=20))
        for h in route.kissing_loops:
            assert Graph.twin(h) in route.kissing_loops, name
            assert Graph.edge_of(h) not in set(route.tree), name


def test_kissing_loop_parity():
    """Pairs use two co-tree edges, so the loop count has the co-tree parity."""
    for name, builder, args in MESHES:
        g = graph_from_builder(builder, *args)
        route = find_xtrna_route(g, XtrnaParameters(max_tries=20))
        co_tree = len(g.edges) - len(g.vertices) + 1
        assert kissing_loop_count(route) % 2 == co_tree % 2, name
        assert kissing_loop_count(route) <= co_tree, name


def test_embedding_genus():
    """Genus of the one-face embedding of the paired edges."""
    for name, builder, args in MESHES:
        g = graph_from_builder(builder, *args)
        route = find_xtrna_route(g, XtrnaParameters(max_tries=20))
        k = kissing_loop_count(route)
        genus = embedding_genus(route)
        assert genus >= 0, name
        assert 2 * genus == len(g.edges) - k - len(g.vertices) + 1, name


def test_resampling_keeps_fewest_loops():
    """More tries never give more kissing loops (same seed)."""
    g = graph_from_builder(build_quad_grid, 4)
    few = find_xtrna_route(g, XtrnaParameters(max_tries=1, seed=4))
    many = find_xtrna_route(g, XtrnaParameters(max_tries=200, seed=4))
    assert kissing_loop_count(many) <= kissing_loop_count(few)


def test_xtrna_seeded():
    """Same seed, same route."""
    g = graph_from_builder(build_octahedron)
    a = find_xtrna_route(g, XtrnaParameters(max_tries=10, seed=3))
    b = find_xtrna_route(g, XtrnaParameters(max_tries=10, seed=3))
    assert a.trail == b.trail and a.tree == b.tree


def test_bad_parameters_raise():
    """At least one tree must be sampled."""
    with pytest.raises(ValueError, match="max_tries must be >= 1"):
        XtrnaParameters(max_tries=0)


# =============================================================================
# TEST B: Pieces
# =============================================================================

def test_co_tree_components_partition():
    """Components cover every co-tree edge exactly once."""
    g = graph_from_builder(build_cube)
    tree = random_spanning_tree(g, np.random.default_rng(0))
    comps = co_tree_components(g, set(tree))
    flat = [e for c in comps for e in c]
    assert sorted(flat) == sorted(set(range(len(g.edges))) - set(tree))


def test_pairs_share_a_vertex():
    """Paired co-tree edges meet at a vertex; each edge is used once."""
    g = graph_from_builder(build_octahedron)
    tree = random_spanning_tree(g, np.random.default_rng(1))
    for comp in co_tree_components(g, set(tree)):
        pairs = pair_co_tree(g, comp)
        used = [e for p in pairs for e in p if e is not None]
        assert sorted(used) == sorted(comp)
        for e1, e2 in pairs:
            if e1 is not None:
                assert g.common_vertex(e1, e2) is not None


def test_rotations_hold_all_half_edges():
    """After augmentation every outgoing half-edge is in its rotation once."""
    g = graph_from_builder(build_cube)
    tree = random_spanning_tree(g, np.random.default_rng(0))
    rotations = vertex_rotations(g, tree)
    kls = augment_rotations(g, rotations)
    for v in g.vertices:
        assert sorted(rotations[v.id]) == sorted(g.adjacent_half_edges(v.id))
    assert all(Graph.edge_of(h) not in set(tree) for h in kls)
