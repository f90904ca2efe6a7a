"""
Checkerboard Euler Router Tests
===============================

Run: python -m pytest tests/core/test_euler.py -v
"""

import pytest
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from strand_routing.builders import (
    build_tetrahedron,
    build_cube,
    build_octahedron,
    build_edge_grid,
    build_quad_grid,
    build_plane,
    graph_from_builder,
)
from strand_routing.contract import InsufficientFaceInformation, STRATEGY_EULER
from strand_routing.routing import find_euler_route, validate_single_cover
from strand_routing.routing.euler import face_loop, white_faces


MESHES = [
    ("tetrahedron", build_tetrahedron, ()),
    ("cube", build_cube, ()),
    ("octahedron", build_octahedron, ()),
    ("4x4", build_quad_grid, (4,)),
    ("plane", build_plane, ()),
]


# =============================================================================
# TEST A: Route properties
# =============================================================================

def test_euler_route_is_closed():
    """Should start where it ends."""
    for name, builder, args in MESHES:
        route = find_euler_route(graph_from_builder(builder, *args))
        assert route.is_continuous(), name
        assert route.is_closed(), name
        assert route.strategy == STRATEGY_EULER


def test_euler_route_spans_augmented_edges_once():
    """Every edge of the checkerboarded graph exactly once."""
    for name, builder, args in MESHES:
        route = find_euler_route(graph_from_builder(builder, *args))
        validate_single_cover(route.graph, route.trail)


def test_euler_route_mesh_edges_once_or_twice():
    """Mesh edges are run along once, or twice where they were split."""
    for name, builder, args in MESHES:
        g = graph_from_builder(builder, *args)
        route = find_euler_route(g)
        counts = route.visit_counts()
        assert all(counts[e] in (1, 2) for e in range(len(g.edges))), name


def test_octahedron_needs_no_split():
    """Two-colourable mesh: the route is a plain Euler circuit."""
    g = graph_from_builder(build_octahedron)
    route = find_euler_route(g)
    assert len(route.graph.edges) == 12
    assert len(route) == 12


def test_plane_is_one_face_loop():
    """A single white face is walked once around."""
    route = find_euler_route(graph_from_builder(build_plane))
    assert len(route) == 4
    assert sorted(route.vertex_sequence()[:-1]) == [0, 1, 2, 3]


def test_no_faces_raises():
    """Checkerboard routing needs faces."""
    with pytest.raises(InsufficientFaceInformation, match="insufficient face-information"):
        find_euler_route(graph_from_builder(build_edge_grid, 3))


# =============================================================================
# TEST B: Pieces
# =============================================================================

def test_white_faces_alternate():
    """White faces never share an edge after checkerboarding."""
    route = find_euler_route(graph_from_builder(build_cube))
    g = route.graph
    white = white_faces(g)
    for e in g.edges:
        assert sum(1 for f in e.faces if f in white) == 1


def test_face_loop_returns_to_start():
    """Face loop begins and ends at the origin of the seed half-edge."""
    g = graph_from_builder(build_cube)
    f = 0
    h = g.outward_half_edge(g.faces[f].edges[0], g.edges[g.faces[f].edges[0]].vertices[0])
    loop = face_loop(g, f, h)
    assert len(loop) == 4
    assert g.origin(loop[0]) == g.origin(h)
    assert g.destination(loop[-1]) == g.origin(h)
    for a, b in zip(loop[:-1], loop[1:]):
        assert g.destination(a) == g.origin(b)
