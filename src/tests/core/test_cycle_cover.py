"""
Cycle Cover Tests
=================

Faces of a rotation system as strand cycles:
- every half-edge on exactly one cycle
- closed meshes give back their faces (genus 0)
- spanning-tree rotations give fewer, longer cycles

Run: python -m pytest tests/core/test_cycle_cover.py -v
"""

import math
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
    graph_from_builder,
)
from strand_routing.contract import GENUS_ANY, GENUS_MAX, DisconnectedGraphError, TrailError
from strand_routing.graph import Graph
from strand_routing.routing import (
    CycleCoverParameters,
    find_cycle_cover,
    find_route,
    validate_cycle_cover,
)
from strand_routing.routing.cycle_cover import trace_cycles


CLOSED = [build_tetrahedron, build_cube, build_octahedron]


def _check_cover(cover, name):
    g = cover.graph
    counts = cover.half_edge_counts()
    assert sorted(counts) == list(range(2 * len(g.edges))), name
    assert set(counts.values()) == {1}, name
    for cycle in cover.cycles:
        for i, h in enumerate(cycle):
            assert g.destination(h) == g.origin(cycle[(i + 1) % len(cycle)]), name
    V, E = len(g.vertices), len(g.edges)
    assert cover.embedding_genus() == math.floor((V + len(cover) - E - 2) / -2), name


# =============================================================================
# TEST A: Topological rotations
# =============================================================================

def test_closed_meshes_give_their_faces():
    """On a closed mesh the cycles are the faces: genus 0."""
    for builder in CLOSED:
        g = graph_from_builder(builder)
        cover = find_cycle_cover(g)
        _check_cover(cover, builder.__name__)
        assert len(cover) == len(g.faces), builder.__name__
        assert sorted(len(c) for c in cover.cycles) == sorted(len(f.edges) for f in g.faces)
        assert cover.embedding_genus() == 0 == g.genus()


def test_face_less_graph_uses_nearest_neighbour_rotation():
    """Without faces every half-edge is still on exactly one cycle."""
    cover = find_cycle_cover(graph_from_builder(build_edge_grid, 3))
    _check_cover(cover, "3x3")
    assert cover.embedding_genus() >= 0


def test_router_leaves_input_untouched(tetra):
    """The cover owns a clone of the input graph."""
    cover = find_cycle_cover(tetra)
    assert cover.graph is not tetra
    assert len(cover.graph.edges) == len(tetra.edges)


def test_registered_as_strategy(tetra):
    """find_route reaches the cycle cover by name."""
    cover = find_route(tetra, "cycle_cover")
    assert cover.strategy == "cycle_cover"
    assert cover.genus_target == GENUS_ANY
    _check_cover(cover, "dispatch")


# =============================================================================
# TEST B: Spanning-tree rotations
# =============================================================================

def test_max_genus_cover_is_valid():
    """XT rotations with kissing-loop stubs still cover every half-edge once."""
    for builder, args in ((build_tetrahedron, ()), (build_cube, ()),
                          (build_octahedron, ()), (build_quad_grid, (4,))):
        g = graph_from_builder(builder, *args)
        cover = find_cycle_cover(g, CycleCoverParameters(genus_target=GENUS_MAX, max_tries=20))
        _check_cover(cover, builder.__name__)
        assert cover.genus_target == GENUS_MAX


def test_max_genus_not_below_face_genus():
    """Spanning-tree rotations never need more cycles than the mesh has faces."""
    for builder in CLOSED:
        g = graph_from_builder(builder)
        plain = find_cycle_cover(g)
        high = find_cycle_cover(g, CycleCoverParameters(genus_target=GENUS_MAX, max_tries=20))
        assert len(high) <= len(plain), builder.__name__
        assert high.embedding_genus() >= plain.embedding_genus(), builder.__name__


def test_max_genus_seeded(octa):
    """Same seed, same cycles."""
    params = CycleCoverParameters(genus_target=GENUS_MAX, max_tries=10, seed=3)
    assert find_cycle_cover(octa, params).cycles == find_cycle_cover(octa, params).cycles


# =============================================================================
# TEST C: Guards
# =============================================================================

def test_bad_parameters_raise():
    """Only the known genus targets are accepted."""
    with pytest.raises(ValueError, match="Unknown genus target"):
        CycleCoverParameters(genus_target="min")
    with pytest.raises(ValueError, match="max_tries"):
        CycleCoverParameters(max_tries=0)


def test_disconnected_graph_raises():
    """Two components have no single embedding."""
    g = Graph()
    for c in ([0, 0, 0], [1, 0, 0], [5, 0, 0], [6, 0, 0]):
        g.add_vertex(c)
    g.add_edge(0, 1)
    g.add_edge(2, 3)
    with pytest.raises(DisconnectedGraphError, match="not connected"):
        find_cycle_cover(g)


def test_open_cycle_rejected(tetra):
    """A cycle whose steps do not chain is not a cover."""
    cycles = trace_cycles(tetra, {v.id: sorted(tetra.adjacent_half_edges(v.id))
                                  for v in tetra.vertices})
    broken = [list(c) for c in cycles]
    first = next(c for c in broken if len(c) > 2)
    first[0], first[1] = first[1], first[0]
    with pytest.raises(TrailError, match="breaks"):
        validate_cycle_cover(tetra, broken)
