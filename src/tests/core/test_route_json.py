"""
Route Persistence Tests
=======================

Run: python -m pytest tests/core/test_route_json.py -v
"""

import json
import pytest
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from strand_routing.builders import build_tetrahedron, build_cube, build_quad_grid, graph_from_builder
from strand_routing.contract import (
    TrailError, GENUS_MAX, STRATEGY_CYCLE_COVER, STRATEGY_STERNA, STRATEGY_XTRNA,
)
from strand_routing.routing import (
    ROUTERS,
    CycleCover,
    CycleCoverParameters,
    XtrnaParameters,
    find_route,
    route_to_json,
    route_from_json,
)


def _round_trip(route):
    return route_from_json(json.loads(json.dumps(route_to_json(route))))


# =============================================================================
# TEST A: Round trips
# =============================================================================

def test_every_strategy_round_trips():
    """Trail, tree and stubs survive JSON for every router."""
    g = graph_from_builder(build_cube)
    for strategy in ROUTERS:
        if strategy == STRATEGY_CYCLE_COVER:
            continue
        params = XtrnaParameters(max_tries=5) if strategy == STRATEGY_XTRNA else None
        route = find_route(g, strategy, params)
        back = _round_trip(route)
        assert back.strategy == strategy
        assert back.trail == route.trail
        assert back.tree == route.tree
        assert back.kissing_loops == route.kissing_loops
        assert len(back.graph.edges) == len(route.graph.edges)


def test_cycle_cover_round_trips():
    """Cycles and genus target survive JSON."""
    g = graph_from_builder(build_cube)
    for params in (None, CycleCoverParameters(genus_target=GENUS_MAX, max_tries=5)):
        cover = find_route(g, STRATEGY_CYCLE_COVER, params)
        back = _round_trip(cover)
        assert isinstance(back, CycleCover)
        assert back.cycles == cover.cycles
        assert back.genus_target == cover.genus_target
        assert back.embedding_genus() == cover.embedding_genus()


def test_trail_pairs_format():
    """Trail entries are [edge id, side] pairs."""
    route = find_route(graph_from_builder(build_tetrahedron), STRATEGY_STERNA)
    data = route_to_json(route)
    assert data["trail"][0] == [route.trail[0] // 2, route.trail[0] % 2]
    assert all(side in (0, 1) for _, side in data["trail"])


def test_unknown_strategy_raises():
    """Only registered routers can be requested."""
    with pytest.raises(ValueError, match="Unknown routing strategy"):
        find_route(graph_from_builder(build_tetrahedron), "steiner")


# =============================================================================
# TEST B: Corrupted data
# =============================================================================

def test_truncated_trail_raises():
    """A trail missing its last step no longer closes."""
    data = route_to_json(find_route(graph_from_builder(build_quad_grid, 2), "atrail"))
    data["trail"] = data["trail"][:-1]
    with pytest.raises(TrailError, match="not a closed walk"):
        route_from_json(data)


def test_unknown_half_edge_raises():
    """Trail entries must name an existing edge and side."""
    data = route_to_json(find_route(graph_from_builder(build_tetrahedron), "atrail"))
    data["trail"][0] = [999, 0]
    with pytest.raises(TrailError, match="Unknown half-edge"):
        route_from_json(data)


def test_repeated_edge_in_closed_single_cover_raises():
    """A closed A-trail that runs an edge back and forth no longer covers once."""
    data = route_to_json(find_route(graph_from_builder(build_quad_grid, 2), "atrail"))
    last = data["trail"][-1]
    data["trail"] += [[last[0], 1 - last[1]], last]
    with pytest.raises(TrailError, match="visited"):
        route_from_json(data)


def test_extra_stub_in_double_cover_raises():
    """A repeated kissing-loop stub keeps the walk closed but breaks the double cover."""
    data = route_to_json(find_route(graph_from_builder(build_cube), STRATEGY_STERNA))
    stubs = [tuple(p) for p in data["kissing_loops"]]
    i = next(k for k, p in enumerate(data["trail"]) if tuple(p) in stubs)
    data["trail"].insert(i, data["trail"][i])
    with pytest.raises(TrailError, match="not visited exactly twice"):
        route_from_json(data)


def test_dropped_cycle_raises():
    """A cycle cover missing one of its cycles leaves half-edges unused."""
    data = route_to_json(find_route(graph_from_builder(build_tetrahedron), STRATEGY_CYCLE_COVER))
    data["cycles"] = data["cycles"][1:]
    with pytest.raises(TrailError, match="not used exactly once"):
        route_from_json(data)
