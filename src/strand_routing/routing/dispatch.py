"""
Router registry: pick a routing strategy by its persisted name.

Every router returns a Route, except the cycle cover, which returns a
CycleCover (several closed cycles instead of one walk). Both persist
with to_json / from_json; the "strategy" field picks the loader.
"""

from typing import Callable, Dict, Optional, Union

from ..contract.constants import (
    STRATEGY_ATRAIL, STRATEGY_EULER, STRATEGY_STERNA, STRATEGY_XTRNA, STRATEGY_CYCLE_COVER,
)
from ..graph.structures import Graph
from .atrail import find_atrail
from .cycle_cover import CycleCover, find_cycle_cover
from .euler import find_euler_route
from .route import Route
from .sterna import find_sterna_route
from .xtrna import find_xtrna_route

Routing = Union[Route, CycleCover]

ROUTERS: Dict[str, Callable[..., Routing]] = {
    STRATEGY_ATRAIL: find_atrail,
    STRATEGY_EULER: find_euler_route,
    STRATEGY_STERNA: find_sterna_route,
    STRATEGY_XTRNA: find_xtrna_route,
    STRATEGY_CYCLE_COVER: find_cycle_cover,
}


def find_route(graph: Graph, strategy: str, params: Optional[object] = None) -> Routing:
    """
    Route `graph` with the named strategy.

    Args:
        graph: Mesh graph (not modified)
        strategy: One of ROUTERS
        params: Parameter dataclass of that router (ignored by euler)
    """
    if strategy not in ROUTERS:
        raise ValueError(f"Unknown routing strategy {strategy!r}, expected one of {sorted(ROUTERS)}")
    if strategy == STRATEGY_EULER:
        return find_euler_route(graph)
    return ROUTERS[strategy](graph, params)


def route_to_json(route: Routing) -> dict:
    return route.to_json()


def route_from_json(data: dict) -> Routing:
    """Rebuild a route or cycle cover and check that it still covers its graph."""
    if data.get("strategy") == STRATEGY_CYCLE_COVER:
        return CycleCover.from_json(data)
    return Route.from_json(data)
