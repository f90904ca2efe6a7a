"""
Spanning-Tree Double-Cover Router
=================================

Sterna-style routing: the strand runs down and back up every spanning-tree
edge, and pokes once into every co-tree edge from each end. The two pokes
of a co-tree edge pair up as a kissing loop.

WALK (depth-first around the tree):
    pop h, append h to the trail
        co-tree h   -> stub, stay at origin(h)
        tree h      -> arrive at w = destination(h); on the first visit
                       push twin(h) (the way back) and then the other
                       outgoing half-edges of w, so they are walked in
                       rotation order before returning
    The root is entered last through the return of the first edge; its
    final re-entry is dropped.

KISSING-LOOP COST:
    Walking the trail, the first stub of a co-tree edge opens a loop
    (cost + 1), the second closes it (cost - 1).
        worst_cost = max cost along the trail
    is the number of loops that must be held open at the same time.

MINIMUM-KL SEARCH (branch and bound):
    States are partial walks from the root: (DFS path, visited vertices,
    tree edges, emitted stubs, open loops, trail, cost, worst_cost).
    At the current vertex v, stubs that close a loop are emitted at once.
    The remaining choices each become one child state:
        descend   along the first free half-edge to an unvisited vertex
        open      a stub towards an unvisited vertex before moving on
        leave     open every remaining stub of v, then walk back up
    The tree is whatever the descents pick, so stubs towards vertices not
    yet reached are placed the same way the plain walk places them.
    States with worst_cost >= best are dropped. The bound starts at the
    worst cost of the plain walk, the stack is shuffled every
    `shuffle_interval` pops, and the search stops after `max_iterations`
    pops with the best complete walk.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from ..contract.constants import (
    DEFAULT_SEED, KL_MAX_ITERATIONS, KL_SHUFFLE_INTERVAL, STRATEGY_STERNA,
    TREE_MINIMUM, TREE_BFS, TREE_RANDOM, TREE_DFS, TREE_KINDS,
    ORDER_ROTATION, ORDER_PRE, CO_TREE_ORDERS,
)
from ..contract.errors import DisconnectedGraphError
from ..graph.ordering import rotation_half_edges
from ..graph.structures import Graph
from ..operators.spanning_trees import (
    minimum_spanning_tree, bfs_tree, random_spanning_tree, dfs_tree, require_connected,
)
from .route import Route, validate_double_cover

logger = logging.getLogger(__name__)


@dataclass
class SternaParameters:
    tree: str = TREE_RANDOM                 # one of TREE_KINDS
    co_tree_order: str = ORDER_ROTATION     # one of CO_TREE_ORDERS
    min_kissing_loops: bool = False         # run the branch-and-bound search
    max_iterations: int = KL_MAX_ITERATIONS
    shuffle_interval: int = KL_SHUFFLE_INTERVAL
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        if self.tree not in TREE_KINDS:
            raise ValueError(f"Unknown spanning tree kind {self.tree!r}, expected one of {TREE_KINDS}")
        if self.co_tree_order not in CO_TREE_ORDERS:
            raise ValueError(f"Unknown co-tree order {self.co_tree_order!r}, "
                             f"expected one of {CO_TREE_ORDERS}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.shuffle_interval < 1:
            raise ValueError(f"shuffle_interval must be >= 1, got {self.shuffle_interval}")


def build_tree(graph: Graph, kind: str, rng: np.random.Generator) -> List[int]:
    if kind == TREE_MINIMUM:
        return minimum_spanning_tree(graph)
    if kind == TREE_BFS:
        return bfs_tree(graph)
    if kind == TREE_RANDOM:
        return random_spanning_tree(graph, rng)
    if kind == TREE_DFS:
        return dfs_tree(graph, rng)
    raise ValueError(f"Unknown spanning tree kind {kind!r}")


def kissing_loop_cost(trail: List[int], stubs) -> Tuple[int, int]:
    """(final cost, worst cost) of the stub sequence in `trail`."""
    open_edges = set()
    cost = worst = 0
    for h in trail:
        if h not in stubs:
            continue
        e = Graph.edge_of(h)
        if e in open_edges:
            open_edges.remove(e)
            cost -= 1
        else:
            open_edges.add(e)
            cost += 1
            worst = max(worst, cost)
    return cost, worst


def _visit_order(after: List[int], tree_set: Set[int], order: str) -> List[int]:
    if order == ORDER_ROTATION:
        return after
    descents = [h for h in after if Graph.edge_of(h) in tree_set]
    stubs = [h for h in after if Graph.edge_of(h) not in tree_set]
    return stubs + descents if order == ORDER_PRE else descents + stubs


def sterna_trail(graph: Graph, tree: List[int], co_tree_order: str = ORDER_ROTATION) -> List[int]:
    """Double-cover walk around spanning tree `tree` (ordered edge ids)."""
    if not tree:
        raise DisconnectedGraphError("Spanning tree is empty; the graph needs at least one edge")
    tree_set = set(tree)
    rotations: Dict[int, List[int]] = {}
    start = 2 * tree[0]
    stack = [start]
    visited = set()
    route = []
    while stack:
        h = stack.pop()
        route.append(h)
        if Graph.edge_of(h) not in tree_set:
            continue
        v = graph.destination(h)
        if v in visited:
            continue
        visited.add(v)
        if v not in rotations:
            rotations[v] = rotation_half_edges(graph, v)
        rot = rotations[v]
        back = Graph.twin(h)
        i = rot.index(back)
        after = list(reversed(rot[i + 1:] + rot[:i]))
        stack.append(back)
        for n in reversed(_visit_order(after, tree_set, co_tree_order)):
            stack.append(n)
    return route[:-1]


def _co_tree_half_edges(graph: Graph, tree_set: Set[int]) -> frozenset:
    return frozenset(h for e in graph.edges if e.id not in tree_set for h in e.half_edges)


# =============================================================================
# MINIMUM KISSING-LOOP SEARCH
# =============================================================================

class _State(NamedTuple):
    path: tuple          # ((vertex, arrival half-edge or -1), ...)
    visited: frozenset   # vertices
    tree: frozenset      # tree edges (descents so far)
    stubs: frozenset     # emitted stub half-edges
    open_loops: frozenset  # co-tree edges with one stub emitted
    trail: Optional[tuple]  # cons list (half-edge, previous)
    cost: int
    worst: int
    floor: int           # rotation slot of the last stub opened at this vertex, -1 after a move


def _unroll(trail: Optional[tuple]) -> List[int]:
    out = []
    while trail is not None:
        out.append(trail[0])
        trail = trail[1]
    out.reverse()
    return out


def _stub(state: _State, h: int) -> _State:
    e = Graph.edge_of(h)
    if e in state.open_loops:
        return state._replace(stubs=state.stubs | {h}, open_loops=state.open_loops - {e},
                              trail=(h, state.trail), cost=state.cost - 1)
    cost = state.cost + 1
    return state._replace(stubs=state.stubs | {h}, open_loops=state.open_loops | {e},
                          trail=(h, state.trail), cost=cost, worst=max(state.worst, cost))


def _free_slots(state: _State, rot: List[int]) -> List[Tuple[int, int]]:
    """(slot, half-edge) at the current vertex that is neither a tree edge nor an emitted stub."""
    return [(i, h) for i, h in enumerate(rot)
            if Graph.edge_of(h) not in state.tree and h not in state.stubs]


def min_kissing_loop_search(graph: Graph, rng: np.random.Generator,
                            max_iterations: int = KL_MAX_ITERATIONS,
                            shuffle_interval: int = KL_SHUFFLE_INTERVAL,
                            root: int = 0,
                            bound: Optional[int] = None) -> Optional[Tuple[List[int], List[int], int]]:
    """
    Branch and bound over walks for the lowest worst kissing-loop cost.

    Args:
        bound: only walks with a worst cost strictly below it are accepted

    Returns:
        (trail, tree edge ids, worst cost) of the best complete walk, or
        None if the budget ran out before any walk beat `bound`
    """
    rotations = {v.id: rotation_half_edges(graph, v.id) for v in graph.vertices}
    n_vertices = len(graph.vertices)

    best = None
    best_worst = np.inf if bound is None else bound
    stack = [_State(path=((root, -1),), visited=frozenset([root]), tree=frozenset(),
                    stubs=frozenset(), open_loops=frozenset(), trail=None, cost=0, worst=0,
                    floor=-1)]
    iterations = 0
    while stack and iterations < max_iterations:
        iterations += 1
        if iterations % shuffle_interval == 0:
            rng.shuffle(stack)
        state = stack.pop()
        if state.worst >= best_worst:
            continue

        v, arrival = state.path[-1]
        rot = rotations[v]
        for _, h in _free_slots(state, rot):
            if Graph.edge_of(h) in state.open_loops:
                state = _stub(state, h)
        free = _free_slots(state, rot)

        # Open a loop towards an unvisited vertex; consecutive openings in slot order only
        openings = [_stub(state, h)._replace(floor=i) for i, h in free
                    if i > state.floor and graph.destination(h) not in state.visited]

        # Leave v: every remaining stub opens a loop
        leave = state
        for _, h in free:
            leave = _stub(leave, h)

        # Descend: one child per unvisited neighbour (first free parallel edge only)
        descents = []
        seen = set()
        for _, h in free:
            w = graph.destination(h)
            if w in state.visited or w in seen:
                continue
            seen.add(w)
            descents.append(state._replace(
                path=state.path + ((w, h),),
                visited=state.visited | {w},
                tree=state.tree | {Graph.edge_of(h)},
                trail=(h, state.trail),
                floor=-1))

        stack.extend(openings)
        if arrival >= 0:
            stack.append(leave._replace(path=state.path[:-1],
                                        trail=(Graph.twin(arrival), leave.trail), floor=-1))
        elif len(leave.visited) == n_vertices and leave.worst < best_worst:
            best = leave
            best_worst = leave.worst
            logger.info("Kissing-loop search: worst cost %d after %d iterations",
                        best_worst, iterations)
        stack.extend(reversed(descents))

    if stack and iterations >= max_iterations:
        logger.info("Kissing-loop search stopped at budget (%d iterations)", max_iterations)
    if best is None:
        return None
    return _unroll(best.trail), sorted(best.tree), int(best.worst)


# =============================================================================
# ROUTER
# =============================================================================

def find_sterna_route(graph: Graph, params: Optional[SternaParameters] = None) -> Route:
    """
    Route a strand twice along every edge around a spanning tree.

    With params.min_kissing_loops the branch-and-bound search looks for a
    walk whose worst kissing-loop cost is below that of the plain walk
    around the configured tree; the plain walk is kept if none is found.

    Raises:
        DisconnectedGraphError: graph has no edges or is disconnected
    """
    if params is None:
        params = SternaParameters()
    require_connected(graph)
    rng = np.random.default_rng(params.seed)
    graph = graph.clone()

    tree = build_tree(graph, params.tree, rng)
    trail = sterna_trail(graph, tree, params.co_tree_order)
    if params.min_kissing_loops:
        plain_worst = kissing_loop_cost(trail, _co_tree_half_edges(graph, set(tree)))[1]
        result = min_kissing_loop_search(graph, rng, params.max_iterations,
                                         params.shuffle_interval, bound=plain_worst)
        if result is not None:
            trail, tree, _ = result
        else:
            logger.info("Kissing-loop search found nothing below worst cost %d; "
                        "keeping the plain walk", plain_worst)

    validate_double_cover(graph, trail)
    route = Route(graph=graph, trail=trail, strategy=STRATEGY_STERNA,
                  tree=list(tree), kissing_loops=_co_tree_half_edges(graph, set(tree)))
    logger.info("Sterna route: %d steps, %d co-tree edges, worst kissing-loop cost %d",
                len(trail), len(graph.edges) - len(tree),
                kissing_loop_cost(trail, route.kissing_loops)[1])
    return route


def route_from_tree(graph: Graph, tree: List[int], co_tree_order: str = ORDER_ROTATION) -> Route:
    """Re-derive a Sterna route from a persisted spanning tree."""
    tree = list(tree)
    trail = sterna_trail(graph, tree, co_tree_order)
    validate_double_cover(graph, trail)
    return Route(graph=graph, trail=trail, strategy=STRATEGY_STERNA, tree=tree,
                 kissing_loops=_co_tree_half_edges(graph, set(tree)))
