"""
Spanning-Tree Rotation-System Router (XT)
=========================================

Double-cover routing that follows the single face of a rotation system
built around a spanning tree. Co-tree edges are threaded into the
rotations in pairs; each pair merges the two faces that adding its first
edge creates, so the embedding stays one-faced. Co-tree edges that cannot
be paired become kissing loops.

ROTATION SYSTEM:
    rotations[v] = ordered outgoing half-edges of v
    face walk:  next(h) = rotations[dest(h)][index(twin(h)) + 1]
    kissing-loop stub k at u:  next(k) = rotations[u][index(k) + 1]

PAIRING (per connected co-tree component):
    Depth-first over the component; when a vertex is finished, its
    unpaired component edges (not on the DFS path) are paired two at a
    time. A leftover edge pairs with the DFS edge that led to the vertex.
    A leftover at the DFS root pairs with nothing: a kissing loop.

EMBEDDING STATISTICS:
    faces = kissing-loop half-edges / 2 + 1
    genus = floor((V + faces - E - 2) / -2)

Random spanning trees are resampled up to `max_tries` times, keeping the
tree with the fewest kissing loops.
"""

import logging
import math
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..contract.constants import (
    DEFAULT_SEED, XTRNA_MAX_TRIES, XTRNA_EARLY_STOP, WALK_GUARD, STRATEGY_XTRNA,
)
from ..contract.errors import DisconnectedGraphError, TrailError
from ..graph.structures import Graph
from ..operators.spanning_trees import random_spanning_tree, require_connected
from .route import Route, validate_double_cover

logger = logging.getLogger(__name__)

Rotations = Dict[int, List[int]]


@dataclass
class XtrnaParameters:
    max_tries: int = XTRNA_MAX_TRIES  # random spanning trees to sample
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        if self.max_tries < 1:
            raise ValueError(f"max_tries must be >= 1, got {self.max_tries}")


def co_tree_components(graph: Graph, tree: Set[int]) -> List[List[int]]:
    """Connected components of the co-tree edges (edges linked by a shared vertex)."""
    visited = set(tree)
    components = []
    for edge in graph.edges:
        if edge.id in visited:
            continue
        visited.add(edge.id)
        component = [edge.id]
        stack = [edge.id]
        while stack:
            e = stack.pop()
            for n in graph.edge_neighbours(e):
                if n not in visited:
                    visited.add(n)
                    component.append(n)
                    stack.append(n)
        components.append(component)
    return components


def pair_co_tree(graph: Graph, component: List[int]) -> List[Tuple[Optional[int], int]]:
    """
    Pair adjacent edges of one co-tree component.

    Returns:
        List of (e1, e2) sharing a vertex. e1 is None for an edge left
        over at the DFS root (a kissing loop).
    """
    members = set(component)
    start_vertex = graph.edges[component[0]].vertices[0]
    stack: List[Tuple[Optional[int], int]] = [(None, start_vertex)]
    visited = set()
    paired = set()
    dfs_path = set()
    pairs = []

    while stack:
        e, v = stack[-1]
        neighbours = [x for x in graph.vertices[v].edges if x in members]

        if v not in visited:
            visited.add(v)
            if e is not None:
                dfs_path.add(e)
            for x in neighbours:
                w = graph.other_vertex(x, v)
                if w in visited or x == e:
                    continue
                stack.append((x, w))
            continue

        stack.pop()
        if e in paired:
            continue
        current = []
        for x in neighbours:
            if x in paired or x in dfs_path:
                continue
            current.append(x)
            paired.add(x)
            if len(current) == 2:
                pairs.append((current.pop(), current.pop()))
        if current:
            pairs.append((e, current.pop()))
            paired.add(e)
        dfs_path.discard(e)
    return pairs


def _face_walk(graph: Graph, rotations: Rotations, start: int, stop: int) -> Optional[int]:
    """
    Walk the face of `start`. Returns None if `stop` comes up, else the
    half-edge whose successor is `start`.
    """
    cur = start
    for _ in range(WALK_GUARD):
        rot = rotations[graph.destination(cur)]
        nxt = rot[(rot.index(Graph.twin(cur)) + 1) % len(rot)]
        if nxt == stop:
            return None
        if nxt == start:
            return cur
        cur = nxt
    raise TrailError(f"Face walk from half-edge {start} did not close within {WALK_GUARD} steps")


def vertex_rotations(graph: Graph, tree: List[int]) -> Rotations:
    """Rotation system with the tree edges and every paired co-tree edge."""
    tree_set = set(tree)
    rotations = {v.id: [h for h in graph.adjacent_half_edges(v.id) if Graph.edge_of(h) in tree_set]
                 for v in graph.vertices}

    for component in co_tree_components(graph, tree_set):
        for e1, e2 in pair_co_tree(graph, component):
            if e1 is None:
                continue
            if e1 in tree_set or e2 in tree_set:
                raise TrailError(f"Edge pair ({e1}, {e2}) overlaps the spanning tree")

            vc = graph.common_vertex(e1, e2)
            v1 = graph.other_vertex(e1, vc)
            v2 = graph.other_vertex(e2, vc)
            he1 = graph.outward_half_edge(e1, v1)
            he2 = graph.outward_half_edge(e2, vc)
            rot1, rotc, rot2 = rotations[v1], rotations[vc], rotations[v2]
            if he1 in rot1 or he2 in rotc:
                raise TrailError(f"Duplicate half-edge in rotation of edges ({e1}, {e2})")

            # e1 splits the single face in two
            rot1.append(he1)
            rotc.append(Graph.twin(he1))

            # e2 joins them again: both of its corners must lie on different faces
            if _face_walk(graph, rotations, he1, rot2[0]) is not None:
                incoming = he1
            else:
                incoming = _face_walk(graph, rotations, Graph.twin(he1), rot2[0])
                if incoming is None:
                    raise TrailError(f"Edge {e2} has no face to join at vertex {vc}")

            rot2.insert(0, Graph.twin(he2))
            rotc.insert((rotc.index(Graph.twin(incoming)) + 1) % len(rotc), he2)
    return rotations


def augment_rotations(graph: Graph, rotations: Rotations) -> Set[int]:
    """Append every missing outgoing half-edge as a kissing-loop stub."""
    kls = set()
    for v in graph.vertices:
        present = set(rotations[v.id])
        for h in graph.adjacent_half_edges(v.id):
            if h not in present:
                kls.add(h)
                rotations[v.id].append(h)
    return kls


def rotation_walk(graph: Graph, rotations: Rotations, kls: Set[int], start: int) -> List[int]:
    """Closed walk from `start` through the one face of the rotation system."""
    slots = {v: {h: i for i, h in enumerate(rot)} for v, rot in rotations.items()}
    limit = 2 * len(graph.edges)
    route = []
    cur = start
    while True:
        route.append(cur)
        if cur in kls:
            v, key = graph.origin(cur), cur
        else:
            v, key = graph.destination(cur), Graph.twin(cur)
        rot = rotations[v]
        nxt = rot[(slots[v][key] + 1) % len(rot)]
        if nxt == start:
            return route
        if len(route) >= limit:
            raise TrailError(f"Rotation walk exceeds {limit} steps without closing")
        cur = nxt


def best_random_tree(graph: Graph, max_tries: int,
                     rng: np.random.Generator) -> Tuple[List[int], int]:
    """
    Random spanning tree with the fewest kissing-loop half-edges.

    Samples up to `max_tries` trees and stops early once a count in
    XTRNA_EARLY_STOP comes up.

    Returns:
        (tree edge ids, kissing-loop half-edge count)
    """
    best_tree, best_size = None, math.inf
    for attempt in range(max_tries):
        tree = random_spanning_tree(graph, rng)
        rotations = vertex_rotations(graph, tree)
        size = len(augment_rotations(graph, rotations))
        if size < best_size:
            best_tree, best_size = tree, size
            logger.debug("XT try %d: %d kissing-loop half-edges", attempt, size)
            if size in XTRNA_EARLY_STOP:
                break
    return best_tree, int(best_size)


def route_from_tree(graph: Graph, tree: List[int]) -> Route:
    """XT route around spanning tree `tree` (ordered, walk starts on tree[0])."""
    tree = list(tree)
    if not tree:
        raise DisconnectedGraphError("Spanning tree is empty; the graph needs at least one edge")
    rotations = vertex_rotations(graph, tree)
    kls = augment_rotations(graph, rotations)
    trail = rotation_walk(graph, rotations, kls, 2 * tree[0])
    validate_double_cover(graph, trail)
    return Route(graph=graph, trail=trail, strategy=STRATEGY_XTRNA,
                 tree=tree, kissing_loops=frozenset(kls))


def find_xtrna_route(graph: Graph, params: Optional[XtrnaParameters] = None) -> Route:
    """
    Route over a random spanning tree with the fewest kissing loops found.

    Raises:
        DisconnectedGraphError: graph has no edges or is disconnected
        TrailError: the rotation walk does not cover every edge twice
    """
    if params is None:
        params = XtrnaParameters()
    require_connected(graph)
    graph = graph.clone()
    best_tree, _ = best_random_tree(graph, params.max_tries, np.random.default_rng(params.seed))
    route = route_from_tree(graph, best_tree)
    logger.info("XT route: %d steps, %d kissing loops, embedding genus %d",
                len(route), kissing_loop_count(route), embedding_genus(route))
    return route


def kissing_loop_count(route: Route) -> int:
    return len(route.kissing_loops) // 2


def embedding_genus(route: Route) -> int:
    V = len(route.graph.vertices)
    E = len(route.graph.edges)
    faces = len(route.kissing_loops) / 2 + 1
    return math.floor((V + faces - E - 2) / -2)
