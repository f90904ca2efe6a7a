"""
A-trail Router
==============

Single-cover, non-crossing Euler circuit ("A-trail").

PIPELINE:
    1. Require face information, Eulerize (edge splitting)
    2. Transition search: pick LEFT/RIGHT for every vertex of degree > 4 so
       that the continuation function still connects all edges
    3. Hierholzer traversal restricted to the continuation function
    4. fix_quads: uncross the passages through degree-4 vertices

CONTINUATION FUNCTION:
    For an outgoing half-edge h at v (we arrived at v through twin(h)),
    continuations(h) lists the outgoing half-edges the walk may leave by.
        deg(v) <= 4 or NONE : every outgoing half-edge of v
        LEFT / RIGHT        : [partner of h, h]   (see constants)
    Partners are neighbours in the rotation, so passages through vertices
    of degree > 4 never cross. h itself is listed but is always used.

    Big vertices are effectively split into deg/2 degree-2 pieces. The
    transition search keeps the split edge graph connected, which is
    exactly the condition for an Euler circuit to exist.

UNCROSSING A DEGREE-4 VERTEX:
    The two passages through v use opposite rotation slots {t, t+2} and
    {t+1, t+3}. Reversing the trail between them (mapping each half-edge
    to its twin) re-pairs the slots as neighbours. Passages through other
    vertices inside the reversed segment keep their slot pairs.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..contract.constants import (
    MAX_ITERATIONS, DEFAULT_SEED, STRATEGY_ATRAIL,
    TRANSITION_NONE, TRANSITION_LEFT, TRANSITION_RIGHT,
)
from ..contract.errors import (
    ATrailNotFound, EulerizationError, InsufficientFaceInformation, TrailError,
)
from ..graph.augment import make_eulerian
from ..graph.ordering import topological_half_edges
from ..graph.structures import Graph
from .route import Route, validate_single_cover

logger = logging.getLogger(__name__)


@dataclass
class ATrailParameters:
    max_iterations: int = MAX_ITERATIONS  # transition search budget
    seed: int = DEFAULT_SEED              # Eulerization tie-breaks


class Continuations:
    """Continuation function of a graph under a (mutable) transition map."""

    def __init__(self, graph: Graph, transitions: Dict[int, int]):
        self.graph = graph
        self.transitions = transitions
        self.rotations = {v.id: topological_half_edges(graph, v.id) for v in graph.vertices}
        self.slots = {v: {h: i for i, h in enumerate(rot)} for v, rot in self.rotations.items()}

    def __call__(self, h: int) -> List[int]:
        v = self.graph.origin(h)
        rot = self.rotations[v]
        deg = len(rot)
        t = self.transitions.get(v, TRANSITION_NONE)
        if deg <= 4 or t == TRANSITION_NONE:
            return rot
        i = self.slots[v][h]
        if t == TRANSITION_LEFT:
            j = (i + (-1) ** (i % 2) + deg) % deg
        else:
            j = (i + (-1) ** ((i + 1) % 2) + deg) % deg
        return [rot[j], h]


def is_connected(graph: Graph, continuations: Continuations) -> bool:
    """Do the continuations link every edge to edge 0?"""
    if not graph.edges:
        return True
    visited = {0}
    stack = [0, 1]
    while stack:
        h = stack.pop()
        for m in continuations(h):
            e = Graph.edge_of(m)
            if e not in visited:
                visited.add(e)
                stack.append(Graph.twin(m))
    return len(visited) == len(graph.edges)


def search_transitions(graph: Graph, continuations: Continuations,
                       max_iterations: int = MAX_ITERATIONS) -> Dict[int, int]:
    """
    Assign LEFT/RIGHT to every vertex of degree > 4, keeping connectivity.

    Vertices with the most big neighbours are fixed first. Each vertex on
    the stack cycles NONE -> LEFT -> RIGHT; after RIGHT it is popped,
    reset and returned to the pending pool (backtrack).

    Raises:
        ATrailNotFound: search space exhausted or budget exceeded
    """
    transitions = continuations.transitions
    big = [v.id for v in graph.vertices if len(v.edges) > 4]
    if not big:
        if not is_connected(graph, continuations):
            raise ATrailNotFound("Graph is not connected, no A-trail exists")
        return transitions

    big_set = set(big)
    n_big = {v: sum(1 for w in graph.vertex_neighbours(v) if w in big_set) for v in big}
    pending = sorted(big, key=lambda v: n_big[v])
    stack = [pending.pop()]
    iterations = 0
    backtracks = 0
    while stack:
        iterations += 1
        if iterations > max_iterations:
            raise ATrailNotFound(
                f"Could not find an A-trail within {max_iterations} iterations "
                f"({len(big)} vertices of degree > 4, {backtracks} backtracks)")
        v = stack[-1]
        t = transitions.get(v, TRANSITION_NONE)
        if t == TRANSITION_NONE:
            transitions[v] = TRANSITION_LEFT
        elif t == TRANSITION_LEFT:
            transitions[v] = TRANSITION_RIGHT
        else:
            stack.pop()
            transitions[v] = TRANSITION_NONE
            pending.append(v)
            backtracks += 1
            continue

        if is_connected(graph, continuations):
            if not pending:
                logger.debug("Transitions found after %d iterations, %d backtracks",
                             iterations, backtracks)
                return transitions
            stack.append(pending.pop())

    raise ATrailNotFound("All options exhausted: no transition assignment keeps the edges connected")


def hierholzer(graph: Graph, continuations: Continuations) -> List[int]:
    """
    Closed trail using every edge once, obeying the continuations.

    Sub-trails are grown from the first trail position that still has an
    unused continuation and spliced in place of that position.
    """
    visited = set()

    def unvisited(h: int) -> List[int]:
        return [m for m in continuations(Graph.twin(h)) if Graph.edge_of(m) not in visited]

    def traverse(start: int) -> List[int]:
        path = [start]
        visited.add(Graph.edge_of(start))
        cur = start
        while True:
            candidates = unvisited(cur)
            if not candidates:
                return path
            cur = candidates.pop()
            visited.add(Graph.edge_of(cur))
            path.append(cur)

    if not graph.edges:
        return []
    trail = traverse(0)
    while len(visited) < len(graph.edges):
        for i, h in enumerate(trail):
            if unvisited(h):
                trail[i:i + 1] = traverse(h)
                break
        else:
            raise ATrailNotFound(
                f"Trail got stuck after {len(visited)} of {len(graph.edges)} edges")
    return trail


def fix_quads(graph: Graph, trail: List[int], continuations: Continuations) -> List[int]:
    """Uncross every crossing passage through a degree-4 vertex (in place)."""
    n = len(trail)
    fixed = 0
    for i in range(n):
        a, b = trail[i], trail[(i + 1) % n]
        v = graph.destination(a)
        rot = continuations.rotations[v]
        if len(rot) != 4:
            continue
        t = continuations.slots[v][Graph.twin(a)]
        if rot[(t + 2) % 4] != b:
            continue
        k = next(j for j in range(n) if j != i and graph.destination(trail[j]) == v)
        lo, hi = min(i, k), max(i, k)
        trail[lo + 1:hi + 1] = [Graph.twin(h) for h in reversed(trail[lo + 1:hi + 1])]
        fixed += 1
    logger.debug("fix_quads: %d passages uncrossed", fixed)
    return trail


def find_atrail(graph: Graph, params: Optional[ATrailParameters] = None) -> Route:
    """
    Route a single non-crossing strand over every edge.

    The caller's graph is not modified; the route owns an Eulerized clone.

    Raises:
        InsufficientFaceInformation: some vertex lies on no face
        ATrailNotFound: Eulerization failed or no A-trail within budget
    """
    if params is None:
        params = ATrailParameters()
    if not graph.has_face_information():
        raise InsufficientFaceInformation(
            "Graph has insufficient face-information for topological routing")

    graph = graph.clone()
    try:
        make_eulerian(graph, np.random.default_rng(params.seed))
    except EulerizationError as err:
        raise ATrailNotFound(f"Error making the graph Eulerian: {err}") from err

    continuations = Continuations(graph, {})
    search_transitions(graph, continuations, params.max_iterations)
    trail = hierholzer(graph, continuations)
    fix_quads(graph, trail, continuations)
    validate_single_cover(graph, trail)

    logger.info("A-trail: %d edges, %d vertices of degree > 4",
                len(trail), sum(1 for v in graph.vertices if len(v.edges) > 4))
    return Route(graph=graph, trail=trail, strategy=STRATEGY_ATRAIL)


def from_vertex_sequence(graph: Graph, vertices: Sequence[int]) -> Route:
    """
    Replay an A-trail given as a closed vertex sequence.

    Each step takes an unused edge between consecutive vertices; when all
    parallel copies are used, one of them is split. Works on a clone.

    Raises:
        TrailError: consecutive vertices are not adjacent, or the sequence
            is not closed
    """
    vertices = list(vertices)
    if len(vertices) < 2 or vertices[0] != vertices[-1]:
        raise TrailError("Vertex sequence must be closed (first == last) with at least one step")
    graph = graph.clone()
    used = set()
    trail = []
    for cur, nxt in zip(vertices[:-1], vertices[1:]):
        edges = graph.common_edges(cur, nxt)
        if not edges:
            raise TrailError(f"No such edge: {[cur, nxt]}")
        free = [e for e in edges if e not in used]
        e = free[0] if free else graph.split_edge(edges[0])
        used.add(e)
        trail.append(graph.outward_half_edge(e, cur))
    return Route(graph=graph, trail=trail, strategy=STRATEGY_ATRAIL)
