"""
Checkerboard Euler Router
=========================

Euler circuit stitched from the boundary cycles of the "white" faces of a
checkerboard-coloured mesh.

    1. make_checkerboard: split edges until faces are two-colourable
    2. White faces = class of face 0 (flood fill over neighbours of
       neighbours, so only every second face is collected)
    3. Dual walk: from a seed half-edge, visit every white face around each
       reached vertex in rotation order; walk its boundary cycle and splice
       the cycle into the trail at the first step leaving that vertex

Every edge bounds exactly one white face after step 1, so the stitched
trail uses every edge of the augmented graph once. Mesh edges that were
split are therefore run along twice.
"""

import logging
from collections import deque
from typing import List, Set

from ..contract.constants import STRATEGY_EULER
from ..contract.errors import InsufficientFaceInformation, TrailError
from ..graph.augment import make_checkerboard
from ..graph.ordering import topological_half_edges
from ..graph.structures import Graph
from .route import Route, validate_single_cover

logger = logging.getLogger(__name__)


def white_faces(graph: Graph) -> Set[int]:
    """Faces reachable from face 0 in an even number of adjacency hops."""
    if not graph.faces:
        return set()
    white = {0}
    stack = [0]
    while stack:
        f = stack.pop()
        for n1 in graph.face_neighbours(f):
            for n2 in graph.face_neighbours(n1):
                if n2 not in white:
                    white.add(n2)
                    stack.append(n2)
    return white


def face_loop(graph: Graph, f: int, start: int) -> List[int]:
    """
    Boundary cycle of face f through half-edge `start`.

    The cycle is walked forward from `start` and returned reversed, as
    twins: it begins and ends at origin(start).
    """
    face_edges = graph.faces[f].edges
    outgoing = {}
    for e in face_edges:
        for h in graph.edges[e].half_edges:
            outgoing.setdefault(graph.origin(h), []).append(h)

    cycle = []
    cur = start
    while True:
        cycle.append(cur)
        ns = outgoing[graph.destination(cur)]
        cur = ns[1] if Graph.edge_of(ns[0]) == Graph.edge_of(cur) else ns[0]
        if cur == start:
            break
        if len(cycle) > len(face_edges):
            raise TrailError(f"Boundary walk of face {f} does not close")
    return [Graph.twin(h) for h in reversed(cycle)]


def find_euler_route(graph: Graph) -> Route:
    """
    Route a strand around the white faces of the checkerboarded mesh.

    The caller's graph is not modified.

    Raises:
        InsufficientFaceInformation: some vertex lies on no face
        NonManifoldError: an edge has more than two faces
        TrailError: the stitched trail misses or repeats an edge
    """
    if not graph.has_face_information():
        raise InsufficientFaceInformation(
            "Graph has insufficient face-information for checkerboard routing")
    graph = graph.clone()
    make_checkerboard(graph)
    white = white_faces(graph)

    v0_edges = graph.vertices[0].edges
    start = 2 * v0_edges[1 if len(v0_edges) > 1 else 0]

    rotations = {}
    visited = set()
    trail: List[int] = []
    stack = deque([start])
    while stack:
        h = stack.popleft()
        v = graph.origin(h)
        if v not in rotations:
            rotations[v] = topological_half_edges(graph, v)
        rot = rotations[v]
        i = rot.index(h)
        for n in rot[i:] + rot[:i]:
            faces = graph.edges[Graph.edge_of(n)].faces
            if faces and faces[0] in white:
                f = faces[0]
            elif len(faces) > 1:
                f = faces[1]
            else:
                continue
            if f not in white or f in visited:
                continue
            visited.add(f)
            loop = face_loop(graph, f, n)
            stack.extend(loop)
            j = next((k for k, x in enumerate(trail) if graph.origin(x) == v), len(trail))
            trail[j:j] = loop

    validate_single_cover(graph, trail)
    logger.info("Euler route: %d white faces, %d steps", len(visited), len(trail))
    return Route(graph=graph, trail=trail, strategy=STRATEGY_EULER)
