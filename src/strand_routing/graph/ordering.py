"""
Adjacency Orderings
===================

Cyclic order of the edges around a vertex.

TOPOLOGICAL (exact, needs faces):
    Walk from edge to edge across the faces shared by consecutive edges.
    Start at a boundary edge (fewer than 2 faces) if the vertex has one, so
    an open fan is walked from one end to the other. The orientation is
    fixed afterwards: with d1 the direction of the last edge and d2 that of
    the closest earlier edge leading to a different neighbour,
        (d1 x d2) . n_face <= 0  ->  reverse
    where n_face is the normal of the last face crossed.

GEOMETRIC (approximate):
    Sort edges by angle around the vertex normal. Used when the face walk
    does not produce every incident edge exactly once.

NEAREST NEIGHBOUR (heuristic, no faces needed):
    Greedy tour over the outgoing half-edges, hopping to the half-edge whose
    far endpoint is closest. For routers that must run on face-less input.
"""

import logging
import numpy as np
from typing import List

from ..contract.constants import EPS_ZERO
from ..contract.errors import InsufficientFaceInformation
from .structures import Graph

logger = logging.getLogger(__name__)


def _edge_direction(graph: Graph, e: int, v: int) -> np.ndarray:
    """c_a + c_b - 2 c_v: points from v along edge e (robust to which end is v)."""
    a, b = graph.edges[e].vertices
    c = graph.vertices[v].coords
    return graph.vertices[a].coords + graph.vertices[b].coords - 2 * c


def topological_edges(graph: Graph, v: int) -> List[int]:
    """
    Edges around v in rotational order, recovered from face adjacency.

    Raises:
        InsufficientFaceInformation: fewer face incidences than degree - 1
    """
    incident = graph.vertices[v].edges
    degree = len(incident)
    if degree == 0:
        return []
    adjacent = set(incident)

    prev = incident[0]
    prev_faces = graph.edges[prev].faces
    prev_f = prev_faces[0] if prev_faces else None
    n_faces = 0
    for e in incident:
        faces = graph.edges[e].faces
        n_faces += len(faces)
        if len(faces) < 2:
            prev = e
            prev_f = faces[0] if faces else None

    if n_faces < degree - 1:
        raise InsufficientFaceInformation(
            f"Insufficient face-information for topological routing: vertex {v} has "
            f"{n_faces} face incidences for degree {degree}")

    order = [prev]
    while len(order) < degree:
        faces = graph.edges[prev].faces
        if not faces:
            break
        f1 = faces[0]
        f2 = faces[1] if len(faces) > 1 else None
        prev_f = f1 if (f1 != prev_f or f2 is None) else f2
        nxt = None
        for e in graph.faces[prev_f].edges:
            if e != prev and e in adjacent:
                nxt = e
                break
        if nxt is None:
            break
        prev = nxt
        order.append(prev)

    if len(order) != degree or len(set(order)) != degree:
        logger.debug("Face walk around vertex %d incomplete (%d/%d), using geometric order",
                     v, len(set(order)), degree)
        return geometric_edges(graph, v)

    if degree > 1 and prev_f is not None:
        e1 = order[-1]
        far = graph.other_vertex(e1, v)
        e2 = None
        for k in range(len(order) - 2, -1, -1):
            if graph.other_vertex(order[k], v) != far:
                e2 = order[k]
                break
        if e2 is not None:
            d1 = _edge_direction(graph, e1, v)
            d2 = _edge_direction(graph, e2, v)
            if np.dot(np.cross(d1, d2), graph.faces[prev_f].normal) <= 0:
                order.reverse()
    return order


def geometric_edges(graph: Graph, v: int) -> List[int]:
    """Edges around v sorted by angle in the tangent frame of the vertex normal."""
    incident = list(graph.vertices[v].edges)
    if len(incident) < 2:
        return incident
    normal = graph.vertices[v].normal
    x = _edge_direction(graph, incident[0], v)
    x = x / max(np.linalg.norm(x), EPS_ZERO)
    y = np.cross(x, normal)
    y = y / max(np.linalg.norm(y), EPS_ZERO)

    angles = []
    for e in incident:
        d = _edge_direction(graph, e, v)
        d = d / max(np.linalg.norm(d), EPS_ZERO)
        angles.append(np.arctan2(np.dot(d, y), np.dot(d, x)))
    order = np.argsort(angles, kind="stable")
    return [incident[i] for i in order]


def topological_half_edges(graph: Graph, v: int) -> List[int]:
    """Outgoing half-edges of v in topological order."""
    return [graph.outward_half_edge(e, v) for e in topological_edges(graph, v)]


def nearest_neighbour_half_edges(graph: Graph, v: int) -> List[int]:
    """
    Outgoing half-edges of v as a greedy nearest-neighbour tour.

    Distances are measured between the far endpoints of the half-edges.
    """
    neighbours = graph.adjacent_half_edges(v)
    if len(neighbours) < 3:
        return neighbours
    tips = {h: graph.vertices[graph.destination(h)].coords for h in neighbours}

    result = [neighbours[0]]
    visited = {neighbours[0]}
    cur = neighbours[0]
    while len(result) < len(neighbours):
        best, best_d = None, np.inf
        for h in neighbours:
            if h in visited:
                continue
            d = np.linalg.norm(tips[h] - tips[cur])
            if d < best_d:
                best, best_d = h, d
        result.append(best)
        visited.add(best)
        cur = best
    return result


def rotation_half_edges(graph: Graph, v: int) -> List[int]:
    """
    Best available rotation of the outgoing half-edges of v.

    Topological order when face data allows it, nearest-neighbour tour
    otherwise.
    """
    try:
        return topological_half_edges(graph, v)
    except InsufficientFaceInformation:
        logger.debug("No face information at vertex %d, using nearest-neighbour order", v)
        return nearest_neighbour_half_edges(graph, v)
