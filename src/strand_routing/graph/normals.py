"""
Normal Propagation
==================

Recompute face, edge and vertex normals from geometry.

    face normal   = Newell normal of the boundary polygon (winding order)
    edge normal   = normalized sum of incident (non-split) face normals
    vertex normal = normalized sum of incident edge normals

Split faces carry no area; they take the normal of their first edge.
Edges without faces get a normal orthogonal to their direction.
"""

import warnings
import numpy as np

from ..contract.constants import EPS_ZERO
from .structures import Graph, polygon_normal, perpendicular


def calculate_normals(graph: Graph) -> None:
    """Recompute all normals of `graph` in place."""
    split = set()
    for face in graph.faces:
        if graph.is_split_face(face.id):
            split.add(face.id)
            continue
        cycle = graph.face_vertex_cycle(face.edges)
        coords = np.array([graph.vertices[v].coords for v in cycle])
        face.normal = polygon_normal(coords)

    for edge in graph.edges:
        n = np.zeros(3)
        for f in edge.faces:
            if f not in split:
                n += graph.faces[f].normal
        norm = np.linalg.norm(n)
        if norm < EPS_ZERO:
            if any(f not in split for f in edge.faces):
                warnings.warn(
                    f"Incident face normals of edge {edge.id} cancel out. "
                    f"Check the face winding of the input mesh.",
                    UserWarning
                )
            a, b = edge.vertices
            edge.normal = perpendicular(graph.vertices[b].coords - graph.vertices[a].coords)
        else:
            edge.normal = n / norm

    for f in split:
        face = graph.faces[f]
        face.normal = graph.edges[face.edges[0]].normal.copy()

    for vertex in graph.vertices:
        n = np.zeros(3)
        for e in vertex.edges:
            n += graph.edges[e].normal
        norm = np.linalg.norm(n)
        vertex.normal = n / norm if norm > EPS_ZERO else np.array([0.0, 0.0, 1.0])
