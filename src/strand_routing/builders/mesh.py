"""
Mesh Contract and Graph Construction
====================================

Builders return plain (vertices, edges, faces) data. This module checks it
against the contract and turns it into a Graph.

CONTRACT (mesh dict):
    V : (N, 3) array or list       vertex coordinates
    E : list of (i, j)             undirected edges, no self-loops
    F : list of vertex cycles      every consecutive pair must be an edge

    Faces should share one winding (each directed segment used at most
    once). Mixed winding is allowed but warned about, since normals and
    therefore rotation orders become unreliable.
"""

import warnings
import numpy as np
from collections import Counter
from typing import List, Tuple, Optional

from ..graph.normals import calculate_normals
from ..graph.structures import Graph

REQUIRED_FIELDS = ['V', 'E', 'F']


def mesh_dict(vertices, edges, faces, name: Optional[str] = None) -> dict:
    return {'V': np.asarray(vertices, dtype=float), 'E': list(edges), 'F': list(faces), 'name': name}


def validate_mesh(mesh: dict, strict: bool = True) -> Tuple[bool, List[str]]:
    """
    Validate a mesh dict against the contract.

    Args:
        mesh: The mesh dict to validate
        strict: If True, raise ValueError when any error is found

    Returns:
        (is_valid, list of error messages)
    """
    errors = []
    for field in REQUIRED_FIELDS:
        if field not in mesh:
            errors.append(f"Missing required field: {field}")
    if errors:
        if strict:
            raise ValueError(f"Mesh contract violation: {errors}")
        return False, errors

    n_vertices = len(mesh['V'])
    edge_set = set()
    for k, (i, j) in enumerate(mesh['E']):
        if i == j:
            errors.append(f"Edge {k} is a self-loop at vertex {i}")
        if not (0 <= i < n_vertices and 0 <= j < n_vertices):
            errors.append(f"Edge {k} ({i},{j}) out of range (V={n_vertices})")
        edge_set.add((min(i, j), max(i, j)))

    segment_use = Counter()
    faces_per_edge = Counter()
    for f_idx, face in enumerate(mesh['F']):
        if len(face) < 3:
            errors.append(f"Face {f_idx} has {len(face)} vertices, need >= 3")
            continue
        n = len(face)
        for k in range(n):
            a, b = face[k], face[(k + 1) % n]
            if (min(a, b), max(a, b)) not in edge_set:
                errors.append(f"Face {f_idx} uses segment ({a},{b}) which is not in edge list")
            segment_use[(a, b)] += 1
            faces_per_edge[(min(a, b), max(a, b))] += 1

    for key, count in faces_per_edge.items():
        if count > 2:
            errors.append(f"Edge {key} bounds {count} faces (non-manifold)")

    reused = [s for s, c in segment_use.items() if c > 1]
    if reused:
        warnings.warn(
            f"{len(reused)} directed face segments are used twice (first: {reused[0]}). "
            f"Faces do not share a consistent winding.",
            UserWarning
        )

    if errors and strict:
        raise ValueError(f"Mesh contract violation: {errors[:5]}")
    return len(errors) == 0, errors


def graph_from_mesh(vertices, edges, faces) -> Graph:
    """
    Build a Graph from (vertices, edges, faces) and propagate normals.

    Edge ids follow the order of `edges`, face ids the order of `faces`.
    Each face's edge list follows its vertex cycle.

    FAIL-FAST:
        Raises ValueError if a face segment is not in the edge list.
    """
    graph = Graph()
    for c in np.asarray(vertices, dtype=float):
        graph.add_vertex(c)

    edge_dict = {}
    for i, j in edges:
        e = graph.add_edge(int(i), int(j))
        edge_dict.setdefault((min(i, j), max(i, j)), e)

    for f_idx, face in enumerate(faces):
        n = len(face)
        edge_ids = []
        for k in range(n):
            a, b = face[k], face[(k + 1) % n]
            key = (min(a, b), max(a, b))
            if key not in edge_dict:
                raise ValueError(f"Face {f_idx} uses segment ({a},{b}) which is not in edge list. "
                                 f"Face vertices: {face}")
            edge_ids.append(edge_dict[key])
        graph.add_face(edge_ids)

    calculate_normals(graph)
    return graph


def graph_from_builder(builder, *args, **kwargs) -> Graph:
    """Shorthand: graph_from_mesh(*builder(*args, **kwargs))."""
    vertices, edges, faces = builder(*args, **kwargs)
    return graph_from_mesh(vertices, edges, faces)
