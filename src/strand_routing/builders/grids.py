"""
Planar Grids
============

Open (bounded) test meshes in the z = 0 plane.

    build_edge_grid(n)  - n × n vertices, lattice edges, NO faces
    build_quad_grid(n)  - n × n quad cells, (n+1)² vertices
    build_plane()       - a single unit quad

Faces are CCW seen from +z. Vertex (i, j) sits at (i, j, 0) with index
j * width + i.
"""

import numpy as np
from typing import List, Tuple

Mesh = Tuple[np.ndarray, List[Tuple[int, int]], List[List[int]]]


def _lattice(width: int, spacing: float = 1.0):
    vertices = np.array([(i * spacing, j * spacing, 0.0)
                         for j in range(width) for i in range(width)], dtype=float)
    edges = []
    for j in range(width):
        for i in range(width):
            v = j * width + i
            if i + 1 < width:
                edges.append((v, v + 1))
            if j + 1 < width:
                edges.append((v, v + width))
    return vertices, edges


def build_edge_grid(n: int = 3) -> Mesh:
    """
    n × n lattice of vertices with horizontal and vertical edges.

    TOPOLOGY:
        V = n², E = 2n(n-1), F = 0
    """
    if n < 2:
        raise ValueError(f"Edge grid needs n >= 2, got {n}")
    vertices, edges = _lattice(n)
    return vertices, edges, []


def build_quad_grid(n: int = 4) -> Mesh:
    """
    n × n quad cells.

    TOPOLOGY:
        V = (n+1)², E = 2n(n+1), F = n²
        Interior degree 4, boundary degree 3, corners degree 2.
    """
    if n < 1:
        raise ValueError(f"Quad grid needs n >= 1, got {n}")
    width = n + 1
    vertices, edges = _lattice(width)
    faces = []
    for j in range(n):
        for i in range(n):
            v = j * width + i
            faces.append([v, v + 1, v + 1 + width, v + width])
    return vertices, edges, faces


def build_plane() -> Mesh:
    """A single unit square: V = 4, E = 4, F = 1."""
    return build_quad_grid(1)
