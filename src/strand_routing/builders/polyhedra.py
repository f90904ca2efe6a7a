"""
Generic Polyhedra Construction
==============================

Closed test surfaces for the routers.

POLYHEDRA INCLUDED:
    - Tetrahedron (V=4, E=6, F=4)          all degrees odd (3)
    - Cube (V=8, E=12, F=6)                all degrees odd (3)
    - Octahedron (V=6, E=12, F=8)          all degrees 4, Eulerian
    - Hexagonal bipyramid (V=8, E=18, F=12) two degree-6 apexes, Eulerian

All are spheres: χ = V - E + F = 2, genus 0.

Every builder returns (vertices, edges, faces):
    vertices: (V, 3) array
    edges: list of (i, j) tuples with i < j
    faces: list of vertex cycles, CCW seen from outside (outward normals)
"""

import numpy as np
from typing import Tuple, List

from ..contract.constants import EPS_CLOSE

Polyhedron = Tuple[np.ndarray, List[Tuple[int, int]], List[List[int]]]


def _order_ccw(vertices_arr: np.ndarray, face: List[int], normal: np.ndarray) -> List[int]:
    """Order face vertices counter-clockwise around `normal`."""
    coords = vertices_arr[face]
    centroid = coords.mean(axis=0)
    normal = normal / np.linalg.norm(normal)

    # Build local frame
    if abs(normal[0]) < 0.9:
        u = np.cross(normal, [1, 0, 0])
    else:
        u = np.cross(normal, [0, 1, 0])
    u = u / np.linalg.norm(u)
    v = np.cross(normal, u)

    angles = [np.arctan2(np.dot(coords[k] - centroid, v),
                         np.dot(coords[k] - centroid, u))
              for k in range(len(face))]
    order = np.argsort(angles)
    return [face[o] for o in order]


def _edges_at_distance(vertices_arr: np.ndarray, d2_target: float) -> List[Tuple[int, int]]:
    edges = []
    n = len(vertices_arr)
    for i in range(n):
        for j in range(i + 1, n):
            d2 = np.sum((vertices_arr[i] - vertices_arr[j])**2)
            if abs(d2 - d2_target) < EPS_CLOSE:
                edges.append((i, j))
    return edges


def _check_counts(name: str, vertices, edges, faces, V: int, E: int, F: int) -> None:
    if len(vertices) != V:
        raise ValueError(f"{name}: expected {V} vertices, got {len(vertices)}")
    if len(edges) != E:
        raise ValueError(f"{name}: expected {E} edges, got {len(edges)}")
    if len(faces) != F:
        raise ValueError(f"{name}: expected {F} faces, got {len(faces)}")


def build_tetrahedron() -> Polyhedron:
    """
    Build a regular tetrahedron centered at origin.

    TOPOLOGY:
        V = 4, E = 6, F = 4, χ = 2
        Complete graph K4, every vertex odd (degree 3).
    """
    # Alternating corners of the cube
    vertices = sorted([(1, 1, 1), (1, -1, -1), (-1, 1, -1), (-1, -1, 1)])
    vertices_arr = np.array(vertices, dtype=float)

    edges = [(i, j) for i in range(4) for j in range(i + 1, 4)]

    faces = []
    for face in [[0, 1, 2], [0, 1, 3], [0, 2, 3], [1, 2, 3]]:
        centroid = vertices_arr[face].mean(axis=0)
        # Outward: the centroid of a face points away from the origin
        faces.append(_order_ccw(vertices_arr, face, centroid))

    _check_counts("Tetrahedron", vertices, edges, faces, 4, 6, 4)
    return vertices_arr, edges, faces


def build_cube() -> Polyhedron:
    """
    Build a cube with corners at (±1, ±1, ±1).

    TOPOLOGY:
        V = 8, E = 12, F = 6, χ = 2
    """
    vertices = sorted((x, y, z) for x in (-1, 1) for y in (-1, 1) for z in (-1, 1))
    vertices_arr = np.array(vertices, dtype=float)

    # Edges: distance = 2
    edges = _edges_at_distance(vertices_arr, 4.0)

    faces = []
    for axis in range(3):
        for sign in (-1, 1):
            face = [i for i, v in enumerate(vertices) if v[axis] == sign]
            normal = np.zeros(3)
            normal[axis] = sign
            faces.append(_order_ccw(vertices_arr, face, normal))

    _check_counts("Cube", vertices, edges, faces, 8, 12, 6)
    return vertices_arr, edges, faces


def build_octahedron() -> Polyhedron:
    """
    Build a regular octahedron with vertices on the axes.

    TOPOLOGY:
        V = 6, E = 12, F = 8, χ = 2
        Every vertex has degree 4.
    """
    vertices = sorted([(1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1)])
    vertices_arr = np.array(vertices, dtype=float)

    # Edges: distance = √2
    edges = _edges_at_distance(vertices_arr, 2.0)

    # One triangle per octant
    faces = []
    for sx in (-1, 1):
        for sy in (-1, 1):
            for sz in (-1, 1):
                octant = np.array([sx, sy, sz], dtype=float)
                face = [i for i, v in enumerate(vertices_arr) if np.dot(v, octant) > 0.5]
                faces.append(_order_ccw(vertices_arr, face, octant))

    _check_counts("Octahedron", vertices, edges, faces, 6, 12, 8)
    return vertices_arr, edges, faces


def build_hexagonal_bipyramid(height: float = 1.0) -> Polyhedron:
    """
    Build a hexagonal bipyramid: a hexagon in z=0 plus two apexes on ±z.

    TOPOLOGY:
        V = 8, E = 18, F = 12, χ = 2
        Apex degree 6, equator degree 4 -> Eulerian with two degree-6
        vertices (the smallest closed case for A-trail transitions).
    """
    if height <= 0:
        raise ValueError(f"Bipyramid height must be > 0, got {height}")
    ring = [(np.cos(k * np.pi / 3), np.sin(k * np.pi / 3), 0.0) for k in range(6)]
    vertices_arr = np.array(ring + [(0.0, 0.0, height), (0.0, 0.0, -height)], dtype=float)
    top, bottom = 6, 7

    edges = [(k, (k + 1) % 6) if k < (k + 1) % 6 else ((k + 1) % 6, k) for k in range(6)]
    edges += [(k, top) for k in range(6)]
    edges += [(k, bottom) for k in range(6)]

    faces = []
    for k in range(6):
        a, b = k, (k + 1) % 6
        for apex in (top, bottom):
            face = [a, b, apex]
            centroid = vertices_arr[face].mean(axis=0)
            faces.append(_order_ccw(vertices_arr, face, centroid))

    _check_counts("Hexagonal bipyramid", vertices_arr, edges, faces, 8, 18, 12)
    return vertices_arr, edges, faces


# Self-test
if __name__ == "__main__":
    print("=" * 60)
    print("POLYHEDRA CONSTRUCTION")
    print("=" * 60)

    for name, builder in [("Tetrahedron", build_tetrahedron),
                          ("Cube", build_cube),
                          ("Octahedron", build_octahedron),
                          ("Hexagonal bipyramid", build_hexagonal_bipyramid)]:
        v, e, f = builder()
        print(f"\n{name}:")
        print(f"  V={len(v)}, E={len(e)}, F={len(f)}, χ={len(v) - len(e) + len(f)}")
