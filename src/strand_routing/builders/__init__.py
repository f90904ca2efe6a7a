"""
Mesh builders and mesh -> Graph construction.

EXPORTS:
- Raw geometry: build_* (return V, E, F tuples)
- Contract: mesh_dict, validate_mesh
- Graph construction: graph_from_mesh, graph_from_builder
"""

# === Polyhedra (closed surfaces) ===
from .polyhedra import (
    build_tetrahedron,
    build_cube,
    build_octahedron,
    build_hexagonal_bipyramid,
)

# === Grids (open surfaces and bare graphs) ===
from .grids import build_edge_grid, build_quad_grid, build_plane

# === Contract and Graph construction ===
from .mesh import mesh_dict, validate_mesh, graph_from_mesh, graph_from_builder
