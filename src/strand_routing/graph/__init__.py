"""Half-edge graph, rotation orders, normals and edge-splitting augmentation."""

from .structures import Vertex, Edge, Face, Graph, perpendicular, polygon_normal
from .ordering import (
    topological_edges,
    geometric_edges,
    topological_half_edges,
    nearest_neighbour_half_edges,
    rotation_half_edges,
)
from .normals import calculate_normals
from .augment import make_eulerian, face_depth_classes, make_checkerboard
