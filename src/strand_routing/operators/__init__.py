"""Graph operators - shortest paths, perfect matching, spanning trees."""

from .shortest_paths import length_matrix, shortest_paths, path_vertices
from .matching import min_weight_perfect_matching
from .spanning_trees import (
    minimum_spanning_tree,
    bfs_tree,
    random_spanning_tree,
    dfs_tree,
    require_connected,
)
