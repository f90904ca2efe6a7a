"""
Minimum-Weight Perfect Matching
===============================

Pair up an even set of nodes so that the summed distance is minimal.

The blossom solver in networkx maximizes weight, so distances are turned
into non-negative costs first:

    cost(i, j) = max_d - d(i, j) + U(0, 1) * noise_scale

Among maximum-cardinality matchings, maximizing the summed cost minimizes
the summed distance. The seeded noise breaks ties between equally short
pairings reproducibly.
"""

import networkx as nx
import numpy as np
from typing import List, Sequence, Tuple

from ..contract.constants import TIE_BREAK_SCALE


def min_weight_perfect_matching(nodes: Sequence[int],
                                dist: np.ndarray,
                                rng: np.random.Generator,
                                noise_scale: float = TIE_BREAK_SCALE) -> List[Tuple[int, int]]:
    """
    Minimum-weight perfect matching on the complete graph over `nodes`.

    Args:
        nodes: node labels, len(nodes) even
        dist: (n, n) symmetric distances between nodes; np.inf = no edge
        rng: tie-break noise source
        noise_scale: amplitude of the tie-break noise

    Returns:
        list of (node_a, node_b) pairs, sorted

    FAIL-FAST:
        Raises ValueError if no perfect matching exists.
    """
    n = len(nodes)
    if n % 2 == 1:
        raise ValueError(f"Perfect matching needs an even node count, got {n}")
    if n == 0:
        return []

    finite = dist[np.isfinite(dist)]
    max_d = float(finite.max()) if finite.size else 0.0

    G = nx.Graph()
    G.add_nodes_from(range(n))
    for i in range(n):
        for j in range(i + 1, n):
            d = dist[i, j]
            if not np.isfinite(d):
                continue
            G.add_edge(i, j, weight=max_d - d + rng.random() * noise_scale)

    matching = nx.max_weight_matching(G, maxcardinality=True, weight="weight")
    if 2 * len(matching) != n:
        raise ValueError(f"No perfect matching: matched {2 * len(matching)} of {n} nodes")

    pairs = sorted(tuple(sorted(p)) for p in matching)
    return [(nodes[i], nodes[j]) for i, j in pairs]
