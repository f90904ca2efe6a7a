"""
Cycle Cover Router
==================

Traces every face of a rotation system. The face step is a permutation
of the half-edges, so the faces are closed cycles that together run along
every edge twice, once in each direction.

FACE STEP:
    next(h) = rotations[dest(h)][index(twin(h)) + 1]

GENUS TARGETS:
    any  - best available rotation of every vertex (topological order,
           nearest-neighbour tour where face data is missing). On a closed
           mesh the cycles are the mesh faces.
    max  - the XT rotation system around the best random spanning tree,
           kissing-loop stubs appended: few long cycles, high genus.

EMBEDDING STATISTICS:
    genus = floor((V + cycles - E - 2) / -2)

PERSISTENCE:
    {"strategy": "cycle_cover", "genus_target", "graph",
     "cycles": [[[edge, side]...]...]}
"""

import logging
import math
import numpy as np
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..contract.constants import (
    DEFAULT_SEED, XTRNA_MAX_TRIES, GENUS_ANY, GENUS_MAX, GENUS_TARGETS, STRATEGY_CYCLE_COVER,
)
from ..contract.errors import TrailError
from ..graph.ordering import rotation_half_edges
from ..graph.structures import Graph
from ..operators.spanning_trees import require_connected
from .xtrna import augment_rotations, best_random_tree, vertex_rotations

logger = logging.getLogger(__name__)


@dataclass
class CycleCoverParameters:
    genus_target: str = GENUS_ANY   # one of GENUS_TARGETS
    max_tries: int = XTRNA_MAX_TRIES  # random spanning trees for GENUS_MAX
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        if self.genus_target not in GENUS_TARGETS:
            raise ValueError(f"Unknown genus target {self.genus_target!r}, expected one of {GENUS_TARGETS}")
        if self.max_tries < 1:
            raise ValueError(f"max_tries must be >= 1, got {self.max_tries}")


@dataclass
class CycleCover:
    """Closed half-edge cycles over `graph`, each half-edge on exactly one cycle."""
    graph: Graph
    cycles: List[List[int]]
    genus_target: str = GENUS_ANY
    strategy: str = field(default=STRATEGY_CYCLE_COVER, init=False)

    def __len__(self):
        return len(self.cycles)

    def half_edge_counts(self) -> Counter:
        return Counter(h for cycle in self.cycles for h in cycle)

    def embedding_genus(self) -> int:
        V = len(self.graph.vertices)
        E = len(self.graph.edges)
        return math.floor((V + len(self.cycles) - E - 2) / -2)

    def to_json(self) -> dict:
        return {
            "strategy": self.strategy,
            "genus_target": self.genus_target,
            "graph": self.graph.to_json(),
            "cycles": [[[h >> 1, h & 1] for h in cycle] for cycle in self.cycles],
        }

    @classmethod
    def from_json(cls, data: dict) -> "CycleCover":
        """
        Rebuild graph and cycles.

        Raises:
            TrailError: unknown half-edge, an open cycle, or a half-edge
                that is not used exactly once
        """
        graph = Graph.from_json(data["graph"])
        e_map = {ed["id"]: k for k, ed in enumerate(data["graph"]["edges"])}
        cycles = []
        for raw in data["cycles"]:
            cycle = []
            for e, side in raw:
                if e not in e_map or side not in (0, 1):
                    raise TrailError(f"Unknown half-edge {[e, side]} in persisted cycle cover")
                cycle.append(2 * e_map[e] + side)
            cycles.append(cycle)
        cover = cls(graph=graph, cycles=cycles, genus_target=data.get("genus_target", GENUS_ANY))
        validate_cycle_cover(graph, cover.cycles)
        return cover


def validate_cycle_cover(graph: Graph, cycles: List[List[int]]) -> None:
    """
    Every cycle closes and every half-edge is used exactly once.

    Raises:
        TrailError: a cycle is open or a half-edge count is not one
    """
    for k, cycle in enumerate(cycles):
        for i, h in enumerate(cycle):
            nxt = cycle[(i + 1) % len(cycle)]
            if graph.destination(h) != graph.origin(nxt):
                raise TrailError(f"Cycle {k} breaks after half-edge {h} (position {i})")
    counts = Counter(h for cycle in cycles for h in cycle)
    bad = [h for h in range(2 * len(graph.edges)) if counts.get(h, 0) != 1]
    if bad:
        raise TrailError(f"{len(bad)} half-edges not used exactly once; "
                         f"half-edge {bad[0]} used {counts.get(bad[0], 0)} times")


def rotation_system(graph: Graph, params: CycleCoverParameters) -> Dict[int, List[int]]:
    """Outgoing half-edges of every vertex in the order the faces are traced."""
    if params.genus_target == GENUS_MAX:
        tree, kls = best_random_tree(graph, params.max_tries, np.random.default_rng(params.seed))
        rotations = vertex_rotations(graph, tree)
        augment_rotations(graph, rotations)
        logger.debug("Cycle cover rotations around a tree with %d kissing-loop half-edges", kls)
        return rotations
    return {v.id: rotation_half_edges(graph, v.id) for v in graph.vertices}


def trace_cycles(graph: Graph, rotations: Dict[int, List[int]]) -> List[List[int]]:
    """Faces of the rotation system, in order of their smallest half-edge."""
    slots = {v: {h: i for i, h in enumerate(rot)} for v, rot in rotations.items()}
    used = set()
    cycles = []
    for start in range(2 * len(graph.edges)):
        if start in used:
            continue
        cycle = []
        h = start
        while h not in used:
            used.add(h)
            cycle.append(h)
            v = graph.destination(h)
            rot = rotations[v]
            twin = Graph.twin(h)
            if twin not in slots[v]:
                raise TrailError(f"Half-edge {twin} missing from the rotation of vertex {v}")
            h = rot[(slots[v][twin] + 1) % len(rot)]
        if h != start:
            raise TrailError(f"Face from half-edge {start} runs into another face at {h}")
        cycles.append(cycle)
    return cycles


def find_cycle_cover(graph: Graph, params: Optional[CycleCoverParameters] = None) -> CycleCover:
    """
    Cover every edge twice with the faces of a rotation system.

    Raises:
        DisconnectedGraphError: graph has no edges or is disconnected
    """
    if params is None:
        params = CycleCoverParameters()
    require_connected(graph)
    graph = graph.clone()

    cycles = trace_cycles(graph, rotation_system(graph, params))
    validate_cycle_cover(graph, cycles)
    cover = CycleCover(graph=graph, cycles=cycles, genus_target=params.genus_target)
    logger.info("Cycle cover (%s): %d cycles, embedding genus %d",
                params.genus_target, len(cover), cover.embedding_genus())
    return cover
