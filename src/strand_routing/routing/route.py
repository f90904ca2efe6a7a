"""
Route
=====

Output of every routing strategy: a closed walk over half-edges plus the
edge classification the strand layer needs.

TRAIL CONVENTION:
    trail[i] is a half-edge id. The walk leaves origin(trail[i]) and arrives
    at exit_vertex(i), which is the origin of trail[i+1] (cyclically).

    exit_vertex(i) = destination(trail[i])   normal traversal
                   = origin(trail[i])        kissing-loop stub

    A stub is a co-tree traversal that leaves a vertex and returns to it
    (the loop "kisses" its partner from the other end). Only double-cover
    strategies produce stubs.

AUXILIARY SETS:
    tree           - spanning-tree edge ids (ST, XT)
    kissing_loops  - stub half-edge ids (ST: every co-tree half-edge)

PERSISTENCE:
    {"strategy", "graph", "trail": [[edge, side]...], "tree": [...],
     "kissing_loops": [[edge, side]...]}
    side ∈ {0, 1} selects the half-edge of the edge (origin = vertices[side]).
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple

from ..contract.constants import STRATEGY_ATRAIL, STRATEGY_EULER
from ..contract.errors import TrailError
from ..graph.ordering import topological_half_edges
from ..graph.structures import Graph

SINGLE_COVER_STRATEGIES = (STRATEGY_ATRAIL, STRATEGY_EULER)


@dataclass
class Route:
    """Closed half-edge walk over `graph` produced by `strategy`."""
    graph: Graph
    trail: List[int]
    strategy: str
    tree: List[int] = field(default_factory=list)
    kissing_loops: FrozenSet[int] = frozenset()

    def __len__(self):
        return len(self.trail)

    # =========================================================================
    # WALK
    # =========================================================================

    def is_stub(self, h: int) -> bool:
        return h in self.kissing_loops

    def exit_vertex(self, i: int) -> int:
        h = self.trail[i]
        return self.graph.origin(h) if self.is_stub(h) else self.graph.destination(h)

    def vertex_sequence(self) -> List[int]:
        """Walk positions: start vertex followed by the exit of every step."""
        if not self.trail:
            return []
        return [self.graph.origin(self.trail[0])] + [self.exit_vertex(i) for i in range(len(self.trail))]

    def is_continuous(self) -> bool:
        """Every step starts where the previous one ended."""
        return all(self.exit_vertex(i) == self.graph.origin(self.trail[i + 1])
                   for i in range(len(self.trail) - 1))

    def is_closed(self) -> bool:
        """The walk ends where it started."""
        if not self.trail:
            return False
        return self.exit_vertex(len(self.trail) - 1) == self.graph.origin(self.trail[0])

    def is_directed(self) -> bool:
        """No step is followed by a step from the same vertex, unless it is a stub."""
        g = self.graph
        for i in range(len(self.trail) - 1):
            a, b = self.trail[i], self.trail[i + 1]
            if a == b:
                return False
            if not self.is_stub(a) and g.origin(a) == g.origin(b):
                return False
        return True

    # =========================================================================
    # COVERAGE
    # =========================================================================

    def edge_visits(self) -> Counter:
        return Counter(Graph.edge_of(h) for h in self.trail)

    def visit_counts(self) -> Dict[int, int]:
        """
        Traversals of each edge's vertex pair.

        After Eulerization a mesh edge exists as several parallel copies;
        this is how often the strand runs along the original edge.
        """
        pair_visits = Counter()
        for h in self.trail:
            pair_visits[frozenset(self.graph.edges[Graph.edge_of(h)].vertices)] += 1
        return {e.id: pair_visits[frozenset(e.vertices)] for e in self.graph.edges}

    def crossing_vertices(self) -> List[Tuple[int, int]]:
        """
        (trail position, vertex) of every crossing passage.

        Passing v from a to b is non-crossing iff twin(a) and b are
        neighbours in the topological rotation of v.
        """
        g = self.graph
        rotations = {}
        crossings = []
        n = len(self.trail)
        for i in range(n):
            a, b = self.trail[i], self.trail[(i + 1) % n]
            v = g.destination(a)
            if v not in rotations:
                rotations[v] = topological_half_edges(g, v)
            order = rotations[v]
            deg = len(order)
            diff = (order.index(Graph.twin(a)) - order.index(b)) % deg
            if diff not in (1, deg - 1):
                crossings.append((i, v))
        return crossings

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def trail_pairs(self) -> List[List[int]]:
        return [[h >> 1, h & 1] for h in self.trail]

    def to_json(self) -> dict:
        return {
            "strategy": self.strategy,
            "graph": self.graph.to_json(),
            "trail": self.trail_pairs(),
            "tree": list(self.tree),
            "kissing_loops": sorted([h >> 1, h & 1] for h in self.kissing_loops),
        }

    @classmethod
    def from_json(cls, data: dict) -> "Route":
        """
        Rebuild graph and trail. Edge ids are remapped by list position the
        same way Graph.from_json remaps them.

        Raises:
            TrailError: unknown half-edge, a walk that does not close, or a
                cover that does not match the strategy (once or twice per edge)
        """
        graph = Graph.from_json(data["graph"])
        e_map = {ed["id"]: k for k, ed in enumerate(data["graph"]["edges"])}

        def half_edge(pair):
            e, side = pair
            if e not in e_map or side not in (0, 1):
                raise TrailError(f"Unknown half-edge {pair} in persisted route")
            return 2 * e_map[e] + side

        route = cls(
            graph=graph,
            trail=[half_edge(p) for p in data["trail"]],
            strategy=data["strategy"],
            tree=[e_map[e] for e in data.get("tree", [])],
            kissing_loops=frozenset(half_edge(p) for p in data.get("kissing_loops", [])),
        )
        if not route.is_continuous() or not route.is_closed():
            raise TrailError(f"Persisted {route.strategy} trail is not a closed walk")
        if route.strategy in SINGLE_COVER_STRATEGIES:
            validate_single_cover(graph, route.trail)
        else:
            validate_double_cover(graph, route.trail)
        return route


# =============================================================================
# COVER CHECKS
# =============================================================================

def validate_single_cover(graph: Graph, trail: List[int]) -> None:
    """
    Every edge exactly once.

    Raises:
        TrailError: an edge repeats or is missing
    """
    counts = Counter(Graph.edge_of(h) for h in trail)
    repeated = [e for e, c in counts.items() if c > 1]
    if repeated:
        raise TrailError(f"Edge {repeated[0]} visited {counts[repeated[0]]} times "
                         f"({len(repeated)} repeated edges)")
    if len(counts) != len(graph.edges):
        missing = sorted(set(range(len(graph.edges))) - set(counts))
        raise TrailError(f"Trail visits {len(counts)} of {len(graph.edges)} edges; "
                         f"first missing edge {missing[0]}")


def validate_double_cover(graph: Graph, trail: List[int]) -> None:
    """
    Every edge exactly twice.

    Raises:
        TrailError: some edge is visited a different number of times
    """
    counts = Counter(Graph.edge_of(h) for h in trail)
    bad = [e.id for e in graph.edges if counts.get(e.id, 0) != 2]
    if bad:
        raise TrailError(f"{len(bad)} edges not visited exactly twice; "
                         f"edge {bad[0]} visited {counts.get(bad[0], 0)} times")

