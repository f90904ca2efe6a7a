"""
Half-Edge Mesh Graph
====================

Arena representation of a polyhedral mesh as a multigraph.

STORAGE:
    vertices[v]  - Vertex(id=v, coords, normal, edges)
    edges[e]     - Edge(id=e, vertices=(a, b), faces, normal)
    faces[f]     - Face(id=f, edges, normal)

    All cross references are integer ids. An id is the position in the
    owning list; ids are allocated as len(list) and never reused.

HALF-EDGES:
    Edge e owns half-edges 2e and 2e+1.
        origin(2e + k) = edges[e].vertices[k]
        twin(h)        = h ^ 1
    There is no "next" pointer. Face boundary order is recovered from the
    ordered face edge list plus shared vertices.

SPLIT FACES:
    A face with exactly two edges sharing both endpoints marks an edge that
    was duplicated (split_edge). It carries no surface area but keeps the
    face walk around both endpoints intact.

GENUS:
    g = (-V + E - F) / 2 + 1
    Only meaningful for a closed orientable surface with full face data.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Optional, Iterable

from ..contract.constants import EPS_ZERO


@dataclass
class Vertex:
    """Mesh vertex. `edges` is the incident edge list (unordered)."""
    id: int
    coords: np.ndarray
    normal: np.ndarray
    edges: List[int] = field(default_factory=list)


@dataclass
class Edge:
    """Undirected edge with at most two incident faces."""
    id: int
    vertices: Tuple[int, int]
    normal: np.ndarray
    faces: List[int] = field(default_factory=list)

    @property
    def half_edges(self) -> Tuple[int, int]:
        return (2 * self.id, 2 * self.id + 1)


@dataclass
class Face:
    """Closed boundary cycle of edges (consecutive edges share a vertex)."""
    id: int
    edges: List[int]
    normal: np.ndarray


def perpendicular(direction: np.ndarray) -> np.ndarray:
    """
    Deterministic unit vector orthogonal to `direction`.

    Prefers the component of +z orthogonal to the direction, so edges of a
    flat xy-mesh get upward normals.
    """
    d = np.asarray(direction, dtype=float)
    norm = np.linalg.norm(d)
    if norm < EPS_ZERO:
        return np.array([0.0, 0.0, 1.0])
    d = d / norm
    for axis in ([0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]):
        a = np.array(axis)
        n = a - d * np.dot(a, d)
        if np.linalg.norm(n) > 0.1:
            return n / np.linalg.norm(n)
    raise ValueError(f"Cannot build a normal for direction {direction}")


class Graph:
    """
    Multigraph of a polyhedral mesh with optional face information.

    Mutated only by appending (add_* and split_edge). Routers that need to
    mutate a caller's graph work on clone().
    """

    def __init__(self):
        self.vertices: List[Vertex] = []
        self.edges: List[Edge] = []
        self.faces: List[Face] = []

    def __repr__(self):
        return f"Graph(V={len(self.vertices)}, E={len(self.edges)}, F={len(self.faces)})"

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def add_vertex(self, coords, normal=None) -> int:
        coords = np.asarray(coords, dtype=float).reshape(3)
        if normal is None:
            normal = np.array([0.0, 0.0, 1.0])
        vid = len(self.vertices)
        self.vertices.append(Vertex(vid, coords, np.asarray(normal, dtype=float).reshape(3)))
        return vid

    def add_edge(self, v1: int, v2: int, normal=None) -> int:
        """
        Add edge (v1, v2). Parallel edges are allowed, self-loops are not.

        Without a normal, the edge gets a deterministic normal orthogonal to
        its direction (see perpendicular).
        """
        if v1 == v2:
            raise ValueError(f"Self-loop at vertex {v1} is not a valid mesh edge")
        for v in (v1, v2):
            if not 0 <= v < len(self.vertices):
                raise ValueError(f"Edge endpoint {v} out of range (V={len(self.vertices)})")
        if normal is None:
            normal = perpendicular(self.vertices[v2].coords - self.vertices[v1].coords)
        eid = len(self.edges)
        self.edges.append(Edge(eid, (v1, v2), np.asarray(normal, dtype=float).reshape(3)))
        self.vertices[v1].edges.append(eid)
        self.vertices[v2].edges.append(eid)
        return eid

    def add_face(self, edge_ids: List[int], normal=None) -> int:
        """
        Add a face bounded by `edge_ids` (in boundary order).

        FAIL-FAST:
            Raises ValueError if consecutive edges do not share a vertex.
        """
        edge_ids = list(edge_ids)
        if len(edge_ids) < 2:
            raise ValueError(f"Face needs at least 2 edges, got {len(edge_ids)}")
        n = len(edge_ids)
        for k in range(n):
            a, b = edge_ids[k], edge_ids[(k + 1) % n]
            if self.common_vertex(a, b) is None:
                raise ValueError(f"Face edges {a} and {b} are consecutive but share no vertex. "
                                 f"Face edges: {edge_ids}")
        if normal is None:
            normal = self._face_normal_from_edges(edge_ids)
        fid = len(self.faces)
        self.faces.append(Face(fid, edge_ids, np.asarray(normal, dtype=float).reshape(3)))
        for e in edge_ids:
            self.edges[e].faces.append(fid)
        return fid

    def _face_normal_from_edges(self, edge_ids: List[int]) -> np.ndarray:
        cycle = self.face_vertex_cycle(edge_ids)
        if len(cycle) < 3:
            return self.edges[edge_ids[0]].normal.copy()
        return polygon_normal(np.array([self.vertices[v].coords for v in cycle]))

    # =========================================================================
    # HALF-EDGES
    # =========================================================================

    @staticmethod
    def twin(h: int) -> int:
        return h ^ 1

    @staticmethod
    def edge_of(h: int) -> int:
        return h >> 1

    def origin(self, h: int) -> int:
        return self.edges[h >> 1].vertices[h & 1]

    def destination(self, h: int) -> int:
        return self.edges[h >> 1].vertices[(h & 1) ^ 1]

    def outward_half_edge(self, e: int, v: int) -> int:
        """Half-edge of edge e leaving vertex v."""
        a, b = self.edges[e].vertices
        if a == v:
            return 2 * e
        if b == v:
            return 2 * e + 1
        raise ValueError(f"Vertex {v} is not an endpoint of edge {e} {self.edges[e].vertices}")

    def adjacent_half_edges(self, v: int) -> List[int]:
        """Outgoing half-edges of v, in incident-edge order."""
        return [self.outward_half_edge(e, v) for e in self.vertices[v].edges]

    # =========================================================================
    # ADJACENCY
    # =========================================================================

    def degree(self, v: int) -> int:
        return len(self.vertices[v].edges)

    def other_vertex(self, e: int, v: int) -> int:
        a, b = self.edges[e].vertices
        if a == v:
            return b
        if b == v:
            return a
        raise ValueError(f"Vertex {v} is not an endpoint of edge {e} {self.edges[e].vertices}")

    def common_vertex(self, e1: int, e2: int) -> Optional[int]:
        a1, b1 = self.edges[e1].vertices
        v2 = self.edges[e2].vertices
        if a1 in v2:
            return a1
        if b1 in v2:
            return b1
        return None

    def common_edges(self, v1: int, v2: int) -> List[int]:
        """Edges joining v1 and v2 (several after splitting)."""
        return [e for e in self.vertices[v1].edges if v2 in self.edges[e].vertices]

    def vertex_neighbours(self, v: int) -> List[int]:
        return [self.other_vertex(e, v) for e in self.vertices[v].edges]

    def edge_neighbours(self, e: int) -> List[int]:
        """Edges sharing an endpoint with e (e itself excluded)."""
        a, b = self.edges[e].vertices
        seen = {e}
        result = []
        for x in self.vertices[a].edges + self.vertices[b].edges:
            if x not in seen:
                seen.add(x)
                result.append(x)
        return result

    def face_neighbours(self, f: int) -> List[int]:
        """Faces sharing an edge with f."""
        result = []
        for e in self.faces[f].edges:
            for g in self.edges[e].faces:
                if g != f:
                    result.append(g)
        return result

    def edge_length(self, e: int) -> float:
        a, b = self.edges[e].vertices
        return float(np.linalg.norm(self.vertices[a].coords - self.vertices[b].coords))

    def face_vertex_cycle(self, edge_ids: Iterable[int]) -> List[int]:
        """Vertices of a face in boundary order (vertex k sits between edges k-1 and k)."""
        edge_ids = list(edge_ids)
        n = len(edge_ids)
        return [self.common_vertex(edge_ids[k - 1], edge_ids[k]) for k in range(n)]

    def is_split_face(self, f: int) -> bool:
        es = self.faces[f].edges
        if len(es) != 2:
            return False
        return set(self.edges[es[0]].vertices) == set(self.edges[es[1]].vertices)

    # =========================================================================
    # GLOBAL PROPERTIES
    # =========================================================================

    def has_face_information(self) -> bool:
        """True iff every vertex lies on at least one face."""
        on_face = set()
        for face in self.faces:
            for e in face.edges:
                on_face.update(self.edges[e].vertices)
        return len(on_face) == len(self.vertices)

    def is_eulerian(self) -> bool:
        return all(len(v.edges) % 2 == 0 for v in self.vertices)

    def odd_vertices(self) -> List[int]:
        return [v.id for v in self.vertices if len(v.edges) % 2 == 1]

    def genus(self) -> float:
        """g = (-V + E - F)/2 + 1 (closed orientable surfaces only)."""
        V, E, F = len(self.vertices), len(self.edges), len(self.faces)
        return (-V + E - F) / 2 + 1

    def is_connected(self) -> bool:
        if not self.vertices:
            return True
        seen = {0}
        stack = [0]
        while stack:
            v = stack.pop()
            for w in self.vertex_neighbours(v):
                if w not in seen:
                    seen.add(w)
                    stack.append(w)
        return len(seen) == len(self.vertices)

    # =========================================================================
    # MUTATION
    # =========================================================================

    def split_edge(self, e: int) -> int:
        """
        Duplicate edge e into a parallel pair and return the new edge id.

        The last face of e (if any) is handed over to the new edge, and a
        2-edge split face [new, e] is added with the normal of e. Both edges
        keep at most two faces, so the face walk around either endpoint
        passes old face -> e -> split face -> new edge -> handed-over face.
        """
        edge = self.edges[e]
        a, b = edge.vertices
        ne = self.add_edge(a, b, edge.normal.copy())
        if edge.faces:
            f = edge.faces.pop()
            face = self.faces[f]
            face.edges[face.edges.index(e)] = ne
            self.edges[ne].faces.append(f)
        self.add_face([ne, e], edge.normal.copy())
        return ne

    def clone(self) -> "Graph":
        """Deep copy keeping ids, coordinates and normals."""
        g = Graph()
        for v in self.vertices:
            g.vertices.append(Vertex(v.id, v.coords.copy(), v.normal.copy(), list(v.edges)))
        for e in self.edges:
            g.edges.append(Edge(e.id, tuple(e.vertices), e.normal.copy(), list(e.faces)))
        for f in self.faces:
            g.faces.append(Face(f.id, list(f.edges), f.normal.copy()))
        return g

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def to_json(self) -> Dict[str, list]:
        """
        Plain-data form:
            vertices: [{id, coords: [x,y,z], normal: [x,y,z]}]
            edges:    [{id, vertices: [a, b], normal}]
            faces:    [{id, edges: [e...], normal}]
        """
        return {
            "vertices": [{"id": v.id, "coords": v.coords.tolist(), "normal": v.normal.tolist()}
                         for v in self.vertices],
            "edges": [{"id": e.id, "vertices": list(e.vertices), "normal": e.normal.tolist()}
                      for e in self.edges],
            "faces": [{"id": f.id, "edges": list(f.edges), "normal": f.normal.tolist()}
                      for f in self.faces],
        }

    @classmethod
    def from_json(cls, data: dict) -> "Graph":
        """
        Rebuild a graph from to_json() output.

        Ids in the data may be arbitrary; they are remapped onto dense
        indices in list order. Edge endpoints and face edges refer to ids.
        """
        g = cls()
        v_map: Dict[int, int] = {}
        for vd in data["vertices"]:
            v_map[vd["id"]] = g.add_vertex(vd["coords"], vd.get("normal"))
        e_map: Dict[int, int] = {}
        for ed in data["edges"]:
            a, b = ed["vertices"]
            if a not in v_map or b not in v_map:
                raise ValueError(f"Edge {ed['id']} refers to unknown vertex ids {ed['vertices']}")
            e_map[ed["id"]] = g.add_edge(v_map[a], v_map[b], ed.get("normal"))
        for fd in data.get("faces", []):
            missing = [x for x in fd["edges"] if x not in e_map]
            if missing:
                raise ValueError(f"Face {fd['id']} refers to unknown edge ids {missing}")
            g.add_face([e_map[x] for x in fd["edges"]], fd.get("normal"))
        return g


def polygon_normal(coords: np.ndarray) -> np.ndarray:
    """
    Newell normal of a polygon given in boundary order.

    Returns the unit normal, or +z for a degenerate polygon.
    """
    n = np.zeros(3)
    k = len(coords)
    for i in range(k):
        c1 = coords[i]
        c2 = coords[(i + 1) % k]
        n += np.cross(c1, c2)
    norm = np.linalg.norm(n)
    if norm < EPS_ZERO:
        return np.array([0.0, 0.0, 1.0])
    return n / norm
