"""
Topology analysis of a mesh snapshot.

The analyzer copies nothing but keeps references to the (immutable) buffers
the mesh held at construction time, together with the mesh revision. If the
mesh is mutated afterwards the analyzer still answers consistently for the
old snapshot, and ``is_stale`` reports that it no longer describes the mesh.
Build a new analyzer (``mesh.topology()``) after every mutation.
"""

from collections import defaultdict
from itertools import combinations

import numpy as np

from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import Mesh
from meshtopo.topology.edges import Edge, EdgeKind, face_edge_table
from meshtopo.topology.graph import Graph

logger = get_logger(__name__)


class TopologyAnalyzer:
    """
    Edge classification, face adjacency and connectivity for a mesh.

    Non-manifold edges connect all their faces pairwise in the adjacency
    graph (clique policy). None of the queries raise on an empty mesh.

    Example:
        >>> analyzer = TopologyAnalyzer(mesh)
        >>> analyzer.non_manifold_edges()
        set()
        >>> analyzer.is_connected()
        True
    """

    def __init__(self, mesh: Mesh) -> None:
        self._mesh = mesh
        self._revision = mesh.revision
        self._vertices = mesh.vertices
        self._faces = mesh.faces

        unique_edges, entry_faces, entry_edges = face_edge_table(self._faces)
        self._edge_array = unique_edges
        self._entry_faces = entry_faces
        self._entry_edges = entry_edges
        self._multiplicity = np.bincount(entry_edges, minlength=len(unique_edges))

        logger.debug(
            "topology_built",
            faces=len(self._faces),
            edges=len(unique_edges),
            revision=self._revision,
        )

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def is_stale(self) -> bool:
        """True once the source mesh has been mutated after this analysis."""
        return self._mesh.revision != self._revision

    @property
    def face_count(self) -> int:
        return len(self._faces)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    @property
    def edge_array(self) -> np.ndarray:
        """``(e, 2)`` sorted unique edges."""
        return self._edge_array

    @property
    def multiplicities(self) -> np.ndarray:
        """Face count per row of ``edge_array``."""
        return self._multiplicity

    def edges(self) -> set[Edge]:
        return {Edge(int(a), int(b)) for a, b in self._edge_array}

    def edge_faces(self) -> dict[Edge, tuple[int, ...]]:
        """Distinct faces referencing each edge, ascending."""
        grouped: dict[int, list[int]] = defaultdict(list)
        for face_id, edge_id in zip(self._entry_faces.tolist(), self._entry_edges.tolist()):
            grouped[edge_id].append(face_id)
        return {
            Edge(int(self._edge_array[e, 0]), int(self._edge_array[e, 1])): tuple(sorted(fs))
            for e, fs in grouped.items()
        }

    def multiplicity(self, edge: Edge) -> int:
        """Number of faces sharing ``edge``; 0 if it is not an edge of the mesh."""
        edge = Edge.of(*edge)
        if not len(self._edge_array):
            return 0
        hit = np.flatnonzero(
            (self._edge_array[:, 0] == edge.low) & (self._edge_array[:, 1] == edge.high)
        )
        return int(self._multiplicity[hit[0]]) if hit.size else 0

    def classify_edges(self) -> dict[Edge, EdgeKind]:
        return {
            Edge(int(a), int(b)): EdgeKind.from_multiplicity(int(m))
            for (a, b), m in zip(self._edge_array, self._multiplicity)
        }

    def _edges_where(self, mask: np.ndarray) -> set[Edge]:
        return {Edge(int(a), int(b)) for a, b in self._edge_array[mask]}

    def boundary_edges(self) -> set[Edge]:
        return self._edges_where(self._multiplicity == 1)

    def manifold_edges(self) -> set[Edge]:
        return self._edges_where(self._multiplicity == 2)

    def non_manifold_edges(self) -> set[Edge]:
        return self._edges_where(self._multiplicity >= 3)

    def is_manifold(self) -> bool:
        return not bool(np.any(self._multiplicity >= 3))

    def is_closed(self) -> bool:
        """Non-empty and every edge shared by exactly two faces."""
        return bool(len(self._multiplicity)) and bool(np.all(self._multiplicity == 2))

    def euler_characteristic(self) -> int:
        """``V - E + F`` counting only referenced vertices."""
        referenced = len(np.unique(self._faces)) if len(self._faces) else 0
        return referenced - len(self._edge_array) + len(self._faces)

    # ------------------------------------------------------------------
    # Adjacency / connectivity
    # ------------------------------------------------------------------

    def adjacency_graph(self) -> Graph:
        """
        Face adjacency graph: one node per face, one edge per pair of faces
        sharing at least one mesh edge.
        """
        pairs = []
        manifold = self._multiplicity[self._entry_edges] == 2
        if np.any(manifold):
            # Entries are sorted by face, so group manifold entries by edge
            m_edges = self._entry_edges[manifold]
            m_faces = self._entry_faces[manifold]
            order = np.argsort(m_edges, kind="stable")
            pairs.append(m_faces[order].reshape(-1, 2))

        crowded = self._multiplicity[self._entry_edges] >= 3
        if np.any(crowded):
            grouped: dict[int, list[int]] = defaultdict(list)
            for face_id, edge_id in zip(
                self._entry_faces[crowded].tolist(), self._entry_edges[crowded].tolist()
            ):
                grouped[edge_id].append(face_id)
            clique = [pair for faces in grouped.values() for pair in combinations(faces, 2)]
            pairs.append(np.asarray(clique, dtype=np.int64).reshape(-1, 2))

        edges = np.concatenate(pairs) if pairs else None
        return Graph(len(self._faces), edges)

    def is_connected(self) -> bool:
        """Single connected component of faces; an empty mesh is connected."""
        return self.adjacency_graph().is_connected()

    def shells(self) -> list[np.ndarray]:
        """Face ids of each connected shell, ordered by lowest face id."""
        return self.adjacency_graph().connected_components()
