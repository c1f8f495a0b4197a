"""
Tolerance-based vertex welding.

Vertices closer than the tolerance are linked; linked vertices form
clusters transitively (connected components of the "within tolerance"
graph), so clusters are maximal and a second weld with the same tolerance
changes nothing. Each cluster is represented by its first-seen (lowest
index) vertex, whose position is kept as is.
"""

from dataclasses import dataclass

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from meshtopo.core.exceptions import ParameterError
from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import Mesh

logger = get_logger(__name__)


@dataclass
class WeldResult:
    """
    Output of :func:`weld`.

    Attributes:
        mesh: Welded mesh with compacted vertex indices.
        vertex_map: ``vertex_map[old]`` is the new vertex index, or -1 when
            the vertex (or its cluster) is no longer referenced.
        merged_vertices: Vertices folded into another representative.
        removed_faces: Faces dropped because they collapsed.
    """

    mesh: Mesh
    vertex_map: np.ndarray
    merged_vertices: int = 0
    removed_faces: int = 0


def cluster_representatives(vertices: np.ndarray, tolerance: float) -> np.ndarray:
    """
    Representative index for every vertex.

    Two vertices are linked when their distance is ``<= tolerance``; the
    representative of a cluster is its lowest vertex index.

    Returns:
        ``(n,)`` array mapping each vertex to its representative.
    """
    n = len(vertices)
    if n == 0:
        return np.empty(0, dtype=np.int64)

    pairs = cKDTree(vertices).query_pairs(r=tolerance, output_type="ndarray")
    if not len(pairs):
        return np.arange(n, dtype=np.int64)

    data = np.ones(len(pairs), dtype=np.int8)
    graph = coo_matrix((data, (pairs[:, 0], pairs[:, 1])), shape=(n, n))
    n_clusters, labels = connected_components(graph, directed=False)

    representative = np.full(n_clusters, n, dtype=np.int64)
    np.minimum.at(representative, labels, np.arange(n, dtype=np.int64))
    return representative[labels]


def weld(mesh: Mesh, tolerance: float) -> WeldResult:
    """
    Merge vertices within ``tolerance`` of each other.

    Faces are rewritten to reference cluster representatives; faces that
    end up with a repeated index are dropped; vertices no face references
    are removed and the rest renumbered densely in their original order.

    Args:
        mesh: Validated input mesh (not modified).
        tolerance: Euclidean merge distance, ``>= 0``. Zero merges only
            vertices at identical positions.

    Returns:
        WeldResult with the new mesh and old-to-new vertex map.

    Raises:
        ParameterError: If tolerance is negative or not finite.
    """
    if not np.isfinite(tolerance) or tolerance < 0:
        raise ParameterError(
            "Weld tolerance must be a finite number >= 0",
            details={"tolerance": tolerance},
        )

    representative = cluster_representatives(mesh.vertices, tolerance)
    merged = int(np.count_nonzero(representative != np.arange(len(representative))))

    faces = representative[mesh.faces] if mesh.face_count else mesh.faces
    collapsed = (
        (faces[:, 0] == faces[:, 1]) | (faces[:, 1] == faces[:, 2]) | (faces[:, 0] == faces[:, 2])
    )
    faces = faces[~collapsed]

    welded, compact_map = Mesh(mesh.vertices, faces).remove_unreferenced_vertices()
    vertex_map = compact_map[representative] if len(representative) else compact_map

    removed = int(np.count_nonzero(collapsed))
    logger.debug(
        "weld_complete",
        tolerance=tolerance,
        vertices_before=mesh.vertex_count,
        vertices_after=welded.vertex_count,
        merged=merged,
        removed_faces=removed,
    )
    return WeldResult(
        mesh=welded,
        vertex_map=vertex_map,
        merged_vertices=merged,
        removed_faces=removed,
    )
