"""
Duplicate face and unreferenced vertex removal.

Two faces are duplicates when one is a rotation of the other:
``(0, 1, 2)``, ``(1, 2, 0)`` and ``(2, 0, 1)`` are the same oriented
triangle. The reversed winding ``(0, 2, 1)`` faces the other way and is a
different face.
"""

import numpy as np

from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import Mesh

logger = get_logger(__name__)


def canonical_rotations(faces: np.ndarray) -> np.ndarray:
    """
    Replace every face by its lexicographically smallest rotation.

    Winding is kept. Faces with a repeated index, such as ``(1, 2, 1)`` and
    ``(1, 1, 2)``, also share one key.
    """
    if not len(faces):
        return faces.copy()
    best = faces.copy()
    rows = np.arange(len(faces))
    for shift in ([1, 2, 0], [2, 0, 1]):
        candidate = faces[:, shift]
        differs = candidate != best
        first = np.argmax(differs, axis=1)
        smaller = differs.any(axis=1) & (candidate[rows, first] < best[rows, first])
        best[smaller] = candidate[smaller]
    return best


def remove_duplicate_faces(mesh: Mesh) -> Mesh:
    """Keep the first occurrence of every rotation-equivalent face."""
    if not mesh.face_count:
        return mesh.copy()
    keys = canonical_rotations(mesh.faces)
    _, first = np.unique(keys, axis=0, return_index=True)
    keep = np.sort(first)

    logger.debug("duplicate_faces_removed", count=mesh.face_count - len(keep))
    return Mesh(mesh.vertices, mesh.faces[keep])


def remove_unreferenced_vertices(mesh: Mesh) -> Mesh:
    """Drop vertices no face uses; indices are compacted."""
    compacted, _ = mesh.remove_unreferenced_vertices()
    return compacted


def deduplicate(mesh: Mesh) -> Mesh:
    """Remove duplicate faces, then unreferenced vertices."""
    result = remove_unreferenced_vertices(remove_duplicate_faces(mesh))
    logger.debug(
        "deduplicate_complete",
        faces_before=mesh.face_count,
        faces_after=result.face_count,
        vertices_before=mesh.vertex_count,
        vertices_after=result.vertex_count,
    )
    return result
