"""
Feature-preserving decomposition of a mesh into smooth shells.
"""

import math

import numpy as np

from meshtopo.core.exceptions import ParameterError
from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import DEGENERATE_AREA, Mesh
from meshtopo.geometry.normals import dihedral_angles
from meshtopo.topology.analyzer import TopologyAnalyzer

logger = get_logger(__name__)


def smooth_shells(
    mesh: Mesh,
    angle_degrees: float,
    degenerate_area: float = DEGENERATE_AREA,
) -> list[np.ndarray]:
    """
    Face ids of every smooth shell.

    Adjacent faces stay together only while the angle between their normals
    is strictly below the threshold; an angle ``>= angle_degrees`` marks a
    hard edge. Degenerate faces are hard on every side.

    Returns:
        One ascending face id array per shell, ordered by lowest face id.

    Raises:
        ParameterError: If the threshold is outside ``(0, 180]``.
    """
    if not (0.0 < angle_degrees <= 180.0):
        raise ParameterError(
            "Split angle must be in (0, 180] degrees",
            details={"angle": angle_degrees},
        )

    graph = TopologyAnalyzer(mesh).adjacency_graph()
    angles = dihedral_angles(mesh, graph, degenerate_area)
    threshold = math.radians(angle_degrees)
    # Degenerate pairs carry pi and so stay hard at every threshold
    soft = angles < threshold

    return graph.filtered(soft).connected_components()


def split_by_angle(
    mesh: Mesh,
    angle_degrees: float,
    degenerate_area: float = DEGENERATE_AREA,
) -> list[Mesh]:
    """
    Split a mesh along hard edges.

    Each shell becomes an independent mesh: its faces keep their original
    order and its vertices are compacted, so vertices on a hard edge are
    duplicated into every shell that touches it.

    Args:
        mesh: Validated input mesh.
        angle_degrees: Dihedral angle at or above which an edge is hard.
        degenerate_area: Area below which a face is degenerate.

    Returns:
        One Mesh per shell, ordered by the lowest original face id.
    """
    shells = smooth_shells(mesh, angle_degrees, degenerate_area)
    parts = [mesh.submesh(face_ids) for face_ids in shells]
    logger.debug("split_complete", angle=angle_degrees, faces=mesh.face_count, shells=len(parts))
    return parts
