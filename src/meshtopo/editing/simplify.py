"""
Planar simplification: merge coplanar neighbouring faces and retriangulate.

Faces are grouped into planar regions through the adjacency graph, keeping
only graph edges whose unit normals differ by no more than the angular
tolerance. Each region's boundary is traced from its boundary half-edges
and handed to the triangulation collaborator as an outer loop plus holes.
Boundary vertices keep their original indices, so the surface outline and
any neighbouring faces are untouched; interior vertices of a region are
dropped.

A region is left as it was whenever it cannot be retriangulated safely
(non-manifold or pinched boundary, invalid polygon, collaborator failure,
area mismatch) or when retriangulation would not reduce its face count.
"""

import math
from collections import Counter
from typing import Optional

import numpy as np

from meshtopo.core.exceptions import ParameterError, TriangulationError
from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import DEGENERATE_AREA, Mesh
from meshtopo.core.vector import Vector3
from meshtopo.editing.triangulation import Triangulator, triangulate_polygon
from meshtopo.geometry.normals import dihedral_angles
from meshtopo.topology.analyzer import TopologyAnalyzer

logger = get_logger(__name__)


class _RegionRejected(Exception):
    """A region that must be kept as is."""


def planar_regions(
    mesh: Mesh,
    angle_tolerance_degrees: float,
    degenerate_area: float = DEGENERATE_AREA,
) -> list[np.ndarray]:
    """
    Face ids of every coplanar region (faces joined across shared edges
    whose normals differ by ``<= angle_tolerance_degrees``).
    """
    graph = TopologyAnalyzer(mesh).adjacency_graph()
    angles = dihedral_angles(mesh, graph, degenerate_area)
    coplanar = angles <= math.radians(angle_tolerance_degrees)
    return graph.filtered(coplanar).connected_components()


def boundary_loops(faces: np.ndarray) -> list[list[int]]:
    """
    Closed boundary loops of a set of faces, following face winding.

    Raises:
        _RegionRejected: On non-manifold edges, pinch vertices or open chains.
    """
    undirected = Counter()
    for a, b, c in faces.tolist():
        for u, v in ((a, b), (b, c), (c, a)):
            undirected[(min(u, v), max(u, v))] += 1
    if any(count > 2 for count in undirected.values()):
        raise _RegionRejected("non-manifold edge")

    successor: dict[int, int] = {}
    for a, b, c in faces.tolist():
        for u, v in ((a, b), (b, c), (c, a)):
            if undirected[(min(u, v), max(u, v))] != 1:
                continue
            if u in successor:
                raise _RegionRejected("pinched boundary")
            successor[u] = v

    loops: list[list[int]] = []
    remaining = dict(successor)
    while remaining:
        start = min(remaining)
        loop = [start]
        current = remaining.pop(start)
        while current != start:
            if current not in remaining:
                raise _RegionRejected("open boundary chain")
            loop.append(current)
            current = remaining.pop(current)
        loops.append(loop)
    return loops


def _loop_area(points: np.ndarray, normal: np.ndarray) -> float:
    """Signed area of a loop about ``normal``."""
    following = np.roll(points, -1, axis=0)
    return 0.5 * float(np.cross(points, following).sum(axis=0) @ normal)


def _retriangulate(
    mesh: Mesh,
    face_ids: np.ndarray,
    triangulator: Triangulator,
    area_tolerance: float,
) -> np.ndarray:
    faces = mesh.faces[face_ids]
    loops = boundary_loops(faces)
    if not loops:
        raise _RegionRejected("closed region")

    raw = mesh.face_normals()[face_ids].sum(axis=0)
    unit = Vector3.from_iterable(raw).normalized()
    if unit is None:
        raise _RegionRejected("no region normal")
    normal = unit.to_array()

    # Outer loop winds positively about the normal and encloses the most area
    areas = [_loop_area(mesh.vertices[loop], normal) for loop in loops]
    outer_at = int(np.argmax(areas))
    if areas[outer_at] <= 0:
        raise _RegionRejected("no positively wound outer loop")
    outer = loops[outer_at]
    holes = [loop for i, loop in enumerate(loops) if i != outer_at]

    flat = outer + [v for hole in holes for v in hole]
    try:
        local = triangulator(
            [mesh.vertex(v) for v in outer],
            [[mesh.vertex(v) for v in hole] for hole in holes],
            unit,
        )
    except TriangulationError as e:
        raise _RegionRejected(str(e)) from e

    triangles = np.asarray(flat, dtype=np.int64)[np.asarray(local, dtype=np.int64).reshape(-1, 3)]
    if len(triangles) >= len(face_ids):
        raise _RegionRejected("no reduction")

    before = mesh.face_areas()[face_ids].sum()
    after = Mesh(mesh.vertices, triangles).face_areas().sum()
    if abs(before - after) > max(area_tolerance * before, DEGENERATE_AREA):
        raise _RegionRejected("area mismatch")

    # Keep every new triangle facing the region normal
    normals = Mesh(mesh.vertices, triangles).face_normals()
    backwards = normals @ normal < 0
    triangles[backwards] = triangles[backwards][:, [0, 2, 1]]
    return triangles


def simplify_planar(
    mesh: Mesh,
    angle_tolerance_degrees: float = 0.01,
    triangulator: Optional[Triangulator] = None,
    degenerate_area: float = DEGENERATE_AREA,
    area_tolerance: float = 1e-9,
) -> Mesh:
    """
    Reduce the face count by retriangulating coplanar regions.

    Args:
        mesh: Validated input mesh (not modified).
        angle_tolerance_degrees: Maximum normal deviation for two adjacent
            faces to count as coplanar (``<=`` comparison).
        triangulator: Polygon triangulation collaborator; defaults to
            :func:`~meshtopo.editing.triangulation.triangulate_polygon`.
        degenerate_area: Faces below this area never join a region.
        area_tolerance: Relative area change accepted for a region. Changes
            below ``DEGENERATE_AREA`` are always accepted.

    Returns:
        New mesh. Regions appear where their first face was; unreferenced
        vertices are compacted away.

    Raises:
        ParameterError: If the tolerance is outside ``[0, 90)``.
    """
    if not (0.0 <= angle_tolerance_degrees < 90.0):
        raise ParameterError(
            "Coplanar angle tolerance must be in [0, 90) degrees",
            details={"angle": angle_tolerance_degrees},
        )
    triangulator = triangulator or triangulate_polygon

    regions = planar_regions(mesh, angle_tolerance_degrees, degenerate_area)
    replacement: dict[int, np.ndarray] = {}
    skipped: set[int] = set()
    merged_regions = 0

    for face_ids in regions:
        if len(face_ids) < 2:
            continue
        try:
            triangles = _retriangulate(mesh, face_ids, triangulator, area_tolerance)
        except _RegionRejected as reason:
            log = logger.debug if str(reason) == "no reduction" else logger.warning
            log(
                "planar_region_kept",
                first_face=int(face_ids[0]),
                faces=len(face_ids),
                reason=str(reason),
            )
            continue
        replacement[int(face_ids[0])] = triangles
        skipped.update(int(f) for f in face_ids[1:])
        merged_regions += 1

    pieces = []
    for face_id in range(mesh.face_count):
        if face_id in replacement:
            pieces.append(replacement[face_id])
        elif face_id not in skipped:
            pieces.append(mesh.faces[face_id : face_id + 1])

    faces = np.concatenate(pieces) if pieces else np.empty((0, 3), dtype=np.int64)
    result, _ = Mesh(mesh.vertices, faces).remove_unreferenced_vertices()

    logger.debug(
        "simplify_complete",
        regions=merged_regions,
        faces_before=mesh.face_count,
        faces_after=result.face_count,
    )
    return result
