"""
Adapter to the polygon triangulation collaborator.

Planar 3D loops are projected into a 2D frame on their plane and handed to
shapely's constrained Delaunay triangulation (GEOS). The resulting triangle
corners are matched back to the input loop vertices, so the output is a
list of index triples into ``outer + holes[0] + holes[1] + ...``.

Any triangulator with the same call signature can be passed to
:func:`meshtopo.editing.simplify.simplify_planar`.
"""

from typing import Optional, Protocol, Sequence

import numpy as np
import shapely
from scipy.spatial import cKDTree
from shapely.errors import ShapelyError
from shapely.geometry import Polygon as ShapelyPolygon

from meshtopo.core.exceptions import TriangulationError
from meshtopo.core.vector import Point3, Vector3

Triangle = tuple[int, int, int]


class Triangulator(Protocol):
    """Callable that triangulates a planar polygon with holes."""

    def __call__(
        self,
        outer: Sequence[Point3],
        holes: Sequence[Sequence[Point3]] = (),
        normal: Optional[Vector3] = None,
    ) -> list[Triangle]: ...


def newell_normal(points: np.ndarray) -> np.ndarray:
    """Area-weighted normal of a closed loop (Newell's method), not normalized."""
    current = points
    following = np.roll(points, -1, axis=0)
    return np.array(
        [
            np.sum((current[:, 1] - following[:, 1]) * (current[:, 2] + following[:, 2])),
            np.sum((current[:, 2] - following[:, 2]) * (current[:, 0] + following[:, 0])),
            np.sum((current[:, 0] - following[:, 0]) * (current[:, 1] + following[:, 1])),
        ]
    )


def plane_frame(normal: Vector3) -> tuple[np.ndarray, np.ndarray]:
    """Orthonormal in-plane axes ``(u, v)`` with ``u x v`` along ``normal``."""
    unit = normal.normalized()
    if unit is None:
        raise TriangulationError("Cannot build a plane frame from a zero normal")
    u = unit.any_perpendicular()
    v = unit.cross(u)
    return u.to_array(), v.to_array()


def project_to_plane(points: np.ndarray, normal: Vector3) -> np.ndarray:
    """``(k, 3)`` points to ``(k, 2)`` coordinates in the plane frame."""
    u, v = plane_frame(normal)
    relative = points - points[0]
    return np.stack([relative @ u, relative @ v], axis=1)


def triangulate_polygon(
    outer: Sequence[Point3],
    holes: Sequence[Sequence[Point3]] = (),
    normal: Optional[Vector3] = None,
    tolerance: float = 1e-9,
) -> list[Triangle]:
    """
    Triangulate a planar polygon with holes.

    Args:
        outer: Outer loop, not closed (first point not repeated).
        holes: Inner loops, same convention.
        normal: Plane normal; computed from the outer loop if omitted.
        tolerance: Distance within which a triangle corner must match an
            input vertex.

    Returns:
        Triangles as index triples into the concatenated loops. Triangles
        are wound counter-clockwise about ``normal``.

    Raises:
        TriangulationError: If the polygon is invalid or the triangulation
            introduces points that are not input vertices.
    """
    loops = [np.asarray(outer, dtype=float).reshape(-1, 3)]
    loops += [np.asarray(h, dtype=float).reshape(-1, 3) for h in holes]
    if len(loops[0]) < 3 or any(len(loop) < 3 for loop in loops[1:]):
        raise TriangulationError(
            "Polygon loops need at least 3 points",
            details={"sizes": [len(loop) for loop in loops]},
        )

    points = np.concatenate(loops)
    if normal is None:
        normal = Vector3.from_iterable(newell_normal(loops[0]))
    planar = project_to_plane(points, normal)

    offsets = np.cumsum([0] + [len(loop) for loop in loops])
    rings = [planar[offsets[i] : offsets[i + 1]] for i in range(len(loops))]

    try:
        polygon = ShapelyPolygon(rings[0], [ring for ring in rings[1:]])
        if not polygon.is_valid:
            raise TriangulationError(
                "Polygon is not valid",
                details={"reason": shapely.is_valid_reason(polygon)},
            )
        result = shapely.constrained_delaunay_triangles(polygon)
    except ShapelyError as e:
        raise TriangulationError(f"Triangulation failed: {e}") from e

    tree = cKDTree(planar)
    triangles: list[Triangle] = []
    for tri in result.geoms:
        corners = np.asarray(tri.exterior.coords)[:3]
        distances, indices = tree.query(corners)
        if np.any(distances > tolerance):
            raise TriangulationError(
                "Triangulation introduced points that are not polygon vertices",
                details={"max_distance": float(distances.max())},
            )
        a, b, c = (int(i) for i in indices)
        # Counter-clockwise in the plane frame means along +normal
        pa, pb, pc = planar[a], planar[b], planar[c]
        signed = (pb[0] - pa[0]) * (pc[1] - pa[1]) - (pb[1] - pa[1]) * (pc[0] - pa[0])
        triangles.append((a, b, c) if signed > 0 else (a, c, b))

    return triangles
