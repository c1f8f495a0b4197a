"""
Ray casting against triangles and meshes.

The intersection test is Möller-Trumbore with inclusive barycentric bounds,
evaluated with numpy over all candidate triangles at once. Inclusive bounds
mean a ray through an edge shared by two faces hits both of them; the mesh
query then keeps the nearest hit and breaks distance ties by face id.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from meshtopo.core.mesh import Mesh
from meshtopo.core.vector import Point3, Vector3

#: Determinants and distances below this are treated as zero.
RAY_EPSILON = 1e-9


@dataclass(frozen=True)
class Ray:
    """Half-line ``origin + t * direction`` for ``t >= 0``."""

    origin: Point3
    direction: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", Point3.from_iterable(self.origin))
        object.__setattr__(self, "direction", Vector3.from_iterable(self.direction))

    def point_at(self, distance: float) -> Point3:
        return self.origin + self.direction * distance


@dataclass(frozen=True)
class Intersection:
    """
    A ray hit.

    Attributes:
        point: Hit location.
        distance: Ray parameter ``t`` of the hit (Euclidean distance when the
            ray direction is a unit vector).
        barycentric: Weights ``(w, u, v)`` of the triangle's first, second and
            third vertex; they sum to 1.
        face_index: Face id in the mesh, or None for a bare triangle test.
    """

    point: Point3
    distance: float
    barycentric: tuple[float, float, float]
    face_index: Optional[int] = None


def _moller_trumbore(
    origin: np.ndarray,
    direction: np.ndarray,
    triangles: np.ndarray,
    epsilon: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized ray/triangle test.

    Args:
        origin: ``(3,)`` ray origin.
        direction: ``(3,)`` ray direction.
        triangles: ``(k, 3, 3)`` triangle corners.
        epsilon: Self-hit distance. Also the parallel threshold on
            ``det`` relative to the edge and direction lengths.

    Returns:
        Tuple of (hit mask, t, u, v), each ``(k,)``.
    """
    v0 = triangles[:, 0]
    edge1 = triangles[:, 1] - v0
    edge2 = triangles[:, 2] - v0

    pvec = np.cross(direction, edge2)
    det = np.einsum("ij,ij->i", edge1, pvec)
    scale = (
        np.linalg.norm(edge1, axis=1) * np.linalg.norm(edge2, axis=1) * np.linalg.norm(direction)
    )
    # parallel or degenerate otherwise
    usable = (det != 0.0) & (np.abs(det) >= epsilon * scale)

    inv_det = np.zeros_like(det)
    inv_det[usable] = 1.0 / det[usable]

    tvec = origin - v0
    u = np.einsum("ij,ij->i", tvec, pvec) * inv_det
    qvec = np.cross(tvec, edge1)
    v = (qvec @ direction) * inv_det
    t = np.einsum("ij,ij->i", edge2, qvec) * inv_det

    hit = usable & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t >= epsilon)
    return hit, t, u, v


def _build(ray: Ray, t: float, u: float, v: float, face_index: Optional[int]) -> Intersection:
    return Intersection(
        point=ray.point_at(t),
        distance=t,
        barycentric=(1.0 - u - v, u, v),
        face_index=face_index,
    )


def ray_triangle_intersect(
    ray: Ray,
    a: Point3,
    b: Point3,
    c: Point3,
    epsilon: float = RAY_EPSILON,
) -> Optional[Intersection]:
    """
    Intersect a ray with the triangle ``abc``.

    Rays parallel to the triangle plane, hits behind the origin and hits
    closer than ``epsilon`` to the origin are all misses.

    Returns:
        The Intersection, or None on a miss.
    """
    triangle = np.array([[a, b, c]], dtype=float)
    hit, t, u, v = _moller_trumbore(ray.origin.to_array(), ray.direction.to_array(), triangle, epsilon)
    if not hit[0]:
        return None
    return _build(ray, float(t[0]), float(u[0]), float(v[0]), None)


def ray_face_intersect(
    ray: Ray,
    mesh: Mesh,
    face_id: int,
    epsilon: float = RAY_EPSILON,
) -> Optional[Intersection]:
    """Intersect a ray with a single face of ``mesh``."""
    triangle = mesh.vertices[mesh.faces[[face_id]]]
    hit, t, u, v = _moller_trumbore(ray.origin.to_array(), ray.direction.to_array(), triangle, epsilon)
    if not hit[0]:
        return None
    return _build(ray, float(t[0]), float(u[0]), float(v[0]), int(face_id))


def _mesh_hits(ray: Ray, mesh: Mesh, epsilon: float):
    if mesh.is_empty():
        return None
    hit, t, u, v = _moller_trumbore(
        ray.origin.to_array(),
        ray.direction.to_array(),
        mesh.vertices[mesh.faces],
        epsilon,
    )
    ids = np.flatnonzero(hit)
    if not ids.size:
        return None
    return ids, t[ids], u[ids], v[ids]


def ray_mesh_intersect(
    ray: Ray,
    mesh: Mesh,
    epsilon: float = RAY_EPSILON,
) -> Optional[Intersection]:
    """
    Nearest hit of a ray on a mesh.

    Hits whose distance is within ``epsilon`` of the minimum are ties; the
    lowest face id wins.

    Returns:
        The nearest Intersection, or None if no face is hit.
    """
    found = _mesh_hits(ray, mesh, epsilon)
    if found is None:
        return None
    ids, t, u, v = found
    nearest = t.min()
    # ids ascend, so the first candidate is the lowest face id
    k = int(np.flatnonzero(t <= nearest + epsilon)[0])
    return _build(ray, float(t[k]), float(u[k]), float(v[k]), int(ids[k]))


def ray_mesh_intersections(
    ray: Ray,
    mesh: Mesh,
    epsilon: float = RAY_EPSILON,
) -> list[Intersection]:
    """All hits of a ray on a mesh, sorted by distance then face id."""
    found = _mesh_hits(ray, mesh, epsilon)
    if found is None:
        return []
    ids, t, u, v = found
    order = np.lexsort((ids, t))
    return [_build(ray, float(t[k]), float(u[k]), float(v[k]), int(ids[k])) for k in order]


def does_intersect(ray: Ray, mesh: Mesh, epsilon: float = RAY_EPSILON) -> bool:
    return _mesh_hits(ray, mesh, epsilon) is not None
