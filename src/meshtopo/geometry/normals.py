"""
Face orientation: normals, flipping, dihedral angles and inside tests.
"""

import math
from typing import Iterable

import numpy as np

from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import DEGENERATE_AREA, Mesh
from meshtopo.core.vector import Point3, Vector3
from meshtopo.geometry.ray import RAY_EPSILON, Ray, does_intersect
from meshtopo.topology.graph import Graph

logger = get_logger(__name__)

_AXES = (
    Vector3(1.0, 0.0, 0.0),
    Vector3(-1.0, 0.0, 0.0),
    Vector3(0.0, 1.0, 0.0),
    Vector3(0.0, -1.0, 0.0),
    Vector3(0.0, 0.0, 1.0),
    Vector3(0.0, 0.0, -1.0),
)


def flip_normals(mesh: Mesh) -> Mesh:
    """
    Reverse the winding of every face.

    Vertices are untouched; each face ``(a, b, c)`` becomes ``(a, c, b)``,
    so flipping twice restores the input exactly.
    """
    return Mesh(mesh.vertices, mesh.faces[:, [0, 2, 1]])


def flip_faces(mesh: Mesh, face_ids: Iterable[int]) -> Mesh:
    """Reverse the winding of the given faces only."""
    faces = np.array(mesh.faces)
    ids = np.fromiter(face_ids, dtype=np.int64)
    faces[ids] = faces[ids][:, [0, 2, 1]]
    return Mesh(mesh.vertices, faces)


def dihedral_angles(
    mesh: Mesh,
    graph: Graph,
    degenerate_area: float = DEGENERATE_AREA,
) -> np.ndarray:
    """
    Angle in radians between the unit normals of the two faces of every
    graph edge (row order of ``graph.edges``).

    A pair involving a degenerate face gets ``pi``.
    """
    if not graph.edge_count:
        return np.empty(0)
    normals = mesh.face_normals(unit=True)
    a = normals[graph.edges[:, 0]]
    b = normals[graph.edges[:, 1]]
    cosines = np.clip(np.einsum("ij,ij->i", a, b), -1.0, 1.0)
    angles = np.arccos(cosines)

    defined = np.ones(mesh.face_count, dtype=bool)
    defined[mesh.degenerate_faces(degenerate_area)] = False
    undefined = ~(defined[graph.edges[:, 0]] & defined[graph.edges[:, 1]])
    angles[undefined] = math.pi
    return angles


def is_point_inside(point: Point3, mesh: Mesh, epsilon: float = RAY_EPSILON) -> bool:
    """
    True if rays cast from ``point`` along all six axis directions hit the
    mesh.

    Intended for closed meshes; an open mesh can report points in a
    concavity as inside.
    """
    origin = Point3.from_iterable(point)
    return all(does_intersect(Ray(origin, axis), mesh, epsilon) for axis in _AXES)


def faces_flipped_inside(mesh: Mesh, offset: float) -> set[int]:
    """
    Faces whose normal points into the mesh.

    A face is flipped when the point ``offset`` along its unit normal from
    its centroid lies inside the mesh. Degenerate faces are skipped.
    """
    flipped: set[int] = set()
    for face_id in range(mesh.face_count):
        normal = mesh.face_unit_normal(face_id)
        if normal is None:
            continue
        sample = mesh.centroid(face_id) + normal * offset
        if is_point_inside(sample, mesh):
            flipped.add(face_id)

    logger.debug("flipped_faces_scanned", faces=mesh.face_count, flipped=len(flipped))
    return flipped
