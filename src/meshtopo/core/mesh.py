"""
Triangle mesh representation.

A Mesh is a vertex buffer (``(n, 3)`` float64) plus a face buffer
(``(m, 3)`` int64). Both buffers are exposed as read-only numpy views; all
mutation goes through Mesh methods, each of which swaps in new buffers and
bumps ``revision``. Derived topology records the revision it was built from
(see :class:`meshtopo.topology.TopologyAnalyzer`).

Example:
    >>> mesh = Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])
    >>> mesh.validate()
    >>> mesh.face_normal(0)
    Vector3(x=0.0, y=0.0, z=1.0)
"""

from typing import Any, Iterable, Optional, Sequence

import numpy as np

from meshtopo.core.exceptions import (
    InvalidGeometryError,
    InvalidReferenceError,
    MeshShapeError,
)
from meshtopo.core.vector import Point3, Vector3

#: Faces with an area below this are degenerate.
DEGENERATE_AREA = 1e-12


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def _as_vertex_buffer(vertices: Any) -> np.ndarray:
    buffer = np.array(vertices, dtype=np.float64, copy=True)
    if buffer.size == 0:
        return _frozen(buffer.reshape(0, 3))
    if buffer.ndim != 2 or buffer.shape[1] != 3:
        raise MeshShapeError(
            "Vertex buffer must have shape (n, 3)",
            details={"shape": list(buffer.shape)},
        )
    return _frozen(buffer)


def _as_face_buffer(faces: Any) -> np.ndarray:
    raw = np.array(faces, copy=True)
    if raw.size == 0:
        return _frozen(np.empty((0, 3), dtype=np.int64))
    if raw.ndim != 2 or raw.shape[1] != 3:
        raise MeshShapeError(
            "Face buffer must have shape (m, 3)",
            details={"shape": list(raw.shape)},
        )
    if not np.issubdtype(raw.dtype, np.integer):
        if not np.all(np.equal(np.mod(raw, 1), 0)):
            raise MeshShapeError("Face indices must be integers")
    return _frozen(raw.astype(np.int64))


class Mesh:
    """
    Indexed triangle mesh.

    No manifoldness is required. Faces may be degenerate; analyses classify
    rather than reject them. Index ranges are only checked by ``validate``.

    Attributes:
        vertices: Read-only ``(n, 3)`` vertex coordinates.
        faces: Read-only ``(m, 3)`` vertex indices, counter-clockwise winding
            seen from the side the normal points to.
        revision: Incremented on every mutation.
    """

    def __init__(self, vertices: Any = (), faces: Any = ()) -> None:
        self._vertices = _as_vertex_buffer(vertices)
        self._faces = _as_face_buffer(faces)
        self._revision = 0

    # ------------------------------------------------------------------
    # Construction / exchange
    # ------------------------------------------------------------------

    @classmethod
    def from_flat(cls, coordinates: Sequence[float], indices: Sequence[int]) -> "Mesh":
        """
        Build a mesh from flat ``[x0, y0, z0, x1, ...]`` coordinates and
        ``[i0, j0, k0, i1, ...]`` indices.

        Raises:
            MeshShapeError: If the lengths are not multiples of three.
        """
        if len(coordinates) % 3 or len(indices) % 3:
            raise MeshShapeError(
                "Flat buffers must have lengths divisible by 3",
                details={"coordinates": len(coordinates), "indices": len(indices)},
            )
        return cls(
            np.asarray(coordinates, dtype=np.float64).reshape(-1, 3),
            np.asarray(indices, dtype=np.int64).reshape(-1, 3),
        )

    def to_flat(self) -> tuple[list[float], list[int]]:
        return self._vertices.ravel().tolist(), self._faces.ravel().tolist()

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "Mesh":
        """Build a mesh from ``{"vertices": [...], "faces": [...]}``."""
        try:
            return cls(data["vertices"], data["faces"])
        except KeyError as e:
            raise MeshShapeError(f"Mesh data is missing key {e}") from e

    def to_data(self) -> dict[str, list]:
        return {"vertices": self._vertices.tolist(), "faces": self._faces.tolist()}

    def copy(self) -> "Mesh":
        return Mesh(self._vertices, self._faces)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def vertices(self) -> np.ndarray:
        return self._vertices

    @property
    def faces(self) -> np.ndarray:
        return self._faces

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def face_count(self) -> int:
        return len(self._faces)

    def is_empty(self) -> bool:
        return self.face_count == 0

    def set_vertices(self, vertices: Any) -> None:
        self._vertices = _as_vertex_buffer(vertices)
        self._revision += 1

    def set_faces(self, faces: Any) -> None:
        self._faces = _as_face_buffer(faces)
        self._revision += 1

    def flip_in_place(self) -> None:
        """Reverse the winding of every face."""
        self.set_faces(self._faces[:, [0, 2, 1]])

    def topology(self):
        """Build a fresh :class:`~meshtopo.topology.TopologyAnalyzer` for the current state."""
        from meshtopo.topology.analyzer import TopologyAnalyzer

        return TopologyAnalyzer(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mesh):
            return NotImplemented
        return (
            self._vertices.shape == other._vertices.shape
            and self._faces.shape == other._faces.shape
            and bool(np.array_equal(self._vertices, other._vertices))
            and bool(np.array_equal(self._faces, other._faces))
        )

    __hash__ = None  # type: ignore[assignment]

    def eq_with_tolerance(self, other: "Mesh", tolerance: float) -> bool:
        """Faces equal exactly, vertices equal within ``tolerance`` per coordinate."""
        if self._vertices.shape != other._vertices.shape:
            return False
        if not np.array_equal(self._faces, other._faces):
            return False
        return bool(np.all(np.abs(self._vertices - other._vertices) <= tolerance))

    def __repr__(self) -> str:
        return f"Mesh(vertices={self.vertex_count}, faces={self.face_count})"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Check that every face index is in range and coordinates are finite.

        Raises:
            InvalidReferenceError: If a face references a missing vertex.
            InvalidGeometryError: If any coordinate is NaN or infinite.
        """
        if self.face_count:
            bad = np.flatnonzero(
                np.any((self._faces < 0) | (self._faces >= self.vertex_count), axis=1)
            )
            if bad.size:
                face_ids = bad.tolist()
                raise InvalidReferenceError(
                    f"{len(face_ids)} face(s) reference vertices outside 0..{self.vertex_count - 1}",
                    face_ids=face_ids,
                    details={
                        "face_ids": face_ids[:10],
                        "vertex_count": self.vertex_count,
                        "first_face": self._faces[face_ids[0]].tolist(),
                    },
                )

        non_finite = np.flatnonzero(~np.all(np.isfinite(self._vertices), axis=1))
        if non_finite.size:
            raise InvalidGeometryError(
                "Vertex coordinates must be finite",
                details={"vertex_ids": non_finite[:10].tolist()},
            )

    def is_valid(self) -> bool:
        try:
            self.validate()
        except (InvalidReferenceError, InvalidGeometryError):
            return False
        return True

    # ------------------------------------------------------------------
    # Per-face geometry
    # ------------------------------------------------------------------

    def vertex(self, index: int) -> Point3:
        return Point3.from_iterable(self._vertices[index])

    def triangle(self, face_id: int) -> tuple[Point3, Point3, Point3]:
        a, b, c = (self.vertex(i) for i in self._faces[face_id])
        return a, b, c

    def face_normal(self, face_id: int, unit: bool = False) -> Vector3:
        """
        Normal of a face by the right-hand rule: ``(v1 - v0) x (v2 - v0)``.

        The raw normal has length twice the face area. With ``unit`` every
        face ``is_degenerate`` reports gives the zero vector; use
        ``face_unit_normal`` when a direction is required.
        """
        normal = Vector3.from_iterable(self._raw_normals(self._faces[[face_id]])[0])
        if not unit:
            return normal
        if self.is_degenerate(face_id):
            return Vector3.zero()
        return normal.normalized()

    def face_unit_normal(self, face_id: int) -> Optional[Vector3]:
        """Unit normal, or None for a face ``is_degenerate`` reports."""
        if self.is_degenerate(face_id):
            return None
        return self.face_normal(face_id).normalized()

    def face_normals(self, unit: bool = False) -> np.ndarray:
        """``(m, 3)`` face normals; zero rows for degenerate faces."""
        normals = self._raw_normals(self._faces)
        if not unit:
            return normals
        out = np.zeros_like(normals)
        ok = np.ones(self.face_count, dtype=bool)
        ok[self.degenerate_faces()] = False
        out[ok] = normals[ok] / np.linalg.norm(normals[ok], axis=1)[:, None]
        return out

    def face_areas(self) -> np.ndarray:
        return 0.5 * np.linalg.norm(self._raw_normals(self._faces), axis=1)

    def area(self) -> float:
        return float(self.face_areas().sum())

    def centroid(self, face_id: int) -> Point3:
        return Point3.from_iterable(self._vertices[self._faces[face_id]].mean(axis=0))

    def face_centroids(self) -> np.ndarray:
        if not self.face_count:
            return np.empty((0, 3))
        return self._vertices[self._faces].mean(axis=1)

    def bounding_box(self) -> tuple[Point3, Point3]:
        """
        Axis-aligned bounds of the vertex buffer.

        Raises:
            ValueError: If the mesh has no vertices.
        """
        if not self.vertex_count:
            raise ValueError("Empty mesh has no bounding box")
        return (
            Point3.from_iterable(self._vertices.min(axis=0)),
            Point3.from_iterable(self._vertices.max(axis=0)),
        )

    def is_degenerate(self, face_id: int, tolerance: float = DEGENERATE_AREA) -> bool:
        """True for repeated indices or an area below ``tolerance``."""
        if self._has_repeated_index(face_id):
            return True
        return self.face_normal(face_id).length() * 0.5 < tolerance

    def degenerate_faces(self, tolerance: float = DEGENERATE_AREA) -> np.ndarray:
        """Ids of all degenerate faces, ascending."""
        if not self.face_count:
            return np.empty(0, dtype=np.int64)
        f = self._faces
        repeated = (f[:, 0] == f[:, 1]) | (f[:, 1] == f[:, 2]) | (f[:, 0] == f[:, 2])
        return np.flatnonzero(repeated | (self.face_areas() < tolerance))

    def _has_repeated_index(self, face_id: int) -> bool:
        i, j, k = self._faces[face_id]
        return i == j or j == k or i == k

    def _raw_normals(self, faces: np.ndarray) -> np.ndarray:
        if not len(faces):
            return np.empty((0, 3))
        tri = self._vertices[faces]
        normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
        f = faces
        repeated = (f[:, 0] == f[:, 1]) | (f[:, 1] == f[:, 2]) | (f[:, 0] == f[:, 2])
        normals[repeated] = 0.0
        return normals

    # ------------------------------------------------------------------
    # Compaction
    # ------------------------------------------------------------------

    def referenced_vertices(self) -> np.ndarray:
        """Sorted ids of vertices used by at least one face."""
        return np.unique(self._faces)

    def remove_unreferenced_vertices(self) -> tuple["Mesh", np.ndarray]:
        """
        Drop vertices no face uses and renumber the rest densely.

        Kept vertices retain their relative order.

        Returns:
            Tuple of (new Mesh, vertex_map) where ``vertex_map[old]`` is the
            new index or -1 for a dropped vertex.
        """
        used = self.referenced_vertices()
        vertex_map = np.full(self.vertex_count, -1, dtype=np.int64)
        vertex_map[used] = np.arange(len(used), dtype=np.int64)
        faces = vertex_map[self._faces] if self.face_count else self._faces
        return Mesh(self._vertices[used], faces), vertex_map

    def submesh(self, face_ids: Iterable[int]) -> "Mesh":
        """
        New mesh holding the given faces (in the given order) with compacted,
        independent vertex indices.
        """
        ids = np.fromiter(face_ids, dtype=np.int64)
        sub, _ = Mesh(self._vertices, self._faces[ids]).remove_unreferenced_vertices()
        return sub
