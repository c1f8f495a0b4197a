"""
Boundary adapters between meshtopo meshes and other representations.

Converts to and from trimesh and COMPAS meshes, and reads/writes mesh files
through trimesh. The engine itself never touches files; these adapters sit
at the edge for the CLI and host applications.
"""

from pathlib import Path
from typing import Any

import numpy as np
import trimesh
from compas.datastructures import Mesh as CompasMesh

from meshtopo.core.exceptions import GeometryError
from meshtopo.core.logging import get_logger
from meshtopo.core.mesh import Mesh

logger = get_logger(__name__)


class MeshConverter:
    """
    Converter between meshtopo, trimesh and COMPAS meshes.

    Conversions keep vertex order and face winding as they are. trimesh
    objects are created with ``process=False`` so trimesh does not merge
    vertices or drop faces on its own.
    """

    @staticmethod
    def to_trimesh(mesh: Mesh) -> trimesh.Trimesh:
        """
        Convert to a trimesh.Trimesh.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return trimesh.Trimesh(
                vertices=np.array(mesh.vertices),
                faces=np.array(mesh.faces),
                process=False,
            )
        except Exception as e:
            raise GeometryError(f"Failed to convert mesh to trimesh: {e}") from e

    @staticmethod
    def from_trimesh(tmesh: trimesh.Trimesh) -> Mesh:
        """
        Convert a trimesh.Trimesh.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return Mesh(np.asarray(tmesh.vertices), np.asarray(tmesh.faces))
        except Exception as e:
            raise GeometryError(f"Failed to convert trimesh to mesh: {e}") from e

    @staticmethod
    def to_compas(mesh: Mesh) -> CompasMesh:
        """
        Convert to a COMPAS Mesh.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return CompasMesh.from_vertices_and_faces(mesh.vertices.tolist(), mesh.faces.tolist())
        except Exception as e:
            raise GeometryError(f"Failed to convert mesh to COMPAS: {e}") from e

    @staticmethod
    def from_compas(cmesh: CompasMesh) -> Mesh:
        """
        Convert a COMPAS Mesh. Polygon faces are fan-triangulated from their
        first vertex.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            keys = list(cmesh.vertices())
            index = {key: i for i, key in enumerate(keys)}
            vertices = [cmesh.vertex_coordinates(key) for key in keys]
            faces = []
            for fkey in cmesh.faces():
                corners = [index[key] for key in cmesh.face_vertices(fkey)]
                for k in range(1, len(corners) - 1):
                    faces.append([corners[0], corners[k], corners[k + 1]])
            return Mesh(vertices, faces)
        except Exception as e:
            raise GeometryError(f"Failed to convert COMPAS to mesh: {e}") from e


class MeshLoader:
    """
    Loads and saves meshes through trimesh.

    Supports STL, OBJ, PLY and OFF. Scenes are flattened into one mesh.
    """

    SUPPORTED_FORMATS = {".stl", ".obj", ".ply", ".off"}

    @classmethod
    def load(cls, file_path: str | Path, **kwargs: Any) -> Mesh:
        """
        Load a mesh from file, without any trimesh-side merging.

        Args:
            file_path: Path to the mesh file
            **kwargs: Additional arguments passed to trimesh.load

        Returns:
            Mesh

        Raises:
            GeometryError: If the file is missing, unsupported or unreadable
        """
        path = Path(file_path)

        if not path.exists():
            raise GeometryError(f"File not found: {path}")

        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        kwargs.setdefault("process", False)
        try:
            loaded = trimesh.load(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to load geometry from {path}: {e}") from e

        if isinstance(loaded, trimesh.Scene):
            meshes = [g for g in loaded.geometry.values() if isinstance(g, trimesh.Trimesh)]
            if not meshes:
                raise GeometryError(f"No triangle meshes found in {path}")
            loaded = trimesh.util.concatenate(meshes)
        elif not isinstance(loaded, trimesh.Trimesh):
            raise GeometryError(f"Unexpected geometry type: {type(loaded).__name__}")

        mesh = MeshConverter.from_trimesh(loaded)
        logger.info("mesh_loaded", path=str(path), vertices=mesh.vertex_count, faces=mesh.face_count)
        return mesh

    @classmethod
    def save(cls, mesh: Mesh, file_path: str | Path, **kwargs: Any) -> None:
        """
        Save a mesh; the format follows the file extension.

        Raises:
            GeometryError: If the format is unsupported or saving fails
        """
        path = Path(file_path)
        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        try:
            MeshConverter.to_trimesh(mesh).export(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to save geometry to {path}: {e}") from e

        logger.info("mesh_saved", path=str(path), vertices=mesh.vertex_count, faces=mesh.face_count)
