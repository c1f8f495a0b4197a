"""
Unit tests for the trimesh/COMPAS adapters and file exchange.
"""

import numpy as np
import pytest
import trimesh
from compas.datastructures import Mesh as CompasMesh

from meshtopo.core.exceptions import GeometryError
from meshtopo.core.geometry import MeshConverter, MeshLoader
from meshtopo.core.mesh import Mesh


class TestMeshConverter:
    """Tests for MeshConverter."""

    def test_trimesh_roundtrip(self, cube_mesh):
        """Test conversion to trimesh and back keeps buffers as they are."""
        tmesh = MeshConverter.to_trimesh(cube_mesh)
        assert isinstance(tmesh, trimesh.Trimesh)
        assert len(tmesh.vertices) == 8
        assert len(tmesh.faces) == 12
        assert MeshConverter.from_trimesh(tmesh) == cube_mesh

    def test_to_trimesh_does_not_merge(self, unwelded_cube_mesh):
        """Test trimesh does not weld duplicate vertices on its own."""
        tmesh = MeshConverter.to_trimesh(unwelded_cube_mesh)
        assert len(tmesh.vertices) == 24

    def test_cube_is_watertight_in_trimesh(self, cube_mesh):
        """Test the cube fixture is a closed volume by trimesh's standards."""
        tmesh = MeshConverter.to_trimesh(cube_mesh)
        assert tmesh.is_watertight
        assert tmesh.volume == pytest.approx(1.0)

    def test_to_compas(self, cube_mesh):
        """Test conversion to a COMPAS mesh."""
        cmesh = MeshConverter.to_compas(cube_mesh)
        assert isinstance(cmesh, CompasMesh)
        assert cmesh.number_of_vertices() == 8
        assert cmesh.number_of_faces() == 12

    def test_from_compas_quads(self):
        """Test polygon faces are fan triangulated."""
        cmesh = CompasMesh.from_vertices_and_faces(
            [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
            [[0, 1, 2, 3]],
        )
        mesh = MeshConverter.from_compas(cmesh)
        assert mesh.face_count == 2
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2], [0, 2, 3]])
        assert mesh.area() == pytest.approx(1.0)


class TestMeshLoader:
    """Tests for MeshLoader."""

    def test_missing_file(self, temp_dir):
        """Test loading a missing file."""
        with pytest.raises(GeometryError, match="File not found"):
            MeshLoader.load(temp_dir / "missing.stl")

    def test_unsupported_format(self, temp_dir):
        """Test loading an unsupported extension."""
        path = temp_dir / "mesh.xyz"
        path.write_text("")
        with pytest.raises(GeometryError, match="Unsupported format"):
            MeshLoader.load(path)

    def test_save_unsupported_format(self, cube_mesh, temp_dir):
        """Test saving to an unsupported extension."""
        with pytest.raises(GeometryError, match="Unsupported format"):
            MeshLoader.save(cube_mesh, temp_dir / "cube.xyz")

    def test_obj_roundtrip(self, cube_mesh, temp_dir):
        """Test saving and loading OBJ keeps indexed topology."""
        path = temp_dir / "cube.obj"
        MeshLoader.save(cube_mesh, path)
        loaded = MeshLoader.load(path)
        assert loaded.face_count == 12
        assert loaded.area() == pytest.approx(6.0)

    def test_stl_is_unindexed(self, cube_mesh, temp_dir):
        """Test STL loads one vertex per face corner without merging."""
        path = temp_dir / "cube.stl"
        MeshLoader.save(cube_mesh, path)
        loaded = MeshLoader.load(path)
        assert loaded.face_count == 12
        assert loaded.vertex_count == 36

    def test_load_accepts_string(self, cube_mesh, temp_dir):
        """Test string paths are accepted."""
        path = temp_dir / "cube.ply"
        MeshLoader.save(cube_mesh, path)
        assert isinstance(MeshLoader.load(str(path)), Mesh)
