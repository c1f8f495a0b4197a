"""
End-to-end tests: file -> cleanup -> queries -> file.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from conftest import grid_mesh
from meshtopo.core.config import CleanupConfig, EngineConfig
from meshtopo.core.geometry import MeshLoader
from meshtopo.core.mesh import Mesh
from meshtopo.core.vector import Point3, Vector3
from meshtopo.editing import split_by_angle, weld
from meshtopo.geometry import Ray, faces_flipped_inside, flip_normals, is_point_inside, ray_mesh_intersect
from meshtopo.pipeline import CleanupPipeline


class TestStlRoundtrip:
    """Tests for triangle soup files through the cleanup pipeline."""

    def test_stl_soup_becomes_closed_cube(self, cube_mesh, temp_dir):
        """Test an STL cube welds back into a closed 8 vertex solid."""
        path = temp_dir / "cube.stl"
        MeshLoader.save(cube_mesh, path)
        soup = MeshLoader.load(path)
        assert soup.vertex_count == 36
        assert not soup.topology().is_connected()

        result = CleanupPipeline().execute(soup)
        assert result.success
        mesh = result.mesh
        assert mesh.vertex_count == 8
        assert mesh.face_count == 12
        analyzer = mesh.topology()
        assert analyzer.is_closed()
        assert analyzer.is_manifold()
        assert analyzer.euler_characteristic() == 2
        assert is_point_inside(Point3(0.5, 0.5, 0.5), mesh)
        assert faces_flipped_inside(mesh, 0.01) == set()

        out = temp_dir / "clean.ply"
        MeshLoader.save(mesh, out)
        assert MeshLoader.load(out) == mesh

    def test_weld_matches_trimesh_merge(self, cube_mesh, temp_dir):
        """Test welding an STL gives the same vertex count as trimesh's own merge."""
        path = temp_dir / "cube.stl"
        MeshLoader.save(cube_mesh, path)
        welded = weld(MeshLoader.load(path), 1e-6).mesh
        merged = MeshLoader.load(path, process=True)
        assert welded.vertex_count == merged.vertex_count == 8


class TestPlanarCleanup:
    """Tests for a tessellated plate with duplicates and loose vertices."""

    @pytest.fixture
    def messy_plate(self):
        plate = grid_mesh(4, 4)
        faces = np.vstack([plate.faces, plate.faces[:5][:, [1, 2, 0]]])
        vertices = np.vstack([plate.vertices, [[9.0, 9.0, 9.0]]])
        return Mesh(vertices, faces)

    def test_full_cleanup(self, messy_plate):
        """Test duplicates, loose vertices and interior vertices are all removed."""
        config = EngineConfig(cleanup=CleanupConfig(simplify=True))
        result = CleanupPipeline(config).execute(messy_plate)
        assert result.success
        mesh = result.mesh
        assert mesh.face_count == 14
        assert mesh.vertex_count == 16
        assert mesh.area() == pytest.approx(16.0)
        assert len(mesh.topology().boundary_edges()) == 16
        assert len(split_by_angle(mesh, 10.0)) == 1

    def test_flipped_plate_faces_down(self, messy_plate):
        """Test flipping the cleaned plate turns every normal to -z."""
        mesh = CleanupPipeline(EngineConfig(cleanup=CleanupConfig(simplify=True))).execute(
            messy_plate
        ).mesh
        np.testing.assert_allclose(flip_normals(mesh).face_normals(unit=True)[:, 2], -1.0)


class TestConcurrentQueries:
    """Tests for read-only queries shared between threads."""

    def test_parallel_ray_queries(self, cube_mesh):
        """Test ray casts from several threads agree with a serial run."""
        origins = [Point3(x, y, 3.0) for x in np.linspace(0.05, 0.95, 7) for y in (0.2, 0.7)]
        down = Vector3(0.0, 0.0, -1.0)

        def cast(origin):
            hit = ray_mesh_intersect(Ray(origin, down), cube_mesh)
            return hit.face_index, hit.distance

        serial = [cast(o) for o in origins]
        with ThreadPoolExecutor(max_workers=4) as pool:
            parallel = list(pool.map(cast, origins))
        assert parallel == serial
        assert all(distance == pytest.approx(2.0) for _, distance in serial)
