"""
Tests for angle-based splitting.
"""

import numpy as np
import pytest

from meshtopo.core.exceptions import ParameterError
from meshtopo.core.mesh import Mesh
from meshtopo.editing import smooth_shells, split_by_angle


class TestSmoothShells:
    """Tests for smooth_shells."""

    def test_cube_sides(self, cube_mesh):
        """Test right angles are hard below 90 degrees."""
        shells = smooth_shells(cube_mesh, 89.0)
        assert [s.tolist() for s in shells] == [[0, 1], [2, 3], [4, 5], [6, 7], [8, 9], [10, 11]]

    def test_angle_equal_to_threshold_is_hard(self, cube_mesh):
        """Test an edge exactly at the threshold separates."""
        assert len(smooth_shells(cube_mesh, 90.0)) == 6
        assert len(smooth_shells(cube_mesh, 90.0 + 1e-9)) == 1

    def test_degenerate_face_is_isolated(self):
        """Test a degenerate face forms its own shell at any threshold."""
        mesh = Mesh(
            [[0, 0, 0], [1, 0, 0], [0, 1, 0], [2, 0, 0]],
            [[0, 1, 2], [1, 0, 3]],
        )
        assert [s.tolist() for s in smooth_shells(mesh, 180.0)] == [[0], [1]]

    @pytest.mark.parametrize("angle", [0.0, -10.0, 180.5])
    def test_bad_angle(self, cube_mesh, angle):
        """Test thresholds outside (0, 180] are rejected."""
        with pytest.raises(ParameterError):
            smooth_shells(cube_mesh, angle)


class TestSplitByAngle:
    """Tests for split_by_angle."""

    def test_cube_splits_into_six(self, cube_mesh):
        """Test each side becomes an independent two-face mesh."""
        parts = split_by_angle(cube_mesh, 89.0)
        assert len(parts) == 6
        assert all(p.face_count == 2 for p in parts)
        assert all(p.vertex_count == 4 for p in parts)
        assert sum(p.area() for p in parts) == pytest.approx(6.0)

    def test_parts_are_ordered_by_first_face(self, cube_mesh):
        """Test part order follows the lowest original face id."""
        parts = split_by_angle(cube_mesh, 89.0)
        # Bottom first, then top
        np.testing.assert_allclose(parts[0].vertices[:, 2], 0.0)
        np.testing.assert_allclose(parts[1].vertices[:, 2], 1.0)

    def test_part_normals_preserved(self, cube_mesh):
        """Test splitting keeps face winding."""
        parts = split_by_angle(cube_mesh, 89.0)
        np.testing.assert_allclose(parts[1].face_normals(unit=True), [[0, 0, 1], [0, 0, 1]])

    def test_smooth_cube_stays_whole(self, cube_mesh):
        """Test a threshold above 90 degrees keeps the cube in one piece."""
        parts = split_by_angle(cube_mesh, 91.0)
        assert len(parts) == 1
        assert parts[0] == cube_mesh

    def test_planar_grid_is_one_part(self, square_grid):
        """Test a flat mesh never splits."""
        assert len(split_by_angle(square_grid, 1.0)) == 1

    def test_empty_mesh(self):
        """Test splitting an empty mesh."""
        assert split_by_angle(Mesh(), 30.0) == []
