"""
Tests for the point/vector kernel.
"""

import math

import numpy as np
import pytest

from meshtopo.core.vector import Point3, Vector3


class TestVector3:
    """Tests for Vector3."""

    def test_arithmetic(self):
        """Test addition, subtraction, scaling and negation."""
        a = Vector3(1.0, 2.0, 3.0)
        b = Vector3(0.5, -1.0, 2.0)
        assert a + b == Vector3(1.5, 1.0, 5.0)
        assert a - b == Vector3(0.5, 3.0, 1.0)
        assert a * 2.0 == Vector3(2.0, 4.0, 6.0)
        assert 2.0 * a == Vector3(2.0, 4.0, 6.0)
        assert -a == Vector3(-1.0, -2.0, -3.0)

    def test_dot_and_cross(self):
        """Test dot and right-handed cross products."""
        x = Vector3(1.0, 0.0, 0.0)
        y = Vector3(0.0, 1.0, 0.0)
        assert x.dot(y) == 0.0
        assert x.cross(y) == Vector3(0.0, 0.0, 1.0)
        assert y.cross(x) == Vector3(0.0, 0.0, -1.0)

    def test_length(self):
        """Test Euclidean length."""
        assert Vector3(3.0, 4.0, 0.0).length() == pytest.approx(5.0)

    def test_normalized(self):
        """Test normalization returns a unit vector."""
        unit = Vector3(0.0, 3.0, 4.0).normalized()
        assert unit is not None
        assert unit.length() == pytest.approx(1.0)
        assert unit.eq_with_tolerance(Vector3(0.0, 0.6, 0.8), 1e-12)

    def test_normalized_zero_is_none(self):
        """Test that a zero vector has no unit direction."""
        assert Vector3.zero().normalized() is None
        assert Vector3(1e-15, 0.0, 0.0).normalized() is None

    def test_angle_to(self):
        """Test unsigned angle between vectors."""
        x = Vector3(1.0, 0.0, 0.0)
        assert x.angle_to(Vector3(0.0, 2.0, 0.0)) == pytest.approx(math.pi / 2)
        assert x.angle_to(Vector3(-3.0, 0.0, 0.0)) == pytest.approx(math.pi)
        assert x.angle_to(x) == pytest.approx(0.0)

    def test_angle_to_zero_vector(self):
        """Test angle with a zero vector is pi."""
        assert Vector3(1.0, 0.0, 0.0).angle_to(Vector3.zero()) == math.pi

    @pytest.mark.parametrize(
        "vector",
        [Vector3(0.0, 0.0, 1.0), Vector3(1.0, 0.0, 0.0), Vector3(1.0, 2.0, 3.0)],
    )
    def test_any_perpendicular(self, vector):
        """Test perpendicular vector is unit length and orthogonal."""
        perpendicular = vector.any_perpendicular()
        assert perpendicular.length() == pytest.approx(1.0)
        assert perpendicular.dot(vector) == pytest.approx(0.0, abs=1e-12)

    def test_eq_with_tolerance(self):
        """Test component-wise tolerant equality."""
        a = Vector3(1.0, 1.0, 1.0)
        assert a.eq_with_tolerance(Vector3(1.0005, 0.9995, 1.0), 0.001)
        assert not a.eq_with_tolerance(Vector3(1.01, 1.0, 1.0), 0.001)

    def test_immutable(self):
        """Test that vectors cannot be modified."""
        v = Vector3(1.0, 2.0, 3.0)
        with pytest.raises(AttributeError):
            v.x = 5.0

    def test_array_conversion(self):
        """Test conversion to and from numpy arrays."""
        v = Vector3.from_iterable(np.array([1, 2, 3]))
        assert v == Vector3(1.0, 2.0, 3.0)
        assert isinstance(v.x, float)
        np.testing.assert_array_equal(v.to_array(), [1.0, 2.0, 3.0])


class TestPoint3:
    """Tests for Point3."""

    def test_point_minus_point_is_vector(self):
        """Test that subtracting points gives a vector."""
        d = Point3(3.0, 2.0, 1.0) - Point3(1.0, 1.0, 1.0)
        assert isinstance(d, Vector3)
        assert d == Vector3(2.0, 1.0, 0.0)

    def test_point_plus_vector_is_point(self):
        """Test translating a point by a vector."""
        p = Point3(1.0, 1.0, 1.0) + Vector3(0.0, 0.0, 2.0)
        assert isinstance(p, Point3)
        assert p == Point3(1.0, 1.0, 3.0)

    def test_point_minus_vector_is_point(self):
        """Test subtracting a vector from a point."""
        p = Point3(1.0, 1.0, 1.0) - Vector3(1.0, 0.0, 0.0)
        assert isinstance(p, Point3)
        assert p == Point3(0.0, 1.0, 1.0)

    def test_distance_and_midpoint(self):
        """Test distance and midpoint."""
        a = Point3(0.0, 0.0, 0.0)
        b = Point3(2.0, 0.0, 0.0)
        assert a.distance_to(b) == pytest.approx(2.0)
        assert a.midpoint(b) == Point3(1.0, 0.0, 0.0)
        assert a.vector_to(b) == Vector3(2.0, 0.0, 0.0)

    def test_eq_with_tolerance(self):
        """Test tolerant point equality."""
        assert Point3(0.0, 0.0, 0.0).eq_with_tolerance(Point3(1e-7, 0.0, -1e-7), 1e-6)
        assert not Point3(0.0, 0.0, 0.0).eq_with_tolerance(Point3(1e-5, 0.0, 0.0), 1e-6)
