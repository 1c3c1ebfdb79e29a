"""Tests for Vec3 class."""

import pytest
import numpy as np

from pathforge.vec3 import Vec3, Point3, Color


class TestVec3Creation:
    """Test Vec3 construction."""

    def test_default_constructor(self):
        v = Vec3()
        assert v.x == 0.0
        assert v.y == 0.0
        assert v.z == 0.0

    def test_value_constructor(self):
        v = Vec3(1.0, 2.0, 3.0)
        assert v.x == 1.0
        assert v.y == 2.0
        assert v.z == 3.0

    def test_from_array(self):
        arr = np.array([1.0, 2.0, 3.0])
        v = Vec3.from_array(arr)
        assert v.x == 1.0
        assert v.y == 2.0
        assert v.z == 3.0

    def test_zero(self):
        assert Vec3.zero() == Vec3(0, 0, 0)

    def test_color_aliases(self):
        c = Color(0.5, 0.6, 0.7)
        assert c.r == 0.5
        assert c.g == 0.6
        assert c.b == 0.7

    def test_aliases_are_vec3(self):
        assert Point3 is Vec3
        assert Color is Vec3


class TestVec3Arithmetic:
    """Test Vec3 arithmetic operations."""

    def test_negation(self):
        neg = -Vec3(1, 2, 3)
        assert neg.x == -1
        assert neg.y == -2
        assert neg.z == -3

    def test_addition(self):
        result = Vec3(1, 2, 3) + Vec3(4, 5, 6)
        assert result == Vec3(5, 7, 9)

    def test_subtraction(self):
        result = Vec3(4, 5, 6) - Vec3(1, 2, 3)
        assert result == Vec3(3, 3, 3)

    def test_multiplication(self):
        result = Vec3(1, 2, 3) * 2
        assert result == Vec3(2, 4, 6)

    def test_right_multiplication(self):
        result = 2 * Vec3(1, 2, 3)
        assert result == Vec3(2, 4, 6)

    def test_multiplication_vector(self):
        result = Vec3(1, 2, 3) * Vec3(2, 3, 4)
        assert result == Vec3(2, 6, 12)

    def test_division(self):
        result = Vec3(2, 4, 6) / 2
        assert result == Vec3(1, 2, 3)

    def test_operations_do_not_mutate(self):
        v = Vec3(1, 2, 3)
        _ = v + Vec3(1, 1, 1)
        _ = v * 3
        assert v == Vec3(1, 2, 3)


class TestVec3NamedMethods:
    """Test the named arithmetic methods."""

    def test_add(self):
        assert Vec3(1, 2, 3).add(Vec3(1, 1, 1)) == Vec3(2, 3, 4)

    def test_scale(self):
        assert Vec3(1, 2, 3).scale(0.5) == Vec3(0.5, 1, 1.5)

    def test_mul_is_componentwise(self):
        albedo = Color(0.5, 0.25, 1.0)
        radiance = Color(2, 4, 3)
        assert albedo.mul(radiance) == Color(1, 1, 3)

    def test_named_and_operator_agree(self):
        a = Vec3(0.3, -1.2, 4.0)
        b = Vec3(2.0, 0.5, -1.0)
        assert a.add(b) == a + b
        assert a.mul(b) == a * b
        assert a.scale(3.0) == a * 3.0


class TestVec3VectorOps:
    """Test Vec3 vector operations."""

    def test_length(self):
        assert Vec3(3, 4, 0).length() == 5.0

    def test_length_squared(self):
        assert Vec3(3, 4, 0).length_squared() == 25.0

    def test_normalize(self):
        n = Vec3(3, 4, 0).normalize()
        assert abs(n.length() - 1.0) < 1e-10
        assert abs(n.x - 0.6) < 1e-10

    def test_normalize_zero_vector(self):
        n = Vec3(0, 0, 0).normalize()
        assert n.length() == 0.0

    def test_dot_product(self):
        assert Vec3(1, 0, 0).dot(Vec3(0, 1, 0)) == 0.0
        assert Vec3(1, 2, 3).dot(Vec3(4, 5, 6)) == 32.0  # 1*4 + 2*5 + 3*6

    def test_cross_product(self):
        cross = Vec3(1, 0, 0).cross(Vec3(0, 1, 0))
        assert cross == Vec3(0, 0, 1)

    def test_cross_is_perpendicular(self):
        a = Vec3(1, 2, 3)
        b = Vec3(-2, 0.5, 4)
        c = a.cross(b)
        assert abs(c.dot(a)) < 1e-10
        assert abs(c.dot(b)) < 1e-10

    def test_max_component(self):
        assert Color(0.2, 0.9, 0.4).max_component() == 0.9
        assert Color(0, 0, 0).max_component() == 0.0


class TestVec3Utility:
    """Test Vec3 utility methods."""

    def test_near_zero(self):
        assert Vec3(1e-10, 1e-10, 1e-10).near_zero()
        assert not Vec3(1, 0, 0).near_zero()

    def test_clamp(self):
        clamped = Vec3(-0.5, 0.5, 1.5).clamp(0, 1)
        assert clamped.x == 0
        assert clamped.y == 0.5
        assert clamped.z == 1

    def test_to_array_is_copy(self):
        v = Vec3(1, 2, 3)
        arr = v.to_array()
        assert isinstance(arr, np.ndarray)
        arr[0] = 10
        assert v.x == 1

    def test_iteration(self):
        assert list(Vec3(1, 2, 3)) == [1.0, 2.0, 3.0]


class TestVec3Comparison:
    """Test Vec3 comparison operations."""

    def test_equality(self):
        assert Vec3(1, 2, 3) == Vec3(1, 2, 3)

    def test_inequality(self):
        assert Vec3(1, 2, 3) != Vec3(1, 2, 4)

    def test_approximate_equality(self):
        assert Vec3(1, 2, 3) == Vec3(1 + 1e-12, 2, 3)

    def test_not_equal_to_other_types(self):
        assert Vec3(1, 2, 3) != (1, 2, 3)

    def test_unhashable(self):
        # Equality is approximate, so vectors cannot be dict keys
        with pytest.raises(TypeError):
            hash(Vec3(1, 2, 3))


class TestVec3Indexing:
    """Test Vec3 indexing."""

    def test_getitem(self):
        v = Vec3(1, 2, 3)
        assert v[0] == 1
        assert v[1] == 2
        assert v[2] == 3

    def test_getitem_out_of_range(self):
        with pytest.raises(IndexError):
            Vec3(1, 2, 3)[3]
