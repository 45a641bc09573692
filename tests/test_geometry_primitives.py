import dataclasses
import math

import numpy as np
import pytest

from pathcorrection.model.geometry_primitives import Vector, BoundingBox, X_AXIS, Z_AXIS


def test_vector_arithmetic():
    a = Vector(1.0, 2.0, 3.0)
    b = Vector(4.0, 5.0, 6.0)
    assert a + b == Vector(5.0, 7.0, 9.0)
    assert b - a == Vector(3.0, 3.0, 3.0)
    assert 2 * a == Vector(2.0, 4.0, 6.0)
    assert -a == Vector(-1.0, -2.0, -3.0)
    assert a.dot(b) == pytest.approx(32.0)
    assert X_AXIS.cross(Vector(0.0, 1.0, 0.0)) == Z_AXIS


def test_normalize_zero_vector_stays_zero():
    assert Vector(0.0, 0.0, 0.0).normalize() == Vector(0.0, 0.0, 0.0)
    assert Vector(3.0, 0.0, 4.0).normalize().magnitude == pytest.approx(1.0)


def test_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        Vector(1.0, 1.0, 1.0) / 0.0


def test_rotate_x_minus_quarter_turn():
    v = Vector(1.0, 2.0, 3.0).rotate_x(-math.pi / 2.0)
    assert v.to_tuple() == pytest.approx((1.0, 3.0, -2.0))


def test_axis_constants_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Z_AXIS.z = 5.0
    assert Z_AXIS == Vector(0.0, 0.0, 1.0)


def test_bounding_box():
    pts = np.array([[0.0, 0.0, 0.0], [10.0, 4.0, -2.0], [5.0, 8.0, 2.0]])
    bbox = BoundingBox.from_points(pts)
    assert bbox.minimum == Vector(0.0, 0.0, -2.0)
    assert bbox.maximum == Vector(10.0, 8.0, 2.0)
    assert bbox.center == Vector(5.0, 4.0, 0.0)
    assert bbox.max_extent == pytest.approx(10.0)


def test_bounding_box_empty():
    assert BoundingBox.from_points(np.empty((0, 3))) is None
