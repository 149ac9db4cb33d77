import math
from copy import copy

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from pyMARG.quaternion import Quaternion, Vector3D, DEG2RAD


def to_scipy(q: Quaternion) -> Rotation:
    return Rotation.from_quat([q.x, q.y, q.z, q.w])


def test_quaternion_construction():
    assert Quaternion() == Quaternion(1.0, 0.0, 0.0, 0.0)
    assert Quaternion(np.array([1.0, 2.0, 3.0, 4.0])) == Quaternion(1.0, 2.0, 3.0, 4.0)
    assert Quaternion([0.5, 0.5, 0.5, 0.5]) == Quaternion(w=0.5, x=0.5, y=0.5, z=0.5)
    assert Quaternion(Vector3D(1.0, 2.0, 3.0)) == Quaternion(0.0, 1.0, 2.0, 3.0)
    assert Quaternion((1.0, 2.0, 3.0)) == Quaternion(0.0, 1.0, 2.0, 3.0)

    q = Quaternion(1.0, 2.0, 3.0, 4.0)
    assert Quaternion(q) == q
    assert Quaternion(q) is not q

    with pytest.raises(TypeError):
        Quaternion([1.0, 2.0])
    with pytest.raises(TypeError):
        Quaternion("1,0,0,0")


def test_quaternion_arithmetic():
    q1 = Quaternion(1.0, 2.0, 3.0, 4.0)
    q2 = Quaternion(0.5, -1.0, 0.0, 2.0)

    assert q1 + q2 == Quaternion(1.5, 1.0, 3.0, 6.0)
    assert q1 - q2 == Quaternion(0.5, 3.0, 3.0, 2.0)
    assert q1 + np.array([1.0, 1.0, 1.0, 1.0]) == Quaternion(2.0, 3.0, 4.0, 5.0)
    assert q1 - np.array([1.0, 1.0, 1.0, 1.0]) == Quaternion(0.0, 1.0, 2.0, 3.0)
    assert 2.0 * q1 == Quaternion(2.0, 4.0, 6.0, 8.0)
    assert q1 * 0.5 == Quaternion(0.5, 1.0, 1.5, 2.0)
    assert q1 / 2.0 == Quaternion(0.5, 1.0, 1.5, 2.0)
    assert -q1 == Quaternion(-1.0, -2.0, -3.0, -4.0)

    with pytest.raises(TypeError):
        q1 + 1.0
    with pytest.raises(TypeError):
        q1 * "2"


def test_quaternion_product_matches_scipy():
    rng = np.random.default_rng(1)
    for _ in range(20):
        q1 = Quaternion(rng.normal(size=4))
        q2 = Quaternion(rng.normal(size=4))
        q1.normalize()
        q2.normalize()

        q = q1 * q2
        ref = (to_scipy(q1) * to_scipy(q2)).as_quat()
        # q and -q are the same rotation
        sign = 1.0 if np.dot(ref, [q.x, q.y, q.z, q.w]) >= 0.0 else -1.0
        assert np.allclose([q.x, q.y, q.z, q.w], sign * ref, atol=1e-12)


def test_quaternion_vector_product_is_pure_quaternion_product():
    q = Quaternion(0.1, 0.2, 0.3, 0.4)
    v = Vector3D(-1.0, 0.5, 2.0)
    assert q * v == q * Quaternion(v)
    assert v * q == Quaternion(v) * q


def test_quaternion_rotation_matches_scipy():
    q = Quaternion(math.cos(20 * DEG2RAD), 0.3, -0.5, 0.2)
    q.normalize()
    v = Vector3D(1.0, -2.0, 0.5)

    rotated = (q * v * q.conjugate).v
    ref = to_scipy(q).apply(v.v)

    assert np.allclose(rotated.v, ref, atol=1e-12)
    assert np.allclose(q.r33, to_scipy(q).as_matrix(), atol=1e-12)
    assert np.allclose(q.r33 @ v.v, ref, atol=1e-12)


def test_quaternion_normalize():
    q = Quaternion(2.0, 0.0, 0.0, 0.0)
    assert q.normalize()
    assert q == Quaternion(1.0, 0.0, 0.0, 0.0)

    q = Quaternion(1.0, 1.0, 1.0, 1.0)
    assert q.normalize()
    assert abs(q.norm - 1.0) < 1e-15

    q = Quaternion(0.0, 0.0, 0.0, 0.0)
    assert not q.normalize()
    assert q == Quaternion(0.0, 0.0, 0.0, 0.0)
    assert q.isZero
    assert not q


def test_quaternion_properties():
    q = Quaternion(1.0, 2.0, 3.0, 4.0)
    assert q.conjugate == Quaternion(1.0, -2.0, -3.0, -4.0)
    assert q.norm == pytest.approx(math.sqrt(30.0))
    assert q.v == Vector3D(2.0, 3.0, 4.0)
    assert np.array_equal(q.q, np.array([1.0, 2.0, 3.0, 4.0]))
    assert q.dot(Quaternion(1.0, 1.0, 1.0, 1.0)) == 10.0
    assert list(q) == [1.0, 2.0, 3.0, 4.0]
    assert len(q) == 4

    c = copy(q)
    c.w = 0.0
    assert q.w == 1.0


def test_vector_construction():
    assert Vector3D(1, 2, 3) == Vector3D(x=1.0, y=2.0, z=3.0)
    assert Vector3D(np.array([1, 2, 3])) == Vector3D(1.0, 2.0, 3.0)
    assert Vector3D([1.0, 2.0, 3.0]) == Vector3D(1.0, 2.0, 3.0)
    assert Vector3D() == Vector3D(0.0, 0.0, 0.0)
    with pytest.raises(TypeError):
        Vector3D([1.0, 2.0])
    with pytest.raises(TypeError):
        Vector3D(None)


def test_vector_arithmetic():
    v1 = Vector3D(1.0, 2.0, 3.0)
    v2 = Vector3D(4.0, 5.0, 6.0)

    assert v1 + v2 == Vector3D(5.0, 7.0, 9.0)
    assert v2 - v1 == Vector3D(3.0, 3.0, 3.0)
    assert 2.0 * v1 == Vector3D(2.0, 4.0, 6.0)
    assert v1 * 2.0 == Vector3D(2.0, 4.0, 6.0)
    assert v2 / 2.0 == Vector3D(2.0, 2.5, 3.0)
    assert -v1 == Vector3D(-1.0, -2.0, -3.0)
    assert v1.dot(v2) == 32.0
    assert v1.cross(v2) == Vector3D(-3.0, 6.0, -3.0)

    with pytest.raises(TypeError):
        v1 + 1.0
    with pytest.raises(TypeError):
        v1.dot(np.array([1.0, 2.0, 3.0]))


def test_vector_normalize():
    v = Vector3D(0.0, 3.0, 4.0)
    assert v.normalize()
    assert v.norm == pytest.approx(1.0)
    assert v.y == pytest.approx(0.6)

    v = Vector3D(0.0, 0.0, 0.0)
    assert not v.normalize()
    assert v == Vector3D(0.0, 0.0, 0.0)
    assert v.isZero


def test_vector_properties():
    v = Vector3D(1.0, 2.0, 2.0)
    assert v.norm == 3.0
    assert v.q == Quaternion(0.0, 1.0, 2.0, 2.0)
    assert np.array_equal(v.v, np.array([1.0, 2.0, 2.0]))
    assert list(v) == [1.0, 2.0, 2.0]
