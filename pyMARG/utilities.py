###########################################################
# Frame helpers around the MARG filter
# Assuming X forward (North), Y right (East), Z down
###########################################################

from pyMARG.quaternion import Vector3D, Quaternion
import numpy as np
import math
import numbers


def asin(value: float):
    if value <= -1.0:
        return -math.pi/2
    elif value >= 1.0:
        return math.pi/2
    return math.asin(value)


def q2rpy(q: Quaternion) -> Vector3D:
    '''
    quaternion to roll pitch yaw
    '''
    wx = q.w * q.x
    yz = q.y * q.z
    xx = q.x * q.x
    yy = q.y * q.y
    zz = q.z * q.z
    wy = q.w * q.y
    xz = q.x * q.z
    wz = q.w * q.z
    xy = q.x * q.y

    # roll (x-axis rotation)
    roll = math.atan2(2.*(wx + yz), 1.0 - 2.*(xx + yy))

    # pitch (y-axis rotation), 90 degrees if out of range
    pitch = asin(2.*(wy - xz))

    # yaw (z-axis rotation)
    yaw = math.atan2(2.*(wz + xy), 1.0 - 2.*(yy + zz))

    return Vector3D(x=roll, y=pitch, z=yaw)


def rpy2q(r, p: float = 0., y: float = 0.) -> Quaternion:
    '''
    roll, pitch, yaw in radians to quaternion
    r can also be a Vector3D or array holding all three angles
    '''
    if isinstance(r, Vector3D):
        roll, pitch, yaw = r.x, r.y, r.z
    elif isinstance(r, np.ndarray) and r.shape == (3,):
        roll, pitch, yaw = r
    elif isinstance(r, numbers.Number):
        roll, pitch, yaw = r, p, y
    else:
        raise TypeError("Unsupported operand type for rpy2q: {}".format(type(r)))

    cy2 = math.cos(yaw   * 0.5)
    sy2 = math.sin(yaw   * 0.5)
    cp2 = math.cos(pitch * 0.5)
    sp2 = math.sin(pitch * 0.5)
    cr2 = math.cos(roll  * 0.5)
    sr2 = math.sin(roll  * 0.5)

    w = cy2 * cp2 * cr2 + sy2 * sp2 * sr2
    x = cy2 * cp2 * sr2 - sy2 * sp2 * cr2
    y = sy2 * cp2 * sr2 + cy2 * sp2 * cr2
    z = sy2 * cp2 * cr2 - cy2 * sp2 * sr2

    return Quaternion(w, x, y, z)


def q2gravity(pose: Quaternion) -> Vector3D:
    '''
    Unit gravity vector in the sensor frame for a pose.

    Bottom row of the rotation matrix, which is the gravity model of the
    filter's objective function:

    gx =  2*(xz - wy)
    gy =  2*(yz + wx)
    gz =  1 - 2(xx + yy)
    '''
    x =  2.0 * (pose.x * pose.z - pose.w * pose.y)
    y =  2.0 * (pose.y * pose.z + pose.w * pose.x)
    z =  1 - 2.0 * (pose.x*pose.x + pose.y*pose.y)

    return Vector3D(x, y, z)


def earth2body(pose: Quaternion, v: Vector3D) -> Vector3D:
    '''
    Express an earth frame vector in the sensor frame: q' * v * q
    What a magnetometer reads for an earth field v when held at pose.
    '''
    return (pose.conjugate * v * pose).v


def body2earth(pose: Quaternion, v: Vector3D) -> Vector3D:
    '''Express a sensor frame vector in the earth frame: q * v * q' '''
    return (pose * v * pose.conjugate).v


def qAngle(q1: Quaternion, q2: Quaternion) -> float:
    '''
    Rotation angle in radians that takes orientation q1 to q2.
    q and -q are the same orientation.
    '''
    d = abs(q1.dot(q2)) / (q1.norm * q2.norm)
    return 2.0 * math.acos(min(d, 1.0))
