"""
MARG Pose Estimation with Madgwick's Gradient Descent Filter
Earth Axis Convention: NED (North East Down)

One update per sample triple:

  1. normalize accelerometer and magnetometer
  2. rotate the magnetometer reading into the earth frame with the previous
     estimate and keep its horizontal (bx) and vertical (bz) components
  3. gradient of the 6 term objective function, gravity and magnetic field
  4. normalize the gradient
  5. qDot = 0.5 * q * [0,gyr] - beta * gradient
  6. q = q + qDot * deltat
  7. normalize q

A zero length accelerometer, magnetometer, gradient or integrated quaternion
cannot be normalized. The update is then skipped and the previous estimate
is kept.

References
- https://x-io.co.uk/downloads/madgwick_internal_report.pdf
- https://doi.org/10.1109/ICORR.2011.5975346
- https://x-io.co.uk/open-source-imu-and-ahrs-algorithms/
"""

import logging
import math
from copy import copy
from dataclasses import replace

import numpy as np

from pyMARG.quaternion import Quaternion, Vector3D
from pyMARG.config import FilterConfig, check_positive

logger = logging.getLogger(__name__)

IDENTITY_QUATERNION = Quaternion(1.0, 0.0, 0.0, 0.0)


def asVector3D(value, name: str = "vector") -> Vector3D:
    '''Copy a Vector3D or length 3 sequence into a new Vector3D'''
    if isinstance(value, (Vector3D, list, tuple, np.ndarray)):
        return Vector3D(value)
    raise TypeError("Unsupported type for {}: {}".format(name, type(value)))


def normalizeVector(v: Vector3D):
    '''
    Unit length copy of v.
    Returns None when v has zero length.
    '''
    _v = Vector3D(v)
    if not _v.normalize():
        return None
    return _v


def magReference(q: Quaternion, mag: Vector3D):
    '''
    Reference direction of earth's magnetic field.

    The normalized magnetometer reading is rotated into the earth frame with
    the current estimate
        h = q * mag * q'                                       (eq. 45)
    and reduced to a horizontal and a vertical component, the horizontal
    component pointing North by definition
        bx = sqrt(hx^2 + hy^2),  bz = hz                       (eq. 46)
    '''
    h = q * mag * q.conjugate
    bx = math.sqrt(h.x * h.x + h.y * h.y)
    bz = h.z
    return bx, bz


def gradient(q: Quaternion, acc: Vector3D, mag: Vector3D, bx: float, bz: float) -> np.ndarray:
    '''
    Gradient of the objective function, closed form.

    acc and mag must be normalized, bx and bz come from magReference.
    The predicted field is the unit reference rotated into the body frame
        2bx*(0.5 - q3q3 - q4q4) + 2bz*(q2q4 - q1q3)
    and so on, so at the true pose it equals the measured direction and
    the gradient vanishes. The x-io C code uses bx where 2bx belongs, which
    biases a tilted pose. See gradientJacobian for the matrix form.
    '''
    q1, q2, q3, q4 = q.w, q.x, q.y, q.z

    _2bx   = 2.0 * bx
    _2bz   = 2.0 * bz
    _4bx   = 4.0 * bx
    _4bz   = 4.0 * bz
    _2q1   = 2.0 * q1
    _2q2   = 2.0 * q2
    _2q3   = 2.0 * q3
    _2q4   = 2.0 * q4
    _2q1q3 = 2.0 * q1 * q3
    _2q3q4 = 2.0 * q3 * q4
    q1q2   = q1 * q2
    q1q3   = q1 * q3
    q1q4   = q1 * q4
    q2q2   = q2 * q2
    q2q3   = q2 * q3
    q2q4   = q2 * q4
    q3q3   = q3 * q3
    q3q4   = q3 * q4
    q4q4   = q4 * q4

    # Objective function
    f1 = 2.0 * q2q4 - _2q1q3 - acc.x
    f2 = 2.0 * q1q2 + _2q3q4 - acc.y
    f3 = 1.0 - 2.0 * q2q2 - 2.0 * q3q3 - acc.z
    f4 = _2bx * (0.5 - q3q3 - q4q4) + _2bz * (q2q4 - q1q3) - mag.x
    f5 = _2bx * (q2q3 - q1q4) + _2bz * (q1q2 + q3q4) - mag.y
    f6 = _2bx * (q1q3 + q2q4) + _2bz * (0.5 - q2q2 - q3q3) - mag.z

    # Jacobian transposed times objective function
    s1 = (- _2q3 * f1 + _2q2 * f2
          - _2bz * q3 * f4
          + (-_2bx * q4 + _2bz * q2) * f5
          + _2bx * q3 * f6)
    s2 = (_2q4 * f1 + _2q1 * f2 - 4.0 * q2 * f3
          + _2bz * q4 * f4
          + (_2bx * q3 + _2bz * q1) * f5
          + (_2bx * q4 - _4bz * q2) * f6)
    s3 = (- _2q1 * f1 + _2q4 * f2 - 4.0 * q3 * f3
          + (-_4bx * q3 - _2bz * q1) * f4
          + (_2bx * q2 + _2bz * q4) * f5
          + (_2bx * q1 - _4bz * q3) * f6)
    s4 = (_2q2 * f1 + _2q3 * f2
          + (-_4bx * q4 + _2bz * q2) * f4
          + (-_2bx * q1 + _2bz * q3) * f5
          + _2bx * q2 * f6)

    return np.array([s1, s2, s3, s4])


def gradientJacobian(q: Quaternion, acc: Vector3D, mag: Vector3D, bx: float, bz: float) -> np.ndarray:
    '''
    Gradient of the objective function as J.T @ f.

    Slower than gradient() but written directly from the paper, used to
    cross check the closed form.
    '''
    # Objective function                                       (eq. 31)
    f = np.array([2.0*(q.x*q.z - q.w*q.y)                                         - acc.x,
                  2.0*(q.w*q.x + q.y*q.z)                                         - acc.y,
                  2.0*(0.5-q.x**2-q.y**2)                                         - acc.z,
                  2.0*bx*(0.5 - q.y**2 - q.z**2) + 2.0*bz*(q.x*q.z - q.w*q.y)     - mag.x,
                  2.0*bx*(q.x*q.y - q.w*q.z)     + 2.0*bz*(q.w*q.x + q.y*q.z)     - mag.y,
                  2.0*bx*(q.w*q.y + q.x*q.z)     + 2.0*bz*(0.5 - q.x**2 - q.y**2) - mag.z])

    # Jacobian                                                 (eq. 32)
    J = np.array([[-2.0*q.y,               2.0*q.z,              -2.0*q.w,                2.0*q.x              ],
                  [ 2.0*q.x,               2.0*q.w,               2.0*q.z,                2.0*q.y              ],
                  [ 0.0,                  -4.0*q.x,              -4.0*q.y,                0.0                  ],
                  [-2.0*bz*q.y,            2.0*bz*q.z,           -4.0*bx*q.y-2.0*bz*q.w, -4.0*bx*q.z+2.0*bz*q.x],
                  [-2.0*bx*q.z+2.0*bz*q.x, 2.0*bx*q.y+2.0*bz*q.w, 2.0*bx*q.x+2.0*bz*q.z, -2.0*bx*q.w+2.0*bz*q.y],
                  [ 2.0*bx*q.y,            2.0*bx*q.z-4.0*bz*q.x, 2.0*bx*q.w-4.0*bz*q.y,  2.0*bx*q.x           ]])

    return J.T @ f                                             # (eq. 34)


def qDot(q: Quaternion, gyr: Vector3D) -> Quaternion:
    '''Rate of change of orientation from the gyroscope, 0.5 * q * [0,gyr]    (eq. 12)'''
    return 0.5 * (q * gyr)


def _update(q, gyr, acc, mag, dt, beta, grad):
    _acc = normalizeVector(asVector3D(acc, "acc"))
    if _acc is None:
        logger.debug("Skipping update, accelerometer has zero length")
        return None

    _mag = normalizeVector(asVector3D(mag, "mag"))
    if _mag is None:
        logger.debug("Skipping update, magnetometer has zero length")
        return None

    bx, bz = magReference(q, _mag)

    s = grad(q, _acc, _mag, bx, bz)
    norm = np.linalg.norm(s)
    if norm == 0.0:
        logger.debug("Skipping update, gradient has zero length")
        return None
    s = s / norm

    # Blend gyroscope rate with gradient correction             (eq. 33)
    dq = qDot(q, asVector3D(gyr, "gyr")) - beta * s

    # Integrate                                                  (eq. 13)
    q_new = q + dq * dt
    if not q_new.normalize():
        logger.debug("Skipping update, integrated quaternion has zero length")
        return None

    return q_new


def updateMARG(q: Quaternion, gyr: Vector3D, acc: Vector3D, mag: Vector3D, dt: float, beta: float):
    """
    Quaternion Estimation with a Gyroscope, Accelerometer and Magnetometer.
    q    : A-priori quaternion, not modified.
    gyr  : Vector3D of tri-axial Gyroscope in rad/s
    acc  : Vector3D of tri-axial Accelerometer, any unit
    mag  : Vector3D of tri-axial Magnetometer, any unit
    dt   : float, time step in seconds
    beta : float, filter gain
    Returns
    q    : New estimated quaternion, or None when the update had to be skipped.
    """
    return _update(q, gyr, acc, mag, dt, beta, gradient)


def updateMARGJacobian(q: Quaternion, gyr: Vector3D, acc: Vector3D, mag: Vector3D, dt: float, beta: float):
    """Same as updateMARG with the gradient computed by gradientJacobian."""
    return _update(q, gyr, acc, mag, dt, beta, gradientJacobian)


class Madgwick:
    """
    Madgwick's Gradient Descent Pose Filter for MARG sensors
    Earth Axis Convention: NED (North East Down)

    Methods:
    - update(acc, gyro, mag): consume one sample triple, return the new pose
    - set_beta, set_deltat: change tunables between updates
    - reset: go back to identity or to a given pose

    Initialization:
      beta : float, default: 8.384266471;  Filter gain.
      deltat or dt : float;                 Integration step in seconds. Should be the sample period.
      frequency : float;                    Sampling frequency in Hertz, used when deltat is not given.
      gyro_meas_error : float;              Gyroscope error in rad/s, derives beta when beta is not given.
      config : FilterConfig;                Instead of the keywords above.

    Example:
    >>> from pyMARG.madgwick import Madgwick
    >>> madgwick = Madgwick(beta=0.041, deltat=0.01)
    >>> q = madgwick.update(acc=acc_data, gyro=gyro_data, mag=mag_data)

    Each instance owns its state. Use one instance per sensor and do not
    share an instance between threads without a lock.
    """

    def __init__(self, config: FilterConfig = None, **kwargs):
        if config is None:
            config = FilterConfig.from_dict(kwargs)
        elif kwargs:
            raise ValueError("Pass either config or keyword settings, not both")
        self.config: FilterConfig = config
        self.beta: float          = config.beta
        self.deltat: float        = config.deltat
        self.q: Quaternion        = copy(IDENTITY_QUATERNION)
        self.acc                  = None
        self.gyr                  = None
        self.mag                  = None
        self.skipped: int         = 0

    def __repr__(self):
        return f"Madgwick(beta={self.beta}, deltat={self.deltat}, q={self.q})"

    def set_beta(self, value: float) -> None:
        self.beta = check_positive("beta", value)
        self.config = replace(self.config, beta=self.beta)

    def set_deltat(self, value: float) -> None:
        self.deltat = check_positive("deltat", value)
        self.config = replace(self.config, deltat=self.deltat, frequency=None)

    def reset(self, q: Quaternion = None) -> None:
        '''Restart from identity, or from q'''
        if q is None:
            self.q = copy(IDENTITY_QUATERNION)
        else:
            self.q = Quaternion(q)
            if not self.q.normalize():
                raise ValueError("Cannot reset to a zero length quaternion")
        self.skipped = 0

    @property
    def orientation(self) -> Quaternion:
        '''Copy of the current estimate'''
        return copy(self.q)

    def update(self, acc: Vector3D, gyro: Vector3D, mag: Vector3D) -> Quaternion:
        """
        Estimate the pose quaternion.
        acc  : Vector3D of tri-axial Accelerometer, any unit
        gyro : Vector3D of tri-axial Gyroscope in rad/s
        mag  : Vector3D of tri-axial Magnetometer, any unit
        Returns a copy of the new estimate, or of the previous one if the
        sample was degenerate.
        """
        self.acc = asVector3D(acc, "acc")
        self.gyr = asVector3D(gyro, "gyro")
        self.mag = asVector3D(mag, "mag")

        q = updateMARG(self.q, self.gyr, self.acc, self.mag, dt=self.deltat, beta=self.beta)
        if q is None:
            self.skipped += 1
        else:
            self.q = q
        return copy(self.q)
