###################################
# Synthetic MARG data through the filter
# A rig turns at constant yaw rate while tilted 15 degrees in roll.
# The printed roll, pitch, yaw should follow the true angles.
#
# python examples/marg_demo.py
###################################
import logging
import math
import random

from pyMARG.madgwick import Madgwick
from pyMARG.quaternion import Vector3D, DEG2RAD, RAD2DEG
from pyMARG.utilities import rpy2q, q2rpy, q2gravity, earth2body

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

FREQUENCY   = 100.0
YAW_RATE    = 20.0 * DEG2RAD                      # rad/s
ROLL        = 15.0 * DEG2RAD
EARTH_MAG   = Vector3D(22.0, 0.0, 42.0)           # micro Tesla, NED
GRAVITY     = 9.80665

AHRS = Madgwick(beta=0.1, frequency=FREQUENCY)

for i in range(2000):
    t = i / FREQUENCY
    pose = rpy2q(ROLL, 0.0, YAW_RATE * t)

    # yaw rate about earth z expressed in the body frame, plus noise
    gyr = earth2body(pose, Vector3D(0.0, 0.0, YAW_RATE))
    gyr = gyr + Vector3D(*(random.gauss(0.0, 0.005) for _ in range(3)))
    acc = q2gravity(pose) * GRAVITY + Vector3D(*(random.gauss(0.0, 0.05) for _ in range(3)))
    mag = earth2body(pose, EARTH_MAG) + Vector3D(*(random.gauss(0.0, 0.5) for _ in range(3)))

    q = AHRS.update(acc=acc, gyro=gyr, mag=mag)

    if i % 200 == 0:
        rpy = q2rpy(q) * RAD2DEG
        yaw = math.remainder(YAW_RATE * t, 2.0 * math.pi) * RAD2DEG
        print(f"t={t:5.2f}s  roll {rpy.x:7.2f}  pitch {rpy.y:7.2f}  yaw {rpy.z:7.2f}  (true yaw {yaw:7.2f})")

print(f"skipped updates: {AHRS.skipped}")
