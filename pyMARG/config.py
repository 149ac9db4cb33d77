"""
Tunables of the MARG orientation filter.

beta   : gain of the gradient descent correction, rad/s
deltat : integration step, seconds. Must match the real sample period.

Madgwick derives the gain from the expected gyroscope measurement error:

    beta = sqrt(3/4) * gyro_meas_error

The default gain 8.384266471 is the value shipped with the reference
firmware for its 40 deg/s error assumption and is kept as is.
"""

from dataclasses import dataclass, asdict
import logging
import math

logger = logging.getLogger(__name__)

GYRO_MEAS_ERROR   = math.pi * (40.0 / 180.0)          # rad/s
GYRO_MEAS_DRIFT   = math.pi * (0.0 / 180.0)           # rad/s/s
BETA              = 8.384266471
DEFAULT_FREQUENCY = 100.0                             # Hz


def beta_from_gyro_error(gyro_meas_error: float) -> float:
    '''Gain for a gyroscope error given in rad/s'''
    return math.sqrt(3.0 / 4.0) * gyro_meas_error


def check_positive(name: str, value) -> float:
    '''Return value as float, raise ValueError unless it is finite and > 0'''
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be finite and positive, got {value}")
    return value


@dataclass
class FilterConfig:
    """
    Configuration of one filter instance.

    beta            : filter gain
    deltat          : integration step in seconds, None derives it from frequency
    frequency       : sampling frequency in Hz, used when deltat is None
    gyro_meas_error : expected gyroscope error in rad/s, informational unless
                      the config is built with from_gyro_error
    gyro_meas_drift : expected gyroscope drift in rad/s/s, informational

    Example:
    >>> cfg = FilterConfig(beta=0.1, deltat=0.005)
    >>> cfg = FilterConfig.from_gyro_error(5.0, frequency=200.0)
    >>> cfg = FilterConfig.from_dict({"beta": 0.041, "dt": 0.01})
    """
    beta: float            = BETA
    deltat: float          = None
    frequency: float       = None
    gyro_meas_error: float = GYRO_MEAS_ERROR
    gyro_meas_drift: float = GYRO_MEAS_DRIFT

    def __post_init__(self):
        self.beta = check_positive("beta", self.beta)

        if self.deltat is None:
            if self.frequency is None:
                logger.warning(
                    "Neither deltat nor frequency given, assuming %.1f Hz sampling; "
                    "set deltat to the real sample period", DEFAULT_FREQUENCY)
                self.frequency = DEFAULT_FREQUENCY
            self.frequency = check_positive("frequency", self.frequency)
            self.deltat = 1.0 / self.frequency
        else:
            self.deltat = check_positive("deltat", self.deltat)
            self.frequency = 1.0 / self.deltat

        self.gyro_meas_error = float(self.gyro_meas_error)
        self.gyro_meas_drift = float(self.gyro_meas_drift)

    @classmethod
    def from_gyro_error(cls, deg_per_s: float, deltat: float = None, frequency: float = None):
        '''Build a config whose gain is derived from the gyroscope error in deg/s'''
        error = check_positive("gyro_meas_error", deg_per_s) * math.pi / 180.0
        return cls(beta=beta_from_gyro_error(error), deltat=deltat, frequency=frequency,
                   gyro_meas_error=error)

    @classmethod
    def from_dict(cls, d: dict):
        '''
        Accepts the keyword names of Madgwick():
          beta, deltat or dt, frequency, gyro_meas_error, gyro_meas_drift
        gyro_meas_error derives beta when beta itself is not given.
        '''
        known = {"beta", "deltat", "dt", "frequency", "gyro_meas_error", "gyro_meas_drift"}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown filter settings: {sorted(unknown)}")

        deltat = d.get("deltat", d.get("dt", None))
        error = d.get("gyro_meas_error", GYRO_MEAS_ERROR)
        beta = d.get("beta", None)
        if beta is None:
            if "gyro_meas_error" in d:
                beta = beta_from_gyro_error(check_positive("gyro_meas_error", error))
            else:
                beta = BETA
        return cls(beta=beta, deltat=deltat, frequency=d.get("frequency", None),
                   gyro_meas_error=error, gyro_meas_drift=d.get("gyro_meas_drift", GYRO_MEAS_DRIFT))

    def to_dict(self) -> dict:
        return asdict(self)
