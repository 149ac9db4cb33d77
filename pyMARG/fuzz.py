"""
Differential fuzzing of MARG filter implementations.

Random sample triples are fed to several implementations of the filter
update. Every implementation steps from the same prior orientation, the
first one (the reference) advances the prior. The report holds the largest
component difference seen and the largest deviation from unit norm.

    pyMARG-fuzz --samples 10000 --seed 1 --tolerance 1e-9
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import numpy as np

from pyMARG.config import BETA, check_positive
from pyMARG.madgwick import IDENTITY_QUATERNION, updateMARG, updateMARGJacobian
from pyMARG.quaternion import Quaternion, Vector3D

logger = logging.getLogger(__name__)

DEFAULT_IMPLEMENTATIONS = {
    "closed_form": updateMARG,
    "jacobian":    updateMARGJacobian,
}


@dataclass
class Measurement:
    acc: Vector3D
    gyr: Vector3D
    mag: Vector3D

    @classmethod
    def generate(cls, rng: np.random.Generator, scale: float = 10.0, zero_rate: float = 0.0):
        '''
        Every axis uniform in [0, scale).
        With probability zero_rate the accelerometer or the magnetometer
        reading is replaced by a zero vector.
        '''
        acc = Vector3D(rng.uniform(0.0, scale, 3))
        gyr = Vector3D(rng.uniform(0.0, scale, 3))
        mag = Vector3D(rng.uniform(0.0, scale, 3))
        if zero_rate > 0.0 and rng.random() < zero_rate:
            if rng.random() < 0.5:
                acc = Vector3D(0.0, 0.0, 0.0)
            else:
                mag = Vector3D(0.0, 0.0, 0.0)
        return cls(acc=acc, gyr=gyr, mag=mag)


@dataclass
class FuzzReport:
    samples: int = 0
    skipped: Dict[str, int] = field(default_factory=dict)
    skip_mismatches: int = 0
    max_divergence: float = 0.0
    max_norm_error: float = 0.0
    final: Optional[Quaternion] = None

    def passed(self, tolerance: float) -> bool:
        return (self.skip_mismatches == 0
                and self.max_divergence <= tolerance
                and self.max_norm_error <= tolerance)


def compare(n: int = 1000,
            seed: int = None,
            beta: float = BETA,
            deltat: float = 0.01,
            impls: Dict[str, Callable] = None,
            scale: float = 10.0,
            zero_rate: float = 0.0) -> FuzzReport:
    """
    Feed n random measurements to every implementation.
    impls : name -> function with the signature of updateMARG, the first
            entry is the reference.
    """
    if impls is None:
        impls = DEFAULT_IMPLEMENTATIONS
    if len(impls) < 1:
        raise ValueError("Need at least one implementation")
    beta = check_positive("beta", beta)
    deltat = check_positive("deltat", deltat)

    rng = np.random.default_rng(seed)
    names: List[str] = list(impls)
    report = FuzzReport(skipped={name: 0 for name in names})
    q = Quaternion(IDENTITY_QUATERNION)

    for i in range(n):
        m = Measurement.generate(rng, scale=scale, zero_rate=zero_rate)
        results = {name: impls[name](q, m.gyr, m.acc, m.mag, dt=deltat, beta=beta) for name in names}

        for name, r in results.items():
            if r is None:
                report.skipped[name] += 1
            else:
                report.max_norm_error = max(report.max_norm_error, abs(r.norm - 1.0))

        reference = results[names[0]]
        for name in names[1:]:
            other = results[name]
            if (reference is None) != (other is None):
                report.skip_mismatches += 1
                logger.warning("Sample %d: %s and %s disagree on skipping", i, names[0], name)
            elif reference is not None:
                d = float(np.max(np.abs(reference.q - other.q)))
                if d > report.max_divergence:
                    logger.debug("Sample %d: %s differs from %s by %g", i, name, names[0], d)
                report.max_divergence = max(report.max_divergence, d)

        if reference is not None:
            q = reference
        report.samples += 1

    report.final = q
    return report


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Compare MARG filter implementations on random samples")
    p.add_argument("--samples", type=int, default=1000, help="Number of random sample triples.")
    p.add_argument("--seed", type=int, default=None, help="Random seed.")
    p.add_argument("--beta", type=float, default=BETA, help="Filter gain.")
    p.add_argument("--deltat", type=float, default=0.01, help="Integration step in seconds.")
    p.add_argument("--scale", type=float, default=10.0, help="Upper bound of the uniform sample components.")
    p.add_argument("--zero-rate", type=float, default=0.0, help="Probability of a zero accelerometer or magnetometer sample.")
    p.add_argument("--tolerance", type=float, default=1e-9, help="Largest accepted difference.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return p.parse_args(argv)


def main(argv: List[str] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        report = compare(n=args.samples, seed=args.seed, beta=args.beta, deltat=args.deltat,
                         scale=args.scale, zero_rate=args.zero_rate)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    logger.info("samples: %d, skipped: %s, skip mismatches: %d",
                report.samples, report.skipped, report.skip_mismatches)
    logger.info("max divergence: %.3g, max norm error: %.3g",
                report.max_divergence, report.max_norm_error)
    logger.info("final orientation: %s", report.final)

    if not report.passed(args.tolerance):
        logger.error("Implementations disagree beyond tolerance %g", args.tolerance)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
