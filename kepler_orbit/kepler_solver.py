"""
Kepler Equation Solvers

Newton-Raphson root finders for the eccentric anomaly (elliptical orbits)
and the hyperbolic anomaly (hyperbolic trajectories), plus the conversions
from those auxiliary anomalies to true anomaly.

Both solvers run a fixed number of iterations at most. When the cap is hit
the last estimate is returned with ``converged=False`` instead of raising,
which keeps every call bounded in time. Near-zero Newton denominators are
not guarded: arithmetic is done with numpy under ``np.errstate`` so they
produce inf/NaN rather than exceptions.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
    Curtis, H. D. (2014). Orbital Mechanics for Engineering Students (3rd ed.).
"""

import logging
from typing import NamedTuple

import numpy as np

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi

# Newton-Raphson defaults
MAX_ITERATIONS = 10
TOLERANCE = 1e-6


class SolverResult(NamedTuple):
    """Anomaly estimate from a Newton-Raphson solve."""

    value: float
    converged: bool
    iterations: int


def mean_anomaly_from_time(mean_anomaly_at_epoch: float, mean_motion: float, seconds_from_epoch: float) -> float:
    """M = (M0 + n*t) mod 2*pi."""
    return float((mean_anomaly_at_epoch + mean_motion * seconds_from_epoch) % TWO_PI)


def eccentric_anomaly(
    mean_anomaly: float,
    eccentricity: float,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> SolverResult:
    """
    Solve Kepler's equation E - e sin(E) = M for elliptic orbits.

    Args:
        mean_anomaly: Mean anomaly M (rad)
        eccentricity: Eccentricity (0 <= e < 1)
        max_iterations: Iteration cap
        tolerance: Absolute change in E that counts as converged

    Returns:
        SolverResult with the eccentric anomaly E (rad)
    """
    M = np.float64(mean_anomaly)
    e = np.float64(eccentricity)
    E = M

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for iteration in range(1, max_iterations + 1):
            E_next = E - (E - e * np.sin(E) - M) / (1.0 - e * np.cos(E))
            if abs(E_next - E) < tolerance:
                return SolverResult(float(E_next), True, iteration)
            E = E_next

    logger.debug(
        f"Eccentric anomaly did not converge in {max_iterations} iterations "
        f"(M={mean_anomaly:.6f}, e={eccentricity:.6f}); using last estimate"
    )
    return SolverResult(float(E), False, max_iterations)


def true_anomaly_from_eccentric_anomaly(eccentricity: float, eccentric_anomaly: float) -> float:
    """
    Convert eccentric anomaly to true anomaly, wrapped to [0, 2*pi).
    """
    e = np.float64(eccentricity)
    cos_E = np.cos(eccentric_anomaly)
    sin_E = np.sin(eccentric_anomaly)

    with np.errstate(divide="ignore", invalid="ignore"):
        denom = 1.0 - e * cos_E
        nu = np.arctan2(
            np.sqrt((1.0 + e) / (1.0 - e)) * sin_E / denom,
            (cos_E - e) / denom,
        )
    return float((nu + TWO_PI) % TWO_PI)


def hyperbolic_mean_anomaly_from_time(mean_motion: float, seconds_from_epoch: float) -> float:
    """M_h = n*t. Hyperbolic trajectories are not periodic, so no wrapping."""
    return float(mean_motion * seconds_from_epoch)


def hyperbolic_anomaly(
    hyperbolic_mean_anomaly: float,
    eccentricity: float,
    max_iterations: int = MAX_ITERATIONS,
    tolerance: float = TOLERANCE,
) -> SolverResult:
    """
    Solve the hyperbolic Kepler equation e sinh(F) - F = M_h.

    Args:
        hyperbolic_mean_anomaly: Hyperbolic mean anomaly M_h (rad)
        eccentricity: Eccentricity (e > 1)
        max_iterations: Iteration cap
        tolerance: Absolute change in F that counts as converged

    Returns:
        SolverResult with the hyperbolic anomaly F
    """
    Mh = np.float64(hyperbolic_mean_anomaly)
    e = np.float64(eccentricity)
    F = Mh

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for iteration in range(1, max_iterations + 1):
            F_next = F - (e * np.sinh(F) - F - Mh) / (e * np.cosh(F) - 1.0)
            if abs(F_next - F) < tolerance:
                return SolverResult(float(F_next), True, iteration)
            F = F_next

    logger.debug(
        f"Hyperbolic anomaly did not converge in {max_iterations} iterations "
        f"(M_h={hyperbolic_mean_anomaly:.6f}, e={eccentricity:.6f}); using last estimate"
    )
    return SolverResult(float(F), False, max_iterations)


def true_anomaly_from_hyperbolic_anomaly(eccentricity: float, hyperbolic_anomaly: float) -> float:
    """
    Convert hyperbolic anomaly to true anomaly.

    No range normalization: the result is negative for F < 0.
    """
    e = np.float64(eccentricity)
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(2.0 * np.arctan(np.sqrt((e + 1.0) / (e - 1.0)) * np.tanh(hyperbolic_anomaly / 2.0)))
