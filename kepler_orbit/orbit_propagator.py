"""
Keplerian Orbit Propagator

Evaluates the position of a body on a fixed Keplerian orbit at arbitrary
instants. Each query is independent: the query time is folded into one
orbital period, Kepler's equation is solved for the true anomaly, and the
true anomaly is rotated from the orbital plane into the reference frame
defined by the ascending node, argument of periapsis and inclination.

Elliptical orbits (e < 1) and hyperbolic trajectories (e > 1) are
supported. Parabolic orbits (e = 1) are rejected at construction.

Propagators hold no mutable state, so a batch of orbits can be queried
concurrently with ``propagate_many``.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from kepler_orbit.ellipse_math import ConicRegime
from kepler_orbit.kepler_solver import (
    SolverResult,
    eccentric_anomaly,
    hyperbolic_anomaly,
    hyperbolic_mean_anomaly_from_time,
    mean_anomaly_from_time,
    true_anomaly_from_eccentric_anomaly,
    true_anomaly_from_hyperbolic_anomaly,
)
from kepler_orbit.vector3 import Vector3

_ZERO = timedelta(0)


@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical orbital elements plus epoch.

    Units:
        epoch: instant at which mean_anomaly_at_epoch is valid
        orbital_period: one revolution (timedelta(0) disables time folding)
        eccentricity: 0 circle, (0, 1) ellipse, > 1 hyperbola
        mean_anomaly_at_epoch: radians
        mean_motion: radians per second
        semi_major_axis: meters (either sign accepted for hyperbolas)
        longitude_of_ascending_node: radians
        argument_of_periapsis: radians
        inclination: radians
    """
    epoch: datetime
    orbital_period: timedelta
    eccentricity: float
    mean_anomaly_at_epoch: float
    mean_motion: float
    semi_major_axis: float
    longitude_of_ascending_node: float
    argument_of_periapsis: float
    inclination: float

    def __post_init__(self):
        if not math.isfinite(self.eccentricity) or self.eccentricity < 0.0:
            raise ValueError(f"Eccentricity must be finite and non-negative. Got: {self.eccentricity}")
        if self.eccentricity == 1.0:
            raise ValueError("Parabolic orbits (e = 1) are not supported.")
        if self.orbital_period < _ZERO:
            raise ValueError(f"Orbital period must be non-negative. Got: {self.orbital_period}")

    @property
    def regime(self) -> ConicRegime:
        return ConicRegime.from_eccentricity(self.eccentricity)


def mean_motion_for_period(orbital_period: timedelta) -> float:
    """n = 2*pi / T in rad/s. Returns 0 for a zero period."""
    seconds = orbital_period.total_seconds()
    if seconds == 0:
        return 0.0
    return 2.0 * math.pi / seconds


def reduce_time_since_epoch(
    epoch: datetime,
    orbital_period: timedelta,
    time: datetime,
    truncate_to_seconds: bool = True,
) -> float:
    """
    Fold ``time - epoch`` into one orbital period and return it in seconds.

    Gaps longer than one period, or before the epoch, are reduced with a
    single floor division so the cost does not grow with the gap. A zero
    period skips folding.

    Args:
        epoch: Element epoch
        orbital_period: Orbital period
        time: Query instant
        truncate_to_seconds: Drop sub-second precision (matches whole-second
            propagation). Pass False to keep microseconds.

    Returns:
        Seconds since the (folded) epoch
    """
    time_since_epoch = time - epoch

    if orbital_period != _ZERO and (time_since_epoch >= orbital_period or time_since_epoch < _ZERO):
        periods = time_since_epoch // orbital_period
        time_since_epoch -= orbital_period * periods

    if truncate_to_seconds:
        return float(int(time_since_epoch.total_seconds()))
    return time_since_epoch.total_seconds()


def position_from_true_anomaly(
    semi_major_axis: float,
    eccentricity: float,
    longitude_of_ascending_node: float,
    argument_of_periapsis: float,
    inclination: float,
    true_anomaly: float,
) -> Vector3:
    """
    Position in the reference frame for a given true anomaly.

    Args:
        semi_major_axis: a (m)
        eccentricity: e
        longitude_of_ascending_node: Omega (rad)
        argument_of_periapsis: omega (rad)
        inclination: i (rad)
        true_anomaly: nu (rad)

    Returns:
        Position vector in the unit of semi_major_axis
    """
    regime = ConicRegime.from_eccentricity(eccentricity)
    r = regime.radius(true_anomaly, semi_major_axis, eccentricity)

    # Argument of latitude
    theta = true_anomaly + argument_of_periapsis

    cos_raan = np.cos(longitude_of_ascending_node)
    sin_raan = np.sin(longitude_of_ascending_node)
    cos_theta = np.cos(theta)
    sin_theta = np.sin(theta)
    cos_i = np.cos(inclination)

    x = cos_raan * cos_theta - sin_raan * sin_theta * cos_i
    y = sin_raan * cos_theta + cos_raan * sin_theta * cos_i
    z = np.sin(inclination) * sin_theta

    return Vector3(x, y, z) * r


class OrbitPropagator:
    """
    Analytic Kepler propagator for one orbit.

    Positions are pure functions of the stored elements and the query time;
    nothing on the instance changes after construction.
    """

    def __init__(self, elements: OrbitalElements, truncate_to_seconds: bool = True):
        """
        Initialize propagator.

        Args:
            elements: Orbital elements and epoch
            truncate_to_seconds: Propagate from whole seconds since epoch
                (default: True)
        """
        self._elements = elements
        self._truncate_to_seconds = truncate_to_seconds

    @property
    def elements(self) -> OrbitalElements:
        return self._elements

    def _solve(self, time: datetime) -> Dict[str, Any]:
        el = self._elements
        seconds = reduce_time_since_epoch(
            el.epoch, el.orbital_period, time, self._truncate_to_seconds
        )

        if el.eccentricity < 1.0:
            mean_anomaly = mean_anomaly_from_time(el.mean_anomaly_at_epoch, el.mean_motion, seconds)
            result: SolverResult = eccentric_anomaly(mean_anomaly, el.eccentricity)
            true_anomaly = true_anomaly_from_eccentric_anomaly(el.eccentricity, result.value)
        else:
            mean_anomaly = hyperbolic_mean_anomaly_from_time(el.mean_motion, seconds)
            result = hyperbolic_anomaly(mean_anomaly, el.eccentricity)
            true_anomaly = true_anomaly_from_hyperbolic_anomaly(el.eccentricity, result.value)

        return {
            "seconds_from_epoch": seconds,
            "mean_anomaly": mean_anomaly,
            "solver": result,
            "true_anomaly": true_anomaly,
        }

    def get_true_anomaly(self, time: datetime) -> float:
        """True anomaly (rad) at ``time``."""
        return self._solve(time)["true_anomaly"]

    def get_position(self, time: datetime) -> Vector3:
        """Position at ``time`` in the unit of the semi-major axis."""
        return self._position(self.get_true_anomaly(time))

    def _position(self, true_anomaly: float) -> Vector3:
        el = self._elements
        return position_from_true_anomaly(
            el.semi_major_axis,
            el.eccentricity,
            el.longitude_of_ascending_node,
            el.argument_of_periapsis,
            el.inclination,
            true_anomaly,
        )

    def propagate(self, time: datetime) -> Dict[str, Any]:
        """
        Propagate with solver diagnostics.

        Args:
            time: Query instant

        Returns:
            Dictionary with position, true anomaly, radius and convergence
            information
        """
        solved = self._solve(time)
        solver: SolverResult = solved["solver"]
        position = self._position(solved["true_anomaly"])

        return {
            "timestamp": time.isoformat(),
            "regime": self._elements.regime.value,
            "seconds_from_epoch": solved["seconds_from_epoch"],
            "mean_anomaly": solved["mean_anomaly"],
            "auxiliary_anomaly": solver.value,
            "true_anomaly": solved["true_anomaly"],
            "radius": float(np.linalg.norm(position.to_array())),
            "position": position.to_tuple(),
            "converged": solver.converged,
            "iterations": solver.iterations,
        }

    def propagate_batch(self, timestamps: Iterable[datetime]) -> List[Dict[str, Any]]:
        """Propagate multiple timestamps."""
        return [self.propagate(ts) for ts in timestamps]


def propagate_many(
    propagators: Sequence[OrbitPropagator],
    time: datetime,
    max_workers: Optional[int] = None,
) -> List[Vector3]:
    """
    Positions of many orbits at one instant.

    Args:
        propagators: Orbits to query
        time: Query instant
        max_workers: Thread pool size. 1 evaluates serially.

    Returns:
        Positions in the same order as ``propagators``
    """
    if max_workers == 1:
        return [p.get_position(time) for p in propagators]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda p: p.get_position(time), propagators))
