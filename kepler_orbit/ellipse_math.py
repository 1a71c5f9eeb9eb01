"""
Conic Section Geometry

Closed-form helpers for the orbit conic: semi-latus rectum and the radius
at a given true anomaly.

Two forms are provided:

- ``semi_latus_rectum`` / ``radius_at_true_anomaly``: the shared algebraic
  expression used for both ellipses and hyperbolas. For e > 1 the semi-latus
  rectum comes out negative and the absolute value in the radius step
  restores the sign.
- ``ConicRegime``: explicit elliptical/hyperbolic variant, each with its own
  semi-latus rectum formula. Produces the same radii without relying on the
  absolute value for valid geometry.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

from enum import Enum

import numpy as np


def semi_latus_rectum(semi_major_axis: float, eccentricity: float) -> float:
    """
    Semi-latus rectum p = a(1 - e^2).

    A circle (e == 0 exactly) returns ``a`` unchanged so no rounding noise
    from ``1 - e**2`` leaks into the radius.
    """
    if eccentricity == 0.0:
        return semi_major_axis
    return semi_major_axis * (1.0 - eccentricity * eccentricity)


def radius_at_true_anomaly(true_anomaly: float, semi_latus_rectum: float, eccentricity: float) -> float:
    """
    Orbital radius r = |p / (1 + e cos(nu))|.

    Args:
        true_anomaly: True anomaly nu (rad)
        semi_latus_rectum: Semi-latus rectum p (same unit as the result)
        eccentricity: Eccentricity e

    Returns:
        Radius. Not checked against orbit-specific bounds; a zero
        denominator gives inf.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.abs(np.float64(semi_latus_rectum) / (1.0 + eccentricity * np.cos(true_anomaly))))


class ConicRegime(Enum):
    """Orbit regime selected by eccentricity."""

    ELLIPTICAL = "elliptical"
    HYPERBOLIC = "hyperbolic"

    @classmethod
    def from_eccentricity(cls, eccentricity: float) -> "ConicRegime":
        if eccentricity < 1.0:
            return cls.ELLIPTICAL
        return cls.HYPERBOLIC

    def semi_latus_rectum(self, semi_major_axis: float, eccentricity: float) -> float:
        """
        Regime-specific semi-latus rectum.

        Hyperbolic trajectories accept either sign convention for the
        semi-major axis; only its magnitude is used: p = |a|(e^2 - 1).
        """
        if self is ConicRegime.ELLIPTICAL:
            return semi_latus_rectum(semi_major_axis, eccentricity)
        return abs(semi_major_axis) * (eccentricity * eccentricity - 1.0)

    def radius(self, true_anomaly: float, semi_major_axis: float, eccentricity: float) -> float:
        p = self.semi_latus_rectum(semi_major_axis, eccentricity)
        return radius_at_true_anomaly(true_anomaly, p, eccentricity)
