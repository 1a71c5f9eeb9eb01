"""
Kepler Orbit Propagation Package

Analytic two-body propagation from classical orbital elements: the query
time is folded into one orbital period, Kepler's equation is solved by
Newton-Raphson, and the resulting true anomaly is rotated into a 3D
position.

Modules:
    vector3: Minimal 3D vector value type
    ellipse_math: Conic geometry (semi-latus rectum, radius)
    kepler_solver: Elliptical and hyperbolic Kepler equation solvers
    orbit_propagator: Orbital elements, time reduction and position queries

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

from kepler_orbit.ellipse_math import ConicRegime
from kepler_orbit.kepler_solver import SolverResult
from kepler_orbit.orbit_propagator import (
    OrbitalElements,
    OrbitPropagator,
    mean_motion_for_period,
    propagate_many,
    reduce_time_since_epoch,
)
from kepler_orbit.vector3 import Vector3

__version__ = "1.0.0"

__all__ = [
    "ConicRegime",
    "OrbitalElements",
    "OrbitPropagator",
    "SolverResult",
    "Vector3",
    "mean_motion_for_period",
    "propagate_many",
    "reduce_time_since_epoch",
]
