"""
Benchmark Configuration and Reference Orbits

This module contains the run settings, random-element ranges and reference
orbit used by the benchmark harness and tests.

Random Element Ranges:
    Each benchmark orbit draws its elements uniformly from the ranges below.
    Period and mean motion are drawn independently, so the generated orbits
    are not physically consistent; they only exercise the propagator.

Reference Orbit:
    A 7000 km, e = 0.1 equatorial orbit. At epoch it sits at periapsis
    a(1 - e) = 6300 km; half a period later it reaches apoapsis
    a(1 + e) = 7700 km.

References:
    Vallado, D. A. (2013). Fundamentals of Astrodynamics and Applications (4th ed.).
"""

import math
from datetime import timedelta
from typing import Dict, Any, Tuple

# Benchmark run settings
NUM_ORBITS: int = 5000
NUM_RUNS: int = 10
UPDATE_OFFSET: timedelta = timedelta(days=1)  # Query one day past "now"
RANDOM_SEED: int = 42

# Uniform ranges for randomly generated elements (low, high)
ORBITAL_PERIOD_RANGE_S: Tuple[int, int] = (3600, 86400)  # 1 hour to 1 day
ECCENTRICITY_RANGE: Tuple[float, float] = (0.0, 0.9)
MEAN_ANOMALY_RANGE_RAD: Tuple[float, float] = (0.0, 2.0 * math.pi)
MEAN_MOTION_RANGE_RAD_S: Tuple[float, float] = (0.1, 1.0)
SEMI_MAJOR_AXIS_RANGE_M: Tuple[float, float] = (1e6, 1e8)  # 1000 km to 100,000 km
NODE_RANGE_RAD: Tuple[float, float] = (0.0, 2.0 * math.pi)
ARGUMENT_OF_PERIAPSIS_RANGE_RAD: Tuple[float, float] = (0.0, 2.0 * math.pi)
INCLINATION_RANGE_RAD: Tuple[float, float] = (0.0, math.pi / 2.0)

# Reference orbit (epoch supplied by the caller)
EXAMPLE_ORBIT: Dict[str, Any] = {
    'semi_major_axis': 7000000.0,
    'eccentricity': 0.1,
    'mean_motion': 0.0011,
    'mean_anomaly_at_epoch': 0.0,
    'longitude_of_ascending_node': 0.0,
    'argument_of_periapsis': 0.0,
    'inclination': 0.0,
    'orbital_period': timedelta(seconds=2.0 * math.pi / 0.0011),
}
