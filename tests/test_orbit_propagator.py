"""
Tests for the Keplerian Orbit Propagator

Tests time reduction, true anomaly and position queries for elliptical and
hyperbolic orbits, diagnostics output and concurrent fan-out.

Run with:
    python -m pytest tests/test_orbit_propagator.py -v
"""

import dataclasses
import math
import unittest
from datetime import datetime, timedelta, timezone

import numpy as np

import config
from kepler_orbit import (
    OrbitalElements,
    OrbitPropagator,
    Vector3,
    mean_motion_for_period,
    propagate_many,
    reduce_time_since_epoch,
)
from kepler_orbit.orbit_propagator import position_from_true_anomaly

EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
TWO_PI = 2.0 * math.pi


def make_elements(**overrides) -> OrbitalElements:
    """Reference orbit with optional field overrides."""
    fields = dict(config.EXAMPLE_ORBIT)
    fields["epoch"] = EPOCH
    fields.update(overrides)
    return OrbitalElements(**fields)


class TestTimeReduction(unittest.TestCase):
    """Test folding of query time into one orbital period."""

    def setUp(self):
        self.period = timedelta(seconds=6000)

    def test_zero_period_skips_folding(self):
        t = EPOCH + timedelta(days=10)
        self.assertEqual(reduce_time_since_epoch(EPOCH, timedelta(0), t), 864000.0)

    def test_within_one_period_unchanged(self):
        t = EPOCH + timedelta(seconds=2500)
        self.assertEqual(reduce_time_since_epoch(EPOCH, self.period, t), 2500.0)

    def test_exactly_one_period_folds_to_zero(self):
        t = EPOCH + self.period
        self.assertEqual(reduce_time_since_epoch(EPOCH, self.period, t), 0.0)

    def test_fractional_period_folds_to_zero(self):
        period = config.EXAMPLE_ORBIT["orbital_period"]
        for k in [-2, -1, 1, 2, 3]:
            self.assertEqual(reduce_time_since_epoch(EPOCH, period, EPOCH + period * k), 0.0, f"k={k}")

    def test_forward_folding(self):
        t = EPOCH + timedelta(seconds=21000)  # 3.5 periods
        self.assertEqual(reduce_time_since_epoch(EPOCH, self.period, t), 3000.0)

    def test_backward_folding(self):
        self.assertEqual(
            reduce_time_since_epoch(EPOCH, self.period, EPOCH - timedelta(seconds=1500)), 4500.0
        )
        self.assertEqual(
            reduce_time_since_epoch(EPOCH, self.period, EPOCH - timedelta(seconds=13500)), 4500.0
        )

    def test_very_large_gap(self):
        t = EPOCH + timedelta(days=365250, seconds=1234)
        seconds = reduce_time_since_epoch(EPOCH, self.period, t)
        self.assertGreaterEqual(seconds, 0.0)
        self.assertLessEqual(seconds, 6000.0)
        # 365250 days is a whole number of 6000 s periods
        self.assertEqual(seconds, 1234.0)

    def test_subsecond_truncation(self):
        t = EPOCH + timedelta(seconds=10.9)
        self.assertEqual(reduce_time_since_epoch(EPOCH, timedelta(0), t), 10.0)
        self.assertAlmostEqual(
            reduce_time_since_epoch(EPOCH, timedelta(0), t, truncate_to_seconds=False), 10.9, places=6
        )

    def test_mean_motion_for_period(self):
        self.assertAlmostEqual(mean_motion_for_period(self.period), TWO_PI / 6000.0, places=15)
        self.assertEqual(mean_motion_for_period(timedelta(0)), 0.0)


class TestOrbitalElements(unittest.TestCase):
    """Test element construction and validation."""

    def test_negative_eccentricity_rejected(self):
        with self.assertRaisesRegex(ValueError, "Eccentricity must be finite"):
            make_elements(eccentricity=-0.1)

    def test_non_finite_eccentricity_rejected(self):
        with self.assertRaisesRegex(ValueError, "Eccentricity must be finite"):
            make_elements(eccentricity=math.nan)

    def test_parabolic_rejected(self):
        with self.assertRaisesRegex(ValueError, "Parabolic"):
            make_elements(eccentricity=1.0)

    def test_negative_period_rejected(self):
        with self.assertRaisesRegex(ValueError, "Orbital period must be non-negative"):
            make_elements(orbital_period=timedelta(seconds=-1))

    def test_elements_are_frozen(self):
        elements = make_elements()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            elements.eccentricity = 0.5

    def test_regime(self):
        self.assertEqual(make_elements().regime.value, "elliptical")
        self.assertEqual(make_elements(eccentricity=1.5).regime.value, "hyperbolic")


class TestEllipticalPropagation(unittest.TestCase):
    """Test the elliptical propagation path."""

    def setUp(self):
        self.propagator = OrbitPropagator(make_elements())

    def test_periapsis_at_epoch(self):
        """Example orbit at epoch sits at a(1 - e) on the x axis."""
        position = self.propagator.get_position(EPOCH)
        np.testing.assert_allclose(position.to_array(), [6300000.0, 0.0, 0.0], atol=1e-3)

    def test_apoapsis_at_half_period(self):
        t = EPOCH + config.EXAMPLE_ORBIT["orbital_period"] / 2
        nu = self.propagator.get_true_anomaly(t)
        self.assertAlmostEqual(nu, math.pi, delta=1e-2)

        radius = np.linalg.norm(self.propagator.get_position(t).to_array())
        self.assertAlmostEqual(radius, 7700000.0, delta=100.0)

    def test_true_anomaly_zero_at_epoch(self):
        for e in [0.0, 0.1, 0.5, 0.9]:
            propagator = OrbitPropagator(make_elements(eccentricity=e))
            nu = propagator.get_true_anomaly(EPOCH)
            self.assertLess(min(nu, TWO_PI - nu), 1e-5, f"e={e}")

    def test_true_anomaly_range(self):
        """Elliptical true anomaly always lies in [0, 2*pi)."""
        rng = np.random.default_rng(7)
        for _ in range(200):
            elements = make_elements(
                orbital_period=timedelta(seconds=int(rng.integers(3600, 86400))),
                eccentricity=float(rng.uniform(0.0, 0.9)),
                mean_anomaly_at_epoch=float(rng.uniform(-10.0, 10.0)),
                mean_motion=float(rng.uniform(0.0001, 1.0)),
            )
            t = EPOCH + timedelta(seconds=float(rng.uniform(-1e7, 1e7)))
            nu = OrbitPropagator(elements).get_true_anomaly(t)
            self.assertGreaterEqual(nu, 0.0)
            self.assertLess(nu, TWO_PI)

    def test_periodicity(self):
        """Positions repeat every orbital period, forwards and backwards."""
        period = timedelta(seconds=6000)
        propagator = OrbitPropagator(make_elements(
            orbital_period=period,
            mean_motion=mean_motion_for_period(period),
            eccentricity=0.3,
            mean_anomaly_at_epoch=0.9,
            longitude_of_ascending_node=0.4,
            argument_of_periapsis=1.1,
            inclination=0.7,
        ))
        reference = propagator.get_position(EPOCH).to_array()

        for k in [-100, -3, -1, 1, 2, 5, 100]:
            position = propagator.get_position(EPOCH + period * k).to_array()
            np.testing.assert_allclose(position, reference, atol=1e-3, err_msg=f"k={k}")

    def test_periodicity_fractional_second_period(self):
        """Reference orbit period is not a whole number of seconds."""
        period = config.EXAMPLE_ORBIT["orbital_period"]
        reference = self.propagator.get_position(EPOCH).to_array()

        for k in [-2, -1, 1, 2, 3]:
            position = self.propagator.get_position(EPOCH + period * k).to_array()
            np.testing.assert_allclose(position, reference, atol=1e-3, err_msg=f"k={k}")

    def test_circular_orbit_radius_constant(self):
        period = timedelta(seconds=6000)
        propagator = OrbitPropagator(make_elements(
            eccentricity=0.0,
            orbital_period=period,
            mean_motion=mean_motion_for_period(period),
            inclination=0.5,
        ))
        for seconds in [0, 750, 1500, 3000, 4500, 5999]:
            position = propagator.get_position(EPOCH + timedelta(seconds=seconds))
            self.assertAlmostEqual(np.linalg.norm(position.to_array()), 7000000.0, delta=1e-3)

    def test_polar_orbit_rotation(self):
        propagator = OrbitPropagator(make_elements(
            eccentricity=0.0,
            semi_major_axis=1e7,
            mean_anomaly_at_epoch=math.pi / 2,
            inclination=math.pi / 2,
        ))
        position = propagator.get_position(EPOCH)
        np.testing.assert_allclose(position.to_array(), [0.0, 0.0, 1e7], atol=1e-3)

    def test_query_does_not_change_elements(self):
        elements = make_elements()
        propagator = OrbitPropagator(elements)
        first = propagator.get_position(EPOCH + timedelta(days=3))
        propagator.get_position(EPOCH + timedelta(days=300))
        self.assertIs(propagator.elements, elements)
        self.assertEqual(propagator.elements.epoch, EPOCH)
        self.assertEqual(propagator.get_position(EPOCH + timedelta(days=3)), first)

    def test_subsecond_precision_opt_in(self):
        elements = make_elements(orbital_period=timedelta(0))
        t = EPOCH + timedelta(seconds=100.5)
        truncated = OrbitPropagator(elements).get_true_anomaly(t)
        precise = OrbitPropagator(elements, truncate_to_seconds=False).get_true_anomaly(t)
        self.assertEqual(truncated, OrbitPropagator(elements).get_true_anomaly(EPOCH + timedelta(seconds=100)))
        self.assertGreater(precise, truncated)


class TestHyperbolicPropagation(unittest.TestCase):
    """Test the hyperbolic propagation path."""

    def make_propagator(self, semi_major_axis=7000000.0) -> OrbitPropagator:
        return OrbitPropagator(make_elements(
            eccentricity=2.0,
            semi_major_axis=semi_major_axis,
            mean_motion=0.001,
            orbital_period=timedelta(0),
        ))

    def test_periapsis_at_epoch(self):
        position = self.make_propagator().get_position(EPOCH)
        # r_p = |a|(e - 1)
        np.testing.assert_allclose(position.to_array(), [7000000.0, 0.0, 0.0], atol=1e-3)

    def test_axis_sign_convention_parity(self):
        t = EPOCH + timedelta(seconds=1000)
        positive = self.make_propagator(7000000.0).get_position(t)
        negative = self.make_propagator(-7000000.0).get_position(t)
        np.testing.assert_allclose(positive.to_array(), negative.to_array(), rtol=1e-12)

    def test_true_anomaly_sign_follows_time(self):
        propagator = self.make_propagator()
        self.assertGreater(propagator.get_true_anomaly(EPOCH + timedelta(seconds=1000)), 0.0)
        self.assertLess(propagator.get_true_anomaly(EPOCH - timedelta(seconds=1000)), 0.0)
        self.assertLess(propagator.get_position(EPOCH - timedelta(seconds=1000)).y, 0.0)

    def test_radius_grows_away_from_periapsis(self):
        propagator = self.make_propagator()
        radii = [
            np.linalg.norm(propagator.get_position(EPOCH + timedelta(seconds=s)).to_array())
            for s in [0, 500, 1000, 2000, 4000]
        ]
        self.assertTrue(np.all(np.diff(radii) > 0.0))


class TestPropagationDiagnostics(unittest.TestCase):
    """Test diagnostic propagation output and fan-out."""

    def setUp(self):
        self.propagator = OrbitPropagator(make_elements())

    def test_propagate_result_fields(self):
        result = self.propagator.propagate(EPOCH)

        self.assertEqual(result["timestamp"], EPOCH.isoformat())
        self.assertEqual(result["regime"], "elliptical")
        self.assertEqual(result["seconds_from_epoch"], 0.0)
        self.assertTrue(result["converged"])
        self.assertGreaterEqual(result["iterations"], 1)
        self.assertAlmostEqual(result["radius"], 6300000.0, delta=1e-3)
        self.assertEqual(len(result["position"]), 3)

    def test_non_convergence_reported_once(self):
        """A capped solve is flagged in the result and logged a single time."""
        # M_h = 100 with e = 1.5 needs far more than 10 Newton steps
        propagator = OrbitPropagator(make_elements(
            eccentricity=1.5,
            mean_motion=1.0,
            orbital_period=timedelta(0),
        ))

        with self.assertLogs("kepler_orbit", level="DEBUG") as logs:
            result = propagator.propagate(EPOCH + timedelta(seconds=100))

        self.assertFalse(result["converged"])
        self.assertEqual(result["iterations"], 10)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("did not converge", logs.records[0].getMessage())

    def test_propagate_matches_get_position(self):
        t = EPOCH + timedelta(hours=5)
        result = self.propagator.propagate(t)
        self.assertEqual(result["position"], self.propagator.get_position(t).to_tuple())
        self.assertEqual(result["true_anomaly"], self.propagator.get_true_anomaly(t))

    def test_propagate_batch(self):
        times = [EPOCH + timedelta(minutes=m) for m in range(0, 100, 10)]
        results = self.propagator.propagate_batch(times)
        self.assertEqual(len(results), len(times))
        self.assertEqual([r["timestamp"] for r in results], [t.isoformat() for t in times])

    def test_propagate_many_threaded_matches_serial(self):
        rng = np.random.default_rng(3)
        propagators = [
            OrbitPropagator(make_elements(
                eccentricity=float(rng.uniform(0.0, 0.9)),
                mean_anomaly_at_epoch=float(rng.uniform(0.0, TWO_PI)),
                longitude_of_ascending_node=float(rng.uniform(0.0, TWO_PI)),
                inclination=float(rng.uniform(0.0, math.pi / 2)),
            ))
            for _ in range(50)
        ]
        t = EPOCH + timedelta(days=1)

        serial = propagate_many(propagators, t, max_workers=1)
        threaded = propagate_many(propagators, t, max_workers=4)

        self.assertEqual(serial, threaded)
        self.assertEqual(serial[10], propagators[10].get_position(t))

    def test_position_from_true_anomaly(self):
        position = position_from_true_anomaly(7000000.0, 0.1, 0.0, 0.0, 0.0, math.pi)
        self.assertIsInstance(position, Vector3)
        np.testing.assert_allclose(position.to_array(), [-7700000.0, 0.0, 0.0], atol=1e-3)


if __name__ == "__main__":
    unittest.main()
