"""
Kepler Propagation Benchmark

Generates a population of random orbits and times repeated position sweeps
one day past the current time, then reports per-run and summary timings.

Usage:
    python benchmark.py [--orbits N] [--runs N] [--seed S] [--workers W] [--plot] [--verbose] [--log-file PATH]

Arguments:
    --orbits: Number of random orbits (default from config.NUM_ORBITS)
    --runs: Number of timed sweeps (default from config.NUM_RUNS)
    --seed: Random seed for element generation
    --workers: Thread pool size for the sweep (1 = serial)
    --plot: Save a one-period position track of the reference orbit
    --verbose: Enable debug logging
    --log-file: Also write the log to PATH
"""

import argparse
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

import config
from kepler_orbit import OrbitalElements, OrbitPropagator, propagate_many
from logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def generate_random_orbits(
    count: int, rng: np.random.Generator, epoch: Optional[datetime] = None
) -> List[OrbitPropagator]:
    """
    Build ``count`` propagators with elements drawn from the config ranges.

    Parameters
    ----------
    count : int
        Number of orbits
    rng : numpy.random.Generator
        Random source
    epoch : datetime, optional
        Shared epoch (default: now, UTC)

    Returns
    -------
    list of OrbitPropagator
    """
    if epoch is None:
        epoch = datetime.now(timezone.utc)

    periods = rng.integers(*config.ORBITAL_PERIOD_RANGE_S, size=count)
    eccentricities = rng.uniform(*config.ECCENTRICITY_RANGE, size=count)
    mean_anomalies = rng.uniform(*config.MEAN_ANOMALY_RANGE_RAD, size=count)
    mean_motions = rng.uniform(*config.MEAN_MOTION_RANGE_RAD_S, size=count)
    semi_major_axes = rng.uniform(*config.SEMI_MAJOR_AXIS_RANGE_M, size=count)
    nodes = rng.uniform(*config.NODE_RANGE_RAD, size=count)
    arguments = rng.uniform(*config.ARGUMENT_OF_PERIAPSIS_RANGE_RAD, size=count)
    inclinations = rng.uniform(*config.INCLINATION_RANGE_RAD, size=count)

    propagators = []
    for k in range(count):
        elements = OrbitalElements(
            epoch=epoch,
            orbital_period=timedelta(seconds=int(periods[k])),
            eccentricity=float(eccentricities[k]),
            mean_anomaly_at_epoch=float(mean_anomalies[k]),
            mean_motion=float(mean_motions[k]),
            semi_major_axis=float(semi_major_axes[k]),
            longitude_of_ascending_node=float(nodes[k]),
            argument_of_periapsis=float(arguments[k]),
            inclination=float(inclinations[k]),
        )
        propagators.append(OrbitPropagator(elements))

    logger.debug(f"Generated {count} random orbits at epoch {epoch.isoformat()}")
    return propagators


def run_benchmark(
    propagators: List[OrbitPropagator], runs: int, workers: Optional[int] = 1
) -> List[float]:
    """
    Time ``runs`` position sweeps over all propagators.

    Returns
    -------
    list of float
        Duration of each run in seconds
    """
    durations = []

    for run in range(1, runs + 1):
        start = time.perf_counter()
        update_time = datetime.now(timezone.utc) + config.UPDATE_OFFSET

        propagate_many(propagators, update_time, max_workers=workers)

        duration = time.perf_counter() - start
        durations.append(duration)
        logger.info(f"Run {run}: {duration * 1e3:.3f} ms")

    return durations


def summarize_durations(durations: List[float]) -> Dict[str, float]:
    """Fastest, slowest, average and total duration (seconds)."""
    values = np.asarray(durations, dtype=float)
    return {
        "fastest": float(values.min()),
        "slowest": float(values.max()),
        "average": float(values.mean()),
        "total": float(values.sum()),
    }


def plot_orbit_track(
    propagator: OrbitPropagator, samples: int = 360, output_file: str = "orbit_track.png"
) -> str:
    """
    Plot the position track over one orbital period.

    Parameters
    ----------
    propagator : OrbitPropagator
        Orbit to plot (must have a non-zero period)
    samples : int
        Number of sample instants
    output_file : str
        Output image path

    Returns
    -------
    str
        Path of the saved figure
    """
    elements = propagator.elements
    epoch = elements.epoch
    times = [epoch + elements.orbital_period * (k / samples) for k in range(samples + 1)]
    track = np.array([propagator.get_position(t).to_array() for t in times]) / 1e3  # km

    fig = plt.figure(figsize=(12, 6))

    ax1 = fig.add_subplot(1, 2, 1, projection="3d")
    ax1.plot(track[:, 0], track[:, 1], track[:, 2], linewidth=1.5)
    ax1.scatter([0], [0], [0], color="orange", s=40, label="Focus")
    ax1.set_xlabel("X (km)")
    ax1.set_ylabel("Y (km)")
    ax1.set_zlabel("Z (km)")
    ax1.set_title("Position Track (one period)")
    ax1.legend()

    ax2 = fig.add_subplot(1, 2, 2)
    minutes = np.array([(t - epoch).total_seconds() for t in times]) / 60.0
    ax2.plot(minutes, np.linalg.norm(track, axis=1), linewidth=1.5)
    ax2.set_xlabel("Time since epoch (min)")
    ax2.set_ylabel("Radius (km)")
    ax2.set_title("Orbital Radius")
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    logger.info(f"Saved orbit track plot to {output_file}")
    plt.close(fig)
    return output_file


def main() -> None:
    """Benchmark entry point."""
    parser = argparse.ArgumentParser(description="Kepler Orbit Propagation Benchmark")
    parser.add_argument("--orbits", type=int, default=config.NUM_ORBITS, help="Number of random orbits")
    parser.add_argument("--runs", type=int, default=config.NUM_RUNS, help="Number of timed runs")
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED, help="Random seed")
    parser.add_argument("--workers", type=int, default=1, help="Thread pool size (1 = serial)")
    parser.add_argument("--plot", action="store_true", help="Plot the reference orbit track")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")

    args = parser.parse_args()

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    logger.info("Kepler Orbit Propagation Benchmark")
    logger.info("=" * 60)

    rng = np.random.default_rng(args.seed)
    propagators = generate_random_orbits(args.orbits, rng)

    durations = run_benchmark(propagators, args.runs, args.workers)
    summary = summarize_durations(durations)

    logger.info("")
    logger.info(f"Benchmark results for {args.runs} runs with {args.orbits} orbits:")
    logger.info(f"  Fastest run: {summary['fastest'] * 1e3:.3f} ms")
    logger.info(f"  Slowest run: {summary['slowest'] * 1e3:.3f} ms")
    logger.info(f"  Average duration: {summary['average'] * 1e3:.3f} ms")
    logger.info(f"  Total duration: {summary['total'] * 1e3:.3f} ms")

    if args.plot:
        reference = OrbitPropagator(
            OrbitalElements(epoch=datetime.now(timezone.utc), **config.EXAMPLE_ORBIT)
        )
        logger.info("")
        plot_orbit_track(reference)

    logger.info("=" * 60)


if __name__ == "__main__":
    main()
