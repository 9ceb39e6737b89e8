#!/usr/bin/env python3
"""
Headless simulation runner.

Runs the fluid for a number of steps without any display and logs
periodic diagnostics and timing.
"""

import argparse
import logging
import sys
import time
from typing import Optional, Sequence

from .config import SimulationConfig
from .core.errors import SimulationError
from .simulation import FluidSimulation

logger = logging.getLogger("spherefluid")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SPH fluid in a spherical container (headless)")
    parser.add_argument("--config", default=None, help="JSON configuration file")
    parser.add_argument("--particles", type=int, default=None, help="Number of particles")
    parser.add_argument("--steps", type=int, default=100, help="Number of steps to run")
    parser.add_argument("--dt", type=float, default=None, help="Time step (default: config time_step)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the initial cloud")
    parser.add_argument("--backend", choices=["cpu", "numba"], default=None)
    parser.add_argument("--report-every", type=int, default=10,
                        help="Log diagnostics every N steps (0 disables)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def configure_logging(level: str):
    """Attach a plain stream handler to the package logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()
    overrides = {}
    if args.particles is not None:
        overrides["num_particles"] = args.particles
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.backend is not None:
        overrides["backend"] = args.backend
    if args.dt is not None:
        overrides["time_step"] = args.dt
    return config.replace(**overrides) if overrides else config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = config_from_args(args)
        sim = FluidSimulation(config)
    except (SimulationError, OSError) as e:
        logger.error("Could not start simulation: %s", e)
        return 2

    logger.info("Simulation info:")
    logger.info("  Particles: %d", sim.n_particles)
    logger.info("  Sphere radius: %g", config.sphere_size)
    logger.info("  Steps: %d (dt=%g)", args.steps, config.time_step)

    step_times = []
    try:
        for _ in range(args.steps):
            t0 = time.perf_counter()
            sim.step()
            step_times.append(time.perf_counter() - t0)

            if args.report_every and sim.step_count % args.report_every == 0:
                logger.info("%s  (%.1f ms/step)", sim.diagnostics().summary(),
                            1000 * step_times[-1])
    except SimulationError as e:
        logger.error("Simulation aborted at step %d: %s", sim.step_count + 1, e)
        return 1

    if step_times:
        mean_ms = 1000 * sum(step_times) / len(step_times)
        logger.info("Done: %d steps, %.1f ms/step average", len(step_times), mean_ms)
    logger.info("Final: %s", sim.diagnostics().summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
