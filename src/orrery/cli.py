"""Command line entry point: ``orrery view|record|analyze|table``."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from orrery.core.config import DEFAULT_CONFIG, SECONDS_PER_DAY, Config, load_config
from orrery.core.driver import SimulationDriver
from orrery.core.errors import OrreryError
from orrery.core.logging_utils import RunLogger, resolve_run_dir
from orrery.data.loader import load_bodies
from orrery.data.presets import BUNDLED_CSV, sun

logger = logging.getLogger(__name__)


def _add_scene_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON file overriding the default configuration")
    parser.add_argument("--bodies", type=Path, default=BUNDLED_CSV, help="Body record CSV (default: bundled planets)")
    parser.add_argument("--central-mass", type=float, help="Central body mass in kg (default: the Sun)")
    parser.add_argument("--time-scale", type=float, help="Simulated seconds per real second")
    parser.add_argument("--segments", type=int, help="Orbit line segment count")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orrery", description="Keplerian solar system simulator.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic logging level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    view = sub.add_parser("view", help="Open the interactive viewer")
    _add_scene_arguments(view)
    view.add_argument("--select", help="Body to follow at start")

    record = sub.add_parser("record", help="Run headless and record a run")
    _add_scene_arguments(record)
    record.add_argument("--frames", type=int, default=3600, help="Number of frames to simulate")
    record.add_argument("--dt", type=float, default=1.0 / 60.0, help="Real seconds per frame")
    record.add_argument("--runs-dir", type=Path, help="Where runs are written (default from config)")
    record.add_argument("--run-id", help="Run directory name")

    analyze = sub.add_parser("analyze", help="Analyze a recorded run")
    analyze.add_argument("run", nargs="?", help="Run directory or id (default: last run)")
    analyze.add_argument("--runs-dir", type=Path, default=Path(DEFAULT_CONFIG.sim.runs_dir))

    table = sub.add_parser("table", help="Print body figures at a given time")
    _add_scene_arguments(table)
    table.add_argument("--days", type=float, default=0.0, help="Simulated time in days")
    return parser


def build_driver(args: argparse.Namespace, config: Config) -> SimulationDriver:
    result = load_bodies(args.bodies)
    if not result.records:
        raise FileNotFoundError(f"no usable body records in {args.bodies}")
    central = sun()
    if args.central_mass is not None:
        central.set_mass(args.central_mass)
    driver = SimulationDriver(central, result.bodies, config=config)
    if args.time_scale is not None:
        driver.set_time_scale(args.time_scale)
    if args.segments is not None:
        driver.set_segment_count(args.segments)
    return driver


def cmd_view(args: argparse.Namespace, config: Config) -> None:
    from orrery.render.viewer import OrreryViewer

    driver = build_driver(args, config)
    viewer = OrreryViewer(driver, render_cfg=config.render, sim_cfg=config.sim)
    if args.select:
        driver.body(args.select)
        viewer.select(args.select)
    viewer.run()


def cmd_record(args: argparse.Namespace, config: Config) -> None:
    driver = build_driver(args, config)
    runs_dir = args.runs_dir or Path(config.sim.runs_dir)
    with RunLogger(runs_dir, args.run_id) as run_logger:
        run_logger.write_meta(driver.meta())
        driver.run_logger = run_logger
        logger.info("Recording %d frames of %.4g s at time scale %.4g", args.frames, args.dt, driver.clock.time_scale)
        for _ in range(max(0, args.frames)):
            driver.step(args.dt)
        driver.run_logger = None
    print(f"Recorded {args.frames} frames ({driver.clock.days:,.1f} days) to {run_logger.run_dir}")


def cmd_analyze(args: argparse.Namespace, config: Config) -> None:
    from orrery.analyze_run import analyze, print_summary

    run_path = resolve_run_dir(args.run, args.runs_dir)
    if not run_path.is_dir():
        raise FileNotFoundError(f"run directory not found: {run_path}")
    print_summary(analyze(run_path))


def cmd_table(args: argparse.Namespace, config: Config) -> None:
    driver = build_driver(args, config)
    driver.reset(args.days * SECONDS_PER_DAY)
    header = f"{'body':<10} {'distance [AU]':>14} {'period [d]':>12} {'e':>9} {'diameter [km]':>14}"
    print(header)
    print("-" * len(header))
    for name in driver.body_names:
        info = driver.info(name)
        print(
            f"{info.name:<10} {info.distance_au:>14.5f} {info.orbital_period_days:>12.2f} "
            f"{info.eccentricity:>9.5f} {info.diameter_km:>14,.0f}"
        )


COMMANDS = {
    "view": cmd_view,
    "record": cmd_record,
    "analyze": cmd_analyze,
    "table": cmd_table,
}


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config) if getattr(args, "config", None) else DEFAULT_CONFIG
        COMMANDS[args.command](args, config)
    except (OrreryError, FileNotFoundError, KeyError, ValueError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
