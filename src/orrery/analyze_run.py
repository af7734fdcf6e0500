"""Analyze a recorded run and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from orrery.core.config import ASTRONOMICAL_UNIT, SECONDS_PER_DAY
from orrery.core.logging_utils import (
    EVENTS_FILENAME,
    META_FILENAME,
    TIMESERIES_FILENAME,
    resolve_run_dir,
)

logger = logging.getLogger(__name__)

FIGS_SUBDIR = "figs"
NUMERIC_COLUMNS = ("t", "x", "y", "z", "r", "v", "true_anomaly", "spin_phase")


@dataclass
class BodySummary:
    name: str
    samples: int
    period_theory: float | None
    period_measured: float | None
    periapsis_count: int
    apoapsis_count: int
    energy_error: float | None

    @property
    def period_error(self) -> float | None:
        if self.period_theory is None or self.period_measured is None:
            return None
        return (self.period_measured - self.period_theory) / self.period_theory


@dataclass
class RunSummary:
    run_dir: Path
    bodies: List[BodySummary] = field(default_factory=list)
    figures: List[Path] = field(default_factory=list)


def load_timeseries(path: Path) -> Dict[str, Dict[str, np.ndarray]]:
    """Columns of ``timeseries.csv`` grouped by body name."""

    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        grouped: Dict[str, Dict[str, List[float]]] = {}
        for row in reader:
            body = row["body"]
            columns = grouped.setdefault(body, {name: [] for name in NUMERIC_COLUMNS})
            for name in NUMERIC_COLUMNS:
                columns[name].append(float(row[name]))
    return {
        body: {name: np.asarray(values) for name, values in columns.items()}
        for body, columns in grouped.items()
    }


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row:
                continue
            events.append(
                {
                    "t": float(row["t"]),
                    "type": row["type"],
                    "body": row["body"],
                    "r": float(row["r"]),
                    "details": row.get("details", ""),
                }
            )
    return events


def ensure_fig_dir(run_dir: Path) -> Path:
    fig_dir = run_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: Sequence[dict], body: str) -> Dict[str, int]:
    summary = {"periapsis": 0, "apoapsis": 0}
    for event in events:
        if event["body"] == body and event["type"] in summary:
            summary[event["type"]] += 1
    return summary


def estimate_period(events: Sequence[dict], body: str) -> float | None:
    """Mean spacing of consecutive periapsis passages, or ``None`` with fewer than two."""

    times = sorted(event["t"] for event in events if event["body"] == body and event["type"] == "periapsis")
    if len(times) < 2:
        return None
    return float(np.mean(np.diff(times)))


def energy_error(series: Dict[str, np.ndarray], mu: float, a: float) -> float | None:
    """Largest relative deviation of ``v^2/2 - mu/r`` from ``-mu/(2a)``."""

    if series["r"].size == 0 or mu <= 0.0 or a <= 0.0:
        return None
    expected = -mu / (2.0 * a)
    energy = 0.5 * series["v"] ** 2 - mu / series["r"]
    return float(np.max(np.abs((energy - expected) / expected)))


def plot_orbits(fig_dir: Path, ts: Dict[str, Dict[str, np.ndarray]]) -> Path:
    fig, ax = plt.subplots(figsize=(7, 7))
    for body, series in ts.items():
        ax.plot(series["x"] / ASTRONOMICAL_UNIT, series["y"] / ASTRONOMICAL_UNIT, lw=1.2, label=body)
    ax.scatter([0.0], [0.0], color="#ffce54", s=60, label="Central body")
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x [AU]")
    ax.set_ylabel("y [AU]")
    ax.set_title("Trajectories (x-y)")
    ax.legend(fontsize="small")
    fig.tight_layout()
    path = fig_dir / "orbits_xy.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


def plot_radius(fig_dir: Path, ts: Dict[str, Dict[str, np.ndarray]], events: Sequence[dict]) -> Path:
    fig, ax = plt.subplots(figsize=(8, 4.5))
    for body, series in ts.items():
        (line,) = ax.plot(series["t"] / SECONDS_PER_DAY, series["r"] / ASTRONOMICAL_UNIT, lw=1.2, label=body)
        peri = [e for e in events if e["body"] == body and e["type"] == "periapsis"]
        apo = [e for e in events if e["body"] == body and e["type"] == "apoapsis"]
        if peri:
            ax.scatter(
                [e["t"] / SECONDS_PER_DAY for e in peri],
                [e["r"] / ASTRONOMICAL_UNIT for e in peri],
                marker="v",
                color=line.get_color(),
                s=18,
            )
        if apo:
            ax.scatter(
                [e["t"] / SECONDS_PER_DAY for e in apo],
                [e["r"] / ASTRONOMICAL_UNIT for e in apo],
                marker="^",
                color=line.get_color(),
                s=18,
            )
    ax.set_xlabel("t [days]")
    ax.set_ylabel("r [AU]")
    ax.set_title("Distance over time (v periapsis, ^ apoapsis)")
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize="small")
    fig.tight_layout()
    path = fig_dir / "radius.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


def analyze(run_dir: Path) -> RunSummary:
    """Load a run, write its figures and return per-body figures of merit.

    Raises
    ------
    FileNotFoundError
        If the run directory or one of its files is missing.
    ValueError
        If the timeseries holds no rows.
    """

    run_dir = Path(run_dir)
    meta_path = run_dir / META_FILENAME
    ts_path = run_dir / TIMESERIES_FILENAME
    ev_path = run_dir / EVENTS_FILENAME
    for path in (meta_path, ts_path, ev_path):
        if not path.exists():
            raise FileNotFoundError(f"run is missing {path.name}: {run_dir}")

    with meta_path.open("r", encoding="utf-8") as fh:
        meta = json.load(fh)
    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts:
        raise ValueError(f"{ts_path} holds no samples")

    mu = float(meta.get("central", {}).get("mu", 0.0))
    body_meta = meta.get("bodies", {})
    summary = RunSummary(run_dir=run_dir)
    for body, series in ts.items():
        info = body_meta.get(body, {})
        counts = summarize_events(events, body)
        a = float(info.get("a", 0.0))
        summary.bodies.append(
            BodySummary(
                name=body,
                samples=int(series["t"].size),
                period_theory=info.get("period"),
                period_measured=estimate_period(events, body),
                periapsis_count=counts["periapsis"],
                apoapsis_count=counts["apoapsis"],
                energy_error=energy_error(series, mu, a),
            )
        )

    fig_dir = ensure_fig_dir(run_dir)
    summary.figures.append(plot_orbits(fig_dir, ts))
    summary.figures.append(plot_radius(fig_dir, ts, events))
    logger.info("Wrote %d figures to %s", len(summary.figures), fig_dir)
    return summary


def _days(value: float | None) -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    return f"{value / SECONDS_PER_DAY:,.3f} d"


def print_summary(summary: RunSummary) -> None:
    print(f"Run: {summary.run_dir.name}")
    for body in summary.bodies:
        error = body.period_error
        error_text = f"{error:+.2e}" if error is not None else "needs two periapsis passages"
        energy_text = f"{body.energy_error:.2e}" if body.energy_error is not None else "n/a"
        print(f" {body.name}: {body.samples} samples")
        print(f"   T_theory = {_days(body.period_theory)}, T_measured = {_days(body.period_measured)} ({error_text})")
        print(f"   periapsis: {body.periapsis_count}, apoapsis: {body.apoapsis_count}, energy error = {energy_text}")
    for path in summary.figures:
        print(f" Figure: {path}")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Analyze a recorded run and write figures.")
    parser.add_argument("run_dir", nargs="?", help="Run directory or run id (default: last run)")
    parser.add_argument("--runs-dir", default="data/runs", help="Directory holding recorded runs")
    args = parser.parse_args(argv)

    try:
        run_path = resolve_run_dir(args.run_dir, args.runs_dir)
        if not run_path.is_dir():
            parser.error(f"Run directory not found: {run_path}")
        summary = analyze(run_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))
    print_summary(summary)


if __name__ == "__main__":
    main()
