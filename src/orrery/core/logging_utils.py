"""Recording of simulation runs to CSV files."""
from __future__ import annotations

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
LAST_RUN_FILENAME = "last_run.txt"

TIMESERIES_HEADER = ("t", "body", "x", "y", "z", "r", "v", "true_anomaly", "spin_phase")
EVENTS_HEADER = ("t", "type", "body", "r", "details")


def new_run_dir(root_dir: str | Path, run_id: Optional[str] = None) -> Path:
    """Create and return a fresh run directory under ``root_dir``.

    Without ``run_id`` the name is ``YYYYmmdd_HHMMSS_run``. Taken names get
    ``_1``, ``_2``, ... appended (``_01`` style for generated names).
    """

    root = Path(root_dir)
    root.mkdir(parents=True, exist_ok=True)
    base = run_id or datetime.now().strftime("%Y%m%d_%H%M%S") + "_run"
    width = 1 if run_id else 2
    candidate = root / base
    suffix = 0
    while candidate.exists():
        suffix += 1
        candidate = root / f"{base}_{suffix:0{width}d}"
    candidate.mkdir()
    return candidate


def resolve_run_dir(run: str | Path | None, runs_dir: str | Path = "data/runs") -> Path:
    """Locate a run directory by path, by id, or through ``last_run.txt``."""

    base = Path(runs_dir)
    if run:
        path = Path(run)
        return path if path.is_dir() else base / str(run)
    marker = base / LAST_RUN_FILENAME
    if not marker.exists():
        raise FileNotFoundError(f"no run given and {marker} is missing")
    return base / marker.read_text(encoding="utf-8").strip()


def _cell(value: object) -> object:
    if isinstance(value, float):
        return f"{value:.10g}"
    return value


class _BufferedCsv:
    """One CSV file whose rows are written in batches of ``threshold``."""

    def __init__(self, path: Path, header: Sequence[str], threshold: int) -> None:
        self._fh = path.open("w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._fh, lineterminator="\n")
        self._writer.writerow(header)
        self._rows: list[list[object]] = []
        self._threshold = max(1, threshold)

    def append(self, values: Sequence[object]) -> None:
        self._rows.append([_cell(v) for v in values])
        if len(self._rows) >= self._threshold:
            self.flush()

    def flush(self) -> None:
        if self._rows:
            self._writer.writerows(self._rows)
            self._fh.flush()
            self._rows.clear()

    def close(self) -> None:
        self.flush()
        self._fh.close()


class RunLogger:
    """Buffered recorder for body states and apsis events.

    Parameters
    ----------
    root_dir:
        Directory in which one sub-directory per run is created.
    run_id:
        Optional run name, see :func:`new_run_dir`.
    timeseries_flush_threshold, events_flush_threshold:
        Buffered rows before the corresponding file is flushed.
    """

    def __init__(
        self,
        root_dir: str | Path = "data/runs",
        run_id: Optional[str] = None,
        *,
        timeseries_flush_threshold: int = 200,
        events_flush_threshold: int = 50,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.run_dir = new_run_dir(self.root_dir, run_id)
        self.run_id = self.run_dir.name
        self.meta_path = self.run_dir / META_FILENAME
        self._timeseries = _BufferedCsv(
            self.run_dir / TIMESERIES_FILENAME, TIMESERIES_HEADER, timeseries_flush_threshold
        )
        self._events = _BufferedCsv(self.run_dir / EVENTS_FILENAME, EVENTS_HEADER, events_flush_threshold)
        self._closed = False

        (self.root_dir / LAST_RUN_FILENAME).write_text(self.run_id, encoding="utf-8")
        logger.info("Recording run %s in %s", self.run_id, self.run_dir)

    def write_meta(self, meta: dict) -> None:
        with self.meta_path.open("w", encoding="utf-8") as fh:
            json.dump(meta, fh, indent=2, sort_keys=True)

    def log_ts(self, values: Sequence[object]) -> None:
        self._timeseries.append(values)

    def log_event(self, values: Sequence[object]) -> None:
        self._events.append(values)

    def close(self) -> None:
        if self._closed:
            return
        self._timeseries.close()
        self._events.close()
        self._closed = True

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "EVENTS_FILENAME",
    "EVENTS_HEADER",
    "LAST_RUN_FILENAME",
    "META_FILENAME",
    "RunLogger",
    "TIMESERIES_FILENAME",
    "TIMESERIES_HEADER",
    "new_run_dir",
    "resolve_run_dir",
]
