"""Loading of body records from CSV files."""
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from orrery.core.errors import ConfigurationError
from orrery.core.model import Body, OrbitalElements
from orrery.core.scale import ScaleTransform
from orrery.core.spin import SpinState

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "mass_kg",
    "diameter_m",
    "a_m",
    "e",
    "i_deg",
    "raan_deg",
    "argp_deg",
    "m0_deg",
    "epoch_s",
)
SPIN_FIELDS: tuple[str, ...] = ("rotation_period_h", "speed_multiplier", "obliquity_deg")
SCALE_FIELDS: tuple[str, ...] = ("k", "alpha", "beta", "gamma")
ALL_FIELDS = REQUIRED_FIELDS + SPIN_FIELDS + SCALE_FIELDS


@dataclass(frozen=True)
class LoadIssue:
    """One problem found in one record; the record is identified by line."""

    line: int
    name: str | None
    field: str | None
    value: object
    message: str

    def __str__(self) -> str:
        who = self.name or "<unnamed>"
        where = f" field {self.field}" if self.field else ""
        return f"line {self.line} ({who}){where}: {self.message}"


@dataclass(frozen=True)
class BodyRecord:
    line: int
    body: Body
    scale_override: ScaleTransform | None = None


@dataclass
class LoadResult:
    records: list[BodyRecord] = field(default_factory=list)
    issues: list[LoadIssue] = field(default_factory=list)

    @property
    def bodies(self) -> list[Body]:
        return [record.body for record in self.records]

    @property
    def ok(self) -> bool:
        return not self.issues


def _rows(stream: TextIO) -> Iterator[tuple[int, list[str]]]:
    reader = csv.reader(stream, skipinitialspace=True)
    for row in reader:
        line = reader.line_num
        if not row or all(not cell.strip() for cell in row):
            continue
        if row[0].lstrip().startswith("#"):
            continue
        yield line, [cell.strip() for cell in row]


def _parse_numbers(
    line: int, name: str, names: Iterable[str], cells: Iterable[str], issues: list[LoadIssue]
) -> dict[str, float] | None:
    values: dict[str, float] = {}
    failed = False
    for field_name, cell in zip(names, cells):
        try:
            values[field_name] = float(cell)
        except ValueError:
            issues.append(LoadIssue(line, name, field_name, cell, f"not a number: {cell!r}"))
            failed = True
    return None if failed else values


def parse_record(line: int, row: list[str], issues: list[LoadIssue]) -> BodyRecord | None:
    """Turn one CSV row into a record, appending to ``issues`` on failure."""

    name = row[0] if row else ""
    if not name:
        issues.append(LoadIssue(line, None, "name", "", "missing body name"))
        return None
    if len(row) < len(REQUIRED_FIELDS):
        issues.append(
            LoadIssue(
                line,
                name,
                None,
                len(row),
                f"expected at least {len(REQUIRED_FIELDS)} fields, got {len(row)}",
            )
        )
        return None

    optional = list(row[len(REQUIRED_FIELDS):])
    while optional and not optional[-1]:
        optional.pop()
    if len(optional) not in (0, len(SPIN_FIELDS), len(SPIN_FIELDS) + len(SCALE_FIELDS)):
        issues.append(
            LoadIssue(
                line,
                name,
                None,
                len(row),
                "optional fields must be the 3 spin fields, optionally followed by the 4 scale fields",
            )
        )
        return None

    numeric_names = ALL_FIELDS[1:len(REQUIRED_FIELDS) + len(optional)]
    values = _parse_numbers(line, name, numeric_names, row[1:], issues)
    if values is None:
        return None

    try:
        elements = OrbitalElements(
            a=values["a_m"],
            e=values["e"],
            i=values["i_deg"],
            raan=values["raan_deg"],
            argp=values["argp_deg"],
            m0=values["m0_deg"],
            epoch=values["epoch_s"],
        )
        spin = SpinState()
        if "rotation_period_h" in values:
            period = values["rotation_period_h"]
            spin = SpinState(
                period_hours=abs(period),
                speed_multiplier=values["speed_multiplier"],
                obliquity_deg=values["obliquity_deg"],
                retrograde=period < 0.0,
            )
        body = Body(
            name=name,
            mass=values["mass_kg"],
            diameter=values["diameter_m"],
            elements=elements,
            spin=spin,
        )
    except ConfigurationError as exc:
        issues.append(LoadIssue(line, name, exc.field, exc.value, exc.reason))
        return None

    scale_override = None
    if "k" in values:
        try:
            scale_override = ScaleTransform(
                k=values["k"], alpha=values["alpha"], beta=values["beta"], gamma=values["gamma"]
            )
        except ConfigurationError as exc:
            issues.append(LoadIssue(line, name, exc.field, exc.value, exc.reason))
    return BodyRecord(line=line, body=body, scale_override=scale_override)


def _is_header(row: list[str]) -> bool:
    leading = [cell.lower() for cell in row[:len(REQUIRED_FIELDS)]]
    return leading == list(REQUIRED_FIELDS)


def read_bodies(stream: TextIO) -> LoadResult:
    """Parse records from an open text stream.

    The first non-comment row is the header; when its leading cells are not
    the required column names it is read as a record instead. Bad records
    are reported in :attr:`LoadResult.issues` and skipped; the rest still
    load.
    """

    result = LoadResult()
    seen: set[str] = set()
    header_seen = False
    for line, row in _rows(stream):
        if not header_seen:
            header_seen = True
            if _is_header(row):
                continue
            logger.warning("No header row in body data; reading line %d as a record", line)
        record = parse_record(line, row, result.issues)
        if record is None:
            continue
        if record.body.name in seen:
            result.issues.append(
                LoadIssue(line, record.body.name, "name", record.body.name, "duplicate body name")
            )
            continue
        seen.add(record.body.name)
        result.records.append(record)

    for issue in result.issues:
        logger.warning("Skipping bad record data: %s", issue)
    for record in result.records:
        if record.scale_override is not None:
            logger.warning(
                "Ignoring per-body scale override for %s (line %d); the scene uses one shared scale",
                record.body.name,
                record.line,
            )
    logger.info("Loaded %d bodies (%d issues)", len(result.records), len(result.issues))
    return result


def load_bodies(source: str | Path | TextIO) -> LoadResult:
    """Load body records from a CSV path or an open stream."""

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"body file not found: {path}")
        with path.open("r", encoding="utf-8", newline="") as fh:
            return read_bodies(fh)
    return read_bodies(source)


def loads_bodies(text: str) -> LoadResult:
    return read_bodies(io.StringIO(text))


__all__ = [
    "ALL_FIELDS",
    "BodyRecord",
    "LoadIssue",
    "LoadResult",
    "REQUIRED_FIELDS",
    "load_bodies",
    "loads_bodies",
    "parse_record",
    "read_bodies",
]
