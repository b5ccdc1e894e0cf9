#!/usr/bin/env python3
"""Command-line tools for dnp3-fmb mapping files, using Typer."""

import csv
import json
import logging
import math
from pathlib import Path
from typing import Any, Optional, Sequence

import typer
from typing_extensions import Annotated

from . import __version__  # type: ignore
from .adapter import UpdateAdapter
from .errors import InvalidCategoryError, MappingConfigError
from .mapping import Dnp3DataMapping, load_mapping
from .normalize import normalize_category
from .types import KeyEntry, KeyMeasUpdate, PointCategory, ReadingMeasUpdate
from .values import MeasKind, MeasValue

app = typer.Typer(
    name="dnp3-fmb",
    help="Inspect DNP3 point mappings and replay point updates through the update adapter.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared options and helpers
# ============================================================================

MappingOption = Annotated[
    Path,
    typer.Option("--mapping", "-m", help="Mapping JSON file", envvar="DNP3FMB_MAPPING"),
]
AdapterIdOption = Annotated[
    str,
    typer.Option("--adapter-id", help="Adapter id used in log lines", envvar="DNP3FMB_ADAPTER_ID"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def open_mapping(path: Path) -> Dnp3DataMapping:
    """Load the mapping or exit with code 2."""
    try:
        return load_mapping(path)
    except MappingConfigError as e:
        typer.echo(f"Error: Invalid mapping: {e}", err=True)
        raise typer.Exit(2)


def parse_bool(value: str) -> bool:
    """Parse boolean value from string."""
    v = value.lower().strip()
    if v in ("true", "1", "on", "yes"):
        return True
    if v in ("false", "0", "off", "no"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def parse_native(category: PointCategory, value: str) -> bool | int | float:
    """Parse a text value into the native type of the category's points."""
    kind = category.native_kind
    if kind == MeasKind.BOOLEAN:
        return parse_bool(value)
    if kind == MeasKind.INTEGER:
        return int(value.strip())
    return float(value.strip())


def value_to_json(value: MeasValue) -> dict[str, Any]:
    """JSON form of a value; non-finite floats render as "nan", "inf" or "-inf"."""
    v = value.value
    if isinstance(v, float) and not math.isfinite(v):
        v = value.as_string().lower()
    return {"kind": value.kind.value, "value": v}


class JsonLinesObserver:
    """DeviceObserver that prints each published batch as one JSON line."""

    def __init__(self) -> None:
        self.batches = 0

    def publish(
        self,
        reading_updates: Sequence[ReadingMeasUpdate],
        key_updates: Sequence[KeyMeasUpdate],
    ) -> None:
        self.batches += 1
        output = {
            "batch": self.batches,
            "readings": [
                {"reading": u.device_reading_id, **value_to_json(u.value)} for u in reading_updates
            ],
            "keys": [{"key": u.device_key_id, **value_to_json(u.value)} for u in key_updates],
        }
        typer.echo(json.dumps(output, allow_nan=False))


def load_updates(csv_path: Path) -> list[tuple[str, PointCategory, int, bool | int | float]]:
    """
    Read (session, category, index, value) rows from CSV. A leading header row
    starting with "session" is skipped; blank rows are ignored.
    """
    rows: list[tuple[str, PointCategory, int, bool | int | float]] = []
    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        for line_no, row in enumerate(reader, start=1):
            if not row or all(not c.strip() for c in row):
                continue
            if line_no == 1 and row[0].strip().lower() == "session":
                continue
            if len(row) < 4:
                raise ValueError(f"line {line_no}: expected session,category,index,value")
            session = row[0].strip()
            try:
                category = normalize_category(row[1])
                index = int(row[2].strip())
                value = parse_native(category, row[3])
            except (InvalidCategoryError, ValueError) as e:
                raise ValueError(f"line {line_no}: {e}") from e
            rows.append((session, category, index, value))
    return rows


# ============================================================================
# Commands
# ============================================================================


@app.command()
def info(
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show package version and the supported point categories."""
    setup_logging(verbose)

    info_data = {
        "version": __version__,
        "categories": {c.value: c.native_kind.value for c in PointCategory},
    }

    if json_output:
        typer.echo(json.dumps(info_data, indent=2))
    else:
        typer.echo(f"dnp3-fmb version: {info_data['version']}")
        for name, kind in info_data["categories"].items():
            typer.echo(f"  {name:<16} {kind}")


@app.command()
def validate(
    mapping: MappingOption,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Load a mapping file and report the number of key and reading entries per category.

    Exits with code 2 if the file is missing or any entry is invalid.
    """
    setup_logging(verbose)

    data_mapping = open_mapping(mapping)
    counts = {c.value: {"keys": k, "readings": r} for c, (k, r) in data_mapping.counts().items()}

    if json_output:
        typer.echo(json.dumps({"entries": len(data_mapping), "categories": counts}, indent=2))
    else:
        typer.echo(f"OK: {len(data_mapping)} entries")
        for name, c in counts.items():
            typer.echo(f"  {name:<16} keys={c['keys']} readings={c['readings']}")


@app.command()
def explain(
    category: Annotated[str, typer.Argument(help="Point category (status, analog, counter, control_status, setpoint_status)")],
    index: Annotated[int, typer.Argument(help="Point index")],
    mapping: MappingOption,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show what a point index resolves to: key, reading, or unmapped.

    Key entries take precedence over reading entries for the same index.
    """
    setup_logging(verbose)

    try:
        cat = normalize_category(category)
    except InvalidCategoryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)

    data_mapping = open_mapping(mapping)
    entry = data_mapping.index_to_entry(cat, index)

    info_data: dict[str, Any] = {"category": cat.value, "index": index, "native_kind": cat.native_kind.value}
    if entry is None:
        info_data["target"] = "unmapped"
    elif isinstance(entry, KeyEntry):
        info_data.update(target="key", id=entry.device_key_id, transform=entry.transform is not None)
    else:
        info_data.update(target="reading", id=entry.device_reading_id, transform=entry.transform is not None)

    if json_output:
        typer.echo(json.dumps(info_data, indent=2))
    else:
        typer.echo(f"Point:       {cat.value}[{index}] ({cat.native_kind.value})")
        typer.echo(f"Target:      {info_data['target']}")
        if entry is not None:
            typer.echo(f"Identifier:  {info_data['id']}")
            typer.echo(f"Transform:   {'yes' if info_data['transform'] else 'no'}")


@app.command()
def replay(
    updates: Annotated[Path, typer.Argument(help="CSV of session,category,index,value rows")],
    mapping: MappingOption,
    adapter_id: AdapterIdOption = "replay",
    verbose: VerboseOption = False,
) -> None:
    """
    Drive an UpdateAdapter from a CSV file and print each published batch as NDJSON.

    Consecutive rows with the same session column form one session; a change of
    session value ends the current session and starts the next.
    """
    setup_logging(verbose)

    data_mapping = open_mapping(mapping)

    if not updates.is_file():
        typer.echo(f"Error: Updates file not found: {updates}", err=True)
        raise typer.Exit(2)
    try:
        rows = load_updates(updates)
    except ValueError as e:
        typer.echo(f"Error: Invalid updates file: {e}", err=True)
        raise typer.Exit(2)

    observer = JsonLinesObserver()
    adapter = UpdateAdapter(adapter_id, data_mapping, observer)

    try:
        current: str | None = None
        for session, category, index, value in rows:
            if session != current:
                if current is not None:
                    adapter.session_end()
                adapter.session_start()
                current = session
            adapter.update(category, index, value)
        if current is not None:
            adapter.session_end()
    except Exception as e:
        typer.echo(f"Error: Unexpected error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(4)

    logger.debug("Replayed %d updates in %d sessions, %d batches", len(rows), adapter.session_seq, observer.batches)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"dnp3-fmb {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """dnp3-fmb - DNP3 to key/reading update mapping tools."""
    pass


if __name__ == "__main__":
    app()
