#!/usr/bin/env python3
"""CLI runner for the Legionella UFC calculator.

Usage:
    legionella-ufc --sample A=0,0,50 --sample B=5,0,x
    legionella-ufc --input counts.csv --interfered d
    python -m legionella_src.runner --input counts.json --json

Counts are given per sample type as ``d,n_1,n_2``. A channel written ``x``
is overgrown by interfering flora; ``--interfered`` marks a channel for
every sample type at once.
"""

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

from .config import config
from .inputs import build_sample_input, parse_channels
from .report import evaluate_samples, format_report
from .rules.schemas import Channel, SampleInput, ValidationError

logger = logging.getLogger(__name__)

INTERFERED_TOKENS = {"x", "interfered"}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else config.get_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )


def parse_sample_arg(value: str) -> tuple[str, dict]:
    """Parse ``TYPE=d,n_1,n_2`` into a sample type and a raw row."""
    sample_type, sep, counts = value.partition("=")
    parts = [part.strip() for part in counts.split(",")]
    if not sep or not sample_type.strip() or len(parts) != 3:
        raise argparse.ArgumentTypeError(
            f"Invalid sample {value!r}, expected TYPE=d,n_1,n_2 (e.g. A=0,0,50)"
        )
    return sample_type.strip(), dict(zip((c.value for c in Channel), parts))


def load_rows(path: Path) -> tuple[dict[str, dict], list[str]]:
    """Read raw rows from a UTF-8 CSV or JSON file.

    CSV files need a ``type`` column and one column per channel. JSON files
    hold either ``{type: {d, n_1, n_2}}`` or
    ``{"samples": {...}, "interfered": [...]}``.

    Returns:
        (rows by sample type, channels interfered for every type)

    Raises:
        ValidationError: If the file is not UTF-8 or has the wrong shape
    """
    try:
        if path.suffix.lower() == ".csv":
            with open(path, newline="", encoding="utf-8") as f:
                reader = csv.DictReader(f)
                if not reader.fieldnames or "type" not in reader.fieldnames:
                    raise ValidationError(f"{path}: CSV input needs a 'type' column")
                rows = {row["type"].strip(): row for row in reader if row.get("type")}
            return rows, []

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except UnicodeDecodeError as e:
        raise ValidationError(f"{path}: not a UTF-8 text file ({e.reason})") from e

    if not isinstance(data, dict):
        raise ValidationError(f"{path}: JSON input must be an object")
    if "samples" not in data:
        return data, []

    samples = data["samples"] or {}
    interfered = data.get("interfered") or []
    if not isinstance(samples, dict):
        raise ValidationError(f"{path}: 'samples' must map sample types to counts")
    if not isinstance(interfered, list):
        raise ValidationError(f"{path}: 'interfered' must be a list of channels")
    return samples, interfered


def build_samples(
    rows: dict[str, dict],
    interfered: set[Channel],
) -> dict[str, SampleInput]:
    """Build engine inputs, honouring per-cell ``x`` interference marks."""
    samples = {}
    for sample_type, row in rows.items():
        if not isinstance(row, dict):
            raise ValidationError(f"Type {sample_type}: expected d, n_1 and n_2 values")
        marked = {
            channel for channel in Channel
            if str(row.get(channel.value, "")).strip().lower() in INTERFERED_TOKENS
        }
        try:
            samples[sample_type] = build_sample_input(
                row.get(Channel.DIRECT.value),
                row.get(Channel.FILTRATE_10ML.value),
                row.get(Channel.FILTRATE_100ML.value),
                interfered=interfered | marked,
            )
        except ValidationError as e:
            raise ValidationError(f"Type {sample_type}: {e}") from e
    return samples


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Legionella UFC calculator - interpret direct and filtration plate counts"
    )

    parser.add_argument(
        "--sample",
        action="append",
        type=parse_sample_arg,
        default=[],
        metavar="TYPE=d,n_1,n_2",
        help="Counts for one sample type; write x for an interfered channel (repeatable)",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="CSV or JSON file with counts per sample type",
    )
    parser.add_argument(
        "--interfered",
        nargs="+",
        choices=[c.value for c in Channel],
        default=[],
        help="Channels overgrown by interfering flora, for every sample type",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every rule match",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not args.sample and not args.input:
        parser.error(
            f"give counts with --sample or --input (sample types: {', '.join(config.SAMPLE_TYPES)})"
        )

    try:
        rows: dict[str, dict] = {}
        interfered = list(args.interfered)
        if args.input:
            file_rows, file_interfered = load_rows(args.input)
            rows.update(file_rows)
            logger.info("Loaded %d sample types from %s", len(file_rows), args.input)
            interfered.extend(file_interfered)
        for sample_type, row in args.sample:
            rows[sample_type] = row

        samples = build_samples(rows, parse_channels(interfered))
    except (ValidationError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    report = evaluate_samples(samples)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_report(report) or "Nothing to report.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
