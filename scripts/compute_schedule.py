#!/usr/bin/env python3
"""Compute an image schedule from a JSON list of photo timestamps.

The input file holds a JSON list. Each entry is one photo, in caller order:
    - a number (ms since epoch)
    - an ISO 8601 string (naive means UTC)
    - null (no known instant)
    - an object {"time_ms": ..., "captured_at": ..., "fallback_ms": ...}

Usage:
    python scripts/compute_schedule.py --input photos.json
    python scripts/compute_schedule.py --input photos.json --min_visible_ms 6000 --hold_ms 0
    python scripts/compute_schedule.py --input photos.json --resolve_missing --pretty

Example output:
    {
        "metadata": [
            {"visible": true, "start_ms": 0.0, "end_ms": 6000.0, "slot_index": 0, "max_concurrency": 2},
            {"visible": true, "start_ms": 2000.0, "end_ms": 8000.0, "slot_index": 1, "max_concurrency": 2}
        ],
        "segments": [
            {"start_ms": 0.0, "end_ms": 2000.0, "layout_size": 2, "slots": [0, null]},
            {"start_ms": 2000.0, "end_ms": 6000.0, "layout_size": 2, "slots": [0, 1]},
            {"start_ms": 6000.0, "end_ms": 8000.0, "layout_size": 2, "slots": [null, 1]}
        ],
        "min_start_ms": 0.0,
        "max_end_ms": 8000.0,
        "config": {...}
    }
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from imageschedule import (
    ScheduleConfig,
    compute_schedule_from_times,
    resolve_timestamps,
    to_epoch_ms,
)
from imageschedule.constants import (
    DEFAULT_COMPOSITION_INTERVAL_MS,
    DEFAULT_HOLD_MS,
    DEFAULT_MAX_SLOTS,
    DEFAULT_MIN_VISIBLE_MS,
)
from imageschedule.errors import ScheduleError


def parse_instant(value: Any) -> float | None:
    """Convert a JSON scalar to ms since epoch.

    Raises:
        ValueError: If a string is not an ISO 8601 datetime.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_epoch_ms(datetime.fromisoformat(text))
    return to_epoch_ms(value)


def parse_entries(raw: Any) -> tuple[list[float | None], list[float | None]]:
    """Split the input list into captured instants and fallback hints.

    Raises:
        ValueError: If the input is not a list or an entry has an
            unsupported shape.
    """
    if not isinstance(raw, list):
        raise ValueError(f"Input must be a JSON list, got {type(raw).__name__}")

    captured: list[float | None] = []
    fallbacks: list[float | None] = []
    for position, entry in enumerate(raw):
        if isinstance(entry, dict):
            instant = parse_instant(entry.get("time_ms"))
            if instant is None:
                instant = parse_instant(entry.get("captured_at"))
            captured.append(instant)
            fallbacks.append(parse_instant(entry.get("fallback_ms")))
        elif entry is None or isinstance(entry, (int, float, str)):
            captured.append(parse_instant(entry))
            fallbacks.append(None)
        else:
            raise ValueError(f"Unsupported entry at position {position}: {entry!r}")
    return captured, fallbacks


def main() -> int:
    """Main entry point for the script.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        description="Compute an image schedule from photo timestamps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --input photos.json
    %(prog)s --input photos.json --max_slots 2 --composition_interval_ms 5000
    %(prog)s --input photos.json --snap_grid_ms 1000
    %(prog)s --input photos.json --resolve_missing --pretty --output schedule.json
        """,
    )

    # Input/output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Path to the input JSON list of photos",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--pretty", "-p",
        action="store_true",
        help="Pretty-print JSON output with indentation",
    )

    # Scheduling arguments
    parser.add_argument(
        "--min_visible_ms",
        type=float,
        default=DEFAULT_MIN_VISIBLE_MS,
        help=f"Minimum display duration in ms (default: {DEFAULT_MIN_VISIBLE_MS})",
    )
    parser.add_argument(
        "--hold_ms",
        type=float,
        default=DEFAULT_HOLD_MS,
        help=f"Hold extension in ms (default: {DEFAULT_HOLD_MS})",
    )
    parser.add_argument(
        "--max_slots",
        type=int,
        default=DEFAULT_MAX_SLOTS,
        help=f"Concurrent display slots (default: {DEFAULT_MAX_SLOTS})",
    )
    parser.add_argument(
        "--composition_interval_ms",
        type=float,
        default=DEFAULT_COMPOSITION_INTERVAL_MS,
        help=f"Minimum time between composition changes in ms (default: {DEFAULT_COMPOSITION_INTERVAL_MS})",
    )
    parser.add_argument(
        "--snap_grid_ms",
        type=float,
        default=None,
        help="Snap instants to this grid step in ms (default: off)",
    )

    # Timestamp arguments
    parser.add_argument(
        "--resolve_missing",
        action="store_true",
        help="Synthesize instants for photos without one instead of hiding them",
    )

    args = parser.parse_args()

    # Validate input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        print(json.dumps({
            "error": "File not found",
            "code": "FILE_NOT_FOUND",
            "path": str(input_path),
        }), file=sys.stderr)
        return 1

    try:
        captured, fallbacks = parse_entries(json.loads(input_path.read_text()))

        if args.resolve_missing:
            resolved = resolve_timestamps(captured, fallbacks=fallbacks)
            times = [r.time_ms for r in resolved]
        else:
            times = captured

        config = ScheduleConfig(
            min_visible_ms=args.min_visible_ms,
            hold_ms=args.hold_ms,
            max_slots=args.max_slots,
            composition_interval_ms=args.composition_interval_ms,
            snap_to_grid=args.snap_grid_ms is not None,
            snap_grid_ms=args.snap_grid_ms,
        )

        schedule = compute_schedule_from_times(times, config)

        output = schedule.to_dict()
        output["config"] = config.to_dict()

        if args.pretty:
            json_output = json.dumps(output, indent=2, ensure_ascii=False)
        else:
            json_output = json.dumps(output, ensure_ascii=False)

        if args.output:
            output_path = Path(args.output)
            output_path.write_text(json_output + "\n")
            print(f"Schedule written to {output_path}", file=sys.stderr)
        else:
            print(json_output)

        return 0

    except (ScheduleError, ValueError) as e:
        error_output = {
            "error": str(e),
            "code": getattr(e, "code", "INVALID_INPUT"),
            "type": type(e).__name__,
        }
        if getattr(e, "details", None):
            error_output["details"] = e.details
        print(json.dumps(error_output), file=sys.stderr)
        return 2

    except Exception as e:
        print(json.dumps({
            "error": str(e),
            "code": "UNEXPECTED_ERROR",
            "type": type(e).__name__,
        }), file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
