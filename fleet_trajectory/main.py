"""Command line entry point for trajectory optimization and trip reports.

Usage examples:

    # Optimize a recorded trip and write the reduced track as JSON
    python -m fleet_trajectory.main optimize trip.json --output optimized.json

    # Use the aggressive preset and produce an Excel report
    python -m fleet_trajectory.main optimize trip.csv --preset aggressive \
        --report trip_report.xlsx

    # Fetch a day of history from Traccar (TRACCAR_URL / credentials from env)
    python -m fleet_trajectory.main fetch --device-id 7 \
        --start 2024-05-01T00:00:00Z --end 2024-05-02T00:00:00Z \
        --output raw.json --optimize
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .analysis import TripAnalysis, analyze_trip
from .config import IDLE_THRESHOLD_MINUTES, TRACCAR_ROUTE_LIMIT, TRACCAR_SPEED_MULTIPLIER
from .errors import PositionFormatError, TraccarAPIError
from .export import (
    encode_polyline,
    positions_to_records,
    potential_to_dict,
    result_to_dict,
    to_geojson_feature,
)
from .models import Position
from .optimization import (
    OptimizationSettings,
    get_preset,
    get_preset_names,
    optimization_potential,
    optimize_coordinates,
)
from .parsing import load_positions, parse_timestamp
from .report_writer import write_trip_report
from .traccar import TraccarClient
from .utils import json_dumps

LOGGER = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(getattr(logging, level))


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--preset",
        choices=get_preset_names(),
        help="Start from a named preset instead of the configured defaults",
    )
    parser.add_argument("--tolerance", type=float, help="Douglas-Peucker tolerance (m)")
    parser.add_argument("--min-speed", type=float, help="Speed filter floor (km/h)")
    parser.add_argument(
        "--min-time-interval", type=float, help="Time filter spacing (ms)"
    )
    parser.add_argument(
        "--min-accuracy", type=float, help="Accuracy filter ceiling (m)"
    )
    parser.add_argument(
        "--no-preserve-stops",
        action="store_true",
        help="Allow idle-period boundaries to be simplified away",
    )
    parser.add_argument(
        "--no-preserve-speed-changes",
        action="store_true",
        help="Allow harsh events and speed changes to be simplified away",
    )
    parser.add_argument("--disable-time-filter", action="store_true")
    parser.add_argument("--disable-speed-filter", action="store_true")
    parser.add_argument("--disable-accuracy-filter", action="store_true")


def _settings_from_args(args: argparse.Namespace) -> OptimizationSettings:
    settings = get_preset(args.preset) if args.preset else OptimizationSettings()
    changes: Dict[str, Any] = {}
    if args.tolerance is not None:
        changes["tolerance"] = args.tolerance
    if args.min_speed is not None:
        changes["min_speed"] = args.min_speed
    if args.min_time_interval is not None:
        changes["min_time_interval"] = args.min_time_interval
    if args.min_accuracy is not None:
        changes["min_accuracy"] = args.min_accuracy
    if args.no_preserve_stops:
        changes["preserve_stops"] = False
    if args.no_preserve_speed_changes:
        changes["preserve_speed_changes"] = False
    if args.disable_time_filter:
        changes["enable_time_filter"] = False
    if args.disable_speed_filter:
        changes["enable_speed_filter"] = False
    if args.disable_accuracy_filter:
        changes["enable_accuracy_filter"] = False
    return settings.updated(**changes) if changes else settings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleet-trajectory",
        description="Optimize vehicle GPS tracks and score driving efficiency",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    optimize = subparsers.add_parser(
        "optimize", help="Optimize a position file (.json or .csv)"
    )
    optimize.add_argument("input", help="Position file to read")
    _add_settings_arguments(optimize)
    optimize.add_argument(
        "--speed-multiplier",
        type=float,
        default=1.0,
        help="Factor applied to raw speeds (1.852 converts knots to km/h)",
    )
    optimize.add_argument(
        "--idle-threshold",
        type=float,
        default=IDLE_THRESHOLD_MINUTES,
        help=(
            "Minimum idle period length in minutes for the report; stop "
            "protection during optimization uses IDLE_THRESHOLD_MINUTES"
        ),
    )
    optimize.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip records without coordinates/timestamps instead of failing",
    )
    optimize.add_argument("--output", help="Write the optimization result as JSON")
    optimize.add_argument("--report", help="Write an Excel trip report")
    optimize.add_argument("--geojson", help="Write the optimized track as GeoJSON")
    optimize.add_argument(
        "--polyline",
        action="store_true",
        help="Print the optimized track as an encoded polyline",
    )
    optimize.add_argument(
        "--potential",
        action="store_true",
        help="Print the reduction achieved at tolerances 10, 25 and 50 m",
    )

    fetch = subparsers.add_parser("fetch", help="Fetch route history from Traccar")
    fetch.add_argument("--device-id", type=int, required=True)
    fetch.add_argument("--start", required=True, help="ISO-8601 window start")
    fetch.add_argument("--end", required=True, help="ISO-8601 window end")
    fetch.add_argument("--url", default="", help="Traccar base URL (else TRACCAR_URL)")
    fetch.add_argument("--limit", type=int, default=TRACCAR_ROUTE_LIMIT)
    fetch.add_argument(
        "--speed-multiplier", type=float, default=TRACCAR_SPEED_MULTIPLIER
    )
    fetch.add_argument("--output", help="Write positions as JSON (else stdout)")
    fetch_mode = fetch.add_mutually_exclusive_group()
    fetch_mode.add_argument(
        "--optimize",
        action="store_true",
        help="Optimize the fetched positions before writing them",
    )
    fetch_mode.add_argument(
        "--potential",
        action="store_true",
        help="Write the optimization potential instead of the positions",
    )
    _add_settings_arguments(fetch)
    return parser


def _write_text(path: str, text: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as handle:
        handle.write(text)
    LOGGER.info("Output written to %s", target)


def _log_analysis(analysis: TripAnalysis) -> None:
    stats = analysis.stats
    LOGGER.info(
        "Efficiency: average score %.1f over %d segments, %.2f km, "
        "%d harsh events, %d idle periods",
        stats.average_score,
        len(analysis.segments),
        stats.total_distance_km,
        stats.harsh_events,
        len(analysis.idle_periods),
    )


def _run_optimize(args: argparse.Namespace) -> int:
    positions = load_positions(
        args.input, args.speed_multiplier, skip_invalid=args.skip_invalid
    )
    settings = _settings_from_args(args)
    analysis = analyze_trip(positions, settings, args.idle_threshold)
    _log_analysis(analysis)
    optimized = analysis.optimization.optimized_positions

    result_json = json_dumps(result_to_dict(analysis.optimization))
    if args.output:
        _write_text(args.output, result_json)
    if args.geojson:
        feature = to_geojson_feature(
            optimized,
            {
                "originalCount": analysis.optimization.original_count,
                "optimizedCount": analysis.optimization.optimized_count,
                "averageScore": analysis.stats.average_score,
            },
        )
        _write_text(args.geojson, json_dumps(feature))
    if args.report:
        write_trip_report(args.report, analysis)
    if args.polyline:
        print(encode_polyline(optimized))
    if args.potential:
        potential = optimization_potential(positions, settings=settings)
        print(json_dumps(potential_to_dict(potential)))
    printed = args.polyline or args.potential
    if not (args.output or args.geojson or args.report or printed):
        print(result_json)
    return 0


def _run_fetch(args: argparse.Namespace) -> int:
    client = TraccarClient(args.url, speed_multiplier=args.speed_multiplier)
    positions: List[Position] = client.get_route(
        args.device_id,
        parse_timestamp(args.start),
        parse_timestamp(args.end),
        limit=args.limit,
    )
    if args.optimize:
        payload: Any = result_to_dict(
            optimize_coordinates(positions, _settings_from_args(args))
        )
    elif args.potential:
        potential = optimization_potential(
            positions, settings=_settings_from_args(args)
        )
        payload = {
            "deviceId": args.device_id,
            "period": {"from": args.start, "to": args.end},
            **potential_to_dict(potential),
        }
    else:
        payload = positions_to_records(positions)
    text = json_dumps(payload)
    if args.output:
        _write_text(args.output, text)
    else:
        print(text)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point; returns the process exit code."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    try:
        if args.command == "optimize":
            return _run_optimize(args)
        return _run_fetch(args)
    except (PositionFormatError, FileNotFoundError) as exc:
        LOGGER.error("Failed to load positions: %s", exc)
    except TraccarAPIError as exc:
        LOGGER.error("Traccar request failed: %s", exc)
    except ValueError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
