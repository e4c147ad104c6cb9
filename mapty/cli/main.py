"""Command-line entrypoint for the Mapty workout map."""

from __future__ import annotations

import argparse
from pathlib import Path

from mapty.core.settings import AppSettings
from mapty.workout.model import Coords, Running
from mapty.workout.store import JsonFileStore, WorkoutStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty workout map")
    parser.add_argument("--host", default="127.0.0.1", help="Host bind for the web UI")
    parser.add_argument("--port", type=int, default=8080, help="Port for the web UI")
    parser.add_argument(
        "--storage",
        choices=["browser", "file"],
        default="browser",
        help="Keep workouts per browser or in one local JSON file",
    )
    parser.add_argument(
        "--storage-path",
        type=Path,
        default=None,
        help="JSON file used by --storage file, --list and --reset",
    )
    parser.add_argument(
        "--storage-secret",
        default="mapty",
        help="Secret used to sign the per-browser storage cookie",
    )
    parser.add_argument("--lat", type=float, default=None, help="Fixed map latitude")
    parser.add_argument("--lng", type=float, default=None, help="Fixed map longitude")
    parser.add_argument("--zoom", type=int, default=13, help="Map zoom level")
    parser.add_argument(
        "--strict-elevation",
        action="store_true",
        help="Reject cycling workouts with non-positive elevation gain",
    )
    parser.add_argument(
        "--blank-elevation-zero",
        action="store_true",
        help="Treat an empty elevation gain as 0 m (by default it is rejected)",
    )
    parser.add_argument(
        "--geolocation-timeout",
        type=float,
        default=None,
        help="Give up on the browser location after this many seconds (default: wait)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print workouts kept in the local JSON file and exit",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete workouts kept in the local JSON file and exit",
    )
    parser.add_argument("--debug", action="store_true", help="Print diagnostic lines")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return AppSettings(
        map_zoom=args.zoom,
        allow_negative_elevation=not args.strict_elevation,
        blank_elevation_as_zero=args.blank_elevation_zero,
        geolocation_timeout_sec=args.geolocation_timeout,
        debug=args.debug,
    )


def fixed_position_from_args(args: argparse.Namespace) -> Coords | None:
    if args.lat is None and args.lng is None:
        return None
    if args.lat is None or args.lng is None:
        raise ValueError("--lat and --lng must be given together")
    return Coords(lat=args.lat, lng=args.lng)


def run_list(store: WorkoutStore) -> int:
    workouts = store.load()
    if not workouts:
        print("No stored workouts")
        return 0

    for workout in workouts:
        metric = (
            f"{workout.pace:.1f} min/km"
            if isinstance(workout, Running)
            else f"{workout.speed:.1f} km/h"
        )
        print(
            f"{workout.id}  {workout.description:<24} "
            f"{workout.distance:>6g} km {workout.duration:>6g} min  {metric}"
        )
    return 0


def run_reset(store: WorkoutStore) -> int:
    store.clear()
    print("Stored workouts cleared")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)

    if args.list or args.reset:
        store = WorkoutStore(
            JsonFileStore(args.storage_path),
            key=settings.storage_key,
            debug=settings.debug,
        )
        return run_reset(store) if args.reset else run_list(store)

    try:
        fixed_position = fixed_position_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    from mapty.ui.web_app import run_web_ui

    return run_web_ui(
        settings=settings,
        host=args.host,
        port=args.port,
        storage=args.storage,
        storage_path=args.storage_path,
        storage_secret=args.storage_secret,
        fixed_position=fixed_position,
    )


if __name__ == "__main__":
    raise SystemExit(main())
