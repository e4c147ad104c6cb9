from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from mapty.cli.main import build_parser, fixed_position_from_args, main, settings_from_args
from mapty.workout.model import Coords, create_workout
from mapty.workout.store import JsonFileStore, WorkoutStore


def test_defaults_map_to_settings() -> None:
    args = build_parser().parse_args([])
    settings = settings_from_args(args)

    assert args.port == 8080
    assert args.storage == "browser"
    assert settings.map_zoom == 13
    assert settings.allow_negative_elevation is True
    assert fixed_position_from_args(args) is None


def test_fixed_position_and_strict_elevation() -> None:
    args = build_parser().parse_args(
        ["--lat", "48.85", "--lng", "2.35", "--strict-elevation", "--zoom", "15"]
    )

    assert fixed_position_from_args(args) == Coords(48.85, 2.35)
    assert settings_from_args(args).allow_negative_elevation is False
    assert settings_from_args(args).map_zoom == 15


def test_fixed_position_requires_both_coordinates() -> None:
    args = build_parser().parse_args(["--lat", "48.85"])
    with pytest.raises(ValueError):
        fixed_position_from_args(args)


def test_list_and_reset_file_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "storage.json"
    WorkoutStore(JsonFileStore(path)).save(
        [
            create_workout(
                "running",
                Coords(0, 0),
                5,
                25,
                180,
                now=datetime(2026, 10, 17),
                workout_id="1234567890",
            )
        ]
    )

    assert main(["--list", "--storage-path", str(path)]) == 0
    out = capsys.readouterr().out
    assert "1234567890" in out
    assert "Running on 17 October" in out
    assert "5.0 min/km" in out

    assert main(["--reset", "--storage-path", str(path)]) == 0
    assert WorkoutStore(JsonFileStore(path)).load() is None

    main(["--list", "--storage-path", str(path)])
    assert "No stored workouts" in capsys.readouterr().out


def test_elevation_and_geolocation_flags() -> None:
    defaults = settings_from_args(build_parser().parse_args([]))
    assert defaults.blank_elevation_as_zero is False
    assert defaults.geolocation_timeout_sec is None

    settings = settings_from_args(
        build_parser().parse_args(["--blank-elevation-zero", "--geolocation-timeout", "30"])
    )
    assert settings.blank_elevation_as_zero is True
    assert settings.geolocation_timeout_sec == 30.0
