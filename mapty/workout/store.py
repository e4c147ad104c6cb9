"""Persistence of the workout collection in a key/value store."""

from __future__ import annotations

import json
from collections.abc import MutableMapping
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, Sequence

from mapty.workout.metrics import WORKOUT_TYPES
from mapty.workout.model import Coords, Running, Workout, WorkoutError, create_workout

WORKOUTS_KEY = "workouts"


def _default_storage_path() -> Path:
    return Path.home() / ".mapty" / "storage.json"


class WorkoutRecordError(ValueError):
    """Raised when a stored workout record cannot be rebuilt."""


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MappingStore:
    """Key/value store over any mutable mapping (dict, NiceGUI storage)."""

    def __init__(self, mapping: MutableMapping[str, Any] | None = None) -> None:
        self._data: MutableMapping[str, Any] = mapping if mapping is not None else {}

    def get_item(self, key: str) -> str | None:
        value = self._data.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Key/value pairs kept in a single JSON object on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_storage_path()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=True), encoding="utf-8")

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def workout_to_record(workout: Workout) -> dict[str, Any]:
    record: dict[str, Any] = {
        "type": workout.type,
        "cords": workout.cords.as_list(),
        "distance": workout.distance,
        "duration": workout.duration,
        "id": workout.id,
        "date": workout.date.isoformat(),
        "workoutDescription": workout.description,
    }
    if isinstance(workout, Running):
        record["cadence"] = workout.cadence
        record["pace"] = workout.pace
    else:
        record["elevation"] = workout.elevation
        record["speed"] = workout.speed
    return record


def _parse_number(raw: object, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise WorkoutRecordError(f"Record field '{field_name}' must be a number")
    return float(raw)


def _parse_date(raw: object) -> datetime:
    if not isinstance(raw, str):
        raise WorkoutRecordError("Record field 'date' must be a string")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise WorkoutRecordError(f"Invalid date '{raw}'") from exc


def workout_from_record(record: object) -> Workout:
    if not isinstance(record, dict):
        raise WorkoutRecordError("Record must be an object")

    kind = record.get("type")
    if kind not in WORKOUT_TYPES:
        raise WorkoutRecordError(f"Unknown workout type '{kind}'")

    cords_obj = record.get("cords")
    if not isinstance(cords_obj, (list, tuple)) or len(cords_obj) != 2:
        raise WorkoutRecordError("Record field 'cords' must be [lat, lng]")
    cords = Coords(
        lat=_parse_number(cords_obj[0], "cords"),
        lng=_parse_number(cords_obj[1], "cords"),
    )

    workout_id = record.get("id")
    if not isinstance(workout_id, str) or not workout_id:
        raise WorkoutRecordError("Record field 'id' must be a non-empty string")

    extra_field = "cadence" if kind == "running" else "elevation"
    try:
        workout = create_workout(
            str(kind),
            cords,
            _parse_number(record.get("distance"), "distance"),
            _parse_number(record.get("duration"), "duration"),
            _parse_number(record.get(extra_field), extra_field),
            now=_parse_date(record.get("date")),
            workout_id=workout_id,
        )
    except WorkoutError as exc:
        raise WorkoutRecordError(str(exc)) from exc

    description = record.get("workoutDescription")
    if isinstance(description, str) and description:
        workout = replace(workout, description=description)
    return workout


class WorkoutStore:
    """Full-replace persistence of the ordered workout collection."""

    def __init__(
        self,
        backend: KeyValueStore,
        key: str = WORKOUTS_KEY,
        debug: bool = False,
    ) -> None:
        self._backend = backend
        self._key = key
        self._debug = debug

    def save(self, workouts: Sequence[Workout]) -> bool:
        try:
            payload = json.dumps(
                [workout_to_record(w) for w in workouts], ensure_ascii=True
            )
            self._backend.set_item(self._key, payload)
        except (OSError, TypeError, ValueError) as exc:
            print(f"Warning: [STORE] could not save {len(workouts)} workout(s): {exc}")
            return False
        if self._debug:
            print(f"[STORE] saved {len(workouts)} workout(s) under '{self._key}'")
        return True

    def load(self) -> list[Workout] | None:
        """Rebuild the stored collection, or None when nothing usable is stored."""
        try:
            raw = self._backend.get_item(self._key)
        except (OSError, ValueError) as exc:
            if self._debug:
                print(f"[STORE] read failed: {exc}")
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            if self._debug:
                print(f"[STORE] ignoring corrupt value under '{self._key}'")
            return None
        if not isinstance(data, list):
            return None

        out: list[Workout] = []
        for i, item in enumerate(data):
            try:
                out.append(workout_from_record(item))
            except WorkoutRecordError as exc:
                if self._debug:
                    print(f"[STORE] skipping record {i + 1}: {exc}")
                continue
        if self._debug:
            print(f"[STORE] loaded {len(out)} workout(s) from '{self._key}'")
        return out

    def clear(self) -> None:
        self._backend.remove_item(self._key)
