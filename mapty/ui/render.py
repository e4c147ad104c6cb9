"""Popup and list-entry content for rendered workouts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mapty.workout.model import Running, Workout

WORKOUT_ICONS: dict[str, str] = {
    "running": "🏃‍♂️",
    "cycling": "🚴‍♀️",
}

POPUP_MAX_WIDTH = 250
POPUP_MIN_WIDTH = 100


@dataclass(frozen=True)
class DetailRow:
    icon: str
    value: str
    unit: str


@dataclass(frozen=True)
class ListEntry:
    workout_id: str
    workout_type: str
    title: str
    rows: tuple[DetailRow, ...]

    @property
    def css_class(self) -> str:
        return f"workout workout--{self.workout_type}"


def _fmt_value(value: float) -> str:
    # as entered; only a trailing ".0" is dropped
    return str(int(value)) if value.is_integer() else repr(value)


def _fmt_fixed(value: float) -> str:
    return f"{value:.1f}"


def popup_content(workout: Workout) -> str:
    return f"{WORKOUT_ICONS[workout.type]} {workout.description}"


def popup_options(workout: Workout) -> dict[str, Any]:
    return {
        "maxWidth": POPUP_MAX_WIDTH,
        "minWidth": POPUP_MIN_WIDTH,
        "autoClose": False,
        "closeOnClick": False,
        "className": f"{workout.type}-popup",
    }


def list_entry(workout: Workout) -> ListEntry:
    rows = [
        DetailRow(WORKOUT_ICONS[workout.type], _fmt_value(workout.distance), "km"),
        DetailRow("⏱", _fmt_value(workout.duration), "min"),
    ]
    if isinstance(workout, Running):
        rows.append(DetailRow("⚡️", _fmt_fixed(workout.pace), "min/km"))
        rows.append(DetailRow("🦶🏼", _fmt_value(workout.cadence), "spm"))
    else:
        rows.append(DetailRow("⚡️", _fmt_fixed(workout.speed), "km/h"))
        rows.append(DetailRow("⛰", _fmt_value(workout.elevation), "m"))
    return ListEntry(
        workout_id=workout.id,
        workout_type=workout.type,
        title=workout.description,
        rows=tuple(rows),
    )
