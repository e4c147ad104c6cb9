"""Workout domain models."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Union

from mapty.workout.metrics import WORKOUT_TYPES, derived_metric, describe


class WorkoutError(ValueError):
    """Raised when a workout cannot be built from the given values."""


@dataclass(frozen=True)
class Coords:
    lat: float
    lng: float

    def as_list(self) -> list[float]:
        return [self.lat, self.lng]


@dataclass(frozen=True)
class Running:
    id: str
    date: datetime
    cords: Coords
    distance: float
    duration: float
    cadence: float
    pace: float
    description: str
    type: Literal["running"] = "running"


@dataclass(frozen=True)
class Cycling:
    id: str
    date: datetime
    cords: Coords
    distance: float
    duration: float
    elevation: float
    speed: float
    description: str
    type: Literal["cycling"] = "cycling"


Workout = Union[Running, Cycling]


class IdGenerator:
    """Issues 10-digit ids from the millisecond clock, never repeating one."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.time
        self._last: int | None = None

    def next_id(self) -> str:
        value = int(self._clock() * 1000)
        if self._last is not None and value <= self._last:
            value = self._last + 1
        self._last = value
        return str(value)[-10:]


_default_ids = IdGenerator()


def _require_positive(name: str, value: float) -> float:
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        raise WorkoutError(f"{name} must be a positive number")
    return number


def create_workout(
    kind: str,
    cords: Coords,
    distance: float,
    duration: float,
    extra: float,
    *,
    now: datetime | None = None,
    workout_id: str | None = None,
    id_generator: IdGenerator | None = None,
) -> Workout:
    """Build a Running (extra=cadence) or Cycling (extra=elevation) workout.

    Pace/speed and the description are computed once here; the instance is
    immutable afterwards.
    """
    if kind not in WORKOUT_TYPES:
        raise WorkoutError(f"Unknown workout type '{kind}'")
    distance = _require_positive("distance", distance)
    duration = _require_positive("duration", duration)
    created = now or datetime.now()
    ident = workout_id or (id_generator or _default_ids).next_id()
    metric = derived_metric(kind, distance, duration)
    description = describe(kind, created)

    if kind == "running":
        return Running(
            id=ident,
            date=created,
            cords=cords,
            distance=distance,
            duration=duration,
            cadence=float(extra),
            pace=metric,
            description=description,
        )
    return Cycling(
        id=ident,
        date=created,
        cords=cords,
        distance=distance,
        duration=duration,
        elevation=float(extra),
        speed=metric,
        description=description,
    )
