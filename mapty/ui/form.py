"""Workout entry form state and validation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Protocol

from mapty.workout.metrics import WORKOUT_TYPES, WorkoutType
from mapty.workout.model import Coords, IdGenerator, Workout, create_workout

SecondaryField = Literal["cadence", "elevation"]

VALIDATION_MESSAGE = "Inputs have to be positive numbers!"


class WorkoutValidationError(ValueError):
    """Raised when submitted form values are not usable."""

    def __init__(self, message: str = VALIDATION_MESSAGE) -> None:
        super().__init__(message)


class FormStateError(RuntimeError):
    """Raised when the form is submitted without a map location."""


class FormView(Protocol):
    def show(self) -> None: ...

    def hide(self, delay_sec: float) -> None: ...

    def focus_distance(self) -> None: ...

    def clear_fields(self) -> None: ...

    def show_secondary_field(self, name: SecondaryField) -> None: ...


@dataclass(frozen=True)
class FormFields:
    workout_type: str
    distance: object = None
    duration: object = None
    cadence: object = None
    elevation: object = None


def secondary_field_for(kind: str) -> SecondaryField:
    return "cadence" if kind == "running" else "elevation"


def _is_blank(raw: object) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_number(raw: object) -> float | None:
    """Finite float from a form value, None for blank or non-numeric input."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        number = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class FormController:
    def __init__(
        self,
        view: FormView,
        *,
        hide_delay_sec: float = 1.0,
        allow_negative_elevation: bool = True,
        blank_elevation_as_zero: bool = False,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._view = view
        self._hide_delay_sec = max(0.0, hide_delay_sec)
        self._allow_negative_elevation = allow_negative_elevation
        self._blank_elevation_as_zero = blank_elevation_as_zero
        self._ids = id_generator or IdGenerator()
        self._clock = clock or datetime.now
        self.workout_type: WorkoutType = "running"
        self.visible = False
        self.pending_coords: Coords | None = None

    @property
    def secondary_field(self) -> SecondaryField:
        return secondary_field_for(self.workout_type)

    def show(self, coords: Coords) -> None:
        self.pending_coords = coords
        self.visible = True
        self._view.show()
        self._view.focus_distance()

    def hide(self) -> None:
        self._view.clear_fields()
        self._view.hide(self._hide_delay_sec)
        self.visible = False
        self.pending_coords = None

    def toggle_fields_for_type(self, kind: str) -> None:
        if kind not in WORKOUT_TYPES:
            raise ValueError(f"Unknown workout type '{kind}'")
        self.workout_type = "running" if kind == "running" else "cycling"
        self._view.show_secondary_field(self.secondary_field)

    def submit(self, fields: FormFields) -> Workout:
        """Validate the fields and build a workout at the pending location.

        Nothing is mutated on failure; the caller decides when to hide.
        """
        if self.pending_coords is None:
            raise FormStateError("No map location selected")
        kind = fields.workout_type
        if kind not in WORKOUT_TYPES:
            raise WorkoutValidationError(f"Unknown workout type '{kind}'")

        distance = parse_number(fields.distance)
        duration = parse_number(fields.duration)
        if kind == "running":
            extra = parse_number(fields.cadence)
        elif self._blank_elevation_as_zero and _is_blank(fields.elevation):
            extra = 0.0
        else:
            extra = parse_number(fields.elevation)
        if distance is None or duration is None or extra is None:
            raise WorkoutValidationError()

        required = [distance, duration]
        if kind == "running" or not self._allow_negative_elevation:
            required.append(extra)
        if not all(value > 0 for value in required):
            raise WorkoutValidationError()

        return create_workout(
            kind,
            self.pending_coords,
            distance,
            duration,
            extra,
            now=self._clock(),
            id_generator=self._ids,
        )
