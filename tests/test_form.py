from __future__ import annotations

from datetime import datetime

import pytest

from mapty.ui.form import (
    VALIDATION_MESSAGE,
    FormController,
    FormFields,
    FormStateError,
    WorkoutValidationError,
    parse_number,
)
from mapty.workout.model import Coords, Cycling, Running

WHEN = datetime(2026, 10, 17, 18, 0)


class FakeFormView:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.hide_delays: list[float] = []
        self.secondary = "cadence"

    def show(self) -> None:
        self.calls.append("show")

    def hide(self, delay_sec: float) -> None:
        self.calls.append("hide")
        self.hide_delays.append(delay_sec)

    def focus_distance(self) -> None:
        self.calls.append("focus")

    def clear_fields(self) -> None:
        self.calls.append("clear")

    def show_secondary_field(self, name: str) -> None:
        self.secondary = name


def _form(**kwargs: object) -> tuple[FormController, FakeFormView]:
    view = FakeFormView()
    form = FormController(view, clock=lambda: WHEN, **kwargs)  # type: ignore[arg-type]
    return form, view


def test_show_records_coords_and_focuses() -> None:
    form, view = _form()
    form.show(Coords(40.0, -73.0))

    assert form.visible
    assert form.pending_coords == Coords(40.0, -73.0)
    assert view.calls == ["show", "focus"]


def test_hide_clears_fields_and_coords() -> None:
    form, view = _form(hide_delay_sec=0.25)
    form.show(Coords(1, 2))
    form.hide()

    assert not form.visible
    assert form.pending_coords is None
    assert view.calls[-2:] == ["clear", "hide"]
    assert view.hide_delays == [0.25]


def test_toggle_keeps_exactly_one_secondary_field() -> None:
    form, view = _form()
    assert form.secondary_field == "cadence"

    form.toggle_fields_for_type("cycling")
    assert form.workout_type == "cycling"
    assert form.secondary_field == view.secondary == "elevation"

    form.toggle_fields_for_type("running")
    assert form.secondary_field == view.secondary == "cadence"

    with pytest.raises(ValueError):
        form.toggle_fields_for_type("swimming")


def test_submit_running() -> None:
    form, _ = _form()
    form.show(Coords(40.0, -73.0))

    workout = form.submit(
        FormFields(workout_type="running", distance="5", duration="25", cadence="180")
    )

    assert isinstance(workout, Running)
    assert workout.pace == 5.0
    assert workout.cords == Coords(40.0, -73.0)
    assert workout.description == "Running on 17 October"


def test_submit_running_with_non_numeric_cadence_fails() -> None:
    form, view = _form()
    form.show(Coords(40.0, -73.0))
    before = list(view.calls)

    with pytest.raises(WorkoutValidationError) as exc_info:
        form.submit(
            FormFields(workout_type="running", distance="5", duration="25", cadence="abc")
        )

    assert str(exc_info.value) == VALIDATION_MESSAGE
    assert form.visible
    assert form.pending_coords == Coords(40.0, -73.0)
    assert view.calls == before


@pytest.mark.parametrize(
    "fields",
    [
        FormFields(workout_type="running", distance="0", duration="25", cadence="180"),
        FormFields(workout_type="running", distance="5", duration="-1", cadence="180"),
        FormFields(workout_type="running", distance="5", duration="25", cadence="0"),
        FormFields(workout_type="running", distance="", duration="25", cadence="180"),
        FormFields(workout_type="cycling", distance="3", duration="20", elevation=None),
        FormFields(workout_type="cycling", distance="3", duration="0", elevation="10"),
        FormFields(workout_type="cycling", distance="inf", duration="20", elevation="10"),
    ],
)
def test_submit_rejects_invalid_fields(fields: FormFields) -> None:
    form, _ = _form()
    form.show(Coords(0, 0))
    with pytest.raises(WorkoutValidationError):
        form.submit(fields)


def test_submit_cycling_accepts_negative_elevation() -> None:
    form, _ = _form()
    form.show(Coords(0, 0))

    workout = form.submit(
        FormFields(workout_type="cycling", distance=3, duration=20, elevation=-5)
    )

    assert isinstance(workout, Cycling)
    assert workout.elevation == -5
    assert workout.speed == 9.0


def test_strict_elevation_rejects_negative_elevation() -> None:
    form, _ = _form(allow_negative_elevation=False)
    form.show(Coords(0, 0))
    with pytest.raises(WorkoutValidationError):
        form.submit(FormFields(workout_type="cycling", distance=3, duration=20, elevation=-5))


def test_submit_without_location_fails() -> None:
    form, _ = _form()
    with pytest.raises(FormStateError):
        form.submit(FormFields(workout_type="running", distance=5, duration=25, cadence=180))


def test_parse_number() -> None:
    assert parse_number(" 4.5 ") == 4.5
    assert parse_number(3) == 3.0
    assert parse_number("") is None
    assert parse_number(None) is None
    assert parse_number(True) is None
    assert parse_number("nan") is None
    assert parse_number("12km") is None


def test_blank_elevation_rejected_by_default() -> None:
    form, _ = _form()
    form.show(Coords(0, 0))
    with pytest.raises(WorkoutValidationError):
        form.submit(FormFields(workout_type="cycling", distance=3, duration=20, elevation=""))


def test_blank_elevation_as_zero_when_enabled() -> None:
    form, _ = _form(blank_elevation_as_zero=True)
    form.show(Coords(0, 0))

    workout = form.submit(
        FormFields(workout_type="cycling", distance=3, duration=20, elevation=" ")
    )

    assert isinstance(workout, Cycling)
    assert workout.elevation == 0.0
