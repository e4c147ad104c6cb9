"""App controller shared by the web UI and tests.

UI events arrive as commands; the controller owns the workout collection and
talks to the map, the list and the storage only through injected views.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol, Union

from mapty.core.settings import AppSettings
from mapty.core.state import AppPhase, AppState
from mapty.ui.form import FormController, FormFields, FormStateError, WorkoutValidationError
from mapty.ui.render import ListEntry, list_entry
from mapty.workout.model import Coords, Workout
from mapty.workout.store import WorkoutStore

LOCATION_FAILED_MESSAGE = "Could not get your location!"
SAVE_FAILED_MESSAGE = "Workout shown but could not be saved to local storage"


class MapView(Protocol):
    async def ready(self) -> None: ...

    def on_click(self, callback: Callable[[Coords], None]) -> None: ...

    def add_marker(self, workout: Workout) -> None: ...

    def focus(self, cords: Coords, zoom: int) -> None: ...


MapFactory = Callable[[Coords, int], MapView]


class ListView(Protocol):
    def add_entry(self, entry: ListEntry) -> None: ...


class Alerts(Protocol):
    def alert(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...


class Geolocator(Protocol):
    async def locate(self) -> Coords | None: ...


class FixedGeolocator:
    def __init__(self, coords: Coords | None) -> None:
        self._coords = coords

    async def locate(self) -> Coords | None:
        return self._coords


@dataclass(frozen=True)
class ShowForm:
    coords: Coords


@dataclass(frozen=True)
class SubmitForm:
    fields: FormFields


@dataclass(frozen=True)
class ChangeType:
    workout_type: str


@dataclass(frozen=True)
class SelectWorkout:
    workout_id: str


Command = Union[ShowForm, SubmitForm, ChangeType, SelectWorkout]


class AppController:
    def __init__(
        self,
        store: WorkoutStore,
        list_view: ListView,
        alerts: Alerts,
        form: FormController,
        map_factory: MapFactory,
        *,
        settings: AppSettings | None = None,
        reload_page: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._list = list_view
        self._alerts = alerts
        self._form = form
        self._map_factory = map_factory
        self._settings = settings or AppSettings()
        self._reload_page = reload_page
        self._map: MapView | None = None
        self._workouts: list[Workout] = []
        self.state = AppState()

    @property
    def workouts(self) -> tuple[Workout, ...]:
        return tuple(self._workouts)

    @property
    def form(self) -> FormController:
        return self._form

    @property
    def map_view(self) -> MapView | None:
        return self._map

    def start(self) -> None:
        """Load stored workouts and list them; markers wait for the map."""
        loaded = self._store.load()
        if loaded:
            self._workouts = loaded
            for workout in self._workouts:
                self._list.add_entry(list_entry(workout))
        self.state.phase = AppPhase.AWAITING_LOCATION
        self._log(f"started with {len(self._workouts)} stored workout(s)")

    async def acquire_location(self, geolocator: Geolocator) -> bool:
        self.state.phase = AppPhase.AWAITING_LOCATION
        coords = await geolocator.locate()
        if coords is None:
            self.state.phase = AppPhase.LOCATION_FAILED
            self._alerts.alert(LOCATION_FAILED_MESSAGE)
            return False

        map_view = self._map_factory(coords, self._settings.map_zoom)
        await map_view.ready()
        map_view.on_click(lambda clicked: self.dispatch(ShowForm(clicked)))
        for workout in self._workouts:
            map_view.add_marker(workout)
        self._map = map_view
        self.state.user_position = coords
        self.state.phase = AppPhase.MAP_READY
        self._log(f"map ready at {coords.lat:.5f},{coords.lng:.5f}")
        return True

    def dispatch(self, command: Command) -> Workout | None:
        if isinstance(command, ShowForm):
            self._show_form(command.coords)
        elif isinstance(command, SubmitForm):
            return self._submit(command.fields)
        elif isinstance(command, ChangeType):
            self._form.toggle_fields_for_type(command.workout_type)
        elif isinstance(command, SelectWorkout):
            self._select(command.workout_id)
        else:
            raise TypeError(f"Unsupported command {command!r}")
        return None

    def _show_form(self, coords: Coords) -> None:
        if self.state.phase is not AppPhase.MAP_READY:
            return
        self._form.show(coords)

    def _submit(self, fields: FormFields) -> Workout | None:
        try:
            workout = self._form.submit(fields)
        except WorkoutValidationError as exc:
            self._alerts.alert(str(exc))
            return None
        except FormStateError as exc:
            self._alerts.warn(str(exc))
            return None

        self._workouts.append(workout)
        if self._map is not None:
            self._map.add_marker(workout)
        self._list.add_entry(list_entry(workout))
        self._form.hide()
        self._persist()
        self._log(f"added {workout.type} workout {workout.id}")
        return workout

    def _persist(self) -> None:
        if self._store.save(self._workouts):
            self.state.last_saved = datetime.now()
            self.state.last_save_failed = False
        else:
            self.state.last_save_failed = True
            self._alerts.warn(SAVE_FAILED_MESSAGE)

    def _select(self, workout_id: str) -> None:
        workout = next((w for w in self._workouts if w.id == workout_id), None)
        if workout is None or self._map is None:
            return
        self._map.focus(workout.cords, self._settings.map_zoom)

    def reset(self) -> None:
        self._store.clear()
        self._workouts.clear()
        self._log("stored workouts cleared")
        if self._reload_page is not None:
            self._reload_page()

    def _log(self, message: str) -> None:
        if self._settings.debug:
            print(f"[APP] {message}")
