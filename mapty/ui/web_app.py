"""NiceGUI web UI: leaflet map, workout form and workout list."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Callable

from nicegui import Client, app, ui
from nicegui.events import GenericEventArguments

from mapty.core.settings import AppSettings
from mapty.ui.controller import (
    AppController,
    ChangeType,
    FixedGeolocator,
    Geolocator,
    SelectWorkout,
    SubmitForm,
)
from mapty.ui.form import FormController, FormFields, SecondaryField
from mapty.ui.render import ListEntry, popup_content, popup_options
from mapty.workout.model import Coords, Workout
from mapty.workout.store import JsonFileStore, KeyValueStore, MappingStore, WorkoutStore

_GEOLOCATION_JS = """
new Promise((resolve) => {
  if (!navigator.geolocation) { resolve(null); return; }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve([pos.coords.latitude, pos.coords.longitude]),
    () => resolve(null),
    %s,
  );
})
"""

# run_javascript needs a finite wait; a day is longer than any permission prompt
_UNBOUNDED_WAIT_SEC = 24 * 60 * 60.0

_STYLE = """
<style>
  :root {
    --mp-dark-1: #2d3439;
    --mp-dark-2: #42484d;
    --mp-light-1: #aaaaaa;
    --mp-light-2: #ececec;
    --mp-running: #00c46a;
    --mp-cycling: #ffb545;
  }
  body {
    font-family: "Manrope", Arial, sans-serif;
    color: var(--mp-light-2);
    background: #fff;
  }
  .mapty-sidebar {
    flex-basis: 40rem;
    min-width: 22rem;
    background: var(--mp-dark-1);
    overflow-y: auto;
  }
  .mapty-map { background: var(--mp-light-1); }
  .workout, .form {
    background: var(--mp-dark-2) !important;
    color: var(--mp-light-2) !important;
    border-radius: 5px;
    cursor: pointer;
  }
  .workout--running { border-left: 5px solid var(--mp-running); }
  .workout--cycling { border-left: 5px solid var(--mp-cycling); }
  .workout__title { font-size: 1.1rem; font-weight: 600; }
  .workout__value { font-weight: 600; }
  .workout__unit { color: var(--mp-light-1); font-size: 0.8rem; text-transform: uppercase; }
  .form { transition: all 0.5s, transform 1ms; }
  .form--hidden {
    transform: translateY(-30rem);
    height: 0;
    padding: 0 !important;
    margin: 0;
    opacity: 0;
  }
  .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-running); }
  .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-cycling); }
</style>
"""


class LeafletMapView:
    def __init__(self, leaflet: ui.leaflet, settings: AppSettings) -> None:
        self._map = leaflet
        self._settings = settings
        self._map.clear_layers()
        self._map.tile_layer(
            url_template=settings.tile_url,
            options={"attribution": settings.tile_attribution},
        )

    async def ready(self) -> None:
        await self._map.initialized()

    def on_click(self, callback: Callable[[Coords], None]) -> None:
        def _on_map_click(e: GenericEventArguments) -> None:
            latlng = e.args.get("latlng") or {}
            try:
                coords = Coords(lat=float(latlng["lat"]), lng=float(latlng["lng"]))
            except (KeyError, TypeError, ValueError):
                if self._settings.debug:
                    print(f"[MAP] ignoring click without coordinates: {e.args}")
                return
            callback(coords)

        self._map.on("map-click", _on_map_click)

    def add_marker(self, workout: Workout) -> None:
        marker = self._map.marker(latlng=(workout.cords.lat, workout.cords.lng))
        marker.run_method("bindPopup", popup_content(workout), popup_options(workout))
        marker.run_method("openPopup")

    def focus(self, cords: Coords, zoom: int) -> None:
        self._map.run_map_method(
            "setView",
            cords.as_list(),
            zoom,
            {"animate": True, "pan": {"duration": self._settings.pan_duration_sec}},
        )


def build_entry_card(entry: ListEntry) -> ui.card:
    card = ui.card().classes(f"w-full gap-1 {entry.css_class}")
    card.props(f'data-id="{entry.workout_id}"')
    with card:
        ui.label(entry.title).classes("workout__title")
        with ui.row().classes("w-full gap-4"):
            for row in entry.rows:
                with ui.row().classes("items-baseline gap-1 workout__details"):
                    ui.label(row.icon).classes("workout__icon")
                    ui.label(row.value).classes("workout__value")
                    ui.label(row.unit).classes("workout__unit")
    return card


class WorkoutListView:
    """Workout entries rendered right after the form card, newest first."""

    def __init__(
        self,
        container: ui.column,
        on_select: Callable[[str], None],
        build_card: Callable[[ListEntry], ui.card] = build_entry_card,
    ) -> None:
        self._container = container
        self._on_select = on_select
        self._build_card = build_card

    def add_entry(self, entry: ListEntry) -> None:
        with self._container:
            card = self._build_card(entry)
        # index 0 is the form card
        card.move(target_index=1)
        card.on("click", lambda: self._on_select(entry.workout_id))


class WorkoutFormView:
    def __init__(
        self,
        card: ui.card,
        distance: ui.number,
        duration: ui.number,
        cadence: ui.number,
        elevation: ui.number,
    ) -> None:
        self._card = card
        self._distance = distance
        self._duration = duration
        self._cadence = cadence
        self._elevation = elevation
        self._restore: asyncio.TimerHandle | None = None

    def show(self) -> None:
        self._card.classes(remove="form--hidden")

    def hide(self, delay_sec: float) -> None:
        self._card.style("display: none")
        self._card.classes(add="form--hidden")
        if self._restore is not None:
            self._restore.cancel()
            self._restore = None
        if delay_sec <= 0:
            self._restore_display()
            return
        self._restore = asyncio.get_running_loop().call_later(
            delay_sec, self._restore_display
        )

    def _restore_display(self) -> None:
        self._restore = None
        self._card.style(remove="display: none")

    def focus_distance(self) -> None:
        self._distance.run_method("focus")

    def clear_fields(self) -> None:
        for field in (self._distance, self._duration, self._cadence, self._elevation):
            field.set_value(None)

    def show_secondary_field(self, name: SecondaryField) -> None:
        self._cadence.set_visibility(name == "cadence")
        self._elevation.set_visibility(name == "elevation")


class NotifyAlerts:
    def alert(self, message: str) -> None:
        ui.notify(message, color="negative")

    def warn(self, message: str) -> None:
        ui.notify(message, color="warning")


class BrowserGeolocator:
    """Single navigator.geolocation request in the connected browser.

    Without ``timeout_sec`` the request waits for the user's answer to the
    permission prompt however long it takes.
    """

    def __init__(self, timeout_sec: float | None = None) -> None:
        self._timeout_sec = timeout_sec

    async def locate(self) -> Coords | None:
        if self._timeout_sec is None:
            options = "{}"
            wait_sec = _UNBOUNDED_WAIT_SEC
        else:
            options = json.dumps({"timeout": int(self._timeout_sec * 1000)})
            wait_sec = self._timeout_sec + 1.0
        try:
            result = await ui.run_javascript(_GEOLOCATION_JS % options, timeout=wait_sec)
        except TimeoutError:
            return None
        if not isinstance(result, (list, tuple)) or len(result) != 2:
            return None
        try:
            return Coords(lat=float(result[0]), lng=float(result[1]))
        except (TypeError, ValueError):
            return None


def run_web_ui(
    *,
    settings: AppSettings | None = None,
    host: str = "127.0.0.1",
    port: int = 8080,
    storage: str = "browser",
    storage_path: Path | None = None,
    storage_secret: str = "mapty",
    fixed_position: Coords | None = None,
) -> int:
    cfg = settings or AppSettings()

    def _backend() -> KeyValueStore:
        if storage == "file":
            return JsonFileStore(storage_path)
        return MappingStore(app.storage.user)

    @ui.page("/")
    async def index(client: Client) -> None:
        ui.add_head_html(_STYLE)
        store = WorkoutStore(_backend(), key=cfg.storage_key, debug=cfg.debug)

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("mapty-sidebar h-full p-6 gap-4"):
                ui.label("Mapty").classes("text-3xl font-bold")
                with ui.column().classes("w-full gap-3") as workouts_column:
                    with ui.card().classes("w-full form form--hidden") as form_card:
                        with ui.grid(columns=2).classes("w-full gap-2"):
                            type_select = ui.select(
                                {"running": "Running", "cycling": "Cycling"},
                                value="running",
                                label="Type",
                            )
                            distance_input = ui.number("Distance (km)", min=0)
                            duration_input = ui.number("Duration (min)", min=0)
                            cadence_input = ui.number("Cadence (step/min)", min=0)
                            elevation_input = ui.number("Elev Gain (m)")
                            elevation_input.set_visibility(False)
                        submit_btn = ui.button("OK").props("flat dense")
                with ui.row().classes("w-full justify-end"):
                    reset_btn = ui.button("Reset workouts").props("flat dense color=grey")
            map_container = ui.element("div").classes("mapty-map h-full grow")

        form_view = WorkoutFormView(
            form_card, distance_input, duration_input, cadence_input, elevation_input
        )
        form = FormController(
            form_view,
            hide_delay_sec=cfg.hide_delay_sec,
            allow_negative_elevation=cfg.allow_negative_elevation,
            blank_elevation_as_zero=cfg.blank_elevation_as_zero,
        )
        list_view = WorkoutListView(
            workouts_column,
            on_select=lambda wid: controller.dispatch(SelectWorkout(wid)),
        )

        def make_map(coords: Coords, zoom: int) -> LeafletMapView:
            map_container.clear()
            with map_container:
                leaflet = ui.leaflet(center=(coords.lat, coords.lng), zoom=zoom)
                leaflet.classes("w-full h-full")
            return LeafletMapView(leaflet, cfg)

        controller = AppController(
            store,
            list_view,
            NotifyAlerts(),
            form,
            make_map,
            settings=cfg,
            reload_page=ui.navigate.reload,
        )

        def on_submit() -> None:
            controller.dispatch(
                SubmitForm(
                    FormFields(
                        workout_type=str(type_select.value or "running"),
                        distance=distance_input.value,
                        duration=duration_input.value,
                        cadence=cadence_input.value,
                        elevation=elevation_input.value,
                    )
                )
            )

        with ui.dialog() as reset_dialog, ui.card():
            ui.label("Delete all stored workouts?")
            with ui.row().classes("w-full justify-end gap-2"):
                ui.button("Cancel", on_click=reset_dialog.close).props("flat")
                confirm_btn = ui.button("Delete").props("color=negative")

        def on_confirm_reset() -> None:
            reset_dialog.close()
            controller.reset()

        type_select.on_value_change(lambda e: controller.dispatch(ChangeType(str(e.value))))
        for field in (distance_input, duration_input, cadence_input, elevation_input):
            field.on("keydown.enter", lambda _: on_submit())
        submit_btn.on_click(on_submit)
        reset_btn.on_click(reset_dialog.open)
        confirm_btn.on_click(on_confirm_reset)

        controller.start()
        await client.connected()
        geolocator: Geolocator
        if fixed_position is not None:
            geolocator = FixedGeolocator(fixed_position)
        else:
            geolocator = BrowserGeolocator(cfg.geolocation_timeout_sec)
        if not await controller.acquire_location(geolocator):
            with map_container:
                ui.label("Map unavailable: location access was denied").classes(
                    "text-lg p-6"
                )

    ui.run(
        host=host,
        port=port,
        reload=False,
        title="Mapty",
        storage_secret=storage_secret,
    )
    return 0
