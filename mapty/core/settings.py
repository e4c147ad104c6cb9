"""Runtime configuration for the workout map app."""

from __future__ import annotations

from dataclasses import dataclass

from mapty.workout.store import WORKOUTS_KEY

DEFAULT_TILE_URL = "https://tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
DEFAULT_TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
    "contributors"
)


@dataclass(frozen=True)
class AppSettings:
    map_zoom: int = 13
    tile_url: str = DEFAULT_TILE_URL
    tile_attribution: str = DEFAULT_TILE_ATTRIBUTION
    storage_key: str = WORKOUTS_KEY
    hide_delay_sec: float = 1.0
    allow_negative_elevation: bool = True
    blank_elevation_as_zero: bool = False
    geolocation_timeout_sec: float | None = None
    pan_duration_sec: float = 1.0
    debug: bool = False
