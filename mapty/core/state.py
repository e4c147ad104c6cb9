"""Shared runtime state for the workout map app."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from mapty.workout.model import Coords


class AppPhase(str, Enum):
    INITIALIZING = "initializing"
    AWAITING_LOCATION = "awaiting_location"
    MAP_READY = "map_ready"
    LOCATION_FAILED = "location_failed"


@dataclass
class AppState:
    phase: AppPhase = AppPhase.INITIALIZING
    user_position: Coords | None = None
    last_saved: datetime | None = None
    last_save_failed: bool = False
