"""Derived workout metrics and descriptions."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Literal

WorkoutType = Literal["running", "cycling"]

WORKOUT_TYPES: tuple[WorkoutType, ...] = ("running", "cycling")

MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def pace_min_per_km(distance_km: float, duration_min: float) -> float:
    return duration_min / distance_km


def speed_kmh(distance_km: float, duration_min: float) -> float:
    return distance_km / (duration_min / 60)


_METRICS: dict[str, Callable[[float, float], float]] = {
    "running": pace_min_per_km,
    "cycling": speed_kmh,
}


def derived_metric(kind: str, distance_km: float, duration_min: float) -> float:
    """Pace for running (min/km), speed for cycling (km/h)."""
    try:
        fn = _METRICS[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown workout type '{kind}'") from exc
    return fn(distance_km, duration_min)


def describe(kind: str, when: datetime) -> str:
    return f"{kind[:1].upper()}{kind[1:]} on {when.day} {MONTHS[when.month - 1]}"
