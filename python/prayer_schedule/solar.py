"""Daily sun events: transit, sunrise, sunset and custom elevation crossings.

Each crossing is refined by fixed-point iteration, re-evaluating the
declination and equation of time at the current estimate. Event times are
reported on the requested local calendar day: a crossing that falls just
before local midnight or just after the next one is moved onto that day by
one day, so callers must chain it back to the neighbouring day themselves.
"""

import datetime
from datetime import datetime as DateTime, timedelta, timezone, tzinfo
from typing import Callable, Iterable

from . import angles
from ._types import CustomSunEvent, SunEvents

MAX_ITERATIONS = 5
TOLERANCE_SECONDS = 1.0


def _hours(degrees: float) -> timedelta:
    return timedelta(hours=degrees / angles.DEGREES_PER_HOUR)


def local_day_bounds(day: datetime.date, tz: tzinfo) -> tuple[DateTime, DateTime]:
    """UTC instants of local midnight at the start and end of day."""
    start = DateTime.combine(day, datetime.time(0), tzinfo=tz)
    end = DateTime.combine(day + timedelta(days=1), datetime.time(0), tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def solar_transit(day: datetime.date, longitude: float, tz: tzinfo) -> DateTime:
    """UTC instant of the transit closest to local clock noon."""
    t = DateTime.combine(day, datetime.time(12), tzinfo=tz).astimezone(timezone.utc)
    for _ in range(MAX_ITERATIONS):
        step = _hours(-angles.hour_angle(longitude, t))
        t += step
        if abs(step.total_seconds()) < TOLERANCE_SECONDS:
            break
    return t


def solve_crossing(
    transit: DateTime,
    latitude: float,
    longitude: float,
    elevation: Callable[[float], float],
    before_transit: bool,
) -> DateTime | None:
    """UTC instant the sun crosses elevation on the given side of transit.

    Returns None when the elevation is not reached.
    """
    sign = -1.0 if before_transit else 1.0
    t = transit
    for _ in range(MAX_ITERATIONS):
        decl = angles.solar_declination(angles.julian_day(t))
        ha = angles.crossing_hour_angle(latitude, decl, elevation(decl))
        if ha is None:
            return None
        delta = angles.signed_angle(sign * ha - angles.hour_angle(longitude, t))
        step = _hours(delta)
        t += step
        if abs(step.total_seconds()) < TOLERANCE_SECONDS:
            break
    return t


def _onto_day(t: DateTime | None, start: DateTime, end: DateTime) -> DateTime | None:
    if t is None:
        return None
    if t < start:
        return t + timedelta(days=1)
    if t >= end:
        return t - timedelta(days=1)
    return t


def sun_events(
    day: datetime.date,
    latitude: float,
    longitude: float,
    elevation: float,
    tz: tzinfo,
    custom_events: Iterable[CustomSunEvent] = (),
) -> SunEvents:
    """Compute transit, sunrise, sunset and custom events for a local day.

    Args:
        day: Local calendar date
        latitude: Observer's latitude (degrees, negative for South)
        longitude: Observer's longitude (degrees, negative for West)
        elevation: Observer's elevation above sea level in meters
        tz: Time zone that defines the local day and the returned times
        custom_events: Extra elevation crossings, keyed by name in the result

    Returns:
        SunEvents with times in tz; unreachable crossings are None.
    """
    start, end = local_day_bounds(day, tz)
    transit = solar_transit(day, longitude, tz)
    horizon = angles.horizon_elevation(elevation)

    def crossing(elevation_fn, before_transit):
        t = solve_crossing(transit, latitude, longitude, elevation_fn, before_transit)
        t = _onto_day(t, start, end)
        return t.astimezone(tz) if t is not None else None

    sunrise = crossing(lambda _: horizon, True)
    sunset = crossing(lambda _: horizon, False)
    others = {
        event.name: crossing(event.elevation, event.before_transit)
        for event in custom_events
    }

    return SunEvents(
        transit=transit.astimezone(tz),
        sunrise=sunrise,
        sunset=sunset,
        others=others,
    )
