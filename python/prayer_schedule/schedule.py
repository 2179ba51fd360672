"""Build one year of daily prayer schedules from solar events.

The year is computed with one padding day on each side so that events found
on the wrong side of transit can be moved to the neighbouring day before the
padding is stripped.
"""

import datetime
import logging
from datetime import datetime as DateTime, timedelta

from . import angles, solar
from ._types import Config, CustomSunEvent, Schedule
from .conventions import asr_coefficient
from .interpolation import wrap

logger = logging.getLogger(__name__)

MARKERS = ("fajr", "sunrise", "zuhr", "asr", "maghrib", "isha")

# Markers that must exist for a day to count as complete.
REQUIRED_MARKERS = ("fajr", "sunrise", "maghrib", "isha")

ASTRONOMICAL_DEPRESSION = 18.0

DAWN = "astronomical_dawn"
DUSK = "astronomical_dusk"


def custom_events(config: Config) -> tuple[CustomSunEvent, ...]:
    """Elevation crossings requested from the solar provider for each day."""
    coefficient = asr_coefficient(config.asr_convention)
    latitude = config.latitude
    fajr = -config.twilight.fajr_angle
    isha = -config.twilight.isha_angle
    return (
        CustomSunEvent("fajr", before_transit=True, elevation=lambda _: fajr),
        CustomSunEvent("isha", before_transit=False, elevation=lambda _: isha),
        CustomSunEvent(
            "asr",
            before_transit=False,
            elevation=lambda decl: angles.asr_elevation(coefficient, decl, latitude),
        ),
        CustomSunEvent(
            DAWN, before_transit=True, elevation=lambda _: -ASTRONOMICAL_DEPRESSION
        ),
        CustomSunEvent(
            DUSK, before_transit=False, elevation=lambda _: -ASTRONOMICAL_DEPRESSION
        ),
    )


def _place(
    slots: list[dict], idx: int, name: str, t: DateTime | None, transit: DateTime, before: bool
) -> None:
    """Store t under name, moving it to the neighbouring day if it lies on
    the wrong side of transit."""
    if t is None:
        return
    if before and t > transit:
        idx += 1
    elif not before and t < transit:
        idx -= 1
    slots[wrap(idx, len(slots))][name] = t


def _reset(slot: dict, name: str, day: datetime.date) -> None:
    logger.debug("%s: dropping %s at %s, out of order", day, name, slot[name])
    slot[name] = None


def _cleanup(slot: dict, day: datetime.date) -> None:
    zuhr = slot["zuhr"]
    if slot["fajr"] is not None and not (
        slot["fajr"] < zuhr and (slot["sunrise"] is None or slot["fajr"] < slot["sunrise"])
    ):
        _reset(slot, "fajr", day)
    if slot["sunrise"] is not None and not slot["sunrise"] < zuhr:
        _reset(slot, "sunrise", day)
    if slot["maghrib"] is not None and not slot["maghrib"] > zuhr:
        _reset(slot, "maghrib", day)
    if slot["isha"] is not None and not (
        slot["isha"] > zuhr and (slot["maghrib"] is None or slot["isha"] > slot["maghrib"])
    ):
        _reset(slot, "isha", day)
    if slot["asr"] is not None and not (
        zuhr < slot["asr"] and (slot["maghrib"] is None or slot["asr"] < slot["maghrib"])
    ):
        _reset(slot, "asr", day)


def is_complete(schedule: Schedule) -> bool:
    return all(getattr(schedule, name) is not None for name in REQUIRED_MARKERS)


def build_year(config: Config, year: int) -> tuple[list[Schedule], int]:
    """Compute the raw schedule of every day of year.

    Returns:
        (schedules, abnormal) where schedules has one entry per day of the
        year and abnormal counts the days missing Fajr, Sunrise, Maghrib or
        Isha.
    """
    size = angles.days_in_year(year) + 2
    first = datetime.date(year, 1, 1) - timedelta(days=1)
    dates = [first + timedelta(days=i) for i in range(size)]
    events = custom_events(config)

    slots = [dict.fromkeys(MARKERS) for _ in range(size)]
    normal = [False] * size

    for idx, day in enumerate(dates):
        sun = solar.sun_events(
            day,
            config.latitude,
            config.longitude,
            config.elevation,
            config.timezone,
            events,
        )
        transit = sun.transit
        slots[idx]["zuhr"] = transit
        slots[idx]["asr"] = sun.others["asr"]
        _place(slots, idx, "fajr", sun.others["fajr"], transit, before=True)
        _place(slots, idx, "sunrise", sun.sunrise, transit, before=True)
        _place(slots, idx, "maghrib", sun.sunset, transit, before=False)
        _place(slots, idx, "isha", sun.others["isha"], transit, before=False)
        normal[idx] = None not in (
            sun.sunrise,
            sun.sunset,
            sun.others[DAWN],
            sun.others[DUSK],
        )

    duration = config.twilight.maghrib_duration
    for slot, day in zip(slots, dates):
        _cleanup(slot, day)
        if duration:
            maghrib = slot["maghrib"]
            slot["isha"] = maghrib + duration if maghrib is not None else None

    schedules = [
        Schedule(date=day, is_normal=is_normal, **slot)
        for day, slot, is_normal in zip(dates[1:-1], slots[1:-1], normal[1:-1])
    ]
    abnormal = sum(1 for schedule in schedules if not is_complete(schedule))
    logger.debug(
        "Built %d days for %s at (%.4f, %.4f): %d abnormal",
        len(schedules),
        year,
        config.latitude,
        config.longitude,
        abnormal,
    )
    return schedules, abnormal
