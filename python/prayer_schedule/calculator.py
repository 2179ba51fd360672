"""Yearly prayer schedule calculation.

Usage:
    from datetime import timedelta, timezone
    from prayer_schedule._types import Config
    from prayer_schedule.calculator import calculate

    config = Config(latitude=-6.175, longitude=106.825,
                    timezone=timezone(timedelta(hours=7)))
    schedules = calculate(config, 2024)
"""

import dataclasses
import logging
import math
from datetime import datetime as DateTime, timedelta, tzinfo

from ._types import (
    AsrConvention,
    Config,
    HighLatitudePolicy,
    Schedule,
    TimeCorrections,
    TwilightConvention,
)
from .exceptions import ConfigurationError
from .high_latitude import apply_high_latitude
from .schedule import MARKERS, build_year

logger = logging.getLogger(__name__)

# |latitude| above which the high-latitude policy always runs
HIGH_LATITUDE_THRESHOLD = 45.0

MIN_YEAR = 2
MAX_YEAR = 9998


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be in [{low}, {high}], got {value}")


def validate_config(config: Config, year: int) -> None:
    """Reject configurations that cannot produce a schedule.

    Raises:
        ConfigurationError: describing the first invalid field.
    """
    _check_range("latitude", config.latitude, -90.0, 90.0)
    _check_range("longitude", config.longitude, -180.0, 180.0)
    _check_range("elevation", config.elevation, 0.0, math.inf)

    if not isinstance(config.timezone, tzinfo):
        raise ConfigurationError(f"timezone must be a tzinfo, got {config.timezone!r}")
    if not isinstance(year, int) or not MIN_YEAR <= year <= MAX_YEAR:
        raise ConfigurationError(f"year must be in [{MIN_YEAR}, {MAX_YEAR}], got {year!r}")

    twilight = config.twilight
    if not isinstance(twilight, TwilightConvention):
        raise ConfigurationError(f"twilight must be a TwilightConvention, got {twilight!r}")
    for name in ("fajr_angle", "isha_angle"):
        angle = getattr(twilight, name)
        _check_range(name, angle, 0.0, 90.0)
        if angle in (0.0, 90.0):
            raise ConfigurationError(f"{name} must be strictly between 0 and 90, got {angle}")
    if twilight.maghrib_duration < timedelta(0):
        raise ConfigurationError(
            f"maghrib_duration must not be negative, got {twilight.maghrib_duration}"
        )

    if not isinstance(config.asr_convention, AsrConvention):
        raise ConfigurationError(f"Unknown Asr convention: {config.asr_convention!r}")
    if not isinstance(config.high_latitude_policy, HighLatitudePolicy):
        raise ConfigurationError(
            f"Unknown high-latitude policy: {config.high_latitude_policy!r}"
        )
    if not isinstance(config.corrections, TimeCorrections):
        raise ConfigurationError(
            f"corrections must be TimeCorrections, got {config.corrections!r}"
        )


def needs_correction(config: Config, abnormal: int) -> bool:
    """Whether the high-latitude policy should run for this location."""
    if config.high_latitude_policy is HighLatitudePolicy.DISABLED:
        return False
    return abs(config.latitude) > HIGH_LATITUDE_THRESHOLD or abnormal > 0


def round_time(t: DateTime, precise_to_seconds: bool = False) -> DateTime:
    """Round to the nearest minute (30 s rounds up) or to the nearest second."""
    if precise_to_seconds:
        rounded = t.replace(microsecond=0)
        if t.microsecond >= 500_000:
            rounded += timedelta(seconds=1)
        return rounded
    rounded = t.replace(second=0, microsecond=0)
    if t.second >= 30:
        rounded += timedelta(minutes=1)
    return rounded


def apply_corrections(
    schedules: list[Schedule], corrections: TimeCorrections, precise_to_seconds: bool
) -> list[Schedule]:
    """Add the fixed per-marker offsets, then round every present marker."""
    result = []
    for s in schedules:
        markers = {}
        for name in MARKERS:
            t = getattr(s, name)
            if t is not None:
                t = round_time(t + getattr(corrections, name), precise_to_seconds)
            markers[name] = t
        result.append(dataclasses.replace(s, **markers))
    return result


def calculate(config: Config, year: int) -> list[Schedule]:
    """Prayer schedule for every day of year at the configured location.

    Args:
        config: Location and calculation conventions
        year: Calendar year

    Returns:
        One Schedule per day, in the configured time zone.

    Raises:
        ConfigurationError: if config or year is invalid.
    """
    validate_config(config, year)
    schedules, abnormal = build_year(config, year)

    if needs_correction(config, abnormal):
        logger.debug(
            "%d abnormal days at latitude %.4f, applying %s",
            abnormal,
            config.latitude,
            config.high_latitude_policy,
        )
        schedules = apply_high_latitude(config, year, schedules)

    return apply_corrections(schedules, config.corrections, config.precise_to_seconds)
