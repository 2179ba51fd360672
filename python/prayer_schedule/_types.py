"""Frozen dataclasses and enums for all structured values."""

import datetime
from dataclasses import dataclass, field
from datetime import timedelta, tzinfo
from enum import IntEnum, StrEnum
from typing import Callable


class Season(StrEnum):
    SUMMER = "summer"
    WINTER = "winter"


class AsrConvention(IntEnum):
    """Shadow-length factor defining Asr."""

    SHAFII = 1
    HANAFI = 2


class HighLatitudePolicy(StrEnum):
    DISABLED = "disabled"
    ANGLE_BASED = "angle_based"
    ONE_SEVENTH_NIGHT = "one_seventh_night"
    MIDDLE_NIGHT = "middle_night"
    MECCA = "mecca"
    ALWAYS_MECCA = "always_mecca"
    NEAREST_LATITUDE = "nearest_latitude"
    NEAREST_LATITUDE_AS_IS = "nearest_latitude_as_is"
    SHARI_NORMAL_DAY = "shari_normal_day"
    LOCAL_RELATIVE_ESTIMATION = "local_relative_estimation"
    NEAREST_DAY = "nearest_day"


@dataclass(frozen=True)
class TwilightConvention:
    """Sun depression angles for Fajr and Isha.

    A non-zero maghrib_duration makes Isha a fixed delay after Maghrib
    instead of an angle.
    """

    fajr_angle: float = 18.0
    isha_angle: float = 18.0
    maghrib_duration: timedelta = timedelta(0)


@dataclass(frozen=True)
class TimeCorrections:
    fajr: timedelta = timedelta(0)
    sunrise: timedelta = timedelta(0)
    zuhr: timedelta = timedelta(0)
    asr: timedelta = timedelta(0)
    maghrib: timedelta = timedelta(0)
    isha: timedelta = timedelta(0)


@dataclass(frozen=True)
class Config:
    latitude: float
    longitude: float
    elevation: float = 0.0
    timezone: tzinfo = datetime.timezone.utc
    twilight: TwilightConvention = field(default_factory=TwilightConvention)
    asr_convention: AsrConvention = AsrConvention.SHAFII
    high_latitude_policy: HighLatitudePolicy = HighLatitudePolicy.NEAREST_LATITUDE
    corrections: TimeCorrections = field(default_factory=TimeCorrections)
    precise_to_seconds: bool = False


@dataclass(frozen=True)
class CustomSunEvent:
    """Extra elevation crossing to solve for.

    elevation receives the sun declination (degrees) at the solved instant
    and returns the target elevation (degrees).
    """

    name: str
    before_transit: bool
    elevation: Callable[[float], float]


@dataclass(frozen=True)
class SunEvents:
    transit: datetime.datetime
    sunrise: datetime.datetime | None
    sunset: datetime.datetime | None
    others: dict[str, datetime.datetime | None]


@dataclass(frozen=True)
class Schedule:
    date: datetime.date
    fajr: datetime.datetime | None = None
    sunrise: datetime.datetime | None = None
    zuhr: datetime.datetime | None = None
    asr: datetime.datetime | None = None
    maghrib: datetime.datetime | None = None
    isha: datetime.datetime | None = None
    is_normal: bool = False


@dataclass(frozen=True)
class AbnormalRange:
    indexes: tuple[int, ...]
    start: datetime.date
    end: datetime.date
    season: Season
