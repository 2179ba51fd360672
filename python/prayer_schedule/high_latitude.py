"""High-latitude correction policies.

Every policy receives the raw yearly schedule and returns a corrected copy.
Most of them work on offsets from each day's transit: a marker borrowed
from another schedule keeps its distance from noon, not its clock time.

Policies fall into two families:

- Night-portion policies (angle based, one seventh, middle of the night)
  fill Fajr and Isha from a fraction of the night on days that still have
  a sunrise and a sunset.
- Reference policies replace the markers of abnormal days with those of a
  reference schedule (Mecca, the nearest latitude at 45 degrees, the last
  normal day) or with locally averaged estimates, then smooth the edges.
"""

import dataclasses
import logging
import math
from datetime import timedelta, timezone
from typing import Callable, Sequence

from ._types import (
    AbnormalRange,
    Config,
    HighLatitudePolicy,
    Schedule,
    TimeCorrections,
)
from .abnormal import extract_abnormal_ranges
from .interpolation import (
    Offsets,
    clamp_run_inward,
    from_offsets,
    group_missing_runs,
    interpolate_run,
    smooth_transition,
    to_offsets,
    transition_windows,
    wrap,
)
from .schedule import MARKERS, build_year

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0

MECCA_LATITUDE = 21.425506007708996
MECCA_LONGITUDE = 39.8254579358597
MECCA_TIMEZONE = timezone(timedelta(hours=3), "AST")

REFERENCE_LATITUDE = 45.0

# Largest day-to-day change, in seconds, allowed around corrected ranges
MECCA_CAP = 3 * 60.0
NEAREST_LATITUDE_CAP = 5 * 60.0
ESTIMATION_CAP = 5 * 60.0

SHARI_MIN_FASTING = timedelta(hours=10, minutes=17)
SHARI_MAX_FASTING = timedelta(hours=17, minutes=36)

# Markers a reference schedule can supply; Zuhr always stays local.
BORROWED_MARKERS = ("fajr", "sunrise", "asr", "maghrib", "isha")

# Night-portion policies derive Fajr and Isha themselves.
DAYLIGHT_MARKERS = ("sunrise", "asr", "maghrib")

Series = dict[str, Offsets]


def marker_offsets(schedules: Sequence[Schedule], name: str) -> Offsets:
    """Seconds from Zuhr of one marker over the year."""
    return to_offsets(
        [getattr(s, name) for s in schedules], [s.zuhr for s in schedules]
    )


def _series(schedules: Sequence[Schedule], names=BORROWED_MARKERS) -> Series:
    return {name: marker_offsets(schedules, name) for name in names}


def _with_series(schedules: Sequence[Schedule], series: Series) -> list[Schedule]:
    transits = [s.zuhr for s in schedules]
    times = {name: from_offsets(offsets, transits) for name, offsets in series.items()}
    return [
        dataclasses.replace(s, **{name: times[name][i] for name in times})
        for i, s in enumerate(schedules)
    ]


def _ranges(schedules: Sequence[Schedule]) -> list[AbnormalRange]:
    return [r for r in extract_abnormal_ranges(schedules) if r is not None]


def reference_schedules(config: Config, year: int, **location) -> list[Schedule]:
    """Uncorrected schedule of the same year for another location.

    location holds the Config fields to override (latitude, longitude,
    timezone, ...). Corrections and the high-latitude policy are disabled.
    """
    reference = dataclasses.replace(
        config,
        high_latitude_policy=HighLatitudePolicy.DISABLED,
        corrections=TimeCorrections(),
        **location,
    )
    schedules, _ = build_year(reference, year)
    return schedules


def mecca_schedules(config: Config, year: int) -> list[Schedule]:
    return reference_schedules(
        config,
        year,
        latitude=MECCA_LATITUDE,
        longitude=MECCA_LONGITUDE,
        elevation=0.0,
        timezone=MECCA_TIMEZONE,
    )


def nearest_latitude_schedules(config: Config, year: int) -> list[Schedule]:
    """Schedule at 45 degrees on the same side of the equator and longitude."""
    latitude = math.copysign(REFERENCE_LATITUDE, config.latitude)
    return reference_schedules(config, year, latitude=latitude)


def borrow(
    schedules: Sequence[Schedule],
    reference: Sequence[Schedule],
    indexes: Sequence[int],
) -> Series:
    """Offsets of the schedule with the reference offsets copied at indexes.

    A marker absent in the reference stays absent.
    """
    series = _series(schedules)
    for name, offsets in series.items():
        borrowed = marker_offsets(reference, name)
        for idx in indexes:
            offsets[idx] = borrowed[idx]
    return series


def smooth_ranges(
    series: Series, ranges: Sequence[AbnormalRange], size: int, cap: float
) -> Series:
    """Blend every marker linearly into each range edge, at most cap seconds
    per day where the window allows."""
    runs = [list(r.indexes) for r in ranges]
    windows = transition_windows(runs, size)
    result = dict(series)
    for rng, run, (before, after) in zip(ranges, runs, windows):
        logger.debug(
            "Smoothing %s range %s..%s over %d/%d days",
            rng.season,
            rng.start,
            rng.end,
            before,
            after,
        )
        for name, offsets in result.items():
            result[name] = smooth_transition(offsets, run, before, after, cap)
    return result


def fill_normal_gaps(
    schedules: Sequence[Schedule], names: Sequence[str] = BORROWED_MARKERS
) -> list[Schedule]:
    """Interpolate markers missing on normal days from other normal days."""
    normal = [s.is_normal for s in schedules]

    def usable(idx: int) -> bool:
        return normal[idx]

    series = _series(schedules, names)
    for name, offsets in series.items():
        missing = [normal[i] and offset is None for i, offset in enumerate(offsets)]
        for run in group_missing_runs(missing):
            logger.debug("Filling %s on %d normal days", name, len(run))
            offsets = interpolate_run(offsets, run, usable)
        series[name] = offsets
    return _with_series(schedules, series)


def _night_portion(
    config: Config,
    schedules: Sequence[Schedule],
    fajr_portion: float,
    isha_portion: float,
    to_seconds: Callable[[float], int],
) -> list[Schedule]:
    duration = config.twilight.maghrib_duration
    result = []
    for s in schedules:
        if s.sunrise is None or s.maghrib is None:
            result.append(s)
            continue
        if s.fajr is not None and s.isha is not None:
            result.append(s)
            continue

        night = SECONDS_PER_DAY - (s.maghrib - s.sunrise).total_seconds()
        fajr = s.sunrise - timedelta(seconds=to_seconds(fajr_portion * night))
        if duration:
            isha = s.maghrib + duration
        else:
            isha = s.maghrib + timedelta(seconds=to_seconds(isha_portion * night))
        result.append(dataclasses.replace(s, fajr=fajr, isha=isha))
    return result


def angle_based(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Fajr and Isha at angle/60 of the night away from sunrise and sunset."""
    return _night_portion(
        config,
        schedules,
        config.twilight.fajr_angle / 60.0,
        config.twilight.isha_angle / 60.0,
        round,
    )


def one_seventh_night(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    return _night_portion(config, schedules, 1 / 7, 1 / 7, round)


def middle_night(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    return _night_portion(config, schedules, 0.5, 0.5, math.floor)


def mecca(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Abnormal ranges take their offsets from the Mecca schedule."""
    ranges = _ranges(schedules)
    if not ranges:
        return list(schedules)
    indexes = [idx for r in ranges for idx in r.indexes]
    series = borrow(schedules, mecca_schedules(config, year), indexes)
    series = smooth_ranges(series, ranges, len(schedules), MECCA_CAP)
    return _with_series(schedules, series)


def always_mecca(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Every day takes its offsets from the Mecca schedule."""
    series = borrow(schedules, mecca_schedules(config, year), range(len(schedules)))
    return _with_series(schedules, series)


def nearest_latitude(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Abnormal ranges take their offsets from latitude 45 on the same
    longitude."""
    ranges = _ranges(schedules)
    if not ranges:
        return list(schedules)
    indexes = [idx for r in ranges for idx in r.indexes]
    series = borrow(schedules, nearest_latitude_schedules(config, year), indexes)
    series = smooth_ranges(series, ranges, len(schedules), NEAREST_LATITUDE_CAP)
    return _with_series(schedules, series)


def nearest_latitude_as_is(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """The latitude-45 schedule, unchanged, for the whole year."""
    return nearest_latitude_schedules(config, year)


def is_shari_normal(schedule: Schedule) -> bool:
    """Normal day whose fast (Fajr to Maghrib) lasts between 10h17m and
    17h36m."""
    if not schedule.is_normal or schedule.fajr is None or schedule.maghrib is None:
        return False
    return SHARI_MIN_FASTING <= schedule.maghrib - schedule.fajr <= SHARI_MAX_FASTING


def shari_normal_day(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Days outside the Shari fasting bounds take the latitude-45 offsets."""
    indexes = [i for i, s in enumerate(schedules) if not is_shari_normal(s)]
    if not indexes:
        return list(schedules)
    series = borrow(schedules, nearest_latitude_schedules(config, year), indexes)
    return _with_series(schedules, series)


def nearest_day(config: Config, year: int, schedules: Sequence[Schedule]) -> list[Schedule]:
    """Abnormal ranges repeat the clock times of the last normal day before
    them."""
    result = list(schedules)
    for rng in _ranges(schedules):
        source = schedules[wrap(rng.indexes[0] - 1, len(schedules))]
        for idx in rng.indexes:
            target = schedules[idx]
            shift = target.date - source.date
            markers = {
                name: None if getattr(source, name) is None else getattr(source, name) + shift
                for name in MARKERS
            }
            result[idx] = dataclasses.replace(target, **markers)
    return result


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def local_relative_estimation(
    config: Config, year: int, schedules: Sequence[Schedule]
) -> list[Schedule]:
    """Estimate abnormal days from the average shape of the normal ones.

    Sunrise and Maghrib are filled using the average day length, then Fajr
    and Isha using the average share of the night they take. Each filled run
    is clamped to change at most five minutes a day, then days left out of
    prayer order are repaired.
    """
    samples = [
        s
        for s in schedules
        if s.is_normal and None not in (s.fajr, s.sunrise, s.maghrib, s.isha)
    ]
    if not samples:
        logger.warning("No normal days to estimate from; schedule left unchanged")
        return list(schedules)

    days, fajrs, ishas = [], [], []
    for s in samples:
        day = (s.maghrib - s.sunrise).total_seconds()
        night = SECONDS_PER_DAY - day
        days.append(day)
        fajrs.append((s.sunrise - s.fajr).total_seconds() / night)
        ishas.append((s.isha - s.maghrib).total_seconds() / night)
    day_length = _average(days)
    fajr_share = _average(fajrs)
    isha_share = _average(ishas)

    indexes = [idx for r in _ranges(schedules) for idx in r.indexes]
    series = _series(schedules)
    filled = {name: [False] * len(schedules) for name in series}

    sunrise, maghrib = series["sunrise"], series["maghrib"]
    for idx in indexes:
        match sunrise[idx], maghrib[idx]:
            case None, None:
                sunrise[idx], maghrib[idx] = -day_length / 2, day_length / 2
                filled["sunrise"][idx] = filled["maghrib"][idx] = True
            case None, _:
                sunrise[idx] = maghrib[idx] - day_length
                filled["sunrise"][idx] = True
            case _, None:
                maghrib[idx] = sunrise[idx] + day_length
                filled["maghrib"][idx] = True

    for name in ("sunrise", "maghrib"):
        for run in group_missing_runs(filled[name]):
            series[name] = clamp_run_inward(series[name], run, ESTIMATION_CAP)

    sunrise, maghrib = series["sunrise"], series["maghrib"]
    fajr, isha = series["fajr"], series["isha"]
    duration = config.twilight.maghrib_duration.total_seconds()
    for idx in indexes:
        night = SECONDS_PER_DAY - (maghrib[idx] - sunrise[idx])
        if fajr[idx] is None or fajr[idx] >= sunrise[idx]:
            fajr[idx] = sunrise[idx] - fajr_share * night
            filled["fajr"][idx] = True
        if isha[idx] is None or isha[idx] <= maghrib[idx]:
            isha[idx] = maghrib[idx] + (duration or isha_share * night)
            filled["isha"][idx] = True

    for name in ("fajr", "isha"):
        for run in group_missing_runs(filled[name]):
            series[name] = clamp_run_inward(series[name], run, ESTIMATION_CAP)

    _restore_order(schedules, series, indexes, fajr_share, isha_share, duration)
    return _with_series(schedules, series)


def _restore_order(
    schedules: Sequence[Schedule],
    series: Series,
    indexes: Sequence[int],
    fajr_share: float,
    isha_share: float,
    duration: float,
) -> None:
    """Put estimated days back in prayer order.

    Fajr and Isha pushed past Sunrise or Maghrib by the clamp are estimated
    again without it. An Asr outside Zuhr..Maghrib is dropped, as the
    builder does.
    """
    fajr, sunrise, asr = series["fajr"], series["sunrise"], series["asr"]
    maghrib, isha = series["maghrib"], series["isha"]
    for idx in indexes:
        day = schedules[idx].date
        night = SECONDS_PER_DAY - (maghrib[idx] - sunrise[idx])
        if fajr[idx] >= sunrise[idx]:
            logger.debug("%s: estimated Fajr after Sunrise, recomputing", day)
            fajr[idx] = sunrise[idx] - fajr_share * night
        if isha[idx] <= maghrib[idx]:
            logger.debug("%s: estimated Isha before Maghrib, recomputing", day)
            isha[idx] = maghrib[idx] + (duration or isha_share * night)
        if asr[idx] is not None and not 0 < asr[idx] < maghrib[idx]:
            logger.debug("%s: dropping Asr, not between Zuhr and Maghrib", day)
            asr[idx] = None


def apply_high_latitude(
    config: Config, year: int, schedules: Sequence[Schedule]
) -> list[Schedule]:
    """Correct the raw schedule with the configured high-latitude policy.

    Gaps on normal days are interpolated first; the policy then handles the
    abnormal days. Night-portion policies compute Fajr and Isha on every day
    with a sunrise and a sunset, so only the daylight markers are filled
    for them.
    """
    policy = config.high_latitude_policy
    if policy is HighLatitudePolicy.DISABLED:
        return list(schedules)

    logger.debug("Applying %s high-latitude policy for %s", policy, year)
    gaps = BORROWED_MARKERS

    match policy:
        case HighLatitudePolicy.ANGLE_BASED:
            corrector, gaps = angle_based, DAYLIGHT_MARKERS
        case HighLatitudePolicy.ONE_SEVENTH_NIGHT:
            corrector, gaps = one_seventh_night, DAYLIGHT_MARKERS
        case HighLatitudePolicy.MIDDLE_NIGHT:
            corrector, gaps = middle_night, DAYLIGHT_MARKERS
        case HighLatitudePolicy.MECCA:
            corrector = mecca
        case HighLatitudePolicy.ALWAYS_MECCA:
            corrector = always_mecca
        case HighLatitudePolicy.NEAREST_LATITUDE:
            corrector = nearest_latitude
        case HighLatitudePolicy.NEAREST_LATITUDE_AS_IS:
            corrector = nearest_latitude_as_is
        case HighLatitudePolicy.SHARI_NORMAL_DAY:
            corrector = shari_normal_day
        case HighLatitudePolicy.LOCAL_RELATIVE_ESTIMATION:
            corrector = local_relative_estimation
        case HighLatitudePolicy.NEAREST_DAY:
            corrector = nearest_day
        case _:
            raise ValueError(f"Unknown high-latitude policy: {policy}")

    return corrector(config, year, fill_normal_gaps(schedules, gaps))
