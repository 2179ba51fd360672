"""Classify runs of abnormal days into a summer and a winter range."""

import datetime
import logging
from typing import Sequence

from ._types import AbnormalRange, Schedule, Season
from .interpolation import group_missing_runs

logger = logging.getLogger(__name__)

SUMMER_MONTHS = frozenset({6, 7, 8})
WINTER_MONTHS = frozenset({12, 1, 2})


def _previous_year(day: datetime.date) -> datetime.date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29
        return day.replace(year=day.year - 1, day=28)


def months_spanned(start: datetime.date, end: datetime.date) -> set[int]:
    """Calendar months touched between start and end, inclusive."""
    months = set()
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.add(month)
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


def classify(start: datetime.date, end: datetime.date) -> Season | None:
    """Season of a range from the months it covers; None when ambiguous."""
    months = months_spanned(start, end)
    summer = len(months & SUMMER_MONTHS)
    winter = len(months & WINTER_MONTHS)
    if summer == 3 or summer > winter:
        return Season.SUMMER
    if winter == 3 or winter > summer:
        return Season.WINTER
    return None


def extract_abnormal_ranges(
    schedules: Sequence[Schedule],
) -> tuple[AbnormalRange | None, AbnormalRange | None]:
    """Find the summer and winter ranges of days that are not normal.

    A run wrapping across the year boundary is merged and its start date is
    moved into the previous year. Runs whose season cannot be decided are
    dropped; if two runs share a season, the longer one is kept.

    Returns:
        (summer, winter), each an AbnormalRange or None.
    """
    runs = group_missing_runs([not schedule.is_normal for schedule in schedules])
    found: dict[Season, AbnormalRange] = {}

    for run in runs:
        start = schedules[run[0]].date
        end = schedules[run[-1]].date
        if run[0] > run[-1]:
            start = _previous_year(start)

        season = classify(start, end)
        if season is None:
            logger.warning(
                "Dropping abnormal range %s..%s: cannot tell summer from winter",
                start,
                end,
            )
            continue

        candidate = AbnormalRange(indexes=tuple(run), start=start, end=end, season=season)
        current = found.get(season)
        if current is not None:
            kept, dropped = (
                (candidate, current)
                if len(candidate.indexes) > len(current.indexes)
                else (current, candidate)
            )
            logger.warning(
                "Two %s ranges found; keeping %s..%s, dropping %s..%s",
                season,
                kept.start,
                kept.end,
                dropped.start,
                dropped.end,
            )
            candidate = kept
        found[season] = candidate

    return found.get(Season.SUMMER), found.get(Season.WINTER)
