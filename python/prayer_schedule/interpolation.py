"""Circular-array helpers for filling and smoothing yearly marker series.

Series are lists of offsets in seconds from each day's transit (negative
before transit), with None where the marker is absent. Index arithmetic
wraps because the year is treated as circular.
"""

from datetime import datetime as DateTime, timedelta
from typing import Callable, Sequence

MAX_TRANSITION_DAYS = 30

Offsets = list[float | None]


def wrap(idx: int, size: int) -> int:
    """Map any integer index onto 0..size-1."""
    return idx % size


def to_offsets(
    times: Sequence[DateTime | None], transits: Sequence[DateTime | None]
) -> Offsets:
    """Seconds from transit for each day; None where either side is absent."""
    return [
        None if t is None or z is None else (t - z).total_seconds()
        for t, z in zip(times, transits)
    ]


def from_offsets(
    offsets: Sequence[float | None], transits: Sequence[DateTime | None]
) -> list[DateTime | None]:
    """Inverse of to_offsets."""
    return [
        None if o is None or z is None else z + timedelta(seconds=o)
        for o, z in zip(offsets, transits)
    ]


def group_missing_runs(missing: Sequence[bool]) -> list[list[int]]:
    """Group indexes flagged missing into maximal contiguous runs.

    A run touching both ends of the sequence is merged into one run that
    starts near the end and continues from index 0.
    """
    runs: list[list[int]] = []
    current: list[int] = []
    for idx, flag in enumerate(missing):
        if flag:
            current.append(idx)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)

    if len(runs) > 1 and runs[0][0] == 0 and runs[-1][-1] == len(missing) - 1:
        tail = runs.pop()
        runs[0] = tail + runs[0]
    return runs


def limit_step(value: float, reference: float, cap: float) -> float:
    """Clamp value into [reference - cap, reference + cap]."""
    return max(reference - cap, min(reference + cap, value))


def _nearest_known(
    offsets: Sequence[float | None], run: Sequence[int], usable: Callable[[int], bool]
) -> float | None:
    size = len(offsets)
    members = set(run)
    for distance in range(1, size):
        for idx in (wrap(run[0] - distance, size), wrap(run[-1] + distance, size)):
            if idx not in members and usable(idx) and offsets[idx] is not None:
                return offsets[idx]
    return None


def interpolate_run(
    offsets: Sequence[float | None],
    run: Sequence[int],
    usable: Callable[[int], bool] = lambda _: True,
) -> Offsets:
    """Fill one run of missing offsets from its neighbours.

    With both neighbours known, the run is split at its midpoint and walked
    forward from the left and backward from the right in equal steps, so the
    walks meet without a jump. With one neighbour, its own per-day rate of
    change is extrapolated (or the value held if that rate is unknown). With
    none, the nearest known value anywhere in the series is held.
    """
    size = len(offsets)
    result = list(offsets)
    members = set(run)

    def known(idx: int) -> bool:
        return idx not in members and usable(idx) and offsets[idx] is not None

    left = wrap(run[0] - 1, size)
    right = wrap(run[-1] + 1, size)
    has_left, has_right = known(left), known(right)

    if has_left and has_right:
        step = (offsets[right] - offsets[left]) / (len(run) + 1)
        half = (len(run) + 1) // 2
        for k, idx in enumerate(run[:half], start=1):
            result[idx] = offsets[left] + step * k
        for k, idx in enumerate(reversed(run[half:]), start=1):
            result[idx] = offsets[right] - step * k
        return result

    if has_left:
        outer = wrap(left - 1, size)
        rate = offsets[left] - offsets[outer] if known(outer) else 0.0
        for k, idx in enumerate(run, start=1):
            result[idx] = offsets[left] + rate * k
        return result

    if has_right:
        outer = wrap(right + 1, size)
        rate = offsets[outer] - offsets[right] if known(outer) else 0.0
        for k, idx in enumerate(reversed(run), start=1):
            result[idx] = offsets[right] - rate * k
        return result

    held = _nearest_known(offsets, run, usable)
    if held is not None:
        for idx in run:
            result[idx] = held
    return result


def clamp_run_inward(
    offsets: Sequence[float | None], run: Sequence[int], cap: float
) -> Offsets:
    """Limit day-to-day change inside a run, walking from both ends.

    The first half is walked forward from the day before the run, the second
    half backward from the day after it. Each day is pulled to within cap of
    the day already fixed next to it.
    """
    size = len(offsets)
    result = list(offsets)
    half = len(run) // 2

    for idx in run[: half + 1]:
        anchor = result[wrap(idx - 1, size)]
        if result[idx] is not None and anchor is not None:
            result[idx] = limit_step(result[idx], anchor, cap)

    for idx in reversed(run[half + 1 :]):
        anchor = result[wrap(idx + 1, size)]
        if result[idx] is not None and anchor is not None:
            result[idx] = limit_step(result[idx], anchor, cap)
    return result


def transition_windows(
    runs: Sequence[Sequence[int]], size: int, max_window: int = MAX_TRANSITION_DAYS
) -> list[tuple[int, int]]:
    """Transition days available (before, after) each run.

    The free days between two circularly adjacent runs are split evenly, so
    the window after one run never overlaps the window before the next.
    """
    if not runs:
        return []
    order = sorted(range(len(runs)), key=lambda i: runs[i][0])
    windows = {i: [0, 0] for i in order}
    for pos, i in enumerate(order):
        j = order[(pos + 1) % len(order)]
        gap = wrap(runs[j][0] - runs[i][-1] - 1, size)
        if len(runs) == 1 and len(runs[i]) >= size:
            gap = 0
        share = min(max_window, gap // 2)
        windows[i][1] = share
        windows[j][0] = share
    return [tuple(windows[i]) for i in range(len(runs))]


def _ramp(result: Offsets, edge: int, step: int, window: int, cap: float) -> None:
    size = len(result)
    value = result[edge]
    if value is None:
        return

    anchor = 0
    for k in range(1, window + 2):
        known = result[wrap(edge + step * k, size)]
        if known is None:
            break
        anchor = k
        if abs(known - value) <= cap * k:
            break
    if anchor < 2:
        return

    target = result[wrap(edge + step * anchor, size)]
    for k in range(1, anchor):
        result[wrap(edge + step * k, size)] = value + (target - value) * k / anchor


def smooth_transition(
    offsets: Sequence[float | None],
    run: Sequence[int],
    before: int,
    after: int,
    cap: float,
) -> Offsets:
    """Blend the days around a corrected run linearly into its edge values.

    On each side the ramp runs from the run's edge value to the first day
    outward that can be reached at no more than cap per day. When no day of
    the window qualifies, the ramp spans the whole window and the steps are
    larger than cap but equal. Days past the ramp keep their own values.
    """
    result = list(offsets)
    _ramp(result, run[0], -1, before, cap)
    _ramp(result, run[-1], 1, after, cap)
    return result
