"""Derived statistics over a run history.

Plain functions of (runs, now): callers recompute on demand.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from runconquer.core.constants import WEEK_DAYS
from runconquer.core.time_utils import as_utc, local_date
from runconquer.schemas.game import RunRecord


def weekly_runs(runs: Iterable[RunRecord], now: datetime) -> list[RunRecord]:
    """Runs created within the last seven days."""
    week_ago = as_utc(now) - timedelta(days=WEEK_DAYS)
    return [r for r in runs if as_utc(r.created_at) >= week_ago]


def weekly_distance(runs: Iterable[RunRecord], now: datetime) -> float:
    return sum(r.distance for r in weekly_runs(runs, now))


def today_distance(runs: Iterable[RunRecord], today: date, tz_name: str | None = None) -> float:
    return sum(r.distance for r in runs if local_date(r.created_at, tz_name) == today)


def daily_distance_bins(runs: Iterable[RunRecord], now: datetime) -> list[float]:
    """Distance per day for the last week; index 6 is today, 0 is six days ago."""
    now = as_utc(now)
    bins = [0.0] * WEEK_DAYS
    for run in weekly_runs(runs, now):
        day_diff = (now - as_utc(run.created_at)) // timedelta(days=1)
        idx = WEEK_DAYS - 1 - day_diff
        if 0 <= idx < WEEK_DAYS:
            bins[idx] += run.distance
    return bins


def total_duration(runs: Iterable[RunRecord]) -> int:
    return sum(r.duration for r in runs)


def average_pace(total_distance: float, runs: Sequence[RunRecord]) -> float:
    """Overall m/s across all runs; 0 without any recorded time."""
    seconds = total_duration(runs)
    if not runs or seconds <= 0:
        return 0.0
    return total_distance / seconds
