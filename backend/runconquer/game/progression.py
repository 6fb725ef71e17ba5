"""XP, level and streak rules.

Level is always re-derived from total XP:

    level(xp)          = floor(sqrt(xp / 100)) + 1
    xp_for_level(L)    = (L - 1)^2 * 100
    xp_for_next_level  = L^2 * 100

so xp_for_level(level(xp)) <= xp < xp_for_next_level(level(xp)).
"""

import math
from datetime import date, timedelta
from typing import Optional

from runconquer.core.constants import LEVEL_XP_BASE, SECONDS_PER_XP, XP_PER_METER
from runconquer.schemas.game import FinishedRun, UserProfile


def xp_from_run(distance: float, duration: float) -> int:
    """10 XP per meter plus 1 XP per full minute."""
    return math.floor(distance * XP_PER_METER) + math.floor(duration / SECONDS_PER_XP)


def level_for_xp(xp: int) -> int:
    # isqrt keeps the boundary exact: 100 * n^2 <= xp  <=>  n^2 <= xp // 100
    return math.isqrt(max(int(xp), 0) // LEVEL_XP_BASE) + 1


def xp_for_level(level: int) -> int:
    return (level - 1) ** 2 * LEVEL_XP_BASE


def xp_for_next_level(level: int) -> int:
    return level ** 2 * LEVEL_XP_BASE


def level_progress(xp: int) -> float:
    """Fraction of the way from the current level threshold to the next."""
    level = level_for_xp(xp)
    floor_xp = xp_for_level(level)
    return (xp - floor_xp) / (xp_for_next_level(level) - floor_xp)


def next_streak(current_streak: int, last_run_date: Optional[date], today: date) -> int:
    """Consecutive-day streak after a run finished on `today`."""
    if last_run_date == today:
        return current_streak
    if last_run_date == today - timedelta(days=1):
        return current_streak + 1
    return 1


def apply_run(profile: UserProfile, run: FinishedRun, xp_earned: int, today: date) -> UserProfile:
    """Fold one qualifying run into the profile's cumulative stats.

    A run dated before `last_run_date` (e.g. an imported old track) adds
    to the totals but leaves the streak and `last_run_date` alone.
    """
    xp = profile.xp + xp_earned
    update = {
        "xp": xp,
        "level": level_for_xp(xp),
        "total_distance": profile.total_distance + run.distance,
        "total_runs": profile.total_runs + 1,
    }
    if profile.last_run_date is None or today >= profile.last_run_date:
        streak = next_streak(profile.current_streak, profile.last_run_date, today)
        update.update(
            current_streak=streak,
            longest_streak=max(profile.longest_streak, streak),
            last_run_date=today,
        )
    return profile.model_copy(update=update)
