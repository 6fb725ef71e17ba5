import logging
from datetime import datetime
from typing import Iterable

from runconquer.schemas.game import Achievement, AchievementCategory, ProgressStats

logger = logging.getLogger(__name__)


def _badge(id, title, description, icon, requirement, category):
    return Achievement(
        id=id,
        title=title,
        description=description,
        icon=icon,
        requirement=requirement,
        category=category,
    )


DEFAULT_ACHIEVEMENTS: tuple[Achievement, ...] = (
    _badge("first_run", "First Steps", "Complete your first run", "walk", 1, AchievementCategory.runs),
    _badge("run_5", "Getting Started", "Complete 5 runs", "trending-up", 5, AchievementCategory.runs),
    _badge("run_25", "Dedicated Runner", "Complete 25 runs", "fitness", 25, AchievementCategory.runs),
    _badge("run_100", "Marathon Spirit", "Complete 100 runs", "medal", 100, AchievementCategory.runs),
    _badge("dist_1k", "First Kilometer", "Run a total of 1 km", "flag", 1000, AchievementCategory.distance),
    _badge("dist_10k", "Distance Demon", "Run a total of 10 km", "flame", 10000, AchievementCategory.distance),
    _badge("dist_50k", "Ultra Runner", "Run a total of 50 km", "flash", 50000, AchievementCategory.distance),
    _badge("dist_100k", "Centurion", "Run a total of 100 km", "shield-checkmark", 100000, AchievementCategory.distance),
    _badge("streak_3", "Hat Trick", "3-day running streak", "bonfire", 3, AchievementCategory.streak),
    _badge("streak_7", "Weekly Warrior", "7-day running streak", "star", 7, AchievementCategory.streak),
    _badge("streak_30", "Iron Will", "30-day running streak", "trophy", 30, AchievementCategory.streak),
    _badge("territory_1", "Land Claim", "Capture your first territory", "map", 1, AchievementCategory.territory),
    _badge("territory_10", "Territory Baron", "Capture 10 territories", "globe", 10, AchievementCategory.territory),
    _badge("territory_50", "Conqueror", "Capture 50 territories", "earth", 50, AchievementCategory.territory),
)


def current_value(category: AchievementCategory, stats: ProgressStats):
    """Live counter for a category, or None when nothing feeds it (speed)."""
    if category is AchievementCategory.runs:
        return stats.total_runs
    if category is AchievementCategory.distance:
        return stats.total_distance
    if category is AchievementCategory.streak:
        return stats.current_streak
    if category is AchievementCategory.territory:
        return stats.total_territories
    return None


def evaluate(achievement: Achievement, stats: ProgressStats, now: datetime) -> Achievement:
    current = current_value(achievement.category, stats)
    if current is None:
        return achievement

    unlocked_at = achievement.unlocked_at
    # Badges are permanent: once set, unlocked_at never moves or clears.
    if unlocked_at is None and current >= achievement.requirement:
        unlocked_at = now
    return achievement.model_copy(update={"current": current, "unlocked_at": unlocked_at})


def evaluate_all(
    achievements: Iterable[Achievement], stats: ProgressStats, now: datetime
) -> tuple[tuple[Achievement, ...], tuple[Achievement, ...]]:
    """Recompute every badge; returns (all badges, badges unlocked just now)."""
    updated = []
    unlocked = []
    for a in achievements:
        new = evaluate(a, stats, now)
        if not a.unlocked and new.unlocked:
            logger.info("Achievement unlocked: %s", new.id)
            unlocked.append(new)
        updated.append(new)
    return tuple(updated), tuple(unlocked)
