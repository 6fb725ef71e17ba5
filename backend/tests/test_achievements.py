from datetime import datetime, timedelta, timezone

from runconquer.game.achievements import DEFAULT_ACHIEVEMENTS, evaluate, evaluate_all
from runconquer.schemas.game import Achievement, AchievementCategory, ProgressStats

NOW = datetime(2025, 3, 10, 18, 0, tzinfo=timezone.utc)


def stats(runs=0, distance=0.0, streak=0, territories=0):
    return ProgressStats(
        total_runs=runs,
        total_distance=distance,
        current_streak=streak,
        total_territories=territories,
    )


def badge(id):
    return next(a for a in DEFAULT_ACHIEVEMENTS if a.id == id)


def test_catalogue_starts_locked():
    assert len(DEFAULT_ACHIEVEMENTS) == 14
    assert all(a.current == 0 and a.unlocked_at is None for a in DEFAULT_ACHIEVEMENTS)


def test_current_follows_its_category():
    s = stats(runs=3, distance=2500.0, streak=2, territories=4)
    assert evaluate(badge("run_5"), s, NOW).current == 3
    assert evaluate(badge("dist_10k"), s, NOW).current == 2500.0
    assert evaluate(badge("streak_7"), s, NOW).current == 2
    assert evaluate(badge("territory_10"), s, NOW).current == 4


def test_unlocks_at_requirement():
    a = evaluate(badge("streak_3"), stats(streak=2), NOW)
    assert a.unlocked_at is None
    a = evaluate(a, stats(streak=3), NOW)
    assert a.unlocked_at == NOW
    assert a.progress == 1.0


def test_unlock_is_permanent():
    a = evaluate(badge("streak_3"), stats(streak=3), NOW)
    later = NOW + timedelta(days=4)
    a = evaluate(a, stats(streak=1), later)
    assert a.current == 1
    assert a.unlocked_at == NOW

    a = evaluate(a, stats(streak=5), later)
    assert a.unlocked_at == NOW


def test_speed_badges_are_left_alone():
    fast = Achievement(
        id="speed_5",
        title="Quick Feet",
        description="Hit 5 m/s",
        icon="speedometer",
        requirement=5,
        current=0,
        category=AchievementCategory.speed,
    )
    assert evaluate(fast, stats(runs=100, distance=1e6, streak=50, territories=80), NOW) == fast


def test_evaluate_all_reports_only_new_unlocks():
    first, unlocked = evaluate_all(DEFAULT_ACHIEVEMENTS, stats(runs=1, distance=1200.0, streak=1, territories=1), NOW)
    assert {a.id for a in unlocked} == {"first_run", "dist_1k", "territory_1"}
    assert len(first) == len(DEFAULT_ACHIEVEMENTS)

    _, unlocked = evaluate_all(first, stats(runs=2, distance=2400.0, streak=1, territories=2), NOW)
    assert unlocked == ()
