import itertools
from datetime import date, datetime, timedelta, timezone

from runconquer.game.achievements import DEFAULT_ACHIEVEMENTS
from runconquer.game.engine import finish_run
from runconquer.schemas.game import Coordinate, FinishedRun, GameState, UserProfile

NOW = datetime(2025, 3, 10, 18, 0, tzinfo=timezone.utc)
TODAY = date(2025, 3, 10)


def fresh_state():
    profile = UserProfile(
        id="u1",
        username="runner",
        email="runner@example.com",
        territory_color="#34C759",
        created_at=NOW - timedelta(days=30),
    )
    return GameState(profile=profile, achievements=DEFAULT_ACHIEVEMENTS)


def finished(distance=1200.0, duration=600, path_len=9):
    path = tuple(Coordinate(latitude=40 + i / 1000, longitude=-74.0) for i in range(path_len))
    return FinishedRun(
        start_time=NOW - timedelta(seconds=duration),
        end_time=NOW,
        duration=duration,
        distance=distance,
        avg_pace=distance / duration,
        max_speed=3.1,
        path=path,
    )


def ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


def test_first_run_end_to_end():
    state = fresh_state()
    outcome = finish_run(state, finished(), now=NOW, today=TODAY, make_id=ids())

    run = outcome.run
    assert run.id == "id1"
    assert run.xp_earned == 12010
    assert run.territory_gained == 12
    assert run.created_at == NOW

    t = outcome.territory
    assert t.id == "id2"
    assert t.radius == 120
    assert t.center == Coordinate(latitude=40 + 4 / 1000, longitude=-74.0)
    assert t.color == "#34C759"

    p = outcome.state.profile
    assert p.xp == 12010
    assert p.level == 11
    assert p.total_runs == 1
    assert p.total_distance == 1200.0
    assert p.current_streak == 1
    assert p.last_run_date == TODAY

    assert {a.id for a in outcome.unlocked} == {"first_run", "dist_1k", "territory_1"}
    assert outcome.state.territories == (t,)

    # Input snapshot is untouched
    assert state.profile.xp == 0
    assert state.runs == ()


def test_history_is_newest_first_and_streak_counts_days():
    state = fresh_state()
    make_id = ids()
    for day in range(3):
        now = NOW + timedelta(days=day)
        state = finish_run(
            state, finished(), now=now, today=TODAY + timedelta(days=day), make_id=make_id
        ).state

    assert [r.created_at for r in state.runs] == sorted((r.created_at for r in state.runs), reverse=True)
    assert state.profile.current_streak == 3
    assert state.profile.total_runs == 3
    assert len(state.territories) == 3
    hat_trick = next(a for a in state.achievements if a.id == "streak_3")
    assert hat_trick.unlocked_at == NOW + timedelta(days=2)


def test_same_day_second_run_keeps_streak():
    state = fresh_state()
    state = finish_run(state, finished(), now=NOW, today=TODAY).state
    outcome = finish_run(state, finished(distance=500.0), now=NOW + timedelta(hours=1), today=TODAY)
    assert outcome.state.profile.current_streak == 1
    assert outcome.state.profile.total_runs == 2
    assert outcome.unlocked == ()
