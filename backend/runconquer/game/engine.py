"""Fold a finished run into a user's game state.

    FinishedRun -> RunRecord -> Territory? -> UserProfile -> Achievements

Nothing here performs I/O; the caller persists the returned outcome and
only then adopts `outcome.state`.
"""

import uuid
from datetime import date, datetime
from typing import Callable, Optional

from runconquer.game.achievements import evaluate_all
from runconquer.game.progression import apply_run, xp_from_run
from runconquer.game.territory import claim_territory, territory_gained
from runconquer.schemas.game import (
    FinishedRun,
    GameState,
    ProgressStats,
    RunOutcome,
    RunRecord,
)


def new_id() -> str:
    return uuid.uuid4().hex


def build_run_record(finished: FinishedRun, *, run_id: str, now: datetime) -> RunRecord:
    return RunRecord(
        id=run_id,
        start_time=finished.start_time,
        end_time=finished.end_time,
        duration=finished.duration,
        distance=finished.distance,
        avg_pace=finished.avg_pace,
        max_speed=finished.max_speed,
        path=finished.path,
        xp_earned=xp_from_run(finished.distance, finished.duration),
        territory_gained=territory_gained(finished.distance),
        created_at=now,
    )


def finish_run(
    state: GameState,
    finished: FinishedRun,
    *,
    now: datetime,
    today: date,
    make_id: Optional[Callable[[], str]] = None,
) -> RunOutcome:
    """Derive the next game state from one qualifying run.

    `today` is the calendar date of completion in the user's timezone;
    streaks compare against it.
    """
    make_id = make_id or new_id
    profile = state.profile

    run = build_run_record(finished, run_id=make_id(), now=now)
    territory = claim_territory(
        run,
        territory_id=make_id(),
        user_id=profile.id,
        color=profile.territory_color,
        now=now,
    )
    territories = state.territories + ((territory,) if territory else ())

    profile = apply_run(profile, finished, run.xp_earned, today)
    stats = ProgressStats(
        total_runs=profile.total_runs,
        total_distance=profile.total_distance,
        current_streak=profile.current_streak,
        total_territories=len(territories),
    )
    achievements, unlocked = evaluate_all(state.achievements, stats, now)

    new_state = GameState(
        profile=profile,
        runs=(run,) + state.runs,
        territories=territories,
        achievements=achievements,
    )
    return RunOutcome(state=new_state, run=run, territory=territory, unlocked=unlocked)
