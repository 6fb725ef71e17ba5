"""Load and save a user's whole game state through SQLAlchemy.

Writes for one finished run (run row, territory, profile, achievements)
go in a single transaction: either all of them land or none do.
"""

import logging
from datetime import datetime
from functools import partial
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from runconquer.core.config import settings
from runconquer.core.errors import PersistenceError
from runconquer.core.time_utils import as_utc, local_date, utcnow
from runconquer.game.achievements import DEFAULT_ACHIEVEMENTS
from runconquer.game.engine import finish_run, new_id
from runconquer.models.achievement import Achievement as AchievementRow
from runconquer.models.run import Run
from runconquer.models.territory import Territory as TerritoryRow
from runconquer.models.user import User
from runconquer.schemas.game import (
    Achievement,
    AchievementCategory,
    Coordinate,
    FinishedRun,
    GameState,
    RunOutcome,
    RunRecord,
    Territory,
    UserProfile,
)

logger = logging.getLogger(__name__)


# --------- Row <-> domain --------- #

def _profile_from_row(row: User) -> UserProfile:
    profile = UserProfile.model_validate(row)
    return profile.model_copy(update={"created_at": as_utc(row.created_at)})


def _run_from_row(row: Run) -> RunRecord:
    return RunRecord(
        id=row.id,
        start_time=as_utc(row.start_time),
        end_time=as_utc(row.end_time),
        duration=row.duration,
        distance=row.distance,
        avg_pace=row.avg_pace,
        max_speed=row.max_speed,
        path=tuple(Coordinate(**p) for p in (row.path or [])),
        xp_earned=row.xp_earned,
        territory_gained=row.territory_gained,
        created_at=as_utc(row.created_at),
    )


def _territory_from_row(row: TerritoryRow) -> Territory:
    return Territory(
        id=row.id,
        user_id=row.user_id,
        center=Coordinate(latitude=row.center_lat, longitude=row.center_lon),
        radius=row.radius,
        color=row.color,
        distance=row.distance,
        captured_at=as_utc(row.captured_at),
    )


def _achievement_from_row(row: AchievementRow) -> Achievement:
    return Achievement(
        id=row.id,
        title=row.title,
        description=row.description,
        icon=row.icon,
        requirement=row.requirement,
        current=row.current,
        category=AchievementCategory(row.category),
        unlocked_at=as_utc(row.unlocked_at) if row.unlocked_at else None,
    )


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to save %s", what)
        raise PersistenceError(f"Failed to save {what}") from e


# --------- Reads --------- #

def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    row = db.get(User, user_id)
    return _profile_from_row(row) if row else None


def username_taken(db: Session, username: str) -> bool:
    return db.query(User).filter(User.username == username).first() is not None


def list_runs(db: Session, user_id: str) -> list[RunRecord]:
    rows = (
        db.query(Run)
        .filter(Run.user_id == user_id)
        .order_by(Run.created_at.desc())  # most recent first
        .all()
    )
    return [_run_from_row(r) for r in rows]


def get_run(db: Session, user_id: str, run_id: str) -> Optional[RunRecord]:
    row = db.query(Run).filter(Run.user_id == user_id, Run.id == run_id).first()
    return _run_from_row(row) if row else None


def list_territories(db: Session, user_id: str) -> list[Territory]:
    rows = (
        db.query(TerritoryRow)
        .filter(TerritoryRow.user_id == user_id)
        .order_by(TerritoryRow.captured_at)
        .all()
    )
    return [_territory_from_row(r) for r in rows]


def list_achievements(db: Session, user_id: str) -> list[Achievement]:
    rows = db.query(AchievementRow).filter(AchievementRow.user_id == user_id).all()
    if not rows:
        seed_achievements(db, user_id)
        rows = db.query(AchievementRow).filter(AchievementRow.user_id == user_id).all()
    order = {a.id: i for i, a in enumerate(DEFAULT_ACHIEVEMENTS)}
    rows.sort(key=lambda r: order.get(r.id, len(order)))
    return [_achievement_from_row(r) for r in rows]


def load_state(db: Session, user_id: str) -> Optional[GameState]:
    profile = get_profile(db, user_id)
    if profile is None:
        return None
    return GameState(
        profile=profile,
        runs=tuple(list_runs(db, user_id)),
        territories=tuple(list_territories(db, user_id)),
        achievements=tuple(list_achievements(db, user_id)),
    )


# --------- Writes --------- #

def seed_achievements(db: Session, user_id: str) -> None:
    for a in DEFAULT_ACHIEVEMENTS:
        db.add(
            AchievementRow(
                user_id=user_id,
                id=a.id,
                title=a.title,
                description=a.description,
                icon=a.icon,
                category=a.category.value,
                requirement=a.requirement,
                current=0.0,
            )
        )
    _commit(db, "achievements")


def create_user(
    db: Session,
    *,
    username: str,
    email: str,
    territory_color: Optional[str] = None,
    avatar: str = "",
    bio: str = "",
    goal: str = "",
    country: str = "",
    now: Optional[datetime] = None,
) -> UserProfile:
    row = User(
        id=new_id(),
        username=username,
        email=email,
        avatar=avatar,
        bio=bio,
        goal=goal,
        country=country,
        territory_color=territory_color or settings.default_territory_color,
        xp=0,
        level=1,
        total_distance=0.0,
        total_runs=0,
        current_streak=0,
        longest_streak=0,
        created_at=now or utcnow(),
    )
    db.add(row)
    _commit(db, "user")
    db.refresh(row)
    seed_achievements(db, row.id)
    logger.info("Created user %s (%s)", row.username, row.id)
    return _profile_from_row(row)


def save_outcome(db: Session, outcome: RunOutcome) -> None:
    """Persist one run's results atomically; raises PersistenceError."""
    state, run, territory = outcome.state, outcome.run, outcome.territory
    profile = state.profile

    try:
        user = db.get(User, profile.id)
        if user is None:
            raise PersistenceError(f"User {profile.id} no longer exists")

        db.add(
            Run(
                id=run.id,
                user_id=profile.id,
                start_time=run.start_time,
                end_time=run.end_time,
                duration=run.duration,
                distance=run.distance,
                avg_pace=run.avg_pace,
                max_speed=run.max_speed,
                path=[c.model_dump() for c in run.path],
                xp_earned=run.xp_earned,
                territory_gained=run.territory_gained,
                created_at=run.created_at,
            )
        )

        if territory is not None:
            db.add(
                TerritoryRow(
                    id=territory.id,
                    user_id=territory.user_id,
                    center_lat=territory.center.latitude,
                    center_lon=territory.center.longitude,
                    radius=territory.radius,
                    color=territory.color,
                    distance=territory.distance,
                    captured_at=territory.captured_at,
                )
            )

        for key in (
            "xp",
            "level",
            "total_distance",
            "total_runs",
            "current_streak",
            "longest_streak",
            "last_run_date",
        ):
            setattr(user, key, getattr(profile, key))

        rows = {
            r.id: r
            for r in db.query(AchievementRow).filter(AchievementRow.user_id == profile.id).all()
        }
        for a in state.achievements:
            row = rows.get(a.id)
            if row is None:
                continue
            row.current = float(a.current)
            row.unlocked_at = a.unlocked_at
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to stage run %s", run.id)
        raise PersistenceError(f"Failed to save run {run.id}") from e
    except PersistenceError:
        db.rollback()
        raise

    _commit(db, f"run {run.id}")


def persist_to(db: Session) -> Callable[[RunOutcome], None]:
    return partial(save_outcome, db)


def record_run(
    db: Session,
    user_id: str,
    finished: FinishedRun,
    *,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> RunOutcome:
    """Load -> fold the run in -> save. The outcome is returned only after commit."""
    state = load_state(db, user_id)
    if state is None:
        raise LookupError(f"Unknown user {user_id}")

    now = now or utcnow()
    today = local_date(finished.end_time, tz_name or settings.timezone)
    outcome = finish_run(state, finished, now=now, today=today)
    save_outcome(db, outcome)
    logger.info(
        "Recorded run %s for user %s: %.0f m, %d s, +%d XP",
        outcome.run.id, user_id, outcome.run.distance, outcome.run.duration, outcome.run.xp_earned,
    )
    return outcome
