import io
import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from runconquer.core.config import settings
from runconquer.core.errors import PersistenceError
from runconquer.core.time_utils import format_pace, local_date, utcnow
from runconquer.db import get_db
from runconquer.game import stats
from runconquer.game.session import replay_run
from runconquer.schemas.game import FinishedRun, UserProfile
from runconquer.schemas.run import RunRead, RunResult, RunStats, RunSubmit
from runconquer.schemas.user import UserRead
from runconquer.services import store
from runconquer.services.track_import import fixes_from_fit, fixes_from_gpx

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/runs", tags=["runs"])


def require_profile(db: Session, user_id: str) -> UserProfile:
    profile = store.get_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


def _record(db: Session, user_id: str, finished: FinishedRun | None) -> RunResult:
    # Sub-threshold runs are dropped without touching any state
    if finished is None:
        return RunResult(recorded=False)

    try:
        outcome = store.record_run(db, user_id, finished)
    except PersistenceError:
        raise HTTPException(status_code=503, detail="Failed to save run")

    return RunResult(
        recorded=True,
        run=RunRead.from_record(outcome.run),
        territory=outcome.territory,
        unlocked=list(outcome.unlocked),
        profile=UserRead.from_profile(outcome.state.profile),
    )


@router.post("/", response_model=RunResult)
def submit_run(user_id: str, payload: RunSubmit, db: Session = Depends(get_db)):
    require_profile(db, user_id)
    if payload.end_time < payload.start_time:
        raise HTTPException(status_code=422, detail="end_time must not be before start_time")

    finished = replay_run(
        payload.segments,
        duration=payload.duration,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return _record(db, user_id, finished)


@router.post("/import", response_model=RunResult)
def import_run(user_id: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    """Replay a recorded .gpx or .fit track through the run pipeline."""
    require_profile(db, user_id)

    filename = file.filename or "import"
    ext = os.path.splitext(filename)[1].lower()
    if ext not in [".gpx", ".fit"]:
        raise HTTPException(status_code=400, detail="Only .gpx or .fit files are supported")

    data = file.file.read()
    try:
        if ext == ".gpx":
            segments = fixes_from_gpx(data.decode("utf-8"))
        else:
            segments = fixes_from_fit(io.BytesIO(data))
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Invalid file: {e}")

    if not segments:
        raise HTTPException(status_code=400, detail="No timestamped track points in file")

    logger.info("Importing %s for user %s", filename, user_id)
    return _record(db, user_id, replay_run(segments))


@router.get("/", response_model=list[RunRead])
def list_runs(user_id: str, db: Session = Depends(get_db)):
    """Run history, most recent first."""
    require_profile(db, user_id)
    return [RunRead.from_record(r) for r in store.list_runs(db, user_id)]


@router.get("/stats", response_model=RunStats)
def get_run_stats(user_id: str, db: Session = Depends(get_db)):
    profile = require_profile(db, user_id)
    runs = store.list_runs(db, user_id)

    now = utcnow()
    today = local_date(now, settings.timezone)
    avg = stats.average_pace(profile.total_distance, runs)
    return RunStats(
        today_distance=stats.today_distance(runs, today, settings.timezone),
        weekly_distance=stats.weekly_distance(runs, now),
        weekly_runs=len(stats.weekly_runs(runs, now)),
        daily_distance=stats.daily_distance_bins(runs, now),
        total_runs=profile.total_runs,
        total_distance=profile.total_distance,
        total_duration=stats.total_duration(runs),
        avg_pace=avg,
        pace=format_pace(avg),
    )


@router.get("/{run_id}", response_model=RunRead)
def get_run(user_id: str, run_id: str, db: Session = Depends(get_db)):
    require_profile(db, user_id)
    run = store.get_run(db, user_id, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return RunRead.from_record(run)
