from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from runconquer.core.time_utils import format_distance, format_duration, format_pace
from runconquer.schemas.game import Achievement, Coordinate, LocationFix, RunRecord, Territory
from runconquer.schemas.user import UserRead


class RunSubmit(BaseModel):
    """A completed run as recorded on the device.

    `segments` holds the raw fixes of each un-paused stretch, in order;
    `duration` is the ticked running time in seconds.
    """

    start_time: datetime
    end_time: datetime
    duration: int = Field(ge=0)
    segments: list[list[LocationFix]] = []


class RunRead(BaseModel):
    """Schema returned to the frontend when reading a run."""

    id: str
    start_time: datetime
    end_time: datetime
    duration: int
    distance: float
    avg_pace: float
    max_speed: float
    path: list[Coordinate]
    xp_earned: int
    territory_gained: int
    created_at: datetime

    # Display strings, computed on the fly
    pace: str  # min:sec per km, e.g. "5:30"
    duration_display: str
    distance_display: str

    @classmethod
    def from_record(cls, run: RunRecord) -> "RunRead":
        return cls(
            **run.model_dump(exclude={"path"}),
            path=list(run.path),
            pace=format_pace(run.avg_pace),
            duration_display=format_duration(run.duration),
            distance_display=format_distance(run.distance),
        )


class RunResult(BaseModel):
    """Response to a submitted run. `recorded` is False for sub-threshold runs."""

    recorded: bool
    run: Optional[RunRead] = None
    territory: Optional[Territory] = None
    unlocked: list[Achievement] = []
    profile: Optional[UserRead] = None


class RunStats(BaseModel):
    today_distance: float
    weekly_distance: float
    weekly_runs: int
    daily_distance: list[float]  # last 7 days, index 6 = today
    total_runs: int
    total_distance: float
    total_duration: int
    avg_pace: float  # m/s
    pace: str
