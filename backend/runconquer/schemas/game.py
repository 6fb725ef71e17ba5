"""Domain value types shared by the run pipeline, the store and the API.

All of them are frozen: pipeline stages return updated copies
(`model_copy(update=...)`) instead of mutating their inputs.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class LocationFix(BaseModel):
    """One GPS sample as delivered by a location source."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    speed: Optional[float] = None  # m/s; None when the sensor doesn't report it
    timestamp: datetime

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class FinishedRun(BaseModel):
    """A stopped run that cleared the minimum-effort threshold."""

    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    duration: int  # seconds spent running (pauses excluded)
    distance: float  # meters
    avg_pace: float  # m/s
    max_speed: float  # m/s
    path: tuple[Coordinate, ...] = ()


class RunRecord(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    start_time: datetime
    end_time: datetime
    duration: int
    distance: float
    avg_pace: float
    max_speed: float
    path: tuple[Coordinate, ...] = ()
    xp_earned: int
    territory_gained: int
    created_at: datetime


class Territory(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    center: Coordinate
    radius: float  # meters
    color: str
    distance: float  # meters of the run that claimed it
    captured_at: datetime


class AchievementCategory(str, Enum):
    distance = "distance"
    streak = "streak"
    territory = "territory"
    runs = "runs"
    speed = "speed"


class Achievement(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    description: str
    icon: str
    requirement: float
    current: float = 0
    category: AchievementCategory
    unlocked_at: Optional[datetime] = None

    @property
    def unlocked(self) -> bool:
        return self.unlocked_at is not None

    @property
    def progress(self) -> float:
        """Fraction towards the requirement, capped at 1."""
        if self.requirement <= 0:
            return 1.0
        return min(self.current / self.requirement, 1.0)


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    username: str
    email: str
    avatar: str = ""
    bio: str = ""
    goal: str = ""
    country: str = ""
    territory_color: str

    # Cumulative progression state
    xp: int = 0
    level: int = 1
    total_distance: float = 0.0
    total_runs: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_run_date: Optional[date] = None

    created_at: datetime


class ProgressStats(BaseModel):
    """Cumulative counters the achievement catalogue is measured against."""

    model_config = ConfigDict(frozen=True)

    total_runs: int
    total_distance: float
    current_streak: int
    total_territories: int


class GameState(BaseModel):
    """Everything one user owns, as an explicit snapshot."""

    model_config = ConfigDict(frozen=True)

    profile: UserProfile
    runs: tuple[RunRecord, ...] = ()  # newest first
    territories: tuple[Territory, ...] = ()
    achievements: tuple[Achievement, ...] = ()


class RunOutcome(BaseModel):
    """Result of folding one finished run into a game state."""

    model_config = ConfigDict(frozen=True)

    state: GameState
    run: RunRecord
    territory: Optional[Territory] = None
    unlocked: tuple[Achievement, ...] = ()
