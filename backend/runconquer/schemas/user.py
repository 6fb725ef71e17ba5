from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from runconquer.game.progression import level_progress, xp_for_level, xp_for_next_level
from runconquer.schemas.game import UserProfile

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=40)
    email: str = Field(pattern=EMAIL_PATTERN)
    territory_color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)
    avatar: str = ""
    bio: str = ""
    goal: str = ""
    country: str = ""


class UserRead(BaseModel):
    id: str
    username: str
    email: str
    avatar: str
    bio: str
    goal: str
    country: str
    territory_color: str

    xp: int
    level: int
    total_distance: float
    total_runs: int
    current_streak: int
    longest_streak: int
    last_run_date: Optional[date] = None
    created_at: datetime

    # Level bar
    level_xp: int  # xp at which the current level started
    next_level_xp: int
    level_progress: float

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserRead":
        return cls(
            **profile.model_dump(),
            level_xp=xp_for_level(profile.level),
            next_level_xp=xp_for_next_level(profile.level),
            level_progress=level_progress(profile.xp),
        )
