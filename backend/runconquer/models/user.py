from sqlalchemy import Column, Integer, String, Date, DateTime, Float
from sqlalchemy.sql import func
from runconquer.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, index=True)

    username = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False)
    avatar = Column(String, nullable=False, default="")
    bio = Column(String, nullable=False, default="")
    goal = Column(String, nullable=False, default="")
    country = Column(String, nullable=False, default="")
    territory_color = Column(String(16), nullable=False)

    # Progression. level is always derived from xp by the game engine.
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    total_distance = Column(Float, nullable=False, default=0.0)  # meters
    total_runs = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_run_date = Column(Date, nullable=True)  # calendar date, user's tz

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
