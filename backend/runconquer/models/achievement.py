from sqlalchemy import Column, String, DateTime, Float, ForeignKey
from runconquer.db import Base


class Achievement(Base):
    __tablename__ = "achievements"

    # One row per (user, badge); badge ids come from the default catalogue
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    id = Column("achievement_id", String(32), primary_key=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    category = Column(String(20), nullable=False)  # distance, streak, territory, runs, speed
    requirement = Column(Float, nullable=False)
    current = Column(Float, nullable=False, default=0.0)

    # Set once, never cleared
    unlocked_at = Column(DateTime(timezone=True), nullable=True)
