from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, JSON
from runconquer.db import Base

class Run(Base):
    __tablename__ = "runs"

    id = Column(String(32), primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    # Duration stored as **total seconds** spent running (pauses excluded)
    duration = Column(Integer, nullable=False)
    distance = Column(Float, nullable=False)  # meters
    avg_pace = Column(Float, nullable=False)  # m/s
    max_speed = Column(Float, nullable=False)  # m/s

    # [{latitude, longitude}, ...] in the order the fixes were accepted
    path = Column(JSON, nullable=False, default=list)

    # Frozen at finalization; never recomputed
    xp_earned = Column(Integer, nullable=False)
    territory_gained = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
