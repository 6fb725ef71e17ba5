from sqlalchemy import Column, String, DateTime, Float, ForeignKey
from runconquer.db import Base


class Territory(Base):
    __tablename__ = "territories"

    id = Column(String(32), primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    center_lat = Column(Float, nullable=False)
    center_lon = Column(Float, nullable=False)
    radius = Column(Float, nullable=False)  # meters
    color = Column(String(16), nullable=False)
    distance = Column(Float, nullable=False)  # meters of the claiming run

    captured_at = Column(DateTime(timezone=True), nullable=False)
