import math
import random
from datetime import datetime, timedelta, timezone

from runconquer.db import Base, SessionLocal, engine
from runconquer.game.session import replay_run
from runconquer.models.achievement import Achievement
from runconquer.models.run import Run
from runconquer.models.territory import Territory
from runconquer.models.user import User
from runconquer.schemas.game import LocationFix
from runconquer.services import store

DEMO_USERNAME = "demo_runner"

# Rough meters per degree of latitude
M_PER_DEG = 111_320.0


def loop_fixes(
    center_lat: float,
    center_lon: float,
    radius_m: float,
    start: datetime,
    duration_s: int,
    speed_mps: float = 3.0,
    interval_s: int = 2,
) -> list[LocationFix]:
    """Fixes for running laps of a circle at constant speed, one every `interval_s`."""
    circumference = 2 * math.pi * radius_m
    fixes = []
    for t in range(0, duration_s + 1, interval_s):
        angle = 2 * math.pi * (speed_mps * t % circumference) / circumference
        d_lat = radius_m * math.sin(angle) / M_PER_DEG
        d_lon = radius_m * math.cos(angle) / (M_PER_DEG * math.cos(math.radians(center_lat)))
        fixes.append(
            LocationFix(
                latitude=center_lat + d_lat,
                longitude=center_lon + d_lon,
                speed=speed_mps,
                timestamp=start + timedelta(seconds=t),
            )
        )
    return fixes


def clear_demo_user(db) -> None:
    """Delete the demo user and everything it owns so we can reseed cleanly."""
    user = db.query(User).filter(User.username == DEMO_USERNAME).first()
    if user is None:
        return
    for model in (Run, Territory, Achievement):
        db.query(model).filter(model.user_id == user.id).delete()
    db.delete(user)
    db.commit()


def seed_demo_runs(db, days: int = 21) -> None:
    """Create a demo user and run most days over the last `days` days."""
    profile = store.create_user(db, username=DEMO_USERNAME, email="demo@example.com")
    today = datetime.now(timezone.utc).replace(hour=7, minute=0, second=0, microsecond=0)

    recorded = 0
    for offset in range(days, 0, -1):
        # Rest roughly one day in four
        if random.random() < 0.25:
            continue
        start = today - timedelta(days=offset)
        duration = random.randint(20, 60) * 60
        fixes = loop_fixes(
            center_lat=40.7812 + random.uniform(-0.02, 0.02),
            center_lon=-73.9665 + random.uniform(-0.02, 0.02),
            radius_m=random.uniform(200, 600),
            start=start,
            duration_s=duration,
            speed_mps=random.uniform(2.5, 3.8),
        )
        finished = replay_run([fixes])
        if finished is None:
            continue
        store.record_run(db, profile.id, finished, now=finished.end_time)
        recorded += 1

    print(f"Seeded {recorded} demo runs for {DEMO_USERNAME}")


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        clear_demo_user(db)
        seed_demo_runs(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
