import os

# Use in-memory sqlite for tests; must be set before runconquer.db is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest  # noqa: E402


@pytest.fixture
def db():
    from runconquer.db import Base, SessionLocal, engine
    from runconquer.services import store  # noqa: F401  (registers all tables)

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
