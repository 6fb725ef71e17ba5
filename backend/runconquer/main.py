import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from runconquer.api.runs import router as runs_router
from runconquer.api.users import router as users_router
from runconquer.api.territories import router as territories_router
from runconquer.api.achievements import router as achievements_router
from runconquer.api.auth import router as auth_router
from runconquer.core.time_utils import utcnow
from runconquer.db import Base, engine
from runconquer.models.user import User  # noqa: F401  (import ensures table is registered)
from runconquer.models.run import Run  # noqa: F401
from runconquer.models.territory import Territory  # noqa: F401
from runconquer.models.achievement import Achievement  # noqa: F401
from runconquer.core.config import settings


logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="RunConquer")

# Allow CORS for the mobile/web client
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables on startup
Base.metadata.create_all(bind=engine)

app.include_router(users_router)
app.include_router(runs_router)
app.include_router(territories_router)
app.include_router(achievements_router)
app.include_router(auth_router)


@app.get("/")
def root():
    return {"message": "RunConquer backend is running"}


@app.get("/health")
def health():
    return {"status": "OK", "timestamp": utcnow().isoformat()}
