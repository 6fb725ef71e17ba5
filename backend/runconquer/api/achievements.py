from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from runconquer.api.runs import require_profile
from runconquer.db import get_db
from runconquer.schemas.game import Achievement
from runconquer.services import store


router = APIRouter(prefix="/users/{user_id}/achievements", tags=["achievements"])


@router.get("/", response_model=list[Achievement])
def list_achievements(user_id: str, db: Session = Depends(get_db)):
    """Badge catalogue with progress; unlocked ones carry `unlocked_at`."""
    require_profile(db, user_id)
    return store.list_achievements(db, user_id)
