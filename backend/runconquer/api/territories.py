from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from runconquer.api.runs import require_profile
from runconquer.db import get_db
from runconquer.schemas.game import Territory
from runconquer.services import store


router = APIRouter(prefix="/users/{user_id}/territories", tags=["territories"])


@router.get("/", response_model=list[Territory])
def list_territories(user_id: str, db: Session = Depends(get_db)):
    require_profile(db, user_id)
    return store.list_territories(db, user_id)
