from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from runconquer.core.errors import PersistenceError
from runconquer.db import get_db
from runconquer.schemas.user import UserCreate, UserRead
from runconquer.services import store


router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    if store.username_taken(db, payload.username):
        raise HTTPException(status_code=409, detail="Username already exists")
    try:
        profile = store.create_user(db, **payload.model_dump())
    except PersistenceError:
        raise HTTPException(status_code=503, detail="Failed to save user")
    return UserRead.from_profile(profile)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    profile = store.get_profile(db, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.from_profile(profile)
