from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import streak_service, user_service
from .auth import User, get_current_user


router = APIRouter(prefix="/users", tags=["users"])


class ProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")


@router.post("/me")
async def ensure_profile(req: ProfileRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = user_service.ensure_user_profile(db, user.username, req.name, req.email, req.profile_picture)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.post("/me/streak")
async def check_in(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    result = streak_service.update_user_streak(db, user.username)
    if result is None:
        raise HTTPException(status_code=404, detail="User not found")
    return result


@router.get("/{username}")
async def get_profile(username: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = user_service.get_user_profile(db, username)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile
