from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import friend_service
from .auth import User, get_current_user


router = APIRouter(tags=["friends"])


class FriendRequestBody(BaseModel):
    recipient_id: str = Field(alias="recipientId")


class RespondBody(BaseModel):
    accept: bool


@router.get("/friend-requests/search")
async def search_users(query: str = Query(min_length=1), user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.search_users(db, query)


@router.post("/friend-requests", status_code=201)
async def send_request(req: FriendRequestBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.create_friend_request(db, user.username, req.recipient_id)


@router.get("/friend-requests")
async def list_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.get_friend_requests(db, user.username)


@router.patch("/friend-requests/{request_id}")
async def respond(request_id: str, req: RespondBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.respond_friend_request(db, request_id, req.accept, user.username)


@router.get("/friends")
async def list_friends(order_by_xp: bool = Query(default=False, alias="orderByXp"), user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return friend_service.get_friends(db, user.username, order_by_xp)
