from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..errors import ConflictError, InvalidInputError, NotFoundError, PermissionDeniedError
from ..models import AuthUser, FriendRequest
from .user_service import public_profile

logger = logging.getLogger(__name__)


def _request_dict(row: FriendRequest) -> Dict[str, Any]:
	return {
		"id": row.id,
		"userIds": [row.sender_id, row.recipient_id],
		"senderId": row.sender_id,
		"status": row.status,
		"createdAt": row.created_at.isoformat() if row.created_at else None,
		"acceptedAt": row.accepted_at.isoformat() if row.accepted_at else None,
	}


def _with_party(db: Session, row: FriendRequest, other_id: str) -> Dict[str, Any]:
	other = db.get(AuthUser, other_id)
	return {
		**_request_dict(row),
		"name": other.name if other else None,
		"email": other.email if other else None,
		"avatarUrl": other.profile_picture if other else None,
	}


def search_users(db: Session, query: str) -> List[Dict[str, Any]]:
	needle = (query or "").strip().lower()
	if not needle:
		return []
	pattern = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
	rows = (
		db.query(AuthUser)
		.filter(or_(AuthUser.name_lower.like(pattern, escape="\\"), AuthUser.email_lower.like(pattern, escape="\\")))
		.order_by(AuthUser.name_lower.asc())
		.all()
	)
	# A user matching on both name and email is listed once
	seen: Dict[str, Dict[str, Any]] = {}
	for user in rows:
		seen.setdefault(user.username, public_profile(user))
	return list(seen.values())


def create_friend_request(db: Session, sender: str, recipient: str) -> Dict[str, Any]:
	if sender == recipient:
		raise InvalidInputError("Cannot send a friend request to yourself")
	if db.get(AuthUser, recipient) is None:
		raise NotFoundError("User not found")
	existing = (
		db.query(FriendRequest)
		.filter(or_(
			and_(FriendRequest.sender_id == sender, FriendRequest.recipient_id == recipient),
			and_(FriendRequest.sender_id == recipient, FriendRequest.recipient_id == sender),
		))
		.first()
	)
	if existing is not None:
		raise ConflictError("A friend request between these users already exists")
	row = FriendRequest(id=uuid.uuid4().hex, sender_id=sender, recipient_id=recipient, status="pending", created_at=datetime.utcnow())
	db.add(row)
	db.commit()
	logger.info("friend request %s created from %s to %s", row.id, sender, recipient)
	return _request_dict(row)


def get_friend_requests(db: Session, username: str) -> Dict[str, List[Dict[str, Any]]]:
	sent_rows = db.query(FriendRequest).filter(FriendRequest.sender_id == username).order_by(FriendRequest.created_at.desc()).all()
	received_rows = (
		db.query(FriendRequest)
		.filter(FriendRequest.recipient_id == username, FriendRequest.status == "pending")
		.order_by(FriendRequest.created_at.desc())
		.all()
	)
	return {
		"sent": [_with_party(db, r, r.recipient_id) for r in sent_rows],
		"received": [_with_party(db, r, r.sender_id) for r in received_rows],
	}


def respond_friend_request(db: Session, request_id: str, accept: bool, username: str) -> Dict[str, Any]:
	row = db.get(FriendRequest, request_id)
	if row is None:
		raise NotFoundError("Friend request not found")
	if username not in (row.sender_id, row.recipient_id):
		raise PermissionDeniedError("You are not a participant in this friend request")
	if not accept:
		db.delete(row)
		db.commit()
		return {"message": "Friend request declined/cancelled and removed"}
	if row.status == "accepted":
		raise ConflictError("Friend request already accepted")
	row.status = "accepted"
	row.accepted_at = datetime.utcnow()
	for user_id in (row.sender_id, row.recipient_id):
		user = db.get(AuthUser, user_id)
		if user is not None:
			user.friend_count = (user.friend_count or 0) + 1
	db.commit()
	return {"message": "Friend request accepted", "friendRequest": _request_dict(row)}


def get_friends(db: Session, username: str, order_by_xp: bool = False) -> List[Dict[str, Any]]:
	rows = (
		db.query(FriendRequest)
		.filter(
			FriendRequest.status == "accepted",
			or_(FriendRequest.sender_id == username, FriendRequest.recipient_id == username),
		)
		.all()
	)
	friends = []
	for row in rows:
		friend_id = row.recipient_id if row.sender_id == username else row.sender_id
		user = db.get(AuthUser, friend_id)
		if user is not None:
			friends.append(public_profile(user))
	if order_by_xp:
		friends.sort(key=lambda f: f.get("xpCount") or 0, reverse=True)
	return friends
