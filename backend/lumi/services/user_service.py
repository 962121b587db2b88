from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models import AuthUser

logger = logging.getLogger(__name__)


def public_profile(user: AuthUser) -> Dict[str, Any]:
	return {
		"id": user.username,
		"name": user.name,
		"email": user.email,
		"profilePicture": user.profile_picture,
		"xpCount": user.xp_count,
		"streakCount": user.streak_count,
		"friendCount": user.friend_count,
		"createdAt": user.created_at.isoformat() if user.created_at else None,
	}


def apply_profile(user: AuthUser, name: Optional[str], email: Optional[str], profile_picture: Optional[str]) -> None:
	user.name = name or ""
	user.email = email or ""
	user.name_lower = user.name.lower()
	user.email_lower = user.email.lower()
	user.profile_picture = profile_picture or "default"


def ensure_user_profile(
	db: Session,
	username: str,
	name: Optional[str] = None,
	email: Optional[str] = None,
	profile_picture: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
	user = db.get(AuthUser, username)
	if user is None:
		return None
	# Only a blank profile gets filled; existing ones are left as they are
	if not (user.name or user.email):
		apply_profile(user, name, email, profile_picture)
		db.commit()
		logger.info("filled profile for %s", username)
	return public_profile(user)


def get_user_profile(db: Session, username: str) -> Optional[Dict[str, Any]]:
	user = db.get(AuthUser, username)
	if user is None:
		return None
	return public_profile(user)
