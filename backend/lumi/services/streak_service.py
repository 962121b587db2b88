from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models import AuthUser

logger = logging.getLogger(__name__)

_DAY = timedelta(days=1)


def _day_diff(now: datetime, last: datetime) -> int:
	# Whole 24h periods elapsed, not calendar days
	return (now - last) // _DAY


def update_user_streak(db: Session, username: str, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
	user = db.get(AuthUser, username)
	if user is None:
		logger.warning("user %s not found, cannot update streak", username)
		return None
	now = now or datetime.utcnow()
	current = user.streak_count or 0
	new_streak = 1
	if user.last_check_in is not None:
		diff = _day_diff(now, user.last_check_in)
		if diff == 0:
			new_streak = current
		elif diff == 1:
			new_streak = current + 1
	user.streak_count = new_streak
	user.last_check_in = now
	db.commit()
	logger.info("user %s streak updated: from %d to %d", username, current, new_streak)
	return {
		"previousStreak": current,
		"newStreak": new_streak,
		"streakExtended": new_streak > current,
	}


def check_streak_on_login(db: Session, username: str, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
	"""Reset the streak to zero when at least a day passed since the last check-in."""
	user = db.get(AuthUser, username)
	if user is None:
		return None
	current = user.streak_count or 0
	if user.last_check_in is None:
		return {"streakCount": current, "streakLost": False}
	now = now or datetime.utcnow()
	if _day_diff(now, user.last_check_in) >= 1 and current > 0:
		user.streak_count = 0
		db.commit()
		logger.info("user %s streak reset from %d to 0", username, current)
		return {"streakCount": 0, "streakLost": True}
	return {"streakCount": current, "streakLost": False}
