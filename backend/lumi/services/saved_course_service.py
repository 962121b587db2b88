from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models import Course, SavedCourse

logger = logging.getLogger(__name__)


def seed_progress(lesson_keys: Iterable[str]) -> Dict[str, Dict[str, bool]]:
	return {key: {"completed": False} for key in lesson_keys}


def _completion(progress: Dict[str, Dict[str, Any]]) -> tuple[int, int]:
	total = len(progress)
	completed = sum(1 for entry in progress.values() if entry.get("completed"))
	return completed, total


def saved_course_summary(row: SavedCourse) -> Dict[str, Any]:
	completed, total = _completion(row.progress or {})
	return {
		"id": row.course_id,
		"courseId": row.course_id,
		"title": row.title,
		"description": row.description,
		"saved": row.saved,
		"progress": {"overallScore": row.overall_score, "lessons": row.progress or {}},
		"lastAttempt": row.last_attempt.isoformat() if row.last_attempt else None,
		"totalLessons": total,
		"completedLessons": completed,
	}


def create_saved_course(db: Session, username: str, course_id: str, lesson_count: Optional[int] = None) -> str:
	course = db.get(Course, course_id)
	if course is None:
		raise NotFoundError("Course does not exist")
	count = course.lesson_count if lesson_count is None else lesson_count
	now = datetime.utcnow()
	row = db.get(SavedCourse, (username, course_id))
	if row is None:
		row = SavedCourse(username=username, course_id=course_id, created_at=now)
		db.add(row)
	row.title = course.title
	row.description = course.description
	row.saved = True
	row.progress = seed_progress(f"lesson{i}" for i in range(1, count + 1))
	row.overall_score = 0
	row.last_attempt = now
	db.commit()
	logger.info("saved course %s for %s", course_id, username)
	return course_id


def list_saved_courses(db: Session, username: str) -> List[Dict[str, Any]]:
	rows = (
		db.query(SavedCourse)
		.filter(SavedCourse.username == username, SavedCourse.saved.is_(True))
		.order_by(SavedCourse.last_attempt.desc())
		.all()
	)
	return [saved_course_summary(r) for r in rows]


def mark_lesson_completed(db: Session, username: str, course_id: str, lesson_key: str) -> Dict[str, Any]:
	row = db.get(SavedCourse, (username, course_id))
	if row is None:
		raise NotFoundError("Saved course not found")
	progress = {key: dict(entry) for key, entry in (row.progress or {}).items()}
	if lesson_key not in progress:
		raise NotFoundError(f"Lesson {lesson_key} is not part of this course")
	progress[lesson_key]["completed"] = True
	completed, total = _completion(progress)
	# Reassign so the JSON column is flagged dirty
	row.progress = progress
	row.overall_score = round(100 * completed / total) if total else 0
	row.last_attempt = datetime.utcnow()
	db.commit()
	return saved_course_summary(row)
