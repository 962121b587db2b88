from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..errors import InvalidInputError, NotFoundError
from ..models import Course, CourseLesson, SavedCourse
from ..schemas import CourseContent
from ..sequencer import SequencerConfig, generate_lessons
from ..settings import settings
from .saved_course_service import seed_progress

logger = logging.getLogger(__name__)


def course_summary(course: Course) -> Dict[str, Any]:
	return {
		"id": course.id,
		"title": course.title,
		"description": course.description,
		"createdBy": course.created_by,
		"createdAt": course.created_at.isoformat() if course.created_at else None,
		"lessonCount": course.lesson_count,
	}


def get_course(db: Session, course_id: str) -> Course:
	course = db.get(Course, course_id)
	if course is None:
		raise NotFoundError("Course does not exist")
	return course


def lesson_keys_for(db: Session, course_id: str) -> List[str]:
	rows = (
		db.query(CourseLesson.lesson_key)
		.filter(CourseLesson.course_id == course_id)
		.order_by(CourseLesson.lesson_number.asc())
		.all()
	)
	return [key for (key,) in rows]


def create_course(
	db: Session,
	owner: str,
	title: str,
	description: str,
	content: CourseContent,
	*,
	rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
	if content.is_empty():
		raise InvalidInputError("No flashcards or questions to build lessons from")
	plan = generate_lessons(
		content.flashcards,
		content.multiple_choice_questions,
		content.fill_in_the_blank_questions,
		rng=rng,
		config=SequencerConfig.from_settings(),
	)
	course = Course(
		id=uuid.uuid4().hex,
		title=title,
		description=description,
		created_by=owner,
		lesson_count=plan.lesson_count,
		merged_flashcards=[fc.model_dump() for fc in content.flashcards],
	)
	db.add(course)
	db.flush()
	for key, lesson in plan.lessons.items():
		db.add(CourseLesson(course_id=course.id, lesson_key=key, lesson_number=lesson.lesson_number, payload=lesson.to_payload()))
	now = datetime.utcnow()
	db.add(SavedCourse(
		username=owner,
		course_id=course.id,
		title=title,
		description=description,
		progress=seed_progress(plan.lessons.keys()),
		last_attempt=now,
		created_at=now,
	))
	db.commit()
	logger.info("course %s saved for %s with %d lessons", course.id, owner, plan.lesson_count)
	return {"courseId": course.id, **plan.to_payload()}


def list_user_courses(db: Session, username: str) -> List[Dict[str, Any]]:
	rows = db.query(Course).filter(Course.created_by == username).order_by(Course.created_at.desc()).all()
	return [course_summary(c) for c in rows]


def list_featured_courses(db: Session) -> List[Dict[str, Any]]:
	owner = settings.featured_course_owner
	if not owner:
		return []
	rows = (
		db.query(Course)
		.filter(Course.created_by == owner)
		.order_by(Course.created_at.asc())
		.limit(settings.featured_course_limit)
		.all()
	)
	return [course_summary(c) for c in rows]


def get_lessons_with_progress(db: Session, username: str, course_id: str) -> Dict[str, Any]:
	course = get_course(db, course_id)
	saved = db.get(SavedCourse, (username, course_id))
	if saved is None:
		saved = SavedCourse(
			username=username,
			course_id=course_id,
			title=course.title,
			description=course.description,
			saved=False,
			progress=seed_progress(lesson_keys_for(db, course_id)),
			created_at=datetime.utcnow(),
		)
		db.add(saved)
	saved.last_attempt = datetime.utcnow()
	progress = dict(saved.progress or {})
	db.commit()

	rows = (
		db.query(CourseLesson)
		.filter(CourseLesson.course_id == course_id)
		.order_by(CourseLesson.lesson_number.asc())
		.all()
	)
	lessons = []
	for row in rows:
		entry = progress.get(row.lesson_key) or {}
		lessons.append({"id": row.lesson_key, **row.payload, "completed": bool(entry.get("completed", False))})
	return {"lessons": lessons, "mergedFlashcards": list(course.merged_flashcards or [])}
