from __future__ import annotations

import logging
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError, PermissionDeniedError
from ..models import AuthUser, ClassCourse, ClassCourseProgress, ClassMember, ClassSubmission, Classroom, Course
from .course_service import get_course, lesson_keys_for
from .saved_course_service import seed_progress

logger = logging.getLogger(__name__)

INVITE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 6


def _iso(value: Optional[datetime]) -> Optional[str]:
	return value.isoformat() if value else None


def _new_invite_code(db: Session) -> str:
	while True:
		code = "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))
		if db.query(Classroom).filter(Classroom.invite_code == code).first() is None:
			return code


def _get_class(db: Session, class_id: str) -> Classroom:
	classroom = db.get(Classroom, class_id)
	if classroom is None:
		raise NotFoundError("Classroom not found")
	return classroom


def _require_member(db: Session, class_id: str, user_id: str) -> ClassMember:
	member = db.get(ClassMember, (class_id, user_id))
	if member is None:
		raise PermissionDeniedError("Access denied: not a class member")
	return member


def _require_teacher(db: Session, class_id: str, user_id: str) -> None:
	member = db.get(ClassMember, (class_id, user_id))
	if member is None or member.role != "teacher":
		raise PermissionDeniedError("Access denied: only teachers may do this")


def _student_ids(db: Session, class_id: str) -> List[str]:
	rows = db.query(ClassMember.user_id).filter(ClassMember.class_id == class_id, ClassMember.role == "student").all()
	return [uid for (uid,) in rows]


def _summary(db: Session, classroom: Classroom) -> Dict[str, Any]:
	return {
		"id": classroom.id,
		"name": classroom.name,
		"identifier": classroom.identifier,
		"studentCount": len(_student_ids(db, classroom.id)),
		"courseCount": db.query(ClassCourse).filter(ClassCourse.class_id == classroom.id).count(),
	}


def _record_dict(record: ClassCourseProgress) -> Dict[str, Any]:
	return {
		"classId": record.class_id,
		"courseId": record.course_id,
		"assignedAt": _iso(record.assigned_at),
		"dueAt": _iso(record.due_at),
		"progress": {"lessons": record.progress or {}},
	}


def _seed_record(db: Session, user_id: str, assignment: ClassCourse) -> ClassCourseProgress:
	record = (
		db.query(ClassCourseProgress)
		.filter_by(user_id=user_id, class_id=assignment.class_id, course_id=assignment.course_id)
		.first()
	)
	if record is None:
		record = ClassCourseProgress(
			user_id=user_id,
			class_id=assignment.class_id,
			course_id=assignment.course_id,
			assigned_at=assignment.assigned_at,
			due_at=assignment.due_at,
			progress=seed_progress(lesson_keys_for(db, assignment.course_id)),
		)
		db.add(record)
	return record


def create_class(db: Session, owner: str, name: str, identifier: str, color_code: str) -> Dict[str, Any]:
	now = datetime.utcnow()
	classroom = Classroom(
		id=uuid.uuid4().hex,
		owner_id=owner,
		name=name,
		identifier=identifier,
		color_code=color_code,
		invite_code=_new_invite_code(db),
		created_at=now,
	)
	db.add(classroom)
	db.flush()
	db.add(ClassMember(class_id=classroom.id, user_id=owner, role="teacher", joined_at=now))
	db.commit()
	logger.info("classroom %s created by %s", classroom.id, owner)
	return {
		"id": classroom.id,
		"ownerId": owner,
		"name": name,
		"identifier": identifier,
		"colorCode": color_code,
		"inviteCode": classroom.invite_code,
		"createdAt": _iso(now),
	}


def get_classes_for_owner(db: Session, owner: str) -> List[Dict[str, Any]]:
	rows = db.query(Classroom).filter(Classroom.owner_id == owner).order_by(Classroom.created_at.asc()).all()
	return [_summary(db, c) for c in rows]


def assign_course(db: Session, owner: str, class_id: str, course_id: str, due_at: Optional[datetime] = None) -> Dict[str, Any]:
	if due_at is not None and due_at.tzinfo is not None:
		due_at = due_at.astimezone(timezone.utc).replace(tzinfo=None)
	_get_class(db, class_id)
	_require_teacher(db, class_id, owner)
	get_course(db, course_id)
	assignment = db.get(ClassCourse, (class_id, course_id))
	if assignment is None:
		assignment = ClassCourse(class_id=class_id, course_id=course_id, assigned_at=datetime.utcnow())
		db.add(assignment)
	assignment.due_at = due_at
	db.flush()
	for student_id in _student_ids(db, class_id):
		_seed_record(db, student_id, assignment).due_at = due_at
	db.commit()
	logger.info("course %s assigned to classroom %s", course_id, class_id)
	return {"classId": class_id, "courseId": course_id, "assignedAt": _iso(assignment.assigned_at), "dueAt": _iso(due_at)}


def get_courses_for_class(db: Session, username: str, class_id: str) -> List[Dict[str, Any]]:
	_require_member(db, class_id, username)
	rows = (
		db.query(ClassCourse, Course)
		.join(Course, Course.id == ClassCourse.course_id)
		.filter(ClassCourse.class_id == class_id)
		.order_by(ClassCourse.assigned_at.asc())
		.all()
	)
	return [{"id": course.id, "title": course.title or "Untitled", "dueAt": _iso(assignment.due_at)} for assignment, course in rows]


def get_students_with_progress(db: Session, username: str, class_id: str) -> List[Dict[str, Any]]:
	_get_class(db, class_id)
	_require_teacher(db, class_id, username)
	students = []
	for student_id in _student_ids(db, class_id):
		user = db.get(AuthUser, student_id)
		records = db.query(ClassCourseProgress).filter_by(user_id=student_id, class_id=class_id).all()
		total = completed = 0
		for record in records:
			lessons = record.progress or {}
			total += len(lessons)
			completed += sum(1 for entry in lessons.values() if entry.get("completed"))
		students.append({
			"id": student_id,
			"name": (user.name if user and user.name else None) or "Unknown",
			"completedLessons": completed,
			"totalLessons": total,
		})
	return students


def _course_done(record: ClassCourseProgress) -> bool:
	lessons = record.progress or {}
	return bool(lessons) and all(entry.get("completed") for entry in lessons.values())


def get_student_classes(db: Session, username: str) -> List[Dict[str, Any]]:
	memberships = db.query(ClassMember).filter(ClassMember.user_id == username).all()
	results = []
	for membership in memberships:
		classroom = db.get(Classroom, membership.class_id)
		if classroom is None:
			continue
		summary = _summary(db, classroom)
		records = db.query(ClassCourseProgress).filter_by(user_id=username, class_id=classroom.id).all()
		summary["totalCourses"] = summary["courseCount"]
		summary["completedCourses"] = sum(1 for r in records if _course_done(r))
		results.append(summary)
	return results


def get_or_create_class_course(db: Session, username: str, class_id: str, course_id: str) -> Dict[str, Any]:
	assignment = db.get(ClassCourse, (class_id, course_id))
	if assignment is None:
		raise NotFoundError("Course not assigned to this classroom")
	_require_member(db, class_id, username)
	record = _seed_record(db, username, assignment)
	db.commit()
	return _record_dict(record)


def join_class(db: Session, username: str, invite_code: str) -> Dict[str, Any]:
	code = (invite_code or "").strip().upper()
	classroom = db.query(Classroom).filter(Classroom.invite_code == code).first()
	if classroom is None:
		raise NotFoundError("Classroom not found")
	if db.get(ClassMember, (classroom.id, username)) is None:
		db.add(ClassMember(class_id=classroom.id, user_id=username, role="student", joined_at=datetime.utcnow()))
		db.flush()
	for assignment in db.query(ClassCourse).filter(ClassCourse.class_id == classroom.id).all():
		_seed_record(db, username, assignment)
	db.commit()
	logger.info("%s joined classroom %s", username, classroom.id)
	return _summary(db, classroom)


def get_upcoming_assignments(db: Session, username: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
	now = now or datetime.utcnow()
	records = (
		db.query(ClassCourseProgress)
		.filter(ClassCourseProgress.user_id == username, ClassCourseProgress.due_at > now)
		.order_by(ClassCourseProgress.due_at.asc())
		.all()
	)
	out = []
	for record in records:
		classroom = db.get(Classroom, record.class_id)
		course = db.get(Course, record.course_id)
		out.append({
			"classId": record.class_id,
			"className": classroom.name if classroom else "Unknown Class",
			"courseId": record.course_id,
			"courseTitle": course.title if course else "Untitled Course",
			"dueAt": _iso(record.due_at),
		})
	return out


def mark_class_lesson_completed(db: Session, username: str, class_id: str, course_id: str, lesson_key: str) -> None:
	record = db.query(ClassCourseProgress).filter_by(user_id=username, class_id=class_id, course_id=course_id).first()
	if record is None:
		raise NotFoundError("Class-course record not found")
	progress = {key: dict(entry) for key, entry in (record.progress or {}).items()}
	if lesson_key not in progress:
		raise NotFoundError(f"Lesson {lesson_key} is not part of this course")
	now = datetime.utcnow()
	progress[lesson_key]["completed"] = True
	record.progress = progress
	record.last_attempt = now
	db.add(ClassSubmission(class_id=class_id, user_id=username, course_id=course_id, lesson_key=lesson_key, completed_at=now))
	db.commit()


def get_all_class_submissions(db: Session, owner: str) -> List[Dict[str, Any]]:
	rows = (
		db.query(ClassSubmission)
		.join(Classroom, Classroom.id == ClassSubmission.class_id)
		.filter(Classroom.owner_id == owner)
		.order_by(ClassSubmission.completed_at.desc(), ClassSubmission.id.desc())
		.all()
	)
	return [
		{
			"classId": r.class_id,
			"userId": r.user_id,
			"courseId": r.course_id,
			"lessonId": r.lesson_key,
			"completedAt": _iso(r.completed_at),
		}
		for r in rows
	]
