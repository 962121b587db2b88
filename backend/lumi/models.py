from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, Boolean, ForeignKey, UniqueConstraint
from .db import Base


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	name = Column(String(256), nullable=False, default="")
	email = Column(String(256), nullable=False, default="")
	# Lower-cased copies back the case-insensitive prefix search
	name_lower = Column(String(256), nullable=False, default="", index=True)
	email_lower = Column(String(256), nullable=False, default="", index=True)
	profile_picture = Column(String(512), nullable=False, default="default")
	xp_count = Column(Integer, default=0, nullable=False)
	streak_count = Column(Integer, default=0, nullable=False)
	friend_count = Column(Integer, default=0, nullable=False)
	last_check_in = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), ForeignKey("auth_users.username"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Course(Base):
	__tablename__ = "courses"
	id = Column(String(32), primary_key=True)
	title = Column(String(256), nullable=False)
	description = Column(Text, nullable=False, default="")
	created_by = Column(String(128), nullable=False, index=True)
	lesson_count = Column(Integer, default=0, nullable=False)
	merged_flashcards = Column(JSON, nullable=False, default=list)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CourseLesson(Base):
	__tablename__ = "course_lessons"
	course_id = Column(String(32), ForeignKey("courses.id"), primary_key=True)
	# "lesson1", "lesson2", ...
	lesson_key = Column(String(32), primary_key=True)
	lesson_number = Column(Integer, nullable=False)
	payload = Column(JSON, nullable=False)


class SavedCourse(Base):
	__tablename__ = "saved_courses"
	username = Column(String(128), primary_key=True)
	course_id = Column(String(32), ForeignKey("courses.id"), primary_key=True)
	title = Column(String(256), nullable=True)
	description = Column(Text, nullable=True)
	saved = Column(Boolean, default=True, nullable=False)
	# {lessonKey: {"completed": bool}}
	progress = Column(JSON, nullable=False, default=dict)
	overall_score = Column(Integer, default=0, nullable=False)
	last_attempt = Column(DateTime, default=datetime.utcnow, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class FriendRequest(Base):
	__tablename__ = "friend_requests"
	id = Column(String(32), primary_key=True)
	sender_id = Column(String(128), nullable=False, index=True)
	recipient_id = Column(String(128), nullable=False, index=True)
	status = Column(String(16), default="pending", nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	accepted_at = Column(DateTime, nullable=True)


class Classroom(Base):
	__tablename__ = "classrooms"
	id = Column(String(32), primary_key=True)
	owner_id = Column(String(128), nullable=False, index=True)
	name = Column(String(256), nullable=False)
	identifier = Column(String(128), nullable=False, default="")
	color_code = Column(String(16), nullable=False, default="")
	invite_code = Column(String(16), nullable=False, unique=True, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ClassMember(Base):
	__tablename__ = "class_members"
	class_id = Column(String(32), ForeignKey("classrooms.id"), primary_key=True)
	user_id = Column(String(128), primary_key=True)
	role = Column(String(16), nullable=False)  # "teacher" | "student"
	joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ClassCourse(Base):
	__tablename__ = "class_courses"
	class_id = Column(String(32), ForeignKey("classrooms.id"), primary_key=True)
	course_id = Column(String(32), ForeignKey("courses.id"), primary_key=True)
	assigned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	due_at = Column(DateTime, nullable=True)


class ClassCourseProgress(Base):
	__tablename__ = "class_course_progress"
	__table_args__ = (UniqueConstraint("user_id", "class_id", "course_id", name="uq_class_course_progress"),)
	id = Column(Integer, primary_key=True, autoincrement=True)
	user_id = Column(String(128), nullable=False, index=True)
	class_id = Column(String(32), ForeignKey("classrooms.id"), nullable=False)
	course_id = Column(String(32), ForeignKey("courses.id"), nullable=False)
	assigned_at = Column(DateTime, nullable=False)
	due_at = Column(DateTime, nullable=True)
	progress = Column(JSON, nullable=False, default=dict)
	last_attempt = Column(DateTime, nullable=True)


class ClassSubmission(Base):
	__tablename__ = "class_submissions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	class_id = Column(String(32), ForeignKey("classrooms.id"), nullable=False, index=True)
	user_id = Column(String(128), nullable=False)
	course_id = Column(String(32), nullable=False)
	lesson_key = Column(String(32), nullable=False)
	completed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
