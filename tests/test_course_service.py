import random

import pytest

from lumi.errors import InvalidInputError, NotFoundError
from lumi.models import Course, CourseLesson, SavedCourse
from lumi.schemas import CourseContent
from lumi.services import course_service, saved_course_service

from conftest import make_content


def _create(db, owner="alice", content=None):
	return course_service.create_course(db, owner, "Biology", "Cells", content or make_content(10, 8, 8), rng=random.Random(5))


def test_create_course_persists_lessons_and_progress(db):
	result = _create(db)
	assert result["lessonCount"] == 4
	course = db.get(Course, result["courseId"])
	assert course.lesson_count == 4
	assert len(course.merged_flashcards) == 10
	rows = db.query(CourseLesson).filter_by(course_id=course.id).order_by(CourseLesson.lesson_number).all()
	assert [r.lesson_key for r in rows] == ["lesson1", "lesson2", "lesson3", "lesson4"]
	assert rows[0].payload["lessonNumber"] == 1
	saved = db.get(SavedCourse, ("alice", course.id))
	assert saved.progress == {f"lesson{i}": {"completed": False} for i in range(1, 5)}


def test_create_course_rejects_empty_content(db):
	with pytest.raises(InvalidInputError):
		course_service.create_course(db, "alice", "Empty", "", CourseContent())


def test_flashcards_only_course_has_no_lessons(db):
	result = _create(db, content=make_content(6, 0, 0))
	assert result["lessonCount"] == 0
	assert result["lessons"] == {}


def test_list_user_courses(db):
	_create(db, owner="alice")
	_create(db, owner="bob")
	courses = course_service.list_user_courses(db, "alice")
	assert [c["createdBy"] for c in courses] == ["alice"]
	assert courses[0]["lessonCount"] == 4


def test_featured_courses(db, monkeypatch):
	monkeypatch.setattr(course_service.settings, "featured_course_owner", None)
	_create(db, owner="curator")
	assert course_service.list_featured_courses(db) == []
	monkeypatch.setattr(course_service.settings, "featured_course_owner", "curator")
	monkeypatch.setattr(course_service.settings, "featured_course_limit", 1)
	_create(db, owner="curator")
	assert len(course_service.list_featured_courses(db)) == 1


def test_lessons_with_progress_merges_completion(db):
	course_id = _create(db)["courseId"]
	saved_course_service.mark_lesson_completed(db, "alice", course_id, "lesson2")
	result = course_service.get_lessons_with_progress(db, "alice", course_id)
	assert [l["id"] for l in result["lessons"]] == ["lesson1", "lesson2", "lesson3", "lesson4"]
	assert [l["completed"] for l in result["lessons"]] == [False, True, False, False]
	assert len(result["mergedFlashcards"]) == 10


def test_lessons_with_progress_for_new_viewer(db):
	course_id = _create(db)["courseId"]
	result = course_service.get_lessons_with_progress(db, "bob", course_id)
	assert all(l["completed"] is False for l in result["lessons"])
	assert db.get(SavedCourse, ("bob", course_id)) is not None


def test_lessons_with_progress_unknown_course(db):
	with pytest.raises(NotFoundError):
		course_service.get_lessons_with_progress(db, "alice", "missing")


def test_saved_course_seeding_and_listing(db):
	course_id = _create(db, owner="alice")["courseId"]
	assert saved_course_service.create_saved_course(db, "bob", course_id) == course_id
	listed = saved_course_service.list_saved_courses(db, "bob")
	assert len(listed) == 1
	assert listed[0]["title"] == "Biology"
	assert listed[0]["totalLessons"] == 4
	assert listed[0]["completedLessons"] == 0


def test_saved_course_explicit_lesson_count(db):
	course_id = _create(db)["courseId"]
	saved_course_service.create_saved_course(db, "bob", course_id, lesson_count=2)
	row = db.get(SavedCourse, ("bob", course_id))
	assert list(row.progress) == ["lesson1", "lesson2"]


def test_saved_course_unknown_course(db):
	with pytest.raises(NotFoundError):
		saved_course_service.create_saved_course(db, "bob", "nope")


def test_mark_lesson_completed_updates_score(db):
	course_id = _create(db)["courseId"]
	summary = saved_course_service.mark_lesson_completed(db, "alice", course_id, "lesson1")
	assert summary["completedLessons"] == 1
	assert summary["progress"]["overallScore"] == 25
	for key in ("lesson2", "lesson3", "lesson4"):
		summary = saved_course_service.mark_lesson_completed(db, "alice", course_id, key)
	assert summary["progress"]["overallScore"] == 100


def test_mark_unknown_lesson(db):
	course_id = _create(db)["courseId"]
	with pytest.raises(NotFoundError):
		saved_course_service.mark_lesson_completed(db, "alice", course_id, "lesson99")
	with pytest.raises(NotFoundError):
		saved_course_service.mark_lesson_completed(db, "carol", course_id, "lesson1")


def test_viewer_can_record_progress_without_saving(db):
	course_id = _create(db)["courseId"]
	course_service.get_lessons_with_progress(db, "bob", course_id)
	assert saved_course_service.list_saved_courses(db, "bob") == []

	summary = saved_course_service.mark_lesson_completed(db, "bob", course_id, "lesson1")
	assert summary["completedLessons"] == 1
	assert summary["totalLessons"] == 4
	assert summary["saved"] is False

	saved_course_service.create_saved_course(db, "bob", course_id)
	assert [c["totalLessons"] for c in saved_course_service.list_saved_courses(db, "bob")] == [4]
