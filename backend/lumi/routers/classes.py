from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import class_service
from .auth import User, get_current_user


router = APIRouter(tags=["classes"])


class CreateClassRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    identifier: str = ""
    color_code: str = Field(default="", alias="colorCode")


class JoinClassRequest(BaseModel):
    code: str


class AssignCourseRequest(BaseModel):
    course_id: str = Field(alias="courseId")
    # Naive UTC
    due_at: Optional[datetime] = Field(default=None, alias="dueAt")


@router.post("/class", status_code=201)
async def create_class(req: CreateClassRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.create_class(db, user.username, req.name, req.identifier, req.color_code)


@router.get("/classes")
async def my_classes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_classes_for_owner(db, user.username)


@router.get("/classes/enrolled")
async def enrolled_classes(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_student_classes(db, user.username)


@router.get("/classes/submissions")
async def submissions(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_all_class_submissions(db, user.username)


@router.post("/class/join")
async def join_class(req: JoinClassRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.join_class(db, user.username, req.code)


@router.post("/class/{class_id}/courses", status_code=201)
async def assign_course(class_id: str, req: AssignCourseRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.assign_course(db, user.username, class_id, req.course_id, req.due_at)


@router.get("/class/{class_id}/courses")
async def class_courses(class_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_courses_for_class(db, user.username, class_id)


@router.get("/class/{class_id}/students")
async def class_students(class_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_students_with_progress(db, user.username, class_id)


@router.get("/class/{class_id}/course/{course_id}")
async def class_course_record(class_id: str, course_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_or_create_class_course(db, user.username, class_id, course_id)


@router.patch("/class/{class_id}/course/{course_id}/lessons/{lesson_key}/complete")
async def complete_class_lesson(class_id: str, course_id: str, lesson_key: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    class_service.mark_class_lesson_completed(db, user.username, class_id, course_id, lesson_key)
    return {"ok": True}


@router.get("/assignments/upcoming")
async def upcoming_assignments(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return class_service.get_upcoming_assignments(db, user.username)
