from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import saved_course_service
from .auth import User, get_current_user


router = APIRouter(prefix="/saved-courses", tags=["saved_courses"])


class CreateSavedCourseRequest(BaseModel):
    course_id: str = Field(alias="courseId")
    lesson_count: Optional[int] = Field(default=None, alias="lessonCount", ge=0)


@router.post("", status_code=201)
async def create_saved_course(req: CreateSavedCourseRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    saved_id = saved_course_service.create_saved_course(db, user.username, req.course_id, req.lesson_count)
    return {"savedCourseId": saved_id}


@router.get("")
async def list_saved_courses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return saved_course_service.list_saved_courses(db, user.username)


@router.patch("/{course_id}/lessons/{lesson_key}/complete")
async def complete_lesson(course_id: str, lesson_key: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return saved_course_service.mark_lesson_completed(db, user.username, course_id, lesson_key)
