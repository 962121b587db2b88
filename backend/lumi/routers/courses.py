from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..content_generator import generate_course_content
from ..db import get_db
from ..gemini_client import GeminiClient
from ..schemas import CourseContent
from ..sequencer import SequencerConfig, generate_lessons
from ..services import course_service
from .auth import User, get_current_user


router = APIRouter(prefix="/courses", tags=["courses"])


class CreateCourseRequest(BaseModel):
    title: str = Field(default="Lumi Course", max_length=256)
    description: str = ""
    texts: List[str] = Field(default_factory=list, description="Extracted study material, one entry per document")


class CreateFromContentRequest(BaseModel):
    title: str = Field(default="Lumi Course", max_length=256)
    description: str = ""
    content: CourseContent


async def get_content_client():
    try:
        client = GeminiClient()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    try:
        yield client
    finally:
        await client.aclose()


@router.post("", status_code=201)
async def create_course(
    req: CreateCourseRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: GeminiClient = Depends(get_content_client),
):
    texts = [t for t in req.texts if t and t.strip()]
    if not texts:
        raise HTTPException(status_code=400, detail="No valid text provided")
    content = await generate_course_content(texts, client)
    result = course_service.create_course(db, user.username, req.title, req.description, content)
    return {"message": "Course created successfully", **result}


@router.post("/from-content", status_code=201)
async def create_course_from_content(
    req: CreateFromContentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = course_service.create_course(db, user.username, req.title, req.description, req.content)
    return {"message": "Course created successfully", **result}


@router.post("/preview")
async def preview_lessons(content: CourseContent, user: User = Depends(get_current_user)):
    plan = generate_lessons(
        content.flashcards,
        content.multiple_choice_questions,
        content.fill_in_the_blank_questions,
        config=SequencerConfig.from_settings(),
    )
    return plan.to_payload()


@router.get("/mine")
async def my_courses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return course_service.list_user_courses(db, user.username)


@router.get("/featured")
async def featured_courses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return course_service.list_featured_courses(db)


@router.get("/{course_id}/lessons")
async def lessons_with_progress(course_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return course_service.get_lessons_with_progress(db, user.username, course_id)
