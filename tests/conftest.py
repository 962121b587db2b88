from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lumi.db import get_db, init_db
from lumi.main import app
from lumi.routers.courses import get_content_client
from lumi.schemas import CourseContent, Flashcard, Question


def make_flashcards(n: int, prefix: str = "term") -> List[Flashcard]:
	return [Flashcard(term=f"{prefix}{i}", definition=f"meaning of item {i}") for i in range(n)]


def make_questions(n: int, kind: str = "multipleChoice") -> List[Question]:
	return [
		Question(
			question_text=f"{kind} question {i}?",
			options=[f"right{i}", f"wrong{i}a", f"wrong{i}b", f"wrong{i}c"],
			correct_answer=f"right{i}",
			lesson_type=kind,
		)
		for i in range(n)
	]


def make_content(flashcards: int, mc: int, fb: int) -> CourseContent:
	return CourseContent(
		flashcards=make_flashcards(flashcards),
		multiple_choice_questions=make_questions(mc, "multipleChoice"),
		fill_in_the_blank_questions=make_questions(fb, "fillInTheBlank"),
	)


class FakeContentClient:
	"""Stands in for GeminiClient; answers every prompt with the same JSON."""

	def __init__(self, payload: Dict[str, Any]) -> None:
		self.payload = payload
		self.prompts: List[str] = []

	async def generate(self, prompt: str, *, system=None, json_output: bool = False) -> str:
		self.prompts.append(prompt)
		return json.dumps(self.payload)

	async def aclose(self) -> None:
		pass


@pytest.fixture
def engine():
	eng = create_engine(
		"sqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
		future=True,
	)
	init_db(bind=eng)
	yield eng
	eng.dispose()


@pytest.fixture
def db(engine) -> Iterator[Session]:
	session = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)()
	try:
		yield session
	finally:
		session.close()


@pytest.fixture
def fake_generator() -> FakeContentClient:
	return FakeContentClient({
		"flashcards": [{"term": f"t{i}", "definition": f"d{i}"} for i in range(6)],
		"multipleChoiceQuestions": [
			{"questionText": f"q{i}", "options": ["a", "b", "c", "d"], "correctAnswer": "a", "lessonType": "multipleChoice"}
			for i in range(4)
		],
		"fillInTheBlankQuestions": [
			{"questionText": f"f{i} ___", "options": ["x", "y", "z"], "correctAnswer": "y", "lessonType": "fillInTheBlank"}
			for i in range(4)
		],
	})


@pytest.fixture
def client(engine, fake_generator) -> Iterator[TestClient]:
	TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

	def _get_db():
		session = TestingSession()
		try:
			yield session
		finally:
			session.close()

	async def _get_content_client():
		yield fake_generator

	app.dependency_overrides[get_db] = _get_db
	app.dependency_overrides[get_content_client] = _get_content_client
	try:
		yield TestClient(app)
	finally:
		app.dependency_overrides.clear()


def register_and_login(client: TestClient, username: str, password: str = "secret-pw", name: str = "", email: str = "") -> Dict[str, str]:
	resp = client.post("/auth/register", json={"username": username, "password": password, "name": name, "email": email})
	assert resp.status_code == 201, resp.text
	resp = client.post("/auth/token", data={"username": username, "password": password})
	assert resp.status_code == 200, resp.text
	return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client) -> Dict[str, str]:
	return register_and_login(client, "alice", name="Alice", email="alice@example.com")
