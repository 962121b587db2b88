from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Sequence

import httpx
from pydantic import ValidationError

from .errors import ContentGenerationError
from .gemini_client import GeminiClient
from .schemas import CourseContent, Flashcard, Question
from .settings import settings

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTIONS = (
	"Generate structured course content from the study material provided by the user.\n"
	"Rules:\n"
	"- One flashcard per key concept.\n"
	"- A definition must NOT include its term.\n"
	"- For each flashcard, create 1 fill-in-the-blank and 1 multiple-choice question.\n"
	"- Multiple choice: 4 options (1 correct, 3 distractors).\n"
	"- Fill in the blank: 7 options (1 correct, 6 distractors).\n"
	"- correctAnswer must be copied exactly from options.\n\n"
	"Return ONLY a JSON object with keys: flashcards (array of {term, definition}), "
	"multipleChoiceQuestions (array of {questionText, options, correctAnswer, lessonType: \"multipleChoice\"}), "
	"fillInTheBlankQuestions (array of {questionText, options, correctAnswer, lessonType: \"fillInTheBlank\"})."
)


def extract_json_object(text: str) -> Dict[str, Any]:
	try:
		return json.loads(text)
	except ValueError:
		pass
	code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
	if code_block:
		try:
			return json.loads(code_block.group(1))
		except ValueError:
			pass
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last > first:
		try:
			return json.loads(text[first : last + 1])
		except ValueError:
			pass
	raise ContentGenerationError("Content generator did not return valid JSON.")


def _validated(items: Any, model, **fixed) -> List:
	out = []
	if not isinstance(items, list):
		return out
	for raw in items:
		if not isinstance(raw, dict):
			continue
		try:
			out.append(model.model_validate({**raw, **fixed}))
		except ValidationError as exc:
			logger.warning("dropping invalid %s: %s", model.__name__, exc.errors()[0].get("msg"))
	return out


def parse_course_content(text: str) -> CourseContent:
	data = extract_json_object(text)
	if not isinstance(data, dict):
		raise ContentGenerationError("Content generator returned an unexpected payload.")
	return CourseContent(
		flashcards=_validated(data.get("flashcards"), Flashcard),
		multiple_choice_questions=_validated(data.get("multipleChoiceQuestions"), Question, lessonType="multipleChoice"),
		fill_in_the_blank_questions=_validated(data.get("fillInTheBlankQuestions"), Question, lessonType="fillInTheBlank"),
	)


async def _generate_for_text(client: GeminiClient, text: str, index: int) -> CourseContent:
	chunk = text[: settings.max_content_chars]
	try:
		raw = await client.generate(chunk, system=SYSTEM_INSTRUCTIONS, json_output=True)
	except (httpx.HTTPError, RuntimeError) as exc:
		raise ContentGenerationError(f"Content generation failed: {exc}") from exc
	content = parse_course_content(raw)
	logger.info(
		"text %d (%d chars): %d flashcards, %d multiple choice, %d fill in the blank",
		index + 1, len(chunk), len(content.flashcards),
		len(content.multiple_choice_questions), len(content.fill_in_the_blank_questions),
	)
	return content


async def generate_course_content(texts: Sequence[str], client: GeminiClient) -> CourseContent:
	"""Run the generator once per text and concatenate the results in order."""
	chunks = [t for t in texts if t and t.strip()]
	if not chunks:
		return CourseContent()
	# Every call settles before the client can be closed; the first failure wins
	parts = await asyncio.gather(
		*(_generate_for_text(client, t, i) for i, t in enumerate(chunks)),
		return_exceptions=True,
	)
	failures = [p for p in parts if isinstance(p, BaseException)]
	for extra in failures[1:]:
		logger.warning("additional content generation failure: %s", extra)
	if failures:
		raise failures[0]
	merged = CourseContent.merge(list(parts))
	logger.info(
		"generated %d flashcards, %d multiple choice, %d fill in the blank from %d texts",
		len(merged.flashcards), len(merged.multiple_choice_questions),
		len(merged.fill_in_the_blank_questions), len(chunks),
	)
	return merged
