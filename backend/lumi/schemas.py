from __future__ import annotations
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _CamelModel(BaseModel):
	# Wire format is camelCase; Python code uses snake_case attribute names
	model_config = ConfigDict(populate_by_name=True, frozen=True)


class Flashcard(_CamelModel):
	term: str
	definition: str


class Question(_CamelModel):
	question_text: str = Field(alias="questionText")
	options: List[str]
	correct_answer: str = Field(alias="correctAnswer")
	lesson_type: Literal["multipleChoice", "fillInTheBlank"] = Field(alias="lessonType")

	@model_validator(mode="after")
	def _answer_among_options(self) -> "Question":
		if self.correct_answer not in self.options:
			raise ValueError("correctAnswer must be one of options")
		return self


class SpeakQuestion(_CamelModel):
	prompt: str
	options: List[str]
	lesson_type: Literal["speakAll"] = Field(default="speakAll", alias="lessonType")


class WriteQuestion(_CamelModel):
	prompt: str
	options: List[str]
	lesson_type: Literal["writeAll"] = Field(default="writeAll", alias="lessonType")


class Lesson(_CamelModel):
	lesson_number: int = Field(alias="lessonNumber", ge=1)
	flashcards: List[Flashcard]
	multiple_choice: Optional[List[Question]] = Field(default=None, alias="multipleChoice")
	fill_in_the_blank: Optional[List[Question]] = Field(default=None, alias="fillInTheBlank")
	planet_name: Optional[str] = Field(default=None, alias="planetName")
	planet_description: Optional[str] = Field(default=None, alias="planetDescription")
	speak_question: Optional[SpeakQuestion] = Field(default=None, alias="speakQuestion")
	write_question: Optional[WriteQuestion] = Field(default=None, alias="writeQuestion")

	def to_payload(self) -> dict:
		return self.model_dump(by_alias=True, exclude_none=True)


class LessonPlan(BaseModel):
	lessons: Dict[str, Lesson] = Field(default_factory=dict)
	lesson_count: int = 0

	def to_payload(self) -> dict:
		return {
			"lessons": {key: lesson.to_payload() for key, lesson in self.lessons.items()},
			"lessonCount": self.lesson_count,
		}


class CourseContent(_CamelModel):
	flashcards: List[Flashcard] = Field(default_factory=list)
	multiple_choice_questions: List[Question] = Field(default_factory=list, alias="multipleChoiceQuestions")
	fill_in_the_blank_questions: List[Question] = Field(default_factory=list, alias="fillInTheBlankQuestions")

	def is_empty(self) -> bool:
		return not (self.flashcards or self.multiple_choice_questions or self.fill_in_the_blank_questions)

	@classmethod
	def merge(cls, parts: List["CourseContent"]) -> "CourseContent":
		return cls(
			flashcards=[fc for part in parts for fc in part.flashcards],
			multiple_choice_questions=[q for part in parts for q in part.multiple_choice_questions],
			fill_in_the_blank_questions=[q for part in parts for q in part.fill_in_the_blank_questions],
		)
