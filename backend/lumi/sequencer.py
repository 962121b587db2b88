"""Turns flat pools of generated study material into an ordered set of lessons.

Every pool is first amplified (concatenated with itself a fixed number of
times) so each item comes back in later lessons. Lessons are then cut from
the amplified pools in a single balanced pass: a slice of flashcards, a few
multiple-choice and fill-in-the-blank questions, a planet theme, and either a
speak-all or a write-all recall prompt, alternating lesson by lesson.

All state consumed while sequencing (cursors, shuffled planet names, the
random generator) is local to one call.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, TypeVar

from .planets import PlanetThemes, build_planet_description, load_planet_themes
from .schemas import Flashcard, Lesson, LessonPlan, Question, SpeakQuestion, WriteQuestion
from .settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

BALANCED_CATEGORY = "Balanced"
SPEAK_PROMPT = "Explain everything you remember about this lesson."
WRITE_PROMPT = "Write everything you remember about this lesson."


@dataclass(frozen=True)
class SequencerConfig:
	flashcard_repeat: int = 3
	question_repeat: int = 2
	small_pool_threshold: int = 28
	small_pool_flashcards: int = 4
	large_pool_flashcards: int = 8
	questions_per_kind: int = 2
	# Question cursors move by this much per lesson, whatever was actually taken
	question_step: int = 4

	def __post_init__(self) -> None:
		if self.question_step < 1:
			raise ValueError("question_step must be at least 1")
		for name in ("flashcard_repeat", "question_repeat", "small_pool_flashcards", "large_pool_flashcards", "questions_per_kind"):
			if getattr(self, name) < 0:
				raise ValueError(f"{name} must not be negative")

	@classmethod
	def from_settings(cls) -> "SequencerConfig":
		return cls(
			flashcard_repeat=settings.lesson_flashcard_repeat,
			question_repeat=settings.lesson_question_repeat,
			small_pool_threshold=settings.lesson_small_pool_threshold,
			small_pool_flashcards=settings.lesson_small_pool_flashcards,
			large_pool_flashcards=settings.lesson_large_pool_flashcards,
			questions_per_kind=settings.lesson_questions_per_kind,
			question_step=settings.lesson_question_step,
		)


def lesson_key(lesson_number: int) -> str:
	return f"lesson{lesson_number}"


def repeat_items(items: Sequence[T], repetitions: int) -> List[T]:
	# Whole-pool concatenation: [a, b] x2 -> [a, b, a, b]
	return list(items) * max(repetitions, 0)


def _flashcard_slice_size(original_count: int, remaining: int, config: SequencerConfig) -> int:
	if original_count < config.small_pool_threshold:
		return config.small_pool_flashcards
	return max(0, min(remaining, config.large_pool_flashcards))


def generate_lessons(
	flashcards: Sequence[Flashcard],
	multiple_choice: Sequence[Question],
	fill_in_the_blank: Sequence[Question],
	*,
	rng: Optional[random.Random] = None,
	themes: Optional[PlanetThemes] = None,
	config: Optional[SequencerConfig] = None,
) -> LessonPlan:
	"""Package generated content into lessons keyed ``lesson1..lessonN``.

	Lesson structure depends only on the pool sizes and ``config``; ``rng``
	only drives planet naming and description templates. Empty question
	pools produce an empty plan.
	"""
	rng = rng or random.Random()
	themes = themes or load_planet_themes()
	config = config or SequencerConfig()

	repeated_flashcards = repeat_items(flashcards, config.flashcard_repeat)
	repeated_mc = repeat_items(multiple_choice, config.question_repeat)
	repeated_fb = repeat_items(fill_in_the_blank, config.question_repeat)

	planets = themes.fresh_pool(rng)
	lessons: Dict[str, Lesson] = {}
	lesson_number = 1
	fc_idx = mc_idx = fb_idx = 0

	while mc_idx < len(repeated_mc) or fb_idx < len(repeated_fb):
		phase_index = lesson_number - 1
		size = _flashcard_slice_size(len(flashcards), len(repeated_flashcards) - fc_idx, config)
		current = repeated_flashcards[fc_idx:fc_idx + size]
		fc_idx += len(current)

		terms = [card.term for card in current]
		planet_name = planets.pop()
		description = build_planet_description(themes, BALANCED_CATEGORY, planet_name, terms[:3], rng)

		speak = write = None
		if phase_index % 2 == 0:
			speak = SpeakQuestion(prompt=SPEAK_PROMPT, options=terms)
		else:
			write = WriteQuestion(prompt=WRITE_PROMPT, options=terms)

		lessons[lesson_key(lesson_number)] = Lesson(
			lesson_number=lesson_number,
			flashcards=current,
			multiple_choice=repeated_mc[mc_idx:mc_idx + config.questions_per_kind],
			fill_in_the_blank=repeated_fb[fb_idx:fb_idx + config.questions_per_kind],
			planet_name=planet_name,
			planet_description=description,
			speak_question=speak,
			write_question=write,
		)
		mc_idx += config.question_step
		fb_idx += config.question_step
		lesson_number += 1

	logger.debug(
		"sequenced %d lessons from %d flashcards, %d multiple choice, %d fill in the blank",
		len(lessons), len(flashcards), len(multiple_choice), len(fill_in_the_blank),
	)
	return LessonPlan(lessons=lessons, lesson_count=len(lessons))
