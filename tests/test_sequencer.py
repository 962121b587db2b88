import math
import random

import pytest

from lumi.planets import PlanetThemes
from lumi.sequencer import SPEAK_PROMPT, WRITE_PROMPT, SequencerConfig, generate_lessons, repeat_items

from conftest import make_flashcards, make_questions


def _themes(planets=("Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta")):
	return PlanetThemes(list(planets), {"Balanced": ["{planet}|{term1}|{term2}|{term3}"]})


def _run(f, m, b, seed=7, themes=None, config=None):
	return generate_lessons(
		make_flashcards(f),
		make_questions(m, "multipleChoice"),
		make_questions(b, "fillInTheBlank"),
		rng=random.Random(seed),
		themes=themes or _themes(),
		config=config,
	)


def test_repeat_items_concatenates_whole_pool():
	assert repeat_items(["a", "b", "c"], 3) == ["a", "b", "c", "a", "b", "c", "a", "b", "c"]
	assert repeat_items(["a"], 0) == []


def test_small_pool_scenario():
	plan = _run(10, 8, 8)
	assert plan.lesson_count == 4
	assert list(plan.lessons) == ["lesson1", "lesson2", "lesson3", "lesson4"]
	for number, (key, lesson) in enumerate(plan.lessons.items(), start=1):
		assert key == f"lesson{number}"
		assert lesson.lesson_number == number
		assert len(lesson.flashcards) == 4
		assert len(lesson.multiple_choice) == 2
		assert len(lesson.fill_in_the_blank) == 2


def test_flashcards_continue_across_amplified_pool():
	plan = _run(10, 8, 8)
	terms = [fc.term for lesson in plan.lessons.values() for fc in lesson.flashcards]
	expected = [fc.term for fc in repeat_items(make_flashcards(10), 3)][:16]
	assert terms == expected


def test_question_cursor_skips_by_step():
	plan = _run(10, 8, 8)
	mc = [q.question_text for q in plan.lessons["lesson2"].multiple_choice]
	# Cursor sits at 4 in the amplified pool for the second lesson
	assert mc == ["multipleChoice question 4?", "multipleChoice question 5?"]
	fb = [q.question_text for q in plan.lessons["lesson3"].fill_in_the_blank]
	assert fb == ["fillInTheBlank question 0?", "fillInTheBlank question 1?"]


def test_large_pool_takes_up_to_eight_flashcards():
	plan = _run(40, 8, 8)
	assert plan.lesson_count == 4
	assert all(len(lesson.flashcards) == 8 for lesson in plan.lessons.values())


def test_large_pool_slice_bounded_by_remaining():
	# 30 flashcards x3 = 90; 12 lessons of up to 8 exhaust the pool mid-way
	plan = _run(30, 24, 0)
	sizes = [len(lesson.flashcards) for lesson in plan.lessons.values()]
	assert plan.lesson_count == 12
	assert sizes == [8] * 11 + [2]


def test_small_pool_slices_stop_at_boundary():
	plan = _run(2, 8, 0)
	sizes = [len(lesson.flashcards) for lesson in plan.lessons.values()]
	assert sizes == [4, 2, 0, 0]


@pytest.mark.parametrize("m,b", [(1, 0), (0, 3), (3, 5), (8, 8), (7, 2)])
def test_lesson_count_matches_question_pools(m, b):
	plan = _run(5, m, b)
	assert plan.lesson_count == math.ceil(max(2 * m, 2 * b) / 4)
	assert plan.lesson_count == len(plan.lessons)
	assert [l.lesson_number for l in plan.lessons.values()] == list(range(1, plan.lesson_count + 1))


def test_uneven_tail_items_are_dropped():
	plan = _run(4, 3, 0)
	seen = [q.question_text for lesson in plan.lessons.values() for q in lesson.multiple_choice]
	# amplified pool has 6 items; cursor positions 0 and 4 take [0,1] and [4,5]
	assert seen == [
		"multipleChoice question 0?",
		"multipleChoice question 1?",
		"multipleChoice question 1?",
		"multipleChoice question 2?",
	]
	assert all(lesson.fill_in_the_blank == [] for lesson in plan.lessons.values())


def test_no_fabricated_content():
	flashcards = make_flashcards(13)
	mc = make_questions(5, "multipleChoice")
	fb = make_questions(9, "fillInTheBlank")
	plan = generate_lessons(flashcards, mc, fb, rng=random.Random(1), themes=_themes())
	for lesson in plan.lessons.values():
		assert all(fc in flashcards for fc in lesson.flashcards)
		assert all(q in mc for q in lesson.multiple_choice)
		assert all(q in fb for q in lesson.fill_in_the_blank)


def test_speak_and_write_alternate():
	plan = _run(10, 12, 0)
	for lesson in plan.lessons.values():
		terms = [fc.term for fc in lesson.flashcards]
		if lesson.lesson_number % 2 == 1:
			assert lesson.write_question is None
			assert lesson.speak_question.prompt == SPEAK_PROMPT
			assert lesson.speak_question.options == terms
			assert lesson.speak_question.lesson_type == "speakAll"
		else:
			assert lesson.speak_question is None
			assert lesson.write_question.prompt == WRITE_PROMPT
			assert lesson.write_question.options == terms
			assert lesson.write_question.lesson_type == "writeAll"


def test_planet_names_unique_until_exhausted():
	plan = _run(10, 8, 8, themes=_themes(("Alpha", "Beta")))
	names = [lesson.planet_name for lesson in plan.lessons.values()]
	assert sorted(names[:2]) == ["Alpha", "Beta"]
	assert names[2:] == ["Unknown", "Unknown"]


def test_each_call_gets_its_own_planet_pool():
	themes = _themes(("Alpha", "Beta"))
	first = _run(10, 4, 4, themes=themes)
	second = _run(10, 4, 4, themes=themes)
	assert "Unknown" not in [l.planet_name for l in first.lessons.values()]
	assert "Unknown" not in [l.planet_name for l in second.lessons.values()]
	assert themes.planets == ("Alpha", "Beta")


def test_planet_description_uses_first_three_terms():
	plan = _run(10, 4, 0)
	lesson = plan.lessons["lesson1"]
	assert lesson.planet_description == f"{lesson.planet_name}|term0|term1|term2"


def test_description_fills_missing_terms():
	plan = _run(0, 4, 0)
	lesson = plan.lessons["lesson1"]
	assert lesson.flashcards == []
	assert lesson.planet_description == f"{lesson.planet_name}|Term1|Term2|Term3"


def test_same_seed_gives_same_plan():
	assert _run(17, 9, 6, seed=42).to_payload() == _run(17, 9, 6, seed=42).to_payload()


def test_structure_does_not_depend_on_seed():
	def shape(plan):
		return [
			([fc.term for fc in l.flashcards], [q.question_text for q in l.multiple_choice], l.speak_question is not None)
			for l in plan.lessons.values()
		]

	assert shape(_run(17, 9, 6, seed=1)) == shape(_run(17, 9, 6, seed=2))


def test_empty_input_gives_empty_plan():
	plan = generate_lessons([], [], [], themes=_themes())
	assert plan.lessons == {}
	assert plan.lesson_count == 0
	assert plan.to_payload() == {"lessons": {}, "lessonCount": 0}


def test_flashcards_without_questions_give_no_lessons():
	plan = _run(12, 0, 0)
	assert plan.lesson_count == 0


def test_payload_uses_camel_case_keys():
	payload = _run(10, 4, 4).to_payload()
	assert payload["lessonCount"] == 2
	lesson = payload["lessons"]["lesson1"]
	assert set(lesson) == {
		"lessonNumber", "flashcards", "multipleChoice", "fillInTheBlank",
		"planetName", "planetDescription", "speakQuestion",
	}
	assert lesson["multipleChoice"][0]["correctAnswer"] == "right0"
	assert lesson["speakQuestion"]["lessonType"] == "speakAll"
	assert "writeQuestion" in payload["lessons"]["lesson2"]


def test_custom_config():
	config = SequencerConfig(flashcard_repeat=1, question_repeat=1, questions_per_kind=1, question_step=1)
	plan = _run(10, 3, 0, config=config)
	assert plan.lesson_count == 3
	assert [len(l.multiple_choice) for l in plan.lessons.values()] == [1, 1, 1]


def test_config_rejects_zero_step():
	with pytest.raises(ValueError):
		SequencerConfig(question_step=0)
