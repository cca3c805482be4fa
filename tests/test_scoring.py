import random

import pytest

from lectureprep.models import Question, SourceTest, Test
from lectureprep.scoring import (
    average_score,
    build_combined_test,
    calculate_combined_test_scores,
    format_test_count,
    percent,
    score_answers,
    shuffle_options,
)


def _question(question_id: str, correct: int = 0, sources: tuple[str, ...] = ()) -> Question:
    return Question(
        id=question_id,
        question=f"{question_id}?",
        options=["a", "b", "c"],
        correct_answer=correct,
        explanation="",
        source_test_ids=sources,
    )


def _test(test_id: str, questions: list[Question]) -> Test:
    return Test(
        id=test_id,
        title=test_id.upper(),
        description="",
        difficulty="beginner",
        tags=[],
        categories=[],
        questions=questions,
    )


def test_percent_rounds_half_up() -> None:
    assert percent(1, 8) == 13
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67
    assert percent(1, 2) == 50
    assert percent(0, 0) == 0


def test_score_answers_counts_missing_answers_as_wrong() -> None:
    questions = [_question("q1", 0), _question("q2", 1), _question("q3", 2)]
    result = score_answers(questions, [0, None])
    assert result.correct_count == 1
    assert result.total_questions == 3
    assert result.score == 33


def test_score_answers_with_no_questions() -> None:
    result = score_answers([], [1, 2])
    assert (result.score, result.correct_count, result.total_questions) == (0, 0, 0)


def test_combined_scores_per_source_test() -> None:
    questions = [
        _question("q1", 0, ("t1",)),
        _question("q2", 1, ("t1", "t2")),
        _question("q3", 2, ("t2",)),
    ]
    sources = [SourceTest("t1", "Test one", 2), SourceTest("t2", "Test two", 2), SourceTest("t3", "Empty", 0)]
    scores = calculate_combined_test_scores(questions, [0, 0, 2], sources)

    assert scores["t1"].correct == 1 and scores["t1"].total == 2 and scores["t1"].score == 50
    assert scores["t2"].correct == 1 and scores["t2"].total == 2
    assert scores["t2"].title == "Test two"
    assert scores["t3"].score == 0 and scores["t3"].total == 0


def test_combined_scores_without_sources() -> None:
    assert calculate_combined_test_scores([_question("q1")], [0], None) == {}
    assert calculate_combined_test_scores([_question("q1")], [0], []) == {}


def test_shuffle_options_tracks_correct_answer() -> None:
    options = ["a", "b", "c", "d", "e"]
    for seed in range(20):
        shuffled, correct = shuffle_options(options, 3, random.Random(seed))
        assert sorted(shuffled) == options
        assert shuffled[correct] == "d"


def test_format_test_count_plural_forms() -> None:
    assert format_test_count(1) == "1 тест"
    assert format_test_count(3) == "3 теста"
    assert format_test_count(5) == "5 тестов"


def test_build_combined_test_merges_unique_questions() -> None:
    shared = _question("shared", 1)
    first = _test("a", [_question("a1"), shared])
    second = _test("b", [shared, _question("b1", 2)])

    combined = build_combined_test([first, second], random.Random(7))

    assert combined.test.id == "combined_a_b"
    assert combined.test.title == "Объединенный тест (2 теста)"
    assert combined.test.difficulty == "mixed"
    assert "3 уникальных" in combined.test.description
    assert [(item.id, item.questions_count) for item in combined.source_tests] == [("a", 2), ("b", 2)]

    by_id = {question.id: question for question in combined.test.questions}
    assert set(by_id) == {"a1", "shared", "b1"}
    assert by_id["shared"].source_test_ids == ("a", "b")
    assert by_id["a1"].source_test_ids == ("a",)
    assert by_id["shared"].options[by_id["shared"].correct_answer] == "b"
    assert by_id["b1"].options[by_id["b1"].correct_answer] == "c"


def test_combined_test_answers_score_per_source() -> None:
    combined = build_combined_test([_test("a", [_question("a1")]), _test("b", [_question("b1")])], random.Random(1))
    answers = [question.correct_answer if question.id == "a1" else None for question in combined.test.questions]
    scores = calculate_combined_test_scores(combined.test.questions, answers, combined.source_tests)
    assert scores["a"].score == 100
    assert scores["b"].score == 0


def test_build_combined_test_requires_tests() -> None:
    with pytest.raises(ValueError):
        build_combined_test([])


def test_average_score_rounds_half_up() -> None:
    assert average_score([0, 100, 33]) == 44
    assert average_score([50, 51]) == 51
    assert average_score([]) == 0
