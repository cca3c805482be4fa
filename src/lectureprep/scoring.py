"""Scoring for single and combined multiple-choice tests."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import replace

from .models import CombinedTest, Question, SourceTest, Test, TestResult, TestScore

Answers = Sequence[int | None]
COMBINED_TEST_PREFIX = "combined_"


def percent(correct: int, total: int) -> int:
    """Return a whole percentage rounded half up; 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return (correct * 200 + total) // (2 * total)


def average_score(scores: Sequence[int]) -> int:
    """Return the mean of whole-percent scores rounded half up; 0 for no scores."""
    if not scores:
        return 0
    return (sum(scores) * 2 + len(scores)) // (2 * len(scores))


def _is_correct(question: Question, answers: Answers, index: int) -> bool:
    return index < len(answers) and answers[index] == question.correct_answer


def score_answers(questions: Sequence[Question], answers: Answers) -> TestResult:
    """Score answers given by position; missing or ``None`` answers count as wrong."""
    correct = sum(1 for index, question in enumerate(questions) if _is_correct(question, answers, index))
    return TestResult(score=percent(correct, len(questions)), correct_count=correct, total_questions=len(questions))


def calculate_combined_test_scores(
    questions: Sequence[Question],
    answers: Answers,
    source_tests: Sequence[SourceTest] | None,
) -> dict[str, TestScore]:
    """Return per-source-test scores for a combined test, keyed by source test id."""
    if not source_tests:
        return {}

    scores: dict[str, TestScore] = {}
    for source in source_tests:
        indexes = [index for index, question in enumerate(questions) if source.id in question.source_test_ids]
        correct = sum(1 for index in indexes if _is_correct(questions[index], answers, index))
        scores[source.id] = TestScore(
            title=source.title,
            score=percent(correct, len(indexes)),
            correct=correct,
            total=len(indexes),
        )
    return scores


def shuffle_options(options: Sequence[str], correct_answer: int, rng: random.Random) -> tuple[list[str], int]:
    """Shuffle answer options and return them with the new correct index."""
    order = list(range(len(options)))
    rng.shuffle(order)
    return ([options[index] for index in order], order.index(correct_answer))


def format_test_count(count: int) -> str:
    """Return ``count`` with the matching Russian plural of "тест"."""
    if count == 1:
        return f"{count} тест"
    if count < 5:
        return f"{count} теста"
    return f"{count} тестов"


def build_combined_test(tests: Sequence[Test], rng: random.Random | None = None) -> CombinedTest:
    """Merge the unique questions of several tests into one shuffled test."""
    if not tests:
        raise ValueError("At least one test is required for a combined test.")
    rng = rng or random.Random()

    unique: dict[str, Question] = {}
    owners: dict[str, list[str]] = {}
    for test in tests:
        for question in test.questions:
            if question.id not in unique:
                unique[question.id] = question
                owners[question.id] = []
            if test.id not in owners[question.id]:
                owners[question.id].append(test.id)

    questions: list[Question] = []
    for question_id, question in unique.items():
        options, correct_answer = shuffle_options(question.options, question.correct_answer, rng)
        questions.append(
            replace(
                question,
                options=options,
                correct_answer=correct_answer,
                source_test_ids=tuple(owners[question_id]),
            )
        )
    rng.shuffle(questions)

    combined = Test(
        id=COMBINED_TEST_PREFIX + "_".join(test.id for test in tests),
        title=f"Объединенный тест ({format_test_count(len(tests))})",
        description=f"Комбинированный тест из {len(questions)} уникальных вопросов",
        difficulty="mixed",
        tags=[],
        categories=[],
        questions=questions,
    )
    sources = tuple(SourceTest(id=test.id, title=test.title, questions_count=len(test.questions)) for test in tests)
    return CombinedTest(test=combined, source_tests=sources)
