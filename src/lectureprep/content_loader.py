"""Load lectures and tests from bundled JSON resources."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from .models import DIFFICULTIES, Lecture, Question, Test

LECTURES_PACKAGE = "lectureprep.content.lectures"
TESTS_PACKAGE = "lectureprep.content.tests"

logger = logging.getLogger(__name__)


def _optional_text(raw: dict[str, Any], key: str) -> str:
    """Return a string field, treating null and missing as empty."""
    value = raw.get(key)
    return "" if value is None else str(value)


def _lecture_from_dict(raw: dict[str, Any]) -> Lecture:
    """Build a lecture from raw JSON content."""
    return Lecture(
        id=str(raw["id"]),
        title=str(raw["title"]),
        topic=_optional_text(raw, "topic"),
        content=str(raw["content"]),
        scenarios_content=_optional_text(raw, "scenarios_content"),
        example_content=_optional_text(raw, "example_content"),
        tasks_content=_optional_text(raw, "tasks_content"),
        categories=[str(item) for item in raw.get("categories", [])],
    )


def _question_from_dict(test_id: str, raw: dict[str, Any]) -> Question:
    """Build a question from raw JSON content."""
    question_id = str(raw["id"])
    options = [str(value).strip() for value in raw.get("options", [])]
    if any(not option for option in options):
        raise ValueError(f"Question '{question_id}' in test '{test_id}' has a blank option.")
    if len(options) < 2:
        raise ValueError(f"Question '{question_id}' in test '{test_id}' needs at least two options.")

    correct_answer = int(raw["correct_answer"])
    if not 0 <= correct_answer < len(options):
        raise ValueError(
            f"Question '{question_id}' in test '{test_id}' has correct_answer {correct_answer} "
            f"outside of {len(options)} options."
        )

    lecture_id = raw.get("lecture_id")
    return Question(
        id=question_id,
        question=str(raw["question"]),
        options=options,
        correct_answer=correct_answer,
        explanation=_optional_text(raw, "explanation"),
        lecture_id=str(lecture_id) if lecture_id else None,
    )


def _test_from_dict(raw: dict[str, Any]) -> Test:
    """Build a test from raw JSON content."""
    test_id = str(raw["id"])
    difficulty = str(raw.get("difficulty", "beginner"))
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Test '{test_id}' has unknown difficulty '{difficulty}'.")
    return Test(
        id=test_id,
        title=str(raw["title"]),
        description=_optional_text(raw, "description"),
        difficulty=difficulty,
        tags=[str(item) for item in raw.get("tags", [])],
        categories=[str(item) for item in raw.get("categories", [])],
        questions=[_question_from_dict(test_id, item) for item in raw.get("questions", [])],
    )


def _read_documents(entries: Iterable[Traversable | Path]) -> list[dict[str, Any]]:
    """Read JSON documents in name order."""
    documents: list[dict[str, Any]] = []
    for entry in sorted(entries, key=lambda item: item.name):
        if not entry.name.endswith(".json"):
            continue
        raw = json.loads(entry.read_text(encoding="utf-8-sig"))
        if not isinstance(raw, dict):
            raise ValueError(f"Content file '{entry.name}' must contain a JSON object.")
        documents.append(raw)
    return documents


def _build_lectures(documents: list[dict[str, Any]]) -> dict[str, Lecture]:
    lectures: dict[str, Lecture] = {}
    for raw in documents:
        lecture = _lecture_from_dict(raw)
        if lecture.id in lectures:
            raise ValueError(f"Duplicate lecture id: {lecture.id}")
        lectures[lecture.id] = lecture
    logger.debug("Loaded %d lectures", len(lectures))
    return lectures


def _build_tests(documents: list[dict[str, Any]]) -> dict[str, Test]:
    tests: dict[str, Test] = {}
    for raw in documents:
        test = _test_from_dict(raw)
        if test.id in tests:
            raise ValueError(f"Duplicate test id: {test.id}")
        tests[test.id] = test
    _validate_shared_questions(tests)
    logger.debug("Loaded %d tests with %d questions", len(tests), sum(len(test.questions) for test in tests.values()))
    return tests


def load_lectures() -> dict[str, Lecture]:
    """Load bundled lectures."""
    return _build_lectures(_read_documents(resources.files(LECTURES_PACKAGE).iterdir()))


def load_lectures_from_dir(path: Path) -> dict[str, Lecture]:
    """Load lectures from directory for tests/tools."""
    return _build_lectures(_read_documents(path.glob("*.json")))


def load_tests() -> dict[str, Test]:
    """Load bundled tests."""
    return _build_tests(_read_documents(resources.files(TESTS_PACKAGE).iterdir()))


def load_tests_from_dir(path: Path) -> dict[str, Test]:
    """Load tests from directory for tests/tools."""
    return _build_tests(_read_documents(path.glob("*.json")))


def _validate_shared_questions(tests: dict[str, Test]) -> None:
    """Validate that a question id shared by several tests always means the same question."""
    seen: dict[str, tuple[str, Question]] = {}
    for test in tests.values():
        for question in test.questions:
            previous = seen.get(question.id)
            if previous is None:
                seen[question.id] = (test.id, question)
                continue
            previous_test_id, previous_question = previous
            if (previous_question.question, previous_question.options, previous_question.correct_answer) != (
                question.question,
                question.options,
                question.correct_answer,
            ):
                raise ValueError(
                    f"Question id {question.id} differs between tests {previous_test_id} and {test.id}"
                )


def validate_question_lectures(tests: dict[str, Test], lectures: dict[str, Lecture]) -> None:
    """Validate that every question linked to a lecture points at a loaded lecture."""
    for test in tests.values():
        for question in test.questions:
            if question.lecture_id is not None and question.lecture_id not in lectures:
                raise ValueError(
                    f"Question '{question.id}' in test '{test.id}' links unknown lecture '{question.lecture_id}'."
                )
