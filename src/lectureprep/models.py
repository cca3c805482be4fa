"""Core domain models for lectures, practice tasks, and tests."""

from __future__ import annotations

from dataclasses import dataclass

LECTURE_TABS = ("lecture", "scenarios", "example", "tasks")
DIFFICULTIES = ("beginner", "intermediate", "advanced")


@dataclass(frozen=True)
class Lecture:
    """Markdown lecture with optional extra tabs."""

    id: str
    title: str
    topic: str
    content: str
    scenarios_content: str
    example_content: str
    tasks_content: str
    categories: list[str]


@dataclass(frozen=True)
class TaskItem:
    """One practice task parsed from a lecture's tasks tab."""

    id: str
    title: str
    summary: str
    body: str
    answer: str
    explanation: str


@dataclass(frozen=True)
class ParsedTasks:
    """Intro text, preparation section, and ordered tasks."""

    intro: str
    prep: str
    items: tuple[TaskItem, ...]


@dataclass(frozen=True)
class Question:
    """Multiple-choice question."""

    id: str
    question: str
    options: list[str]
    correct_answer: int
    explanation: str
    lecture_id: str | None = None
    source_test_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Test:
    """Ordered multiple-choice quiz."""

    __test__ = False

    id: str
    title: str
    description: str
    difficulty: str
    tags: list[str]
    categories: list[str]
    questions: list[Question]


@dataclass(frozen=True)
class SourceTest:
    """Reference to one test merged into a combined test."""

    id: str
    title: str
    questions_count: int


@dataclass(frozen=True)
class CombinedTest:
    """Test assembled from the unique questions of several tests."""

    test: Test
    source_tests: tuple[SourceTest, ...]


@dataclass(frozen=True)
class TestScore:
    """Score for one source test inside a combined test."""

    __test__ = False

    title: str
    score: int
    correct: int
    total: int


@dataclass(frozen=True)
class TestResult:
    """Outcome of answering a test."""

    __test__ = False

    score: int
    correct_count: int
    total_questions: int
