"""Application service for profiles, lectures, practice tasks, and tests."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .content_loader import load_lectures, load_tests, validate_question_lectures
from .models import LECTURE_TABS, CombinedTest, Lecture, ParsedTasks, Test, TestResult, TestScore
from .progress import Profile, ProgressStore, StoredTestResult, TestList
from .scoring import (
    COMBINED_TEST_PREFIX,
    Answers,
    average_score,
    build_combined_test,
    calculate_combined_test_scores,
    score_answers,
)
from .tasks_parser import parse_tasks_content

SKIP_TASKS_WARNING_KEY = "skip_tasks_warning"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskProgress:
    """Completed vs total practice tasks for one lecture."""

    lecture_id: str
    total: int
    completed: int


@dataclass(frozen=True)
class SubmittedTest:
    """Score of a submitted test together with its stored result id."""

    result_id: int
    result: TestResult
    test_scores: dict[str, TestScore]


@dataclass(frozen=True)
class TestResultGroup:
    """Attempts of one test in the results history."""

    __test__ = False

    test_id: str
    title: str
    attempts: int
    best_score: int
    last_completed_at: str


@dataclass(frozen=True)
class ResultsSummary:
    """Aggregate view of a profile's results history."""

    attempts: int
    average_score: int
    combined_attempts: int
    combined_average_score: int
    by_test: tuple[TestResultGroup, ...]


class LearnService:
    """Coordinates content and profile progress."""

    def __init__(self, db_path: Path | str, rng: random.Random | None = None) -> None:
        """Initialize service with database path."""
        self.lectures = load_lectures()
        self.tests = load_tests()
        validate_question_lectures(self.tests, self.lectures)
        self.progress = ProgressStore(db_path)
        self._rng = rng or random.Random()

    def list_profiles(self) -> list[Profile]:
        """Return all profiles."""
        return self.progress.list_profiles()

    def create_profile(self, name: str) -> Profile:
        """Create profile by name."""
        return self.progress.create_profile(name.strip())

    def delete_profile(self, profile_id: int) -> bool:
        """Delete one profile by id."""
        return self.progress.delete_profile(profile_id)

    def list_lectures(self, *, category: str | None = None, topic: str | None = None) -> list[Lecture]:
        """Return lectures sorted by title, optionally filtered by category and topic."""
        lectures = [
            lecture
            for lecture in self.lectures.values()
            if (not category or category in lecture.categories) and (not topic or lecture.topic == topic)
        ]
        return sorted(lectures, key=lambda item: (item.title, item.id))

    def lecture_categories(self) -> list[str]:
        """Return every lecture category, sorted."""
        return sorted({category for lecture in self.lectures.values() for category in lecture.categories})

    def get_lecture(self, lecture_id: str) -> Lecture:
        """Get lecture by id."""
        return self.lectures[lecture_id]

    def available_tabs(self, lecture: Lecture) -> list[str]:
        """Return tabs with content; the lecture tab is always present."""
        return [tab for tab in LECTURE_TABS if tab == "lecture" or self.lecture_tab_content(lecture, tab).strip()]

    def lecture_tab_content(self, lecture: Lecture, tab: str) -> str:
        """Return markdown for one lecture tab."""
        if tab == "lecture":
            return lecture.content
        if tab == "scenarios":
            return lecture.scenarios_content
        if tab == "example":
            return lecture.example_content
        if tab == "tasks":
            return lecture.tasks_content
        raise KeyError(tab)

    def parsed_tasks(self, lecture: Lecture) -> ParsedTasks:
        """Return the lecture's practice tasks."""
        return parse_tasks_content(lecture.tasks_content)

    def lecture_for_question(self, question_id: str) -> Lecture | None:
        """Return the lecture a question links to, if any."""
        for test in self.tests.values():
            for question in test.questions:
                if question.id == question_id:
                    if question.lecture_id is None:
                        return None
                    return self.lectures.get(question.lecture_id)
        raise KeyError(question_id)

    def completed_task_ids(self, profile_id: int, lecture_id: str) -> set[str]:
        """Return completed task ids for a lecture."""
        return self.progress.completed_task_ids(profile_id, lecture_id)

    def set_task_completed(self, profile_id: int, lecture_id: str, task_id: str, completed: bool) -> None:
        """Mark or unmark one lecture task as completed."""
        lecture = self.lectures[lecture_id]
        task_ids = {item.id for item in self.parsed_tasks(lecture).items}
        if task_id not in task_ids:
            raise KeyError(task_id)
        self.progress.set_task_completed(profile_id, lecture_id, task_id, completed)
        logger.info("Task %s of lecture %s marked %s", task_id, lecture_id, "done" if completed else "not done")

    def lecture_task_progress(self, profile_id: int, lecture_id: str) -> TaskProgress:
        """Return completed vs total tasks, ignoring stale ids from older content."""
        lecture = self.lectures[lecture_id]
        task_ids = {item.id for item in self.parsed_tasks(lecture).items}
        completed = self.progress.completed_task_ids(profile_id, lecture_id) & task_ids
        return TaskProgress(lecture_id=lecture_id, total=len(task_ids), completed=len(completed))

    def skip_tasks_warning(self, profile_id: int) -> bool:
        """Return whether answer reveals skip the warning prompt."""
        return self.progress.get_setting(profile_id, SKIP_TASKS_WARNING_KEY) == "1"

    def set_skip_tasks_warning(self, profile_id: int, value: bool) -> None:
        """Store the answer-reveal warning opt-out."""
        self.progress.set_setting(profile_id, SKIP_TASKS_WARNING_KEY, "1" if value else "0")

    def list_tests(
        self,
        *,
        category: str | None = None,
        difficulty: str | None = None,
        tag: str | None = None,
    ) -> list[Test]:
        """Return tests sorted by title; blank filters match everything."""
        tests = [
            test
            for test in self.tests.values()
            if (not category or category in test.categories)
            and (not difficulty or test.difficulty == difficulty)
            and (not tag or tag in test.tags)
        ]
        return sorted(tests, key=lambda item: (item.title, item.id))

    def test_categories(self) -> list[str]:
        """Return every test category, sorted."""
        return sorted({category for test in self.tests.values() for category in test.categories})

    def test_tags(self) -> list[str]:
        """Return every test tag, sorted."""
        return sorted({tag for test in self.tests.values() for tag in test.tags})

    def get_test(self, test_id: str) -> Test:
        """Get test by id."""
        return self.tests[test_id]

    def submit_test(self, profile_id: int, test: Test, answers: Answers) -> SubmittedTest:
        """Score answers for a test and store the result."""
        result = score_answers(test.questions, answers)
        result_id = self.progress.record_test_result(
            profile_id,
            test.id,
            test.title,
            list(answers),
            result.score,
            result.correct_count,
            result.total_questions,
        )
        logger.info(
            "Test %s submitted: %d%% (%d/%d)",
            test.id,
            result.score,
            result.correct_count,
            result.total_questions,
        )
        return SubmittedTest(result_id=result_id, result=result, test_scores={})

    def build_combined_test(self, test_ids: Sequence[str]) -> CombinedTest:
        """Build a shuffled combined test from unique test ids in the given order."""
        unique_ids = list(dict.fromkeys(item.strip() for item in test_ids if item.strip()))
        tests = [self.tests[test_id] for test_id in unique_ids]
        return build_combined_test(tests, self._rng)

    def submit_combined_test(self, profile_id: int, combined: CombinedTest, answers: Answers) -> SubmittedTest:
        """Score a combined test overall and per source test, then store the result."""
        result = score_answers(combined.test.questions, answers)
        test_scores = calculate_combined_test_scores(combined.test.questions, answers, combined.source_tests)
        result_id = self.progress.record_test_result(
            profile_id,
            combined.test.id,
            combined.test.title,
            list(answers),
            result.score,
            result.correct_count,
            result.total_questions,
            test_scores,
        )
        logger.info(
            "Combined test %s submitted: %d%% (%d/%d)",
            combined.test.id,
            result.score,
            result.correct_count,
            result.total_questions,
        )
        return SubmittedTest(result_id=result_id, result=result, test_scores=test_scores)

    def list_results(self, profile_id: int) -> list[StoredTestResult]:
        """Return test results newest first."""
        return self.progress.list_test_results(profile_id)

    def results_summary(self, profile_id: int) -> ResultsSummary:
        """Average scores for single and combined tests, and the best score per test."""
        results = self.progress.list_test_results(profile_id)
        single = [item for item in results if not item.test_id.startswith(COMBINED_TEST_PREFIX)]
        combined = [item for item in results if item.test_id.startswith(COMBINED_TEST_PREFIX)]

        groups: dict[str, list[StoredTestResult]] = {}
        for item in single:
            groups.setdefault(item.test_id, []).append(item)
        by_test = tuple(
            TestResultGroup(
                test_id=test_id,
                title=attempts[0].title,
                attempts=len(attempts),
                best_score=max(attempt.score for attempt in attempts),
                last_completed_at=attempts[0].completed_at,
            )
            for test_id, attempts in groups.items()
        )
        return ResultsSummary(
            attempts=len(single),
            average_score=average_score([item.score for item in single]),
            combined_attempts=len(combined),
            combined_average_score=average_score([item.score for item in combined]),
            by_test=by_test,
        )

    def list_test_lists(self, profile_id: int) -> list[TestList]:
        """Return the profile's test lists, newest first."""
        return self.progress.list_test_lists(profile_id)

    def get_test_list(self, profile_id: int, list_id: int) -> TestList:
        """Get one of the profile's test lists."""
        test_list = self.progress.get_test_list(profile_id, list_id)
        if test_list is None:
            raise KeyError(list_id)
        return test_list

    def create_test_list(self, profile_id: int, name: str) -> TestList:
        """Create a named test list."""
        name = name.strip()
        if not name:
            raise ValueError("List name is required.")
        test_list = self.progress.create_test_list(profile_id, name)
        logger.info("Test list %s created for profile %s", test_list.id, profile_id)
        return test_list

    def delete_test_list(self, profile_id: int, list_id: int) -> bool:
        """Delete one of the profile's test lists."""
        return self.progress.delete_test_list(profile_id, list_id)

    def add_test_to_list(self, profile_id: int, list_id: int, test_id: str) -> bool:
        """Append a test to a list; False when the list already holds it."""
        self.get_test_list(profile_id, list_id)
        if test_id not in self.tests:
            raise KeyError(test_id)
        return self.progress.add_test_to_list(list_id, test_id)

    def remove_test_from_list(self, profile_id: int, list_id: int, test_id: str) -> bool:
        """Remove a test from a list."""
        self.get_test_list(profile_id, list_id)
        return self.progress.remove_test_from_list(list_id, test_id)

    def build_list_combined_test(self, profile_id: int, list_id: int) -> CombinedTest:
        """Build a combined test from the tests of a list, skipping tests no longer bundled."""
        test_list = self.get_test_list(profile_id, list_id)
        return self.build_combined_test([test_id for test_id in test_list.test_ids if test_id in self.tests])

    def close(self) -> None:
        """Close resources."""
        self.progress.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort cleanup for test/process teardown."""
        try:
            self.close()
        except Exception:
            pass
