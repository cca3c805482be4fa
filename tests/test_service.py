import random
from dataclasses import replace

import pytest

from lectureprep.service import LearnService


def test_profiles_via_service(service: LearnService) -> None:
    profile = service.create_profile("  padded  ")
    assert profile.name == "padded"
    assert [item.name for item in service.list_profiles()] == ["padded"]
    assert service.delete_profile(profile.id) is True
    assert service.list_profiles() == []


def test_lectures_sorted_by_title(service: LearnService) -> None:
    titles = [lecture.title for lecture in service.list_lectures()]
    assert titles == sorted(titles)


def test_available_tabs_skip_blank_content(service: LearnService) -> None:
    methods = service.get_lecture("http-methods")
    codes = service.get_lecture("status-codes")
    assert service.available_tabs(methods) == ["lecture", "scenarios", "example", "tasks"]
    assert service.available_tabs(codes) == ["lecture", "example", "tasks"]

    bare = replace(codes, example_content="  \n", tasks_content="")
    assert service.available_tabs(bare) == ["lecture"]


def test_lecture_tab_content(service: LearnService) -> None:
    lecture = service.get_lecture("http-methods")
    assert service.lecture_tab_content(lecture, "lecture") == lecture.content
    assert service.lecture_tab_content(lecture, "tasks") == lecture.tasks_content
    with pytest.raises(KeyError):
        service.lecture_tab_content(lecture, "comments")


def test_unknown_lecture_raises(service: LearnService) -> None:
    with pytest.raises(KeyError):
        service.get_lecture("nope")


def test_task_completion_and_progress(service: LearnService) -> None:
    profile = service.create_profile("p")
    assert service.lecture_task_progress(profile.id, "http-methods").completed == 0

    service.set_task_completed(profile.id, "http-methods", "task-2", True)
    progress = service.lecture_task_progress(profile.id, "http-methods")
    assert (progress.completed, progress.total) == (1, 3)
    assert service.completed_task_ids(profile.id, "http-methods") == {"task-2"}

    service.set_task_completed(profile.id, "http-methods", "task-2", False)
    assert service.completed_task_ids(profile.id, "http-methods") == set()


def test_task_completion_rejects_unknown_ids(service: LearnService) -> None:
    profile = service.create_profile("p")
    with pytest.raises(KeyError):
        service.set_task_completed(profile.id, "http-methods", "task-99", True)
    with pytest.raises(KeyError):
        service.set_task_completed(profile.id, "missing-lecture", "task-1", True)


def test_stale_task_marks_are_not_counted(service: LearnService) -> None:
    profile = service.create_profile("p")
    service.progress.set_task_completed(profile.id, "status-codes", "task-7", True)
    service.set_task_completed(profile.id, "status-codes", "task-1", True)
    progress = service.lecture_task_progress(profile.id, "status-codes")
    assert (progress.completed, progress.total) == (1, 2)


def test_skip_tasks_warning_setting(service: LearnService) -> None:
    profile = service.create_profile("p")
    assert service.skip_tasks_warning(profile.id) is False
    service.set_skip_tasks_warning(profile.id, True)
    assert service.skip_tasks_warning(profile.id) is True
    service.set_skip_tasks_warning(profile.id, False)
    assert service.skip_tasks_warning(profile.id) is False


def test_lecture_for_question(service: LearnService) -> None:
    lecture = service.lecture_for_question("q-status-403")
    assert lecture is not None and lecture.id == "status-codes"
    assert service.lecture_for_question("q-status-5xx") is None
    with pytest.raises(KeyError):
        service.lecture_for_question("q-unknown")


def test_submit_test_scores_and_records(service: LearnService) -> None:
    profile = service.create_profile("p")
    test = service.get_test("http-methods")
    answers: list[int | None] = [question.correct_answer for question in test.questions]
    answers[0] = None

    submitted = service.submit_test(profile.id, test, answers)

    assert submitted.result.correct_count == len(test.questions) - 1
    assert submitted.result.score == 75
    results = service.list_results(profile.id)
    assert len(results) == 1
    assert results[0].id == submitted.result_id
    assert results[0].test_id == "http-methods"
    assert results[0].answers == answers


def test_combined_test_dedupes_ids_and_scores_per_test() -> None:
    service = LearnService(":memory:", rng=random.Random(3))
    try:
        profile = service.create_profile("p")
        combined = service.build_combined_test(["http-methods", " status-codes ", "http-methods", ""])
        assert combined.test.id == "combined_http-methods_status-codes"
        assert len(combined.test.questions) == 6
        shared = next(question for question in combined.test.questions if question.id == "q-http-201")
        assert shared.source_test_ids == ("http-methods", "status-codes")

        answers = [question.correct_answer for question in combined.test.questions]
        submitted = service.submit_combined_test(profile.id, combined, answers)
        assert submitted.result.score == 100
        assert submitted.test_scores["http-methods"].total == 4
        assert submitted.test_scores["status-codes"].total == 3

        stored = service.list_results(profile.id)[0]
        assert stored.test_id == combined.test.id
        assert stored.test_scores["status-codes"].correct == 3
    finally:
        service.close()


def test_combined_test_unknown_id_raises(service: LearnService) -> None:
    with pytest.raises(KeyError):
        service.build_combined_test(["http-methods", "nope"])


def test_list_tests_filters() -> None:
    service = LearnService(":memory:")
    try:
        assert [test.id for test in service.list_tests(difficulty="beginner")] == ["http-methods"]
        assert [test.id for test in service.list_tests(tag="qa-engineer")] == ["status-codes"]
        assert [test.id for test in service.list_tests(category="api", tag="system-analyst")] == [
            "http-methods",
            "status-codes",
        ]
        assert service.list_tests(category="api", difficulty="advanced") == []
        assert len(service.list_tests(category="", tag=None)) == len(service.tests)
        assert "api" in service.test_categories()
        assert service.test_tags() == sorted(set(service.test_tags()))
    finally:
        service.close()


def test_list_lectures_filters(service: LearnService) -> None:
    assert [lecture.id for lecture in service.list_lectures(category="backend")] == ["http-methods"]
    assert [lecture.id for lecture in service.list_lectures(category="qa-engineer")] == ["status-codes"]
    assert len(service.list_lectures(topic="api")) == 2
    assert service.list_lectures(topic="frontend") == []
    assert "system-analyst" in service.lecture_categories()


def test_results_summary_groups_single_tests(service: LearnService) -> None:
    profile = service.create_profile("p")
    methods = service.get_test("http-methods")
    correct = [question.correct_answer for question in methods.questions]
    service.submit_test(profile.id, methods, [None] * len(correct))
    service.submit_test(profile.id, methods, correct)
    codes = service.get_test("status-codes")
    service.submit_test(profile.id, codes, [codes.questions[0].correct_answer])

    combined = service.build_combined_test(["http-methods", "status-codes"])
    service.submit_combined_test(profile.id, combined, [None] * len(combined.test.questions))

    summary = service.results_summary(profile.id)
    assert summary.attempts == 3
    assert summary.average_score == 44
    assert summary.combined_attempts == 1
    assert summary.combined_average_score == 0
    groups = {group.test_id: group for group in summary.by_test}
    assert set(groups) == {"http-methods", "status-codes"}
    assert (groups["http-methods"].attempts, groups["http-methods"].best_score) == (2, 100)
    assert (groups["status-codes"].attempts, groups["status-codes"].best_score) == (1, 33)


def test_results_summary_without_results(service: LearnService) -> None:
    profile = service.create_profile("p")
    summary = service.results_summary(profile.id)
    assert (summary.attempts, summary.average_score, summary.combined_attempts) == (0, 0, 0)
    assert summary.by_test == ()


def test_test_lists_feed_combined_test(service: LearnService) -> None:
    profile = service.create_profile("p")
    test_list = service.create_test_list(profile.id, "  Backend prep  ")
    assert test_list.name == "Backend prep"

    assert service.add_test_to_list(profile.id, test_list.id, "status-codes") is True
    assert service.add_test_to_list(profile.id, test_list.id, "http-methods") is True
    assert service.add_test_to_list(profile.id, test_list.id, "http-methods") is False
    assert service.get_test_list(profile.id, test_list.id).test_ids == ("status-codes", "http-methods")

    combined = service.build_list_combined_test(profile.id, test_list.id)
    assert combined.test.id == "combined_status-codes_http-methods"
    assert [source.id for source in combined.source_tests] == ["status-codes", "http-methods"]

    assert service.remove_test_from_list(profile.id, test_list.id, "status-codes") is True
    assert service.build_list_combined_test(profile.id, test_list.id).test.id == "combined_http-methods"


def test_test_list_errors(service: LearnService) -> None:
    profile = service.create_profile("p")
    other = service.create_profile("other")
    test_list = service.create_test_list(profile.id, "Empty")

    with pytest.raises(ValueError):
        service.create_test_list(profile.id, "   ")
    with pytest.raises(ValueError):
        service.build_list_combined_test(profile.id, test_list.id)
    with pytest.raises(KeyError):
        service.add_test_to_list(profile.id, test_list.id, "nope")
    with pytest.raises(KeyError):
        service.add_test_to_list(other.id, test_list.id, "http-methods")
    with pytest.raises(KeyError):
        service.get_test_list(other.id, test_list.id)

    assert service.delete_test_list(profile.id, test_list.id) is True
    assert service.list_test_lists(profile.id) == []
