"""CLI entrypoint for the lecture and test practice app."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from .logs import setup_logging
from .models import DIFFICULTIES, CombinedTest, Lecture, ParsedTasks, Question, TaskItem, Test
from .service import LearnService
from .tasks_parser import parse_tasks_content, split_tasks_header, task_preview

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
DEFAULT_DB_PATH = Path(".lectureprep") / "progress.db"
MENU_QUIT_COMMANDS = {"q"}
MENU_BACK_COMMANDS = {"b"}
FLOW_EXIT_COMMANDS = {":quit", ":exit", ":q", ":back", ":b"}
TAB_LABELS = {"lecture": "Lecture", "scenarios": "Scenarios", "example": "Example", "tasks": "Tasks"}
TEST_MODES = {"1": "learning", "2": "exam"}

logger = logging.getLogger(__name__)


class QuitApp(Exception):
    """Signal immediate app exit from nested menu flows."""


def _service(db_path: Path | str = DEFAULT_DB_PATH) -> LearnService:
    """Create app service with local database path."""
    return LearnService(db_path=db_path)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="lectureprep", description="Lectures, practice tasks, and tests")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "tasks"])
    parser.add_argument("path", nargs="?", help="markdown tasks file for the tasks command")
    parser.add_argument("--json", action="store_true", help="print parsed tasks as JSON")
    parser.add_argument("--db", default=str(DEFAULT_DB_PATH), help="progress database path")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "tasks":
        if not args.path:
            parser.error("the tasks command requires a file path")
        return tasks_command(args.path, as_json=args.json)
    try:
        return play_shell(db_path=Path(args.db))
    except (RuntimeError, sqlite3.Error) as exc:
        logger.error("Progress database %s failed: %s", args.db, exc)
        print(f"Could not use progress database {args.db}: {exc}")
        return 1


def tasks_command(path: str, *, as_json: bool = False, print_fn: PrintFn = print) -> int:
    """Parse a markdown tasks file and print its structure."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read %s: %s", path, exc)
        print_fn(f"Could not read tasks file: {exc}")
        return 1

    parsed = parse_tasks_content(content)
    if as_json:
        payload = {"intro": parsed.intro, "prep": parsed.prep, "items": [asdict(item) for item in parsed.items]}
        print_fn(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    _print_parsed_tasks(parsed, print_fn)
    return 0


def _print_parsed_tasks(parsed: ParsedTasks, print_fn: PrintFn) -> None:
    """Print every field of parsed tasks in reading order."""
    if parsed.intro:
        print_fn(f"Intro:\n{parsed.intro}")
    if parsed.prep:
        print_fn(f"\nPreparation:\n{parsed.prep}")
    print_fn(f"\nTasks: {len(parsed.items)}")
    for item in parsed.items:
        print_fn(f"\n[{item.id}] {item.title}")
        if item.summary:
            print_fn(f"Summary: {item.summary}")
        if item.body:
            print_fn(item.body)
        if item.answer:
            print_fn(f"Answer: {item.answer}")
        if item.explanation:
            print_fn(f"Explanation: {item.explanation}")


def play_shell(input_fn: InputFn = input, print_fn: PrintFn = print, db_path: Path | str = DEFAULT_DB_PATH) -> int:
    """Run persistent menu-driven shell."""
    service = _service(db_path)
    try:
        selected = _select_profile(service, input_fn, print_fn)
        if selected is None:
            return 0
        profile_id, profile_name = selected
        try:
            while True:
                print_fn("\n=== Interview Prep ===")
                print_fn(f"Profile: {profile_name}")
                print_fn("1) Lectures")
                print_fn("2) Tests")
                print_fn("3) Combined test")
                print_fn("4) Results")
                print_fn("5) My lists")
                print_fn("b) Back")
                print_fn("q) Quit")
                choice = input_fn("Choose: ").strip().lower()

                if choice == "1":
                    _lectures_flow(service, profile_id, input_fn, print_fn)
                elif choice == "2":
                    _tests_flow(service, profile_id, input_fn, print_fn)
                elif choice == "3":
                    _combined_test_flow(service, profile_id, input_fn, print_fn)
                elif choice == "4":
                    _results_flow(service, profile_id, print_fn)
                elif choice == "5":
                    _lists_flow(service, profile_id, input_fn, print_fn)
                elif choice in MENU_BACK_COMMANDS:
                    switched = _select_profile(service, input_fn, print_fn)
                    if switched is None:
                        return 0
                    profile_id, profile_name = switched
                elif choice in MENU_QUIT_COMMANDS:
                    return 0
                else:
                    print_fn("Invalid choice.")
        except QuitApp:
            return 0
    finally:
        service.close()


def _select_profile(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> tuple[int, str] | None:
    """Select existing profile or create new one."""
    while True:
        profiles = service.list_profiles()
        print_fn("\n=== Profiles ===")
        if profiles:
            for idx, profile in enumerate(profiles, start=1):
                print_fn(f"{idx}) {profile.name}")
        else:
            print_fn("No profiles yet.")
        print_fn("n) New profile")
        print_fn("d) Delete profile")
        print_fn("q) Quit")

        choice = input_fn("Select profile: ").strip().lower()
        if choice in MENU_QUIT_COMMANDS:
            return None
        if choice == "n":
            name = input_fn("New profile name: ").strip()
            if not name:
                print_fn("Profile name is required.")
                continue
            try:
                created = service.create_profile(name)
            except Exception:
                print_fn("Could not create profile (name may already exist).")
                continue
            return (created.id, created.name)
        if choice == "d":
            _delete_profile_flow(service, input_fn, print_fn)
            continue

        index = _parse_index(choice, len(profiles))
        if index is not None:
            selected = profiles[index]
            return (selected.id, selected.name)

        print_fn("Invalid profile selection.")


def _delete_profile_flow(service: LearnService, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Delete a profile after typed confirmation."""
    profiles = service.list_profiles()
    if not profiles:
        print_fn("No profiles available to delete.")
        return

    print_fn("\nDelete profile")
    for idx, profile in enumerate(profiles, start=1):
        print_fn(f"{idx}) {profile.name}")
    print_fn("b) Back")
    choice = input_fn("Choose profile to delete: ").strip().lower()
    if choice in MENU_BACK_COMMANDS:
        return
    index = _parse_index(choice, len(profiles))
    if index is None:
        print_fn("Invalid choice.")
        return

    target = profiles[index]
    print_fn(f"WARNING: This permanently deletes profile '{target.name}', its task marks, and its test results.")
    confirm = input_fn("Type YES to confirm deletion: ").strip()
    if confirm != "YES":
        print_fn("Deletion cancelled.")
        return
    if service.delete_profile(target.id):
        print_fn(f"Deleted profile '{target.name}'.")
    else:
        print_fn("Profile was not found.")


def _parse_index(choice: str, count: int) -> int | None:
    """Return a zero-based index for a 1-based menu number, or None."""
    if not choice.isdigit():
        return None
    index = int(choice) - 1
    if 0 <= index < count:
        return index
    return None


def _pick_filter(label: str, values: list[str], input_fn: InputFn, print_fn: PrintFn) -> str | None:
    """Pick one filter value by number; blank or invalid input clears the filter."""
    print_fn(f"\nFilter by {label}:")
    for idx, value in enumerate(values, start=1):
        print_fn(f"{idx}) {value}")
    choice = input_fn(f"Choose {label} (blank = any): ").strip()
    if not choice:
        return None
    index = _parse_index(choice, len(values))
    if index is None:
        print_fn("Invalid choice. Filter cleared.")
        return None
    return values[index]


def _menu_choice(input_fn: InputFn, prompt: str) -> str:
    """Read one menu choice, raising QuitApp on the quit command."""
    choice = input_fn(prompt).strip().lower()
    if choice in MENU_QUIT_COMMANDS:
        raise QuitApp()
    return choice


def _lectures_flow(service: LearnService, profile_id: int, input_fn: InputFn, print_fn: PrintFn) -> None:
    """List lectures with task progress and open one."""
    category: str | None = None
    while True:
        lectures = service.list_lectures(category=category)
        print_fn("\n=== Lectures ===")
        if category:
            print_fn(f"Category: {category}")
        if not lectures and not category:
            print_fn("No lectures available.")
            return
        if not lectures:
            print_fn("No lectures match the filter.")
        for idx, lecture in enumerate(lectures, start=1):
            progress = service.lecture_task_progress(profile_id, lecture.id)
            tasks_label = f"tasks {progress.completed}/{progress.total}" if progress.total else "no tasks"
            print_fn(f"{idx:>2}) {lecture.title} [{tasks_label}]")
        print_fn("f) Filter by category")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose lecture: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "f":
            category = _pick_filter("category", service.lecture_categories(), input_fn, print_fn)
            continue
        index = _parse_index(choice, len(lectures))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _lecture_flow(service, profile_id, lectures[index], input_fn, print_fn)


def _lecture_flow(
    service: LearnService, profile_id: int, lecture: Lecture, input_fn: InputFn, print_fn: PrintFn
) -> None:
    """Switch between the tabs of one lecture."""
    tabs = service.available_tabs(lecture)
    while True:
        print_fn(f"\n=== {lecture.title} ===")
        for idx, tab in enumerate(tabs, start=1):
            print_fn(f"{idx}) {TAB_LABELS[tab]}")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose tab: ")
        if choice in MENU_BACK_COMMANDS:
            return
        index = _parse_index(choice, len(tabs))
        if index is None:
            print_fn("Invalid choice.")
            continue
        tab = tabs[index]
        if tab == "tasks":
            _tasks_flow(service, profile_id, lecture, input_fn, print_fn)
        else:
            print_fn("")
            print_fn(service.lecture_tab_content(lecture, tab).strip())


def _tasks_flow(
    service: LearnService, profile_id: int, lecture: Lecture, input_fn: InputFn, print_fn: PrintFn
) -> None:
    """Show the task list of a lecture and open single tasks."""
    parsed = service.parsed_tasks(lecture)
    header, intro_body = split_tasks_header(parsed.intro)
    while True:
        completed = service.completed_task_ids(profile_id, lecture.id)
        print_fn(f"\n=== {header} ===")
        if intro_body:
            print_fn(intro_body)
        if not parsed.items:
            print_fn("No tasks in this lecture.")
        for idx, task in enumerate(parsed.items, start=1):
            mark = "x" if task.id in completed else " "
            print_fn(f"\n{idx}) [{mark}] {task.title}")
            print_fn(task_preview(task))
        if parsed.prep:
            print_fn("\np) Preparation")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose task: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "p" and parsed.prep:
            print_fn("\n=== Preparation ===")
            print_fn(parsed.prep)
            continue
        index = _parse_index(choice, len(parsed.items))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _task_flow(service, profile_id, lecture, parsed.items[index], input_fn, print_fn)


def _task_flow(
    service: LearnService,
    profile_id: int,
    lecture: Lecture,
    task: TaskItem,
    input_fn: InputFn,
    print_fn: PrintFn,
) -> None:
    """Show one task with its answer gated behind a warning."""
    while True:
        print_fn(f"\n=== {task.title} ===")
        print_fn("1) Task")
        print_fn("2) Answer")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "1":
            print_fn("")
            print_fn(task.body or "No task text.")
        elif choice == "2":
            if not _confirm_answer_reveal(service, profile_id, input_fn, print_fn):
                continue
            _show_answer(service, profile_id, lecture, task, input_fn, print_fn)
        else:
            print_fn("Invalid choice.")


def _confirm_answer_reveal(service: LearnService, profile_id: int, input_fn: InputFn, print_fn: PrintFn) -> bool:
    """Ask before revealing an answer unless the profile opted out."""
    if service.skip_tasks_warning(profile_id):
        return True
    print_fn("Try to solve the task before looking at the answer.")
    reply = input_fn("Show the answer? (y = yes, a = always, n = no): ").strip().lower()
    if reply == "a":
        service.set_skip_tasks_warning(profile_id, True)
        return True
    return reply == "y"


def _show_answer(
    service: LearnService,
    profile_id: int,
    lecture: Lecture,
    task: TaskItem,
    input_fn: InputFn,
    print_fn: PrintFn,
) -> None:
    """Print answer and explanation, then record whether the task was solved."""
    print_fn("")
    print_fn(f"Answer: {task.answer or 'No answer provided.'}")
    if task.explanation:
        print_fn(f"Explanation: {task.explanation}")
    reply = input_fn("Did you solve it? (y/n, blank to skip): ").strip().lower()
    if reply in {"y", "n"}:
        service.set_task_completed(profile_id, lecture.id, task.id, reply == "y")
        print_fn("Marked as done." if reply == "y" else "Marked as not done.")


def _choose_mode(input_fn: InputFn, print_fn: PrintFn) -> str | None:
    """Choose learning or exam mode."""
    print_fn("1) Learning mode (answers after each question)")
    print_fn("2) Exam mode (score at the end)")
    print_fn("b) Back")
    choice = _menu_choice(input_fn, "Choose mode: ")
    if choice in MENU_BACK_COMMANDS:
        return None
    mode = TEST_MODES.get(choice)
    if mode is None:
        print_fn("Invalid choice.")
    return mode


def _tests_flow(service: LearnService, profile_id: int, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Pick a test, optionally filtered, and run it."""
    filters: dict[str, str | None] = {"category": None, "difficulty": None, "tag": None}
    while True:
        tests = service.list_tests(**filters)
        active = ", ".join(f"{key} {value}" for key, value in filters.items() if value)
        print_fn("\n=== Tests ===")
        if active:
            print_fn(f"Filters: {active}")
        if not tests and not active:
            print_fn("No tests available.")
            return
        if not tests:
            print_fn("No tests match the filters.")
        for idx, test in enumerate(tests, start=1):
            print_fn(f"{idx:>2}) {test.title} ({test.difficulty}, {len(test.questions)} questions)")
        print_fn("f) Filter")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose test: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "f":
            filters["category"] = _pick_filter("category", service.test_categories(), input_fn, print_fn)
            filters["difficulty"] = _pick_filter("difficulty", list(DIFFICULTIES), input_fn, print_fn)
            filters["tag"] = _pick_filter("tag", service.test_tags(), input_fn, print_fn)
            continue
        index = _parse_index(choice, len(tests))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _run_single_test(service, profile_id, tests[index], input_fn, print_fn)
        return


def _run_single_test(
    service: LearnService, profile_id: int, test: Test, input_fn: InputFn, print_fn: PrintFn
) -> None:
    """Run one test in the chosen mode and store the result."""
    mode = _choose_mode(input_fn, print_fn)
    if mode is None:
        return
    print_fn(f"\nStarting test: {test.title}")
    if test.description:
        print_fn(test.description)
    answers = _run_questions(service, test.questions, mode, input_fn, print_fn)
    if answers is None:
        print_fn("Test abandoned. Nothing was saved.")
        return
    submitted = service.submit_test(profile_id, test, answers)
    result = submitted.result
    print_fn(f"\nScore: {result.score}% ({result.correct_count}/{result.total_questions})")


def _combined_test_flow(service: LearnService, profile_id: int, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Merge several tests into one and report per-test scores."""
    tests = service.list_tests()
    print_fn("\n=== Combined Test ===")
    if not tests:
        print_fn("No tests available.")
        return
    for idx, test in enumerate(tests, start=1):
        print_fn(f"{idx:>2}) {test.title}")
    raw = input_fn("Test numbers separated by commas (b = back): ").strip().lower()
    if raw in MENU_BACK_COMMANDS:
        return
    if raw in MENU_QUIT_COMMANDS:
        raise QuitApp()
    indexes = [_parse_index(part.strip(), len(tests)) for part in raw.split(",") if part.strip()]
    if not indexes or any(index is None for index in indexes):
        print_fn("Invalid selection.")
        return

    combined = service.build_combined_test([tests[index].id for index in indexes if index is not None])
    _run_combined_test(service, profile_id, combined, input_fn, print_fn)


def _run_combined_test(
    service: LearnService, profile_id: int, combined: CombinedTest, input_fn: InputFn, print_fn: PrintFn
) -> None:
    """Run a combined test and print the overall and per-test scores."""
    mode = _choose_mode(input_fn, print_fn)
    if mode is None:
        return
    print_fn(f"\nStarting test: {combined.test.title}")
    print_fn(combined.test.description)
    answers = _run_questions(service, combined.test.questions, mode, input_fn, print_fn)
    if answers is None:
        print_fn("Test abandoned. Nothing was saved.")
        return
    submitted = service.submit_combined_test(profile_id, combined, answers)
    result = submitted.result
    print_fn(f"\nScore: {result.score}% ({result.correct_count}/{result.total_questions})")
    print_fn("By test:")
    for score in submitted.test_scores.values():
        print_fn(f"- {score.title}: {score.score}% ({score.correct}/{score.total})")


def _lists_flow(service: LearnService, profile_id: int, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Manage the profile's test lists."""
    while True:
        test_lists = service.list_test_lists(profile_id)
        print_fn("\n=== My Lists ===")
        if not test_lists:
            print_fn("No lists yet.")
        for idx, test_list in enumerate(test_lists, start=1):
            print_fn(f"{idx:>2}) {test_list.name} ({len(test_list.test_ids)} tests)")
        print_fn("n) New list")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose list: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "n":
            try:
                created = service.create_test_list(profile_id, input_fn("List name: "))
            except ValueError as exc:
                print_fn(str(exc))
                continue
            print_fn(f"Created list '{created.name}'.")
            continue
        index = _parse_index(choice, len(test_lists))
        if index is None:
            print_fn("Invalid choice.")
            continue
        _list_flow(service, profile_id, test_lists[index].id, input_fn, print_fn)


def _list_flow(service: LearnService, profile_id: int, list_id: int, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Show one test list; add or remove tests, start it, or delete it."""
    while True:
        test_list = service.get_test_list(profile_id, list_id)
        print_fn(f"\n=== {test_list.name} ===")
        if not test_list.test_ids:
            print_fn("The list is empty.")
        for idx, test_id in enumerate(test_list.test_ids, start=1):
            title = service.tests[test_id].title if test_id in service.tests else f"{test_id} (unavailable)"
            print_fn(f"{idx:>2}) {title}")
        print_fn("a) Add test")
        print_fn("r) Remove test")
        print_fn("s) Start combined test")
        print_fn("d) Delete list")
        print_fn("b) Back")
        print_fn("q) Quit")
        choice = _menu_choice(input_fn, "Choose: ")
        if choice in MENU_BACK_COMMANDS:
            return
        if choice == "a":
            tests = service.list_tests()
            for idx, test in enumerate(tests, start=1):
                print_fn(f"{idx:>2}) {test.title}")
            index = _parse_index(input_fn("Test to add: ").strip(), len(tests))
            if index is None:
                print_fn("Invalid choice.")
            elif service.add_test_to_list(profile_id, list_id, tests[index].id):
                print_fn(f"Added '{tests[index].title}'.")
            else:
                print_fn("The test is already in the list.")
        elif choice == "r":
            index = _parse_index(input_fn("Number to remove: ").strip(), len(test_list.test_ids))
            if index is None:
                print_fn("Invalid choice.")
            else:
                service.remove_test_from_list(profile_id, list_id, test_list.test_ids[index])
                print_fn("Removed.")
        elif choice == "s":
            try:
                combined = service.build_list_combined_test(profile_id, list_id)
            except ValueError:
                print_fn("Add at least one test first.")
                continue
            _run_combined_test(service, profile_id, combined, input_fn, print_fn)
        elif choice == "d":
            if input_fn(f"Delete list '{test_list.name}'? (y/n): ").strip().lower() == "y":
                service.delete_test_list(profile_id, list_id)
                print_fn("List deleted.")
                return
        else:
            print_fn("Invalid choice.")


def _run_questions(
    service: LearnService,
    questions: list[Question],
    mode: str,
    input_fn: InputFn,
    print_fn: PrintFn,
) -> list[int | None] | None:
    """Ask every question; return chosen option indexes, or None when the user leaves."""
    print_fn("Type :q to leave the test.")
    answers: list[int | None] = []
    for number, question in enumerate(questions, start=1):
        print_fn(f"\nQuestion {number}/{len(questions)}: {question.question}")
        for idx, option in enumerate(question.options, start=1):
            print_fn(f"  {idx}) {option}")
        while True:
            reply = input_fn("Answer: ").strip().lower()
            if reply in FLOW_EXIT_COMMANDS:
                if mode != "exam" or _confirm_exam_exit(input_fn):
                    return None
                continue
            index = _parse_index(reply, len(question.options))
            if index is not None:
                break
            print_fn(f"Enter a number from 1 to {len(question.options)}.")
        answers.append(index)
        if mode == "learning":
            _print_question_feedback(service, question, index, print_fn)
    return answers


def _confirm_exam_exit(input_fn: InputFn) -> bool:
    """Ask before discarding an exam in progress."""
    reply = input_fn("Leave the exam? Your answers will not be saved. (y/n): ").strip().lower()
    return reply == "y"


def _print_question_feedback(service: LearnService, question: Question, index: int, print_fn: PrintFn) -> None:
    """Print correctness, explanation, and the linked lecture in learning mode."""
    if index == question.correct_answer:
        print_fn("Correct.")
    else:
        print_fn(f"Incorrect. Correct answer: {question.options[question.correct_answer]}")
    if question.explanation:
        print_fn(question.explanation)
    lecture = service.lecture_for_question(question.id)
    if lecture is not None:
        print_fn(f"Lecture: {lecture.title}")


def _results_flow(service: LearnService, profile_id: int, print_fn: PrintFn) -> None:
    """Print test results history."""
    results = service.list_results(profile_id)
    print_fn("\n=== Results ===")
    if not results:
        print_fn("No results yet.")
        return
    summary = service.results_summary(profile_id)
    print_fn(f"Tests taken: {summary.attempts}, average score: {summary.average_score}%")
    print_fn(f"Combined tests taken: {summary.combined_attempts}, average score: {summary.combined_average_score}%")
    if summary.by_test:
        print_fn("Best by test:")
        for group in summary.by_test:
            print_fn(f"- {group.title}: best {group.best_score}% ({group.attempts} attempts)")
    print_fn("History:")
    for item in results:
        print_fn(
            f"{_format_local_time(item.completed_at)} {item.score:>3}% "
            f"({item.correct_count}/{item.total_questions}) {item.title}"
        )
        for score in item.test_scores.values():
            print_fn(f"    - {score.title}: {score.score}% ({score.correct}/{score.total})")


def _format_local_time(timestamp: str) -> str:
    """Convert ISO timestamp to local human-readable datetime."""
    try:
        dt = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
