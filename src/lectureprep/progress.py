"""SQLite persistence for profiles, task completion, and test results."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from .models import TestScore

SCHEMA_VERSION = 2


@dataclass(frozen=True)
class Profile:
    """User profile record."""

    id: int
    name: str


@dataclass(frozen=True)
class StoredTestResult:
    """One submitted test as stored for the results history."""

    id: int
    test_id: str
    title: str
    answers: list[int | None]
    score: int
    correct_count: int
    total_questions: int
    test_scores: dict[str, TestScore]
    completed_at: str


@dataclass(frozen=True)
class TestList:
    """Named, ordered selection of tests owned by one profile."""

    __test__ = False

    id: int
    profile_id: int
    name: str
    test_ids: tuple[str, ...]


class ProgressStore:
    """Database access layer for learner progress."""

    def __init__(self, db_path: Path | str) -> None:
        """Initialize database and schema."""
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_path)
        else:
            target = db_path
        self._conn = sqlite3.connect(target)
        self._conn.row_factory = sqlite3.Row
        self._apply_migrations()

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            raise RuntimeError(f"Database schema version {current} is newer than supported {SCHEMA_VERSION}.")

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            elif version == 2:
                self._migrate_to_v2()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )

    def _migrate_to_v1(self) -> None:
        """Create profile, task progress, result, and settings tables."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS profiles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    created_at TEXT NOT NULL
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS lecture_task_progress (
                    profile_id INTEGER NOT NULL,
                    lecture_id TEXT NOT NULL,
                    task_id TEXT NOT NULL,
                    completed_at TEXT NOT NULL,
                    PRIMARY KEY (profile_id, lecture_id, task_id)
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS test_results (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    profile_id INTEGER NOT NULL,
                    test_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    answers TEXT NOT NULL,
                    score INTEGER NOT NULL,
                    correct_count INTEGER NOT NULL,
                    total_questions INTEGER NOT NULL,
                    test_scores TEXT NOT NULL,
                    completed_at TEXT NOT NULL
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    profile_id INTEGER NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (profile_id, key)
                )
                """)

    def _migrate_to_v2(self) -> None:
        """Create user test list tables."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS test_lists (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    profile_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS test_list_items (
                    list_id INTEGER NOT NULL,
                    test_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (list_id, test_id)
                )
                """)

    def list_profiles(self) -> list[Profile]:
        """Return profiles ordered by name."""
        rows = self._conn.execute("SELECT id, name FROM profiles ORDER BY name").fetchall()
        return [Profile(id=int(row["id"]), name=str(row["name"])) for row in rows]

    def create_profile(self, name: str) -> Profile:
        """Create a new profile."""
        now = datetime.now(UTC).isoformat()
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO profiles (name, created_at) VALUES (?, ?)",
                (name, now),
            )
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Could not create profile.")
        return Profile(id=int(row_id), name=name)

    def get_profile(self, profile_id: int) -> Profile | None:
        """Get one profile by id."""
        row = self._conn.execute("SELECT id, name FROM profiles WHERE id = ?", (profile_id,)).fetchone()
        if row is None:
            return None
        return Profile(id=int(row["id"]), name=str(row["name"]))

    def delete_profile(self, profile_id: int) -> bool:
        """Delete profile and all associated progress data."""
        with self._conn:
            self._conn.execute("DELETE FROM lecture_task_progress WHERE profile_id = ?", (profile_id,))
            self._conn.execute("DELETE FROM test_results WHERE profile_id = ?", (profile_id,))
            self._conn.execute("DELETE FROM settings WHERE profile_id = ?", (profile_id,))
            self._conn.execute(
                "DELETE FROM test_list_items WHERE list_id IN (SELECT id FROM test_lists WHERE profile_id = ?)",
                (profile_id,),
            )
            self._conn.execute("DELETE FROM test_lists WHERE profile_id = ?", (profile_id,))
            cursor = self._conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        return cursor.rowcount > 0

    def set_task_completed(self, profile_id: int, lecture_id: str, task_id: str, completed: bool) -> None:
        """Mark a lecture task as done, or clear the mark."""
        with self._conn:
            if completed:
                self._conn.execute(
                    """
                    INSERT INTO lecture_task_progress (profile_id, lecture_id, task_id, completed_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(profile_id, lecture_id, task_id) DO UPDATE SET
                        completed_at = excluded.completed_at
                    """,
                    (profile_id, lecture_id, task_id, datetime.now(UTC).isoformat()),
                )
            else:
                self._conn.execute(
                    "DELETE FROM lecture_task_progress WHERE profile_id = ? AND lecture_id = ? AND task_id = ?",
                    (profile_id, lecture_id, task_id),
                )

    def completed_task_ids(self, profile_id: int, lecture_id: str) -> set[str]:
        """Return completed task ids for one lecture."""
        rows = self._conn.execute(
            "SELECT task_id FROM lecture_task_progress WHERE profile_id = ? AND lecture_id = ?",
            (profile_id, lecture_id),
        ).fetchall()
        return {str(row["task_id"]) for row in rows}

    def record_test_result(
        self,
        profile_id: int,
        test_id: str,
        title: str,
        answers: list[int | None],
        score: int,
        correct_count: int,
        total_questions: int,
        test_scores: dict[str, TestScore] | None = None,
    ) -> int:
        """Store one submitted test and return its row id."""
        scores_payload = {
            key: {"title": value.title, "score": value.score, "correct": value.correct, "total": value.total}
            for key, value in (test_scores or {}).items()
        }
        with self._conn:
            cursor = self._conn.execute(
                """
                INSERT INTO test_results (
                    profile_id,
                    test_id,
                    title,
                    answers,
                    score,
                    correct_count,
                    total_questions,
                    test_scores,
                    completed_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    profile_id,
                    test_id,
                    title,
                    json.dumps(answers),
                    score,
                    correct_count,
                    total_questions,
                    json.dumps(scores_payload, ensure_ascii=False),
                    datetime.now(UTC).isoformat(),
                ),
            )
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Could not record test result.")
        return int(row_id)

    def list_test_results(self, profile_id: int) -> list[StoredTestResult]:
        """Return a profile's test results, newest first."""
        rows = self._conn.execute(
            """
            SELECT id, test_id, title, answers, score, correct_count, total_questions, test_scores, completed_at
            FROM test_results
            WHERE profile_id = ?
            ORDER BY completed_at DESC, id DESC
            """,
            (profile_id,),
        ).fetchall()
        return [
            StoredTestResult(
                id=int(row["id"]),
                test_id=str(row["test_id"]),
                title=str(row["title"]),
                answers=list(json.loads(row["answers"])),
                score=int(row["score"]),
                correct_count=int(row["correct_count"]),
                total_questions=int(row["total_questions"]),
                test_scores={
                    key: TestScore(
                        title=str(value["title"]),
                        score=int(value["score"]),
                        correct=int(value["correct"]),
                        total=int(value["total"]),
                    )
                    for key, value in json.loads(row["test_scores"]).items()
                },
                completed_at=str(row["completed_at"]),
            )
            for row in rows
        ]

    def get_setting(self, profile_id: int, key: str) -> str | None:
        """Return one profile setting value."""
        row = self._conn.execute(
            "SELECT value FROM settings WHERE profile_id = ? AND key = ?",
            (profile_id, key),
        ).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set_setting(self, profile_id: int, key: str, value: str) -> None:
        """Insert or replace one profile setting value."""
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO settings (profile_id, key, value) VALUES (?, ?, ?)
                ON CONFLICT(profile_id, key) DO UPDATE SET value = excluded.value
                """,
                (profile_id, key, value),
            )

    def create_test_list(self, profile_id: int, name: str) -> TestList:
        """Create an empty test list."""
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO test_lists (profile_id, name, created_at) VALUES (?, ?, ?)",
                (profile_id, name, datetime.now(UTC).isoformat()),
            )
        row_id = cursor.lastrowid
        if row_id is None:
            raise RuntimeError("Could not create test list.")
        return TestList(id=int(row_id), profile_id=profile_id, name=name, test_ids=())

    def list_test_lists(self, profile_id: int) -> list[TestList]:
        """Return a profile's test lists, newest first."""
        rows = self._conn.execute(
            "SELECT id FROM test_lists WHERE profile_id = ? ORDER BY created_at DESC, id DESC",
            (profile_id,),
        ).fetchall()
        lists = [self.get_test_list(profile_id, int(row["id"])) for row in rows]
        return [item for item in lists if item is not None]

    def get_test_list(self, profile_id: int, list_id: int) -> TestList | None:
        """Get one test list with its tests in list order, if the profile owns it."""
        row = self._conn.execute(
            "SELECT id, profile_id, name FROM test_lists WHERE id = ? AND profile_id = ?",
            (list_id, profile_id),
        ).fetchone()
        if row is None:
            return None
        items = self._conn.execute(
            "SELECT test_id FROM test_list_items WHERE list_id = ? ORDER BY position",
            (list_id,),
        ).fetchall()
        return TestList(
            id=int(row["id"]),
            profile_id=int(row["profile_id"]),
            name=str(row["name"]),
            test_ids=tuple(str(item["test_id"]) for item in items),
        )

    def delete_test_list(self, profile_id: int, list_id: int) -> bool:
        """Delete a test list and its items."""
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM test_lists WHERE id = ? AND profile_id = ?",
                (list_id, profile_id),
            )
            if cursor.rowcount > 0:
                self._conn.execute("DELETE FROM test_list_items WHERE list_id = ?", (list_id,))
        return cursor.rowcount > 0

    def add_test_to_list(self, list_id: int, test_id: str) -> bool:
        """Append a test to a list; return False when it is already there."""
        with self._conn:
            row = self._conn.execute(
                "SELECT MAX(position) AS last FROM test_list_items WHERE list_id = ?",
                (list_id,),
            ).fetchone()
            position = -1 if row["last"] is None else int(row["last"])
            cursor = self._conn.execute(
                "INSERT OR IGNORE INTO test_list_items (list_id, test_id, position) VALUES (?, ?, ?)",
                (list_id, test_id, position + 1),
            )
        return cursor.rowcount > 0

    def remove_test_from_list(self, list_id: int, test_id: str) -> bool:
        """Remove a test from a list."""
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM test_list_items WHERE list_id = ? AND test_id = ?",
                (list_id, test_id),
            )
        return cursor.rowcount > 0

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass
