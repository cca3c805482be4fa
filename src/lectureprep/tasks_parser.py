"""Split a lecture's markdown tasks tab into intro, preparation, and task records.

The tasks tab is free-form markdown with a loose authoring convention:

- an optional intro before the first task,
- an optional ``## Подготовка к заданиям`` preparation section,
- one ``### <title>`` heading per task,
- bold labels inside a task (``**Ответ:**``, ``**Объяснение:**``, ``**Кратко:**``
  and friends) that delimit its answer, explanation, and short summary.

Parsing never raises: any missing section or label leaves the matching field
empty instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from .models import ParsedTasks, TaskItem

TASK_HEADING_RE = re.compile(r"^###\s+(.+)$", re.MULTILINE)
SECTION_HEADING_RE = re.compile(r"^##\s+(.+)$", re.MULTILINE)
_QUOTE_PREFIX_RE = re.compile(r"^>\s*")
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

DEFAULT_TASKS_HEADER = "Задания для практики"
PREVIEW_LABELS = (
    "**Ситуация:**",
    "**Что сделать:**",
    "**Критерий:**",
    "Ситуация:",
    "Что сделать:",
    "Критерий:",
)


@dataclass(frozen=True)
class MarkerTable:
    """Headings and bold labels recognized in a tasks tab.

    ``summary`` and ``details`` are preference lists: the first label found in a
    task wins, even if a later label occurs earlier in the text.
    """

    prep_heading: str = "## Подготовка к заданиям"
    tasks_heading: str = "Задания"
    answer: str = "**Ответ:**"
    explanation: str = "**Объяснение:**"
    summary: tuple[str, ...] = ("**Кратко:**", "**Краткое описание:**", "**Коротко:**")
    details: tuple[str, ...] = (
        "**Полное задание:**",
        "**Полное описание:**",
        "**Подробно:**",
        "**Описание:**",
    )
    default_title: str = "Задание {number}"


DEFAULT_MARKERS = MarkerTable()


def normalize_content(content: str) -> str:
    """Drop a leading BOM and convert CRLF line endings to LF."""
    if content.startswith("\ufeff"):
        content = content[1:]
    return content.replace("\r\n", "\n")


def split_prep_section(text: str, markers: MarkerTable = DEFAULT_MARKERS) -> tuple[str, str]:
    """Return ``(prep, remaining)`` with the preparation section cut out of ``text``."""
    start = text.find(markers.prep_heading)
    if start >= 0:
        line_end = text.find("\n", start)
        if line_end < 0:
            return ("", text)
        boundaries = [index for index in (text.find("\n## ", line_end), text.find("\n### ", line_end)) if index >= 0]
        end = min(boundaries) if boundaries else len(text)
        prep = text[line_end + 1 : end].strip()
        remaining = (text[:start] + text[end:]).strip()
        return (prep, remaining)

    match = _prep_fallback_re(markers.prep_heading, markers.tasks_heading).search(text)
    if match is None:
        return ("", text)
    remaining = (text[: match.start()] + text[match.end() :]).strip()
    return (match.group(1).strip(), remaining)


@lru_cache(maxsize=8)
def _prep_fallback_re(prep_heading: str, tasks_heading: str) -> re.Pattern[str]:
    """Build a tolerant pattern for the preparation heading and its body."""
    title = re.escape(prep_heading.lstrip("#").strip())
    next_section = re.escape(tasks_heading)
    return re.compile(
        rf"(?:^|\n)##\s+{title}[^\n]*\n(.*?)(?=\n##\s+{next_section}|\n###|\Z)",
        re.DOTALL,
    )


def find_task_headings(text: str) -> list[re.Match[str]]:
    """Return level-3 heading matches in source order."""
    return list(TASK_HEADING_RE.finditer(text))


def extract_task_fields(block: str, markers: MarkerTable = DEFAULT_MARKERS) -> tuple[str, str, str, str]:
    """Split one task block into ``(summary, body, answer, explanation)``."""
    block = block.strip()
    body = block
    answer = ""
    explanation = ""
    summary = ""

    answer_index = block.find(markers.answer)
    if answer_index >= 0:
        body = block[:answer_index].strip()
        after_answer = block[answer_index + len(markers.answer) :].strip()
        explanation_index = after_answer.find(markers.explanation)
        if explanation_index >= 0:
            answer = after_answer[:explanation_index].strip()
            explanation = after_answer[explanation_index + len(markers.explanation) :].strip()
        else:
            answer = after_answer

    summary_hit = _find_marker(body, markers.summary)
    details_hit = _find_marker(body, markers.details)
    if summary_hit is not None and details_hit is not None and summary_hit[1] < details_hit[1]:
        summary_marker, summary_index = summary_hit
        details_marker, details_index = details_hit
        summary = body[summary_index + len(summary_marker) : details_index].strip()
        body = body[details_index + len(details_marker) :].strip()

    return (summary, body, answer, explanation)


def _find_marker(text: str, markers: tuple[str, ...]) -> tuple[str, int] | None:
    """Return the first marker from a preference list present in text, with its offset."""
    for marker in markers:
        index = text.find(marker)
        if index >= 0:
            return (marker, index)
    return None


@lru_cache(maxsize=128)
def parse_tasks_content(content: str, markers: MarkerTable = DEFAULT_MARKERS) -> ParsedTasks:
    """Parse a tasks tab into intro, preparation text, and ordered task records."""
    normalized = normalize_content(content)
    prep, remaining = split_prep_section(normalized, markers)

    headings = find_task_headings(remaining)
    if not headings:
        return ParsedTasks(intro=remaining.strip(), prep=prep, items=())

    items: list[TaskItem] = []
    for index, match in enumerate(headings):
        number = index + 1
        end = headings[index + 1].start() if number < len(headings) else len(remaining)
        summary, body, answer, explanation = extract_task_fields(remaining[match.end() : end], markers)
        items.append(
            TaskItem(
                id=f"task-{number}",
                title=match.group(1).strip() or markers.default_title.format(number=number),
                summary=summary,
                body=body,
                answer=answer,
                explanation=explanation,
            )
        )

    return ParsedTasks(intro=remaining[: headings[0].start()].strip(), prep=prep, items=tuple(items))


def task_preview(task: TaskItem) -> str:
    """Return the short text shown for a task in the task list."""
    if task.summary:
        return task.summary

    lines = [_QUOTE_PREFIX_RE.sub("", line, count=1).strip() for line in task.body.split("\n")]
    picked: list[str] = []
    for label in PREVIEW_LABELS:
        line = next((item for item in lines if item.startswith(label)), None)
        if line is not None:
            picked.append(line)
    if picked:
        return "\n".join(picked)

    first_paragraph = _PARAGRAPH_BREAK_RE.split(task.body, maxsplit=1)[0].strip()
    return first_paragraph or task.body


def split_tasks_header(intro: str) -> tuple[str, str]:
    """Return ``(header, intro_body)`` using the intro's first level-2 heading as the header."""
    match = SECTION_HEADING_RE.search(intro)
    if match is None:
        return (DEFAULT_TASKS_HEADER, intro.strip())
    header = match.group(1).strip() or DEFAULT_TASKS_HEADER
    body = (intro[: match.start()] + intro[match.end() :]).strip()
    return (header, body)
