from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from lectureprep.service import LearnService  # noqa: E402


@pytest.fixture
def service() -> Iterator[LearnService]:
    """Service over bundled content with an in-memory progress database."""
    instance = LearnService(":memory:")
    try:
        yield instance
    finally:
        instance.close()
