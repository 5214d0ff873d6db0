from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable without an editable install
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import WorkspaceBuilder  # noqa: E402
from quiz_shell.shell.store import sqlite_url  # noqa: E402


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """SQLite URL for a fresh database file under the test tmp dir."""

    return sqlite_url(tmp_path / "quizzes.sqlite")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "QUIZ_SHELL_DATA_HOME",
        "QUIZ_SHELL_CONFIG",
        "QUIZ_SHELL_DATABASE_URL",
        "QUIZ_SHELL_HOST",
        "QUIZ_SHELL_PORT",
        "QUIZ_SHELL_LOG_LEVEL",
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("quiz_shell")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
