"""Error taxonomy for the quiz shell.

Every error a command can hit derives from :class:`QuizShellError` so the
dispatcher can report it on one line and keep the session alive.
"""

from __future__ import annotations

from typing import Iterable

__all__ = [
    "QuizShellError",
    "MissingParameterError",
    "NotANumberError",
    "NotFoundError",
    "FieldValidationError",
    "StoreError",
    "GameLoadError",
    "InputTooLongError",
]


class QuizShellError(RuntimeError):
    """Base class for recoverable quiz shell failures."""


class MissingParameterError(QuizShellError):
    """Raised when a command that needs ``<id>`` received none."""

    def __init__(self, name: str = "id") -> None:
        super().__init__(f"Missing parameter <{name}>.")
        self.name = name


class NotANumberError(QuizShellError):
    """Raised when ``<id>`` does not start with a decimal number."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Parameter <id> is not a number: {raw!r}.")
        self.raw = raw


class NotFoundError(QuizShellError):
    def __init__(self, quiz_id: int) -> None:
        super().__init__(f"There is no quiz with id={quiz_id}.")
        self.quiz_id = quiz_id


class FieldValidationError(QuizShellError):
    """Raised when a quiz fails field-level validation on create/update."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages: tuple[str, ...] = tuple(messages)
        super().__init__("The quiz is invalid: " + " ".join(self.messages))


class StoreError(QuizShellError):
    """Opaque failure reported by the persistence layer."""


class GameLoadError(QuizShellError):
    """Raised when the quiz set cannot be loaded at the start of a game."""


class InputTooLongError(QuizShellError):
    """Raised when a client sends a line longer than the reader accepts."""

    def __init__(self) -> None:
        super().__init__("Input line too long; it was discarded.")
