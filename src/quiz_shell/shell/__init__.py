from .commands import COMMANDS, SessionSignal, ShellContext, execute
from .display import Display
from .errors import (
    FieldValidationError,
    GameLoadError,
    MissingParameterError,
    NotANumberError,
    NotFoundError,
    QuizShellError,
    StoreError,
)
from .play import PlayEngine, PlayOutcome, PlayResult, PlaySession
from .prompt import ConsolePrompt, Prompt, StreamPrompt
from .server import QuizServer
from .session import SessionLoop
from .store import Quiz, QuizDraft, QuizStore
from .validation import answers_match, validate_id

__all__ = [
    "COMMANDS",
    "SessionSignal",
    "ShellContext",
    "execute",
    "Display",
    "FieldValidationError",
    "GameLoadError",
    "MissingParameterError",
    "NotANumberError",
    "NotFoundError",
    "QuizShellError",
    "StoreError",
    "PlayEngine",
    "PlayOutcome",
    "PlayResult",
    "PlaySession",
    "ConsolePrompt",
    "Prompt",
    "StreamPrompt",
    "QuizServer",
    "SessionLoop",
    "Quiz",
    "QuizDraft",
    "QuizStore",
    "answers_match",
    "validate_id",
]
