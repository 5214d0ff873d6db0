"""The "play all randomly" game.

A game loads every quiz once, then repeatedly draws one of the remaining
quizzes uniformly at random, removes it, and asks it. A correct answer scores
a point and draws again; the first wrong answer ends the game. Answering every
quiz wins.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .display import Display
from .errors import GameLoadError, StoreError
from .prompt import Prompt
from .store import Quiz
from .validation import answers_match

__all__ = [
    "PlayEngine",
    "PlayOutcome",
    "PlayResult",
    "PlaySession",
]


class QuizSource(Protocol):
    async def find_all(self) -> list[Quiz]: ...


class PlayOutcome(Enum):
    WON = "won"
    LOST = "lost"


@dataclass
class PlaySession:
    """State of one game in progress. Never persisted."""

    remaining: list[Quiz]
    score: int = 0
    asked: list[int] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return not self.remaining

    def draw(self, rng: random.Random) -> Quiz:
        """Remove and return a uniformly chosen remaining quiz."""

        quiz = self.remaining.pop(rng.randrange(len(self.remaining)))
        self.asked.append(quiz.id)
        return quiz


@dataclass(frozen=True)
class PlayResult:
    outcome: PlayOutcome
    score: int
    total: int
    asked: tuple[int, ...]

    @property
    def won(self) -> bool:
        return self.outcome is PlayOutcome.WON


class PlayEngine:
    """Runs one game against a quiz source and a prompt."""

    def __init__(
        self,
        store: QuizSource,
        prompt: Prompt,
        display: Display,
        *,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._prompt = prompt
        self._display = display
        self._rng = rng or random.Random()
        self._logger = logger or logging.getLogger(__name__)
        self.session: PlaySession | None = None

    async def run(self) -> PlayResult:
        """Play until every quiz is answered or one answer is wrong.

        Raises:
            GameLoadError: the quiz set could not be fetched.
        """

        try:
            quizzes = await self._store.find_all()
        except StoreError as exc:
            raise GameLoadError(f"Unable to start the game: {exc}") from exc

        session = PlaySession(remaining=list(quizzes))
        self.session = session
        total = len(quizzes)

        while not session.exhausted:
            quiz = session.draw(self._rng)
            reply = await self._prompt.ask(
                self._display.colorize(f"{quiz.question}? ", "red")
            )
            if not answers_match(reply, quiz.answer):
                return self._finish(session, PlayOutcome.LOST, total)
            session.score += 1
            self._display.log(
                "Correct. Score so far: "
                + self._display.colorize(session.score, "green")
            )

        return self._finish(session, PlayOutcome.WON, total)

    def _finish(
        self, session: PlaySession, outcome: PlayOutcome, total: int
    ) -> PlayResult:
        result = PlayResult(
            outcome=outcome,
            score=session.score,
            total=total,
            asked=tuple(session.asked),
        )
        self._logger.info(
            "Game finished",
            extra={
                "outcome": outcome.value,
                "score": result.score,
                "total": total,
            },
        )
        return result
