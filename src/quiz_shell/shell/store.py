"""Async quiz store backed by SQLAlchemy.

The store is the single source of truth for quizzes. Every call opens its own
``AsyncSession`` so independent shell sessions can use one store
concurrently; SQLite arbitrates record-level consistency.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.types import Integer, Text

from .errors import FieldValidationError, NotFoundError, StoreError

__all__ = [
    "DEFAULT_QUIZZES",
    "Quiz",
    "QuizDraft",
    "QuizStore",
    "sqlite_url",
]

# SQLite INTEGER is a signed 64-bit value.
_MIN_ID = -(2**63)
_MAX_ID = 2**63 - 1

DEFAULT_QUIZZES: tuple[tuple[str, str], ...] = (
    ("Capital of Italy", "Rome"),
    ("Capital of France", "Paris"),
    ("Capital of Spain", "Madrid"),
    ("Capital of Portugal", "Lisbon"),
)


class Base(DeclarativeBase):
    pass


class QuizRecord(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)


@dataclass(frozen=True)
class Quiz:
    """A stored question/answer pair."""

    id: int
    question: str
    answer: str

    @classmethod
    def from_record(cls, record: QuizRecord) -> "Quiz":
        return cls(
            id=int(record.id),
            question=str(record.question),
            answer=str(record.answer),
        )


class QuizDraft(BaseModel):
    """Field validation applied before a quiz is written."""

    question: str
    answer: str

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        if not value.strip():
            raise PydanticCustomError(
                "blank_field",
                "{label} must not be empty.",
                {"label": info.field_name.capitalize()},
            )
        return value

    @classmethod
    def checked(cls, question: str, answer: str) -> "QuizDraft":
        """Build a draft or raise :class:`FieldValidationError`."""

        try:
            return cls(question=question, answer=answer)
        except ValidationError as exc:
            raise FieldValidationError(
                error["msg"] for error in exc.errors()
            ) from exc


def sqlite_url(path: object) -> str:
    return f"sqlite+aiosqlite:///{path}"


def _storable_id(quiz_id: int) -> bool:
    return _MIN_ID <= quiz_id <= _MAX_ID


class QuizStore:
    """CRUD access to quizzes over an async SQLAlchemy engine."""

    def __init__(
        self,
        url: str,
        *,
        logger: logging.Logger | None = None,
        echo: bool = False,
    ) -> None:
        self._url = url
        self._engine = create_async_engine(url=url, echo=echo)
        self._sessions = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._logger = logger or logging.getLogger(__name__)

    @property
    def url(self) -> str:
        return self._url

    async def initialize(self) -> None:
        """Create the schema when it does not exist yet."""

        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Unable to prepare quiz database: {exc}"
            ) from exc

    async def seed_defaults(
        self, quizzes: Sequence[tuple[str, str]] = DEFAULT_QUIZZES
    ) -> int:
        """Insert ``quizzes`` when the store is empty; return rows added."""

        if await self.count():
            return 0
        try:
            async with self._sessions() as session:
                session.add_all(
                    QuizRecord(question=question, answer=answer)
                    for question, answer in quizzes
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to seed quizzes: {exc}") from exc
        self._logger.info(
            "Seeded default quizzes", extra={"count": len(quizzes)}
        )
        return len(quizzes)

    async def close(self) -> None:
        await self._engine.dispose()

    async def count(self) -> int:
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    select(func.count()).select_from(QuizRecord)
                )
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to count quizzes: {exc}") from exc

    async def find_all(self) -> list[Quiz]:
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    select(QuizRecord).order_by(QuizRecord.id)
                )
                return [Quiz.from_record(row) for row in result.scalars()]
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to load quizzes: {exc}") from exc

    async def find_by_id(self, quiz_id: int) -> Quiz | None:
        if not _storable_id(quiz_id):
            return None
        try:
            async with self._sessions() as session:
                record = await session.get(QuizRecord, quiz_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to load quiz {quiz_id}: {exc}") from exc
        return Quiz.from_record(record) if record is not None else None

    async def create(self, question: str, answer: str) -> Quiz:
        """Persist a new quiz.

        Raises:
            FieldValidationError: question or answer is blank.
            StoreError: the database rejected the write.
        """

        draft = QuizDraft.checked(question, answer)
        try:
            async with self._sessions() as session:
                record = QuizRecord(
                    question=draft.question, answer=draft.answer
                )
                session.add(record)
                await session.commit()
                quiz = Quiz.from_record(record)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to create quiz: {exc}") from exc
        self._logger.info("Created quiz", extra={"quiz_id": quiz.id})
        return quiz

    async def update(self, quiz: Quiz) -> Quiz:
        """Overwrite question and answer of an existing quiz."""

        draft = QuizDraft.checked(quiz.question, quiz.answer)
        if not _storable_id(quiz.id):
            raise NotFoundError(quiz.id)
        try:
            async with self._sessions() as session:
                record = await session.get(QuizRecord, quiz.id)
                if record is None:
                    raise NotFoundError(quiz.id)
                record.question = draft.question
                record.answer = draft.answer
                await session.commit()
                updated = Quiz.from_record(record)
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Unable to update quiz {quiz.id}: {exc}"
            ) from exc
        self._logger.info("Updated quiz", extra={"quiz_id": updated.id})
        return updated

    async def destroy(self, quiz_id: int) -> None:
        """Delete a quiz; unknown ids are ignored."""

        if not _storable_id(quiz_id):
            return
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    delete(QuizRecord).where(QuizRecord.id == quiz_id)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Unable to delete quiz {quiz_id}: {exc}"
            ) from exc
        self._logger.info(
            "Deleted quiz",
            extra={"quiz_id": quiz_id, "rows": result.rowcount},
        )
