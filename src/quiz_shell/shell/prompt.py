"""Prompt services: one question in, one trimmed answer out.

Two implementations share the :class:`Prompt` protocol. ``ConsolePrompt``
reads from the local terminal and can pre-fill an editable default through
``readline``. ``StreamPrompt`` talks to a socket client; since a raw telnet
client has no line editor, the default is shown in brackets and an empty
reply keeps it.

Both raise :class:`EOFError` once input is closed. ``StreamPrompt`` raises
:class:`~quiz_shell.shell.errors.InputTooLongError` for a line over the
reader limit; the rest of the stream stays usable.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from rich.console import Console
from rich.markup import escape

from .errors import InputTooLongError

try:
    import readline
except ImportError:  # pragma: no cover - platform without GNU readline
    readline = None

__all__ = ["Prompt", "ConsolePrompt", "StreamPrompt"]


class Prompt(Protocol):
    async def ask(self, text: str, *, default: str | None = None) -> str:
        """Show ``text`` (Rich markup) and return the trimmed reply."""


def _bracket_hint(text: str, default: str | None) -> str:
    if default is None:
        return text
    return f"{text}[dim]\\[{escape(default)}][/dim] "


def _keep_default(answer: str, default: str | None) -> str:
    answer = answer.strip()
    if not answer and default is not None:
        return default.strip()
    return answer


class ConsolePrompt:
    """Terminal prompt reading through ``Console.input``.

    The read blocks the event loop. The local shell runs exactly one session,
    so nothing else is waiting, and Ctrl-C interrupts ``input()`` directly.
    """

    def __init__(self, console: Console) -> None:
        self._console = console

    @property
    def supports_prefill(self) -> bool:
        return readline is not None and self._console.is_terminal

    async def ask(self, text: str, *, default: str | None = None) -> str:
        return self._read(text, default)

    def _read(self, text: str, default: str | None) -> str:
        if default is None:
            return self._console.input(text).strip()
        if not self.supports_prefill:
            raw = self._console.input(_bracket_hint(text, default))
            return _keep_default(raw, default)
        readline.set_startup_hook(lambda: readline.insert_text(default))
        try:
            return self._console.input(text).strip()
        finally:
            readline.set_startup_hook()


class StreamPrompt:
    """Prompt over an asyncio stream pair (one connected client)."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        console: Console,
        *,
        encoding: str = "utf-8",
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._console = console
        self._encoding = encoding

    async def ask(self, text: str, *, default: str | None = None) -> str:
        self._console.print(_bracket_hint(text, default), end="")
        await self._writer.drain()
        try:
            line = await self._reader.readline()
        except ValueError as exc:
            raise InputTooLongError() from exc
        if not line:
            raise EOFError("connection closed")
        return _keep_default(
            line.decode(self._encoding, errors="replace"), default
        )
