"""Telnet-style TCP server: one independent shell per connection."""

from __future__ import annotations

import asyncio
import logging
import random

from rich.console import Console

from .commands import ShellContext
from .display import Display
from .prompt import StreamPrompt
from .session import SessionLoop
from .store import QuizStore

__all__ = ["QuizServer", "StreamConsoleFile"]


class StreamConsoleFile:
    """File-like sink that forwards Rich output to a stream writer.

    Bare newlines are sent as CRLF so raw telnet clients render lines
    correctly. Callers drain the writer.
    """

    def __init__(
        self, writer: asyncio.StreamWriter, *, encoding: str = "utf-8"
    ) -> None:
        self._writer = writer
        self._encoding = encoding

    def write(self, text: str) -> int:
        if self._writer.is_closing():
            return 0
        data = text.replace("\r\n", "\n").replace("\n", "\r\n")
        self._writer.write(data.encode(self._encoding, errors="replace"))
        return len(text)

    def flush(self) -> None:
        return None

    def isatty(self) -> bool:
        return False


class QuizServer:
    """Serve the quiz shell to any number of TCP clients.

    Sessions share only the store; every connection owns its console,
    prompt, context and loop.
    """

    def __init__(
        self,
        store: QuizStore,
        *,
        host: str = "127.0.0.1",
        port: int = 3030,
        color: bool = True,
        width: int = 80,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.host = host
        self.port = port
        self.color = color
        self.width = width
        self.logger = logger or logging.getLogger(__name__)
        self._server: asyncio.Server | None = None
        self.active_sessions = 0

    @property
    def sockets(self) -> tuple:
        if self._server is None:
            return ()
        return tuple(self._server.sockets)

    async def start(self) -> None:
        self._server = await asyncio.start_server(
            self.handle_client, self.host, self.port
        )
        bound = [sock.getsockname() for sock in self._server.sockets]
        self.logger.info(
            "Quiz server listening",
            extra={"addresses": [str(item) for item in bound]},
        )

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        assert self._server is not None
        async with self._server:
            await self._server.serve_forever()

    async def close(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    def _make_console(self, writer: asyncio.StreamWriter) -> Console:
        return Console(
            file=StreamConsoleFile(writer),
            force_terminal=self.color,
            no_color=not self.color,
            color_system="standard" if self.color else None,
            width=self.width,
            highlight=False,
        )

    async def handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        peer = str(writer.get_extra_info("peername"))
        self.active_sessions += 1
        self.logger.info("Client connected", extra={"peer": peer})
        console = self._make_console(writer)
        ctx = ShellContext(
            store=self.store,
            prompt=StreamPrompt(reader, writer, console),
            display=Display(console, color=self.color),
            logger=self.logger,
            rng=random.Random(),
        )
        try:
            await SessionLoop(ctx).run()
            await writer.drain()
        except ConnectionError as exc:
            self.logger.info(
                "Client connection lost",
                extra={"peer": peer, "error": str(exc)},
            )
        finally:
            self.active_sessions -= 1
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass
            self.logger.info("Client disconnected", extra={"peer": peer})
