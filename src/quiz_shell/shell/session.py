"""Read-dispatch-prompt loop shared by the local shell and the server."""

from __future__ import annotations

from .commands import SessionSignal, ShellContext, execute
from .errors import QuizShellError

__all__ = ["SessionLoop", "PROMPT_TEXT"]

PROMPT_TEXT = "[bold blue]quiz >[/bold blue] "


class SessionLoop:
    """Drive one interactive session until ``quit`` or end of input."""

    def __init__(
        self,
        ctx: ShellContext,
        *,
        prompt_text: str = PROMPT_TEXT,
        banner: str | None = "Quiz Shell",
    ) -> None:
        self.ctx = ctx
        self.prompt_text = prompt_text
        self.banner = banner
        self.commands_run = 0

    async def run(self) -> None:
        display = self.ctx.display
        if self.banner:
            display.biglog(self.banner, "green")
            display.log(
                "Type " + display.colorize("help", "green") + " for commands."
            )
        self.ctx.logger.info("Session started")

        while True:
            try:
                line = await self.ctx.prompt.ask(self.prompt_text)
            except EOFError:
                display.log("")
                break
            except QuizShellError as exc:
                self.ctx.logger.info(
                    "Prompt rejected input",
                    extra={"error": type(exc).__name__},
                )
                display.errorlog(str(exc))
                continue
            signal = await execute(self.ctx, line)
            self.commands_run += 1
            if signal is SessionSignal.CLOSE:
                break

        display.log("Bye!")
        self.ctx.logger.info(
            "Session closed", extra={"commands_run": self.commands_run}
        )
