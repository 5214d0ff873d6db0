"""Rich-powered output helpers used by every command."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

__all__ = ["Display"]


class Display:
    """Plain, colorized and banner output over a Rich console.

    Text passed to :meth:`log` is Rich markup so callers can embed
    :meth:`colorize` fragments; wrap user-provided text in
    :meth:`Display.plain`. :meth:`errorlog` always prints plain text.
    """

    def __init__(self, console: Console, *, color: bool = True) -> None:
        self.console = console
        self.color = color

    @staticmethod
    def plain(text: object) -> str:
        return escape(str(text))

    def colorize(self, text: object, color: str | None) -> str:
        body = escape(str(text))
        if not color or not self.color:
            return body
        return f"[{color}]{body}[/{color}]"

    def log(self, message: str, color: str | None = None) -> None:
        if color and self.color:
            message = f"[{color}]{message}[/{color}]"
        self.console.print(message, highlight=False)

    def errorlog(self, message: str) -> None:
        prefix = "[bold red]Error:[/bold red]" if self.color else "Error:"
        self.console.print(f"{prefix} {escape(message)}", highlight=False)

    def biglog(self, message: object, color: str | None = None) -> None:
        style = f"bold {color}" if color and self.color else "bold"
        self.console.print(
            Panel(
                Text(str(message).upper(), style=style, justify="center"),
                box=box.DOUBLE,
                border_style=color if color and self.color else "none",
                expand=False,
                padding=(0, 4),
            )
        )
