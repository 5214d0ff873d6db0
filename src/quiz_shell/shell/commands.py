"""Command table and handlers for the quiz shell.

Each handler is an ``async`` workflow over the store, the prompt and the
display. :func:`execute` is the only entry point: it resolves the command,
runs its handler inside one error boundary, and always answers with exactly
one :class:`SessionSignal`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from .display import Display
from .errors import FieldValidationError, NotFoundError, QuizShellError
from .play import PlayEngine
from .prompt import Prompt
from .store import Quiz, QuizStore
from .validation import answers_match, validate_id

__all__ = [
    "COMMANDS",
    "CommandSpec",
    "SessionSignal",
    "ShellContext",
    "execute",
    "lookup",
    "parse_command_line",
]

CREDITS: tuple[str, ...] = ("The quiz-shell maintainers",)


class SessionSignal(Enum):
    """What the session loop should do once a command has finished."""

    PROMPT = "prompt"
    CLOSE = "close"


@dataclass
class ShellContext:
    """Everything a handler may touch during one session."""

    store: QuizStore
    prompt: Prompt
    display: Display
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("quiz_shell")
    )
    rng: random.Random = field(default_factory=random.Random)


Handler = Callable[
    [ShellContext, Sequence[str]], Awaitable[Optional[SessionSignal]]
]


@dataclass(frozen=True)
class CommandSpec:
    """Represents one shell command."""

    name: str
    summary: str
    handler: Handler
    usage: str = ""
    aliases: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        names = "|".join((*self.aliases, self.name))
        return f"{names} {self.usage}".rstrip()


def _first(args: Sequence[str]) -> str | None:
    return args[0] if args else None


def _render_quiz(display: Display, quiz: Quiz) -> str:
    return (
        f"[{display.colorize(quiz.id, 'magenta')}]: "
        f"{display.plain(quiz.question)} "
        f"{display.colorize('=>', 'magenta')} "
        f"{display.plain(quiz.answer)}"
    )


async def _fetch(ctx: ShellContext, raw_id: str | None) -> Quiz:
    quiz_id = validate_id(raw_id)
    quiz = await ctx.store.find_by_id(quiz_id)
    if quiz is None:
        raise NotFoundError(quiz_id)
    return quiz


async def _cmd_help(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    width = max(len(spec.label) for spec in _COMMAND_SPECS)
    display.log("Commands:")
    for spec in _COMMAND_SPECS:
        label = display.colorize(spec.label.ljust(width), "green")
        display.log(f"  {label}  {display.plain(spec.summary)}")


async def _cmd_list(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    quizzes = await ctx.store.find_all()
    if not quizzes:
        display.log("There are no quizzes yet. Use 'add' to create one.")
        return
    for quiz in quizzes:
        display.log(
            f"  [{display.colorize(quiz.id, 'magenta')}]: "
            f"{display.plain(quiz.question)}"
        )


async def _cmd_show(ctx: ShellContext, args: Sequence[str]) -> None:
    quiz = await _fetch(ctx, _first(args))
    ctx.display.log(_render_quiz(ctx.display, quiz))


async def _cmd_add(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    question = await ctx.prompt.ask(
        display.colorize("Enter a question: ", "red")
    )
    answer = await ctx.prompt.ask(
        display.colorize("Enter the answer: ", "red")
    )
    quiz = await ctx.store.create(question, answer)
    display.log(
        f"{display.colorize('Added', 'magenta')} {_render_quiz(display, quiz)}"
    )


async def _cmd_delete(ctx: ShellContext, args: Sequence[str]) -> None:
    await ctx.store.destroy(validate_id(_first(args)))


async def _cmd_edit(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    quiz = await _fetch(ctx, _first(args))
    question = await ctx.prompt.ask(
        display.colorize("Edit the question: ", "red"), default=quiz.question
    )
    answer = await ctx.prompt.ask(
        display.colorize("Edit the answer: ", "red"), default=quiz.answer
    )
    updated = await ctx.store.update(
        replace(quiz, question=question, answer=answer)
    )
    display.log(
        f"Quiz {display.colorize(updated.id, 'magenta')} changed to: "
        f"{display.plain(updated.question)} "
        f"{display.colorize('=>', 'magenta')} {display.plain(updated.answer)}"
    )


async def _cmd_test(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    quiz = await _fetch(ctx, _first(args))
    reply = await ctx.prompt.ask(display.colorize(f"{quiz.question}? ", "red"))
    if answers_match(reply, quiz.answer):
        display.log("Your answer is correct.")
        display.biglog("Correct", "green")
    else:
        display.log("Your answer is incorrect.")
        display.biglog("Incorrect", "red")


async def _cmd_play(ctx: ShellContext, args: Sequence[str]) -> None:
    display = ctx.display
    engine = PlayEngine(
        ctx.store,
        ctx.prompt,
        display,
        rng=ctx.rng,
        logger=ctx.logger,
    )
    result = await engine.run()
    if result.won:
        if result.total:
            display.log("No more questions. You answered them all!")
        else:
            display.log("There are no quizzes to play.")
    else:
        display.log("Incorrect answer. End of game.")
    display.log(
        f"Final score: {display.colorize(result.score, 'magenta')}"
        f" of {result.total}"
    )
    display.biglog(result.score, "magenta")


async def _cmd_credits(ctx: ShellContext, args: Sequence[str]) -> None:
    ctx.display.log("Authors:")
    for author in CREDITS:
        ctx.display.log(ctx.display.plain(author), "green")


async def _cmd_quit(ctx: ShellContext, args: Sequence[str]) -> SessionSignal:
    return SessionSignal.CLOSE


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec("help", "Show this help.", _cmd_help, aliases=("h",)),
    CommandSpec(
        "list", "List the existing quizzes.", _cmd_list, aliases=("ls",)
    ),
    CommandSpec(
        "show", "Show the question and answer of a quiz.", _cmd_show, "<id>"
    ),
    CommandSpec("add", "Add a new quiz interactively.", _cmd_add),
    CommandSpec(
        "delete", "Delete a quiz.", _cmd_delete, "<id>", aliases=("rm",)
    ),
    CommandSpec("edit", "Edit a quiz.", _cmd_edit, "<id>"),
    CommandSpec("test", "Try to answer one quiz.", _cmd_test, "<id>"),
    CommandSpec(
        "play",
        "Answer every quiz in random order until you miss one.",
        _cmd_play,
        aliases=("p",),
    ),
    CommandSpec("credits", "Show the authors.", _cmd_credits),
    CommandSpec("quit", "Leave the shell.", _cmd_quit, aliases=("q", "exit")),
)

COMMANDS: Mapping[str, CommandSpec] = {
    key: spec
    for spec in _COMMAND_SPECS
    for key in (spec.name, *spec.aliases)
}


def lookup(name: str) -> CommandSpec | None:
    return COMMANDS.get(name.lower())


def parse_command_line(line: str | None) -> tuple[str | None, list[str]]:
    """Split ``line`` into a lower-cased command word and its arguments."""

    if line is None:
        return None, []
    words = line.split()
    if not words:
        return None, []
    return words[0].lower(), words[1:]


def _report_error(display: Display, exc: QuizShellError) -> None:
    if isinstance(exc, FieldValidationError):
        display.errorlog("The quiz is invalid:")
        for message in exc.messages:
            display.errorlog(message)
        return
    display.errorlog(str(exc))


async def execute(ctx: ShellContext, line: str | None) -> SessionSignal:
    """Run one command line and return what the session should do next."""

    name, args = parse_command_line(line)
    if name is None:
        return SessionSignal.PROMPT

    spec = lookup(name)
    if spec is None:
        ctx.display.errorlog(f"Unknown command: '{name}'.")
        ctx.display.log(
            f"Use {ctx.display.colorize('help', 'green')} to list commands."
        )
        return SessionSignal.PROMPT

    ctx.logger.debug(
        "Dispatching command", extra={"command": spec.name, "args": args}
    )
    try:
        signal = await spec.handler(ctx, args)
    except EOFError:
        ctx.logger.info(
            "Input closed during command", extra={"command": spec.name}
        )
        return SessionSignal.CLOSE
    except QuizShellError as exc:
        ctx.logger.info(
            "Command failed",
            extra={"command": spec.name, "error": type(exc).__name__},
        )
        _report_error(ctx.display, exc)
        return SessionSignal.PROMPT
    except Exception as exc:
        ctx.logger.exception(
            "Unexpected command failure", extra={"command": spec.name}
        )
        ctx.display.errorlog(f"Unexpected failure: {exc}")
        return SessionSignal.PROMPT

    return signal or SessionSignal.PROMPT
