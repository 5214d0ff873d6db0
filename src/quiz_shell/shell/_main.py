"""Entry points for ``quiz shell`` and ``quiz serve``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from quiz_shell.core.logging import configure_logger

from .commands import ShellContext
from .config import (
    ConfigOverrides,
    LoadResult,
    QuizShellConfigError,
    load_config,
)
from .display import Display
from .errors import StoreError
from .prompt import ConsolePrompt
from .server import QuizServer
from .session import SessionLoop
from .store import QuizStore

LOGGER_NAME = "quiz_shell"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to QUIZ_SHELL_DATA_HOME).",
    )
    parser.add_argument(
        "--database",
        help="SQLAlchemy async database URL to use instead of the default.",
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Do not insert the sample quizzes into an empty store.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the file logging level (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log records to stderr and log at DEBUG.",
    )


def _build_shell_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz shell",
        description="Manage and play quizzes in an interactive shell.",
        epilog="Type `help` inside the shell to list its commands.",
    )
    _add_common_arguments(parser)
    return parser


def _build_serve_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz serve",
        description=(
            "Serve the quiz shell over TCP; every telnet connection gets its "
            "own session."
        ),
    )
    _add_common_arguments(parser)
    parser.add_argument("--host", help="Interface to bind (127.0.0.1).")
    parser.add_argument(
        "--port", type=int, help="TCP port to listen on (3030)."
    )
    return parser


def _overrides_from_args(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        database_url=args.database,
        seed_defaults=False if args.no_seed else None,
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        color=False if args.no_color else None,
        log_level=args.log_level,
        verbose=True if args.verbose else None,
    )


def _bootstrap(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> tuple[LoadResult, logging.Logger, Path]:
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=_overrides_from_args(args),
            workspace_path=args.workspace,
        )
    except QuizShellConfigError as exc:
        parser.error(str(exc))

    logging_config = load_result.config.logging
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=logging_config.level,
        verbose=logging_config.verbose,
    )
    logger.debug(
        "Configuration loaded",
        extra={
            "config_path": load_result.config_path,
            "database_url": load_result.config.storage.database_url,
        },
    )
    return load_result, logger, log_path


async def _open_store(
    load_result: LoadResult, logger: logging.Logger
) -> QuizStore:
    storage = load_result.config.storage
    store = QuizStore(storage.database_url, logger=logger)
    try:
        await store.initialize()
        if storage.seed_defaults:
            await store.seed_defaults()
    except StoreError:
        await store.close()
        raise
    return store


async def _run_shell(
    load_result: LoadResult, logger: logging.Logger, console: Console
) -> None:
    store = await _open_store(load_result, logger)
    try:
        color = load_result.config.display.color
        ctx = ShellContext(
            store=store,
            prompt=ConsolePrompt(console),
            display=Display(console, color=color),
            logger=logger,
            rng=random.Random(),
        )
        await SessionLoop(ctx).run()
    finally:
        await store.close()


async def _run_server(
    load_result: LoadResult, logger: logging.Logger, console: Console
) -> None:
    store = await _open_store(load_result, logger)
    config = load_result.config
    server = QuizServer(
        store,
        host=config.server.host,
        port=config.server.port,
        color=config.display.color,
        logger=logger,
    )
    try:
        await server.start()
        for sock in server.sockets:
            host, port = sock.getsockname()[:2]
            console.print(f"Quiz server listening on {host}:{port}")
        await server.serve_forever()
    finally:
        await server.close()
        await store.close()


def _make_console(load_result: LoadResult) -> Console:
    color = load_result.config.display.color
    return Console(no_color=not color, highlight=False)


def shell_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_shell_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    load_result, logger, log_path = _bootstrap(parser, args)
    console = _make_console(load_result)

    try:
        asyncio.run(_run_shell(load_result, logger, console))
    except StoreError as exc:
        logger.error("Quiz store unavailable", extra={"error": str(exc)})
        sys.stderr.write(f"{exc}\nSee {log_path} for details.\n")
        return 1
    except KeyboardInterrupt:
        console.print()
        logger.info("Shell interrupted")
        return 130
    return 0


def serve_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_serve_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    load_result, logger, log_path = _bootstrap(parser, args)
    console = _make_console(load_result)

    try:
        asyncio.run(_run_server(load_result, logger, console))
    except StoreError as exc:
        logger.error("Quiz store unavailable", extra={"error": str(exc)})
        sys.stderr.write(f"{exc}\nSee {log_path} for details.\n")
        return 1
    except OSError as exc:
        logger.error("Unable to start server", extra={"error": str(exc)})
        sys.stderr.write(f"Unable to start server: {exc}\n")
        return 1
    except KeyboardInterrupt:
        logger.info("Server stopped")
        console.print("Server stopped.")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(shell_main())
