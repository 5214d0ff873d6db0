"""Configuration loader for the quiz shell and server."""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from quiz_shell.core import config as core_config
from quiz_shell.core import workspace as workspace_mod

from .store import sqlite_url

CONFIG_FILENAME = "quiz_shell.toml"
CONFIG_ENV = "QUIZ_SHELL_CONFIG"
ENV_PREFIX = "QUIZ_SHELL_"
DATABASE_FILENAME = "quizzes.sqlite"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_DEFAULTS: dict[str, Any] = {
    "storage": {"database_url": "", "seed_defaults": True},
    "server": {"host": "127.0.0.1", "port": 3030},
    "display": {"color": True},
    "logging": {"level": "INFO", "verbose": False},
}


class QuizShellConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class StorageConfig:
    database_url: str
    seed_defaults: bool


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int


@dataclass(frozen=True)
class DisplayConfig:
    color: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class QuizShellConfig:
    storage: StorageConfig
    server: ServerConfig
    display: DisplayConfig
    logging: LoggingConfig


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env and file values."""

    database_url: Optional[str] = None
    seed_defaults: Optional[bool] = None
    host: Optional[str] = None
    port: Optional[int] = None
    color: Optional[bool] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    """Loaded configuration plus the workspace it was resolved against."""

    config: QuizShellConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults.

    A missing file at the default location means "use defaults"; a missing
    file that was asked for explicitly (flag or ``QUIZ_SHELL_CONFIG``) is an
    error.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizShellConfigError(str(exc)) from exc

    explicit = config_path is not None or bool(
        (env_map.get(CONFIG_ENV) or "").strip()
    )
    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=default_config_path(layout),
    )

    tree = copy.deepcopy(_DEFAULTS)
    loaded_path: Optional[Path] = None
    if requested.exists():
        loaded_path = requested
        try:
            core_config.merge_defaults(tree, core_config.load_toml(requested))
        except core_config.TomlConfigError as exc:
            raise QuizShellConfigError(str(exc)) from exc
    elif explicit:
        raise QuizShellConfigError(f"Config file not found: {requested}")

    _apply_env(tree, env_map)
    _apply_overrides(tree, overrides)
    return LoadResult(
        config=_build_config(tree, layout),
        layout=layout,
        config_path=loaded_path,
    )


def default_config_path(layout: workspace_mod.WorkspaceLayout) -> Path:
    return layout.path_for("config") / CONFIG_FILENAME


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _apply_env(
    tree: MutableMapping[str, Any], env_map: Mapping[str, str]
) -> None:
    def read(key: str) -> Optional[str]:
        raw = env_map.get(f"{ENV_PREFIX}{key}")
        if raw is None:
            return None
        return raw.strip() or None

    database_url = read("DATABASE_URL")
    if database_url is not None:
        tree["storage"]["database_url"] = database_url
    host = read("HOST")
    if host is not None:
        tree["server"]["host"] = host
    port = read("PORT")
    if port is not None:
        try:
            tree["server"]["port"] = int(port)
        except ValueError as exc:
            raise QuizShellConfigError(
                f"{ENV_PREFIX}PORT must be an integer, got {port!r}."
            ) from exc
    level = read("LOG_LEVEL")
    if level is not None:
        tree["logging"]["level"] = level
    if env_map.get("NO_COLOR"):
        tree["display"]["color"] = False


def _apply_overrides(
    tree: MutableMapping[str, Any], overrides: ConfigOverrides
) -> None:
    pairs = (
        ("storage", "database_url", overrides.database_url),
        ("storage", "seed_defaults", overrides.seed_defaults),
        ("server", "host", overrides.host),
        ("server", "port", overrides.port),
        ("display", "color", overrides.color),
        ("logging", "level", overrides.log_level),
        ("logging", "verbose", overrides.verbose),
    )
    for section, key, value in pairs:
        if value is not None:
            tree[section][key] = value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise QuizShellConfigError(f"'{field}' must be a boolean.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise QuizShellConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _build_config(
    tree: Mapping[str, Any], layout: workspace_mod.WorkspaceLayout
) -> QuizShellConfig:
    storage = tree["storage"]
    raw_url = storage["database_url"]
    if not isinstance(raw_url, str):
        raise QuizShellConfigError("'storage.database_url' must be a string.")
    database_url = raw_url.strip() or sqlite_url(
        layout.path_for("data") / DATABASE_FILENAME
    )

    port = tree["server"]["port"]
    if isinstance(port, bool) or not isinstance(port, int):
        raise QuizShellConfigError("'server.port' must be an integer.")
    if not 0 <= port <= 65535:
        raise QuizShellConfigError(
            "'server.port' must be between 0 and 65535."
        )

    level = _require_string(
        tree["logging"]["level"], field="logging.level"
    ).upper()
    if level not in _LEVELS:
        raise QuizShellConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )

    return QuizShellConfig(
        storage=StorageConfig(
            database_url=database_url,
            seed_defaults=_require_bool(
                storage["seed_defaults"], field="storage.seed_defaults"
            ),
        ),
        server=ServerConfig(
            host=_require_string(tree["server"]["host"], field="server.host"),
            port=port,
        ),
        display=DisplayConfig(
            color=_require_bool(
                tree["display"]["color"], field="display.color"
            ),
        ),
        logging=LoggingConfig(
            level=level,
            verbose=_require_bool(
                tree["logging"]["verbose"], field="logging.verbose"
            ),
        ),
    )
