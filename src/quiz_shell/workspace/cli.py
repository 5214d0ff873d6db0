"""``quiz init``: prepare the data home and the default config file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from quiz_shell.core import config_templates
from quiz_shell.core import workspace as workspace_mod
from quiz_shell.core.config_templates import ConfigTemplateError
from quiz_shell.shell.config import default_config_path

TEMPLATE_NAME = "quiz_shell"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz init",
        description=(
            "Bootstrap the quiz-shell workspace, its subdirectories and the "
            "default quiz_shell.toml."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to QUIZ_SHELL_DATA_HOME "
            "or ~/.quiz-shell-data)."
        ),
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing quiz_shell.toml with the template.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _status(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def _write_config(
    layout: workspace_mod.WorkspaceLayout, *, force: bool
) -> tuple[Path, str]:
    target = default_config_path(layout)
    if target.exists() and not force:
        return target, "exists"
    template = config_templates.get_template(TEMPLATE_NAME)
    written = template.write(target, overwrite=force)
    return written, "written"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        config_path, config_status = _write_config(layout, force=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    if args.quiet:
        return 0

    created = layout.created
    lines = [f"Workspace ready at {layout.home} ({_status(created, 'home')})"]
    if layout.directories:
        lines.append("Subdirectories:")
        width = max(len(name) for name in layout.directories)
        for name, directory in layout.items():
            lines.append(
                f"  {name.ljust(width)}  {directory} "
                f"({_status(created, name)})"
            )
    lines.append(f"Config: {config_path} ({config_status})")

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
