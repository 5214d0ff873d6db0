"""Shared testing helpers for the quiz_shell test suite."""

from .shell import (  # noqa: F401
    ScriptedPrompt,
    output_of,
    recording_display,
    run_with_store,
)
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "ScriptedPrompt",
    "WorkspaceBuilder",
    "build_tree",
    "output_of",
    "recording_display",
    "run_with_store",
]
