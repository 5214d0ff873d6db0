from __future__ import annotations

from pathlib import Path

import pytest

from quiz_shell.core import workspace


def test_fresh_workspace_gets_every_subdirectory(tmp_path, monkeypatch):
    root = tmp_path / "home"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert set(layout.directories) == {"config", "logs", "data"}
    assert all(path.is_dir() for _, path in layout.items())
    assert all(layout.created.values())


def test_second_bootstrap_creates_nothing(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "again")
    again = workspace.ensure_workspace(path=tmp_path / "again")

    assert again.home == layout.home
    assert not any(again.created.values())


def test_explicit_path_beats_environment(tmp_path):
    env = {workspace.WORKSPACE_ENV: str(tmp_path / "from-env")}

    layout = workspace.ensure_workspace(env=env, path=tmp_path / "flag")

    assert layout.home == (tmp_path / "flag").resolve()
    assert not (tmp_path / "from-env").exists()


def test_blank_environment_value_uses_default(monkeypatch, tmp_path):
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", tmp_path / "dflt")

    layout = workspace.ensure_workspace(env={workspace.WORKSPACE_ENV: "  "})

    assert layout.home == (tmp_path / "dflt").resolve()


def test_file_in_place_of_workspace_is_an_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("occupied", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=blocker)


def test_file_in_place_of_subdirectory_is_reported(tmp_path):
    root = tmp_path / "partial"
    root.mkdir()
    (root / "logs").write_text("", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError, match="logs"):
        workspace.ensure_workspace(path=root, create=False)


def test_unknown_directory_key(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "keys", create=False)

    with pytest.raises(KeyError):
        layout.path_for("cache")


def test_unwritable_default_falls_back_to_tempdir(tmp_path, monkeypatch):
    fallback = tmp_path / "fallback"
    monkeypatch.setattr(workspace, "_fallback_base", lambda: fallback)
    real_ensure_dir = workspace._ensure_dir

    def deny_default(path: Path) -> bool:
        if path == workspace.DEFAULT_WORKSPACE.resolve():
            raise PermissionError("read-only home")
        return real_ensure_dir(path)

    monkeypatch.setattr(workspace, "_ensure_dir", deny_default)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == fallback.resolve()


def test_permission_error_everywhere_raises(tmp_path, monkeypatch):
    monkeypatch.setattr(workspace, "_fallback_base", lambda: tmp_path / "fb")

    def deny(path: Path) -> bool:
        raise PermissionError("nope")

    monkeypatch.setattr(workspace, "_ensure_dir", deny)

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(env={})
