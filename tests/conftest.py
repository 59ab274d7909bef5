"""Shared fixtures for dotctl tests."""

from pathlib import Path

import pytest

from dotctl.system import OS, Environment


def write_tree(root: Path, files: dict) -> Path:
    """Create files (relative path -> text) under root."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def read_tree(root: Path) -> dict:
    """Inverse of write_tree: every file under root with its text."""
    return {
        p.relative_to(root).as_posix(): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """A temporary home directory with XDG config unset."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("USER", "testuser")
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("DOTCTL_REPO", raising=False)
    return home


@pytest.fixture
def linux_env(temp_home):
    """An Environment that looks like Linux, rooted at temp_home."""
    env = Environment()
    env.os = OS.LINUX
    env.home = temp_home
    return env


@pytest.fixture
def make_tree():
    """Factory fixture around write_tree."""
    return write_tree


@pytest.fixture
def tree_contents():
    """Factory fixture around read_tree."""
    return read_tree
