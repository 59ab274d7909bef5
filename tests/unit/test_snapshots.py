"""Tests for deploy backups and sync snapshots."""

import json
import os
from pathlib import Path

import pytest

from dotctl.backup import (
    BackupManager,
    Snapshot,
    backup_path_for,
    find_deploy_backups,
    move_aside,
)


class TestBackupPathFor:
    """Tests for backup_path_for()."""

    def test_timestamped_sibling(self, tmp_path):
        """Backups sit next to the original."""
        path = tmp_path / "nvim"

        assert backup_path_for(path, 1700000000) == (
            tmp_path / "nvim.backup.1700000000"
        )

    def test_collision_gets_counter(self, tmp_path):
        """A second backup in the same second does not overwrite the first."""
        path = tmp_path / "nvim"
        (tmp_path / "nvim.backup.5").mkdir()
        (tmp_path / "nvim.backup.5.1").mkdir()

        assert backup_path_for(path, 5) == tmp_path / "nvim.backup.5.2"


class TestMoveAside:
    """Tests for move_aside()."""

    def test_unscoped_rename(self, tmp_path, make_tree, tree_contents):
        """The whole destination moves."""
        dest = make_tree(tmp_path / "nvim", {"init.lua": "old"})

        target = move_aside(dest, clock=lambda: 42)

        assert target == tmp_path / "nvim.backup.42"
        assert not dest.exists()
        assert tree_contents(target) == {"init.lua": "old"}

    def test_file_rename(self, tmp_path):
        """Single files are renamed too."""
        dest = tmp_path / ".zshrc"
        dest.write_text("old")

        target = move_aside(dest, clock=lambda: 7)

        assert target.read_text() == "old"
        assert not dest.exists()

    def test_scoped_moves_only_managed(self, tmp_path, make_tree, tree_contents):
        """Unmanaged content stays in place."""
        dest = make_tree(
            tmp_path / ".claude",
            {"settings.local.json": "{}", "commands/a.md": "a", "projects/p": "p"},
        )

        target = move_aside(
            dest,
            scope=lambda rel: not rel.startswith("projects"),
            clock=lambda: 1,
        )

        assert tree_contents(dest) == {"projects/p": "p"}
        assert not (dest / "commands").exists()
        assert tree_contents(target) == {
            "settings.local.json": "{}",
            "commands/a.md": "a",
        }

    @pytest.mark.skipif(os.name == "nt", reason="POSIX symlinks")
    def test_scoped_moves_links(self, tmp_path, make_tree):
        """In-scope links move as links, even when they dangle."""
        dest = make_tree(tmp_path / ".claude", {"projects/p": "p"})
        (dest / "settings.local.json").symlink_to("missing.json")

        target = move_aside(
            dest,
            scope=lambda rel: not rel.startswith("projects"),
            clock=lambda: 1,
        )

        moved = target / "settings.local.json"
        assert moved.is_symlink()
        assert os.readlink(moved) == "missing.json"
        assert not (dest / "settings.local.json").is_symlink()


class TestFindDeployBackups:
    """Tests for find_deploy_backups()."""

    def test_newest_first(self, tmp_path):
        """Backups are ordered by timestamp and counter."""
        for name in ["nvim.backup.10", "nvim.backup.30", "nvim.backup.30.1"]:
            (tmp_path / name).mkdir()
        (tmp_path / "tmux.backup.99").mkdir()

        found = find_deploy_backups(tmp_path / "nvim")

        assert [p.name for p in found] == [
            "nvim.backup.30.1", "nvim.backup.30", "nvim.backup.10",
        ]

    def test_missing_parent(self, tmp_path):
        """No parent directory means no backups."""
        assert find_deploy_backups(tmp_path / "nope" / "nvim") == []


class TestSnapshot:
    """Tests for the Snapshot dataclass."""

    def test_display_time(self):
        """display_time is a human-readable minute."""
        snapshot = Snapshot(
            timestamp="2026-01-25T10:30:00.000",
            reason="test",
            categories=["nvim"],
            path=Path("/tmp/backup"),
        )

        assert snapshot.datetime.year == 2026
        assert snapshot.display_time == "2026-01-25 10:30"


class TestBackupManager:
    """Tests for BackupManager."""

    def test_default_backup_dir(self):
        """Uses ~/.local/share/dotctl/backups by default."""
        manager = BackupManager()

        assert manager.backup_dir == (
            Path.home() / ".local" / "share" / "dotctl" / "backups"
        )

    def test_create_snapshot(self, tmp_path, make_tree, tree_contents):
        """Copies trees and files and writes a manifest."""
        nvim = make_tree(tmp_path / "nvim", {"init.lua": "x"})
        zshrc = tmp_path / ".zshrc"
        zshrc.write_text("z")
        manager = BackupManager(backup_dir=tmp_path / "backups")

        snapshot = manager.create_snapshot(
            {
                "nvim": (nvim, None),
                "zsh": (zshrc, None),
                "tmux": (tmp_path / "missing", None),
            },
            reason="sync from-repo",
        )

        assert snapshot is not None
        assert snapshot.categories == ["nvim", "zsh"]
        assert ":" not in snapshot.path.name
        assert tree_contents(snapshot.path / "nvim") == {"init.lua": "x"}
        assert (snapshot.path / "zsh" / ".zshrc").read_text() == "z"
        manifest = json.loads((snapshot.path / "manifest.json").read_text())
        assert manifest["reason"] == "sync from-repo"
        assert manifest["categories"] == ["nvim", "zsh"]

    def test_snapshot_respects_scope(self, tmp_path, make_tree, tree_contents):
        """Out-of-scope content is not copied into the snapshot."""
        claude = make_tree(tmp_path / ".claude", {"a.md": "a", "big/x": "x"})
        manager = BackupManager(backup_dir=tmp_path / "backups")

        snapshot = manager.create_snapshot(
            {"claude": (claude, lambda rel: not rel.startswith("big"))},
            reason="test",
        )

        assert tree_contents(snapshot.path / "claude") == {"a.md": "a"}

    def test_nothing_to_back_up(self, tmp_path):
        """Returns None and creates nothing when no source exists."""
        manager = BackupManager(backup_dir=tmp_path / "backups")

        assert manager.create_snapshot(
            {"nvim": (tmp_path / "missing", None)}, reason="x"
        ) is None
        assert not (tmp_path / "backups").exists()

    def test_list_and_get(self, tmp_path, make_tree):
        """Snapshots are listed newest first and found by prefix."""
        backups = tmp_path / "backups"
        for stamp in ["2026-01-01T10:00:00.000", "2026-02-01T10:00:00.000"]:
            d = backups / stamp.replace(":", "-")
            d.mkdir(parents=True)
            (d / "manifest.json").write_text(
                json.dumps(
                    {"timestamp": stamp, "reason": "r", "categories": ["nvim"]}
                )
            )
        (backups / "junk").mkdir()
        bad = backups / "bad"
        bad.mkdir()
        (bad / "manifest.json").write_text("{not json")

        manager = BackupManager(backup_dir=backups)
        snapshots = manager.list_snapshots()

        assert [s.timestamp[:7] for s in snapshots] == ["2026-02", "2026-01"]
        assert manager.get_snapshot("2026-01").timestamp.startswith("2026-01")
        assert manager.get_snapshot("2026-01-01 10:00") is not None
        assert manager.get_snapshot("1999") is None
