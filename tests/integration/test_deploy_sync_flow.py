"""Integration tests for deploy and sync on real directory trees."""

import subprocess
from pathlib import Path

import pytest

from dotctl.backup import BackupManager, find_deploy_backups
from dotctl.categories import build_categories
from dotctl.compare import identical
from dotctl.deploy import Decision, Deployer
from dotctl.sync import Outcome, Synchronizer


def _init_repo(repo: Path):
    """Create a git work tree with one commit of everything in repo."""
    for args in (
        ["init"],
        ["config", "user.email", "test@test.com"],
        ["config", "user.name", "Test User"],
        ["add", "."],
        ["commit", "-m", "init"],
    ):
        subprocess.run(
            ["git", *args], cwd=repo, check=True, capture_output=True
        )


@pytest.fixture
def setup(tmp_path, linux_env, make_tree):
    """A dotfiles repository and the category table pointing at it."""
    repo = make_tree(
        tmp_path / "dotfiles",
        {
            "config/nvim/init.cfg": "A",
            "config/tmux/tmux.conf": "set -g mouse on\n",
            "config/claude/settings.local.json": "{}\n",
            "config/claude/commands/review.md": "Review\n",
            "shell/.zshrc": "export EDITOR=nvim\n",
            "shell/.bashrc": "export EDITOR=nvim\n",
        },
    )
    categories = build_categories(linux_env, repo)
    return repo, categories


class TestDeployProperties:
    """Deploy behaviour on the real category table."""

    def test_missing_destination_installs_cleanly(self, setup):
        _, categories = setup
        nvim = categories["nvim"]

        result = Deployer().deploy(nvim)

        assert result.decision is Decision.INSTALL
        assert identical(nvim.destination, nvim.repo_path)
        assert find_deploy_backups(nvim.destination) == []

    def test_idempotent(self, setup):
        """Two plain deploys of equal content add no backups."""
        _, categories = setup
        tmux = categories["tmux"]
        deployer = Deployer()
        deployer.deploy(tmux)

        deployer.deploy(tmux)
        deployer.deploy(tmux)

        assert find_deploy_backups(tmux.destination) == []
        assert identical(tmux.destination, tmux.repo_path)

    def test_force_always_backs_up(self, setup):
        _, categories = setup
        zsh = categories["zsh"]
        deployer = Deployer()
        deployer.deploy(zsh)

        deployer.deploy(zsh, force=True)

        assert len(find_deploy_backups(zsh.destination)) == 1
        assert identical(zsh.destination, zsh.repo_path)

    def test_comparator_symmetric_and_reflexive(self, setup):
        repo, categories = setup
        nvim = categories["nvim"]
        Deployer().deploy(nvim)
        (nvim.destination / "init.cfg").write_text("B")

        assert identical(repo, repo) is True
        assert identical(nvim.repo_path, nvim.destination) == identical(
            nvim.destination, nvim.repo_path
        )


class TestSyncProperties:
    """Sync behaviour on the real category table."""

    def test_to_repo_mirrors_destructively(self, setup, make_tree, tmp_path):
        repo, categories = setup
        nvim = categories["nvim"]
        make_tree(nvim.destination, {"b": "local only"})
        sync = Synchronizer(
            categories, BackupManager(tmp_path / "backups"), repo_dir=repo
        )

        sync.to_repo(["nvim"])

        assert (nvim.repo_path / "b").exists()
        assert not (nvim.repo_path / "init.cfg").exists()

    def test_from_repo_preserves_local_edits(self, setup, make_tree, tmp_path):
        repo, categories = setup
        claude = categories["claude"]
        make_tree(
            claude.destination,
            {"settings.local.json": "{\"mine\": true}\n", "projects/p": "x"},
        )
        sync = Synchronizer(
            categories, BackupManager(tmp_path / "backups"), repo_dir=repo
        )

        snapshot, results = sync.from_repo(["claude"])

        assert results[0].outcome is Outcome.SYNCED
        assert (claude.destination / "settings.local.json").read_text() == (
            "{\"mine\": true}\n"
        )
        assert (claude.destination / "commands" / "review.md").exists()
        # projects/ is outside the managed entries and survives pruning
        assert (claude.destination / "projects" / "p").exists()
        assert snapshot.categories == ["claude"]


def test_end_to_end_scenario(setup, tmp_path):
    """Deploy, drift, redeploy, then push local edits to the repository."""
    repo, categories = setup
    _init_repo(repo)
    nvim = categories["nvim"]
    deployer = Deployer()
    sync = Synchronizer(
        categories, BackupManager(tmp_path / "backups"), repo_dir=repo
    )
    local_cfg = nvim.destination / "init.cfg"
    repo_cfg = nvim.repo_path / "init.cfg"

    deployer.deploy(nvim)
    assert local_cfg.read_text() == "A"
    assert find_deploy_backups(nvim.destination) == []

    local_cfg.write_text("B")
    result = deployer.deploy(nvim)
    backups = find_deploy_backups(nvim.destination)
    assert result.decision is Decision.OVERWRITE
    assert backups == [result.backup]
    assert (result.backup / "init.cfg").read_text() == "B"
    assert local_cfg.read_text() == "A"
    assert repo_cfg.read_text() == "A"

    sync.to_repo(["nvim"])
    assert repo_cfg.read_text() == "A"
    assert sync.status().clean is True

    local_cfg.write_text("C")
    results = sync.to_repo(["nvim"])
    assert results[0].copied == ["init.cfg"]
    assert repo_cfg.read_text() == "C"

    status = sync.status()
    assert status.clean is False
    assert any("init.cfg" in line for line in status.changes)
