"""Git queries against the dotfiles repository."""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class RepoStatus:
    path: Path
    is_repo: bool
    changes: List[str] = field(default_factory=list)
    error: str = ""

    @property
    def clean(self) -> bool:
        return self.is_repo and not self.changes and not self.error


class GitRepo:
    """Thin wrapper around the git CLI for a regular working tree."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def run(
        self, *args: str, check: bool = True, timeout: int = 30
    ) -> subprocess.CompletedProcess:
        cmd = ["git", "-C", str(self.path)] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd, capture_output=True, text=True, check=check, timeout=timeout
        )

    def is_repo(self) -> bool:
        if not self.path.is_dir():
            return False
        try:
            result = self.run("rev-parse", "--is-inside-work-tree", check=False)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"git not usable: {e}")
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def status(self) -> RepoStatus:
        """Uncommitted changes in the working tree."""
        if not self.is_repo():
            return RepoStatus(path=self.path, is_repo=False)

        try:
            result = self.run("status", "--porcelain")
        except subprocess.CalledProcessError as e:
            return RepoStatus(
                path=self.path, is_repo=True, error=(e.stderr or "").strip()
            )

        changes = [line for line in result.stdout.splitlines() if line.strip()]
        return RepoStatus(path=self.path, is_repo=True, changes=changes)
