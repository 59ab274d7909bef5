"""Bidirectional sync between the repository and local configuration.

Pushing (``to-repo``) mirrors the local side into the repository
destructively. Pulling (``from-repo``) only adds what is missing locally
and never overwrites a local file, so uncommitted local edits survive.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .backup import BackupManager, Snapshot
from .categories import ConfigCategory
from .compare import TreeDiff, compare, unified_diff
from .deploy import MissingSourceError, describe_error
from .transfer import TransferResult, merge_tree, mirror_tree
from .vcs import GitRepo, RepoStatus

logger = logging.getLogger(__name__)


class SyncDirection(Enum):
    TO_REPO = "to-repo"
    FROM_REPO = "from-repo"


class Outcome(Enum):
    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"


class UnknownCategoryError(ValueError):
    def __init__(self, names: Iterable[str], known: Iterable[str]):
        self.names = list(names)
        super().__init__(
            f"Unknown categor{'y' if len(self.names) == 1 else 'ies'}: "
            f"{', '.join(self.names)} (known: {', '.join(known)})"
        )


@dataclass
class SyncResult:
    category: ConfigCategory
    direction: SyncDirection
    outcome: Outcome
    copied: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED


@dataclass
class DiffReport:
    category: ConfigCategory
    diff: Optional[TreeDiff] = None
    missing: List[Path] = field(default_factory=list)
    text: List[str] = field(default_factory=list)
    error: str = ""

    @property
    def identical(self) -> bool:
        return (
            not self.missing
            and not self.error
            and self.diff is not None
            and self.diff.identical
        )


class Synchronizer:
    """Moves category content between the repository and local paths."""

    def __init__(
        self,
        categories: Dict[str, ConfigCategory],
        backups: BackupManager,
        repo_dir: Optional[Path] = None,
    ):
        self.categories = categories
        self.backups = backups
        self.repo_dir = repo_dir

    def select(self, names: Optional[Iterable[str]] = None) -> List[ConfigCategory]:
        """Categories to operate on; all of them when names is empty."""
        wanted = list(names or [])
        if not wanted:
            return list(self.categories.values())

        unknown = [n for n in wanted if n not in self.categories]
        if unknown:
            raise UnknownCategoryError(unknown, self.categories)

        # Keep table order regardless of the order flags were given in
        return [c for name, c in self.categories.items() if name in wanted]

    def to_repo(self, names: Optional[Iterable[str]] = None) -> List[SyncResult]:
        results = []
        for category in self.select(names):
            direction = SyncDirection.TO_REPO
            if not category.destination.exists():
                logger.warning(
                    f"No {category.name} config found at {category.destination}"
                )
                results.append(
                    SyncResult(
                        category, direction, Outcome.SKIPPED,
                        message=f"No local config at {category.destination}",
                    )
                )
                continue

            try:
                transfer = mirror_tree(
                    category.destination, category.repo_path, category.scope
                )
            except OSError as e:
                logger.error(f"Syncing {category.name} to repo failed: {e}")
                results.append(
                    SyncResult(
                        category, direction, Outcome.FAILED,
                        message=describe_error(e),
                    )
                )
                continue

            results.append(_synced(category, direction, transfer))
        return results

    def from_repo(
        self, names: Optional[Iterable[str]] = None
    ) -> Tuple[Optional[Snapshot], List[SyncResult]]:
        selected = self.select(names)
        snapshot = self._snapshot(selected)

        results = []
        for category in selected:
            direction = SyncDirection.FROM_REPO
            try:
                if not category.repo_path.exists():
                    raise MissingSourceError(category)
                transfer = merge_tree(
                    category.repo_path, category.destination, category.scope
                )
            except OSError as e:
                logger.error(f"Syncing {category.name} from repo failed: {e}")
                results.append(
                    SyncResult(
                        category, direction, Outcome.FAILED,
                        message=describe_error(e),
                    )
                )
                continue

            results.append(_synced(category, direction, transfer))
        return snapshot, results

    def _snapshot(self, categories: List[ConfigCategory]) -> Optional[Snapshot]:
        """Best-effort backup of local config before pulling."""
        sources = {
            c.name: (c.destination, c.scope) for c in categories
        }
        try:
            return self.backups.create_snapshot(sources, reason="sync from-repo")
        except OSError as e:
            logger.warning(f"Could not back up local config: {e}")
            return None

    def diff(self, names: Optional[Iterable[str]] = None) -> List[DiffReport]:
        reports = []
        for category in self.select(names):
            report = DiffReport(category=category)
            report.missing = [
                p for p in (category.repo_path, category.destination)
                if not p.exists()
            ]
            if not report.missing:
                try:
                    report.diff = compare(
                        category.repo_path, category.destination, category.scope
                    )
                    report.text = self._diff_text(category, report.diff)
                except OSError as e:
                    logger.error(f"Comparing {category.name} failed: {e}")
                    report.diff = None
                    report.text = []
                    report.error = describe_error(e)
            reports.append(report)
        return reports

    def _diff_text(self, category: ConfigCategory, diff: TreeDiff) -> List[str]:
        lines = []
        for rel in diff.changed:
            nested = not category.repo_path.is_file()
            if nested:
                repo_file = category.repo_path / rel
                local_file = category.destination / rel
            else:
                repo_file, local_file = category.repo_path, category.destination
            # Links inside a tree are compared by target, never followed
            if nested and repo_file.is_symlink() and local_file.is_symlink():
                lines.append(
                    f"Symlink {rel} differs: {os.readlink(repo_file)} -> "
                    f"{os.readlink(local_file)}"
                )
                continue
            if (
                nested and (repo_file.is_symlink() or local_file.is_symlink())
            ) or not (repo_file.is_file() and local_file.is_file()):
                lines.append(f"File type differs: {rel}")
                continue
            lines.extend(
                unified_diff(
                    repo_file, local_file,
                    f"repo/{category.name}/{rel}",
                    f"local/{category.name}/{rel}",
                )
            )
        return lines

    def status(self) -> RepoStatus:
        """Uncommitted changes in the repository working tree."""
        return GitRepo(self.repo_dir or Path.cwd()).status()


def _synced(
    category: ConfigCategory,
    direction: SyncDirection,
    transfer: TransferResult,
) -> SyncResult:
    return SyncResult(
        category,
        direction,
        Outcome.SYNCED,
        copied=transfer.copied,
        removed=transfer.removed,
    )
