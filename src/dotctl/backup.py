"""Backups taken before dotctl overwrites local configuration.

Two kinds of backup exist:

- Deploy backups: the old destination is moved aside to
  ``<destination>.backup.<unix-seconds>`` right before it is replaced.
- Sync snapshots: before ``sync from-repo`` the selected destinations are
  copied into a timestamped directory under a fixed backup root, with a
  ``manifest.json`` describing the snapshot.

Neither kind is ever cleaned up automatically.
"""

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple

from .compare import EntryKind, Scope, scan
from .transfer import copy_tree

logger = logging.getLogger(__name__)

BACKUP_MARKER = ".backup."


def backup_path_for(path: Path, timestamp: int) -> Path:
    """Return a free ``<path>.backup.<timestamp>`` sibling of path.

    A second backup within the same second gets a numeric suffix instead
    of replacing the first one.
    """
    candidate = path.with_name(f"{path.name}{BACKUP_MARKER}{timestamp}")
    counter = 1
    while candidate.exists() or candidate.is_symlink():
        candidate = path.with_name(
            f"{path.name}{BACKUP_MARKER}{timestamp}.{counter}"
        )
        counter += 1
    return candidate


def move_aside(
    path: Path,
    scope: Scope = None,
    clock: Callable[[], float] = time.time,
) -> Path:
    """Move path out of the way and return where it went.

    With a scope only the in-scope files and links move, so unmanaged
    content next to them stays where it is.
    """
    target = backup_path_for(path, int(clock()))

    if scope is None or not path.is_dir():
        path.rename(target)
        logger.debug(f"Moved {path} to {target}")
        return target

    entries = scan(path, scope)
    target.mkdir(parents=True)
    for rel, kind in entries.items():
        if kind is EntryKind.DIR:
            continue
        dest = target / rel
        dest.parent.mkdir(parents=True, exist_ok=True)
        (path / rel).rename(dest)

    # Deepest first so parents are empty by the time they are checked
    dirs = (r for r, k in entries.items() if k is EntryKind.DIR)
    for rel in sorted(dirs, reverse=True):
        directory = path / rel
        if not any(directory.iterdir()):
            directory.rmdir()

    logger.debug(f"Moved managed content of {path} to {target}")
    return target


def find_deploy_backups(path: Path) -> List[Path]:
    """Existing deploy backups of path, newest first."""
    if not path.parent.exists():
        return []
    prefix = f"{path.name}{BACKUP_MARKER}"
    found = [p for p in path.parent.iterdir() if p.name.startswith(prefix)]
    return sorted(found, key=_backup_sort_key, reverse=True)


def _backup_sort_key(path: Path) -> Tuple[int, int]:
    suffix = path.name.rsplit(BACKUP_MARKER, 1)[-1]
    stamp, _, counter = suffix.partition(".")
    try:
        return int(stamp), int(counter or 0)
    except ValueError:
        return 0, 0


@dataclass
class Snapshot:
    """A sync snapshot on disk."""

    timestamp: str
    reason: str
    categories: List[str]
    path: Path

    @property
    def datetime(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    @property
    def display_time(self) -> str:
        return self.datetime.strftime("%Y-%m-%d %H:%M")


class BackupManager:
    """Creates and lists sync snapshots under a fixed backup root."""

    MANIFEST = "manifest.json"

    def __init__(self, backup_dir: Optional[Path] = None):
        self.backup_dir = backup_dir or (
            Path.home() / ".local" / "share" / "dotctl" / "backups"
        )

    def create_snapshot(
        self,
        sources: Mapping[str, Tuple[Path, Scope]],
        reason: str,
    ) -> Optional[Snapshot]:
        """Copy each existing source into a new snapshot directory.

        ``sources`` maps a category name to its local path and scope.
        Returns None when none of the sources exist.
        """
        existing = {
            name: (path, scope)
            for name, (path, scope) in sources.items()
            if path.exists()
        }
        if not existing:
            return None

        timestamp = datetime.now().isoformat(timespec="milliseconds")
        snapshot_dir = self.backup_dir / timestamp.replace(":", "-")
        counter = 1
        while snapshot_dir.exists():
            snapshot_dir = self.backup_dir / (
                f"{timestamp.replace(':', '-')}.{counter}"
            )
            counter += 1
        snapshot_dir.mkdir(parents=True)

        for name, (path, scope) in existing.items():
            if path.is_file():
                copy_tree(path, snapshot_dir / name / path.name)
            else:
                copy_tree(path, snapshot_dir / name, scope)
            logger.debug(f"Snapshot of {name} written to {snapshot_dir}")

        manifest = {
            "timestamp": timestamp,
            "reason": reason,
            "categories": list(existing),
        }
        (snapshot_dir / self.MANIFEST).write_text(json.dumps(manifest, indent=2))

        return Snapshot(
            timestamp=timestamp,
            reason=reason,
            categories=list(existing),
            path=snapshot_dir,
        )

    def list_snapshots(self) -> List[Snapshot]:
        """All readable snapshots, newest first."""
        if not self.backup_dir.exists():
            return []

        snapshots = []
        for entry in self.backup_dir.iterdir():
            if not entry.is_dir():
                continue
            manifest_path = entry / self.MANIFEST
            if not manifest_path.exists():
                continue
            try:
                manifest = json.loads(manifest_path.read_text())
                snapshots.append(
                    Snapshot(
                        timestamp=manifest["timestamp"],
                        reason=manifest["reason"],
                        categories=list(manifest.get("categories", [])),
                        path=entry,
                    )
                )
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.debug(f"Skipping unreadable snapshot {entry}: {e}")

        return sorted(snapshots, key=lambda s: s.timestamp, reverse=True)

    def get_snapshot(self, prefix: str) -> Optional[Snapshot]:
        """Find a snapshot by timestamp or display-time prefix."""
        for snapshot in self.list_snapshots():
            if snapshot.timestamp.startswith(prefix):
                return snapshot
            if snapshot.display_time.startswith(prefix):
                return snapshot
        return None
