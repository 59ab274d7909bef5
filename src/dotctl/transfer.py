"""Copy primitives shared by deploy, sync and backups.

All functions take an optional scope: a callable deciding whether a path
relative to the tree root is managed. Out-of-scope entries on either side
are never read, written or deleted.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .compare import EntryKind, Scope, same_bytes, same_entry, scan

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    """Relative paths touched by a mirror or merge."""

    copied: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.copied or self.removed)


def remove_path(path: Path):
    """Delete a file, symlink or directory tree if it exists."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def _kind_of(path: Path) -> Optional[EntryKind]:
    if path.is_symlink():
        return EntryKind.LINK
    if path.is_dir():
        return EntryKind.DIR
    if path.exists():
        return EntryKind.FILE
    return None


def _copy_entry(source: Path, dest: Path, kind: EntryKind) -> bool:
    """Copy one scanned entry; returns True when a file or link was written.

    Links are recreated as links, pointing at the same target.
    """
    if kind is EntryKind.DIR:
        if _kind_of(dest) is not EntryKind.DIR:
            remove_path(dest)
            dest.mkdir()
        return False

    remove_path(dest)
    shutil.copy2(source, dest, follow_symlinks=False)
    return True


def copy_tree(source: Path, dest: Path, scope: Scope = None) -> List[str]:
    """Copy the in-scope content of source into dest, overwriting files.

    Returns the relative paths of the files and links written.
    """
    if source.is_file():
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
        return [source.name]

    if scope is None and not dest.exists():
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest, symlinks=True)
        return [
            rel for rel, kind in scan(dest).items() if kind is not EntryKind.DIR
        ]

    copied = []
    dest.mkdir(parents=True, exist_ok=True)
    for rel, kind in scan(source, scope).items():
        if _copy_entry(source / rel, dest / rel, kind):
            copied.append(rel)
    return copied


def _prune(
    keep: Dict[str, EntryKind],
    dest: Path,
    scope: Scope,
    match_kind: bool = True,
) -> List[str]:
    """Remove in-scope entries under dest whose names are not in keep.

    With match_kind an entry whose kind differs from the one in keep is
    removed too.
    Directories that still hold out-of-scope content are left in place.
    """
    removed = []
    current = scan(dest, scope)
    # Deepest first, so a directory is emptied before it is looked at
    for rel in sorted(current, reverse=True):
        if rel in keep and (not match_kind or keep[rel] is current[rel]):
            continue
        path = dest / rel
        if current[rel] is EntryKind.DIR:
            if any(path.iterdir()):
                continue
            path.rmdir()
        else:
            path.unlink()
        removed.append(rel)
    return sorted(removed)


def mirror_tree(source: Path, dest: Path, scope: Scope = None) -> TransferResult:
    """Make dest an exact copy of source within scope.

    Entries in dest that source does not have are deleted, and every file
    or link whose content differs is overwritten.
    """
    result = TransferResult()

    if source.is_file():
        if not (dest.is_file() and same_bytes(source, dest)):
            remove_path(dest)
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
            result.copied.append(source.name)
        return result

    if dest.exists() and not dest.is_dir():
        remove_path(dest)
    dest.mkdir(parents=True, exist_ok=True)

    wanted = scan(source, scope)
    result.removed = _prune(wanted, dest, scope)

    for rel, kind in wanted.items():
        src_path, dst_path = source / rel, dest / rel
        if (
            kind is not EntryKind.DIR
            and _kind_of(dst_path) is kind
            and same_entry(src_path, dst_path, kind)
        ):
            continue
        if _copy_entry(src_path, dst_path, kind):
            result.copied.append(rel)

    logger.debug(
        f"Mirrored {source} -> {dest}: {len(result.copied)} copied, "
        f"{len(result.removed)} removed"
    )
    return result


def merge_tree(
    source: Path,
    dest: Path,
    scope: Scope = None,
    prune: bool = True,
) -> TransferResult:
    """Copy files from source that dest lacks, never overwriting dest.

    With ``prune`` the in-scope entries of dest that source does not have
    are deleted. An existing entry is kept even when its kind differs from
    the source entry of the same name.
    """
    result = TransferResult()

    if source.is_file():
        if not dest.exists() and not dest.is_symlink():
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)
            result.copied.append(source.name)
        return result

    dest.mkdir(parents=True, exist_ok=True)
    wanted = scan(source, scope)
    if prune:
        result.removed = _prune(wanted, dest, scope, match_kind=False)

    blocked: List[str] = []
    for rel, kind in wanted.items():
        if any(rel.startswith(f"{parent}/") for parent in blocked):
            continue
        src_path, dst_path = source / rel, dest / rel
        existing = _kind_of(dst_path)
        if existing is not None:
            if kind is EntryKind.DIR and existing is not EntryKind.DIR:
                # A local file or link stands in for the directory
                blocked.append(rel)
            continue
        if _copy_entry(src_path, dst_path, kind):
            result.copied.append(rel)

    logger.debug(
        f"Merged {source} -> {dest}: {len(result.copied)} copied, "
        f"{len(result.removed)} removed"
    )
    return result
