"""Content equality for configuration trees and files.

Only names and bytes are compared. Permission bits are ignored and
symbolic links inside a tree are never followed: a link is its own kind
of entry and two links are equal when they point at the same target,
whether or not that target exists.
"""

import difflib
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Scope = Optional[Callable[[str], bool]]

_CHUNK_SIZE = 64 * 1024


class EntryKind(Enum):
    FILE = "file"
    DIR = "dir"
    LINK = "link"


def scan(root: Path, scope: Scope = None) -> Dict[str, EntryKind]:
    """Map every in-scope path under root to its entry kind.

    Keys are POSIX-style paths relative to root. Out-of-scope directories
    and symlinked directories are not descended.
    """
    entries: Dict[str, EntryKind] = {}

    def walk(directory: Path, prefix: str):
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda e: e.name)
        for child in children:
            rel = f"{prefix}{child.name}"
            if scope is not None and not scope(rel):
                continue
            if child.is_symlink():
                entries[rel] = EntryKind.LINK
            elif child.is_dir():
                entries[rel] = EntryKind.DIR
                walk(Path(child.path), f"{rel}/")
            else:
                entries[rel] = EntryKind.FILE

    walk(root, "")
    return entries


def same_bytes(a: Path, b: Path) -> bool:
    """Byte-for-byte comparison of two regular files."""
    if a.stat().st_size != b.stat().st_size:
        return False
    with open(a, "rb") as fa, open(b, "rb") as fb:
        while True:
            chunk_a = fa.read(_CHUNK_SIZE)
            chunk_b = fb.read(_CHUNK_SIZE)
            if chunk_a != chunk_b:
                return False
            if not chunk_a:
                return True


def same_entry(a: Path, b: Path, kind: EntryKind) -> bool:
    """Compare two scanned entries already known to share a kind."""
    if kind is EntryKind.LINK:
        return os.readlink(a) == os.readlink(b)
    if kind is EntryKind.FILE:
        return same_bytes(a, b)
    return True


def identical(a: Path, b: Path, scope: Scope = None) -> bool:
    """True when a and b hold the same content.

    A missing path on either side counts as "different" rather than an
    error, as does a file compared with a directory.
    """
    a, b = Path(a), Path(b)
    try:
        if not a.exists() or not b.exists():
            return False
        if a.is_file() and b.is_file():
            return same_bytes(a, b)
        if not (a.is_dir() and b.is_dir()):
            return False

        left = scan(a, scope)
        right = scan(b, scope)
        if left != right:
            return False
        return all(
            same_entry(a / rel, b / rel, kind) for rel, kind in left.items()
        )
    except FileNotFoundError as e:
        logger.debug(f"Path vanished during comparison: {e}")
        return False


@dataclass
class TreeDiff:
    """Structural difference between the repo side and the local side."""

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not (self.added or self.removed or self.changed)


def compare(repo_side: Path, local_side: Path, scope: Scope = None) -> TreeDiff:
    """Describe how local_side differs from repo_side.

    ``added`` entries exist only locally, ``removed`` entries exist only in
    the repository and ``changed`` files exist on both sides with
    different content or kind. Both paths must exist.
    """
    repo_side, local_side = Path(repo_side), Path(local_side)
    diff = TreeDiff()

    if repo_side.is_file() or local_side.is_file():
        if not identical(repo_side, local_side):
            diff.changed.append(local_side.name)
        return diff

    repo_entries = scan(repo_side, scope)
    local_entries = scan(local_side, scope)

    for rel in sorted(set(repo_entries) | set(local_entries)):
        if rel not in repo_entries:
            # Report a new directory once, not each file inside it
            if not _under_reported(rel, diff.added):
                diff.added.append(rel)
        elif rel not in local_entries:
            if not _under_reported(rel, diff.removed):
                diff.removed.append(rel)
        elif repo_entries[rel] != local_entries[rel]:
            diff.changed.append(rel)
        elif not same_entry(
            repo_side / rel, local_side / rel, repo_entries[rel]
        ):
            diff.changed.append(rel)

    return diff


def _under_reported(rel: str, reported: List[str]) -> bool:
    return any(rel.startswith(f"{parent}/") for parent in reported)


def unified_diff(
    old: Path, new: Path, old_label: str, new_label: str
) -> List[str]:
    """Unified diff lines between two files, or a note for binary files."""
    try:
        old_lines = old.read_text(encoding="utf-8").splitlines(keepends=True)
        new_lines = new.read_text(encoding="utf-8").splitlines(keepends=True)
    except UnicodeDecodeError:
        return [f"Binary files {old_label} and {new_label} differ"]

    return [
        line.rstrip("\n")
        for line in difflib.unified_diff(
            old_lines, new_lines, fromfile=old_label, tofile=new_label
        )
    ]
