"""Idempotent additions to shell startup files."""

import logging
from pathlib import Path
from typing import List, Sequence

logger = logging.getLogger(__name__)

ALIAS_BLOCK_NAME = "vim-alias"
ALIAS_BLOCK_LINES = ("alias vim=nvim",)

# Startup files that get the alias block when they exist
RC_FILES = (".zshrc", ".bashrc", ".bash_profile")


def block_markers(name: str):
    return f"# >>> dotctl: {name} >>>", f"# <<< dotctl: {name} <<<"


def ensure_block(
    path: Path,
    name: str,
    lines: Sequence[str],
    create: bool = False,
) -> bool:
    """Append a fenced block to path unless it is already there.

    The block counts as present when its opening marker is found, or when
    every one of its lines already appears in the file (for example added
    by hand). Returns True if the file was changed.
    """
    if not path.exists():
        if not create:
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()

    text = path.read_text()
    begin, end = block_markers(name)
    if begin in text or all(line in text for line in lines):
        logger.debug(f"{name} block already in {path}")
        return False

    block = [begin, *lines, end]
    prefix = "" if not text or text.endswith("\n") else "\n"
    separator = "\n" if text.strip() else ""
    with open(path, "a") as f:
        f.write(prefix + separator + "\n".join(block) + "\n")

    logger.info(f"Added {name} block to {path}")
    return True


def add_aliases(home: Path) -> List[Path]:
    """Add the vim=nvim alias to existing shell startup files.

    Returns the files that were changed.
    """
    changed = []
    for filename in RC_FILES:
        path = home / filename
        if ensure_block(path, ALIAS_BLOCK_NAME, ALIAS_BLOCK_LINES):
            changed.append(path)
    return changed
