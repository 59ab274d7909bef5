"""Configuration categories and the platform path table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Dict, Optional, Tuple

if TYPE_CHECKING:
    from .config import Config
    from .system import Environment

logger = logging.getLogger(__name__)


class Kind(Enum):
    TREE = "tree"
    FILE = "file"


@dataclass(frozen=True)
class ConfigCategory:
    """One named unit of configuration with a repo source and a destination."""

    name: str
    description: str
    repo_path: Path
    destination: Path
    kind: Kind = Kind.TREE
    exclude: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    install: bool = False

    @property
    def is_scoped(self) -> bool:
        """True when part of the destination tree is not managed."""
        return bool(self.include or self.exclude)

    def in_scope(self, rel: str) -> bool:
        """Whether a path relative to the category root is managed.

        Patterns without a slash match any single path component; patterns
        with a slash match the path or one of its ancestors.
        """
        parts = PurePosixPath(rel).parts
        if not parts:
            return True
        if self.include and parts[0] not in self.include:
            return False
        for pattern in self.exclude:
            if "/" in pattern:
                pattern = pattern.strip("/")
                for depth in range(1, len(parts) + 1):
                    if fnmatchcase("/".join(parts[:depth]), pattern):
                        return False
            elif any(fnmatchcase(part, pattern) for part in parts):
                return False
        return True

    @property
    def scope(self):
        """Filter callable for the comparator, or None when unscoped."""
        return self.in_scope if self.is_scoped else None


@dataclass(frozen=True)
class _CategorySpec:
    name: str
    description: str
    repo_rel: str
    kind: Kind
    exclude: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    install: bool = False
    windows_dest: Optional[str] = None
    posix_dest: Optional[str] = None
    home_rel: Optional[str] = None


# Order here is the order categories are processed and listed
CATEGORY_SPECS: Tuple[_CategorySpec, ...] = (
    _CategorySpec(
        name="nvim",
        description="Neovim configuration",
        repo_rel="config/nvim",
        kind=Kind.TREE,
        install=True,
        posix_dest="nvim",
        windows_dest="AppData/Local/nvim",
    ),
    _CategorySpec(
        name="tmux",
        description="tmux configuration",
        repo_rel="config/tmux",
        kind=Kind.TREE,
        install=True,
        posix_dest="tmux",
        windows_dest=".config/tmux",
    ),
    _CategorySpec(
        name="claude",
        description="Claude settings, commands and plugins",
        repo_rel="config/claude",
        kind=Kind.TREE,
        include=("claude.md", "settings.local.json", "commands", "plugins"),
        # Marketplaces are git checkouts of their own
        exclude=("plugins/marketplaces",),
        home_rel=".claude",
    ),
    _CategorySpec(
        name="zsh",
        description=".zshrc",
        repo_rel="shell/.zshrc",
        kind=Kind.FILE,
        home_rel=".zshrc",
    ),
    _CategorySpec(
        name="bash",
        description=".bashrc",
        repo_rel="shell/.bashrc",
        kind=Kind.FILE,
        home_rel=".bashrc",
    ),
)

CATEGORY_NAMES: Tuple[str, ...] = tuple(spec.name for spec in CATEGORY_SPECS)


def _default_destination(spec: _CategorySpec, env: Environment) -> Path:
    if spec.home_rel:
        return env.home / spec.home_rel
    if env.is_windows():
        return env.home / spec.windows_dest
    return env.config_home / spec.posix_dest


def build_categories(
    env: Environment,
    repo_dir: Path,
    config: Optional[Config] = None,
) -> Dict[str, ConfigCategory]:
    """Build the category table for this platform and repository."""
    overrides = config.get_category_overrides() if config else {}

    for name in overrides:
        if name not in CATEGORY_NAMES:
            logger.warning(f"Ignoring config for unknown category: {name}")

    categories: Dict[str, ConfigCategory] = {}
    for spec in CATEGORY_SPECS:
        category = ConfigCategory(
            name=spec.name,
            description=spec.description,
            repo_path=repo_dir / spec.repo_rel,
            destination=_default_destination(spec, env),
            kind=spec.kind,
            exclude=spec.exclude,
            include=spec.include,
            install=spec.install,
        )

        override = overrides.get(spec.name, {})
        if override.get("destination"):
            dest = Path(str(override["destination"])).expanduser()
            if not dest.is_absolute():
                dest = env.home / dest
            category = replace(category, destination=dest)
        extra = override.get("exclude") or []
        if isinstance(extra, str):
            extra = [extra]
        if extra:
            category = replace(
                category,
                exclude=category.exclude + tuple(str(p) for p in extra),
            )

        categories[spec.name] = category

    return categories
