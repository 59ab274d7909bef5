from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import yaml

if TYPE_CHECKING:
    from .system import Environment

# Supported config filenames (in order of preference)
CONFIG_FILENAMES: List[str] = [".dotctl.yaml", ".dotctl.yml"]


def find_config_path(home: Path) -> Path:
    """Return the first existing config file, or the default name."""
    for filename in CONFIG_FILENAMES:
        path = home / filename
        if path.exists():
            return path
    return home / CONFIG_FILENAMES[0]


class Config:
    """User configuration for dotctl, read from ~/.dotctl.yaml."""

    DEFAULT_CONFIG = {
        "vars": {},
        "repo": {"dir": None},
        "backups": {"dir": "~/.local/share/dotctl/backups"},
        "categories": {},
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        env: Optional[Environment] = None,
    ):
        # deepcopy keeps the class-level defaults untouched
        self.data = copy.deepcopy(self.DEFAULT_CONFIG)
        self.env = env
        self.path = config_path

        if config_path and config_path.exists():
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f)
            if user_config:
                if not isinstance(user_config, dict):
                    raise ValueError(
                        f"Invalid config in {config_path}: expected a mapping"
                    )
                self._deep_update(self.data, user_config)

        if self.env:
            self._apply_replacements(self.data)

    def _deep_update(self, base: Dict, update: Dict):
        for k, v in update.items():
            if isinstance(v, dict) and k in base and isinstance(base[k], dict):
                self._deep_update(base[k], v)
            else:
                base[k] = v

    def _apply_replacements(self, data: Any):
        """Replace {local_user} and custom vars in the config data."""
        replacements = {"local_user": self.env.user if self.env else "user"}
        if isinstance(self.data.get("vars"), dict):
            replacements.update(self.data["vars"])
        self._walk_and_format(data, replacements)

    def _walk_and_format(self, data: Any, replacements: Dict[str, str]):
        if isinstance(data, dict):
            items = list(data.items())
        elif isinstance(data, list):
            items = list(enumerate(data))
        else:
            return

        for k, v in items:
            if isinstance(v, (dict, list)):
                self._walk_and_format(v, replacements)
            elif isinstance(v, str):
                try:
                    data[k] = v.format(**replacements)
                except (KeyError, IndexError, ValueError):
                    pass

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a config value by dot-separated path."""
        keys = key_path.split(".")
        value = self.data
        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def _expand(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute() and self.env:
            path = self.env.home / path
        return path

    def get_repo_dir(self, override: Optional[str] = None) -> Path:
        """Resolve the repository root.

        Order: explicit override, DOTCTL_REPO, repo.dir, current directory.
        """
        explicit = override or os.environ.get("DOTCTL_REPO")
        if explicit:
            return Path(explicit).expanduser().resolve()
        value = self.get("repo.dir")
        if not value:
            return Path.cwd()
        return self._expand(value)

    def get_backup_dir(self) -> Path:
        return self._expand(self.get("backups.dir"))

    def get_category_overrides(self) -> Dict[str, Dict[str, Any]]:
        categories = self.get("categories", {})
        if not isinstance(categories, dict):
            return {}
        return {
            name: value
            for name, value in categories.items()
            if isinstance(value, dict)
        }
