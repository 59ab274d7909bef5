"""Shared helper functions for CLI commands."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import typer
import yaml

from ..backup import BackupManager
from ..categories import CATEGORY_NAMES, ConfigCategory, build_categories
from ..config import Config, find_config_path
from ..system import Environment
from .output import error

logger = logging.getLogger(__name__)

# Category selection flags, shared by every command that takes them
NVIM_FLAG = typer.Option(False, "--nvim", help="Neovim configuration")
TMUX_FLAG = typer.Option(False, "--tmux", help="tmux configuration")
CLAUDE_FLAG = typer.Option(
    False, "--claude", help="Claude settings, commands and plugins"
)
ZSH_FLAG = typer.Option(False, "--zsh", help=".zshrc")
BASH_FLAG = typer.Option(False, "--bash", help=".bashrc")


def selected_names(
    nvim: bool = False,
    tmux: bool = False,
    claude: bool = False,
    zsh: bool = False,
    bash: bool = False,
) -> List[str]:
    """Category names picked by flags; empty means no explicit selection."""
    flags = {"nvim": nvim, "tmux": tmux, "claude": claude, "zsh": zsh, "bash": bash}
    return [name for name in CATEGORY_NAMES if flags.get(name)]


@dataclass
class Runtime:
    """Everything a command needs, resolved once per invocation."""

    env: Environment
    config: Config
    repo_dir: Path
    categories: Dict[str, ConfigCategory]

    def backups(self) -> BackupManager:
        return BackupManager(self.config.get_backup_dir())


def get_config(env: Environment) -> Config:
    """Load ~/.dotctl.yaml, exiting with a message if it is malformed."""
    path = find_config_path(env.home)
    try:
        return Config(path, env=env)
    except (yaml.YAMLError, ValueError) as e:
        error(f"Could not read config {path}: {e}")
        raise typer.Exit(1)


def load_runtime(ctx: Optional[typer.Context] = None) -> Runtime:
    env = Environment()
    config = get_config(env)
    override = None
    if ctx is not None and isinstance(ctx.obj, dict):
        override = ctx.obj.get("repo")
    repo_dir = config.get_repo_dir(override)
    logger.debug(f"Using repository at {repo_dir}")
    return Runtime(
        env=env,
        config=config,
        repo_dir=repo_dir,
        categories=build_categories(env, repo_dir, config),
    )
