"""Tool managers for dotctl."""

from .base import BaseToolManager
from .git import GitManager
from .nvim import NvimManager
from .tmux import TmuxManager

__all__ = [
    "BaseToolManager",
    "GitManager",
    "NvimManager",
    "TmuxManager",
    "default_managers",
]


def default_managers(env, pkg_mgr):
    """Managers run by `dotctl install`, in install order."""
    return [
        GitManager(env, pkg_mgr),
        NvimManager(env, pkg_mgr),
        TmuxManager(env, pkg_mgr),
    ]
