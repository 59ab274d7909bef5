"""dotctl - deploy and sync your dotfiles."""

from .categories import ConfigCategory, Kind, build_categories
from .cli import main
from .compare import identical
from .config import Config
from .deploy import Decision, Deployer
from .sync import SyncDirection, Synchronizer
from .system import Environment, SystemPackageManager
from .utils import get_version

__all__ = [
    "Config",
    "ConfigCategory",
    "Decision",
    "Deployer",
    "Environment",
    "Kind",
    "SyncDirection",
    "Synchronizer",
    "SystemPackageManager",
    "build_categories",
    "get_version",
    "identical",
    "main",
]
