import logging
import os
import platform
import shutil
import subprocess
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class OS(Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class Environment:
    """Detects and provides info about the current system environment."""

    def __init__(self):
        self.os = self._detect_os()
        self.home = Path.home()
        self.user = (
            os.environ.get("USER")
            or os.environ.get("LOGNAME")
            or os.environ.get("USERNAME")
            or self.home.name
        )
        self.os_info = self._get_os_info()

    def _detect_os(self) -> OS:
        system = platform.system().lower()
        if system == "linux":
            return OS.LINUX
        elif system == "darwin":
            return OS.MACOS
        elif system == "windows" or system.startswith(("msys", "cygwin", "mingw")):
            return OS.WINDOWS
        return OS.UNKNOWN

    def _get_os_info(self) -> dict:
        info = {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
            "pretty_name": platform.system(),
        }

        if self.is_linux():
            os_release = Path("/etc/os-release")
            if os_release.exists():
                data = {}
                with open(os_release) as f:
                    for line in f:
                        if "=" in line:
                            k, v = line.rstrip().split("=", 1)
                            data[k] = v.strip('"')
                info["pretty_name"] = data.get("PRETTY_NAME", "Linux")
                info["distro"] = data.get("ID", "linux")
                info["distro_version"] = data.get("VERSION_ID", "")
        elif self.is_macos():
            info["pretty_name"] = f"macOS {platform.mac_ver()[0]}"
            info["distro"] = "macos"
            info["distro_version"] = platform.mac_ver()[0]
        elif self.is_windows():
            info["pretty_name"] = f"Windows {platform.release()}"
            info["distro"] = "windows"

        return info

    @property
    def config_home(self) -> Path:
        """XDG config directory, falling back to ~/.config."""
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg and Path(xdg).is_absolute():
            return Path(xdg)
        return self.home / ".config"

    def in_container(self) -> bool:
        """True when running inside a container (no confirmation needed)."""
        if os.environ.get("DOTCTL_IN_CONTAINER"):
            return True
        return Path("/.dockerenv").exists()

    def is_linux(self) -> bool:
        return self.os == OS.LINUX

    def is_macos(self) -> bool:
        return self.os == OS.MACOS

    def is_windows(self) -> bool:
        return self.os == OS.WINDOWS

    def __repr__(self) -> str:
        return (
            f"Environment(os={self.os.value}, "
            f"home={self.home}, user={self.user})"
        )


class SystemPackageManager:
    """Platform-aware manager for installing system packages.

    A single install strategy is picked per platform: Homebrew on macOS,
    winget on Windows, and the distro's own manager on Linux.
    """

    # Commands for each supported manager; "update" runs before installs
    MANAGERS: Dict[str, dict] = {
        "apt": {"install": ["apt", "install", "-y"], "update": ["apt", "update"]},
        "dnf": {"install": ["dnf", "install", "-y"], "update": None},
        "yum": {"install": ["yum", "install", "-y"], "update": None},
        "pacman": {
            "install": ["pacman", "-S", "--noconfirm"],
            "update": ["pacman", "-Sy"],
        },
        "zypper": {
            "install": ["zypper", "install", "-y"],
            "update": ["zypper", "refresh"],
        },
        "apk": {"install": ["apk", "add"], "update": ["apk", "update"]},
        "brew": {"install": ["brew", "install"], "update": None},
        "winget": {
            "install": [
                "winget", "install", "--exact", "--silent",
                "--accept-package-agreements", "--accept-source-agreements",
                "--id",
            ],
            "update": None,
        },
    }

    DISTRO_MANAGERS: Dict[str, str] = {
        "debian": "apt",
        "ubuntu": "apt",
        "linuxmint": "apt",
        "pop": "apt",
        "fedora": "dnf",
        "rhel": "dnf",
        "centos": "dnf",
        "rocky": "dnf",
        "alma": "dnf",
        "arch": "pacman",
        "manjaro": "pacman",
        "endeavouros": "pacman",
        "opensuse": "zypper",
        "suse": "zypper",
        "alpine": "apk",
    }

    # Package names that differ per manager
    PACKAGE_NAMES: Dict[str, Dict[str, str]] = {
        "winget": {"neovim": "Neovim.Neovim", "git": "Git.Git"},
    }

    # Detection order when the distro is not recognised
    FALLBACK_ORDER: List[str] = ["apt", "dnf", "yum", "pacman", "zypper", "apk"]

    def __init__(self, env: Environment):
        self.env = env
        self._is_root = os.geteuid() == 0 if hasattr(os, "geteuid") else False

    def _get_privilege_cmd(self) -> list:
        """Command prefix for privileged operations on Linux."""
        if self._is_root:
            return []

        if shutil.which("sudo"):
            return ["sudo"]

        if shutil.which("doas"):
            return ["doas"]

        logger.warning(
            "No privilege escalation tool found (sudo/doas). "
            "Package installation may fail if not running as root."
        )
        return []

    def detect_manager(self) -> Optional[str]:
        """Name of the package manager to use on this platform."""
        if self.env.is_macos():
            return "brew"
        if self.env.is_windows():
            return "winget" if shutil.which("winget") else None
        if not self.env.is_linux():
            return None

        distro = self.env.os_info.get("distro", "").lower()
        if distro in self.DISTRO_MANAGERS:
            return self.DISTRO_MANAGERS[distro]

        # Partial match, e.g. "opensuse-leap" matches "opensuse"
        for key, name in self.DISTRO_MANAGERS.items():
            if distro and (key in distro or distro in key):
                return name

        for name in self.FALLBACK_ORDER:
            if shutil.which(name):
                return name

        logger.error(f"Could not detect package manager for distro: {distro}")
        return None

    def install(self, package_name: str):
        """Install a package using the platform's package manager."""
        if os.environ.get("DOTCTL_MOCK_PKGS"):
            logger.info(f"[MOCK] Installing {package_name}")
            return

        manager = self.detect_manager()
        if manager is None:
            raise RuntimeError(
                f"Cannot install {package_name}: "
                "no supported package manager found for this system"
            )

        if manager == "brew":
            self._ensure_brew()

        spec = self.MANAGERS[manager]
        prefix = self._get_privilege_cmd() if self.env.is_linux() else []
        name = self.PACKAGE_NAMES.get(manager, {}).get(package_name, package_name)

        if spec["update"]:
            logger.info("Updating package lists...")
            subprocess.run(prefix + spec["update"], check=True)

        logger.info(f"Installing {package_name} via {manager}...")
        subprocess.run(prefix + spec["install"] + [name], check=True)

    def _ensure_brew(self):
        """Install Homebrew if not present."""
        if shutil.which("brew"):
            return

        logger.info("Installing Homebrew...")
        # shell=True because the installer uses $() expansion
        install_script = (
            '/bin/bash -c "$(curl -fsSL '
            'https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
        )
        subprocess.run(install_script, shell=True, check=True)

    def is_installed(self, command_name: str) -> bool:
        """Check if a command is available in PATH."""
        return shutil.which(command_name) is not None

    def get_binary_info(self, command_name: str) -> dict:
        """Returns location and version of a binary."""
        path = shutil.which(command_name)
        if not path:
            return {"found": False}

        version = "unknown"
        cmd = [path, "-V"] if command_name == "tmux" else [path, "--version"]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=2
            )
            if result.returncode == 0 and result.stdout:
                version = result.stdout.splitlines()[0].strip()
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Could not read {command_name} version: {e}")

        return {"found": True, "path": path, "version": version}
