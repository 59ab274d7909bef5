import logging
from abc import ABC, abstractmethod

from ..system import Environment, SystemPackageManager


class BaseToolManager(ABC):
    def __init__(self, env: Environment, pkg_mgr: SystemPackageManager):
        self.env = env
        self.pkg_mgr = pkg_mgr
        self.logger = logging.getLogger(self.__class__.__module__)

    @property
    @abstractmethod
    def name(self) -> str:
        """The display name of the tool."""
        pass

    @property
    @abstractmethod
    def bin_name(self) -> str:
        """The binary name to check for installation."""
        pass

    @property
    def package_name(self) -> str:
        """The package name to install if different from bin_name."""
        return self.bin_name

    def supported(self) -> bool:
        """Whether the tool can be installed on this platform."""
        return True

    def setup(self) -> bool:
        """Install the tool if missing, then run post-install steps.

        Returns True if the package was installed during this call.
        """
        self.logger.info(f"Verifying {self.name} installation...")

        installed = False
        if not self.pkg_mgr.is_installed(self.bin_name):
            self.logger.info(f"{self.name} not found. Installing...")
            self.pkg_mgr.install(self.package_name)
            installed = True

        self._post_install()
        return installed

    def _post_install(self):
        """Hook for tool-specific configuration after ensuring it's installed."""
        pass
