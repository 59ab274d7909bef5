from ..shell import add_aliases
from .base import BaseToolManager


class NvimManager(BaseToolManager):
    @property
    def name(self) -> str:
        return "Neovim"

    @property
    def bin_name(self) -> str:
        return "nvim"

    @property
    def package_name(self) -> str:
        return "neovim"

    def _post_install(self):
        """Point `vim` at Neovim in the user's shell startup files."""
        if self.env.is_windows():
            return
        for path in add_aliases(self.env.home):
            self.logger.info(f"Added vim=nvim alias to {path}")
