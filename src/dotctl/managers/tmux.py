import os
import subprocess

from .base import BaseToolManager

TPM_URL = "https://github.com/tmux-plugins/tpm"


class TmuxManager(BaseToolManager):
    @property
    def name(self) -> str:
        return "Tmux"

    @property
    def bin_name(self) -> str:
        return "tmux"

    @property
    def tpm_dir(self):
        return self.env.home / ".tmux" / "plugins" / "tpm"

    def supported(self) -> bool:
        # No native tmux on Windows outside WSL
        return not self.env.is_windows()

    def _post_install(self):
        """Install the tmux plugin manager if it's missing."""
        if self.tpm_dir.exists():
            self.logger.debug("TPM already installed")
            return

        if os.environ.get("DOTCTL_MOCK_PKGS"):
            self.logger.info("[MOCK] Installing TPM...")
            return

        self.logger.info("Installing TPM...")
        self.tpm_dir.parent.mkdir(parents=True, exist_ok=True)
        subprocess.run(
            ["git", "clone", "--depth=1", TPM_URL, str(self.tpm_dir)],
            check=True,
        )
