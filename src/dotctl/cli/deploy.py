"""Deploy and install commands for dotctl CLI."""

import subprocess
from typing import List

import typer

from ..deploy import Decision, Deployer, DeployResult
from ..managers import default_managers
from ..system import SystemPackageManager
from .helpers import (
    BASH_FLAG,
    CLAUDE_FLAG,
    NVIM_FLAG,
    TMUX_FLAG,
    ZSH_FLAG,
    Runtime,
    load_runtime,
    selected_names,
)
from .output import error, info, muted, plain, success, warning


def register(app: typer.Typer) -> None:
    """Register deploy commands with the app."""
    app.command()(deploy)
    app.command()(install)


def report_deploy(results: List[DeployResult]) -> bool:
    """Print one line per category; returns True if all succeeded."""
    ok = True
    for result in results:
        name = result.category.name
        if not result.ok:
            error(f"{name}: {result.error}")
            ok = False
        elif result.decision is Decision.SKIP:
            success(f"{name} configuration is already up to date")
        else:
            if result.backup:
                info(f"Backed up existing {name} config to {result.backup}")
            success(
                f"{name} configuration deployed to {result.category.destination}"
            )
    return ok


def _deploy(rt: Runtime, names: List[str], force: bool) -> bool:
    if names:
        categories = [rt.categories[n] for n in names]
    else:
        categories = [c for c in rt.categories.values() if c.install]

    info(f"Deploying configuration from {rt.repo_dir}")
    if force:
        warning("Force mode enabled - existing configurations will be replaced")

    results = Deployer().deploy_all(categories, force=force)
    return report_deploy(results)


def deploy(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Redeploy even when already up to date"
    ),
    nvim: bool = NVIM_FLAG,
    tmux: bool = TMUX_FLAG,
    claude: bool = CLAUDE_FLAG,
    zsh: bool = ZSH_FLAG,
    bash: bool = BASH_FLAG,
):
    """Copy configuration from the repository to this machine.

    A category is only written when it is missing locally or differs from
    the repository. Anything replaced is kept as <path>.backup.<time>.
    Without category flags, the Neovim and tmux configs are deployed.

    Examples:
        dotctl deploy
        dotctl deploy --claude --zsh
        dotctl deploy --nvim --force
    """
    rt = load_runtime(ctx)
    names = selected_names(nvim, tmux, claude, zsh, bash)
    if not _deploy(rt, names, force):
        raise typer.Exit(1)


def install(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Redeploy even when already up to date"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Don't ask for confirmation"
    ),
    skip_packages: bool = typer.Option(
        False, "--skip-packages", help="Only deploy configuration"
    ),
):
    """Set up this machine: tools, configuration and shell aliases.

    Installs git, Neovim and tmux with the system package manager, deploys
    the Neovim and tmux configuration, installs the tmux plugin manager and
    aliases vim to nvim. Safe to run repeatedly.
    """
    rt = load_runtime(ctx)

    plain(f"--- dotctl install ({rt.env.os_info['pretty_name']}) ---")
    if not yes and not rt.env.in_container():
        typer.confirm(
            "This will install packages and change configuration on this "
            "machine. Continue?",
            abort=True,
        )

    ok = True
    if skip_packages:
        muted("Skipping package installation")
    else:
        pkg_mgr = SystemPackageManager(rt.env)
        for manager in default_managers(rt.env, pkg_mgr):
            if not manager.supported():
                warning(f"{manager.name} is not supported on this platform")
                continue
            try:
                installed = manager.setup()
            except (subprocess.CalledProcessError, RuntimeError, OSError) as e:
                error(f"{manager.name} setup failed: {e}")
                ok = False
                continue
            if installed:
                success(f"{manager.name} installed")
            else:
                success(f"{manager.name} already installed")

    ok = _deploy(rt, [], force) and ok

    if not ok:
        error("Install finished with errors")
        raise typer.Exit(1)
    plain("\n--- Install complete! ---")
    muted("Start tmux and press prefix + I to install plugins.")
