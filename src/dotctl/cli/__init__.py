"""dotctl CLI - deploy and sync dotfiles between a repository and this machine."""

from typing import Optional

import typer

from ..utils import get_version, setup_logging
from . import backups, deploy, sync

# Create the main app
app = typer.Typer(
    name="dotctl",
    help="Deploy and sync your dotfiles.",
    add_completion=True,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging output.",
    ),
    repo: Optional[str] = typer.Option(
        None,
        "--repo",
        "-r",
        help="Path to the dotfiles repository (default: from config or cwd).",
    ),
):
    """dotctl - idempotent config deployment and two-way sync."""
    setup_logging(verbose=verbose)
    ctx.obj = {"repo": repo}


# Register all commands
deploy.register(app)
sync.register(app)
backups.register(app)


@app.command()
def version():
    """Show the version of dotctl."""
    typer.echo(f"dotctl version {get_version()}")


def main():
    """Main entry point for the dotctl CLI."""
    app()
