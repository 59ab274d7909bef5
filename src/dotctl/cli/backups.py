"""Command for listing backups left by deploy and sync."""

import typer

from ..backup import find_deploy_backups
from .helpers import load_runtime
from .output import muted, plain


def register(app: typer.Typer) -> None:
    """Register the backups command with the app."""
    app.command()(backups)


def backups(ctx: typer.Context):
    """List sync snapshots and deploy backups.

    Backups are never deleted automatically; remove old ones by hand.
    """
    rt = load_runtime(ctx)
    manager = rt.backups()

    snapshots = manager.list_snapshots()
    plain(f"Sync snapshots ({manager.backup_dir}):")
    if not snapshots:
        muted("  none")
    for snapshot in snapshots:
        plain(f"  {snapshot.display_time}  {snapshot.reason}")
        muted(f"    {', '.join(snapshot.categories)} -> {snapshot.path}")

    plain("\nDeploy backups:")
    found = False
    for category in rt.categories.values():
        for path in find_deploy_backups(category.destination):
            found = True
            plain(f"  {category.name}: {path}")
    if not found:
        muted("  none")
