"""Sync commands: to-repo, from-repo, diff and status."""

from typing import List

import typer

from ..sync import (
    DiffReport,
    Outcome,
    Synchronizer,
    SyncResult,
    UnknownCategoryError,
)
from ..vcs import RepoStatus
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
from .output import error, header, info, muted, plain, success, warning

sync_app = typer.Typer(
    help=(
        "Sync configuration between the repository and this machine.\n\n"
        "Without category flags every category is synced; with flags only "
        "the named ones are."
    ),
    no_args_is_help=True,
)


def register(app: typer.Typer) -> None:
    """Register the sync command group with the app."""
    app.add_typer(sync_app, name="sync")


def _synchronizer(rt: Runtime) -> Synchronizer:
    return Synchronizer(rt.categories, rt.backups(), repo_dir=rt.repo_dir)


def _skipped_note(rt: Runtime, names: List[str]):
    if not names:
        return
    for name in rt.categories:
        if name not in names:
            muted(f"Skipping {name} config (not selected)")


def _report_results(results: List[SyncResult], verb: str) -> bool:
    ok = True
    for result in results:
        name = result.category.name
        if result.outcome is Outcome.FAILED:
            error(f"{name}: {result.message}")
            ok = False
        elif result.outcome is Outcome.SKIPPED:
            warning(f"{name}: {result.message}")
        else:
            detail = f"{len(result.copied)} copied, {len(result.removed)} removed"
            success(f"{name} config synced {verb} ({detail})")
    return ok


def report_repo_status(status: RepoStatus):
    if not status.is_repo:
        warning(f"{status.path} is not a git repository")
        return
    if status.error:
        error(f"git status failed: {status.error}")
        return
    if status.clean:
        success("Repository is clean")
        return

    warning("Repository has uncommitted changes")
    for line in status.changes:
        plain(f"  {line}")
    muted('Run \'git add . && git commit -m "Update configs"\' to commit them.')


def _select_or_fail(sync: Synchronizer, names: List[str]):
    try:
        sync.select(names)
    except UnknownCategoryError as e:
        raise typer.BadParameter(str(e))


@sync_app.command("to-repo")
def to_repo(
    ctx: typer.Context,
    nvim: bool = NVIM_FLAG,
    tmux: bool = TMUX_FLAG,
    claude: bool = CLAUDE_FLAG,
    zsh: bool = ZSH_FLAG,
    bash: bool = BASH_FLAG,
):
    """Copy local configuration into the repository (local -> repo).

    The repository copy becomes an exact mirror of the local one: files
    that only exist in the repository are deleted.
    """
    rt = load_runtime(ctx)
    names = selected_names(nvim, tmux, claude, zsh, bash)
    sync = _synchronizer(rt)
    _select_or_fail(sync, names)

    info("Syncing local configs to repository...")
    _skipped_note(rt, names)
    ok = _report_results(sync.to_repo(names), "to repo")
    report_repo_status(sync.status())
    if not ok:
        raise typer.Exit(1)


@sync_app.command("from-repo")
def from_repo(
    ctx: typer.Context,
    nvim: bool = NVIM_FLAG,
    tmux: bool = TMUX_FLAG,
    claude: bool = CLAUDE_FLAG,
    zsh: bool = ZSH_FLAG,
    bash: bool = BASH_FLAG,
):
    """Copy repository configuration to this machine (repo -> local).

    Files that already exist locally are never overwritten; missing files
    are added and files the repository no longer has are removed. Local
    config is backed up first.
    """
    rt = load_runtime(ctx)
    names = selected_names(nvim, tmux, claude, zsh, bash)
    sync = _synchronizer(rt)
    _select_or_fail(sync, names)

    info("Syncing repository configs to local...")
    _skipped_note(rt, names)
    snapshot, results = sync.from_repo(names)
    if snapshot:
        success(f"Backup created at: {snapshot.path}")
    else:
        muted("No existing local config to back up")

    if not _report_results(results, "from repo"):
        raise typer.Exit(1)


def _print_diff_line(line: str):
    if line.startswith("+") and not line.startswith("+++"):
        typer.echo(typer.style(line, fg=typer.colors.GREEN))
    elif line.startswith("-") and not line.startswith("---"):
        typer.echo(typer.style(line, fg=typer.colors.RED))
    elif line.startswith("@@"):
        typer.echo(typer.style(line, fg=typer.colors.CYAN))
    else:
        typer.echo(line)


def _report_diff(report: DiffReport) -> bool:
    """Print one category's differences; returns False if it failed."""
    name = report.category.name
    header(f"{name.upper()} DIFFERENCES")

    if report.error:
        error(f"Cannot compare {name} configs: {report.error}")
        return False

    if report.missing:
        warning(f"Cannot compare {name} configs - one or both paths missing")
        muted(f"Local {name} config: {report.category.destination}")
        muted(f"Repo {name} config: {report.category.repo_path}")
        return True

    if report.identical:
        success(f"{name} configs are identical")
        return True

    for rel in report.diff.added:
        plain(f"  + {rel} (only local)")
    for rel in report.diff.removed:
        plain(f"  - {rel} (only in repo)")
    for rel in report.diff.changed:
        plain(f"  ~ {rel}")
    for line in report.text:
        _print_diff_line(line)
    return True


@sync_app.command("diff")
def diff(
    ctx: typer.Context,
    nvim: bool = NVIM_FLAG,
    tmux: bool = TMUX_FLAG,
    claude: bool = CLAUDE_FLAG,
    zsh: bool = ZSH_FLAG,
    bash: bool = BASH_FLAG,
):
    """Show differences between local and repository configs."""
    rt = load_runtime(ctx)
    names = selected_names(nvim, tmux, claude, zsh, bash)
    sync = _synchronizer(rt)
    _select_or_fail(sync, names)

    info("Showing differences between local config and repository...")
    ok = True
    for report in sync.diff(names):
        ok = _report_diff(report) and ok
    if not ok:
        raise typer.Exit(1)


@sync_app.command("status")
def status(ctx: typer.Context):
    """Show uncommitted changes in the repository."""
    rt = load_runtime(ctx)
    info(f"Git status of {rt.repo_dir}:")
    report_repo_status(_synchronizer(rt).status())
