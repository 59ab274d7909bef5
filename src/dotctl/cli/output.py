"""Severity-tagged console output for CLI commands."""

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def _emit(target: Console, style: str, prefix: str, message: str):
    if prefix:
        target.print(
            f"[{style}]{escape(prefix)}[/{style}] {escape(message)}",
            soft_wrap=True,
        )
    else:
        target.print(f"[{style}]{escape(message)}[/{style}]", soft_wrap=True)


def plain(message: str = ""):
    console.print(escape(message), soft_wrap=True)


def muted(message: str):
    _emit(console, "dim", "", message)


def info(message: str, prefix: str = "•"):
    _emit(console, "blue", prefix, message)


def success(message: str, prefix: str = "✓"):
    _emit(console, "green", prefix, message)


def warning(message: str, prefix: str = "⚠"):
    _emit(console, "yellow", prefix, message)


def error(message: str, prefix: str = "✗"):
    _emit(err_console, "red", prefix, message)


def header(title: str):
    console.print(f"\n[bold]=== {escape(title)} ===[/bold]", soft_wrap=True)
